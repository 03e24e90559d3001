"""Summary prompt template.

Asks the model for a concise summary tagged as ``TITLE:`` / ``CONTENT:``
so both fields can be extracted with a regular expression.
"""

from __future__ import annotations

import re
from collections.abc import Sequence

from knowtes.completion.schemas import SummaryDraft

SYSTEM_PROMPT = "You are a helpful assistant that generates concise summaries."

USER_PROMPT_TEMPLATE = """Generate a concise summary of the following content:

{content}

Please provide the summary in the following format:
TITLE: <generated title>
CONTENT: <generated content>"""

_TITLE_RE = re.compile(r"TITLE:[ \t]*(.*?)(?=\nCONTENT:|$)", re.DOTALL)
_CONTENT_RE = re.compile(r"CONTENT:\s*(.*)$", re.DOTALL)


def join_content(content: str | Sequence[str]) -> str:
    """Collapse single or multi-part content into one prompt body.

    Blank parts are dropped; the rest are joined with a blank line.
    """
    if isinstance(content, str):
        return content.strip()
    return "\n\n".join(part.strip() for part in content if part and part.strip())


def build_user_message(content_text: str) -> str:
    return USER_PROMPT_TEMPLATE.format(content=content_text)


def format_note(title: str, content: str) -> str:
    """Render one note as a block of summary input."""
    return f"Title: {title}\nContent: {content}"


def parse_summary(text: str) -> SummaryDraft | None:
    """Extract the tagged title and content from a completion.

    Returns:
        The draft, or None when either tag is missing or empty.
    """
    title_match = _TITLE_RE.search(text)
    content_match = _CONTENT_RE.search(text)
    if not title_match or not content_match:
        return None

    title = title_match.group(1).strip()
    content = content_match.group(1).strip()
    if not title or not content:
        return None
    return SummaryDraft(title=title, content=content)
