"""Chat-completion client used for AI summaries."""

from knowtes.completion.client import OpenRouterClient

__all__ = ["OpenRouterClient"]
