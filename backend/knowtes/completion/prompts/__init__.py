"""Prompt templates for completion features."""
