"""Swipeable arXiv paper feed with LLM translation and summaries."""

__version__ = "0.1.0"
