"""Embedding dimension handling."""

from .adapter import EmbeddingAdapter

__all__ = ["EmbeddingAdapter"]
