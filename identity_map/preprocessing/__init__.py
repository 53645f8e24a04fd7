"""Preprocessing module for free-text identity entries."""

from .text import tokenize, tokenize_all, simple_stem, STOP_WORDS

__all__ = ["tokenize", "tokenize_all", "simple_stem", "STOP_WORDS"]
