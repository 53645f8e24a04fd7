"""Explanation module for tag-level similarity breakdowns."""

from .lens_explainer import explain_lens, rank_tag_weights, LensExplanation

__all__ = ["explain_lens", "rank_tag_weights", "LensExplanation"]
