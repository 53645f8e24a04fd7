"""
Identity Map - Similarity Engine

This package compares workshop participants who describe themselves with
weighted tags and free text across three lenses (Given, Chosen, Core).

Key Design Decisions:
- The similarity engine is a pure function of two Identity snapshots
- Tags are compared with weighted Jaccard, free text with token Jaccard
- Lens scores blend tags and text (0.7 / 0.3 by default)
- The overall score weights CORE highest (0.8 / 1.0 / 1.2)
- "No data" for an empty lens is decided by the ranking layer, not the engine
"""

__version__ = "1.0.0"
