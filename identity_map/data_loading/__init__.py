"""Data loading module for identity items and participants."""

from .loaders import (
    load_identity_items,
    load_participants,
    select_visible_participants,
    validate_identity_items,
    build_identities
)

__all__ = [
    "load_identity_items",
    "load_participants",
    "select_visible_participants",
    "validate_identity_items",
    "build_identities"
]
