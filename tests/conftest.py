"""
Shared fixtures for identity map tests.

The identities mirror the sample participants used across the suite:
partial tag overlap in GIVEN, free text in GIVEN and CHOSEN, and an
empty CORE lens on both sides.
"""
import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from identity_map.schema import Identity, TagItem


@pytest.fixture
def identity_a():
    return Identity(
        tags={
            "GIVEN": [TagItem("music", 2), TagItem("art", 1)],
            "CHOSEN": [TagItem("runner", 3)],
            "CORE": [],
        },
        texts={
            "GIVEN": ["Loves jazz and painting"],
            "CHOSEN": ["Runs marathons every year"],
            "CORE": [],
        },
        participant_id="a",
    )


@pytest.fixture
def identity_b():
    return Identity(
        tags={
            "GIVEN": [TagItem("music", 1), TagItem("sports", 2)],
            "CHOSEN": [TagItem("reader", 2)],
            "CORE": [],
        },
        texts={
            "GIVEN": ["Enjoys music and painting"],
            "CHOSEN": ["Reading fiction"],
            "CORE": [],
        },
        participant_id="b",
    )


@pytest.fixture
def full_identity():
    """Identity with tags and text in every lens."""
    return Identity(
        tags={
            "GIVEN": [TagItem("female", 2)],
            "CHOSEN": [TagItem("climber", 3), TagItem("cook", 1)],
            "CORE": [TagItem("curious", 3)],
        },
        texts={
            "GIVEN": ["Grew up by the sea"],
            "CHOSEN": ["Climbing on weekends", "Cooking for friends"],
            "CORE": ["Always asking questions"],
        },
        participant_id="full",
    )
