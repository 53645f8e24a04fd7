"""
Data loading functions for identity items and participants.

This module loads the flat identity-item and participant tables from CSV
files and assembles Identity objects from them. Rows are validated here,
before they reach the similarity engine, which trusts its inputs.

Identity item table (one row per tag or text entry):
- participant_id: owner of the item
- lens: GIVEN, CHOSEN or CORE
- type: "tag" or "text"
- value: tag label or free text
- weight: 1-3 (required for tags, ignored for texts)
"""

import logging
from pathlib import Path
from typing import Dict, List, Iterable, Optional

import pandas as pd

from ..schema import Identity, Lens, TagItem

logger = logging.getLogger(__name__)

REQUIRED_ITEM_COLUMNS = ["participant_id", "lens", "type", "value", "weight"]
REQUIRED_PARTICIPANT_COLUMNS = ["id", "display_name"]
ITEM_TYPES = {"tag", "text"}
MIN_WEIGHT = 1
MAX_WEIGHT = 3

_TRUE_STRINGS = {"true", "t", "yes", "y", "1"}


def load_identity_items(filepath: str, delimiter: str = ",") -> pd.DataFrame:
    """
    Load identity items from CSV.

    Args:
        filepath: Path to the identity items file
        delimiter: Field delimiter (default: comma)

    Returns:
        DataFrame with raw identity items

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file has no rows
    """
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"Identity items file not found: {filepath}")

    logger.info(f"Loading identity items from {filepath} (delimiter: {repr(delimiter)})")
    # Tag values such as "None" or "NA" are real labels; only an empty weight is missing
    df = pd.read_csv(
        filepath,
        sep=delimiter,
        dtype={"participant_id": str, "value": str},
        keep_default_na=False,
        na_values={"weight": [""]}
    )

    if df.empty:
        raise ValueError(f"Identity items file is empty: {filepath}")

    logger.info(f"Loaded {len(df)} identity items for "
                f"{df['participant_id'].nunique() if 'participant_id' in df else 0} participants")
    return df


def load_participants(filepath: str, delimiter: str = ",") -> pd.DataFrame:
    """
    Load participants from CSV.

    Expected columns are id and display_name; session_id, is_visible and
    consent_given are optional.

    Args:
        filepath: Path to the participants file
        delimiter: Field delimiter (default: comma)

    Returns:
        DataFrame with one row per participant

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file is empty or misses required columns
    """
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"Participants file not found: {filepath}")

    logger.info(f"Loading participants from {filepath}")
    df = pd.read_csv(filepath, sep=delimiter, dtype={"id": str, "session_id": str})

    if df.empty:
        raise ValueError(f"Participants file is empty: {filepath}")

    missing = [c for c in REQUIRED_PARTICIPANT_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"Participants file missing columns: {missing}")

    for col in ["is_visible", "consent_given"]:
        if col in df.columns:
            df[col] = df[col].map(_to_bool)

    logger.info(f"Loaded {len(df)} participants")
    return df


def _to_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    if pd.isna(value):
        return False
    return str(value).strip().lower() in _TRUE_STRINGS


def select_visible_participants(
    participants: pd.DataFrame,
    session_id: Optional[str] = None
) -> pd.DataFrame:
    """
    Select the participants others are allowed to see.

    Args:
        participants: Participants DataFrame
        session_id: If provided, keep only participants of this session

    Returns:
        Filtered DataFrame (all rows when there is no is_visible column)
    """
    mask = pd.Series(True, index=participants.index)
    if "is_visible" in participants.columns:
        mask &= participants["is_visible"].map(_to_bool).astype(bool)
    if session_id is not None:
        if "session_id" not in participants.columns:
            raise ValueError("Cannot filter by session: participants have no session_id column")
        mask &= participants["session_id"].astype(str) == str(session_id)

    visible = participants[mask]
    logger.info(f"Selected {len(visible)} of {len(participants)} participants as visible")
    return visible


def validate_identity_items(df: pd.DataFrame) -> List[str]:
    """
    Validate identity item rows.

    Checks:
    - Required columns are present
    - Lens is one of GIVEN, CHOSEN, CORE
    - Type is "tag" or "text"
    - Value is not empty
    - Tag weights are integers in [1, 3]

    Args:
        df: Identity items DataFrame

    Returns:
        List of problems (empty if valid)
    """
    missing = [c for c in REQUIRED_ITEM_COLUMNS if c not in df.columns]
    if missing:
        return [f"Missing required columns: {missing}"]

    issues = []
    valid_lenses = {lens.value for lens in Lens}
    weights = pd.to_numeric(df["weight"], errors="coerce")

    for pos, (idx, row) in enumerate(df.iterrows()):
        lens = str(row["lens"]).strip().upper()
        if lens not in valid_lenses:
            issues.append(f"Row {idx}: unknown lens {row['lens']!r}")

        item_type = str(row["type"]).strip().lower()
        if item_type not in ITEM_TYPES:
            issues.append(f"Row {idx}: unknown item type {row['type']!r}")

        value = row["value"]
        if pd.isna(value) or not str(value).strip():
            issues.append(f"Row {idx}: empty value")

        if item_type == "tag":
            weight = weights.iloc[pos]
            if pd.isna(weight) or weight != int(weight) or not MIN_WEIGHT <= weight <= MAX_WEIGHT:
                issues.append(
                    f"Row {idx}: tag weight must be an integer between "
                    f"{MIN_WEIGHT} and {MAX_WEIGHT}, got {row['weight']!r}"
                )

    return issues


def build_identities(
    items: pd.DataFrame,
    participant_ids: Optional[Iterable[str]] = None
) -> Dict[str, Identity]:
    """
    Assemble Identity objects from identity item rows.

    Every requested participant gets an Identity, empty if they have no
    items. Items of participants that were not requested are ignored.
    Tags and texts keep their row order.

    Args:
        items: Identity items DataFrame
        participant_ids: Participants to build (default: all in items)

    Returns:
        Dictionary mapping participant id to Identity

    Raises:
        ValueError: If item rows fail validation
    """
    issues = validate_identity_items(items)
    if issues:
        raise ValueError("Invalid identity items:\n  " + "\n  ".join(issues))

    if participant_ids is None:
        participant_ids = items["participant_id"].astype(str).unique()

    identities = {str(pid): Identity(participant_id=str(pid)) for pid in participant_ids}

    for row in items.itertuples(index=False):
        identity = identities.get(str(row.participant_id))
        if identity is None:
            continue
        lens = Lens.parse(row.lens)
        if str(row.type).strip().lower() == "tag":
            identity.tags[lens].append(TagItem(value=str(row.value), weight=int(float(row.weight))))
        else:
            identity.texts[lens].append(str(row.value))

    logger.info(f"Built {len(identities)} identities from {len(items)} items")
    return identities
