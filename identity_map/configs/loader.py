"""
Configuration loading and validation.

This module handles loading of YAML configuration files and
validates that all required fields are present.
"""

import logging
from pathlib import Path
from typing import Dict, Any, List

import yaml

logger = logging.getLogger(__name__)

LENS_NAMES = ("GIVEN", "CHOSEN", "CORE")


def load_config(filepath: str) -> Dict[str, Any]:
    """
    Load configuration from YAML file.

    Args:
        filepath: Path to the YAML configuration file

    Returns:
        Configuration dictionary

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If config file is empty
        yaml.YAMLError: If YAML is invalid
    """
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {filepath}")

    logger.info(f"Loading configuration from {filepath}")
    with open(filepath, "r") as f:
        config = yaml.safe_load(f)

    if config is None:
        raise ValueError(f"Configuration file is empty: {filepath}")

    return config


def validate_config(config: Dict[str, Any]) -> List[str]:
    """
    Validate configuration and return list of warnings/errors.

    Args:
        config: Configuration dictionary

    Returns:
        List of warning/error messages (empty if valid)
    """
    issues = []

    required_sections = ["global", "data", "similarity", "ranking"]

    for section in required_sections:
        if section not in config:
            issues.append(f"Missing required section: {section}")

    # Check data paths
    if "data" in config:
        data = config["data"]
        if "participants" not in data or "path" not in (data.get("participants") or {}):
            issues.append("Missing data.participants.path")
        if "identity_items" not in data or "path" not in (data.get("identity_items") or {}):
            issues.append("Missing data.identity_items.path")

    # Check blend weights sum to 1 and lens weights are usable
    if "similarity" in config:
        similarity = config["similarity"] or {}
        w_tag = similarity.get("tag_weight", 0.7)
        w_text = similarity.get("text_weight", 0.3)
        if not _is_number(w_tag) or not _is_number(w_text):
            issues.append(f"Blend weights must be numbers: {w_tag!r}, {w_text!r}")
        elif abs(w_tag + w_text - 1.0) > 0.01:
            issues.append(f"Blend weights don't sum to 1: {w_tag} + {w_text}")

        lens_weights = similarity.get("lens_weights", {}) or {}
        if not isinstance(lens_weights, dict):
            issues.append(f"similarity.lens_weights must be a mapping, got {lens_weights!r}")
            lens_weights = {}
        normalized = {str(k).upper(): v for k, v in lens_weights.items()}
        if lens_weights:
            missing = [lens for lens in LENS_NAMES if lens not in normalized]
            if missing:
                issues.append(f"Missing lens weights: {missing}")
        for lens, weight in normalized.items():
            if lens not in LENS_NAMES:
                issues.append(f"Unknown lens in lens_weights: {lens}")
            elif not _is_number(weight):
                issues.append(f"Lens weight for {lens} must be a number, got {weight!r}")
            elif weight < 0:
                issues.append(f"Lens weight for {lens} must be non-negative, got {weight}")
        numeric = [w for w in normalized.values() if _is_number(w)]
        if lens_weights and len(numeric) == len(normalized) and sum(numeric) <= 0:
            issues.append("Lens weights must not all be zero")

        limit = similarity.get("top_weights_limit", 3)
        if not isinstance(limit, int) or isinstance(limit, bool) or limit < 1:
            issues.append(f"similarity.top_weights_limit must be an integer >= 1, got {limit!r}")

    if "ranking" in config:
        ranking = config["ranking"] or {}
        top_k = ranking.get("top_k", 3)
        if not isinstance(top_k, int) or isinstance(top_k, bool) or top_k < 1:
            issues.append(f"ranking.top_k must be an integer >= 1, got {top_k!r}")

    return issues


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def get_config_value(config: Dict[str, Any], path: str, default: Any = None) -> Any:
    """
    Get a nested configuration value using dot notation.

    Args:
        config: Configuration dictionary
        path: Dot-separated path (e.g., "similarity.lens_weights.CORE")
        default: Default value if path doesn't exist

    Returns:
        Configuration value or default
    """
    keys = path.split(".")
    value = config
    for key in keys:
        if isinstance(value, dict) and key in value:
            value = value[key]
        else:
            return default
    return value
