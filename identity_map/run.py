"""
Main runner for identity map similarity.

This is the single entrypoint for ranking matches for a participant and
summarizing a session.

Usage:
    python -m identity_map.run --config configs/config.yaml --participant p-alice

The runner performs the following steps:
1. Load and validate configuration
2. Load participants and identity items
3. Build identities for visible participants (plus the requester)
4. Rank matches for the requester in the selected scope
5. Compute all-pairs session matrices
6. Save match list, matrices and session report
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Dict, Any, Optional
from datetime import datetime
import json

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def setup_logging(log_level: str) -> None:
    """Configure logging level from config."""
    level = getattr(logging, log_level.upper(), logging.INFO)
    logging.getLogger().setLevel(level)


def run_matching(
    config_path: str,
    participant_id: str,
    scope: str = "overall",
    session_id: Optional[str] = None,
    output_dir: Optional[str] = None
) -> Dict[str, Any]:
    """
    Rank matches for one participant and summarize the session.

    Args:
        config_path: Path to the configuration YAML file
        participant_id: Requesting participant
        scope: "overall" or a lens name
        session_id: Session to rank within (defaults to the requester's session;
            a different session is rejected)
        output_dir: If provided, write outputs here instead of config default

    Returns:
        Dictionary with results and paths to outputs

    Raises:
        KeyError: If the participant is unknown
        ValueError: If session_id is not the participant's session
    """
    from . import __version__
    from .configs import load_config, validate_config, get_config_value
    from .data_loading import (
        load_participants,
        load_identity_items,
        select_visible_participants,
        build_identities
    )
    from .fusion import SimilarityConfig
    from .ranking import rank_matches, compute_session_matrices, scope_name
    from .evaluation import create_session_report

    # =========================================================================
    # 1. Load and validate configuration
    # =========================================================================
    logger.info("=" * 60)
    logger.info("IDENTITY MAP - SIMILARITY RANKING")
    logger.info("=" * 60)

    config = load_config(config_path)
    issues = validate_config(config)
    if issues:
        for issue in issues:
            logger.warning(f"Config issue: {issue}")

    setup_logging(get_config_value(config, "global.log_level", "INFO"))

    similarity_config = SimilarityConfig.from_config(config)
    similarity_config.validate()
    top_k = get_config_value(config, "ranking.top_k", 3)
    n_jobs = get_config_value(config, "ranking.n_jobs", 1)
    quantiles = get_config_value(config, "evaluation.quantiles")

    out_dir = Path(output_dir or get_config_value(config, "global.output_dir", "artifacts"))
    out_dir.mkdir(parents=True, exist_ok=True)

    # =========================================================================
    # 2. Load data
    # =========================================================================
    logger.info("\n" + "=" * 60)
    logger.info("STEP 1: Loading Data")
    logger.info("=" * 60)

    participants = load_participants(
        config["data"]["participants"]["path"],
        delimiter=config["data"]["participants"].get("delimiter", ",")
    )
    items = load_identity_items(
        config["data"]["identity_items"]["path"],
        delimiter=config["data"]["identity_items"].get("delimiter", ",")
    )

    # =========================================================================
    # 3. Build identities
    # =========================================================================
    logger.info("\n" + "=" * 60)
    logger.info("STEP 2: Building Identities")
    logger.info("=" * 60)

    participant_ids = participants["id"].astype(str)
    if participant_id not in set(participant_ids):
        raise KeyError(f"Unknown participant: {participant_id}")

    # Matches never cross sessions
    if "session_id" in participants.columns:
        requester_session = str(participants.loc[participant_ids == participant_id, "session_id"].iloc[0])
        if session_id is None:
            session_id = requester_session
        elif str(session_id) != requester_session:
            raise ValueError(
                f"Participant {participant_id} belongs to session {requester_session}, not {session_id}"
            )
        logger.info(f"Restricting matches to session {session_id}")

    visible = select_visible_participants(participants, session_id=session_id)
    ids = list(visible["id"].astype(str))
    # The requester is always compared, even when hidden from others
    if participant_id not in ids:
        ids.append(participant_id)

    identities = build_identities(items, ids)
    display_names = dict(zip(participants["id"].astype(str), participants["display_name"].astype(str)))

    # =========================================================================
    # 4. Rank matches
    # =========================================================================
    logger.info("\n" + "=" * 60)
    logger.info(f"STEP 3: Ranking Matches (scope={scope})")
    logger.info("=" * 60)

    report = rank_matches(
        participant_id,
        identities,
        scope=scope,
        top_k=top_k,
        display_names=display_names,
        config=similarity_config
    )
    if not report.requester_has_data:
        logger.warning("Requester has no items in this scope; add at least one item to see lens matches")

    for match in report.top_similar:
        logger.info(f"  Similar:   {match.display_name} - {round(match.score * 100)}%")
    for match in report.top_different:
        logger.info(f"  Different: {match.display_name} - {round(match.dissimilarity * 100)}% different")

    matches_path = out_dir / f"matches_{scope_name(scope).lower()}.json"
    report.save(str(matches_path))

    # =========================================================================
    # 5. Session matrices and report
    # =========================================================================
    logger.info("\n" + "=" * 60)
    logger.info("STEP 4: Session Matrices")
    logger.info("=" * 60)

    session_identities = {pid: identities[pid] for pid in visible["id"].astype(str) if pid in identities}
    matrices = compute_session_matrices(session_identities, n_jobs=n_jobs, config=similarity_config)
    for name, matrix in matrices.items():
        matrix.to_csv(out_dir / f"similarity_matrix_{name.lower()}.csv")

    session_report = create_session_report(matrices, quantiles)
    session_report.save(str(out_dir / "session_report.json"))
    logger.info("\n" + session_report.summary())

    metadata = {
        "version": __version__,
        "run_timestamp": datetime.now().isoformat(),
        "config_path": config_path,
        "participant_id": participant_id,
        "scope": scope_name(scope),
        "session_id": session_id,
        "similarity": similarity_config.to_dict()
    }
    with open(out_dir / "metadata.json", "w") as f:
        json.dump(metadata, f, indent=2)

    logger.info("\n" + "=" * 60)
    logger.info("RUN COMPLETE")
    logger.info("=" * 60)

    return {
        "success": True,
        "output_dir": str(out_dir),
        "matches": report.to_dict(),
        "metadata": metadata
    }


def main():
    """Main entry point for the runner."""
    parser = argparse.ArgumentParser(
        description="Rank identity map matches for a participant"
    )
    parser.add_argument(
        "--config",
        type=str,
        default="configs/config.yaml",
        help="Path to configuration file"
    )
    parser.add_argument(
        "--participant",
        type=str,
        required=True,
        help="Id of the requesting participant"
    )
    parser.add_argument(
        "--scope",
        type=str,
        default="overall",
        choices=["overall", "given", "chosen", "core"],
        help="Score used for ranking"
    )
    parser.add_argument(
        "--session",
        type=str,
        default=None,
        help="Session to rank within (default: the participant's own session)"
    )
    parser.add_argument(
        "--output-dir",
        type=str,
        default=None,
        help="Output directory (overrides config)"
    )

    args = parser.parse_args()

    try:
        result = run_matching(
            args.config,
            args.participant,
            scope=args.scope,
            session_id=args.session,
            output_dir=args.output_dir
        )
        if result["success"]:
            logger.info("\nRun completed successfully!")
            return 0
        else:
            logger.error("\nRun failed!")
            return 1
    except Exception as e:
        logger.exception(f"Run failed with error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
