"""Poll remote GenePattern/Galaxy jobs of unfinished analyses once.

Runs the same sweep as the scheduled Celery task, for cron or manual use:
- every unfinished analysis (optionally limited to one experiment), or
- a single analysis by id.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional


def _ensure_repo_on_path() -> None:
    # When executed as a script ("python scripts/xyz.py"), Python's sys.path[0]
    # is the scripts/ directory, not the repo root. Ensure repo root is importable.
    repo_root = Path(__file__).resolve().parents[1]
    if str(repo_root) not in sys.path:
        sys.path.insert(0, str(repo_root))


_ensure_repo_on_path()

from flowgate.database.base import init_db  # noqa: E402
from flowgate.database.crud import get_analysis  # noqa: E402
from flowgate.database.session import db_session  # noqa: E402
from flowgate.logging_utils import get_logger  # noqa: E402
from flowgate.services.status import refresh_analysis, refresh_unfinished  # noqa: E402

logger = get_logger(__name__)


def _parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Refresh the status of submitted analyses.")
    p.add_argument("--experiment-id", type=int, default=None, help="Only poll analyses of this experiment.")
    p.add_argument("--analysis-id", type=int, default=None, help="Poll a single analysis.")
    p.add_argument("--init-db", action="store_true", help="Create missing tables first.")
    return p.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> int:
    args = _parse_args(argv)

    if args.init_db:
        init_db()

    try:
        with db_session() as db:
            if args.analysis_id is not None:
                analysis = get_analysis(db, args.analysis_id)
                if analysis is None:
                    print(f"Analysis {args.analysis_id} not found")
                    return 1
                status = refresh_analysis(db, analysis)
                print(f"Analysis {analysis.id} (job {analysis.job_number}): status {int(status)}")
                return 0

            summary = refresh_unfinished(db, experiment_id=args.experiment_id)
    except Exception as e:
        logger.error("Status poll failed: %r", e)
        print(f"Status poll failed: {e}")
        return 2

    print(
        f"Checked {summary['checked']} analyses: "
        f"{summary['updated']} updated, {summary['errors']} errors"
    )
    return 1 if summary["errors"] else 0


if __name__ == "__main__":
    raise SystemExit(main())
