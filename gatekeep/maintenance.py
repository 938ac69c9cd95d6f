"""
CLI entrypoint for the maintenance job. Run from cron, e.g.:

  python -m gatekeep.maintenance

Or hourly: 0 * * * * cd /path/to/gatekeep && .venv/bin/python -m gatekeep.maintenance

Overlapping runs are safe: every step is idempotent.
"""

import logging
import sys

from gatekeep.core.config import get_settings
from gatekeep.core.database import SessionLocal
from gatekeep.services.factory import build_sweeper

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


def main() -> int:
    """Expire stale sessions, then prune aged activity records and login attempts."""
    settings = get_settings()
    db = SessionLocal()
    try:
        report = build_sweeper(db, settings).run_all()
        logger.info(
            "Maintenance completed: skipped=%s sessions_expired=%s activity_pruned=%s attempts_pruned=%s",
            report.skipped,
            report.sessions_expired,
            report.activity_pruned,
            report.attempts_pruned,
        )
        return 0
    except Exception as e:
        logger.exception("Maintenance job failed: %s", e)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
