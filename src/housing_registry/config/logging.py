"""Log setup for the command line."""

from __future__ import annotations

import logging
import sys
from typing import Final

LOG_FORMAT: Final[str] = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(*, verbose: bool = False, force: bool = False) -> None:
    """Attach a single stderr handler with a timestamped one-line format.

    Import progress is reported at INFO, skipped rows at WARNING and aborted batches
    at ERROR; ``verbose`` lowers the level to DEBUG so that created houses and
    apartments are listed too. ``force=True`` replaces existing handlers.
    """

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=LOG_FORMAT,
        datefmt="%H:%M:%S",
        stream=sys.stderr,
        force=force,
    )
    # SQL statements only show up through HOUSING_REGISTRY_SQL_ECHO
    logging.getLogger("sqlalchemy").setLevel(logging.WARNING)
