# mpk_utils/logging_setup.py
import logging
from typing import Literal

Level = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def setup_logging(level: Level = "INFO", *, quiet: bool = False, verbose: bool = False) -> None:
    if quiet:
        level = "WARNING"
    if verbose:
        level = "DEBUG"
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    )
