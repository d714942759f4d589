import logging
import sys

LOG_FORMAT = "%(asctime)s  %(levelname)-8s  %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Root logging setup shared by the API process and the scripts."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        stream=sys.stdout,
    )
