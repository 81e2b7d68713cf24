"""
core/logging_config.py -- One-time logging setup shared by the API and the CLI.

Modules obtain named loggers under the "authservice" namespace
(logging.getLogger("authservice.auth") etc.) and never configure handlers
themselves.
"""

import logging

LOG_FORMAT = "%(asctime)s %(levelname)-5s %(name)s %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: str = "INFO") -> None:
    """Install the root handler once. Repeated calls only adjust the level."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT, datefmt=LOG_DATEFMT)
    logging.getLogger("authservice").setLevel(level.upper())
