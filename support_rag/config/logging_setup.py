"""Process-wide logging setup; modules only call ``logging.getLogger(__name__)``."""

import logging
import sys

_NOISY = ("httpx", "httpcore", "openai", "sentence_transformers", "urllib3")


def configure_logging(level: str | int = "INFO", *, quiet_third_party: bool = True) -> None:
    """Install one stdout handler on the root logger.

    Safe to call repeatedly: existing root handlers are replaced.
    """
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    root_logger.setLevel(level)
    root_logger.addHandler(handler)

    if quiet_third_party:
        for name in _NOISY:
            logging.getLogger(name).setLevel(logging.WARNING)
