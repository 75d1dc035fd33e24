"""Logging configuration for the lanclip CLI."""
import logging

# Parent logger of every lanclip module logger.
PACKAGE_LOGGER = "lanclip"


def configure_logging(verbose: bool) -> None:
    """Configure stderr logging.

    Args:
        verbose: If True, lanclip's own loggers emit DEBUG records. Other
            libraries (asyncio, tenacity) stay at WARNING either way.

    Failed sends, dropped datagrams and persistence errors are logged at
    WARNING or above and therefore always shown.
    """
    logging.basicConfig(
        level=logging.WARNING,
        format="%(levelname)s: %(name)s: %(message)s",
        handlers=[logging.StreamHandler()],
    )
    logging.getLogger(PACKAGE_LOGGER).setLevel(logging.DEBUG if verbose else logging.WARNING)
