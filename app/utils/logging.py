"""
Console logging for the relay controller.
"""
import sys
import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: str = "INFO", log_format: str = LOG_FORMAT) -> logging.Logger:
    """
    Configure the root logger with a single stdout handler.

    Args:
        level: Level name, e.g. "DEBUG" or "INFO".
        log_format: Override log format string.

    Returns:
        Root logger
    """
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        numeric = logging.INFO

    root = logging.getLogger()
    for handler in list(root.handlers):
        if getattr(handler, "_relay_controller", False):
            root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(log_format))
    handler._relay_controller = True
    root.addHandler(handler)
    root.setLevel(numeric)

    # Keep third-party chatter down
    logging.getLogger("gpiozero").setLevel(logging.WARNING)
    return root
