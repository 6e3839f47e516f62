import logging

from rich.logging import RichHandler

from utils.config import settings


class CenteredFormatter(logging.Formatter):
    """Pads logger names so messages from different stores line up."""

    longest_name_length = 14

    def __init__(self, fmt=None, datefmt=None, style="%", initial_width=14):
        super().__init__(fmt, datefmt, style)
        CenteredFormatter.longest_name_length = initial_width

    def format(self, record):
        CenteredFormatter.longest_name_length = max(
            CenteredFormatter.longest_name_length, len(record.name)
        )
        record.name = record.name.center(CenteredFormatter.longest_name_length)
        return super().format(record)


def _resolve_level() -> int:
    if settings.log_level:
        level = logging.getLevelName(settings.log_level.upper())
        if isinstance(level, int):
            return level
    return logging.DEBUG if settings.debug else logging.INFO


def get_logger(name=None) -> logging.Logger:
    """
    Creates and returns a logger configured with RichHandler for rich output.
    """
    if name is None:
        name = "market"
    logger = logging.getLogger(name)
    log_level = _resolve_level()
    logger.setLevel(log_level)

    if not logger.handlers:
        formatter = CenteredFormatter("[%(name)s]  %(message)s")

        console_handler = RichHandler(
            show_time=True,
            show_level=True,
            show_path=False,
            rich_tracebacks=True,
            log_time_format="[%X]",
        )
        console_handler.setFormatter(formatter)
        console_handler.setLevel(log_level)
        logger.addHandler(console_handler)

        logger.propagate = False
        logger.debug(f"Logger for '{name}' initialized with RichHandler.")

    return logger
