import logging


class ColorFormatter(logging.Formatter):
    """
    Logging formatter that adds ANSI color codes to log messages.

    Color depends on the record level; DEBUG records are left uncolored.
    """

    COLORS: dict[int, str] = {
        logging.INFO: "\033[32m",  # Green
        logging.WARNING: "\033[33m",  # Yellow
        logging.ERROR: "\033[31m",  # Red
        logging.CRITICAL: "\033[41m",  # Red background
    }
    RESET: str = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color: str = self.COLORS.get(record.levelno, "")
        message: str = super().format(record)
        if color:
            message = f"{color}{message}{self.RESET}"
        return message


def setup_logging(debug: bool = False) -> logging.Logger:
    """Attach a colored stderr handler to the package logger."""
    logger: logging.Logger = logging.getLogger("sumfiles")

    for handler in list(logger.handlers):
        if isinstance(handler.formatter, ColorFormatter):
            logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(ColorFormatter("%(levelname)s: %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if debug else logging.WARNING)

    return logger
