import logging
import sys

# Library loggers that are only interesting when debugging.
NOISY_LOGGERS = ("discord", "discord.client", "discord.gateway", "httpx")


def setup_logging(level: int = logging.INFO) -> logging.Logger:
    logger = logging.getLogger("cfdaily")
    if logger.handlers:
        return logger  # already configured
    logger.setLevel(level)
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        logging.Formatter("[%(asctime)s] %(levelname)s %(name)s: %(message)s")
    )
    logger.addHandler(handler)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
    return logger
