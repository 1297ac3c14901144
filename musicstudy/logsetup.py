import inspect
import logging
import sys

from loguru import logger

from musicstudy.config import Config


class InterceptHandler(logging.Handler):
    def emit(self, record: logging.LogRecord) -> None:
        # Get corresponding Loguru level if it exists.
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find caller from where originated the logged message.
        frame, depth = inspect.currentframe(), 0
        while frame and (depth == 0 or frame.f_code.co_filename == logging.__file__):
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


# https://loguru.readthedocs.io/en/stable/api/logger.html#record
def setup_logger(config: Config) -> None:
    logger.remove()
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    # stdout carries the demo output only
    logger.add(
        sys.stderr,
        level=config.log_level,
        colorize=True,
        format="<level>{level: <8}</level> "
        "| <yellow>{name}:{line}</yellow> "
        "| <level>{message}</level>",
    )

    if config.log_file:
        logger.add(
            config.log_file,
            level=logging.DEBUG,
            colorize=False,
            rotation="10 MB",
            retention=5,
            format="{time:YYYY-MM-DD HH:mm:ss.SSS} "
            "| {level: <8} | {name}:{line} | {message}",
        )
