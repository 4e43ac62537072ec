import logging
import sys
from todo_app.config import get_settings

settings = get_settings()

LOG_FORMATS = {
    "text": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    # Store work happens on the background worker, so show which thread logged
    "threaded": "%(asctime)s - %(threadName)s - %(name)s - %(levelname)s - %(message)s",
}


def setup_logging():
    """Configure application logging"""
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)
    log_format = LOG_FORMATS.get(settings.log_format.lower(), LOG_FORMATS["text"])

    logging.basicConfig(
        level=log_level,
        format=log_format,
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )

    # Set third-party loggers to WARNING to reduce noise
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    return logging.getLogger("todo_app")


logger = setup_logging()
