# =============================================================================
# app/core/logger.py
# =============================================================================
import logging
import os
from app.core.config import settings

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

def get_module_logger(module_name: str, log_file: str) -> logging.Logger:
    """Return a logger writing to ``<LOG_DIR>/<log_file>``.

    Handlers are attached once per module name, so repeated imports reuse them.
    """
    logger = logging.getLogger(module_name)
    logger.setLevel(logging.DEBUG if settings.DEBUG else logging.INFO)

    if not logger.handlers:
        path = log_file if os.path.isabs(log_file) else os.path.join(settings.LOG_DIR, log_file)
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        handler = logging.FileHandler(path)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    return logger
