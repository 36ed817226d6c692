import logging
import os


def get_logger(name: str = "autodiff_engine"):
    logger = logging.getLogger(name)
    root = logging.getLogger("autodiff_engine")
    if not root.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter('[%(asctime)s][%(levelname)s][%(name)s] %(message)s')
        handler.setFormatter(formatter)
        root.addHandler(handler)
        level_name = os.getenv("AUTODIFF_LOG_LEVEL", "WARNING").upper()
        root.setLevel(getattr(logging, level_name, logging.WARNING))
    return logger
