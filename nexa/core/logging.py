import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from nexa.core.config import Settings, settings as default_settings


def configure_logging(settings: Settings | None = None) -> None:
    settings = settings or default_settings

    root_logger = logging.getLogger()
    if root_logger.handlers:
        return

    root_logger.setLevel(logging.INFO)

    formatter = logging.Formatter(
        "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
    )

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    log_path = Path(settings.data_dir) / "nexa.log"
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError:
        root_logger.warning("Log directory %s is not writable; logging to console only", log_path.parent)
        return

    file_handler = RotatingFileHandler(log_path, maxBytes=1_000_000, backupCount=3)
    file_handler.setFormatter(formatter)
    root_logger.addHandler(file_handler)
