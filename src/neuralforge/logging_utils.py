from __future__ import annotations

import logging
import sys
import warnings
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path

from neuralforge.config import env_flag

_session_log_dir: Path | None = None


def configure_logging(
    app_name: str = "neuralforge",
    dev: bool | None = None,
    console_level: int | None = None,
) -> Path:
    log_dir = get_session_log_dir(app_name, dev)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / f"{app_name}.log"

    formatter = logging.Formatter(
        fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
    )

    file_handler = RotatingFileHandler(log_path, maxBytes=1_000_000, backupCount=3, encoding="utf-8")
    file_handler.setLevel(logging.INFO)
    file_handler.setFormatter(formatter)

    console_handler = logging.StreamHandler()
    if console_level is None:
        console_level = logging.DEBUG if dev else logging.INFO
    console_handler.setLevel(console_level)
    console_handler.setFormatter(formatter)

    root = logging.getLogger()
    root.setLevel(logging.DEBUG if dev else logging.INFO)
    existing_files = {getattr(handler, "baseFilename", None) for handler in root.handlers}
    if str(log_path) not in existing_files:
        root.addHandler(file_handler)
    if not any(type(handler) is logging.StreamHandler for handler in root.handlers):
        root.addHandler(console_handler)

    logging.captureWarnings(True)
    warnings.simplefilter("default")
    logging.getLogger("pywebview").setLevel(logging.INFO)
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    def _excepthook(exc_type, exc_value, exc_traceback) -> None:  # type: ignore[no-untyped-def]
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc_value, exc_traceback)
            return
        root.error("uncaught exception", exc_info=(exc_type, exc_value, exc_traceback))

    sys.excepthook = _excepthook
    root.info("logging initialized at %s", log_path)
    return log_path


def get_log_dir(app_name: str, dev: bool | None = None) -> Path:
    if dev is None:
        dev = env_flag("NEURALFORGE_DEV")
    return Path.cwd() / "logs" if dev else (Path.home() / f".{app_name}" / "logs")


def get_session_log_dir(app_name: str, dev: bool | None = None) -> Path:
    global _session_log_dir
    if _session_log_dir is None:
        session_stamp = datetime.now().strftime("%Y%m%d-%H%M%S")
        _session_log_dir = get_log_dir(app_name, dev) / session_stamp
    return _session_log_dir
