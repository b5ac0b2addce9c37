"""Logging setup for the wizard process."""

import logging
import logging.handlers
from pathlib import Path
from typing import Any

_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def _rotating_handler(project_root: Path, cfg: dict[str, Any]) -> logging.Handler:
    log_path = project_root / cfg.get("file", "logs/wizard.log")
    log_path.parent.mkdir(parents=True, exist_ok=True)
    return logging.handlers.RotatingFileHandler(
        log_path,
        maxBytes=int(cfg.get("max_bytes", 10 * 1024 * 1024)),
        backupCount=int(cfg.get("backup_count", 3)),
        encoding="utf-8",
    )


def setup_logging(project_root: Path, settings: dict[str, Any]) -> None:
    """Configure the root logger from settings["logging"].

    Logs go to a rotating file so interactive prompts stay clean; console
    output is opt-in via log_to_console.
    """
    cfg = settings.get("logging", {})
    level = getattr(logging, str(cfg.get("level", "INFO")).upper(), logging.INFO)
    formatter = logging.Formatter(_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    handlers: list[logging.Handler] = [_rotating_handler(project_root, cfg)]
    if cfg.get("log_to_console", False):
        handlers.append(logging.StreamHandler())

    root = logging.getLogger()
    root.setLevel(level)
    for h in root.handlers[:]:
        root.removeHandler(h)
    for h in handlers:
        h.setLevel(level)
        h.setFormatter(formatter)
        root.addHandler(h)
