import logging
from typing import Any, Dict, Optional

__all__ = ["setup_logger"]

_FORMAT = "%(name)s - %(levelname)s - %(message)s"

# ---------------------------------------------------------------------------
# Root logger configuration (one-time) – idempotent
# ---------------------------------------------------------------------------


def _configure_root_logger(level: int) -> None:
    root = logging.getLogger()

    handler = next(
        (h for h in root.handlers if getattr(h, "_sqlschema_console", False)),
        None,
    )
    if handler is None:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_FORMAT))
        handler._sqlschema_console = True  # type: ignore[attr-defined]
        root.addHandler(handler)

    handler.setLevel(level)
    root.setLevel(min(root.level or logging.WARNING, level))


# ---------------------------------------------------------------------------
# Public helper
# ---------------------------------------------------------------------------


def setup_logger(name: str, config: Optional[Dict[str, Any]] = None) -> logging.Logger:
    log_cfg = (config or {}).get("logging", {})
    level = getattr(logging, str(log_cfg.get("level", "INFO")).upper(), logging.INFO)

    _configure_root_logger(level)

    logger = logging.getLogger(name)
    logger.setLevel(level)
    return logger
