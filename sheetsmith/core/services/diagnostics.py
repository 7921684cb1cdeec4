"""Logging setup and the per-pass diagnostics collector."""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from sheetsmith.core.services.settings import Settings, get_settings

ROOT_LOGGER = "sheetsmith"

logging.getLogger(ROOT_LOGGER).addHandler(logging.NullHandler())


def configure_logging(settings: Settings | None = None) -> logging.Logger:
    """Attach console (and optional file) handlers to the library logger.

    Safe to call repeatedly; handlers are only added once.
    """

    settings = settings or get_settings()
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(getattr(logging, settings.log_level.upper(), logging.WARNING))

    if not any(getattr(h, "_sheetsmith", False) for h in logger.handlers):
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
        console_handler._sheetsmith = True  # type: ignore[attr-defined]
        logger.addHandler(console_handler)

        if settings.log_file is not None:
            settings.log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(settings.log_file, encoding="utf-8")
            file_handler.setFormatter(
                logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
            )
            file_handler._sheetsmith = True  # type: ignore[attr-defined]
            logger.addHandler(file_handler)

    return logger


class Diagnostics:
    """Collects the advisory messages raised during one derivation pass.

    Every message is also emitted as a warning on ``logger``.
    """

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self._logger = logger or logging.getLogger(ROOT_LOGGER)
        self._messages: List[str] = []

    def log(self, message: str) -> None:
        self._messages.append(message)
        self._logger.warning(message)

    @property
    def messages(self) -> Tuple[str, ...]:
        return tuple(self._messages)

    def __len__(self) -> int:
        return len(self._messages)


__all__ = ["Diagnostics", "ROOT_LOGGER", "configure_logging"]
