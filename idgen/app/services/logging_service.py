import json
import logging
import sys
from typing import Any

from .settings import Settings


class LoggingService:
    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self.logger = logging.getLogger("idgen")
        self.logger.setLevel(getattr(logging, settings.LOG_LEVEL, logging.INFO))
        if not self.logger.handlers:
            handler = logging.StreamHandler(sys.stdout)
            handler.setLevel(self.logger.level)
            self.logger.addHandler(handler)

    def _render(self, level: int, event: str, fields: Any) -> None:
        payload = {"event": event, **fields}
        if self._settings.LOG_FORMAT == "json":
            self.logger.log(level, json.dumps(payload, separators=(",", ":"), sort_keys=True))
        else:
            self.logger.log(level, "%s %s", event, payload)

    def log(self, event: str, **fields: Any) -> None:
        self._render(logging.INFO, event, fields)

    def warn(self, event: str, **fields: Any) -> None:
        self._render(logging.WARNING, event, fields)
