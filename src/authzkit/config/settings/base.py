"""Config settings – Settings base class and AuthzSettings."""
from __future__ import annotations

import dataclasses
import logging

from authzkit.config.validation.errors import InvalidSettingValueError

_LEVELS = frozenset({"debug", "info", "warning", "error", "critical"})


@dataclasses.dataclass
class Settings:
    """Base class for 12-factor settings."""

    _prefix: dataclasses.ClassVar[str] = ""

    def __post_init__(self) -> None:
        self._validate()

    def _validate(self) -> None:
        """Override to add cross-field validation."""


@dataclasses.dataclass
class AuthzSettings(Settings):
    """Runtime options of the authorization engine.

    Read from ``AUTHZ_*`` environment variables by
    :class:`~authzkit.config.settings.loaders.EnvSettingsLoader`.
    """

    _prefix: dataclasses.ClassVar[str] = "AUTHZ"

    log_decisions: bool = True
    decision_log_level: str = "info"
    service: str = "authz"
    json_logs: bool = True
    log_level: str = "INFO"

    def _validate(self) -> None:
        for name in ("decision_log_level", "log_level"):
            value = getattr(self, name)
            if not isinstance(value, str) or value.lower() not in _LEVELS:
                raise InvalidSettingValueError(name, value, f"expected one of {sorted(_LEVELS)}")
        if not self.service:
            raise InvalidSettingValueError("service", self.service, "must not be empty")

    @property
    def log_level_number(self) -> int:
        return logging.getLevelName(self.log_level.upper())


__all__ = ["AuthzSettings", "Settings"]
