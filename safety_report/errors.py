"""Exceptions raised by the report pipeline."""

from typing import Any


class InputError(ValueError):
    """Observation payload is absent, not a list, or empty."""


class ConfigurationError(RuntimeError):
    """Report service is not configured (e.g. missing API key)."""


class ReportServiceError(RuntimeError):
    """The text-generation call failed. Statistics computed before the call are kept."""

    def __init__(
        self,
        message: str,
        status: int | None = None,
        details: Any = None,
        statistics: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.status = status
        self.details = details
        self.statistics = statistics
