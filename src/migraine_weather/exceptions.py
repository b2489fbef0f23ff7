"""Application exception classes."""

from __future__ import annotations

from typing import Literal

FetchKind = Literal["current-weather", "forecast"]
CauseCategory = Literal["network", "http_status", "malformed", "invalid_coordinates"]


class ConfigError(Exception):
    """Raised when configuration is invalid or incomplete."""


class ProviderRequestError(Exception):
    """Internal weather provider failure with category/status metadata.

    Never crosses the public client boundary: fetch methods log it and
    re-raise it as the cause of a ``FetchFailure``.
    """

    def __init__(
        self,
        message: str,
        *,
        category: CauseCategory,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.category = category
        self.status_code = status_code


class FetchFailure(Exception):
    """Raised when fetching current weather or the forecast fails."""

    def __init__(self, kind: FetchKind) -> None:
        super().__init__(f"Failed to fetch {kind.replace('-', ' ')} data.")
        self.kind = kind
