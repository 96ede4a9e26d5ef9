"""Custom exception hierarchy for pykokudo."""

from __future__ import annotations


class KokudoError(Exception):
    """Base exception for all pykokudo errors."""


class KokudoConfigError(KokudoError):
    """Invalid or missing configuration."""


class KokudoStorageError(KokudoError):
    """Writing the persistent slot failed.

    Reading never raises: a missing or corrupt slot is treated as empty.
    """


class KokudoImportError(KokudoError):
    """Import payload was not valid JSON or had the wrong shape.

    Raised before any mutation, so the store is left untouched.
    """


class KokudoTransportError(KokudoError):
    """HTTP-level failure (network, non-200, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        url: str = "",
    ) -> None:
        self.status_code = status_code
        self.url = url
        super().__init__(message)


class KokudoConfirmationRequiredError(KokudoError):
    """A destructive action (reset, overwrite import) was not confirmed."""

    def __init__(self, action: str) -> None:
        self.action = action
        super().__init__(f"{action} discards existing data and requires confirm=True")
