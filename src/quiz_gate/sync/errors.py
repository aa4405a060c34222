from __future__ import annotations

from typing import Optional


class SyncError(RuntimeError):
    """Base class for failures talking to the scoring service."""

    @property
    def backend_down(self) -> bool:
        """True when the failure means the backend itself is unavailable."""
        return False


class FetchTimeoutError(SyncError):
    def __init__(self, operation: str, timeout: float):
        super().__init__(f"{operation} timed out after {timeout:g}s")
        self.operation = operation
        self.timeout = timeout

    @property
    def backend_down(self) -> bool:
        return True


class BackendHTTPError(SyncError):
    def __init__(self, status_code: int, detail: Optional[str] = None):
        message = f"Backend responded with HTTP {status_code}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail

    @property
    def backend_down(self) -> bool:
        return self.status_code >= 500


class BackendConnectionError(SyncError):
    """The request never produced a response (DNS, refused connection, reset)."""


class PayloadError(SyncError):
    """The response body did not match the expected contract."""
