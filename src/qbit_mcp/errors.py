"""Shared error types for the backend client and configuration layer."""


class QBitError(Exception):
    """Base error for all qBittorrent backend failures."""


class LoginFailedError(QBitError):
    """The initial login attempt was rejected or could not be performed."""

    def __init__(self) -> None:
        super().__init__("qBittorrent login failed")


class ReloginFailedError(QBitError):
    """Re-authentication after a session expiry failed."""

    def __init__(self) -> None:
        super().__init__("qBittorrent re-login failed")


class BackendConnectionError(QBitError):
    """The qBittorrent WebUI refused the connection or is unreachable."""

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__(
            "Cannot connect to qBittorrent. Please ensure it is running and accessible."
        )


class BackendTimeoutError(QBitError):
    """A request to the qBittorrent WebUI exceeded the configured timeout."""

    def __init__(self, timeout: float | None = None) -> None:
        self.timeout = timeout
        super().__init__(
            "Request to qBittorrent timed out. Please check your network connection."
        )


class ConfigError(Exception):
    """Configuration is missing, unreadable, or fails validation."""
