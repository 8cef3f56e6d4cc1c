"""Errors raised by the Sleeper client and the sync engine."""

from typing import Optional


class SleeperSyncError(Exception):
    """Base class for every error raised by this package"""


class HttpError(SleeperSyncError):
    """Non-success HTTP status returned by the Sleeper API"""

    def __init__(self, status_code: int, url: str):
        self.status_code = status_code
        self.url = url
        super().__init__(f"HTTP error! status: {status_code}")

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404


class ExhaustedRetries(SleeperSyncError):
    """The request was still rate limited after the last retry"""

    def __init__(self, url: str, attempts: int):
        self.url = url
        self.attempts = attempts
        super().__init__(f"Rate limit exceeded after {attempts} attempts: {url}")


class UserNotFound(SleeperSyncError):
    def __init__(self, username: str):
        self.username = username
        super().__init__(f"Sleeper user not found: {username}")


class NoLeaguesFound(SleeperSyncError):
    def __init__(self, username: str):
        self.username = username
        super().__init__("No leagues found for this user")


class PersistenceError(SleeperSyncError):
    """An upsert against the local store failed"""

    def __init__(self, entity: str, detail: str, key: Optional[str] = None):
        self.entity = entity
        self.detail = detail
        self.key = key
        target = f"{entity} {key}" if key else entity
        super().__init__(f"Failed to upsert {target}: {detail}")


def is_not_found(error: BaseException) -> bool:
    """True for the 404s Sleeper returns for seasons or weeks with no data"""
    return isinstance(error, HttpError) and error.is_not_found
