"""
Error taxonomy for the ingestion pipeline.

Recoverable conditions (one bad catalog record, one dropped connection) are
absorbed close to where they happen. Everything else ends a branch and is
reported by the orchestrator without touching sibling branches.
"""

from __future__ import annotations


class IngestError(Exception):
    """Base class for pipeline errors."""


class FetchFailure(IngestError):
    """Network request still failing after every retry attempt."""

    def __init__(self, url: str, attempts: int, last_error: BaseException) -> None:
        super().__init__(f"{url} failed after {attempts} attempt(s): {last_error}")
        self.url = url
        self.attempts = attempts
        self.last_error = last_error


class SourceResponseError(IngestError):
    """Source endpoint answered with a non-2xx status."""

    def __init__(self, url: str, status_code: int, reason: str = "") -> None:
        super().__init__(f"{status_code} {reason} {url}".replace("  ", " ").strip())
        self.url = url
        self.status_code = status_code


class FeedParseError(IngestError):
    """Feed body is neither an item-based nor an entry-based document."""


class MalformedSourceRecord(IngestError):
    """Single raw record that cannot be mapped to a content record."""


class ConfigError(IngestError):
    """Required source configuration is missing."""


class BranchFailure(IngestError):
    """Terminal error of one source branch."""

    def __init__(self, branch: str, cause: BaseException) -> None:
        super().__init__(f"{branch}: {cause}")
        self.branch = branch
        self.cause = cause


class NotificationDeliveryFailure(IngestError):
    """Operator notification could not be delivered."""


class UnexpectedPayloadError(IngestError):
    """Source answered 2xx but the body does not have the expected shape."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason
