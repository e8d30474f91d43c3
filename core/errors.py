"""Raw failures raised by collaborators and the closed taxonomy they map to.

Collaborators raise the exceptions defined here (or ``httpx`` exceptions for
network problems).  ``core.escalation.classify`` turns any of them into a
``ClassifiedError``; nothing else in the code base inspects exception types.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


# ── raw failures ─────────────────────────────────────────────────────


class ExtractionError(Exception):
    """Base class for structural problems found while reading a page."""

    def __init__(self, message: str, *, selector: str = "", document: str = "") -> None:
        super().__init__(message)
        self.selector = selector
        self.document = document


class NoItemIdentifier(ExtractionError):
    """A post on the listing page has no link to identify it by."""


class SelectorMissing(ExtractionError):
    """An element the rules rely on is absent from the page."""


class EmptyResult(ExtractionError):
    """The listing was found but produced no posts."""


class MonthParseError(ExtractionError):
    """A post date carries a month name we cannot read."""


class DeserializationError(Exception):
    """Stored or received data could not be decoded."""


class NotificationError(Exception):
    """The notification transport refused or failed a delivery."""


class SourceSuspended(Exception):
    """Raised when a suspended source is asked to fetch again."""

    def __init__(self, source_name: str, resume_at: float) -> None:
        super().__init__(f"{source_name} is suspended until {resume_at:.0f}")
        self.source_name = source_name
        self.resume_at = resume_at


# ── taxonomy ─────────────────────────────────────────────────────────


class ErrorKind(str, Enum):
    NETWORK_BUILDER = "NetworkBuilder"
    NETWORK_REDIRECT = "NetworkRedirect"
    NETWORK_STATUS = "NetworkStatus"
    NETWORK_TIMEOUT = "NetworkTimeout"
    NETWORK_CONNECT = "NetworkConnect"
    NETWORK_BODY = "NetworkBody"
    NETWORK_DECODE = "NetworkDecode"
    NETWORK_OTHER = "NetworkOther"
    NO_ITEM_IDENTIFIER_FOUND = "NoItemIdentifierFound"
    EXTRACTION_SELECTOR_MISSING = "ExtractionSelectorMissing"
    EXTRACTION_EMPTY_RESULT = "ExtractionEmptyResult"
    MONTH_PARSE_FAILURE = "MonthParseFailure"
    NOTIFICATION_TRANSPORT_FAILURE = "NotificationTransportFailure"
    DESERIALIZATION_FAILURE = "DeserializationFailure"
    UNCLASSIFIED = "Unclassified"


class Severity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


@dataclass(frozen=True)
class ClassifiedError:
    kind: ErrorKind
    message: str
    selector: str = ""
    document: str = ""  # raw page snapshot, only for structural faults

    def describe(self) -> str:
        text = f"{self.kind.value}: {self.message}"
        if self.selector:
            text += f" (selector {self.selector!r})"
        return text
