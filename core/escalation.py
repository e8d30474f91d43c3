"""Failure classification and the escalation decision table."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from enum import Enum

import httpx

from core.errors import (
    ClassifiedError,
    DeserializationError,
    EmptyResult,
    ErrorKind,
    MonthParseError,
    NoItemIdentifier,
    NotificationError,
    SelectorMissing,
    Severity,
    SourceSuspended,
)

DEFAULT_SUSPENSION = timedelta(minutes=30)


class ActionKind(str, Enum):
    SUSPEND = "suspend"
    PERSIST_ARTIFACT_AND_SUSPEND = "persist_artifact_and_suspend"
    ESCALATE_AND_CONTINUE = "escalate_and_continue"
    ESCALATE_AND_TERMINATE = "escalate_and_terminate"
    SILENT = "silent"


@dataclass(frozen=True)
class Action:
    kind: ActionKind
    escalate: bool = False
    severity: Severity = Severity.INFO
    suspend_for: timedelta | None = None

    @property
    def suspends(self) -> bool:
        return self.suspend_for is not None


SILENT = Action(ActionKind.SILENT)

# (action kind, escalate, severity); suspending kinds get their duration in decide()
_POLICY: dict[ErrorKind, tuple[ActionKind, bool, Severity]] = {
    ErrorKind.NETWORK_BUILDER: (ActionKind.SUSPEND, True, Severity.WARNING),
    ErrorKind.NETWORK_REDIRECT: (ActionKind.SUSPEND, True, Severity.WARNING),
    ErrorKind.NETWORK_STATUS: (ActionKind.SUSPEND, True, Severity.WARNING),
    # Timeouts are the bulk of the noise under rate limiting.
    ErrorKind.NETWORK_TIMEOUT: (ActionKind.SUSPEND, False, Severity.INFO),
    ErrorKind.NETWORK_CONNECT: (ActionKind.SUSPEND, True, Severity.WARNING),
    ErrorKind.NETWORK_BODY: (ActionKind.SUSPEND, True, Severity.WARNING),
    ErrorKind.NETWORK_DECODE: (ActionKind.SUSPEND, True, Severity.WARNING),
    ErrorKind.NETWORK_OTHER: (ActionKind.SUSPEND, True, Severity.WARNING),
    ErrorKind.NO_ITEM_IDENTIFIER_FOUND: (
        ActionKind.PERSIST_ARTIFACT_AND_SUSPEND,
        True,
        Severity.ERROR,
    ),
    # TODO: every other structural fault suspends the source; confirm whether
    # selector drift should too once we have a few weeks of alerts to look at.
    ErrorKind.EXTRACTION_SELECTOR_MISSING: (
        ActionKind.ESCALATE_AND_CONTINUE,
        True,
        Severity.WARNING,
    ),
    ErrorKind.EXTRACTION_EMPTY_RESULT: (ActionKind.SUSPEND, True, Severity.WARNING),
    ErrorKind.MONTH_PARSE_FAILURE: (ActionKind.SUSPEND, True, Severity.WARNING),
    ErrorKind.NOTIFICATION_TRANSPORT_FAILURE: (
        ActionKind.ESCALATE_AND_CONTINUE,
        True,
        Severity.WARNING,
    ),
    ErrorKind.DESERIALIZATION_FAILURE: (ActionKind.SUSPEND, True, Severity.ERROR),
    ErrorKind.UNCLASSIFIED: (
        ActionKind.ESCALATE_AND_TERMINATE,
        True,
        Severity.CRITICAL,
    ),
}

_SUSPENDING = {ActionKind.SUSPEND, ActionKind.PERSIST_ARTIFACT_AND_SUSPEND}


def _network_kind(exc: Exception) -> ErrorKind | None:
    if isinstance(exc, (httpx.InvalidURL, httpx.UnsupportedProtocol, httpx.LocalProtocolError)):
        return ErrorKind.NETWORK_BUILDER
    if isinstance(exc, httpx.TooManyRedirects):
        return ErrorKind.NETWORK_REDIRECT
    if isinstance(exc, httpx.HTTPStatusError):
        return ErrorKind.NETWORK_STATUS
    if isinstance(exc, httpx.TimeoutException):
        return ErrorKind.NETWORK_TIMEOUT
    if isinstance(exc, (httpx.ConnectError, httpx.ProxyError)):
        return ErrorKind.NETWORK_CONNECT
    if isinstance(exc, (httpx.ReadError, httpx.RemoteProtocolError, httpx.StreamError)):
        return ErrorKind.NETWORK_BODY
    if isinstance(exc, (httpx.DecodingError, UnicodeDecodeError)):
        return ErrorKind.NETWORK_DECODE
    if isinstance(exc, httpx.HTTPError):
        return ErrorKind.NETWORK_OTHER
    return None


def classify(exc: BaseException) -> ClassifiedError | None:
    """Map a raw failure onto the closed taxonomy.

    Returns ``None`` for a suspension notice that was already acted upon;
    the caller must not react to it again.
    """
    if isinstance(exc, SourceSuspended):
        return None

    if isinstance(exc, Exception):
        network = _network_kind(exc)
        if network is not None:
            return ClassifiedError(kind=network, message=str(exc) or type(exc).__name__)

    if isinstance(exc, NoItemIdentifier):
        kind = ErrorKind.NO_ITEM_IDENTIFIER_FOUND
    elif isinstance(exc, SelectorMissing):
        kind = ErrorKind.EXTRACTION_SELECTOR_MISSING
    elif isinstance(exc, EmptyResult):
        kind = ErrorKind.EXTRACTION_EMPTY_RESULT
    elif isinstance(exc, MonthParseError):
        kind = ErrorKind.MONTH_PARSE_FAILURE
    elif isinstance(exc, NotificationError):
        kind = ErrorKind.NOTIFICATION_TRANSPORT_FAILURE
    elif isinstance(exc, DeserializationError):
        kind = ErrorKind.DESERIALIZATION_FAILURE
    else:
        return ClassifiedError(
            kind=ErrorKind.UNCLASSIFIED,
            message=f"{type(exc).__name__}: {exc}",
        )

    return ClassifiedError(
        kind=kind,
        message=str(exc),
        selector=getattr(exc, "selector", ""),
        document=getattr(exc, "document", ""),
    )


def decide(
    error: ClassifiedError | None,
    suspend_for: timedelta = DEFAULT_SUSPENSION,
) -> Action:
    """Look up what to do about a classified failure."""
    if error is None:
        return SILENT
    kind, escalate, severity = _POLICY[error.kind]
    return Action(
        kind=kind,
        escalate=escalate,
        severity=severity,
        suspend_for=suspend_for if kind in _SUSPENDING else None,
    )
