"""Error kinds raised by the notifier pipeline.

Every failure surfaces as one of a closed set of kinds. The ``from_*``
helpers wrap a collaborator's native exception into the right kind; callers
raise the result with ``raise ... from err`` so the cause is kept.
"""

import smtplib
from typing import Any, Dict, Optional


class NotifierError(Exception):
    """Base exception for the notifier pipeline."""

    kind = "NotifierError"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return f"{self.kind}: {self.message}"


class ConfigError(NotifierError):
    """Configuration file is missing, unreadable or invalid."""

    kind = "ConfigError"


class NetworkError(NotifierError):
    """Fetching the remote feed failed at the transport level."""

    kind = "NetworkError"


class ParseError(NotifierError):
    """A body is not a well-formed feed document."""

    kind = "ParseError"


class StorageError(NotifierError):
    """The local snapshot is missing, unreadable, corrupt or unwritable."""

    kind = "StorageError"


class RenderError(NotifierError):
    """The mail template failed to resolve or render."""

    kind = "RenderError"


class MailError(NotifierError):
    """Building, authenticating or delivering the message failed."""

    kind = "MailError"


def from_io_error(err: OSError, path: str) -> StorageError:
    return StorageError(f"cannot access snapshot {path}: {err}", {"path": path})


def from_http_error(err: Exception, url: str) -> NetworkError:
    return NetworkError(f"failed to fetch {url}: {err}", {"url": url})


def from_parse_error(err: Exception, source: str) -> ParseError:
    return ParseError(f"{source} is not a well-formed feed: {err}", {"source": source})


def from_template_error(err: Exception, template: str) -> RenderError:
    return RenderError(f"failed to render {template}: {err}", {"template": template})


def from_smtp_error(err: Exception, server: str) -> MailError:
    details: Dict[str, Any] = {"server": server}
    if isinstance(err, smtplib.SMTPAuthenticationError):
        details["smtp_code"] = err.smtp_code
        return MailError(f"authentication with {server} failed: {err}", details)
    return MailError(f"failed to send mail via {server}: {err}", details)
