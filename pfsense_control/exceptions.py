"""
pfsense_control.exceptions
==========================
Error taxonomy shared by every layer of the package.

* ``AuthenticationError``   – login form missing, credentials rejected,
  session expired.  The session must be re-established.
* ``SessionNotEstablished`` – a request was attempted before ``login()``
  (or after ``close()``).
* ``TransportError``        – connectivity, timeout or non-2xx status.
* ``StructureNotFound``     – the appliance's HTML no longer has a
  required element (layout drift).
* ``ValueFormatError``      – a value inside a located element could not
  be converted (unit drift, malformed counters).
* ``ProtocolViolation``     – a mutation's answer did not have the
  expected success shape.
* ``ValidationError``       – a caller-supplied argument fails a
  snapshot precondition.
"""

from __future__ import annotations


class PfSenseError(Exception):
    """Base class for all errors raised by this package."""


class AuthenticationError(PfSenseError):
    """Login failed or the authenticated session is no longer valid."""


class SessionExpired(AuthenticationError):
    """The appliance answered a resource request with its login page."""


class SessionNotEstablished(PfSenseError):
    """Raised when a request is sent before a successful ``login()``."""


class TransportError(PfSenseError):
    """
    Wraps connectivity failures, timeouts and unexpected HTTP statuses.

    Attributes:
        status_code: HTTP status of the response, if one was received
        url: Request URL
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        url: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.url = url

    def __str__(self) -> str:
        parts = [super().__str__()]
        if self.status_code is not None:
            parts.append(f"status={self.status_code}")
        if self.url:
            parts.append(f"url={self.url}")
        return " | ".join(parts)


class StructureNotFound(PfSenseError):
    """
    A required element is missing from a page.

    Attributes:
        resource: Resource being parsed (e.g. ``"gateways"``)
        element: Description of the missing element
    """

    def __init__(self, resource: str, element: str, detail: str | None = None) -> None:
        message = f"{resource}: required element not found: {element}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)
        self.resource = resource
        self.element = element


class LoginFormNotFound(AuthenticationError, StructureNotFound):
    """No login form on the root page and no session to fall back on."""

    def __init__(self, detail: str | None = None) -> None:
        StructureNotFound.__init__(self, "login", "form.login", detail)


class ValueFormatError(PfSenseError, ValueError):
    """
    A field value could not be converted.

    Attributes:
        resource: Resource being parsed, when known
        field: Name of the field being parsed
        raw_value: The text that failed to convert
    """

    def __init__(
        self,
        message: str,
        resource: str | None = None,
        field: str | None = None,
        raw_value: str | None = None,
    ) -> None:
        super().__init__(message)
        self.resource = resource
        self.field = field
        self.raw_value = raw_value

    def __str__(self) -> str:
        parts = [super().__str__()]
        if self.resource:
            parts.append(f"resource={self.resource}")
        if self.field:
            parts.append(f"field={self.field}")
        if self.raw_value is not None:
            shown = self.raw_value if len(self.raw_value) <= 50 else self.raw_value[:50] + "..."
            parts.append(f"raw_value={shown!r}")
        return " | ".join(parts)


class ProtocolViolation(PfSenseError):
    """A mutation was answered with an unexpected status or redirect target."""


class ValidationError(PfSenseError, ValueError):
    """A caller-supplied argument does not satisfy a snapshot precondition."""
