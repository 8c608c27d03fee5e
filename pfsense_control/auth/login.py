"""Login-page recognition and login form construction."""

import re

from ..config import (
    CSRF_FIELD,
    LOGIN_FORM_SELECTOR,
    LOGIN_PASS_FIELD,
    LOGIN_SUBMIT,
    LOGIN_USER_FIELD,
    SESSION_COOKIE,
)
from ..exceptions import AuthenticationError
from ..extraction.html_parser import parse_document

_SESSION_COOKIE_RE = re.compile(rf"(?:^|[\s,;]){SESSION_COOKIE}=([^;,\s]+)")


def find_login_form(html: str):
    """Return the appliance's login ``<form>`` element, or None."""
    return parse_document(html).select_one(LOGIN_FORM_SELECTOR)


def is_login_page(html: str) -> bool:
    """
    Return True when *html* is the appliance's sign-in page.

    pfSense answers any page request with an invalid session by rendering
    the login form in place (HTTP 200), so this is the only reliable
    session-expiry signal.
    """
    if not html or LOGIN_USER_FIELD not in html:
        return False
    return find_login_form(html) is not None


def login_csrf_token(form) -> str:
    """Return the ``__csrf_magic`` value of the login *form*."""
    field = form.find("input", attrs={"name": CSRF_FIELD})
    if field is None or field.get("value") is None:
        raise AuthenticationError(
            f"Login form has no {CSRF_FIELD} hidden field; unsupported login page"
        )
    return field["value"]


def build_login_payload(csrf_token: str, username: str, password: str) -> dict[str, str]:
    return {
        CSRF_FIELD: csrf_token,
        LOGIN_USER_FIELD: username,
        LOGIN_PASS_FIELD: password,
        LOGIN_SUBMIT[0]: LOGIN_SUBMIT[1],
    }


def session_cookie_from_headers(headers) -> str | None:
    """
    Extract the session id from a response's ``Set-Cookie`` header(s).

    requests folds repeated ``Set-Cookie`` headers into one comma-separated
    value, so the cookie is searched for anywhere in it.
    """
    raw = headers.get("Set-Cookie") if headers else None
    if not raw:
        return None
    matches = _SESSION_COOKIE_RE.findall(raw)
    if not matches:
        return None
    value = matches[-1]
    # PHP expires a session by sending the literal "deleted"
    return None if value == "deleted" else value
