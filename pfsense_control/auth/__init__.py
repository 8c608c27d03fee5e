"""Authentication submodule – session manager, login form handling, secret holder."""

from pfsense_control.auth.login import (
    build_login_payload,
    find_login_form,
    is_login_page,
    session_cookie_from_headers,
)
from pfsense_control.auth.secret import SessionSecret
from pfsense_control.auth.session import SessionManager

__all__ = [
    "SessionManager",
    "SessionSecret",
    "build_login_payload",
    "find_login_form",
    "is_login_page",
    "session_cookie_from_headers",
]
