"""Shared submission and response handling for mutations."""

import urllib.parse
from collections.abc import Callable
from typing import TypeVar

import requests

from ..auth.login import is_login_page
from ..auth.session import SessionManager
from ..exceptions import ProtocolViolation, SessionExpired
from ..logging_setup import log

T = TypeVar("T")


def redirect_target(response: requests.Response) -> str | None:
    """Path of the ``Location`` header relative to the appliance root."""
    location = response.headers.get("Location")
    if not location:
        return None
    return urllib.parse.urlparse(location).path.lstrip("/")


def is_redirect_to(response: requests.Response, page: str) -> bool:
    return response.status_code in (301, 302, 303) and redirect_target(response) == page


def submit_form(manager: SessionManager, page: str, data: list[tuple[str, str]]) -> requests.Response:
    """POST *data* to *page*; redirects are returned, not raised or followed."""
    request = manager.create_request("POST", page, data=data)
    return manager.send(request, suppress_status_check=True)


def refreshed_snapshot(
    manager: SessionManager,
    response: requests.Response,
    page: str,
    parser: Callable[[str], T],
    action: str,
) -> T:
    """
    Turn the answer to a form submission into a fresh snapshot.

    * ``302`` to *page*  -> GET *page* and parse it
    * ``200``            -> parse the body (the page re-rendered in place)
    * anything else      -> ProtocolViolation
    """
    if is_redirect_to(response, page):
        log.debug("%s: redirected to %s, re-fetching", action, page)
        return parser(manager.get_page(page))

    if response.status_code == requests.codes.ok:
        if is_login_page(response.text):
            manager.mark_expired()
            raise SessionExpired(f"{action}: session expired before the submission was accepted")
        return parser(response.text)

    raise ProtocolViolation(
        f"{action}: expected a redirect to {page} or the page itself, got HTTP "
        f"{response.status_code} (Location: {response.headers.get('Location')!r})"
    )
