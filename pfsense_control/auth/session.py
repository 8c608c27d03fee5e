"""
pfsense_control.auth.session
============================
The authenticated session against the appliance's web UI.

Responsibilities
----------------
* Log in by replaying the sign-in form (``__csrf_magic`` + credentials);
  the appliance answers a successful login with ``302 Found``.
* Attach the current ``PHPSESSID`` to every outgoing request and adopt a
  rotated one from any response's ``Set-Cookie``.
* Wrap transport failures and non-2xx statuses in ``TransportError``.
* Scrub the session id and password on ``close()``.

Requests never follow redirects: mutation endpoints signal success with a
302 whose target has to be checked by the caller.
"""

import threading

import requests

from ..config import LOGIN_PATH, REQUEST_TIMEOUT, SESSION_COOKIE
from ..exceptions import (
    AuthenticationError,
    LoginFormNotFound,
    SessionExpired,
    SessionNotEstablished,
    TransportError,
)
from ..logging_setup import log
from ..network.client import CertificateCheck, build_session, join_url
from .login import (
    build_login_payload,
    find_login_form,
    is_login_page,
    login_csrf_token,
    session_cookie_from_headers,
)
from .secret import SessionSecret


class SessionManager:
    """
    Owns the appliance session: login, cookie rotation, request dispatch.

    A single lock covers reading the session id, sending the request and
    adopting a rotated id, so concurrent callers never pair a request with
    a half-replaced token.
    """

    def __init__(
        self,
        base_url: str,
        username: str,
        password: str,
        *,
        timeout: float = REQUEST_TIMEOUT,
        verify_ssl: bool = True,
        certificate_check: CertificateCheck | None = None,
        http: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url if base_url.endswith("/") else base_url + "/"
        self.username = username
        self.timeout = timeout
        self._password = SessionSecret(password)
        self._session_id: SessionSecret | None = None
        self._established = False
        self._closed = False
        self._lock = threading.RLock()
        self._http = http or build_session(verify_ssl=verify_ssl, certificate_check=certificate_check)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def is_established(self) -> bool:
        return self._established and not self._closed

    def _check_open(self) -> None:
        if self._closed:
            raise SessionNotEstablished("Session manager is closed")

    def _adopt_session_cookie(self, response: requests.Response) -> None:
        new_id = session_cookie_from_headers(response.headers)
        if new_id is None:
            return
        with self._lock:
            if self._session_id is not None and self._session_id.matches(new_id):
                return
            old, self._session_id = self._session_id, SessionSecret(new_id)
            if old is not None:
                old.wipe()
        log.debug("Session cookie rotated by %s", response.url or "response")

    def _drop_session(self) -> None:
        with self._lock:
            self._established = False
            if self._session_id is not None:
                self._session_id.wipe()
                self._session_id = None

    def mark_expired(self) -> None:
        """Mark the session unestablished after the appliance showed its login page."""
        with self._lock:
            self._established = False
        log.warning("Session expired – appliance returned the login page")

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    def create_request(self, method: str, relative_path: str, data: dict | list | None = None) -> requests.Request:
        """Build a request against the appliance root with the session cookie attached."""
        self._check_open()
        request = requests.Request(method.upper(), join_url(self.base_url, relative_path), data=data)
        with self._lock:
            if self._session_id:
                request.headers["Cookie"] = f"{SESSION_COOKIE}={self._session_id._render()}"
        return request

    def _dispatch(self, request: requests.Request) -> requests.Response:
        with self._lock:
            prepared = self._http.prepare_request(request)
            prepared.headers.pop("Cookie", None)
            if self._session_id:
                prepared.headers["Cookie"] = f"{SESSION_COOKIE}={self._session_id._render()}"
            log.debug("%s %s", prepared.method, prepared.url)
            try:
                response = self._http.send(prepared, allow_redirects=False, timeout=self.timeout)
            except requests.Timeout as exc:
                raise TransportError(f"Request timed out: {exc}", url=prepared.url) from exc
            except requests.RequestException as exc:
                raise TransportError(f"Request failed: {exc}", url=prepared.url) from exc
            self._adopt_session_cookie(response)
        log.debug("-> HTTP %s (%d bytes)", response.status_code, len(response.content or b""))
        return response

    def send(self, request: requests.Request, suppress_status_check: bool = False) -> requests.Response:
        """
        Send *request* with the current session cookie.

        Raises SessionNotEstablished before a successful login(), and
        TransportError on failure or (unless *suppress_status_check*) on a
        non-2xx status.
        """
        self._check_open()
        if not self._established:
            raise SessionNotEstablished("Not logged in. Call login() first to establish a session")
        response = self._dispatch(request)
        if not suppress_status_check and not 200 <= response.status_code < 300:
            raise TransportError(
                f"Unexpected HTTP status for {request.method} {request.url}",
                status_code=response.status_code, url=request.url,
            )
        return response

    def get_page(self, relative_path: str) -> str:
        """
        GET a page and return its HTML.

        Raises SessionExpired when the appliance answers with its login
        page instead.
        """
        response = self.send(self.create_request("GET", relative_path))
        html = response.text
        if is_login_page(html):
            self.mark_expired()
            raise SessionExpired(f"Session expired while fetching {relative_path}")
        return html

    # ------------------------------------------------------------------
    # Login
    # ------------------------------------------------------------------

    def login(self) -> None:
        """
        Establish (or confirm) the authenticated session.

        Raises AuthenticationError when credentials are rejected or the
        login form cannot be used, LoginFormNotFound when the root page
        has no login form and no session is held.
        """
        self._check_open()
        root = self._dispatch(self.create_request("GET", ""))
        if not 200 <= root.status_code < 300:
            raise TransportError("Cannot load login page", status_code=root.status_code, url=root.url)

        form = find_login_form(root.text)
        if form is None:
            if not self._session_id:
                raise LoginFormNotFound("root page has no login form and no session is held")
            with self._lock:
                self._established = True
            log.debug("Already authenticated – no login form on root page")
            return

        csrf_token = login_csrf_token(form)
        request = self.create_request(
            "POST", LOGIN_PATH,
            data=build_login_payload(csrf_token, self.username, self._password._render()),
        )
        response = self._dispatch(request)

        if response.status_code != requests.codes.found:
            self._drop_session()
            log.error("Login failed for user %r (HTTP %s)", self.username, response.status_code)
            raise AuthenticationError(
                f"Login failed: expected HTTP 302, got {response.status_code}; check credentials"
            )
        if not self._session_id:
            raise AuthenticationError("Login redirect did not provide a session cookie")

        with self._lock:
            self._established = True
        log.info("Logged in to %s as %r", self.base_url, self.username)

    # ------------------------------------------------------------------
    # Disposal
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Scrub the session id and password and release the transport."""
        if self._closed:
            return
        self._drop_session()
        self._password.wipe()
        self._http.close()
        self._closed = True
        log.debug("Session closed")

    def __enter__(self) -> "SessionManager":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self._closed else ("established" if self._established else "unestablished")
        return f"SessionManager({self.base_url!r}, user={self.username!r}, {state})"
