"""
HTTP client configuration for appliance communication.

Provides session setup with retry policy, browser-like headers and an
optional caller-supplied server-certificate acceptance callback.
"""

import ssl
from collections.abc import Callable
from http.cookiejar import DefaultCookiePolicy
from typing import Any

import requests
import urllib3
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..config import MAX_RETRIES, USER_AGENT

# (hostname, DER-encoded peer certificate) -> accept?
CertificateCheck = Callable[[str | None, bytes | None], bool]


class _CallbackSSLContext(ssl.SSLContext):
    """SSL context that hands the peer certificate to a callback right after
    the handshake and aborts the connection when the callback rejects it."""

    certificate_check: CertificateCheck | None = None

    def wrap_socket(self, sock, *args, **kwargs):
        tls_sock = super().wrap_socket(sock, *args, **kwargs)
        hostname = kwargs.get("server_hostname")
        der = tls_sock.getpeercert(binary_form=True)
        if self.certificate_check is not None and not self.certificate_check(hostname, der):
            tls_sock.close()
            raise ssl.SSLCertVerificationError(
                f"Server certificate for {hostname} rejected by certificate check"
            )
        return tls_sock


def _callback_context(certificate_check: CertificateCheck) -> _CallbackSSLContext:
    context = _CallbackSSLContext(ssl.PROTOCOL_TLS_CLIENT)
    # The callback is the only trust decision; chain and hostname checks
    # are delegated to it.
    context.check_hostname = False
    context.verify_mode = ssl.CERT_NONE
    context.certificate_check = certificate_check
    return context


class CertificateCheckAdapter(HTTPAdapter):
    """
    HTTPAdapter whose TLS connections are accepted or refused by
    *certificate_check* instead of the default CA verification.

    Usage:
        session = requests.Session()
        session.mount("https://", CertificateCheckAdapter(check))
        session.verify = False
    """

    def __init__(self, certificate_check: CertificateCheck, **kwargs: Any) -> None:
        self._certificate_check = certificate_check
        super().__init__(**kwargs)

    def init_poolmanager(self, *args: Any, **kwargs: Any) -> Any:
        kwargs["ssl_context"] = _callback_context(self._certificate_check)
        return super().init_poolmanager(*args, **kwargs)

    def proxy_manager_for(self, proxy: str, **proxy_kwargs: Any) -> Any:
        proxy_kwargs["ssl_context"] = _callback_context(self._certificate_check)
        return super().proxy_manager_for(proxy, **proxy_kwargs)


def build_session(
    verify_ssl: bool = True,
    certificate_check: CertificateCheck | None = None,
    max_retries: int = MAX_RETRIES,
) -> requests.Session:
    """
    Return a requests.Session pre-configured for talking to the appliance.

    Args:
        verify_ssl: Whether to verify TLS certificates against the CA bundle
        certificate_check: Optional callback deciding whether to accept the
            server certificate; replaces CA verification when given
        max_retries: Connection retries for idempotent requests

    Returns:
        Configured requests.Session instance
    """
    session = requests.Session()
    retry = Retry(
        total=max_retries,
        backoff_factor=0.5,
        allowed_methods=frozenset({"GET", "HEAD"}),
        raise_on_status=False,
    )
    session.mount("http://", HTTPAdapter(max_retries=retry))
    if certificate_check is not None:
        session.mount("https://", CertificateCheckAdapter(certificate_check, max_retries=retry))
        verify_ssl = False
    else:
        session.mount("https://", HTTPAdapter(max_retries=retry))
    session.verify = verify_ssl
    if not verify_ssl:
        urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

    # The session cookie is owned by SessionManager and attached per request;
    # the jar must never keep its own copy.
    session.cookies.set_policy(DefaultCookiePolicy(allowed_domains=[]))

    session.headers.update({
        "User-Agent": USER_AGENT,
        "Accept": "text/html,application/xhtml+xml",
        "Connection": "keep-alive",
    })
    return session


def join_url(base_url: str, relative_path: str) -> str:
    """
    Join the appliance root URL and a page path.

    Args:
        base_url: Appliance root URL (e.g. 'https://192.168.1.1/')
        relative_path: Page path such as 'system_gateways.php'

    Returns:
        Absolute URL string
    """
    return base_url.rstrip("/") + "/" + relative_path.lstrip("/")
