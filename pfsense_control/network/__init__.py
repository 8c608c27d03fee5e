"""
Network operations module for HTTP client setup.
"""

from pfsense_control.network.client import (
    CertificateCheck,
    CertificateCheckAdapter,
    build_session,
    join_url,
)

__all__ = ["CertificateCheck", "CertificateCheckAdapter", "build_session", "join_url"]
