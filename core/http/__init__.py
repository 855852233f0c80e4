"""HTTP client utilities and session management."""

from core.http.blocklist import DEFAULT_FORBIDDEN_HOSTS, is_forbidden_host
from core.http.session import cleanup_session, get_session
from core.http.transport import HttpTransport, TransportResponse

__all__ = [
    "DEFAULT_FORBIDDEN_HOSTS",
    "HttpTransport",
    "TransportResponse",
    "cleanup_session",
    "get_session",
    "is_forbidden_host",
]
