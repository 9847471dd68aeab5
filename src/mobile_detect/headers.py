"""HTTP header helpers used to build detection context.

Headers are kept in CGI/WSGI style (``HTTP_USER_AGENT``) regardless of whether
they arrive as a WSGI environ or as raw header names (``User-Agent``).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping

# Headers that may carry the device's user agent, in lookup order.
USER_AGENT_HEADERS: tuple[str, ...] = (
    "HTTP_USER_AGENT",
    "HTTP_X_OPERAMINI_PHONE_UA",
    "HTTP_X_DEVICE_USER_AGENT",
    "HTTP_X_ORIGINAL_USER_AGENT",
    "HTTP_X_SKYFIRE_PHONE",
    "HTTP_X_BOLT_PHONE_UA",
    "HTTP_DEVICE_STOCK_UA",
    "HTTP_X_UCBROWSER_DEVICE_UA",
)

# CGI/WSGI environ variables that are not request headers.
_CGI_VARIABLES = frozenset(
    {
        "AUTH_TYPE",
        "CONTENT_LENGTH",
        "CONTENT_TYPE",
        "GATEWAY_INTERFACE",
        "PATH_INFO",
        "PATH_TRANSLATED",
        "QUERY_STRING",
        "REMOTE_ADDR",
        "REMOTE_HOST",
        "REMOTE_IDENT",
        "REMOTE_USER",
        "REQUEST_METHOD",
        "REQUEST_URI",
        "SCRIPT_NAME",
        "SERVER_NAME",
        "SERVER_PORT",
        "SERVER_PROTOCOL",
        "SERVER_SOFTWARE",
    }
)


def normalize_header_name(name: str) -> str:
    """Return ``name`` as an ``HTTP_UPPER_SNAKE`` key.

    >>> normalize_header_name("User-Agent")
    'HTTP_USER_AGENT'
    """
    normalized = name.strip().upper().replace("-", "_")
    if normalized.startswith("HTTP_"):
        return normalized
    return f"HTTP_{normalized}"


def normalize_headers(headers: Mapping[str, object]) -> dict[str, str]:
    """Keep only HTTP headers, with normalized names and string values.

    CGI variables (``REQUEST_METHOD``, ``CONTENT_TYPE``...) and dotted WSGI
    keys (``wsgi.input``) are dropped; every other name is prefixed.
    """
    normalized: dict[str, str] = {}
    for name, value in headers.items():
        if "." in name or name in _CGI_VARIABLES:
            continue
        normalized[normalize_header_name(name)] = str(value)
    return normalized


def user_agent_from_headers(headers: Mapping[str, str]) -> str | None:
    """Join every user-agent-bearing header into one string, or ``None``."""
    parts = [headers[name] for name in USER_AGENT_HEADERS if headers.get(name)]
    if not parts:
        return None
    return " ".join(parts).strip()


def flatten_headers(headers: Mapping[str, object]) -> str:
    """Flatten headers to ``"NAME: value"`` lines, preserving insertion order."""
    return "\n".join(f"{name}: {value}" for name, value in headers.items())
