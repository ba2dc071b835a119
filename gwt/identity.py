"""Derive a canonical project identity from the origin remote URL."""

from __future__ import annotations

import re

from .models import ProjectIdentity

LOCAL_HOST = "local"

_SSH_RE = re.compile(r"^[^@/:\s]+@(?P<host>[^:/\s]+):(?P<owner>[^/\s]+)/(?P<name>[^/\s]+?)(?:\.git)?/?$")
_URL_RE = re.compile(
    r"^[A-Za-z][A-Za-z0-9+.-]*://(?:[^@/\s]+@)?(?P<host>[^/\s]+)/(?P<owner>[^/\s]+)/(?P<name>[^/\s]+?)(?:\.git)?/?$"
)

# SSH is tried before URL syntax; the first match wins.
_PATTERNS = (_SSH_RE, _URL_RE)


def resolve_identity(remote_url: str | None, fallback_name: str) -> ProjectIdentity:
    """Return ``host/owner/name`` for ``remote_url`` or a local fallback.

    Unparsable or missing URLs never raise; they degrade to
    ``ProjectIdentity("local", "", fallback_name)``.
    """

    url = (remote_url or "").strip()
    for pattern in _PATTERNS:
        match = pattern.match(url)
        if match and match.group("name"):
            return ProjectIdentity(
                host=match.group("host"),
                owner=match.group("owner"),
                name=match.group("name"),
            )
    return local_identity(fallback_name)


def local_identity(fallback_name: str) -> ProjectIdentity:
    return ProjectIdentity(host=LOCAL_HOST, owner="", name=fallback_name)


__all__ = ["resolve_identity", "local_identity", "LOCAL_HOST"]
