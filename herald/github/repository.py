"""Turn VCS root URLs into GitHub repository identities.

Two spellings are recognised:

- SCP-style shorthand such as ``git@github.com:acme/widgets.git``;
- standard URLs such as ``https://github.com/acme/widgets`` or
  ``ssh://git@ghe.example.com/acme/widgets.git?ref=main``.

Parsing never raises. Callers receive either a :class:`RepositoryIdentity`
or an :class:`IdentityParseFailure` and branch on the type.

Examples
--------
>>> parse_repository_identity("git@github.com:acme/widgets.git")
RepositoryIdentity(owner='acme', name='widgets')
>>> parse_repository_identity("https://github.com/acme").reason
'path has no repository segment'

"""

from __future__ import annotations

import dataclasses
import re
from urllib.parse import urlsplit

from .models import RepositoryIdentity

_SCP_PATTERN = re.compile(
    r"^(?P<user>[^@/:]+)@(?P<host>[^:/]+):(?P<owner>[^/]+)/(?P<rest>.+)$"
)
_GIT_SUFFIX = ".git"


@dataclasses.dataclass(frozen=True, slots=True)
class IdentityParseFailure:
    """Explains why a VCS URL could not be mapped to a repository."""

    uri: str
    reason: str


type IdentityParseResult = RepositoryIdentity | IdentityParseFailure


def _strip_git_suffix(name: str) -> str:
    name = name.rstrip("/")
    if name.endswith(_GIT_SUFFIX):
        return name[: -len(_GIT_SUFFIX)]
    return name


def _looks_like_scp(uri: str) -> bool:
    """Return True for ``user@host:path`` strings without a URL scheme."""
    if "://" in uri or "@" not in uri:
        return False
    slash = uri.find("/")
    head = uri if slash < 0 else uri[:slash]
    return "@" in head and ":" in head


def _identity(uri: str, owner: str, rest: str) -> IdentityParseResult:
    name = _strip_git_suffix(rest)
    if not owner:
        return IdentityParseFailure(uri, "repository owner is empty")
    if not name:
        return IdentityParseFailure(uri, "repository name is empty")
    return RepositoryIdentity(owner=owner, name=name)


def _parse_scp(uri: str) -> IdentityParseResult:
    match = _SCP_PATTERN.match(uri)
    if match is None:
        return IdentityParseFailure(uri, "not a valid user@host:owner/repo address")
    return _identity(uri, match.group("owner"), match.group("rest"))


def _parse_url(uri: str) -> IdentityParseResult:
    try:
        parts = urlsplit(uri)
    except ValueError as exc:
        return IdentityParseFailure(uri, f"malformed URL: {exc}")

    if not parts.scheme:
        return IdentityParseFailure(uri, "URL has no scheme")
    if not parts.netloc:
        return IdentityParseFailure(uri, "URL has no host")

    path = parts.path
    if not path:
        return IdentityParseFailure(uri, "path is empty")

    path = path.removeprefix("/")
    owner, sep, rest = path.partition("/")
    if not sep or not owner:
        return IdentityParseFailure(uri, "path has no repository segment")
    return _identity(uri, owner, rest)


def parse_repository_identity(uri: str) -> IdentityParseResult:
    """Parse a VCS root URL into an owner/name pair.

    Parameters
    ----------
    uri
        Raw repository connection string from the VCS root.

    Returns
    -------
    RepositoryIdentity | IdentityParseFailure
        The identity, or a failure carrying the input and a reason.

    """
    candidate = uri.strip()
    if not candidate:
        return IdentityParseFailure(uri, "repository URL is empty")
    if _looks_like_scp(candidate):
        return _parse_scp(candidate)
    return _parse_url(candidate)
