"""
URL resolution: turns raw href values into normalized absolute addresses.
"""

from typing import Iterable, Optional
from urllib.parse import urljoin, urlsplit, urlunsplit

from ..utils.errors import (
    InvalidStartingUrlError,
    MalformedUrlError,
    ResolutionError,
    UnsupportedSchemeError,
    UrlTooLongError,
)

DEFAULT_MAX_URL_LENGTH = 2048
DEFAULT_ALLOWED_SCHEMES = ('http', 'https')

# Schemes whose URLs are meaningless without an authority component
HIERARCHICAL_SCHEMES = {'http', 'https', 'ftp', 'ws', 'wss'}
DEFAULT_PORTS = {'http': 80, 'https': 443, 'ws': 80, 'wss': 443, 'ftp': 21}


def _remove_dot_segments(path: str) -> str:
    """Resolve '.' and '..' segments of an absolute path (RFC 3986 5.2.4)."""
    segments = path.split('/')
    resolved = []
    for segment in segments:
        if segment == '..':
            # resolved[0] is the empty segment before the leading slash
            if len(resolved) > 1:
                resolved.pop()
        elif segment != '.':
            resolved.append(segment)

    if segments[-1] in ('.', '..'):
        resolved.append('')

    return '/'.join(resolved) or '/'


def _normalize_netloc(parsed, scheme: str) -> str:
    userinfo, at, _ = parsed.netloc.rpartition('@')
    host = parsed.hostname or ''
    if ':' in host:
        host = f'[{host}]'

    port = parsed.port
    if port is not None and DEFAULT_PORTS.get(scheme) != port:
        host = f'{host}:{port}'

    # Userinfo keeps its case
    return f'{userinfo}@{host}' if at else host


def normalize_url(url: str) -> str:
    """
    Normalize an absolute URL.

    Lower-cases scheme and host, drops the scheme's default port, resolves
    dot segments, gives an empty path on a URL with a host the root path,
    and drops the fragment.

    Raises:
        ValueError: The URL has an invalid host or port
    """
    parsed = urlsplit(url)
    scheme = parsed.scheme.lower()

    path = parsed.path
    if path.startswith('/'):
        path = _remove_dot_segments(path)

    netloc = parsed.netloc
    if netloc:
        netloc = _normalize_netloc(parsed, scheme)
        if not path:
            path = '/'

    return urlunsplit((
        scheme,
        netloc,
        path,
        parsed.query,
        ''  # Remove fragment
    ))


def _is_absolute(link: str) -> bool:
    parsed = urlsplit(link)
    if not parsed.scheme:
        return False
    if parsed.scheme.lower() in HIERARCHICAL_SCHEMES:
        return bool(parsed.netloc)
    return True


def resolve(raw_link: str, base: Optional[str],
            max_url_length: int = DEFAULT_MAX_URL_LENGTH,
            allowed_schemes: Iterable[str] = DEFAULT_ALLOWED_SCHEMES) -> str:
    """
    Resolve a raw link against the address of the page it was found on.

    Args:
        raw_link: The href value as it appeared in the markup
        base: Absolute address of the containing page, or None
        max_url_length: Longest address accepted
        allowed_schemes: Schemes the crawler is willing to fetch

    Returns:
        The normalized absolute address

    Raises:
        MalformedUrlError: The link cannot be parsed or joined
        UnsupportedSchemeError: The link points outside allowed_schemes
        UrlTooLongError: The resolved address is longer than max_url_length
    """
    link = raw_link.strip()

    try:
        if _is_absolute(link):
            candidate = link
        elif base:
            candidate = urljoin(base, link)
        else:
            raise MalformedUrlError(f"Relative link without a base: {raw_link!r}", raw_link)

        parsed = urlsplit(candidate)
        # Accessing port validates it
        parsed.port
    except ValueError as e:
        raise MalformedUrlError(f"Could not parse link {raw_link!r}: {e}", raw_link) from e

    scheme = parsed.scheme.lower()
    if not scheme:
        raise MalformedUrlError(f"Link has no scheme after joining: {raw_link!r}", raw_link)

    if scheme not in {s.lower() for s in allowed_schemes}:
        raise UnsupportedSchemeError(f"Unsupported scheme {scheme!r}: {raw_link!r}", raw_link)

    if scheme in HIERARCHICAL_SCHEMES and not parsed.hostname:
        raise MalformedUrlError(f"Link has no host: {raw_link!r}", raw_link)

    address = normalize_url(candidate)

    if len(address) > max_url_length:
        raise UrlTooLongError(
            f"Resolved URL is {len(address)} characters (max {max_url_length})",
            raw_link,
            details={'length': len(address), 'max_url_length': max_url_length}
        )

    return address


def parse_starting_url(url: str, max_url_length: int = DEFAULT_MAX_URL_LENGTH,
                       allowed_schemes: Iterable[str] = DEFAULT_ALLOWED_SCHEMES) -> str:
    """Validate and normalize the seed address. Failure here is fatal."""
    if not url:
        raise InvalidStartingUrlError("A starting URL is required")
    try:
        return resolve(url, None, max_url_length, allowed_schemes)
    except ResolutionError as e:
        raise InvalidStartingUrlError(
            f"Invalid starting URL {url!r}: {e.message}",
            details={'reason': e.reason}
        ) from e
