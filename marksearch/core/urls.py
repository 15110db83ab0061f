"""URL normalization helpers."""

import re
from urllib.parse import quote

_PROTOCOL_RE = re.compile(r"^(https?://)?(www\.)?", re.IGNORECASE)
_SCHEME_RE = re.compile(r"^[a-z][a-z0-9+.-]*://", re.IGNORECASE)
_URL_LIKE_RE = re.compile(
    r"^(?:[a-z][a-z0-9+.-]*://\S+"
    r"|localhost(?::\d+)?(?:/\S*)?"
    r"|(?:[\w-]+\.)+[a-z]{2,}(?::\d+)?(?:[/?#]\S*)?)$",
    re.IGNORECASE,
)


def strip_trailing_slash(url: str) -> str:
    """Remove a single trailing slash."""
    return url[:-1] if url.endswith("/") else url


def clean_up_url(url: str) -> str:
    """Reduce a URL to its display and matching form.

    Strips the http(s) scheme, a leading ``www.`` and one trailing slash,
    then lowercases the result.
    """
    return strip_trailing_slash(_PROTOCOL_RE.sub("", url)).lower()


def looks_like_url(term: str) -> bool:
    """Check whether a search term could be navigated to directly."""
    term = term.strip()
    if not term or " " in term:
        return False
    return bool(_URL_LIKE_RE.match(term))


def to_navigable_url(term: str) -> str:
    """Turn a URL-like term into an absolute URL."""
    term = term.strip()
    if _SCHEME_RE.match(term):
        return term
    return f"https://{term}"


def build_search_url(url_prefix: str, term: str) -> str:
    """Build a search-engine URL for a term.

    ``$s`` in the prefix is replaced with the URL-encoded term; prefixes
    without a placeholder get the term appended.
    """
    encoded = quote(term, safe="")
    if "$s" in url_prefix:
        return url_prefix.replace("$s", encoded)
    return url_prefix + encoded
