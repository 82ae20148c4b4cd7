"""
URL Cleaner

Normalizes URLs for the POST /url/clean endpoint.

Operations:
- canonical: drop the query string and fragment, trim one trailing "/"
- redirection: force https, lowercase the host and prefix "www.",
  lowercase the path
- all: canonical followed by redirection

Example:
    >>> clean_url("https://BYFOOD.com/food-EXPeriences?query=abc/", CleanOperation.ALL)
    'https://www.byfood.com/food-experiences'
"""

from urllib.parse import urlsplit, urlunsplit

from booklib.exceptions import ValidationError
from booklib.schemas.url import CleanOperation


def _parse(url: str):
    try:
        parts = urlsplit(url.strip())
    except ValueError as e:
        raise ValidationError(f"Invalid URL: {e}") from e

    if not parts.scheme or not parts.netloc:
        raise ValidationError("Invalid URL: scheme and host are required")
    return parts


def canonicalize(url: str) -> str:
    parts = _parse(url)
    path = parts.path[:-1] if parts.path.endswith("/") else parts.path
    return urlunsplit((parts.scheme, parts.netloc, path, "", ""))


def redirect(url: str) -> str:
    parts = _parse(url)
    host = parts.netloc.lower()
    if not host.startswith("www."):
        host = f"www.{host}"
    return urlunsplit(("https", host, parts.path.lower(), parts.query, parts.fragment))


def clean_url(url: str, operation: CleanOperation) -> str:
    """
    Apply a cleaning operation to a URL.

    Raises:
        ValidationError: If the URL cannot be parsed or has no host
    """
    if operation == CleanOperation.CANONICAL:
        return canonicalize(url)
    if operation == CleanOperation.REDIRECTION:
        return redirect(url)
    return redirect(canonicalize(url))
