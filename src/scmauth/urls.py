"""URL parsing and host extraction.

Host comparison uses the URL *host* in the browser sense: the lower-cased,
IDNA-encoded hostname followed by ``:port`` when the port is not the
scheme's default. ``https://GitHub.com:443/x`` therefore has host
``github.com`` while ``https://github.com:8443/x`` has host
``github.com:8443``.

String input is cleaned the way browsers clean it before parsing: leading
and trailing C0 control characters and spaces are dropped, and tab, CR and
LF are removed wherever they appear.
"""

from __future__ import annotations

import httpx

from scmauth.exceptions import MalformedUrlError

_C0_OR_SPACE = "".join(chr(c) for c in range(0x21))
_TAB_OR_NEWLINE = str.maketrans("", "", "\t\r\n")


def _clean(url: str) -> str:
    return url.strip(_C0_OR_SPACE).translate(_TAB_OR_NEWLINE)


def parse_url(url: str | httpx.URL) -> httpx.URL:
    """Parse *url* into an absolute :class:`httpx.URL`.

    Raises:
        MalformedUrlError: If *url* is not valid, is relative, or has no host.
    """
    if isinstance(url, httpx.URL):
        parsed = url
    else:
        try:
            parsed = httpx.URL(_clean(url))
        except (httpx.InvalidURL, TypeError, AttributeError) as exc:
            raise MalformedUrlError(str(url), str(exc)) from exc
    if not parsed.scheme:
        raise MalformedUrlError(str(url), "URL must be absolute")
    if not parsed.host:
        raise MalformedUrlError(str(url), "URL has no host")
    return parsed


def url_host(url: httpx.URL) -> str:
    """Return the ``host[:port]`` of a parsed URL."""
    return url.netloc.decode("ascii")
