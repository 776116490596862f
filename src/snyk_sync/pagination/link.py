from __future__ import annotations

import re

# link-values are separated by commas, but a URL may itself contain commas
_LINK_VALUE_SEP = re.compile(r",\s*(?=<)")


def _rel(params: list[str]) -> str | None:
    for param in params:
        p = param.strip()
        if p.lower().startswith("rel="):
            return p[len("rel="):].strip().strip('"').lower()
    return None


def _split_value(value: str) -> tuple[str, list[str]]:
    value = value.strip()
    if value.startswith("<"):
        end = value.find(">")
        if end != -1:
            return value[1:end].strip(), value[end + 1:].split(";")
    parts = value.split(";")
    return parts[0].strip().strip("<>").strip(), parts[1:]


def parse_link(link: str | None) -> str:
    """
    Extract the next-page URL from a `Link` response header.

    Returns "" when there are no further pages: an empty header, or a header
    whose only relation is ``rel="last"``. A link-value without any ``rel``
    parameter is treated as the next page.
    """
    if not link or not link.strip():
        return ""

    for value in _LINK_VALUE_SEP.split(link):
        url, params = _split_value(value)
        if not url:
            continue

        rel = _rel(params)
        if rel is None or rel == "next":
            return url
        # rel="last" (or prev/first): not a next page

    return ""
