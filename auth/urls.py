from __future__ import annotations

import urllib.parse


def append_query_params(url: str, params: dict[str, str]) -> str:
    parsed = urllib.parse.urlparse(url)
    existing = urllib.parse.parse_qs(parsed.query, keep_blank_values=True)
    for key, value in params.items():
        existing[key] = [value]

    new_query = urllib.parse.urlencode(existing, doseq=True)
    return urllib.parse.urlunparse(parsed._replace(query=new_query))


def root_redirect_url(base_url: str, params: dict[str, str] | None = None) -> str:
    """Absolute URL of the application root, with optional query parameters."""
    root = urllib.parse.urljoin(base_url, "/")
    if not params:
        return root
    return append_query_params(root, params)
