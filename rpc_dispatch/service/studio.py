"""Studio page: a web UI for exploring and testing a service."""
import re

import httpx

from ..utils.errors import InvalidStudioUrlError

DEFAULT_STUDIO_APP_JS_URL = "https://cdn.jsdelivr.net/npm/skir-studio/dist/skir-studio-standalone.js"

# Characters allowed in a URI reference: unreserved, reserved and '%'.
_URI_CHARACTERS = re.compile(r"[A-Za-z0-9\-._~:/?#\[\]@!$&'()*+,;=%]*")
_BAD_PERCENT_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")

STUDIO_HTML_TEMPLATE = """<!DOCTYPE html>

<html>
  <head>
    <meta charset="utf-8" />
    <title>Skir Studio</title>
    <script src="{studio_app_js_url}"></script>
  </head>
  <body style="margin: 0; padding: 0;">
    <skir-studio-app></skir-studio-app>
  </body>
</html>
"""


def normalize_studio_app_js_url(url: str) -> str:
    """Validate the URL of the studio script and return its normalized form.

    Absolute URLs and relative references such as '/static/studio.js' are
    both accepted. Characters which are not allowed in a URI, including
    quotes and angle brackets, are rejected, so the result can be embedded
    in HTML without escaping.

    Raises:
        InvalidStudioUrlError: If the URL is malformed
    """
    if not _URI_CHARACTERS.fullmatch(url) or _BAD_PERCENT_ESCAPE.search(url):
        raise InvalidStudioUrlError(f"Invalid studio app URL: {url!r}")
    try:
        return str(httpx.URL(url))
    except httpx.InvalidURL as e:
        raise InvalidStudioUrlError(f"Invalid studio app URL: {url!r}") from e


def get_studio_html(studio_app_js_url: str) -> str:
    """HTML page loading the studio app from a validated URL."""
    return STUDIO_HTML_TEMPLATE.format(studio_app_js_url=studio_app_js_url)
