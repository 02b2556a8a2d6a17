"""Best-effort browser launching for the authorization-code flow."""

from __future__ import annotations

import logging
import webbrowser

logger = logging.getLogger(__name__)


def launch_browser(url: str) -> bool:
    """Open *url* in the user's default browser.

    Never raises: a missing or broken browser only means the user has to
    navigate to the URL manually.

    Returns:
        ``True`` if a browser accepted the URL, ``False`` otherwise.
    """
    try:
        opened = webbrowser.open(url)
    except webbrowser.Error as exc:
        logger.debug("Browser launch failed: %s", exc)
        return False
    return bool(opened)
