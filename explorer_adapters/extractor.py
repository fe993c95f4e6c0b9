"""
Embedded-State Extractor - Pulls the appState JSON out of explorer HTML.

The explorer server-renders its page state into
<script id="appState" type="application/json">. The shape of that
payload belongs to a third party; nothing here interprets it.
"""

import json
import logging
from typing import Any

from bs4 import BeautifulSoup

from explorer_adapters.exceptions import StateNotFoundError, StateParseError


logger = logging.getLogger(__name__)


APP_STATE_SELECTOR = 'script#appState[type="application/json"]'
SNIPPET_LENGTH = 200


def extract_app_state(html: str) -> Any:
    """
    Parse HTML and return the decoded appState payload.

    Raises:
        StateNotFoundError: Element absent or empty
        StateParseError: Element content is not valid JSON
    """
    soup = BeautifulSoup(html or "", "html.parser")
    element = soup.select_one(APP_STATE_SELECTOR)

    text = element.string if element is not None else None
    if text is None and element is not None:
        text = element.get_text()

    if not text:
        raise StateNotFoundError(
            "OKLink appState not found",
            adapter_name="oklink",
            context={"html_length": len(html or "")},
        )

    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        logger.warning(f"[oklink] appState is not valid JSON: {e}")
        raise StateParseError(
            f"OKLink appState is not valid JSON: {e.msg}",
            adapter_name="oklink",
            snippet=text[:SNIPPET_LENGTH],
            original_error=e,
        )
