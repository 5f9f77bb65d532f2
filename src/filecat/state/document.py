"""Markdown wrapper around the JSON metadata payload."""

from __future__ import annotations

import textwrap

from .errors import StateParseError

OPEN_FENCE = "```json"
CLOSE_FENCE = "```"

DOCUMENT_HEADER = textwrap.dedent(
    """\
    # filecat metadata

    The JSON block below is the metadata used by filecat. Do not break its structure when
    editing by hand.
    """
)


def render_document(payload: str) -> str:
    """Wrap a JSON payload in the metadata document template.

    Backticks can only occur inside JSON strings, so they are written as
    ``\\u0060`` escapes and a value can never close the fence early.
    """
    escaped = payload.replace("`", "\\u0060")
    return f"{DOCUMENT_HEADER}\n{OPEN_FENCE}\n{escaped}\n{CLOSE_FENCE}\n"


def extract_payload(text: str) -> str:
    """Return the contents of the first ```json fenced block.

    The opening fence is matched case-insensitively and the payload starts on
    the line after it.

    Raises:
        StateParseError: If the block is missing, unterminated, or blank.
    """
    start = text.lower().find(OPEN_FENCE)
    if start < 0:
        raise StateParseError("No ```json block found in metadata document.")
    start = text.find("\n", start)
    if start < 0:
        raise StateParseError("Metadata block has no content.")
    end = text.find(CLOSE_FENCE, start + 1)
    if end < 0:
        raise StateParseError("Metadata block is not terminated.")

    payload = text[start + 1 : end].strip()
    if not payload:
        raise StateParseError("Metadata block is empty.")
    return payload


__all__ = ["DOCUMENT_HEADER", "render_document", "extract_payload"]
