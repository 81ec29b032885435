"""Markdown/HTML cleanup and sentence-safe truncation for post bodies."""

import re

PLACEHOLDER = "Click to read more on Reddit..."
ELLIPSIS = "..."
BOUNDARY_CHARS = ".!?;:"
BOUNDARY_WINDOW = (100, 200)

SUMMARY_LENGTH = 250
PREVIEW_LENGTH = 150

ENTITIES = {
    "&amp;": "&",
    "&lt;": "<",
    "&gt;": ">",
    "&nbsp;": " ",
}

_MARKDOWN_LINK = re.compile(r"\[([^\]]*)\]\(([^)]*)\)")
_RAW_URL = re.compile(r"https?://\S+|www\.[^\s.]\S*")
_ENTITY = re.compile("|".join(re.escape(entity) for entity in ENTITIES))

_MARKDOWN = [
    (re.compile(r"^[ \t]*#{1,6}[ \t]+", re.MULTILINE), ""),     # headers
    (re.compile(r"\*\*(.+?)\*\*", re.DOTALL), r"\1"),            # bold
    (re.compile(r"__(.+?)__", re.DOTALL), r"\1"),
    (re.compile(r"\*([^*\n]+)\*"), r"\1"),                       # italic
    (re.compile(r"^[ \t]*>+[ \t]?", re.MULTILINE), ""),         # quotes
    (re.compile(r"^[ \t]*[-*+][ \t]+", re.MULTILINE), ""),      # lists
    (re.compile(r"^[ \t]*\d+[.)][ \t]+", re.MULTILINE), ""),    # numbered lists
    (re.compile(r"```[\w+-]*"), ""),                             # code fences
    (re.compile(r"`"), ""),
]

_WHITESPACE = re.compile(r"\s+")


def _strip_once(text: str) -> str:
    text = _MARKDOWN_LINK.sub(r"\1", text)
    text = _RAW_URL.sub("", text)
    text = _ENTITY.sub(lambda match: ENTITIES[match.group(0)], text)
    for pattern, replacement in _MARKDOWN:
        text = pattern.sub(replacement, text)
    return _WHITESPACE.sub(" ", text).strip()


def _strip(text: str) -> str:
    # Each pass only shortens the text, so this reaches a fixed point.
    while True:
        stripped = _strip_once(text)
        if stripped == text:
            return stripped
        text = stripped


def _truncate(text: str, max_length: int) -> str:
    start, end = BOUNDARY_WINDOW
    boundaries = [
        i for i in range(start, min(end, len(text) - 1) + 1)
        if text[i] in BOUNDARY_CHARS
    ]
    if boundaries:
        cut = min(boundaries, key=lambda i: (abs(i - max_length), -i))
        return text[:cut + 1]

    return text[:max(max_length - len(ELLIPSIS), 0)].rstrip() + ELLIPSIS


def cleanup(text: str, max_length: int = SUMMARY_LENGTH) -> str:
    """
    Turn a markdown post body into a short plain-text summary.

    Args:
        text: Raw post body (markdown with HTML entities)
        max_length: Length budget before truncation applies

    Returns:
        Plain text no longer than the budget where a hard cut was needed,
        or cut after a sentence boundary between offsets 100 and 200;
        a placeholder when nothing readable remains
    """
    if not text or not text.strip():
        return PLACEHOLDER

    cleaned = _strip(text)
    if not cleaned:
        return PLACEHOLDER

    if len(cleaned) > max_length:
        cleaned = _truncate(cleaned, max_length)

    return cleaned
