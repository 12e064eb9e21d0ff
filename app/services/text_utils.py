"""
Cleanup of model output before it is stored and shown.
"""

import re

_CODE_FENCE = re.compile(r"```[a-zA-Z0-9_-]*\n?")
_INLINE_CODE = re.compile(r"`([^`]*)`")
_BOLD = re.compile(r"(\*\*|__)(.+?)\1", re.DOTALL)
_ITALIC = re.compile(r"(?<![\w*])([*_])(?!\s)(.+?)(?<!\s)\1(?![\w*])")
_HEADER = re.compile(r"^[ \t]{0,3}#{1,6}[ \t]*", re.MULTILINE)
_BULLET_STAR = re.compile(r"^([ \t]*)\*[ \t]+", re.MULTILINE)
_LINK = re.compile(r"\[([^\]]+)\]\([^)]+\)")
_HTML_TAG = re.compile(r"<[^>]+>")
_TRAILING_SPACE = re.compile(r"[ \t]+$", re.MULTILINE)
_MANY_NEWLINES = re.compile(r"\n{3,}")
_SPACE_AFTER_SENTENCE = re.compile(r"([.!?]) {2,}(?=[A-Z])")


def strip_markdown(text: str) -> str:
    """Remove markdown and HTML formatting and normalise whitespace."""
    if not text:
        return ""
    cleaned = _CODE_FENCE.sub("", text)
    cleaned = _INLINE_CODE.sub(r"\1", cleaned)
    cleaned = _LINK.sub(r"\1", cleaned)
    cleaned = _HTML_TAG.sub("", cleaned)
    cleaned = _HEADER.sub("", cleaned)
    cleaned = _BULLET_STAR.sub(r"\1- ", cleaned)
    cleaned = _BOLD.sub(r"\2", cleaned)
    cleaned = _ITALIC.sub(r"\2", cleaned)
    cleaned = cleaned.replace("**", "")
    cleaned = _TRAILING_SPACE.sub("", cleaned)
    cleaned = _MANY_NEWLINES.sub("\n\n", cleaned)
    cleaned = _SPACE_AFTER_SENTENCE.sub(r"\1 ", cleaned)
    return cleaned.strip()
