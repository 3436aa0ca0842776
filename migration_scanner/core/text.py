"""Small text helpers shared by the parsers and the report builders."""

from __future__ import annotations

import html
import re

_SEPARATORS = re.compile(r"[-_]")
_WORD_START = re.compile(r"\b\w")


def title_case(slug: str) -> str:
    """Turn a slug like ``case-studies`` or ``my_plugin`` into ``Case Studies``."""
    spaced = _SEPARATORS.sub(" ", slug)
    return _WORD_START.sub(lambda m: m.group(0).upper(), spaced)


def decode_html_entities(text: str) -> str:
    """Decode named and numeric HTML entities (``&amp;``, ``&#8217;`` ...)."""
    return html.unescape(text)


def to_error_message(exc: BaseException | object) -> str:
    if isinstance(exc, BaseException):
        message = str(exc)
        return message or exc.__class__.__name__
    return str(exc)


def pluralize(count: int, singular: str, plural: str | None = None) -> str:
    return singular if count == 1 else (plural or f"{singular}s")
