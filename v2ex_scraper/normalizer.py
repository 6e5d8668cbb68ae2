"""
Fragment normalization for already-isolated HTML fragments.
Turns a post or reply body into plain text while keeping its line structure.
"""

import re
from typing import Optional

_LINE_BREAK_RE = re.compile(r'<br\s*/?>', re.IGNORECASE)
_TAG_RE = re.compile(r'<[^>]*>')

# &amp; must stay last so "&amp;lt;" decodes to "&lt;" and not "<"
_ENTITIES = (
    ('&nbsp;', ' '),
    ('&lt;', '<'),
    ('&gt;', '>'),
    ('&quot;', '"'),
    ('&amp;', '&'),
)


def normalize_fragment(fragment: Optional[str]) -> str:
    """
    Convert an HTML fragment into normalized plain text.

    Line-break elements become newlines, remaining tags are dropped and a
    small fixed set of entities is decoded. Only leading and trailing
    whitespace is trimmed; inline spacing and internal newlines survive.

    Args:
        fragment: Inner HTML of an element, or None when the element is absent

    Returns:
        Normalized text (empty string for None)
    """
    if fragment is None:
        return ''

    text = _LINE_BREAK_RE.sub('\n', fragment)
    text = _TAG_RE.sub('', text)
    for entity, char in _ENTITIES:
        text = text.replace(entity, char)
    return text.strip()
