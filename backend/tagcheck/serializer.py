"""
Render the tags of a feature into the bounded diagnostic field of a defect.
"""

from typing import Iterable, Optional, Tuple

from .config import DEFAULT_CONFIG


def tags_summary(
    tags: Iterable[Tuple[str, str]],
    exclude: Optional[str] = None,
    max_length: int = DEFAULT_CONFIG.max_field_length,
    max_tag_length: int = DEFAULT_CONFIG.max_tag_length,
    separator: str = DEFAULT_CONFIG.separator,
) -> str:
    """
    Join tags as ``key=value`` with a separator, skipping the excluded key.

    Only tags whose rendered form (including "=" and the separator) is
    shorter than max_tag_length are added, and only as long as the result
    stays shorter than max_length. Everything else is dropped silently,
    the summary is a hint for the reader and not a full dump.

    Returns an empty string if no tag was added.
    """
    parts = []
    length = 0
    for key, value in tags:
        if exclude is not None and key == exclude:
            continue
        add_length = len(key) + len(value) + 2
        if add_length < max_tag_length and length + add_length < max_length:
            parts.append(f"{key}={value}")
            length += add_length
    return separator.join(parts)
