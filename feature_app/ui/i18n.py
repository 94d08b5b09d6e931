"""Apply a translation key -> text mapping to marked elements."""

import structlog

from .elements import Document

logger = structlog.get_logger(__name__)


def apply_translations(document: Document, mapping: dict[str, str]) -> int:
    """
    Swap text of `[data-i18n]` elements and markup of `[data-i18n-html]` elements.

    Keys missing from the mapping leave the element untouched.

    Returns:
        Number of elements updated
    """
    updated = 0
    for element in document.query_all("[data-i18n]"):
        value = mapping.get(element.get_attribute("data-i18n") or "")
        if value:
            element.text = value
            updated += 1
    for element in document.query_all("[data-i18n-html]"):
        value = mapping.get(element.get_attribute("data-i18n-html") or "")
        if value:
            element.html = value
            updated += 1
    logger.debug("Applied translations", updated=updated)
    return updated
