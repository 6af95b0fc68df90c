import logging

logger = logging.getLogger(__name__)

CP_UTF16 = 1200
DEFAULT_ENCODING = "utf-8"

# Code pages understood for narrow strings and dictionary names.
# Anything else is read as UTF-8.
CODE_PAGE_ENCODINGS = {
    CP_UTF16: "utf-16-le",
    1250: "cp1250",  # Central European
    1251: "cp1251",  # Cyrillic
    1252: "cp1252",  # Western European
    1253: "cp1253",  # Greek
    1254: "cp1254",  # Turkish
}


def code_page_to_encoding(code_page: int) -> str:
    """Python codec name for a property set code page."""
    encoding = CODE_PAGE_ENCODINGS.get(code_page)
    if encoding is None:
        logger.warning(
            "Unsupported code page %d, using default %s", code_page, DEFAULT_ENCODING
        )
        return DEFAULT_ENCODING
    return encoding


def is_utf16(code_page: int) -> bool:
    return code_page == CP_UTF16
