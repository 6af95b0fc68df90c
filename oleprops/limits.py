from __future__ import annotations

from dataclasses import dataclass

from oleprops.exceptions import PropertySetLimitError


@dataclass(frozen=True)
class DecodeLimits:
    """
    Upper bounds for counts and lengths read from untrusted property streams.

    A hostile property count or vector length would otherwise force huge
    allocations before the cursor notices the data is missing. The defaults
    are far above anything Office writes.
    """

    max_property_count: int = 65_536
    max_vector_count: int = 1_048_576
    max_dictionary_entries: int = 65_536
    max_string_length: int = 16 * 1024 * 1024  # 16 MiB
    # VT_VARIANT values nested inside VT_VARIANT values
    max_variant_depth: int = 64


DEFAULT_DECODE_LIMITS = DecodeLimits()


def check_limit(what: str, count: int, limit: int) -> int:
    """Return ``count`` unchanged, or raise if it exceeds ``limit``."""
    if count > limit:
        raise PropertySetLimitError(what, count, limit)
    return count
