"""
Typed property value readers.

``create_reader`` turns an on-disk type tag into a ``ValueReader``; the
reader's ``read`` method drives the scalar / vector / array shapes and the
4-byte realignment, and ``read_scalar`` decodes exactly one value of the
reader's base type.

Scalar encodings ([MS-OLEPS] 2.15):
    - Fixed width numbers: little-endian, native width
    - VT_CY: signed 64-bit, 1/10000 units
    - VT_BOOL: 16 bits, 0x0000 false, anything else true
    - VT_FILETIME: signed 64-bit count of 100ns ticks since 1601-01-01
    - VT_DATE: IEEE double, days since 1899-12-30
    - VT_LPSTR / VT_BSTR: u32 byte length + bytes in the set's code page
    - VT_LPWSTR: u32 character count + UTF-16LE characters
    - VT_VARIANT: u16 tag + u16 padding + a nested typed value
"""

from __future__ import annotations

import datetime
import logging
import math
import uuid
from dataclasses import dataclass
from typing import Any, Callable, Optional, Tuple

from oleprops.code_pages import code_page_to_encoding
from oleprops.data_types import Property
from oleprops.exceptions import (
    UnsupportedDimensionError,
    UnsupportedPropertyTypeError,
    ValueDecodeError,
)
from oleprops.limits import DEFAULT_DECODE_LIMITS, DecodeLimits, check_limit
from oleprops.util.cursor import ByteCursor
from oleprops.vt_types import (
    VT_TYPE_MASK,
    PropertyDimension,
    VTType,
    base_type_of,
    dimension_of,
    type_name,
)

logger = logging.getLogger(__name__)

FILETIME_TICKS_PER_SECOND = 10_000_000
# Seconds between 1601-01-01 and 1970-01-01
FILETIME_UNIX_EPOCH_SECONDS = 11_644_473_600
# Days between 1899-12-30 and 1970-01-01
OA_DATE_UNIX_EPOCH_DAYS = 25569.0
SECONDS_PER_DAY = 86400
CURRENCY_SCALE = 10_000

UNIX_EPOCH = datetime.datetime(1970, 1, 1, tzinfo=datetime.timezone.utc)

ALIGNMENT = 4

_STRING_TYPES = (VTType.LPSTR, VTType.BSTR)


@dataclass(frozen=True)
class ValueReader:
    """Reads one typed property value whose tag and reserved field are consumed."""

    type_tag: int
    vt_type: VTType
    code_page: int = 0
    is_variant: bool = False
    # codec for VT_LPSTR / VT_BSTR, resolved once from the code page
    encoding: Optional[str] = None
    # number of VT_VARIANT values enclosing this one
    depth: int = 0

    @property
    def dimension(self) -> PropertyDimension:
        return dimension_of(self.type_tag)

    def read(
        self, cursor: ByteCursor, limits: DecodeLimits = DEFAULT_DECODE_LIMITS
    ) -> Tuple[Any, Optional[Tuple[Any, ...]]]:
        """
        Read the value at the cursor.

        Returns:
            ``(value, None)`` for scalars, ``(None, values)`` for vectors.
            A scalar that fails to decode comes back as None, failed vector
            elements are left out.

        Raises:
            UnsupportedDimensionError: for array shaped tags.
            PropertySetStructureError: when the data runs past the stream.
            PropertySetLimitError: when a count, a length or the variant
                nesting depth exceeds ``limits``.
        """
        start = cursor.tell()
        dimension = self.dimension

        if dimension is PropertyDimension.SCALAR:
            value, values = self._read_one(cursor, limits), None
        elif dimension is PropertyDimension.VECTOR:
            value, values = None, self._read_vector(cursor, limits)
        else:
            logger.error(
                "Unsupported property dimension: %s (%s)",
                dimension.value,
                type_name(self.type_tag),
            )
            raise UnsupportedDimensionError(
                f"Array properties are not supported ({type_name(self.type_tag)})"
            )

        self._align(cursor, start)
        return value, values

    def read_property(
        self,
        cursor: ByteCursor,
        property_id: int = 0,
        name: Optional[str] = None,
        limits: DecodeLimits = DEFAULT_DECODE_LIMITS,
    ) -> Property:
        value, values = self.read(cursor, limits)
        return Property(
            id=property_id,
            type_tag=self.type_tag,
            name=name,
            value=value,
            values=values,
            is_variant=self.is_variant,
        )

    def _read_one(self, cursor: ByteCursor, limits: DecodeLimits) -> Any:
        try:
            return read_scalar(self, cursor, limits)
        except ValueDecodeError as exc:
            logger.debug("Dropping undecodable %s value: %s", self.vt_type.name, exc)
        except (UnsupportedPropertyTypeError, UnsupportedDimensionError) as exc:
            logger.error("Skipping variant value: %s", exc)
        return None

    def _read_vector(self, cursor: ByteCursor, limits: DecodeLimits) -> Tuple[Any, ...]:
        """
        Read a counted vector. Elements that fail to decode are left out.

        A variant element with an unknown type or an array shape ends the
        vector instead of being skipped: its size cannot be known, so the
        following elements cannot be located. This differs from discarding
        only that element and reading on.
        """
        count = check_limit(
            "Vector element count", cursor.read_u32(), limits.max_vector_count
        )
        values = []
        for index in range(count):
            try:
                values.append(read_scalar(self, cursor, limits))
            except ValueDecodeError as exc:
                logger.debug(
                    "Dropping undecodable %s element %d: %s",
                    self.vt_type.name,
                    index,
                    exc,
                )
            except (UnsupportedPropertyTypeError, UnsupportedDimensionError) as exc:
                # the element's size is unknown, the rest of the vector is unreachable
                logger.error(
                    "Stopping variant vector at element %d of %d: %s",
                    index,
                    count,
                    exc,
                )
                break
        return tuple(values)

    def _align(self, cursor: ByteCursor, start: int) -> None:
        if self.is_variant:
            return
        padding = -(cursor.tell() - start) % ALIGNMENT
        if padding and cursor.tell() + padding <= cursor.length:
            cursor.skip(padding)


def create_reader(
    type_tag: int, code_page: int = 0, is_variant: bool = False, depth: int = 0
) -> ValueReader:
    """
    Value reader for a type tag.

    Raises:
        UnsupportedPropertyTypeError: if the low byte is not a VT type, or the
            type has no reader (VT_DECIMAL, VT_STREAM, VT_CF, ...).
    """
    vt_type = base_type_of(type_tag)
    if vt_type is None:
        raise UnsupportedPropertyTypeError(
            type_tag, f"Unknown property type: 0x{type_tag & VT_TYPE_MASK:02X}"
        )
    if vt_type not in _FIXED_WIDTH_READERS and vt_type not in _SCALAR_READERS:
        raise UnsupportedPropertyTypeError(
            type_tag, f"Unsupported property type: {type_name(type_tag)}"
        )

    encoding = code_page_to_encoding(code_page) if vt_type in _STRING_TYPES else None
    return ValueReader(
        type_tag=type_tag,
        vt_type=vt_type,
        code_page=code_page,
        is_variant=is_variant,
        encoding=encoding,
        depth=depth,
    )


def read_scalar(
    reader: ValueReader, cursor: ByteCursor, limits: DecodeLimits = DEFAULT_DECODE_LIMITS
) -> Any:
    """Decode one value of ``reader.vt_type`` at the cursor and advance past it."""
    fixed = _FIXED_WIDTH_READERS.get(reader.vt_type)
    if fixed is not None:
        return fixed(cursor)
    scalar_reader = _SCALAR_READERS.get(reader.vt_type)
    if scalar_reader is None:
        raise UnsupportedPropertyTypeError(reader.type_tag)
    return scalar_reader(cursor, reader, limits)


def decode_text(data: bytes, encoding: str) -> str:
    """Decode ``data`` and drop trailing NUL characters."""
    try:
        return data.decode(encoding).rstrip("\x00")
    except UnicodeDecodeError as exc:
        raise ValueDecodeError(
            f"Cannot decode {len(data)} bytes as {encoding}", cause=exc
        ) from exc


def filetime_to_datetime(ticks: int) -> datetime.datetime:
    # whole seconds, truncated toward zero
    seconds = abs(ticks) // FILETIME_TICKS_PER_SECOND
    if ticks < 0:
        seconds = -seconds
    return _unix_seconds_to_datetime(seconds - FILETIME_UNIX_EPOCH_SECONDS)


def oa_date_to_datetime(oa_date: float) -> datetime.datetime:
    if not math.isfinite(oa_date):
        raise ValueDecodeError(f"OLE Automation date is not a number: {oa_date}")
    return _unix_seconds_to_datetime(
        (oa_date - OA_DATE_UNIX_EPOCH_DAYS) * SECONDS_PER_DAY
    )


def _unix_seconds_to_datetime(seconds: float) -> datetime.datetime:
    try:
        return UNIX_EPOCH + datetime.timedelta(seconds=seconds)
    except (OverflowError, ValueError) as exc:
        raise ValueDecodeError(
            f"Timestamp out of range: {seconds} seconds", cause=exc
        ) from exc


def _read_empty(cursor: ByteCursor, reader: ValueReader, limits: DecodeLimits) -> None:
    return None


def _read_currency(cursor: ByteCursor, reader: ValueReader, limits: DecodeLimits) -> int:
    raw = cursor.read_i64()
    units = abs(raw) // CURRENCY_SCALE
    return units if raw >= 0 else -units


def _read_bool(cursor: ByteCursor, reader: ValueReader, limits: DecodeLimits) -> bool:
    return cursor.read_u16() != 0


def _read_filetime(
    cursor: ByteCursor, reader: ValueReader, limits: DecodeLimits
) -> datetime.datetime:
    return filetime_to_datetime(cursor.read_i64())


def _read_date(
    cursor: ByteCursor, reader: ValueReader, limits: DecodeLimits
) -> datetime.datetime:
    return oa_date_to_datetime(cursor.read_f64())


def _read_code_page_string(
    cursor: ByteCursor, reader: ValueReader, limits: DecodeLimits
) -> str:
    length = check_limit("String length", cursor.read_u32(), limits.max_string_length)
    return decode_text(cursor.read_bytes(length), reader.encoding or "utf-8")


def _read_unicode_string(
    cursor: ByteCursor, reader: ValueReader, limits: DecodeLimits
) -> str:
    length = check_limit("String length", cursor.read_u32(), limits.max_string_length)
    return decode_text(cursor.read_bytes(2 * length), "utf-16-le")


def _read_clsid(cursor: ByteCursor, reader: ValueReader, limits: DecodeLimits) -> uuid.UUID:
    return uuid.UUID(bytes_le=cursor.read_bytes(16))


def _read_blob(cursor: ByteCursor, reader: ValueReader, limits: DecodeLimits) -> bytes:
    length = check_limit("Blob length", cursor.read_u32(), limits.max_string_length)
    return cursor.read_bytes(length)


def _read_variant(
    cursor: ByteCursor, reader: ValueReader, limits: DecodeLimits
) -> Property:
    depth = check_limit(
        "Variant nesting depth", reader.depth + 1, limits.max_variant_depth
    )
    type_tag = cursor.read_u16()
    cursor.skip(2)  # reserved
    nested = create_reader(type_tag, reader.code_page, is_variant=True, depth=depth)
    return nested.read_property(cursor, limits=limits)


_FIXED_WIDTH_READERS: dict[VTType, Callable[[ByteCursor], Any]] = {
    VTType.I1: ByteCursor.read_i8,
    VTType.UI1: ByteCursor.read_u8,
    VTType.I2: ByteCursor.read_i16,
    VTType.UI2: ByteCursor.read_u16,
    VTType.I4: ByteCursor.read_i32,
    VTType.INT: ByteCursor.read_i32,
    VTType.UI4: ByteCursor.read_u32,
    VTType.UINT: ByteCursor.read_u32,
    VTType.I8: ByteCursor.read_i64,
    VTType.UI8: ByteCursor.read_u64,
    VTType.ERROR: ByteCursor.read_u32,  # HRESULT
    VTType.R4: ByteCursor.read_f32,
    VTType.R8: ByteCursor.read_f64,
}

_SCALAR_READERS: dict[
    VTType, Callable[[ByteCursor, ValueReader, DecodeLimits], Any]
] = {
    VTType.EMPTY: _read_empty,
    VTType.NULL: _read_empty,
    VTType.CY: _read_currency,
    VTType.BOOL: _read_bool,
    VTType.FILETIME: _read_filetime,
    VTType.DATE: _read_date,
    VTType.LPSTR: _read_code_page_string,
    VTType.BSTR: _read_code_page_string,
    VTType.LPWSTR: _read_unicode_string,
    VTType.CLSID: _read_clsid,
    VTType.BLOB: _read_blob,
    VTType.VARIANT: _read_variant,
}

SUPPORTED_TYPES = frozenset(_FIXED_WIDTH_READERS) | frozenset(_SCALAR_READERS)
