"""
Property Set Decoder
====================

Decodes one PropertySet ([MS-OLEPS] 2.20) starting at a base offset inside a
property set stream.

Layout
------
    size:u32 count:u32 { id:u32 offset:u32 }{count}

Entry offsets are relative to the base offset. Two ids are special:
    - 0: the name dictionary, mapping property ids to display names
    - 1: the code page, selecting the codec for narrow strings and names

The code page property is also returned as an ordinary property; the
dictionary is not.

Decoding steps
--------------
    1. Header (size, count)
    2. Entry table, kept in stored order
    3. Code page context (cursor position is restored afterwards)
    4. Name dictionary
    5. Every entry except id 0, in stored order

Unknown types, array shaped values and undecodable names only drop the
affected entry. Reads outside the stream abort the decode.
"""

import logging
import types
import uuid
from typing import Dict, List, Optional

from oleprops.code_pages import code_page_to_encoding, is_utf16
from oleprops.data_types import Property, PropertyEntry, PropertySet
from oleprops.exceptions import (
    UnsupportedDimensionError,
    UnsupportedPropertyTypeError,
    ValueDecodeError,
)
from oleprops.limits import DEFAULT_DECODE_LIMITS, DecodeLimits, check_limit
from oleprops.readers import create_reader, decode_text
from oleprops.util.cursor import ByteCursor
from oleprops.vt_types import type_name

logger = logging.getLogger(__name__)

PID_DICTIONARY = 0
PID_CODEPAGE = 1

DEFAULT_CODE_PAGE = 0  # no code page property: strings are read as UTF-8


def read_property_set(
    cursor: ByteCursor,
    base_offset: int,
    fmtid: uuid.UUID,
    limits: DecodeLimits = DEFAULT_DECODE_LIMITS,
) -> PropertySet:
    """
    Decode the property set at ``base_offset``.

    Args:
        cursor: Cursor over the whole property set stream.
        base_offset: Absolute offset of the set, from its descriptor.
        fmtid: Format id of the set, from its descriptor.
        limits: Bounds for counts read from the stream.

    Returns:
        PropertySet with entries, code page, name map and decoded properties.

    Raises:
        PropertySetStructureError: if the set reaches outside the stream.
        PropertySetLimitError: if a count exceeds ``limits``.
    """
    return _PropertySetReader(cursor, base_offset, fmtid, limits).read()


class _PropertySetReader:
    """
    Single-pass reader for one property set.

    Each step runs once, in order; the results are collected on the instance
    and frozen into a PropertySet at the end.
    """

    def __init__(
        self,
        cursor: ByteCursor,
        base_offset: int,
        fmtid: uuid.UUID,
        limits: DecodeLimits,
    ):
        self.cursor = cursor
        self.base_offset = base_offset
        self.fmtid = fmtid
        self.limits = limits
        self.size = 0
        self.property_count = 0
        self.entries: List[PropertyEntry] = []
        self.code_page = DEFAULT_CODE_PAGE
        self.name_map: Dict[int, str] = {}
        self.properties: List[Property] = []

    def read(self) -> PropertySet:
        self._read_header()
        self._read_entries()
        self._load_context()
        self._load_name_dictionary()
        self._read_properties()

        logger.debug(
            "Property set %s: %d entries, code page %d, %d names, %d properties",
            self.fmtid,
            len(self.entries),
            self.code_page,
            len(self.name_map),
            len(self.properties),
        )
        return PropertySet(
            id=self.fmtid,
            size=self.size,
            property_count=self.property_count,
            entries=tuple(self.entries),
            code_page=self.code_page,
            name_map=types.MappingProxyType(dict(self.name_map)),
            properties=tuple(self.properties),
        )

    def _find_entry(self, property_id: int) -> Optional[PropertyEntry]:
        for entry in self.entries:
            if entry.id == property_id:
                return entry
        return None

    def _read_header(self) -> None:
        if self.cursor.tell() != self.base_offset:
            self.cursor.seek(self.base_offset)
        self.size = self.cursor.read_u32()
        self.property_count = check_limit(
            "Property count", self.cursor.read_u32(), self.limits.max_property_count
        )

    def _read_entries(self) -> None:
        for _ in range(self.property_count):
            property_id = self.cursor.read_u32()
            offset = self.cursor.read_u32()
            self.entries.append(PropertyEntry(id=property_id, offset=offset))

    def _load_context(self) -> None:
        with self.cursor.saved_position():
            entry = self._find_entry(PID_CODEPAGE)
            if entry is None:
                return
            self.cursor.seek(self.base_offset + entry.offset)
            self.cursor.skip(4)  # type tag + reserved
            self.code_page = self.cursor.read_u16()

    def _load_name_dictionary(self) -> None:
        entry = self._find_entry(PID_DICTIONARY)
        if entry is None:
            return

        unicode_names = is_utf16(self.code_page)
        encoding = code_page_to_encoding(self.code_page)

        self.cursor.seek(self.base_offset + entry.offset)
        count = check_limit(
            "Dictionary entry count",
            self.cursor.read_u32(),
            self.limits.max_dictionary_entries,
        )
        for _ in range(count):
            record_start = self.cursor.tell()
            property_id = self.cursor.read_u32()
            length = check_limit(
                "Dictionary name length",
                self.cursor.read_u32(),
                self.limits.max_string_length,
            )
            if unicode_names:
                data = self.cursor.read_bytes(2 * length)
                padding = -(self.cursor.tell() - record_start) % 4
                if padding:
                    self.cursor.skip(padding)
            else:
                data = self.cursor.read_bytes(length)

            try:
                self.name_map[property_id] = decode_text(data, encoding)
            except ValueDecodeError as exc:
                logger.debug("Dropping name of property %d: %s", property_id, exc)

    def _read_properties(self) -> None:
        for entry in self.entries:
            if entry.id == PID_DICTIONARY:
                continue

            self.cursor.seek(self.base_offset + entry.offset)
            type_tag = self.cursor.read_u16()
            self.cursor.skip(2)  # reserved

            try:
                reader = create_reader(type_tag, self.code_page)
                prop = reader.read_property(
                    self.cursor,
                    property_id=entry.id,
                    name=self.name_map.get(entry.id),
                    limits=self.limits,
                )
            except (UnsupportedPropertyTypeError, UnsupportedDimensionError) as exc:
                logger.error("Skipping property %d: %s", entry.id, exc)
                continue

            logger.debug(
                "Property %d (%s) = %s", entry.id, type_name(type_tag), prop.to_text()
            )
            self.properties.append(prop)
