"""
Property Collection Decoder - the outer PropertySetStream ([MS-OLEPS] 2.21).

    byteOrder:u16 version:u16 systemId:u32 classId:byte[16] numSets:u32
    { fmtid:byte[16] offset:u32 }{numSets}
    PropertySet{numSets}

SummaryInformation streams hold one set. DocumentSummaryInformation streams
hold the DocSummaryInformation set and, when the document has custom
properties, a second UserDefinedProperties set.
"""

import io
import logging
import uuid
from typing import BinaryIO

from oleprops.data_types import PropertyCollection, PropertySetDescriptor
from oleprops.exceptions import PropertySetFormatError
from oleprops.limits import DEFAULT_DECODE_LIMITS, DecodeLimits
from oleprops.property_set import read_property_set
from oleprops.util.cursor import ByteCursor

logger = logging.getLogger(__name__)

CLASS_ID_SIZE = 16
FMTID_SIZE = 16
MAX_PROPERTY_SETS = 2


def read_property_collection(
    source: bytes | bytearray | memoryview | BinaryIO | io.BytesIO | ByteCursor,
    limits: DecodeLimits = DEFAULT_DECODE_LIMITS,
) -> PropertyCollection:
    """
    Decode a complete property set stream.

    Args:
        source: Raw stream bytes, a binary file-like object positioned anywhere
            (it is read from the start), or a ByteCursor at offset 0.
        limits: Bounds for counts read from the stream.

    Returns:
        PropertyCollection with one PropertySet per descriptor, in order.

    Raises:
        PropertySetFormatError: if the header announces anything but 1 or 2
            property sets.
        PropertySetStructureError: if the stream is truncated or an offset
            points outside of it.

    Example:
        >>> import olefile
        >>> with olefile.OleFileIO("report.doc") as ole:
        ...     data = ole.openstream("\\x05SummaryInformation").read()
        >>> collection = read_property_collection(data)
        >>> for prop in collection.get_all_properties():
        ...     print(prop.id, prop)
    """
    cursor = ByteCursor.from_source(source)

    byte_order = cursor.read_u16()
    version = cursor.read_u16()
    system_identifier = cursor.read_u32()
    class_id = cursor.read_bytes(CLASS_ID_SIZE)
    num_property_sets = cursor.read_u32()

    if not 1 <= num_property_sets <= MAX_PROPERTY_SETS:
        raise PropertySetFormatError(
            f"Property set stream must hold 1 or 2 property sets, "
            f"header says {num_property_sets}"
        )

    descriptors = []
    for _ in range(num_property_sets):
        format_id = uuid.UUID(bytes_le=cursor.read_bytes(FMTID_SIZE))
        offset = cursor.read_u32()
        descriptors.append(PropertySetDescriptor(format_id=format_id, offset=offset))

    property_sets = tuple(
        read_property_set(
            cursor, base_offset=desc.offset, fmtid=desc.format_id, limits=limits
        )
        for desc in descriptors
    )

    collection = PropertyCollection(
        byte_order=byte_order,
        version=version,
        system_identifier=system_identifier,
        class_id=class_id,
        descriptors=tuple(descriptors),
        property_sets=property_sets,
    )
    logger.info(
        "Decoded property set stream: %d sets, %d properties",
        len(property_sets),
        len(collection.get_all_properties()),
    )
    return collection
