"""
Read the standard property set streams out of an OLE2 compound file.

Dependencies
------------
olefile: https://github.com/decalage2/olefile
    pip install olefile

    Provides:
    - OLE compound document parsing (sectors, FAT, directory)
    - Stream lookup and reading

The property set bytes are decoded by oleprops itself, olefile is only used
to locate and read the streams.
"""

import io
import logging
from typing import BinaryIO

import olefile

from oleprops.collection import read_property_collection
from oleprops.data_types import OlePropertiesContent, PropertyCollection
from oleprops.exceptions import NotAnOleFileError, PropertySetError
from oleprops.limits import DEFAULT_DECODE_LIMITS, DecodeLimits

logger = logging.getLogger(__name__)

SUMMARY_INFORMATION_STREAM = "\x05SummaryInformation"
DOC_SUMMARY_INFORMATION_STREAM = "\x05DocumentSummaryInformation"


def read_property_stream(
    ole: olefile.OleFileIO,
    stream_name: str,
    limits: DecodeLimits = DEFAULT_DECODE_LIMITS,
) -> PropertyCollection | None:
    """
    Decode one property set stream of an open compound file.

    Returns:
        The decoded collection, or None if the stream does not exist.
    """
    if not ole.exists(stream_name):
        logger.debug(f"No {stream_name!r} stream")
        return None
    data = ole.openstream(stream_name).read()
    logger.debug(f"Decoding {stream_name!r} ({len(data)} bytes)")
    return read_property_collection(data, limits=limits)


def read_ole_properties(
    file_like: BinaryIO | io.BytesIO,
    path: str | None = None,
    limits: DecodeLimits = DEFAULT_DECODE_LIMITS,
) -> OlePropertiesContent:
    """
    Decode the SummaryInformation and DocumentSummaryInformation streams.

    Args:
        file_like: Binary file-like object holding the whole compound file.
            The stream position is reset to the beginning before reading.
        path: Optional filesystem path, used to fill ``metadata``.
        limits: Bounds for counts read from the property streams.

    Returns:
        OlePropertiesContent; a missing stream leaves its field at None.

    Raises:
        NotAnOleFileError: if the input is not a compound file.
        PropertySetError: if a present stream cannot be decoded.

    Example:
        >>> with open("report.doc", "rb") as f:
        ...     content = read_ole_properties(io.BytesIO(f.read()), path="report.doc")
        >>> for prop in content.get_custom_properties():
        ...     print(prop.name, prop)
    """
    file_like.seek(0)
    if not olefile.isOleFile(file_like):
        raise NotAnOleFileError(path)
    file_like.seek(0)

    content = OlePropertiesContent()
    content.metadata.populate_from_path(path)

    try:
        with olefile.OleFileIO(file_like) as ole:
            for stream_name, attribute in (
                (SUMMARY_INFORMATION_STREAM, "summary_information"),
                (DOC_SUMMARY_INFORMATION_STREAM, "doc_summary_information"),
            ):
                collection = read_property_stream(ole, stream_name, limits=limits)
                if collection is not None:
                    setattr(content, attribute, collection)
                    content.streams.append(stream_name)
    except PropertySetError:
        raise
    except Exception as exc:
        raise NotAnOleFileError(path, cause=exc) from exc

    logger.info(
        "Read %d property streams, %d properties",
        len(content.streams),
        len(content.get_all_properties()),
    )
    return content


def read_ole_properties_from_path(
    path: str, limits: DecodeLimits = DEFAULT_DECODE_LIMITS
) -> OlePropertiesContent:
    with open(path, "rb") as f:
        return read_ole_properties(io.BytesIO(f.read()), path=str(path), limits=limits)
