"""
oleprops: OLE property set decoder.

Decodes the property set streams ([MS-OLEPS]) stored in legacy Office
compound files: SummaryInformation (title, author, dates, counts),
DocumentSummaryInformation (company, manager, ...) and the user-defined
custom properties, into typed, named, immutable values.
"""

import io
from pathlib import Path
from typing import BinaryIO

from oleprops.collection import read_property_collection
from oleprops.data_types import (
    FMTID_DOC_SUMMARY_INFORMATION,
    FMTID_SUMMARY_INFORMATION,
    FMTID_USER_DEFINED_PROPERTIES,
    OlePropertiesContent,
    Property,
    PropertyCollection,
    PropertyEntry,
    PropertySet,
    PropertySetDescriptor,
    PropertySetKind,
)
from oleprops.exceptions import (
    NotAnOleFileError,
    PropertySetError,
    PropertySetFormatError,
    PropertySetLimitError,
    PropertySetStructureError,
)
from oleprops.limits import DEFAULT_DECODE_LIMITS, DecodeLimits
from oleprops.property_set import read_property_set
from oleprops.vt_types import PropertyDimension, VTType

__version__ = "0.3.0"


def read_ole_properties(
    file_like: BinaryIO | io.BytesIO,
    path: str | None = None,
    limits: DecodeLimits = DEFAULT_DECODE_LIMITS,
) -> OlePropertiesContent:
    """Decode the standard property streams of an OLE2 compound file."""
    from oleprops.ole_container import read_ole_properties as _read_ole_properties

    return _read_ole_properties(file_like, path, limits)


def read_file(
    path: str | Path, limits: DecodeLimits = DEFAULT_DECODE_LIMITS
) -> OlePropertiesContent:
    """
    Read the property streams of a compound file on disk.

    Args:
        path: Path to a .doc, .xls, .ppt, .msi or any other OLE2 file.
        limits: Bounds for counts read from the property streams.

    Returns:
        OlePropertiesContent holding the decoded SummaryInformation and
        DocumentSummaryInformation collections (None where absent).

    Raises:
        NotAnOleFileError: If the file is not an OLE2 compound file.
        FileNotFoundError: If the file does not exist.

    Example:
        >>> import oleprops
        >>> content = oleprops.read_file("report.doc")
        >>> for prop in content.get_all_properties():
        ...     print(prop.id, prop.name, prop)
    """
    from oleprops.ole_container import read_ole_properties_from_path

    return read_ole_properties_from_path(str(path), limits=limits)


__all__ = [
    # Version
    "__version__",
    # Main functions
    "read_file",
    "read_ole_properties",
    "read_property_collection",
    "read_property_set",
    # Result types
    "OlePropertiesContent",
    "Property",
    "PropertyCollection",
    "PropertyDimension",
    "PropertyEntry",
    "PropertySet",
    "PropertySetDescriptor",
    "PropertySetKind",
    "VTType",
    # Format ids
    "FMTID_SUMMARY_INFORMATION",
    "FMTID_DOC_SUMMARY_INFORMATION",
    "FMTID_USER_DEFINED_PROPERTIES",
    # Configuration
    "DecodeLimits",
    "DEFAULT_DECODE_LIMITS",
    # Errors
    "PropertySetError",
    "PropertySetStructureError",
    "PropertySetFormatError",
    "PropertySetLimitError",
    "NotAnOleFileError",
]
