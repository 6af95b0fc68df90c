"""
VT type registry.

A property value on disk starts with a 16-bit type tag. The low byte selects
the base encoding (OLE Automation VARENUM), two high bits select the shape:

    0x1000  VT_VECTOR  counted sequence of base-type values
    0x2000  VT_ARRAY   SAFEARRAY, recognized but not readable

Reference: [MS-OLEPS] 2.15 TypedPropertyValue,
https://learn.microsoft.com/en-us/openspecs/windows_protocols/ms-oleps/
"""

import enum

VT_VECTOR = 0x1000
VT_ARRAY = 0x2000
VT_TYPE_MASK = 0x00FF


class VTType(enum.IntEnum):
    EMPTY = 0
    NULL = 1
    I2 = 2
    I4 = 3
    R4 = 4
    R8 = 5
    CY = 6
    DATE = 7
    BSTR = 8
    ERROR = 10
    BOOL = 11
    VARIANT = 12
    DECIMAL = 14
    I1 = 16
    UI1 = 17
    UI2 = 18
    UI4 = 19
    I8 = 20
    UI8 = 21
    INT = 22
    UINT = 23
    LPSTR = 30
    LPWSTR = 31
    FILETIME = 64
    BLOB = 65
    STREAM = 66
    STORAGE = 67
    STREAMED_OBJECT = 68
    STORED_OBJECT = 69
    BLOB_OBJECT = 70
    CF = 71
    CLSID = 72
    VERSIONED_STREAM = 73


class PropertyDimension(enum.Enum):
    SCALAR = "scalar"
    VECTOR = "vector"
    ARRAY = "array"


# Variant vector as written by Office for HeadingPairs and friends
VT_VARIANT_VECTOR = VT_VECTOR | VTType.VARIANT
VT_VARIANT_ARRAY = VT_ARRAY | VTType.VARIANT

_BY_VALUE = {member.value: member for member in VTType}


def base_type_of(type_tag: int) -> VTType | None:
    """Base type of a tag, or None if the low byte is not a known VT type."""
    return _BY_VALUE.get(type_tag & VT_TYPE_MASK)


def dimension_of(type_tag: int) -> PropertyDimension:
    if type_tag & VT_VECTOR:
        return PropertyDimension.VECTOR
    if type_tag & VT_ARRAY:
        return PropertyDimension.ARRAY
    return PropertyDimension.SCALAR


def type_name(type_tag: int) -> str:
    """Human readable tag, e.g. ``VT_VECTOR|VT_LPSTR``."""
    base = base_type_of(type_tag)
    name = f"VT_{base.name}" if base is not None else f"0x{type_tag & VT_TYPE_MASK:02X}"
    dimension = dimension_of(type_tag)
    if dimension is PropertyDimension.VECTOR:
        return f"VT_VECTOR|{name}"
    if dimension is PropertyDimension.ARRAY:
        return f"VT_ARRAY|{name}"
    return name
