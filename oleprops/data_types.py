import datetime
import enum
import types
import typing
import uuid
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, List, Mapping, Optional, Tuple

from oleprops.vt_types import PropertyDimension, VTType, base_type_of, dimension_of

# https://learn.microsoft.com/en-us/windows/win32/stg/predefined-property-set-format-identifiers
FMTID_SUMMARY_INFORMATION = uuid.UUID("F29F85E0-4FF9-1068-AB91-08002B27B3D9")
FMTID_DOC_SUMMARY_INFORMATION = uuid.UUID("D5CDD502-2E9C-101B-9397-08002B2CF9AE")
FMTID_USER_DEFINED_PROPERTIES = uuid.UUID("D5CDD505-2E9C-101B-9397-08002B2CF9AE")

NIL_TEXT = "<nil>"

_DATE_TYPES = (VTType.FILETIME, VTType.DATE)
_EMPTY_TYPES = (VTType.EMPTY, VTType.NULL)


class PropertySetKind(enum.Enum):
    SUMMARY_INFORMATION = "summary_information"
    DOC_SUMMARY_INFORMATION = "doc_summary_information"
    USER_DEFINED_PROPERTIES = "user_defined_properties"
    OTHER = "other"

    @classmethod
    def from_format_id(cls, format_id: uuid.UUID) -> "PropertySetKind":
        return _KIND_BY_FMTID.get(format_id, cls.OTHER)


_KIND_BY_FMTID = {
    FMTID_SUMMARY_INFORMATION: PropertySetKind.SUMMARY_INFORMATION,
    FMTID_DOC_SUMMARY_INFORMATION: PropertySetKind.DOC_SUMMARY_INFORMATION,
    FMTID_USER_DEFINED_PROPERTIES: PropertySetKind.USER_DEFINED_PROPERTIES,
}


def _format_timestamp(value: datetime.datetime) -> str:
    # strftime does not zero-pad years before 1000 on every platform
    return (
        f"{value.year:04d}-{value.month:02d}-{value.day:02d}"
        f"T{value.hour:02d}:{value.minute:02d}:{value.second:02d}Z"
    )


def _format_scalar(vt_type: VTType | None, value: Any) -> str:
    if isinstance(value, Property):
        return value.to_text()
    if value is None:
        return NIL_TEXT
    if vt_type in _DATE_TYPES:
        return _format_timestamp(value)
    if vt_type is VTType.BOOL:
        return "true" if value else "false"
    if isinstance(value, bytes):
        return value.hex()
    return str(value)


@dataclass(frozen=True)
class Property:
    """
    One decoded property value.

    ``value`` holds the result for scalar tags, ``values`` the ordered
    elements for vector tags. A scalar whose bytes could not be decoded keeps
    ``value`` at None. Elements nested in a variant vector carry
    ``is_variant=True`` and id 0.
    """

    id: int
    type_tag: int
    name: Optional[str] = None
    value: Any = None
    values: Optional[Tuple[Any, ...]] = None
    is_variant: bool = False

    @property
    def vt_type(self) -> VTType | None:
        return base_type_of(self.type_tag)

    @property
    def dimension(self) -> PropertyDimension:
        return dimension_of(self.type_tag)

    @property
    def is_absent(self) -> bool:
        """True when the value failed to decode."""
        if self.dimension is PropertyDimension.VECTOR:
            return self.values is None
        return self.value is None and self.vt_type not in _EMPTY_TYPES

    def to_text(self) -> str:
        vt_type = self.vt_type
        if self.dimension is PropertyDimension.VECTOR:
            if self.values is None:
                return NIL_TEXT
            return "[" + ", ".join(_format_scalar(vt_type, v) for v in self.values) + "]"
        return _format_scalar(vt_type, self.value)

    def __str__(self) -> str:
        return self.to_text()


@dataclass(frozen=True)
class PropertyEntry:
    id: int
    # relative to the owning property set's base offset
    offset: int


@dataclass(frozen=True)
class PropertySetDescriptor:
    format_id: uuid.UUID
    # relative to the start of the stream
    offset: int


@dataclass(frozen=True)
class PropertySet:
    id: uuid.UUID
    size: int
    property_count: int
    entries: Tuple[PropertyEntry, ...] = ()
    code_page: int = 0
    # read-only, property id -> dictionary name
    name_map: Mapping[int, str] = field(
        default_factory=lambda: types.MappingProxyType({})
    )
    properties: Tuple[Property, ...] = ()

    @property
    def kind(self) -> PropertySetKind:
        return PropertySetKind.from_format_id(self.id)

    @property
    def has_named_properties(self) -> bool:
        return bool(self.name_map)

    def get_property(self, property_id: int) -> Property | None:
        for prop in self.properties:
            if prop.id == property_id:
                return prop
        return None

    def get_property_by_name(self, name: str) -> Property | None:
        for prop in self.properties:
            if prop.name == name:
                return prop
        return None


@dataclass(frozen=True)
class PropertyCollection:
    """A decoded property set stream: header, descriptors and one or two sets."""

    byte_order: int
    version: int
    system_identifier: int
    class_id: bytes
    descriptors: Tuple[PropertySetDescriptor, ...] = ()
    property_sets: Tuple[PropertySet, ...] = ()

    def get_all_properties(self) -> List[Property]:
        return [prop for prop_set in self.property_sets for prop in prop_set.properties]

    def get_custom_properties(self) -> List[Property]:
        """Properties of the UserDefinedProperties set(s) only."""
        return [
            prop
            for prop_set in self.property_sets
            if prop_set.id == FMTID_USER_DEFINED_PROPERTIES
            for prop in prop_set.properties
        ]

    def get_property_set(self, kind: PropertySetKind) -> PropertySet | None:
        for prop_set in self.property_sets:
            if prop_set.kind is kind:
                return prop_set
        return None

    @property
    def summary_information(self) -> PropertySet | None:
        return self.get_property_set(PropertySetKind.SUMMARY_INFORMATION)

    @property
    def doc_summary_information(self) -> PropertySet | None:
        return self.get_property_set(PropertySetKind.DOC_SUMMARY_INFORMATION)

    @property
    def user_defined_properties(self) -> PropertySet | None:
        return self.get_property_set(PropertySetKind.USER_DEFINED_PROPERTIES)

    def to_json(self) -> dict:
        from oleprops.serialization import serialize_properties

        return serialize_properties(self)


@dataclass
class OleFileMetadata:
    filename: str | None = None
    file_extension: str | None = None
    file_path: str | None = None
    folder_path: str | None = None

    def populate_from_path(self, path: str | Path | None) -> None:
        """Populate file metadata fields from a path."""
        if path is None:
            return
        p = Path(path)
        self.filename = p.name
        self.file_extension = p.suffix
        self.file_path = str(p.resolve()) if p.exists() else str(p)
        self.folder_path = (
            str(p.parent.resolve()) if p.parent.exists() else str(p.parent)
        )

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class OlePropertiesContent:
    """Property streams found in one compound file."""

    summary_information: Optional[PropertyCollection] = None
    doc_summary_information: Optional[PropertyCollection] = None
    streams: List[str] = field(default_factory=list)
    metadata: OleFileMetadata = field(default_factory=OleFileMetadata)

    def iterator(self) -> typing.Iterator[PropertyCollection]:
        for collection in (self.summary_information, self.doc_summary_information):
            if collection is not None:
                yield collection

    def get_all_properties(self) -> List[Property]:
        return [prop for c in self.iterator() for prop in c.get_all_properties()]

    def get_custom_properties(self) -> List[Property]:
        return [prop for c in self.iterator() for prop in c.get_custom_properties()]

    def get_metadata(self) -> OleFileMetadata:
        return self.metadata

    def to_json(self) -> dict:
        from oleprops.serialization import serialize_properties

        return serialize_properties(self)
