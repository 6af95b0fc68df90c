import base64
import datetime
import enum
import typing
import uuid
from collections.abc import Mapping
from dataclasses import fields, is_dataclass

from oleprops.data_types import Property
from oleprops.vt_types import type_name

# Type marker key written for every dataclass
_TYPE_KEY = "_type"


def _bytes_to_base64(data: bytes | bytearray) -> str:
    return base64.b64encode(bytes(data)).decode("utf-8")


def _serialize_property(prop: Property, include_binary: bool) -> dict:
    result = {
        _TYPE_KEY: type(prop).__name__,
        "id": prop.id,
        "name": prop.name,
        "type_tag": prop.type_tag,
        "type": type_name(prop.type_tag),
        "dimension": prop.dimension.value,
        "text": prop.to_text(),
    }
    if prop.values is not None:
        result["values"] = _serialize_for_json(prop.values, include_binary)
    else:
        result["value"] = _serialize_for_json(prop.value, include_binary)
    if prop.is_variant:
        result["is_variant"] = True
    return result


def _serialize_for_json(value: typing.Any, include_binary: bool = True) -> typing.Any:
    if isinstance(value, Property):
        return _serialize_property(value, include_binary)
    if isinstance(value, (bytes, bytearray)):
        return {"_bytes": _bytes_to_base64(value)} if include_binary else None
    if isinstance(value, datetime.datetime):
        return value.isoformat()
    if isinstance(value, uuid.UUID):
        return str(value).upper()
    if isinstance(value, enum.Enum):
        return value.name
    if is_dataclass(value) and not isinstance(value, type):
        result = {
            _TYPE_KEY: type(value).__name__,
        }
        for item in fields(value):
            result[item.name] = _serialize_for_json(
                getattr(value, item.name), include_binary
            )
        return result
    if isinstance(value, Mapping):
        return {
            str(key): _serialize_for_json(val, include_binary)
            for key, val in value.items()
        }
    if isinstance(value, (list, tuple, set)):
        return [_serialize_for_json(item, include_binary) for item in value]
    return value


def serialize_properties(value: typing.Any, include_binary: bool = True) -> dict:
    """
    Convert decoded property data into JSON-compatible structures.

    Dataclasses become dicts with a ``_type`` marker, timestamps ISO-8601
    strings, GUIDs upper-case strings and raw bytes ``{"_bytes": base64}``
    (or None when ``include_binary`` is False). Every property also carries
    its text rendering under ``text``.
    """
    serialized = _serialize_for_json(value, include_binary)
    if isinstance(serialized, dict):
        return serialized
    return {"value": serialized}
