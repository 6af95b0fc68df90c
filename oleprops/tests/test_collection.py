import io
import logging
import unittest
import uuid

import pytest

from oleprops.collection import read_property_collection
from oleprops.data_types import (
    FMTID_DOC_SUMMARY_INFORMATION,
    FMTID_SUMMARY_INFORMATION,
    FMTID_USER_DEFINED_PROPERTIES,
    PropertySetDescriptor,
    PropertySetKind,
)
from oleprops.exceptions import (
    PropertySetFormatError,
    PropertySetLimitError,
    PropertySetStructureError,
)
from oleprops.limits import DecodeLimits
from oleprops.tests.stream_builder import (
    code_page,
    doc_summary_information_stream,
    i4,
    lpstr,
    property_set,
    property_set_stream,
    summary_information_stream,
)
from oleprops.util.cursor import ByteCursor

logger = logging.getLogger(__name__)

tc = unittest.TestCase()


def test_summary_information_stream():
    collection = read_property_collection(summary_information_stream())

    tc.assertEqual(0xFFFE, collection.byte_order)
    tc.assertEqual(0, collection.version)
    tc.assertEqual(0x00020006, collection.system_identifier)
    tc.assertEqual(b"\x00" * 16, collection.class_id)
    tc.assertEqual(
        (PropertySetDescriptor(format_id=FMTID_SUMMARY_INFORMATION, offset=48),),
        collection.descriptors,
    )
    tc.assertEqual(1, len(collection.property_sets))

    summary = collection.summary_information
    tc.assertIs(PropertySetKind.SUMMARY_INFORMATION, summary.kind)
    tc.assertEqual((1, 2, 4, 12, 14), tuple(p.id for p in summary.properties))
    tc.assertEqual("Quarterly report", summary.get_property(2).value)
    tc.assertEqual("J\xfcrgen", summary.get_property(4).value)
    tc.assertEqual("2021-03-04T05:06:07Z", summary.get_property(12).to_text())
    tc.assertEqual(12, summary.get_property(14).value)

    tc.assertIsNone(collection.doc_summary_information)
    tc.assertIsNone(collection.user_defined_properties)
    tc.assertEqual([], collection.get_custom_properties())


def test_doc_summary_stream_with_custom_properties():
    collection = read_property_collection(doc_summary_information_stream())

    tc.assertEqual(2, len(collection.property_sets))
    tc.assertEqual(
        (FMTID_DOC_SUMMARY_INFORMATION, FMTID_USER_DEFINED_PROPERTIES),
        tuple(d.format_id for d in collection.descriptors),
    )
    tc.assertEqual(
        PropertySetKind.DOC_SUMMARY_INFORMATION, collection.property_sets[0].kind
    )
    tc.assertEqual("ACME", collection.doc_summary_information.get_property(15).value)

    custom = collection.get_custom_properties()
    tc.assertEqual(
        # the code page property of the custom set comes first
        [(None, 1252), ("Project", "Apollo"), ("Approved", True)],
        [(p.name, p.value) for p in custom],
    )

    all_props = collection.get_all_properties()
    tc.assertEqual([1, 15, 1, 2, 3], [p.id for p in all_props])
    for prop in custom:
        tc.assertIn(prop, all_props)


def test_descriptor_order_is_kept():
    stream = property_set_stream(
        [
            (FMTID_USER_DEFINED_PROPERTIES, property_set([(1, code_page(1252))])),
            (FMTID_DOC_SUMMARY_INFORMATION, property_set([(1, code_page(1252))])),
        ]
    )
    collection = read_property_collection(stream)
    tc.assertEqual(
        [PropertySetKind.USER_DEFINED_PROPERTIES, PropertySetKind.DOC_SUMMARY_INFORMATION],
        [s.kind for s in collection.property_sets],
    )


def test_unknown_format_id_is_other():
    fmtid = uuid.UUID("00000000-1111-2222-3333-444444444444")
    stream = property_set_stream([(fmtid, property_set([(2, i4(1))]))])
    collection = read_property_collection(stream)
    tc.assertIs(PropertySetKind.OTHER, collection.property_sets[0].kind)
    tc.assertEqual(fmtid, collection.property_sets[0].id)
    tc.assertEqual([], collection.get_custom_properties())


def test_class_id_is_kept():
    class_id = bytes(range(16))
    stream = property_set_stream(
        [(FMTID_SUMMARY_INFORMATION, property_set([(2, lpstr("x"))]))],
        class_id=class_id,
    )
    tc.assertEqual(class_id, read_property_collection(stream).class_id)


@pytest.mark.parametrize("num_sets", [0, 3, 0xFFFFFFFF])
def test_property_set_count_must_be_one_or_two(num_sets):
    stream = property_set_stream(
        [(FMTID_SUMMARY_INFORMATION, property_set([(2, i4(1))]))],
        num_sets=num_sets,
    )
    with pytest.raises(PropertySetFormatError):
        read_property_collection(stream)


def test_format_error_is_structural():
    tc.assertTrue(issubclass(PropertySetFormatError, PropertySetStructureError))


@pytest.mark.parametrize("length", [0, 10, 27, 40, 60])
def test_truncated_stream(length):
    with pytest.raises(PropertySetStructureError):
        read_property_collection(summary_information_stream()[:length])


def test_descriptor_offset_outside_stream():
    stream = bytearray(summary_information_stream())
    # descriptor offset follows the 28 byte header and the 16 byte fmtid
    stream[44:48] = (len(stream) + 100).to_bytes(4, "little")
    with pytest.raises(PropertySetStructureError):
        read_property_collection(bytes(stream))


def test_limits_are_applied():
    with pytest.raises(PropertySetLimitError):
        read_property_collection(
            summary_information_stream(), DecodeLimits(max_property_count=4)
        )
    with pytest.raises(PropertySetLimitError):
        read_property_collection(
            summary_information_stream(), DecodeLimits(max_string_length=4)
        )


def test_sources():
    data = summary_information_stream()
    expected = read_property_collection(data)

    buffer = io.BytesIO(data)
    buffer.seek(17)
    tc.assertEqual(expected, read_property_collection(buffer))
    tc.assertEqual(expected, read_property_collection(bytearray(data)))
    tc.assertEqual(expected, read_property_collection(memoryview(data)))
    tc.assertEqual(expected, read_property_collection(ByteCursor(data)))


def test_decoding_is_deterministic():
    data = doc_summary_information_stream()
    tc.assertEqual(read_property_collection(data), read_property_collection(data))


def test_trailing_bytes_are_ignored():
    data = summary_information_stream()
    tc.assertEqual(
        read_property_collection(data),
        read_property_collection(data + b"\x00" * 4000),
    )
