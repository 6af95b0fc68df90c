"""
Names of the predefined properties of the SummaryInformation and
DocSummaryInformation property sets, in property id order starting at 1
(the same attribute names olefile's OleMetadata uses).
"""

import uuid

from oleprops.data_types import (
    FMTID_DOC_SUMMARY_INFORMATION,
    FMTID_SUMMARY_INFORMATION,
    Property,
)

SUMMARY_ATTRIBS = [
    "codepage",
    "title",
    "subject",
    "author",
    "keywords",
    "comments",
    "template",
    "last_saved_by",
    "revision_number",
    "total_edit_time",
    "last_printed",
    "create_time",
    "last_saved_time",
    "num_pages",
    "num_words",
    "num_chars",
    "thumbnail",
    "creating_application",
    "security",
]

DOCSUM_ATTRIBS = [
    "codepage_doc",
    "category",
    "presentation_target",
    "bytes",
    "lines",
    "paragraphs",
    "slides",
    "notes",
    "hidden_slides",
    "mm_clips",
    "scale_crop",
    "heading_pairs",
    "titles_of_parts",
    "manager",
    "company",
    "links_dirty",
    "chars_with_spaces",
    "unused",
    "shared_doc",
    "link_base",
    "hlinks",
    "hlinks_changed",
    "version",
    "dig_sig",
    "content_type",
    "content_status",
    "language",
    "doc_version",
]

WELL_KNOWN_NAMES = {
    FMTID_SUMMARY_INFORMATION: dict(enumerate(SUMMARY_ATTRIBS, start=1)),
    FMTID_DOC_SUMMARY_INFORMATION: dict(enumerate(DOCSUM_ATTRIBS, start=1)),
}


def well_known_name(fmtid: uuid.UUID, property_id: int) -> str | None:
    return WELL_KNOWN_NAMES.get(fmtid, {}).get(property_id)


def describe_property(fmtid: uuid.UUID, prop: Property) -> str:
    """Dictionary name, else the predefined name, else the hex property id."""
    if prop.name:
        return prop.name
    return well_known_name(fmtid, prop.id) or f"0x{prop.id:08X}"
