from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Sequence

from oleprops.data_types import OlePropertiesContent, PropertySetKind
from oleprops.ole_container import read_ole_properties_from_path
from oleprops.serialization import serialize_properties
from oleprops.well_known import describe_property


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="oleprops",
        description="Print the OLE property sets (SummaryInformation, "
        "DocumentSummaryInformation) of a compound file.",
    )
    parser.add_argument(
        "path",
        type=Path,
        help="Path to the .doc/.xls/.ppt/.msi or other OLE2 file.",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Emit structured JSON instead of one line per property.",
    )
    parser.add_argument(
        "--binary",
        action="store_true",
        help="With --json, include blob values as base64.",
    )
    parser.add_argument(
        "--custom",
        action="store_true",
        help="Only print user-defined (custom) properties.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log decoding details to stderr.",
    )
    return parser


def _format_lines(content: OlePropertiesContent, *, custom_only: bool) -> list[str]:
    lines = []
    for collection in content.iterator():
        for prop_set in collection.property_sets:
            if custom_only and prop_set.kind is not PropertySetKind.USER_DEFINED_PROPERTIES:
                continue
            for prop in prop_set.properties:
                label = describe_property(prop_set.id, prop)
                lines.append(f"{prop_set.kind.value} {label}: {prop.to_text()}")
    return lines


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as exc:
        code = exc.code if isinstance(exc.code, int) else 1
        return code

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        stream=sys.stderr,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        if args.binary and not args.json:
            raise ValueError("--binary requires --json")
        content = read_ole_properties_from_path(str(args.path))
        if args.json:
            if args.custom:
                payload = serialize_properties(
                    content.get_custom_properties(), include_binary=args.binary
                )
            else:
                payload = serialize_properties(content, include_binary=args.binary)
            json.dump(payload, sys.stdout)
            sys.stdout.write("\n")
        else:
            for line in _format_lines(content, custom_only=args.custom):
                sys.stdout.write(line)
                sys.stdout.write("\n")
        return 0
    except Exception as exc:
        print(f"oleprops: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
