from __future__ import annotations

import csv
import io
import json
import xml.etree.ElementTree as ET
from collections.abc import Mapping, Sequence
from typing import Any

from ofsc.exceptions import ValidationError


def _csv_value(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return value


def records_to_csv(rows: Sequence[Mapping[str, Any]]) -> str:
    """
    Serialise records to CSV text.

    The header comes from the first row's keys. Fields containing commas,
    quotes or newlines are quoted with doubled inner quotes; None becomes an
    empty field and nested values are JSON-encoded.

    Raises:
        ValidationError: If no rows are given
    """
    if not rows:
        raise ValidationError("CSV creation failed: no rows provided.")

    headers = list(rows[0].keys())
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(headers)
    for row in rows:
        writer.writerow([_csv_value(row.get(h)) for h in headers])
    return buffer.getvalue().rstrip("\n")


def csv_to_records(text: str) -> list[dict[str, str]]:
    """Parse CSV text with a header row back into one dict per data row."""
    return [dict(row) for row in csv.DictReader(io.StringIO(text))]


def write_csv(rows: Sequence[Mapping[str, Any]], path: str) -> None:
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(records_to_csv(rows) + "\n")


def xml_nodes_to_records(xml_text: str, parent_node: str) -> list[dict[str, str]]:
    """
    Flatten ``<Field name="...">`` children of every ``parent_node`` element.

    Args:
        xml_text (str): XML document
        parent_node (str): Tag of the elements to turn into records

    Returns:
        list[dict[str, str]]: One mapping of field name to stripped text per element

    Raises:
        ValidationError: If the XML is malformed or has no ``parent_node`` element
    """
    try:
        root = ET.fromstring(xml_text)
    except ET.ParseError as e:
        raise ValidationError(f"Malformed XML: {e}") from e

    nodes = list(root.iter(parent_node))
    if not nodes:
        raise ValidationError(f"No <{parent_node}> nodes found")

    records = []
    for node in nodes:
        record: dict[str, str] = {}
        for field in node.iter("Field"):
            key = field.get("name")
            if not key:
                continue
            record[key] = "".join(field.itertext()).strip()
        records.append(record)
    return records
