"""Loading tree data from JSON payloads and GEDCOM files."""

import json
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from ged4py import GedcomReader
from ged4py.parser import IntegrityError, ParserError

from log import get_logger
from models import Gender, ParentChild, Person, TreeData, Union, UnionChild

logger = get_logger(__name__)


class TreeDataError(ValueError):
    """Raised when a tree data payload is missing required fields."""


MONTH_MAP = {
    "JAN": 1,
    "FEB": 2,
    "MAR": 3,
    "APR": 4,
    "MAY": 5,
    "JUN": 6,
    "JUL": 7,
    "AUG": 8,
    "SEP": 9,
    "OCT": 10,
    "NOV": 11,
    "DEC": 12,
}

DATE_QUALIFIERS = re.compile(
    r"^(ABT\.?|ABOUT|BEF\.?|BEFORE|AFT\.?|AFTER|EST\.?|CAL\.?|CIRCA|CA\.?|AROUND):?\s*",
    flags=re.IGNORECASE,
)

GEDCOM_SUFFIXES = {".ged", ".gedcom"}


def parse_date_string(date_str: str | None) -> str | None:
    """
    Parse a GEDCOM-style date string into ISO format (YYYY-MM-DD).
    Returns None if the date cannot be parsed.

    Handles "25 NOV 1954", "NOV 1954", "1698", "ABT 1905" and ISO dates.
    Missing month or day default to 01.
    """
    if not date_str:
        return None

    s = DATE_QUALIFIERS.sub("", date_str.strip().strip("()").rstrip("?")).strip()
    if not s:
        return None

    # "1839-08-29"
    match = re.match(r"^(\d{4})-(\d{2})-(\d{2})$", s)
    if match:
        year, month, day = (int(g) for g in match.groups())
        month, day = month or 1, day or 1
        if 1 <= month <= 12 and 1 <= day <= 31:
            return f"{year:04d}-{month:02d}-{day:02d}"
        return None

    # "25 NOV 1954", "NOV 1954", "1954"
    match = re.match(r"^(?:(\d{1,2})\s+)?(?:([A-Za-z]+)\.?,?\s*)?(\d{4})$", s)
    if match:
        day_str, month_str, year_str = match.groups()
        month = MONTH_MAP.get(month_str[:3].upper()) if month_str else 1
        if month is None:
            return None
        day = int(day_str) if day_str else 1
        if 1 <= day <= 31:
            return f"{int(year_str):04d}-{month:02d}-{day:02d}"

    return None


# ============================================================================
# JSON payloads
# ============================================================================


def _require(record: Mapping[str, Any], key: str, kind: str) -> str:
    value = record.get(key)
    if value in (None, ""):
        raise TreeDataError(f"{kind} record is missing '{key}': {dict(record)}")
    return str(value)


def _parse_gender(value: Any) -> Gender:
    if value in (None, ""):
        return Gender.UNKNOWN
    try:
        return Gender(str(value).lower())
    except ValueError as exc:
        raise TreeDataError(f"Unknown gender value: {value!r}") from exc


def person_from_dict(record: Mapping[str, Any]) -> Person:
    first_name = record.get("first_name")
    last_name = record.get("last_name")

    # Some payloads only carry a combined display name
    if first_name is None and last_name is None and record.get("name"):
        first_name, _, last_name = str(record["name"]).strip().partition(" ")
        last_name = last_name or None

    death_date = record.get("death_date")
    is_alive = record.get("is_alive")
    if is_alive is None:
        is_alive = not death_date

    return Person(
        id=_require(record, "id", "Person"),
        first_name=first_name,
        last_name=last_name,
        middle_name=record.get("middle_name"),
        gender=_parse_gender(record.get("gender")),
        birth_date=record.get("birth_date"),
        death_date=death_date,
        is_alive=bool(is_alive),
        photo_url=record.get("photo_url"),
    )


def union_from_dict(record: Mapping[str, Any]) -> Union:
    return Union(
        union_id=_require(record, "union_id", "Union"),
        p1=_require(record, "p1", "Union"),
        p2=record.get("p2") or None,
        p1_role=record.get("p1_role"),
        p2_role=record.get("p2_role"),
        marriage_date=record.get("marriage_date"),
        divorce_date=record.get("divorce_date"),
    )


def _records(payload: Mapping[str, Any], kind: str, *keys: str) -> list[Mapping[str, Any]]:
    """Return the first collection present under `keys`, checking every entry is an object."""
    records = None
    for key in keys:
        records = payload.get(key)
        if records is not None:
            break
    if not records:
        return []
    if not isinstance(records, list):
        raise TreeDataError(f"'{keys[0]}' must be a list, got {type(records).__name__}")
    for record in records:
        if not isinstance(record, Mapping):
            raise TreeDataError(f"{kind} record must be an object: {record!r}")
    return records


def tree_data_from_dict(payload: Mapping[str, Any]) -> TreeData:
    """
    Build TreeData from the wire shape {persons, parentChild, unions, unionChildren}.

    snake_case keys (parent_child, union_children) are accepted too; missing
    collections are treated as empty.
    """
    if not isinstance(payload, Mapping):
        raise TreeDataError(f"Tree data must be an object, got {type(payload).__name__}")

    persons = _records(payload, "Person", "persons")
    parent_child = _records(payload, "ParentChild", "parentChild", "parent_child")
    unions = _records(payload, "Union", "unions")
    union_children = _records(payload, "UnionChild", "unionChildren", "union_children")

    return TreeData(
        persons=tuple(person_from_dict(p) for p in persons),
        parent_child=tuple(
            ParentChild(
                parent_id=_require(pc, "parent_id", "ParentChild"),
                child_id=_require(pc, "child_id", "ParentChild"),
            )
            for pc in parent_child
        ),
        unions=tuple(union_from_dict(u) for u in unions),
        union_children=tuple(
            UnionChild(
                union_id=_require(uc, "union_id", "UnionChild"),
                child_id=_require(uc, "child_id", "UnionChild"),
            )
            for uc in union_children
        ),
    )


def load_json(filepath: Path) -> TreeData:
    with open(filepath, encoding="utf-8") as f:
        return tree_data_from_dict(json.load(f))


# ============================================================================
# GEDCOM
# ============================================================================


def _xref(xref_id: str) -> str:
    """'@I123@' -> 'I123'"""
    return xref_id.strip("@")


def extract_name_parts(indi) -> tuple[str | None, str | None]:
    """Extract given name and surname from an individual record."""
    name_rec = indi.sub_tag("NAME")
    if name_rec is None or name_rec.value is None:
        return (None, None)

    name_value = name_rec.value

    # ged4py returns NAME as tuple: (given, surname, suffix)
    if isinstance(name_value, tuple):
        given, surname, _ = name_value
        return (given or None, surname or None)

    givn = name_rec.sub_tag("GIVN")
    surn = name_rec.sub_tag("SURN")
    if givn or surn:
        return (givn.value if givn else None, surn.value if surn else None)

    # "Given /Surname/"
    given, _, rest = str(name_value).partition("/")
    return (given.strip() or None, rest.strip("/ ") or None)


def extract_event_date(rec, tag: str) -> str | None:
    """ISO date of an event tag (BIRT, DEAT, MARR, DIV), if it can be parsed."""
    event = rec.sub_tag(tag)
    if event is None:
        return None
    date_rec = event.sub_tag("DATE")
    if date_rec is None or not date_rec.value:
        return None
    # ged4py may return DateValue objects
    return parse_date_string(str(date_rec.value))


def extract_gender(indi) -> Gender:
    sex_rec = indi.sub_tag("SEX")
    sex = sex_rec.value if sex_rec else None
    if sex == "M":
        return Gender.MALE
    if sex == "F":
        return Gender.FEMALE
    if sex in ("U", None):
        return Gender.UNKNOWN
    return Gender.OTHER


def normalize_gedcom(reader: GedcomReader) -> TreeData:
    """
    Extract persons, unions and parent-child links from parsed GEDCOM data.

    Two-parent families become unions with their children attached. A
    one-parent family becomes a union without a second partner only when that
    parent also has a two-parent family; otherwise the parent links straight
    to the children.
    """
    persons: list[Person] = []
    for rec in reader.records0("INDI"):
        if rec.xref_id is None:
            continue
        given_name, surname = extract_name_parts(rec)
        death_date = extract_event_date(rec, "DEAT")
        persons.append(
            Person(
                id=_xref(rec.xref_id),
                first_name=given_name,
                last_name=surname,
                gender=extract_gender(rec),
                birth_date=extract_event_date(rec, "BIRT"),
                death_date=death_date,
                is_alive=rec.sub_tag("DEAT") is None,
            )
        )

    families: list[dict] = []
    for rec in reader.records0("FAM"):
        if rec.xref_id is None:
            continue
        husb = rec.sub_tag("HUSB")
        wife = rec.sub_tag("WIFE")
        families.append(
            {
                "id": _xref(rec.xref_id),
                "husb": _xref(husb.xref_id) if husb and husb.xref_id else None,
                "wife": _xref(wife.xref_id) if wife and wife.xref_id else None,
                "children": [_xref(c.xref_id) for c in rec.sub_tags("CHIL") if c.xref_id],
                "marriage_date": extract_event_date(rec, "MARR"),
                "divorce_date": extract_event_date(rec, "DIV"),
            }
        )

    partnered = {
        p for fam in families if fam["husb"] and fam["wife"] for p in (fam["husb"], fam["wife"])
    }

    parent_child: list[ParentChild] = []
    unions: list[Union] = []
    union_children: list[UnionChild] = []

    for fam in families:
        parents = [p for p in (fam["husb"], fam["wife"]) if p]
        if not parents:
            continue

        for parent in parents:
            parent_child.extend(ParentChild(parent, child) for child in fam["children"])

        if len(parents) == 1 and parents[0] not in partnered:
            continue

        roles = {fam["husb"]: "husband", fam["wife"]: "wife"}
        unions.append(
            Union(
                union_id=fam["id"],
                p1=parents[0],
                p2=parents[1] if len(parents) > 1 else None,
                p1_role=roles.get(parents[0]),
                p2_role=roles.get(parents[1]) if len(parents) > 1 else None,
                marriage_date=fam["marriage_date"],
                divorce_date=fam["divorce_date"],
            )
        )
        union_children.extend(UnionChild(fam["id"], child) for child in fam["children"])

    logger.info(
        "gedcom_normalized",
        persons=len(persons),
        unions=len(unions),
        parent_child=len(parent_child),
    )
    return TreeData(
        persons=tuple(persons),
        parent_child=tuple(parent_child),
        unions=tuple(unions),
        union_children=tuple(union_children),
    )


def load_gedcom(filepath: Path) -> TreeData:
    try:
        with GedcomReader(str(filepath)) as reader:
            return normalize_gedcom(reader)
    except (ParserError, IntegrityError) as exc:
        raise TreeDataError(f"Invalid GEDCOM file: {exc}") from exc


def load_tree_data(filepath: Path) -> TreeData:
    """Load tree data from a GEDCOM file (.ged/.gedcom) or a JSON payload."""
    if filepath.suffix.lower() in GEDCOM_SUFFIXES:
        return load_gedcom(filepath)
    return load_json(filepath)
