"""Measurement codec — free-text measurement documents <-> ordered field lists.

The stored form of an order's measurements is plain text, one field per line::

    === SHIRT ===
    Length: 30
    Chest: 40

    === TROUSER ===
    Waist: 32

Header lines open a section (usually one per garment type); every other line
is ``label: value``, split at the first colon so values may contain colons.
The structured form is an ordered list of ``HeaderField``/``ValueField``.
"""

import json
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from protean.exceptions import ValidationError

# A run of three or more "=" on both sides of a title, optional trailing colon
_HEADER_PATTERN = re.compile(r"^={3,}\s*(?P<title>.*?)\s*={3,}\s*:?$")


@dataclass(frozen=True)
class HeaderField:
    """Section header, e.g. the garment type the following fields belong to."""

    label: str


@dataclass(frozen=True)
class ValueField:
    """A single labelled measurement."""

    label: str
    value: str = ""


MeasurementField = HeaderField | ValueField


@dataclass(frozen=True)
class Section:
    """Header-led group of value fields. ``header`` is None for leading fields."""

    header: HeaderField | None
    fields: tuple[ValueField, ...] = field(default_factory=tuple)


def _unquote(text: str) -> str:
    return text.removeprefix('"').removesuffix('"')


def _quote(text: str) -> str:
    # decode strips one quote from each end; wrap so the original ones survive
    if text.startswith('"') or text.endswith('"'):
        return f'"{text}"'
    return text


def _decode_line(line: str) -> MeasurementField | None:
    stripped = line.strip()
    if not stripped:
        return None

    header = _HEADER_PATTERN.match(stripped)
    if header and header.group("title"):
        return HeaderField(label=header.group("title"))

    label, _, value = stripped.partition(":")
    label = _unquote(label.strip())
    if not label:
        return None

    return ValueField(label=label, value=_unquote(value.strip()))


def decode(text: str | None) -> list[MeasurementField]:
    """Parse measurement text into an ordered field list.

    Blank lines and lines without a label are dropped. Header titles are
    not checked against any garment catalog.
    """
    if not text:
        return []

    fields = []
    for line in text.splitlines():
        decoded = _decode_line(line)
        if decoded is not None:
            fields.append(decoded)
    return fields


def encode(fields: Iterable[MeasurementField]) -> str:
    """Render a field list back into measurement text.

    Labels and values that begin or end with a double quote are wrapped in
    one more pair so that ``decode`` returns them unchanged. Labels must not
    contain a colon.
    """
    lines: list[str] = []
    for item in fields:
        if isinstance(item, HeaderField):
            if lines:
                lines.append("")
            lines.append(f"=== {item.label} ===")
        else:
            lines.append(f"{_quote(item.label)}: {_quote(item.value)}")
    return "\n".join(lines)


def coerce_text(raw) -> str:
    """Normalize the shapes measurements have been stored in over time.

    Accepts plain text, text that was JSON-encoded twice (wrapped in quotes
    with escaped newlines), a mapping of label to value, or None.
    """
    if raw is None:
        return ""

    if isinstance(raw, Mapping):
        return encode(
            ValueField(label=str(label), value="" if value is None else str(value)) for label, value in raw.items()
        )

    if not isinstance(raw, str):
        raise ValidationError({"measurements": ["Measurements must be text or a mapping of label to value"]})

    if len(raw) >= 2 and raw.startswith('"') and raw.endswith('"'):
        try:
            loaded = json.loads(raw)
        except json.JSONDecodeError:
            return raw[1:-1].replace("\\n", "\n")
        if isinstance(loaded, str):
            return loaded

    return raw


def split_sections(fields: Iterable[MeasurementField]) -> list[Section]:
    """Group a field list into header-led sections, preserving order."""
    sections: list[Section] = []
    header: HeaderField | None = None
    current: list[ValueField] = []
    started = False

    for item in fields:
        if isinstance(item, HeaderField):
            if started:
                sections.append(Section(header=header, fields=tuple(current)))
            header, current, started = item, [], True
        else:
            current.append(item)
            started = True

    if started:
        sections.append(Section(header=header, fields=tuple(current)))
    return sections


def _garment_block(garment_type: str, catalog: Mapping[str, list[str]]) -> list[MeasurementField]:
    field_names = catalog.get(garment_type)
    if field_names is None:
        # Catalog keys are display names; accept any casing from callers
        match = next((name for name in catalog if name.lower() == garment_type.strip().lower()), None)
        if match is None:
            raise ValidationError({"garment_type": [f"No measurement standard defined for '{garment_type}'"]})
        garment_type, field_names = match, catalog[match]

    return [HeaderField(label=garment_type.upper()), *(ValueField(label=name) for name in field_names)]


def append_garment_block(
    fields: Iterable[MeasurementField],
    garment_type: str,
    catalog: Mapping[str, list[str]],
) -> list[MeasurementField]:
    """Return ``fields`` followed by a fresh, empty block for ``garment_type``."""
    return [*fields, *_garment_block(garment_type, catalog)]


def expand_standard_outfit(
    garment_types: Iterable[str],
    catalog: Mapping[str, list[str]],
) -> list[MeasurementField]:
    """Expand an outfit (ordered garment types) into one block per garment."""
    expanded: list[MeasurementField] = []
    for garment_type in garment_types:
        expanded.extend(_garment_block(garment_type, catalog))
    return expanded


def to_dicts(fields: Iterable[MeasurementField]) -> list[dict]:
    """Flatten fields into the ``{label, value, is_header}`` shape used on the wire."""
    return [
        {"label": item.label, "value": "", "is_header": True}
        if isinstance(item, HeaderField)
        else {"label": item.label, "value": item.value, "is_header": False}
        for item in fields
    ]


def from_dicts(rows: Iterable[Mapping]) -> list[MeasurementField]:
    """Build fields from wire dicts; rows without a label are skipped."""
    fields: list[MeasurementField] = []
    for row in rows:
        label = str(row.get("label") or "").strip()
        if not label:
            continue
        if row.get("is_header"):
            fields.append(HeaderField(label=label))
        else:
            fields.append(ValueField(label=label, value=str(row.get("value") or "").strip()))
    return fields
