"""
Column descriptors: which properties of a record are shown, and how.

Two variants only. A NamedColumn reads one key; a ComputedColumn derives
its value (and optionally a per-cell CSS class) from the whole record with
plain one-argument callables. Descriptors can be written as strings or
mappings and normalised with parse_column.
"""

from collections.abc import Mapping
from typing import Any, Callable, List, Optional, Sequence, Union

from pydantic import BaseModel, ConfigDict

from .errors import InvalidColumnError

WILDCARD = "*"

Record = Mapping[str, Any]
RecordFunc = Callable[[Record], Any]

_LABEL_KEYS = ("label", "name", "n")
_VALUE_KEYS = ("value", "expression", "e")
_CSS_KEYS = ("css_class", "css")


class NamedColumn(BaseModel):
    """Plain property: label is the key, value is record[key]."""

    model_config = ConfigDict(frozen=True)

    key: str

    @property
    def label(self) -> str:
        return self.key

    def value(self, record: Record) -> Any:
        return record.get(self.key)

    def css_class(self, record: Record) -> Optional[str]:
        return None


class ComputedColumn(BaseModel):
    """Column whose value and cell class are derived from the whole record."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    label: str
    expression: RecordFunc
    css: Optional[RecordFunc] = None

    def value(self, record: Record) -> Any:
        return self.expression(record)

    def css_class(self, record: Record) -> Optional[str]:
        if self.css is None:
            return None
        css = self.css(record)
        return str(css) if css else None


class BrokenColumn(BaseModel):
    """Stand-in for a descriptor that failed validation; renders empty cells."""

    model_config = ConfigDict(frozen=True)

    label: str = ""
    reason: str = ""

    def value(self, record: Record) -> Any:
        return None

    def css_class(self, record: Record) -> Optional[str]:
        return None


Column = Union[NamedColumn, ComputedColumn, BrokenColumn]
ColumnSpec = Union[str, Mapping[str, Any], NamedColumn, ComputedColumn]


def _first(spec: Mapping[str, Any], keys: Sequence[str]) -> Any:
    for k in keys:
        if spec.get(k) is not None:
            return spec[k]
    return None


def _getter(key: str) -> RecordFunc:
    def get(record: Record) -> Any:
        return record.get(key)
    return get


def parse_column(spec: ColumnSpec) -> Column:
    """Normalise one descriptor. Raises InvalidColumnError for unusable computed specs."""
    if isinstance(spec, ComputedColumn):
        if not spec.label:
            raise InvalidColumnError("computed column has no label")
        return spec
    if isinstance(spec, NamedColumn):
        return spec
    if isinstance(spec, str):
        if not spec or spec == WILDCARD:
            raise InvalidColumnError(f"not a property name: {spec!r}")
        return NamedColumn(key=spec)
    if isinstance(spec, Mapping):
        label = _first(spec, _LABEL_KEYS)
        expression = _first(spec, _VALUE_KEYS)
        css = _first(spec, _CSS_KEYS)
        if label is None or str(label) == "":
            raise InvalidColumnError("computed column has no label")
        if expression is None:
            raise InvalidColumnError(f"computed column {label!r} has no value expression")
        if isinstance(expression, str):
            # {"label": "Name", "value": "name"} relabels a plain property
            expression = _getter(expression)
        if not callable(expression):
            raise InvalidColumnError(f"computed column {label!r}: value expression is not callable")
        if css is not None and not callable(css):
            raise InvalidColumnError(f"computed column {label!r}: css expression is not callable")
        return ComputedColumn(label=str(label), expression=expression, css=css)
    raise InvalidColumnError(f"unsupported column descriptor: {spec!r}")


def is_wildcard(properties: Optional[Sequence[ColumnSpec]]) -> bool:
    """True when columns must be resolved from each record's own keys."""
    if not properties:
        return True
    if isinstance(properties, str):
        return properties == WILDCARD
    return len(properties) == 1 and properties[0] == WILDCARD


def as_record(item: Any) -> Record:
    """View one input item as a mapping; pydantic models are dumped in field order."""
    if isinstance(item, Mapping):
        return item
    if isinstance(item, BaseModel):
        return item.model_dump()
    raise TypeError(f"records must be mappings or pydantic models, got {type(item).__name__}")


def columns_for_record(record: Record) -> List[Column]:
    """All properties of a record, in their natural order."""
    return [NamedColumn(key=str(k)) for k in record.keys()]


def label_of(spec: ColumnSpec) -> str:
    """Best-effort label for a descriptor that failed to parse."""
    if isinstance(spec, ComputedColumn):
        return spec.label
    if isinstance(spec, Mapping):
        label = _first(spec, _LABEL_KEYS)
        return "" if label is None else str(label)
    return ""
