"""Decode fact graphs written by an external front-end as JSON/YAML records.

A record document looks like::

    path: src/example.c
    roots:
      - kind: comparison
        line: 8
        column: 9
        operator: ">"
        left_type: uint32_t
        right_type: int8_t

Attributes named ``type`` or ending in ``_type`` are decoded into
:class:`~misracheck.facts.TypeDescriptor` values, either from a C spelling
(``"int*"``, ``"void*"``, ``"uint32_t"``) or from an explicit mapping.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Mapping, Tuple

import yaml

from .errors import FactDecodeError
from .facts import FactGraph, Node, NodeKind, Signedness, SourceLocation, TypeDescriptor
from .utils import read_yaml_file

_STRUCTURAL_KEYS = {"kind", "file", "line", "column", "children"}

_QUALIFIERS = {"const", "volatile", "restrict"}
_INTEGER_SPECIFIERS = {"signed", "unsigned", "char", "short", "int", "long"}

_NAMED_TYPES: Dict[str, Tuple[Signedness, int | None]] = {
    "_Bool": (Signedness.NONE, 8),
    "bool": (Signedness.NONE, 8),
    "float": (Signedness.NONE, 32),
    "double": (Signedness.NONE, 64),
    "long double": (Signedness.NONE, 128),
    "size_t": (Signedness.UNSIGNED, 64),
    "ssize_t": (Signedness.SIGNED, 64),
    "ptrdiff_t": (Signedness.SIGNED, 64),
    "intptr_t": (Signedness.SIGNED, 64),
    "uintptr_t": (Signedness.UNSIGNED, 64),
    "intmax_t": (Signedness.SIGNED, 64),
    "uintmax_t": (Signedness.UNSIGNED, 64),
}
for _width in (8, 16, 32, 64):
    for _prefix in ("int", "int_least", "int_fast"):
        _NAMED_TYPES[f"{_prefix}{_width}_t"] = (Signedness.SIGNED, _width)
        _NAMED_TYPES[f"u{_prefix}{_width}_t"] = (Signedness.UNSIGNED, _width)


def _integer_type(specifiers: List[str]) -> Tuple[Signedness, int]:
    """Resolve a combination of integer specifiers in any order (LP64 widths)."""

    if specifiers.count("signed") + specifiers.count("unsigned") > 1:
        raise FactDecodeError(f"Conflicting signedness in {' '.join(specifiers)!r}")
    longs = specifiers.count("long")
    if "char" in specifiers:
        width = 8
        if "short" in specifiers or longs or "int" in specifiers:
            raise FactDecodeError(f"Invalid char specifiers {' '.join(specifiers)!r}")
    elif "short" in specifiers:
        width = 16
        if longs:
            raise FactDecodeError(f"Invalid short specifiers {' '.join(specifiers)!r}")
    elif longs > 2:
        raise FactDecodeError(f"Too many 'long' specifiers in {' '.join(specifiers)!r}")
    else:
        width = 64 if longs else 32

    if "unsigned" in specifiers:
        return Signedness.UNSIGNED, width
    if "char" in specifiers and "signed" not in specifiers:
        # Plain char has implementation-defined signedness.
        return Signedness.NONE, width
    return Signedness.SIGNED, width


def type_from_spelling(spelling: str) -> TypeDescriptor:
    tokens = spelling.replace("*", " * ").split()
    first_star = tokens.index("*") if "*" in tokens else len(tokens)
    declarator = [token for token in tokens[first_star:] if token not in _QUALIFIERS]
    if any(token != "*" for token in declarator):
        raise FactDecodeError(f"Cannot decode type spelling {spelling!r}")
    depth = len(declarator)
    specifiers = [token for token in tokens[:first_star] if token not in _QUALIFIERS]
    text = " ".join(specifiers)

    if text == "void":
        base = TypeDescriptor.void()
    elif text in _NAMED_TYPES:
        signedness, width = _NAMED_TYPES[text]
        base = TypeDescriptor(name=text, signedness=signedness, width=width)
    elif specifiers and all(token in _INTEGER_SPECIFIERS for token in specifiers):
        signedness, width = _integer_type(specifiers)
        base = TypeDescriptor(name=text, signedness=signedness, width=width)
    elif text:
        # Aggregates and typedefs the tables do not know carry no signedness.
        base = TypeDescriptor(name=text)
    else:
        raise FactDecodeError(f"Cannot decode type spelling {spelling!r}")
    for _ in range(depth):
        base = TypeDescriptor.pointer_to(base)
    return base


def type_from_spec(value: Any) -> TypeDescriptor:
    """Decode a type from a spelling string or an explicit mapping."""

    if isinstance(value, TypeDescriptor):
        return value
    if isinstance(value, str):
        return type_from_spelling(value)
    if not isinstance(value, Mapping):
        raise FactDecodeError(f"Cannot decode type from {value!r}")
    pointee = value.get("pointee")
    try:
        signedness = Signedness(value.get("signedness", "none"))
    except ValueError:
        raise FactDecodeError(f"Invalid signedness in type {dict(value)!r}") from None
    width = value.get("width")
    if width is not None and (isinstance(width, bool) or not isinstance(width, int)):
        raise FactDecodeError(f"Invalid width in type {dict(value)!r}")
    pointee_type = type_from_spec(pointee) if pointee is not None else None
    name = value.get("name") or (f"{pointee_type.name}*" if pointee_type else None)
    if not isinstance(name, str):
        raise FactDecodeError(f"Type mapping needs a 'name': {dict(value)!r}")
    return TypeDescriptor(
        name=name,
        signedness=signedness,
        width=width,
        pointee=pointee_type,
        is_void=bool(value.get("void", False)),
        is_function=bool(value.get("function", False)),
    )


def _is_type_key(key: str) -> bool:
    return key == "type" or key.endswith("_type")


def node_from_record(record: Any, default_file: str) -> Node:
    if not isinstance(record, Mapping):
        raise FactDecodeError(f"Fact record must be a mapping, got {record!r}")
    try:
        kind = NodeKind(record.get("kind", NodeKind.OTHER.value))
    except ValueError:
        raise FactDecodeError(f"Unknown node kind {record.get('kind')!r}") from None

    line = record.get("line")
    column = record.get("column", 1)
    if not isinstance(line, int) or not isinstance(column, int):
        raise FactDecodeError(f"{kind.value} record needs integer 'line'/'column': {dict(record)!r}")
    file = str(record.get("file", default_file))
    location = SourceLocation(file, line, column)

    attributes: Dict[str, Any] = {}
    for key, value in record.items():
        if key in _STRUCTURAL_KEYS:
            continue
        attributes[key] = type_from_spec(value) if _is_type_key(key) else value

    raw_children = record.get("children")
    if raw_children is None:
        raw_children = []
    if not isinstance(raw_children, list):
        raise FactDecodeError(f"'children' of {kind.value} node at {location} must be a list")
    return Node(
        kind=kind,
        location=location,
        attributes=attributes,
        children=tuple(node_from_record(child, file) for child in raw_children),
    )


def graph_from_record(document: Any, path: str | None = None) -> FactGraph:
    if isinstance(document, list):
        document = {"roots": document}
    if not isinstance(document, Mapping):
        raise FactDecodeError("Fact document must be a mapping or a list of root nodes")
    graph_path = str(document.get("path") or path or "<unknown>")
    roots = document.get("roots") or []
    if not isinstance(roots, list):
        raise FactDecodeError(f"'roots' in {graph_path} must be a list")
    return FactGraph(graph_path, tuple(node_from_record(root, graph_path) for root in roots))


def load_fact_graph(path: Path) -> FactGraph:
    """Load one file's fact graph from a YAML or JSON document."""

    path = Path(path)
    try:
        document = read_yaml_file(path)
    except yaml.YAMLError as exc:
        raise FactDecodeError(f"Failed to parse fact document {path}: {exc}") from exc
    if document is None:
        raise FactDecodeError(f"Fact document not found: {path}")
    return graph_from_record(document, path=str(path))
