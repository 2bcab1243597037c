"""Semantic fact model consumed by the rule engine.

A fact graph is a tree of immutable :class:`Node` objects produced by an
external front-end. Every node carries a :class:`SourceLocation` and the
resolved :class:`TypeDescriptor` values its kind needs; the engine never
performs type resolution itself.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Iterator, Mapping, Optional, Sequence, Tuple

from .errors import MalformedFact

COMPARISON_OPERATORS = frozenset({"==", "!=", "<", "<=", ">", ">="})


class Signedness(str, Enum):
    SIGNED = "signed"
    UNSIGNED = "unsigned"
    NONE = "none"


class NodeKind(str, Enum):
    """Tagged variants of semantic facts."""

    TRANSLATION_UNIT = "translation_unit"
    FUNCTION = "function"
    BLOCK = "block"
    STATEMENT = "statement"
    DECLARATION = "declaration"
    COMPARISON = "comparison"
    CAST = "cast"
    CALL = "call"
    REFERENCE = "reference"
    LITERAL = "literal"
    OTHER = "other"


@dataclass(frozen=True, order=True)
class SourceLocation:
    """Position of a fact in its source file (1-based line and column)."""

    file: str
    line: int
    column: int = 1

    def __str__(self) -> str:
        return f"{self.file}:{self.line}:{self.column}"

    def to_dict(self) -> dict:
        return {"file": self.file, "line": self.line, "column": self.column}


@dataclass(frozen=True)
class TypeDescriptor:
    """Resolved type of an operand or expression.

    A descriptor is a pointer when it has a ``pointee``. ``is_void`` marks the
    ``void`` type itself, so ``void*`` is a pointer whose pointee is void.
    """

    name: str
    signedness: Signedness = Signedness.NONE
    width: Optional[int] = None
    pointee: Optional["TypeDescriptor"] = None
    is_void: bool = False
    is_function: bool = False

    @classmethod
    def void(cls) -> "TypeDescriptor":
        return cls(name="void", is_void=True)

    @classmethod
    def signed(cls, width: int, name: Optional[str] = None) -> "TypeDescriptor":
        return cls(name=name or f"int{width}_t", signedness=Signedness.SIGNED, width=width)

    @classmethod
    def unsigned(cls, width: int, name: Optional[str] = None) -> "TypeDescriptor":
        return cls(name=name or f"uint{width}_t", signedness=Signedness.UNSIGNED, width=width)

    @classmethod
    def pointer_to(cls, target: "TypeDescriptor", width: Optional[int] = None) -> "TypeDescriptor":
        return cls(name=f"{target.name}*", pointee=target, width=width)

    @property
    def is_pointer(self) -> bool:
        return self.pointee is not None

    @property
    def is_void_pointer(self) -> bool:
        return self.pointee is not None and self.pointee.is_void

    @property
    def is_object_pointer(self) -> bool:
        """True for pointers to object types (not void, not functions)."""

        pointee = self.pointee
        if pointee is None:
            return False
        return not pointee.is_void and not pointee.is_function

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True, eq=False)
class Node:
    """A single immutable semantic fact."""

    kind: NodeKind
    location: SourceLocation
    attributes: Mapping[str, Any] = field(default_factory=dict)
    children: Tuple["Node", ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "attributes", MappingProxyType(dict(self.attributes)))
        object.__setattr__(self, "children", tuple(self.children))

    def __repr__(self) -> str:
        return f"Node({self.kind.value} @ {self.location})"


@dataclass(frozen=True)
class FactGraph:
    """Fact graph for one source file."""

    path: str
    roots: Tuple[Node, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "roots", tuple(self.roots))

    def walk(self) -> Iterator[Node]:
        for root in self.roots:
            yield from preorder(root)


# ----------------------------------------------------------------------
# Traversal helpers
# ----------------------------------------------------------------------
def children(node: Node) -> Tuple[Node, ...]:
    """Return the node's children in source order."""

    return node.children


def preorder(root: Node) -> Iterator[Node]:
    """Yield ``root`` and its descendants depth-first, parents before children."""

    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(children(node)))


# ----------------------------------------------------------------------
# Kind-specific accessors
# ----------------------------------------------------------------------
def _require(node: Node, kind: NodeKind, attribute: str, expected: type | tuple) -> Any:
    if node.kind is not kind:
        raise MalformedFact(
            f"{attribute!r} requested on {node.kind.value} node at {node.location}; "
            f"only {kind.value} nodes carry it",
            node,
        )
    try:
        value = node.attributes[attribute]
    except KeyError:
        raise MalformedFact(f"{kind.value} node at {node.location} is missing {attribute!r}", node) from None
    if not isinstance(value, expected):
        raise MalformedFact(
            f"{kind.value} node at {node.location} has invalid {attribute!r}: {value!r}",
            node,
        )
    return value


def operator(node: Node) -> str:
    op = _require(node, NodeKind.COMPARISON, "operator", str)
    if op not in COMPARISON_OPERATORS:
        raise MalformedFact(f"Unknown comparison operator {op!r} at {node.location}", node)
    return op


def comparison_operands(node: Node) -> Tuple[TypeDescriptor, TypeDescriptor]:
    """Return the (left, right) operand types of a comparison node."""

    left = _require(node, NodeKind.COMPARISON, "left_type", TypeDescriptor)
    right = _require(node, NodeKind.COMPARISON, "right_type", TypeDescriptor)
    return left, right


def cast_types(node: Node) -> Tuple[TypeDescriptor, TypeDescriptor]:
    """Return the (source, target) types of a cast node."""

    source = _require(node, NodeKind.CAST, "source_type", TypeDescriptor)
    target = _require(node, NodeKind.CAST, "target_type", TypeDescriptor)
    return source, target


def callee(node: Node) -> str:
    return _require(node, NodeKind.CALL, "callee", str)


def call_arguments(node: Node) -> Tuple[Node, ...]:
    if node.kind is not NodeKind.CALL:
        raise MalformedFact(f"Arguments requested on {node.kind.value} node at {node.location}", node)
    return node.children


def declared_name(node: Node) -> str:
    return _require(node, NodeKind.DECLARATION, "name", str)


def declared_type(node: Node) -> TypeDescriptor:
    return _require(node, NodeKind.DECLARATION, "type", TypeDescriptor)


# ----------------------------------------------------------------------
# Construction helpers
# ----------------------------------------------------------------------
def comparison(
    op: str,
    left_type: TypeDescriptor,
    right_type: TypeDescriptor,
    location: SourceLocation,
    operands: Sequence[Node] = (),
) -> Node:
    return Node(
        NodeKind.COMPARISON,
        location,
        {"operator": op, "left_type": left_type, "right_type": right_type},
        tuple(operands),
    )


def cast(
    source_type: TypeDescriptor,
    target_type: TypeDescriptor,
    location: SourceLocation,
    operand: Optional[Node] = None,
) -> Node:
    return Node(
        NodeKind.CAST,
        location,
        {"source_type": source_type, "target_type": target_type},
        (operand,) if operand is not None else (),
    )


def call(name: str, location: SourceLocation, arguments: Sequence[Node] = ()) -> Node:
    return Node(NodeKind.CALL, location, {"callee": name}, tuple(arguments))


def declaration(
    name: str,
    type_: TypeDescriptor,
    location: SourceLocation,
    initializer: Optional[Node] = None,
) -> Node:
    return Node(
        NodeKind.DECLARATION,
        location,
        {"name": name, "type": type_},
        (initializer,) if initializer is not None else (),
    )
