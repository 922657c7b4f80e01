"""Data classes for family tree entities and the layout graph built from them."""

from collections.abc import Callable
from dataclasses import dataclass, field, replace
from enum import Enum


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"
    UNKNOWN = "unknown"


class TreeMode(str, Enum):
    """Which part of the family the data source returns around the proband."""

    ANCESTORS = "ancestors"
    DESCENDANTS = "descendants"
    HOURGLASS = "hourglass"


class NodeKind(str, Enum):
    PERSON = "person"
    UNION = "union"


class EdgeKind(str, Enum):
    PARTNER_TO_UNION = "partner_to_union"
    UNION_TO_CHILD = "union_to_child"
    PARENT_TO_CHILD = "parent_to_child"


@dataclass(frozen=True)
class Person:
    id: str
    first_name: str | None = None
    last_name: str | None = None
    middle_name: str | None = None
    gender: Gender = Gender.UNKNOWN
    birth_date: str | None = None  # ISO format YYYY-MM-DD or None
    death_date: str | None = None  # ISO format YYYY-MM-DD or None
    is_alive: bool = True
    photo_url: str | None = None

    @property
    def display_name(self) -> str:
        parts = [p for p in (self.first_name, self.middle_name, self.last_name) if p]
        return " ".join(parts) if parts else "Unknown"


@dataclass(frozen=True)
class ParentChild:
    parent_id: str
    child_id: str


@dataclass(frozen=True)
class Union:
    """A partnership of one or two people; p2 is None for an unknown partner."""

    union_id: str
    p1: str
    p2: str | None = None
    p1_role: str | None = None
    p2_role: str | None = None
    marriage_date: str | None = None
    divorce_date: str | None = None

    @property
    def partners(self) -> tuple[str, ...]:
        if self.p2:
            return (self.p1, self.p2)
        return (self.p1,)


@dataclass(frozen=True)
class UnionChild:
    union_id: str
    child_id: str


@dataclass(frozen=True)
class TreeData:
    persons: tuple[Person, ...] = ()
    parent_child: tuple[ParentChild, ...] = ()
    unions: tuple[Union, ...] = ()
    union_children: tuple[UnionChild, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.persons


@dataclass(frozen=True)
class Position:
    x: float = 0.0
    y: float = 0.0


@dataclass(frozen=True)
class Size:
    width: float
    height: float


# Logical footprint of each node kind. Layout and bounds both read from here.
NODE_SIZES: dict[NodeKind, Size] = {
    NodeKind.PERSON: Size(width=180, height=80),
    NodeKind.UNION: Size(width=20, height=20),
}


def node_size(kind: NodeKind) -> Size:
    return NODE_SIZES[kind]


@dataclass(frozen=True)
class TreeNode:
    """
    A node of the layout graph: either a person card or a synthetic union connector.

    `kind` is the tag consumers switch on; `entity` is the wrapped Person or Union.
    `on_add_relative` is attached after layout and never set by the graph builder.
    """

    id: str
    kind: NodeKind
    entity: Person | Union
    position: Position = field(default_factory=Position)
    on_add_relative: Callable[..., object] | None = field(default=None, compare=False)

    @classmethod
    def for_person(cls, person: Person) -> "TreeNode":
        return cls(id=person.id, kind=NodeKind.PERSON, entity=person)

    @classmethod
    def for_union(cls, union: Union) -> "TreeNode":
        return cls(id=union.union_id, kind=NodeKind.UNION, entity=union)

    @property
    def person(self) -> Person:
        if self.kind is not NodeKind.PERSON:
            raise TypeError(f"Node {self.id} is a {self.kind.value} node, not a person")
        return self.entity  # type: ignore[return-value]

    @property
    def union(self) -> Union:
        if self.kind is not NodeKind.UNION:
            raise TypeError(f"Node {self.id} is a {self.kind.value} node, not a union")
        return self.entity  # type: ignore[return-value]

    @property
    def size(self) -> Size:
        return node_size(self.kind)

    def moved_to(self, x: float, y: float) -> "TreeNode":
        return replace(self, position=Position(x, y))


@dataclass(frozen=True)
class TreeEdge:
    id: str
    source: str
    target: str
    kind: EdgeKind
