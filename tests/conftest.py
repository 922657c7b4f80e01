"""Shared fixtures for family tree layout tests."""

import asyncio

import pytest

from models import Gender, ParentChild, Person, TreeData, Union, UnionChild


def row_layout(graph: dict) -> dict:
    """Place every child left to right on one row."""
    return {
        **graph,
        "children": [
            {**child, "x": float(i * 200), "y": float(i * 10)}
            for i, child in enumerate(graph["children"])
        ],
    }


class FakeEngine:
    """Layout engine stand-in that records requests and lays nodes out in a row."""

    def __init__(self, fail: Exception | None = None, delay: float = 0):
        self.fail = fail
        self.delay = delay
        self.requests: list[dict] = []

    async def layout(self, graph: dict) -> dict:
        self.requests.append(graph)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail is not None:
            raise self.fail
        return row_layout(graph)


class GatedEngine:
    """Layout engine whose calls only finish when their gate is opened."""

    def __init__(self):
        self.gates: list[asyncio.Event] = []
        self.requests: list[dict] = []

    async def layout(self, graph: dict) -> dict:
        gate = asyncio.Event()
        self.gates.append(gate)
        self.requests.append(graph)
        await gate.wait()
        return row_layout(graph)

    async def wait_for_calls(self, count: int) -> None:
        while len(self.gates) < count:
            await asyncio.sleep(0)


@pytest.fixture
def scenario_a() -> TreeData:
    """Two partners in one union with one child."""
    return TreeData(
        persons=(
            Person(id="P1", first_name="Ivan", last_name="Petrov", gender=Gender.MALE),
            Person(id="P2", first_name="Anna", last_name="Petrova", gender=Gender.FEMALE),
            Person(id="C1", first_name="Kirill", last_name="Petrov", gender=Gender.MALE),
        ),
        parent_child=(ParentChild("P1", "C1"), ParentChild("P2", "C1")),
        unions=(Union(union_id="U1", p1="P1", p2="P2", marriage_date="1980-06-01"),),
        union_children=(UnionChild("U1", "C1"),),
    )


@pytest.fixture
def scenario_b() -> TreeData:
    """A single parent with no recorded union."""
    return TreeData(
        persons=(
            Person(id="P1", first_name="Maria", gender=Gender.FEMALE),
            Person(id="C1", first_name="Olga", gender=Gender.FEMALE),
        ),
        parent_child=(ParentChild("P1", "C1"),),
    )


@pytest.fixture
def three_generations() -> TreeData:
    """Grandparents -> parent (+ partner) -> two children, plus a single-parent branch."""
    return TreeData(
        persons=(
            Person(id="GF", first_name="Grandfather", birth_date="1920-01-01"),
            Person(id="GM", first_name="Grandmother", birth_date="1922-01-01"),
            Person(id="F", first_name="Father", birth_date="1950-01-01"),
            Person(id="M", first_name="Mother", birth_date="1952-01-01"),
            Person(id="A", first_name="Alice", birth_date="1980-01-01"),
            Person(id="B", first_name="Bob", birth_date="1982-01-01"),
            Person(id="S", first_name="Single", birth_date="1955-01-01"),
            Person(id="K", first_name="Kid", birth_date="1990-01-01"),
        ),
        parent_child=(
            ParentChild("GF", "F"),
            ParentChild("GM", "F"),
            ParentChild("F", "A"),
            ParentChild("M", "A"),
            ParentChild("F", "B"),
            ParentChild("M", "B"),
            ParentChild("S", "K"),
        ),
        unions=(
            Union(union_id="U-GP", p1="GF", p2="GM"),
            Union(union_id="U-P", p1="F", p2="M"),
        ),
        union_children=(
            UnionChild("U-GP", "F"),
            UnionChild("U-P", "A"),
            UnionChild("U-P", "B"),
        ),
    )
