"""Tests for graph validation and tree data lint."""

from graph import build_graph
from models import EdgeKind, ParentChild, Person, TreeData, TreeEdge, TreeNode, Union, UnionChild
from validation import lint_tree_data, validate_graph


class TestValidateGraph:
    """Tests for validate_graph."""

    def test_builder_output_is_valid(self, scenario_a):
        nodes, edges = build_graph(scenario_a)

        result = validate_graph(nodes, edges)

        assert result.valid is True
        assert result.errors == []

    def test_dangling_endpoints(self):
        nodes = [TreeNode.for_person(Person(id="P1"))]
        edges = [
            TreeEdge(id="P1-X", source="P1", target="X", kind=EdgeKind.PARENT_TO_CHILD),
            TreeEdge(id="Y-Z", source="Y", target="Z", kind=EdgeKind.UNION_TO_CHILD),
        ]

        result = validate_graph(nodes, edges)

        assert result.valid is False
        assert result.errors == [
            "Edge P1-X has invalid target: X",
            "Edge Y-Z has invalid source: Y",
            "Edge Y-Z has invalid target: Z",
        ]

    def test_union_child_without_person_is_dangling(self):
        data = TreeData(
            persons=(Person(id="P1"),),
            unions=(Union(union_id="U1", p1="P1"),),
            union_children=(UnionChild("U1", "ghost"),),
        )
        nodes, edges = build_graph(data)

        result = validate_graph(nodes, edges)

        assert result.errors == ["Edge U1-ghost has invalid target: ghost"]

    def test_empty_graph(self):
        assert validate_graph([], []).valid


class TestLintTreeData:
    """Tests for lint_tree_data."""

    def test_clean_data(self, three_generations):
        assert lint_tree_data(three_generations) == []

    def test_person_and_union_share_id(self):
        data = TreeData(
            persons=(Person(id="X1"), Person(id="P2")),
            unions=(Union(union_id="X1", p1="P2"),),
        )

        warnings = lint_tree_data(data)

        assert "Duplicate id X1 used by 2 persons/unions" in warnings

    def test_unknown_references(self):
        data = TreeData(
            persons=(Person(id="P1"),),
            parent_child=(ParentChild("P1", "ghost"),),
            unions=(Union(union_id="U1", p1="P1", p2="P9"),),
            union_children=(UnionChild("U2", "P1"),),
        )

        warnings = lint_tree_data(data)

        assert "Union U1 references unknown person P9" in warnings
        assert "Union child P1 references unknown union U2" in warnings
        assert "Parent-child link P1->ghost references unknown person ghost" in warnings

    def test_cycle(self):
        data = TreeData(
            persons=(Person(id="A"), Person(id="B")),
            parent_child=(ParentChild("A", "B"), ParentChild("B", "A")),
        )

        warnings = lint_tree_data(data)

        assert any(w.startswith("Cycle detected") for w in warnings)

    def test_child_born_before_parent(self):
        data = TreeData(
            persons=(
                Person(id="P", first_name="Old", birth_date="1990-01-01"),
                Person(id="C", first_name="Young", birth_date="1970-01-01"),
            ),
            unions=(Union(union_id="U", p1="P"),),
            union_children=(UnionChild("U", "C"),),
        )

        assert lint_tree_data(data) == ["Impossible: Young born before parent Old"]

    def test_parent_too_young(self):
        data = TreeData(
            persons=(
                Person(id="P", first_name="Teen", birth_date="1990-01-01"),
                Person(id="C", first_name="Baby", birth_date="1999-05-01"),
            ),
            parent_child=(ParentChild("P", "C"),),
        )

        assert lint_tree_data(data) == [
            "Suspicious: Teen was less than 12 years old when Baby was born"
        ]

    def test_death_before_birth(self):
        data = TreeData(
            persons=(
                Person(id="P", first_name="Ghost", birth_date="1900-01-01", death_date="1890-01-01"),
            ),
        )

        assert lint_tree_data(data) == ["Impossible: Ghost died before being born"]
