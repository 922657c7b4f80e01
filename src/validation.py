"""Graph validation for family tree layout graphs and their source data."""

from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass, field

import networkx as nx

from models import TreeData, TreeEdge, TreeNode


@dataclass
class ValidationResult:
    valid: bool
    errors: list[str] = field(default_factory=list)


def validate_graph(nodes: Sequence[TreeNode], edges: Sequence[TreeEdge]) -> ValidationResult:
    """
    Check that every edge endpoint refers to a known node.

    Only referential integrity is checked; cycles are not looked for.
    """
    errors: list[str] = []
    node_ids = {node.id for node in nodes}

    for edge in edges:
        if edge.source not in node_ids:
            errors.append(f"Edge {edge.id} has invalid source: {edge.source}")
        if edge.target not in node_ids:
            errors.append(f"Edge {edge.id} has invalid target: {edge.target}")

    return ValidationResult(valid=not errors, errors=errors)


def lint_tree_data(data: TreeData) -> list[str]:
    """
    Validate the relational tree data for:
    - Ids shared between persons and/or unions
    - Links to unknown persons or unions
    - Cycles in parent-child relationships
    - Impossible ages (child born before parent, death before birth)

    Returns a list of warning messages.
    """
    warnings: list[str] = []

    # Node ids share one flat namespace across persons and unions
    id_counts = Counter([p.id for p in data.persons] + [u.union_id for u in data.unions])
    for node_id, count in id_counts.items():
        if count > 1:
            warnings.append(f"Duplicate id {node_id} used by {count} persons/unions")

    persons = {p.id: p for p in data.persons}
    union_ids = {u.union_id for u in data.unions}

    for union in data.unions:
        for partner in union.partners:
            if partner not in persons:
                warnings.append(f"Union {union.union_id} references unknown person {partner}")

    for uc in data.union_children:
        if uc.union_id not in union_ids:
            warnings.append(f"Union child {uc.child_id} references unknown union {uc.union_id}")
        if uc.child_id not in persons:
            warnings.append(f"Union {uc.union_id} references unknown child {uc.child_id}")

    for pc in data.parent_child:
        for person_id in (pc.parent_id, pc.child_id):
            if person_id not in persons:
                warnings.append(
                    f"Parent-child link {pc.parent_id}->{pc.child_id} "
                    f"references unknown person {person_id}"
                )

    # Parent -> child pairs from both direct links and unions
    union_partners = {u.union_id: u.partners for u in data.unions}
    parent_pairs = {(pc.parent_id, pc.child_id) for pc in data.parent_child}
    for uc in data.union_children:
        for partner in union_partners.get(uc.union_id, ()):
            parent_pairs.add((partner, uc.child_id))

    # Check for cycles
    parent_graph = nx.DiGraph(sorted(parent_pairs))
    try:
        cycle = nx.find_cycle(parent_graph, orientation="original")
        cycle_nodes = [edge[0] for edge in cycle]
        warnings.append(f"Cycle detected in parent-child relationships: {cycle_nodes}")
    except nx.NetworkXNoCycle:
        pass

    # Check for impossible ages (ISO dates compare correctly as strings)
    for parent_id, child_id in sorted(parent_pairs):
        parent = persons.get(parent_id)
        child = persons.get(child_id)
        if parent is None or child is None:
            continue
        if not (parent.birth_date and child.birth_date):
            continue

        if child.birth_date < parent.birth_date:
            warnings.append(
                f"Impossible: {child.display_name} born before parent {parent.display_name}"
            )
            continue

        try:
            parent_year = int(parent.birth_date[:4])
            child_year = int(child.birth_date[:4])
        except ValueError:
            continue
        if child_year - parent_year < 12:
            warnings.append(
                f"Suspicious: {parent.display_name} was less than 12 years "
                f"old when {child.display_name} was born"
            )

    # Check death before birth
    for person in data.persons:
        if person.birth_date and person.death_date and person.death_date < person.birth_date:
            warnings.append(f"Impossible: {person.display_name} died before being born")

    return warnings
