"""Identity graph over donation records and its connected components.

Every record becomes a node linked to the identity keys it carries: its
normalized name and, when present, its normalized email. Records that share
a key, directly or through a chain of other records, end up in the same
component and are treated as one donor.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Union

from .records import DonationRecord


@dataclass(frozen=True)
class RecordNode:
    record_id: int


@dataclass(frozen=True)
class NameKey:
    value: str


@dataclass(frozen=True)
class EmailKey:
    value: str


IdentityKey = Union[NameKey, EmailKey]
Node = Union[RecordNode, NameKey, EmailKey]


@dataclass
class IdentityGraph:
    adjacency: dict[Node, list[Node]] = field(default_factory=dict)
    record_nodes: list[RecordNode] = field(default_factory=list)
    members: dict[RecordNode, list[DonationRecord]] = field(default_factory=dict)

    def add_edge(self, left: Node, right: Node) -> None:
        self.adjacency.setdefault(left, []).append(right)
        self.adjacency.setdefault(right, []).append(left)

    def neighbors(self, node: Node) -> list[Node]:
        return self.adjacency.get(node, [])

    @property
    def key_count(self) -> int:
        return sum(1 for node in self.adjacency if not isinstance(node, RecordNode))


def normalize_identity(value: str | None) -> str:
    if value is None:
        return ""
    return value.strip().lower()


def _check_record(record: DonationRecord) -> None:
    if record.id is None:
        raise ValueError("Donation record is missing an id.")
    if not isinstance(record.user_name, str) or not record.user_name.strip():
        raise ValueError(f"Donation #{record.id} has no donor name.")


def identity_keys(record: DonationRecord) -> list[IdentityKey]:
    keys: list[IdentityKey] = [NameKey(normalize_identity(record.user_name))]
    email = normalize_identity(record.user_email)
    if email:
        keys.append(EmailKey(email))
    return keys


def build_identity_graph(records: Iterable[DonationRecord]) -> IdentityGraph:
    graph = IdentityGraph()
    for record in records:
        _check_record(record)

        node = RecordNode(record.id)
        if node not in graph.members:
            graph.members[node] = []
            graph.record_nodes.append(node)
            graph.adjacency.setdefault(node, [])
        graph.members[node].append(record)

        for key in identity_keys(record):
            graph.add_edge(node, key)
    return graph


def connected_groups(graph: IdentityGraph) -> list[list[DonationRecord]]:
    """Partition the graph's records into connected components.

    Components are discovered from record nodes in input order using an
    explicit stack, so deep chains of linked records never hit the
    recursion limit.
    """

    visited: set[Node] = set()
    groups: list[list[DonationRecord]] = []

    for start in graph.record_nodes:
        if start in visited:
            continue

        group: list[DonationRecord] = []
        stack: list[Node] = [start]
        visited.add(start)
        while stack:
            current = stack.pop()
            if isinstance(current, RecordNode):
                group.extend(graph.members[current])
            for neighbor in graph.neighbors(current):
                if neighbor not in visited:
                    visited.add(neighbor)
                    stack.append(neighbor)

        groups.append(group)

    return groups
