"""Graph assembly: turn a person's neighborhood (or a whole network) into
node/edge payloads for the force layout.

Every edge endpoint is added to the node set before the edge itself, and node
ids are deduplicated through a seen-set, so payloads never contain dangling
references or repeated nodes.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from .names import format_full_name
from .repository import (
    KuzuGraphRepository,
    NetworkSeed,
    PersonGraphSeed,
    PersonRecord,
    RelationshipRecord,
    TypeRef,
)

logger = logging.getLogger(__name__)

DEFAULT_GROUP_COLOR = "#3B82F6"
DEFAULT_USER_EDGE_COLOR = "#9CA3AF"
DEFAULT_EDGE_COLOR = "#999999"
UNKNOWN_TYPE_LABEL = "Unknown"
USER_NODE_PREFIX = "user-"
USER_NODE_LABEL = "You"


class PersonNotFound(LookupError):
    """Focal person is missing or belongs to another user."""


@dataclass
class GraphNode:
    id: str
    label: str
    groups: List[str] = field(default_factory=list)
    colors: List[str] = field(default_factory=list)
    is_center: bool = False

    def as_dict(self) -> dict:
        return {"id": self.id, "label": self.label, "groups": list(self.groups),
                "colors": list(self.colors), "isCenter": self.is_center}


@dataclass
class GraphEdge:
    source: str
    target: str
    type: str
    color: str

    def as_dict(self) -> dict:
        return {"source": self.source, "target": self.target,
                "type": self.type, "color": self.color}


@dataclass
class Graph:
    nodes: List[GraphNode] = field(default_factory=list)
    edges: List[GraphEdge] = field(default_factory=list)

    def as_dict(self) -> dict:
        return {"nodes": [n.as_dict() for n in self.nodes],
                "edges": [e.as_dict() for e in self.edges]}


def user_node_id(user_id: str) -> str:
    return f"{USER_NODE_PREFIX}{user_id}"


def is_user_node_id(node_id: str) -> bool:
    return node_id.startswith(USER_NODE_PREFIX)


class _GraphBuilder:
    def __init__(self):
        self.graph = Graph()
        self.seen: set[str] = set()

    def add_node(self, node: GraphNode):
        if node.id in self.seen:
            return
        self.seen.add(node.id)
        self.graph.nodes.append(node)

    def add_person(self, person: PersonRecord, is_center: bool = False):
        self.add_node(GraphNode(
            id=person.id,
            label=format_full_name(person),
            groups=[g.name for g in person.groups],
            colors=[g.color or DEFAULT_GROUP_COLOR for g in person.groups],
            is_center=is_center,
        ))

    def add_user_edge(self, person: PersonRecord, user_id: str):
        rel = person.relationship_to_user
        if rel is None:
            if not person.relationship_to_user_id:
                return
            logger.warning("Person %s references a missing relationship type for the user",
                           person.id)
            rel = TypeRef(label=UNKNOWN_TYPE_LABEL)
        self.graph.edges.append(GraphEdge(
            source=person.id,
            target=user_node_id(user_id),
            type=rel.label,
            color=rel.color or DEFAULT_USER_EDGE_COLOR,
        ))

    def add_relationship_edge(self, rel: RelationshipRecord):
        rel_type = rel.type
        if rel_type is None:
            logger.warning("Relationship %s references a missing relationship type", rel.id)
            rel_type = TypeRef(label=UNKNOWN_TYPE_LABEL)
        self.graph.edges.append(GraphEdge(
            source=rel.person_id,
            target=rel.related_person.id,
            type=rel_type.label or UNKNOWN_TYPE_LABEL,
            color=rel_type.color or DEFAULT_EDGE_COLOR,
        ))


def build_person_graph(seed: PersonGraphSeed, owner_user_id: str) -> Graph:
    """Focal person at the center, the synthetic "You" node, and each outgoing
    relationship. Neighbors that know the user directly get their own edge to
    "You", so the result is a star rather than a strict tree."""
    builder = _GraphBuilder()
    person = seed.person

    builder.add_person(person, is_center=True)
    builder.add_node(GraphNode(id=user_node_id(owner_user_id), label=USER_NODE_LABEL))
    builder.add_user_edge(person, owner_user_id)

    for rel in seed.relationships:
        builder.add_person(rel.related_person)
        builder.add_relationship_edge(rel)
        builder.add_user_edge(rel.related_person, owner_user_id)

    logger.debug("Person graph for %s: %d nodes, %d edges",
                 person.id, len(builder.graph.nodes), len(builder.graph.edges))
    return builder.graph


def build_network_graph(seed: NetworkSeed, owner_user_id: str) -> Graph:
    """All of a user's people. "You" is the center; no person node is."""
    builder = _GraphBuilder()
    builder.add_node(GraphNode(id=user_node_id(owner_user_id), label=USER_NODE_LABEL,
                               is_center=True))

    for person in seed.people:
        builder.add_person(person)
        builder.add_user_edge(person, owner_user_id)

    for rel in seed.relationships:
        if rel.person_id not in builder.seen or rel.related_person.id not in builder.seen:
            continue
        builder.add_relationship_edge(rel)

    logger.debug("Network graph for %s: %d nodes, %d edges",
                 owner_user_id, len(builder.graph.nodes), len(builder.graph.edges))
    return builder.graph


# ── Store-backed entry points ──

def person_graph(repo: KuzuGraphRepository, person_id: str, owner_id: str,
                 group_id: Optional[str] = None) -> Graph:
    seed = repo.load_person_with_relationships(person_id, owner_id, group_id=group_id)
    if seed is None:
        raise PersonNotFound(person_id)
    return build_person_graph(seed, owner_id)


def network_graph(repo: KuzuGraphRepository, owner_id: str,
                  group_id: Optional[str] = None) -> Graph:
    return build_network_graph(repo.load_network(owner_id, group_id=group_id), owner_id)


def find_orphans(repo: KuzuGraphRepository, person_id: str, owner_id: str) -> list[dict]:
    """People who would be left with no relationship to the user and no
    relationship to anyone else if person_id were deleted.

    Only the candidate's direct neighbors can be affected, so each neighbor's
    own relationship list is inspected; no global traversal is needed.
    """
    if repo.get_person(person_id, owner_id) is None:
        raise PersonNotFound(person_id)

    neighbor_ids: list[str] = []
    for link in repo.relationships_touching(person_id):
        other = link.related_person_id if link.person_id == person_id else link.person_id
        if other != person_id and other not in neighbor_ids:
            neighbor_ids.append(other)

    orphans = []
    for neighbor_id in neighbor_ids:
        remaining = [
            link for link in repo.relationships_touching(neighbor_id)
            if person_id not in (link.person_id, link.related_person_id)
        ]
        if remaining:
            continue
        neighbor = repo.get_person(neighbor_id)
        if neighbor is not None and not neighbor.has_relationship_to_user:
            orphans.append({"id": neighbor.id, "fullName": format_full_name(neighbor)})
    return orphans
