"""Read side of the store, shaped for the graph assembler.

The assembler never talks to KuzuDB directly. It receives the plain records
below, so its traversal can be exercised with in-memory fixtures.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import kuzu

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GroupRef:
    id: str
    name: str
    color: Optional[str] = None


@dataclass(frozen=True)
class TypeRef:
    label: str
    color: Optional[str] = None


@dataclass
class PersonRecord:
    id: str
    name: str
    surname: Optional[str] = None
    nickname: Optional[str] = None
    groups: List[GroupRef] = field(default_factory=list)
    relationship_to_user: Optional[TypeRef] = None
    # raw reference; set even when the type it points at was deleted
    relationship_to_user_id: Optional[str] = None

    @property
    def has_relationship_to_user(self) -> bool:
        return self.relationship_to_user is not None or bool(self.relationship_to_user_id)


@dataclass
class RelationshipRecord:
    id: str
    person_id: str
    related_person: PersonRecord
    # None when the referenced type no longer exists
    type: Optional[TypeRef] = None


@dataclass
class PersonGraphSeed:
    person: PersonRecord
    relationships: List[RelationshipRecord] = field(default_factory=list)


@dataclass
class NetworkSeed:
    people: List[PersonRecord] = field(default_factory=list)
    relationships: List[RelationshipRecord] = field(default_factory=list)


@dataclass(frozen=True)
class RelationshipLink:
    """A bare relationship row: who points at whom."""
    id: str
    person_id: str
    related_person_id: str


_PERSON_COLUMNS = "p.id, p.name, p.surname, p.nickname, p.relationship_to_user_id"


class KuzuGraphRepository:
    """Loads graph seeds for one connection. Type lookups are cached per instance."""

    def __init__(self, conn: kuzu.Connection):
        self.conn = conn
        self._types: Dict[str, Optional[TypeRef]] = {}

    # ── lookups ──

    def _type(self, type_id: str) -> Optional[TypeRef]:
        if not type_id:
            return None
        if type_id not in self._types:
            result = self.conn.execute(
                "MATCH (t:RelationshipType) WHERE t.id = $id RETURN t.label, t.color",
                {"id": type_id}
            )
            if result.has_next():
                label, color = result.get_next()
                self._types[type_id] = TypeRef(label=label, color=color or None)
            else:
                self._types[type_id] = None
        return self._types[type_id]

    def _groups(self, person_id: str) -> List[GroupRef]:
        result = self.conn.execute(
            "MATCH (p:Person)-[r:IN_GROUP]->(g:PeopleGroup) WHERE p.id = $id "
            "RETURN g.id, g.name, g.color ORDER BY r.added_at, g.name",
            {"id": person_id}
        )
        groups = []
        while result.has_next():
            row = result.get_next()
            groups.append(GroupRef(id=row[0], name=row[1], color=row[2] or None))
        return groups

    def _person(self, row) -> PersonRecord:
        return PersonRecord(
            id=row[0],
            name=row[1],
            surname=row[2] or None,
            nickname=row[3] or None,
            groups=self._groups(row[0]),
            relationship_to_user=self._type(row[4]),
            relationship_to_user_id=row[4] or None,
        )

    def _group_member_ids(self, group_id: str) -> set[str]:
        result = self.conn.execute(
            "MATCH (p:Person)-[:IN_GROUP]->(g:PeopleGroup) WHERE g.id = $gid RETURN p.id",
            {"gid": group_id}
        )
        ids = set()
        while result.has_next():
            ids.add(result.get_next()[0])
        return ids

    # ── seeds ──

    def load_person_with_relationships(self, person_id: str, owner_id: str,
                                       group_id: str | None = None) -> PersonGraphSeed | None:
        """Focal person plus outgoing relationships, or None if not owned by owner_id.
        With group_id, only relationships to members of that group are kept."""
        result = self.conn.execute(
            f"MATCH (p:Person) WHERE p.id = $id AND p.user_id = $uid RETURN {_PERSON_COLUMNS}",
            {"id": person_id, "uid": owner_id}
        )
        if not result.has_next():
            return None
        person = self._person(result.get_next())

        members = self._group_member_ids(group_id) if group_id else None
        result = self.conn.execute(
            "MATCH (a:Person)-[r:RELATED_TO]->(p:Person) WHERE a.id = $id "
            f"RETURN r.id, r.type_id, {_PERSON_COLUMNS} ORDER BY r.created_at, r.id",
            {"id": person_id}
        )
        rows = []
        while result.has_next():
            rows.append(result.get_next())

        relationships = []
        for row in rows:
            if members is not None and row[2] not in members:
                continue
            relationships.append(RelationshipRecord(
                id=row[0],
                person_id=person_id,
                related_person=self._person(row[2:]),
                type=self._type(row[1]),
            ))
        return PersonGraphSeed(person=person, relationships=relationships)

    def load_network(self, owner_id: str, group_id: str | None = None) -> NetworkSeed:
        """Every person of owner_id (or every member of group_id) and the
        relationships among them."""
        if group_id:
            result = self.conn.execute(
                "MATCH (p:Person)-[:IN_GROUP]->(g:PeopleGroup) "
                "WHERE p.user_id = $uid AND g.id = $gid AND g.user_id = $uid "
                f"RETURN {_PERSON_COLUMNS} ORDER BY p.name, p.id",
                {"uid": owner_id, "gid": group_id}
            )
        else:
            result = self.conn.execute(
                f"MATCH (p:Person) WHERE p.user_id = $uid RETURN {_PERSON_COLUMNS} "
                "ORDER BY p.name, p.id",
                {"uid": owner_id}
            )
        rows = []
        while result.has_next():
            rows.append(result.get_next())
        people = [self._person(row) for row in rows]
        by_id = {p.id: p for p in people}

        result = self.conn.execute(
            "MATCH (a:Person)-[r:RELATED_TO]->(b:Person) WHERE a.user_id = $uid "
            "RETURN r.id, a.id, b.id, r.type_id ORDER BY r.created_at, r.id",
            {"uid": owner_id}
        )
        relationships = []
        while result.has_next():
            rid, source_id, target_id, type_id = result.get_next()
            if source_id not in by_id or target_id not in by_id:
                continue
            relationships.append(RelationshipRecord(
                id=rid,
                person_id=source_id,
                related_person=by_id[target_id],
                type=self._type(type_id),
            ))
        logger.debug("Loaded network for %s: %d people, %d relationships",
                     owner_id, len(people), len(relationships))
        return NetworkSeed(people=people, relationships=relationships)

    # ── orphan check ──

    def get_person(self, person_id: str, owner_id: str | None = None) -> PersonRecord | None:
        if owner_id is None:
            result = self.conn.execute(
                f"MATCH (p:Person) WHERE p.id = $id RETURN {_PERSON_COLUMNS}",
                {"id": person_id}
            )
        else:
            result = self.conn.execute(
                f"MATCH (p:Person) WHERE p.id = $id AND p.user_id = $uid "
                f"RETURN {_PERSON_COLUMNS}",
                {"id": person_id, "uid": owner_id}
            )
        if result.has_next():
            return self._person(result.get_next())
        return None

    def relationships_touching(self, person_id: str) -> List[RelationshipLink]:
        """Relationships in either direction with person_id on one end."""
        result = self.conn.execute(
            "MATCH (a:Person)-[r:RELATED_TO]->(b:Person) "
            "WHERE a.id = $id OR b.id = $id "
            "RETURN r.id, a.id, b.id ORDER BY r.created_at, r.id",
            {"id": person_id}
        )
        links = []
        while result.has_next():
            row = result.get_next()
            links.append(RelationshipLink(id=row[0], person_id=row[1], related_person_id=row[2]))
        return links
