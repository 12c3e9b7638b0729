"""Writes for people, groups, relationship types and relationships."""
import uuid
from datetime import datetime, timezone
import kuzu


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


# ── People ──

def create_person(conn: kuzu.Connection, user_id: str, name: str,
                  surname: str = "", nickname: str = "",
                  relationship_to_user_id: str = "") -> dict:
    name = (name or "").strip()
    if not name:
        raise ValueError("name is required")
    pid = str(uuid.uuid4())
    now = _now()
    conn.execute(
        "CREATE (p:Person {id: $id, user_id: $uid, name: $name, surname: $surname, "
        "nickname: $nick, relationship_to_user_id: $rtu, created_at: $ts})",
        {"id": pid, "uid": user_id, "name": name, "surname": surname or "",
         "nick": nickname or "", "rtu": relationship_to_user_id or "", "ts": now}
    )
    return {"id": pid, "user_id": user_id, "name": name, "surname": surname or "",
            "nickname": nickname or "", "relationship_to_user_id": relationship_to_user_id or "",
            "created_at": now}


def get_person(conn: kuzu.Connection, person_id: str, user_id: str) -> dict | None:
    """Fetch a person owned by user_id. Foreign people look exactly like missing ones."""
    result = conn.execute(
        "MATCH (p:Person) WHERE p.id = $id AND p.user_id = $uid "
        "RETURN p.id, p.user_id, p.name, p.surname, p.nickname, "
        "p.relationship_to_user_id, p.created_at",
        {"id": person_id, "uid": user_id}
    )
    if result.has_next():
        row = result.get_next()
        return {"id": row[0], "user_id": row[1], "name": row[2], "surname": row[3],
                "nickname": row[4], "relationship_to_user_id": row[5], "created_at": row[6]}
    return None


def set_relationship_to_user(conn: kuzu.Connection, person_id: str, type_id: str | None):
    conn.execute(
        "MATCH (p:Person) WHERE p.id = $id SET p.relationship_to_user_id = $rtu",
        {"id": person_id, "rtu": type_id or ""}
    )


def delete_person(conn: kuzu.Connection, person_id: str):
    """Delete a person with all of their relationships and group memberships."""
    conn.execute(
        "MATCH (p:Person) WHERE p.id = $id DETACH DELETE p",
        {"id": person_id}
    )


# ── Relationship types ──

def create_relationship_type(conn: kuzu.Connection, user_id: str, name: str,
                             label: str, color: str = "") -> dict:
    tid = str(uuid.uuid4())
    now = _now()
    conn.execute(
        "CREATE (t:RelationshipType {id: $id, user_id: $uid, name: $name, "
        "label: $label, color: $color, created_at: $ts})",
        {"id": tid, "uid": user_id, "name": name, "label": label,
         "color": color or "", "ts": now}
    )
    return {"id": tid, "user_id": user_id, "name": name, "label": label,
            "color": color or "", "created_at": now}


def delete_relationship_type(conn: kuzu.Connection, type_id: str):
    """Hard delete. Relationships still holding type_id keep the dangling reference."""
    conn.execute(
        "MATCH (t:RelationshipType) WHERE t.id = $id DELETE t",
        {"id": type_id}
    )


# ── Groups ──

def create_group(conn: kuzu.Connection, user_id: str, name: str, color: str = "") -> dict:
    gid = str(uuid.uuid4())
    now = _now()
    conn.execute(
        "CREATE (g:PeopleGroup {id: $id, user_id: $uid, name: $name, "
        "color: $color, created_at: $ts})",
        {"id": gid, "uid": user_id, "name": name, "color": color or "", "ts": now}
    )
    return {"id": gid, "user_id": user_id, "name": name, "color": color or "",
            "created_at": now}


def add_person_to_group(conn: kuzu.Connection, group_id: str, person_id: str):
    result = conn.execute(
        "MATCH (p:Person)-[:IN_GROUP]->(g:PeopleGroup) WHERE p.id = $pid AND g.id = $gid "
        "RETURN count(*)",
        {"pid": person_id, "gid": group_id}
    )
    if result.has_next() and result.get_next()[0] > 0:
        return  # already a member
    conn.execute(
        "MATCH (p:Person), (g:PeopleGroup) WHERE p.id = $pid AND g.id = $gid "
        "CREATE (p)-[:IN_GROUP {added_at: $ts}]->(g)",
        {"pid": person_id, "gid": group_id, "ts": _now()}
    )


# ── Relationships ──

def create_relationship(conn: kuzu.Connection, person_id: str, related_person_id: str,
                        type_id: str) -> dict:
    """Create one directed person-to-person relationship row."""
    if person_id == related_person_id:
        raise ValueError("A person cannot be related to themselves")
    result = conn.execute(
        "MATCH (a:Person), (b:Person) WHERE a.id = $a AND b.id = $b "
        "RETURN a.user_id, b.user_id",
        {"a": person_id, "b": related_person_id}
    )
    if not result.has_next():
        raise ValueError("Both people must exist")
    owner_a, owner_b = result.get_next()
    if owner_a != owner_b:
        raise ValueError("Both people must belong to the same user")

    rid = str(uuid.uuid4())
    now = _now()
    conn.execute(
        "MATCH (a:Person), (b:Person) WHERE a.id = $a AND b.id = $b "
        "CREATE (a)-[:RELATED_TO {id: $id, type_id: $tid, created_at: $ts}]->(b)",
        {"a": person_id, "b": related_person_id, "id": rid, "tid": type_id, "ts": now}
    )
    return {"id": rid, "person_id": person_id, "related_person_id": related_person_id,
            "type_id": type_id, "created_at": now}
