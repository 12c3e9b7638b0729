"""KuzuDB embedded store for people, groups and relationships."""
import os
import logging
import kuzu
from pathlib import Path

logger = logging.getLogger(__name__)

DB_PATH = Path(os.environ.get("DB_PATH", Path(__file__).resolve().parent.parent / "graph_data"))
_database = None
_SENTINEL_FILE = ".db_initialized"


def _sentinel_path():
    return DB_PATH.parent / _SENTINEL_FILE


def write_sentinel():
    """Mark the database as holding data so a later silent reset is detectable.
    Called when the first user account is created."""
    try:
        path = _sentinel_path()
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("initialized")
        logger.info("Database sentinel written to %s", path)
    except OSError as e:
        logger.warning("Could not write DB sentinel: %s", e)


def check_db_integrity(conn):
    """Refuse to serve when a sentinel exists but the User table is empty."""
    sentinel = _sentinel_path()
    if not sentinel.exists():
        return  # first-time setup
    result = conn.execute("MATCH (u:User) RETURN count(*)")
    count = result.get_next()[0] if result.has_next() else 0
    if count == 0:
        logger.critical(
            "DATABASE INTEGRITY CHECK FAILED: sentinel file exists at %s "
            "but database has 0 users. The persistent disk may not be mounted.",
            sentinel
        )
        raise RuntimeError(
            "Database was previously initialized but now has 0 users. "
            "Check that DB_PATH points at the persistent volume."
        )
    logger.info("Database integrity check passed: %d users found", count)


def get_database():
    global _database
    if _database is None:
        DB_PATH.parent.mkdir(parents=True, exist_ok=True)
        _database = kuzu.Database(str(DB_PATH))
        _init_schema(_database)
        check_db_integrity(kuzu.Connection(_database))
    return _database


def _init_schema(db):
    conn = kuzu.Connection(db)

    # ── Accounts ──
    conn.execute(
        "CREATE NODE TABLE IF NOT EXISTS User("
        "id STRING, email STRING, display_name STRING, "
        "password_hash STRING, created_at STRING, "
        "PRIMARY KEY(id))"
    )

    # ── People and their labels ──
    conn.execute(
        "CREATE NODE TABLE IF NOT EXISTS Person("
        "id STRING, user_id STRING, name STRING, surname STRING, nickname STRING, "
        "relationship_to_user_id STRING, created_at STRING, "
        "PRIMARY KEY(id))"
    )
    conn.execute(
        "CREATE NODE TABLE IF NOT EXISTS RelationshipType("
        "id STRING, user_id STRING, name STRING, label STRING, color STRING, "
        "created_at STRING, "
        "PRIMARY KEY(id))"
    )
    # "Group" is a reserved word
    conn.execute(
        "CREATE NODE TABLE IF NOT EXISTS PeopleGroup("
        "id STRING, user_id STRING, name STRING, color STRING, created_at STRING, "
        "PRIMARY KEY(id))"
    )

    # ── Edges ──
    conn.execute(
        "CREATE REL TABLE IF NOT EXISTS IN_GROUP("
        "FROM Person TO PeopleGroup, added_at STRING)"
    )
    # type_id is a plain reference, deleting a RelationshipType does not cascade
    conn.execute(
        "CREATE REL TABLE IF NOT EXISTS RELATED_TO("
        "FROM Person TO Person, id STRING, type_id STRING, created_at STRING)"
    )
    logger.debug("Schema ready at %s", DB_PATH)


def get_conn():
    db = get_database()
    conn = kuzu.Connection(db)
    try:
        yield conn
    finally:
        pass
