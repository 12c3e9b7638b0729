"""Account records, session tokens, and the FastAPI current-user dependency."""
import hashlib
import hmac
import os
import time
import uuid
from datetime import datetime, timezone

import bcrypt as _bcrypt
import kuzu
from fastapi import Depends, HTTPException, Request

from .db import get_conn, write_sentinel

COOKIE_SECRET = os.environ.get("COOKIE_SECRET", "")
SESSION_COOKIE = "session"


# ── Password hashing ──

def validate_password(password: str):
    if len(password) < 8:
        raise ValueError("Password must be at least 8 characters")
    if len(password.encode("utf-8")) > 72:
        raise ValueError("Password is too long (max 72 bytes)")


def hash_password(password: str) -> str:
    validate_password(password)
    return _bcrypt.hashpw(password.encode("utf-8"), _bcrypt.gensalt()).decode("utf-8")


# ── Session tokens ──

def create_session_token(user_id: str) -> str:
    """Create an HMAC-signed session token: user_id:timestamp:signature."""
    ts = str(int(time.time()))
    payload = f"{user_id}:{ts}"
    sig = hmac.new(COOKIE_SECRET.encode(), payload.encode(), hashlib.sha256).hexdigest()
    return f"{payload}:{sig}"


def verify_session_token(token: str) -> str | None:
    """Returns user_id if the token is valid, None otherwise."""
    if not token or not COOKIE_SECRET:
        return None
    parts = token.split(":")
    if len(parts) != 3:
        return None
    user_id, ts, sig = parts
    payload = f"{user_id}:{ts}"
    expected = hmac.new(COOKIE_SECRET.encode(), payload.encode(), hashlib.sha256).hexdigest()
    if not hmac.compare_digest(sig, expected):
        return None
    return user_id


# ── Users ──

def create_user(conn: kuzu.Connection, email: str, display_name: str,
                password: str) -> dict:
    email = email.strip().lower()
    if get_user_by_email(conn, email):
        raise ValueError("A user with this email already exists")
    first_user = count_users(conn) == 0
    uid = str(uuid.uuid4())
    now = datetime.now(timezone.utc).isoformat()
    conn.execute(
        "CREATE (u:User {id: $id, email: $email, display_name: $name, "
        "password_hash: $hash, created_at: $ts})",
        {"id": uid, "email": email, "name": display_name,
         "hash": hash_password(password), "ts": now}
    )
    if first_user:
        write_sentinel()
    return {"id": uid, "email": email, "display_name": display_name, "created_at": now}


def _user_row(row) -> dict:
    return {"id": row[0], "email": row[1], "display_name": row[2],
            "password_hash": row[3], "created_at": row[4]}


def get_user_by_email(conn: kuzu.Connection, email: str) -> dict | None:
    result = conn.execute(
        "MATCH (u:User) WHERE u.email = $email "
        "RETURN u.id, u.email, u.display_name, u.password_hash, u.created_at",
        {"email": email.strip().lower()}
    )
    if result.has_next():
        return _user_row(result.get_next())
    return None


def get_user_by_id(conn: kuzu.Connection, user_id: str) -> dict | None:
    result = conn.execute(
        "MATCH (u:User) WHERE u.id = $id "
        "RETURN u.id, u.email, u.display_name, u.password_hash, u.created_at",
        {"id": user_id}
    )
    if result.has_next():
        return _user_row(result.get_next())
    return None


def count_users(conn: kuzu.Connection) -> int:
    result = conn.execute("MATCH (u:User) RETURN count(*)")
    if result.has_next():
        return result.get_next()[0]
    return 0


# ── FastAPI dependencies ──

def get_current_user(request: Request, conn=Depends(get_conn)) -> dict:
    """Extract the user from the session cookie. Raises 401 if not authenticated."""
    token = request.cookies.get(SESSION_COOKIE)
    user_id = verify_session_token(token)
    if not user_id:
        raise HTTPException(401, "Not authenticated")
    user = get_user_by_id(conn, user_id)
    if not user:
        raise HTTPException(401, "User not found")
    return {k: v for k, v in user.items() if k != "password_hash"}
