from __future__ import annotations
from typing import Optional


def format_person_name(name: str, surname: Optional[str] = None,
                       nickname: Optional[str] = None) -> str:
    """
    Name, then the nickname in single quotes, then the surname:
      "John Smith", "Charles 'Charlie' Brown", "John"
    Empty strings count as missing.
    """
    parts = [name]
    if nickname:
        parts.append(f"'{nickname}'")
    if surname:
        parts.append(surname)
    return " ".join(parts)


def format_full_name(person) -> str:
    """format_person_name for anything carrying name/surname/nickname attributes."""
    return format_person_name(person.name, person.surname, person.nickname)
