"""Database user blocks."""
from typing import Any, Dict, Iterable, List, Optional, Tuple


def _identity(user: Dict[str, Any]) -> Tuple[str, str]:
    return (user.get("name") or "", user.get("user_type") or "")


def _key(user: Dict[str, Any]) -> Tuple[str, str, str]:
    return _identity(user) + (user.get("password") or "",)


def diff_users(old: Optional[Iterable[Dict[str, Any]]],
               new: Optional[Iterable[Dict[str, Any]]]) -> Tuple[List[Dict[str, Any]], List[Dict[str, Any]]]:
    """
    Compare two user sets.

    A user whose password changes is reported as added only; it is not
    removed since its name and type are still configured.

    Returns:
        (added, removed) user blocks
    """
    old_list = list(old or [])
    new_list = list(new or [])
    old_keys = {_key(u) for u in old_list}
    new_identities = {_identity(u) for u in new_list}
    added = [u for u in new_list if _key(u) not in old_keys]
    removed = [u for u in old_list if _identity(u) not in new_identities]
    return added, removed


def expand_user(user: Dict[str, Any]) -> Dict[str, str]:
    """Payload of create_database_user."""
    return {"username": user["name"], "password": user.get("password", "")}
