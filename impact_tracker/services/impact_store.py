"""Impact persistence: SQLite when DATA_PROVIDER=sqlite, in-memory otherwise.

All operations are scoped to one user; an impact owned by someone else is
indistinguishable from a missing one.
"""
from __future__ import annotations

import json
import logging
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional
from uuid import uuid4

from impact_tracker.core.config import get_settings
from impact_tracker.db import sqlite as sqlite_db
from impact_tracker.models.domain import Impact, ImpactBase

logger = logging.getLogger(__name__)

_LIST_FIELDS = ("craft_skills", "program_tags", "stakeholders", "evidence_links")

# In-memory fallback store
_mem_impacts: Dict[str, Dict[str, Any]] = {}  # id -> record
_user_impacts_index: Dict[str, List[str]] = {}  # user_id -> list[impact_id]


# PUBLIC_INTERFACE
def reset_impact_state() -> None:
    """Clear in-memory impacts (no-op for sqlite)."""
    _mem_impacts.clear()
    _user_impacts_index.clear()


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _to_row(rec: Dict[str, Any]) -> Dict[str, Any]:
    row = dict(rec)
    for f in _LIST_FIELDS:
        row[f] = json.dumps(row.get(f) or [])
    row["date"] = rec["date"].isoformat() if isinstance(rec["date"], date) else rec["date"]
    return row


def _from_row(row: Dict[str, Any]) -> Impact:
    rec = dict(row)
    for f in _LIST_FIELDS:
        rec[f] = json.loads(rec.get(f) or "[]")
    return Impact(**rec)


def _record(user_id: str, payload: ImpactBase, source: str, impact_id: str, created_at: str) -> Dict[str, Any]:
    data = payload.model_dump(mode="json", exclude={"source"})
    # Title is stored verbatim; coverage matches it exactly against expectation text.
    data["description"] = (data.get("description") or "").strip()
    if data.get("quantified_unit"):
        data["quantified_unit"] = data["quantified_unit"].strip()
    if not data.get("quantified_value"):
        data["quantified_value"] = None
    data.update(
        id=impact_id,
        user_id=user_id,
        source=source,
        created_at=created_at,
        updated_at=_now(),
    )
    return data


def _matches_filters(imp: Impact, start: Optional[date], end: Optional[date],
                     craft_skill: Optional[str], category: Optional[str]) -> bool:
    if start and imp.date < start:
        return False
    if end and imp.date > end:
        return False
    if category and imp.impact_category.value != category:
        return False
    if craft_skill and craft_skill not in imp.craft_skills:
        return False
    return True


# PUBLIC_INTERFACE
def list_impacts(
    user_id: str,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    craft_skill: Optional[str] = None,
    category: Optional[str] = None,
) -> List[Impact]:
    """List a user's impacts, newest first, with inclusive date bounds and optional filters."""
    settings = get_settings()
    if settings.data_provider == "sqlite":
        query = "SELECT * FROM impacts WHERE user_id = ?"
        params: List[Any] = [user_id]
        if start_date:
            query += " AND date >= ?"
            params.append(start_date.isoformat())
        if end_date:
            query += " AND date <= ?"
            params.append(end_date.isoformat())
        if category:
            query += " AND impact_category = ?"
            params.append(category)
        query += " ORDER BY date DESC, created_at DESC"
        with sqlite_db.get_conn() as conn:
            impacts = [_from_row(r) for r in sqlite_db.fetch_all(conn, query, params)]
        # craft_skills is a JSON column; filter in Python
        return [i for i in impacts if _matches_filters(i, None, None, craft_skill, None)]

    ids = _user_impacts_index.get(user_id, [])
    impacts = [Impact(**_mem_impacts[i]) for i in ids if i in _mem_impacts]
    impacts = [i for i in impacts if _matches_filters(i, start_date, end_date, craft_skill, category)]
    impacts.sort(key=lambda i: (i.date, i.created_at), reverse=True)
    return impacts


# PUBLIC_INTERFACE
def get_impact(user_id: str, impact_id: str) -> Optional[Impact]:
    """Return one impact owned by user_id, or None."""
    settings = get_settings()
    if settings.data_provider == "sqlite":
        with sqlite_db.get_conn() as conn:
            row = sqlite_db.fetch_one(
                conn, "SELECT * FROM impacts WHERE id = ? AND user_id = ?", (impact_id, user_id)
            )
        return _from_row(row) if row else None
    rec = _mem_impacts.get(impact_id)
    if not rec or rec["user_id"] != user_id:
        return None
    return Impact(**rec)


# PUBLIC_INTERFACE
def create_impact(user_id: str, payload: ImpactBase, source: str = "web") -> Impact:
    """Persist a new impact for user_id."""
    rec = _record(user_id, payload, source, str(uuid4()), _now())
    settings = get_settings()
    if settings.data_provider == "sqlite":
        row = _to_row(rec)
        cols = list(row.keys())
        with sqlite_db.get_conn() as conn:
            sqlite_db.execute(
                conn,
                f"INSERT INTO impacts ({', '.join(cols)}) VALUES ({', '.join('?' for _ in cols)})",
                [row[c] for c in cols],
            )
    else:
        _mem_impacts[rec["id"]] = rec
        _user_impacts_index.setdefault(user_id, []).append(rec["id"])
    logger.info("Created impact %s", rec["id"])
    return Impact(**rec)


# PUBLIC_INTERFACE
def update_impact(user_id: str, impact_id: str, payload: ImpactBase, source: Optional[str] = None) -> Optional[Impact]:
    """Replace an impact's fields; returns None when it does not exist for this user."""
    existing = get_impact(user_id, impact_id)
    if existing is None:
        return None
    rec = _record(user_id, payload, source or existing.source, impact_id, existing.created_at)
    settings = get_settings()
    if settings.data_provider == "sqlite":
        row = _to_row(rec)
        cols = [c for c in row.keys() if c not in {"id", "user_id", "created_at"}]
        with sqlite_db.get_conn() as conn:
            sqlite_db.execute(
                conn,
                f"UPDATE impacts SET {', '.join(f'{c} = ?' for c in cols)} WHERE id = ? AND user_id = ?",
                [row[c] for c in cols] + [impact_id, user_id],
            )
    else:
        _mem_impacts[impact_id] = rec
    logger.info("Updated impact %s", impact_id)
    return Impact(**rec)


# PUBLIC_INTERFACE
def delete_impact(user_id: str, impact_id: str) -> bool:
    """Delete an impact; returns False when it does not exist for this user."""
    settings = get_settings()
    if settings.data_provider == "sqlite":
        with sqlite_db.get_conn() as conn:
            deleted = sqlite_db.execute(
                conn, "DELETE FROM impacts WHERE id = ? AND user_id = ?", (impact_id, user_id)
            ) > 0
    else:
        rec = _mem_impacts.get(impact_id)
        deleted = bool(rec and rec["user_id"] == user_id)
        if deleted:
            del _mem_impacts[impact_id]
            _user_impacts_index[user_id].remove(impact_id)
    if deleted:
        logger.info("Deleted impact %s", impact_id)
    return deleted
