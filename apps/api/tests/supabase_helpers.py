from __future__ import annotations

from copy import deepcopy
from datetime import datetime, timezone
from uuid import uuid4

from fastapi import HTTPException

from linguist.supabase import UserContext

_CONTROL_PARAMS = {"select", "order", "limit", "on_conflict"}

DEFAULT_MILESTONES = [
    ("First Word", "vocabulary", 1, "🗣️"),
    ("10 Words", "vocabulary", 10, "🔟"),
    ("50 Words", "vocabulary", 50, "🌟"),
    ("100 Words", "vocabulary", 100, "🏆"),
    ("First Phrase", "speech", 1, "💬"),
    ("First Sentence", "speech", 1, "📝"),
]


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _as_filter_value(value) -> str:
    if isinstance(value, bool):
        return str(value).lower()
    return str(value)


class FakeSupabase:
    """In-memory stand-in for the PostgREST client that records every call."""

    def __init__(self, tables=None, *, fail_updates=None, fail_selects=None):
        self.tables = {name: deepcopy(list(rows)) for name, rows in (tables or {}).items()}
        self.fail_updates = set(fail_updates or [])
        self.fail_selects = set(fail_selects or [])
        self.calls = []

    def _rows(self, table):
        return self.tables.setdefault(table, [])

    @staticmethod
    def _matches(row, params):
        for key, value in params.items():
            if key in _CONTROL_PARAMS or not isinstance(value, str) or not value.startswith("eq."):
                continue
            actual = row.get(key)
            if actual is None or _as_filter_value(actual) != value[3:]:
                return False
        return True

    def calls_for(self, action, table=None):
        return [call for call in self.calls if call[0] == action and (table is None or call[1] == table)]

    async def select(self, table, params):
        self.calls.append(("select", table, params))
        if table in self.fail_selects:
            raise HTTPException(status_code=500, detail=f"Supabase select failed (table={table})")
        rows = [deepcopy(row) for row in self._rows(table) if self._matches(row, params)]
        order = params.get("order")
        if order:
            column, _, direction = order.partition(".")
            rows.sort(key=lambda row: (row.get(column) is None, row.get(column)), reverse=direction == "desc")
        limit = params.get("limit")
        if limit:
            rows = rows[: int(limit)]
        return rows

    async def count(self, table, params):
        rows = await self.select(table, {**params, "select": "id"})
        return len(rows)

    async def insert(self, table, payload, *, params=None):
        self.calls.append(("insert", table, payload, params))
        items = payload if isinstance(payload, list) else [payload]
        created = []
        for item in items:
            row = {"id": str(uuid4()), "created_at": _now(), "updated_at": _now(), **item}
            self._rows(table).append(row)
            created.append(deepcopy(row))
        return created

    async def upsert(self, table, payload, *, on_conflict):
        self.calls.append(("upsert", table, payload, on_conflict))
        items = payload if isinstance(payload, list) else [payload]
        result = []
        for item in items:
            existing = next(
                (row for row in self._rows(table) if row.get(on_conflict) == item.get(on_conflict)),
                None,
            )
            if existing is None:
                existing = {"id": str(uuid4()), "created_at": _now(), "updated_at": _now()}
                self._rows(table).append(existing)
            existing.update(item)
            result.append(deepcopy(existing))
        return result

    async def update(self, table, payload, params):
        self.calls.append(("update", table, payload, params))
        updated = []
        for row in self._rows(table):
            if not self._matches(row, params):
                continue
            if row.get("id") in self.fail_updates:
                raise HTTPException(status_code=500, detail=f"Supabase update failed (table={table})")
            row.update(payload)
            updated.append(deepcopy(row))
        return updated

    async def delete(self, table, params):
        self.calls.append(("delete", table, params))
        self.tables[table] = [row for row in self._rows(table) if not self._matches(row, params)]

    async def rpc(self, fn, payload=None):
        self.calls.append(("rpc", fn, payload))
        if fn == "create_default_milestones_for_child":
            for title, milestone_type, target, icon in DEFAULT_MILESTONES:
                self._rows("milestones").append(
                    milestone_row(
                        child_id=payload["child_id"],
                        user_id=payload["user_id"],
                        title=title,
                        milestone_type=milestone_type,
                        target_value=target,
                        icon=icon,
                    )
                )
        return None


def user_context(supabase, *, user_id=None) -> UserContext:
    return UserContext(
        user_id=user_id or str(uuid4()),
        user_email="parent@example.com",
        access_token="test-token",
        supabase=supabase,
    )


def child_row(user_id, *, name="Mila", birthdate="2024-03-01", created_at="2025-01-01T00:00:00+00:00"):
    return {
        "id": str(uuid4()),
        "name": name,
        "birthdate": birthdate,
        "avatar": "👶",
        "user_id": user_id,
        "created_at": created_at,
        "updated_at": created_at,
    }


def word_row(child_id, user_id, word, *, date_learned="2025-01-01", category_id=None):
    return {
        "id": str(uuid4()),
        "word": word,
        "category_id": category_id,
        "child_id": child_id,
        "user_id": user_id,
        "date_learned": date_learned,
        "notes": None,
        "created_at": f"{date_learned}T09:00:00+00:00",
        "updated_at": f"{date_learned}T09:00:00+00:00",
    }


def milestone_row(
    *,
    child_id,
    user_id,
    title,
    target_value,
    milestone_type="vocabulary",
    current_value=0,
    achieved=False,
    achieved_date=None,
    icon="⭐",
):
    return {
        "id": str(uuid4()),
        "child_id": child_id,
        "user_id": user_id,
        "title": title,
        "description": None,
        "milestone_type": milestone_type,
        "target_value": target_value,
        "current_value": current_value,
        "achieved": achieved,
        "achieved_date": achieved_date,
        "icon": icon,
    }


def category_row(name, *, color="#FF6B6B", icon="⭐"):
    return {"id": str(uuid4()), "name": name, "icon": icon, "color": color}
