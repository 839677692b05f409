from __future__ import annotations

import logging
from typing import Callable, List, Optional

from fastapi import HTTPException

from .schemas import Child
from .supabase import SupabaseClient, UserContext, resolve_optional_uuid

logger = logging.getLogger(__name__)

CHILD_COLUMNS = "id,name,birthdate,avatar,user_id,created_at,updated_at"

ChildListener = Callable[[Optional[Child]], None]


async def list_children(supabase: SupabaseClient, user_id: str) -> List[Child]:
    rows = await supabase.select(
        "children",
        params={
            "select": CHILD_COLUMNS,
            "user_id": f"eq.{user_id}",
            "order": "created_at.asc",
        },
    )
    return [Child.model_validate(row) for row in rows]


async def require_owned_child(auth: UserContext, child_id: Optional[str]) -> Child:
    """Resolve the child a request is scoped to, defaulting to the user's first child."""

    params = {
        "select": CHILD_COLUMNS,
        "user_id": f"eq.{auth.user_id}",
        "order": "created_at.asc",
        "limit": "1",
    }
    if child_id:
        params["id"] = f"eq.{child_id}"
    rows = await auth.supabase.select("children", params=params)
    if not rows:
        if child_id:
            raise HTTPException(status_code=404, detail="Child not found")
        raise HTTPException(status_code=400, detail="Please add a child profile first")
    return Child.model_validate(rows[0])


async def current_child(
    auth: UserContext,
    header_value: Optional[str],
    query_value: Optional[str],
) -> Child:
    child_id = resolve_optional_uuid(header_value or query_value, "child_id")
    return await require_owned_child(auth, child_id)


class ActiveChildSelector:
    """Tracks which of the signed-in user's children is current.

    Observers registered with :meth:`subscribe` are called with the new
    current child every time the selection changes.
    """

    def __init__(self, supabase: SupabaseClient, user_id: Optional[str]) -> None:
        self._supabase = supabase
        self._user_id = user_id
        self._children: List[Child] = []
        self._current: Optional[Child] = None
        self._listeners: List[ChildListener] = []
        self.loading = True

    @property
    def children(self) -> List[Child]:
        return list(self._children)

    @property
    def current(self) -> Optional[Child]:
        return self._current

    def subscribe(self, listener: ChildListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set_current(self, child: Optional[Child]) -> None:
        previous = self._current
        self._current = child
        if (previous.id if previous else None) == (child.id if child else None):
            return
        for listener in list(self._listeners):
            listener(child)

    def select(self, child_id: Optional[str]) -> Optional[Child]:
        if child_id is None:
            self._set_current(None)
            return None
        child = next((item for item in self._children if item.id == child_id), None)
        if child is None:
            raise KeyError(f"Unknown child {child_id}")
        self._set_current(child)
        return child

    async def refresh(self, *, raise_errors: bool = False) -> List[Child]:
        """Reload the children; a failed load keeps the last list unless ``raise_errors``."""

        if not self._user_id:
            self._children = []
            self._set_current(None)
            self.loading = False
            return []

        try:
            self._children = await list_children(self._supabase, self._user_id)
        except HTTPException as exc:
            logger.exception("Error fetching children", exc_info=exc)
            if raise_errors:
                raise
            return self.children
        finally:
            self.loading = False

        current = self._current
        if current is not None:
            current = next((item for item in self._children if item.id == current.id), None)
        if current is None and self._children:
            current = self._children[0]
        self._set_current(current)
        return self.children
