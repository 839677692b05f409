"""Row access for words, categories and milestones, always scoped to (user, child)."""
from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Optional

from fastapi import HTTPException

from .schemas import DEFAULT_CATEGORIES, Milestone, Word, WordCategory
from .supabase import SupabaseClient

WORD_COLUMNS = "id,word,category_id,child_id,user_id,date_learned,notes,created_at,updated_at"
CATEGORY_COLUMNS = "id,name,icon,color,created_at,updated_at"


def owner_params(child_id: str, user_id: str) -> Dict[str, str]:
    return {"child_id": f"eq.{child_id}", "user_id": f"eq.{user_id}"}


async def list_categories(supabase: SupabaseClient) -> List[WordCategory]:
    rows = await supabase.select("word_categories", params={"select": CATEGORY_COLUMNS, "order": "name.asc"})
    return [WordCategory.model_validate(row) for row in rows]


async def seed_default_categories(supabase: SupabaseClient) -> List[WordCategory]:
    rows = await supabase.upsert("word_categories", DEFAULT_CATEGORIES, on_conflict="name")
    return [WordCategory.model_validate(row) for row in rows]


async def list_words(
    supabase: SupabaseClient,
    child_id: str,
    user_id: str,
    *,
    with_category: bool = False,
    limit: Optional[int] = None,
) -> List[Word]:
    select = f"{WORD_COLUMNS},word_categories(*)" if with_category else WORD_COLUMNS
    params: Dict[str, Any] = {
        "select": select,
        **owner_params(child_id, user_id),
        "order": "created_at.desc",
    }
    if limit is not None:
        params["limit"] = str(limit)
    rows = await supabase.select("words", params=params)
    return [Word.model_validate(row) for row in rows]


async def count_words(
    supabase: SupabaseClient,
    child_id: str,
    user_id: str,
    *,
    learned_on: Optional[date] = None,
) -> int:
    params = owner_params(child_id, user_id)
    if learned_on is not None:
        params["date_learned"] = f"eq.{learned_on.isoformat()}"
    return await supabase.count("words", params=params)


async def insert_word(
    supabase: SupabaseClient,
    *,
    child_id: str,
    user_id: str,
    word: str,
    category_id: Optional[str],
    date_learned: date,
    notes: Optional[str] = None,
) -> Word:
    rows = await supabase.insert(
        "words",
        {
            "word": word,
            "category_id": category_id,
            "child_id": child_id,
            "user_id": user_id,
            "date_learned": date_learned.isoformat(),
            "notes": notes,
        },
    )
    if not rows:
        raise HTTPException(status_code=502, detail="Word insert returned no row.")
    return Word.model_validate(rows[0])


async def delete_word(supabase: SupabaseClient, word_id: str, child_id: str, user_id: str) -> None:
    await supabase.delete("words", params={"id": f"eq.{word_id}", **owner_params(child_id, user_id)})


async def list_milestones(
    supabase: SupabaseClient,
    child_id: str,
    user_id: str,
    *,
    achieved: Optional[bool] = None,
) -> List[Milestone]:
    params: Dict[str, Any] = {
        "select": "*",
        **owner_params(child_id, user_id),
        "order": "target_value.asc",
    }
    if achieved is not None:
        params["achieved"] = f"eq.{str(achieved).lower()}"
    rows = await supabase.select("milestones", params=params)
    return [Milestone.model_validate(row) for row in rows]
