from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends

from ..db import list_categories, seed_default_categories
from ..schemas import WordCategory
from ..supabase import UserContext, get_user_context

router = APIRouter(prefix="/api/v1", tags=["categories"])


@router.get("/categories", response_model=List[WordCategory])
async def list_categories_endpoint(auth: UserContext = Depends(get_user_context)) -> List[WordCategory]:
    return await list_categories(auth.supabase)


@router.post("/categories/defaults", response_model=List[WordCategory])
async def seed_categories_endpoint(auth: UserContext = Depends(get_user_context)) -> List[WordCategory]:
    return await seed_default_categories(auth.supabase)
