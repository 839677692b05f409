from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import CONFIG
from .routes import auth as auth_routes
from .routes import categories as category_routes
from .routes import children as children_routes
from .routes import flashcards as flashcard_routes
from .routes import milestones as milestone_routes
from .routes import stats as stats_routes
from .routes import suggestions as suggestion_routes
from .routes import words as word_routes

app = FastAPI(
    title="Little Linguist API",
    version="0.1.0",
    description="Logs a child's vocabulary, speech milestones and progress statistics",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CONFIG.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
    allow_credentials=False,
)

app.include_router(auth_routes.router)
app.include_router(children_routes.router)
app.include_router(category_routes.router)
app.include_router(word_routes.router)
app.include_router(milestone_routes.router)
app.include_router(stats_routes.router)
app.include_router(flashcard_routes.router)
app.include_router(suggestion_routes.router)


@app.get("/health")
async def health() -> dict:
    return {"status": "ok"}


@app.get("/")
async def root() -> dict:
    return {"message": "Little Linguist API is running"}
