"""Auto-categorization of new words through the ConceptNet semantic network."""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional

import httpx

from .config import CONFIG
from .schemas import WordCategory

logger = logging.getLogger(__name__)

LOOKUP_RELATIONS = ["/r/IsA", "/r/RelatedTo"]
EDGE_LIMIT = 25

# ConceptNet concept labels that point at one of the default categories.
CATEGORY_KEYWORDS: Dict[str, List[str]] = {
    "Family": ["family", "relative", "parent", "mother", "father", "sibling", "grandparent", "person"],
    "Food": ["food", "fruit", "vegetable", "drink", "beverage", "meal", "snack", "dessert", "edible"],
    "Toys": ["toy", "game", "plaything", "doll", "ball"],
    "Actions": ["action", "verb", "activity", "motion", "movement", "act"],
    "Animals": ["animal", "mammal", "bird", "pet", "fish", "insect", "reptile", "creature"],
    "Body Parts": ["body part", "body", "organ", "limb", "face"],
    "Colors": ["color", "colour", "hue"],
    "Numbers": ["number", "numeral", "digit", "integer", "quantity"],
}


def concept_term(word: str, language: str = "en") -> str:
    slug = "_".join(word.strip().lower().split())
    return f"/c/{language}/{slug}"


def language_code(tag: Optional[str]) -> str:
    """Map a BCP-47 tag like ``fr-FR`` to the ConceptNet language code."""

    if not tag:
        return "en"
    return tag.split("-")[0].lower() or "en"


def match_category(labels: Iterable[str], categories: Iterable[WordCategory]) -> Optional[WordCategory]:
    """Return the first category whose keywords appear in the ordered edge labels."""

    by_name = {category.name.lower(): category for category in categories}
    for label in labels:
        normalized = label.strip().lower()
        if normalized in by_name:
            return by_name[normalized]
        for name, keywords in CATEGORY_KEYWORDS.items():
            category = by_name.get(name.lower())
            if category is None:
                continue
            if any(normalized == keyword or normalized.endswith(f" {keyword}") for keyword in keywords):
                return category
    return None


def _edge_labels(payload: Dict[str, Any]) -> List[str]:
    edges = payload.get("edges") or []
    edges = sorted(edges, key=lambda edge: edge.get("weight") or 0, reverse=True)
    labels = []
    for edge in edges:
        end = edge.get("end") or {}
        label = end.get("label")
        if isinstance(label, str) and label:
            labels.append(label)
    return labels


async def suggest_category(
    word: str,
    categories: List[WordCategory],
    *,
    language: str = "en",
) -> Optional[WordCategory]:
    """Look ``word`` up in ConceptNet and map the result onto a known category.

    Any network or decoding failure yields ``None``; auto-categorization is a
    convenience and never blocks adding the word.
    """

    if not word.strip() or not categories:
        return None
    term = concept_term(word, language)
    base_url = CONFIG.conceptnet_url.rstrip("/")
    labels: List[str] = []
    try:
        async with httpx.AsyncClient(timeout=CONFIG.conceptnet_timeout) as client:
            for relation in LOOKUP_RELATIONS:
                resp = await client.get(
                    f"{base_url}/query",
                    params={"start": term, "rel": relation, "limit": EDGE_LIMIT},
                )
                resp.raise_for_status()
                labels.extend(_edge_labels(resp.json()))
                match = match_category(labels, categories)
                if match is not None:
                    return match
    except (httpx.HTTPError, ValueError) as exc:
        logger.warning("ConceptNet lookup failed", extra={"word": word, "error": str(exc)})
        return None
    return None
