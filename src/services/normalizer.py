# src/services/normalizer.py
from __future__ import annotations

from typing import Any, Iterable, Optional

from src.app.domain.models import UNTITLED_RECIPE, Recipe, RecipeSummary

INGREDIENT_SLOTS = 20


def _clean_field(value: Any) -> Optional[str]:
    """Trimmed text, or None for blank values and the literal "null"."""
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    if not stripped or stripped.lower() == "null":
        return None
    return stripped


def _clean_category(value: Any) -> Optional[str]:
    category = _clean_field(value)
    return category.lower() if category else None


def extract_ingredients(raw: dict[str, Any]) -> list[str]:
    ingredients: list[str] = []
    for slot in range(1, INGREDIENT_SLOTS + 1):
        name = _clean_field(raw.get(f"strIngredient{slot}"))
        if not name:
            continue
        measure = _clean_field(raw.get(f"strMeasure{slot}"))
        ingredients.append(f"{measure} {name}" if measure else name)
    return ingredients


def provider_id_of(raw: Any) -> Optional[str]:
    if not isinstance(raw, dict):
        return None
    value = raw.get("idMeal")
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def normalize(raw: dict[str, Any]) -> Recipe:
    """Map a provider meal record into a Recipe."""
    provider_id = provider_id_of(raw)
    if provider_id is None:
        raise ValueError("Provider record has no idMeal")
    return Recipe(
        provider_id=provider_id,
        title=_clean_field(raw.get("strMeal")) or UNTITLED_RECIPE,
        image=_clean_field(raw.get("strMealThumb")) or "",
        instructions=_clean_field(raw.get("strInstructions")) or "",
        ingredients=extract_ingredients(raw),
        category=_clean_category(raw.get("strCategory")),
    )


def summarize(raw: dict[str, Any], category: Optional[str] = None) -> RecipeSummary:
    """Map a partial (filter endpoint) record into a RecipeSummary."""
    provider_id = provider_id_of(raw)
    if provider_id is None:
        raise ValueError("Provider record has no idMeal")
    return RecipeSummary(
        provider_id=provider_id,
        title=_clean_field(raw.get("strMeal")) or UNTITLED_RECIPE,
        image=_clean_field(raw.get("strMealThumb")) or "",
        category=_clean_category(category) or _clean_category(raw.get("strCategory")),
    )


def normalize_many(records: Iterable[Any]) -> list[Recipe]:
    return [normalize(raw) for raw in records if provider_id_of(raw)]


def summarize_many(records: Iterable[Any], category: Optional[str] = None) -> list[RecipeSummary]:
    return [summarize(raw, category) for raw in records if provider_id_of(raw)]
