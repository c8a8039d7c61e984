from __future__ import annotations

import logging
from typing import Optional

from src.app.domain.errors import FavoriteConflictError
from src.app.domain.models import Favorite
from src.app.infra.db.base import FavoritesRepository

logger = logging.getLogger(__name__)

ANONYMOUS_OWNER_TOKENS = {"", "null", "undefined"}


def normalize_owner(owner_id: Optional[str]) -> Optional[str]:
    """Map empty or placeholder owner ids sent by guests to None (anonymous)."""
    if owner_id is None:
        return None
    value = owner_id.strip()
    return None if value.lower() in ANONYMOUS_OWNER_TOKENS else value


class FavoritesService:
    def __init__(self, repository: FavoritesRepository):
        self._repo = repository

    def list(self, owner_id: Optional[str]) -> list[Favorite]:
        return self._repo.list(normalize_owner(owner_id))

    def add(
        self,
        owner_id: Optional[str],
        recipe_ref: str,
        title: str = "",
        image: str = "",
    ) -> Favorite:
        """
        Raises:
            FavoriteConflictError: If the recipe is already a favorite of the owner
        """
        owner = normalize_owner(owner_id)
        if self._repo.find(owner, recipe_ref) is not None:
            raise FavoriteConflictError(owner, recipe_ref)

        favorite = self._repo.insert(
            Favorite(recipe_ref=recipe_ref, owner_id=owner, title=title, image=image)
        )
        logger.info("Favorite added: owner=%s, recipe=%s", owner, recipe_ref)
        return favorite

    def remove(self, owner_id: Optional[str], recipe_ref: str) -> bool:
        return self._repo.delete(normalize_owner(owner_id), recipe_ref)
