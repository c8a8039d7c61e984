from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field


class ShoppingListItemResponse(BaseModel):
    recipeName: str
    ingredients: List[str] = Field(default_factory=list)


class ShoppingListResponse(BaseModel):
    list: List[ShoppingListItemResponse] = Field(default_factory=lambda: [])


class ShoppingListAddRequest(BaseModel):
    userId: str = Field(..., min_length=1)
    recipeName: str = Field(..., min_length=1)
    ingredients: List[str]
