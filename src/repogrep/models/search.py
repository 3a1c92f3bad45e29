from __future__ import annotations

from pydantic import BaseModel


class SearchRepository(BaseModel):
    full_name: str


class SearchItem(BaseModel):
    repository: SearchRepository


class SearchPage(BaseModel):
    """One page of ``GET /search/code``. Unknown fields are ignored."""

    items: list[SearchItem] = []
