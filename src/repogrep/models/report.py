from __future__ import annotations

from pydantic import BaseModel


class InspectionResult(BaseModel):
    """A repository whose file matched the active inspector."""

    repo: str  # Repository name without the owner
    value: str  # Installed version (lockfile mode) or "found" (search mode)
