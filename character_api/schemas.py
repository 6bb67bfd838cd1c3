"""Pydantic schemas for API request/response bodies."""

from typing import Any, Optional, List, Literal
from pydantic import BaseModel, Field, model_validator


class _NullAsDefault(BaseModel):
    """Treat explicit JSON nulls like missing keys so fields fall back to defaults."""

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data


class Location(_NullAsDefault):
    """A `{name, url}` pair; absent values are empty strings, never null."""

    name: str = ""
    url: str = ""


class CharacterIn(_NullAsDefault):
    """Character document as accepted on create/update (no id)."""

    name: str = ""
    status: str = ""
    species: str = ""
    type: str = ""
    gender: str = ""
    origin: Location = Field(default_factory=Location)
    location: Location = Field(default_factory=Location)
    image: str = ""
    episode: List[str] = Field(default_factory=list)
    url: str = ""
    created: str = ""


class Character(CharacterIn):
    """Character document as served, with its storage-assigned id."""

    id: int


class HealthcheckOut(BaseModel):
    status: Literal["ok", "degraded"]
    db_ok: bool
    character_count: int
    version: str


class ProblemDetail(BaseModel):
    """RFC 7807-style problem response (simplified)."""

    type: str = "about:blank"
    title: str
    status: int
    detail: Optional[str] = None
    instance: Optional[str] = None
