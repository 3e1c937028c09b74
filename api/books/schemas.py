"""
Pydantic schemas for book catalog endpoints.
"""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, Field, field_validator

# Postgres INTEGER bounds; ids and year/pages must fit.
INT4_MIN = -2_147_483_648
INT4_MAX = 2_147_483_647


class BookPayload(BaseModel):
    """
    Body for create and full-replace update.

    `title` and `author` are optional here so a missing value becomes the
    catalog's own 400 ("Title and author are required") instead of a generic
    validation error.
    """

    title: str | None = Field(default=None, max_length=500)
    author: str | None = Field(default=None, max_length=300)
    year: int | None = Field(default=None, strict=True, ge=INT4_MIN, le=INT4_MAX)
    genre: str | None = Field(default=None, max_length=100)
    pages: int | None = Field(default=None, strict=True, ge=INT4_MIN, le=INT4_MAX)
    price: Decimal | None = Field(default=None, max_digits=10, decimal_places=2)
    isbn: str | None = Field(default=None, max_length=20)
    description: str | None = None

    @field_validator("title", "author", mode="before")
    @classmethod
    def _strip_required(cls, value: object) -> object:
        return value.strip() if isinstance(value, str) else value

    # Free text is stored exactly as sent; only all-blank values become NULL.
    @field_validator("genre", "isbn", "description")
    @classmethod
    def _blank_to_none(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        return value

    def has_required_fields(self) -> bool:
        return bool(self.title) and bool(self.author)


class BookStats(BaseModel):
    totalBooks: int
    uniqueAuthors: int
    uniqueGenres: int
    totalValue: float


class DeleteResponse(BaseModel):
    message: str
