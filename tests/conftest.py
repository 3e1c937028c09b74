"""
Pytest fixtures for the book catalog API.

The HTTP tests never talk to Postgres: `store` swaps the functions in
`books.repository` for an in-memory fake with the same signatures.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any

import pytest
from fastapi.testclient import TestClient

from books import repository
from books.schemas import BookPayload
from core import db

REPOSITORY_FUNCTIONS = (
    "ensure_schema",
    "list_books",
    "get_book",
    "create_book",
    "update_book",
    "delete_book",
    "count_books",
    "count_unique_authors",
    "count_unique_genres",
    "total_value",
    "list_genres",
)


class FakeBookStore:
    """In-memory stand-in for the `books` table."""

    def __init__(self) -> None:
        self.rows: dict[int, dict[str, Any]] = {}
        self.calls: list[str] = []
        self.fail = False
        self._next_id = 1
        self._clock = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def _now(self) -> datetime:
        self._clock += timedelta(seconds=1)
        return self._clock

    def _touch(self, name: str) -> None:
        self.calls.append(name)
        if self.fail:
            raise ConnectionRefusedError("connection refused")

    @staticmethod
    def _fields(payload: BookPayload) -> dict[str, Any]:
        return {
            "title": payload.title,
            "author": payload.author,
            "year": payload.year,
            "genre": payload.genre,
            "pages": payload.pages,
            "price": payload.price.quantize(Decimal("0.01")) if payload.price is not None else None,
            "isbn": payload.isbn,
            "description": payload.description,
        }

    async def ensure_schema(self) -> None:
        self._touch("ensure_schema")

    async def list_books(self, *, search: str | None = None, genre: str | None = None) -> list[dict]:
        self._touch("list_books")
        needle = (search or "").lower()
        result = []
        for row in self.rows.values():
            if needle:
                haystacks = (row["title"], row["author"], row["description"] or "")
                if not any(needle in text.lower() for text in haystacks):
                    continue
            if genre and row["genre"] != genre:
                continue
            result.append(dict(row))
        result.sort(key=lambda r: (r["created_at"], r["id"]), reverse=True)
        return result

    async def get_book(self, book_id: int) -> dict | None:
        self._touch("get_book")
        row = self.rows.get(book_id)
        return dict(row) if row is not None else None

    async def create_book(self, payload: BookPayload) -> dict:
        self._touch("create_book")
        now = self._now()
        row = {"id": self._next_id, **self._fields(payload), "created_at": now, "updated_at": now}
        self.rows[self._next_id] = row
        self._next_id += 1
        return dict(row)

    async def update_book(self, book_id: int, payload: BookPayload) -> dict | None:
        self._touch("update_book")
        row = self.rows.get(book_id)
        if row is None:
            return None
        row.update(self._fields(payload))
        row["updated_at"] = self._now()
        return dict(row)

    async def delete_book(self, book_id: int) -> bool:
        self._touch("delete_book")
        return self.rows.pop(book_id, None) is not None

    async def count_books(self) -> int:
        self._touch("count_books")
        return len(self.rows)

    async def count_unique_authors(self) -> int:
        self._touch("count_unique_authors")
        return len({row["author"].lower() for row in self.rows.values()})

    async def count_unique_genres(self) -> int:
        self._touch("count_unique_genres")
        return len({row["genre"] for row in self.rows.values() if row["genre"]})

    async def total_value(self) -> Decimal:
        self._touch("total_value")
        return sum((row["price"] for row in self.rows.values() if row["price"] is not None), Decimal(0))

    async def list_genres(self) -> list[str]:
        self._touch("list_genres")
        return sorted({row["genre"] for row in self.rows.values() if row["genre"]})


@pytest.fixture
def store(monkeypatch) -> FakeBookStore:
    fake = FakeBookStore()
    for name in REPOSITORY_FUNCTIONS:
        monkeypatch.setattr(repository, name, getattr(fake, name))
    return fake


@pytest.fixture
def client(store) -> TestClient:
    # No `with`: the lifespan (real pool) is not started for HTTP tests.
    import main

    return TestClient(main.app)


@pytest.fixture
def fresh_pool(monkeypatch):
    monkeypatch.setattr(db, "_pool", None)
    return None
