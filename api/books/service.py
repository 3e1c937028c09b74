"""
Book catalog business logic.

Scope:
- id parsing (non-numeric ids are "not found", not a validation error)
- title/author presence check before anything reaches the store
- turning store failures into one logged 500 per operation
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any

from fastapi import HTTPException, status

from core import db

from . import repository, schemas

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "Book not found"
REQUIRED_FIELDS_MESSAGE = "Title and author are required"


def parse_book_id(raw: str) -> int | None:
    value = (raw or "").strip()
    if not value or not value.isascii() or not value.isdigit():
        return None
    book_id = int(value)
    if book_id > schemas.INT4_MAX:
        return None
    return book_id


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND_MESSAGE)


def _store_failure(operation: str, message: str, **context: Any) -> HTTPException:
    # Must be called from inside an `except` block so the traceback is logged.
    details = " ".join(f"{key}={value!r}" for key, value in context.items())
    logger.exception("store_error operation=%s %s", operation, details)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=message)


def _require_fields(payload: schemas.BookPayload | None) -> schemas.BookPayload:
    if payload is None or not payload.has_required_fields():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=REQUIRED_FIELDS_MESSAGE)
    return payload


def _book_out(row: dict[str, Any]) -> dict[str, Any]:
    book = dict(row)
    price = book.get("price")
    if isinstance(price, Decimal):
        book["price"] = float(price)
    return book


async def list_books(*, search: str | None = None, genre: str | None = None) -> list[dict[str, Any]]:
    search = (search or "").strip() or None
    genre = genre or None
    try:
        rows = await repository.list_books(search=search, genre=genre)
    except db.DB_ERRORS as exc:
        raise _store_failure("list_books", "Failed to fetch books", search=search, genre=genre) from exc
    return [_book_out(row) for row in rows]


async def get_book(raw_id: str) -> dict[str, Any]:
    book_id = parse_book_id(raw_id)
    if book_id is None:
        raise _not_found()
    try:
        row = await repository.get_book(book_id)
    except db.DB_ERRORS as exc:
        raise _store_failure("get_book", "Failed to fetch book", book_id=book_id) from exc
    if row is None:
        raise _not_found()
    return _book_out(row)


async def create_book(payload: schemas.BookPayload | None) -> dict[str, Any]:
    payload = _require_fields(payload)
    try:
        row = await repository.create_book(payload)
    except db.DB_ERRORS as exc:
        raise _store_failure("create_book", "Failed to add book", title=payload.title) from exc
    logger.info("book_created id=%s", row["id"])
    return _book_out(row)


async def update_book(raw_id: str, payload: schemas.BookPayload | None) -> dict[str, Any]:
    payload = _require_fields(payload)
    book_id = parse_book_id(raw_id)
    if book_id is None:
        raise _not_found()
    try:
        row = await repository.update_book(book_id, payload)
    except db.DB_ERRORS as exc:
        raise _store_failure("update_book", "Failed to update book", book_id=book_id) from exc
    if row is None:
        raise _not_found()
    logger.info("book_updated id=%s", book_id)
    return _book_out(row)


async def delete_book(raw_id: str) -> schemas.DeleteResponse:
    book_id = parse_book_id(raw_id)
    if book_id is None:
        raise _not_found()
    try:
        deleted = await repository.delete_book(book_id)
    except db.DB_ERRORS as exc:
        raise _store_failure("delete_book", "Failed to delete book", book_id=book_id) from exc
    if not deleted:
        raise _not_found()
    logger.info("book_deleted id=%s", book_id)
    return schemas.DeleteResponse(message="Book deleted successfully")


async def stats() -> schemas.BookStats:
    """
    Four independent reads; a concurrent write between them is tolerated.
    """
    try:
        total_books = await repository.count_books()
        unique_authors = await repository.count_unique_authors()
        unique_genres = await repository.count_unique_genres()
        total_value = await repository.total_value()
    except db.DB_ERRORS as exc:
        raise _store_failure("stats", "Failed to fetch statistics") from exc
    return schemas.BookStats(
        totalBooks=total_books,
        uniqueAuthors=unique_authors,
        uniqueGenres=unique_genres,
        totalValue=float(total_value),
    )


async def genres() -> list[str]:
    try:
        return await repository.list_genres()
    except db.DB_ERRORS as exc:
        raise _store_failure("genres", "Failed to fetch genres") from exc
