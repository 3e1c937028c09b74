"""
Book catalog API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Query, status

from . import schemas, service

router = APIRouter()


@router.get("/books")
async def list_books(
    search: str | None = Query(default=None),
    genre: str | None = Query(default=None),
) -> list[dict]:
    return await service.list_books(search=search, genre=genre)


@router.get("/books/{book_id}")
async def get_book(book_id: str) -> dict:
    return await service.get_book(book_id)


@router.post("/books", status_code=status.HTTP_201_CREATED)
async def create_book(payload: schemas.BookPayload | None = None) -> dict:
    return await service.create_book(payload)


@router.put("/books/{book_id}")
async def update_book(book_id: str, payload: schemas.BookPayload | None = None) -> dict:
    return await service.update_book(book_id, payload)


@router.delete("/books/{book_id}")
async def delete_book(book_id: str) -> schemas.DeleteResponse:
    return await service.delete_book(book_id)


@router.get("/stats")
async def get_stats() -> schemas.BookStats:
    return await service.stats()


@router.get("/genres")
async def list_genres() -> list[str]:
    return await service.genres()
