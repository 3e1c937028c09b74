"""
Book catalog persistence (raw SQL).

Every statement is parameterized; user input only ever travels as $n args.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from core import db

from .schemas import BookPayload

BOOK_COLUMNS = (
    "id, title, author, year, genre, pages, price, isbn, description, created_at, updated_at"
)

CREATE_BOOKS_TABLE = """
CREATE TABLE IF NOT EXISTS books (
    id SERIAL PRIMARY KEY,
    title VARCHAR(500) NOT NULL,
    author VARCHAR(300) NOT NULL,
    year INTEGER,
    genre VARCHAR(100),
    pages INTEGER,
    price DECIMAL(10,2),
    isbn VARCHAR(20),
    description TEXT,
    created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
    updated_at TIMESTAMPTZ NOT NULL DEFAULT now()
)
"""


async def ensure_schema() -> None:
    await db.execute(CREATE_BOOKS_TABLE)


def escape_like(value: str) -> str:
    """
    Escape LIKE/ILIKE wildcards so `value` matches literally (default escape char is backslash).
    """
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def build_list_query(*, search: str | None = None, genre: str | None = None) -> tuple[str, list[Any]]:
    conditions: list[str] = []
    args: list[Any] = []

    if search:
        args.append(f"%{escape_like(search)}%")
        n = len(args)
        conditions.append(f"(title ILIKE ${n} OR author ILIKE ${n} OR description ILIKE ${n})")

    if genre:
        args.append(genre)
        conditions.append(f"genre = ${len(args)}")

    sql = f"SELECT {BOOK_COLUMNS} FROM books"
    if conditions:
        sql += " WHERE " + " AND ".join(conditions)
    sql += " ORDER BY created_at DESC, id DESC"
    return sql, args


def _payload_args(payload: BookPayload) -> list[Any]:
    return [
        payload.title,
        payload.author,
        payload.year,
        payload.genre,
        payload.pages,
        payload.price,
        payload.isbn,
        payload.description,
    ]


async def list_books(*, search: str | None = None, genre: str | None = None) -> list[dict[str, Any]]:
    sql, args = build_list_query(search=search, genre=genre)
    return await db.fetch_all(sql, *args)


async def get_book(book_id: int) -> dict[str, Any] | None:
    return await db.fetch_one(
        f"""
        SELECT {BOOK_COLUMNS}
        FROM books
        WHERE id = $1
        """,
        book_id,
    )


async def create_book(payload: BookPayload) -> dict[str, Any]:
    row = await db.fetch_one(
        f"""
        INSERT INTO books (title, author, year, genre, pages, price, isbn, description)
        VALUES ($1, $2, $3, $4, $5, $6, $7, $8)
        RETURNING {BOOK_COLUMNS}
        """,
        *_payload_args(payload),
    )
    if row is None:
        raise RuntimeError("Failed to insert book.")
    return row


async def update_book(book_id: int, payload: BookPayload) -> dict[str, Any] | None:
    return await db.fetch_one(
        f"""
        UPDATE books
        SET title = $1, author = $2, year = $3, genre = $4, pages = $5,
            price = $6, isbn = $7, description = $8, updated_at = now()
        WHERE id = $9
        RETURNING {BOOK_COLUMNS}
        """,
        *_payload_args(payload),
        book_id,
    )


async def delete_book(book_id: int) -> bool:
    row = await db.fetch_one(
        """
        DELETE FROM books
        WHERE id = $1
        RETURNING id
        """,
        book_id,
    )
    return row is not None


async def count_books() -> int:
    return int(await db.fetch_val("SELECT COUNT(*) FROM books") or 0)


async def count_unique_authors() -> int:
    return int(await db.fetch_val("SELECT COUNT(DISTINCT lower(author)) FROM books") or 0)


async def count_unique_genres() -> int:
    value = await db.fetch_val(
        """
        SELECT COUNT(DISTINCT genre)
        FROM books
        WHERE genre IS NOT NULL
          AND genre <> ''
        """
    )
    return int(value or 0)


async def total_value() -> Decimal:
    value = await db.fetch_val(
        """
        SELECT COALESCE(SUM(price), 0)
        FROM books
        WHERE price IS NOT NULL
        """
    )
    return Decimal(value or 0)


async def list_genres() -> list[str]:
    rows = await db.fetch_all(
        """
        SELECT DISTINCT genre
        FROM books
        WHERE genre IS NOT NULL
          AND genre <> ''
        ORDER BY genre
        """
    )
    return [str(row["genre"]) for row in rows]
