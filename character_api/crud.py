"""Data access helpers (CRUD) for characters.

Each function issues a single statement (plus commit for writes) so HTTP
handlers stay thin. Functions speak in public documents on the way out and
accept documents on the way in; `mapper` does the reshaping. All statements
use bound parameters and run unchanged on SQLite and Postgres.

Errors from the database propagate as raised; the routes turn them into 500s.
"""

from typing import Any, Dict, List, Mapping, Optional
from sqlalchemy import select, update, delete, func
from sqlalchemy.ext.asyncio import AsyncSession

from .mapper import row_to_document, document_to_row
from .models import CharacterRow


async def count_characters(session: AsyncSession) -> int:
    """Return the total number of stored characters."""
    q = select(func.count()).select_from(CharacterRow)
    res = await session.execute(q)
    return int(res.scalar_one())


async def list_characters(session: AsyncSession) -> List[Dict[str, Any]]:
    """Return every stored character as a document, ordered by id.

    Args:
        session: Active async SQLAlchemy session.

    Returns:
        List of documents; empty list when the table is empty.
    """
    res = await session.execute(select(CharacterRow).order_by(CharacterRow.id))
    return [row_to_document(row) for row in res.scalars().all()]


async def get_character(
    session: AsyncSession, character_id: int
) -> Optional[Dict[str, Any]]:
    """Return the document for `character_id`, or None if no row matches."""
    res = await session.execute(
        select(CharacterRow).where(CharacterRow.id == character_id)
    )
    row = res.scalar_one_or_none()
    return None if row is None else row_to_document(row)


async def create_character(session: AsyncSession, doc: Mapping[str, Any]) -> int:
    """Insert a new row from `doc` and return the database-assigned id."""
    row = CharacterRow(**document_to_row(doc))
    session.add(row)
    await session.commit()
    return int(row.id)


async def update_character(
    session: AsyncSession, character_id: int, doc: Mapping[str, Any]
) -> int:
    """Overwrite every mutable column of `character_id` with `doc`.

    No existence check: updating a missing id is not an error.

    Returns:
        Number of rows affected (0 or 1).
    """
    res = await session.execute(
        update(CharacterRow)
        .where(CharacterRow.id == character_id)
        .values(**document_to_row(doc))
    )
    await session.commit()
    return res.rowcount


async def delete_character(session: AsyncSession, character_id: int) -> int:
    """Delete `character_id` unconditionally and return rows affected."""
    res = await session.execute(
        delete(CharacterRow).where(CharacterRow.id == character_id)
    )
    await session.commit()
    return res.rowcount
