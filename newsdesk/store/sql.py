from __future__ import annotations

import json
from typing import Any, Optional, Sequence

import structlog
from sqlalchemy import Integer, String, Text, UniqueConstraint, delete, func, select, text
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Mapped, mapped_column

from newsdesk.core.db import Base, create_engine_for, create_sessionmaker
from newsdesk.core.errors import NotFoundError, UpstreamError, ValidationError
from newsdesk.store.base import (
    Condition,
    DocumentStore,
    Item,
    ItemExistsError,
    Key,
    Page,
    chunked,
    matches_all,
)

logger = structlog.get_logger()


class StoredDocument(Base):
    __tablename__ = "documents"
    __table_args__ = (
        UniqueConstraint("table_name", "item_id", name="uq_documents_table_item"),
    )

    seq: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    table_name: Mapped[str] = mapped_column(String, nullable=False)
    item_id: Mapped[str] = mapped_column(String, nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)


CREATE_TABLES_SQL = [
    '''
    CREATE TABLE IF NOT EXISTS documents (
        seq INTEGER PRIMARY KEY AUTOINCREMENT,
        table_name TEXT NOT NULL,
        item_id TEXT NOT NULL,
        body TEXT NOT NULL,
        CONSTRAINT uq_documents_table_item UNIQUE (table_name, item_id)
    );
    ''',
    'CREATE INDEX IF NOT EXISTS ix_documents_table_seq ON documents(table_name, seq);',
]


def _dumps(item: Item) -> str:
    return json.dumps(item, separators=(",", ":"))


class SqlDocumentStore(DocumentStore):
    """Document tables kept as JSON bodies in a single SQLite table."""

    def __init__(self, db_path: str):
        self.engine = create_engine_for(db_path)
        self.SessionLocal = create_sessionmaker(self.engine)

    async def create_schema(self) -> None:
        async with self.engine.begin() as conn:
            for stmt in CREATE_TABLES_SQL:
                await conn.execute(text(stmt))

    async def close(self) -> None:
        await self.engine.dispose()

    async def get(self, table: str, item_id: str) -> Optional[Item]:
        try:
            async with self.SessionLocal() as session:
                stmt = select(StoredDocument.body).where(
                    StoredDocument.table_name == table, StoredDocument.item_id == item_id
                )
                body = (await session.execute(stmt)).scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("store_get_failed", table=table, item_id=item_id, error=str(e))
            raise UpstreamError("Document store failure") from e
        return json.loads(body) if body is not None else None

    async def put(self, table: str, item: Item, if_not_exists: bool = False) -> None:
        values = {"table_name": table, "item_id": item["id"], "body": _dumps(item)}
        async with self.SessionLocal() as session:
            try:
                if if_not_exists:
                    session.add(StoredDocument(**values))
                else:
                    stmt = sqlite_insert(StoredDocument).values(**values)
                    stmt = stmt.on_conflict_do_update(
                        index_elements=["table_name", "item_id"],
                        set_={"body": stmt.excluded.body},
                    )
                    await session.execute(stmt)
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                raise ItemExistsError(f"Item {item['id']} already exists") from e
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error("store_put_failed", table=table, item_id=item["id"], error=str(e))
                raise UpstreamError("Document store failure") from e

    async def delete(self, table: str, item_id: str) -> bool:
        try:
            async with self.SessionLocal() as session:
                res = await session.execute(
                    delete(StoredDocument).where(
                        StoredDocument.table_name == table, StoredDocument.item_id == item_id
                    )
                )
                await session.commit()
        except SQLAlchemyError as e:
            logger.error("store_delete_failed", table=table, item_id=item_id, error=str(e))
            raise UpstreamError("Document store failure") from e
        return res.rowcount > 0

    async def increment(self, table: str, item_id: str, field_name: str, amount: int = 1) -> int:
        path = f"$.{field_name}"
        try:
            async with self.SessionLocal() as session:
                # single UPDATE, so concurrent increments never read a stale value
                res = await session.execute(
                    text(
                        "UPDATE documents SET body = json_set(body, :path, "
                        "COALESCE(json_extract(body, :path), 0) + :amount) "
                        "WHERE table_name = :table AND item_id = :item_id"
                    ),
                    {"path": path, "amount": amount, "table": table, "item_id": item_id},
                )
                if res.rowcount == 0:
                    await session.rollback()
                    raise NotFoundError(f"Item {item_id} not found")
                value = (
                    await session.execute(
                        select(func.json_extract(StoredDocument.body, path)).where(
                            StoredDocument.table_name == table, StoredDocument.item_id == item_id
                        )
                    )
                ).scalar_one()
                await session.commit()
        except SQLAlchemyError as e:
            logger.error("store_increment_failed", table=table, item_id=item_id, error=str(e))
            raise UpstreamError("Document store failure") from e
        return int(value)

    async def _evaluate(
        self,
        table: str,
        where: list,
        conditions: Sequence[Condition],
        limit: Optional[int],
        start_key: Optional[Key],
    ) -> Page:
        stmt = select(StoredDocument.seq, StoredDocument.body).where(
            StoredDocument.table_name == table, *where
        )
        if start_key is not None:
            try:
                after = int(start_key["seq"])
            except (KeyError, TypeError, ValueError):
                raise ValidationError("Invalid cursor")
            stmt = stmt.where(StoredDocument.seq > after)
        stmt = stmt.order_by(StoredDocument.seq.asc())
        if limit is not None:
            stmt = stmt.limit(limit + 1)

        try:
            async with self.SessionLocal() as session:
                rows = (await session.execute(stmt)).all()
        except SQLAlchemyError as e:
            logger.error("store_scan_failed", table=table, error=str(e))
            raise UpstreamError("Document store failure") from e

        more = limit is not None and len(rows) > limit
        if limit is not None:
            rows = rows[:limit]
        decoded = [(seq, json.loads(body)) for seq, body in rows]
        items = [item for _, item in decoded if matches_all(item, conditions)]

        last_key = None
        if more and decoded:
            seq, item = decoded[-1]
            last_key = {"id": item["id"], "seq": seq}
        return Page(items=items, last_key=last_key)

    async def scan(
        self,
        table: str,
        conditions: Sequence[Condition] = (),
        limit: Optional[int] = None,
        start_key: Optional[Key] = None,
    ) -> Page:
        return await self._evaluate(table, [], conditions, limit, start_key)

    async def query(
        self,
        table: str,
        index: str,
        key_attr: str,
        key_value: Any,
        conditions: Sequence[Condition] = (),
        limit: Optional[int] = None,
        start_key: Optional[Key] = None,
    ) -> Page:
        where = [func.json_extract(StoredDocument.body, f"$.{key_attr}") == key_value]
        return await self._evaluate(table, where, conditions, limit, start_key)

    async def batch_put(self, table: str, items: Sequence[Item]) -> list[Item]:
        for chunk in chunked(items):
            async with self.SessionLocal() as session:
                try:
                    for item in chunk:
                        stmt = sqlite_insert(StoredDocument).values(
                            table_name=table, item_id=item["id"], body=_dumps(item)
                        )
                        stmt = stmt.on_conflict_do_update(
                            index_elements=["table_name", "item_id"],
                            set_={"body": stmt.excluded.body},
                        )
                        await session.execute(stmt)
                    await session.commit()
                except SQLAlchemyError as e:
                    await session.rollback()
                    logger.error("store_batch_put_failed", table=table, error=str(e))
                    raise UpstreamError("Document store failure") from e
        return []
