from __future__ import annotations

import asyncio
from decimal import Decimal
from functools import reduce
from typing import Any, Optional, Sequence

import boto3
import structlog
from boto3.dynamodb.conditions import Attr, Key as KeyCond
from botocore.exceptions import BotoCoreError, ClientError

from newsdesk.core.errors import NotFoundError, UpstreamError
from newsdesk.store.base import Condition, DocumentStore, Item, ItemExistsError, Key, Page, chunked

logger = structlog.get_logger()


def _to_dynamo(value: Any) -> Any:
    # the resource layer rejects float
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, dict):
        return {k: _to_dynamo(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_to_dynamo(v) for v in value]
    return value


def _from_dynamo(value: Any) -> Any:
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, dict):
        return {k: _from_dynamo(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_from_dynamo(v) for v in value]
    if isinstance(value, set):
        return [_from_dynamo(v) for v in value]
    return value


def _filter_expression(conditions: Sequence[Condition]):
    exprs = []
    for c in conditions:
        attr = Attr(c.attr)
        if c.op == "eq":
            exprs.append(attr.eq(_to_dynamo(c.value)))
        elif c.op == "contains":
            exprs.append(attr.contains(_to_dynamo(c.value)))
        else:
            raise ValueError(f"Unsupported condition operator: {c.op}")
    if not exprs:
        return None
    return reduce(lambda a, b: a & b, exprs)


def _error_code(e: ClientError) -> str:
    return e.response.get("Error", {}).get("Code", "")


class DynamoDocumentStore(DocumentStore):
    def __init__(self, region: str, endpoint_url: Optional[str] = None, resource=None):
        self._resource = resource or boto3.resource("dynamodb", region_name=region, endpoint_url=endpoint_url)

    def _table(self, table: str):
        return self._resource.Table(table)

    async def _call(self, op: str, table: str, fn, **kwargs):
        try:
            return await asyncio.to_thread(fn, **kwargs)
        except ClientError as e:
            code = _error_code(e)
            if code == "ConditionalCheckFailedException":
                raise
            logger.error("dynamodb_call_failed", op=op, table=table, code=code, error=str(e))
            raise UpstreamError("Document store failure") from e
        except BotoCoreError as e:
            logger.error("dynamodb_call_failed", op=op, table=table, error=str(e))
            raise UpstreamError("Document store failure") from e

    async def get(self, table: str, item_id: str) -> Optional[Item]:
        resp = await self._call("get", table, self._table(table).get_item, Key={"id": item_id})
        item = resp.get("Item")
        return _from_dynamo(item) if item else None

    async def put(self, table: str, item: Item, if_not_exists: bool = False) -> None:
        kwargs: dict[str, Any] = {"Item": _to_dynamo(item)}
        if if_not_exists:
            kwargs["ConditionExpression"] = "attribute_not_exists(id)"
        try:
            await self._call("put", table, self._table(table).put_item, **kwargs)
        except ClientError as e:
            raise ItemExistsError(f"Item {item['id']} already exists") from e

    async def delete(self, table: str, item_id: str) -> bool:
        resp = await self._call(
            "delete", table, self._table(table).delete_item, Key={"id": item_id}, ReturnValues="ALL_OLD"
        )
        return bool(resp.get("Attributes"))

    async def increment(self, table: str, item_id: str, field_name: str, amount: int = 1) -> int:
        try:
            resp = await self._call(
                "increment",
                table,
                self._table(table).update_item,
                Key={"id": item_id},
                UpdateExpression="SET #f = if_not_exists(#f, :zero) + :inc",
                ConditionExpression="attribute_exists(id)",
                ExpressionAttributeNames={"#f": field_name},
                ExpressionAttributeValues={":inc": amount, ":zero": 0},
                ReturnValues="UPDATED_NEW",
            )
        except ClientError as e:
            raise NotFoundError(f"Item {item_id} not found") from e
        return int(resp["Attributes"][field_name])

    @staticmethod
    def _page(resp: dict) -> Page:
        items = [_from_dynamo(i) for i in resp.get("Items", [])]
        last_key = resp.get("LastEvaluatedKey")
        return Page(items=items, last_key=_from_dynamo(last_key) if last_key else None)

    async def scan(
        self,
        table: str,
        conditions: Sequence[Condition] = (),
        limit: Optional[int] = None,
        start_key: Optional[Key] = None,
    ) -> Page:
        kwargs: dict[str, Any] = {}
        expr = _filter_expression(conditions)
        if expr is not None:
            kwargs["FilterExpression"] = expr
        if limit is not None:
            kwargs["Limit"] = limit
        if start_key:
            kwargs["ExclusiveStartKey"] = _to_dynamo(start_key)
        resp = await self._call("scan", table, self._table(table).scan, **kwargs)
        return self._page(resp)

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
        kwargs: dict[str, Any] = {
            "IndexName": index,
            "KeyConditionExpression": KeyCond(key_attr).eq(_to_dynamo(key_value)),
        }
        expr = _filter_expression(conditions)
        if expr is not None:
            kwargs["FilterExpression"] = expr
        if limit is not None:
            kwargs["Limit"] = limit
        if start_key:
            kwargs["ExclusiveStartKey"] = _to_dynamo(start_key)
        resp = await self._call("query", table, self._table(table).query, **kwargs)
        return self._page(resp)

    async def batch_put(self, table: str, items: Sequence[Item]) -> list[Item]:
        unprocessed: list[Item] = []
        for chunk in chunked(items):
            resp = await self._call(
                "batch_put",
                table,
                self._resource.batch_write_item,
                RequestItems={table: [{"PutRequest": {"Item": _to_dynamo(i)}} for i in chunk]},
            )
            for req in resp.get("UnprocessedItems", {}).get(table, []):
                unprocessed.append(_from_dynamo(req["PutRequest"]["Item"]))
        return unprocessed
