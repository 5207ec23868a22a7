from __future__ import annotations

import datetime as dt
import uuid
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def utc_now() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def to_iso(value: dt.datetime) -> str:
    return value.astimezone(dt.timezone.utc).isoformat(timespec="microseconds").replace("+00:00", "Z")


def utc_now_iso() -> str:
    return to_iso(utc_now())


def parse_iso(value: str) -> dt.datetime:
    parsed = dt.datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=dt.timezone.utc)
    return parsed


def new_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4()}"


class DocumentModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    id_prefix: ClassVar[str] = "x"

    @classmethod
    def create(cls, **data: Any):
        now = utc_now_iso()
        data.setdefault("id", new_id(cls.id_prefix))
        data.setdefault("created_at", now)
        data.setdefault("updated_at", now)
        return cls(**data)

    def to_api(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")

    def to_record(self) -> dict[str, Any]:
        # the store cannot index null attributes, so absent values are omitted
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)
