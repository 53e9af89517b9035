from datetime import datetime
from math import ceil
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

from contentdesk.db.base import as_utc


class ORMModel(BaseModel):
    """camelCase on the wire, snake_case in Python; either spelling is accepted on input.

    Datetimes are normalised to UTC on the way in, so an offset such as
    ``-05:00`` never reaches a column as local wall-clock time.
    """

    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    @field_validator("*", mode="after")
    @classmethod
    def normalise_datetimes(cls, value: Any) -> Any:
        if isinstance(value, datetime):
            return as_utc(value)
        return value


class Pagination(ORMModel):
    page: int
    limit: int
    total: int
    pages: int

    @classmethod
    def build(cls, *, page: int, limit: int, total: int) -> "Pagination":
        return cls(page=page, limit=limit, total=total, pages=ceil(total / limit) if limit else 0)


class ClientRef(ORMModel):
    id: int
    name: str
    company: str = ""
    email: str


class ProjectRef(ORMModel):
    id: int
    title: str
    client: ClientRef | None = None
