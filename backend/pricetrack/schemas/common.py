"""Shared schema pieces: response envelope, camelCase config, money type"""
from decimal import Decimal
from typing import Annotated, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, PlainSerializer
from pydantic.alias_generators import to_camel

T = TypeVar("T")

# Money stays Decimal in Python and goes out as a JSON number
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class Envelope(CamelModel, Generic[T]):
    """Every response body: {ok, data?, message?}"""
    ok: bool = True
    data: Optional[T] = None
    message: Optional[str] = None


class FeedMeta(CamelModel):
    limit: int
    count: int


class FeedEnvelope(Envelope[T], Generic[T]):
    meta: Optional[FeedMeta] = None
