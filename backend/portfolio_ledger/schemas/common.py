# backend/portfolio_ledger/schemas/common.py
"""
Shared schema building blocks: JSON-number decimals, YYYY-MM-DD dates and
response envelopes.

Values stay ``Decimal`` in Python and are emitted as JSON numbers. They are
already rounded to their contract precision by the services.

Envelopes:
    SuccessResponse[T]  {"success": true, "data": ...}        analysis/trading routes
    CodeResponse[T]     {"code": 200, "message": ..., "data": ...}   CRUD routes
"""

import datetime as dt
from decimal import Decimal
from typing import Annotated, Generic, TypeVar

from pydantic import BaseModel, Field, PlainSerializer

from portfolio_ledger.utils.date_utils import format_date

T = TypeVar("T")

JsonDecimal = Annotated[
    Decimal,
    PlainSerializer(float, return_type=float, when_used="json"),
]

JsonDate = Annotated[
    dt.date,
    PlainSerializer(format_date, return_type=str, when_used="json"),
]


class SuccessResponse(BaseModel, Generic[T]):
    success: bool = Field(default=True, description="Always true for 2xx responses")
    data: T


class CodeResponse(BaseModel, Generic[T]):
    code: int = Field(..., description="Mirrors the HTTP status code")
    message: str = Field(..., description="Human-readable outcome")
    data: T | None = None
