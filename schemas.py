"""
Request payload schemas

One pydantic model per write operation. Unknown fields are rejected and
strings are stripped before any other check runs.
"""

import datetime as dt
from decimal import Decimal, ROUND_HALF_UP
from typing import Annotated, List, Optional

from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict, Field, StrictInt
from pydantic import ValidationError as PydanticValidationError

from calendar_utils import parse_date
from errors import InvalidDateFormat, ValidationError

MAX_AMOUNT = Decimal('99999999.99')
HEX_COLOR = r'^#[0-9A-Fa-f]{6}$'
DEFAULT_COLOR = '#6B7280'


class Schema(BaseModel):
    model_config = ConfigDict(extra='forbid', str_strip_whitespace=True)


def _round_amount(value):
    if value is None:
        return None
    if not value.is_finite():
        raise ValueError('Amount must be a number')
    value = value.quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)
    if value <= 0 or value > MAX_AMOUNT:
        raise ValueError('Amount must be between 0.01 and 99,999,999.99')
    return value


def _parse_expense_date(value):
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError('Date must be a string in YYYY-MM-DD format')
    try:
        return parse_date(value)
    except InvalidDateFormat as exc:
        raise ValueError(exc.message) from None


def _blank_to_none(value):
    return value or None


RecordId = Annotated[StrictInt, Field(gt=0)]
Amount = Annotated[Decimal, AfterValidator(_round_amount)]
ExpenseDate = Annotated[Optional[dt.date], BeforeValidator(_parse_expense_date)]
Description = Annotated[Optional[str], Field(max_length=500), AfterValidator(_blank_to_none)]


# ---------- Categories ----------

class CategoryCreate(Schema):
    name: str = Field(..., min_length=1, max_length=100)
    color: str = Field(DEFAULT_COLOR, pattern=HEX_COLOR)


class CategoryUpdate(Schema):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    color: Optional[str] = Field(None, pattern=HEX_COLOR)


# ---------- Expense names ----------

class ExpenseNameCreate(Schema):
    name: str = Field(..., min_length=1, max_length=200)
    suggested_category_id: Optional[RecordId] = None


class ExpenseNameUpdate(Schema):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    suggested_category_id: Optional[RecordId] = None


# ---------- Expenses ----------

class ExpenseCreate(Schema):
    amount: Amount
    date: ExpenseDate = None
    category_id: RecordId
    expense_name_id: RecordId
    description: Description = None


class ExpenseUpdate(Schema):
    amount: Optional[Amount] = None
    date: ExpenseDate = None
    category_id: Optional[RecordId] = None
    expense_name_id: Optional[RecordId] = None
    description: Description = None


class BulkDelete(Schema):
    ids: List[RecordId] = Field(..., min_length=1, max_length=100)


def load_payload(schema, payload):
    """Validate a JSON body against `schema`, raising the API's ValidationError."""
    if not isinstance(payload, dict):
        raise ValidationError('Request body must be a JSON object')
    try:
        return schema.model_validate(payload)
    except PydanticValidationError as exc:
        details = [
            {
                'field': '.'.join(str(part) for part in error['loc']),
                'message': error['msg'],
            }
            for error in exc.errors()
        ]
        raise ValidationError(errors=details) from None


def changed_fields(model, nullable=()):
    """Fields the client sent, dropping nulls for columns that cannot be null."""
    return {
        key: value
        for key, value in model.model_dump(exclude_unset=True).items()
        if value is not None or key in nullable
    }
