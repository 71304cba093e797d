from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_core import PydanticCustomError

from utils.datetime_utils import parse_entry_date


def require_text(value: str) -> str:
    text = " ".join((value or "").split())
    if not text:
        raise PydanticCustomError("blank", "Field must not be blank")
    return text


class EntryCreate(BaseModel):
    """Fields shared by every logged entry. Unknown keys are rejected."""

    model_config = ConfigDict(extra="forbid")

    date: str

    @field_validator("date")
    @classmethod
    def _valid_date(cls, value: str) -> str:
        if not (value or "").strip():
            raise PydanticCustomError("blank", "Field must not be blank")
        try:
            return parse_entry_date(value).isoformat()
        except ValueError:
            raise PydanticCustomError("date_format", "date must be formatted YYYY-MM-DD")


class EntryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int = Field(serialization_alias="userId")
    date: str
    created_at: Optional[datetime] = Field(default=None, serialization_alias="createdAt")


class DeleteResponse(BaseModel):
    success: bool = True
