"""
courseware.schemas — Input validation
======================================

Pydantic models for the attribute maps accepted by the services, plus
:func:`changeset`, which turns a pydantic :class:`ValidationError` into the
field-keyed message map callers render (``{"title": ["can't be blank"]}``).
"""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator
from pydantic_core import PydanticCustomError

from courseware.constants import MSG_BLANK, MSG_INVALID, MSG_NOT_POSITIVE
from courseware.services.results import FieldErrors
from courseware.services.storage_service import FileUpload

M = TypeVar("M", bound=BaseModel)

# Error types whose rendered message is already user-facing
_CUSTOM_TYPES = {"blank", "greater_than"}


def _require_present(value: Any) -> Any:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise PydanticCustomError("blank", MSG_BLANK)
    return value


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------
class AnnouncementParams(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: str
    content: str = ""
    pinned: bool = False

    @field_validator("title", mode="before")
    @classmethod
    def _title_present(cls, value: Any) -> Any:
        return _require_present(value)

    @field_validator("content", mode="before")
    @classmethod
    def _content_default(cls, value: Any) -> Any:
        return "" if value is None else value


class PointParams(BaseModel):
    model_config = ConfigDict(extra="ignore")

    reason: str = ""
    amount: int

    @field_validator("amount", mode="before")
    @classmethod
    def _amount_present(cls, value: Any) -> Any:
        return _require_present(value)

    @field_validator("amount")
    @classmethod
    def _amount_positive(cls, value: int) -> int:
        if value <= 0:
            raise PydanticCustomError("greater_than", MSG_NOT_POSITIVE)
        return value


class FolderParams(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str
    description: str | None = None

    @field_validator("name", mode="before")
    @classmethod
    def _name_present(cls, value: Any) -> Any:
        return _require_present(value)


class FileParams(FolderParams):
    model_config = ConfigDict(extra="ignore", arbitrary_types_allowed=True)

    file: FileUpload

    @field_validator("file", mode="before")
    @classmethod
    def _file_present(cls, value: Any) -> Any:
        return _require_present(value)


# ---------------------------------------------------------------------------
# Changeset helper
# ---------------------------------------------------------------------------
def _message(error: dict) -> str:
    if error["type"] == "missing":
        return MSG_BLANK
    if error["type"] in _CUSTOM_TYPES:
        return error["msg"]
    return MSG_INVALID


def changeset(model: type[M], params: dict[str, Any]) -> tuple[M | None, FieldErrors]:
    """Validate *params* against *model*.

    Returns ``(instance, {})`` on success or ``(None, errors)`` where
    *errors* maps each offending field to its list of messages.
    """
    try:
        return model.model_validate(dict(params)), {}
    except ValidationError as exc:
        errors: FieldErrors = {}
        for error in exc.errors():
            key = str(error["loc"][0]) if error["loc"] else "base"
            errors.setdefault(key, []).append(_message(error))
        return None, errors
