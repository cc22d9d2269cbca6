from typing import Annotated, Any

from bson import ObjectId
from pydantic import AliasChoices, BeforeValidator, Field


def _stringify_id(value: Any) -> Any:
    if isinstance(value, ObjectId):
        return str(value)
    return value


# Mongo ObjectIds travel through the API as plain hex strings
PyObjectId = Annotated[str, BeforeValidator(_stringify_id)]


def id_field():
    """Reads Mongo's '_id' or a plain 'id', always serializes as 'id'."""
    return Field(default=None, validation_alias=AliasChoices("_id", "id"))
