# warehouse_manager/shared/schemas/common.py
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from datetime import datetime

# Largest value the INTEGER columns (ids, quantities, capacities) accept
MAX_INTEGER = 2**31 - 1


class CamelModel(BaseModel):
    """Base for API payloads: snake_case in Python, camelCase on the wire"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True
    )


class BaseResponse(CamelModel):
    success: bool
    message: str = ""
    timestamp: datetime = Field(default_factory=datetime.now)


class ErrorResponse(BaseModel):
    error: str
