from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """
    Base for every request/response body
    JSON uses camelCase, Python code and Mongo documents use snake_case
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Pagination(ApiModel):
    current_page: int
    total_pages: int
    has_next: bool
    has_prev: bool


class MessageResponse(ApiModel):
    message: str


class RatingSummary(ApiModel):
    average: float = 0.0
    count: int = 0


def non_blank(value: Optional[str]) -> Optional[str]:
    """Shared validator body: strip and reject whitespace-only strings"""
    if value is None:
        return value
    value = value.strip()
    if not value:
        raise ValueError("must not be blank")
    return value
