"""Shared input validation: comment text and pagination parameters"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 10
MAX_PAGE = 10000
MAX_PAGE_SIZE = 100


class CommentSchema(BaseModel):
    """
    Validated comment input

    Content is free text, stored exactly as written after trimming. It is
    never interpreted as markup, so clients must escape it when rendering.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    content: str = Field(..., min_length=1, max_length=500)


def parse_int(value: Optional[str], default: int) -> int:
    """Lenient query integer: anything unparseable (or zero) means the default"""
    try:
        parsed = int(str(value).strip())
    except (TypeError, ValueError):
        return default
    return parsed or default


# Utility validation functions
def validate_pagination(page: Optional[str], limit: Optional[str]) -> tuple[int, int]:
    """Parse raw page/limit query values and clamp them to sane bounds"""
    page = max(1, min(parse_int(page, DEFAULT_PAGE), MAX_PAGE))
    limit = max(1, min(parse_int(limit, DEFAULT_PAGE_SIZE), MAX_PAGE_SIZE))
    return page, limit
