"""
Common Schemas
Shared Pydantic models for API responses
"""
from pydantic import BaseModel, ConfigDict, Field


class ErrorResponse(BaseModel):
    """
    Standard error response model

    ``error`` is the stable failure kind; ``message`` is meant for people.
    """
    error: str = Field(..., description="Stable error kind, e.g. INSUFFICIENT_STOCK")
    message: str = Field(..., description="Human-readable error message")
    retryable: bool = Field(False, description="Whether the same request may be retried")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "error": "INSUFFICIENT_STOCK",
                "message": "Insufficient stock for product 7: available 15, requested 20",
                "retryable": False
            }
        }
    )


def normalize_page(page: int, page_size: int, default_size: int, max_size: int) -> tuple:
    """
    Clamp paging parameters

    Page numbers below 1 become 1; a page size outside 1..max_size falls
    back to the default size.
    """
    if page < 1:
        page = 1
    if page_size < 1 or page_size > max_size:
        page_size = default_size
    return page, page_size
