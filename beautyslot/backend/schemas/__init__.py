# Pydantic schemas package
from beautyslot.backend.schemas.base import (
    ApiResponse,
    ErrorDetail,
    ErrorResponse,
    ListPage,
    MessageResponse,
    ResponseMetadata,
)

__all__ = [
    "ApiResponse",
    "ErrorDetail",
    "ErrorResponse",
    "ListPage",
    "MessageResponse",
    "ResponseMetadata",
]
