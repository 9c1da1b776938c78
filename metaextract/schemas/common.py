"""
Common schemas used across the API
"""
from typing import Optional, Generic, TypeVar, List, Any
from pydantic import BaseModel

T = TypeVar("T")


class ResponseBase(BaseModel):
    """Base response model"""
    success: bool = True
    message: Optional[str] = None


class DataResponse(ResponseBase, Generic[T]):
    """Response with data"""
    data: Optional[T] = None
    meta: Optional[Any] = None  # Additional metadata


class ListResponse(ResponseBase, Generic[T]):
    """Response with list data"""
    data: List[T] = []
    total: int = 0
