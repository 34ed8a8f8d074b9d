"""
Core response envelope shared by all endpoints.
"""
from typing import TypeVar, Generic, Optional
from pydantic import BaseModel

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """
    Successful response envelope.

    Attributes:
        success: Always True for this model
        message: Optional human-readable message
        data: Payload of the response
    """
    success: bool = True
    message: Optional[str] = None
    data: Optional[T] = None


def ok(data=None, message: Optional[str] = None) -> dict:
    """
    Wrap a payload in the success envelope.

    Args:
        data: Payload to return
        message: Optional message

    Returns:
        dict: Envelope ready to be validated against ApiResponse
    """
    body = {"success": True, "data": data}
    if message is not None:
        body["message"] = message
    return body
