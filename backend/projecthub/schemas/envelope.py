# Standard response envelope: {statusCode, data, message, success}
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, computed_field

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """
    Success envelope returned by every endpoint.

    Example:
        ApiResponse[ProjectRead](status_code=201, data=project, message="Project created successfully")
    """

    status_code: int = Field(..., alias="statusCode")
    data: Optional[T] = None
    message: str = "Success"

    model_config = ConfigDict(populate_by_name=True)

    @computed_field
    @property
    def success(self) -> bool:
        return self.status_code < 400


class ApiErrorResponse(BaseModel):
    success: bool = False
    message: str
    errors: list = Field(default_factory=list)
    stack: Optional[str] = None


def api_response(status_code: int, data=None, message: str = "Success") -> ApiResponse:
    return ApiResponse(status_code=status_code, data=data, message=message)


__all__ = ["ApiResponse", "ApiErrorResponse", "api_response"]
