# core/responses.py

from typing import Any, Optional

from fastapi.responses import JSONResponse
from pydantic import BaseModel

from core.errors import AccessLayerError, ErrorCode


class ApiError(BaseModel):
    message: str
    details: Optional[str] = None
    hint: Optional[str] = None
    code: ErrorCode = ErrorCode.query_error

    @classmethod
    def from_exception(cls, exc: AccessLayerError) -> "ApiError":
        return cls(
            message=exc.message,
            details=exc.details,
            hint=exc.hint,
            code=exc.code,
        )


class ApiResponse(BaseModel):
    """
    Uniform envelope returned by every guarded operation:
        { data: T | null, error: ApiError | null, count?: int }
    """

    data: Any = None
    error: Optional[ApiError] = None
    count: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, data: Any = None, count: Optional[int] = None) -> "ApiResponse":
        return cls(data=data, count=count)

    @classmethod
    def empty(cls) -> "ApiResponse":
        return cls(data=[], count=0)

    @classmethod
    def failure(cls, exc: AccessLayerError) -> "ApiResponse":
        return cls(data=None, error=ApiError.from_exception(exc))


# -----------------------------------------------------
# Envelope → HTTP
# -----------------------------------------------------
HTTP_STATUS_BY_CODE = {
    ErrorCode.authentication_required: 401,
    ErrorCode.session_expired: 401,
    ErrorCode.access_denied: 403,
    ErrorCode.not_found: 404,
    ErrorCode.network_error: 503,
    ErrorCode.query_error: 500,
}


def to_http(response: ApiResponse, success_status: int = 200) -> JSONResponse:
    status_code = success_status
    if response.error is not None:
        status_code = HTTP_STATUS_BY_CODE.get(response.error.code, 500)

    content = response.model_dump(mode="json")
    if content.get("count") is None:
        content.pop("count", None)

    return JSONResponse(status_code=status_code, content=content)
