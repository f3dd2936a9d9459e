"""Application-level exceptions and FastAPI exception handlers."""


from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

GENERIC_ERROR_MESSAGE = "An unexpected error occurred."

class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, status_code: int = 500, code: str = "INTERNAL_ERROR"):
        self.message = message
        self.status_code = status_code
        self.code = code
        super().__init__(message)

class MethodNotAllowedError(AppException):
    def __init__(self, method: str, allowed: list[str]):
        self.allowed = allowed
        super().__init__(
            f"Method {method} Not Allowed", status_code=405, code="METHOD_NOT_ALLOWED",
        )

class InvalidRequestError(AppException):
    def __init__(self, message: str):
        super().__init__(message, status_code=400, code="INVALID_REQUEST")

class CollaboratorError(AppException):
    """Raised when the AI service call fails (upstream service error)."""

    def __init__(self, message: str):
        super().__init__(message, status_code=500, code="AI_SERVICE_ERROR")

def describe_failure(exc: BaseException) -> str:
    """Return the client-facing description of *exc*, or the generic fallback."""
    if isinstance(exc, AppException):
        message = exc.message
    else:
        message = str(exc)
    return message or GENERIC_ERROR_MESSAGE

# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------

def _error_body(message: str) -> dict:
    return {"message": message}

def register_exception_handlers(app: FastAPI) -> None:
    """Attach all custom exception handlers to the FastAPI app."""

    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.message),
        )

    @app.exception_handler(405)
    async def method_not_allowed_handler(request: Request, exc: Exception) -> JSONResponse:
        # Verbs no route registers; keep the router's Allow header.
        headers = getattr(exc, "headers", None) or {}
        allowed = [m.strip() for m in headers.get("Allow", "").split(",") if m.strip()]
        error = MethodNotAllowedError(request.method, allowed)
        return JSONResponse(
            status_code=error.status_code,
            content=_error_body(error.message),
            headers={"Allow": ", ".join(error.allowed)} if error.allowed else None,
        )

    @app.exception_handler(404)
    async def not_found_handler(request: Request, exc: Exception) -> JSONResponse:
        return JSONResponse(
            status_code=404,
            content=_error_body("Resource not found"),
        )

    @app.exception_handler(500)
    async def internal_error_handler(request: Request, exc: Exception) -> JSONResponse:
        return JSONResponse(
            status_code=500,
            content=_error_body(GENERIC_ERROR_MESSAGE),
        )
