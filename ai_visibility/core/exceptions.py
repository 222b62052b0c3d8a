"""Typed application errors.

Every expected failure mode surfaces as an ``AppError`` with an HTTP status
and a stable machine-readable ``code``; routes never leak raw exceptions.
"""

from fastapi import HTTPException


class AppError(HTTPException):
    status_code: int = 500
    code: str = "INTERNAL_ERROR"

    def __init__(self, detail: str = "Internal error"):
        super().__init__(status_code=self.status_code, detail=detail)


class BadRequestError(AppError):
    status_code = 400
    code = "BAD_REQUEST"


class UnauthorizedError(AppError):
    status_code = 401
    code = "UNAUTHORIZED"

    def __init__(self, detail: str = "Not authenticated"):
        super().__init__(detail)
        self.headers = {"WWW-Authenticate": "Bearer"}


class ForbiddenError(AppError):
    status_code = 403
    code = "FORBIDDEN"


class NotFoundError(AppError):
    status_code = 404
    code = "NOT_FOUND"


class ConflictError(AppError):
    status_code = 409
    code = "CONFLICT"


class ValidationError(AppError):
    status_code = 422
    code = "VALIDATION_ERROR"


class PlanLimitError(AppError):
    status_code = 429
    code = "PLAN_LIMIT_REACHED"
