from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse


class GamificationError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class NotFound(GamificationError):
    status_code = status.HTTP_404_NOT_FOUND


class Conflict(GamificationError):
    status_code = status.HTTP_409_CONFLICT


class ValidationError(GamificationError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class ConditionEvaluationWarning(GamificationError):
    """Raised while parsing a badge condition the evaluator cannot interpret.

    Never leaves the evaluator: it is logged and the badge is treated as
    ineligible.
    """


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(GamificationError)
    async def gamification_error_handler(_: Request, exc: GamificationError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})
