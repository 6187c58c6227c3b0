"""Workflow error taxonomy and the handlers that render it with request_id."""

from asgi_correlation_id import correlation_id
from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.bikeshop.core.logging import get_logger

logger = get_logger(__name__)


class WorkflowError(Exception):
    """Base class for errors raised by the workflow step engine."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class UnknownWorkflowType(WorkflowError):
    """Requested workflow type is not registered. Always a caller bug."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, workflow_type: object):
        super().__init__(f"Unsupported workflow type: {workflow_type!r}")
        self.workflow_type = workflow_type


class WorkflowDefinitionError(WorkflowError):
    """A registered workflow definition is malformed (startup self-check)."""


class TransactionNotFound(WorkflowError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, transaction_id: object):
        super().__init__(f"Transaction {transaction_id} not found")
        self.transaction_id = transaction_id


class StepNotFound(WorkflowError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, step_id: object):
        super().__init__(f"Workflow step {step_id} not found")
        self.step_id = step_id


class WorkflowAlreadyInitialized(WorkflowError):
    """Steps already exist for this transaction and workflow type.

    Callers should read progress instead of retrying the initialization.
    """

    status_code = status.HTTP_409_CONFLICT

    def __init__(self, transaction_id: object, workflow_type: str):
        super().__init__(
            f"Workflow {workflow_type} already exists for transaction {transaction_id}"
        )
        self.transaction_id = transaction_id
        self.workflow_type = workflow_type


class WorkflowNotInitialized(WorkflowError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, transaction_id: object, workflow_type: str):
        super().__init__(
            f"No {workflow_type} workflow steps found for transaction {transaction_id}"
        )
        self.transaction_id = transaction_id
        self.workflow_type = workflow_type


class PersistenceError(WorkflowError):
    """The step store failed to read or write."""


class DuplicateStepError(PersistenceError):
    """A write hit the (transaction_id, workflow_type, step_order) unique constraint."""


class NotificationDispatchError(WorkflowError):
    """Sending a notification failed. Logged only, never surfaced to step callers."""

    status_code = status.HTTP_502_BAD_GATEWAY


def _error_response(status_code: int, detail: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "detail": detail,
            "request_id": correlation_id.get(),
        },
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Configure exception handlers that include request_id in responses."""

    @app.exception_handler(WorkflowError)
    async def workflow_error_handler(request: Request, exc: WorkflowError) -> JSONResponse:
        if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
            logger.error(
                "Workflow operation failed",
                error=exc.message,
                error_type=type(exc).__name__,
                path=request.url.path,
            )
            detail = (
                "Internal server error"
                if exc.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
                else exc.message
            )
            return _error_response(exc.status_code, detail)
        return _error_response(exc.status_code, exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def starlette_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        return _error_response(exc.status_code, exc.detail)

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        return _error_response(exc.status_code, exc.detail)

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(
            "Unhandled exception",
            exc_info=exc,
            request_id=correlation_id.get(),
            path=request.url.path,
        )
        return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")
