"""
Map workflow exceptions to HTTP responses
"""
from fastapi import HTTPException

from core.exceptions import WorkflowException, ValidationError


def http_error(exc: WorkflowException) -> HTTPException:
    """
    Convert a domain exception into an HTTPException

    ValidationError keeps its full error list:
        detail = {"message": ..., "errors": [...]}
    everything else:
        detail = "<message>"
    """
    if isinstance(exc, ValidationError):
        detail = {"message": exc.message, "errors": exc.errors}
    else:
        detail = exc.message
    return HTTPException(status_code=exc.status_code, detail=detail)
