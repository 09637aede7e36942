import logging

from rest_framework import status
from rest_framework.exceptions import APIException, ValidationError
from rest_framework.views import exception_handler

from .responses import error_response

logger = logging.getLogger("emenu")


class ConflictError(APIException):
    """A uniqueness constraint would be violated."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Resource already exists"
    default_code = "conflict"


def first_error_message(detail):
    """Flatten DRF error detail into one human readable line."""
    if isinstance(detail, dict):
        for field, value in detail.items():
            message = first_error_message(value)
            if not message:
                continue
            if field in ("non_field_errors", "detail"):
                return message
            return f"{field}: {message}"
        return ""

    if isinstance(detail, (list, tuple)):
        for value in detail:
            message = first_error_message(value)
            if message:
                return message
        return ""

    return str(detail)


def envelope_exception_handler(exc, context):
    response = exception_handler(exc, context)

    if response is None:
        view = context.get("view")
        logger.error(
            "Unhandled error in %s",
            view.__class__.__name__ if view else "request",
            exc_info=(type(exc), exc, exc.__traceback__),
        )
        return error_response("Internal server error", status.HTTP_500_INTERNAL_SERVER_ERROR)

    extra = None
    if isinstance(exc, ValidationError):
        extra = {"errors": response.data}

    envelope = error_response(
        first_error_message(getattr(exc, "detail", response.data)),
        response.status_code,
        extra,
    )
    for header in ("WWW-Authenticate", "Retry-After"):
        if header in response:
            envelope[header] = response[header]
    return envelope
