"""
DRF exception handler

Turns ``DomainError`` subclasses raised by services into JSON responses
``{"detail": ..., "code": ...}`` with the error's HTTP status. Everything
else falls through to DRF's default handler.
"""

import logging

from rest_framework.response import Response
from rest_framework.views import exception_handler

from shared.domain.errors import DomainError

logger = logging.getLogger(__name__)


def domain_exception_handler(exc, context):
    if isinstance(exc, DomainError):
        view = context.get("view")
        logger.info(
            "Domain error %s in %s: %s",
            exc.code,
            view.__class__.__name__ if view else "unknown view",
            exc.message,
        )
        return Response(exc.to_dict(), status=exc.status_code)

    return exception_handler(exc, context)
