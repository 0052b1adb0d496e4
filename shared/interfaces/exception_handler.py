"""DRF exception handler mapping domain errors onto HTTP responses."""

from __future__ import annotations

import logging

from rest_framework.response import Response  # type: ignore
from rest_framework.views import exception_handler as drf_exception_handler  # type: ignore

from shared.domain.exceptions import DomainError

logger = logging.getLogger(__name__)


def domain_exception_handler(exc, context):  # type: ignore
    """Render ``DomainError`` as ``{"detail", "code"}``; defer everything else to DRF."""

    if isinstance(exc, DomainError):
        view = context.get("view")
        if exc.status_code >= 500:
            logger.error(f"{exc.__class__.__name__} in {view.__class__.__name__}: {exc.message}")
        else:
            logger.info(f"{exc.__class__.__name__} in {view.__class__.__name__}: {exc.message}")
        return Response(exc.to_dict(), status=exc.status_code)

    return drf_exception_handler(exc, context)
