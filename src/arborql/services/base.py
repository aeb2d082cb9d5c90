"""BaseService — shared plumbing for arborql services.

Services receive a :class:`TreeRepository` at construction time and turn
its exceptions into failed :class:`ServiceResult` objects, so the CLI never
sees a traceback for a bad id, a bad config or a database error.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy.exc import SQLAlchemyError

from arborql.domain.errors import (
    ConfigurationError,
    HierarchyError,
    InvalidOperatorError,
    MissingAttributeError,
    UnknownScopeError,
    UnsupportedDialectFeature,
)
from arborql.services.result import ServiceError, ServiceResult

if TYPE_CHECKING:
    from arborql.infrastructure.repositories.tree import TreeRepository

logger = logging.getLogger(__name__)

_ERROR_CODES: tuple[tuple[type[Exception], str], ...] = (
    (ConfigurationError, "CONFIGURATION"),
    (UnsupportedDialectFeature, "UNSUPPORTED_DIALECT"),
    (InvalidOperatorError, "INVALID_OPERATOR"),
    (UnknownScopeError, "UNKNOWN_SCOPE"),
    (MissingAttributeError, "MISSING_ATTRIBUTE"),
    (HierarchyError, "HIERARCHY_ERROR"),
    (SQLAlchemyError, "DATABASE_ERROR"),
)


class BaseService:
    """Base for service-layer classes."""

    def __init__(self, repository: TreeRepository) -> None:
        self._repo = repository

    @staticmethod
    def _failure(op: str, code: str, message: str, **detail: object) -> ServiceResult:
        return ServiceResult(
            ok=False,
            op=op,
            error=ServiceError(code=code, message=message, detail=dict(detail)),
        )

    @classmethod
    def _from_exception(cls, op: str, exc: Exception) -> ServiceResult:
        """Map a hierarchy or database exception onto a failed result."""
        for exc_type, code in _ERROR_CODES:
            if isinstance(exc, exc_type):
                logger.debug("%s failed with %s", op, code, exc_info=exc)
                return cls._failure(op, code, str(exc))
        raise exc

    def _not_found(self, op: str, key: object) -> ServiceResult:
        return self._failure(
            op,
            "NOT_FOUND",
            f"No node with {self._repo.hierarchy.local_key}={key!r} "
            f"in {self._repo.hierarchy.name!r}",
            key=key,
        )
