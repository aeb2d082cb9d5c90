"""Exception hierarchy for hierarchy queries.

Build-time errors are raised synchronously while a query is constructed.
Execution-time errors from the database driver are never wrapped here;
they surface as ``sqlalchemy.exc`` exceptions.
"""

from __future__ import annotations


class HierarchyError(Exception):
    """Base class for all arborql errors."""


class ConfigurationError(HierarchyError, ValueError):
    """A hierarchy configuration does not fit the table it is bound to."""


class MissingAttributeError(HierarchyError, KeyError):
    """A node lacks an attribute needed to read its position in the tree."""

    def __init__(self, attribute: str) -> None:
        super().__init__(attribute)
        self.attribute = attribute

    def __str__(self) -> str:
        return f"Node is missing the {self.attribute!r} attribute"


class UnsupportedDialectFeature(HierarchyError, NotImplementedError):
    """The active SQL dialect cannot represent the requested construct."""

    def __init__(self, dialect: str, feature: str) -> None:
        super().__init__(f"Dialect {dialect!r} does not support {feature}")
        self.dialect = dialect
        self.feature = feature


class InvalidOperatorError(HierarchyError, ValueError):
    """Unknown comparison operator passed to a depth filter."""


class UnknownScopeError(HierarchyError, LookupError):
    """No scope is registered under the requested name."""
