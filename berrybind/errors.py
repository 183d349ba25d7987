"""Exceptions raised by berrybind.

Three failure classes exist and they travel differently:

- :class:`SchemaDefinitionError` is raised while the Strawberry schema is being
  built and stops it from ever serving requests.
- :class:`BindingValidationError` is the per-field validation failure for
  required bindings that matched nothing. It carries the failing attribute
  paths under ``extensions["validation"]``.
- :class:`AmbiguousBindingError` signals non-unique data for a lookup column.
  It is never turned into a validation message.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from graphql import GraphQLError
from strawberry.exceptions import StrawberryException


class BindError(Exception):
    """Base class for runtime binding errors."""


class SchemaDefinitionError(StrawberryException):
    """Invalid ``@bind`` usage detected at schema build time.

    Subclassing ``StrawberryException`` makes ``strawberry.Schema(...)`` re-raise
    it as-is instead of the ``TypeError`` graphql-core wraps thunk errors in.
    """

    NOT_A_CLASS = 'not_a_class'
    NOT_MODEL_OR_CALLABLE = 'not_model_or_callable'
    UNKNOWN_COLUMN = 'unknown_column'
    UNKNOWN_RELATION = 'unknown_relation'

    def __init__(self, message: str, *, reason: str, class_name: str):
        self.reason = reason
        self.class_name = class_name
        super().__init__(message)


class AmbiguousBindingError(BindError):
    """More than one record matched a value that must identify a single record."""

    def __init__(self, model: Any, column: str, value: Any, count: int):
        self.model = model
        self.column = column
        self.value = value
        self.count = count
        name = getattr(model, '__name__', model)
        super().__init__(
            f"Expected a single {name} for {column}={value!r}, found {count}."
        )


class BindingValidationError(GraphQLError):
    """One or more required bindings could not be resolved."""

    def __init__(self, message: str, failures: Dict[str, List[str]], *, field: Optional[str] = None):
        self.failures = failures
        self.field = field
        super().__init__(message, extensions={'validation': failures})
