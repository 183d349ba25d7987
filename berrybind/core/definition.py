from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Tuple, Type

from sqlalchemy import inspect as sa_inspect

from ..errors import SchemaDefinitionError

_logger = logging.getLogger("berrybind")

# Attribute used to cache the validated definition on a directive instance
_CACHE_ATTR = '__berrybind_definition__'


class BindKind(Enum):
    MODEL = 'model'
    CALLABLE = 'callable'


@dataclass(frozen=True)
class BindDefinition:
    """Validated configuration of one ``@bind`` directive.

    Attributes:
        class_name: The literal ``class`` string from the directive.
        target: The class ``class_name`` resolved to.
        kind: ``BindKind.MODEL`` for SQLAlchemy models, ``BindKind.CALLABLE`` for handlers.
        column: Lookup column (model bindings only).
        with_: Relations to eager-load, in declaration order (model bindings only).
        required: Whether an unresolved binding fails validation.
    """

    class_name: str
    target: Type[Any]
    kind: BindKind
    column: str = 'id'
    with_: Tuple[str, ...] = ()
    required: bool = True

    @property
    def is_model_binding(self) -> bool:
        return self.kind is BindKind.MODEL


def is_model_class(obj: Any) -> bool:
    """True when ``obj`` is a mapped SQLAlchemy ORM class."""
    return isinstance(obj, type) and sa_inspect(obj, raiseerr=False) is not None


def is_handler_class(obj: Any) -> bool:
    """True when instances of ``obj`` are callable (the class defines ``__call__``)."""
    return isinstance(obj, type) and '__call__' in dir(obj)


def _ordered_unique(values: Iterable[str]) -> Tuple[str, ...]:
    return tuple(dict.fromkeys(str(v) for v in values))


def build_definition(directive: Any, schema: Any, *, element: str, parent: str) -> BindDefinition:
    """Validate ``directive`` against ``schema``'s registry and freeze it.

    Args:
        directive: A ``Bind`` directive instance.
        schema: The ``BindSchema`` whose registry resolves the class identity.
        element: Human label of the annotated element, e.g. "argument `user`".
        parent: Human label of its parent, e.g. "field `user`" or "input `UserInput`".

    Raises:
        SchemaDefinitionError: the class does not load, is of the wrong kind, or
            (for models) the column or an eager-load relation does not exist.
    """
    class_name = getattr(directive, 'class_', None) or ''
    prefix = f"@bind argument `class` defined on {element} of {parent}"
    target = schema.lookup(class_name)
    if not isinstance(target, type):
        raise SchemaDefinitionError(
            f"{prefix} must be a model or callable class, `{class_name}` is not a class.",
            reason=SchemaDefinitionError.NOT_A_CLASS,
            class_name=class_name,
        )
    if is_model_class(target):
        kind = BindKind.MODEL
    elif is_handler_class(target):
        kind = BindKind.CALLABLE
    else:
        raise SchemaDefinitionError(
            f"{prefix} must be a model or callable class, `{class_name}` is neither a SQLAlchemy model "
            f"nor a callable class.",
            reason=SchemaDefinitionError.NOT_MODEL_OR_CALLABLE,
            class_name=class_name,
        )

    definition = BindDefinition(
        class_name=class_name,
        target=target,
        kind=kind,
        column=getattr(directive, 'column', None) or 'id',
        with_=_ordered_unique(getattr(directive, 'with_', None) or ()),
        required=bool(getattr(directive, 'required', True)),
    )
    if definition.is_model_binding:
        _check_model_options(definition, element=element, parent=parent)
    _logger.info("berrybind: validated @bind(%s) on %s of %s as %s binding", class_name, element, parent, kind.value)
    return definition


def _check_model_options(definition: BindDefinition, *, element: str, parent: str) -> None:
    from ..sql.model_binding import eager_options, resolve_column  # local import to avoid cycles
    try:
        resolve_column(definition.target, definition.column)
    except ValueError as e:
        raise SchemaDefinitionError(
            f"@bind argument `column` defined on {element} of {parent} is invalid for "
            f"`{definition.class_name}`: {e}",
            reason=SchemaDefinitionError.UNKNOWN_COLUMN,
            class_name=definition.class_name,
        ) from e
    try:
        eager_options(definition.target, definition.with_)
    except ValueError as e:
        raise SchemaDefinitionError(
            f"@bind argument `with` defined on {element} of {parent} is invalid for "
            f"`{definition.class_name}`: {e}",
            reason=SchemaDefinitionError.UNKNOWN_RELATION,
            class_name=definition.class_name,
        ) from e


def definition_for(directive: Any, schema: Any, *, element: str, parent: str) -> BindDefinition:
    """Return the cached definition of ``directive``, validating it on first use."""
    cached = getattr(directive, _CACHE_ATTR, None)
    if cached is not None:
        return cached
    definition = build_definition(directive, schema, element=element, parent=parent)
    setattr(directive, _CACHE_ATTR, definition)
    return definition
