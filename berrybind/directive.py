from __future__ import annotations

from typing import Any, Iterable, List, Optional, Union

import strawberry
from strawberry.schema_directive import Location

_BIND_DESCRIPTION = (
    "Automatically inject (model) instances directly into a resolver's arguments. For example, instead of "
    "injecting a user's ID, you can inject the entire User model instance that matches the given ID."
)


@strawberry.schema_directive(
    locations=[Location.ARGUMENT_DEFINITION, Location.INPUT_FIELD_DEFINITION],
    name="bind",
    description=_BIND_DESCRIPTION,
)
class Bind:
    """The ``@bind`` schema directive.

    Instances are attached to arguments (``strawberry.argument(directives=...)``)
    or input fields (``strawberry.field(directives=...)``); the helpers
    :func:`bind` and :func:`bind_field` build both for you.
    """

    class_: str = strawberry.field(
        name="class",
        description=(
            "Specify the class name of the binding to use. This can be either a SQLAlchemy "
            "model or callable class to bind any other instance than a model."
        ),
    )
    column: str = strawberry.field(
        default="id",
        description=(
            "Specify the column name of a unique identifier to use when binding models. "
            "By default, \"id\" is used as the primary key column."
        ),
    )
    with_: List[str] = strawberry.field(
        name="with",
        default_factory=list,
        description="Specify the relations to eager-load when binding models.",
    )
    required: bool = strawberry.field(
        default=True,
        description=(
            "Specify whether the binding should be considered required. When required, a validation error "
            "is reported for the argument or any item in the argument (when the argument is a list) for which "
            "a binding instance could not be resolved, and the field resolver is not invoked. When optional, "
            "the argument value resolves as null or, for lists, unresolved items are filtered out."
        ),
    )


def class_identity(class_: Union[str, type]) -> str:
    """Return the identity string for a class reference (dotted path for classes)."""
    if isinstance(class_, str):
        return class_
    return f"{class_.__module__}.{class_.__qualname__}"


def make_bind(
    class_: Union[str, type],
    *,
    column: str = "id",
    with_: Iterable[str] = (),
    required: bool = True,
) -> Bind:
    return Bind(class_=class_identity(class_), column=column, with_=list(with_), required=required)


def bind(
    class_: Union[str, type],
    *,
    column: str = "id",
    with_: Iterable[str] = (),
    required: bool = True,
    name: Optional[str] = None,
    description: Optional[str] = None,
    directives: Iterable[Any] = (),
) -> Any:
    """Annotate a resolver argument with ``@bind``.

    Use inside ``Annotated``:

        @bind_schema.field
        async def user(self, user: Annotated[strawberry.ID, bind('User')]) -> UserQL:
            return user  # a User instance, not the raw ID

    ``class_`` is a registered name, a dotted import path, or the class itself.
    """
    return strawberry.argument(
        name=name,
        description=description,
        directives=[make_bind(class_, column=column, with_=with_, required=required), *directives],
    )


def bind_field(
    class_: Union[str, type],
    *,
    column: str = "id",
    with_: Iterable[str] = (),
    required: bool = True,
    **field_kwargs: Any,
) -> Any:
    """Declare an input type field carrying ``@bind``.

        @strawberry.input
        class RemoveUsersInput:
            users: List[strawberry.ID] = bind_field('User')
    """
    directives = list(field_kwargs.pop('directives', ()) or ())
    return strawberry.field(
        directives=[make_bind(class_, column=column, with_=with_, required=required), *directives],
        **field_kwargs,
    )
