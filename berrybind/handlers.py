from __future__ import annotations

import inspect
from typing import Any

from .core.definition import BindDefinition
from .core.memo import ResolvedBinding


class BindingHandler:
    """Base class for callable bindings.

    Subclass and implement ``__call__(value, definition)``; the value is the raw
    argument value (a scalar or a list, matching the argument type) and the
    return value is passed to the resolver as-is. ``__call__`` may be async.

        class UserFromToken(BindingHandler):
            async def __call__(self, value, definition):
                return await tokens.user_for(value)

    Handlers are built per use through the schema registry, so constructor
    dependencies can be provided with ``register(..., factory=...)``.
    """

    def __call__(self, value: Any, definition: BindDefinition) -> Any:
        raise NotImplementedError


class CallableBinding:
    """Invoke the handler class a callable ``@bind`` definition names."""

    def __init__(self, schema: Any, info: Any = None):
        self.schema = schema
        self.info = info

    async def __call__(self, value: Any, definition: BindDefinition) -> ResolvedBinding:
        handler = self.schema.make(definition.target, self.info)
        result = handler(value, definition)
        if inspect.isawaitable(result):
            result = await result
        return ResolvedBinding(value=result, many=isinstance(value, (list, tuple)))
