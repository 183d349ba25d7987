from __future__ import annotations

import importlib
import logging
from typing import Any, Callable, Dict, Iterable, Optional, Type

import strawberry
from strawberry.types import Info as StrawberryInfo

from .config import BindConfig
from .core.utils import get_context_lock, get_db_session
from .extension import BindExtension
from .sql.model_binding import ModelBinding

_logger = logging.getLogger("berrybind")

__all__ = ['BindSchema']

_MISSING = object()


class BindSchema:
    """Registry of bindable classes and factory for bound Strawberry fields.

    The registry is the container ``@bind(class: ...)`` identities resolve
    against. Classes are registered under their ``__name__`` (or an explicit
    name) and their dotted path; unregistered dotted paths are imported.

    Example:
        bind_schema = BindSchema()
        bind_schema.register(User)

        @bind_schema.handler()
        class Uppercase(BindingHandler):
            def __call__(self, value, definition):
                return value.upper()

        @strawberry.type
        class Query:
            @bind_schema.field
            async def user(self, user: Annotated[strawberry.ID, bind('User')]) -> UserQL:
                return user
    """

    def __init__(self, *, config: Optional[BindConfig] = None, model_binding_class: Type[ModelBinding] = ModelBinding):
        self.types: Dict[str, Type[Any]] = {}
        self._factories: Dict[Type[Any], Callable[[Any], Any]] = {}
        self.config = config or BindConfig()
        self.model_binding_class = model_binding_class

    # ---- Registration -------------------------------------------------------
    def register(self, cls: Type[Any], *, name: Optional[str] = None, factory: Optional[Callable[[Any], Any]] = None):
        """Register ``cls`` under ``name`` (default ``cls.__name__``) and its dotted path.

        ``factory`` is called as ``factory(info)`` to build handler instances;
        without one, handlers are built with ``cls()``.
        """
        self.types[name or cls.__name__] = cls
        self.types[f"{cls.__module__}.{cls.__qualname__}"] = cls
        if factory is not None:
            self._factories[cls] = factory
        return cls

    def model(self, *, name: Optional[str] = None):
        """Decorator registering a SQLAlchemy model class."""
        def deco(cls: Type[Any]):
            return self.register(cls, name=name)
        return deco

    def handler(self, *, name: Optional[str] = None, factory: Optional[Callable[[Any], Any]] = None):
        """Decorator registering a callable binding handler class."""
        def deco(cls: Type[Any]):
            return self.register(cls, name=name, factory=factory)
        return deco

    # ---- Container ----------------------------------------------------------
    def lookup(self, identity: str) -> Any:
        """Return the object ``identity`` names, or ``None`` when nothing loads.

        Registered names win; otherwise ``identity`` is treated as a dotted
        import path (``package.module.Class`` or ``package.module.Outer.Inner``).
        Errors raised while importing an existing module propagate.
        """
        if not identity:
            return None
        found = self.types.get(identity)
        if found is not None:
            return found
        parts = identity.split('.')
        for i in range(len(parts) - 1, 0, -1):
            module_name = '.'.join(parts[:i])
            try:
                obj: Any = importlib.import_module(module_name)
            except ModuleNotFoundError as e:
                # Only "this prefix is not a module" is a miss; broken imports propagate
                if e.name and (module_name == e.name or module_name.startswith(e.name + '.')):
                    continue
                raise
            for attr in parts[i:]:
                obj = getattr(obj, attr, _MISSING)
                if obj is _MISSING:
                    return None
            return obj
        return None

    def make(self, cls: Type[Any], info: Any = None) -> Any:
        """Build a handler instance for ``cls``."""
        factory = self._factories.get(cls)
        if factory is not None:
            return factory(info)
        return cls()

    def model_binding(self, info: StrawberryInfo) -> ModelBinding:
        """Return the model binder for the request ``info`` belongs to."""
        session = get_db_session(info, self.config.session_keys)
        if session is None:
            raise ValueError("No db_session in context")
        lock = get_context_lock(info) if self.config.serialize_db_access else None
        return self.model_binding_class(session, lock=lock)

    # ---- Field factories ----------------------------------------------------
    def extension(self) -> BindExtension:
        return BindExtension(self)

    def _extensions(self, extensions: Optional[Iterable[Any]]) -> list:
        return [self.extension(), *(extensions or ())]

    def field(self, resolver: Optional[Callable[..., Any]] = None, *, extensions: Optional[Iterable[Any]] = None, **kwargs: Any):
        """``strawberry.field`` with ``@bind`` arguments resolved before the resolver runs.

        Usable bare (``@bind_schema.field``) or with options
        (``@bind_schema.field(description=...)``). The resolver must be async.
        """
        exts = self._extensions(extensions)
        if resolver is None:
            return strawberry.field(extensions=exts, **kwargs)
        return strawberry.field(resolver, extensions=exts, **kwargs)

    def mutation(self, resolver: Optional[Callable[..., Any]] = None, *, extensions: Optional[Iterable[Any]] = None, **kwargs: Any):
        """``strawberry.mutation`` counterpart of :meth:`field`."""
        exts = self._extensions(extensions)
        if resolver is None:
            return strawberry.mutation(extensions=exts, **kwargs)
        return strawberry.mutation(resolver, extensions=exts, **kwargs)
