"""berrybind public API and lightweight lazy exports.

Resolve ``@bind`` annotated GraphQL arguments into SQLAlchemy records (or any
object a handler returns) before Strawberry resolvers run.

Exposes:
- Lazy attributes: BindSchema, BindConfig, BindExtension, Bind, BindingHandler
- Lazy functions: bind, bind_field
- Errors: SchemaDefinitionError, AmbiguousBindingError, BindingValidationError
"""
from __future__ import annotations

_LAZY = {
    'BindSchema': '.registry',
    'BindExtension': '.extension',
    'BindConfig': '.config',
    'Bind': '.directive',
    'bind': '.directive',
    'bind_field': '.directive',
    'BindingHandler': '.handlers',
    'BindDefinition': '.core.definition',
    'BindKind': '.core.definition',
    'ResolvedBinding': '.core.memo',
    'ModelBinding': '.sql.model_binding',
    'BindError': '.errors',
    'SchemaDefinitionError': '.errors',
    'AmbiguousBindingError': '.errors',
    'BindingValidationError': '.errors',
}


def __getattr__(name: str):  # PEP 562 lazy exports
    import importlib as _importlib
    if name in {'registry', 'extension', 'directive', 'handlers', 'validation', 'errors', 'config', 'core', 'sql'}:
        return _importlib.import_module(__name__ + '.' + name)
    module = _LAZY.get(name)
    if module is None:
        raise AttributeError(name)
    return getattr(_importlib.import_module(module, __name__), name)


__all__ = [
    'BindSchema', 'BindExtension', 'BindConfig',
    'Bind', 'bind', 'bind_field',
    'BindingHandler', 'BindDefinition', 'BindKind', 'ResolvedBinding', 'ModelBinding',
    'BindError', 'SchemaDefinitionError', 'AmbiguousBindingError', 'BindingValidationError',
]
