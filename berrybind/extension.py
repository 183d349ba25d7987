from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List

from strawberry.extensions import FieldExtension

from .core.definition import BindDefinition, BindKind
from .core.sites import BindOccurrence, BindSite, collect_occurrences, collect_sites
from .handlers import CallableBinding
from .validation import BindingExists, field_path, merge_failures

_logger = logging.getLogger("berrybind")


class BindExtension(FieldExtension):
    """Field extension that resolves ``@bind`` arguments before the resolver runs.

    Schema build (:meth:`apply`): every ``@bind`` on the field's arguments and on
    the input types they reach is validated once; a bad directive aborts the
    schema build with :class:`~berrybind.errors.SchemaDefinitionError`.

    Execution (:meth:`resolve_async`) runs in two phases over the occurrences
    found in the arguments:

    1. validation: each required occurrence is resolved; unresolved ones are
       collected and reported together as a
       :class:`~berrybind.errors.BindingValidationError`. The resolver is not
       called in that case.
    2. transform: each occurrence is resolved (memoized, so required ones are
       not looked up again) and its bound value replaces the raw value.

    Lookup errors, ambiguous matches and handler exceptions propagate unchanged.
    """

    def __init__(self, schema: Any):
        self.schema = schema
        self.sites: List[BindSite] = []
        self.rule = BindingExists(getattr(schema, 'config', None))
        self._applied = False

    def apply(self, field: Any) -> None:
        if self._applied:
            return
        self.sites = collect_sites(field, self.schema)
        self._applied = True
        if self.sites:
            _logger.debug(
                "berrybind: field %s binds %s",
                getattr(field, 'python_name', field),
                ', '.join(s.python_name for s in self.sites),
            )

    def _binders(self, info: Any) -> Callable[[BindDefinition], Any]:
        cache: Dict[BindKind, Any] = {}

        def binder_for(definition: BindDefinition) -> Any:
            binder = cache.get(definition.kind)
            if binder is None:
                if definition.kind is BindKind.MODEL:
                    binder = self.schema.model_binding(info)
                else:
                    binder = CallableBinding(self.schema, info)
                cache[definition.kind] = binder
            return binder

        return binder_for

    async def validate(self, occurrences: List[BindOccurrence], binder_for: Callable[[BindDefinition], Any], info: Any) -> None:
        failures = []
        for occurrence in occurrences:
            if not occurrence.definition.required:
                continue
            resolved = await occurrence.resolve(binder_for(occurrence.definition))
            failures.append(self.rule.messages(occurrence, resolved))
        merged = merge_failures(failures)
        if merged:
            raise self.rule.error(merged, field_path(info))

    async def transform(self, occurrences: List[BindOccurrence], binder_for: Callable[[BindDefinition], Any]) -> None:
        for occurrence in occurrences:
            resolved = await occurrence.resolve(binder_for(occurrence.definition))
            occurrence.assign(resolved.value)

    async def resolve_async(self, next_: Any, source: Any, info: Any, **kwargs: Any) -> Any:
        if not self.sites:
            return await next_(source, info, **kwargs)
        occurrences = collect_occurrences(self.sites, kwargs, info)
        if occurrences:
            binder_for = self._binders(info)
            await self.validate(occurrences, binder_for, info)
            await self.transform(occurrences, binder_for)
        return await next_(source, info, **kwargs)
