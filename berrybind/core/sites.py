"""Where ``@bind`` sits in a field's arguments, and where it occurs in a request.

At schema build time :func:`collect_sites` turns a field's arguments into a
tree of :class:`BindSite` nodes: a node either carries a validated
definition (the argument or input field has ``@bind``) or children (its input
type contains bound fields somewhere below). At execution time
:func:`collect_occurrences` walks the converted argument values along that
tree and yields one :class:`BindOccurrence` per bound value, each with its
own memo.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from functools import partial
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional

from strawberry import UNSET

from ..directive import Bind
from .definition import BindDefinition, definition_for
from .memo import BindingMemo, ResolvedBinding


@dataclass(eq=False)
class BindSite:
    python_name: str
    source: Any  # StrawberryArgument or StrawberryField
    definition: Optional[BindDefinition] = None
    children: List['BindSite'] = field(default_factory=list)
    _graphql_name: Optional[str] = None

    def graphql_name(self, info: Any = None) -> str:
        if self._graphql_name is None:
            explicit = getattr(self.source, 'graphql_name', None)
            if explicit:
                self._graphql_name = explicit
            else:
                converter = getattr(getattr(getattr(info, 'schema', None), 'config', None), 'name_converter', None)
                if converter is None:
                    # No schema at hand; don't cache so a later call can use the converter
                    return self.python_name
                self._graphql_name = converter.get_graphql_name(self.source)
        return self._graphql_name


def _unwrap(tp: Any) -> Any:
    """Strip lists, optionals and lazy references off a Strawberry type."""
    while not isinstance(tp, type):
        resolve = getattr(tp, 'resolve_type', None)
        if callable(resolve):
            tp = resolve()
            continue
        inner = getattr(tp, 'of_type', None)
        if inner is None:
            break
        tp = inner
    return tp


def _input_definition(tp: Any) -> Any:
    tdef = getattr(tp, '__strawberry_definition__', None)
    if tdef is None or not getattr(tdef, 'is_input', False):
        return None
    return tdef


def _bind_directive(obj: Any) -> Optional[Bind]:
    for d in getattr(obj, 'directives', None) or ():
        if isinstance(d, Bind):
            return d
    return None


def _label(obj: Any) -> str:
    return getattr(obj, 'graphql_name', None) or getattr(obj, 'python_name', None) or '?'


def _site_for(obj: Any, schema: Any, *, element: str, parent: str, cache: Dict[Any, List[BindSite]]) -> Optional[BindSite]:
    directive = _bind_directive(obj)
    if directive is not None:
        definition = definition_for(directive, schema, element=element, parent=parent)
        return BindSite(python_name=obj.python_name, source=obj, definition=definition)
    tp = _unwrap(obj.type)
    if _input_definition(tp) is None:
        return None
    building = tp in cache
    children = _input_sites(tp, schema, cache)
    if children or building:
        return BindSite(python_name=obj.python_name, source=obj, children=children)
    return None


def _input_sites(tp: Any, schema: Any, cache: Dict[Any, List[BindSite]]) -> List[BindSite]:
    if tp in cache:
        return cache[tp]
    sites: List[BindSite] = []
    # Registered before recursing so self-referencing inputs terminate
    cache[tp] = sites
    tdef = _input_definition(tp)
    for f in tdef.fields:
        site = _site_for(f, schema, element=f"field `{_label(f)}`", parent=f"input `{tdef.name}`", cache=cache)
        if site is not None:
            sites.append(site)
    return sites


def collect_sites(field: Any, schema: Any) -> List[BindSite]:
    """Build the bind sites of a Strawberry field, validating every ``@bind`` found."""
    cache: Dict[Any, List[BindSite]] = {}
    sites: List[BindSite] = []
    for argument in field.arguments:
        site = _site_for(
            argument,
            schema,
            element=f"argument `{_label(argument)}`",
            parent=f"field `{_label(field)}`",
            cache=cache,
        )
        if site is not None:
            sites.append(site)
    return sites


class BindOccurrence:
    """One bound value inside one field execution."""

    def __init__(self, definition: BindDefinition, path: str, value: Any, assign: Callable[[Any], None]):
        self.definition = definition
        self.path = path
        self.value = value
        self.assign = assign
        self.memo = BindingMemo()

    async def resolve(self, binder: Callable[[Any, BindDefinition], Awaitable[ResolvedBinding]]) -> ResolvedBinding:
        return await self.memo.resolve(lambda: binder(self.value, self.definition))

    def __repr__(self) -> str:  # pragma: no cover - debugging aid
        return f"BindOccurrence(path={self.path!r}, class={self.definition.class_name!r}, state={self.memo.state.value})"


def _is_absent(value: Any) -> bool:
    return value is None or value is UNSET


def _collect(site: BindSite, value: Any, path: str, assign: Callable[[Any], None], out: List[BindOccurrence], info: Any) -> None:
    if _is_absent(value):
        return
    if site.definition is not None:
        out.append(BindOccurrence(site.definition, path, value, assign))
        return
    _collect_inputs(site.children, value, path, out, info)


def _collect_inputs(children: List[BindSite], value: Any, path: str, out: List[BindOccurrence], info: Any) -> None:
    if _is_absent(value):
        return
    if isinstance(value, (list, tuple)):
        for index, item in enumerate(value):
            _collect_inputs(children, item, f"{path}.{index}", out, info)
        return
    for child in children:
        if not hasattr(value, child.python_name):
            continue
        _collect(
            child,
            getattr(value, child.python_name),
            f"{path}.{child.graphql_name(info)}",
            partial(setattr, value, child.python_name),
            out,
            info,
        )


def collect_occurrences(sites: List[BindSite], kwargs: Mapping[str, Any], info: Any = None) -> List[BindOccurrence]:
    """Return the bound values present in ``kwargs``, in argument order.

    ``kwargs`` must be a mutable mapping; occurrences assign their bound value
    back into it (or into the input object holding the raw value).
    """
    out: List[BindOccurrence] = []
    for site in sites:
        if site.python_name not in kwargs:
            continue
        _collect(
            site,
            kwargs[site.python_name],
            site.graphql_name(info),
            partial(kwargs.__setitem__, site.python_name),  # type: ignore[attr-defined]
            out,
            info,
        )
    return out
