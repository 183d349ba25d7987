from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from sqlalchemy import inspect as sa_inspect
from sqlalchemy import select
from sqlalchemy.orm import joinedload

from ..core.memo import ResolvedBinding
from ..core.utils import coerce_column_value
from ..errors import AmbiguousBindingError

_logger = logging.getLogger("berrybind")

# Marker for raw values that cannot be represented in the column type
_UNMATCHABLE = object()


def resolve_column(model_cls: Any, name: str) -> Tuple[Any, str]:
    """Return ``(instrumented attribute, attribute key)`` for a model column.

    ``name`` may be the mapped attribute key or the table column name.

    Raises:
        ValueError: when no column attribute matches ``name``.
    """
    mapper = sa_inspect(model_cls)
    prop = None
    if name in mapper.column_attrs:
        prop = mapper.column_attrs[name]
    else:
        table = getattr(model_cls, '__table__', None)
        col = table.c.get(name) if table is not None else None
        if col is not None:
            prop = mapper.get_property_by_column(col)
    if prop is None:
        raise ValueError(f"Unknown column: {name} on {model_cls.__name__}")
    return getattr(model_cls, prop.key), prop.key


def eager_options(model_cls: Any, relations: Iterable[str]) -> List[Any]:
    """Build ``joinedload`` options for relation paths like ``"company"`` or ``"posts.author"``.

    Joined loading keeps the relations in the lookup statement itself.

    Raises:
        ValueError: when a path segment is not a relationship.
    """
    opts: List[Any] = []
    for path in relations:
        current = model_cls
        loader = None
        for rel_name in str(path).split('.'):
            rels = sa_inspect(current).relationships
            if rel_name not in rels:
                raise ValueError(f"Unknown relation: {path} on {model_cls.__name__}")
            attr = getattr(current, rel_name)
            loader = joinedload(attr) if loader is None else loader.joinedload(attr)
            current = rels[rel_name].mapper.class_
        if loader is not None:
            opts.append(loader)
    return opts


class ModelBinding:
    """Bind scalar identifiers to SQLAlchemy ORM instances.

    A single value yields at most one instance; more than one match raises
    :class:`AmbiguousBindingError`. A list of values is looked up with a
    single ``IN`` query and mapped back onto input positions; positions
    without a match are reported in ``ResolvedBinding.missing`` and left out
    of the bound list.
    """

    def __init__(self, session: Any, *, lock: Optional[asyncio.Lock] = None):
        self.session = session
        self.lock = lock

    async def __call__(self, value: Any, definition: Any) -> ResolvedBinding:
        if isinstance(value, (list, tuple)):
            return await self.bind_many(value, definition)
        return await self.bind_one(value, definition)

    # --- Single value -------------------------------------------------------
    async def bind_one(self, value: Any, definition: Any) -> ResolvedBinding:
        model = definition.target
        col, _key = resolve_column(model, definition.column)
        lookup = self._coerce(col, value)
        if lookup is None or lookup is _UNMATCHABLE:
            return ResolvedBinding(value=None)
        rows = await self._fetch(definition, col == lookup)
        _logger.debug("berrybind: %s.%s=%r matched %d row(s)", model.__name__, definition.column, lookup, len(rows))
        if len(rows) > 1:
            raise AmbiguousBindingError(model, definition.column, value, len(rows))
        return ResolvedBinding(value=rows[0] if rows else None)

    # --- Collection ---------------------------------------------------------
    async def bind_many(self, values: Sequence[Any], definition: Any) -> ResolvedBinding:
        model = definition.target
        col, key = resolve_column(model, definition.column)
        lookups = [self._coerce(col, v) for v in values]
        distinct = [v for v in dict.fromkeys(lookups) if v is not None and v is not _UNMATCHABLE]
        rows = await self._fetch(definition, col.in_(distinct)) if distinct else []
        _logger.debug(
            "berrybind: %s.%s IN (%d value(s)) matched %d row(s)",
            model.__name__, definition.column, len(distinct), len(rows),
        )
        by_value: Dict[Any, List[Any]] = {}
        for row in rows:
            by_value.setdefault(getattr(row, key), []).append(row)
        for matched_value, matches in by_value.items():
            if len(matches) > 1:
                raise AmbiguousBindingError(model, definition.column, matched_value, len(matches))

        bound: List[Any] = []
        missing: List[int] = []
        for index, lookup in enumerate(lookups):
            matches = by_value.get(lookup) if lookup is not None and lookup is not _UNMATCHABLE else None
            if matches:
                bound.append(matches[0])
            else:
                missing.append(index)
        return ResolvedBinding(value=bound, many=True, missing=tuple(missing))

    # --- Helpers ------------------------------------------------------------
    def _coerce(self, col: Any, value: Any) -> Any:
        try:
            return coerce_column_value(col, value)
        except (TypeError, ValueError, OverflowError):
            # A value the column cannot hold can never match: report it as not found
            return _UNMATCHABLE

    async def _fetch(self, definition: Any, criterion: Any) -> List[Any]:
        stmt = select(definition.target).where(criterion)
        opts = eager_options(definition.target, definition.with_)
        if opts:
            stmt = stmt.options(*opts)
        guard = self.lock if self.lock is not None else contextlib.nullcontext()
        async with guard:
            result = await self.session.execute(stmt)
            return list(result.unique().scalars().all())
