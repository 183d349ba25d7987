from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable

from sqlalchemy.sql.sqltypes import BigInteger, Boolean, DateTime, Float, Integer, Numeric, SmallInteger, String, Uuid

from ..config import DEFAULT_SESSION_KEYS

_logger = logging.getLogger("berrybind")

_LOCK_KEY = '_berrybind_db_lock'


# --- Context helpers ---
def get_db_session(info_or_ctx: Any, keys: Iterable[str] = DEFAULT_SESSION_KEYS) -> Any | None:
    """Extract an AsyncSession-like object from a Strawberry ``Info`` or a context.

    Tries each key in ``keys`` as a mapping key first, then as an attribute.

    Returns:
        The session object if found; otherwise ``None``.
    """
    if info_or_ctx is None:
        return None
    ctx = getattr(info_or_ctx, 'context', info_or_ctx)
    if ctx is None:
        return None
    get = getattr(ctx, 'get', None)
    for k in keys:
        v = get(k, None) if callable(get) else getattr(ctx, k, None)
        if v is not None:
            return v
    return None


def get_context_lock(info_or_ctx: Any) -> asyncio.Lock:
    """Return a per-request asyncio.Lock stored on the context to serialize DB access."""
    ctx = getattr(info_or_ctx, 'context', info_or_ctx)
    if isinstance(ctx, dict):
        lock = ctx.get(_LOCK_KEY)
        if lock is None:
            lock = ctx[_LOCK_KEY] = asyncio.Lock()
        return lock
    if ctx is not None:
        lock = getattr(ctx, _LOCK_KEY, None)
        if lock is None:
            lock = asyncio.Lock()
            try:
                setattr(ctx, _LOCK_KEY, lock)
            except AttributeError:
                # Slotted/frozen contexts: the lock only covers this call
                _logger.warning(
                    "berrybind: cannot store a lock on context %s; DB access is not serialized for this request",
                    type(ctx).__name__,
                )
        return lock
    return asyncio.Lock()


# --- Value coercion ---
_TRUE = ('true', 't', '1', 'yes', 'y')
_FALSE = ('false', 'f', '0', 'no', 'n')


def _integer_bits(ctype: Any) -> int:
    if isinstance(ctype, BigInteger):
        return 64
    if isinstance(ctype, SmallInteger):
        return 16
    return 32


def coerce_column_value(col: Any, val: Any) -> Any:
    """Coerce a raw GraphQL value (usually an ``ID`` string) to a column's Python type.

    Raises:
        ValueError: when the value cannot represent a value of the column type.
    """
    if val is None:
        return None
    ctype = getattr(col, 'type', None)
    if ctype is None:
        return val
    if isinstance(ctype, Boolean):
        if isinstance(val, str):
            lv = val.strip().lower()
            if lv in _TRUE:
                return True
            if lv in _FALSE:
                return False
            raise ValueError(f"Not a boolean: {val!r}")
        return bool(val)
    if isinstance(ctype, Integer):
        if isinstance(val, bool):
            raise ValueError(f"Not an integer: {val!r}")
        if isinstance(val, float) and not val.is_integer():
            raise ValueError(f"Not an integer: {val!r}")
        iv = int(val.strip()) if isinstance(val, str) else int(val)
        bound = 1 << (_integer_bits(ctype) - 1)
        if not -bound <= iv < bound:
            raise ValueError(f"Integer out of range for {ctype!r}: {iv}")
        return iv
    if isinstance(ctype, DateTime):
        if isinstance(val, datetime):
            dv = val
        else:
            s = str(val).strip()
            dv = datetime.fromisoformat(s.replace('Z', '+00:00') if s.endswith('Z') else s)
        if not getattr(ctype, 'timezone', False) and dv.tzinfo is not None:
            dv = dv.replace(tzinfo=None)
        return dv
    if isinstance(ctype, Float):
        return float(val)
    if isinstance(ctype, Numeric):
        try:
            return Decimal(str(val)) if getattr(ctype, 'asdecimal', True) else float(val)
        except InvalidOperation as e:
            raise ValueError(f"Not a number: {val!r}") from e
    if isinstance(ctype, Uuid):
        if isinstance(val, uuid.UUID):
            return val if getattr(ctype, 'as_uuid', True) else str(val)
        parsed = uuid.UUID(str(val))
        return parsed if getattr(ctype, 'as_uuid', True) else str(parsed)
    if isinstance(ctype, String):
        return val if isinstance(val, str) else str(val)
    return val
