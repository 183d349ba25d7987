from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional, Tuple

DEFAULT_SESSION_KEYS: Tuple[str, ...] = ('db_session', 'db', 'session', 'async_session')

DEFAULT_MESSAGES: Dict[str, str] = {
    # Per-attribute message for a binding that resolved to nothing
    'exists': 'The selected {attribute} is invalid.',
    # Top-level message of the validation error
    'failed': 'Validation failed for the field [{field}].',
}


@dataclass(frozen=True)
class BindConfig:
    """Runtime options for a :class:`~berrybind.registry.BindSchema`.

    Attributes:
        session_keys: Context keys (or attributes) searched, in order, for the
            SQLAlchemy ``AsyncSession`` used by model bindings.
        messages: Message templates keyed by rule name. ``exists`` receives
            ``attribute``; ``failed`` receives ``field``.
        serialize_db_access: Guard lookups with a per-request ``asyncio.Lock``
            so concurrently resolved fields do not share the session at once.
            Contexts that accept neither item nor attribute assignment cannot
            hold the lock; lookups on them run unserialized (logged as a warning).
    """

    session_keys: Tuple[str, ...] = DEFAULT_SESSION_KEYS
    messages: Mapping[str, str] = field(default_factory=lambda: dict(DEFAULT_MESSAGES))
    serialize_db_access: bool = True

    def message(self, key: str, **params: str) -> str:
        template = self.messages.get(key) or DEFAULT_MESSAGES[key]
        return template.format(**params)

    @classmethod
    def from_env(cls, prefix: str = 'BERRYBIND_', environ: Optional[Mapping[str, str]] = None) -> 'BindConfig':
        """Build a config from environment variables.

        Recognized variables (with the default prefix):
          BERRYBIND_SESSION_KEYS          comma separated context keys
          BERRYBIND_SERIALIZE_DB_ACCESS   '0'/'false' disables the per-request lock
        """
        env = os.environ if environ is None else environ
        kwargs: Dict[str, object] = {}
        keys = env.get(f'{prefix}SESSION_KEYS')
        if keys:
            kwargs['session_keys'] = tuple(k.strip() for k in keys.split(',') if k.strip())
        serialize = env.get(f'{prefix}SERIALIZE_DB_ACCESS')
        if serialize is not None:
            kwargs['serialize_db_access'] = serialize.strip().lower() not in ('0', 'false', 'no', 'off')
        return cls(**kwargs)  # type: ignore[arg-type]
