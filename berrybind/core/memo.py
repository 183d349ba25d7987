from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, Tuple

_logger = logging.getLogger("berrybind")


@dataclass(frozen=True)
class ResolvedBinding:
    """Outcome of binding one argument value.

    Attributes:
        value: The bound object, ``None`` when nothing matched a scalar, or the
            list of bound objects (unmatched positions removed, input order kept).
        many: The raw argument value was a list.
        missing: Input positions of a list that matched nothing.
    """

    value: Any = None
    many: bool = False
    missing: Tuple[int, ...] = ()

    @property
    def found(self) -> bool:
        if self.many:
            return not self.missing
        return self.value is not None


class BindingState(Enum):
    UNBOUND = 'unbound'
    BOUND = 'bound'


class BindingMemo:
    """Resolve-once holder for a single argument occurrence.

    Both the validation phase and the transform phase call :meth:`resolve`;
    only the first call runs ``compute``. A bound ``None`` is a real result and
    stays distinct from the unbound state.
    """

    __slots__ = ('state', '_resolved')

    def __init__(self) -> None:
        self.state = BindingState.UNBOUND
        self._resolved: Optional[ResolvedBinding] = None

    @property
    def resolved(self) -> ResolvedBinding:
        if self.state is BindingState.UNBOUND or self._resolved is None:
            raise RuntimeError("Binding has not been resolved yet")
        return self._resolved

    async def resolve(self, compute: Callable[[], Awaitable[ResolvedBinding]]) -> ResolvedBinding:
        if self.state is BindingState.BOUND:
            _logger.debug("berrybind: memo hit")
            return self.resolved
        resolved = await compute()
        self._resolved = resolved
        self.state = BindingState.BOUND
        return resolved
