from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional

from .config import BindConfig
from .core.memo import ResolvedBinding
from .core.sites import BindOccurrence
from .errors import BindingValidationError

_logger = logging.getLogger("berrybind")


class BindingExists:
    """Validation rule for required bindings.

    A scalar binding fails at its own path when it resolved to ``None``; a
    list binding fails at ``<path>.<index>`` for every position that matched
    nothing.
    """

    def __init__(self, config: Optional[BindConfig] = None):
        self.config = config or BindConfig()

    def failed_paths(self, occurrence: BindOccurrence, resolved: ResolvedBinding) -> List[str]:
        if not occurrence.definition.required or resolved.found:
            return []
        if resolved.many:
            return [f"{occurrence.path}.{index}" for index in resolved.missing]
        return [occurrence.path]

    def messages(self, occurrence: BindOccurrence, resolved: ResolvedBinding) -> Dict[str, List[str]]:
        return {
            path: [self.config.message('exists', attribute=path)]
            for path in self.failed_paths(occurrence, resolved)
        }

    def error(self, failures: Dict[str, List[str]], field: str) -> BindingValidationError:
        _logger.warning("berrybind: validation failed for %s at %s", field, ', '.join(failures))
        return BindingValidationError(self.config.message('failed', field=field), failures, field=field)


def field_path(info: Any) -> str:
    """Dotted response path of the field being resolved (e.g. ``removeUsers``)."""
    path = getattr(info, 'path', None)
    as_list = getattr(path, 'as_list', None)
    if callable(as_list):
        return '.'.join(str(p) for p in as_list())
    return str(getattr(info, 'field_name', '') or '')


def merge_failures(parts: Iterable[Dict[str, List[str]]]) -> Dict[str, List[str]]:
    merged: Dict[str, List[str]] = {}
    for part in parts:
        for path, messages in part.items():
            merged.setdefault(path, []).extend(messages)
    return merged
