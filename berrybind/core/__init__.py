from __future__ import annotations

from .definition import BindDefinition, BindKind, build_definition, definition_for
from .memo import BindingMemo, BindingState, ResolvedBinding
from .sites import BindOccurrence, BindSite, collect_occurrences, collect_sites

__all__ = [
    'BindDefinition',
    'BindKind',
    'build_definition',
    'definition_for',
    'BindingMemo',
    'BindingState',
    'ResolvedBinding',
    'BindOccurrence',
    'BindSite',
    'collect_occurrences',
    'collect_sites',
]
