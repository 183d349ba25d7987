from __future__ import annotations

from .model_binding import ModelBinding, eager_options, resolve_column

__all__ = [
    'ModelBinding',
    'eager_options',
    'resolve_column',
]
