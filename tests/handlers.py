"""Callable binding handlers used by the test schema."""
import asyncio
from typing import Any

from berrybind import BindingHandler

# Test-only: log of handler invocations
HANDLER_CALLS: list[dict] = []


class Uppercase(BindingHandler):
    def __call__(self, value: Any, definition):
        HANDLER_CALLS.append({'handler': 'Uppercase', 'value': value})
        if isinstance(value, list):
            return [v.upper() for v in value]
        return value.upper()


class Greeter:
    """Handler with a constructor dependency, built through a factory."""

    def __init__(self, greeting: str):
        self.greeting = greeting

    async def __call__(self, value: Any, definition):
        await asyncio.sleep(0)
        HANDLER_CALLS.append({'handler': 'Greeter', 'value': value})
        return f"{self.greeting}, {value}!"


class Reverse(BindingHandler):
    """Never registered: reached through its dotted import path."""

    def __call__(self, value: Any, definition):
        HANDLER_CALLS.append({'handler': 'Reverse', 'value': value})
        return value[::-1]


class NullHandler(BindingHandler):
    def __call__(self, value: Any, definition):
        HANDLER_CALLS.append({'handler': 'NullHandler', 'value': value})
        return None


class FailingHandler(BindingHandler):
    async def __call__(self, value: Any, definition):
        HANDLER_CALLS.append({'handler': 'FailingHandler', 'value': value})
        raise LookupError(f"handler exploded on {value}")
