"""OpenTelemetry tracing decorators."""

import asyncio
import functools
from collections.abc import Callable
from typing import Any, TypeVar

from opentelemetry import trace
from opentelemetry.trace import Span

from canteen_service.models.outcome import Outcome

F = TypeVar("F", bound=Callable[..., Any])


def _record_result(span: Span, result: Any) -> None:
    if isinstance(result, Outcome):
        span.set_attribute("outcome.kind", result.kind.value)
        span.set_attribute("success", result.is_success)
    else:
        span.set_attribute("success", True)


def _record_error(span: Span, error: Exception) -> None:
    span.set_attribute("success", False)
    span.set_attribute("error.type", type(error).__name__)
    span.set_attribute("error.message", str(error))
    span.record_exception(error)


def traced(span_name: str | None = None, service_name: str = "canteen-svc") -> Callable[[F], F]:
    """Decorator to add OpenTelemetry tracing to a function.

    Creates a span for the decorated function. When the function returns an
    Outcome, its kind is recorded and expected failures (NotFound, BadRequest)
    mark the span unsuccessful without recording an exception.

    Args:
        span_name: Name for the span (defaults to the function name)
        service_name: Service name for span attributes

    Returns:
        Decorated function with tracing

    Example:
        @traced("menu.add_item")
        async def add_item(self, day: str, menu_item_id: str) -> Outcome:
            ...
    """

    def decorator(func: F) -> F:
        name = span_name or func.__name__
        tracer = trace.get_tracer(service_name)

        @functools.wraps(func)
        async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
            with tracer.start_as_current_span(name) as span:
                span.set_attribute("service.name", service_name)
                span.set_attribute("function.name", func.__name__)
                try:
                    result = await func(*args, **kwargs)
                except Exception as e:
                    _record_error(span, e)
                    raise
                _record_result(span, result)
                return result

        @functools.wraps(func)
        def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
            with tracer.start_as_current_span(name) as span:
                span.set_attribute("service.name", service_name)
                span.set_attribute("function.name", func.__name__)
                try:
                    result = func(*args, **kwargs)
                except Exception as e:
                    _record_error(span, e)
                    raise
                _record_result(span, result)
                return result

        if asyncio.iscoroutinefunction(func):
            return async_wrapper  # type: ignore
        return sync_wrapper  # type: ignore

    return decorator
