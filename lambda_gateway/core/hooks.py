"""
Route hook capabilities.

A route customizes the invocation pipeline with two optional hooks:

- PayloadBuilder: (RequestContext) -> payload | Exception. Returning or
  raising an exception signals failure; the function is then not invoked.
- ResponseFinalizer: (error, remote_result, RequestContext) -> response.

Hooks may be plain functions or coroutine functions. Plain functions run in
the threadpool so a blocking hook does not stall the event loop. In the YAML
routing file hooks are referenced as "package.module:attribute".
"""

import importlib
import inspect
from typing import TYPE_CHECKING, Any, Callable, Optional, Protocol, runtime_checkable

from fastapi.concurrency import run_in_threadpool

if TYPE_CHECKING:
    from ..models.context import RequestContext
    from ..models.result import RemoteResult


@runtime_checkable
class PayloadBuilder(Protocol):
    def __call__(self, context: "RequestContext") -> Any: ...  # payload or Exception


@runtime_checkable
class ResponseFinalizer(Protocol):
    def __call__(
        self,
        error: Optional[Exception],
        result: Optional["RemoteResult"],
        context: "RequestContext",
    ) -> Any: ...


def resolve_hook(reference: Any) -> Optional[Callable[..., Any]]:
    """
    Resolve a hook reference to a callable.

    Args:
        reference: a callable, None, or a "module:attribute" string

    Raises:
        ValueError: malformed reference or attribute is not callable
        ImportError: module cannot be imported
    """
    if reference is None or callable(reference):
        return reference

    if not isinstance(reference, str) or ":" not in reference:
        raise ValueError(f"Hook must be a callable or 'module:attribute', got {reference!r}")

    module_name, _, attr_path = reference.partition(":")
    module = importlib.import_module(module_name)

    target: Any = module
    for attr in attr_path.split("."):
        try:
            target = getattr(target, attr)
        except AttributeError:
            raise ValueError(f"Hook {reference!r} not found") from None

    if not callable(target):
        raise ValueError(f"Hook {reference!r} is not callable")
    return target


def _is_async_callable(func: Callable[..., Any]) -> bool:
    while hasattr(func, "func"):  # functools.partial
        func = func.func  # type: ignore[attr-defined]
    return inspect.iscoroutinefunction(func) or inspect.iscoroutinefunction(
        getattr(func, "__call__", None)
    )


async def call_hook(hook: Callable[..., Any], *args: Any) -> Any:
    """Call a sync or async hook and return its result."""
    if _is_async_callable(hook):
        return await hook(*args)

    result = await run_in_threadpool(hook, *args)
    if inspect.isawaitable(result):
        return await result
    return result
