from __future__ import annotations

import inspect
import logging
from typing import Any, Callable, Optional
from urllib.parse import quote

from ..core.engine import Authorizer
from ..core.model import Result
from ._common import REASON_HEADER, STATE_ATTR, RequestBuilder

try:
    from starlette.concurrency import run_in_threadpool  # type: ignore[import-not-found]
    from starlette.responses import JSONResponse  # type: ignore[import-not-found]
except Exception:  # pragma: no cover
    run_in_threadpool = None  # type: ignore
    JSONResponse = None  # type: ignore

logger = logging.getLogger("rolebind.adapters.starlette")


def _require_starlette() -> None:
    if JSONResponse is None or run_in_threadpool is None:
        raise RuntimeError(
            "Starlette is not installed. Install with extra: rolebind[adapters-starlette]."
        )


def _json_response(data: Any, status_code: int, headers: Optional[dict[str, str]] = None):
    _require_starlette()
    return JSONResponse(data, status_code=status_code, headers=headers)


def _deny_headers(result: Result, add_headers: bool) -> dict[str, str]:
    if not add_headers:
        return {}
    # header values must be latin-1 without control characters
    return {REASON_HEADER: quote(str(result), safe=" :\"[]")}


def _remember(request: Any, result: Result) -> None:
    state = getattr(request, "state", None)
    if state is not None:
        setattr(state, STATE_ATTR, result)


def require_access(
    authorizer: Authorizer,
    build_request: RequestBuilder,
    add_headers: bool = False,
) -> Callable[..., Any]:
    """
    Starlette adapter that works both:
      - as a decorator on an endpoint (sync or async)
      - as a dependency-like callable: ``deny = await require_access(...)(request)``

    Denied requests get a 403 JSON body ``{"detail": str(result)}``. Allowed
    requests get the :class:`Result` on ``request.state.authorization``.
    """

    _require_starlette()

    async def _dependency(request: Any):
        verb, subjects, resource = build_request(request)
        result = authorizer.evaluate(verb, subjects, resource)
        if result.success:
            _remember(request, result)
            return None
        logger.debug("rolebind: denied request: %s", result)
        return _json_response(
            {"detail": str(result)}, 403, headers=_deny_headers(result, add_headers)
        )

    def _decorator_or_dependency(arg: Any):
        if callable(arg):
            handler = arg

            if inspect.iscoroutinefunction(handler):

                async def _endpoint_async(request: Any):
                    deny = await _dependency(request)
                    if deny is not None:
                        return deny
                    return await handler(request)

                return _endpoint_async

            async def _endpoint_sync(request: Any):
                deny = await _dependency(request)
                if deny is not None:
                    return deny
                return await run_in_threadpool(handler, request)

            return _endpoint_sync

        # Otherwise act as a dependency: `arg` is the request.
        return _dependency(arg)

    return _decorator_or_dependency


__all__ = ["require_access"]
