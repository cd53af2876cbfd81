from __future__ import annotations

from typing import Any, Callable, Iterable, Tuple

from ..core.model import Resource, Subject

# build_request(request) -> (verb, subjects, resource)
# Supplied by the embedding service: it authenticates the caller and routes
# the request to a verb and a Resource.
RequestBuilder = Callable[[Any], Tuple[str, Iterable[Subject], Resource]]

REASON_HEADER = "X-Rolebind-Reason"
STATE_ATTR = "authorization"

__all__ = ["RequestBuilder", "REASON_HEADER", "STATE_ATTR"]
