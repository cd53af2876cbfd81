import types

import pytest

pytest.importorskip("starlette", reason="Optional dep: Starlette not installed")

from starlette.responses import JSONResponse

from rolebind import Authorizer, Resource, Role, RoleBinding, Rule, Subject, SubjectKind
from rolebind.adapters.starlette import require_access

GROUP = SubjectKind.GROUP


def _authorizer():
    a = Authorizer()
    a.set_role(Role("read-states", rules=[Rule(verbs=["get"], resources=["states"])]))
    a.set_role_binding(
        RoleBinding("states-reading-for-all", "read-states", subjects=[Subject("system:authenticated", GROUP)])
    )
    return a


def _build(request):
    # request is a SimpleNamespace standing in for a Starlette Request
    return request.verb, request.subjects, Resource(resource="states")


def _req(name):
    return types.SimpleNamespace(
        verb="get", subjects=[Subject(name, GROUP)], state=types.SimpleNamespace()
    )


@pytest.mark.asyncio
async def test_async_endpoint_allowed_gets_result_on_state():
    @require_access(_authorizer(), _build)
    async def handler(request):
        return JSONResponse({"via": request.state.authorization.role_binding})

    req = _req("system:authenticated")
    resp = await handler(req)
    assert resp.status_code == 200
    assert req.state.authorization.success is True
    assert b"states-reading-for-all" in resp.body


@pytest.mark.asyncio
async def test_sync_endpoint_runs_in_threadpool_when_allowed():
    @require_access(_authorizer(), _build)
    def handler(request):
        return JSONResponse({"ok": True})

    resp = await handler(_req("system:authenticated"))
    assert resp.status_code == 200


@pytest.mark.asyncio
@pytest.mark.parametrize("add_headers", [False, True])
async def test_denied_returns_403_with_explanation(add_headers):
    called = []

    @require_access(_authorizer(), _build, add_headers=add_headers)
    async def handler(request):
        called.append(True)
        return JSONResponse({"ok": True})

    req = _req("system:unauthenticated")
    resp = await handler(req)
    assert resp.status_code == 403
    assert not called
    assert not hasattr(req.state, "authorization")
    assert b"authorization failed for [Group:system:unauthenticated]" in resp.body
    assert ("x-rolebind-reason" in resp.headers) is add_headers


@pytest.mark.asyncio
async def test_dependency_form():
    dep = require_access(_authorizer(), _build)
    assert await dep(_req("system:authenticated")) is None
    deny = await dep(_req("nobody"))
    assert deny.status_code == 403


def test_with_test_client():
    pytest.importorskip("httpx")
    from starlette.applications import Starlette
    from starlette.requests import Request
    from starlette.routing import Route
    from starlette.testclient import TestClient

    def build(request: Request):
        user = request.headers.get("x-user")
        if user:
            subjects = [Subject(user, SubjectKind.USER), Subject("system:authenticated", GROUP)]
        else:
            subjects = [Subject("system:unauthenticated", GROUP)]
        return request.method.lower(), subjects, Resource(resource="states")

    @require_access(_authorizer(), build)
    async def states(request: Request):
        return JSONResponse({"explanation": str(request.state.authorization)})

    client = TestClient(Starlette(routes=[Route("/states", states)]))

    ok = client.get("/states", headers={"x-user": "stephen"})
    assert ok.status_code == 200
    assert ok.json()["explanation"] == (
        'authorization succeeded for Group "system:authenticated" '
        "as read-states using states-reading-for-all"
    )

    denied = client.get("/states")
    assert denied.status_code == 403
    assert denied.json()["detail"].startswith("authorization failed for")


@pytest.mark.asyncio
async def test_reason_header_is_latin1_safe_for_non_latin1_input():
    def build(request):
        return "get", [Subject("日本", SubjectKind.USER)], Resource("", "states", "名前\r\n")

    dep = require_access(_authorizer(), build, add_headers=True)
    deny = await dep(types.SimpleNamespace(state=types.SimpleNamespace()))
    assert deny.status_code == 403

    reason = deny.headers["x-rolebind-reason"]
    reason.encode("latin-1")
    assert "\r" not in reason and "\n" not in reason
    assert reason.startswith("authorization failed for [User:%E6%97%A5%E6%9C%AC]")
    # the JSON body keeps the unescaped explanation
    assert "日本" in deny.body.decode("utf-8")
