"""
Starlette demo.

Run:
  uvicorn examples.starlette_demo.app:app

URLs have the form /states/{namespace}/{name}; "-" is the global namespace.
The caller is taken from the X-User header (a stand-in for real authentication).
"""

from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import PlainTextResponse
from starlette.routing import Route

from rolebind import Resource, Role, RoleBinding, Rule, Subject, SubjectKind, new
from rolebind.adapters.starlette import require_access

USER, GROUP, SA = SubjectKind.USER, SubjectKind.GROUP, SubjectKind.SERVICE_ACCOUNT

authz = new()
authz.set_role(Role("read-states", rules=[Rule(verbs=["get", "list", "watch"], resources=["states"])]))
authz.set_role(
    Role(
        "node-watcher",
        rules=[
            Rule(verbs=["get", "list"], resources=["nodes"]),
            Rule(verbs=["patch"], resources=["states"], resource_names=["nodes"]),
        ],
    )
)
authz.set_role_binding(
    RoleBinding("states-reading-for-all", "read-states", subjects=[Subject("system:authenticated", GROUP)])
)
authz.set_role_binding(
    RoleBinding(
        "alpha-node-watchers",
        "node-watcher",
        namespace="alpha",
        subjects=[
            Subject("bofh", USER),
            Subject("administrators", GROUP),
            Subject("system:serviceaccount:alpha:my-watcher", SA),
        ],
    )
)

_USERS = {
    "stephen": [Subject("stephen", USER), Subject("administrators", GROUP)],
    "bofh": [Subject("bofh", USER), Subject("administrators", GROUP)],
    "my-watcher": [Subject("system:serviceaccount:alpha:my-watcher", SA)],
}


def authenticate(request: Request) -> list[Subject]:
    user = request.headers.get("x-user", "")
    if user not in _USERS:
        return [Subject("system:unauthenticated", GROUP)]
    return _USERS[user] + [Subject("system:authenticated", GROUP)]


def build_request(request: Request):
    namespace = request.path_params["namespace"]
    resource = Resource(
        namespace="" if namespace == "-" else namespace,
        resource="states",
        resource_name=request.path_params["name"],
    )
    return request.method.lower(), authenticate(request), resource


@require_access(authz, build_request, add_headers=True)
async def states(request: Request):
    return PlainTextResponse(str(request.state.authorization))


app = Starlette(
    routes=[Route("/states/{namespace}/{name}", states, methods=["GET", "PATCH"])]
)
