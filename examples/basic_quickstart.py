import logging

from rolebind import Resource, Role, RoleBinding, Rule, Subject, SubjectKind, new


def main() -> None:
    logging.basicConfig(level=logging.DEBUG, format="%(name)s %(message)s")

    authz = new()
    authz.set_role(
        Role("read-states", rules=[Rule(verbs=["get", "list", "watch"], resources=["states"])])
    )
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
        RoleBinding(
            "states-reading-for-all",
            "read-states",
            subjects=[Subject("system:authenticated", SubjectKind.GROUP)],
        )
    )
    authz.set_role_binding(
        RoleBinding(
            "alpha-node-watchers",
            "node-watcher",
            namespace="alpha",
            subjects=[
                Subject("bofh", SubjectKind.USER),
                Subject("administrators", SubjectKind.GROUP),
                Subject("system:serviceaccount:alpha:my-watcher", SubjectKind.SERVICE_ACCOUNT),
            ],
        )
    )

    stephen = [
        Subject("stephen", SubjectKind.USER),
        Subject("system:authenticated", SubjectKind.GROUP),
    ]
    watcher = [Subject("system:serviceaccount:alpha:my-watcher", SubjectKind.SERVICE_ACCOUNT)]

    print(authz.evaluate("get", stephen, Resource("", "states", "-")))
    print(authz.evaluate("patch", watcher, Resource("alpha", "states", "nodes")))
    print(authz.evaluate("patch", watcher, Resource("beta", "states", "nodes")))


if __name__ == "__main__":
    main()
