import argparse
import statistics
import time

from rolebind import Authorizer, Resource, Role, RoleBinding, Rule, Subject, SubjectKind


def build(n: int) -> Authorizer:
    """n bindings; only the last one (by name) grants the benchmarked request."""
    a = Authorizer()
    a.set_role(Role("reader", rules=[Rule(verbs=["get", "list"], resources=["doc"])]))
    a.set_role(Role("other", rules=[Rule(verbs=["delete"], resources=["doc"])]))
    for i in range(n - 1):
        a.set_role_binding(
            RoleBinding(f"rb-{i:06d}", "other", subjects=[Subject(f"g-{i}", SubjectKind.GROUP)])
        )
    a.set_role_binding(
        RoleBinding("zz-readers", "reader", subjects=[Subject("readers", SubjectKind.GROUP)])
    )
    return a


def run(size: int, iters: int):
    a = build(size)
    subjects = [Subject("u", SubjectKind.USER), Subject("readers", SubjectKind.GROUP)]
    r = Resource(resource="doc")
    lat = []
    for _ in range(iters):
        t0 = time.perf_counter()
        res = a.evaluate("get", subjects, r)
        lat.append((time.perf_counter() - t0) * 1000.0)
    return {
        "p50": statistics.median(lat),
        "avg": sum(lat) / len(lat),
        "p90": percentile(lat, 90),
        "allowed": res.success,
    }


def percentile(arr, p):
    arr2 = sorted(arr)
    k = int(round((p / 100.0) * (len(arr2) - 1)))
    return arr2[k]


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--sizes", type=int, nargs="+", default=[10, 50, 100, 500, 1000])
    ap.add_argument("--iters", type=int, default=200)
    args = ap.parse_args()
    print("size,avg_ms,p50_ms,p90_ms,allowed")
    for s in args.sizes:
        r = run(s, args.iters)
        print(f"{s},{r['avg']:.3f},{r['p50']:.3f},{r['p90']:.3f},{r['allowed']}")


if __name__ == "__main__":
    main()
