"""
L1 Domain — Dependency graph utilities (pure).

Cycle detection for the auxiliary dependency graph. The batch planner
only ever moves packages later, so it would loop forever on a cycle;
these helpers let it fail fast instead.
No I/O, no subprocess.
"""

from __future__ import annotations


def strongly_connected_components(graph: dict[str, list[str]]) -> list[list[str]]:
    """Tarjan's algorithm, iterative.

    Args:
        graph: Adjacency map ``node -> nodes it depends on``. Edges to
            nodes missing from the map are ignored.

    Returns:
        Components in reverse topological order (dependencies first);
        nodes inside a component keep discovery order.
    """
    index_of: dict[str, int] = {}
    lowlink: dict[str, int] = {}
    on_stack: set[str] = set()
    stack: list[str] = []
    components: list[list[str]] = []
    counter = 0

    for root in graph:
        if root in index_of:
            continue

        # (node, iterator over successors)
        work: list[tuple[str, int]] = [(root, 0)]
        index_of[root] = lowlink[root] = counter
        counter += 1
        stack.append(root)
        on_stack.add(root)

        while work:
            node, pos = work[-1]
            successors = [s for s in graph.get(node, []) if s in graph]

            if pos < len(successors):
                work[-1] = (node, pos + 1)
                succ = successors[pos]
                if succ not in index_of:
                    index_of[succ] = lowlink[succ] = counter
                    counter += 1
                    stack.append(succ)
                    on_stack.add(succ)
                    work.append((succ, 0))
                elif succ in on_stack:
                    lowlink[node] = min(lowlink[node], index_of[succ])
                continue

            work.pop()
            if work:
                parent = work[-1][0]
                lowlink[parent] = min(lowlink[parent], lowlink[node])

            if lowlink[node] == index_of[node]:
                component: list[str] = []
                while True:
                    member = stack.pop()
                    on_stack.discard(member)
                    component.append(member)
                    if member == node:
                        break
                component.reverse()
                components.append(component)

    return components


def _cycle_path(component: list[str], graph: dict[str, list[str]]) -> list[str]:
    """Walk edges inside ``component`` until a node repeats; return the loop."""
    members = set(component)
    path: list[str] = []
    seen: dict[str, int] = {}
    node = component[0]
    while node not in seen:
        seen[node] = len(path)
        path.append(node)
        node = next(s for s in graph.get(node, []) if s in members)
    return path[seen[node]:]


def find_cycles(graph: dict[str, list[str]]) -> list[list[str]]:
    """Return one concrete cycle per non-trivial strongly-connected component.

    A single node counts only when it depends on itself.
    """
    cycles: list[list[str]] = []
    for component in strongly_connected_components(graph):
        if len(component) > 1 or component[0] in graph.get(component[0], []):
            cycles.append(_cycle_path(component, graph))
    return cycles
