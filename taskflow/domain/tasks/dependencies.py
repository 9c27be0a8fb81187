"""
Task dependency graph ("blocked by" edges)

An edge task -> blocker means the task cannot start before the blocker is
done. The graph of a user's tasks must stay acyclic.
"""

from typing import Iterable, Optional

import networkx as nx


def build_graph(edges: dict[int, set[int]]) -> nx.DiGraph:
    graph = nx.DiGraph()
    for task_id, blockers in edges.items():
        graph.add_node(task_id)
        graph.add_edges_from((task_id, blocker) for blocker in blockers)
    return graph


def find_cycle(
    edges: dict[int, set[int]], task_id: int, blocked_by: Iterable[int]
) -> Optional[list[int]]:
    """
    Check whether giving `task_id` the blockers `blocked_by` would create a cycle.

    Args:
        edges: current edges of the user's tasks, task id -> blocker ids
        task_id: the task whose blockers are being replaced
        blocked_by: the new blocker ids

    Returns:
        The cycle as a list of task ids starting and ending with task_id, or None
    """
    graph = build_graph(edges)
    if task_id in graph:
        # Old blockers are being replaced
        graph.remove_edges_from(list(graph.out_edges(task_id)))

    for blocker in dict.fromkeys(blocked_by):
        if blocker not in graph or task_id not in graph:
            continue
        try:
            path = nx.shortest_path(graph, blocker, task_id)
        except nx.NetworkXNoPath:
            continue
        return [task_id] + path

    return None


def topological_order(edges: dict[int, set[int]]) -> list[int]:
    """
    Order task ids so every blocker comes before the tasks it blocks.

    Raises:
        ValueError: If the graph contains a cycle
    """
    graph = build_graph(edges).reverse(copy=True)
    try:
        return list(nx.lexicographical_topological_sort(graph))
    except nx.NetworkXUnfeasible as e:
        raise ValueError("Task dependencies contain a cycle") from e
