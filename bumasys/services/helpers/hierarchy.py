"""
Hierarchy guards: cycle detection for parent pointers.

Two shapes of graph exist in the data model:

* Trees, where each node has at most one parent pointer
  (department → parent department, staff → supervisor, task → parent task).
  ``check_no_cycle`` walks the chain upward from the proposed parent.
* The task predecessor graph, where a task may have many predecessors.
  ``check_no_dependency_cycle`` runs an iterative DFS over the edge list.

Both are pure: they read the node lists as they exist *before* the proposed
change and raise ``CircularReferenceError`` instead of returning a flag so
services can call them inline.
"""

from bumasys.core.exceptions import CircularReferenceError


def check_no_cycle(
    nodes: list[dict],
    target_id: str,
    proposed_parent_id: str | None,
    parent_field: str,
    *,
    self_message: str,
    cycle_message: str,
) -> None:
    """Reject making ``proposed_parent_id`` the parent of ``target_id``.

    Args:
        nodes: All records of the hierarchy's collection.
        target_id: The node whose parent pointer is changing.
        proposed_parent_id: The new parent; ``None`` is always legal.
        parent_field: Name of the parent pointer on each record.
        self_message: Error text when the node would be its own parent.
        cycle_message: Error text when the walk reaches ``target_id``.

    Raises:
        CircularReferenceError: On self-reference or a would-be cycle.
    """
    if proposed_parent_id is None:
        return
    if proposed_parent_id == target_id:
        raise CircularReferenceError(self_message)

    by_id = {node["id"]: node for node in nodes}
    visited = set()
    current = proposed_parent_id
    while current is not None and current not in visited:
        if current == target_id:
            raise CircularReferenceError(cycle_message)
        visited.add(current)
        node = by_id.get(current)
        if node is None:
            break
        current = node.get(parent_field)


def chain_length(nodes: list[dict], start_id: str, parent_field: str) -> int:
    """Number of ancestors above ``start_id``; stops on a revisited node."""
    by_id = {node["id"]: node for node in nodes}
    visited = {start_id}
    steps = 0
    node = by_id.get(start_id)
    while node is not None:
        parent_id = node.get(parent_field)
        if parent_id is None or parent_id in visited:
            break
        visited.add(parent_id)
        steps += 1
        node = by_id.get(parent_id)
    return steps


def check_no_dependency_cycle(
    edges: list[dict],
    task_id: str,
    new_predecessor_id: str,
    *,
    message: str,
) -> None:
    """Check that adding ``new_predecessor_id → task_id`` keeps the graph acyclic.

    Uses iterative DFS from ``new_predecessor_id``, walking backwards through
    existing predecessor chains. Reaching ``task_id`` means ``task_id`` is
    already an (indirect) predecessor of the new predecessor.
    """
    predecessors: dict[str, list[str]] = {}
    for edge in edges:
        predecessors.setdefault(edge["task_id"], []).append(edge["predecessor_task_id"])

    visited = set()
    stack = [new_predecessor_id]
    while stack:
        current = stack.pop()
        if current == task_id:
            raise CircularReferenceError(message)
        if current in visited:
            continue
        visited.add(current)
        stack.extend(predecessors.get(current, ()))
