"""Search tree stored as an arena of nodes addressed by integer handles.

A node owns the handles of its children; its parent handle is a lookup
only.  Re-rooting copies the kept subtree into a fresh arena, which frees
every sibling subtree of the new root in one step.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field

from rally_engine.core.action import Action, action_slot
from rally_engine.core.catalog import ActionCatalog
from rally_engine.core.state import VehicleState


@dataclass
class Node:
    """One search node.

    Attributes:
        state: Vehicle state after ``action`` was applied to the parent.
        action: Action that produced this node (``None`` for the root).
        parent: Handle of the parent node (``None`` for the root).
        children: Handles of the owned child nodes, in expansion order.
        expanded: Whether the children have been generated.
        visits: Number of rollouts backed up through this node.
        reward: Sum of the rewards backed up through this node.
    """

    state: VehicleState
    action: Action | None = None
    parent: int | None = None
    children: list[int] = field(default_factory=list)
    expanded: bool = False
    visits: int = 0
    reward: float = 0.0

    @property
    def mean_reward(self) -> float:
        return self.reward / self.visits if self.visits > 0 else 0.0


class SearchTree:
    """Arena-backed MCTS tree for a single decision.

    Attributes:
        root: Handle of the root node (always 0).
    """

    __slots__ = ("_nodes", "root")

    def __init__(self, state: VehicleState) -> None:
        self._nodes: list[Node] = [Node(state=state)]
        self.root: int = 0

    def __len__(self) -> int:
        return len(self._nodes)

    def node(self, handle: int) -> Node:
        return self._nodes[handle]

    def children(self, handle: int) -> list[Node]:
        return [self._nodes[c] for c in self._nodes[handle].children]

    def add_child(self, parent: int, action: Action, state: VehicleState) -> int:
        handle = len(self._nodes)
        self._nodes.append(Node(state=state, action=action, parent=parent))
        self._nodes[parent].children.append(handle)
        return handle

    def expand(self, handle: int, catalog: ActionCatalog) -> list[int]:
        """Materialise every child of *handle* once.

        Calling again returns the cached child handles unchanged.
        """
        node = self._nodes[handle]
        if not node.expanded:
            for action, state in catalog.expand(node.state):
                self.add_child(handle, action, state)
            node.expanded = True
        return list(node.children)

    def path_to_root(self, handle: int) -> list[int]:
        """Return handles from *handle* up to and including the root."""
        path: list[int] = []
        current: int | None = handle
        while current is not None:
            path.append(current)
            current = self._nodes[current].parent
        return path

    def backpropagate(self, handle: int, reward: float) -> None:
        """Add one visit and *reward* to *handle* and every ancestor."""
        for h in self.path_to_root(handle):
            node = self._nodes[h]
            node.visits += 1
            node.reward += reward

    def reroot(self, handle: int) -> None:
        """Make *handle* the new root, keeping its subtree statistics.

        All nodes outside the subtree are released.
        """
        remap: dict[int, int] = {}
        kept: list[Node] = []
        queue: deque[int] = deque([handle])
        while queue:
            old = queue.popleft()
            remap[old] = len(kept)
            kept.append(self._nodes[old])
            queue.extend(self._nodes[old].children)

        for node in kept:
            node.children = [remap[c] for c in node.children]
            node.parent = remap.get(node.parent) if node.parent is not None else None
        kept[0].parent = None
        kept[0].action = None

        self._nodes = kept
        self.root = 0

    def carry_statistics(self, source: SearchTree) -> int:
        """Copy root-child statistics from *source* onto this tree's root.

        Children are matched by :func:`action_slot`; the root total becomes
        the sum over its children.  This tree's root must already be
        expanded.

        Returns:
            Number of children that received statistics.
        """
        previous = {
            action_slot(child.action): child
            for child in source.children(source.root)
            if child.action is not None and child.visits > 0
        }
        root = self._nodes[self.root]
        carried = 0
        for child in self.children(self.root):
            old = previous.get(action_slot(child.action))
            if old is None:
                continue
            child.visits, child.reward = old.visits, old.reward
            carried += 1
        root.visits = sum(c.visits for c in self.children(self.root))
        root.reward = sum(c.reward for c in self.children(self.root))
        return carried
