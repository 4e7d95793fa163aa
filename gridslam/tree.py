"""Trajectory tree shared by the particles and the propagation of their weights."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from typing import Any

from gridslam.geometry import OrientedPoint

WEIGHT_TOLERANCE = 0.0001


class TNode:
    """One pose in a particle's trajectory; ancestors are shared between particles."""

    __slots__ = (
        "pose",
        "weight",
        "parent",
        "childs",
        "reading",
        "gweight",
        "acc_weight",
        "visit_counter",
    )

    def __init__(
        self,
        pose: OrientedPoint,
        weight: float = 0.0,
        parent: TNode | None = None,
        childs: int = 0,
        reading: Any = None,
    ) -> None:
        self.pose = pose
        self.weight = weight
        self.parent = parent
        self.childs = childs
        self.reading = reading
        self.gweight = 0.0
        self.acc_weight = 0.0
        self.visit_counter = 0
        if parent is not None:
            parent.childs += 1

    def ancestors(self) -> Iterator[TNode]:
        """Yield this node, then each parent up to the root."""
        node: TNode | None = self
        while node is not None:
            yield node
            node = node.parent

    def _detached_copy(self) -> TNode:
        copy = TNode(self.pose, self.weight, None, self.childs, self.reading)
        copy.gweight = self.gweight
        copy.acc_weight = self.acc_weight
        copy.visit_counter = self.visit_counter
        return copy

    def __repr__(self) -> str:
        return f"TNode(pose={self.pose!r}, weight={self.weight!r}, childs={self.childs})"


def reset_tree(leaves: Sequence[TNode]) -> None:
    """Clear the accumulated weights and visit counts on every trajectory."""
    for leaf in leaves:
        for node in leaf.ancestors():
            node.acc_weight = 0.0
            node.visit_counter = 0


def _propagate(node: TNode | None, weight: float) -> float:
    while node is not None:
        node.visit_counter += 1
        node.acc_weight += weight
        if node.visit_counter > node.childs:
            raise ValueError("node visited more often than it has children")
        if node.visit_counter != node.childs:
            return 0.0
        weight = node.acc_weight
        node = node.parent
    return weight


def propagate_weights(leaves: Sequence[TNode], weights: Sequence[float]) -> float:
    """Push normalized leaf weights up the tree and return the root's weight.

    The tree must have been reset first. Raises ValueError when the leaf
    weights or the weight reaching the root do not sum to one.
    """
    if len(leaves) != len(weights):
        raise ValueError("one weight is needed per leaf")
    root_weight = 0.0
    total = 0.0
    for leaf, weight in zip(leaves, weights):
        total += weight
        leaf.acc_weight = weight
        root_weight += _propagate(leaf.parent, weight)
    if abs(total - 1.0) > WEIGHT_TOLERANCE or abs(root_weight - 1.0) > WEIGHT_TOLERANCE:
        raise ValueError(
            f"weights do not sum to one: root={root_weight} leaves={total}"
        )
    return root_weight


def update_tree_weights(leaves: Sequence[TNode], weights: Sequence[float]) -> float:
    """Normalize the weights, reset the tree and propagate; return the root's weight."""
    total = sum(weights)
    if total <= 0:
        raise ValueError("weights must have a positive sum")
    normalized = [w / total for w in weights]
    reset_tree(leaves)
    return propagate_weights(leaves, normalized)


def copy_trajectories(leaves: Sequence[TNode]) -> list[TNode]:
    """Deep-copy the trajectories, keeping shared ancestors shared in the copy.

    Each entry of ``leaves`` gets its own copy; raises ValueError when a leaf
    has children or a node's child count disagrees with the copied tree.
    """
    copies: dict[int, tuple[TNode, TNode]] = {}
    referrers: dict[int, int] = {}
    result = []
    for leaf in leaves:
        if leaf.childs:
            raise ValueError("a trajectory leaf must not have children")
        child = leaf._detached_copy()
        result.append(child)
        source_node = leaf.parent
        while source_node is not None:
            key = id(source_node)
            referrers[key] = referrers.get(key, 0) + 1
            known = copies.get(key)
            if known is not None:
                child.parent = known[1]
                break
            parent_copy = source_node._detached_copy()
            copies[key] = (source_node, parent_copy)
            child.parent = parent_copy
            child, source_node = parent_copy, source_node.parent
    for key, (source_node, _) in copies.items():
        if referrers[key] != source_node.childs:
            raise ValueError("child count does not match the copied trajectories")
    return result