"""
Category tree construction.

Turns the flat, tenant-scoped category list into a parent/child forest
for nested navigation and editing screens. Pure transformation: no
session, no cache, nothing is written back.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

logger = logging.getLogger(__name__)

CATEGORY_FIELDS = ('id', 'tenant_id', 'name', 'type', 'parent_id', 'created_at', 'updated_at')


class CategoryNode:
    """
    A category augmented with its direct children.

    Built from either a Category model or a plain dict (the shape cached
    in Redis). children is always a list, empty for leaves.
    """

    def __init__(self, category: Any):
        for field in CATEGORY_FIELDS:
            if isinstance(category, dict):
                value = category.get(field)
            else:
                value = getattr(category, field, None)
            setattr(self, field, value)
        self.children: List['CategoryNode'] = []

    def __repr__(self):
        return f"<CategoryNode(id={self.id}, name='{self.name}', children={len(self.children)})>"

    def to_dict(self) -> Dict[str, Any]:
        data = {}
        for field in CATEGORY_FIELDS:
            value = getattr(self, field)
            if hasattr(value, 'isoformat'):
                value = value.isoformat()
            data[field] = value
        data['children'] = [child.to_dict() for child in self.children]
        return data


def build_category_tree(categories: Iterable[Any]) -> List[CategoryNode]:
    """
    Build the category forest from a flat list.

    Args:
        categories: Category rows (models or dicts), each with a unique id
            and an optional parent_id. Children keep the input order, so a
            name-sorted input gives name-sorted siblings.

    Returns:
        Root nodes. A category is a root when its parent_id is null, points
        to an id missing from the input, or points to itself.

    Parent chains that loop (A -> B -> A) leave every member unreachable
    from the roots, along with any branch hanging off the loop. Walking up
    from the first unreachable category in input order, the first category
    met twice sits on the loop: it is promoted to a root. Branches hanging
    off the loop stay under their parents, and every input category shows
    up exactly once in the forest.
    """
    nodes: Dict[Any, CategoryNode] = {}
    order: List[CategoryNode] = []
    for category in categories:
        node = CategoryNode(category)
        nodes[node.id] = node
        order.append(node)

    roots: List[CategoryNode] = []
    for node in order:
        parent_id = node.parent_id
        if parent_id is not None and parent_id == node.id:
            logger.warning(f"[TREE] Category {node.id} is its own parent, treated as root")
            roots.append(node)
        elif parent_id is not None and parent_id in nodes:
            nodes[parent_id].children.append(node)
        else:
            roots.append(node)

    reached = _collect_ids(roots)
    if len(reached) < len(order):
        _break_cycles(order, nodes, roots, reached)

    return roots


def _collect_ids(roots: Iterable[CategoryNode], reached: Optional[set] = None) -> set:
    """Ids of every node reachable from roots."""
    reached = set() if reached is None else reached
    stack = list(roots)
    while stack:
        node = stack.pop()
        if node.id in reached:
            continue
        reached.add(node.id)
        stack.extend(node.children)
    return reached


def _break_cycles(order: List[CategoryNode], nodes: Dict[Any, CategoryNode],
                  roots: List[CategoryNode], reached: set) -> None:
    for node in order:
        if node.id in reached:
            continue
        on_cycle = _find_cycle_member(node, nodes)
        parent = nodes[on_cycle.parent_id]
        parent.children = [child for child in parent.children if child is not on_cycle]
        roots.append(on_cycle)
        logger.warning(
            f"[TREE] Cycle in parent chain of category {on_cycle.id} "
            f"(parent {on_cycle.parent_id}), promoted to root"
        )
        _collect_ids([on_cycle], reached)


def _find_cycle_member(node: CategoryNode, nodes: Dict[Any, CategoryNode]) -> CategoryNode:
    """Follow parent_id up from an unreachable node until an id repeats."""
    seen = set()
    current = node
    while current.id not in seen:
        seen.add(current.id)
        current = nodes[current.parent_id]
    return current


def flatten_tree(roots: Iterable[CategoryNode]) -> List[CategoryNode]:
    """Pre-order traversal of the forest."""
    flat: List[CategoryNode] = []

    def visit(node: CategoryNode) -> None:
        flat.append(node)
        for child in node.children:
            visit(child)

    for root in roots:
        visit(root)
    return flat
