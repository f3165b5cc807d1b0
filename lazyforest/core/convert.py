"""Conversion between TreeNode forests and plain dictionaries.

External data sources often speak JSON. These helpers accept both the
camelCase ``hasChildren`` key used by browser front-ends and the
snake_case ``has_children`` key. A missing ``children`` key means the
node is unloaded; an empty list means it was loaded with no children.

Both directions use an explicit stack so that deeply nested payloads
do not hit the recursion limit.
"""

from typing import Any, Dict, List, Mapping, Sequence

from .node import Forest, TreeNode


def _has_children_flag(data: Mapping[str, Any]) -> bool:
    if 'has_children' in data:
        return bool(data['has_children'])
    return bool(data.get('hasChildren', False))


def _node_from_dict(data: Mapping[str, Any], children) -> TreeNode:
    return TreeNode(
        id=str(data['id']),
        name=str(data['name']),
        children=children,
        has_children=_has_children_flag(data) or bool(children),
    )


def forest_from_dicts(items: Sequence[Mapping[str, Any]]) -> Forest:
    """Build a forest from nested dictionaries.

    The same mapping object may appear more than once; each occurrence
    becomes its own node, so repeated ids are left for the caller's
    duplicate check.

    Args:
        items: Sequence of mappings with 'id', 'name', and optionally
            'children' and 'hasChildren'/'has_children'

    Returns:
        Tuple of root TreeNodes

    Raises:
        KeyError: If a mapping lacks 'id' or 'name'
    """
    # Frames: [owning mapping, sibling mappings, next index, built nodes]
    frames: List[list] = [[None, items, 0, []]]

    while True:
        frame = frames[-1]
        owner, siblings, index, built = frame
        if index < len(siblings):
            frame[2] = index + 1
            data = siblings[index]
            raw_children = data.get('children')
            if raw_children is None:
                built.append(_node_from_dict(data, None))
            else:
                frames.append([data, raw_children, 0, []])
            continue

        frames.pop()
        if owner is None:
            return tuple(built)
        frames[-1][3].append(_node_from_dict(owner, tuple(built)))


def forest_to_dicts(forest: Sequence[TreeNode], camel_case: bool = False) -> List[Dict[str, Any]]:
    """Convert a forest into nested dictionaries.

    Args:
        forest: Sequence of root nodes
        camel_case: Emit 'hasChildren' instead of 'has_children'

    Returns:
        List of dictionaries; unloaded nodes have no 'children' key
    """
    flag_key = 'hasChildren' if camel_case else 'has_children'
    roots: List[Dict[str, Any]] = []
    stack = [(node, roots) for node in reversed(forest)]

    while stack:
        node, target = stack.pop()
        entry: Dict[str, Any] = {'id': node.id, 'name': node.name, flag_key: node.has_children}
        target.append(entry)
        if node.children is not None:
            entry['children'] = []
            stack.extend((child, entry['children']) for child in reversed(node.children))

    return roots
