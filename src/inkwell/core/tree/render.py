"""Render a display tree as indented text."""

import io

from inkwell.core.tree.builder import TreeNode


def render_tree(
    node: TreeNode,
    *,
    max_depth: int | None = None,
    show_ids: bool = False,
) -> str:
    """Render a node and its descendants, one line per node.

    Args:
        node: The node to start rendering from.
        max_depth: Max levels below the start node to include (None = unlimited).
        show_ids: Append document ids to document lines.

    Returns:
        Text with four spaces of indentation per level.
    """
    out = io.StringIO()

    def walk(current: TreeNode, depth: int) -> None:
        indent = "    " * depth
        line = f"{indent}{current.icon} {current.name}"
        if show_ids and current.document_id:
            line += f"  [{current.document_id}]"
        out.write(line + "\n")

        if not current.children:
            return
        if max_depth is not None and depth >= max_depth:
            noun = "child" if len(current.children) == 1 else "children"
            out.write(f"{indent}    ... ({len(current.children)} more {noun})\n")
            return
        for child in current.children:
            walk(child, depth + 1)

    walk(node, 0)
    return out.getvalue()
