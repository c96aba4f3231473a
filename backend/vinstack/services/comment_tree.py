"""Two-pass assembly of flat comment rows into reply threads."""
import logging
from typing import Any, Iterable, Mapping

logger = logging.getLogger(__name__)


def build_comment_tree(
    rows: Iterable[Mapping[str, Any]],
    id_key: str = "comment_id",
    parent_key: str = "parent_id",
) -> list[dict[str, Any]]:
    """Link comment rows into a forest of root comments carrying ``replies``.

    Rows are expected in creation order; that order is kept both for the roots
    and inside every ``replies`` list. A row whose parent is not among ``rows``
    is an orphan: it is left out of the tree.
    """
    rows = list(rows)
    nodes: dict[Any, dict[str, Any]] = {}
    for row in rows:
        nodes[row[id_key]] = {**row, "replies": []}

    roots: list[dict[str, Any]] = []
    orphans = 0
    for row in rows:
        node = nodes[row[id_key]]
        parent_id = row.get(parent_key)
        if parent_id is None:
            roots.append(node)
            continue
        parent = nodes.get(parent_id)
        if parent is None:
            orphans += 1
            continue
        parent["replies"].append(node)

    if orphans:
        logger.debug("Dropped %d orphaned comment(s) whose parent is missing", orphans)
    return roots
