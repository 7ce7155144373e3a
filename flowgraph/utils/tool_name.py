"""Unique tool names for trigger nodes.

A trigger node is exposed to the outside world as a named tool, so its
tool name must be unique across every flow of the owning app, not just
within a single flow.
"""

from collections.abc import Iterable

from flowgraph.models.flow import Flow
from flowgraph.registry.definitions import TRIGGER_NODE_TYPE
from flowgraph.utils.naming import to_snake_case, with_numeric_suffix


def _collect_tool_names(flows: Iterable[Flow], exclude_node_id: str | None) -> set[str]:
    names: set[str] = set()
    for flow in flows:
        for node in flow.nodes or []:
            if node.type != TRIGGER_NODE_TYPE or node.id == exclude_node_id:
                continue
            tool_name = node.parameters.get("tool_name")
            if tool_name:
                names.add(tool_name)
    return names


def tool_name_exists(
    tool_name: str,
    flows: Iterable[Flow],
    exclude_node_id: str | None = None,
) -> bool:
    """Check whether a trigger node in any of the flows already uses tool_name."""
    return tool_name in _collect_tool_names(flows, exclude_node_id)


def generate_unique_tool_name(
    name: str,
    flows: Iterable[Flow],
    exclude_node_id: str | None = None,
) -> str:
    """Derive a snake_case tool name from a node name, suffixed until unique.

    Args:
        name: the node's display name
        flows: every flow belonging to the same app
        exclude_node_id: node to ignore, used when renaming an existing node
    """
    base = to_snake_case(name) or "tool"
    return with_numeric_suffix(base, _collect_tool_names(flows, exclude_node_id))
