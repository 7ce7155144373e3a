"""Utility functions for flowgraph."""

from flowgraph.utils.identifiers import (
    generate_connection_id,
    generate_flow_id,
    generate_node_id,
    utc_timestamp,
)
from flowgraph.utils.naming import generate_unique_slug, to_snake_case
from flowgraph.utils.tool_name import generate_unique_tool_name, tool_name_exists

__all__ = [
    "generate_connection_id",
    "generate_flow_id",
    "generate_node_id",
    "utc_timestamp",
    "generate_unique_slug",
    "to_snake_case",
    "generate_unique_tool_name",
    "tool_name_exists",
]
