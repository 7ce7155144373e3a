"""ID generation and timestamp utilities."""

import uuid
from datetime import datetime, timezone


def generate_flow_id() -> str:
    """Generate a unique flow ID (UUID4)."""
    return str(uuid.uuid4())


def generate_node_id() -> str:
    """Generate a unique node instance ID (UUID4)."""
    return str(uuid.uuid4())


def generate_connection_id() -> str:
    """Generate a unique connection ID (UUID4)."""
    return str(uuid.uuid4())


def utc_timestamp() -> str:
    """Generate an ISO8601 UTC timestamp."""
    return datetime.now(timezone.utc).isoformat()
