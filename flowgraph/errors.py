"""Exceptions raised by flowgraph services.

Not-found and invariant errors abort the operation before anything is
persisted. Validation never raises for data reasons; incompatible
connections are reported in results instead.
"""


class FlowGraphError(Exception):
    """Base class for every flowgraph error."""


# --- not found ---


class NotFoundError(FlowGraphError):
    """A referenced entity does not exist."""


class FlowNotFoundError(NotFoundError):
    def __init__(self, flow_id: str) -> None:
        super().__init__(f"Flow with id {flow_id} not found")
        self.flow_id = flow_id


class NodeNotFoundError(NotFoundError):
    def __init__(self, node_id: str, flow_id: str, role: str | None = None) -> None:
        label = f"{role.capitalize()} node" if role else "Node"
        super().__init__(f"{label} with id {node_id} not found in flow {flow_id}")
        self.node_id = node_id
        self.flow_id = flow_id


class ConnectionNotFoundError(NotFoundError):
    def __init__(self, connection_id: str, flow_id: str) -> None:
        super().__init__(f"Connection with id {connection_id} not found in flow {flow_id}")
        self.connection_id = connection_id
        self.flow_id = flow_id


class NodeTypeNotFoundError(NotFoundError):
    def __init__(self, node_type: str) -> None:
        super().__init__(f"Node type {node_type} not found")
        self.node_type = node_type


# --- graph invariants ---


class InvariantViolationError(FlowGraphError):
    """A mutation would leave the flow in an illegal state."""


class NameConflictError(InvariantViolationError):
    def __init__(self, name: str) -> None:
        super().__init__(f'Node with name "{name}" already exists in this flow')
        self.name = name


class InvalidTargetError(InvariantViolationError):
    def __init__(self) -> None:
        super().__init__(
            "Cannot create connection to trigger node. "
            "Trigger nodes do not accept incoming connections."
        )


class LinkConstraintError(InvariantViolationError):
    def __init__(self) -> None:
        super().__init__(
            "Link nodes can only be connected after UI nodes (interface category)."
        )


class SelfConnectionError(InvariantViolationError):
    def __init__(self) -> None:
        super().__init__("Cannot connect a node to itself")


class CycleDetectedError(InvariantViolationError):
    def __init__(self) -> None:
        super().__init__("This connection would create a circular reference")


class DuplicateConnectionError(InvariantViolationError):
    def __init__(self) -> None:
        super().__init__("This connection already exists")


# --- caller input ---


class InputError(FlowGraphError):
    """The request itself is malformed."""


class InvalidSampleError(InputError):
    """A schema sample is missing or is not valid JSON."""


class WrongNodeTypeError(InputError):
    """The operation does not apply to the node's type."""


# --- persistence ---


class FlowVersionConflictError(FlowGraphError):
    """The flow changed in the store since it was loaded."""

    def __init__(self, flow_id: str, expected: int, actual: int | None) -> None:
        super().__init__(
            f"Flow {flow_id} was modified concurrently "
            f"(expected version {expected}, found {actual})"
        )
        self.flow_id = flow_id
        self.expected = expected
        self.actual = actual
