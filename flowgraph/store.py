"""Whole-document flow storage.

Services load a flow, mutate it in memory and save it back in one write.
``save`` is guarded by the flow's ``version``: it succeeds only if the
stored version still equals the loaded one, then increments it, so a
concurrent update surfaces as FlowVersionConflictError instead of being
silently overwritten.
"""

from typing import Protocol

from flowgraph.errors import FlowNotFoundError, FlowVersionConflictError
from flowgraph.models.flow import Flow
from flowgraph.utils.identifiers import utc_timestamp


class FlowStore(Protocol):
    """Protocol for loading and saving flow documents."""

    def load(self, flow_id: str) -> Flow | None:
        """Load a flow, or None if it does not exist."""
        ...

    def save(self, flow: Flow) -> Flow:
        """Persist the full document and return it with its new version."""
        ...

    def create(self, flow: Flow) -> Flow:
        """Insert a new flow document."""
        ...

    def list_flows(self, app_id: str | None = None) -> list[Flow]:
        """List flows, optionally only those of one app."""
        ...

    def delete(self, flow_id: str) -> None:
        """Delete a flow document."""
        ...


class InMemoryFlowStore:
    """keeps flow documents in a dict, copying on every read and write."""

    def __init__(self, flows: list[Flow] | None = None) -> None:
        self._flows: dict[str, Flow] = {}
        for flow in flows or []:
            self.create(flow)

    def load(self, flow_id: str) -> Flow | None:
        flow = self._flows.get(flow_id)
        return flow.model_copy(deep=True) if flow else None

    def save(self, flow: Flow) -> Flow:
        stored = self._flows.get(flow.flow_id)
        if stored is None:
            raise FlowNotFoundError(flow.flow_id)
        if stored.version != flow.version:
            raise FlowVersionConflictError(flow.flow_id, flow.version, stored.version)
        saved = flow.model_copy(
            deep=True,
            update={"version": flow.version + 1, "updated_at": utc_timestamp()},
        )
        self._flows[flow.flow_id] = saved
        return saved.model_copy(deep=True)

    def create(self, flow: Flow) -> Flow:
        if flow.flow_id in self._flows:
            raise ValueError(f"flow already exists: {flow.flow_id}")
        self._flows[flow.flow_id] = flow.model_copy(deep=True)
        return flow

    def list_flows(self, app_id: str | None = None) -> list[Flow]:
        return [
            flow.model_copy(deep=True)
            for flow in self._flows.values()
            if app_id is None or flow.app_id == app_id
        ]

    def delete(self, flow_id: str) -> None:
        self._flows.pop(flow_id, None)
