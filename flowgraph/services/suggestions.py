"""Transformer suggestions for incompatible connections. Advisory only."""

from flowgraph.models.validation import (
    CompatibilityStatus,
    SuggestedTransformer,
    TransformerConfidence,
)
from flowgraph.registry.definitions import (
    CODE_TRANSFORM_NODE_TYPE,
    NodeCategory,
    NodeTypeRegistry,
)


def suggest_transformers(
    status: CompatibilityStatus,
    registry: NodeTypeRegistry,
) -> list[SuggestedTransformer]:
    """Transform node types that could repair a connection with this status.

    Nothing is suggested for compatible or unknown connections. The code
    transform can reshape anything, so it is always ranked high and
    listed first.
    """
    if status not in (CompatibilityStatus.warning, CompatibilityStatus.error):
        return []

    suggestions = [
        SuggestedTransformer(
            node_type=definition.name,
            display_name=definition.display_name,
            description=definition.description,
            confidence=(
                TransformerConfidence.high
                if definition.name == CODE_TRANSFORM_NODE_TYPE
                else TransformerConfidence.medium
            ),
        )
        for definition in registry.by_category(NodeCategory.transform)
    ]
    suggestions.sort(key=lambda s: s.confidence != TransformerConfidence.high)
    return suggestions
