"""Template variable helpers.

Node parameters may reference upstream outputs with ``{{ slug.path }}``,
where ``slug`` is a node slug and ``path`` a dotted field path.
"""

import re
from typing import Any

# {{ slug }} or {{ slug.path.to.field }}, whitespace tolerated
TEMPLATE_PATTERN = re.compile(r"\{\{([^}]+)\}\}")


def resolve_template_variables(
    template: str,
    mock_values: dict[str, Any] | None,
) -> tuple[str, list[str]]:
    """Substitute template variables using mock values keyed by node slug.

    Returns the resolved string and the variable paths that could not be
    resolved. Unresolved placeholders are left in place.
    """
    unresolved: list[str] = []

    def _replace(match: re.Match) -> str:
        var_path = match.group(1).strip()
        parts = var_path.split(".")
        root_key = parts[0]

        if not mock_values or root_key not in mock_values:
            unresolved.append(var_path)
            return match.group(0)

        value: Any = mock_values[root_key]
        for part in parts[1:]:
            if isinstance(value, dict):
                value = value.get(part)
            else:
                value = None
            if value is None:
                break

        if value is None:
            unresolved.append(var_path)
            return match.group(0)
        return str(value)

    resolved = TEMPLATE_PATTERN.sub(_replace, template)
    return resolved, unresolved


def replace_slug_references(text: str, old_slug: str, new_slug: str) -> str:
    """Rewrite ``{{ old_slug.`` references to point at new_slug."""
    pattern = re.compile(r"\{\{\s*" + re.escape(old_slug) + r"\.")
    return pattern.sub("{{ " + new_slug + ".", text)
