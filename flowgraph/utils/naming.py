"""Name normalization helpers shared by slugs and tool names."""

import re

_DISALLOWED_CHARS = re.compile(r"[^a-z0-9\s_]")


def to_snake_case(name: str) -> str:
    """Convert a display name into a snake_case identifier.

    "My Tool! @#$ Name" becomes "my_tool_name". Characters other than ASCII
    letters, digits, whitespace and underscores are dropped.
    """
    cleaned = _DISALLOWED_CHARS.sub("", name.lower())
    return "_".join(cleaned.split())


def with_numeric_suffix(base: str, taken: set[str]) -> str:
    """Return base, or base_2, base_3, ... whichever is first not in taken."""
    if base not in taken:
        return base
    suffix = 2
    while f"{base}_{suffix}" in taken:
        suffix += 1
    return f"{base}_{suffix}"


def generate_unique_slug(name: str, existing_slugs: set[str]) -> str:
    """Generate a slug for a node name that is unique among existing_slugs."""
    base = to_snake_case(name) or "node"
    # template references must start with a letter
    if not base[0].isalpha():
        base = f"node_{base}"
    return with_numeric_suffix(base, existing_slugs)
