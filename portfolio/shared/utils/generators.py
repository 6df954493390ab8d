"""Identifier generators for workflows, execution logs, comments and change records."""

from cuid2 import cuid_wrapper

cuid_generator = cuid_wrapper()


def generate_cuid() -> str:
    """Generate a collision-resistant unique identifier (CUID2).

    Returns:
        A new CUID string.

    Raises:
        TypeError: If the underlying generator returns a non-string.
    """
    result = cuid_generator()
    if not isinstance(result, str):
        raise TypeError(
            f"Expected str from cuid_generator, got {type(result).__name__}"
        )
    return result


def generate_prefixed_id(prefix: str) -> str:
    """Return ``{prefix}_{cuid}`` (e.g. ``wf_...`` for workflows, ``log_...`` for runs)."""
    return f"{prefix}_{generate_cuid()}"
