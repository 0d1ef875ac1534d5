"""DynamoDB adapter — namespace → table name routing.

The namespace-to-table mapping is the only isolation between tenants.
"""

from __future__ import annotations

from typing import Callable

TableNameFn = Callable[[str, str], str]
"""``(table_prefix, namespace) -> table name``."""


def namespaced_table_name(table_prefix: str, namespace: str) -> str:
    """Default strategy: ``"<prefix>_<namespace>"``."""
    return f"{table_prefix}_{namespace}"


def prefix_table_name(table_prefix: str, namespace: str) -> str:  # noqa: ARG001
    """Single-table strategy: the bare prefix, namespaces share one table."""
    return table_prefix


def select_table_name(
    table_name: TableNameFn | None,
    use_prefix_as_table_name: bool,
) -> TableNameFn:
    """An explicit *table_name* wins over the prefix-only flag."""
    if table_name is not None:
        return table_name
    if use_prefix_as_table_name:
        return prefix_table_name
    return namespaced_table_name


__all__ = ["TableNameFn", "namespaced_table_name", "prefix_table_name", "select_table_name"]
