"""DynamoDB adapter — placeholder binding for filter expressions.

Filter expressions are written with positional placeholders::

    "$ = ? AND Price > ?"   with args ("Status", "active", 10)

``?`` binds a value, ``$`` binds an attribute name; both are consumed from
*args* left to right. The result is a DynamoDB expression using
``:<prefix>N`` / ``#<prefix>N`` substitutions.
"""

from __future__ import annotations

import dataclasses
from typing import Any, Sequence

from dynamo_eventstore.application.event_sourcing.codec import to_attribute_map


@dataclasses.dataclass(frozen=True)
class BoundExpression:
    expression: str
    names: dict[str, str] = dataclasses.field(default_factory=dict)
    values: dict[str, Any] = dataclasses.field(default_factory=dict)

    def as_params(self, key: str) -> dict[str, Any]:
        """Return ``{key: expression, ExpressionAttributeNames/Values: ...}``."""
        params: dict[str, Any] = {key: self.expression}
        if self.names:
            params["ExpressionAttributeNames"] = dict(self.names)
        if self.values:
            params["ExpressionAttributeValues"] = dict(self.values)
        return params


def bind(expression: str, args: Sequence[Any], *, prefix: str = "p") -> BoundExpression:
    """Replace ``?`` / ``$`` placeholders in *expression* with bound *args*.

    Raises ``ValueError`` when the placeholder count and ``len(args)`` differ,
    ``TypeError`` when a value cannot be stored in DynamoDB.
    """
    parts: list[str] = []
    names: dict[str, str] = {}
    raw_values: dict[str, Any] = {}
    index = 0
    for char in expression:
        if char not in "?$":
            parts.append(char)
            continue
        if index >= len(args):
            raise ValueError(f"not enough arguments for expression {expression!r}")
        if char == "?":
            placeholder = f":{prefix}{index}"
            raw_values[placeholder] = args[index]
        else:
            placeholder = f"#{prefix}{index}"
            names[placeholder] = str(args[index])
        parts.append(placeholder)
        index += 1
    if index != len(args):
        raise ValueError(
            f"expression {expression!r} has {index} placeholders, got {len(args)} arguments"
        )
    return BoundExpression("".join(parts), names, to_attribute_map(raw_values))


def merge(*bound: BoundExpression) -> tuple[dict[str, str], dict[str, Any]]:
    """Union of the names and values of several bound expressions."""
    names: dict[str, str] = {}
    values: dict[str, Any] = {}
    for b in bound:
        names.update(b.names)
        values.update(b.values)
    return names, values


__all__ = ["BoundExpression", "bind", "merge"]
