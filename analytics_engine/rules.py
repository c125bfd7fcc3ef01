"""Declarative condition -> text rule tables."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterable


@dataclass(frozen=True)
class Rule:
    """Emit ``text`` when ``condition(context)`` holds."""

    name: str
    condition: Callable[[Any], bool]
    text: str


def apply_rules(rules: Iterable[Rule], context: Any) -> list[str]:
    """Evaluate rules in table order and return the texts of those that fire."""

    return [rule.text for rule in rules if rule.condition(context)]


def merge_unique(*groups: Iterable[str]) -> tuple[str, ...]:
    """Concatenate text groups, keeping the first occurrence of each entry."""

    seen: set[str] = set()
    merged = []
    for group in groups:
        for text in group:
            if text and text not in seen:
                seen.add(text)
                merged.append(text)
    return tuple(merged)
