"""
Rule Engine - runs independent advisory rules over a finished scan.

Design:
- Rules are plain functions registered with the @registry.rule(id) decorator
- Registration order is evaluation order and output order
- Every rule sees the same immutable input; no rule sees another's output
- A rule returns None when its condition is unmet
- A rule that blows up on unexpected data is logged and skipped
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, Iterator, TypeVar

import structlog

logger = structlog.get_logger(__name__)

In = TypeVar("In")
Out = TypeVar("Out")


# ─────────────────────────────────────────────
# Rule Schema
# ─────────────────────────────────────────────

@dataclass(frozen=True)
class Rule(Generic[In, Out]):
    id: str
    fn: Callable[[In], Out | None]
    description: str = ""

    def __call__(self, data: In) -> Out | None:
        return self.fn(data)


# ─────────────────────────────────────────────
# Rule Registry
# ─────────────────────────────────────────────

class RuleRegistry(Generic[In, Out]):
    """Ordered collection of rules; ids are unique."""

    def __init__(self, name: str):
        self.name = name
        self._rules: dict[str, Rule[In, Out]] = {}

    def register(self, rule: Rule[In, Out]) -> Rule[In, Out]:
        if rule.id in self._rules:
            raise ValueError(f"Rule '{rule.id}' is already registered in {self.name}")
        self._rules[rule.id] = rule
        return rule

    def rule(self, rule_id: str) -> Callable[[Callable[[In], Out | None]], Callable[[In], Out | None]]:
        """Decorator: register ``fn`` under ``rule_id`` and return it unchanged."""
        def decorator(fn: Callable[[In], Out | None]) -> Callable[[In], Out | None]:
            self.register(Rule(id=rule_id, fn=fn, description=(fn.__doc__ or "").strip()))
            return fn
        return decorator

    def get_by_id(self, rule_id: str) -> Rule[In, Out] | None:
        return self._rules.get(rule_id)

    def get_all(self) -> list[Rule[In, Out]]:
        return list(self._rules.values())

    def __iter__(self) -> Iterator[Rule[In, Out]]:
        return iter(self._rules.values())

    def __len__(self) -> int:
        return len(self._rules)


# ─────────────────────────────────────────────
# Rule Evaluator
# ─────────────────────────────────────────────

class RuleEvaluator(Generic[In, Out]):
    """Runs every rule in a registry and collects the non-None results."""

    def __init__(self, registry: RuleRegistry[In, Out]):
        self.registry = registry

    def evaluate_rule(self, rule: Rule[In, Out], data: In) -> Out | None:
        try:
            return rule(data)
        except (TypeError, AttributeError, ValueError) as e:
            logger.warning(
                "Rule evaluation error",
                registry=self.registry.name,
                rule=rule.id,
                error=str(e),
            )
            return None

    def evaluate(self, data: In) -> list[Out]:
        results = []
        for rule in self.registry:
            result = self.evaluate_rule(rule, data)
            if result is not None:
                results.append(result)
        logger.debug(
            "Rules evaluated",
            registry=self.registry.name,
            rules=len(self.registry),
            fired=len(results),
        )
        return results
