"""Pattern dispatch registry (core domain).

Feature modules declare at startup which text shapes they claim. Any module
can later ask who owns a message before taking an ambiguous default action,
such as creating a new record from a phrase it does not recognise.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
import re
import threading
from typing import List, Optional, Tuple, Union

LOGGER = logging.getLogger(__name__)

PatternLike = Union[str, re.Pattern]


class InvalidPatternError(ValueError):
    """Raised at registration time when a pattern cannot be compiled."""

    def __init__(self, pattern: object, owner_id: str, reason: str) -> None:
        super().__init__(f"Invalid pattern {pattern!r} for {owner_id}: {reason}")
        self.pattern = pattern
        self.owner_id = owner_id
        self.reason = reason


@dataclass(frozen=True)
class RuleSpec:
    """Registration descriptor with named fields, one per claimed text shape."""

    pattern: PatternLike
    owner_id: str
    priority: float
    exclusive: bool = False
    flags: int = 0


@dataclass(frozen=True)
class PatternRule:
    """A compiled rule. Immutable once registered."""

    pattern: re.Pattern
    owner_id: str
    priority: float
    exclusive: bool
    registration_order: int

    def matches(self, text: str) -> bool:
        return self.pattern.search(text) is not None


def _compile(pattern: PatternLike, owner_id: str, flags: int) -> re.Pattern:
    if isinstance(pattern, re.Pattern):
        if flags and (pattern.flags & flags) != flags:
            return _compile(pattern.pattern, owner_id, pattern.flags | flags)
        return pattern
    if not isinstance(pattern, str):
        raise InvalidPatternError(pattern, owner_id, "expected a string or compiled pattern")
    try:
        return re.compile(pattern, flags)
    except re.error as exc:
        raise InvalidPatternError(pattern, owner_id, str(exc)) from exc


def _precedence(rule: PatternRule) -> Tuple[float, int]:
    # Higher priority first; among equals the earliest registration wins.
    return (-rule.priority, rule.registration_order)


class DispatchRegistry:
    """Holds every registered rule and answers "who owns this text"."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        # Copy-on-write: readers iterate whatever tuple they picked up, so a
        # late registration never exposes a half-updated list.
        self._rules: Tuple[PatternRule, ...] = ()
        self._next_order = 0

    def register(
        self,
        pattern: PatternLike,
        owner_id: str,
        priority: float,
        exclusive: bool = False,
        flags: int = 0,
    ) -> PatternRule:
        """Compile and store a rule, returning it as the registration handle."""

        compiled = _compile(pattern, owner_id, flags)
        with self._lock:
            rule = PatternRule(
                pattern=compiled,
                owner_id=owner_id,
                priority=float(priority),
                exclusive=bool(exclusive),
                registration_order=self._next_order,
            )
            self._next_order += 1
            self._rules = self._rules + (rule,)
        LOGGER.debug(
            "Registered %s for %s (priority=%s, exclusive=%s)",
            compiled.pattern,
            owner_id,
            rule.priority,
            rule.exclusive,
        )
        return rule

    def register_rule(self, spec: RuleSpec) -> PatternRule:
        return self.register(
            spec.pattern,
            spec.owner_id,
            spec.priority,
            exclusive=spec.exclusive,
            flags=spec.flags,
        )

    @property
    def rules(self) -> Tuple[PatternRule, ...]:
        return self._rules

    def __len__(self) -> int:
        return len(self._rules)

    def matching_rules(self, text: str) -> List[PatternRule]:
        """Return every rule whose pattern matches, in registration order."""

        if not isinstance(text, str):
            text = "" if text is None else str(text)
        return [rule for rule in self._rules if rule.matches(text)]

    def resolve_rule(self, text: str) -> Optional[PatternRule]:
        """Return the winning rule for ``text``, or None when nothing matches.

        Every rule is evaluated. If any exclusive rule matches, only exclusive
        matches compete; otherwise all matches do. The winner has the highest
        priority, ties going to the rule registered first.
        """

        matches = self.matching_rules(text)
        if not matches:
            return None
        exclusive = [rule for rule in matches if rule.exclusive]
        candidates = exclusive or matches
        return min(candidates, key=_precedence)

    def resolve(self, text: str) -> Optional[str]:
        rule = self.resolve_rule(text)
        return rule.owner_id if rule else None

    def matches_any(self, text: str) -> bool:
        """True when some module already claims ``text``."""

        return self.resolve_rule(text) is not None
