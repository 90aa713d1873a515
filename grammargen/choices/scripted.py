"""
Deterministic decision sources for tests and replay.

ScriptedDecisionSource answers from a fixed list of Decisions and never
falls back to randomness. RecordingDecisionSource wraps any other source and
writes down what it answered, so a random run can be replayed exactly.
"""

from collections import deque
from typing import Dict, Iterable, List, Optional, Sequence

from .base import Decision, DecisionKind, DecisionSource, RepetitionSite
from ..errors import InvalidDecision, ScriptExhausted, ScriptMismatch


class ScriptedDecisionSource(DecisionSource):
    """
    Decision source that replays a script.

    Un-keyed decisions are consumed strictly in order. Repetition decisions
    created with `Decision.repeat(n, on=k)` are reserved for repetition site
    k and used whenever that site is reached, regardless of position.
    """

    def __init__(self, decisions: Iterable[Decision] = ()):
        """
        Initialize the scripted source.

        Args:
            decisions: The script, in the order questions will be asked
        """
        self._queue: deque = deque()
        self._keyed: Dict[int, Decision] = {}
        for decision in decisions:
            if not isinstance(decision, Decision):
                raise TypeError(f"Script entries must be Decision, got {type(decision).__name__}")
            if decision.occurrence is not None:
                if decision.kind != DecisionKind.REPETITION:
                    raise ValueError(f"Only repetition decisions can target a site: {decision}")
                if decision.occurrence in self._keyed:
                    raise ValueError(
                        f"Repetition site {decision.occurrence} is scripted twice"
                    )
                self._keyed[decision.occurrence] = decision
            else:
                self._queue.append(decision)
        self._consumed = 0

    @property
    def source_name(self) -> str:
        return "scripted"

    @property
    def remaining(self) -> int:
        """Number of decisions not yet used."""
        return len(self._queue) + len(self._keyed)

    def _next(self, kind: DecisionKind) -> Decision:
        if not self._queue:
            raise ScriptExhausted(kind.value, self._consumed)
        decision = self._queue[0]
        if decision.kind != kind:
            raise ScriptMismatch(kind.value, str(decision), self._consumed)
        self._queue.popleft()
        self._consumed += 1
        return decision

    def pick_alternative(self, count: int) -> int:
        return self._next(DecisionKind.ALTERNATIVE).value

    def pick_repetition_count(
        self,
        minimum: int,
        maximum: Optional[int],
        site: RepetitionSite,
    ) -> int:
        decision = self._keyed.pop(site.index, None)
        if decision is not None:
            self._consumed += 1
            return decision.value
        return self._next(DecisionKind.REPETITION).value

    def include_optional(self) -> bool:
        return bool(self._next(DecisionKind.OPTIONAL).value)

    def pick_codepoint(self, codepoints: Sequence[int]) -> int:
        decision = self._next(DecisionKind.CODEPOINT)
        if decision.value not in codepoints:
            raise InvalidDecision(
                f"Scripted {decision} is not among the {len(codepoints)} offered code points"
            )
        return decision.value

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(remaining={self.remaining})"


class RecordingDecisionSource(DecisionSource):
    """
    Forwards every question to another source and records the answers.

    The recorded list can be handed to ScriptedDecisionSource to reproduce
    the same derivation.
    """

    def __init__(self, inner: DecisionSource):
        self.inner = inner
        self.decisions: List[Decision] = []

    @property
    def source_name(self) -> str:
        return f"recording({self.inner.source_name})"

    def pick_alternative(self, count: int) -> int:
        index = self.inner.pick_alternative(count)
        self.decisions.append(Decision.pick(index))
        return index

    def pick_repetition_count(
        self,
        minimum: int,
        maximum: Optional[int],
        site: RepetitionSite,
    ) -> int:
        count = self.inner.pick_repetition_count(minimum, maximum, site)
        self.decisions.append(Decision.repeat(count))
        return count

    def include_optional(self) -> bool:
        included = self.inner.include_optional()
        self.decisions.append(Decision.include() if included else Decision.skip())
        return included

    def pick_codepoint(self, codepoints: Sequence[int]) -> int:
        codepoint = self.inner.pick_codepoint(codepoints)
        self.decisions.append(Decision.codepoint(codepoint))
        return codepoint

    def replay(self) -> ScriptedDecisionSource:
        """A scripted source that answers exactly as this one did."""
        return ScriptedDecisionSource(self.decisions)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.inner!r}, recorded={len(self.decisions)})"
