"""
Abstract base class for decision sources.

Every nondeterministic choice the generator makes goes through a
DecisionSource, so random generation and fully scripted generation use the
same engine. Implementations are per-call objects: a source may keep state
(a random generator, a script cursor) but must not be shared between
concurrent generate() calls.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Sequence


class DecisionKind(Enum):
    """The kinds of question a generator asks."""
    ALTERNATIVE = "alternative"
    REPETITION = "repetition"
    OPTIONAL = "optional"
    CODEPOINT = "codepoint"


@dataclass(frozen=True)
class RepetitionSite:
    """
    Identifies one repetition encountered during a generate call.

    `index` counts repetition sites in the order they are reached, starting
    at 0, so callers can target "the first repetition" specifically.
    `production` is the enclosing production's name.
    """
    index: int
    production: Optional[str] = None


@dataclass(frozen=True)
class Decision:
    """
    One answer in a decision script.

    Build entries with the helpers below rather than directly:

        [Decision.include(), Decision.pick(1), Decision.repeat(3, on=0)]
    """
    kind: DecisionKind
    value: Any
    occurrence: Optional[int] = None

    @classmethod
    def pick(cls, index: int) -> 'Decision':
        """Choose branch `index` of an alternative."""
        return cls(DecisionKind.ALTERNATIVE, index)

    @classmethod
    def include(cls) -> 'Decision':
        """Expand an optional rule."""
        return cls(DecisionKind.OPTIONAL, True)

    @classmethod
    def skip(cls) -> 'Decision':
        """Leave an optional rule out."""
        return cls(DecisionKind.OPTIONAL, False)

    @classmethod
    def repeat(cls, count: int, on: Optional[int] = None) -> 'Decision':
        """
        Repeat `count` times.

        Args:
            count: Number of repetitions
            on: Repetition site index this answer is reserved for; None means
                the next repetition asked for in script order
        """
        return cls(DecisionKind.REPETITION, count, on)

    @classmethod
    def codepoint(cls, codepoint: int | str) -> 'Decision':
        """Choose a code point (an int, or a one-character string)."""
        if isinstance(codepoint, str):
            if len(codepoint) != 1:
                raise ValueError(f"Expected a single code point, got {codepoint!r}")
            codepoint = ord(codepoint)
        return cls(DecisionKind.CODEPOINT, codepoint)

    def __str__(self) -> str:
        if self.kind == DecisionKind.CODEPOINT:
            return f"codepoint(U+{self.value:04X})"
        if self.occurrence is not None:
            return f"{self.kind.value}({self.value}, on={self.occurrence})"
        return f"{self.kind.value}({self.value})"


class DecisionSource(ABC):
    """
    Abstract base class for decision sources.

    The generator validates every answer against the bounds it offered and
    raises InvalidDecision when an implementation answers out of range.
    """

    @abstractmethod
    def pick_alternative(self, count: int) -> int:
        """
        Choose one of `count` alternatives.

        Returns:
            Branch index in range(count)
        """
        pass

    @abstractmethod
    def pick_repetition_count(
        self,
        minimum: int,
        maximum: Optional[int],
        site: RepetitionSite,
    ) -> int:
        """
        Choose how many times a repetition is expanded.

        Args:
            minimum: Lower bound, inclusive
            maximum: Upper bound, inclusive, or None when unbounded
            site: Which repetition is being asked about

        Returns:
            A count with minimum <= count (<= maximum when bounded)
        """
        pass

    @abstractmethod
    def include_optional(self) -> bool:
        """Decide whether an optional rule is expanded."""
        pass

    @abstractmethod
    def pick_codepoint(self, codepoints: Sequence[int]) -> int:
        """
        Choose one code point.

        Args:
            codepoints: The ordered, non-empty candidates

        Returns:
            One element of `codepoints`
        """
        pass

    @property
    @abstractmethod
    def source_name(self) -> str:
        """Short name of this strategy (e.g. 'random', 'scripted')."""
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"
