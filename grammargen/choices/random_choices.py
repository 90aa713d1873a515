"""
Pseudo-random decision source - the default used by Generator.
"""

import random
from typing import Optional, Sequence

from .base import DecisionSource, RepetitionSite
from ..core.config import DecisionConfig


class RandomDecisionSource(DecisionSource):
    """
    Makes every choice with a seeded random.Random.

    Alternatives and code points are chosen uniformly. Repetitions follow a
    decaying continuation model: after the minimum, the first extra
    repetition happens with `continuation_probability`, and each further one
    with `repetition_decay` times the previous chance. Unbounded repetitions
    therefore stop with probability 1 without a global depth limit.
    """

    def __init__(
        self,
        seed: Optional[int] = None,
        continuation_probability: float = 0.5,
        repetition_decay: float = 0.5,
        optional_probability: float = 0.5,
        rng: Optional[random.Random] = None,
    ):
        """
        Initialize the random source.

        Args:
            seed: Seed for a private random.Random (ignored when rng is given)
            continuation_probability: Chance of the first extra repetition
            repetition_decay: Factor applied to the chance after each extra repetition
            optional_probability: Chance an optional rule is included
            rng: Random generator to use instead of a seeded private one
        """
        # Reuse the config checks so both construction paths agree
        DecisionConfig(
            seed=seed,
            continuation_probability=continuation_probability,
            repetition_decay=repetition_decay,
            optional_probability=optional_probability,
        )
        self.seed = seed
        self.continuation_probability = continuation_probability
        self.repetition_decay = repetition_decay
        self.optional_probability = optional_probability
        self._rng = rng or random.Random(seed)

    @classmethod
    def from_config(cls, config: DecisionConfig) -> 'RandomDecisionSource':
        return cls(
            seed=config.seed,
            continuation_probability=config.continuation_probability,
            repetition_decay=config.repetition_decay,
            optional_probability=config.optional_probability,
        )

    @property
    def source_name(self) -> str:
        return "random"

    def pick_alternative(self, count: int) -> int:
        return self._rng.randrange(count)

    def pick_repetition_count(
        self,
        minimum: int,
        maximum: Optional[int],
        site: RepetitionSite,
    ) -> int:
        count = minimum
        chance = self.continuation_probability
        while (maximum is None or count < maximum) and self._rng.random() < chance:
            count += 1
            chance *= self.repetition_decay
        return count

    def include_optional(self) -> bool:
        return self._rng.random() < self.optional_probability

    def pick_codepoint(self, codepoints: Sequence[int]) -> int:
        return self._rng.choice(codepoints)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(seed={self.seed})"
