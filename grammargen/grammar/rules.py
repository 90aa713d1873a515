"""
Grammar rule model - the closed set of rule variants productions are built from.

Rules are immutable values. They may be shared freely between productions
and grammars; recursion only happens through NonTerminal names, which the
Grammar resolves.
"""

from dataclasses import dataclass, field
from typing import Iterator, Tuple, Union, FrozenSet


@dataclass(frozen=True)
class Literal:
    """Text emitted verbatim."""
    text: str

    def __post_init__(self):
        if not isinstance(self.text, str):
            raise TypeError(f"Literal text must be str, got {type(self.text).__name__}")


@dataclass(frozen=True)
class Sequence:
    """Rules expanded one after the other, in declared order."""
    items: Tuple['Rule', ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "items", tuple(self.items))


@dataclass(frozen=True)
class Alternative:
    """A choice point; exactly one branch is expanded."""
    items: Tuple['Rule', ...]

    def __post_init__(self):
        object.__setattr__(self, "items", tuple(self.items))
        if len(self.items) < 2:
            raise ValueError("Alternative needs at least two branches")


@dataclass(frozen=True)
class Optional:
    """A rule expanded zero or one time."""
    item: 'Rule'


@dataclass(frozen=True)
class Repetition:
    """A rule expanded between `min` and `max` times (max=None is unbounded)."""
    item: 'Rule'
    min: int = 0
    max: int | None = None

    def __post_init__(self):
        if self.min < 0:
            raise ValueError(f"Repetition minimum must be >= 0, got {self.min}")
        if self.max is not None and self.max < self.min:
            raise ValueError(
                f"Repetition maximum {self.max} is below minimum {self.min}"
            )


@dataclass(frozen=True)
class NonTerminal:
    """Reference to another production, by name."""
    name: str


@dataclass(frozen=True)
class CharacterSet:
    """One code point drawn from a named character class, minus exclusions."""
    name: str
    exclude: FrozenSet[int] = field(default_factory=frozenset)


Rule = Union[Literal, Sequence, Alternative, Optional, Repetition, NonTerminal, CharacterSet]

RULE_TYPES = (Literal, Sequence, Alternative, Optional, Repetition, NonTerminal, CharacterSet)


# --- Convenience constructors ---

def _check_rules(rules) -> Tuple[Rule, ...]:
    for rule in rules:
        if not isinstance(rule, RULE_TYPES):
            raise TypeError(f"Expected a grammar rule, got {type(rule).__name__}: {rule!r}")
    return tuple(rules)


def _one(rules) -> Rule:
    """Collapse several rules into one, wrapping in a Sequence when needed."""
    rules = _check_rules(rules)
    if not rules:
        raise ValueError("At least one rule is required")
    if len(rules) == 1:
        return rules[0]
    return Sequence(rules)


def literal(text: str) -> Literal:
    return Literal(text)


def sequence(*rules: Rule) -> Sequence:
    return Sequence(_check_rules(rules))


def epsilon() -> Sequence:
    """The empty rule: matches (and generates) nothing."""
    return Sequence(())


def alternative(*rules: Rule) -> Rule:
    """A choice between rules; a single rule is returned unchanged."""
    rules = _check_rules(rules)
    if len(rules) == 1:
        return rules[0]
    return Alternative(rules)


def non_terminal(name: str) -> NonTerminal:
    return NonTerminal(name)


def optional(*rules: Rule) -> Optional:
    return Optional(_one(rules))


def zero_or_more(*rules: Rule) -> Repetition:
    return Repetition(_one(rules), 0, None)


def one_or_more(*rules: Rule) -> Repetition:
    return Repetition(_one(rules), 1, None)


def repeat(minimum: int, *rules: Rule, maximum: int | None = None) -> Repetition:
    return Repetition(_one(rules), minimum, maximum)


def characters_of_set(name: str, exclude=()) -> CharacterSet:
    """
    Reference a named character class.

    Args:
        name: Registry name of the class (e.g. "TAB", "Lu")
        exclude: Code points, or one-character strings, to leave out

    Returns:
        CharacterSet rule
    """
    excluded = set()
    for item in exclude:
        if isinstance(item, str):
            if len(item) != 1:
                raise ValueError(f"Excluded characters must be single code points, got {item!r}")
            item = ord(item)
        excluded.add(item)
    return CharacterSet(name, frozenset(excluded))


# --- Traversal ---

def walk(rule: Rule) -> Iterator[Rule]:
    """Yield `rule` and every rule nested inside it, depth first.

    Does not follow NonTerminal references.
    """
    stack = [rule]
    while stack:
        current = stack.pop()
        yield current
        if isinstance(current, (Sequence, Alternative)):
            stack.extend(reversed(current.items))
        elif isinstance(current, (Optional, Repetition)):
            stack.append(current.item)
