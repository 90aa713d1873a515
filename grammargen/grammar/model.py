"""
Grammar - an immutable table of named productions and its builder.

Typical use:

    g = (grammar("expr")
         .production("expr", non_terminal("term"),
                     sequence(non_terminal("term"), literal("+"), non_terminal("expr")))
         .production("term", characters_of_set("Nd"))
         .build())

A production given more than one rule is an Alternative over those rules.
"""

from types import MappingProxyType
from typing import Dict, Iterator, List, Mapping, Optional

from ..errors import DuplicateProduction, GrammarError, UndefinedProduction
from ..utils.logger import get_logger
from . import rules
from .charsets import DEFAULT_CHARACTER_CLASSES, CharacterClassRegistry

logger = get_logger(__name__)


class Grammar:
    """
    A validated, immutable set of productions with a designated start.

    Instances are only created by GrammarBuilder.build(), which guarantees
    that every non-terminal and character class referenced resolves.
    """

    def __init__(
        self,
        name: str,
        start: str,
        productions: Mapping[str, rules.Rule],
        character_classes: CharacterClassRegistry,
    ):
        self._name = name
        self._start = start
        self._productions = MappingProxyType(dict(productions))
        self._character_classes = character_classes

    @property
    def name(self) -> str:
        return self._name

    @property
    def start(self) -> str:
        """Name of the start production (the language's entry point)."""
        return self._start

    @property
    def productions(self) -> Mapping[str, rules.Rule]:
        return self._productions

    @property
    def character_classes(self) -> CharacterClassRegistry:
        return self._character_classes

    def production(self, name: str) -> rules.Rule:
        """
        Get the rule of a production.

        Raises:
            UndefinedProduction: If the grammar has no such production
        """
        try:
            return self._productions[name]
        except KeyError:
            raise UndefinedProduction(name) from None

    def __contains__(self, name) -> bool:
        return name in self._productions

    def __iter__(self) -> Iterator[str]:
        return iter(self._productions)

    def __len__(self) -> int:
        return len(self._productions)

    def __repr__(self) -> str:
        return f"Grammar(name={self._name!r}, start={self._start!r}, productions={len(self)})"


class GrammarBuilder:
    """Collects productions in any order and validates them on build()."""

    def __init__(
        self,
        start: str,
        name: Optional[str] = None,
        character_classes: Optional[CharacterClassRegistry] = None,
    ):
        self.start = start
        self.name = name or start
        if character_classes is None:
            character_classes = DEFAULT_CHARACTER_CLASSES
        self.character_classes = character_classes
        self._productions: Dict[str, List[rules.Rule]] = {}

    def production(self, name: str, *alternatives: rules.Rule) -> 'GrammarBuilder':
        """
        Add rules to a production.

        Several rules (from one or several calls) become alternatives.

        Args:
            name: Production name
            *alternatives: One or more rules

        Returns:
            This builder, for chaining
        """
        if not alternatives:
            raise ValueError(f"Production '{name}' needs at least one rule")
        for rule in alternatives:
            if not isinstance(rule, rules.RULE_TYPES):
                raise TypeError(
                    f"Production '{name}': expected a grammar rule, got {type(rule).__name__}"
                )
        self._productions.setdefault(name, []).extend(alternatives)
        return self

    def include(self, other: Grammar) -> 'GrammarBuilder':
        """
        Copy every production of another grammar into this one.

        Raises:
            DuplicateProduction: If a production is defined in both
        """
        for name, rule in other.productions.items():
            if name in self._productions:
                raise DuplicateProduction(name)
            self._productions[name] = [rule]
        return self

    def build(self) -> Grammar:
        """
        Validate and freeze the grammar.

        Raises:
            UndefinedProduction: If the start or any referenced production is missing
            UnknownCharacterClass: If a character set names an unknown class
            GrammarError: If a character set excludes every member of its class
        """
        if self.start not in self._productions:
            raise UndefinedProduction(self.start, referenced_from="<start>")

        productions = {
            name: rules.alternative(*alternatives)
            for name, alternatives in self._productions.items()
        }

        for name, body in productions.items():
            for rule in rules.walk(body):
                if isinstance(rule, rules.NonTerminal):
                    if rule.name not in productions:
                        raise UndefinedProduction(rule.name, referenced_from=name)
                elif isinstance(rule, rules.CharacterSet):
                    members = self.character_classes.lookup(rule.name, rule.exclude)
                    if not members:
                        raise GrammarError(
                            f"Character set '{rule.name}' in production '{name}' "
                            f"excludes every code point"
                        )

        logger.debug(f"Built grammar '{self.name}' with {len(productions)} productions")
        return Grammar(self.name, self.start, productions, self.character_classes)


def grammar(
    start: str,
    name: Optional[str] = None,
    character_classes: Optional[CharacterClassRegistry] = None,
) -> GrammarBuilder:
    """
    Start building a grammar whose entry point is `start`.

    Args:
        start: Name of the start production
        name: Grammar name (defaults to the start production)
        character_classes: Registry to resolve character sets against

    Returns:
        A new GrammarBuilder
    """
    return GrammarBuilder(start, name=name, character_classes=character_classes)
