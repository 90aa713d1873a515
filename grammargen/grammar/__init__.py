"""
Grammar module - Rule variants, character classes and the Grammar model.
"""

from .rules import (
    Rule,
    Literal,
    Sequence,
    Alternative,
    Optional,
    Repetition,
    NonTerminal,
    CharacterSet,
    literal,
    sequence,
    epsilon,
    alternative,
    non_terminal,
    optional,
    zero_or_more,
    one_or_more,
    repeat,
    characters_of_set,
)
from .charsets import (
    CharacterClass,
    CharacterClassRegistry,
    DEFAULT_CHARACTER_CLASSES,
    WELL_KNOWN_CLASSES,
)
from .model import Grammar, GrammarBuilder, grammar

__all__ = [
    # Rule variants
    'Rule',
    'Literal',
    'Sequence',
    'Alternative',
    'Optional',
    'Repetition',
    'NonTerminal',
    'CharacterSet',
    # Rule constructors
    'literal',
    'sequence',
    'epsilon',
    'alternative',
    'non_terminal',
    'optional',
    'zero_or_more',
    'one_or_more',
    'repeat',
    'characters_of_set',
    # Character classes
    'CharacterClass',
    'CharacterClassRegistry',
    'DEFAULT_CHARACTER_CLASSES',
    'WELL_KNOWN_CLASSES',
    # Grammar
    'Grammar',
    'GrammarBuilder',
    'grammar',
]
