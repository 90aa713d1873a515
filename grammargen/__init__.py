"""
grammargen - Generate sample sentences from formal grammars.

Main modules:
- grammar: Rule variants, character classes and the Grammar builder
- choices: Decision sources (random, scripted, recording)
- generator: The expansion engine, derivation trees and production replacements
- core: Configuration
"""

from .errors import (
    GrammarGenError,
    GrammarError,
    UndefinedProduction,
    UnknownCharacterClass,
    DuplicateProduction,
    DuplicateReplacement,
    GenerationError,
    ScriptExhausted,
    ScriptMismatch,
    InvalidDecision,
    GenerationLimitExceeded,
    GenerationTooDeep,
    GenerationTooLarge,
)
from .grammar import (
    Grammar,
    GrammarBuilder,
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
    CharacterClassRegistry,
    DEFAULT_CHARACTER_CLASSES,
)
from .choices import (
    Decision,
    DecisionSource,
    RandomDecisionSource,
    ScriptedDecisionSource,
    RecordingDecisionSource,
)
from .generator import (
    Generator,
    Node,
    NodeKind,
    replace,
    replacement,
    replace_default,
)
from .core.config import GeneratorConfig, load_config

__version__ = "1.0.0"

__all__ = [
    # Errors
    'GrammarGenError',
    'GrammarError',
    'UndefinedProduction',
    'UnknownCharacterClass',
    'DuplicateProduction',
    'DuplicateReplacement',
    'GenerationError',
    'ScriptExhausted',
    'ScriptMismatch',
    'InvalidDecision',
    'GenerationLimitExceeded',
    'GenerationTooDeep',
    'GenerationTooLarge',
    # Grammar
    'Grammar',
    'GrammarBuilder',
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
    'CharacterClassRegistry',
    'DEFAULT_CHARACTER_CLASSES',
    # Decisions
    'Decision',
    'DecisionSource',
    'RandomDecisionSource',
    'ScriptedDecisionSource',
    'RecordingDecisionSource',
    # Generation
    'Generator',
    'Node',
    'NodeKind',
    'replace',
    'replacement',
    'replace_default',
    # Config
    'GeneratorConfig',
    'load_config',
    '__version__',
]
