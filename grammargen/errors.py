"""
Exceptions raised while building grammars and generating from them.

Build-time problems derive from GrammarError, generation-time problems
from GenerationError. Both share GrammarGenError as a common root so
callers can catch everything the package raises in one clause.
"""

from typing import Optional


class GrammarGenError(Exception):
    """Base class for all grammargen errors."""


# --- Build / construction time ---

class GrammarError(GrammarGenError):
    """The grammar (or a generator built on it) is not well formed."""


class UndefinedProduction(GrammarError):
    """A non-terminal or replacement names a production the grammar lacks."""

    def __init__(self, name: str, referenced_from: Optional[str] = None):
        self.name = name
        self.referenced_from = referenced_from
        if referenced_from:
            message = f"Undefined production '{name}' (referenced from '{referenced_from}')"
        else:
            message = f"Undefined production '{name}'"
        super().__init__(message)


class UnknownCharacterClass(GrammarError):
    """A character set names a class that is not in the registry."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown character class '{name}'")


class DuplicateProduction(GrammarError):
    """Two grammars were merged that both define the same production."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Production '{name}' is already defined")


class DuplicateReplacement(GrammarError):
    """More than one replacement was bound to the same production."""

    def __init__(self, name: Optional[str]):
        self.name = name
        target = f"production '{name}'" if name is not None else "the default replacement"
        super().__init__(f"Duplicate replacement for {target}")


# --- Generation time ---

class GenerationError(GrammarGenError):
    """A generate call could not produce a complete derivation."""


class ScriptExhausted(GenerationError):
    """A scripted decision source was asked for more decisions than it holds."""

    def __init__(self, requested: str, consumed: int):
        self.requested = requested
        self.consumed = consumed
        super().__init__(
            f"Decision script exhausted after {consumed} decisions "
            f"(requested: {requested})"
        )


class ScriptMismatch(GenerationError):
    """The next scripted decision is of a different kind than requested."""

    def __init__(self, requested: str, scripted: str, position: int):
        self.requested = requested
        self.scripted = scripted
        self.position = position
        super().__init__(
            f"Decision #{position} is '{scripted}' but '{requested}' was requested"
        )


class InvalidDecision(GenerationError):
    """A decision source answered outside the bounds it was offered."""


class GenerationLimitExceeded(GenerationError):
    """A configured safety cutoff was crossed."""

    def __init__(self, message: str, limit: Optional[int]):
        self.limit = limit
        super().__init__(message)


class GenerationTooDeep(GenerationLimitExceeded):
    """Rule nesting went deeper than the configured (or interpreter) limit."""

    def __init__(self, limit: Optional[int], production: Optional[str] = None):
        self.production = production
        if limit is None:
            message = "Generation exceeded the interpreter recursion limit"
        else:
            message = f"Generation exceeded maximum depth of {limit}"
        if production:
            message += f" while expanding '{production}'"
        super().__init__(message, limit)


class GenerationTooLarge(GenerationLimitExceeded):
    """Generated output grew past the configured size."""

    def __init__(self, limit: int, size: int):
        self.size = size
        super().__init__(
            f"Generated output of {size} code points exceeds maximum of {limit}",
            limit,
        )
