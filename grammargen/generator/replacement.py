"""
Production replacements - per-production overrides of default expansion.

A replacement binds a production name to a callback. When the generator
reaches a non-terminal with a binding, it calls the callback with a
ReplacementContext instead of expanding the production. The callback can
write text, ask for the default expansion, or look at where in the tree it
is being called from:

    @replacement
    def symbol(ctx):
        if ctx.node.production.name == "alpha":
            ctx.write("one")
        else:
            ctx.generate_default()

`node.parent` is the raw parent, which is a structural node (sequence,
optional, repetition...) unless the production is the whole body of the
one referencing it. To find the calling production use `node.production`,
or `node.ancestor(name)` to look further up.

Whatever the callback produces is the non-terminal's entire output; a
callback that neither writes nor calls generate_default() produces nothing.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Iterator, Mapping, Optional

from ..choices.base import DecisionSource
from ..errors import DuplicateReplacement, UndefinedProduction
from ..grammar.charsets import SURROGATES
from ..grammar.model import Grammar
from .nodes import Node

ReplacementCallback = Callable[['ReplacementContext'], None]


@dataclass(frozen=True)
class ProductionReplacement:
    """A production name (None for the default binding) and its callback."""
    production: Optional[str]
    callback: ReplacementCallback

    def __post_init__(self):
        if not callable(self.callback):
            raise TypeError(f"Replacement callback must be callable, got {self.callback!r}")

    @property
    def is_default(self) -> bool:
        return self.production is None


def replace(production: str, callback: ReplacementCallback) -> ProductionReplacement:
    """Bind `callback` to the production named `production`."""
    if not production:
        raise ValueError("Production name must not be empty")
    return ProductionReplacement(production, callback)


def replacement(callback: ReplacementCallback) -> ProductionReplacement:
    """
    Bind a function to the production sharing its name.

    Works as a decorator: `@replacement def number(ctx): ...`
    """
    name = getattr(callback, "__name__", None)
    if not name or name == "<lambda>":
        raise ValueError("replacement() needs a named function; use replace(name, callback)")
    return ProductionReplacement(name, callback)


def replace_default(callback: ReplacementCallback) -> ProductionReplacement:
    """Bind `callback` to every production that has no binding of its own."""
    return ProductionReplacement(None, callback)


class ReplacementRegistry(Mapping[str, ReplacementCallback]):
    """
    Immutable production name -> callback mapping, plus an optional default.

    Binding the same name twice (or two defaults) raises DuplicateReplacement.
    """

    def __init__(
        self,
        replacements: Iterable[ProductionReplacement] = (),
        grammar: Optional[Grammar] = None,
    ):
        """
        Initialize the registry.

        Args:
            replacements: Bindings to register
            grammar: If given, every bound name must be one of its productions

        Raises:
            DuplicateReplacement: If a name (or the default) is bound twice
            UndefinedProduction: If a bound name is not in `grammar`
        """
        self._bindings: Dict[str, ReplacementCallback] = {}
        self._default: Optional[ReplacementCallback] = None

        for binding in replacements:
            if not isinstance(binding, ProductionReplacement):
                raise TypeError(
                    f"Expected ProductionReplacement, got {type(binding).__name__}"
                )
            if binding.is_default:
                if self._default is not None:
                    raise DuplicateReplacement(None)
                self._default = binding.callback
                continue
            if binding.production in self._bindings:
                raise DuplicateReplacement(binding.production)
            if grammar is not None and binding.production not in grammar:
                raise UndefinedProduction(binding.production, referenced_from="<replacement>")
            self._bindings[binding.production] = binding.callback

    @property
    def default(self) -> Optional[ReplacementCallback]:
        return self._default

    def lookup(self, production: str) -> Optional[ReplacementCallback]:
        """The callback for `production`, falling back to the default binding."""
        return self._bindings.get(production, self._default)

    def __getitem__(self, production: str) -> ReplacementCallback:
        return self._bindings[production]

    def __iter__(self) -> Iterator[str]:
        return iter(self._bindings)

    def __len__(self) -> int:
        return len(self._bindings)

    def __bool__(self) -> bool:
        return bool(self._bindings) or self._default is not None


class ReplacementContext:
    """
    What a replacement callback sees.

    The context is only valid while the callback runs; using it afterwards
    raises RuntimeError.
    """

    def __init__(
        self,
        node: Node,
        emit: Callable[[str], None],
        expand_default: Callable[[], None],
        decisions: DecisionSource,
        context: Any = None,
    ):
        self._node = node
        self._emit = emit
        self._expand_default = expand_default
        self._decisions = decisions
        self._context = context
        self._open = True

    @property
    def node(self) -> Node:
        """The non-terminal node being replaced; its ancestors are already in place."""
        return self._node

    @property
    def name(self) -> str:
        """Name of the production being replaced."""
        return self._node.name

    @property
    def decisions(self) -> DecisionSource:
        """The decision source of the current generate call."""
        return self._decisions

    @property
    def context(self) -> Any:
        """The user object passed to generate(), if any."""
        return self._context

    def _check_open(self) -> None:
        if not self._open:
            raise RuntimeError(
                f"Replacement context for '{self.name}' used after its callback returned"
            )

    def write(self, text: str) -> None:
        """Emit literal text as (part of) this non-terminal's output."""
        self._check_open()
        if not isinstance(text, str):
            raise TypeError(f"write() expects str, got {type(text).__name__}")
        self._emit(text)

    def write_codepoint(self, codepoint: int) -> None:
        """Emit one code point; surrogates are not valid output and raise ValueError."""
        if SURROGATES[0] <= codepoint <= SURROGATES[1]:
            raise ValueError(f"Cannot write surrogate code point U+{codepoint:04X}")
        self.write(chr(codepoint))

    def generate_default(self) -> None:
        """Expand the production's own rule here, as if it had no replacement."""
        self._check_open()
        self._expand_default()

    def close(self) -> None:
        self._open = False
