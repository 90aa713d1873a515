"""
Generator - expands a grammar into sample text and its derivation tree.

Each call to generate()/generate_tree() runs an independent expansion with
its own decision source, derivation tree and text buffer, so one Generator
can serve concurrent calls from several threads. The Grammar, character
classes and replacement registry it holds are never mutated.

Text reaches the caller's sink only after the whole derivation succeeded; a
failed call writes nothing.
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from ..choices.base import DecisionSource, RepetitionSite
from ..choices.random_choices import RandomDecisionSource
from ..core.config import GeneratorConfig
from ..errors import (
    GenerationTooDeep,
    GenerationTooLarge,
    InvalidDecision,
    UndefinedProduction,
)
from ..grammar import rules
from ..grammar.charsets import CharacterClass
from ..grammar.model import Grammar
from ..utils.logger import LogContext, get_logger
from .nodes import DerivationTree, Node, NodeKind, writer_for
from .replacement import (
    ProductionReplacement,
    ReplacementCallback,
    ReplacementContext,
    ReplacementRegistry,
    replace_default,
)

logger = get_logger(__name__)


class Generator:
    """
    Generates sentences of a grammar.

    Example:
        generator = Generator(grammar, replace("number", lambda ctx: ctx.write("42")))
        text = generator.generate_text()
    """

    def __init__(
        self,
        grammar: Grammar,
        *replacements: ProductionReplacement,
        default_replacement: Optional[ReplacementCallback] = None,
        config: Optional[GeneratorConfig] = None,
    ):
        """
        Initialize the generator.

        Args:
            grammar: A built Grammar
            *replacements: Production replacements (see replacement.replace)
            default_replacement: Callback for every production without its own binding
            config: Generator configuration (uses defaults if None)

        Raises:
            DuplicateReplacement: If a production is bound more than once
            UndefinedProduction: If a replacement names an unknown production
        """
        self.grammar = grammar
        self.config = config or GeneratorConfig()

        bindings = list(replacements)
        if default_replacement is not None:
            bindings.append(replace_default(default_replacement))
        self.replacements = ReplacementRegistry(bindings, grammar=grammar)

        self._character_classes = self._resolve_character_classes()

        logger.debug(
            f"Generator ready for '{grammar.name}' "
            f"({len(grammar)} productions, {len(self.replacements)} replacements)"
        )

    def _resolve_character_classes(self) -> Dict[rules.CharacterSet, CharacterClass]:
        resolved: Dict[rules.CharacterSet, CharacterClass] = {}
        for body in self.grammar.productions.values():
            for rule in rules.walk(body):
                if isinstance(rule, rules.CharacterSet) and rule not in resolved:
                    resolved[rule] = self.grammar.character_classes.lookup(rule.name, rule.exclude)
        return resolved

    def new_decision_source(self) -> DecisionSource:
        """A fresh random decision source built from the configuration."""
        return RandomDecisionSource.from_config(self.config.decisions)

    # --- Entry points ---

    def generate(
        self,
        sink,
        decisions: Optional[DecisionSource] = None,
        start: Optional[str] = None,
        context: Any = None,
    ) -> int:
        """
        Generate one sentence and write it to `sink`.

        Args:
            sink: Object with write(str), or a callable taking str
            decisions: Decision source for this call (a fresh random one if None)
            start: Production to start from (the grammar's start if None)
            context: Arbitrary object exposed to replacements as ctx.context

        Returns:
            Number of code points written

        Raises:
            GenerationError: If the derivation cannot be completed; nothing is written
        """
        write = writer_for(sink)
        expansion = self._run(start, decisions, context)
        # One write, so a sink that rejects the text is left untouched
        write("".join(expansion.chunks))
        return expansion.size

    def generate_tree(
        self,
        start: Optional[str] = None,
        decisions: Optional[DecisionSource] = None,
        context: Any = None,
    ) -> Node:
        """
        Generate one derivation and return its root node.

        The root is the non-terminal node of the start production.
        """
        return self._run(start, decisions, context).tree.root

    def generate_text(
        self,
        start: Optional[str] = None,
        decisions: Optional[DecisionSource] = None,
        context: Any = None,
    ) -> str:
        """Generate one sentence and return it as a string."""
        return "".join(self._run(start, decisions, context).chunks)

    def _run(
        self,
        start: Optional[str],
        decisions: Optional[DecisionSource],
        context: Any,
    ) -> '_Expansion':
        start = start or self.grammar.start
        if start not in self.grammar:
            raise UndefinedProduction(start, referenced_from="<start>")
        if decisions is None:
            decisions = self.new_decision_source()

        expansion = _Expansion(self, decisions, context)
        with LogContext(
            logger,
            "Generating",
            level=logging.DEBUG,
            grammar=self.grammar.name,
            start=start,
            decisions=decisions.source_name,
        ):
            try:
                expansion.expand(rules.NonTerminal(start), None)
            except RecursionError:
                raise GenerationTooDeep(None, start) from None
        expansion.tree.freeze()
        logger.debug(f"Generated {expansion.size} code points, {len(expansion.tree)} nodes")
        return expansion

    def __repr__(self) -> str:
        return f"Generator(grammar={self.grammar.name!r}, replacements={len(self.replacements)})"


class _Expansion:
    """State of a single generate call."""

    def __init__(self, generator: Generator, decisions: DecisionSource, context: Any):
        self.grammar = generator.grammar
        self.replacements = generator.replacements
        self.character_classes = generator._character_classes
        self.max_depth = generator.config.limits.max_depth
        self.max_output_size = generator.config.limits.max_output_size
        self.decisions = decisions
        self.context = context

        self.tree = DerivationTree()
        self.chunks: List[str] = []
        self.size = 0
        self.depth = 0
        self.repetition_sites = 0
        self._productions: List[str] = []

    @property
    def production(self) -> Optional[str]:
        """Name of the innermost production being expanded."""
        return self._productions[-1] if self._productions else None

    def expand(self, rule: rules.Rule, parent: Optional[int]) -> None:
        self.depth += 1
        try:
            if self.max_depth is not None and self.depth > self.max_depth:
                raise GenerationTooDeep(self.max_depth, self.production)
            try:
                handler = _HANDLERS[type(rule)]
            except KeyError:
                raise TypeError(f"Unknown rule variant: {type(rule).__name__}") from None
            handler(self, rule, parent)
        finally:
            self.depth -= 1

    def _append(self, text: str) -> None:
        self.chunks.append(text)
        self.size += len(text)
        if self.max_output_size is not None and self.size > self.max_output_size:
            raise GenerationTooLarge(self.max_output_size, self.size)

    def emit(self, text: str, parent: int) -> None:
        """Record a literal under `parent` and append its text."""
        self.tree.add(NodeKind.LITERAL, parent, text=text)
        if text:
            self._append(text)

    # --- Per-variant expansion ---

    def _literal(self, rule: rules.Literal, parent: Optional[int]) -> None:
        self.emit(rule.text, parent)

    def _sequence(self, rule: rules.Sequence, parent: Optional[int]) -> None:
        node = self.tree.add(NodeKind.SEQUENCE, parent)
        for item in rule.items:
            self.expand(item, node)

    def _alternative(self, rule: rules.Alternative, parent: Optional[int]) -> None:
        count = len(rule.items)
        index = self.decisions.pick_alternative(count)
        if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < count:
            raise InvalidDecision(
                f"Alternative index {index!r} out of range for {count} branches"
            )
        node = self.tree.add(NodeKind.ALTERNATIVE, parent, value=index)
        self.expand(rule.items[index], node)

    def _optional(self, rule: rules.Optional, parent: Optional[int]) -> None:
        present = bool(self.decisions.include_optional())
        node = self.tree.add(NodeKind.OPTIONAL, parent, value=present)
        if present:
            self.expand(rule.item, node)

    def _repetition(self, rule: rules.Repetition, parent: Optional[int]) -> None:
        site = RepetitionSite(self.repetition_sites, self.production)
        self.repetition_sites += 1
        count = self.decisions.pick_repetition_count(rule.min, rule.max, site)
        if (
            isinstance(count, bool)
            or not isinstance(count, int)
            or count < rule.min
            or (rule.max is not None and count > rule.max)
        ):
            bound = "unbounded" if rule.max is None else rule.max
            raise InvalidDecision(
                f"Repetition count {count!r} outside [{rule.min}, {bound}] at site {site.index}"
            )
        node = self.tree.add(NodeKind.REPETITION, parent, value=count)
        for _ in range(count):
            self.expand(rule.item, node)

    def _character_set(self, rule: rules.CharacterSet, parent: Optional[int]) -> None:
        members = self.character_classes[rule]
        codepoint = self.decisions.pick_codepoint(members)
        if isinstance(codepoint, bool) or not isinstance(codepoint, int) or codepoint not in members:
            raise InvalidDecision(
                f"Code point {codepoint!r} is not in character class '{rule.name}'"
            )
        text = chr(codepoint)
        self.tree.add(NodeKind.CHARACTER, parent, name=rule.name, text=text, value=codepoint)
        self._append(text)

    def _non_terminal(self, rule: rules.NonTerminal, parent: Optional[int]) -> None:
        name = rule.name
        body = self.grammar.production(name)
        node = self.tree.add(NodeKind.NON_TERMINAL, parent, name=name)
        self._productions.append(name)
        try:
            callback = self.replacements.lookup(name)
            if callback is None:
                self.expand(body, node)
            else:
                self._replace(callback, body, node)
        finally:
            self._productions.pop()

    def _replace(self, callback: ReplacementCallback, body: rules.Rule, node: int) -> None:
        ctx = ReplacementContext(
            self.tree.node(node),
            emit=lambda text: self.emit(text, node),
            expand_default=lambda: self.expand(body, node),
            decisions=self.decisions,
            context=self.context,
        )
        try:
            callback(ctx)
        finally:
            ctx.close()


_HANDLERS: Dict[type, Callable[[_Expansion, Any, Optional[int]], None]] = {
    rules.Literal: _Expansion._literal,
    rules.Sequence: _Expansion._sequence,
    rules.Alternative: _Expansion._alternative,
    rules.Optional: _Expansion._optional,
    rules.Repetition: _Expansion._repetition,
    rules.NonTerminal: _Expansion._non_terminal,
    rules.CharacterSet: _Expansion._character_set,
}
