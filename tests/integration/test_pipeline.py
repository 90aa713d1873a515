"""
Integration tests for the full grammar -> generator -> output pipeline.

Uses a small graph query language with custom character classes and a
context-sensitive replacement that keeps variable names consistent.
"""

import io
import re
from concurrent.futures import ThreadPoolExecutor

import pytest
from grammargen import (
    DEFAULT_CHARACTER_CLASSES,
    Decision,
    Generator,
    GeneratorConfig,
    RandomDecisionSource,
    RecordingDecisionSource,
    ScriptedDecisionSource,
    replacement,
)
from grammargen.core.config import DecisionConfig, LimitsConfig
from grammargen.errors import GenerationTooLarge
from grammargen.grammar import (
    grammar,
    alternative,
    characters_of_set,
    literal,
    non_terminal,
    one_or_more,
    optional,
    repeat,
    sequence,
    zero_or_more,
)

QUERY_PATTERN = re.compile(
    r"MATCH \(([a-z]{1,4}):[A-Z][a-z]*\)"
    r"( WHERE \1\.[a-z]+ [=<>] \d+)?"
    r" RETURN \1(, \1)*"
)


@pytest.fixture(scope="module")
def query_grammar():
    classes = DEFAULT_CHARACTER_CLASSES.extend({
        "LOWER": "abcdefghijklmnopqrstuvwxyz",
        "UPPER": "ABCDEFGHIJKLMNOPQRSTUVWXYZ",
        "DIGIT": "0123456789",
    })
    return (
        grammar("query", name="Query", character_classes=classes)
        .production("query", sequence(
            non_terminal("match"),
            optional(literal(" WHERE "), non_terminal("condition")),
            literal(" RETURN "),
            non_terminal("return_clause"),
        ))
        .production("match", sequence(
            literal("MATCH ("),
            non_terminal("variable"),
            literal(":"),
            non_terminal("label"),
            literal(")"),
        ))
        .production("condition", sequence(
            non_terminal("variable"),
            literal("."),
            non_terminal("property"),
            literal(" "),
            alternative(literal("="), literal("<"), literal(">")),
            literal(" "),
            non_terminal("number"),
        ))
        .production("return_clause", sequence(
            non_terminal("variable"),
            zero_or_more(literal(", "), non_terminal("variable")),
        ))
        .production("variable", sequence(
            characters_of_set("LOWER"),
            repeat(0, characters_of_set("LOWER"), maximum=3),
        ))
        .production("label", sequence(
            characters_of_set("UPPER"),
            zero_or_more(characters_of_set("LOWER")),
        ))
        .production("property", one_or_more(characters_of_set("LOWER")))
        .production("number", one_or_more(characters_of_set("DIGIT")))
        .build()
    )


@replacement
def variable(ctx):
    """Bind a fresh name in MATCH and reuse it everywhere else."""
    if ctx.node.ancestor("match") is not None:
        ctx.generate_default()
        ctx.context["variable"] = ctx.node.render()
    else:
        ctx.write(ctx.context["variable"])


@pytest.fixture(scope="module")
def generator(query_grammar):
    return Generator(query_grammar, variable)


class TestQueryGeneration:
    """End-to-end generation of query samples."""

    def test_random_samples_are_consistent(self, generator):
        for seed in range(200):
            text = generator.generate_text(
                decisions=RandomDecisionSource(seed=seed),
                context={},
            )
            assert QUERY_PATTERN.fullmatch(text), text

    def test_scripted_query(self, generator):
        script = ScriptedDecisionSource([
            Decision.codepoint("n"),
            Decision.repeat(0),
            Decision.codepoint("P"),
            Decision.repeat(2),
            Decision.codepoint("e"),
            Decision.codepoint("r"),
            Decision.include(),
            Decision.repeat(3),
            Decision.codepoint("a"),
            Decision.codepoint("g"),
            Decision.codepoint("e"),
            Decision.pick(2),
            Decision.repeat(2),
            Decision.codepoint("4"),
            Decision.codepoint("2"),
            Decision.repeat(1),
        ])
        # A repetition asks for its count before expanding its items
        text = generator.generate_text(decisions=script, context={})
        assert script.remaining == 0
        assert text == "MATCH (n:Per) WHERE n.age > 42 RETURN n, n"

    def test_tree_matches_text(self, generator):
        root = generator.generate_tree(decisions=RandomDecisionSource(seed=11), context={})

        assert root.name == "query"
        assert root.tree.frozen
        assert QUERY_PATTERN.fullmatch(root.render())

        match = root.children[0].children[0]
        assert match.name == "match"
        assert match.production == root

    def test_write_to_stream(self, generator):
        out = io.StringIO()
        size = generator.generate(out, decisions=RandomDecisionSource(seed=3), context={})

        assert size == len(out.getvalue())
        assert QUERY_PATTERN.fullmatch(out.getvalue())

    def test_failed_generation_writes_nothing(self, query_grammar):
        small = Generator(
            query_grammar,
            variable,
            config=GeneratorConfig(limits=LimitsConfig(max_output_size=10)),
        )
        out = io.StringIO()
        with pytest.raises(GenerationTooLarge):
            small.generate(out, decisions=RandomDecisionSource(seed=1), context={})
        assert out.getvalue() == ""


class TestReproducibility:
    """Seeded, replayed and concurrent generation."""

    def test_seeded_config_repeats_output(self, query_grammar):
        seeded = Generator(
            query_grammar,
            variable,
            config=GeneratorConfig(decisions=DecisionConfig(seed=7)),
        )
        first = seeded.generate_text(context={})
        assert all(seeded.generate_text(context={}) == first for _ in range(5))

    def test_recording_replays_same_derivation(self, generator):
        recorder = RecordingDecisionSource(RandomDecisionSource(seed=99))
        original = generator.generate_tree(decisions=recorder, context={})

        replayed = generator.generate_tree(decisions=recorder.replay(), context={})

        assert replayed.render() == original.render()
        assert replayed.s_expression() == original.s_expression()

    def test_concurrent_calls(self, generator):
        def sample(seed):
            return generator.generate_text(decisions=RandomDecisionSource(seed=seed), context={})

        expected = [sample(seed) for seed in range(50)]
        with ThreadPoolExecutor(max_workers=8) as pool:
            assert list(pool.map(sample, range(50))) == expected
