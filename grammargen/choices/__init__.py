"""
Choices module - Decision sources consulted by the generator.

Provides:
- RandomDecisionSource: seeded pseudo-random choices (default)
- ScriptedDecisionSource: answers from a fixed script, for tests
- RecordingDecisionSource: records another source's answers for replay
"""

from .base import (
    DecisionSource,
    DecisionKind,
    Decision,
    RepetitionSite,
)
from .random_choices import RandomDecisionSource
from .scripted import ScriptedDecisionSource, RecordingDecisionSource

__all__ = [
    # Base classes
    'DecisionSource',
    'DecisionKind',
    'Decision',
    'RepetitionSite',
    # Implementations
    'RandomDecisionSource',
    'ScriptedDecisionSource',
    'RecordingDecisionSource',
]


def create_source(kind: str = "random", **kwargs) -> DecisionSource:
    """
    Factory function to create a decision source.

    Args:
        kind: Source kind ("random", "scripted")
        **kwargs: Source-specific arguments

    Returns:
        Configured decision source

    Raises:
        ValueError: If kind is not supported
    """
    sources = {
        "random": RandomDecisionSource,
        "scripted": ScriptedDecisionSource,
    }

    if kind not in sources:
        raise ValueError(f"Unsupported decision source: {kind}. Available: {list(sources.keys())}")

    return sources[kind](**kwargs)
