"""
Generator module - Expand grammars into text and derivation trees.

Provides:
- Generator: the expansion engine
- Node / DerivationTree: the record of one derivation, with renderers
- Production replacements: per-production overrides, optionally context sensitive
"""

from .generator import Generator
from .nodes import (
    DerivationTree,
    Node,
    NodeKind,
    render_text,
    write_text,
    s_expression,
)
from .replacement import (
    ProductionReplacement,
    ReplacementContext,
    ReplacementRegistry,
    replace,
    replacement,
    replace_default,
)

__all__ = [
    # Engine
    'Generator',
    # Derivation trees
    'DerivationTree',
    'Node',
    'NodeKind',
    'render_text',
    'write_text',
    's_expression',
    # Replacements
    'ProductionReplacement',
    'ReplacementContext',
    'ReplacementRegistry',
    'replace',
    'replacement',
    'replace_default',
]
