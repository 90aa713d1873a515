"""
Core module - Configuration shared by grammars, decision sources and the generator.
"""

from .config import (
    GeneratorConfig,
    DecisionConfig,
    LimitsConfig,
    LoggingConfig,
    get_default_config,
    load_config,
)

__all__ = [
    'GeneratorConfig',
    'DecisionConfig',
    'LimitsConfig',
    'LoggingConfig',
    'get_default_config',
    'load_config',
]
