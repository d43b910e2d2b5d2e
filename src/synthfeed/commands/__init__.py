"""CLI command implementations for the synthetic history generator.

Each command module provides:
- Configuration loading and validation
- Integration with core library functions
"""

from synthfeed.commands.gen_history import load_gen_history_config

__all__ = [
    "load_gen_history_config",
]
