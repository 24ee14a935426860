"""
Built-in flow rules.

Importing this package registers every rule with the global registry.
"""

from flowlinter.engine.checks import best_practices, performance, reliability

__all__ = [
    "best_practices",
    "performance",
    "reliability",
]
