"""actionreg - hierarchical, context-scoped registry for pluggable runtime resources.

This package contains:
- The registry node chain and scope manager (``actionreg.registry``)
- The development reflection API (``actionreg.interfaces.reflection``)
- Configuration and logging utilities (``actionreg.utils``)
- The ``actionreg`` command line interface (``actionreg.cli``)
"""

# Version information
__version__ = "0.1.0"

__all__ = ["__version__"]

# Use specific imports like: from actionreg.registry import lookup_action
