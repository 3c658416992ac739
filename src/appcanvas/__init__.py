"""AppCanvas - data layer and calculation engine for a no-code app builder.

Per-tenant databases of typed tables backed by isolated storage namespaces,
plus the evaluator that resolves element calculations and conditions.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
