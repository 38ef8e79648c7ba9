"""Load suite definers named as ``module:function``."""

from __future__ import annotations

import importlib

from soakbench.core.errors import ConfigurationError
from soakbench.orchestrator import SuiteDefiner


def load_definer(spec: str) -> SuiteDefiner:
    """Import ``package.module:function`` and return the callable."""
    module_name, _, attr = spec.partition(":")
    if not module_name or not attr:
        raise ConfigurationError("expected 'module:function'", source=spec)
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigurationError(f"cannot import module: {e}", source=spec) from e
    definer = getattr(module, attr, None)
    if not callable(definer):
        raise ConfigurationError(f"'{attr}' is not a callable in {module_name}", source=spec)
    return definer


__all__ = ["load_definer"]
