"""Kind rules and the registry that dispatches resources to them."""

from helm_composer.core.processors.base import KindRule, ProcessContext
from helm_composer.core.processors.registry import ProcessorRegistry, default_registry

__all__ = ["KindRule", "ProcessContext", "ProcessorRegistry", "default_registry"]
