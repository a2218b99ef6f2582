"""
Registry mapping transform type names to factories.

Registration is a configuration-time operation: register everything before
extraction starts. The registry does no locking.
"""

from __future__ import annotations

from typing import Any, Callable, Iterable, Mapping, TypeVar

from ..logging import get_logger
from .base import Transform
from .builtin import BUILTIN_TRANSFORMS

logger = get_logger("transforms.registry")

TransformFactory = Callable[..., Transform]
F = TypeVar("F", bound=TransformFactory)


def _config_parts(config: Any) -> tuple[str, dict[str, Any]]:
    """Split a transform config (model or mapping) into type and options."""
    if isinstance(config, Mapping):
        options = dict(config)
        return str(options.pop("type", "") or ""), options
    return str(getattr(config, "type", "") or ""), config.options()


class TransformRegistry:
    """Name to factory mapping used to build pipeline transforms.

    A factory is any callable (usually a Transform subclass) accepting the
    config's properties as keyword arguments.
    """

    def __init__(self, factories: Mapping[str, TransformFactory] | None = None):
        self._factories: dict[str, TransformFactory] = dict(factories or {})

    @classmethod
    def with_builtins(cls) -> "TransformRegistry":
        return cls(BUILTIN_TRANSFORMS)

    def register(self, name: str, factory: TransformFactory) -> None:
        """Register a factory, replacing any previous one under the same name."""
        if not name:
            raise ValueError("Transform name must not be empty")
        if name in self._factories:
            logger.debug(f"Replacing transform '{name}'")
        self._factories[name] = factory

    def unregister(self, name: str) -> bool:
        """Remove a factory. Returns False when the name was not registered."""
        return self._factories.pop(name, None) is not None

    def get(self, name: str) -> TransformFactory | None:
        return self._factories.get(name)

    def names(self) -> list[str]:
        return sorted(self._factories)

    def copy(self) -> "TransformRegistry":
        return TransformRegistry(self._factories)

    def __contains__(self, name: object) -> bool:
        return name in self._factories

    def __len__(self) -> int:
        return len(self._factories)

    def instantiate(
        self,
        configs: Iterable[Any],
        base_url: str | None = None,
    ) -> list[Transform]:
        """Build transform instances for a pipeline run.

        Unknown types are skipped. Factories that fail to construct are
        logged and skipped. When ``base_url`` is given it is set on every
        instance exposing a ``base_url`` attribute.

        Args:
            configs: Transform configs (models or plain mappings)
            base_url: Document URL for URL-aware transforms

        Returns:
            Instances in config order
        """
        instances: list[Transform] = []

        for config in configs:
            kind, options = _config_parts(config)
            factory = self._factories.get(kind)
            if factory is None:
                logger.debug(f"Unknown transform type '{kind}', skipping")
                continue

            try:
                instance = factory(**options)
            except Exception as e:
                logger.warning(
                    f"Cannot build transform '{kind}': {e}",
                    extra={"transform": kind},
                )
                continue

            if base_url and hasattr(instance, "base_url"):
                instance.base_url = base_url

            instances.append(instance)

        return instances


default_registry = TransformRegistry.with_builtins()


def register_transform(
    name: str,
    factory: F | None = None,
    *,
    registry: TransformRegistry | None = None,
) -> Any:
    """Register a transform in the default (or given) registry.

    Works as a plain call or as a class decorator::

        @register_transform("slugify")
        class Slugify(Transform):
            def transform(self, value):
                return value.lower().replace(" ", "-")
    """
    target = registry if registry is not None else default_registry

    if factory is not None:
        target.register(name, factory)
        return factory

    def decorator(cls: F) -> F:
        target.register(name, cls)
        return cls

    return decorator
