"""Component registry for secondary projectors."""

import threading
from typing import Any, Callable, Dict, List, Optional, Type, TypeVar
import logging
from dataclasses import dataclass

from ..exceptions import UnknownProjectorError

logger = logging.getLogger(__name__)

T = TypeVar('T')


@dataclass
class ComponentMetadata:
    """Metadata for registered components."""
    name: str
    component_class: Type
    description: str = ""


class ProjectorRegistry:
    """Thread-safe registry mapping configuration identifiers to projector classes.

    Projectors are looked up by the identifier given in configuration
    (``reader.projector``) instead of being loaded by class path.
    """

    def __init__(self, name: str = "projector"):
        self.name = name
        self._components: Dict[str, ComponentMetadata] = {}
        self._lock = threading.RLock()

    def register(self,
                 name: str,
                 description: str = "",
                 force: bool = False) -> Callable[[Type[T]], Type[T]]:
        """Decorator registering a projector class under ``name``.

        Args:
            name: Identifier used in configuration
            description: Human-readable summary
            force: Replace an existing registration

        Returns:
            Decorator returning the class unchanged
        """
        key = name.lower()

        def decorator(cls: Type[T]) -> Type[T]:
            with self._lock:
                existing = self._components.get(key)
                if existing is not None and not force and existing.component_class is not cls:
                    raise ValueError(
                        f"'{key}' already registered in {self.name} registry as "
                        f"{existing.component_class.__module__}.{existing.component_class.__name__}. "
                        f"Use force=True to re-register."
                    )
                self._components[key] = ComponentMetadata(
                    name=key,
                    component_class=cls,
                    description=description or (cls.__doc__ or "").strip().split('\n')[0],
                )
                logger.debug(f"Registered {cls.__name__} as '{key}' in {self.name} registry")
            return cls

        return decorator

    def unregister(self, name: str) -> None:
        with self._lock:
            self._components.pop(name.lower(), None)

    def get(self, name: str) -> Type:
        """Get a registered class by identifier.

        Raises:
            UnknownProjectorError: If the identifier is not registered
        """
        with self._lock:
            key = name.lower()
            if key not in self._components:
                available = sorted(self._components.keys())
                raise UnknownProjectorError(
                    f"'{name}' not found in {self.name} registry. "
                    f"Available: {available}"
                )
            return self._components[key].component_class

    def create(self, name: Optional[str], *args, **kwargs) -> Optional[Any]:
        """Instantiate the projector for ``name``; empty identifiers mean none."""
        if not name:
            return None
        return self.get(name)(*args, **kwargs)

    def get_metadata(self, name: str) -> ComponentMetadata:
        self.get(name)
        with self._lock:
            return self._components[name.lower()]

    def list_registered(self) -> List[str]:
        with self._lock:
            return sorted(self._components.keys())

    def __contains__(self, name: str) -> bool:
        with self._lock:
            return name.lower() in self._components


projector_registry = ProjectorRegistry()
