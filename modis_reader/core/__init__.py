"""Core registries."""

from .registry import ComponentMetadata, ProjectorRegistry, projector_registry

__all__ = ['ComponentMetadata', 'ProjectorRegistry', 'projector_registry']
