# modis_reader/raster/loaders/base_loader.py
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Iterator, List, Optional
import logging

from ..dataset import GridDataset

logger = logging.getLogger(__name__)


class EventSeverity(Enum):
    INFO = "info"
    WARNING = "warning"


# Diagnostic codes reported by loaders
MISSING_DATASET = "missing_dataset"
EMPTY_CONTAINER = "empty_container"
MISSING_MASK = "missing_mask"
UNSIGNED_WIDENED = "unsigned_widened"
MISSING_TILE = "missing_tile"


@dataclass
class LoaderEvent:
    """A recoverable condition met while loading."""
    code: str
    message: str
    severity: EventSeverity = EventSeverity.WARNING


@dataclass
class LoadDiagnostics:
    """Events collected by a loader call, inspected by the caller."""
    events: List[LoaderEvent] = field(default_factory=list)

    def warn(self, code: str, message: str) -> None:
        self.events.append(LoaderEvent(code, message, EventSeverity.WARNING))

    def info(self, code: str, message: str) -> None:
        self.events.append(LoaderEvent(code, message, EventSeverity.INFO))

    def has(self, code: str) -> bool:
        return any(event.code == code for event in self.events)

    def extend(self, other: 'LoadDiagnostics') -> None:
        self.events.extend(other.events)

    @property
    def warnings(self) -> List[LoaderEvent]:
        return [e for e in self.events if e.severity is EventSeverity.WARNING]

    def __iter__(self) -> Iterator[LoaderEvent]:
        return iter(self.events)

    def __len__(self) -> int:
        return len(self.events)


@dataclass
class LoadResult:
    """Dataset returned by a loader together with its diagnostics."""
    dataset: Optional[GridDataset]
    diagnostics: LoadDiagnostics = field(default_factory=LoadDiagnostics)


class BaseDatasetLoader(ABC):
    """Base class for loaders turning a raster container into a GridDataset."""

    @abstractmethod
    def can_handle(self, file_path: Path) -> bool:
        """Check if this loader can handle the given file."""
        pass

    @abstractmethod
    def load(self, file_path: Path, dataset_name: str) -> LoadResult:
        """Load ``dataset_name`` from ``file_path``.

        A missing dataset is not an error: loaders fall back to another
        dataset and report it through the returned diagnostics.
        """
        pass

    @abstractmethod
    def _open_dataset(self, file_path: Path) -> Any:
        """Open the container for reading."""
        pass

    @abstractmethod
    def _close_dataset(self, dataset: Any) -> None:
        """Close the container."""
        pass

    @contextmanager
    def open(self, file_path: Path):
        """Open a container and make sure it is closed afterwards."""
        dataset = None
        try:
            dataset = self._open_dataset(file_path)
            yield dataset
        finally:
            if dataset is not None:
                self._close_dataset(dataset)
