"""Letter Collector Package.

Tools for collecting handwritten letter samples into a labeled image
dataset. The interesting parts are not the drawing surface but the logic
behind it: deciding which letter or word to request next so every letter
reaches its target with little operator effort, and turning free-form ink
into a canonical, reproducible raster on disk.

Architecture Overview:
    - letter_lib.domain: value objects (Point, BBox, Stroke, Drawing,
      progress and prompt records)
    - letter_lib.capture: CaptureNormalizer, drawing -> 224x224 grayscale
    - letter_lib.storage: SampleStore, per-letter append-only PNG store
    - letter_lib.progress: ProgressStore, per-letter counters
    - letter_lib.selection: WordCatalog and SelectionEngine
    - letter_lib.api: CollectionSession tying it all together
    - letter_lib.cli: command-line front end

Example usage:
    Running a session::

        from letter_lib import CollectionSession, CollectorConfig

        session = CollectionSession.from_config(CollectorConfig(root_dir='dataset'))
        prompt = session.start()
        outcome = session.save(drawings_for(prompt))
        print(session.status().total_samples)

    Normalizing a drawing directly::

        from letter_lib import CaptureNormalizer, Drawing, Stroke

        drawing = Drawing([Stroke.from_tuples([(0, 0), (0, 120)], width=20)])
        raster = CaptureNormalizer().normalize(drawing)

Attributes:
    __version__ (str): Package version string.
    __all__ (list): List of public symbols exported by this package.
"""

from .api import BatchSaveResult, CollectionSession, SaveResult, SessionStatus
from .capture import CaptureNormalizer
from .config import CollectorConfig, NormalizationPolicy, configure_logging
from .domain import BBox, Drawing, InkSource, Point, Prompt, PromptKind, SelectionReason, Stroke
from .errors import (
    DirectoryCreateError,
    EmptyCaptureError,
    EncodeError,
    PencilLettersError,
    PolicyMismatchError,
    SampleStoreError,
    WriteError,
)
from .progress import ProgressStore
from .selection import SelectionEngine, SelectionMode, WordCatalog
from .storage import SampleStore

__all__ = [
    # Domain objects
    'Point', 'BBox', 'Stroke', 'Drawing', 'InkSource',
    'Prompt', 'PromptKind', 'SelectionReason',
    # Core components
    'CaptureNormalizer', 'SampleStore', 'ProgressStore',
    'WordCatalog', 'SelectionEngine', 'SelectionMode',
    # Services
    'CollectionSession', 'SaveResult', 'BatchSaveResult', 'SessionStatus',
    # Configuration
    'CollectorConfig', 'NormalizationPolicy', 'configure_logging',
    # Errors
    'PencilLettersError', 'EmptyCaptureError', 'SampleStoreError',
    'DirectoryCreateError', 'EncodeError', 'WriteError', 'PolicyMismatchError',
]

__version__ = '1.0.0'
