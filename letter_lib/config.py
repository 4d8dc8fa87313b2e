"""Shared configuration and logging setup for the letter collector.

This module centralizes the constants that define the dataset format and the
acquisition policy, so every component (normalizer, store, tracker,
selection engine) agrees on them:

    - Alphabet and per-letter target count
    - Output raster geometry (224x224, single channel)
    - Capture normalization parameters (padding, oversampling, margin)
    - Sample file naming scheme
    - Selection parameters (number of top-deficit letters)

Deployment-level choices are bundled in :class:`CollectorConfig`. The
normalization policy in particular is part of the dataset contract: two
policies produce non-interchangeable rasters, so a dataset root is bound to
exactly one of them (see ``letter_lib.storage.sample_store``).

Example:
    Configure logging and build a config at startup::

        from letter_lib.config import CollectorConfig, configure_logging

        configure_logging(level='DEBUG', log_file='collector.log')
        config = CollectorConfig(root_dir='dataset', target_count=50)

Attributes:
    ALPHABET (str): Letters tracked by the collector (A-Z).
    TARGET_COUNT (int): Desired number of samples per letter (100).
    OUTPUT_SIZE (int): Width and height of every stored raster (224).
    CAPTURE_PADDING (float): Padding added around the ink bounds (20 units).
    OVERSAMPLE_SCALE (float): Rasterization scale for the padded region (3x).
    MARGIN_FACTOR (float): Fraction of the canvas the content may fill (0.9).
    FULL_CANVAS_SIZE (int): Source canvas size of the full-canvas policy (600).
    DEFAULT_STROKE_WIDTH (float): Pen width used when a stroke has none (20).
    TOP_N_LETTERS (int): Number of top-deficit letters used by word selection.
    SAMPLE_FILENAME_FORMAT (str): Format string for sample file names.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

# Module logger
logger = logging.getLogger(__name__)

# Letters tracked by the collector
ALPHABET = 'ABCDEFGHIJKLMNOPQRSTUVWXYZ'

# Desired samples per letter
TARGET_COUNT = 100

# --- Raster geometry ---
OUTPUT_SIZE = 224
BACKGROUND = 255
INK_COLOR = 0

# --- Capture normalization ---
CAPTURE_PADDING = 20.0
OVERSAMPLE_SCALE = 3.0
MARGIN_FACTOR = 0.9
FULL_CANVAS_SIZE = 600
DEFAULT_STROKE_WIDTH = 20.0

# --- Sample store ---
SAMPLE_EXTENSION = '.png'
SAMPLE_FILENAME_FORMAT = '{letter}_{sequence:04d}' + SAMPLE_EXTENSION
MANIFEST_NAME = 'dataset.json'

# --- Selection ---
TOP_N_LETTERS = 3
DEFAULT_SAVE_WORKERS = 4


class NormalizationPolicy(str, Enum):
    """How a drawing is mapped onto the output raster.

    PADDED_CROP crops to the ink bounds plus padding, oversamples, and
    aspect-fits the result centered in the output. FULL_CANVAS renders the
    whole fixed-size source canvas and downscales it directly.
    """
    PADDED_CROP = 'padded_crop'
    FULL_CANVAS = 'full_canvas'


@dataclass
class CollectorConfig:
    """Deployment-level settings for a collection session.

    Attributes:
        root_dir: Dataset root holding one directory per letter.
        target_count: Desired samples per letter.
        policy: Normalization policy the dataset is bound to.
        output_size: Width and height of stored rasters.
        top_n: Number of top-deficit letters considered by word selection.
        seed: Seed for the selection random source, or None for entropy.
        save_workers: Thread pool size for multi-letter saves.
    """
    root_dir: Path = Path('dataset')
    target_count: int = TARGET_COUNT
    policy: NormalizationPolicy = NormalizationPolicy.PADDED_CROP
    output_size: int = OUTPUT_SIZE
    top_n: int = TOP_N_LETTERS
    seed: int | None = None
    save_workers: int = DEFAULT_SAVE_WORKERS

    def __post_init__(self):
        self.root_dir = Path(self.root_dir)
        self.policy = NormalizationPolicy(self.policy)
        if self.target_count < 1:
            raise ValueError(f"target_count must be positive, got {self.target_count}")
        if self.top_n < 1:
            raise ValueError(f"top_n must be positive, got {self.top_n}")
        if self.save_workers < 1:
            raise ValueError(f"save_workers must be positive, got {self.save_workers}")


def configure_logging(level: str = 'INFO', log_file: str | None = None) -> None:
    """Configure application-wide logging.

    Sets up a consistent format across all modules. Call this once at
    application startup.

    Args:
        level: Log level string ('DEBUG', 'INFO', 'WARNING', 'ERROR').
        log_file: Optional path to log file. If None, logs to stderr only.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    formatter = logging.Formatter(
        fmt='%(asctime)s %(levelname)-8s [%(name)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Remove existing handlers to avoid duplicates
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    # PIL logs every PNG chunk at DEBUG
    logging.getLogger('PIL').setLevel(logging.WARNING)

    logger.info("Logging configured: level=%s, file=%s", level, log_file or 'stderr')
