"""Capture normalization: stroke drawing to canonical raster.

This module turns a free-form drawing into the fixed-size single-channel
raster stored in the dataset. It is a pure transformation: no I/O, no
shared state, no randomness, so identical stroke geometry always yields a
bit-identical array.

Two normalization policies exist (see ``NormalizationPolicy``):

    PADDED_CROP (default):
        1. Take the tight ink bounds and grow them by the padding margin
        2. Rasterize only that region at the oversampling scale
        3. Aspect-fit into the output square at ``margin_factor`` of its size
        4. Center on a white canvas
        5. Convert to grayscale (ITU-R 601-2 luma, no alpha)

    FULL_CANVAS:
        Rasterize the whole fixed-size source canvas and downscale it
        directly to the output square, without cropping or centering.

The two are not numerically equivalent. A dataset is bound to one of them
by the sample store's manifest.

Example usage::

    from letter_lib.capture import CaptureNormalizer

    normalizer = CaptureNormalizer()
    raster = normalizer.normalize(drawing)
    raster.shape      # (224, 224)
    raster.dtype      # uint8
"""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np
from PIL import Image

from ..config import (
    BACKGROUND,
    CAPTURE_PADDING,
    FULL_CANVAS_SIZE,
    MARGIN_FACTOR,
    OUTPUT_SIZE,
    OVERSAMPLE_SCALE,
    NormalizationPolicy,
)
from ..domain.drawing import PAPER_RGB, InkSource
from ..domain.geometry import BBox
from ..errors import EmptyCaptureError

logger = logging.getLogger(__name__)


class CaptureNormalizer:
    """Render drawings into canonical square grayscale rasters.

    Attributes:
        policy: Normalization policy applied to every drawing.
        output_size: Width and height of the produced raster.
        padding: Margin added around the ink bounds (drawing units).
        oversample: Pixels per drawing unit when rasterizing the source.
        margin_factor: Fraction of the output the content may fill.
        canvas_size: Source canvas size for the full-canvas policy.
    """

    def __init__(self, policy: NormalizationPolicy = NormalizationPolicy.PADDED_CROP,
                 output_size: int = OUTPUT_SIZE,
                 padding: float = CAPTURE_PADDING,
                 oversample: float = OVERSAMPLE_SCALE,
                 margin_factor: float = MARGIN_FACTOR,
                 canvas_size: int = FULL_CANVAS_SIZE):
        if output_size < 1:
            raise ValueError(f"output_size must be positive, got {output_size}")
        if oversample <= 0:
            raise ValueError(f"oversample must be positive, got {oversample}")
        if not 0 < margin_factor <= 1:
            raise ValueError(f"margin_factor must be in (0, 1], got {margin_factor}")
        self.policy = NormalizationPolicy(policy)
        self.output_size = output_size
        self.padding = padding
        self.oversample = oversample
        self.margin_factor = margin_factor
        self.canvas_size = canvas_size

    def normalize(self, drawing: InkSource, letter: Optional[str] = None) -> np.ndarray:
        """Normalize a drawing into a ``(output_size, output_size)`` uint8 array.

        Args:
            drawing: The captured ink.
            letter: Letter the drawing is for; only used in error reports.

        Returns:
            Grayscale raster, dark ink on a white (255) background.

        Raises:
            EmptyCaptureError: If the drawing has no ink, or (full-canvas
                policy) none of its ink lies on the source canvas.
        """
        if drawing.is_empty or drawing.bounds.is_empty:
            raise EmptyCaptureError(letter)

        if self.policy is NormalizationPolicy.PADDED_CROP:
            composed = self._padded_crop(drawing)
        else:
            composed = self._full_canvas(drawing, letter)

        gray = composed.convert('L')
        return np.array(gray, dtype=np.uint8)

    def _padded_crop(self, drawing: InkSource) -> Image.Image:
        region = drawing.bounds.expanded(self.padding)
        source = drawing.render(region, self.oversample)

        size = self.output_size
        fit = min(size / region.width, size / region.height) * self.margin_factor
        scaled_w = max(1, int(round(region.width * fit)))
        scaled_h = max(1, int(round(region.height * fit)))
        scaled = source.resize((scaled_w, scaled_h), Image.Resampling.LANCZOS)

        canvas = Image.new('RGB', (size, size), PAPER_RGB)
        canvas.paste(scaled, ((size - scaled_w) // 2, (size - scaled_h) // 2))

        logger.debug("Padded crop: region=%s fit=%.4f scaled=%dx%d",
                     region.to_tuple(), fit, scaled_w, scaled_h)
        return canvas

    def _full_canvas(self, drawing: InkSource, letter: Optional[str]) -> Image.Image:
        region = BBox(0.0, 0.0, float(self.canvas_size), float(self.canvas_size))
        if not drawing.bounds.intersects(region):
            logger.debug("Ink %s lies outside the %dpx canvas", drawing.bounds.to_tuple(),
                         self.canvas_size)
            raise EmptyCaptureError(letter)
        source = drawing.render(region, self.oversample)
        return source.resize((self.output_size, self.output_size), Image.Resampling.LANCZOS)


def raster_ink_bbox(raster: np.ndarray, threshold: int = BACKGROUND) -> Optional[BBox]:
    """Get the bounding box of non-background pixels in a raster.

    Args:
        raster: Grayscale array, white background.
        threshold: Pixels strictly darker than this count as ink.

    Returns:
        BBox in pixel coordinates (inclusive maxima), or None if the raster
        is blank.
    """
    rows, cols = np.where(raster < threshold)
    if len(rows) == 0:
        return None

    return BBox(
        x_min=float(cols.min()),
        y_min=float(rows.min()),
        x_max=float(cols.max()),
        y_max=float(rows.max())
    )
