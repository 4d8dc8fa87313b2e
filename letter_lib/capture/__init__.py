"""Capture normalization.

Exports:
    CaptureNormalizer: Renders a drawing into the canonical raster.
    raster_ink_bbox: Bounding box of ink pixels in a raster.
"""

from .normalizer import CaptureNormalizer, raster_ink_bbox

__all__ = ['CaptureNormalizer', 'raster_ink_bbox']
