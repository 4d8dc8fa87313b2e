"""Exception types raised by the letter collector.

Every failure in the capture and storage path is recoverable: callers catch
these, report them to the operator, and keep the session running. Nothing
here is fatal to the process.

Hierarchy::

    PencilLettersError
        EmptyCaptureError
        SampleStoreError
            DirectoryCreateError
            EncodeError
            WriteError
            PolicyMismatchError
"""

from __future__ import annotations


class PencilLettersError(Exception):
    """Base class for all collector errors."""


class EmptyCaptureError(PencilLettersError):
    """The drawing has no ink; nothing may be persisted for it."""

    def __init__(self, letter: str | None = None):
        self.letter = letter
        if letter:
            super().__init__(f"No ink captured for letter {letter!r}")
        else:
            super().__init__("No ink captured")


class SampleStoreError(PencilLettersError):
    """A sample could not be persisted.

    Attributes:
        letter: Letter whose namespace was being written.
        path: Path involved in the failure, if known.
    """

    def __init__(self, message: str, letter: str | None = None, path=None):
        super().__init__(message)
        self.letter = letter
        self.path = path


class DirectoryCreateError(SampleStoreError):
    """The letter namespace directory could not be created."""


class EncodeError(SampleStoreError):
    """The raster could not be serialized to PNG."""


class WriteError(SampleStoreError):
    """An I/O failure occurred while writing the sample file."""


class PolicyMismatchError(SampleStoreError):
    """The dataset was created under a different normalization policy."""
