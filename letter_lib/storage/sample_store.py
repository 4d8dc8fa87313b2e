"""Durable, collision-free storage of normalized samples.

On-disk layout::

    <root>/
        dataset.json          normalization policy the dataset is bound to
        A/.sequence           highest sequence number ever assigned to A
        A/A_0001.png
        A/A_0002.png
        B/B_0001.png
        ...

Each letter owns one directory (its namespace). Files are lossless
grayscale PNGs named ``<LETTER>_<sequence:04d>.png``. Sequence numbers
start at 1 and are never reused, even after the newest file is
deleted. Externally deleted or added files are tolerated because counts
come from file presence, not from filename continuity.

Writes are atomic: the PNG is written to a hidden temporary file in the
namespace directory and renamed into place, so a concurrent reader sees
either the complete file or nothing. Assigning a sequence number and
writing the file happen inside one per-letter critical section
(:meth:`SampleStore.save`); writes for different letters may run in
parallel.

Example usage::

    from letter_lib.storage import SampleStore

    store = SampleStore('dataset')
    sample = store.save('A', raster)
    print(sample.path)            # dataset/A/A_0001.png
    print(store.count('A'))       # 1
"""

from __future__ import annotations

import contextlib
import io
import json
import logging
import os
import re
import tempfile
import threading
from pathlib import Path
from typing import Dict, List, Optional

import numpy as np
from PIL import Image

from ..config import (
    ALPHABET,
    MANIFEST_NAME,
    SAMPLE_EXTENSION,
    SAMPLE_FILENAME_FORMAT,
    NormalizationPolicy,
)
from ..domain.records import Sample
from ..errors import (
    DirectoryCreateError,
    EncodeError,
    PolicyMismatchError,
    SampleStoreError,
    WriteError,
)

logger = logging.getLogger(__name__)

MANIFEST_VERSION = 1

# Hidden per-letter file holding the highest sequence number ever assigned
SEQUENCE_MARKER = '.sequence'

_SEQUENCE_RE = re.compile(r'^(?P<letter>[A-Za-z])_(?P<seq>\d+)\.png$', re.IGNORECASE)


def sample_filename(letter: str, sequence_number: int) -> str:
    """File name for a sample, e.g. ``sample_filename('A', 7) == 'A_0007.png'``."""
    return SAMPLE_FILENAME_FORMAT.format(letter=letter, sequence=sequence_number)


def parse_sequence_number(filename: str, letter: str) -> Optional[int]:
    """Sequence number encoded in a sample file name, or None if it has none."""
    match = _SEQUENCE_RE.match(filename)
    if not match or match.group('letter').upper() != letter:
        return None
    return int(match.group('seq'))


def encode_png(raster: np.ndarray, expected_size: Optional[int] = None) -> bytes:
    """Losslessly encode a single-channel uint8 raster as PNG bytes.

    Raises:
        EncodeError: If the array is not a 2D uint8 image of the expected
            size, or Pillow cannot serialize it.
    """
    arr = np.asarray(raster)
    if arr.ndim != 2 or arr.dtype != np.uint8:
        raise EncodeError(f"Expected a 2D uint8 raster, got shape={arr.shape} dtype={arr.dtype}")
    if expected_size is not None and arr.shape != (expected_size, expected_size):
        raise EncodeError(f"Expected a {expected_size}x{expected_size} raster, got {arr.shape}")

    try:
        img = Image.fromarray(np.ascontiguousarray(arr))
        buf = io.BytesIO()
        img.save(buf, format='PNG')
    except (ValueError, TypeError, OSError) as e:
        raise EncodeError(f"Failed to encode raster as PNG: {e}") from e
    return buf.getvalue()


def _current_umask() -> int:
    mask = os.umask(0)
    os.umask(mask)
    return mask


# Mode of a plainly created file; mkstemp would leave 0600
_FILE_MODE = 0o666 & ~_current_umask()


def _atomic_write(path: Path, data: bytes) -> None:
    """Write ``data`` to ``path`` via a temporary file and rename."""
    fd, tmp_name = tempfile.mkstemp(prefix=f'.{path.name}.', suffix='.tmp', dir=path.parent)
    try:
        with os.fdopen(fd, 'wb') as fh:
            fh.write(data)
            fh.flush()
            os.fsync(fh.fileno())
        os.chmod(tmp_name, _FILE_MODE)
        os.replace(tmp_name, path)
    except BaseException:
        with contextlib.suppress(OSError):
            os.unlink(tmp_name)
        raise


class SampleStore:
    """Append-only per-letter sample storage rooted at an explicit directory.

    Attributes:
        root: Dataset root directory.
        alphabet: Letters accepted as namespaces.
        output_size: Raster size enforced on writes once a policy is bound.
    """

    def __init__(self, root, alphabet: str = ALPHABET):
        self.root = Path(root)
        self.alphabet = alphabet
        self.output_size: Optional[int] = None
        self.policy: Optional[NormalizationPolicy] = None
        self._locks: Dict[str, threading.RLock] = {}
        self._locks_guard = threading.Lock()

    # ------------------------------------------------------------------
    # Namespaces and listings
    # ------------------------------------------------------------------

    def namespace(self, letter: str) -> Path:
        """Directory holding all samples for ``letter``."""
        if len(letter) != 1 or letter not in self.alphabet:
            raise ValueError(f"Not a tracked letter: {letter!r}")
        return self.root / letter

    def sample_files(self, letter: str) -> List[Path]:
        """All sample files currently in the letter's namespace.

        Any visible ``.png`` file counts, whatever its name. A missing
        namespace yields an empty list.

        Raises:
            OSError: If the namespace exists but cannot be listed.
        """
        ns = self.namespace(letter)
        if not ns.exists():
            return []
        return sorted(
            p for p in ns.iterdir()
            if p.suffix.lower() == SAMPLE_EXTENSION
            and not p.name.startswith('.')
            and p.is_file()
        )

    def count(self, letter: str) -> int:
        """Number of sample files for ``letter``."""
        return len(self.sample_files(letter))

    def list_samples(self, letter: str) -> List[Sample]:
        """Samples with a parseable sequence number, ordered by it."""
        samples = []
        for path in self.sample_files(letter):
            seq = parse_sequence_number(path.name, letter)
            if seq is not None:
                samples.append(Sample(letter=letter, sequence_number=seq, path=path))
        return sorted(samples, key=lambda s: s.sequence_number)

    def _marker_path(self, letter: str) -> Path:
        return self.namespace(letter) / SEQUENCE_MARKER

    def _read_marker(self, letter: str) -> int:
        path = self._marker_path(letter)
        try:
            text = path.read_text(encoding='utf-8')
        except FileNotFoundError:
            return 0
        try:
            return int(text.strip())
        except ValueError:
            logger.warning("Ignoring corrupt sequence marker %s: %r", path, text)
            return 0

    def highest_sequence(self, letter: str) -> int:
        """Largest sequence number ever assigned to ``letter``, 0 if none.

        Covers numbers still on disk and numbers whose files have since
        been deleted.
        """
        on_disk = max((s.sequence_number for s in self.list_samples(letter)), default=0)
        return max(on_disk, self._read_marker(letter))

    def next_sequence_number(self, letter: str) -> int:
        """Sequence number for the next sample of ``letter``.

        Equals ``count + 1`` for a gapless namespace. When files were
        deleted or added externally it skips past the highest number ever
        assigned, so a number is never handed out twice.
        """
        return max(self.count(letter), self.highest_sequence(letter)) + 1

    def sample_path(self, letter: str, sequence_number: int) -> Path:
        return self.namespace(letter) / sample_filename(letter, sequence_number)

    def load_sample(self, letter: str, sequence_number: int) -> np.ndarray:
        """Read a stored sample back as a grayscale uint8 array."""
        path = self.sample_path(letter, sequence_number)
        with Image.open(path) as img:
            return np.array(img.convert('L'), dtype=np.uint8)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def _lock_for(self, letter: str) -> threading.RLock:
        with self._locks_guard:
            lock = self._locks.get(letter)
            if lock is None:
                lock = threading.RLock()
                self._locks[letter] = lock
            return lock

    def persist(self, letter: str, sequence_number: int, raster: np.ndarray) -> Sample:
        """Write ``raster`` as sample ``sequence_number`` of ``letter``.

        The namespace is created if needed. The file either appears
        complete or not at all.

        Returns:
            The stored Sample.

        Raises:
            DirectoryCreateError: The namespace could not be created.
            EncodeError: The raster could not be serialized.
            WriteError: The file could not be written, or already exists.
        """
        if sequence_number < 1:
            raise ValueError(f"sequence_number must be positive, got {sequence_number}")
        ns = self.namespace(letter)
        try:
            data = encode_png(raster, self.output_size)
        except EncodeError as e:
            e.letter = letter
            raise

        try:
            ns.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise DirectoryCreateError(
                f"Cannot create namespace {ns}: {e}", letter=letter, path=ns) from e

        path = ns / sample_filename(letter, sequence_number)

        with self._lock_for(letter):
            if path.exists():
                raise WriteError(f"Sample already exists: {path}", letter=letter, path=path)
            try:
                # Reserve the number before the sample appears
                if sequence_number > self._read_marker(letter):
                    _atomic_write(self._marker_path(letter), str(sequence_number).encode('ascii'))
                _atomic_write(path, data)
            except OSError as e:
                raise WriteError(f"Failed to write {path}: {e}", letter=letter, path=path) from e

        logger.info("Saved %s sample #%d to %s", letter, sequence_number, path)
        return Sample(letter=letter, sequence_number=sequence_number, path=path)

    def save(self, letter: str, raster: np.ndarray) -> Sample:
        """Assign the next sequence number and persist, as one critical section."""
        with self._lock_for(letter):
            try:
                sequence_number = self.next_sequence_number(letter)
            except OSError as e:
                raise WriteError(
                    f"Cannot list namespace for {letter}: {e}", letter=letter) from e
            return self.persist(letter, sequence_number, raster)

    # ------------------------------------------------------------------
    # Dataset manifest
    # ------------------------------------------------------------------

    @property
    def manifest_path(self) -> Path:
        return self.root / MANIFEST_NAME

    def read_manifest(self) -> Optional[dict]:
        """Parsed manifest, or None if the dataset has none yet."""
        if not self.manifest_path.exists():
            return None
        try:
            return json.loads(self.manifest_path.read_text(encoding='utf-8'))
        except (OSError, ValueError) as e:
            raise SampleStoreError(f"Unreadable manifest {self.manifest_path}: {e}",
                                   path=self.manifest_path) from e

    def bind_policy(self, policy: NormalizationPolicy, output_size: int) -> None:
        """Bind this dataset to one normalization policy and raster size.

        The first binding writes the manifest. Later bindings must match
        it; rasters produced under different policies cannot share a
        dataset.

        Raises:
            PolicyMismatchError: The manifest names a different policy or size.
            DirectoryCreateError: The root directory could not be created.
            WriteError: The manifest could not be written.
        """
        policy = NormalizationPolicy(policy)
        manifest = self.read_manifest()

        if manifest is not None:
            found_policy = manifest.get('policy')
            found_size = manifest.get('output_size')
            if found_policy != policy.value or found_size != output_size:
                raise PolicyMismatchError(
                    f"Dataset {self.root} uses policy={found_policy} size={found_size}, "
                    f"refusing policy={policy.value} size={output_size}",
                    path=self.manifest_path,
                )
        else:
            try:
                self.root.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise DirectoryCreateError(
                    f"Cannot create dataset root {self.root}: {e}", path=self.root) from e
            payload = {
                'format_version': MANIFEST_VERSION,
                'policy': policy.value,
                'output_size': output_size,
            }
            try:
                _atomic_write(self.manifest_path, json.dumps(payload, indent=2).encode('utf-8'))
            except OSError as e:
                raise WriteError(f"Failed to write manifest: {e}", path=self.manifest_path) from e
            logger.info("Bound dataset %s to policy %s (%dpx)", self.root, policy.value, output_size)

        self.policy = policy
        self.output_size = output_size
