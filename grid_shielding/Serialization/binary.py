"""Binary persistence of shields.

Layout (little-endian)::

    header   magic "GSHIELD\\0", uint16 version, uint16 flags,
             uint32 dimensionality, uint32 bytes per cell, uint64 cell count
    vectors  float64 granularity[d], lower[d], upper[d]; int64 size[d]
    payload  cell masks (row-major), classified flags packed 8 per byte
    trailer  uint32 CRC32 of vectors and payload

Bit 0 of ``flags`` records whether synthesis reached a fixed point.
"""

import contextlib
import io
import os
import struct
import zlib
from dataclasses import dataclass
from typing import BinaryIO, Union

import numpy as np

from ..Models.grid import Grid
from ..Models.errors import CorruptData, UnsupportedFormat, IncompleteShieldError

MAGIC = b"GSHIELD\0"
FORMAT_VERSION = 1
FLAG_COMPLETE = 0x1

_HEADER = struct.Struct("<8sHHIIQ")
_TRAILER = struct.Struct("<I")
_MAX_DIMENSIONALITY = 64
_CELL_DTYPES = {1: "<u1", 2: "<u2", 4: "<u4", 8: "<u8"}
_READ_CHUNK = 1 << 20

Destination = Union[str, os.PathLike, BinaryIO]


@dataclass
class ShieldFile:
    """Contents of a persisted shield.

    Like ``SynthesisResult``, the grid of an incomplete shield is only
    handed out by ``shield()`` when the caller accepts it explicitly.
    """
    grid: Grid
    complete: bool
    version: int = FORMAT_VERSION

    def shield(self, accept_incomplete: bool = False) -> Grid:
        if not self.complete and not accept_incomplete:
            raise IncompleteShieldError(
                "The stored shield was synthesised without reaching a fixed point. "
                "Pass accept_incomplete=True to use a finite-horizon shield."
            )
        return self.grid


def _open(target: Destination, mode: str):
    if isinstance(target, (str, os.PathLike)):
        return open(target, mode)
    return contextlib.nullcontext(target)


def _write_array(stream: BinaryIO, array: np.ndarray, crc: int) -> int:
    view = memoryview(array.reshape(-1).view(np.uint8))
    stream.write(view)
    return zlib.crc32(view, crc)


def _readinto_exact(stream: BinaryIO, array: np.ndarray, crc: int) -> int:
    view = memoryview(array.reshape(-1).view(np.uint8))
    filled = 0
    while filled < len(view):
        n = stream.readinto(view[filled:])
        if not n:
            raise CorruptData(
                f"Shield data is truncated: expected {len(view)} bytes, got {filled}"
            )
        filled += n
    return zlib.crc32(view, crc)


def _read_exact(stream: BinaryIO, n: int) -> bytes:
    data = stream.read(n)
    if len(data) != n:
        raise CorruptData(f"Shield data is truncated: expected {n} bytes, got {len(data)}")
    return data


def _seekable(stream: BinaryIO) -> bool:
    seekable = getattr(stream, "seekable", None)
    return bool(seekable is not None and seekable())


def _read_chunked(stream: BinaryIO, n: int) -> bytes:
    """Read ``n`` bytes without allocating more than has actually arrived."""
    data = bytearray()
    while len(data) < n:
        chunk = stream.read(min(_READ_CHUNK, n - len(data)))
        if not chunk:
            raise CorruptData(f"Shield data is truncated: expected {n} more bytes, got {len(data)}")
        data += chunk
    return bytes(data)


def _check_remaining(stream: BinaryIO, n: int) -> None:
    position = stream.tell()
    end = stream.seek(0, io.SEEK_END)
    stream.seek(position)
    if end - position < n:
        raise CorruptData(
            f"Shield data is truncated: header declares {n} more bytes, {end - position} remain"
        )


def robust_grid_serialization(destination: Destination, grid: Grid, complete: bool = True) -> None:
    """
    Write ``grid`` to ``destination`` (a path or a writable binary stream).

    Cell arrays are written straight from their numpy buffers.
    """
    itemsize = grid.array.dtype.itemsize
    if itemsize not in _CELL_DTYPES or grid.array.dtype.kind != "u":
        raise ValueError(f"Unsupported cell dtype {grid.array.dtype}")

    d = grid.dimensionality
    flags = FLAG_COMPLETE if complete else 0
    header = _HEADER.pack(MAGIC, FORMAT_VERSION, flags, d, itemsize, len(grid))

    vectors = [
        np.ascontiguousarray(grid.granularity, dtype="<f8"),
        np.ascontiguousarray(grid.bounds.lower, dtype="<f8"),
        np.ascontiguousarray(grid.bounds.upper, dtype="<f8"),
        np.asarray(grid.size, dtype="<i8"),
    ]
    cells = np.ascontiguousarray(grid.array, dtype=_CELL_DTYPES[itemsize]).reshape(-1)
    classified = np.packbits(grid.classified.reshape(-1))

    with _open(destination, "wb") as stream:
        stream.write(header)
        crc = 0
        for vector in vectors:
            crc = _write_array(stream, vector, crc)
        crc = _write_array(stream, cells, crc)
        crc = _write_array(stream, classified, crc)
        stream.write(_TRAILER.pack(crc))


def robust_grid_deserialization(source: Destination) -> ShieldFile:
    """
    Read a shield written by ``robust_grid_serialization``.

    Raises
    ------
    CorruptData
        The data is malformed, truncated, or fails its checksum
    UnsupportedFormat
        The data was written in a format version this library cannot read
    """
    with _open(source, "rb") as stream:
        magic, version, flags, d, itemsize, cell_count = _HEADER.unpack(
            _read_exact(stream, _HEADER.size)
        )
        if magic != MAGIC:
            raise CorruptData("Not a shield file (bad magic number)")
        if version != FORMAT_VERSION:
            raise UnsupportedFormat(
                f"Shield format version {version} is not supported (expected {FORMAT_VERSION})"
            )
        if not 0 < d <= _MAX_DIMENSIONALITY:
            raise CorruptData(f"Invalid dimensionality {d}")
        if itemsize not in _CELL_DTYPES:
            raise CorruptData(f"Invalid cell size {itemsize}")

        crc = 0
        granularity = np.empty(d, dtype="<f8")
        lower = np.empty(d, dtype="<f8")
        upper = np.empty(d, dtype="<f8")
        size = np.empty(d, dtype="<i8")
        for vector in (granularity, lower, upper, size):
            crc = _readinto_exact(stream, vector, crc)

        if np.any(size <= 0) or int(np.prod(size, dtype=np.int64)) != cell_count:
            raise CorruptData(f"Grid size {size.tolist()} does not match cell count {cell_count}")

        # The grid is only allocated once the stream is known to hold its payload.
        payload_size = cell_count * itemsize + (cell_count + 7) // 8 + _TRAILER.size
        if not _seekable(stream):
            stream = io.BytesIO(_read_chunked(stream, payload_size))
        _check_remaining(stream, payload_size)

        try:
            grid = Grid(granularity, lower, upper, dtype=_CELL_DTYPES[itemsize])
        except ValueError as e:
            raise CorruptData(f"Invalid grid parameters: {e}") from e
        if grid.size != tuple(int(n) for n in size):
            raise CorruptData(f"Grid bounds imply size {list(grid.size)}, header says {size.tolist()}")

        cells = grid.array.reshape(-1)
        crc = _readinto_exact(stream, cells, crc)
        packed = np.empty((cell_count + 7) // 8, dtype=np.uint8)
        crc = _readinto_exact(stream, packed, crc)

        (expected_crc,) = _TRAILER.unpack(_read_exact(stream, _TRAILER.size))
        if crc != expected_crc:
            raise CorruptData("Shield data checksum mismatch")

    grid.classified[...] = np.unpackbits(packed, count=cell_count).astype(bool).reshape(grid.size)
    return ShieldFile(grid=grid, complete=bool(flags & FLAG_COMPLETE), version=version)
