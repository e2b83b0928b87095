"""Reading and writing GSD (general simulation data) files.

A GSD file holds a 256-byte header, an index of data chunks, a list of chunk
names and the chunk data itself. Chunks are grouped into frames; each chunk is
an N x M array of one scalar type.
"""

from __future__ import annotations

import bisect
import enum
import os
import struct
from dataclasses import dataclass, replace
from typing import BinaryIO, ClassVar, Optional, Union

MAGIC_ID = 0x65DF65DF65DF65DF
NAME_SIZE = 64
RESERVED_BYTES = 80
CURRENT_VERSION_MAJOR = 2
CURRENT_VERSION_MINOR = 1

_INITIAL_INDEX_SIZE = 128
_INITIAL_NAME_BUFFER_SIZE = 1024
_DEFAULT_MAXIMUM_WRITE_BUFFER_SIZE = 64 * 1024 * 1024
_DEFAULT_INDEX_ENTRIES_TO_BUFFER = 256 * 1024
_MAX_NAMES = 0xFFFF

_HEADER_STRUCT = struct.Struct("<QQQQQII64s64s80s")
_ENTRY_STRUCT = struct.Struct("<QQqIHBB")

PathLike = Union[str, os.PathLike]


class GsdType(enum.IntEnum):
    """Element types of data chunks."""

    UINT8 = 1
    UINT16 = 2
    UINT32 = 3
    UINT64 = 4
    INT8 = 5
    INT16 = 6
    INT32 = 7
    INT64 = 8
    FLOAT = 9
    DOUBLE = 10
    CHARACTER = 11


_TYPE_SIZES = {
    GsdType.UINT8: 1,
    GsdType.UINT16: 2,
    GsdType.UINT32: 4,
    GsdType.UINT64: 8,
    GsdType.INT8: 1,
    GsdType.INT16: 2,
    GsdType.INT32: 4,
    GsdType.INT64: 8,
    GsdType.FLOAT: 4,
    GsdType.DOUBLE: 8,
    GsdType.CHARACTER: 1,
}


class OpenFlag(enum.IntEnum):
    """Modes for opening a GSD file."""

    READWRITE = 1
    READONLY = 2
    APPEND = 3


class GsdError(Exception):
    """Base class for errors raised while handling GSD files."""


class NotAGsdFileError(GsdError):
    """The file is not a GSD file."""


class InvalidVersionError(GsdError):
    """The GSD file version cannot be read."""


class FileCorruptError(GsdError):
    """The GSD file is corrupt."""


class NamelistFullError(GsdError):
    """The file cannot store any more unique chunk names."""


class FileMustBeWritableError(GsdError):
    """The operation needs a file opened for writing."""


def make_version(major: int, minor: int) -> int:
    """Pack a version as major in the high 16 bits and minor in the low 16 bits."""
    return ((major << 16) | minor) & 0xFFFFFFFF


def sizeof_type(type_) -> int:
    """Size in bytes of one element of ``type_``, or 0 for an unknown type."""
    try:
        return _TYPE_SIZES[GsdType(type_)]
    except ValueError:
        return 0


def _fixed_str(text: str) -> bytes:
    return text.encode("utf-8")[:NAME_SIZE - 1]


def _c_str(raw: bytes) -> str:
    return raw.split(b"\0", 1)[0].decode("utf-8", "replace")


@dataclass
class Header:
    """The file header stored in the first 256 bytes."""

    magic: int = MAGIC_ID
    index_location: int = 0
    index_allocated_entries: int = 0
    namelist_location: int = 0
    namelist_allocated_entries: int = 0
    schema_version: int = 0
    gsd_version: int = 0
    application: str = ""
    schema: str = ""
    reserved: bytes = bytes(RESERVED_BYTES)

    SIZE: ClassVar[int] = _HEADER_STRUCT.size

    def pack(self) -> bytes:
        """Encode the header; application and schema are cut to 63 bytes."""
        return _HEADER_STRUCT.pack(
            self.magic,
            self.index_location,
            self.index_allocated_entries,
            self.namelist_location,
            self.namelist_allocated_entries,
            self.schema_version,
            self.gsd_version,
            _fixed_str(self.application),
            _fixed_str(self.schema),
            bytes(self.reserved)[:RESERVED_BYTES],
        )

    @classmethod
    def unpack(cls, data: bytes) -> Header:
        """Decode a header from the first 256 bytes of ``data``."""
        if len(data) < cls.SIZE:
            raise ValueError(f"header needs {cls.SIZE} bytes, got {len(data)}")
        (magic, index_location, index_allocated, namelist_location,
         namelist_allocated, schema_version, gsd_version, application,
         schema, reserved) = _HEADER_STRUCT.unpack_from(data)
        return cls(magic, index_location, index_allocated, namelist_location,
                   namelist_allocated, schema_version, gsd_version,
                   _c_str(application), _c_str(schema), reserved)


@dataclass(frozen=True)
class IndexEntry:
    """Index entry describing one data chunk."""

    frame: int
    n: int
    location: int
    m: int
    id: int
    type: int
    flags: int = 0

    SIZE: ClassVar[int] = _ENTRY_STRUCT.size

    @property
    def nbytes(self) -> int:
        """Size of the chunk's data in bytes."""
        return self.n * self.m * sizeof_type(self.type)

    def pack(self) -> bytes:
        return _ENTRY_STRUCT.pack(self.frame, self.n, self.location, self.m,
                                  self.id, self.type, self.flags)

    @classmethod
    def unpack(cls, data: bytes) -> IndexEntry:
        if len(data) < cls.SIZE:
            raise ValueError(f"index entry needs {cls.SIZE} bytes, got {len(data)}")
        return cls(*_ENTRY_STRUCT.unpack_from(data))


def _entry_key(entry: IndexEntry) -> tuple[int, int]:
    return entry.frame, entry.id


def _sync(fp: BinaryIO) -> None:
    fp.flush()
    os.fsync(fp.fileno())


def _initialize_file(fp: BinaryIO, application: str, schema: str,
                     schema_version: int) -> None:
    fp.seek(0)
    fp.truncate(0)
    header = Header(
        magic=MAGIC_ID,
        index_location=Header.SIZE,
        index_allocated_entries=_INITIAL_INDEX_SIZE,
        namelist_location=Header.SIZE + IndexEntry.SIZE * _INITIAL_INDEX_SIZE,
        namelist_allocated_entries=_INITIAL_NAME_BUFFER_SIZE // NAME_SIZE,
        schema_version=schema_version,
        gsd_version=make_version(CURRENT_VERSION_MAJOR, CURRENT_VERSION_MINOR),
        application=application,
        schema=schema,
    )
    fp.write(header.pack())
    fp.write(bytes(IndexEntry.SIZE * _INITIAL_INDEX_SIZE))
    fp.write(bytes(_INITIAL_NAME_BUFFER_SIZE))
    _sync(fp)


def create(path: PathLike, application: str, schema: str, schema_version: int) -> None:
    """Create an empty GSD file at ``path``, overwriting any existing file."""
    with open(path, "w+b") as fp:
        _initialize_file(fp, application, schema, schema_version)


def create_and_open(path: PathLike, application: str, schema: str,
                    schema_version: int, mode: OpenFlag = OpenFlag.READWRITE,
                    exclusive_create: bool = False) -> GsdFile:
    """Create an empty GSD file and open it for writing."""
    mode = OpenFlag(mode)
    if mode == OpenFlag.READONLY:
        raise FileMustBeWritableError("a newly created file must be opened for writing")
    fp = open(path, "x+b" if exclusive_create else "w+b")
    try:
        _initialize_file(fp, application, schema, schema_version)
    except BaseException:
        fp.close()
        raise
    return GsdFile(fp, mode)


def open_file(path: PathLike, mode: OpenFlag = OpenFlag.READONLY) -> GsdFile:
    """Open an existing GSD file."""
    mode = OpenFlag(mode)
    fp = open(path, "rb" if mode == OpenFlag.READONLY else "r+b")
    return GsdFile(fp, mode)


class GsdFile:
    """An open GSD file. Use :func:`open_file` or :func:`create_and_open` to get one."""

    def __init__(self, fp: BinaryIO, mode: OpenFlag) -> None:
        self._fp = fp
        self.mode = OpenFlag(mode)
        self._closed = False
        try:
            self._initialize()
        except BaseException:
            fp.close()
            self._closed = True
            raise

    # ----- low level helpers -------------------------------------------------

    def _pread(self, offset: int, n: int) -> bytes:
        self._fp.seek(offset)
        return self._fp.read(n)

    def _pwrite(self, offset: int, data: bytes) -> None:
        self._fp.seek(offset)
        self._fp.write(data)

    def _sync(self) -> None:
        _sync(self._fp)

    def _write_header(self) -> None:
        self._pwrite(0, self.header.pack())

    @property
    def _writable(self) -> bool:
        return self.mode != OpenFlag.READONLY

    @property
    def _is_v1(self) -> bool:
        return self.header.gsd_version < make_version(2, 0)

    def _require_writable(self) -> None:
        if not self._writable:
            raise FileMustBeWritableError("the file was opened read-only")

    # ----- opening ----------------------------------------------------------

    def _initialize(self) -> None:
        data = self._pread(0, Header.SIZE)
        if len(data) != Header.SIZE:
            raise NotAGsdFileError("file is too short to hold a GSD header")
        header = Header.unpack(data)
        if header.magic != MAGIC_ID:
            raise NotAGsdFileError("magic number does not match")
        version = header.gsd_version
        if ((version < make_version(1, 0) and version != make_version(0, 3))
                or version >= make_version(3, 0)):
            raise InvalidVersionError(f"unsupported GSD version {version:#x}")
        self.header = header
        self._file_size = self._fp.seek(0, os.SEEK_END)

        self._read_names()
        self._frame_names: list[str] = []
        self._frame_names_data = bytearray()
        self._map_index()

        self._cur_frame = self._file_index[-1].frame + 1 if self._file_index else 0
        self._frame_index: list[IndexEntry] = []
        self._buffer_index: list[IndexEntry] = []
        self._write_buffer = bytearray()
        self._pending = 0
        self._maximum_write_buffer_size = _DEFAULT_MAXIMUM_WRITE_BUFFER_SIZE
        self._index_entries_to_buffer = _DEFAULT_INDEX_ENTRIES_TO_BUFFER

        current = make_version(CURRENT_VERSION_MAJOR, CURRENT_VERSION_MINOR)
        if (self.mode in (OpenFlag.READWRITE, OpenFlag.APPEND)
                and version <= current and version >> 16 == CURRENT_VERSION_MAJOR):
            self.header = replace(self.header, gsd_version=current)
            self._write_header()

    def _read_names(self) -> None:
        header = self.header
        n_bytes = NAME_SIZE * header.namelist_allocated_entries
        if header.namelist_location + n_bytes > self._file_size:
            raise FileCorruptError("name list lies past the end of the file")
        if n_bytes == 0:
            raise FileCorruptError("name list is empty")
        raw = self._pread(header.namelist_location, n_bytes)
        if len(raw) != n_bytes:
            raise OSError("short read of the name list")
        if raw[-1] != 0:
            raise FileCorruptError("name list is not terminated")

        self._names_reserved = n_bytes
        self._file_names: list[str] = []
        self._name_map: dict[str, int] = {}
        start = 0
        v1 = self._is_v1
        while start < n_bytes and raw[start] != 0:
            end = raw.index(0, start)
            name = raw[start:end].decode("utf-8", "replace")
            self._name_map.setdefault(name, len(self._file_names))
            self._file_names.append(name)
            start = start + NAME_SIZE if v1 else end + 1
        self._names_data = bytearray(raw[:start])

    def _is_entry_valid(self, entry: IndexEntry) -> bool:
        if sizeof_type(entry.type) == 0:
            return False
        if entry.location + entry.nbytes > self._file_size:
            return False
        if entry.frame >= self.header.index_allocated_entries:
            return False
        if entry.id >= len(self._file_names) + len(self._frame_names):
            return False
        return entry.flags == 0

    def _map_index(self) -> None:
        header = self.header
        count = header.index_allocated_entries
        n_bytes = IndexEntry.SIZE * count
        if header.index_location + n_bytes > self._file_size or count == 0:
            raise FileCorruptError("index lies past the end of the file")
        raw = self._pread(header.index_location, n_bytes)
        if len(raw) != n_bytes:
            raise OSError("short read of the index")

        def entry(i: int) -> IndexEntry:
            return IndexEntry.unpack(raw[i * IndexEntry.SIZE:(i + 1) * IndexEntry.SIZE])

        first = entry(0)
        if first.location == 0:
            size = 0
        else:
            if not self._is_entry_valid(first):
                raise FileCorruptError("first index entry is invalid")
            lo, hi = 0, count
            while hi - lo > 1:
                mid = (lo + hi) // 2
                candidate = entry(mid)
                if candidate.location != 0:
                    if (not self._is_entry_valid(candidate)
                            or candidate.frame < entry(lo).frame):
                        raise FileCorruptError(f"index entry {mid} is invalid")
                    lo = mid
                else:
                    hi = mid
            size = hi
        self._file_index = [entry(i) for i in range(size)]
        self._index_reserved = count

    # ----- public properties ------------------------------------------------

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def maximum_write_buffer_size(self) -> int:
        """Chunks smaller than this many bytes are buffered before writing."""
        return self._maximum_write_buffer_size

    @maximum_write_buffer_size.setter
    def maximum_write_buffer_size(self, size: int) -> None:
        if size <= 0:
            raise ValueError("maximum write buffer size must be positive")
        self._maximum_write_buffer_size = size

    @property
    def index_entries_to_buffer(self) -> int:
        """Buffered index entries above which :meth:`end_frame` flushes."""
        return self._index_entries_to_buffer

    @index_entries_to_buffer.setter
    def index_entries_to_buffer(self, number: int) -> None:
        if number <= 0:
            raise ValueError("number of index entries to buffer must be positive")
        self._index_entries_to_buffer = number

    def nframes(self) -> int:
        """Number of completed frames."""
        return self._cur_frame

    # ----- writing -----------------------------------------------------------

    def _append_name(self, name: str) -> int:
        total = len(self._file_names) + len(self._frame_names)
        if total == _MAX_NAMES:
            raise NamelistFullError("no more chunk names may be added")
        if self._is_v1:
            raw = name.encode("utf-8")[:NAME_SIZE - 1]
            self._frame_names_data += raw.ljust(NAME_SIZE, b"\0")
            key = raw.decode("utf-8", "replace")
        else:
            self._frame_names_data += name.encode("utf-8") + b"\0"
            key = name
        self._frame_names.append(key)
        self._name_map.setdefault(key, total)
        return total

    def write_chunk(self, name: str, type_, n: int, m: int, data=None) -> None:
        """Add an ``n`` x ``m`` chunk of ``type_`` elements to the current frame."""
        if n < 0 or m < 0:
            raise ValueError("chunk dimensions must not be negative")
        if n > 0 and data is None:
            raise ValueError("data is required when n > 0")
        if m == 0:
            raise ValueError("m must be positive")
        self._require_writable()
        type_ = GsdType(type_)
        if not name or "\0" in name:
            raise ValueError("chunk name must be non-empty and hold no NUL")
        size = n * m * sizeof_type(type_)
        payload = b""
        if size > 0:
            payload = bytes(memoryview(data).cast("B"))
            if len(payload) != size:
                raise ValueError(f"chunk needs {size} bytes of data, got {len(payload)}")

        chunk_id = self._name_map.get(name)
        if chunk_id is None:
            chunk_id = self._append_name(name)

        entry = IndexEntry(frame=self._cur_frame, n=n, location=0, m=m,
                           id=chunk_id, type=int(type_))
        if size < self._maximum_write_buffer_size:
            if size > self._maximum_write_buffer_size - len(self._write_buffer):
                self._flush_write_buffer()
            self._buffer_index.append(replace(entry, location=len(self._write_buffer)))
            self._write_buffer += payload
        else:
            location = self._file_size
            self._frame_index.append(replace(entry, location=location))
            self._pwrite(location, payload)
            self._file_size += size
        self._pending += 1

    def _flush_write_buffer(self) -> None:
        if not self._write_buffer and not self._buffer_index:
            return
        if not self._buffer_index:
            raise ValueError("buffered data has no index entries")
        offset = self._file_size
        if self._write_buffer:
            self._pwrite(offset, bytes(self._write_buffer))
            self._file_size += len(self._write_buffer)
        self._write_buffer = bytearray()
        self._frame_index.extend(replace(e, location=e.location + offset)
                                 for e in self._buffer_index)
        self._buffer_index = []

    def _flush_name_buffer(self) -> None:
        if not self._frame_names:
            return
        old_reserved = self._names_reserved
        old_size = len(self._names_data)
        needed = old_size + len(self._frame_names_data)
        if needed > old_reserved:
            new_reserved = old_reserved * 2
            while needed >= new_reserved:
                new_reserved *= 2
            self._names_reserved = new_reserved
        self._names_data += self._frame_names_data
        self._file_names.extend(self._frame_names)
        self._frame_names = []
        self._frame_names_data = bytearray()

        padded = bytes(self._names_data).ljust(self._names_reserved, b"\0")
        if self._names_reserved > old_reserved:
            offset = self._file_size
            self._pwrite(offset, padded)
            self._sync()
            self._file_size += self._names_reserved
            self.header = replace(self.header, namelist_location=offset,
                                  namelist_allocated_entries=self._names_reserved // NAME_SIZE)
            self._write_header()
        else:
            self._pwrite(self.header.namelist_location + old_size, padded[old_size:])
        self._sync()

    def _expand_file_index(self, size_required: int) -> None:
        self._require_writable()
        size_old = self._index_reserved
        size_new = size_old * 2
        while size_new <= size_required:
            size_new *= 2
        old_bytes = self._pread(self.header.index_location, IndexEntry.SIZE * size_old)
        if len(old_bytes) != IndexEntry.SIZE * size_old:
            raise OSError("short read of the index")
        new_location = self._fp.seek(0, os.SEEK_END)
        self._pwrite(new_location,
                     old_bytes + bytes(IndexEntry.SIZE * (size_new - size_old)))
        self._sync()
        self.header = replace(self.header, index_location=new_location,
                              index_allocated_entries=size_new)
        self._file_size = new_location + IndexEntry.SIZE * size_new
        self._index_reserved = size_new
        self._write_header()
        self._sync()

    def flush(self) -> None:
        """Write buffered data and the index entries of completed frames to the file."""
        self._require_writable()
        self._flush_name_buffer()
        self._flush_write_buffer()
        self._sync()
        if self._pending > len(self._frame_index):
            raise ValueError("more pending entries than buffered entries")
        to_write = len(self._frame_index) - self._pending
        if to_write > 0:
            if len(self._file_index) + to_write > self._index_reserved:
                self._expand_file_index(len(self._file_index) + to_write)
            self._frame_index.sort(key=_entry_key)
            entries = self._frame_index[:to_write]
            self._frame_index = self._frame_index[to_write:]
            position = self.header.index_location + IndexEntry.SIZE * len(self._file_index)
            self._pwrite(position, b"".join(e.pack() for e in entries))
            self._file_index.extend(entries)

    def end_frame(self) -> None:
        """Complete the current frame."""
        self._require_writable()
        self._cur_frame += 1
        self._pending = 0
        if self._frame_index or len(self._buffer_index) > self._index_entries_to_buffer:
            self.flush()

    # ----- reading -----------------------------------------------------------

    def find_chunk(self, frame: int, name: str) -> Optional[IndexEntry]:
        """The index entry of chunk ``name`` in ``frame``, or None."""
        if frame < 0 or frame >= self._cur_frame:
            return None
        if self._writable:
            self.flush()
        match_id = self._name_map.get(name)
        if match_id is None:
            return None
        index = self._file_index
        if not self._is_v1:
            target = (frame, match_id)
            i = bisect.bisect_left(index, target, key=_entry_key)
            if i < len(index) and _entry_key(index[i]) == target:
                return index[i]
            return None
        hi = bisect.bisect_right(index, frame, key=lambda e: e.frame)
        for entry in reversed(index[:hi]):
            if entry.frame != frame:
                break
            if entry.id == match_id:
                return entry
        return None

    def read_chunk(self, chunk: IndexEntry) -> bytes:
        """The raw bytes of ``chunk``."""
        if self._writable:
            self.flush()
        size = chunk.nbytes
        if size == 0 or chunk.location == 0:
            raise FileCorruptError("chunk holds no data")
        if chunk.location + size > self._file_size:
            raise FileCorruptError("chunk lies past the end of the file")
        data = self._pread(chunk.location, size)
        if len(data) != size:
            raise OSError("short read of chunk data")
        return data

    def find_matching_chunk_names(self, match: str) -> list[str]:
        """Stored chunk names that begin with ``match``, in file order."""
        if not self._file_names:
            return []
        if self._writable:
            self.flush()
        return [name for name in self._file_names if name and name.startswith(match)]

    # ----- whole-file operations --------------------------------------------

    def truncate(self) -> None:
        """Drop all frames and chunks, keeping application, schema and schema version."""
        self._require_writable()
        header = self.header
        _initialize_file(self._fp, header.application, header.schema,
                         header.schema_version)
        self._initialize()

    def close(self) -> None:
        """Flush pending data of completed frames and close the file."""
        if self._closed:
            return
        try:
            if self._writable:
                self.flush()
        finally:
            self._fp.close()
            self._closed = True

    def __enter__(self) -> GsdFile:
        return self

    def __exit__(self, *args) -> None:
        self.close()