"""
compression.py: gzip and Base64 wrappers used to store corpus blobs.

Every failure is raised as ValueError naming the stage that failed, chained to
the underlying library error.
"""

import base64
import binascii
import gzip
import io
import zlib

DECOMPRESS_CHUNK = 4096  # bytes per write in decompress_into
GZIP_MAGIC = b"\x1f\x8b"
GZIP_METHOD_DEFLATE = 8
GZIP_FHCRC, GZIP_FEXTRA, GZIP_FNAME, GZIP_FCOMMENT = 0x02, 0x04, 0x08, 0x10
GZIP_RESERVED_FLAGS = 0xE0


def compress(raw_data: bytes) -> bytes:
    try:
        return gzip.compress(bytes(raw_data))
    except (OSError, zlib.error) as e:
        raise ValueError(f"could not compress with gzip: {e}") from e


def _check_gzip_header(data: bytes) -> str:
    """
    Walk the member header (RFC 1952): fixed 10 bytes plus the optional
    FEXTRA / FNAME / FCOMMENT / FHCRC fields. Returns "" when it is complete and
    well-formed, otherwise the reason it is not.
    """
    if len(data) < 10:
        return f"truncated header ({len(data)} bytes)"
    if data[:2] != GZIP_MAGIC:
        return f"invalid magic {data[:2]!r}"
    if data[2] != GZIP_METHOD_DEFLATE:
        return f"unknown compression method {data[2]}"
    flags = data[3]
    if flags & GZIP_RESERVED_FLAGS:
        return f"reserved flag bits set (flags=0x{flags:02x})"
    pos = 10
    if flags & GZIP_FEXTRA:
        if pos + 2 > len(data):
            return "truncated extra field"
        pos += 2 + int.from_bytes(data[pos:pos + 2], "little")
    for flag, name in ((GZIP_FNAME, "file name"), (GZIP_FCOMMENT, "comment")):
        if flags & flag:
            end = data.find(b"\x00", pos)
            if end < 0:
                return f"unterminated {name}"
            pos = end + 1
    if flags & GZIP_FHCRC:
        pos += 2
    if pos > len(data):
        return "truncated header"
    return ""


def _open_gzip(compressed_data: bytes) -> gzip.GzipFile:
    data = bytes(compressed_data)
    problem = _check_gzip_header(data)
    if problem:
        raise ValueError(f"could not initialise gzip: {problem}")
    return gzip.GzipFile(fileobj=io.BytesIO(data))


def decompress(compressed_data: bytes) -> bytes:
    with _open_gzip(compressed_data) as gz:
        try:
            return gz.read()
        except (OSError, EOFError, zlib.error) as e:
            raise ValueError(f"could not read data with gzip: {e}") from e


def decompress_into(compressed_data: bytes, dest, chunk_size: int = DECOMPRESS_CHUNK) -> int:
    """
    Stream the decompressed contents of `compressed_data` into the writable
    binary file object `dest`, at most `chunk_size` bytes per write.
    Short writes from raw sinks are retried until the chunk is consumed; a
    write returning None (buffered / duck-typed sinks) counts as complete.
    Returns the number of bytes written.
    """
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    written = 0
    with _open_gzip(compressed_data) as gz:
        while True:
            try:
                chunk = gz.read(chunk_size)
            except (OSError, EOFError, zlib.error) as e:
                raise ValueError(f"could not read data with gzip: {e}") from e
            if not chunk:
                break
            written += _write_all(dest, chunk)
    return written


def _write_all(dest, chunk: bytes) -> int:
    view = memoryview(chunk)
    while view:
        n = dest.write(view)
        if n is None:
            break
        if n <= 0:
            raise ValueError(f"could not write decompressed data: sink accepted {n} bytes")
        view = view[n:]
    return len(chunk)


def decode_b64(b64_data: bytes) -> bytes:
    """Standard alphabet, padding required; CR/LF line wrapping is skipped."""
    if isinstance(b64_data, str):
        b64_data = b64_data.encode("ascii", errors="replace")
    try:
        return base64.b64decode(bytes(b64_data).translate(None, b"\r\n"), validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValueError(f"could not decode Base64: {e}") from e


def encode_b64(raw_data: bytes) -> bytes:
    return base64.b64encode(bytes(raw_data))
