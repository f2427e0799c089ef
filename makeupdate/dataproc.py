import gzip
import os
import zlib

import bsdiff4

from . import iohelper
from .errors import CorruptArtifact, DiffFailed


GZIP_LEVEL = int(os.environ.get("MAKEUPDATE_GZIP_LEVEL", "9"))

if not 0 <= GZIP_LEVEL <= 9:
    raise Exception(f"MAKEUPDATE_GZIP_LEVEL out of range: {GZIP_LEVEL}")

def gzip_compress_bytes(data: bytes, level: int = GZIP_LEVEL) -> bytes:
    # mtime=0 keeps the output stable across re-publishes of the same binary
    return gzip.compress(data, compresslevel=level, mtime=0)

def gzip_decompress_bytes(data: bytes) -> bytes:
    return gzip.decompress(data)

def gzip_decompress_file(path: os.PathLike) -> bytes:
    data = iohelper.read_file(path)
    try:
        return gzip_decompress_bytes(data)
    except (gzip.BadGzipFile, EOFError, zlib.error) as e:
        raise CorruptArtifact(path, e) from e

def bsdiff_generate_patch(old: bytes, new: bytes, old_version: str, new_version: str, platform: str) -> bytes:
    try:
        return bsdiff4.diff(old, new)
    except Exception as e:
        raise DiffFailed(old_version, new_version, platform, e) from e
