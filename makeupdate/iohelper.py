from __future__ import annotations

import hashlib
import os
import random
from contextlib import contextmanager
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Buffer

def read_file(path: os.PathLike) -> bytes:
    with open(path, 'rb') as f:
        return f.read()

def _tmp_name(name: os.PathLike) -> str:
    return os.fspath(name) + f'.tmp{os.getpid():X}{random.randint(0, 0x7FFFFFFF):08X}'

def write_file(path: os.PathLike, data: Buffer) -> None:
    with safe_output_fileobj(path, 'wb') as f:
        f.write(data)

def sha256_file(filename: os.PathLike) -> bytes:
    with open(filename, "rb") as f:
        return hashlib.file_digest(f, "sha256").digest()

@contextmanager
def safe_output_fileobj(name: os.PathLike, mode: str = 'wb', *open_args, **open_kwargs):
    """Write to a temporary sibling, then atomically move it over ``name``."""
    assert mode[0] == 'w'
    tmpfile = _tmp_name(name)
    try:
        with open(tmpfile, mode, *open_args, **open_kwargs) as f:
            yield f
        os.replace(tmpfile, name)
    except BaseException:
        if os.path.exists(tmpfile):
            os.unlink(tmpfile)
        raise
