"""Shared fixtures: a scratch repository and helpers to fabricate binaries."""

from __future__ import annotations

import base64
import os
from collections.abc import Callable
from pathlib import Path

import pytest

from makeupdate.repository import Repository


@pytest.fixture
def repo(tmp_path: Path) -> Repository:
    return Repository(tmp_path / "public")


@pytest.fixture
def make_binary(tmp_path: Path) -> Callable[[str, bytes], Path]:
    """Write ``data`` to a file under a scratch build directory."""
    build_dir = tmp_path / "build"

    def _make(name: str, data: bytes) -> Path:
        path = build_dir / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        return path

    return _make


def binary_for(version: str, size: int = 4096) -> bytes:
    """Deterministic pseudo-binary content that differs a little per version."""
    seed = version.encode()
    body = bytearray((i * 31 + 7) % 251 for i in range(size))
    body[100:100 + len(seed)] = seed
    return b"\x7fELF" + bytes(body) + seed * 3


def snapshot(root: os.PathLike) -> dict[str, bytes]:
    """Map every file under ``root`` (relative path) to its contents."""
    tree = {}
    for dirpath, _, filenames in os.walk(root):
        for name in filenames:
            full = os.path.join(dirpath, name)
            tree[os.path.relpath(full, root)] = Path(full).read_bytes()
    return tree


def manifest_digest(m) -> bytes:
    return base64.b64decode(m["Sha256"])
