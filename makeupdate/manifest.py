from typing import TypedDict
import base64
import json
import os

from . import iohelper
from .errors import RepositoryWriteError, SourceUnreadable


class CurrentManifest(TypedDict):
    """The per-platform descriptor polled by clients

    * has path `<root>/<platform>.json`
    * overwritten by every publish of that platform
    * encoded as 4-space indented JSON without trailing newline

    ```json
    {
        "Version": "1.1",
        "Sha256": "<base64 of the 32 byte digest>"
    }
    ```
    """
    Version: str
    """The version currently published for this platform."""
    Sha256: str
    """Standard base64 of the SHA-256 digest of the uncompressed binary.

    Clients decode this field as raw bytes, so the digest is not hex encoded."""


def make_manifest(version: str, source: os.PathLike) -> CurrentManifest:
    try:
        digest = iohelper.sha256_file(source)
    except OSError as e:
        raise SourceUnreadable(source, e) from e
    return {"Version": version, "Sha256": base64.b64encode(digest).decode('ascii')}

def encode_manifest(m: CurrentManifest) -> bytes:
    return json.dumps(m, indent=4, ensure_ascii=False).encode('utf-8')

def write_manifest(path: os.PathLike, m: CurrentManifest) -> None:
    try:
        iohelper.write_file(path, encode_manifest(m))
    except OSError as e:
        raise RepositoryWriteError(path, e) from e

def read_manifest(path: os.PathLike) -> CurrentManifest:
    with open(path, 'r', encoding='utf-8') as f:
        return json.load(f)