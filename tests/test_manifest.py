"""Tests for the per-platform current-version manifest."""

from __future__ import annotations

import base64
import hashlib

import pytest

from conftest import manifest_digest
from makeupdate import manifest
from makeupdate.errors import RepositoryWriteError, SourceUnreadable


class TestManifest:
    def test_digest_of_raw_binary(self, make_binary):
        data = b"0123456789"
        source = make_binary("app", data)
        m = manifest.make_manifest("1.0", source)
        assert m["Version"] == "1.0"
        assert manifest_digest(m) == hashlib.sha256(data).digest()

    def test_encoding_matches_client_format(self):
        m: manifest.CurrentManifest = {"Version": "1.0", "Sha256": base64.b64encode(b"\x00" * 32).decode()}
        encoded = manifest.encode_manifest(m)
        assert encoded == (
            b'{\n'
            b'    "Version": "1.0",\n'
            b'    "Sha256": "AAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAA="\n'
            b'}'
        )

    def test_write_and_read_back(self, tmp_path, make_binary):
        source = make_binary("app", b"binary")
        path = tmp_path / "linux-amd64.json"
        m = manifest.make_manifest("2.0", source)
        manifest.write_manifest(path, m)
        assert manifest.read_manifest(path) == m

    def test_overwrites_previous(self, tmp_path, make_binary):
        path = tmp_path / "linux-amd64.json"
        manifest.write_manifest(path, manifest.make_manifest("1.0", make_binary("a", b"one")))
        manifest.write_manifest(path, manifest.make_manifest("1.1", make_binary("b", b"two")))
        assert manifest.read_manifest(path)["Version"] == "1.1"

    def test_unreadable_source(self, tmp_path):
        with pytest.raises(SourceUnreadable):
            manifest.make_manifest("1.0", tmp_path / "missing")

    def test_unwritable_destination(self, tmp_path, make_binary):
        m = manifest.make_manifest("1.0", make_binary("app", b"x"))
        with pytest.raises(RepositoryWriteError):
            manifest.write_manifest(tmp_path / "no-such-dir" / "linux-amd64.json", m)

    def test_non_ascii_version_written_as_utf8(self):
        m: manifest.CurrentManifest = {"Version": "1.0-β", "Sha256": ""}
        encoded = manifest.encode_manifest(m)
        assert "1.0-β".encode("utf-8") in encoded
        assert b"\\u" not in encoded
