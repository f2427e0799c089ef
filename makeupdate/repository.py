from collections.abc import Iterator
import dataclasses
import os

from .errors import InvalidIdentifier


@dataclasses.dataclass(slots=True, frozen=True)
class VersionEntry:
    name: str
    is_dir: bool


def is_identifier(value: str) -> bool:
    # identifiers become single path components
    return bool(value) and value not in ('.', '..') and not any(sep in value for sep in ('/', '\\', '\0'))


def check_identifier(kind: str, value: str) -> str:
    if not is_identifier(value):
        raise InvalidIdentifier(kind, value)
    return value


class Repository:
    """Addressing scheme of an update repository::

        <root>/<platform>.json                   current version and checksum
        <root>/<version>/<platform>.gz           full release
        <root>/<old>/<new>/<platform>            bsdiff patch from old to new

    Clients holding ``old`` discover their patch by looking under their own
    version directory, without knowing the newest version up front.
    """
    def __init__(self, root: os.PathLike | str):
        self.root = os.fspath(root)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.root!r})"

    def version_dir(self, version: str) -> str:
        return os.path.join(self.root, check_identifier("version", version))

    def release_path(self, version: str, platform: str) -> str:
        return os.path.join(self.version_dir(version), check_identifier("platform", platform) + '.gz')

    def patch_dir(self, old_version: str, new_version: str) -> str:
        return os.path.join(self.version_dir(old_version), check_identifier("version", new_version))

    def patch_path(self, old_version: str, new_version: str, platform: str) -> str:
        return os.path.join(self.patch_dir(old_version, new_version), check_identifier("platform", platform))

    def manifest_path(self, platform: str) -> str:
        return os.path.join(self.root, check_identifier("platform", platform) + '.json')

    def has_release(self, version: str, platform: str) -> bool:
        return os.path.isfile(self.release_path(version, platform))

    def ensure_root(self):
        os.makedirs(self.root, exist_ok=True)

    def ensure_version_dir(self, version: str) -> str:
        path = self.version_dir(version)
        os.makedirs(path, exist_ok=True)
        return path

    def ensure_patch_dir(self, old_version: str, new_version: str) -> str:
        path = self.patch_dir(old_version, new_version)
        os.makedirs(path, exist_ok=True)
        return path

    def list_version_entries(self) -> Iterator[VersionEntry]:
        # filesystem order, callers must not rely on it being sorted
        with os.scandir(self.root) as it:
            for entry in it:
                yield VersionEntry(entry.name, entry.is_dir())
