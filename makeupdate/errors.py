class MakeUpdateError(Exception):
    """Base class for fatal conditions that abort a publish run."""


class InvalidIdentifier(MakeUpdateError):
    def __init__(self, kind: str, value: str):
        super().__init__(f"invalid {kind} identifier: {value!r}")
        self.kind = kind
        self.value = value


class SourceUnreadable(MakeUpdateError):
    def __init__(self, path, cause: BaseException):
        super().__init__(f"can't read source binary {path}: {cause}")
        self.path = path


class RepositoryWriteError(MakeUpdateError):
    def __init__(self, path, cause: BaseException):
        super().__init__(f"can't write {path}: {cause}")
        self.path = path


class MissingReleaseArtifact(MakeUpdateError):
    def __init__(self, path):
        super().__init__(f"newly published artifact is missing: {path}")
        self.path = path


class CorruptArtifact(MakeUpdateError):
    """A stored release artifact is not a valid gzip stream.

    This points at damage already present in the repository, as opposed to a
    problem with the release being published.
    """
    def __init__(self, path, cause: BaseException):
        super().__init__(f"corrupt artifact {path}: {cause}")
        self.path = path


class DiffFailed(MakeUpdateError):
    def __init__(self, old_version: str, new_version: str, platform: str, cause: BaseException):
        super().__init__(f"failed to bsdiff {old_version} -> {new_version} ({platform}): {cause}")
        self.old_version = old_version
        self.new_version = new_version
        self.platform = platform
