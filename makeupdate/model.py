import dataclasses


class EntryOutcome:
    """What happened to one top-level repository entry during a publish run."""
    def __init__(self, name: str):
        self.name = name
    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"
    def __eq__(self, o: object) -> bool:
        return isinstance(o, type(self)) and self.name == o.name
    def __hash__(self) -> int:
        return hash((type(self), self.name))
    def describe(self) -> str:
        raise NotImplementedError


class Skipped(EntryOutcome):
    pass


class NotADirectory(Skipped):
    def describe(self) -> str:
        return f"{self.name} is not a directory, skipped"


class CurrentVersion(Skipped):
    def describe(self) -> str:
        return f"{self.name} is current version, skipped"


class NoRelease(Skipped):
    def describe(self) -> str:
        return f"{self.name} found no release for this os/arch, skipped"


class NotAVersion(Skipped):
    def describe(self) -> str:
        return f"{self.name} is not a usable version name, skipped"


class Cancelled(Skipped):
    def describe(self) -> str:
        return f"{self.name} cancelled after an earlier failure"


class PatchCreated(EntryOutcome):
    def __init__(self, name: str, path: str, size: int):
        super().__init__(name)
        self.path = path
        self.size = size
    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r}, {self.path!r}, size={self.size})"
    def __eq__(self, o: object) -> bool:
        return isinstance(o, type(self)) and self.name == o.name and self.path == o.path
    def __hash__(self) -> int:
        return hash((type(self), self.name, self.path))
    def describe(self) -> str:
        return f"Done with {self.name}"


@dataclasses.dataclass(slots=True)
class PublishResult:
    version: str
    platform: str
    release_path: str
    manifest_path: str
    outcomes: list[EntryOutcome]

    def patches(self) -> list[PatchCreated]:
        return [x for x in self.outcomes if isinstance(x, PatchCreated)]
