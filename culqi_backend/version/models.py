from dataclasses import dataclass


@dataclass(frozen=True)
class VersionInfo:
    version: str
    git_ref: str

    @property
    def release_version(self) -> str:
        return self.version.lstrip("v")
