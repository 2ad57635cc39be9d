from dataclasses import dataclass

from upm_git.domain.json_types import JsonDict


@dataclass
class AdapterError(Exception):
    message: str
    details: JsonDict | None = None
    hint: str | None = None
    cause: Exception | None = None

    def __str__(self) -> str:
        return self.message


class CommandNotFound(AdapterError):
    pass


class CommandFailed(AdapterError):
    pass


class CommandTimeout(AdapterError):
    pass


class VcsError(AdapterError):
    pass


class TagNotFound(VcsError):
    pass


class BranchNotFound(VcsError):
    pass


class ManifestMissing(AdapterError):
    pass


class ManifestParseError(AdapterError):
    pass


class FilesystemError(AdapterError):
    pass


class CatalogReadError(AdapterError):
    pass
