from pathlib import Path
import json

from upm_git.domain.json_types import dig_str, is_dict
from upm_git.domain.package import UNKNOWN_VERSION, PackageMetadata

PACKAGE_METADATA_FILE = "package.json"


def read_package_metadata(package_dir: Path) -> PackageMetadata:
    """Read ``package.json`` from a checkout, degrading to sentinels on any problem."""
    path = package_dir / PACKAGE_METADATA_FILE
    try:
        raw: object = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError):
        return PackageMetadata()
    if not is_dict(raw):
        return PackageMetadata()
    return PackageMetadata(
        version=dig_str(raw, "version", default=UNKNOWN_VERSION),
        repository_url=dig_str(raw, "repository", "url"),
    )


def read_package_version(package_dir: Path) -> str:
    return read_package_metadata(package_dir).version
