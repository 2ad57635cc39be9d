from pathlib import Path
import json

from upm_git.adapters.errors import FilesystemError, ManifestMissing, ManifestParseError
from upm_git.adapters.workspace.filesystem import write_text_atomic
from upm_git.domain.json_types import as_json_dict, is_dict
from upm_git.domain.manifest import DEPENDENCIES_KEY, Manifest

MANIFEST_RELATIVE_PATH = Path("Packages") / "manifest.json"


def dumps_manifest(manifest: Manifest) -> str:
    return json.dumps(manifest.document, indent=2, ensure_ascii=False) + "\n"


class JsonManifestStore:
    def manifest_path(self, project_root: Path) -> Path:
        return project_root / MANIFEST_RELATIVE_PATH

    def load(self, project_root: Path) -> Manifest:
        path = self.manifest_path(project_root)
        details = as_json_dict({"path": str(path)})
        if not path.is_file():
            raise ManifestMissing(
                f"Project manifest not found: {path}",
                details=details,
                hint="Open the project in Unity once so it creates Packages/manifest.json",
            )
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise FilesystemError(f"Failed to read {path}: {e}", details=details, cause=e)
        except UnicodeDecodeError as e:
            raise ManifestParseError(f"Failed to parse {path}: {e}", details=details, cause=e)
        try:
            raw: object = json.loads(text)
        except json.JSONDecodeError as e:
            raise ManifestParseError(f"Failed to parse {path}: {e}", details=details, cause=e)
        if not is_dict(raw):
            raise ManifestParseError(f"Manifest is not a JSON object: {path}", details=details)
        deps = raw.get(DEPENDENCIES_KEY)
        if deps is not None and not is_dict(deps):
            raise ManifestParseError(
                f"'{DEPENDENCIES_KEY}' must be a JSON object: {path}", details=details
            )
        return Manifest(document={str(k): v for k, v in raw.items()})

    def save(self, project_root: Path, manifest: Manifest) -> None:
        write_text_atomic(self.manifest_path(project_root), dumps_manifest(manifest))
