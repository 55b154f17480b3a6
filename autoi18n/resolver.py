"""
Reference resolution: map a configured base path to the language files around it.

Two layouts are understood:

    locales/en.json, locales/fr.json, ...            (single-file mode)
    locales/en/common.json, locales/fr/common.json   (directory mode)

In single-file mode the reference is the base file itself; in directory mode
it is the base language folder, and its parent is the language root.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from . import fsutil
from .config import TranslateReference
from .errors import FileOperationError, ResolutionError

JSON_SUFFIX = ".json"


@dataclass(frozen=True)
class FileDescriptor:
    language: str
    path: Path


@dataclass(frozen=True)
class ResolvedReference:
    files: tuple[FileDescriptor, ...]
    reference_language: str
    is_dir: bool

    @property
    def base_files(self) -> list[FileDescriptor]:
        return [f for f in self.files if f.language == self.reference_language]

    @property
    def languages(self) -> list[str]:
        """Discovered languages in first-seen order."""
        return list(dict.fromkeys(f.language for f in self.files))


def _is_json_file(path: Path) -> bool:
    return path.suffix == JSON_SUFFIX and not path.name.startswith(".") and path.is_file()


def language_of(path: Path) -> str:
    """`fr.json` -> `fr`"""
    name = path.name
    return name[: -len(JSON_SUFFIX)] if name.endswith(JSON_SUFFIX) else name


async def get_directory_files(reference: TranslateReference) -> ResolvedReference:
    """Scan every language folder next to the reference folder."""
    root = Path(reference.path).parent
    result: list[FileDescriptor] = []
    for directory in await fsutil.list_dir(root):
        if not directory.is_dir() or directory.name.startswith("."):
            continue
        for file in await fsutil.list_dir(directory):
            if _is_json_file(file):
                result.append(FileDescriptor(language=directory.name, path=file))
    return ResolvedReference(tuple(result), Path(reference.path).name, is_dir=True)


async def get_json_files(reference: TranslateReference) -> ResolvedReference:
    """Treat every `<lang>.json` sibling of the reference file as one language."""
    path = Path(reference.path)
    files = await fsutil.list_dir(path.parent)
    result = [FileDescriptor(language=language_of(f), path=f) for f in files if _is_json_file(f)]
    return ResolvedReference(tuple(result), language_of(path), is_dir=False)


async def resolve_reference(reference: TranslateReference) -> ResolvedReference:
    path = Path(reference.path)
    try:
        if path.is_dir():
            return await get_directory_files(reference)
        if path.suffix == JSON_SUFFIX and path.parent.is_dir():
            return await get_json_files(reference)
    except FileOperationError as exc:
        raise ResolutionError(f"Cannot resolve reference {path}: {exc}") from exc
    raise ResolutionError(f"Reference {path} is neither a language folder nor a .json file")
