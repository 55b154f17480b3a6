"""
Translation driver.

Scans every configured reference, makes sure each target language has a file
for each base file, and fills the keys the target is missing by sending the
base strings to the translation provider. Existing translations are never
overwritten.

    service = TranslateService(config, provider)
    report = asyncio.run(service.run())
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from . import fsutil
from .config import RunConfig, TranslateReference
from .diff import count_leaves, diff_objects, merge_translations, strip_value
from .errors import FileOperationError, ResolutionError
from .providers import TranslationProvider
from .resolver import FileDescriptor, ResolvedReference, resolve_reference

log = logging.getLogger(__name__)

MISSING_TRANSLATION = "***MISSING TRANSLATION***"


@dataclass
class TranslationResult:
    content: dict[str, Any]
    # True when at least one leaf below this node was (re)translated.
    translated: bool
    sent: int = 0
    too_long: int = 0


@dataclass
class RunReport:
    files_written: int = 0
    strings_translated: int = 0
    strings_too_long: int = 0
    failures: int = 0
    skipped_references: list[Path] = field(default_factory=list)


class TranslateService:
    def __init__(self, config: RunConfig, provider: TranslationProvider,
                 logger: Optional[logging.Logger] = None) -> None:
        self.config = config
        self.provider = provider
        self.log = logger or log
        self.report = RunReport()

    async def run(self) -> RunReport:
        """Translate every reference concurrently; failures stay per reference."""
        self.report = RunReport()
        await asyncio.gather(*(self.run_reference(r) for r in self.config.references))
        return self.report

    async def run_reference(self, reference: TranslateReference) -> None:
        """
        Resolve the files of one reference, create folders/empty files for any
        target that has none yet, then acquire the missing translations.
        """
        try:
            files = await resolve_reference(reference)
        except ResolutionError as exc:
            self.log.error("Skipping reference %s: %s", reference.path, exc)
            self.report.skipped_references.append(Path(reference.path))
            return

        base_files = files.base_files
        languages = self.target_languages(files)
        if not base_files:
            self.log.warning("No %s files found for reference %s",
                             files.reference_language, reference.path)
            return
        if not languages:
            self.log.warning("No target languages for reference %s", reference.path)
            return

        try:
            if not self.config.dry_run:
                if files.is_dir:
                    await self.create_empty_folders(reference, languages)
                await asyncio.gather(
                    *(self.create_empty_files(f, languages, files.is_dir) for f in base_files)
                )
        except FileOperationError as exc:
            self.log.error("Failed to prepare target files for %s: %s", reference.path, exc)
            self.report.failures += 1
            return

        await asyncio.gather(
            *(self.acquire_missing_translations(f, languages, files.is_dir) for f in base_files)
        )

    def target_languages(self, files: ResolvedReference) -> list[str]:
        languages = self.config.languages or files.languages
        return [lang for lang in languages if lang != files.reference_language]

    @staticmethod
    def target_path(base_file: FileDescriptor, language: str, is_dir: bool) -> Path:
        """`en/common.json` -> `fr/common.json`, `en.json` -> `fr.json`"""
        if is_dir:
            return base_file.path.parent.parent / language / base_file.path.name
        return base_file.path.parent / f"{language}.json"

    async def create_empty_folders(self, reference: TranslateReference,
                                   languages: list[str]) -> None:
        root = Path(reference.path).parent
        missing = [root / lang for lang in languages if not (root / lang).exists()]
        for folder in missing:
            self.log.info("Creating language folder %s", folder)
        await asyncio.gather(*(fsutil.create_dir(folder) for folder in missing))

    async def create_empty_files(self, base_file: FileDescriptor, languages: list[str],
                                 is_dir: bool) -> None:
        paths = [self.target_path(base_file, lang, is_dir) for lang in languages]
        missing = [p for p in paths if not p.exists()]
        await asyncio.gather(*(fsutil.write_file(p, "{}") for p in missing))

    async def acquire_missing_translations(self, base_file: FileDescriptor,
                                           languages: list[str], is_dir: bool) -> None:
        """Compare every target of `base_file` against it and fill the gaps."""
        try:
            base = await fsutil.read_json(base_file.path)
        except FileOperationError as exc:
            self.log.error("Failed to load base file %s: %s", base_file.path, exc)
            self.report.failures += 1
            return
        if not isinstance(base, dict):
            self.log.error("Base file %s does not hold a JSON object", base_file.path)
            self.report.failures += 1
            return

        await asyncio.gather(*(
            self.translate_file(base, self.target_path(base_file, lang, is_dir), lang)
            for lang in languages
        ))

    async def translate_file(self, base: dict[str, Any], path: Path, language: str) -> bool:
        """
        Fill one target file. Any failure is logged and leaves the file as it
        was. Returns True when the file was (or in dry-run would be) updated.
        """
        try:
            if self.config.dry_run and not path.exists():
                original = {}
            else:
                original = await fsutil.read_json(path)
            if not isinstance(original, dict):
                raise FileOperationError(f"{path} does not hold a JSON object", path)
            if self.config.retranslate:
                original = strip_value(original, MISSING_TRANSLATION)

            gap = diff_objects(base, original)
            if not gap:
                self.log.debug("%s is up to date", path)
                return False

            self.log.info("%s: %d missing string(s)", path, count_leaves(gap))
            result = await self.get_translations(gap, language)
            merged = merge_translations(result.content, original, order=base)
            if self.config.dry_run:
                self.log.info("[dry-run] would update %s", path)
                return True
            await fsutil.write_file(path, fsutil.dump_json(merged))
            self.report.files_written += 1
            self.report.strings_translated += result.sent
            self.report.strings_too_long += result.too_long
            if not result.translated:
                self.log.debug("%s: only placeholders were added", path)
            return True
        except Exception as exc:
            self.log.error("Failed to acquire missing translations for %s: %s", path, exc)
            self.report.failures += 1
            return False

    async def get_translations(self, tree: dict[str, Any], language: str) -> TranslationResult:
        """
        Walk a gap tree and translate its string leaves one at a time.

        Strings longer than max_length are replaced by MISSING_TRANSLATION
        without calling the provider; they only count as translated when
        `retranslate` is set. Non-string values are copied unchanged.
        """
        results: dict[str, Any] = {}
        translated = False
        sent = too_long = 0
        for key, item in tree.items():
            if isinstance(item, str):
                if len(item) > self.config.max_length:
                    self.log.warning("Skipping %r: %d characters exceeds maxLength %d",
                                     key, len(item), self.config.max_length)
                    results[key] = MISSING_TRANSLATION
                    translated = translated or self.config.retranslate
                    too_long += 1
                else:
                    self.log.info('Translating "%s" to %s', item, language)
                    results[key] = await self.provider.translate(item, language)
                    translated = True
                    sent += 1
            elif isinstance(item, dict):
                nested = await self.get_translations(item, language)
                results[key] = nested.content
                translated = translated or nested.translated
                sent += nested.sent
                too_long += nested.too_long
            else:
                results[key] = item
        return TranslationResult(results, translated, sent, too_long)
