from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Optional

log = logging.getLogger(__name__)

LETTER_RE = re.compile(r"[^\W\d_]")


class TranslationCache:
    """
    Persistent mapping {language: {source text: translation}}.

    Loaded once before a run and saved after it so identical strings are not
    sent to the translation service again on later runs.
    """

    def __init__(self, path: Optional[Path]) -> None:
        self.path = Path(path) if path else None
        self._data: dict[str, dict[str, str]] = {}

    def __len__(self) -> int:
        return sum(len(entries) for entries in self._data.values())

    def load(self) -> None:
        if self.path is None or not self.path.exists():
            return
        with open(self.path, encoding="utf-8") as f:
            self._data = json.load(f)
        log.info("Loaded %d cached translations from %s", len(self), self.path)

    def save(self) -> None:
        if self.path is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(self._data, f, ensure_ascii=False, indent=2, sort_keys=True)
        log.info("Saved %d translations to %s", len(self), self.path)

    def get(self, text: str, language: str) -> Optional[str]:
        return self._data.get(language, {}).get(text)

    def put(self, text: str, language: str, translation: str) -> None:
        # An unchanged answer usually means the service gave up; don't
        # remember it so a later run can retry.
        if translation == text and LETTER_RE.search(text):
            return
        self._data.setdefault(language, {})[text] = translation
