import json
from pathlib import Path

import pytest

from autoi18n.config import RunConfig, TranslateReference


class FakeProvider:
    """Deterministic provider: `Hello` -> `fr:Hello`."""

    def __init__(self, answers=None, fail_on=None):
        self.answers = answers or {}
        self.fail_on = fail_on
        self.calls = []

    async def translate(self, text, target_language):
        self.calls.append((text, target_language))
        if self.fail_on is not None and self.fail_on(text, target_language):
            raise RuntimeError(f"provider down for {target_language}")
        return self.answers.get((text, target_language), f"{target_language}:{text}")


def write_json(path: Path, data) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def read_json(path: Path):
    return json.loads(path.read_text(encoding="utf-8"))


def make_config(tmp_path, *paths, **kwargs) -> RunConfig:
    kwargs.setdefault("max_length", 100)
    return RunConfig(
        references=tuple(TranslateReference(path=p) for p in paths),
        root=tmp_path,
        **kwargs,
    )


@pytest.fixture
def provider():
    return FakeProvider()
