"""
Run configuration.

Settings come from a JSON file such as

    {
      "root": "src/assets/i18n",
      "reference": [{"path": "en.json"}, {"path": "pages/en"}],
      "languages": ["fr", "de"],
      "maxLength": 5000,
      "retranslate": false,
      "provider": "libretranslate",
      "providerUrl": "http://localhost:5000"
    }

Secrets are read from the environment (optionally from a `.env` file):
LIBRETRANSLATE_URL, LIBRETRANSLATE_API_KEY, GOOGLE_TRANSLATE_API_KEY,
GOOGLE_CLOUD_PROJECT and AUTOI18N_PROVIDER.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Mapping, Optional

from dotenv import load_dotenv

from .cache import TranslationCache
from .errors import ConfigError
from .providers import (
    LIBRETRANSLATE_URL,
    CachingProvider,
    DryRunProvider,
    GoogleTranslateProvider,
    LibreTranslateProvider,
    TranslationProvider,
)

DEFAULT_MAX_LENGTH = 5000
PROVIDERS = ("libretranslate", "google", "dry-run")


@dataclass(frozen=True)
class TranslateReference:
    path: Path
    # Markdown snippets to inject; carried from configuration but unused.
    inject: Optional[Path] = None


@dataclass(frozen=True)
class RunConfig:
    references: tuple[TranslateReference, ...]
    root: Path
    languages: Optional[tuple[str, ...]] = None
    max_length: int = DEFAULT_MAX_LENGTH
    retranslate: bool = False
    project_id: Optional[str] = None
    provider: str = "libretranslate"
    provider_url: Optional[str] = None
    api_key: Optional[str] = field(default=None, repr=False)
    source_language: str = "auto"
    cache_file: Optional[Path] = None
    dry_run: bool = False


def _parse_reference(raw: Any, root: Path) -> TranslateReference:
    if isinstance(raw, str):
        raw = {"path": raw}
    if not isinstance(raw, dict) or not raw.get("path"):
        raise ConfigError(f"Invalid reference entry: {raw!r}")
    inject = raw.get("inject")
    return TranslateReference(
        path=root / raw["path"],
        inject=root / inject if inject else None,
    )


def _parse_languages(raw: Any) -> Optional[tuple[str, ...]]:
    if raw is None:
        return None
    if isinstance(raw, str):
        raw = raw.split(",")
    if not isinstance(raw, (list, tuple)):
        raise ConfigError(f"languages must be a list, got {raw!r}")
    languages = tuple(dict.fromkeys(str(x).strip() for x in raw if str(x).strip()))
    return languages or None


def parse_config(data: Mapping[str, Any], base_dir: Path,
                 env: Optional[Mapping[str, str]] = None) -> RunConfig:
    """Build a RunConfig from the decoded JSON file plus environment."""
    env = os.environ if env is None else env
    root = base_dir / data.get("root", ".")

    references = data.get("reference", data.get("references", []))
    if isinstance(references, (str, dict)):
        references = [references]

    provider = data.get("provider") or env.get("AUTOI18N_PROVIDER") or "libretranslate"
    if provider == "google":
        api_key = env.get("GOOGLE_TRANSLATE_API_KEY")
        provider_url = data.get("providerUrl")
    else:
        api_key = env.get("LIBRETRANSLATE_API_KEY")
        provider_url = data.get("providerUrl") or env.get("LIBRETRANSLATE_URL")

    try:
        max_length = int(data.get("maxLength", DEFAULT_MAX_LENGTH))
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"maxLength must be an integer: {exc}") from exc

    cache_file = data.get("cacheFile")
    return RunConfig(
        references=tuple(_parse_reference(r, root) for r in references),
        root=root,
        languages=_parse_languages(data.get("languages")),
        max_length=max_length,
        retranslate=bool(data.get("retranslate", False)),
        project_id=data.get("projectId") or env.get("GOOGLE_CLOUD_PROJECT"),
        provider=provider,
        provider_url=provider_url,
        api_key=api_key,
        source_language=data.get("sourceLanguage", "auto"),
        cache_file=base_dir / cache_file if cache_file else None,
    )


def validate(config: RunConfig) -> RunConfig:
    if not config.references:
        raise ConfigError("No translation reference configured")
    if config.max_length <= 0:
        raise ConfigError(f"maxLength must be positive, got {config.max_length}")
    if config.provider not in PROVIDERS:
        raise ConfigError(
            f"Unknown provider {config.provider!r} (expected one of {', '.join(PROVIDERS)})"
        )
    if config.provider == "google" and not config.api_key and not config.dry_run:
        raise ConfigError("GOOGLE_TRANSLATE_API_KEY is not set")
    return config


def load_config(path: Path, overrides: Optional[Mapping[str, Any]] = None,
                env_file: Optional[Path] = None) -> RunConfig:
    """
    Read the JSON config at `path`, apply command-line `overrides` (RunConfig
    field names, None values ignored) and validate the result.
    """
    path = Path(path)
    load_dotenv(env_file or path.parent / ".env", override=False)
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except OSError as exc:
        raise ConfigError(f"Cannot read config {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Invalid JSON in config {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Config {path} must contain a JSON object")

    changes = {k: v for k, v in (overrides or {}).items() if v is not None}
    if "provider" in changes:
        # the provider decides which credentials are read from the environment
        data = {**data, "provider": changes.pop("provider")}
    config = parse_config(data, path.resolve().parent)
    if changes:
        if "languages" in changes:
            changes["languages"] = _parse_languages(changes["languages"])
        config = replace(config, **changes)
    return validate(config)


def build_provider(config: RunConfig,
                   cache: Optional[TranslationCache] = None) -> TranslationProvider:
    """Instantiate the configured provider, wrapped by the cache when given."""
    if config.dry_run or config.provider == "dry-run":
        return DryRunProvider()
    if config.provider == "google":
        provider = GoogleTranslateProvider(
            api_key=config.api_key or "",
            project_id=config.project_id,
            source=config.source_language,
        )
    else:
        provider = LibreTranslateProvider(
            url=config.provider_url or LIBRETRANSLATE_URL,
            api_key=config.api_key,
            source=config.source_language,
        )
    if cache is not None:
        return CachingProvider(provider, cache)
    return provider
