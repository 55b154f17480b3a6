"""Fill missing i18n JSON translations with machine translation."""

from .config import RunConfig, TranslateReference, build_provider, load_config
from .diff import diff_objects, merge_translations
from .errors import (
    Autoi18nError,
    ConfigError,
    FileOperationError,
    ProviderError,
    ResolutionError,
)
from .resolver import FileDescriptor, resolve_reference
from .service import MISSING_TRANSLATION, RunReport, TranslateService, TranslationResult

__version__ = "0.3.0"

__all__ = [
    "Autoi18nError",
    "ConfigError",
    "FileDescriptor",
    "FileOperationError",
    "MISSING_TRANSLATION",
    "ProviderError",
    "ResolutionError",
    "RunConfig",
    "RunReport",
    "TranslateReference",
    "TranslateService",
    "TranslationResult",
    "build_provider",
    "diff_objects",
    "load_config",
    "merge_translations",
    "resolve_reference",
]
