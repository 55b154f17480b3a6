"""
Command-line entry point.

Usage:
    autoi18n                                  # uses ./autoi18n.json
    autoi18n path/to/autoi18n.json            # explicit config
    autoi18n --language fr --language de      # restrict target languages
    autoi18n --dry-run                        # report gaps, write nothing
    autoi18n --retranslate                    # retry keys marked as missing
    autoi18n --no-cache                       # ignore the translation cache
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Optional, Sequence

from .cache import TranslationCache
from .config import PROVIDERS, build_provider, load_config
from .errors import ConfigError
from .logging_config import setup_logging
from .service import TranslateService

DEFAULT_CONFIG = Path("autoi18n.json")


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="autoi18n",
        description="Fill missing i18n JSON translations using machine translation.",
    )
    parser.add_argument(
        "config",
        nargs="?",
        type=Path,
        default=DEFAULT_CONFIG,
        help=f"JSON configuration file (default: {DEFAULT_CONFIG}).",
    )
    parser.add_argument(
        "-l", "--language",
        dest="languages",
        action="append",
        metavar="CODE",
        help="Target language; repeat for several. Overrides the config.",
    )
    parser.add_argument(
        "--max-length",
        type=int,
        metavar="N",
        help="Longest string sent for translation; longer ones get a placeholder.",
    )
    parser.add_argument(
        "--retranslate",
        action="store_true",
        default=None,
        help="Retry keys that previously received the missing-translation placeholder.",
    )
    parser.add_argument(
        "--provider",
        choices=PROVIDERS,
        help="Translation service to use. Overrides the config.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        default=None,
        help="Compute the missing keys without calling the API or writing files.",
    )
    parser.add_argument(
        "--no-cache",
        action="store_true",
        help="Do not load or save the translation cache.",
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        metavar="PATH",
        help="dotenv file with provider credentials (default: next to the config).",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Debug logging.",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    log = setup_logging(verbose=args.verbose)

    overrides = {
        "languages": args.languages,
        "max_length": args.max_length,
        "retranslate": args.retranslate,
        "provider": args.provider,
        "dry_run": args.dry_run,
    }
    try:
        config = load_config(args.config, overrides, env_file=args.env_file)
    except ConfigError as exc:
        print(f"[ERROR] {exc}", file=sys.stderr)
        return 1

    use_cache = not args.no_cache and not config.dry_run and config.cache_file is not None
    cache = TranslationCache(config.cache_file if use_cache else None)
    try:
        cache.load()
    except (OSError, json.JSONDecodeError) as exc:
        log.warning("Ignoring unreadable cache %s: %s", config.cache_file, exc)

    service = TranslateService(config, build_provider(config, cache if use_cache else None), log)
    report = asyncio.run(service.run())

    if use_cache:
        cache.save()

    print(
        f"\nDone. {report.files_written} file(s) written, "
        f"{report.strings_translated} string(s) translated, "
        f"{report.strings_too_long} over maxLength, "
        f"{report.failures} error(s), "
        f"{len(report.skipped_references)} reference(s) skipped."
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
