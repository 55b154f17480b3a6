"""
Interpolation placeholder protection.

i18n strings carry tokens such as `{{count}}`, `{name}`, `%s`, `%(name)s`,
`<0>` / `</0>` or `$t(other.key)` that must survive machine translation
verbatim. They are swapped for inert ASCII markers before the text is sent
and restored in the answer.
"""

from __future__ import annotations

import re

PLACEHOLDER_RE = re.compile(
    r"\{\{[^{}]*\}\}"          # {{ name }}
    r"|\{[^{}\s]*\}"           # {name} / {0}
    r"|%\([A-Za-z0-9_]+\)[sd]"  # %(name)s
    r"|%[sd@]"                 # %s
    r"|\$t\([^)]*\)"           # $t(key)
    r"|</?[^<>\s]+/?>"         # <0>, </b>, <br/>
)
MARKER = "XPHX{}XPHX"
MARKER_RE = re.compile(r"XPHX\s*(\d+)\s*XPHX")


def protect_placeholders(text: str) -> tuple[str, list[str]]:
    """Replace placeholder tokens with safe ASCII markers before translation."""
    tokens: list[str] = []

    def sub(m: re.Match) -> str:
        idx = len(tokens)
        tokens.append(m.group(0))
        return MARKER.format(idx)

    return PLACEHOLDER_RE.sub(sub, text), tokens


def restore_placeholders(text: str, tokens: list[str]) -> str:
    # Translators sometimes insert spaces inside the marker.
    def sub(m: re.Match) -> str:
        idx = int(m.group(1))
        return tokens[idx] if idx < len(tokens) else m.group(0)

    return MARKER_RE.sub(sub, text)
