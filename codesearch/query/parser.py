# Natural-language query parsing.
# Splits free text into filters (repo:, lang:, path:, branch:) and the
# free-text target that gets embedded.

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Tuple

from codesearch.errors import QueryParseError, UserError

FILTER_KEYS = ("repo", "lang", "path", "branch")

_TOKEN = re.compile(r'"([^"]*)"|(\S+)')


@dataclass(frozen=True)
class ParsedQuery:
    """Structured form of a raw query string."""
    text: Tuple[str, ...] = ()
    repos: Tuple[str, ...] = ()
    langs: Tuple[str, ...] = ()
    paths: Tuple[str, ...] = ()
    branch: Optional[str] = None

    def target(self) -> Optional[str]:
        """Free text to embed, or None for a purely structural query."""
        joined = " ".join(t for t in self.text if t)
        return joined or None

    def filters(self) -> dict:
        out = {}
        if self.repos:
            out["repo_name"] = list(self.repos)
        if self.langs:
            out["lang"] = list(self.langs)
        if self.paths:
            out["relative_path"] = list(self.paths)
        if self.branch:
            out["repo_ref"] = [self.branch]
        return out


def parse_nl(raw: str) -> ParsedQuery:
    """
    Parse a query like `lang:python repo:bloop "parse json" fast`.
    Unknown `key:value` tokens are kept as free text.
    """
    if raw.count('"') % 2:
        raise QueryParseError("unterminated quote in query")

    text, repos, langs, paths = [], [], [], []
    branch = None
    for m in _TOKEN.finditer(raw):
        quoted, word = m.group(1), m.group(2)
        if quoted is not None:
            if quoted.strip():
                text.append(quoted.strip())
            continue

        key, sep, value = word.partition(":")
        if not sep or key.lower() not in FILTER_KEYS or not value:
            text.append(word)
            continue

        key = key.lower()
        if key == "repo":
            repos.append(value)
        elif key == "lang":
            langs.append(value.lower())
        elif key == "path":
            paths.append(value)
        else:
            branch = value

    return ParsedQuery(
        text=tuple(text),
        repos=tuple(repos),
        langs=tuple(langs),
        paths=tuple(paths),
        branch=branch,
    )


def resolve_target(parsed: ParsedQuery) -> str:
    target = parsed.target()
    if target is None:
        raise UserError("empty search")
    return target
