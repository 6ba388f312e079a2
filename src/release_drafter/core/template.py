"""``$VARIABLE`` templates and search/replace rules.

Templates are plain strings with ``$NAME`` placeholders. Values are
substituted in a single pass so that text coming from a substituted
value is never expanded again. Replacers are applied afterwards, in
order, each on the output of the previous one.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

# /pattern/flags
REGEX_LITERAL_PATTERN: re.Pattern[str] = re.compile(r"^/(.+)/([a-z]*)$", re.DOTALL)

# $$, $&, $1..$99, $<name>
_REPLACEMENT_TOKEN = re.compile(r"\$(?:(\$)|(&)|(\d{1,2})|<([^>]*)>)")

# (?<name>...) and \k<name> in regex literals, lookbehinds excluded
_NAMED_GROUP = re.compile(r"(?<!\\)\(\?<(?![=!])")
_NAMED_BACKREFERENCE = re.compile(r"\\k<([A-Za-z_]\w*)>")

_REGEX_FLAGS = {
    "i": re.IGNORECASE,
    "m": re.MULTILINE,
    "s": re.DOTALL,
    "g": 0,
    "u": 0,
    "y": 0,
}


@dataclass(frozen=True)
class Replacer:
    """A compiled search/replace rule.

    Attributes:
        pattern: Compiled search expression
        replace: Replacement text, ``$1`` style group references allowed
        count: Maximum number of replacements, 0 for all
    """

    pattern: re.Pattern[str]
    replace: str
    count: int = 0

    def apply(self, text: str) -> str:
        return self.pattern.sub(self._expand, text, count=self.count)

    def _expand(self, match: re.Match[str]) -> str:
        def token(m: re.Match[str]) -> str:
            dollar, whole, group, name = m.groups()
            if dollar:
                return "$"
            if whole:
                return match.group(0)
            if group is not None:
                index = int(group)
                if 0 < index <= (match.re.groups or 0):
                    return match.group(index) or ""
                return m.group(0)
            if name in match.re.groupindex:
                return match.group(name) or ""
            return m.group(0)

        return _REPLACEMENT_TOKEN.sub(token, self.replace)


def compile_replacer(search: str, replace: str) -> Replacer:
    """Compile one search/replace rule.

    ``search`` written as ``/pattern/flags`` is a regular expression;
    without the ``g`` flag only the first match is replaced. Named groups
    may be written as ``(?<name>...)``. Any other string is matched
    literally and every occurrence is replaced.

    Args:
        search: Literal text or regex literal
        replace: Replacement text

    Returns:
        Compiled replacer

    Raises:
        re.error: If the regex literal does not compile
        ValueError: If the regex literal has unsupported flags
    """
    literal = REGEX_LITERAL_PATTERN.match(search)
    if not literal:
        return Replacer(pattern=re.compile(re.escape(search)), replace=replace)

    source, flag_chars = literal.groups()
    flags = 0
    for char in flag_chars:
        if char not in _REGEX_FLAGS:
            raise ValueError(f"Unsupported regex flag {char!r}")
        flags |= _REGEX_FLAGS[char]

    source = _NAMED_GROUP.sub("(?P<", source)
    source = _NAMED_BACKREFERENCE.sub(r"(?P=\1)", source)

    return Replacer(
        pattern=re.compile(source, flags),
        replace=replace,
        count=0 if "g" in flag_chars else 1,
    )


def compile_replacers(replacers: Iterable[Any]) -> list[Replacer]:
    """Compile configured replacers, skipping malformed entries.

    Entries may be mappings with ``search``/``replace`` keys or objects
    with ``search``/``replace`` attributes.

    Args:
        replacers: Raw replacer definitions in application order

    Returns:
        Compiled replacers in the same order
    """
    compiled: list[Replacer] = []
    for entry in replacers:
        if isinstance(entry, Replacer):
            compiled.append(entry)
            continue

        if isinstance(entry, Mapping):
            search, replace = entry.get("search"), entry.get("replace", "")
        else:
            search = getattr(entry, "search", None)
            replace = getattr(entry, "replace", "")

        if not isinstance(search, str) or not search or not isinstance(replace, str):
            logger.warning("Skipping malformed replacer: %r", entry)
            continue

        try:
            compiled.append(compile_replacer(search, replace))
        except (re.error, ValueError) as e:
            logger.warning("Bad replacer regex %r: %s", search, e)

    return compiled


def _stringify(value: object) -> str:
    if value is None:
        return ""
    render = getattr(value, "render", None)
    if callable(render):
        return str(render())
    return str(value)


def render_template(
    template: str,
    variables: Mapping[str, object],
    replacers: Iterable[Any] | None = None,
) -> str:
    """Render a ``$VARIABLE`` template.

    Every key of ``variables`` found in the template is replaced by its
    value; longer keys win over shorter ones sharing a prefix, so
    ``$NEXT_MAJOR_VERSION_MAJOR`` is never read as ``$NEXT_MAJOR_VERSION``
    followed by ``_MAJOR``. ``None`` values render as an empty string,
    objects with a ``render()`` method render themselves, and placeholders
    that are not keys are left untouched for a later pass.

    Args:
        template: Template text
        variables: Placeholder values keyed by ``$NAME``
        replacers: Optional search/replace rules applied after substitution

    Returns:
        Rendered text
    """
    output = template
    keys = sorted((k for k in variables if k), key=len, reverse=True)
    if keys:
        pattern = re.compile("|".join(re.escape(k) for k in keys))
        output = pattern.sub(lambda m: _stringify(variables[m.group(0)]), output)

    if replacers:
        for replacer in compile_replacers(replacers):
            output = replacer.apply(output)

    return output
