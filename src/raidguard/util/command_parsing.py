"""Parsing helpers for raw ERLC command strings.

Commands look like ``:ban Player1 reason text``. Parsing never raises: anything
that is not a sigil-prefixed command yields ``None`` so callers can treat it as
a no-op.
"""

from __future__ import annotations

from typing import Any, Iterable

from raidguard.datatypes.command_datatypes import ParsedCommand

SIGIL = ":"


def parse_command(text: Any) -> ParsedCommand | None:
    """Split a raw command into a lower-cased verb and its arguments.

    Returns ``None`` for non-strings, blank strings, a bare sigil, or text
    whose first token does not start with the sigil.
    """
    if not isinstance(text, str):
        return None

    tokens = text.split()
    if not tokens:
        return None

    verb = tokens[0].lower()
    if not verb.startswith(SIGIL) or verb == SIGIL:
        return None

    return ParsedCommand(raw=text, verb=verb, args=tuple(tokens[1:]))


def normalize_verb(verb: str) -> str:
    """Return ``verb`` lower-cased, stripped and prefixed with the sigil."""
    cleaned = str(verb).strip().lower()
    if cleaned and not cleaned.startswith(SIGIL):
        cleaned = SIGIL + cleaned
    return cleaned


def normalize_verbs(verbs: Iterable[str]) -> frozenset[str]:
    """Normalize a collection of configured verbs, dropping blanks."""
    return frozenset(v for v in (normalize_verb(verb) for verb in verbs) if v and v != SIGIL)


def has_mass_target(parsed: ParsedCommand, keywords: Iterable[str]) -> bool:
    """True if any argument is a mass-target keyword such as ``all``."""
    lowered = {str(k).strip().lower() for k in keywords}
    return any(arg.lower() in lowered for arg in parsed.args)
