"""
Place-name highlighting for trip notes.

Place names come back from extraction in a normalized form ("Hamarikyu Garden")
that may not appear verbatim in the notes ("jardin Hamarikyu"). Each place is
matched exactly first; when that fails, shorter "core name" candidates are tried.
Matches are collected as non-overlapping spans (longest names claim text first)
and rendered once, so a wrap can never land inside another wrap.
"""
from __future__ import annotations

import html
import re
from typing import Callable, Iterable, Iterator, NamedTuple, Sequence

GENERIC_WORDS = (
    "Garden",
    "Museum",
    "Temple",
    "Market",
    "Street",
    "Shrine",
    "Park",
    "Castle",
    "Palace",
    "Tower",
    "Station",
    "Hotel",
    "Restaurant",
    "Bar",
    "Cafe",
    "Scramble",
)
_GENERIC_LOWER = frozenset(w.lower() for w in GENERIC_WORDS)
_GENERIC_SUFFIX = re.compile(r"\s+(?:" + "|".join(GENERIC_WORDS) + r")$", re.IGNORECASE)
# Letters only (\w minus digits and underscore), so accented names qualify
_HYPHEN_COMPOUND = re.compile(r"[^\W\d_]{2,}-[^\W\d_]{2,}")
_WORD = re.compile(r"\w+")

MIN_CANDIDATE_LENGTH = 3
MIN_FALLBACK_LENGTH = 4

PLACE_LINK = '<a href="#" class="place-link" data-place-index="{index}">{label}</a>'


class HighlightTarget(NamedTuple):
    name: str
    index: int


class _Span(NamedTuple):
    start: int
    end: int
    index: int


def targets_for(places: Iterable) -> list[HighlightTarget]:
    """Targets for place records (anything with .name), indexed by position."""
    return [HighlightTarget(p.name, i) for i, p in enumerate(places)]


# --- Core-name candidates ---


def _is_capitalized(word: str) -> bool:
    """'Shibuya', 'Étoile'; not 'Tokyo2', 'McDonald', 'ji'."""
    return len(word) >= 3 and word[0].isupper() and word[1:].isalpha() and word[1:].islower()


def _full_name(name: str) -> Iterator[str]:
    yield name


def _without_generic_suffix(name: str) -> Iterator[str]:
    core = _GENERIC_SUFFIX.sub("", name)
    if core != name:
        yield core


def _hyphen_compounds(name: str) -> Iterator[str]:
    for m in _HYPHEN_COMPOUND.finditer(name):
        yield m.group(0)


def _capitalized_words(name: str) -> Iterator[str]:
    for word in _WORD.findall(name):
        if _is_capitalized(word) and word not in GENERIC_WORDS:
            yield word


def _capitalized_pairs(name: str) -> Iterator[str]:
    words = name.split()
    for word, following in zip(words, words[1:]):
        if _is_capitalized(word) and following[:1].isupper():
            yield f"{word} {following}"


# Order matters only for ties in length; add new strategies here
CANDIDATE_GENERATORS: tuple[Callable[[str], Iterable[str]], ...] = (
    _full_name,
    _without_generic_suffix,
    _hyphen_compounds,
    _capitalized_words,
    _capitalized_pairs,
)


def _is_standalone_generic(candidate: str) -> bool:
    return candidate.lower() in _GENERIC_LOWER and " " not in candidate and "-" not in candidate


def core_names(name: str) -> list[str]:
    """
    Name variants to try when the full (already HTML-decoded) name is not in the text.
    "Hamarikyu Garden" -> ["Hamarikyu Garden", "Hamarikyu"]
    """
    seen: set[str] = set()
    names: list[str] = []
    for generate in CANDIDATE_GENERATORS:
        for candidate in generate(name):
            if candidate in seen:
                continue
            seen.add(candidate)
            if len(candidate) < MIN_CANDIDATE_LENGTH or _is_standalone_generic(candidate):
                continue
            names.append(candidate)
    return names


# --- Matching and rendering ---


def _overlaps(spans: Sequence[_Span], start: int, end: int) -> bool:
    return any(s.start < end and start < s.end for s in spans)


def _claim(needle: str, text: str, spans: list[_Span], index: int) -> int:
    """Add every free case-insensitive occurrence of needle as a span; return how many."""
    claimed = 0
    for m in re.finditer(re.escape(needle), text, re.IGNORECASE):
        if m.start() == m.end() or _overlaps(spans, m.start(), m.end()):
            continue
        spans.append(_Span(m.start(), m.end(), index))
        claimed += 1
    return claimed


def _render(text: str, spans: Sequence[_Span]) -> str:
    out: list[str] = []
    pos = 0
    for span in sorted(spans):
        out.append(html.escape(text[pos:span.start], quote=False))
        label = html.escape(text[span.start:span.end], quote=False)
        out.append(PLACE_LINK.format(index=span.index, label=label))
        pos = span.end
    out.append(html.escape(text[pos:], quote=False))
    return "".join(out)


def highlight(text: str, places: Sequence[HighlightTarget]) -> str:
    """
    Wrap place mentions in text with place-link anchors carrying the place index.
    Blank text or no places returns text unchanged; otherwise returns escaped HTML.
    """
    if not text or not text.strip() or not places:
        return text

    decoded_text = html.unescape(text)
    decoded = [(html.unescape(p.name or "").strip(), p.index) for p in places]
    # Longest first: "The Raines Law Room at The William" before "The William"
    decoded.sort(key=lambda item: -len(item[0]))

    spans: list[_Span] = []
    for name, index in decoded:
        if not name:
            continue
        if _claim(name, decoded_text, spans, index):
            continue
        for candidate in sorted(core_names(name), key=len, reverse=True):
            if len(candidate) < MIN_FALLBACK_LENGTH or candidate.casefold() == name.casefold():
                continue
            _claim(candidate, decoded_text, spans, index)

    return _render(decoded_text, spans)
