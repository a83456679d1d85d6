"""Markdown splitter used when the model-driven chunker fails.

Disabled by default (``CHUNKER_FALLBACK_ENABLED``).  When enabled, a
document whose model call raised or whose output could not be parsed is
split into size-bounded passages instead of contributing nothing.

Boundaries follow the document's own structure:

1. **Headings** start a new section, and each passage in a section is
   prefixed with its heading so it still says what it is about.
2. **Paragraphs** (blank-line separated) are packed greedily into passages
   up to ``max_chars``.
3. A paragraph longer than ``max_chars`` is split at sentence boundaries,
   skipping common abbreviations.
"""

from __future__ import annotations

import re

_HEADING = re.compile(r"^#{1,6}\s+(.*\S)\s*$")

_ABBREVIATIONS = frozenset(
    {"Dr", "Sr", "Sra", "Ud", "Uds", "etc", "pág", "vs", "ej", "aprox", "No", "Inc"}
)


class MarkdownSplitter:
    """Splits markdown into heading-aware passages of at most ``max_chars``."""

    def __init__(self, max_chars: int = 800) -> None:
        self._max_chars = max(1, max_chars)

    def split(self, text: str) -> list[str]:
        if not text or not text.strip():
            return []

        passages: list[str] = []
        for heading, body in self._sections(text):
            for packed in self._pack(self._paragraphs(body)):
                passages.append(f"{heading}: {packed}" if heading else packed)
        return passages

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _sections(text: str) -> list[tuple[str, str]]:
        """Group lines under the most recent heading."""
        sections: list[tuple[str, list[str]]] = [("", [])]
        for line in text.splitlines():
            match = _HEADING.match(line)
            if match:
                sections.append((match.group(1), []))
            else:
                sections[-1][1].append(line)
        return [(heading, "\n".join(lines)) for heading, lines in sections]

    @staticmethod
    def _paragraphs(body: str) -> list[str]:
        parts = re.split(r"\n\s*\n", body)
        return [p.strip() for p in parts if p.strip()]

    def _pack(self, paragraphs: list[str]) -> list[str]:
        """Greedily merge paragraphs into passages no longer than ``max_chars``."""
        units: list[str] = []
        for paragraph in paragraphs:
            if len(paragraph) <= self._max_chars:
                units.append(paragraph)
            else:
                units.extend(self._split_sentences(paragraph))

        packed: list[str] = []
        current = ""
        for unit in units:
            candidate = f"{current}\n\n{unit}" if current else unit
            if current and len(candidate) > self._max_chars:
                packed.append(current)
                current = unit
            else:
                current = candidate
        if current:
            packed.append(current)
        return packed

    @staticmethod
    def _split_sentences(text: str) -> list[str]:
        """Split at ``.``/``!``/``?`` + whitespace, ignoring known abbreviations.

        Abbreviation periods are masked first because ``re`` has no
        variable-width lookbehind.
        """
        masked = text
        for abbr in _ABBREVIATIONS:
            masked = masked.replace(f"{abbr}.", f"{abbr}\x00")

        sentences: list[str] = []
        last = 0
        for match in re.finditer(r"[.!?](?:\s|$)", masked):
            sentence = text[last : match.end()].strip()
            if sentence:
                sentences.append(sentence)
            last = match.end()

        remainder = text[last:].strip()
        if remainder:
            sentences.append(remainder)
        return sentences or [text]
