"""Text parsing utilities for note fields and tags."""

import html
import re
from typing import Iterable, List, NamedTuple


class Fragment(NamedTuple):
    """A slice of a context phrase; ``is_term`` marks a match of the LingQ term."""
    text: str
    is_term: bool


class TextParser:
    """
    Centralized text helpers shared by the sync filter and the UI.

    The UI renders ``split_fragment`` as text spans, the sync filter
    renders the same split as HTML for the Front field.
    """

    TAG_SEPARATOR = "::"

    @classmethod
    def split_fragment(cls, fragment: str, term: str) -> List[Fragment]:
        """
        Split a phrase around every case-insensitive match of a term.

        Matches are non-overlapping, left to right; the original casing of
        the phrase is preserved in the returned pieces.

        Args:
            fragment: Context phrase
            term: LingQ term to find

        Returns:
            Ordered pieces covering the whole phrase
        """
        if not fragment:
            return []
        if not term:
            return [Fragment(fragment, False)]

        pieces: List[Fragment] = []
        end = 0
        for match in re.finditer(re.escape(term), fragment, re.IGNORECASE):
            if match.start() > end:
                pieces.append(Fragment(fragment[end:match.start()], False))
            pieces.append(Fragment(match.group(0), True))
            end = match.end()
        if end < len(fragment):
            pieces.append(Fragment(fragment[end:], False))
        return pieces

    @classmethod
    def highlight_term(cls, fragment: str, term: str) -> str:
        """
        Wrap each match of ``term`` in ``fragment`` with <b>...</b>.

        Example:
            >>> TextParser.highlight_term("Jeg har en Hund", "hund")
            'Jeg har en <b>Hund</b>'
        """
        out = []
        for piece in cls.split_fragment(fragment, term):
            text = html.escape(piece.text, quote=False)
            out.append(f"<b>{text}</b>" if piece.is_term else text)
        return "".join(out)

    @classmethod
    def hierarchical_tags(cls, base: str, tags: Iterable[str]) -> List[str]:
        """
        Build nested Anki tags from a base tag and ordered source tags.

        ``("lingq", ["Grammar", "Verbs"])`` gives
        ``["lingq", "lingq::Grammar", "lingq::Grammar::Verbs"]``.
        Spaces inside a source tag become underscores.
        """
        result = [base]
        previous = base
        for tag in tags:
            previous = f"{previous}{cls.TAG_SEPARATOR}{tag.replace(' ', '_')}"
            result.append(previous)
        return result
