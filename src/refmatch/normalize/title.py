"""Title signatures for fuzzy title comparison.

A signature is built once per reference with a usable title and holds
everything the similarity scorer needs: the normalized title, its
significant-token set, the compact character sequence used for bigrams,
and the same triple for the text before the first colon (if any).

Pipeline
--------
1. Casefold (locale-invariant).
2. Optional British → American spelling rewrite (whole words).
3. NFD decomposition, combining marks dropped.
4. Non-alphanumeric runs collapsed to a single space, trimmed.
5. Tokens longer than two characters, minus stop words.
6. Compact form: normalized title with spaces removed, plus its bigrams.
"""

from __future__ import annotations

import re
import unicodedata
from collections import Counter
from dataclasses import dataclass, field

from refmatch.models.records import Reference
from refmatch.normalize.tables import BRITISH_TO_AMERICAN, STOP_WORDS

__all__ = [
    "TitleForm",
    "TitleSignature",
    "bigrams",
    "build_signature",
    "normalize_title_form",
    "rewrite_spelling",
    "strip_accents",
    "MIN_TOKEN_LEN",
]

MIN_TOKEN_LEN = 3

NON_ALNUM_RE = re.compile(r"[\W_]+")
# Word boundaries that also split on "_", matching NON_ALNUM_RE
SPELLING_RE = re.compile(
    r"(?<![^\W_])("
    + "|".join(sorted(BRITISH_TO_AMERICAN, key=len, reverse=True))
    + r")(?![^\W_])"
)


@dataclass(frozen=True, slots=True)
class TitleForm:
    """Normalized views of one piece of title text.

    Attributes
    ----------
    normalized : str
        Lowercased, accent-free text with single spaces between words.
    tokens : frozenset[str]
        Significant tokens (length >= 3, not stop words).
    compact : str
        ``normalized`` without spaces.
    bigrams : Counter[str]
        Multiset of two-character substrings of ``compact``.
    """

    normalized: str
    tokens: frozenset[str]
    compact: str
    bigrams: Counter[str] = field(default_factory=Counter, compare=False, repr=False)

    @property
    def bigram_count(self) -> int:
        """Number of bigrams, counting repeats."""
        return max(len(self.compact) - 1, 0)


@dataclass(frozen=True, slots=True)
class TitleSignature:
    """Precomputed title data for one reference.

    Attributes
    ----------
    reference : Reference
        Owning reference.
    original_title : str
        Title exactly as supplied.
    full : TitleForm
        Normalized form of the whole title.
    pre_colon : TitleForm | None
        Normalized form of the text before the first colon, or None when
        the title has no colon (or nothing usable precedes it).
    """

    reference: Reference
    original_title: str
    full: TitleForm
    pre_colon: TitleForm | None = None

    @property
    def normalized_title(self) -> str:
        """Normalized whole title."""
        return self.full.normalized

    @property
    def tokens(self) -> frozenset[str]:
        """Significant tokens of the whole title."""
        return self.full.tokens

    @property
    def compact_title(self) -> str:
        """Compact character sequence of the whole title."""
        return self.full.compact


def strip_accents(text: str) -> str:
    """Remove diacritical marks (é → e, à → a).

    Parameters
    ----------
    text : str
        Input text with potential diacritics.

    Returns
    -------
    str
        Text with combining marks removed.
    """
    nfd = unicodedata.normalize("NFD", text)
    return "".join(c for c in nfd if unicodedata.category(c) != "Mn")


def rewrite_spelling(text: str) -> str:
    """Rewrite British spellings to American ones in lowercased text."""
    return SPELLING_RE.sub(lambda m: BRITISH_TO_AMERICAN[m.group(1)], text)


def normalize_title_form(text: str, *, normalize_spelling: bool = True) -> TitleForm:
    """Run the normalization pipeline on a piece of title text.

    Parameters
    ----------
    text : str
        Raw title (or title fragment).
    normalize_spelling : bool, optional
        Apply the British → American rewrite, by default True.

    Returns
    -------
    TitleForm
        Normalized views. ``normalized`` is empty when the text holds no
        letters or digits.
    """
    folded = text.casefold()
    if normalize_spelling:
        folded = rewrite_spelling(folded)
    folded = strip_accents(folded)

    normalized = NON_ALNUM_RE.sub(" ", folded).strip()
    tokens = frozenset(
        token
        for token in normalized.split(" ")
        if len(token) >= MIN_TOKEN_LEN and token not in STOP_WORDS
    )
    compact = normalized.replace(" ", "")
    return TitleForm(
        normalized=normalized,
        tokens=tokens,
        compact=compact,
        bigrams=bigrams(compact),
    )


def bigrams(text: str) -> Counter[str]:
    """Multiset of contiguous two-character substrings of *text*."""
    return Counter(text[i : i + 2] for i in range(len(text) - 1))


def build_signature(
    reference: Reference,
    *,
    normalize_spelling: bool = True,
) -> TitleSignature | None:
    """Build the title signature for *reference*.

    Parameters
    ----------
    reference : Reference
        Reference to sign.
    normalize_spelling : bool, optional
        Apply the British → American rewrite, by default True.

    Returns
    -------
    TitleSignature | None
        Signature, or None when the title is empty, whitespace, or
        contains no alphanumeric characters.
    """
    title = reference.title or ""
    if not title.strip():
        return None

    full = normalize_title_form(title, normalize_spelling=normalize_spelling)
    if not full.normalized:
        return None

    pre_colon: TitleForm | None = None
    if ":" in title:
        head = title.split(":", 1)[0]
        form = normalize_title_form(head, normalize_spelling=normalize_spelling)
        if form.normalized:
            pre_colon = form

    return TitleSignature(
        reference=reference,
        original_title=title,
        full=full,
        pre_colon=pre_colon,
    )
