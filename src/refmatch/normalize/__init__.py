"""Identifier and title normalization."""

from refmatch.normalize.identifiers import normalize_doi, normalize_pmid
from refmatch.normalize.tables import BRITISH_TO_AMERICAN, STOP_WORDS
from refmatch.normalize.title import (
    TitleForm,
    TitleSignature,
    build_signature,
    normalize_title_form,
    strip_accents,
)

__all__ = [
    # Identifiers
    "normalize_doi",
    "normalize_pmid",
    # Titles
    "TitleForm",
    "TitleSignature",
    "build_signature",
    "normalize_title_form",
    "strip_accents",
    # Tables
    "STOP_WORDS",
    "BRITISH_TO_AMERICAN",
]
