"""DOI and PMID normalization.

Both functions are pure and return ``None`` for values that carry no
usable identifier, so callers never need to distinguish empty strings
from missing fields.
"""

import unicodedata

__all__ = ["normalize_doi", "normalize_pmid", "DOI_PREFIX", "DOI_URL_PREFIXES"]

DOI_PREFIX = "doi:"

DOI_URL_PREFIXES = (
    "https://doi.org/",
    "http://doi.org/",
    "https://dx.doi.org/",
    "http://dx.doi.org/",
)


def normalize_doi(raw: str | None) -> str | None:
    """Canonicalize a DOI into a comparable key.

    Parameters
    ----------
    raw : str | None
        DOI as imported, e.g. ``"DOI:10.1234/X"`` or
        ``"https://doi.org/10.1234/x."``.

    Returns
    -------
    str | None
        Lowercased bare DOI, or None if nothing remains.

    Examples
    --------
    >>> normalize_doi(" https://dx.doi.org/10.1234/TEST. ")
    '10.1234/test'
    """
    if raw is None:
        return None

    doi = raw.strip().lower()

    if doi.startswith(DOI_PREFIX):
        doi = doi[len(DOI_PREFIX) :].strip()

    for prefix in DOI_URL_PREFIXES:
        if doi.startswith(prefix):
            doi = doi[len(prefix) :]
            break

    doi = doi.rstrip(".,").strip()
    return doi or None


def normalize_pmid(raw: str | None) -> str | None:
    """Reduce a PMID to its decimal digits.

    ``"PMID: 123"``, ``"pmid:123"`` and ``"  123  "`` all normalize to
    ``"123"``. Decimal digits from other scripts (for example
    Arabic-Indic ``"١٢٣"``) are mapped to ASCII.

    Parameters
    ----------
    raw : str | None
        PMID as imported.

    Returns
    -------
    str | None
        Digit string, or None if the value contains no digits.
    """
    if raw is None:
        return None
    digits = "".join(str(unicodedata.decimal(c)) for c in raw if c.isdecimal())
    return digits or None
