"""Static lookup tables for title normalization.

Read-only data shared across runs: a stop-word set and a mapping of
British to American spellings common in academic and medical titles.
"""

from types import MappingProxyType

__all__ = ["STOP_WORDS", "BRITISH_TO_AMERICAN"]

STOP_WORDS: frozenset[str] = frozenset(
    {
        # articles
        "a",
        "an",
        "the",
        # conjunctions
        "and",
        "or",
        "but",
        "nor",
        # prepositions
        "of",
        "in",
        "on",
        "at",
        "to",
        "for",
        "with",
        "by",
        "from",
        "into",
        "using",
        "via",
        "as",
        # to be
        "is",
        "are",
        "was",
        "were",
        "be",
        "been",
        "being",
        "its",
    }
)

# Whole-word replacements, applied to lowercased titles
BRITISH_TO_AMERICAN: MappingProxyType[str, str] = MappingProxyType(
    {
        "behaviour": "behavior",
        "behaviours": "behaviors",
        "behavioural": "behavioral",
        "randomised": "randomized",
        "randomisation": "randomization",
        "centre": "center",
        "centres": "centers",
        "colour": "color",
        "tumour": "tumor",
        "tumours": "tumors",
        "paediatric": "pediatric",
        "paediatrics": "pediatrics",
        "anaemia": "anemia",
        "anaesthesia": "anesthesia",
        "haemorrhage": "hemorrhage",
        "haemoglobin": "hemoglobin",
        "oedema": "edema",
        "oesophageal": "esophageal",
        "oestrogen": "estrogen",
        "diarrhoea": "diarrhea",
        "foetal": "fetal",
        "gynaecology": "gynecology",
        "orthopaedic": "orthopedic",
        "leukaemia": "leukemia",
        "ischaemic": "ischemic",
        "labour": "labor",
        "organisation": "organization",
        "optimisation": "optimization",
        "characterisation": "characterization",
        "utilisation": "utilization",
        "hospitalisation": "hospitalization",
        "analyse": "analyze",
        "programme": "program",
        "modelling": "modeling",
    }
)
