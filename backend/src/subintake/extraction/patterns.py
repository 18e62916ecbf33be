"""Shared patterns and keyword tables for field extraction."""

import re

# =============================================================================
# Email / Phone
# =============================================================================

EMAIL_PATTERN = re.compile(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}")

# Shared role mailboxes that never identify a person
GENERIC_MAILBOXES = ("info@", "admin@", "support@", "noreply@")

PHONE_PATTERNS = [
    # (555) 123-4567
    re.compile(r"\(\d{3}\)\s*\d{3}[-.\s]?\d{4}"),
    # 555-123-4567, 555.123.4567, 555 123 4567
    re.compile(r"\b\d{3}[-.\s]\d{3}[-.\s]\d{4}\b"),
    # +1 555 123 4567, 1-555-123-4567
    re.compile(r"(?:\+1|\b1)[-.\s]?\(?\d{3}\)?[-.\s]?\d{3}[-.\s]?\d{4}\b"),
]

# =============================================================================
# Company
# =============================================================================

COMPANY_SUFFIXES = [
    r"L\.?L\.?C",
    r"Inc",
    r"Incorporated",
    r"Corp",
    r"Corporation",
    r"Co",
    r"Company",
    r"Ltd",
    r"Limited",
    r"L\.?L\.?P",
    r"PLLC",
    r"LP",
    r"Group",
    r"Enterprises",
    r"Industries",
    r"Construction",
    r"Contracting",
    r"Contractors",
    r"Builders",
    r"Electric",
]

_SUFFIX_ALTERNATION = "|".join(COMPANY_SUFFIXES)

# Capitalized run on one line ending at the first suffix keyword, plus any
# suffixes that directly follow it ("Acme Electric LLC")
COMPANY_SUFFIX_PATTERN = re.compile(
    r"([A-Z][A-Za-z0-9 \t&.,'\-]*?\b(?i:" + _SUFFIX_ALTERNATION + r")\b\.?"
    r"(?:,?[ \t]+(?i:" + _SUFFIX_ALTERNATION + r")\b\.?)*)"
)

# Candidate names ending in a suffix keyword, for checking a whole string
COMPANY_SUFFIX_END_PATTERN = re.compile(
    r"\b(?:" + _SUFFIX_ALTERNATION + r")\.?$",
    re.IGNORECASE,
)

# Leading words that mark a label or addressee line, not a company
COMPANY_LEADING_LABEL_PATTERN = re.compile(
    r"^(?:to|from|bill|ship|project|attn|attention|re|subject)\b",
    re.IGNORECASE,
)

HEADER_LABEL_PATTERN = re.compile(r"^(?:date|to|from|re|subject|attn)\b", re.IGNORECASE)

COMPANY_LINE_BLACKLIST = [
    "proposal",
    "estimate",
    "quotation",
    "invoice",
    "page ",
    "phone",
    "fax",
    "tel:",
    "email",
    "e-mail",
    "www.",
    "http",
    "attn",
    "attention",
    "project",
    "scope of work",
    "date:",
    "total",
    "terms",
    "bill to",
    "ship to",
    "sincerely",
    "regards",
]

ADDRESS_HINTS = [
    "street",
    "st",
    "avenue",
    "ave",
    "road",
    "rd",
    "boulevard",
    "blvd",
    "drive",
    "dr",
    "lane",
    "ln",
    "way",
    "court",
    "ct",
    "highway",
    "hwy",
    "parkway",
    "pkwy",
    "suite",
    "ste",
    "unit",
    "box",
]

ADDRESS_HINT_PATTERN = re.compile(
    r"\b(?:" + "|".join(ADDRESS_HINTS) + r")\b",
    re.IGNORECASE,
)

ZIP_PATTERN = re.compile(r"\b\d{5}(?:-\d{4})?\b")

DATE_LINE_PATTERNS = [
    re.compile(r"^\d{1,2}[/\-]\d{1,2}[/\-]\d{2,4}"),
    re.compile(
        r"^(?:jan|feb|mar|apr|may|jun|jul|aug|sep|sept|oct|nov|dec)[a-z]*\.?\s+\d{1,2}",
        re.IGNORECASE,
    ),
]

FROM_LABEL_PATTERN = re.compile(
    r"(?:^|\n)[ \t]*(?:from|submitted by)[:\s]+([^\n]+)",
    re.IGNORECASE,
)

PROPOSAL_WORD_PATTERN = re.compile(r"\bPROPOSAL\b", re.IGNORECASE)

# Filename boilerplate removed before using a filename as a company name
FILENAME_EXTENSION_PATTERN = re.compile(r"\.(?:pdf|xlsx?|xlsm|txt|csv)$", re.IGNORECASE)
FILENAME_BOILERPLATE_PATTERN = re.compile(
    r"\b(?:proposal|bid|quote|revised?|rev\d*|original|\d+)\b",
    re.IGNORECASE,
)

# =============================================================================
# Contact name
# =============================================================================

# First [Middle initial] Last, on one line
NAME = r"[A-Z][a-z]+(?:[ \t]+[A-Z]\.?)?[ \t]+[A-Z][a-z]+"

SIGNATURE_TITLES = [
    "President",
    "Vice President",
    "VP",
    "Manager",
    "Estimator",
    "Owner",
    "Director",
    "Superintendent",
]

NAME_TITLES = [
    "Estimator",
    "Project Manager",
    "Account Manager",
    "VP",
    "Vice President",
    "President",
    "Owner",
    "Manager",
    "Superintendent",
]

CLOSING_NAME_PATTERN = re.compile(
    r"(?i:sincerely|regards|respectfully|thank you|thanks)[,.\s]*\n+\s*(" + NAME + r")"
)

BY_NAME_PATTERN = re.compile(r"\b(?i:by)[:\s]+(" + NAME + r")")

NAME_BEFORE_TITLE_PATTERN = re.compile(
    r"\n\s*(" + NAME + r")[ \t]*\n\s*(?i:" + "|".join(SIGNATURE_TITLES) + r")\b"
)

LABELED_NAME_PATTERNS = [
    re.compile(r"\b(?i:contact|attn|attention)[:\s]+(" + NAME + r")"),
    re.compile(
        r"\b(?i:estimator|project manager|pm|account manager)[:\s]+"
        r"([A-Z][a-z]+(?:[ \t]+[A-Z]\.?)?[ \t]*[A-Z]?[a-z]*)"
    ),
    re.compile(r"\b(?i:prepared by|submitted by|from)[:\s]+(" + NAME + r")"),
    re.compile(r"\b(?i:name)[:\s]+(" + NAME + r")"),
]

FROM_HEADER_PATTERN = re.compile(r"FROM[: \t]+([A-Z][A-Z \t.]+?)[ \t]*(?:,|\n|\bEXT\b|$)")

CONTACT_FIELD_PATTERN = re.compile(r"CONTACT[ \t:]+([A-Z][A-Z]+(?:[ \t]+[A-Z]+)?)")

NAME_AT_END_PATTERN = re.compile(r"(" + NAME + r")\s*$")

NAME_TITLE_PATTERN = re.compile(
    r"(" + NAME + r")[ \t]*\n\s*(?i:" + "|".join(NAME_TITLES) + r")\b"
)

# Substrings that disqualify a candidate person name
NAME_BLACKLIST = [
    "project",
    "estimate",
    "phone",
    "email",
    "fax",
    "contact",
    "company",
    "address",
    "date",
    "proposal",
    "total",
    "price",
    "scope",
    "work",
    "bill",
    "ship",
    "from",
    "attn",
]

MIDDLE_INITIAL_PATTERN = re.compile(r"^[A-Za-z]{1,2}\.?$")

# =============================================================================
# Trade
# =============================================================================

# (trade, keywords) in priority order; earlier trades win ties
TRADE_MAPPINGS: list[tuple[str, list[str]]] = [
    ("Low Voltage", ["low voltage", "structured cabling", "data cabling", "cabling", "access control"]),
    ("Fire Protection", ["fire protection", "fire sprinkler", "sprinkler", "fire alarm"]),
    ("Electrical", ["electrical", "electric", "lighting", "wiring", "switchgear"]),
    ("Plumbing", ["plumbing", "plumber", "domestic water", "water heater", "sanitary"]),
    ("HVAC", ["hvac", "mechanical", "ductwork", "air conditioning", "heating", "ventilation"]),
    ("Concrete", ["concrete", "rebar", "flatwork", "slab", "foundation"]),
    ("Sitework", ["sitework", "site work", "excavation", "grading", "earthwork", "storm drain"]),
    ("Roofing", ["roofing", "roof", "shingle"]),
    ("Paving", ["paving", "asphalt", "striping"]),
    ("Masonry", ["masonry", "brick", "cmu", "block wall"]),
    ("Steel", ["structural steel", "steel erection", "steel", "metal fabrication"]),
    ("Drywall", ["drywall", "gypsum", "metal studs", "framing"]),
    ("Painting", ["painting", "wall covering", "coatings"]),
    ("Demolition", ["demolition", "abatement"]),
    ("Landscaping", ["landscaping", "landscape", "irrigation"]),
    ("Carpentry", ["carpentry", "millwork", "casework"]),
    ("Flooring", ["flooring", "carpet", "resilient"]),
]

ALL_TRADE_KEYWORDS = [keyword for _, keywords in TRADE_MAPPINGS for keyword in keywords]

SUBJECT_LINE_PATTERN = re.compile(
    r"\b(?:re|subject|regarding|project)[ \t]*:([^:\n]*)",
    re.IGNORECASE,
)

PROPOSAL_FOR_PATTERN = re.compile(
    r"\bproposal\s+(?:for\s+)?([^:\n]*)",
    re.IGNORECASE,
)

SCOPE_OF_WORK_PATTERN = re.compile(
    r"scope\s+of\s+work[:\s]*([^\n]+(?:\n[^\n]+){0,3})",
    re.IGNORECASE,
)
