"""Best-effort extraction of resources from free-text LLM answers.

LLM search answers usually come back as markdown-ish prose: section headers
followed by bulleted resources, sometimes with indented detail bullets
("Location: ...", "Contact: ..."). This module turns such text into
``RawResult`` objects using line classification and a handful of regexes.
It is inherently lossy; adapters prefer strict JSON output and use this
only when JSON is unavailable.
"""

import re
from dataclasses import dataclass, field

from relief_sources.data import RawResult, ResourceSource
from relief_sources.normalize.ids import stable_source_id

PLACEHOLDER_NAME = "Disaster Relief Resource"

# A line is a header when it is not bulleted and longer than this.
HEADER_MIN_LENGTH = 8
# A bullet is a resource when its text is longer than this.
BULLET_MIN_LENGTH = 10
# Descriptions shorter than this are dropped.
DESCRIPTION_MIN_LENGTH = 4

_BULLET_RE = re.compile(r"^(?:[-*•+]|\d{1,3}[.)])\s+")
_INDENT_RE = re.compile(r"^(?:\s{2,}|\t)")
_MARKDOWN_RE = re.compile(r"\*\*|__|`")
_HEADING_RE = re.compile(r"^#+\s*")
_LINK_RE = re.compile(r"\[([^\]]+)\]\((https?://[^)\s]+)\)")
_URL_RE = re.compile(r"https?://[^\s)\]>,]+")
_EMAIL_RE = re.compile(r"\b[\w.+-]+@[\w-]+\.[\w.-]+\b")
_CITATION_RE = re.compile(r"\[\d+\]")
_NAME_SPLIT_RE = re.compile(r"\s[-–—](?:\s|$)|:|\(")
_LABEL_RE = re.compile(r"^([A-Za-z/ ]{2,30}):\s*(.*)$")

_PHONE_PATTERNS = [
    # 1-800-621-FEMA
    re.compile(r"\b1[-.\s]\d{3}[-.\s][A-Z0-9]{3}[-.\s][A-Z0-9]{4}\b"),
    # (830) 555-1234, +1 (830) 555-1234
    re.compile(r"(?:\+?1[-.\s]?)?\(\d{3}\)\s*\d{3}[-.\s]?\d{4}"),
    # 830-555-1234, 830.555.1234, +1 830 555 1234
    re.compile(r"(?:\+?1[-.\s])?\b\d{3}[-.\s]\d{3}[-.\s]\d{4}\b"),
    # 2-1-1 / 211 style short codes
    re.compile(r"\b2-1-1\b"),
]

_STREET_SUFFIXES = (
    "Street|St|Avenue|Ave|Road|Rd|Boulevard|Blvd|Drive|Dr|Lane|Ln|Way|Highway|Hwy|"
    "Parkway|Pkwy|Court|Ct|Place|Pl|Circle|Cir|Trail|Trl|Loop|Square|Sq|Terrace|Ter"
)
_ADDRESS_RE = re.compile(
    r"\b\d{1,6}\s+(?:[NSEW]\.?\s+)?(?:[A-Za-z0-9'.]+\s+){0,4}?"
    rf"(?:{_STREET_SUFFIXES})\b\.?"
    r"(?:,?\s+(?:Suite|Ste|Unit|Bldg|#)\.?\s*[\w-]+)?"
    r"(?:,\s*[A-Z][a-z]+(?:\s[A-Z][a-z]+){0,2})?"
    r"(?:,?\s*[A-Z]{2}\b)?"
    r"(?:\s+\d{5}(?:-\d{4})?)?"
)

_HOURS_LABELS = {"hours", "hours/availability", "availability", "open"}
_ADDRESS_LABELS = {"location", "address", "location/address", "site"}
_CONTACT_LABELS = {"contact", "phone", "website"}
_DETAIL_LABELS = _HOURS_LABELS | _ADDRESS_LABELS | _CONTACT_LABELS | {"services", "notes"}


@dataclass
class _Draft:
    name: str
    section: str | None
    phone: str | None = None
    website: str | None = None
    email: str | None = None
    address: str | None = None
    hours: str | None = None
    description_parts: list[str] = field(default_factory=list)


def _slugify(text: str) -> str:
    return re.sub(r"[^a-z0-9]+", "_", text.lower()).strip("_")


def _clean_header(line: str) -> str:
    text = _HEADING_RE.sub("", line)
    text = _MARKDOWN_RE.sub("", text)
    return text.strip().rstrip(":").strip()


def _collapse(text: str) -> str:
    return " ".join(text.split())


def extract_phones(text: str) -> list[str]:
    """Find phone numbers in ``text``, in order of appearance, without repeats."""
    found: list[tuple[int, str]] = []
    taken: list[tuple[int, int]] = []
    for pattern in _PHONE_PATTERNS:
        for match in pattern.finditer(text):
            start, end = match.span()
            if any(start < t_end and end > t_start for t_start, t_end in taken):
                continue
            taken.append((start, end))
            found.append((start, match.group(0).strip()))
    return [phone for _, phone in sorted(found)]


def extract_address(text: str) -> str | None:
    """Return the first street-address-like substring of ``text``."""
    match = _ADDRESS_RE.search(text)
    if not match:
        return None
    return match.group(0).strip().rstrip(",").strip()


def clean_description(text: str) -> str | None:
    """Tidy leftover text; ``None`` when too short or only punctuation."""
    text = _CITATION_RE.sub("", text)
    text = _collapse(text)
    text = re.sub(r"\s+([,.;:])", r"\1", text)
    text = re.sub(r"([,.;:])(?:\s*[,.;:])+", r"\1", text)
    text = text.strip(" ,.;:-–—|/")
    if len(text) < DESCRIPTION_MIN_LENGTH or not re.search(r"[A-Za-z0-9]", text):
        return None
    return text


def _strip_spans(text: str, values: list[str]) -> str:
    for value in values:
        text = text.replace(value, " ")
    return text


def _parse_bullet(body: str, section: str | None) -> _Draft:
    text = _MARKDOWN_RE.sub("", body)
    text = _LINK_RE.sub(r"\1 \2", text)

    urls = _URL_RE.findall(text)
    emails = _EMAIL_RE.findall(text)
    text = _strip_spans(text, urls + emails)

    phones = extract_phones(text)
    text = _strip_spans(text, phones)

    address = extract_address(text)
    if address:
        text = text.replace(address, " ")

    text = _CITATION_RE.sub("", text).strip()
    split = _NAME_SPLIT_RE.search(text)
    if split:
        name = text[: split.start()]
        remainder = text[split.start() :].lstrip(" -–—:(")
    else:
        name, remainder = text, ""
    name = _collapse(name).strip(" ,.;")

    draft = _Draft(name=name or PLACEHOLDER_NAME, section=section)
    draft.phone = phones[0] if phones else None
    draft.website = urls[0].rstrip(".") if urls else None
    draft.email = emails[0] if emails else None
    draft.address = address
    description = clean_description(remainder.replace(")", " "))
    if description:
        draft.description_parts.append(description)
    return draft


def _apply_detail(draft: _Draft, body: str) -> None:
    text = _MARKDOWN_RE.sub("", body)
    text = _LINK_RE.sub(r"\1 \2", text).strip()

    label = ""
    label_match = _LABEL_RE.match(text)
    if label_match:
        label = label_match.group(1).strip().lower()
        text = label_match.group(2)

    urls = _URL_RE.findall(text)
    emails = _EMAIL_RE.findall(text)
    phones = extract_phones(text)
    if urls and draft.website is None:
        draft.website = urls[0].rstrip(".")
    if emails and draft.email is None:
        draft.email = emails[0]
    if phones and draft.phone is None:
        draft.phone = phones[0]
    text = _strip_spans(text, urls + emails + phones)

    if label in _HOURS_LABELS:
        draft.hours = clean_description(text) or draft.hours
        return

    address = extract_address(text)
    if address is None and label in _ADDRESS_LABELS:
        address = clean_description(text)
    if address:
        if draft.address is None:
            draft.address = address
        text = text.replace(address, " ")

    leftover = clean_description(text)
    if leftover and label not in _ADDRESS_LABELS and label not in _CONTACT_LABELS:
        draft.description_parts.append(leftover)


def _is_detail_line(line: str) -> bool:
    match = _LABEL_RE.match(_MARKDOWN_RE.sub("", line))
    return bool(match) and match.group(1).strip().lower() in _DETAIL_LABELS


def parse_resource_text(
    text: str,
    *,
    source: ResourceSource,
    postal_code: str,
) -> list[RawResult]:
    """Parse a free-text answer into raw resource candidates.

    Lines are classified as section headers (not bulleted, longer than
    ``HEADER_MIN_LENGTH``) or resource bullets (bullet marker, text longer
    than ``BULLET_MIN_LENGTH``). Indented bullets that follow a resource are
    treated as its detail lines. The current header becomes the resource's
    category.

    Args:
        text: The raw model answer.
        source: Source tag for the produced results.
        postal_code: ZIP the answer was produced for (used for ids).

    Returns:
        Raw results in order of appearance; empty when nothing matched.
    """
    drafts: list[_Draft] = []
    section: str | None = None

    for raw_line in text.splitlines():
        if not raw_line.strip():
            continue
        indented = bool(_INDENT_RE.match(raw_line))
        line = raw_line.strip()
        bullet = _BULLET_RE.match(line)

        if bullet is None:
            if drafts and (indented or _is_detail_line(line)):
                _apply_detail(drafts[-1], line)
                continue
            if len(line) > HEADER_MIN_LENGTH:
                header = _clean_header(line)
                if header:
                    section = header
            continue

        body = line[bullet.end() :].strip()
        if drafts and (indented or _is_detail_line(body)):
            _apply_detail(drafts[-1], body)
            continue
        if len(body) <= BULLET_MIN_LENGTH:
            continue
        drafts.append(_parse_bullet(body, section))

    results: list[RawResult] = []
    for draft in drafts:
        description = " ".join(draft.description_parts) or None
        results.append(
            RawResult(
                name=draft.name,
                source=source,
                source_id=stable_source_id(postal_code, draft.name),
                description=description,
                categories=(_slugify(draft.section),) if draft.section else (),
                phone=draft.phone,
                website=draft.website,
                email=draft.email,
                address=draft.address,
                hours=draft.hours,
            )
        )
    return results
