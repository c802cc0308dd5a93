"""Utilities for turning scraped directory listings into canonical business fields."""

import logging
import re
from typing import Any, Dict, Mapping, Optional

from sitegen.core.verticals import DEFAULT_CATALOG, VerticalCatalog
from sitegen.models import FormattedPhone, NormalizedBusiness, ParsedAddress, RawBusinessRecord

logger = logging.getLogger(__name__)

SLUG_MAX_LENGTH = 50
DEFAULT_NAME = "Local Business"
DEFAULT_SLUG = "local-business"

_STATE_ZIP_RE = re.compile(r"([A-Z]{2})\s*(\d{5})?")
_NON_ALNUM_RE = re.compile(r"[^a-z0-9]+")
_NON_DIGIT_RE = re.compile(r"\D")


def parse_address(full: Optional[str]) -> ParsedAddress:
    """Split a one-line US address into street, city, state and zip."""
    parts = [part.strip() for part in (full or "").split(",")]
    street = parts[0] if parts else ""
    city = parts[1] if len(parts) > 1 else ""
    match = _STATE_ZIP_RE.search(parts[2]) if len(parts) > 2 else None
    state = match.group(1) if match else ""
    zip_code = (match.group(2) if match else None) or "00000"
    return ParsedAddress(street=street, city=city, state=state, zip=zip_code)


def format_phone(raw: Optional[str]) -> FormattedPhone:
    """Return the ``(AAA) PPP-LLLL`` display form and a ``+1`` prefixed raw form.

    Short or garbled input still yields a value; callers that need a real
    number should validate it separately.
    """
    digits = _NON_DIGIT_RE.sub("", raw or "")
    raw_e164 = f"+{digits}" if digits.startswith("1") else f"+1{digits}"
    display = f"({digits[-10:-7]}) {digits[-7:-4]}-{digits[-4:]}"
    return FormattedPhone(display=display, raw=raw_e164)


def classify_vertical(category: Optional[str], catalog: VerticalCatalog = DEFAULT_CATALOG) -> str:
    key = (category or "").strip().lower()
    vertical = catalog.category_to_vertical.get(key)
    if vertical is None:
        logger.info("Unrecognized category %r; defaulting vertical to %s", category, catalog.default_vertical)
        return catalog.default_vertical
    return vertical


def slugify(name: Optional[str], max_length: int = SLUG_MAX_LENGTH) -> str:
    slug = _NON_ALNUM_RE.sub("-", (name or "").lower()).strip("-")
    return slug[:max_length].rstrip("-")


def parse_raw_record(payload: Mapping[str, Any]) -> RawBusinessRecord:
    """Coerce a loosely-typed scraped payload into a ``RawBusinessRecord``."""
    coordinates = payload.get("coordinates") or {}
    if not isinstance(coordinates, Mapping):
        coordinates = {}

    return RawBusinessRecord(
        name=_strip_or_none(payload.get("name")) or "",
        rating=_safe_float(payload.get("rating")) or 0.0,
        review_count=_safe_int(payload.get("reviewCount", payload.get("review_count"))) or 0,
        category=_strip_or_none(payload.get("category")) or "",
        address=_strip_or_none(payload.get("address")) or "",
        phone=_strip_or_none(payload.get("phone")) or "",
        website=_strip_or_none(payload.get("website")),
        latitude=_safe_float(coordinates.get("lat")),
        longitude=_safe_float(coordinates.get("lng")),
    )


def normalize_record(record: RawBusinessRecord, catalog: VerticalCatalog = DEFAULT_CATALOG) -> NormalizedBusiness:
    address = parse_address(record.address)
    name = record.name.strip() or DEFAULT_NAME
    return NormalizedBusiness(
        record=record,
        name=name,
        slug=slugify(name) or DEFAULT_SLUG,
        address=address,
        phone=format_phone(record.phone),
        vertical=classify_vertical(record.category, catalog),
        region=catalog.state_names.get(address.state, address.state),
    )


def normalize_payload(payload: Mapping[str, Any], catalog: VerticalCatalog = DEFAULT_CATALOG) -> NormalizedBusiness:
    return normalize_record(parse_raw_record(payload), catalog)


def summarize(normalized: NormalizedBusiness) -> Dict[str, Any]:
    """Flat view of the normalized fields, used when building prompts."""
    return {
        "name": normalized.name,
        "phone": normalized.phone.display,
        "address": normalized.record.address,
        "city": normalized.address.city,
        "state": normalized.address.state,
        "rating": normalized.record.rating,
        "reviewCount": normalized.record.review_count,
        "website": normalized.record.website,
        "vertical": normalized.vertical,
    }


def _strip_or_none(value: Any) -> Optional[str]:
    if value is None:
        return None
    value_str = str(value).strip()
    return value_str or None


def _safe_float(value: Any) -> Optional[float]:
    try:
        if value is None:
            return None
        return float(value)
    except (TypeError, ValueError):
        return None


def _safe_int(value: Any) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, (int, float)):
        return int(value)

    if isinstance(value, str):
        digits = "".join(ch for ch in value if ch.isdigit())
        if digits:
            return int(digits)
    return None


def record_from_business(business: Mapping[str, Any]) -> RawBusinessRecord:
    """Rebuild a raw record from an already-generated business profile."""
    address = business.get("address")
    if isinstance(address, Mapping):
        state_zip = " ".join(filter(None, [_strip_or_none(address.get("state")), _strip_or_none(address.get("zip"))]))
        parts = [_strip_or_none(address.get("street")), _strip_or_none(address.get("city")), state_zip]
        full = _strip_or_none(address.get("full")) or ", ".join(filter(None, parts))
    else:
        full = _strip_or_none(address) or ""

    return parse_raw_record(
        {
            "name": business.get("name"),
            "rating": business.get("rating"),
            "reviewCount": business.get("reviewCount"),
            "category": business.get("vertical"),
            "address": full,
            "phone": business.get("phoneRaw") or business.get("phone"),
            "website": business.get("website"),
            "coordinates": business.get("coordinates"),
        }
    )
