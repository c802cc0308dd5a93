"""Combine an AI candidate with the fallback configuration.

Array sections are chosen wholesale (candidate when it supplies a usable list,
fallback otherwise) and then every record goes through a per-section backfill
that returns a fully populated dataclass. The business profile is the one
section merged field by field.
"""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, List, Mapping, Optional, Sequence

from sitegen.core.fallback import generate_fallback
from sitegen.core.verticals import DEFAULT_CATALOG, VerticalCatalog, vertical_label
from sitegen.etl.normalize import normalize_record, record_from_business, slugify
from sitegen.models import Area, Author, Faq, FaqCategory, Post, Service, Testimonial, record_to_dict

logger = logging.getLogger(__name__)

GENERAL_FAQ_CATEGORY = "General"
GENERAL_FAQ_PREVIEW = 4
# Business keys repaired by their own helpers instead of the generic dict backfill.
_SHAPED_KEYS = frozenset({"address", "hours", "coordinates"})


@dataclass(frozen=True)
class MergePolicy:
    # Candidate areas have historically come back without state, neighborhoods
    # or coordinates, so they are ignored unless this is switched on.
    accept_candidate_areas: bool = False


DEFAULT_POLICY = MergePolicy()
TRUSTED_POLICY = MergePolicy(accept_candidate_areas=True)


@dataclass(frozen=True)
class BackfillContext:
    business_name: str
    city: str
    state: str
    vertical: str
    review_count: int
    coordinates: Dict[str, float]
    author_id: str
    certifications: Sequence[str]
    today: str

    @property
    def vertical_text(self) -> str:
        label = vertical_label(self.vertical)
        return label if label.isupper() else label.lower()


def _text(value: Any) -> str:
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return ""


def coerce_names(values: Any, default_label: str) -> List[str]:
    """Flatten ``["A", {"name": "B"}]`` style lists into plain strings."""
    if not isinstance(values, list):
        return []
    names = []
    for value in values:
        if isinstance(value, Mapping):
            names.append(_text(value.get("name")) or default_label)
        elif _text(value):
            names.append(_text(value))
    return names


def _number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


def _coordinates(value: Any) -> Optional[Dict[str, float]]:
    if not isinstance(value, Mapping):
        return None
    lat, lng = _number(value.get("lat")), _number(value.get("lng"))
    if lat is None or lng is None or not (-90 <= lat <= 90 and -180 <= lng <= 180):
        return None
    return {"lat": lat, "lng": lng}


def _rating(value: Any, default: float = 5) -> float:
    rating = _number(value)
    if rating is None or not 1 <= rating <= 5:
        return default
    return int(rating) if float(rating).is_integer() else rating


def _records(value: Any) -> List[Mapping[str, Any]]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, Mapping)]


def _choose(candidate: Any, fallback: List[Mapping[str, Any]]) -> List[Mapping[str, Any]]:
    records = _records(candidate)
    return records if records else list(fallback)


# ---------- Business ----------


def ensure_hours(hours: Any, fallback_hours: Mapping[str, Any]) -> Dict[str, Any]:
    """Return hours with the three display strings and the canonical ``structured`` list."""
    hours = dict(hours) if isinstance(hours, Mapping) else {}
    weekdays = _text(hours.get("weekdays")) or _text(hours.get("monday")) or fallback_hours["weekdays"]
    saturday = _text(hours.get("saturday")) or fallback_hours["saturday"]
    sunday = _text(hours.get("sunday")) or fallback_hours["sunday"]
    hours.update(
        weekdays=weekdays,
        saturday=saturday,
        sunday=sunday,
        structured=[
            {"days": "Monday - Friday", "hours": weekdays},
            {"days": "Saturday", "hours": saturday},
            {"days": "Sunday", "hours": sunday},
        ],
    )
    return hours


def _address(address: Any, fallback_address: Mapping[str, Any]) -> Dict[str, Any]:
    if not isinstance(address, Mapping):
        return dict(fallback_address)
    merged = {key: _text(address.get(key)) or fallback_address[key] for key in ("street", "city", "state", "zip")}
    full = _text(address.get("full"))
    if not full:
        full = f"{merged['street']}, {merged['city']}, {merged['state']} {merged['zip']}".strip()
    merged["full"] = full
    for key, value in address.items():
        merged.setdefault(key, value)
    return merged


def merge_business(fallback: Mapping[str, Any], candidate: Any) -> Dict[str, Any]:
    """Shallow-overwrite the fallback profile with candidate fields, then repair shapes."""
    business = copy.deepcopy(dict(fallback))
    if isinstance(candidate, Mapping):
        for key, value in candidate.items():
            if value is None or value == "" or value == [] or value == {}:
                continue
            business[key] = copy.deepcopy(value)

    for key, default in fallback.items():
        if key in _SHAPED_KEYS:
            continue
        value = business.get(key)
        if isinstance(default, Mapping):
            if not isinstance(value, Mapping):
                business[key] = copy.deepcopy(default)
            else:
                business[key] = {**copy.deepcopy(default), **value}
        elif isinstance(default, str) and not _text(value):
            business[key] = default

    business["address"] = _address(business.get("address"), fallback["address"])
    business["hours"] = ensure_hours(business.get("hours"), fallback["hours"])
    business["coordinates"] = _coordinates(business.get("coordinates")) or copy.deepcopy(fallback["coordinates"])
    business["licenses"] = coerce_names(business.get("licenses"), "Licensed") or list(fallback["licenses"])
    business["certifications"] = coerce_names(business.get("certifications"), "Certified") or list(
        fallback["certifications"]
    )
    business["rating"] = _rating(business.get("rating"), fallback["rating"])

    review_count = _number(business.get("reviewCount"))
    business["reviewCount"] = int(review_count) if review_count is not None and review_count >= 0 else fallback["reviewCount"]

    established = _number(business.get("established"))
    if established is None or not 1800 <= established <= date.today().year:
        business["established"] = fallback["established"]
    else:
        business["established"] = int(established)
    return business


# ---------- Section backfill ----------


def backfill_service(raw: Mapping[str, Any], index: int, ctx: BackfillContext) -> Service:
    name = _text(raw.get("name")) or f"Service {index + 1}"
    description = _text(raw.get("description"))
    short = _text(raw.get("shortDescription")) or description or "Professional service from our expert team."
    emergency = raw.get("emergency")
    return Service(
        slug=_text(raw.get("slug")) or f"service-{index + 1}",
        name=name,
        short_description=short,
        long_description=_text(raw.get("longDescription"))
        or description
        or (
            f"{ctx.business_name} provides professional {name} to ensure your complete satisfaction. "
            "Our experienced technicians deliver quality work with attention to detail."
        ),
        features=coerce_names(raw.get("features"), "Professional service")
        or ["Professional service", "Experienced technicians", "Quality workmanship", "Customer satisfaction guaranteed"],
        benefits=coerce_names(raw.get("benefits"), "Reliable service")
        or ["Peace of mind", "Save time", "Expert results", "Reliable service"],
        icon=_text(raw.get("icon")) or "Wrench",
        category=_text(raw.get("category")) or "general",
        emergency=emergency if isinstance(emergency, bool) else False,
        meta_title=_text(raw.get("metaTitle")) or f"{name} | {ctx.business_name}",
        meta_description=_text(raw.get("metaDescription"))
        or short
        or f"Professional {name} from {ctx.business_name}. Contact us today.",
    )


def backfill_testimonial(raw: Mapping[str, Any], index: int, ctx: BackfillContext) -> Testimonial:
    identifier = raw.get("id")
    verified = raw.get("verified")
    return Testimonial(
        id=identifier if identifier not in (None, "") else index + 1,
        name=_text(raw.get("name")) or f"Customer {index + 1}",
        location=_text(raw.get("location")) or f"{ctx.city}, {ctx.state}",
        rating=_rating(raw.get("rating")),
        text=_text(raw.get("text")) or "Great service! Highly recommended.",
        service=_text(raw.get("service")) or "General Service",
        date=_text(raw.get("date")) or ctx.today,
        verified=verified if isinstance(verified, bool) else True,
    )


def flatten_faqs(entries: Any) -> List[Mapping[str, Any]]:
    """Accept both flat FAQ lists and ``{name, faqs: [...]}`` category groups."""
    flat: List[Mapping[str, Any]] = []
    for entry in _records(entries):
        nested = entry.get("faqs")
        if isinstance(nested, list):
            category = _text(entry.get("name")) or _text(entry.get("slug"))
            for item in _records(nested):
                flat.append({**item, "category": _text(item.get("category")) or category})
        else:
            flat.append(entry)
    return flat


def backfill_faq(raw: Mapping[str, Any], index: int, ctx: BackfillContext) -> Faq:
    return Faq(
        question=_text(raw.get("question")) or "Question",
        answer=_text(raw.get("answer")) or "Please contact us for more information.",
        category=_text(raw.get("category")) or GENERAL_FAQ_CATEGORY,
    )


def group_faqs(faqs: Sequence[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    """Group flat FAQs into categories; a ``general`` category always exists."""
    categories: Dict[str, FaqCategory] = {}
    for faq in faqs:
        name = _text(faq.get("category")) or GENERAL_FAQ_CATEGORY
        slug = slugify(name) or "general"
        category = categories.setdefault(slug, FaqCategory(name=name, slug=slug))
        category.faqs.append({"question": faq["question"], "answer": faq["answer"]})

    grouped = [record_to_dict(category) for category in categories.values()]
    if "general" not in categories:
        preview = [{"question": f["question"], "answer": f["answer"]} for f in faqs[:GENERAL_FAQ_PREVIEW]]
        grouped.insert(0, record_to_dict(FaqCategory(GENERAL_FAQ_CATEGORY, "general", preview)))
    return grouped


def backfill_area(raw: Mapping[str, Any], index: int, ctx: BackfillContext) -> Area:
    name = _text(raw.get("name")) or ctx.city
    return Area(
        slug=_text(raw.get("slug")) or f"area-{index + 1}",
        name=name,
        state=_text(raw.get("state")) or ctx.state,
        description=_text(raw.get("description"))
        or f"{ctx.business_name} proudly serves {name} and surrounding areas with professional {ctx.vertical_text} solutions.",
        neighborhoods=coerce_names(raw.get("neighborhoods"), "Neighborhood")
        or ["Downtown", "Midtown", "North Side", "South Side"],
        landmarks=coerce_names(raw.get("landmarks"), "Landmark"),
        local_challenges=_text(raw.get("localChallenges"))
        or f"Local {ctx.vertical_text} needs require experienced professionals who understand the area.",
        coordinates=_coordinates(raw.get("coordinates")) or dict(ctx.coordinates),
        population=_text(raw.get("population")) or "50,000+",
        service_highlights=coerce_names(raw.get("serviceHighlights"), "Local expertise")
        or ["Fast response times", "Local expertise", "Reliable service"],
    )


def backfill_post(raw: Mapping[str, Any], index: int, ctx: BackfillContext) -> Post:
    title = _text(raw.get("title")) or "Blog Post"
    excerpt = _text(raw.get("excerpt")) or "Read more about our services."
    return Post(
        slug=_text(raw.get("slug")) or f"post-{index + 1}",
        title=title,
        excerpt=excerpt,
        content=_text(raw.get("content"))
        or f"Welcome to our blog. Contact {ctx.business_name} for professional service.",
        author_id=_text(raw.get("authorId")) or ctx.author_id,
        date=_text(raw.get("date")) or ctx.today,
        category=_text(raw.get("category")) or "Industry News",
        image=_text(raw.get("image")) or "/images/blog/default.jpg",
        read_time=_text(raw.get("readTime")) or "3 min read",
        meta_title=_text(raw.get("metaTitle")) or title,
        meta_description=_text(raw.get("metaDescription")) or excerpt,
    )


def backfill_author(raw: Mapping[str, Any], index: int, ctx: BackfillContext) -> Author:
    social = raw.get("social")
    return Author(
        id=_text(raw.get("id")) or (ctx.author_id if index == 0 else f"{ctx.author_id}-{index + 1}"),
        name=_text(raw.get("name")) or f"{ctx.business_name} Team",
        role=_text(raw.get("role")) or f"Expert {vertical_label(ctx.vertical)} Technicians",
        bio=_text(raw.get("bio"))
        or (
            "Our team of certified technicians brings decades of combined experience to every job. "
            f"We're committed to providing reliable, honest service to the {ctx.city} area."
        ),
        certifications=coerce_names(raw.get("certifications"), "Certified")
        or list(ctx.certifications)
        or ["Licensed", "Insured", "Certified"],
        image=_text(raw.get("image")) or "/images/logo.png",
        social=dict(social) if isinstance(social, Mapping) else {},
    )


# ---------- Entry points ----------


def merge_config(
    fallback: Mapping[str, Any],
    candidate: Optional[Mapping[str, Any]] = None,
    policy: MergePolicy = DEFAULT_POLICY,
    today: Optional[date] = None,
) -> Dict[str, Any]:
    """Produce a fully populated configuration from the fallback and an optional candidate."""
    candidate = candidate if isinstance(candidate, Mapping) else {}
    today_str = (today or date.today()).isoformat()

    business = merge_business(fallback["business"], candidate.get("business"))
    fallback_authors = _records(fallback.get("authors"))
    ctx = BackfillContext(
        business_name=business["name"],
        city=business["address"]["city"],
        state=business["address"]["state"],
        vertical=_text(business.get("vertical")) or fallback["business"]["vertical"],
        review_count=business["reviewCount"],
        coordinates=business["coordinates"],
        author_id=_text(fallback_authors[0].get("id")) if fallback_authors else "team",
        certifications=business["certifications"],
        today=today_str,
    )

    if policy.accept_candidate_areas:
        areas = _choose(candidate.get("areas"), fallback["areas"])
    else:
        if _records(candidate.get("areas")):
            logger.debug("Ignoring %d candidate areas per merge policy", len(_records(candidate.get("areas"))))
        areas = list(fallback["areas"])

    candidate_faqs = flatten_faqs(candidate.get("faqs"))
    services = [backfill_service(r, i, ctx) for i, r in enumerate(_choose(candidate.get("services"), fallback["services"]))]
    testimonials = [
        backfill_testimonial(r, i, ctx) for i, r in enumerate(_choose(candidate.get("testimonials"), fallback["testimonials"]))
    ]
    faqs = [backfill_faq(r, i, ctx) for i, r in enumerate(_choose(candidate_faqs, fallback["faqs"]))]
    posts = [backfill_post(r, i, ctx) for i, r in enumerate(_choose(candidate.get("posts"), fallback["posts"]))]
    authors = [backfill_author(r, i, ctx) for i, r in enumerate(_choose(candidate.get("authors"), fallback_authors))]
    if not authors:
        authors = [backfill_author({}, 0, ctx)]

    author_ids = {author.id for author in authors}
    for post in posts:
        if post.author_id not in author_ids:
            post.author_id = authors[0].id

    return {
        "business": business,
        "services": [record_to_dict(s) for s in services],
        "testimonials": [record_to_dict(t) for t in testimonials],
        "faqs": [record_to_dict(f) for f in faqs],
        "areas": [record_to_dict(backfill_area(r, i, ctx)) for i, r in enumerate(areas)],
        "posts": [record_to_dict(p) for p in posts],
        "authors": [record_to_dict(a) for a in authors],
    }


def complete_config(
    config: Mapping[str, Any],
    catalog: VerticalCatalog = DEFAULT_CATALOG,
    today: Optional[date] = None,
) -> Dict[str, Any]:
    """Re-derive a fallback from the config's own business profile and backfill against it.

    Used by callers that cannot assume the config already went through
    ``merge_config``; every section the config supplies is kept.
    """
    config = config if isinstance(config, Mapping) else {}
    business = config.get("business") if isinstance(config.get("business"), Mapping) else {}
    fallback = generate_fallback(normalize_record(record_from_business(business), catalog), catalog, today)
    return merge_config(fallback, config, TRUSTED_POLICY, today)
