"""Shape a merged configuration into the per-file documents the site template reads."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Sequence

from sitegen.core.merge import group_faqs
from sitegen.core.verticals import DEFAULT_CATALOG, VerticalCatalog

DEFAULT_AVERAGE_RATING = 4.9
DEFAULT_TOTAL_REVIEWS = 100
DEFAULT_FIVE_STAR_PERCENTAGE = 90
DEFAULT_POST_CATEGORIES = (
    "Maintenance Tips",
    "Repair",
    "Energy Efficiency",
    "Indoor Air Quality",
    "Industry News",
)

# (platform, share of total reviews, rating override)
REVIEW_PLATFORMS = (
    ("Google", 0.6, None),
    ("Yelp", 0.25, None),
    ("BBB", 0.15, 5.0),
)

DOCUMENT_FILENAMES = (
    "business.json",
    "services.json",
    "testimonials.json",
    "faqs.json",
    "areas.json",
    "posts.json",
    "authors.json",
)


def service_categories(services: Sequence[Mapping[str, Any]], catalog: VerticalCatalog = DEFAULT_CATALOG) -> List[Dict[str, str]]:
    seen: List[str] = []
    for service in services:
        category = service.get("category") or "general"
        if category not in seen:
            seen.append(category)
    return [
        {
            "slug": slug,
            "name": " ".join(word.capitalize() for word in slug.split("-")) + " Services",
            "icon": catalog.category_icons.get(slug, "Wrench"),
        }
        for slug in seen
    ]


def testimonial_summary(testimonials: Sequence[Mapping[str, Any]], review_count: Any) -> Dict[str, Any]:
    ratings = [t.get("rating") or 0 for t in testimonials]
    average = round(sum(ratings) / len(ratings), 1) if ratings else 0
    five_star = round(100 * sum(1 for r in ratings if r == 5) / len(ratings)) if ratings else 0
    total = review_count or DEFAULT_TOTAL_REVIEWS

    platforms = [
        {"name": name, "rating": override or average or DEFAULT_AVERAGE_RATING, "reviews": round(total * share)}
        for name, share, override in REVIEW_PLATFORMS
    ]
    return {
        "averageRating": average or DEFAULT_AVERAGE_RATING,
        "totalReviews": total,
        "fiveStarPercentage": five_star or DEFAULT_FIVE_STAR_PERCENTAGE,
        "platforms": platforms,
    }


def post_categories(posts: Sequence[Mapping[str, Any]]) -> List[str]:
    ordered: List[str] = []
    for name in [post.get("category") for post in posts] + list(DEFAULT_POST_CATEGORIES):
        if name and name not in ordered:
            ordered.append(name)
    return ordered


def build_documents(config: Mapping[str, Any], catalog: VerticalCatalog = DEFAULT_CATALOG) -> Dict[str, Any]:
    """Map each data filename to its JSON payload.

    ``config`` must already be complete (the output of ``merge_config`` or
    ``complete_config``); nothing here backfills missing fields.
    """
    business = config["business"]
    city = business["address"]["city"]
    return {
        "business.json": business,
        "services.json": {
            "services": list(config["services"]),
            "categories": service_categories(config["services"], catalog),
        },
        "testimonials.json": {
            "testimonials": list(config["testimonials"]),
            "summary": testimonial_summary(config["testimonials"], business.get("reviewCount")),
        },
        "faqs.json": {"categories": group_faqs(config["faqs"])},
        "areas.json": {
            "areas": list(config["areas"]),
            "serviceRadius": f"50 miles from {city}",
            "primaryServiceArea": f"{city} Metro Area",
        },
        "posts.json": {"posts": list(config["posts"]), "categories": post_categories(config["posts"])},
        "authors.json": {"authors": list(config["authors"])},
    }
