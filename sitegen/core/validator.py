"""Checks generated data documents against the fields the site template needs."""

from __future__ import annotations

import json
import logging
import os
import re
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import phonenumbers

logger = logging.getLogger(__name__)

PHONE_DISPLAY_RE = re.compile(r"^\(\d{3}\)\s?\d{3}-\d{4}$")
META_TITLE_MAX = 60
META_DESCRIPTION_MAX = 160


@dataclass(frozen=True)
class FileRule:
    required: Tuple[str, ...]
    nested: Mapping[str, Tuple[str, ...]] = field(default_factory=dict)
    array_field: Optional[str] = None
    item_required: Tuple[str, ...] = ()
    min_items: int = 0
    max_items: int = 0


EXPECTED_FILES: Dict[str, FileRule] = {
    "business.json": FileRule(
        required=("name", "phone", "email", "vertical", "address", "hours", "established", "rating", "reviewCount"),
        nested={
            "address": ("street", "city", "state", "zip"),
            "hours": ("weekdays", "saturday", "sunday"),
            "theme": ("preset", "logo"),
            "features": ("showBlog", "emergencyBadge"),
            "seo": ("titleTemplate", "defaultDescription"),
        },
    ),
    "services.json": FileRule(
        required=("services", "categories"),
        array_field="services",
        item_required=("slug", "name", "shortDescription", "longDescription", "features", "benefits", "icon", "category"),
        min_items=5,
        max_items=10,
    ),
    "areas.json": FileRule(
        required=("areas", "serviceRadius", "primaryServiceArea"),
        array_field="areas",
        item_required=("slug", "name", "state", "description", "neighborhoods", "coordinates"),
        min_items=3,
        max_items=15,
    ),
    "testimonials.json": FileRule(
        required=("testimonials", "summary"),
        nested={"summary": ("averageRating", "totalReviews", "platforms")},
        array_field="testimonials",
        item_required=("id", "name", "location", "rating", "text", "service", "date"),
        min_items=5,
        max_items=10,
    ),
    "faqs.json": FileRule(
        required=("categories",),
        array_field="categories",
        item_required=("name", "slug", "faqs"),
        min_items=3,
        max_items=8,
    ),
    "posts.json": FileRule(
        required=("posts", "categories"),
        array_field="posts",
        item_required=("slug", "title", "excerpt", "content", "date", "category", "metaTitle", "metaDescription"),
        min_items=3,
        max_items=10,
    ),
}


@dataclass
class ValidationResult:
    filename: str
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return not self.errors


def describe_expected_files() -> str:
    """Plain-text reference of every file and its required fields."""
    lines = []
    for filename, rule in EXPECTED_FILES.items():
        lines.append(f"{filename}: requires {', '.join(rule.required)}")
        for parent, fields in rule.nested.items():
            lines.append(f"  {parent}: {', '.join(fields)}")
        if rule.array_field:
            lines.append(
                f"  each {rule.array_field} item: {', '.join(rule.item_required)} "
                f"({rule.min_items}-{rule.max_items} items)"
            )
    return "\n".join(lines)


def _check_field(obj: Mapping[str, Any], name: str, result: ValidationResult, prefix: str = "") -> bool:
    path = f"{prefix}.{name}" if prefix else name
    if name not in obj:
        result.errors.append(f"Missing required field: {path}")
        return False
    value = obj[name]
    if value is None:
        result.errors.append(f"Field is null: {path}")
        return False
    if isinstance(value, str) and not value.strip():
        result.errors.append(f"Field is empty string: {path}")
        return False
    return True


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _duplicates(records: Sequence[Any], key: str) -> List[str]:
    seen, dupes = set(), []
    for record in records:
        if not isinstance(record, Mapping):
            continue
        value = record.get(key)
        if value in seen and value not in dupes:
            dupes.append(value)
        seen.add(value)
    return [str(value) for value in dupes]


def _check_business(data: Mapping[str, Any], result: ValidationResult, today: date) -> None:
    rating = data.get("rating")
    if _is_number(rating) and rating:
        if not 1 <= rating <= 5:
            result.errors.append(f"Rating should be between 1-5, got {rating}")
        elif rating < 4:
            result.warnings.append(f"Rating {rating} is low for display")

    phone = data.get("phone")
    if isinstance(phone, str) and phone:
        if not PHONE_DISPLAY_RE.match(phone):
            result.warnings.append(f"Phone format may be incorrect: {phone}")
        try:
            parsed = phonenumbers.parse(data.get("phoneRaw") or phone, "US")
        except phonenumbers.NumberParseException as exc:
            result.warnings.append(f"Phone number could not be parsed: {phone} ({exc})")
        else:
            if not phonenumbers.is_possible_number(parsed):
                result.warnings.append(f"Phone number is not a possible number: {phone}")

    established = data.get("established")
    if _is_number(established) and established:
        if established > today.year:
            result.errors.append(f"Established year is in the future: {established}")
        if established < 1900:
            result.warnings.append(f"Established year seems too old: {established}")


def _check_services(data: Mapping[str, Any], result: ValidationResult) -> None:
    services = data["services"]
    dupes = _duplicates(services, "slug")
    if dupes:
        result.errors.append(f"Duplicate service slugs: {', '.join(dupes)}")
    if not any(isinstance(s, Mapping) and s.get("emergency") for s in services):
        result.warnings.append("No emergency services defined")


def _check_areas(data: Mapping[str, Any], result: ValidationResult) -> None:
    areas = data["areas"]
    dupes = _duplicates(areas, "slug")
    if dupes:
        result.errors.append(f"Duplicate area slugs: {', '.join(dupes)}")
    for area in areas:
        coords = area.get("coordinates") if isinstance(area, Mapping) else None
        if not isinstance(coords, Mapping):
            continue
        lat, lng = coords.get("lat"), coords.get("lng")
        if not (_is_number(lat) and _is_number(lng) and -90 <= lat <= 90 and -180 <= lng <= 180):
            result.errors.append(f"Invalid coordinates for area {area.get('name')}")


def _check_testimonials(data: Mapping[str, Any], result: ValidationResult) -> None:
    testimonials = data["testimonials"]
    for index, item in enumerate(testimonials):
        rating = item.get("rating") if isinstance(item, Mapping) else None
        if _is_number(rating) and rating and not 1 <= rating <= 5:
            result.errors.append(f"Testimonial {index} has invalid rating: {rating}")

    summary = data.get("summary")
    if isinstance(summary, Mapping):
        total = summary.get("totalReviews")
        if _is_number(total) and total and total < len(testimonials):
            result.warnings.append(
                f"Summary totalReviews ({total}) is less than testimonial count ({len(testimonials)})"
            )


def _check_posts(data: Mapping[str, Any], result: ValidationResult) -> None:
    posts = data["posts"]
    dupes = _duplicates(posts, "slug")
    if dupes:
        result.errors.append(f"Duplicate post slugs: {', '.join(dupes)}")
    for post in posts:
        if not isinstance(post, Mapping):
            continue
        description = post.get("metaDescription") or ""
        title = post.get("metaTitle") or ""
        if len(description) > META_DESCRIPTION_MAX:
            result.warnings.append(
                f'Post "{post.get("slug")}" meta description is {len(description)} chars (max {META_DESCRIPTION_MAX})'
            )
        if len(title) > META_TITLE_MAX:
            result.warnings.append(f'Post "{post.get("slug")}" meta title is {len(title)} chars (max {META_TITLE_MAX})')


_CONTENT_CHECKS = {
    "services.json": _check_services,
    "areas.json": _check_areas,
    "testimonials.json": _check_testimonials,
    "posts.json": _check_posts,
}


def validate_document(filename: str, data: Any, today: Optional[date] = None) -> ValidationResult:
    result = ValidationResult(filename)
    rule = EXPECTED_FILES[filename]
    if not isinstance(data, Mapping):
        result.errors.append("Document root should be an object")
        return result

    for name in rule.required:
        _check_field(data, name, result)

    for parent, fields in rule.nested.items():
        child = data.get(parent)
        if isinstance(child, Mapping):
            for name in fields:
                _check_field(child, name, result, parent)

    items = data.get(rule.array_field) if rule.array_field else None
    if rule.array_field and items is not None:
        if not isinstance(items, list):
            result.errors.append(f"Field '{rule.array_field}' should be an array")
            return result
        if rule.min_items and len(items) < rule.min_items:
            result.warnings.append(
                f"Array '{rule.array_field}' has {len(items)} items, recommended minimum is {rule.min_items}"
            )
        if rule.max_items and len(items) > rule.max_items:
            result.warnings.append(
                f"Array '{rule.array_field}' has {len(items)} items, recommended maximum is {rule.max_items}"
            )
        for index, item in enumerate(items):
            prefix = f"{rule.array_field}[{index}]"
            if not isinstance(item, Mapping):
                result.errors.append(f"{prefix} should be an object")
                continue
            for name in rule.item_required:
                _check_field(item, name, result, prefix)

    if filename == "business.json":
        _check_business(data, result, today or date.today())
    elif filename in _CONTENT_CHECKS and isinstance(items, list):
        _CONTENT_CHECKS[filename](data, result)
    return result


def validate_documents(documents: Mapping[str, Any], today: Optional[date] = None) -> List[ValidationResult]:
    """Validate an in-memory ``{filename: payload}`` map; missing files are errors."""
    results = []
    for filename in EXPECTED_FILES:
        if filename not in documents:
            result = ValidationResult(filename)
            result.errors.append(f"File not found: {filename}")
            results.append(result)
            continue
        results.append(validate_document(filename, documents[filename], today))
    return results


def validate_directory(path: str, today: Optional[date] = None) -> List[ValidationResult]:
    results = []
    for filename in EXPECTED_FILES:
        file_path = os.path.join(path, filename)
        if not os.path.exists(file_path):
            result = ValidationResult(filename)
            result.errors.append(f"File not found: {file_path}")
            results.append(result)
            continue
        try:
            with open(file_path, "r", encoding="utf-8") as handle:
                data = json.load(handle)
        except ValueError as exc:
            result = ValidationResult(filename)
            result.errors.append(f"Invalid JSON: {exc}")
            results.append(result)
            continue
        results.append(validate_document(filename, data, today))
    return results
