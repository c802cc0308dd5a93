"""Core data models shared by the site generation pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Optional


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def record_to_dict(record: Any) -> Dict[str, Any]:
    """Serialize a section dataclass into the camelCase JSON shape the site template reads."""
    return {_camel(f.name): _plain(getattr(record, f.name)) for f in fields(record)}


def _plain(value: Any) -> Any:
    if hasattr(value, "__dataclass_fields__"):
        return record_to_dict(value)
    if isinstance(value, list):
        return [_plain(item) for item in value]
    if isinstance(value, dict):
        return {key: _plain(item) for key, item in value.items()}
    return value


@dataclass(frozen=True)
class RawBusinessRecord:
    """Unvalidated snapshot of one business as scraped from a directory listing."""

    name: str = ""
    rating: float = 0.0
    review_count: int = 0
    category: str = ""
    address: str = ""
    phone: str = ""
    website: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    @property
    def coordinates(self) -> Optional[Dict[str, float]]:
        if self.latitude is None or self.longitude is None:
            return None
        return {"lat": self.latitude, "lng": self.longitude}


@dataclass(frozen=True)
class ParsedAddress:
    street: str = ""
    city: str = ""
    state: str = ""
    zip: str = "00000"


@dataclass(frozen=True)
class FormattedPhone:
    display: str
    raw: str


@dataclass(frozen=True)
class NormalizedBusiness:
    """Canonical primitives derived from a raw record by the field normalizer."""

    record: RawBusinessRecord
    name: str
    slug: str
    address: ParsedAddress
    phone: FormattedPhone
    vertical: str
    region: str

    @property
    def compact_slug(self) -> str:
        return self.slug.replace("-", "")

    @property
    def email(self) -> str:
        return f"info@{self.compact_slug}.com"

    @property
    def author_id(self) -> str:
        return f"{self.compact_slug}-team"


@dataclass(slots=True)
class Service:
    slug: str
    name: str
    short_description: str
    long_description: str
    features: List[str]
    benefits: List[str]
    icon: str
    category: str
    emergency: bool
    meta_title: str
    meta_description: str


@dataclass(slots=True)
class Testimonial:
    id: Any
    name: str
    location: str
    rating: float
    text: str
    service: str
    date: str
    verified: bool


@dataclass(slots=True)
class Faq:
    question: str
    answer: str
    category: str = "General"


@dataclass(slots=True)
class FaqCategory:
    name: str
    slug: str
    faqs: List[Dict[str, str]] = field(default_factory=list)


@dataclass(slots=True)
class Area:
    slug: str
    name: str
    state: str
    description: str
    neighborhoods: List[str]
    landmarks: List[str]
    local_challenges: str
    coordinates: Dict[str, float]
    population: str
    service_highlights: List[str]


@dataclass(slots=True)
class Post:
    slug: str
    title: str
    excerpt: str
    content: str
    author_id: str
    date: str
    category: str
    image: str
    read_time: str
    meta_title: str
    meta_description: str


@dataclass(slots=True)
class Author:
    id: str
    name: str
    role: str
    bio: str
    certifications: List[str]
    image: str = "/images/logo.png"
    social: Dict[str, str] = field(default_factory=dict)
