"""Deterministic site configuration built only from normalized fields and static tables.

Nothing in here touches the network. The output is the correctness backstop
for the live pipeline: every required field of every document is populated.
"""

from __future__ import annotations

import zlib
from datetime import date, timedelta
from typing import Any, Dict, List, Optional

from sitegen.core.verticals import DEFAULT_CATALOG, VerticalCatalog, vertical_label
from sitegen.etl.normalize import slugify
from sitegen.models import (
    Area,
    Author,
    Faq,
    NormalizedBusiness,
    Post,
    Service,
    Testimonial,
    record_to_dict,
)

DEFAULT_STREET = "123 Main Street"
DEFAULT_CITY = "Your City"
DEFAULT_STATE = "ST"
DEFAULT_PHONE_DISPLAY = "(555) 123-4567"
DEFAULT_PHONE_RAW = "+15551234567"
DEFAULT_AREA_COORDINATES = {"lat": 33.4484, "lng": -112.0740}

WEEKDAY_HOURS = "7:00 AM - 8:00 PM"
SATURDAY_HOURS = "8:00 AM - 6:00 PM"
SUNDAY_HOURS = "Emergency Only"

ESTABLISHED_MIN_YEARS = 5
ESTABLISHED_SPREAD = 15

TESTIMONIAL_NAMES = ("John M.", "Sarah K.", "Mike R.", "Jennifer L.", "David W.")
TESTIMONIAL_TEXTS = (
    "Great service from {business}! Professional, on time, and fair pricing. Highly recommend.",
    "The {service} team explained everything before starting and cleaned up afterwards. Will call again.",
    "Called in the morning and had a technician at the house by lunch. {business} made it painless.",
    "Honest quote, no upselling, and the {service} work has held up perfectly.",
    "Friendly crew and solid workmanship. A couple of scheduling hiccups, but the result was worth it.",
)


def default_hours() -> Dict[str, Any]:
    return {
        "weekdays": WEEKDAY_HOURS,
        "saturday": SATURDAY_HOURS,
        "sunday": SUNDAY_HOURS,
        "structured": [
            {"days": "Monday - Friday", "hours": WEEKDAY_HOURS},
            {"days": "Saturday", "hours": SATURDAY_HOURS},
            {"days": "Sunday", "hours": SUNDAY_HOURS},
        ],
    }


def established_year(slug: str, today: Optional[date] = None) -> int:
    """Stable founding year between 5 and 19 years before ``today``."""
    today = today or date.today()
    offset = zlib.crc32(slug.encode("utf-8")) % ESTABLISHED_SPREAD
    return today.year - ESTABLISHED_MIN_YEARS - offset


class FallbackGenerator:
    """Builds the full configuration from a ``NormalizedBusiness``."""

    def __init__(self, catalog: VerticalCatalog = DEFAULT_CATALOG) -> None:
        self.catalog = catalog

    def generate(self, business: NormalizedBusiness, today: Optional[date] = None) -> Dict[str, Any]:
        today = today or date.today()
        ctx = _Context(business, self.catalog)
        services = self._services(ctx)
        return {
            "business": self._business(ctx, today),
            "services": [record_to_dict(s) for s in services],
            "testimonials": [record_to_dict(t) for t in self._testimonials(ctx, services, today)],
            "faqs": [record_to_dict(f) for f in self._faqs(ctx)],
            "areas": [record_to_dict(a) for a in self._areas(ctx)],
            "posts": [record_to_dict(p) for p in self._posts(ctx, today)],
            "authors": [record_to_dict(self._author(ctx))],
        }

    def _business(self, ctx: "_Context", today: date) -> Dict[str, Any]:
        b = ctx.business
        record = b.record
        profile = self.catalog.profile(b.vertical)
        full_address = record.address.replace(", United States", "").strip()
        if not full_address:
            full_address = f"{ctx.street}, {ctx.city}, {ctx.state} {b.address.zip}"

        return {
            "name": b.name,
            "legalName": f"{b.name} LLC",
            "phone": ctx.phone_display,
            "phoneRaw": ctx.phone_raw,
            "email": b.email,
            "website": record.website or f"https://{b.slug}.com",
            "vertical": b.vertical,
            "region": b.region or ctx.state,
            "address": {
                "street": ctx.street,
                "city": ctx.city,
                "state": ctx.state,
                "zip": b.address.zip,
                "full": full_address,
            },
            "coordinates": record.coordinates or {"lat": 0, "lng": 0},
            "hours": default_hours(),
            "licenses": list(profile.licenses),
            "certifications": list(profile.certifications),
            "established": established_year(b.slug, today),
            "rating": record.rating or 5.0,
            "reviewCount": record.review_count,
            "description": (
                f"{b.name} provides professional {ctx.label_lower} services in {ctx.city}. "
                f"Trusted by {record.review_count}+ customers."
            ),
            "tagline": profile.tagline,
            "emergencyService": True,
            "financing": True,
            "freeEstimates": True,
            "responseTime": "2 hours",
            "warrantyYears": 2,
            "maintenancePointCount": 21,
            "socialMedia": {
                "facebook": f"https://facebook.com/{b.slug}",
                "instagram": f"https://instagram.com/{b.slug}",
                "google": f"https://g.page/{b.slug}",
            },
            "theme": {
                "preset": profile.theme,
                "logo": "/images/logo.png",
                "favicon": "/favicon.ico",
            },
            "features": {
                "showTeam": True,
                "showBlog": True,
                "showWorks": True,
                "showFinancing": True,
                "emergencyBadge": True,
                "callbackWidget": True,
                "stickyPhone": True,
            },
            "seo": {
                "titleTemplate": f"%s | {b.name}",
                "defaultDescription": (
                    f"Professional {ctx.label_lower} services in {ctx.city}, {ctx.state}. "
                    f"{record.rating or 5.0} stars. Call {ctx.phone_display}."
                ),
            },
            "forms": {
                "notifyEmail": b.email,
                "webhookUrl": "",
                "successMessage": "Thanks! We'll contact you within 2 hours.",
                "errorMessage": "Something went wrong. Please call us directly.",
            },
        }

    def _services(self, ctx: "_Context") -> List[Service]:
        b = ctx.business
        services = []
        for template in self.catalog.profile(b.vertical).services:
            services.append(
                Service(
                    slug=template.slug,
                    name=template.name,
                    short_description=template.short,
                    long_description=(
                        f"Professional {template.name.lower()} services in {ctx.city}. "
                        "Our certified technicians provide reliable solutions."
                    ),
                    features=["Licensed professionals", "Quality workmanship", "Satisfaction guaranteed", "Fair pricing"],
                    benefits=["Peace of mind", "Save time", "Expert results", "Reliable service"],
                    icon=template.icon,
                    category=template.category,
                    emergency=template.emergency,
                    meta_title=f"{template.name} | {b.name}",
                    meta_description=(
                        f"Professional {template.name.lower()} from {b.name} in {ctx.city}, {ctx.state}. "
                        f"Call {ctx.phone_display}."
                    ),
                )
            )
        return services

    def _testimonials(self, ctx: "_Context", services: List[Service], today: date) -> List[Testimonial]:
        testimonials = []
        for index, name in enumerate(TESTIMONIAL_NAMES):
            service = services[index % len(services)].name
            testimonials.append(
                Testimonial(
                    id=index + 1,
                    name=name,
                    location=f"{ctx.city}, {ctx.state}",
                    rating=5 if index < 3 else 4,
                    text=TESTIMONIAL_TEXTS[index].format(business=ctx.business.name, service=service.lower()),
                    service=service,
                    date=(today - timedelta(days=14 * (index + 1))).isoformat(),
                    verified=True,
                )
            )
        return testimonials

    def _faqs(self, ctx: "_Context") -> List[Faq]:
        city = ctx.city
        label = ctx.label_lower
        return [
            Faq(
                f"How quickly can you respond to {label} emergencies?",
                f"We offer 24/7 emergency service in {city}. Most emergencies are addressed within 2 hours.",
            ),
            Faq("Do you offer free estimates?", "Yes, we provide free estimates for most services. Call us to schedule."),
            Faq(
                "Are your technicians licensed?",
                "Yes, all our technicians are fully licensed, insured, and background-checked.",
            ),
            Faq("What areas do you serve?", f"We serve {city} and surrounding areas within 30 miles."),
            Faq(
                "Do you offer financing?",
                "Yes, we offer flexible financing options for larger projects.",
                "Pricing & Financing",
            ),
            Faq(
                "How do you price your work?",
                "We quote a flat price up front after inspecting the job, so there are no surprises on the invoice.",
                "Pricing & Financing",
            ),
            Faq("What is your warranty?", "We provide a 2-year warranty on all our work.", "Service & Warranty"),
            Faq(
                "Do you offer maintenance plans?",
                f"Yes. Our plans include a 21-point inspection and priority scheduling for {city} customers.",
                "Service & Warranty",
            ),
        ]

    def _areas(self, ctx: "_Context") -> List[Area]:
        b = ctx.business
        city = ctx.city
        state = ctx.state
        city_slug = ctx.city_slug
        coordinates = b.record.coordinates or dict(DEFAULT_AREA_COORDINATES)
        label = ctx.label_lower
        return [
            Area(
                slug=city_slug,
                name=city,
                state=state,
                description=(
                    f"Serving {city} with professional {label} services. Our experienced team provides "
                    "reliable solutions for homes and businesses throughout the area."
                ),
                neighborhoods=[f"Downtown {city}", f"North {city}", f"South {city}", f"East {city}", f"West {city}"],
                landmarks=[f"{city} City Center", f"{city} Airport"],
                local_challenges=f"Local climate and conditions in {city} require specialized {label} expertise.",
                coordinates=coordinates,
                population="100,000+",
                service_highlights=[f"Same-day service in {city}", "Local expertise", "Fast response times"],
            ),
            Area(
                slug="surrounding-areas",
                name=f"Greater {city} Area",
                state=state,
                description=f"Extended service coverage throughout the greater {city} metropolitan area.",
                neighborhoods=["Neighboring Communities", "Suburban Areas", "Outlying Districts"],
                landmarks=[],
                local_challenges=f"Serving the diverse needs of the greater {city} region.",
                coordinates=coordinates,
                population="50,000+",
                service_highlights=["Extended service area", "Flexible scheduling", "Reliable coverage"],
            ),
            Area(
                slug=f"{city_slug}-outskirts",
                name=f"{city} Outskirts",
                state=state,
                description=f"Rural and edge-of-town properties around {city} get the same {label} service as the city core.",
                neighborhoods=["Rural Properties", "New Developments", "Business Parks"],
                landmarks=[],
                local_challenges=f"Longer drive times outside {city} mean we schedule route-efficient visits.",
                coordinates=coordinates,
                population="25,000+",
                service_highlights=["Scheduled route service", "No extra trip fees", "Emergency coverage"],
            ),
        ]

    def _posts(self, ctx: "_Context", today: date) -> List[Post]:
        b = ctx.business
        city = ctx.city
        label = ctx.label
        lower = ctx.label_lower
        stamp = today.isoformat()
        return [
            Post(
                slug=f"{b.vertical}-tips-{ctx.city_slug}",
                title=f"{label} Tips for {city} Homeowners",
                excerpt=f"Essential {lower} maintenance tips for local homeowners.",
                content=(
                    f"Maintaining your {lower} systems in {city} requires attention to local conditions. "
                    "Here are our top tips for keeping your home comfortable year-round.\n\n"
                    "## Regular Maintenance\n\nSchedule annual inspections to catch problems early. "
                    "Our technicians can identify issues before they become expensive repairs.\n\n"
                    "## Know When to Call\n\nDon't ignore warning signs. Strange noises, unusual smells, "
                    "or reduced performance all indicate potential problems.\n\n"
                    f"## Trust Local Experts\n\n{b.name} has been serving {city} homeowners for years. "
                    "We understand local conditions and provide reliable solutions."
                ),
                author_id=b.author_id,
                date=stamp,
                category="Maintenance Tips",
                image="/images/blog/maintenance-tips.jpg",
                read_time="3 min read",
                meta_title=f"{label} Tips for {city} | {b.name}",
                meta_description=f"Expert {lower} maintenance tips for {city} homeowners from {b.name}.",
            ),
            Post(
                slug="save-money",
                title=f"How to Save Money on {label} Services",
                excerpt="Smart strategies to reduce your costs.",
                content=(
                    "Smart homeowners know that preventive maintenance saves money in the long run. "
                    f"Here's how to keep your {lower} costs under control.\n\n"
                    "## Schedule Regular Maintenance\n\nAnnual tune-ups prevent expensive emergency repairs "
                    "and keep your systems running efficiently.\n\n"
                    "## Know the Warning Signs\n\nCatching problems early means simpler, less expensive fixes.\n\n"
                    "## Choose Quality Service\n\nThe cheapest option isn't always the best value. "
                    f"{b.name} provides quality workmanship that lasts."
                ),
                author_id=b.author_id,
                date=stamp,
                category="Guides",
                image="/images/blog/save-money.jpg",
                read_time="4 min read",
                meta_title=f"Save Money on {label} Services | {b.name}",
                meta_description=f"Learn how to reduce your {lower} costs with tips from {b.name} professionals.",
            ),
            Post(
                slug="when-to-call",
                title=f"Signs You Need Professional {label} Help",
                excerpt="Know when to call the experts.",
                content=(
                    f"Not every {lower} issue requires professional help, but some definitely do. "
                    f"Here's how to know when to call {b.name}.\n\n"
                    "## Emergency Signs\n\nSome issues require immediate attention. "
                    "Don't wait if you notice serious problems.\n\n"
                    "## Performance Issues\n\nIf your systems aren't performing as expected, "
                    "it's time for a professional inspection.\n\n"
                    "## Regular Checkups\n\nEven without obvious problems, annual maintenance keeps "
                    "everything running smoothly."
                ),
                author_id=b.author_id,
                date=stamp,
                category="Tips",
                image="/images/blog/when-to-call.jpg",
                read_time="3 min read",
                meta_title=f"When to Call a {label} Professional | {b.name}",
                meta_description=f"Learn the warning signs that indicate you need professional {lower} help from {b.name}.",
            ),
        ]

    def _author(self, ctx: "_Context") -> Author:
        b = ctx.business
        return Author(
            id=b.author_id,
            name=f"{b.name} Team",
            role=f"Expert {ctx.label} Technicians",
            bio=(
                "Our team of certified technicians brings decades of combined experience to every job. "
                f"We're committed to providing reliable, honest service to the {ctx.city} area."
            ),
            certifications=list(self.catalog.profile(b.vertical).certifications),
        )


class _Context:
    """Display defaults shared by the section builders."""

    def __init__(self, business: NormalizedBusiness, catalog: VerticalCatalog) -> None:
        self.business = business
        self.street = business.address.street or DEFAULT_STREET
        self.city = business.address.city or DEFAULT_CITY
        self.state = business.address.state or DEFAULT_STATE
        self.city_slug = slugify(self.city) or "local"
        has_digits = any(ch.isdigit() for ch in business.record.phone)
        self.phone_display = business.phone.display if has_digits else DEFAULT_PHONE_DISPLAY
        self.phone_raw = business.phone.raw if has_digits else DEFAULT_PHONE_RAW
        self.label = vertical_label(business.vertical)
        self.label_lower = self.label if self.label.isupper() else self.label.lower()


def generate_fallback(
    business: NormalizedBusiness,
    catalog: VerticalCatalog = DEFAULT_CATALOG,
    today: Optional[date] = None,
) -> Dict[str, Any]:
    return FallbackGenerator(catalog).generate(business, today)
