"""Static per-vertical tables used by the normalizer and the fallback generator.

The tables are read-only and bundled into a ``VerticalCatalog`` so callers can
inject an alternative catalog (tests, new markets) instead of patching globals.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, NamedTuple, Tuple

DEFAULT_VERTICAL = "hvac"


class ServiceTemplate(NamedTuple):
    slug: str
    name: str
    short: str
    icon: str
    category: str
    emergency: bool = False


class VerticalProfile(NamedTuple):
    licenses: Tuple[str, ...]
    certifications: Tuple[str, ...]
    tagline: str
    theme: str
    services: Tuple[ServiceTemplate, ...]


CATEGORY_TO_VERTICAL: Mapping[str, str] = MappingProxyType(
    {
        "plumber": "plumbing",
        "plumbing": "plumbing",
        "plumbing contractor": "plumbing",
        "plumbing service": "plumbing",
        "hvac": "hvac",
        "hvac contractor": "hvac",
        "air conditioning contractor": "hvac",
        "air conditioning repair service": "hvac",
        "heating contractor": "hvac",
        "furnace repair service": "hvac",
        "electrician": "electrical",
        "electrical": "electrical",
        "electrical contractor": "electrical",
        "roofer": "roofing",
        "roofing": "roofing",
        "roofing contractor": "roofing",
        "landscaper": "landscaping",
        "landscaping": "landscaping",
        "landscape designer": "landscaping",
        "lawn care service": "landscaping",
    }
)

STATE_NAMES: Mapping[str, str] = MappingProxyType(
    {
        "AZ": "Arizona",
        "CA": "California",
        "CO": "Colorado",
        "FL": "Florida",
        "GA": "Georgia",
        "IL": "Illinois",
        "NC": "North Carolina",
        "NM": "New Mexico",
        "NV": "Nevada",
        "NY": "New York",
        "OR": "Oregon",
        "TX": "Texas",
        "UT": "Utah",
        "WA": "Washington",
    }
)

_EMERGENCY_ICON = "AlertCircle"

VERTICAL_PROFILES: Mapping[str, VerticalProfile] = MappingProxyType(
    {
        "plumbing": VerticalProfile(
            licenses=("State Plumbing License", "Backflow Certified", "EPA Certified"),
            certifications=("BBB A+ Rating", "Master Plumber Certified"),
            tagline="Your Trusted Local Plumbers",
            theme="bold-blue",
            services=(
                ServiceTemplate("drain-cleaning", "Drain Cleaning", "Professional drain clearing", "Droplet", "plumbing"),
                ServiceTemplate("water-heater", "Water Heater Services", "Installation and repair", "Flame", "plumbing"),
                ServiceTemplate("leak-repair", "Leak Detection & Repair", "Find and fix leaks fast", "Search", "plumbing"),
                ServiceTemplate("pipe-repair", "Pipe Repair", "All pipe repairs", "Wrench", "plumbing"),
                ServiceTemplate("sewer-line", "Sewer Line Services", "Sewer inspection and repair", "Construction", "plumbing"),
                ServiceTemplate("emergency", "Emergency Plumbing", "24/7 emergency service", _EMERGENCY_ICON, "emergency", True),
            ),
        ),
        "hvac": VerticalProfile(
            licenses=("HVAC Contractor License", "EPA 608 Certified", "NATE Certified"),
            certifications=("Carrier Factory Authorized", "BBB A+ Rating"),
            tagline="Your Comfort, Our Priority",
            theme="bold-orange",
            services=(
                ServiceTemplate("ac-repair", "AC Repair", "Fast cooling restoration", "Snowflake", "cooling"),
                ServiceTemplate("ac-installation", "AC Installation", "New system installation", "Fan", "cooling"),
                ServiceTemplate("heating-repair", "Heating Repair", "Furnace and heat pump repair", "Flame", "heating"),
                ServiceTemplate("maintenance", "HVAC Maintenance", "Preventive tune-ups", "Wrench", "general"),
                ServiceTemplate("duct-cleaning", "Duct Cleaning", "Improve air quality", "Wind", "air-quality"),
                ServiceTemplate("emergency", "Emergency HVAC", "24/7 emergency service", _EMERGENCY_ICON, "emergency", True),
            ),
        ),
        "electrical": VerticalProfile(
            licenses=("Master Electrician License", "Bonded & Insured"),
            certifications=("BBB A+ Rating", "OSHA Certified"),
            tagline="Powering Your Home Safely",
            theme="bold-yellow",
            services=(
                ServiceTemplate("panel-upgrade", "Panel Upgrades", "Electrical panel services", "Zap", "electrical"),
                ServiceTemplate("wiring", "Electrical Wiring", "New and rewiring", "Cable", "electrical"),
                ServiceTemplate("lighting", "Lighting Installation", "Indoor and outdoor lighting", "Lightbulb", "electrical"),
                ServiceTemplate("outlet-repair", "Outlet & Switch Repair", "Safe electrical repairs", "Plug", "electrical"),
                ServiceTemplate("ev-charger", "EV Charger Installation", "Home charging stations", "BatteryCharging", "electrical"),
                ServiceTemplate("emergency", "Emergency Electrical", "24/7 emergency service", _EMERGENCY_ICON, "emergency", True),
            ),
        ),
        "roofing": VerticalProfile(
            licenses=("Roofing Contractor License", "Bonded & Insured"),
            certifications=("GAF Certified Installer", "BBB A+ Rating"),
            tagline="Protecting What Matters Most",
            theme="warm-terracotta",
            services=(
                ServiceTemplate("roof-repair", "Roof Repair", "Fix leaks and damage fast", "Home", "roofing"),
                ServiceTemplate("roof-replacement", "Roof Replacement", "Complete tear-off and install", "Hammer", "roofing"),
                ServiceTemplate("roof-inspection", "Roof Inspection", "Detailed condition reports", "Search", "roofing"),
                ServiceTemplate("gutters", "Gutter Services", "Gutter install and repair", "Droplet", "roofing"),
                ServiceTemplate("storm-damage", "Storm Damage Repair", "Insurance claim assistance", "CloudLightning", "roofing"),
                ServiceTemplate("emergency", "Emergency Roofing", "24/7 emergency tarping", _EMERGENCY_ICON, "emergency", True),
            ),
        ),
        "landscaping": VerticalProfile(
            licenses=("Landscape Contractor License", "Bonded & Insured"),
            certifications=("Certified Landscape Professional", "BBB A+ Rating"),
            tagline="Beautiful Outdoor Spaces, Done Right",
            theme="forest-green",
            services=(
                ServiceTemplate("lawn-care", "Lawn Care", "Mowing and fertilization", "Leaf", "landscaping"),
                ServiceTemplate("landscape-design", "Landscape Design", "Custom outdoor plans", "Trees", "landscaping"),
                ServiceTemplate("irrigation", "Irrigation Systems", "Sprinkler install and repair", "Droplet", "landscaping"),
                ServiceTemplate("hardscaping", "Hardscaping", "Patios, walls and walkways", "Layers", "landscaping"),
                ServiceTemplate("tree-trimming", "Tree & Shrub Trimming", "Healthy, shaped plantings", "Scissors", "landscaping"),
                ServiceTemplate("cleanup", "Storm Cleanup", "Fast debris removal", _EMERGENCY_ICON, "emergency", True),
            ),
        ),
    }
)

CATEGORY_ICONS: Mapping[str, str] = MappingProxyType(
    {
        "cooling": "Snowflake",
        "heating": "Flame",
        "air-quality": "Wind",
        "emergency": "AlertCircle",
        "general": "Wrench",
        "plumbing": "Droplet",
        "electrical": "Zap",
        "hvac": "Fan",
        "roofing": "Home",
        "landscaping": "Leaf",
    }
)


@dataclass(frozen=True)
class VerticalCatalog:
    """Bundle of the lookup tables a normalizer/generator pair works from."""

    category_to_vertical: Mapping[str, str] = field(default_factory=lambda: CATEGORY_TO_VERTICAL)
    profiles: Mapping[str, VerticalProfile] = field(default_factory=lambda: VERTICAL_PROFILES)
    state_names: Mapping[str, str] = field(default_factory=lambda: STATE_NAMES)
    category_icons: Mapping[str, str] = field(default_factory=lambda: CATEGORY_ICONS)
    default_vertical: str = DEFAULT_VERTICAL

    def profile(self, vertical: str) -> VerticalProfile:
        return self.profiles.get(vertical) or self.profiles[self.default_vertical]

    def theme_for(self, vertical: str) -> str:
        return self.profile(vertical).theme


DEFAULT_CATALOG = VerticalCatalog()


def vertical_label(vertical: str) -> str:
    """Human-facing name for a vertical (``hvac`` -> ``HVAC``)."""
    if vertical == "hvac":
        return "HVAC"
    return vertical.replace("-", " ").title()
