from datetime import date

import pytest

from sitegen.core import merge
from sitegen.core.fallback import generate_fallback
from sitegen.etl.normalize import normalize_payload

TODAY = date(2026, 3, 1)


@pytest.fixture
def fallback_config(scraped_record):
    return generate_fallback(normalize_payload(scraped_record), today=TODAY)


def test_candidate_areas_are_ignored_by_default(fallback_config):
    candidate = {"areas": [{"slug": "tempe", "name": "Tempe"}]}
    merged = merge.merge_config(fallback_config, candidate, today=TODAY)
    assert merged["areas"] == fallback_config["areas"]


def test_trusted_policy_accepts_candidate_areas(fallback_config):
    candidate = {"areas": [{"slug": "tempe", "name": "Tempe"}]}
    merged = merge.merge_config(fallback_config, candidate, merge.TRUSTED_POLICY, today=TODAY)
    assert [area["slug"] for area in merged["areas"]] == ["tempe"]
    area = merged["areas"][0]
    assert area["state"] == "AZ"
    assert area["neighborhoods"]
    assert area["coordinates"] == {"lat": 33.509, "lng": -112.09}


def test_business_tagline_override_and_retention(fallback_config):
    original = fallback_config["business"]["tagline"]
    assert merge.merge_config(fallback_config, {"business": {"tagline": "Y"}})["business"]["tagline"] == "Y"
    assert merge.merge_config(fallback_config, {"business": {"name": "Other"}})["business"]["tagline"] == original
    assert merge.merge_config(fallback_config, {"business": {"tagline": ""}})["business"]["tagline"] == original


def test_business_shapes_are_repaired(fallback_config):
    candidate = {
        "business": {
            "licenses": [{"name": "ROC #123"}, "Bonded", {}],
            "certifications": [{"issuer": "x"}],
            "hours": {"monday": "8:00 AM - 5:00 PM"},
            "address": {"street": "9 Elm St", "city": "Tempe", "state": "AZ", "zip": "85281"},
            "rating": 11,
            "established": 3000,
            "coordinates": {"lat": "north"},
        }
    }
    business = merge.merge_config(fallback_config, candidate)["business"]

    assert business["licenses"] == ["ROC #123", "Bonded", "Licensed"]
    assert business["certifications"] == ["Certified"]
    assert business["hours"]["weekdays"] == "8:00 AM - 5:00 PM"
    assert business["hours"]["structured"][0] == {"days": "Monday - Friday", "hours": "8:00 AM - 5:00 PM"}
    assert len(business["hours"]["structured"]) == 3
    assert business["address"]["full"] == "9 Elm St, Tempe, AZ 85281"
    assert business["rating"] == fallback_config["business"]["rating"]
    assert business["established"] == fallback_config["business"]["established"]
    assert business["coordinates"] == fallback_config["business"]["coordinates"]


def test_nested_business_dicts_are_backfilled(fallback_config):
    business = merge.merge_config(fallback_config, {"business": {"theme": {"preset": "bold-green"}}})["business"]
    assert business["theme"]["preset"] == "bold-green"
    assert business["theme"]["logo"] == "/images/logo.png"


def test_candidate_records_are_backfilled(fallback_config):
    candidate = {
        "services": [{"name": "Drain Cleaning"}],
        "testimonials": [{"name": "Ann", "rating": 9}],
        "posts": [{"title": "Hello", "authorId": "ghost"}],
    }
    merged = merge.merge_config(fallback_config, candidate, today=TODAY)

    service = merged["services"][0]
    assert service["slug"] == "service-1"
    assert service["metaTitle"] == "Drain Cleaning | Valley Plumbing & Heating!!"
    assert service["emergency"] is False
    assert len(service["features"]) == 4

    testimonial = merged["testimonials"][0]
    assert testimonial["rating"] == 5
    assert testimonial["date"] == "2026-03-01"
    assert testimonial["location"] == "Phoenix, AZ"
    assert testimonial["verified"] is True

    post = merged["posts"][0]
    assert post["authorId"] == merged["authors"][0]["id"]
    assert post["metaDescription"] == "Read more about our services."


def test_empty_candidate_arrays_fall_back(fallback_config):
    merged = merge.merge_config(fallback_config, {"services": [], "faqs": "nope", "posts": [1, 2]})
    assert merged["services"] == fallback_config["services"]
    assert merged["faqs"] == fallback_config["faqs"]
    assert merged["posts"] == fallback_config["posts"]


def test_general_faq_category_is_guaranteed(fallback_config):
    candidate = {
        "faqs": [{"question": f"Q{i}?", "answer": f"A{i}.", "category": "Pricing"} for i in range(6)],
    }
    merged = merge.merge_config(fallback_config, candidate)
    categories = merge.group_faqs(merged["faqs"])

    general = [c for c in categories if c["slug"] == "general"]
    assert len(general) == 1
    assert categories[0]["slug"] == "general"
    assert [f["question"] for f in general[0]["faqs"]] == ["Q0?", "Q1?", "Q2?", "Q3?"]


def test_grouped_faqs_are_flattened(fallback_config):
    candidate = {
        "faqs": [
            {"name": "Billing", "slug": "billing", "faqs": [{"question": "Pay?", "answer": "Card."}]},
            {"question": "Hours?", "answer": "Always."},
        ]
    }
    faqs = merge.merge_config(fallback_config, candidate)["faqs"]
    assert faqs == [
        {"question": "Pay?", "answer": "Card.", "category": "Billing"},
        {"question": "Hours?", "answer": "Always.", "category": "General"},
    ]


def test_merge_without_candidate_matches_fallback_sections(fallback_config):
    merged = merge.merge_config(fallback_config, None, today=TODAY)
    for section in ("services", "testimonials", "faqs", "areas", "posts", "authors"):
        assert merged[section] == fallback_config[section], section


def test_complete_config_fills_partial_input():
    config = merge.complete_config({"business": {"name": "Acme Roofing", "vertical": "roofing"}}, today=TODAY)
    assert config["business"]["vertical"] == "roofing"
    assert config["business"]["theme"]["preset"] == "warm-terracotta"
    assert config["services"]
    assert config["authors"][0]["id"] == "acmeroofing-team"


def test_complete_config_keeps_supplied_sections():
    supplied = {"business": {"name": "Acme"}, "areas": [{"slug": "x", "name": "X"}]}
    config = merge.complete_config(supplied, today=TODAY)
    assert [area["slug"] for area in config["areas"]] == ["x"]
