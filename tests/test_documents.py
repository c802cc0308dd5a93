from datetime import date

from sitegen.core import documents
from sitegen.core.fallback import generate_fallback
from sitegen.core.merge import merge_config
from sitegen.etl.normalize import normalize_payload

TODAY = date(2026, 3, 1)


def _config(scraped_record):
    return merge_config(generate_fallback(normalize_payload(scraped_record), today=TODAY), today=TODAY)


def test_build_documents_layout(scraped_record):
    docs = documents.build_documents(_config(scraped_record))

    assert set(docs) == set(documents.DOCUMENT_FILENAMES)
    assert docs["business.json"]["name"] == "Valley Plumbing & Heating!!"
    assert set(docs["services.json"]) == {"services", "categories"}
    assert set(docs["testimonials.json"]) == {"testimonials", "summary"}
    assert docs["areas.json"]["serviceRadius"] == "50 miles from Phoenix"
    assert docs["areas.json"]["primaryServiceArea"] == "Phoenix Metro Area"
    assert docs["authors.json"]["authors"][0]["id"] == "valleyplumbingheating-team"
    assert docs["faqs.json"]["categories"][0]["slug"] == "general"


def test_service_categories_are_unique_and_titled():
    services = [{"category": "air-quality"}, {"category": "plumbing"}, {"category": "air-quality"}, {}]
    assert documents.service_categories(services) == [
        {"slug": "air-quality", "name": "Air Quality Services", "icon": "Wind"},
        {"slug": "plumbing", "name": "Plumbing Services", "icon": "Droplet"},
        {"slug": "general", "name": "General Services", "icon": "Wrench"},
    ]


def test_testimonial_summary_math():
    summary = documents.testimonial_summary([{"rating": 5}, {"rating": 5}, {"rating": 4}], 0)
    assert summary["averageRating"] == 4.7
    assert summary["fiveStarPercentage"] == 67
    assert summary["totalReviews"] == 100
    assert summary["platforms"] == [
        {"name": "Google", "rating": 4.7, "reviews": 60},
        {"name": "Yelp", "rating": 4.7, "reviews": 25},
        {"name": "BBB", "rating": 5.0, "reviews": 15},
    ]


def test_testimonial_summary_defaults_when_empty():
    summary = documents.testimonial_summary([], 40)
    assert summary["averageRating"] == documents.DEFAULT_AVERAGE_RATING
    assert summary["fiveStarPercentage"] == documents.DEFAULT_FIVE_STAR_PERCENTAGE
    assert summary["totalReviews"] == 40


def test_post_categories_put_post_categories_first():
    posts = [{"category": "Repair"}, {"category": "Guides"}, {"category": None}]
    assert documents.post_categories(posts) == [
        "Repair",
        "Guides",
        "Maintenance Tips",
        "Energy Efficiency",
        "Indoor Air Quality",
        "Industry News",
    ]
