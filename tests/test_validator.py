import copy
import json
from datetime import date

import pytest

from sitegen.core import validator
from sitegen.core.documents import build_documents
from sitegen.core.fallback import generate_fallback
from sitegen.core.merge import merge_config
from sitegen.etl.normalize import normalize_payload

TODAY = date(2026, 3, 1)


@pytest.fixture
def docs(scraped_record):
    config = merge_config(generate_fallback(normalize_payload(scraped_record), today=TODAY), today=TODAY)
    return build_documents(config)


def _result(results, filename):
    return next(r for r in results if r.filename == filename)


def test_generated_documents_pass(docs):
    results = validator.validate_documents(docs, today=TODAY)
    assert [r.filename for r in results] == list(validator.EXPECTED_FILES)
    assert all(r.passed for r in results)


def test_missing_and_empty_fields_are_errors(docs):
    business = copy.deepcopy(docs["business.json"])
    del business["phone"]
    business["name"] = "  "
    business["address"]["city"] = None

    result = validator.validate_document("business.json", business, TODAY)
    assert not result.passed
    assert "Missing required field: phone" in result.errors
    assert "Field is empty string: name" in result.errors
    assert "Field is null: address.city" in result.errors


def test_business_content_checks(docs):
    business = copy.deepcopy(docs["business.json"])
    business.update(rating=7, established=TODAY.year + 1, phone="555-1234", phoneRaw="1234")

    result = validator.validate_document("business.json", business, TODAY)
    assert "Rating should be between 1-5, got 7" in result.errors
    assert f"Established year is in the future: {TODAY.year + 1}" in result.errors
    assert "Phone format may be incorrect: 555-1234" in result.warnings
    assert any(w.startswith("Phone number") for w in result.warnings)


def test_duplicate_slugs_and_bad_coordinates(docs):
    services = copy.deepcopy(docs["services.json"])
    services["services"][1]["slug"] = services["services"][0]["slug"]
    result = validator.validate_document("services.json", services)
    assert any(e.startswith("Duplicate service slugs") for e in result.errors)

    areas = copy.deepcopy(docs["areas.json"])
    areas["areas"][0]["coordinates"] = {"lat": 120, "lng": 0}
    result = validator.validate_document("areas.json", areas)
    assert any(e.startswith("Invalid coordinates for area") for e in result.errors)


def test_array_length_and_meta_warnings(docs):
    posts = copy.deepcopy(docs["posts.json"])
    posts["posts"] = posts["posts"][:1]
    posts["posts"][0]["metaTitle"] = "T" * 61
    result = validator.validate_document("posts.json", posts)

    assert result.passed
    assert "Array 'posts' has 1 items, recommended minimum is 3" in result.warnings
    assert any("meta title is 61 chars" in w for w in result.warnings)


def test_non_array_section_is_an_error(docs):
    result = validator.validate_document("faqs.json", {"categories": {"general": []}})
    assert "Field 'categories' should be an array" in result.errors


def test_validate_directory(tmp_path, docs):
    for filename, payload in docs.items():
        (tmp_path / filename).write_text(json.dumps(payload), encoding="utf-8")
    (tmp_path / "posts.json").write_text("{broken", encoding="utf-8")
    (tmp_path / "areas.json").unlink()

    results = validator.validate_directory(str(tmp_path), today=TODAY)
    assert _result(results, "business.json").passed
    assert _result(results, "posts.json").errors[0].startswith("Invalid JSON")
    assert _result(results, "areas.json").errors[0].startswith("File not found")


def test_describe_expected_files_lists_every_file():
    reference = validator.describe_expected_files()
    for filename in validator.EXPECTED_FILES:
        assert f"{filename}: requires" in reference
