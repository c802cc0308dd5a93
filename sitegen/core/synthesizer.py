"""Prompt building and response parsing for AI-written site content."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterator, Optional, Union

import requests

from sitegen.core.config import Settings, get_settings
from sitegen.core.fallback import established_year
from sitegen.models import NormalizedBusiness
from sitegen.vendors import openrouter

logger = logging.getLogger(__name__)

MAX_TOKENS = 4000
TEMPERATURE = 0.7


@dataclass(frozen=True)
class Candidate:
    """Parsed, still untrusted document returned by the model."""

    data: Dict[str, Any]


@dataclass(frozen=True)
class ParseFailure:
    reason: str


ParseResult = Union[Candidate, ParseFailure]


def build_prompt(business: NormalizedBusiness) -> str:
    record = business.record
    addr = business.address
    vertical = business.vertical
    website = record.website or f"https://{business.slug}.com"
    skeleton = {
        "name": business.name,
        "legalName": f"{business.name} LLC",
        "phone": business.phone.display,
        "email": business.email,
        "website": website,
        "vertical": vertical,
        "address": {"street": addr.street, "city": addr.city, "state": addr.state, "zip": addr.zip},
        "rating": record.rating,
        "reviewCount": record.review_count,
        "established": established_year(business.slug),
        "tagline": f"[Generate a catchy tagline for this {vertical} business]",
        "description": "[Generate a 2-sentence description]",
    }
    business_block = json.dumps(skeleton, indent=2)

    return f"""Generate a complete website data configuration for a {vertical} business.

BUSINESS INFO:
- Name: {business.name}
- Phone: {business.phone.display}
- Address: {record.address}
- City: {addr.city}, {addr.state}
- Rating: {record.rating} stars ({record.review_count} reviews)
- Website: {record.website or 'none'}
- Industry: {vertical}

Generate a JSON object with these exact keys. Be creative but realistic. Use the business name and location throughout.

{{
  "business": {business_block},
  "services": [
    // Generate 6-8 services appropriate for a {vertical} business
    // Each service needs: slug, name, shortDescription, longDescription, features (array of 4-5 strings), benefits (array of 4 strings), icon, category, emergency (boolean)
  ],
  "testimonials": [
    // Generate 5 realistic testimonials
    // Each needs: name, location (city nearby), rating (4 or 5), text (2-3 sentences), service (one of the services above)
  ],
  "faqs": [
    // Generate 8 FAQs about {vertical} services
    // Each needs: question, answer (2-3 sentences), category
  ],
  "areas": [
    // Generate 5 service areas near {addr.city}, {addr.state}
    // Each needs: slug, name, state, description, neighborhoods (array), coordinates ({{"lat", "lng"}})
  ],
  "posts": [
    // Generate 3 blog post stubs
    // Each needs: slug, title, excerpt (1 sentence), content (markdown), category
  ]
}}

Return ONLY valid JSON, no markdown, no explanation."""


def _balanced_objects(text: str) -> Iterator[str]:
    """Yield every brace-balanced ``{...}`` substring, in order of its opening brace."""
    start = text.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for index in range(start, len(text)):
            ch = text[index]
            if in_string:
                if escaped:
                    escaped = False
                elif ch == "\\":
                    escaped = True
                elif ch == '"':
                    in_string = False
                continue
            if ch == '"':
                in_string = True
            elif ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
                if depth == 0:
                    yield text[start : index + 1]
                    break
        start = text.find("{", start + 1)


def extract_json_object(text: Optional[str]) -> ParseResult:
    """Pull the first parseable JSON object out of free-form model output."""
    if not text or "{" not in text:
        return ParseFailure("response contains no JSON object")

    last_error = "no balanced JSON object found"
    for snippet in _balanced_objects(text):
        try:
            parsed = json.loads(snippet)
        except ValueError as exc:
            last_error = f"invalid JSON: {exc}"
            continue
        if isinstance(parsed, dict):
            return Candidate(parsed)
    return ParseFailure(last_error)


def synthesize(business: NormalizedBusiness, settings: Optional[Settings] = None) -> Optional[Dict[str, Any]]:
    """Ask the generative-text service for a candidate configuration.

    Returns ``None`` when no credential is configured, when the call fails,
    or when the reply cannot be parsed. A single attempt is made.
    """
    settings = settings or get_settings()
    if not settings.openrouter_api_key:
        logger.debug("No OpenRouter key configured; skipping synthesis for %s", business.slug)
        return None

    prompt = build_prompt(business)
    try:
        content = openrouter.chat_completion(
            prompt,
            api_key=settings.openrouter_api_key,
            model=settings.openrouter_model,
            api_url=settings.openrouter_api_url,
            max_tokens=MAX_TOKENS,
            temperature=TEMPERATURE,
            timeout=settings.openrouter_timeout,
        )
    except (requests.RequestException, openrouter.OpenRouterError) as exc:
        logger.error("AI generation failed for %s: %s", business.slug, exc)
        return None

    result = extract_json_object(content)
    if isinstance(result, ParseFailure):
        logger.warning("Could not parse AI response for %s: %s", business.slug, result.reason)
        return None

    logger.info("AI candidate parsed for %s (sections=%s)", business.slug, sorted(result.data.keys()))
    return result.data
