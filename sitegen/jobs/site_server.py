"""HTTP entrypoints for previewing, enriching and deploying generated sites."""

from __future__ import annotations

import logging
import os
from datetime import date
from typing import Any, Dict, Mapping, Optional, Tuple

from flask import Flask, jsonify, request

from sitegen.core.config import Settings, get_settings
from sitegen.core.deployer import DeploymentError, deploy
from sitegen.core.fallback import generate_fallback
from sitegen.core.merge import TRUSTED_POLICY, MergePolicy, merge_config
from sitegen.core.synthesizer import synthesize
from sitegen.etl.normalize import normalize_payload

# ---------- Logging ----------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s - %(message)s",
)
logger = logging.getLogger(__name__)

# ---------- App ----------
app = Flask(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


def generate_site_config(
    scraped: Mapping[str, Any],
    settings: Optional[Settings] = None,
    today: Optional[date] = None,
) -> Dict[str, Any]:
    """Normalize, ask the AI for a candidate, and merge it over the fallback."""
    settings = settings or get_settings()
    business = normalize_payload(scraped)
    fallback = generate_fallback(business, today=today)
    candidate = synthesize(business, settings)
    if candidate is None:
        logger.info("Using fallback-only configuration for %s", business.slug)
    policy = MergePolicy(accept_candidate_areas=settings.accept_candidate_areas)
    return merge_config(fallback, candidate, policy, today)


def _read_scraped() -> Tuple[Optional[Dict[str, Any]], Any]:
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        return None, (jsonify({"error": "Request body must be a JSON object"}), 400)
    scraped = payload.get("scrapedData")
    if not isinstance(scraped, dict) or not scraped:
        return None, (jsonify({"error": "Missing scrapedData"}), 400)
    return payload, None


@app.after_request
def add_cors_headers(response: Any) -> Any:
    response.headers.update(CORS_HEADERS)
    return response


# ---------- Routes ----------


@app.get("/")
def root() -> Any:
    return "ok", 200


@app.get("/healthz")
def healthcheck() -> Any:
    settings = get_settings()
    return (
        jsonify(
            {
                "status": "ok",
                "ai_configured": bool(settings.openrouter_api_key),
                "revision": os.getenv("K_REVISION", "unknown"),
            }
        ),
        200,
    )


@app.post("/api/generate")
def generate_site() -> Any:
    """
    Build the business profile and optionally deploy the full site.
    Required JSON fields: scrapedData
    Optional: fullConfig (object from /api/ai-generate), deploy (bool)
    """
    payload, error = _read_scraped()
    if error:
        return error

    full_config = payload.get("fullConfig")
    fallback = generate_fallback(normalize_payload(payload["scrapedData"]))
    if isinstance(full_config, dict):
        config = merge_config(fallback, full_config, TRUSTED_POLICY)
    else:
        config = merge_config(fallback)
    business_json = config["business"]

    if payload.get("deploy") is not True:
        return jsonify({"success": True, "businessJson": business_json, "preview": True}), 200

    try:
        result = deploy(config, get_settings())
    except DeploymentError as exc:
        logger.exception("Deployment failed for %s: %s", business_json.get("name"), exc)
        return jsonify({"error": str(exc), "output": exc.output}), 500
    except Exception as exc:  # noqa: BLE001
        logger.exception("Generation failed for %s: %s", business_json.get("name"), exc)
        return jsonify({"error": str(exc) or "Unknown error"}), 500

    return jsonify({"success": True, "businessJson": business_json, "deployment": result.to_dict()}), 200


@app.post("/api/ai-generate")
def ai_generate() -> Any:
    """Return a complete configuration, AI-enriched when a key is configured."""
    payload, error = _read_scraped()
    if error:
        return error

    settings = get_settings()
    try:
        config = generate_site_config(payload["scrapedData"], settings)
    except Exception as exc:  # noqa: BLE001
        logger.exception("AI generation failed: %s", exc)
        return jsonify({"error": str(exc) or "Unknown error"}), 500

    return jsonify({"success": True, "config": config, "usedAI": bool(settings.openrouter_api_key)}), 200


def main() -> None:
    port = get_settings().port
    logger.info("[BOOT] Binding on 0.0.0.0:%d", port)
    app.run(host="0.0.0.0", port=port)


if __name__ == "__main__":
    main()
