"""CLI job that asks the AI for a full set of site data files for human review.

Input may be inline JSON, a path to a JSON or text file, or a plain-language
description. Unlike the live pipeline nothing is backfilled: whatever the
model returns and parses under an expected filename is written out, and the
run reports how many of the expected files it got.
"""

import argparse
import json
import logging
import os
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

import requests

from sitegen.core.config import ConfigError, Settings, get_settings
from sitegen.core.fallback import generate_fallback
from sitegen.core.validator import EXPECTED_FILES, describe_expected_files
from sitegen.etl.normalize import classify_vertical, format_phone, normalize_payload
from sitegen.vendors import openrouter

logger = logging.getLogger(__name__)

MAX_TOKENS = 16000
PREVIEW_CHARS = 2000
BATCH_FILENAMES = tuple(EXPECTED_FILES)
EXAMPLE_RECORD = {
    "name": "Desert Aire Comfort",
    "category": "HVAC contractor",
    "address": "100 W Washington St, Phoenix, AZ 85003",
    "phone": "6025552665",
    "rating": 4.8,
    "reviewCount": 212,
}

_LABELED_BLOCK_RE = re.compile(r'```json\s+filename="([^"]+)"\n(.*?)```', re.DOTALL)
_PLAIN_BLOCK_RE = re.compile(r"```json\n(.*?)```", re.DOTALL)


class InputError(ValueError):
    """Raised when batch input cannot be turned into a prompt."""


@dataclass
class NormalizedInput:
    kind: str
    data: Any


@dataclass
class BatchContext:
    master_prompt: str = ""
    context_dir: Optional[str] = None
    schema_reference: str = field(default_factory=describe_expected_files)

    def vertical_guide(self, vertical: str) -> str:
        if not self.context_dir:
            return ""
        return _read_optional(os.path.join(self.context_dir, "verticals", f"{vertical}.md"))


@dataclass
class BatchReport:
    output_dir: str
    written: List[str]
    expected: int = len(BATCH_FILENAMES)

    @property
    def missing(self) -> List[str]:
        present = {os.path.basename(path) for path in self.written}
        return [name for name in BATCH_FILENAMES if name not in present]

    @property
    def complete(self) -> bool:
        return not self.missing


def _read_optional(path: str) -> str:
    if not os.path.isfile(path):
        return ""
    with open(path, "r", encoding="utf-8") as handle:
        return handle.read()


def normalize_input(value: Optional[str]) -> NormalizedInput:
    """Decide whether ``value`` is inline JSON, a file, or free text."""
    if not value or not value.strip():
        raise InputError("No input provided. Use --help for usage examples.")

    stripped = value.strip()
    if stripped.startswith("{"):
        try:
            parsed = json.loads(stripped)
        except ValueError:
            parsed = None
        if isinstance(parsed, dict):
            return NormalizedInput("json", parsed)

    looks_like_path = " " not in stripped or stripped.endswith((".json", ".txt"))
    if looks_like_path and os.path.isfile(stripped):
        with open(stripped, "r", encoding="utf-8") as handle:
            content = handle.read()
        if content.strip().startswith("{"):
            try:
                parsed = json.loads(content)
            except ValueError:
                return NormalizedInput("text", content)
            if isinstance(parsed, dict):
                return NormalizedInput("json", parsed)
        return NormalizedInput("text", content)

    return NormalizedInput("text", value)


def load_context(context_dir: Optional[str]) -> BatchContext:
    if not context_dir:
        return BatchContext()
    if not os.path.isdir(context_dir):
        raise InputError(f"Context directory not found: {context_dir}")
    return BatchContext(master_prompt=_read_optional(os.path.join(context_dir, "MASTER.md")), context_dir=context_dir)


def enrich_business_input(data: Mapping[str, Any]) -> Dict[str, Any]:
    """Fill ``vertical`` and a formatted phone the same way the live pipeline would."""
    enriched = dict(data)
    if not enriched.get("vertical"):
        enriched["vertical"] = classify_vertical(enriched.get("category"))
    phone = enriched.get("phone")
    if phone and any(ch.isdigit() for ch in str(phone)):
        formatted = format_phone(str(phone))
        enriched["phone"] = formatted.display
        enriched.setdefault("phoneRaw", formatted.raw)
    return enriched


def example_business(data: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    record = dict(EXAMPLE_RECORD)
    if data:
        address = data.get("address")
        if not isinstance(address, str):
            city, state = data.get("city"), data.get("state")
            address = f"{data.get('street') or '123 Main Street'}, {city}, {state}" if city and state else ""
        record.update(
            name=data.get("name") or record["name"],
            category=data.get("category") or data.get("vertical") or record["category"],
            address=address or record["address"],
            phone=data.get("phone") or record["phone"],
        )
    return generate_fallback(normalize_payload(record))["business"]


def _file_instructions() -> str:
    numbered = "\n".join(f"{index}. {name}" for index, name in enumerate(BATCH_FILENAMES, start=1))
    return (
        "Output each file as a separate JSON code block with the filename in the format:\n\n"
        '```json filename="business.json"\n{...}\n```\n\n'
        f"Generate all {len(BATCH_FILENAMES)} required files:\n{numbered}"
    )


def _preamble(context: BatchContext, example: Mapping[str, Any]) -> str:
    return (
        f"{context.master_prompt}\n\n"
        f"## Schemas Reference\n\n{context.schema_reference}\n\n"
        f"## Example business.json\n\n```json\n{json.dumps(example, indent=2)}\n```\n\n---\n"
    )


def build_prompt_from_json(data: Mapping[str, Any], context: BatchContext) -> str:
    business = enrich_business_input(data)
    vertical = business["vertical"]
    return (
        f"{_preamble(context, example_business(business))}\n"
        f"## Vertical-Specific Guide ({vertical})\n\n{context.vertical_guide(vertical)}\n\n"
        "## Your Task\n\nGenerate complete website configuration files for this business:\n\n"
        f"```json\n{json.dumps(business, indent=2)}\n```\n\n"
        f"{_file_instructions()}\n\n"
        "Make sure all content is realistic, specific to the city/region, and follows the schemas exactly.\n"
    )


def build_prompt_from_text(text: str, context: BatchContext) -> str:
    return (
        f"{_preamble(context, example_business())}\n"
        "## Your Task\n\n"
        f'A user wants to generate a website. Here\'s their description:\n\n"{text.strip()}"\n\n'
        "First, extract the business information from this description:\n"
        "- Business name\n"
        "- Phone number (format as (XXX) XXX-XXXX)\n"
        "- Email (generate a professional one if not provided)\n"
        "- City and State\n"
        "- Vertical/Industry (hvac, plumbing, electrical, roofing or landscaping)\n"
        "- Any other details mentioned (established year, specialties, etc.)\n\n"
        "Then generate complete website configuration files based on this information.\n\n"
        f"{_file_instructions()}\n\n"
        "Important:\n"
        "- If the vertical isn't clear, infer it from the business name or description\n"
        "- Generate realistic content specific to the city/region mentioned\n"
        "- Follow the schemas exactly\n"
    )


def parse_generated_content(content: str) -> Dict[str, Any]:
    """Collect every parseable JSON block, keyed by filename."""
    files: Dict[str, Any] = {}
    for filename, body in _LABELED_BLOCK_RE.findall(content or ""):
        try:
            files[filename] = json.loads(body.strip())
        except ValueError as exc:
            logger.warning("Could not parse %s: %s", filename, exc)
        else:
            logger.info("Parsed %s", filename)

    if files:
        return files

    logger.info("No labeled blocks found; trying unlabeled JSON blocks")
    names = iter(BATCH_FILENAMES)
    for body in _PLAIN_BLOCK_RE.findall(content or ""):
        try:
            parsed = json.loads(body.strip())
        except ValueError:
            continue
        filename = next(names, None)
        if filename is None:
            break
        files[filename] = parsed
        logger.info("Parsed unlabeled block as %s", filename)
    return files


def write_output_files(files: Mapping[str, Any], output_dir: str) -> List[str]:
    """Write the expected data files; anything else the model labeled is skipped."""
    os.makedirs(output_dir, exist_ok=True)
    written = []
    for filename, payload in files.items():
        name = os.path.basename(filename)
        if name not in BATCH_FILENAMES:
            logger.warning("Skipping unexpected file %s", filename)
            continue
        path = os.path.join(output_dir, name)
        with open(path, "w", encoding="utf-8") as handle:
            json.dump(payload, handle, indent=2, ensure_ascii=False)
        written.append(path)
    return written


def run_batch(
    *,
    input_value: Optional[str],
    output_dir: str,
    model: Optional[str] = None,
    context_dir: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> BatchReport:
    settings = settings or get_settings()
    if not settings.openrouter_api_key:
        raise ConfigError("OPENROUTER_API_KEY is required for batch generation")

    normalized = normalize_input(input_value)
    logger.info("Input type: %s", normalized.kind)
    context = load_context(context_dir)

    if normalized.kind == "json":
        data = normalized.data
        logger.info("Business: %s (%s, %s)", data.get("name", "Unknown"), data.get("city"), data.get("state"))
        prompt = build_prompt_from_json(data, context)
    else:
        prompt = build_prompt_from_text(normalized.data, context)
    logger.debug("Prompt preview:\n%s", prompt[:PREVIEW_CHARS])

    model = model or settings.openrouter_batch_model
    logger.info("Calling OpenRouter with model=%s", model)
    response = openrouter.chat_completion(
        prompt,
        api_key=settings.openrouter_api_key,
        model=model,
        api_url=settings.openrouter_api_url,
        max_tokens=MAX_TOKENS,
        timeout=settings.openrouter_timeout,
    )
    logger.debug("Response preview:\n%s", response[:PREVIEW_CHARS])

    files = parse_generated_content(response)
    written = write_output_files(files, output_dir) if files else []
    report = BatchReport(output_dir=os.path.abspath(output_dir), written=written)
    logger.info("Files generated: %d/%d in %s", len(written), report.expected, report.output_dir)
    if written and not report.complete:
        logger.warning(
            "Missing files: %s; rerun with more specific input or complete them by hand", ", ".join(report.missing)
        )
    return report


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Generate site data files with OpenRouter for review")
    parser.add_argument("input", nargs="?", help="Description, inline JSON, or path to a JSON/text file")
    parser.add_argument("-i", "--input", dest="input_flag", help="Same as the positional input")
    parser.add_argument("-o", "--output", default="./output", help="Output directory (default: ./output)")
    parser.add_argument("-m", "--model", help="OpenRouter model (default: OPENROUTER_BATCH_MODEL)")
    parser.add_argument("-c", "--context", dest="context_dir", help="Directory holding MASTER.md and verticals/*.md")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log prompt and response previews")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )

    try:
        report = run_batch(
            input_value=args.input_flag or args.input,
            output_dir=args.output,
            model=args.model,
            context_dir=args.context_dir,
        )
    except ConfigError as exc:
        logger.error("%s", exc)
        return 2
    except (InputError, openrouter.OpenRouterError, requests.RequestException) as exc:
        logger.error("Batch generation failed: %s", exc)
        return 1

    if not report.written:
        logger.error("No valid JSON files could be parsed from the response; rerun with --verbose")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
