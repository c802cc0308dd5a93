import json

from sitegen.core.documents import build_documents
from sitegen.core.fallback import generate_fallback
from sitegen.core.merge import merge_config
from sitegen.etl.normalize import normalize_payload
from sitegen.jobs import validate_site


def test_main_passes_on_generated_documents(tmp_path, scraped_record):
    docs = build_documents(merge_config(generate_fallback(normalize_payload(scraped_record))))
    for filename, payload in docs.items():
        (tmp_path / filename).write_text(json.dumps(payload), encoding="utf-8")

    assert validate_site.main([str(tmp_path)]) == 0


def test_main_fails_on_empty_directory(tmp_path, caplog):
    assert validate_site.main([str(tmp_path)]) == 1
    assert "File not found" in " ".join(caplog.messages)
