import tempfile

from sitegen.core import config


def setup_function(function):
    config.get_settings.cache_clear()


def teardown_function(function):
    config.get_settings.cache_clear()


def test_get_settings_reads_env(monkeypatch, tmp_path):
    monkeypatch.setenv("OPENROUTER_API_KEY", "sk-or-test")
    monkeypatch.setenv("OPENROUTER_MODEL", "openai/gpt-oss-20b")
    monkeypatch.setenv("VERCEL_TOKEN", "tok")
    monkeypatch.setenv("VERCEL_TEAM_SLUG", "acme")
    monkeypatch.setenv("DEPLOY_TIMEOUT", "120")
    monkeypatch.setenv("SITE_TEMPLATE_DIR", str(tmp_path))
    monkeypatch.setenv("ACCEPT_CANDIDATE_AREAS", "true")
    monkeypatch.setenv("PORT", "9100")

    settings = config.get_settings()

    assert settings.openrouter_api_key == "sk-or-test"
    assert settings.openrouter_model == "openai/gpt-oss-20b"
    assert settings.openrouter_batch_model == config.DEFAULT_BATCH_MODEL
    assert settings.vercel_token == "tok"
    assert settings.vercel_team_slug == "acme"
    assert settings.deploy_timeout == 120
    assert settings.template_dir == str(tmp_path)
    assert settings.accept_candidate_areas is True
    assert settings.port == 9100


def test_get_settings_warns_when_missing(monkeypatch, caplog):
    for name in ("OPENROUTER_API_KEY", "VERCEL_TOKEN", "WORKSPACE_ROOT", "ACCEPT_CANDIDATE_AREAS", "PORT"):
        monkeypatch.delenv(name, raising=False)

    with caplog.at_level("WARNING"):
        settings = config.get_settings()

    assert "OPENROUTER_API_KEY is not configured" in " ".join(caplog.messages)
    assert "VERCEL_TOKEN is not configured" in " ".join(caplog.messages)
    assert settings.openrouter_api_key == ""
    assert settings.workspace_root == tempfile.gettempdir()
    assert settings.accept_candidate_areas is False
    assert settings.port == 8080
