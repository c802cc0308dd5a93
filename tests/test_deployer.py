import json
import os
import subprocess

import pytest

from sitegen.core import deployer
from sitegen.core.config import Settings

DEPLOY_OUTPUT = (
    "Vercel CLI 39.1.0\n"
    "Inspect: https://vercel.com/acme-team/valley-plumbing-heating/9xYzAbC123 [2s]\n"
    "Production: https://valley-plumbing-heating-abc123.vercel.app [18s]\n"
)


@pytest.fixture
def settings(tmp_path):
    template = tmp_path / "template"
    (template / "app").mkdir(parents=True)
    (template / "app" / "page.tsx").write_text("export default function Page() {}", encoding="utf-8")
    (template / ".git").mkdir()
    (template / ".git" / "HEAD").write_text("ref: refs/heads/main", encoding="utf-8")
    (template / "node_modules" / "next").mkdir(parents=True)
    workspace_root = tmp_path / "workspaces"
    workspace_root.mkdir()
    return Settings(
        vercel_token="secret",
        vercel_team_slug="acme-team",
        deploy_command="npx vercel",
        deploy_timeout=30,
        template_dir=str(template),
        workspace_root=str(workspace_root),
    )


@pytest.fixture
def config():
    return {"business": {"name": "Valley Plumbing & Heating", "vertical": "plumbing"}}


def test_deploy_success_writes_documents_and_cleans_up(monkeypatch, settings, config):
    seen = {}

    def fake_run(command, cwd=None, timeout=None, **kwargs):
        seen["command"] = command
        seen["timeout"] = timeout
        seen["kwargs"] = kwargs
        seen["files"] = sorted(os.listdir(os.path.join(cwd, "data")))
        seen["copied"] = os.path.exists(os.path.join(cwd, "app", "page.tsx"))
        seen["git"] = os.path.exists(os.path.join(cwd, ".git"))
        seen["node_modules"] = os.path.exists(os.path.join(cwd, "node_modules"))
        with open(os.path.join(cwd, "data", "business.json"), encoding="utf-8") as handle:
            seen["business"] = json.load(handle)
        return subprocess.CompletedProcess(command, 0, stdout=DEPLOY_OUTPUT)

    monkeypatch.setattr(deployer.subprocess, "run", fake_run)
    result = deployer.deploy(config, settings)

    assert result.url == "https://valley-plumbing-heating-abc123.vercel.app"
    assert result.project_id == "valley-plumbing-heating"
    assert result.deploy_id == "9xYzAbC123"
    assert result.to_dict() == {
        "url": "https://valley-plumbing-heating-abc123.vercel.app",
        "projectId": "valley-plumbing-heating",
        "deployId": "9xYzAbC123",
    }

    assert seen["command"][:5] == ["npx", "vercel", "deploy", "--prod", "--yes"]
    assert "--token=secret" in seen["command"]
    assert "--scope=acme-team" in seen["command"]
    assert seen["command"][-1] == "--name=valley-plumbing-heating"
    assert seen["timeout"] == 30
    assert seen["kwargs"]["stderr"] is subprocess.STDOUT
    assert seen["files"] == sorted(
        ["areas.json", "authors.json", "business.json", "faqs.json", "posts.json", "services.json", "testimonials.json"]
    )
    assert seen["copied"] is True
    assert seen["git"] is False
    assert seen["node_modules"] is False
    assert len(seen["business"]["hours"]["structured"]) == 3

    assert os.listdir(settings.workspace_root) == []


def test_deploy_without_url_returns_none(monkeypatch, settings, config):
    monkeypatch.setattr(
        deployer.subprocess, "run", lambda command, **kwargs: subprocess.CompletedProcess(command, 0, stdout="done")
    )
    result = deployer.deploy(config, settings)
    assert result.url is None
    assert result.deploy_id is None
    assert result.output == "done"


def test_deploy_failure_reports_output_and_cleans_up(monkeypatch, settings, config):
    monkeypatch.setattr(
        deployer.subprocess,
        "run",
        lambda command, **kwargs: subprocess.CompletedProcess(command, 1, stdout="Error: invalid token"),
    )
    with pytest.raises(deployer.DeploymentError) as excinfo:
        deployer.deploy(config, settings)

    assert excinfo.value.returncode == 1
    assert "invalid token" in excinfo.value.output
    assert os.listdir(settings.workspace_root) == []


def test_deploy_timeout_cleans_up(monkeypatch, settings, config):
    def timeout(command, **kwargs):
        raise subprocess.TimeoutExpired(command, kwargs.get("timeout"), output=b"Building...")

    monkeypatch.setattr(deployer.subprocess, "run", timeout)
    with pytest.raises(deployer.DeploymentError) as excinfo:
        deployer.deploy(config, settings)

    assert "timed out" in str(excinfo.value)
    assert excinfo.value.output == "Building..."
    assert os.listdir(settings.workspace_root) == []


def test_missing_executable_is_a_deployment_error(monkeypatch, settings, config):
    def missing(command, **kwargs):
        raise FileNotFoundError(command[0])

    monkeypatch.setattr(deployer.subprocess, "run", missing)
    with pytest.raises(deployer.DeploymentError):
        deployer.deploy(config, settings)
    assert os.listdir(settings.workspace_root) == []


def test_workspace_removed_when_body_raises(settings):
    with pytest.raises(RuntimeError):
        with deployer.workspace("acme", settings) as path:
            assert os.path.isdir(path)
            assert os.path.basename(path).startswith("sitegen-acme-")
            raise RuntimeError("boom")
    assert not os.path.exists(path)


def test_workspace_leaves_same_millisecond_directory_alone(monkeypatch, settings):
    monkeypatch.setattr(deployer.time, "time", lambda: 1000.0)
    other = os.path.join(settings.workspace_root, "sitegen-acme-1000000", "owned")
    os.makedirs(other)

    with deployer.workspace("acme", settings) as first:
        with deployer.workspace("acme", settings) as second:
            assert first != second
            assert os.path.isfile(os.path.join(second, "app", "page.tsx"))
            assert not os.path.exists(os.path.join(second, ".git"))
        assert os.path.isdir(first)

    assert not os.path.exists(first)
    assert not os.path.exists(second)
    assert os.path.isdir(other)


def test_build_deploy_command_omits_empty_credentials():
    command = deployer.build_deploy_command("acme", Settings(deploy_command="vercel"))
    assert command == ["vercel", "deploy", "--prod", "--yes", "--name=acme"]


def test_extract_helpers():
    assert deployer.extract_deployment_url(DEPLOY_OUTPUT).endswith(".vercel.app")
    assert deployer.extract_deployment_url("") is None
    assert deployer.extract_deploy_id(DEPLOY_OUTPUT) == "9xYzAbC123"
