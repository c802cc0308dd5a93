"""Materialize a configuration into a throwaway copy of the site template and deploy it."""

from __future__ import annotations

import json
import logging
import os
import re
import shlex
import shutil
import subprocess
import tempfile
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Mapping, Optional

from sitegen.core.config import Settings, get_settings
from sitegen.core.documents import build_documents
from sitegen.core.merge import complete_config
from sitegen.core.validator import validate_documents
from sitegen.etl.normalize import DEFAULT_SLUG, slugify

logger = logging.getLogger(__name__)

DATA_DIR = "data"
WORKSPACE_PREFIX = "sitegen"
IGNORED_ARTIFACTS = (".git", "node_modules", ".next", ".vercel", ".DS_Store", ".env", ".env.local")

_URL_RE = re.compile(r"https://[^\s]+\.vercel\.app")
_INSPECT_RE = re.compile(r"Inspect:\s+https://vercel\.com/\S+/([A-Za-z0-9]+)")


class DeploymentError(RuntimeError):
    """Raised when the deploy command fails, times out or cannot be started."""

    def __init__(self, message: str, output: str = "", returncode: Optional[int] = None) -> None:
        super().__init__(message)
        self.output = output
        self.returncode = returncode


@dataclass(frozen=True)
class DeploymentResult:
    url: Optional[str]
    project_id: str
    deploy_id: Optional[str]
    output: str

    def to_dict(self) -> Dict[str, Any]:
        return {"url": self.url, "projectId": self.project_id, "deployId": self.deploy_id}


def project_name(config: Mapping[str, Any]) -> str:
    business = config.get("business") or {}
    return slugify(business.get("name")) or DEFAULT_SLUG


@contextmanager
def workspace(slug: str, settings: Settings) -> Iterator[str]:
    """Copy the site template into a freshly created directory, removed on exit.

    Only the directory created here is ever removed; concurrent calls for the
    same slug each get their own path.
    """
    os.makedirs(settings.workspace_root, exist_ok=True)
    prefix = f"{WORKSPACE_PREFIX}-{slug}-{int(time.time() * 1000)}-"
    path = tempfile.mkdtemp(prefix=prefix, dir=settings.workspace_root)
    try:
        shutil.copytree(
            settings.template_dir,
            path,
            ignore=shutil.ignore_patterns(*IGNORED_ARTIFACTS),
            dirs_exist_ok=True,
        )
        logger.info("Created workspace %s from %s", path, settings.template_dir)
        yield path
    finally:
        shutil.rmtree(path, ignore_errors=True)
        logger.info("Removed workspace %s", path)


def write_documents(path: str, documents: Mapping[str, Any]) -> List[str]:
    data_dir = os.path.join(path, DATA_DIR)
    os.makedirs(data_dir, exist_ok=True)
    written = []
    for filename, payload in documents.items():
        target = os.path.join(data_dir, filename)
        with open(target, "w", encoding="utf-8") as handle:
            json.dump(payload, handle, indent=2, ensure_ascii=False)
        written.append(target)
    return written


def build_deploy_command(project: str, settings: Settings) -> List[str]:
    command = shlex.split(settings.deploy_command) + ["deploy", "--prod", "--yes"]
    if settings.vercel_token:
        command.append(f"--token={settings.vercel_token}")
    if settings.vercel_team_slug:
        command.append(f"--scope={settings.vercel_team_slug}")
    command.append(f"--name={project}")
    return command


def _redact(command: List[str]) -> List[str]:
    return ["--token=***" if part.startswith("--token=") else part for part in command]


def run_deploy(command: List[str], cwd: str, timeout: int) -> str:
    """Run the deploy CLI and return its combined stdout/stderr."""
    logger.info("Running deploy command: %s", " ".join(_redact(command)))
    try:
        completed = subprocess.run(
            command,
            cwd=cwd,
            timeout=timeout,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            check=False,
        )
    except subprocess.TimeoutExpired as exc:
        output = exc.output or ""
        if isinstance(output, bytes):
            output = output.decode("utf-8", errors="replace")
        raise DeploymentError(f"Deploy command timed out after {timeout}s", output=output) from exc
    except FileNotFoundError as exc:
        raise DeploymentError(f"Deploy command not found: {command[0]}") from exc

    output = completed.stdout or ""
    if completed.returncode != 0:
        logger.error("Deploy failed with exit code %s: %s", completed.returncode, output[-1000:])
        raise DeploymentError(
            f"Deploy command exited with code {completed.returncode}",
            output=output,
            returncode=completed.returncode,
        )
    return output


def extract_deployment_url(output: str) -> Optional[str]:
    match = _URL_RE.search(output or "")
    return match.group(0) if match else None


def extract_deploy_id(output: str) -> Optional[str]:
    match = _INSPECT_RE.search(output or "")
    return match.group(1) if match else None


def deploy(config: Mapping[str, Any], settings: Optional[Settings] = None) -> DeploymentResult:
    """Publish ``config`` and return where it went.

    The configuration is completed again before writing, so callers may pass
    partial input. The workspace is deleted whether or not the deploy succeeds.
    """
    settings = settings or get_settings()
    final = complete_config(config)
    project = project_name(final)
    documents = build_documents(final)

    for result in validate_documents(documents):
        for warning in result.warnings:
            logger.warning("%s: %s", result.filename, warning)
        for error in result.errors:
            logger.error("%s: %s", result.filename, error)

    with workspace(project, settings) as path:
        write_documents(path, documents)
        output = run_deploy(build_deploy_command(project, settings), cwd=path, timeout=settings.deploy_timeout)

    url = extract_deployment_url(output)
    if url is None:
        logger.warning("No deployment URL found in deploy output for %s", project)
    else:
        logger.info("Deployed %s to %s", project, url)
    return DeploymentResult(url=url, project_id=project, deploy_id=extract_deploy_id(output), output=output)
