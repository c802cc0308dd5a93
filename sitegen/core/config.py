"""Application configuration helpers."""

import logging
import os
import tempfile
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://openrouter.ai/api/v1/chat/completions"
DEFAULT_MODEL = "mistralai/mistral-7b-instruct"
DEFAULT_BATCH_MODEL = "deepseek/deepseek-v3.2"


class ConfigError(RuntimeError):
    """Raised when mandatory configuration is missing."""


@dataclass(frozen=True)
class Settings:
    openrouter_api_key: str = ""
    openrouter_model: str = DEFAULT_MODEL
    openrouter_batch_model: str = DEFAULT_BATCH_MODEL
    openrouter_api_url: str = DEFAULT_API_URL
    openrouter_timeout: int = 60
    vercel_token: str = ""
    vercel_team_slug: str = ""
    deploy_command: str = "npx vercel"
    deploy_timeout: int = 300
    template_dir: str = "."
    workspace_root: str = ""
    accept_candidate_areas: bool = False
    port: int = 8080


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes"}


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings from environment variables with sensible defaults."""
    load_dotenv()

    openrouter_api_key = os.getenv("OPENROUTER_API_KEY", "").strip()
    vercel_token = os.getenv("VERCEL_TOKEN", "").strip()
    template_dir = os.getenv("SITE_TEMPLATE_DIR") or os.getcwd()
    workspace_root = os.getenv("WORKSPACE_ROOT") or tempfile.gettempdir()

    if not openrouter_api_key:
        logger.warning("OPENROUTER_API_KEY is not configured; content will come from the fallback generator only.")
    if not vercel_token:
        logger.warning("VERCEL_TOKEN is not configured; deployments will rely on the CLI's stored login.")

    return Settings(
        openrouter_api_key=openrouter_api_key,
        openrouter_model=os.getenv("OPENROUTER_MODEL") or DEFAULT_MODEL,
        openrouter_batch_model=os.getenv("OPENROUTER_BATCH_MODEL") or DEFAULT_BATCH_MODEL,
        openrouter_api_url=os.getenv("OPENROUTER_API_URL") or DEFAULT_API_URL,
        openrouter_timeout=int(os.getenv("OPENROUTER_TIMEOUT", "60")),
        vercel_token=vercel_token,
        vercel_team_slug=os.getenv("VERCEL_TEAM_SLUG", "").strip(),
        deploy_command=os.getenv("DEPLOY_COMMAND") or "npx vercel",
        deploy_timeout=int(os.getenv("DEPLOY_TIMEOUT", "300")),
        template_dir=template_dir,
        workspace_root=workspace_root,
        accept_candidate_areas=_env_flag("ACCEPT_CANDIDATE_AREAS"),
        port=int(os.getenv("PORT", "8080")),
    )
