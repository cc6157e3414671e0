"""
Configuration loader

Settings come from a YAML file (config/settings.yaml by default); a handful of
environment variables override individual values so secrets stay out of the
file.
"""
import logging
import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel

from quizgo.storage import DEFAULT_PREFIX


logger = logging.getLogger(__name__)

DEFAULT_SETTINGS_PATH = "config/settings.yaml"


class DocumentAISettings(BaseModel):
    """Document AI processor used to OCR answer sheets"""
    location: Optional[str] = None
    project_id: Optional[str] = None
    processor_id: Optional[str] = None
    access_token: Optional[str] = None
    timeout: float = 60.0

    @property
    def is_configured(self) -> bool:
        return all([self.location, self.project_id, self.processor_id, self.access_token])

    @property
    def process_url(self) -> str:
        return (
            f"https://{self.location}-documentai.googleapis.com/v1/projects/{self.project_id}"
            f"/locations/{self.location}/processors/{self.processor_id}:process"
        )


class VertexSettings(BaseModel):
    """Gemini model on Vertex AI used to import quiz questions from pasted text"""
    api_key: Optional[str] = None
    model: str = "gemini-2.5-flash-lite"
    temperature: float = 0.2
    max_output_tokens: int = 2048
    timeout: float = 60.0

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    @property
    def generate_url(self) -> str:
        return (
            f"https://aiplatform.googleapis.com/v1/publishers/google/models/{self.model}"
            ":streamGenerateContent"
        )


class Settings(BaseModel):
    data_dir: str = "data"
    blob_prefix: str = DEFAULT_PREFIX
    documentai: DocumentAISettings = DocumentAISettings()
    vertex: VertexSettings = VertexSettings()


def _apply_env_overrides(data: dict) -> dict:
    if os.getenv("QUIZGO_DATA_DIR"):
        data["data_dir"] = os.environ["QUIZGO_DATA_DIR"]
    if os.getenv("QUIZGO_BLOB_PREFIX", "").strip():
        data["blob_prefix"] = os.environ["QUIZGO_BLOB_PREFIX"].strip()

    documentai = dict(data.get("documentai") or {})
    for env_name, key in (
        ("LOCATION", "location"),
        ("PROJECT_ID", "project_id"),
        ("PROCESSOR_ID", "processor_id"),
        ("DOCUMENTAI_ACCESS_TOKEN", "access_token"),
    ):
        if os.getenv(env_name):
            documentai[key] = os.environ[env_name]
    data["documentai"] = documentai

    vertex = dict(data.get("vertex") or {})
    if os.getenv("VERTEX_API_KEY", "").strip():
        vertex["api_key"] = os.environ["VERTEX_API_KEY"].strip()
    data["vertex"] = vertex
    return data


def load_settings(config_path: Optional[str] = None) -> Settings:
    """
    Load settings from YAML, then apply environment overrides

    Args:
        config_path: Path to settings file (default: $QUIZGO_SETTINGS or
                     config/settings.yaml). A missing file means defaults.

    Returns:
        Settings object
    """
    path = Path(config_path or os.getenv("QUIZGO_SETTINGS", DEFAULT_SETTINGS_PATH))

    data = {}
    if path.exists():
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    else:
        logger.warning(f"Settings file not found: {path}, using defaults")

    return Settings(**_apply_env_overrides(data))
