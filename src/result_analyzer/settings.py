"""
settings.py

- Reads RESULT_ANALYZER_* environment variables (or a .env file) into one
  settings object used by the command line and the loaders.
- pydantic-settings v2.
- Analysis rules (grade scale, thresholds, top-N sizes) are fixed in their
  modules and are not configurable here.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AnalyzerSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="RESULT_ANALYZER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Input / output
    data_dir: Path = Path("data")
    output_dir: Path = Path("output")
    report_basename: str = "result-analysis-report"

    # Credits used for subjects that have no assignment row
    default_credit_weight: float = Field(0.0, ge=0.0)

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_level(cls, v):
        if isinstance(v, str):
            return v.strip().upper()
        return v


def get_settings(**overrides) -> AnalyzerSettings:
    """Fresh settings object; keyword overrides win over the environment"""
    return AnalyzerSettings(**overrides)
