"""Configuration loader for the document structure normalizer."""

import os
from pathlib import Path

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field


class AppInfo(BaseModel):
    """Application metadata."""

    name: str = "docstruct"
    version: str = "0.1.0"


class SegmentationConfig(BaseModel):
    """Segmenter configuration."""

    seconds_per_word: float = Field(default=0.25, gt=0)
    id_prefix: str = "ch"


class ValidationConfig(BaseModel):
    """Thresholds and score weights for the structure validator."""

    min_chapter_words: int = 50
    min_sentence_words: int = 2
    max_sentence_words: int = 60
    min_paragraph_confidence: float = 0.5
    low_confidence_threshold: float = 0.5
    medium_confidence_threshold: float = 0.7
    min_chapter_length_multiplier: float = 0.2
    max_chapter_length_multiplier: float = 3.0
    max_warnings: int = 20
    min_confidence: float = 0.7
    single_chapter_word_threshold: int = 5000
    max_chapter_count: int = 200
    strict: bool = False

    chapter_error_weight: float = 0.5
    chapter_warning_weight: float = 0.05
    paragraph_error_weight: float = 0.2
    paragraph_warning_weight: float = 0.02
    sentence_error_weight: float = 0.1
    sentence_warning_weight: float = 0.01
    coherence_error_weight: float = 0.4
    coherence_warning_weight: float = 0.1


class LoggingConfig(BaseModel):
    """Logging configuration for the command-line entry point."""

    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class AppConfig(BaseModel):
    """Root application configuration."""

    app: AppInfo = Field(default_factory=AppInfo)
    segmentation: SegmentationConfig = Field(default_factory=SegmentationConfig)
    validation: ValidationConfig = Field(default_factory=ValidationConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def load_config(config_path: str | Path = "config.yaml") -> AppConfig:
    """Load configuration from YAML file and environment variables.

    Args:
        config_path: Path to the YAML configuration file.

    Returns:
        Fully populated AppConfig instance.
    """
    load_dotenv()

    yaml_data: dict = {}
    config_file = Path(config_path)
    if config_file.exists():
        with open(config_file) as f:
            yaml_data = yaml.safe_load(f) or {}

    config = AppConfig(**yaml_data)

    # Environment overrides the YAML log level
    log_level = os.getenv("DOCSTRUCT_LOG_LEVEL")
    if log_level:
        config.logging.level = log_level.upper()

    return config
