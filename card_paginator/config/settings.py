from typing import Optional, Dict, Any
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator
import yaml
from pathlib import Path

# Define the root directory of the card_paginator package
SERVICE_ROOT_DIR = Path(__file__).parent.parent.resolve()
DEFAULT_CONFIG_PATH = SERVICE_ROOT_DIR / "config" / "app_config.yaml"
# Path to the repository root (one level up from the package)
PROJECT_ROOT_DIR = SERVICE_ROOT_DIR.parent

class Settings(BaseSettings):
    # Application settings
    APP_NAME: str = "CardPaginator"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False

    # Height budgets in CSS pixels, measured on the rendered element
    MAX_MAIN_CONTENT_HEIGHT: float = Field(default=800, gt=0)
    MAX_COMMENTS_PAGE_HEIGHT: float = Field(default=880, gt=0)
    MAX_SINGLE_COMMENT_HEIGHT: float = Field(default=850, gt=0)

    # Count caps
    MAX_COMMENTS_PER_PAGE: int = Field(default=3, gt=0)
    MAX_COMMENTS_CONSIDERED: int = Field(default=12, gt=0)

    # Templates and the elements measured inside them
    MAIN_TEMPLATE_NAME: str = "main-card"
    COMMENT_TEMPLATE_NAME: str = "comment-card"
    MAIN_CONTENT_SELECTOR: str = ".main-content"
    COMMENTS_SECTION_SELECTOR: str = ".comments-section"

    # Paragraph re-chunking for long texts with few paragraphs
    LONG_TEXT_THRESHOLD: int = Field(default=500, gt=0)
    LONG_PARAGRAPH_THRESHOLD: int = Field(default=200, gt=0)
    SENTENCE_PACK_LIMIT: int = Field(default=150, gt=0)

    # Measurement browser
    VIEWPORT_WIDTH: int = Field(default=900, gt=0)
    VIEWPORT_HEIGHT: int = Field(default=1200, gt=0)
    STYLESHEET_PATH: Optional[Path] = None
    BROWSER_HEADLESS: bool = True

    # Logging configuration path (can be overridden by env var)
    LOGGING_CONFIG_PATH: str = str(SERVICE_ROOT_DIR / "config" / "logging_config.yaml")

    @field_validator("STYLESHEET_PATH", mode='before')
    @classmethod
    def empty_stylesheet_is_none(cls, v: Any) -> Any:
        # An empty env var (STYLESHEET_PATH=) means "no stylesheet"
        if isinstance(v, str) and not v.strip():
            return None
        return v

    model_config = SettingsConfigDict(
        env_file= str(PROJECT_ROOT_DIR / ".env"),  # Load variables from project root .env
        env_file_encoding='utf-8',
        extra='ignore' # Ignore extra fields from env or yaml
    )

    @classmethod
    def load_from_yaml(cls, config_path: Path = DEFAULT_CONFIG_PATH) -> 'Settings':
        """
        Build settings from an optional YAML file.

        Keys in the YAML file are passed as init values, so they win over class
        defaults and .env entries. A missing or empty file yields plain defaults.
        """
        initial_data: Dict[str, Any] = {}
        config_path = Path(config_path)
        if config_path.exists():
            with open(config_path, 'r', encoding='utf-8') as f:
                yaml_config = yaml.safe_load(f)
            if yaml_config:
                initial_data.update({key.upper(): value for key, value in yaml_config.items()})
        return cls(**initial_data)

# Instantiate settings
settings = Settings.load_from_yaml()
