"""Configuration management for uiflow."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal, Self

import yaml
from pydantic import BaseModel, Field, ValidationError
from rich.console import Console

console = Console()

CONFIG_FILE_NAME = "uiflow.yaml"
FALSY = {"0", "false", "no", "off"}


class ConfigLoadingError(Exception):
    """Raised when uiflow.yaml cannot be read or validated."""


class ViewportConfig(BaseModel):
    """Viewport configuration settings."""

    width: int = 1280
    height: int = 720


class BrowserConfig(BaseModel):
    """Browser configuration settings."""

    headless: bool = True
    channel: str | None = None
    viewport: ViewportConfig = Field(default_factory=ViewportConfig)


class TimeoutConfig(BaseModel):
    """Timeouts in seconds."""

    case: float = Field(default=45.0, gt=0)
    expect: float = Field(default=5.0, gt=0)
    action: float = Field(default=15.0, gt=0)
    navigation: float = Field(default=30.0, gt=0)
    hydration: float = Field(default=15.0, gt=0)


class HydrationConfig(BaseModel):
    """Signals that tell the verifier client-side scripts have settled."""

    loading_text: str | None = "Loading..."
    ready_selector: str | None = None
    wait_until: Literal["commit", "domcontentloaded", "load", "networkidle"] = "load"


class AuthConfig(BaseModel):
    """Credential fixture and registration form settings."""

    username_prefix: str = "e2e"
    password: str = "testpassword123"
    email_domain: str = "test.local"
    email_selector: str | None = "#email"
    nav_selector: str = "nav"
    content_selector: str = "main"


class RunConfig(BaseModel):
    """Suite runner settings."""

    workers: int = Field(default=4, ge=1)
    retries: int = Field(default=0, ge=0)


class ProjectConfig(BaseModel):
    """Project configuration settings."""

    name: str = "my-project"
    base_url: str = "http://localhost:4321"
    artifacts_dir: str | None = None


class UiFlowConfig(BaseModel):
    """Main uiflow configuration."""

    project: ProjectConfig = Field(default_factory=ProjectConfig)
    browser: BrowserConfig = Field(default_factory=BrowserConfig)
    timeouts: TimeoutConfig = Field(default_factory=TimeoutConfig)
    hydration: HydrationConfig = Field(default_factory=HydrationConfig)
    auth: AuthConfig = Field(default_factory=AuthConfig)
    run: RunConfig = Field(default_factory=RunConfig)
    verbose: bool = False

    @classmethod
    def get_config_path(cls) -> Path:
        """Get the path to the configuration file."""
        return Path.cwd() / CONFIG_FILE_NAME

    @classmethod
    def load_config(cls, path: Path | None = None, *, required: bool = False) -> Self:
        """Load configuration from uiflow.yaml, then apply environment overrides."""
        config_path = path or cls.get_config_path()

        if not config_path.exists():
            if required:
                raise ConfigLoadingError(f"No {config_path.name} found at {config_path}")
            console.print(f"[yellow]Warning:[/yellow] No {CONFIG_FILE_NAME} found. Using default configuration.")
            console.print("Run [bold]uiflow init[/bold] to create a configuration file.")
            config = cls()
        else:
            try:
                with open(config_path, encoding="utf-8") as f:
                    config_data = yaml.safe_load(f) or {}
                if not isinstance(config_data, dict):
                    raise TypeError(f"{config_path.name} must contain a mapping, got {type(config_data).__name__}")
                config = cls(**config_data)
            except (OSError, yaml.YAMLError, ValidationError, TypeError) as e:
                raise ConfigLoadingError(f"{e.__class__.__name__} loading {config_path}: {e}") from e

        return config.with_env_overrides()

    def with_env_overrides(self) -> Self:
        """Apply UIFLOW_BASE_URL and UIFLOW_HEADLESS."""
        config = self.model_copy(deep=True)
        if base_url := os.environ.get("UIFLOW_BASE_URL"):
            config.project.base_url = base_url
        if (headless := os.environ.get("UIFLOW_HEADLESS")) is not None:
            config.browser.headless = headless.strip().lower() not in FALSY
        return config

    def save(self, path: Path | None = None) -> Path:
        """Save configuration to uiflow.yaml."""
        config_path = path or self.get_config_path()

        try:
            with open(config_path, "w", encoding="utf-8") as f:
                yaml.safe_dump(self.model_dump(mode="json"), f, sort_keys=False)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigLoadingError(f"Error saving configuration to {config_path}: {e}") from e

        console.print(f"[green]Configuration saved to {config_path}[/green]")
        return config_path
