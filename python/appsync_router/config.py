"""Router configuration.

Configuration can be given in code, or loaded from a YAML file. The file is
located with this priority:

1. APPSYNC_ROUTER_CONFIG environment variable (explicit override)
2. appsync-router.yaml or appsync-router.yml in the current directory

APPSYNC_ROUTER_BASEDIR overrides ``base_dir`` wherever the config came from.

Example YAML:

    name: blog-api
    base_dir: infra/blog
    xray_enabled: true
    authorization_config:
      default_authorization:
        authorization_type: API_KEY
    bundling:
      exclude_source_map: true
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, ValidationError

from .exceptions import ConfigurationError
from .logging import log_debug, log_warn
from .types import BundlingOptions

CONFIG_FILE_NAMES = ("appsync-router.yaml", "appsync-router.yml")


class RouterConfig(BaseModel):
    """Configuration of an AppsyncApiRouter.

    Example:
        >>> config = RouterConfig(base_dir=Path("infra/blog"), xray_enabled=True)
        >>> config.resolvers_path
        PosixPath('infra/blog/resolvers')
    """

    name: str | None = Field(
        default=None,
        description="Name of the GraphQL API. Defaults to the router id.",
    )
    base_dir: Path | None = Field(
        default=None,
        description="Directory holding schema.graphql and resolvers/. "
        "Inferred from the constructing file when omitted.",
    )
    resolvers_dir: str = Field(default="resolvers", description="Resolver folder under base_dir.")
    functions_dir: str = Field(default="functions", description="Function folder under base_dir.")
    schema_file: str = Field(default="schema.graphql", description="Schema file under base_dir.")
    bundling: BundlingOptions = Field(default_factory=BundlingOptions)
    xray_enabled: bool = False
    visibility: Literal["GLOBAL", "PRIVATE"] = "GLOBAL"
    introspection: Literal["ENABLED", "DISABLED"] = "ENABLED"
    authorization_config: dict[str, Any] | None = Field(
        default=None,
        description="Authorization modes of the API. The deployment default (API key) applies "
        "when omitted.",
    )
    log_config: dict[str, Any] | None = Field(
        default=None,
        description="Request logging of the API (field log level, role).",
    )
    domain_name: dict[str, Any] | None = Field(
        default=None,
        description="Custom domain of the API (domain name, certificate).",
    )
    log_level: str | None = Field(
        default=None,
        pattern="^(trace|debug|info|warn|error)$",
        description="Level of the appsync_router logger (trace, debug, info, warn, error).",
    )

    model_config = {"extra": "forbid"}

    @property
    def resolvers_path(self) -> Path | None:
        return self.base_dir / self.resolvers_dir if self.base_dir else None

    @property
    def functions_path(self) -> Path | None:
        return self.base_dir / self.functions_dir if self.base_dir else None

    @property
    def schema_path(self) -> Path | None:
        return self.base_dir / self.schema_file if self.base_dir else None


def find_config_file() -> Path | None:
    """Locate the router configuration file.

    Returns:
        Path to the file, or None if not found.
    """
    env_path = os.environ.get("APPSYNC_ROUTER_CONFIG")
    if env_path:
        path = Path(env_path)
        if path.is_file():
            log_debug(f"Using APPSYNC_ROUTER_CONFIG: {path}")
            return path
        log_warn(f"APPSYNC_ROUTER_CONFIG does not exist: {env_path}")

    for name in CONFIG_FILE_NAMES:
        path = Path.cwd() / name
        if path.is_file():
            log_debug(f"Using config file: {path}")
            return path

    log_debug("No router configuration file found")
    return None


def load_router_config(path: Path | str | None = None) -> RouterConfig:
    """Load a RouterConfig from YAML.

    Relative ``base_dir`` values are resolved against the config file's
    directory. Without a path, find_config_file() is used; when no file is
    found the defaults apply.

    Raises:
        ConfigurationError: If the file cannot be read or is invalid.
    """
    config_path = Path(path) if path is not None else find_config_file()

    data: dict = {}
    if config_path is not None:
        try:
            with config_path.open() as f:
                loaded = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(
                f"Failed to read router config {config_path}: {e}",
                metadata={"path": str(config_path)},
            ) from e

        if loaded is None:
            loaded = {}
        if not isinstance(loaded, dict):
            raise ConfigurationError(
                f"Router config {config_path} must be a mapping",
                metadata={"path": str(config_path)},
            )
        data = loaded

        base_dir = data.get("base_dir")
        if base_dir is not None and not Path(base_dir).is_absolute():
            data["base_dir"] = config_path.parent / base_dir

    env_base_dir = os.environ.get("APPSYNC_ROUTER_BASEDIR")
    if env_base_dir:
        data["base_dir"] = Path(env_base_dir)

    try:
        return RouterConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(
            f"Invalid router config: {e}",
            metadata={"path": str(config_path) if config_path else None},
        ) from e


__all__ = ["RouterConfig", "find_config_file", "load_router_config"]
