"""
Loading of the per-repository workflow configuration file.

The file is read through the hosting gateway from the target repository's
default branch on every event; nothing is cached. Files ending in ``.yaml``
or ``.yml`` are parsed as YAML, everything else as TOML.
"""

import tomllib
from typing import Any

import yaml
from pydantic import ValidationError

from app.models.pr_event import Repository
from app.models.workflow import WorkflowConfig
from app.services.bitbucket_client import HostingGateway
from app.services.errors import ConfigError, RemoteError
from app.utils.logging import get_logger


logger = get_logger(__name__)

DEFAULT_CONFIG_PATH = "workflow-tasks.toml"

YAML_SUFFIXES = (".yaml", ".yml")


def config_format(path: str) -> str:
    """Return 'YAML' or 'TOML' for a workflow file path."""
    return "YAML" if path.lower().endswith(YAML_SUFFIXES) else "TOML"


def _load_document(text: str, fmt: str) -> Any:
    if fmt == "YAML":
        try:
            return yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ConfigError(f"Error reading YAML: {e}") from e
    try:
        return tomllib.loads(text)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Error reading TOML: {e}") from e


def parse_workflow_config(content: bytes, path: str = DEFAULT_CONFIG_PATH) -> WorkflowConfig:
    """
    Parse raw file content into a WorkflowConfig.

    Args:
        content: Raw file bytes
        path: Repository path of the file; its suffix selects TOML or YAML

    Returns:
        Validated WorkflowConfig

    Raises:
        ConfigError: If the content is not UTF-8, cannot be parsed, or does
            not describe a list of workflow rules
    """
    fmt = config_format(path)

    try:
        text = content.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ConfigError(f"Error reading {fmt}: {e}") from e

    data = _load_document(text, fmt)

    if not isinstance(data, dict):
        raise ConfigError(f"Error reading {fmt}: expected a mapping with a 'workflow' list")

    try:
        return WorkflowConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Error reading {fmt}: {e}") from e


class WorkflowConfigLoader:
    """Fetches and parses the workflow configuration of a repository."""

    def __init__(self, gateway: HostingGateway, config_path: str = DEFAULT_CONFIG_PATH):
        self.gateway = gateway
        self.config_path = config_path

    async def load(self, repository: Repository) -> WorkflowConfig:
        """
        Load the workflow configuration of a repository.

        Raises:
            ConfigError: If the file cannot be fetched or parsed
        """
        try:
            content = await self.gateway.fetch_raw_file(repository, self.config_path)
        except RemoteError as e:
            raise ConfigError(str(e)) from e

        config = parse_workflow_config(content, self.config_path)
        logger.debug(
            f"Loaded {len(config.workflow)} workflow rules from "
            f"{repository.full_name}/{self.config_path}"
        )
        return config
