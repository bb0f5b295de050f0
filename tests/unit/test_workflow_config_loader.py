"""
Unit tests for workflow configuration parsing and loading.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock

from app.models.pr_event import Project, Repository
from app.services.errors import ConfigError, NotFoundError, RemoteError
from app.services.workflow_config_loader import (
    WorkflowConfigLoader,
    config_format,
    parse_workflow_config,
)


VALID_CONFIG = b"""
[[workflow]]
comment = "Please check the following"
tasks = ["Update the changelog", "Add tests"]

  [[workflow.merge]]
  from = "feature/*"
  to = "develop"

  [[workflow.merge]]
  from = "bugfix/*"
  to = "develop"

[[workflow]]
merge = [{ from = "develop", to = "main" }]
comment = "Release checklist"
tasks = []
"""

VALID_YAML_CONFIG = b"""
workflow:
  - merge:
      - {from: "feature/*", to: develop}
    comment: Please check the following
    tasks: [Update the changelog]
"""


@pytest.fixture
def repository():
    return Repository(slug="my-repo", project=Project(key="PROJ"))


class TestParseWorkflowConfig:
    """Test parsing of the workflow file."""

    def test_parse_valid_toml_config(self):
        config = parse_workflow_config(VALID_CONFIG, "workflow-tasks.toml")

        assert len(config.workflow) == 2
        first = config.workflow[0]
        assert [(p.from_pattern, p.to_pattern) for p in first.merge] == [
            ("feature/*", "develop"),
            ("bugfix/*", "develop"),
        ]
        assert first.comment == "Please check the following"
        assert first.tasks == ["Update the changelog", "Add tests"]
        assert config.workflow[1].tasks == []

    def test_toml_is_the_default_format(self):
        config = parse_workflow_config(VALID_CONFIG)

        assert len(config.workflow) == 2

    def test_parse_yaml_config_by_suffix(self):
        config = parse_workflow_config(VALID_YAML_CONFIG, ".bitbucket/workflow-tasks.yml")

        assert config.workflow[0].merge[0].from_pattern == "feature/*"
        assert config.workflow[0].tasks == ["Update the changelog"]

    @pytest.mark.parametrize("path,expected", [
        ("workflow-tasks.toml", "TOML"),
        ("workflow-tasks", "TOML"),
        ("workflow-tasks.yaml", "YAML"),
        ("ci/Workflow.YML", "YAML"),
    ])
    def test_config_format(self, path, expected):
        assert config_format(path) == expected

    def test_tasks_default_to_empty(self):
        config = parse_workflow_config(
            b'[[workflow]]\nmerge = [{ from = "a", to = "b" }]\ncomment = "hi"\n'
        )

        assert config.workflow[0].tasks == []

    @pytest.mark.parametrize("content", [
        b"workflow = [",
        b"",
        b"other = 1\n",
        b'[[workflow]]\ncomment = "no merge"\ntasks = []\n',
        b'[[workflow]]\nmerge = []\ncomment = "empty merge"\n',
        b'[[workflow]]\nmerge = [{ from = "a" }]\ncomment = "missing to"\n',
        b"\xff\xfe\x00",
    ])
    def test_invalid_toml_raises_config_error(self, content):
        with pytest.raises(ConfigError) as exc_info:
            parse_workflow_config(content, "workflow-tasks.toml")

        assert "Error reading TOML" in str(exc_info.value)

    @pytest.mark.parametrize("content", [b"workflow: [", b"- just\n- a list\n"])
    def test_invalid_yaml_raises_config_error(self, content):
        with pytest.raises(ConfigError) as exc_info:
            parse_workflow_config(content, "workflow-tasks.yaml")

        assert "Error reading YAML" in str(exc_info.value)


class TestWorkflowConfigLoader:
    """Test fetching the workflow file through the gateway."""

    @pytest.mark.asyncio
    async def test_load_fetches_default_path(self, repository):
        gateway = MagicMock()
        gateway.fetch_raw_file = AsyncMock(return_value=VALID_CONFIG)
        loader = WorkflowConfigLoader(gateway)

        config = await loader.load(repository)

        gateway.fetch_raw_file.assert_awaited_once_with(repository, "workflow-tasks.toml")
        assert len(config.workflow) == 2

    @pytest.mark.asyncio
    async def test_missing_file_raises_config_error(self, repository):
        gateway = MagicMock()
        gateway.fetch_raw_file = AsyncMock(
            side_effect=NotFoundError("Unexpected status code for reading file: 404", remote_status=404)
        )
        loader = WorkflowConfigLoader(gateway, "workflow-tasks.toml")

        with pytest.raises(ConfigError) as exc_info:
            await loader.load(repository)

        assert "404" in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, RemoteError)
