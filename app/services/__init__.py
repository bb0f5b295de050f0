"""Business logic services package."""

from app.services.errors import (
    WorkflowBotError,
    DecodeError,
    AddressingError,
    ConfigError,
    RemoteError,
    NotFoundError,
)
from app.services.pattern_matcher import PatternMatcher, InvalidPatternError
from app.services.workflow_selector import WorkflowSelector, normalize_branch
from app.services.bitbucket_client import BitbucketClient, HostingGateway
from app.services.workflow_config_loader import WorkflowConfigLoader, parse_workflow_config
from app.services.workflow_executor import WorkflowExecutor, derive_base_url

__all__ = [
    'WorkflowBotError',
    'DecodeError',
    'AddressingError',
    'ConfigError',
    'RemoteError',
    'NotFoundError',
    'PatternMatcher',
    'InvalidPatternError',
    'WorkflowSelector',
    'normalize_branch',
    'BitbucketClient',
    'HostingGateway',
    'WorkflowConfigLoader',
    'parse_workflow_config',
    'WorkflowExecutor',
    'derive_base_url',
]
