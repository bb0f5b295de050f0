"""
Utility modules for the Bitbucket Task Bot.
"""

from app.utils.logging import (
    get_logger,
    setup_logging,
    log_pr_event,
    log_state_transition,
    log_api_call,
    log_error_with_context,
)

__all__ = [
    "get_logger",
    "setup_logging",
    "log_pr_event",
    "log_state_transition",
    "log_api_call",
    "log_error_with_context",
]
