"""Observability module for CampaignTree.

Provides structured logging (structlog, rendered through Rich on the console
and as JSONL in the campaign's log directory).
"""

from campaigntree.observability.logging import (
    close_file_logging,
    configure_logging,
    get_logger,
    get_logs_dir,
)

__all__ = [
    "close_file_logging",
    "configure_logging",
    "get_logger",
    "get_logs_dir",
]
