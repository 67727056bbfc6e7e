"""Integration check helpers."""

from .checks import (
    IntegrationCheckResult,
    check_identity,
    check_perception,
    run_all_checks,
)

__all__ = [
    "IntegrationCheckResult",
    "check_identity",
    "check_perception",
    "run_all_checks",
]
