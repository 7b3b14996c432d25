"""System health checks executed on startup."""

from __future__ import annotations

from chemical_inventory.system_checks.runner import CheckResult, default_checks, run_checks

__all__ = ["CheckResult", "default_checks", "run_checks"]
