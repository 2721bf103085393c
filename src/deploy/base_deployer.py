# src/deploy/base_deployer.py — v1
"""Abstract deployer interface."""

from __future__ import annotations

from abc import ABC, abstractmethod

from toolfactory.jobs.models import Job


class DeployError(Exception):
    """Publishing an approved artifact failed."""


class BaseDeployer(ABC):
    """Publishes an approved tool and returns where it lives."""

    @abstractmethod
    async def deploy(self, job: Job, html: str) -> str:
        """Publish `html` for `job`.

        Returns:
            Public URL (or URI) of the deployed tool.

        Raises:
            DeployError: If publishing failed.
        """
