# src/deploy/local_deployer.py — v1
"""Local filesystem deployer (default backend).

Writes each tool to `<output_dir>/<slug>/index.html`; redeploying a slug
overwrites the previous version.
"""

from __future__ import annotations

import logging
from pathlib import Path

from toolfactory.deploy.base_deployer import BaseDeployer, DeployError
from toolfactory.jobs.models import Job

logger = logging.getLogger(__name__)


class LocalDeployer(BaseDeployer):
    """Deploy tools to a local directory."""

    def __init__(self, output_dir: str | Path) -> None:
        self._base = Path(output_dir).expanduser()

    def _resolve(self, slug: str) -> Path:
        return self._base / slug / "index.html"

    async def deploy(self, job: Job, html: str) -> str:
        if not html.strip():
            raise DeployError(f"Job {job.id} has no artifact to deploy")
        path = self._resolve(job.slug)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(html, encoding="utf-8")
        except OSError as exc:
            raise DeployError(f"Failed to write {path}: {exc}") from exc
        url = path.resolve().as_uri()
        logger.info("Deployed job %s to %s", job.id, url)
        return url
