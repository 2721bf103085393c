# tests/unit/deploy/test_unit_local_deployer.py — v1
"""Tests for deploy/local_deployer.py."""

from __future__ import annotations

import pytest

from toolfactory.deploy.base_deployer import DeployError
from toolfactory.deploy.local_deployer import LocalDeployer
from toolfactory.jobs.models import Job

HTML = "<!DOCTYPE html><html><body>tool</body></html>"


def _job(slug: str = "cash-tool") -> Job:
    return Job(slug=slug, source_content="c")


class TestLocalDeployer:
    @pytest.mark.asyncio
    async def test_writes_index(self, tmp_path):
        url = await LocalDeployer(tmp_path).deploy(_job(), HTML)
        path = tmp_path / "cash-tool" / "index.html"
        assert path.read_text(encoding="utf-8") == HTML
        assert url == path.resolve().as_uri()

    @pytest.mark.asyncio
    async def test_redeploy_overwrites(self, tmp_path):
        deployer = LocalDeployer(tmp_path)
        await deployer.deploy(_job(), HTML)
        await deployer.deploy(_job(), "<html>v2</html>")
        assert (tmp_path / "cash-tool" / "index.html").read_text(encoding="utf-8") == "<html>v2</html>"

    @pytest.mark.asyncio
    async def test_empty_html_rejected(self, tmp_path):
        with pytest.raises(DeployError):
            await LocalDeployer(tmp_path).deploy(_job(), "  ")
        assert not (tmp_path / "cash-tool").exists()

    @pytest.mark.asyncio
    async def test_write_failure_is_deploy_error(self, tmp_path):
        blocker = tmp_path / "blocked"
        blocker.write_text("not a directory", encoding="utf-8")
        with pytest.raises(DeployError, match="Failed to write"):
            await LocalDeployer(blocker).deploy(_job(), HTML)
