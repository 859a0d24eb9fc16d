"""Tests for the docpls MCP tools."""

from __future__ import annotations

import pytest

from docpls.mcp_server import create_docpls_mcp
from docpls.models import DependencyKind, DependencyRecord, Ecosystem, ProjectSnapshot


async def _call(mcp, name, args):
    result = await mcp.call_tool(name, args)
    # (content blocks, structured output) on current mcp releases
    blocks = result[0] if isinstance(result, tuple) else result
    return blocks[0].text


@pytest.fixture
def project(tmp_path, store):
    root = tmp_path / "web"
    root.mkdir()
    snapshot = ProjectSnapshot(
        root=str(root.resolve()),
        ecosystem=Ecosystem.NODE,
        manifest_files=["package.json"],
        lock_files=["package-lock.json"],
        dependencies=[
            DependencyRecord(
                name="react",
                declared_version="^18.2.0",
                resolved_version="18.2.0",
                installed=True,
                has_type_information=True,
                homepage_url="https://react.dev",
                repository_url="https://github.com/facebook/react",
            ).finalized(),
            DependencyRecord(
                name="react-dom",
                declared_version="^18.2.0",
                kind=DependencyKind.PEER,
            ).finalized(),
            DependencyRecord(
                name="jest",
                declared_version="^29.0.0",
                kind=DependencyKind.DEVELOPMENT,
                installed=True,
                install_path=str(root / "node_modules" / "jest"),
            ).finalized(),
        ],
    )
    store.save(snapshot)
    return root


@pytest.fixture
def mcp(store):
    return create_docpls_mcp(store)


# ── list / get ───────────────────────────────────────────────────────────


class TestListAndGet:
    @pytest.mark.anyio
    async def test_list_dependencies(self, mcp, project):
        text = await _call(mcp, "list_dependencies", {"project_path": str(project)})
        assert "Found 3 dependencies" in text
        assert "## Runtime Dependencies (1)" in text
        assert "## Peer Dependencies (1)" in text

    @pytest.mark.anyio
    async def test_list_filtered(self, mcp, project):
        text = await _call(
            mcp, "list_dependencies", {"project_path": str(project), "kind": "development"}
        )
        assert "jest" in text
        assert "react" not in text

    @pytest.mark.anyio
    async def test_list_bad_kind(self, mcp, project):
        text = await _call(mcp, "list_dependencies", {"project_path": str(project), "kind": "optional"})
        assert "Unknown dependency kind 'optional'" in text

    @pytest.mark.anyio
    async def test_unanalyzed_project(self, mcp, tmp_path):
        text = await _call(mcp, "list_dependencies", {"project_path": str(tmp_path / "other")})
        assert "Run 'docpls init" in text

    @pytest.mark.anyio
    async def test_get_dependency(self, mcp, project):
        text = await _call(mcp, "get_dependency", {"dependency_name": "React", "project_path": str(project)})
        assert text.startswith("# react")
        assert "- **Resolved version**: 18.2.0" in text
        assert "- **Installed**: yes" in text

    @pytest.mark.anyio
    async def test_get_dependency_missing(self, mcp, project):
        text = await _call(mcp, "get_dependency", {"dependency_name": "vue", "project_path": str(project)})
        assert text == f"Dependency 'vue' not found in project {project.resolve()}."

    @pytest.mark.anyio
    async def test_project_info(self, mcp, project):
        text = await _call(mcp, "get_project_info", {"project_path": str(project)})
        assert "- **Lock files**: package-lock.json" in text
        assert "- Runtime / development / peer: 1 / 1 / 1" in text


# ── documentation ────────────────────────────────────────────────────────


class TestDocumentation:
    @pytest.mark.anyio
    async def test_links(self, mcp, project):
        text = await _call(mcp, "get_documentation", {"dependency_name": "react", "project_path": str(project)})
        assert "[https://react.dev](https://react.dev)" in text
        assert "## Repository" in text

    @pytest.mark.anyio
    async def test_no_links(self, mcp, project):
        text = await _call(mcp, "get_documentation", {"dependency_name": "jest", "project_path": str(project)})
        assert "No documentation URL is known for 'jest'" in text

    @pytest.mark.anyio
    async def test_update_documentation(self, mcp, project, store):
        text = await _call(
            mcp, "update_documentation", {"dependency_name": "jest", "docs_url": "https://jestjs.io"}
        )
        assert text == "Updated documentation URL for 'jest' in 1 record(s): https://jestjs.io"
        dep = next(d for d in store.get(project).dependencies if d.name == "jest")
        assert dep.documentation_url == "https://jestjs.io"

    @pytest.mark.anyio
    async def test_update_unknown(self, mcp, project):
        text = await _call(mcp, "update_documentation", {"dependency_name": "vue", "docs_url": "https://vuejs.org"})
        assert text == "Dependency 'vue' not found in any analyzed project."


# ── query ────────────────────────────────────────────────────────────────


class TestQuery:
    @pytest.mark.anyio
    async def test_name_search(self, mcp, project):
        text = await _call(mcp, "query", {"query": "react", "project_path": str(project)})
        assert "Found 2 matches." in text

    @pytest.mark.anyio
    async def test_exact_match(self, mcp, project):
        text = await _call(
            mcp, "query", {"query": "react", "project_path": str(project), "exact_match": True}
        )
        assert "Found 1 match." in text
        assert "react-dom" not in text

    @pytest.mark.anyio
    async def test_dependency_type_filter(self, mcp, project):
        text = await _call(
            mcp, "query", {"query": "react", "project_path": str(project), "dependency_type": "peer"}
        )
        assert "## react-dom" in text
        assert "## react (" not in text

    @pytest.mark.anyio
    async def test_keyword_search(self, mcp, project):
        text = await _call(mcp, "query", {"query": "facebook", "type": "keyword", "project_path": str(project)})
        assert "- **Matched**: repository_url = https://github.com/facebook/react" in text

    @pytest.mark.anyio
    async def test_no_matches(self, mcp, project):
        text = await _call(mcp, "query", {"query": "zzz", "project_path": str(project)})
        assert text.startswith('No dependencies found matching "zzz".')

    @pytest.mark.anyio
    async def test_max_results(self, mcp, project):
        text = await _call(mcp, "query", {"query": "e", "project_path": str(project), "max_results": 1})
        assert "Found 1 match." in text
