"""
Tests for scripts/export_tool_manifest.py.
"""

import importlib.util
from pathlib import Path

import pytest

SCRIPT_PATH = Path(__file__).parent.parent.parent / "scripts" / "export_tool_manifest.py"


@pytest.fixture
def export_module():
    spec = importlib.util.spec_from_file_location("export_tool_manifest", SCRIPT_PATH)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


class TestExportManifest:
    def test_openai_format(self, export_module):
        tools = export_module.export_manifest("admin", None, "openai")

        assert tools[0]["type"] == "function"
        assert tools[0]["function"]["name"] == "get_root"

    def test_anthropic_format(self, export_module):
        tools = export_module.export_manifest("tenant", "salud", "anthropic")

        names = [tool["name"] for tool in tools]
        assert "get_health" in names
        assert all("input_schema" in tool for tool in tools)

    def test_unknown_role_rejected(self, export_module):
        with pytest.raises(ValueError):
            export_module.export_manifest("superuser", None, "openai")
