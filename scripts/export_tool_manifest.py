#!/usr/bin/env python3
"""
Export Tool Manifest

Prints the tool manifest the gateway would offer an LLM for a given caller
and prompt, in OpenAI or Anthropic format. Useful for checking how a tool's
parameter type translates before shipping it.

Usage:
    python scripts/export_tool_manifest.py --role admin --prompt "ver propiedades"
    python scripts/export_tool_manifest.py --format anthropic --output manifest.json

Providers are taken from TOOL_GATEWAY_TOOL_PROVIDERS, as in the service.
"""

import argparse
import json
import sys
from pathlib import Path

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from tool_gateway.models.domain import ExecutionContext, UserRole  # noqa: E402
from tool_gateway.tools.registry import get_tool_registry  # noqa: E402


def export_manifest(role: str, prompt: str | None, fmt: str) -> list[dict]:
    """
    Build the manifest for a synthetic caller.

    Args:
        role: Caller role (admin, owner, staff, tenant).
        prompt: Optional prompt hint used for ranking.
        fmt: "openai" or "anthropic".
    """
    context = ExecutionContext(user_id="manifest-export", role=UserRole(role))
    registry = get_tool_registry()
    if fmt == "anthropic":
        return registry.anthropic_tools(context, prompt)
    return registry.openai_tools(context, prompt)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Export the LLM tool manifest")
    parser.add_argument(
        "--role",
        default=UserRole.ADMIN.value,
        choices=[role.value for role in UserRole],
        help="Caller role",
    )
    parser.add_argument("--prompt", default=None, help="Prompt hint for ranking")
    parser.add_argument(
        "--format",
        dest="fmt",
        default="openai",
        choices=["openai", "anthropic"],
        help="Provider wire format",
    )
    parser.add_argument("--output", default=None, help="Write to file instead of stdout")

    args = parser.parse_args()
    tools = export_manifest(args.role, args.prompt, args.fmt)
    payload = json.dumps(tools, indent=2, ensure_ascii=False)

    if args.output:
        Path(args.output).write_text(payload + "\n", encoding="utf-8")
        print(f"Exported {len(tools)} tools to {args.output}")
    else:
        print(payload)
