"""
Integration tests: catalog -> registry -> executor -> HTTP

High gear tests. A business-domain provider is loaded through
TOOL_GATEWAY_TOOL_PROVIDERS, the mode comes from the environment, and the
real singletons are used end to end.
"""

from datetime import date
from typing import Optional

import pytest
from fastapi import status
from fastapi.testclient import TestClient
from pydantic import BaseModel, ConfigDict, Field

from tool_gateway.core.exceptions import ToolForbiddenError
from tool_gateway.main import create_app
from tool_gateway.models.domain import (
    ExecutionContext,
    ToolDefinition,
    ToolMutability,
    UserRole,
)
from tool_gateway.tools.catalog import ToolProvider
from tool_gateway.tools.registry import get_tool_registry

pytestmark = pytest.mark.integration

ADMIN_HEADERS = {"X-User-Id": "admin-1", "X-Company-Id": "acme", "X-User-Role": "admin"}

USERS = [
    {"id": "u-1", "email": "ana@acme.test", "passwordHash": "$2b$10$x", "role": "staff"},
    {"id": "u-2", "email": "luis@acme.test", "passwordHash": "$2b$10$y", "role": "tenant"},
]
CREATED_VISITS: list[dict] = []


class ListUsersArgs(BaseModel):
    model_config = ConfigDict(extra="forbid")

    role: Optional[str] = Field(default=None, description="Only users with this role")
    limit: int = Field(default=20, ge=1, le=100)


class CreateVisitArgs(BaseModel):
    model_config = ConfigDict(extra="forbid")

    property_id: str = Field(..., alias="propertyId")
    visit_date: date = Field(..., alias="visitDate")
    notes: Optional[str] = None


async def list_users(args: ListUsersArgs, context: ExecutionContext) -> list[dict]:
    users = [u for u in USERS if args.role is None or u["role"] == args.role]
    return users[: args.limit]


def create_visit(args: CreateVisitArgs, context: ExecutionContext) -> dict:
    visit = {
        "propertyId": args.property_id,
        "visitDate": args.visit_date.isoformat(),
        "createdBy": context.user_id,
    }
    CREATED_VISITS.append(visit)
    return visit


class BackofficeToolProvider(ToolProvider):
    def contribute_tools(self) -> list[ToolDefinition]:
        return [
            ToolDefinition(
                name="get_users",
                description="Equivalent to GET /users",
                mutability=ToolMutability.READONLY,
                allowed_roles={UserRole.ADMIN},
                parameters=ListUsersArgs,
                execute=list_users,
            ),
            ToolDefinition(
                name="post_visits",
                description="Equivalent to POST /visits",
                mutability=ToolMutability.MUTABLE,
                allowed_roles={UserRole.ADMIN, UserRole.STAFF},
                parameters=CreateVisitArgs,
                execute=create_visit,
            ),
        ]


@pytest.fixture(autouse=True)
def backoffice_provider(monkeypatch):
    from tool_gateway.core.config import get_settings

    monkeypatch.setenv("TOOL_GATEWAY_TOOL_PROVIDERS", f'["{__name__}:BackofficeToolProvider"]')
    get_settings.cache_clear()
    CREATED_VISITS.clear()
    yield


@pytest.fixture
def client():
    with TestClient(create_app()) as test_client:
        yield test_client


class TestFullModeFlow:
    def test_execute_strips_password_hash(self, monkeypatch, client):
        monkeypatch.setenv("AI_TOOLS_MODE", "FULL")

        response = client.post(
            "/v1/ai/tools/execute",
            json={"name": "get_users", "arguments": {"role": None, "limit": None}},
            headers=ADMIN_HEADERS,
        )

        assert response.status_code == status.HTTP_200_OK
        result = response.json()["result"]
        assert [u["id"] for u in result] == ["u-1", "u-2"]
        assert all("passwordHash" not in u for u in result)

    def test_mutable_tool_with_aliases(self, monkeypatch, client):
        monkeypatch.setenv("AI_TOOLS_MODE", "full")

        response = client.post(
            "/v1/ai/tools/execute",
            json={
                "name": "post_visits",
                "arguments": {"propertyId": "p-9", "visitDate": "2026-11-02", "notes": None},
            },
            headers=ADMIN_HEADERS,
        )

        assert response.status_code == status.HTTP_200_OK
        assert CREATED_VISITS == [
            {"propertyId": "p-9", "visitDate": "2026-11-02", "createdBy": "admin-1"}
        ]

    def test_manifest_uses_alias_names_and_dates(self, client):
        tools = client.get("/v1/ai/tools/openai", headers=ADMIN_HEADERS).json()
        by_name = {t["function"]["name"]: t["function"]["parameters"] for t in tools}

        visit = by_name["post_visits"]
        assert visit["required"] == ["propertyId", "visitDate", "notes"]
        assert visit["properties"]["visitDate"] == {
            "type": "string",
            "minLength": 1,
            "format": "date",
        }
        assert by_name["get_users"]["properties"]["role"]["description"] == (
            "Only users with this role"
        )


class TestModeSwitching:
    def test_readonly_blocks_mutable_without_side_effects(self, monkeypatch, client):
        monkeypatch.setenv("AI_TOOLS_MODE", "READONLY")

        response = client.post(
            "/v1/ai/tools/execute",
            json={
                "name": "post_visits",
                "arguments": {"propertyId": "p-9", "visitDate": "2026-11-02"},
            },
            headers=ADMIN_HEADERS,
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert CREATED_VISITS == []

    def test_unset_mode_rejects_everything(self, client):
        response = client.post(
            "/v1/ai/tools/execute",
            json={"name": "get_health"},
            headers=ADMIN_HEADERS,
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_listing_reflects_live_mode(self, monkeypatch, client):
        monkeypatch.setenv("AI_TOOLS_MODE", "READONLY")
        first = client.get("/v1/ai/tools").json()

        monkeypatch.setenv("AI_TOOLS_MODE", "FULL")
        second = client.get("/v1/ai/tools").json()

        assert first["mode"] == "READONLY"
        assert second["mode"] == "FULL"
        assert {t["name"]: t["enabled"] for t in first["tools"]}["post_visits"] is False
        assert {t["name"]: t["enabled"] for t in second["tools"]}["post_visits"] is True


class TestManifestInvocationLoop:
    @pytest.mark.asyncio
    async def test_llm_style_call_through_manifest(self, monkeypatch):
        """Simulates the chat loop: pick a manifest entry, pass the provider's JSON string."""
        monkeypatch.setenv("AI_TOOLS_MODE", "FULL")
        context = ExecutionContext(user_id="staff-1", company_id="acme", role=UserRole.STAFF)

        manifest = {entry.name: entry for entry in get_tool_registry().build_manifest(context)}

        visit = await manifest["post_visits"].invoke(
            '{"propertyId": "p-1", "visitDate": "2026-12-01", "notes": null}'
        )
        assert visit["createdBy"] == "staff-1"

        with pytest.raises(ToolForbiddenError):
            await manifest["get_users"].invoke("{}")
