"""
System Tools - service-level tools available in every deployment

These tools do not touch business data. They let an LLM (or an operator)
check that the gateway is reachable and confirm what the caller is allowed
to do:
- get_root / get_health: liveness.
- get_auth_profile: the caller's own execution context.
- get_test_*: role probes, one per role combination the backend guards.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict

from tool_gateway.models.domain import (
    ALL_ROLES,
    ExecutionContext,
    ToolDefinition,
    ToolMutability,
    UserRole,
)
from tool_gateway.tools.catalog import ToolProvider


class NoArguments(BaseModel):
    """Arguments of a tool that takes none."""

    model_config = ConfigDict(extra="forbid")


async def get_root(args: NoArguments, context: ExecutionContext) -> dict[str, Any]:
    return {"message": "Hello World!"}


async def get_health(args: NoArguments, context: ExecutionContext) -> dict[str, Any]:
    return {"status": "ok", "source": "ai-tool"}


async def get_auth_profile(
    args: NoArguments, context: ExecutionContext
) -> dict[str, Any]:
    return {
        "id": context.user_id,
        "role": context.role.value,
        "companyId": context.company_id,
    }


def _role_probe(message: str):
    async def probe(args: NoArguments, context: ExecutionContext) -> dict[str, Any]:
        return {"message": message}

    return probe


_ROLE_PROBES: list[tuple[str, str, frozenset[UserRole], str]] = [
    (
        "get_test_admin_only",
        "/test/admin-only",
        frozenset({UserRole.ADMIN}),
        "This endpoint is only accessible by admins",
    ),
    (
        "get_test_owner_only",
        "/test/owner-only",
        frozenset({UserRole.OWNER}),
        "This endpoint is only accessible by owners",
    ),
    (
        "get_test_tenant_only",
        "/test/tenant-only",
        frozenset({UserRole.TENANT}),
        "This endpoint is only accessible by tenants",
    ),
    (
        "get_test_admin_or_owner",
        "/test/admin-or-owner",
        frozenset({UserRole.ADMIN, UserRole.OWNER}),
        "This endpoint is accessible by admins or owners",
    ),
]


class SystemToolProvider(ToolProvider):
    """Contributes the service-level tools."""

    def contribute_tools(self) -> list[ToolDefinition]:
        tools = [
            ToolDefinition(
                name="get_root",
                description="Equivalent to GET /",
                mutability=ToolMutability.READONLY,
                allowed_roles=ALL_ROLES,
                parameters=NoArguments,
                execute=get_root,
            ),
            ToolDefinition(
                name="get_health",
                description="Equivalent to GET /health",
                mutability=ToolMutability.READONLY,
                allowed_roles=ALL_ROLES,
                parameters=NoArguments,
                execute=get_health,
            ),
            ToolDefinition(
                name="get_auth_profile",
                description="Equivalent to GET /auth/profile. Returns the caller's identity",
                mutability=ToolMutability.READONLY,
                allowed_roles=ALL_ROLES,
                parameters=NoArguments,
                execute=get_auth_profile,
            ),
        ]
        for name, path, roles, message in _ROLE_PROBES:
            tools.append(
                ToolDefinition(
                    name=name,
                    description=f"Equivalent to GET {path}",
                    mutability=ToolMutability.READONLY,
                    allowed_roles=roles,
                    parameters=NoArguments,
                    execute=_role_probe(message),
                )
            )
        return tools
