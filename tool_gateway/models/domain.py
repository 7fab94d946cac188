"""
Domain Models - Tool Definitions and Execution Context

This module contains the domain models shared by the catalog, the schema
translator, the manifest registry and the executor.

Pattern: Domain models as value objects (Percival & Gregory pp. 59-65)
Pattern: Pydantic for validation at API boundaries (Sinha pp. 193-195)

Note: These models are distinct from the HTTP request/response models in
tools.py. A ToolDefinition carries a live callable and a Python type, so it
never crosses the API boundary as-is.
"""

from enum import Enum
from functools import cached_property
from typing import Any, Callable, Optional

from pydantic import BaseModel, Field, TypeAdapter, field_validator


# =============================================================================
# Enumerations
# =============================================================================


class UserRole(str, Enum):
    """Roles issued by the authentication layer."""

    ADMIN = "admin"
    OWNER = "owner"
    STAFF = "staff"
    TENANT = "tenant"


ALL_ROLES: frozenset[UserRole] = frozenset(UserRole)


class ToolMutability(str, Enum):
    """Whether a tool may change persisted state."""

    READONLY = "readonly"
    MUTABLE = "mutable"


class ToolsMode(str, Enum):
    """
    Process-wide switch controlling which tools may run.

    - NONE: every call is rejected.
    - READONLY: only readonly tools may run.
    - FULL: no mode restriction.
    """

    NONE = "NONE"
    READONLY = "READONLY"
    FULL = "FULL"

    @classmethod
    def parse(cls, raw: Optional[str]) -> "ToolsMode":
        """
        Parse a raw configuration value.

        Matching is case-insensitive and ignores surrounding whitespace.
        Anything unset or unrecognised maps to NONE.

        Example:
            >>> ToolsMode.parse(" readonly ")
            <ToolsMode.READONLY: 'READONLY'>
            >>> ToolsMode.parse("yes please")
            <ToolsMode.NONE: 'NONE'>
        """
        if not raw:
            return cls.NONE
        try:
            return cls(raw.strip().upper())
        except ValueError:
            return cls.NONE

    def allows(self, mutability: ToolMutability) -> bool:
        """Return True if a tool of the given mutability may run in this mode."""
        if self is ToolsMode.FULL:
            return True
        if self is ToolsMode.READONLY:
            return mutability is ToolMutability.READONLY
        return False


# =============================================================================
# ExecutionContext Model
# =============================================================================


class ExecutionContext(BaseModel):
    """
    Identity of the caller for a single tool call.

    An empty user_id is accepted here; the executor rejects it. The context
    is never persisted.

    Attributes:
        user_id: Authenticated user id.
        company_id: Tenant company, when the user belongs to one.
        role: Role of the user.
    """

    user_id: str = Field(default="", description="Authenticated user id")
    company_id: Optional[str] = Field(default=None, description="User's company")
    role: UserRole = Field(..., description="User role")

    model_config = {"frozen": True}

    @property
    def has_user(self) -> bool:
        return bool(self.user_id and self.user_id.strip())


# =============================================================================
# ToolDefinition Model
# =============================================================================


class ToolDefinition(BaseModel):
    """
    A callable business operation exposed to the LLM.

    Pattern: Tool inventory with callable handlers
    Pattern: Value object (immutable after construction)

    Attributes:
        name: Unique tool identifier, stable for the process lifetime.
        description: Human/LLM-facing summary.
        mutability: readonly or mutable.
        allowed_roles: Non-empty set of roles permitted to invoke the tool.
        parameters: Python type describing the arguments, usually a
            BaseModel subclass. Anything TypeAdapter accepts is allowed.
        execute: Business operation called as execute(args, context).
            May be sync or async.

    Example:
        >>> class Args(BaseModel):
        ...     property_id: str
        ...
        >>> tool = ToolDefinition(
        ...     name="get_property",
        ...     description="Fetch one property",
        ...     mutability=ToolMutability.READONLY,
        ...     allowed_roles={UserRole.ADMIN},
        ...     parameters=Args,
        ...     execute=fetch_property,
        ... )
    """

    name: str = Field(..., min_length=1, description="Unique tool identifier")
    description: str = Field(default="", description="Tool description")
    mutability: ToolMutability = Field(..., description="readonly or mutable")
    allowed_roles: frozenset[UserRole] = Field(
        ..., description="Roles permitted to invoke the tool"
    )
    parameters: Any = Field(..., description="Argument type (source of truth)")
    execute: Callable[..., Any] = Field(..., description="Business operation")

    model_config = {"frozen": True, "arbitrary_types_allowed": True}

    @field_validator("allowed_roles")
    @classmethod
    def validate_allowed_roles(cls, v: frozenset[UserRole]) -> frozenset[UserRole]:
        """A tool nobody can call is a configuration error."""
        if not v:
            raise ValueError("allowed_roles must not be empty")
        return v

    @cached_property
    def adapter(self) -> TypeAdapter[Any]:
        """TypeAdapter over the parameter type, built on first use."""
        if isinstance(self.parameters, TypeAdapter):
            return self.parameters
        return TypeAdapter(self.parameters)

    @property
    def is_readonly(self) -> bool:
        return self.mutability is ToolMutability.READONLY
