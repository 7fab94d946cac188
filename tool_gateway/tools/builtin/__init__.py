"""
Built-in Tools Package

Tools shipped with the gateway itself. Business-domain tools come from
providers configured in TOOL_GATEWAY_TOOL_PROVIDERS.
"""

from tool_gateway.tools.builtin.system import NoArguments, SystemToolProvider

__all__ = ["NoArguments", "SystemToolProvider"]
