"""Tool registration modules for the menusync MCP server."""

from .menus import register_menu_tools

__all__ = [
    "register_menu_tools",
]
