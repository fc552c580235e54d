"""FastMCP server exposing read-only campaign inspection as MCP tools.

Tools:
  - list_saves()                  : every save, most recent first
  - world_summary(save_id)        : priority-nation summary used in prompts
  - recent_events(save_id, limit) : newest events of a save

Storage must be initialised before the tools are called; the registry is
replaced via set_registry() for tests, or loaded from presets/ when run as
__main__.

Usage:
    uv run python -m pax_historia.mcp_server
"""

from mcp.server.fastmcp import FastMCP

from pax_historia import events, storage
from pax_historia.context import build_world_summary
from pax_historia.registry import NationRegistry

mcp = FastMCP("pax-historia")

_registry: NationRegistry = NationRegistry({})


def set_registry(registry: NationRegistry) -> None:
    """Replace the active nation registry (used in tests)."""
    global _registry
    _registry = registry


@mcp.tool()
def list_saves() -> list[dict]:
    """List all saves with their nation, date and turn."""
    names = {code: n.name for code, n in _registry.items()}
    return [s.model_dump() for s in storage.list_save_summaries(names)]


@mcp.tool()
def world_summary(save_id: str) -> dict:
    """Stability, war support, occupied region count and war status of the relevant nations."""
    return build_world_summary(storage.load_save(save_id), _registry)


@mcp.tool()
def recent_events(save_id: str, limit: int = 10) -> list[dict]:
    """Newest events of a save."""
    save = storage.load_save(save_id)
    return [e.model_dump() for e in events.list_events(save, limit)]


if __name__ == "__main__":
    from pax_historia.config import Settings

    settings = Settings.from_env()
    storage.init_storage(settings.data_dir, presets_dir=settings.presets_dir)
    set_registry(NationRegistry.from_presets(settings.presets_dir))
    mcp.run()
