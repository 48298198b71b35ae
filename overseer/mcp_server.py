"""FastMCP server exposing the active session read-only.

Tools:
  - query_memories(character_id, query) : same search and result text as the
                                           in-game query_memories tool
  - get_world_state()                   : inventory, gold, almanac, combat
  - get_roster()                        : name = id lines for every agent

Nothing here mutates the session; state changes only come from agents'
tool calls inside the turn cycle. The session is attached with
set_session() (the app does this on startup; tests do it directly).

Usage:
    uv run python -m overseer.mcp_server
"""

from mcp.server.fastmcp import FastMCP

from overseer.memory import format_search_result, search_memories
from overseer.state import SessionState, SessionView

mcp = FastMCP("overseer-memory")

_view: SessionView | None = None


def set_session(view: SessionView) -> None:
    """Attach the session the tools read from."""
    global _view
    _view = view


def _session() -> SessionView:
    if _view is None:
        raise RuntimeError("No session attached")
    return _view


@mcp.tool()
def query_memories(character_id: str, query: str) -> str:
    """Search one agent's personal memories plus the shared memories."""
    return format_search_result(search_memories(_session(), character_id, query))


@mcp.tool()
def get_world_state() -> dict:
    """Return inventory, gold, almanac, combat state and shared memories."""
    return _session().world.model_dump(mode="json")


@mcp.tool()
def get_roster() -> str:
    """Return one "Name = id" line per party member."""
    return "\n".join(f"{c.name} = {c.id}" for c in _session().characters.values())


if __name__ == "__main__":
    set_session(SessionState().view())
    mcp.run()
