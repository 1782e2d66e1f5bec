#!/usr/bin/env python3
"""
Notes MCP Server Demo Client

Spawns the Notes MCP server over stdio, discovers its tools, resources and
prompts, then walks through creating, listing, searching and summarizing
notes.
"""

import json
import os
import sys
from pathlib import Path

import anyio
from mcp import ClientSession, StdioServerParameters
from mcp.client.stdio import stdio_client

PROJECT_ROOT = Path(__file__).resolve().parent.parent
SERVER_MODULE = "mcp_servers.notes.server"

# ---------------------------------------------------------------------------
# ANSI colours
# ---------------------------------------------------------------------------
BOLD = "\033[1m"
DIM = "\033[2m"
RESET = "\033[0m"
CYAN = "\033[96m"
GREEN = "\033[92m"
YELLOW = "\033[93m"
MAGENTA = "\033[95m"
BLUE = "\033[94m"


def banner(text: str) -> None:
    """Print a bold cyan banner."""
    width = 60
    print()
    print(f"{CYAN}{BOLD}{'=' * width}{RESET}")
    print(f"{CYAN}{BOLD}  {text}{RESET}")
    print(f"{CYAN}{BOLD}{'=' * width}{RESET}")
    print()


def step(title: str) -> None:
    """Print a step header."""
    print(f"\n{YELLOW}{BOLD}--- {title} ---{RESET}\n")


def info(msg: str) -> None:
    print(f"  {DIM}{msg}{RESET}")


def success(msg: str) -> None:
    print(f"  {GREEN}{msg}{RESET}")


def print_notes(notes: list[dict]) -> None:
    """Print notes one block each."""
    if not notes:
        info("No notes found.")
        return
    for note in notes:
        print(f"  {BLUE}[{note['id']}]{RESET} {BOLD}{note['title']}{RESET}")
        print(f"     {note['content']}")
        print(f"     {DIM}Tags: {', '.join(note['tags']) or 'none'}{RESET}")


def server_parameters() -> StdioServerParameters:
    env = dict(os.environ, NOTES_TRANSPORT="stdio", NOTES_LOG_LEVEL="WARNING")
    return StdioServerParameters(
        command=sys.executable,
        args=["-m", SERVER_MODULE],
        cwd=str(PROJECT_ROOT),
        env=env,
    )


async def discover(session: ClientSession) -> None:
    step("Discover capabilities")
    tools = await session.list_tools()
    print(f"  {MAGENTA}Tools:{RESET}")
    for tool in tools.tools:
        print(f"    {tool.name}  {DIM}{tool.description}{RESET}")

    resources = await session.list_resources()
    print(f"  {MAGENTA}Resources:{RESET}")
    for resource in resources.resources:
        print(f"    {resource.uri}  {DIM}{resource.description}{RESET}")

    prompts = await session.list_prompts()
    print(f"  {MAGENTA}Prompts:{RESET}")
    for prompt in prompts.prompts:
        args = ", ".join(a.name for a in prompt.arguments or [])
        suffix = f" ({args})" if args else ""
        print(f"    {prompt.name}{suffix}  {DIM}{prompt.description}{RESET}")


async def create_note(
    session: ClientSession, title: str, content: str, tags: list[str]
) -> None:
    result = await session.call_tool(
        "create_note", {"title": title, "content": content, "tags": tags}
    )
    success(result.content[0].text)


async def list_notes(session: ClientSession, tag: str | None = None) -> None:
    step(f'List notes tagged "{tag}"' if tag else "List all notes")
    result = await session.call_tool("list_notes", {"tag": tag} if tag else {})
    print_notes(json.loads(result.content[0].text))


async def search_notes(session: ClientSession, query: str) -> None:
    step(f'Search for "{query}"')
    result = await session.call_tool("search_notes", {"query": query})
    notes = json.loads(result.content[0].text)
    info(f"Found {len(notes)} note(s)")
    print_notes(notes)


async def run_demo() -> None:
    banner("Notes MCP Server Demo")
    async with stdio_client(server_parameters()) as (read, write):
        async with ClientSession(read, write) as session:
            await session.initialize()
            success("Connected")

            await discover(session)

            step("Create notes")
            await create_note(
                session,
                "Project Ideas",
                "Build an MCP server for note management",
                ["work", "programming"],
            )
            await create_note(
                session, "Grocery List", "Milk, eggs, bread, coffee", ["personal"]
            )
            await create_note(
                session,
                "Learning Goals",
                "Learn Python typing, study MCP protocol, practice system design",
                ["education", "programming"],
            )

            await list_notes(session)
            await list_notes(session, "programming")
            await search_notes(session, "MCP")

            step("Read resource notes://summary")
            summary = await session.read_resource("notes://summary")
            print(summary.contents[0].text)

            step("Get prompt summarize_notes (tag=programming)")
            prompt = await session.get_prompt("summarize_notes", {"tag": "programming"})
            for message in prompt.messages:
                print(f"  {MAGENTA}[{message.role}]{RESET}")
                print(message.content.text)

    banner("Done")


if __name__ == "__main__":
    anyio.run(run_demo)
