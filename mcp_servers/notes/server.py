"""
Notes MCP Server

Exposes note management operations (tools), read-only views (resources)
and prompt templates via the Model Context Protocol. Runs over stdio by
default; set NOTES_TRANSPORT=sse to serve SSE on NOTES_PORT (8001), or
NOTES_TRANSPORT=lines for plain newline-framed JSON-RPC on stdio.
"""

from __future__ import annotations

import logging
import sys
from datetime import UTC, datetime
from typing import Any

import anyio
import mcp.types as types
import uvicorn
from mcp.server.lowlevel import Server
from mcp.server.lowlevel.helper_types import ReadResourceContents
from mcp.server.sse import SseServerTransport
from mcp.server.stdio import stdio_server
from mcp.shared.exceptions import McpError
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from pydantic import AnyUrl
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Mount, Route

from .config import Settings, settings
from .protocol import NotesProtocol, ProtocolError, serve_lines

# ---------------------------------------------------------------------------
# Logging (stderr only: stdout carries the protocol)
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger("notes")


def _mcp_error(exc: ProtocolError) -> McpError:
    return McpError(types.ErrorData(code=exc.code, message=exc.message, data=exc.data))


# ---------------------------------------------------------------------------
# MCP binding
# ---------------------------------------------------------------------------


def create_mcp_server(protocol: NotesProtocol, config: Settings = settings) -> Server:
    """Build a low-level MCP server whose handlers all go through ``protocol``."""
    server: Server = Server(config.server_name, version=config.server_version)
    registry = protocol.registry

    @server.list_tools()
    async def list_tools() -> list[types.Tool]:
        return [
            types.Tool(
                name=op.name, description=op.description, inputSchema=op.input_schema
            )
            for op in registry.operations
        ]

    # Argument validation belongs to the dispatcher, not the SDK.
    @server.call_tool(validate_input=False)
    async def call_tool(name: str, arguments: dict[str, Any] | None) -> types.CallToolResult:
        result = protocol.invoke_operation(name, arguments)
        return types.CallToolResult(
            content=[types.TextContent(type="text", text=c.text) for c in result.content],
            isError=result.is_error,
        )

    @server.list_resources()
    async def list_resources() -> list[types.Resource]:
        return [
            types.Resource(
                uri=AnyUrl(view.uri),
                name=view.name,
                description=view.description,
                mimeType=view.mime_type,
            )
            for view in registry.views
        ]

    @server.read_resource()
    async def read_resource(uri: AnyUrl) -> list[ReadResourceContents]:
        try:
            contents = protocol.read_view(str(uri))
        except ProtocolError as exc:
            raise _mcp_error(exc) from exc
        return [ReadResourceContents(content=contents.text, mime_type=contents.mime_type)]

    @server.list_prompts()
    async def list_prompts() -> list[types.Prompt]:
        return [
            types.Prompt(
                name=template.name,
                description=template.description,
                arguments=(
                    [
                        types.PromptArgument(
                            name=arg.name,
                            description=arg.description,
                            required=arg.required,
                        )
                        for arg in template.arguments
                    ]
                    if template.arguments
                    else None
                ),
            )
            for template in registry.templates
        ]

    @server.get_prompt()
    async def get_prompt(name: str, arguments: dict[str, str] | None) -> types.GetPromptResult:
        try:
            messages = protocol.get_template(name, arguments)
        except ProtocolError as exc:
            raise _mcp_error(exc) from exc
        return types.GetPromptResult(
            messages=[
                types.PromptMessage(
                    role=m.role,
                    content=types.TextContent(type="text", text=m.content.text),
                )
                for m in messages
            ]
        )

    return server


# ---------------------------------------------------------------------------
# Transports
# ---------------------------------------------------------------------------


async def run_stdio(server: Server) -> None:
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())


def create_sse_app(
    server: Server, protocol: NotesProtocol, config: Settings = settings
) -> Starlette:
    """Starlette app serving MCP over SSE plus /health and /metrics."""
    sse = SseServerTransport("/messages/")

    async def handle_sse(request: Request) -> Response:
        async with sse.connect_sse(
            request.scope, request.receive, request._send
        ) as (read_stream, write_stream):
            await server.run(
                read_stream, write_stream, server.create_initialization_options()
            )
        return Response()

    async def health(request: Request) -> JSONResponse:
        return JSONResponse(
            {
                "status": "healthy",
                "server": config.server_name,
                "total_notes": protocol.storage.count,
                "timestamp": datetime.now(UTC).isoformat(),
            }
        )

    async def metrics(request: Request) -> Response:
        return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)

    return Starlette(
        routes=[
            Route("/sse", endpoint=handle_sse, methods=["GET"]),
            Mount("/messages/", app=sse.handle_post_message),
            Route("/health", endpoint=health, methods=["GET"]),
            Route("/metrics", endpoint=metrics, methods=["GET"]),
        ]
    )


# ---------------------------------------------------------------------------
# Entry-point
# ---------------------------------------------------------------------------


def main() -> None:
    protocol = NotesProtocol()
    logger.info("Notes MCP Server running on %s", settings.transport)

    if settings.transport == "lines":
        serve_lines(protocol, sys.stdin, sys.stdout)
        return

    server = create_mcp_server(protocol)
    if settings.transport == "sse":
        uvicorn.run(
            create_sse_app(server, protocol),
            host=settings.host,
            port=settings.port,
            log_level=settings.log_level.lower(),
        )
    else:
        anyio.run(run_stdio, server)


if __name__ == "__main__":
    main()
