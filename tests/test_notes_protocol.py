"""Tests for the notes protocol router and the line transport."""

import io
import json

import pytest

from mcp_servers.notes.protocol import NotesProtocol, serve_lines

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


@pytest.fixture()
def protocol() -> NotesProtocol:
    return NotesProtocol()


class Client:
    """Tiny request helper that numbers requests like a real caller."""

    def __init__(self, protocol: NotesProtocol) -> None:
        self.protocol = protocol
        self.next_id = 0

    def request(self, method: str, params: dict | None = None) -> dict:
        self.next_id += 1
        message = {"jsonrpc": "2.0", "id": self.next_id, "method": method}
        if params is not None:
            message["params"] = params
        response = self.protocol.handle(message)
        assert response["id"] == self.next_id
        return response

    def result(self, method: str, params: dict | None = None) -> dict:
        response = self.request(method, params)
        assert "error" not in response, response
        return response["result"]

    def invoke(self, name: str, **arguments) -> dict:
        return self.result("invoke-operation", {"name": name, "arguments": arguments})

    def text(self, name: str, **arguments) -> str:
        result = self.invoke(name, **arguments)
        assert not result.get("isError"), result
        return result["content"][0]["text"]


@pytest.fixture()
def client(protocol: NotesProtocol) -> Client:
    return Client(protocol)


# ---------------------------------------------------------------------------
# Discovery
# ---------------------------------------------------------------------------


class TestDiscovery:
    def test_list_operations(self, client: Client) -> None:
        operations = client.result("list-operations", {})["operations"]
        assert [op["name"] for op in operations] == [
            "create_note",
            "list_notes",
            "get_note",
            "update_note",
            "delete_note",
            "search_notes",
        ]
        create = operations[0]
        assert set(create) == {"name", "description", "inputSchema"}
        assert create["inputSchema"]["required"] == ["title", "content"]
        assert create["inputSchema"]["properties"]["tags"]["items"] == {"type": "string"}

    def test_list_views(self, client: Client) -> None:
        views = client.result("list-views")["views"]
        assert views == [
            {
                "uri": "notes://all",
                "mimeType": "application/json",
                "name": "All Notes",
                "description": "Complete list of all notes in the system",
            },
            {
                "uri": "notes://summary",
                "mimeType": "text/plain",
                "name": "Notes Summary",
                "description": "A summary of notes with statistics",
            },
        ]

    def test_list_templates(self, client: Client) -> None:
        templates = client.result("list-templates", {})["templates"]
        summarize, organize = templates
        assert summarize["name"] == "summarize_notes"
        assert summarize["arguments"] == [
            {"name": "tag", "description": "Optional tag to filter notes", "required": False}
        ]
        assert organize["name"] == "organize_notes"
        assert "arguments" not in organize

    def test_discovery_is_independent_of_store(self, client: Client) -> None:
        before = client.result("list-operations")
        client.text("create_note", title="A", content="x")
        assert client.result("list-operations") == before


# ---------------------------------------------------------------------------
# Invocation
# ---------------------------------------------------------------------------


class TestInvocation:
    def test_end_to_end_scenario(self, client: Client) -> None:
        id1 = client.text("create_note", title="A", content="x", tags=["t1"]).rsplit(": ", 1)[1]
        id2 = client.text("create_note", title="B", content="y", tags=["t2"]).rsplit(": ", 1)[1]
        assert id1 != id2

        listed = json.loads(client.text("list_notes"))
        assert [n["id"] for n in listed] == [id1, id2]

        tagged = json.loads(client.text("list_notes", tag="t1"))
        assert [n["id"] for n in tagged] == [id1]

        found = json.loads(client.text("search_notes", query="y"))
        assert [n["id"] for n in found] == [id2]

        assert client.text("delete_note", id=id1) == f"Note {id1} deleted successfully"
        remaining = json.loads(client.text("list_notes"))
        assert [n["id"] for n in remaining] == [id2]

    def test_unknown_operation_is_in_band(self, client: Client) -> None:
        result = client.invoke("create_notes", title="A", content="x")
        assert result["isError"] is True
        assert result["content"] == [
            {"type": "text", "text": "Error: Unknown operation: create_notes"}
        ]

    def test_not_found_is_in_band(self, client: Client) -> None:
        result = client.invoke("get_note", id="missing")
        assert result["isError"] is True
        assert "not found" in result["content"][0]["text"]

    def test_invalid_arguments_are_in_band(self, client: Client) -> None:
        result = client.invoke("create_note", title="A", content="x", tags="work")
        assert result["isError"] is True
        assert "Invalid arguments" in result["content"][0]["text"]

    def test_missing_arguments_key(self, client: Client) -> None:
        result = client.result("invoke-operation", {"name": "list_notes"})
        assert result == {"content": [{"type": "text", "text": "[]"}]}

    def test_missing_name(self, client: Client) -> None:
        response = client.request("invoke-operation", {"arguments": {}})
        assert response["error"]["code"] == -32602

    def test_read_views(self, client: Client) -> None:
        client.text("create_note", title="A", content="x", tags=["work"])
        result = client.result("read-view", {"uri": "notes://summary"})
        (contents,) = result["contents"]
        assert contents["uri"] == "notes://summary"
        assert contents["mimeType"] == "text/plain"
        assert "Total notes: 1" in contents["text"]

        all_notes = client.result("read-view", {"uri": "notes://all"})["contents"][0]
        assert all_notes["mimeType"] == "application/json"
        assert json.loads(all_notes["text"])[0]["title"] == "A"

    def test_get_template(self, client: Client) -> None:
        client.text("create_note", title="A", content="x", tags=["t1"])
        result = client.result(
            "get-template", {"name": "summarize_notes", "arguments": {"tag": "t1"}}
        )
        assert result == {
            "messages": [
                {
                    "role": "user",
                    "content": {
                        "type": "text",
                        "text": 'Please summarize the following notes tagged with "t1":\n\n- A: x',
                    },
                }
            ]
        }


# ---------------------------------------------------------------------------
# Envelope-level errors
# ---------------------------------------------------------------------------


class TestEnvelopeErrors:
    def test_unknown_view(self, client: Client) -> None:
        error = client.request("read-view", {"uri": "notes://bogus"})["error"]
        assert error["code"] == -32002
        assert error["message"] == "Unknown view: notes://bogus"
        assert error["data"] == {"uri": "notes://bogus"}

    def test_unknown_template(self, client: Client) -> None:
        error = client.request("get-template", {"name": "summarize"})["error"]
        assert error["code"] == -32602
        assert error["data"] == {"name": "summarize"}

    def test_bad_template_arguments(self, client: Client) -> None:
        error = client.request(
            "get-template", {"name": "summarize_notes", "arguments": {"tag": 1}}
        )["error"]
        assert error["code"] == -32602

    def test_unknown_method(self, client: Client) -> None:
        error = client.request("tools/call", {})["error"]
        assert error["code"] == -32601

    def test_params_must_be_object(self, client: Client) -> None:
        response = client.protocol.handle(
            {"jsonrpc": "2.0", "id": 9, "method": "list-views", "params": [1]}
        )
        assert response["error"]["code"] == -32602

    def test_method_must_be_string(self, protocol: NotesProtocol) -> None:
        response = protocol.handle({"jsonrpc": "2.0", "id": 1, "method": 5})
        assert response["error"]["code"] == -32600
        assert response["id"] == 1

    def test_non_object_request(self, protocol: NotesProtocol) -> None:
        response = protocol.handle([1, 2])
        assert response["error"]["code"] == -32600
        assert response["id"] is None

    def test_notification_gets_no_response(self, protocol: NotesProtocol) -> None:
        message = {
            "jsonrpc": "2.0",
            "method": "invoke-operation",
            "params": {"name": "create_note", "arguments": {"title": "A", "content": "x"}},
        }
        assert protocol.handle(message) is None
        assert protocol.storage.count == 1

    def test_internal_error(
        self, protocol: NotesProtocol, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        def _boom(uri: str):
            raise RuntimeError("renderer crashed")

        monkeypatch.setattr(protocol.views, "read", _boom)
        response = protocol.handle(
            {"id": 1, "method": "read-view", "params": {"uri": "notes://all"}}
        )
        assert response["error"] == {"code": -32603, "message": "renderer crashed"}


# ---------------------------------------------------------------------------
# Line transport
# ---------------------------------------------------------------------------


class TestLineTransport:
    def test_parse_error(self, protocol: NotesProtocol) -> None:
        response = json.loads(protocol.handle_line("{not json"))
        assert response["error"]["code"] == -32700
        assert response["id"] is None

    def test_serve_lines(self, protocol: NotesProtocol) -> None:
        requests = [
            {"jsonrpc": "2.0", "id": 1, "method": "invoke-operation",
             "params": {"name": "create_note", "arguments": {"title": "A", "content": "x"}}},
            {"jsonrpc": "2.0", "method": "list-views"},
            {"jsonrpc": "2.0", "id": 2, "method": "read-view", "params": {"uri": "notes://summary"}},
        ]
        instream = io.StringIO(
            "\n".join(json.dumps(r) for r in requests) + "\n\n"
        )
        outstream = io.StringIO()

        serve_lines(protocol, instream, outstream)

        responses = [json.loads(line) for line in outstream.getvalue().splitlines()]
        assert [r["id"] for r in responses] == [1, 2]
        assert responses[0]["result"]["content"][0]["text"].startswith("Note created")
        assert "Total notes: 1" in responses[1]["result"]["contents"][0]["text"]
