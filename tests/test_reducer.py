from pebblechat.reducer import (
    NO_RESPONSE_TEXT,
    McpToolResultBlock,
    McpToolUseBlock,
    ServerToolUseBlock,
    TextBlock,
    UnknownBlock,
    parse_blocks,
    reduce_blocks,
)


def test_tool_result_inserts_paragraph_break() -> None:
    blocks = [TextBlock("a"), McpToolResultBlock(tool_use_id="t1"), TextBlock("b")]
    assert reduce_blocks(blocks) == "a\n\nb"


def test_server_tool_use_inserts_paragraph_break() -> None:
    blocks = [TextBlock("Let me check."), ServerToolUseBlock(), TextBlock("It is sunny.")]
    assert reduce_blocks(blocks) == "Let me check.\n\nIt is sunny."


def test_mcp_tool_use_adds_no_text() -> None:
    blocks = [TextBlock("a"), McpToolUseBlock(name="search", server_name="docs"), TextBlock("b")]
    assert reduce_blocks(blocks) == "ab"


def test_trailing_break_is_trimmed() -> None:
    assert reduce_blocks([TextBlock("done"), ServerToolUseBlock()]) == "done"


def test_unknown_blocks_are_ignored() -> None:
    blocks = [UnknownBlock(type="web_search_tool_result"), TextBlock("x"), UnknownBlock(type="thinking")]
    assert reduce_blocks(blocks) == "x"


def test_empty_sequences_fall_back() -> None:
    assert reduce_blocks([]) == NO_RESPONSE_TEXT
    assert reduce_blocks([TextBlock("  "), McpToolResultBlock()]) == NO_RESPONSE_TEXT


def test_parse_blocks_maps_known_and_unknown_types() -> None:
    raw = [
        {"type": "text", "text": "hi"},
        {"type": "mcp_tool_use", "id": "u1", "name": "lookup", "server_name": "kb", "input": {}},
        {"type": "mcp_tool_result", "tool_use_id": "u1", "content": []},
        {"type": "server_tool_use", "id": "s1", "name": "web_search", "input": {"query": "q"}},
        {"type": "web_search_tool_result", "content": []},
        "garbage",
    ]
    assert parse_blocks(raw) == [
        TextBlock("hi"),
        McpToolUseBlock(name="lookup", server_name="kb"),
        McpToolResultBlock(tool_use_id="u1"),
        ServerToolUseBlock(name="web_search"),
        UnknownBlock(type="web_search_tool_result"),
        UnknownBlock(type="str"),
    ]


def test_text_block_without_text_counts_as_empty() -> None:
    assert parse_blocks([{"type": "text"}]) == [TextBlock("")]
