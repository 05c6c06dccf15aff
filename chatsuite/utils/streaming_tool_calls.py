"""
Utilities for handling streaming tool calls.

In streaming mode, tool calls are sent in fragments addressed by index and
need to be accumulated before they can be processed. The decoder emits each
chunk as-is; this module is for callers that want whole calls.
"""

import json
from typing import Dict, Iterable, List, Optional

from chatsuite.framework.chat_completion_response import ChatCompletionChunk, ToolCallDelta
from chatsuite.framework.message import ToolCall, ToolCallFunction


class StreamingToolCallAccumulator:
    """
    Accumulates tool call fragments from streaming chunks and converts them
    to complete tool calls when ready.
    """

    def __init__(self):
        self.tool_calls: Dict[int, Dict[str, str]] = {}

    def add_chunk(self, tool_call_deltas: Optional[Iterable[ToolCallDelta]]) -> None:
        """
        Add the tool call fragments of one chunk.

        Args:
            tool_call_deltas: ``delta.tool_calls`` of a streamed choice
        """
        if not tool_call_deltas:
            return

        for delta in tool_call_deltas:
            call = self.tool_calls.setdefault(
                delta.index, {"id": "", "name": "", "arguments": ""}
            )
            if delta.id:
                call["id"] += delta.id
            if delta.function is not None:
                if delta.function.name:
                    call["name"] += delta.function.name
                if delta.function.arguments:
                    call["arguments"] += delta.function.arguments

    def get_complete_tool_calls(self) -> List[ToolCall]:
        """
        Get tool calls that have an id, a name and JSON-parsable arguments,
        in index order.
        """
        complete_calls = []
        for index in sorted(self.tool_calls):
            call = self.tool_calls[index]
            if not (call["id"] and call["name"] and call["arguments"]):
                continue
            try:
                json.loads(call["arguments"])
            except json.JSONDecodeError:
                # Arguments are not complete yet
                continue
            complete_calls.append(
                ToolCall(id=call["id"], function=ToolCallFunction(name=call["name"], arguments=call["arguments"]))
            )
        return complete_calls

    def has_complete_tool_calls(self) -> bool:
        return len(self.get_complete_tool_calls()) > 0

    def clear(self) -> None:
        self.tool_calls.clear()


def accumulate_streaming_tool_calls(chunks: Iterable[ChatCompletionChunk]) -> List[ToolCall]:
    """
    Convenience function to accumulate tool calls from streamed chunks
    (first choice only).
    """
    accumulator = StreamingToolCallAccumulator()
    for chunk in chunks:
        if chunk.choices and chunk.choices[0].delta.tool_calls:
            accumulator.add_chunk(chunk.choices[0].delta.tool_calls)
    return accumulator.get_complete_tool_calls()
