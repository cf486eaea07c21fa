"""MCP prompt registry.

Prompts are predefined conversation/workflow templates that the client can invoke explicitly.
"""

from __future__ import annotations

from typing import Any

from mcp.server.fastmcp import FastMCP


def register_prompts(mcp: FastMCP) -> None:
    """Register prompt templates on the MCP server."""

    @mcp.prompt()
    def summarize_resource(uri: str) -> list[dict[str, Any]]:
        """Build a prompt that summarizes a resource URI."""
        return [
            {
                "role": "system",
                "content": (
                    "You are a precise assistant. Summarize the provided resource clearly and "
                    "concisely. Extract key points, risks, and actionable items."
                ),
            },
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": "Summarize this resource:"},
                    {"type": "resource", "uri": uri},
                ],
            },
        ]

    @mcp.prompt()
    def investigate_log_file(
        log_path: str,
        search: str | None = None,
        level: str | None = None,
    ) -> list[dict[str, Any]]:
        """Build a prompt for a forensic review of a log file."""
        call_lines = [f"- log_path: {log_path}"]
        if search:
            call_lines.append(f"- search: {search}")
        if level:
            call_lines.append(f"- level: {level.strip().upper()}")
        call_block = "\n".join(call_lines)
        return [
            {
                "role": "system",
                "content": (
                    "You are a digital forensics analyst. Base every statement on the tool "
                    "output or the log itself. Field extraction is heuristic: treat status "
                    "codes and actors as hints, not facts."
                ),
            },
            {
                "role": "user",
                "content": (
                    "Investigate the log file using analyze_log. Follow this workflow:\n"
                    "- Call analyze_log first with the parameters below.\n"
                    "- Review the suspicious entries and the error entries; quote them with "
                    "their id, e.g. [#12] <raw line>.\n"
                    "- Point out addresses or actors that dominate the counts.\n"
                    "- If nothing suspicious is found, say so clearly.\n\n"
                    "Call analyze_log with:\n"
                    f"{call_block}\n\n"
                    "Return this structure:\n"
                    "1) Overview (time range, total entries, level breakdown)\n"
                    "2) Suspicious activity (2-5 quoted lines)\n"
                    "3) Notable sources and actors\n"
                    "4) Recommended follow-up (2-4 bullets)\n"
                ),
            },
            {
                "role": "user",
                "content": [
                    {
                        "type": "text",
                        "text": "Optional: if you need raw context, you can read the log via:",
                    },
                    {"type": "resource", "uri": f"log://{log_path}"},
                ],
            },
        ]
