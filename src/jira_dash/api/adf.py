"""Atlassian Document Format helpers.

Jira v3 stores descriptions and comment bodies as ADF documents. The TUI only
shows and edits plain text, so these helpers convert in both directions and
drop formatting.
"""

from typing import Any

_BLOCK_NODES = frozenset(
    {"paragraph", "heading", "blockquote", "codeBlock", "listItem", "panel", "rule"}
)


def text_to_adf(text: str) -> dict[str, Any]:
    """Wrap plain text in an ADF document, one paragraph per line."""
    content: list[dict[str, Any]] = []
    for line in text.splitlines():
        if line:
            content.append({"type": "paragraph", "content": [{"type": "text", "text": line}]})
        else:
            content.append({"type": "paragraph", "content": []})
    return {"type": "doc", "version": 1, "content": content}


def adf_to_text(node: Any) -> str:
    """Flatten an ADF document (or a plain string) to text.

    Block nodes end with a newline; mentions and emoji render their text
    attribute. Unknown node types contribute their children only.
    """
    if node is None:
        return ""
    if isinstance(node, str):
        return node
    parts: list[str] = []
    _collect(node, parts)
    return "".join(parts).strip("\n")


def _collect(node: Any, parts: list[str]) -> None:
    if isinstance(node, list):
        for child in node:
            _collect(child, parts)
        return
    if not isinstance(node, dict):
        return

    node_type = node.get("type")
    if node_type == "text":
        parts.append(str(node.get("text", "")))
        return
    if node_type == "hardBreak":
        parts.append("\n")
        return
    if node_type in ("mention", "emoji"):
        attrs = node.get("attrs") or {}
        parts.append(str(attrs.get("text", "")))
        return
    if node_type == "listItem":
        parts.append("- ")

    _collect(node.get("content", []), parts)

    if node_type in _BLOCK_NODES and not (parts and parts[-1].endswith("\n")):
        parts.append("\n")
