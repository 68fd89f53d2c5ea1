import json
import logging
from typing import List

import structlog
from mcp.server.fastmcp import FastMCP

from blocksmith.generator import generate
from blocksmith.logs import configure_logging
from blocksmith.models import BlockInstance, GenerationFlags, Issue
from blocksmith.registry import palette
from blocksmith.validation import validate
from blocksmith.workspace import load_workspace, render

# MCP talks JSON-RPC over stdio, so every log line must go to stderr.
configure_logging(logging.INFO, json_output=True)

logger = structlog.get_logger(__name__)

mcp = FastMCP("Blocksmith Command Generator")


def _format_issues(issues: List[Issue]) -> str:
    if not issues:
        return "No validation issues found."
    lines = [f"Found {len(issues)} validation issues:"]
    for issue in issues:
        lines.append(f"- [{issue.severity.value}] {issue.rule_id} at block {issue.highlight_index}: {issue.description}")
    return "\n".join(lines)


@mcp.tool()
def generate_code(blocks: List[BlockInstance], blind: bool = False, formula: bool = False) -> str:
    """
    Generates an OtF command from an ordered list of blocks.

    Args:
        blocks: Blocks in workspace order. Each has a `type` (e.g. 'skills', 'mod', 'based',
                'group-start') and an optional `text`. Blocks with empty text are ignored,
                except operator blocks ('or', 'and', 'if', ...) which always emit their symbol.
        blind: Blind roll. Prefixes skills, spells and attributes with '!'. Ignored in formula mode.
        formula: Formula mode. Brackets every block individually and joins 'mod and mod'
                 runs into a single expression.
    """
    try:
        flags = GenerationFlags(blind=blind, formula=formula).exclusive()
        return generate(blocks, flags)
    except Exception as e:
        return f"Error generating code: {str(e)}"


@mcp.tool()
def validate_blocks(block_types: List[str]) -> str:
    """
    Checks an ordered list of block type ids for suspicious arrangements
    (e.g. three consecutive skills, damage before an attack, unbalanced groups).

    Args:
        block_types: Block type ids in workspace order, e.g. ["label", "skills", "skills"].
    """
    try:
        return _format_issues(validate(block_types))
    except Exception as e:
        return f"Error validating blocks: {str(e)}"


@mcp.tool()
def render_workspace_file(workspace_path: str, blind: bool = False, formula: bool = False) -> str:
    """
    Loads a workspace JSON file, generates its command and validates it.

    Args:
        workspace_path: Absolute path to the workspace JSON file.
        blind: Turn blind mode on even if the file does not.
        formula: Turn formula mode on even if the file does not.

    Returns:
        JSON object with `code` and `issues`, or an error message.
    """
    try:
        workspace = load_workspace(workspace_path)
        flags = GenerationFlags(
            blind=workspace.blind or blind,
            formula=workspace.formula or formula,
        ).exclusive()
        result = render(workspace, flags)
        return json.dumps(result.model_dump(mode="json"), indent=2)
    except FileNotFoundError:
        return f"Error: File not found: {workspace_path}"
    except Exception as e:
        return f"Error rendering workspace: {str(e)}"


@mcp.tool()
def list_block_types(formula: bool = False) -> str:
    """
    Lists the block types available in the palette.

    Args:
        formula: Include formula-only blocks (if, else, line, based, and, groups).
    """
    lines = []
    for b in palette(formula=formula):
        fixed = f" (always '{b.fixed_content}')" if b.fixed_content is not None else ""
        lines.append(f"{b.kind.value}: {b.label} - {b.description}{fixed}")
    return "\n".join(lines)


def main():
    logger.info("Starting blocksmith MCP server")
    mcp.run()


if __name__ == "__main__":
    main()
