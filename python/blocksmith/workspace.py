"""
Boundary between the editor UI and the pure generator/validator.

Loads workspace documents into validated models (rejecting unknown block
types) and runs the generate-then-validate pass the editor performs after
every change.
"""

import json
from pathlib import Path
from typing import List, Optional, Union

import structlog
from pydantic import BaseModel, Field, ValidationError

from blocksmith.generator import generate
from blocksmith.models import BlockInstance, GenerationFlags, Issue, Severity
from blocksmith.validation import validate_blocks

logger = structlog.get_logger(__name__)


class Workspace(BaseModel):
    """
    The editor's current state: placed blocks in order plus the two mode checkboxes.
    """

    blocks: List[BlockInstance] = Field(default_factory=list)
    blind: bool = False
    formula: bool = False

    @property
    def flags(self) -> GenerationFlags:
        return GenerationFlags(blind=self.blind, formula=self.formula)


class RenderResult(BaseModel):
    code: str
    issues: List[Issue] = Field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return any(issue.severity == Severity.ERROR for issue in self.issues)


def load_workspace_json(content: str) -> Workspace:
    """
    Parses a workspace document.

    Accepts either a bare list of blocks or an object with 'blocks',
    'blind' and 'formula' keys. Each block is {"type": ..., "text": ...}.

    Raises:
        ValueError: The document is not valid JSON or names an unknown block type.
    """
    try:
        data = json.loads(content)
        if isinstance(data, list):
            data = {"blocks": data}
        return Workspace.model_validate(data)
    except (json.JSONDecodeError, ValidationError) as e:
        logger.error(f"Workspace loading failed: {e}")
        raise ValueError(f"Could not load workspace: {e}") from e


def load_workspace(path: Union[str, Path]) -> Workspace:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"File not found: {path}")
    with open(p, "r", encoding="utf-8") as f:
        return load_workspace_json(f.read())


def render(workspace: Workspace, flags: Optional[GenerationFlags] = None) -> RenderResult:
    """
    Generates the command and validates the block sequence in one pass.

    Args:
        workspace: Blocks and stored mode flags.
        flags: Overrides the workspace's own flags when given.
    """
    flags = flags or workspace.flags
    code = generate(workspace.blocks, flags)
    issues = validate_blocks(workspace.blocks)
    logger.debug(f"Rendered workspace: {len(workspace.blocks)} blocks, {len(issues)} issues")
    return RenderResult(code=code, issues=issues)
