from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator


class BlockKind(str, Enum):
    """Closed set of block type ids understood by the generator."""

    LABEL = "label"
    TEXT = "text"
    ATRIBUTOS = "atributos"
    SPELLS = "spells"
    SKILLS = "skills"
    COSTS = "costs"
    MOD = "mod"
    OR = "or"
    AND = "and"
    RANGED = "ranged"
    MELEE = "melee"
    WEAPOND = "weapond"
    PARRY = "parry"
    DAMAGE = "damage"
    CHECK = "check"
    IF = "if"
    ELSE = "else"
    LINE = "line"
    BASED = "based"
    GROUP_START = "group-start"
    GROUP_END = "group-end"


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


class BlockType(BaseModel):
    """
    Registry entry describing one kind of block.
    Only `fixed_content` affects generation; the rest is palette metadata.
    """

    model_config = ConfigDict(frozen=True)

    kind: BlockKind
    label: str
    description: str = ""
    fixed_content: Optional[str] = None
    formula_only: bool = False

    @property
    def editable(self) -> bool:
        return self.fixed_content is None


class BlockInstance(BaseModel):
    """
    One block placed in the workspace by the UI layer.
    """

    model_config = ConfigDict(populate_by_name=True)

    type_id: BlockKind = Field(..., alias="type", description="Block type id, e.g. 'skills' or 'group-start'.")
    text: str = Field("", description="User-entered text. Ignored for fixed-content blocks.")

    @property
    def content(self) -> str:
        return self.text.strip()


class GenerationFlags(BaseModel):
    model_config = ConfigDict(frozen=True)

    blind: bool = Field(False, description="Prefix data blocks with '!' so the roll result is hidden.")
    formula: bool = Field(False, description="Wrap each block individually and enable formula-only blocks.")

    def exclusive(self) -> "GenerationFlags":
        """Formula mode switches blind mode off, as the editor's checkboxes do."""
        if self.formula and self.blind:
            return GenerationFlags(blind=False, formula=True)
        return self


class ValidationRule(BaseModel):
    """
    A suspicious arrangement of blocks.

    `highlight_index` is relative to the pattern; negative values count
    from the end, so -1 flags the last block of the matched window.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str
    pattern: Tuple[str, ...]
    highlight_index: int = -1
    severity: Severity = Severity.WARNING
    enabled: bool = True

    @model_validator(mode="after")
    def check_highlight_index(self) -> "ValidationRule":
        size = len(self.pattern)
        if not -size <= self.highlight_index < size:
            raise ValueError(
                f"highlight_index {self.highlight_index} is outside a pattern of {size} block(s)"
            )
        return self


class Issue(BaseModel):
    rule_id: str
    severity: Severity
    highlight_index: int = Field(..., description="Index of the flagged block in the validated sequence.")
    rule_name: str = ""
    description: str = ""
