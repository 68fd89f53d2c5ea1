"""
Block type registry: every kind of block the editor offers, in palette order.
"""

from typing import Dict, List, Union

from blocksmith.models import BlockKind, BlockType


class UnknownBlockTypeError(ValueError):
    """Raised when a type id does not name a registered block."""


BLOCK_TYPES: Dict[BlockKind, BlockType] = {
    block.kind: block
    for block in [
        # Text and labels
        BlockType(kind=BlockKind.LABEL, label="Label", description="Descriptive label for the command"),
        BlockType(kind=BlockKind.TEXT, label="Text", description="Custom literal text content"),
        # Actor data
        BlockType(kind=BlockKind.ATRIBUTOS, label="Attributes", description="Attributes like ST, DX, IQ or HT"),
        BlockType(kind=BlockKind.SPELLS, label="Spells", description="Magic spells and abilities"),
        BlockType(kind=BlockKind.SKILLS, label="Skills", description="Character skills and proficiencies"),
        BlockType(kind=BlockKind.COSTS, label="Costs", description="Resource costs for actions"),
        # Operators
        BlockType(kind=BlockKind.MOD, label="Modifier", description="Numeric modifier for rolls"),
        BlockType(kind=BlockKind.OR, label="Or", description="Logical OR (always |)", fixed_content="|"),
        BlockType(
            kind=BlockKind.AND,
            label="And",
            description="Logical AND, joins modifiers (always &)",
            fixed_content="&",
            formula_only=True,
        ),
        # Combat values
        BlockType(kind=BlockKind.RANGED, label="Ranged", description="Ranged attack (R: prefix)"),
        BlockType(kind=BlockKind.MELEE, label="Melee", description="Melee attack (M: prefix)"),
        BlockType(kind=BlockKind.WEAPOND, label="Weapon Damage", description="Weapon damage (D: prefix, quoted)"),
        BlockType(kind=BlockKind.PARRY, label="Parry", description="Parry defense (P: prefix)"),
        BlockType(kind=BlockKind.DAMAGE, label="Damage", description="Damage values and calculations"),
        # Conditionals and structure
        BlockType(kind=BlockKind.CHECK, label="Check", description="Condition check (always ?)", fixed_content="?"),
        BlockType(
            kind=BlockKind.IF, label="If", description="Conditional if (always /if)", fixed_content="/if", formula_only=True
        ),
        BlockType(
            kind=BlockKind.ELSE,
            label="Else",
            description="Conditional else (always /else)",
            fixed_content="/else",
            formula_only=True,
        ),
        BlockType(
            kind=BlockKind.LINE, label="Line", description="Line separator (always /)", fixed_content="/", formula_only=True
        ),
        BlockType(
            kind=BlockKind.BASED,
            label="Based",
            description="Bases the previous value on another (Based: prefix)",
            formula_only=True,
        ),
        BlockType(
            kind=BlockKind.GROUP_START,
            label="Group Start",
            description="Opens a nested group (always {)",
            fixed_content="{",
            formula_only=True,
        ),
        BlockType(
            kind=BlockKind.GROUP_END,
            label="Group End",
            description="Closes the innermost group (always })",
            fixed_content="}",
            formula_only=True,
        ),
    ]
}


def get_block_type(type_id: Union[str, BlockKind]) -> BlockType:
    try:
        return BLOCK_TYPES[BlockKind(type_id)]
    except ValueError as e:
        raise UnknownBlockTypeError(f"Unknown block type: {type_id!r}") from e


def is_known_type(type_id: Union[str, BlockKind]) -> bool:
    try:
        BlockKind(type_id)
    except ValueError:
        return False
    return True


def palette(formula: bool = False) -> List[BlockType]:
    """
    Returns the block types offered to the user.
    Formula-only types are hidden unless formula mode is active.
    """
    return [block for block in BLOCK_TYPES.values() if formula or not block.formula_only]
