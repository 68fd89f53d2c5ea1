"""
Pure code generation: turns an ordered list of workspace blocks into the
OtF command string shown in the editor's output box.

Generation runs in four steps:
1. Prepare: trim text, resolve fixed content, drop blocks that contribute nothing.
2. Pair: attach each 'based' block to an eligible predecessor.
3. Format: render every block (modifier chains as one part in formula mode).
4. Assemble: join the parts and apply the outer bracket policy.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

import structlog

from blocksmith.models import BlockInstance, BlockKind, GenerationFlags
from blocksmith.registry import BLOCK_TYPES

logger = structlog.get_logger(__name__)

IF_TOKEN = "/if"
ELSE_TOKEN = "/else"

# Blocks a following 'based' block attaches to.
BASED_TARGETS = frozenset(
    {
        BlockKind.SPELLS,
        BlockKind.SKILLS,
        BlockKind.ATRIBUTOS,
        BlockKind.COSTS,
        BlockKind.RANGED,
        BlockKind.MELEE,
        BlockKind.WEAPOND,
        BlockKind.PARRY,
        BlockKind.DAMAGE,
        BlockKind.MOD,
    }
)

CHAIN_KINDS = frozenset({BlockKind.MOD, BlockKind.AND})

# Never individually bracketed in formula mode.
UNWRAPPED_KINDS = frozenset(
    {
        BlockKind.IF,
        BlockKind.ELSE,
        BlockKind.LABEL,
        BlockKind.BASED,
        BlockKind.GROUP_START,
        BlockKind.GROUP_END,
    }
)

MIN_CHAIN_LENGTH = 3


@dataclass
class PreparedBlock:
    kind: BlockKind
    content: str
    suffix: str = ""
    consumed: bool = False


def format_block(kind: BlockKind, content: str, blind: bool = False) -> str:
    """
    Formats a single block's content according to its type.
    `content` is the trimmed user text, or the fixed content for operator blocks.
    """
    bang = "!" if blind else ""

    if kind is BlockKind.LABEL or kind is BlockKind.TEXT:
        return f'"{content}"'
    elif kind is BlockKind.SKILLS:
        return f"{bang}Sk:{content}"
    elif kind is BlockKind.SPELLS:
        return f"{bang}S: {content}"
    elif kind is BlockKind.ATRIBUTOS:
        return f"{bang}{content}"
    elif kind is BlockKind.COSTS:
        return f"*Costs {content}"
    elif kind is BlockKind.RANGED:
        return f"R:{content}"
    elif kind is BlockKind.MELEE:
        return f"M:{content}"
    elif kind is BlockKind.WEAPOND:
        return f'D:"{content}"'
    elif kind is BlockKind.PARRY:
        return f"P:{content}"
    elif kind is BlockKind.DAMAGE or kind is BlockKind.MOD:
        return content
    elif kind is BlockKind.BASED:
        return f"(Based:{content})"
    elif kind in (
        BlockKind.OR,
        BlockKind.AND,
        BlockKind.CHECK,
        BlockKind.IF,
        BlockKind.ELSE,
        BlockKind.LINE,
        BlockKind.GROUP_START,
        BlockKind.GROUP_END,
    ):
        return BLOCK_TYPES[kind].fixed_content
    raise ValueError(f"No formatter for block kind: {kind!r}")


def prepare_blocks(sequence: Sequence[BlockInstance]) -> List[PreparedBlock]:
    """
    Resolves the content of each block and drops the ones that contribute nothing.
    The result keeps sequence order; neighbour rules only ever look at this list.
    """
    prepared = []
    for index, block in enumerate(sequence):
        fixed = BLOCK_TYPES[block.type_id].fixed_content
        if fixed is not None:
            prepared.append(PreparedBlock(block.type_id, fixed))
            continue

        content = block.content
        if not content:
            logger.debug(f"Skipping block {index} ({block.type_id.value}): empty text")
            continue
        prepared.append(PreparedBlock(block.type_id, content))
    return prepared


def pair_based_blocks(blocks: List[PreparedBlock]) -> None:
    """
    Attaches each 'based' block to the data block right before it.
    The predecessor gets a ' (Based:X)' suffix and the based block is consumed.
    """
    for previous, current in zip(blocks, blocks[1:]):
        if current.kind is BlockKind.BASED and previous.kind in BASED_TARGETS:
            previous.suffix = f" (Based:{current.content})"
            current.consumed = True
            logger.debug(f"Based block '{current.content}' attached to {previous.kind.value} '{previous.content}'")


def find_modifier_chains(blocks: List[PreparedBlock]) -> List[Tuple[int, int]]:
    """
    Finds runs like 'mod and mod [and mod ...]'.

    Returns (start, stop) slices into `blocks`. A run starts at a 'mod',
    extends over 'mod'/'and' blocks and closes at the first other block.
    """
    chains: List[Tuple[int, int]] = []
    start: Optional[int] = None

    for index, block in enumerate(blocks):
        if block.kind in CHAIN_KINDS:
            if start is None and block.kind is BlockKind.MOD:
                start = index
        elif start is not None:
            _close_chain(blocks, start, index, chains)
            start = None

    if start is not None:
        _close_chain(blocks, start, len(blocks), chains)

    return chains


def _close_chain(blocks: List[PreparedBlock], start: int, stop: int, chains: List[Tuple[int, int]]) -> None:
    members = blocks[start:stop]
    if len(members) >= MIN_CHAIN_LENGTH and any(m.kind is BlockKind.AND for m in members):
        logger.debug(f"Detected modifier chain over prepared blocks {start}..{stop - 1}")
        chains.append((start, stop))


def _render_chain(members: List[PreparedBlock]) -> str:
    parts = [format_block(m.kind, m.content) + m.suffix for m in members]
    return f"[{' '.join(parts)}]"


def _wrap_for_formula(kind: BlockKind, part: str) -> str:
    if kind in UNWRAPPED_KINDS:
        return part
    if kind is BlockKind.TEXT:
        # Drop the quotes added by format_block
        return f"[{part[1:-1]}]"
    return f"[{part}]"


def generate(sequence: Sequence[BlockInstance], flags: Optional[GenerationFlags] = None) -> str:
    """
    Generates the command string for an ordered list of blocks.

    Args:
        sequence: Blocks in workspace order.
        flags: Blind and formula mode. Defaults to both off.

    Returns:
        The generated command, or "" when no block contributes anything.
    """
    flags = flags or GenerationFlags()

    blocks = prepare_blocks(sequence)
    if not blocks:
        return ""

    pair_based_blocks(blocks)
    chains: Dict[int, int] = dict(find_modifier_chains(blocks)) if flags.formula else {}

    parts: List[str] = []
    previous_kind: Optional[BlockKind] = None
    open_groups = 0
    index = 0

    while index < len(blocks):
        if index in chains:
            stop = chains[index]
            parts.append(_render_chain(blocks[index:stop]))
            previous_kind = blocks[stop - 1].kind
            index = stop
            continue

        block = blocks[index]
        index += 1

        if block.consumed:
            previous_kind = block.kind
            continue

        if block.kind is BlockKind.GROUP_START:
            open_groups += 1
        elif block.kind is BlockKind.GROUP_END:
            if open_groups == 0:
                logger.warning("Group end without a matching group start")
            else:
                open_groups -= 1

        part = format_block(block.kind, block.content, flags.blind) + block.suffix

        if block.kind is BlockKind.TEXT and previous_kind is BlockKind.TEXT and parts:
            parts[-1] += ","

        if flags.formula:
            part = _wrap_for_formula(block.kind, part)

        parts.append(part)
        previous_kind = block.kind

    if open_groups:
        logger.warning(f"{open_groups} group(s) left open")

    kinds = {block.kind for block in blocks}
    wrap_all = BlockKind.LABEL in kinds and BlockKind.IF in kinds
    code = assemble(parts, flags.formula, wrap_all)

    logger.info(f"Generated {len(parts)} parts from {len(sequence)} blocks (formula={flags.formula})")
    return code


def assemble(parts: List[str], formula: bool, wrap_all: bool = False) -> str:
    """
    Joins formatted parts into the final command.

    A label together with an if wraps everything once, in either mode.
    Formula mode parts are already bracketed; normal mode wraps the whole
    command unless it contains an /if or /else.
    """
    if not parts:
        return ""

    joined = " ".join(parts)

    if wrap_all:
        return f"[{joined}]"

    if formula:
        return joined

    if any(part in (IF_TOKEN, ELSE_TOKEN) for part in parts):
        return joined

    return f"[{joined}]"
