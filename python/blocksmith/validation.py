"""
Workspace validation: flags suspicious block arrangements so the editor can
highlight them. Pattern rules are plain data; the matcher is generic.
"""

from typing import List, Optional, Sequence, Union

import structlog

from blocksmith.models import BlockInstance, BlockKind, Issue, Severity, ValidationRule

logger = structlog.get_logger(__name__)

VALIDATION_RULES: List[ValidationRule] = [
    ValidationRule(
        id="consecutive-if",
        name="Consecutive If Blocks",
        description="Consecutive 'If' blocks usually mean redundant logic or a structural mistake.",
        pattern=("if", "if"),
        highlight_index=-1,
        severity=Severity.WARNING,
    ),
    ValidationRule(
        id="consecutive-skills-after-label",
        name="Consecutive Skills After Label",
        description="Several skills right after a label make the command ambiguous.",
        pattern=("label", "skills", "skills"),
        highlight_index=-1,
        severity=Severity.WARNING,
    ),
    ValidationRule(
        id="multiple-consecutive-skills",
        name="Multiple Consecutive Skills",
        description="Three or more consecutive skills is an unnecessarily complex structure.",
        pattern=("skills", "skills", "skills"),
        highlight_index=-1,
        severity=Severity.ERROR,
    ),
    ValidationRule(
        id="consecutive-attributes",
        name="Consecutive Attributes",
        description="Consecutive attributes are redundant or misplaced.",
        pattern=("atributos", "atributos"),
        highlight_index=-1,
        severity=Severity.WARNING,
    ),
    ValidationRule(
        id="damage-before-attack",
        name="Damage Before Attack",
        description="Damage placed before a melee attack is probably in the wrong order.",
        pattern=("damage", "melee"),
        highlight_index=0,
        severity=Severity.WARNING,
    ),
    ValidationRule(
        id="damage-before-ranged",
        name="Damage Before Ranged",
        description="Damage placed before a ranged attack is probably in the wrong order.",
        pattern=("damage", "ranged"),
        highlight_index=0,
        severity=Severity.WARNING,
    ),
]

UNMATCHED_GROUP_START = ValidationRule(
    id="unmatched-group-start",
    name="Unmatched Group Start",
    description="A group start without a matching group end produces unbalanced braces.",
    pattern=("group-start",),
    highlight_index=0,
    severity=Severity.ERROR,
)

UNMATCHED_GROUP_END = ValidationRule(
    id="unmatched-group-end",
    name="Unmatched Group End",
    description="A group end without a matching group start produces unbalanced braces.",
    pattern=("group-end",),
    highlight_index=0,
    severity=Severity.ERROR,
)


def _tag(type_id: Union[str, BlockKind]) -> str:
    return type_id.value if isinstance(type_id, BlockKind) else type_id


def _issue(rule: ValidationRule, index: int) -> Issue:
    return Issue(
        rule_id=rule.id,
        severity=rule.severity,
        highlight_index=index,
        rule_name=rule.name,
        description=rule.description,
    )


def match_rule(rule: ValidationRule, tags: Sequence[str]) -> List[Issue]:
    """
    Slides the rule's pattern over `tags` and reports every matching window.
    """
    size = len(rule.pattern)
    offset = rule.highlight_index % size
    issues = []
    for start in range(len(tags) - size + 1):
        if tuple(tags[start : start + size]) == rule.pattern:
            issues.append(_issue(rule, start + offset))
    return issues


def check_groups(tags: Sequence[str]) -> List[Issue]:
    """
    Stack scan for group brackets. Every stray end and every start left open
    is reported at its own position.
    """
    issues = []
    open_starts: List[int] = []

    for index, tag in enumerate(tags):
        if tag == BlockKind.GROUP_START.value:
            open_starts.append(index)
        elif tag == BlockKind.GROUP_END.value:
            if open_starts:
                open_starts.pop()
            else:
                issues.append(_issue(UNMATCHED_GROUP_END, index))

    issues.extend(_issue(UNMATCHED_GROUP_START, index) for index in open_starts)
    return issues


def validate(
    type_sequence: Sequence[Union[str, BlockKind]], rules: Optional[Sequence[ValidationRule]] = None
) -> List[Issue]:
    """
    Validates a workspace given as its ordered block type ids.

    Args:
        type_sequence: Block type ids in workspace order. Unknown ids match nothing.
        rules: Pattern rules to apply. Defaults to VALIDATION_RULES.

    Returns:
        Pattern issues in rule order, followed by group bracket issues.
    """
    tags = [_tag(t) for t in type_sequence]
    if rules is None:
        rules = VALIDATION_RULES

    issues: List[Issue] = []
    for rule in rules:
        if not rule.enabled:
            continue
        issues.extend(match_rule(rule, tags))

    issues.extend(check_groups(tags))

    if issues:
        logger.info(f"Validation found {len(issues)} issue(s) in {len(tags)} blocks")
    return issues


def validate_blocks(sequence: Sequence[BlockInstance]) -> List[Issue]:
    """Validates placed blocks. Empty blocks still count, they occupy a slot in the workspace."""
    return validate([block.type_id for block in sequence])
