"""
Tests for blocksmith.validation — rule table and group bracket checks.

Run: python3 test_validation.py
From: python/
"""

import sys

from pydantic import ValidationError

sys.path.insert(0, '.')

from blocksmith.models import BlockInstance, BlockKind, Severity, ValidationRule
from blocksmith.validation import VALIDATION_RULES, check_groups, match_rule, validate, validate_blocks


def _ids(issues):
    return [(i.rule_id, i.highlight_index) for i in issues]


def test_empty_input():
    assert validate([]) == []
    assert check_groups([]) == []
    print("PASS: test_empty_input")


def test_clean_sequence():
    assert validate(["label", "skills", "mod", "or", "skills", "damage"]) == []
    print("PASS: test_clean_sequence")


def test_three_skills_is_error_on_last():
    issues = validate(["skills", "skills", "skills"])
    errors = [i for i in issues if i.severity == Severity.ERROR]
    assert len(errors) == 1
    assert errors[0].rule_id == "multiple-consecutive-skills"
    assert errors[0].highlight_index == 2
    print("PASS: test_three_skills_is_error_on_last")


def test_overlapping_matches_all_reported():
    issues = validate(["label", "skills", "skills", "skills", "skills"])
    assert _ids(issues) == [
        ("consecutive-skills-after-label", 2),
        ("multiple-consecutive-skills", 3),
        ("multiple-consecutive-skills", 4),
    ]
    print("PASS: test_overlapping_matches_all_reported")


def test_highlight_first_of_pattern():
    issues = validate(["skills", "damage", "melee", "damage", "ranged"])
    assert _ids(issues) == [("damage-before-attack", 1), ("damage-before-ranged", 3)]
    assert all(i.severity == Severity.WARNING for i in issues)
    print("PASS: test_highlight_first_of_pattern")


def test_consecutive_if_and_attributes():
    issues = validate(["if", "if", "if", "atributos", "atributos"])
    assert _ids(issues) == [
        ("consecutive-if", 1),
        ("consecutive-if", 2),
        ("consecutive-attributes", 4),
    ]
    print("PASS: test_consecutive_if_and_attributes")


def test_unmatched_group_start():
    issues = validate(["group-start", "group-start", "group-end"])
    assert _ids(issues) == [("unmatched-group-start", 0)]
    assert issues[0].severity == Severity.ERROR
    print("PASS: test_unmatched_group_start")


def test_unmatched_group_end():
    issues = validate(["group-end", "group-start", "group-end", "group-end"])
    assert _ids(issues) == [("unmatched-group-end", 0), ("unmatched-group-end", 3)]
    print("PASS: test_unmatched_group_end")


def test_group_issues_follow_pattern_issues():
    issues = validate(["group-start", "if", "if"])
    assert _ids(issues) == [("consecutive-if", 2), ("unmatched-group-start", 0)]
    print("PASS: test_group_issues_follow_pattern_issues")


def test_balanced_nested_groups():
    assert check_groups(["group-start", "group-start", "skills", "group-end", "group-end"]) == []
    print("PASS: test_balanced_nested_groups")


def test_unknown_tags_are_ignored():
    assert validate(["nope", "", "skills"]) == []
    print("PASS: test_unknown_tags_are_ignored")


def test_accepts_block_kinds():
    issues = validate([BlockKind.DAMAGE, BlockKind.MELEE])
    assert _ids(issues) == [("damage-before-attack", 0)]
    print("PASS: test_accepts_block_kinds")


def test_disabled_rules_are_skipped():
    rules = [r.model_copy(update={"enabled": False}) if r.id == "consecutive-if" else r for r in VALIDATION_RULES]
    assert validate(["if", "if"], rules=rules) == []
    assert len(validate(["if", "if"])) == 1
    print("PASS: test_disabled_rules_are_skipped")


def test_custom_rule_middle_highlight():
    rule = ValidationRule(
        id="or-sandwich",
        name="Or Sandwich",
        description="test",
        pattern=("skills", "or", "skills"),
        highlight_index=1,
        severity=Severity.INFO,
    )
    issues = match_rule(rule, ["mod", "skills", "or", "skills", "or", "skills"])
    assert _ids(issues) == [("or-sandwich", 2), ("or-sandwich", 4)]
    assert issues[0].severity == Severity.INFO
    print("PASS: test_custom_rule_middle_highlight")


def test_rule_rejects_highlight_outside_pattern():
    def make(highlight_index, pattern=("skills", "skills")):
        return ValidationRule(id="r", name="R", description="test", pattern=pattern, highlight_index=highlight_index)

    for index in (-2, -1, 0, 1):
        assert make(index).highlight_index == index

    for index in (2, 5, -3):
        try:
            make(index)
            assert False, f"highlight_index {index} should be rejected"
        except ValidationError:
            pass

    try:
        make(-1, pattern=())
        assert False, "an empty pattern has no block to highlight"
    except ValidationError:
        pass
    print("PASS: test_rule_rejects_highlight_outside_pattern")


def test_validate_blocks_counts_empty_blocks():
    blocks = [BlockInstance(type="skills", text="Fu"), BlockInstance(type="skills"), BlockInstance(type="skills")]
    issues = validate_blocks(blocks)
    assert ("multiple-consecutive-skills", 2) in _ids(issues)
    print("PASS: test_validate_blocks_counts_empty_blocks")


def test_issue_carries_rule_text():
    issue = validate(["damage", "ranged"])[0]
    assert issue.rule_name == "Damage Before Ranged"
    assert issue.description
    print("PASS: test_issue_carries_rule_text")


if __name__ == '__main__':
    tests = [v for k, v in sorted(globals().items()) if k.startswith("test_") and callable(v)]

    passed = 0
    failed = 0
    for t in tests:
        try:
            t()
            passed += 1
        except Exception as e:
            print(f"FAIL: {t.__name__} — {e}")
            failed += 1

    print(f"\n{'=' * 50}")
    print(f"Results: {passed} passed, {failed} failed out of {len(tests)} tests")
    if failed > 0:
        sys.exit(1)
    else:
        print("All tests passed!")
