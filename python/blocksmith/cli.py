import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from blocksmith import __version__
from blocksmith.logs import configure_logging
from blocksmith.models import GenerationFlags, Issue, Severity
from blocksmith.registry import palette
from blocksmith.validation import validate_blocks
from blocksmith.workspace import Workspace, load_workspace, render


SEVERITY_MARKERS = {
    Severity.ERROR: "!",
    Severity.WARNING: "⚠",
    Severity.INFO: "i",
}


def _read_workspace(path: Path) -> Workspace:
    try:
        return load_workspace(path)
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def _resolve_flags(workspace: Workspace, args: argparse.Namespace) -> GenerationFlags:
    """Command line switches turn modes on; they never turn off what the document enables."""
    flags = GenerationFlags(
        blind=workspace.blind or args.blind,
        formula=workspace.formula or args.formula,
    )
    return flags.exclusive()


def _format_issue(issue: Issue, workspace: Workspace) -> str:
    marker = SEVERITY_MARKERS[issue.severity]
    block = workspace.blocks[issue.highlight_index]
    return (
        f"[{marker}] {issue.severity.value}: {issue.rule_name} "
        f"(block {issue.highlight_index}: {block.type_id.value}) - {issue.description}"
    )


def _print_issues(issues: List[Issue], workspace: Workspace, as_json: bool):
    if as_json:
        print(json.dumps([i.model_dump(mode="json") for i in issues], indent=2))
        return

    print(f"Found {len(issues)} issues:", file=sys.stderr)
    for issue in issues:
        print(_format_issue(issue, workspace))


def handle_generate(args):
    workspace = _read_workspace(args.input)
    result = render(workspace, _resolve_flags(workspace, args))

    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(result.code)
        print(f"✅ Saved command to {args.output}", file=sys.stderr)
    else:
        print(result.code)


def handle_validate(args):
    workspace = _read_workspace(args.input)
    issues = validate_blocks(workspace.blocks)
    _print_issues(issues, workspace, args.json)


def handle_check(args):
    """Handler for the 'check' subcommand: the full editor pass."""
    workspace = _read_workspace(args.input)
    result = render(workspace, _resolve_flags(workspace, args))

    if args.json:
        print(json.dumps(result.model_dump(mode="json"), indent=2))
    else:
        print(result.code)
        _print_issues(result.issues, workspace, as_json=False)

    if result.has_errors:
        sys.exit(1)


def handle_blocks(args):
    blocks = palette(formula=args.formula)
    if args.json:
        output = [dict(b.model_dump(mode="json"), editable=b.editable) for b in blocks]
        print(json.dumps(output, indent=2))
        return

    for b in blocks:
        fixed = f" -> {b.fixed_content}" if b.fixed_content is not None else ""
        print(f"{b.kind.value:<12} {b.label:<14} {b.description}{fixed}")


def _add_mode_flags(parser: argparse.ArgumentParser):
    parser.add_argument("--blind", action="store_true", help="Blind roll: hide the result (prefixes data with '!')")
    parser.add_argument("--formula", action="store_true", help="Formula mode: bracket each block individually")


def main(argv: Optional[Sequence[str]] = None):
    parser = argparse.ArgumentParser(prog="blocksmith", description="Blocksmith: block-based OtF command generator")
    parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log generation steps to stderr")
    subparsers = parser.add_subparsers(dest="command", required=True, help="Subcommands")

    p_generate = subparsers.add_parser("generate", help="Generate the command for a workspace file")
    p_generate.add_argument("input", type=Path, help="Workspace JSON file")
    p_generate.add_argument("-o", "--output", type=Path, help="Output file (default: stdout)")
    _add_mode_flags(p_generate)
    p_generate.set_defaults(func=handle_generate)

    p_validate = subparsers.add_parser("validate", help="List suspicious block arrangements")
    p_validate.add_argument("input", type=Path, help="Workspace JSON file")
    p_validate.add_argument("--json", action="store_true", help="Output raw JSON issues")
    p_validate.set_defaults(func=handle_validate)

    p_check = subparsers.add_parser("check", help="Generate and validate; exit 1 on errors")
    p_check.add_argument("input", type=Path, help="Workspace JSON file")
    p_check.add_argument("--json", action="store_true", help="Output code and issues as JSON")
    _add_mode_flags(p_check)
    p_check.set_defaults(func=handle_check)

    p_blocks = subparsers.add_parser("blocks", help="List the available block types")
    p_blocks.add_argument("--formula", action="store_true", help="Include formula-only blocks")
    p_blocks.add_argument("--json", action="store_true", help="Output as JSON")
    p_blocks.set_defaults(func=handle_blocks)

    args = parser.parse_args(argv)
    configure_logging(logging.DEBUG if args.verbose else logging.WARNING)
    args.func(args)


if __name__ == "__main__":
    main()
