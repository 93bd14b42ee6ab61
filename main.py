#!/usr/bin/env python3
"""Sequential file generation with compile-driven repair.

Usage:
    python main.py build --plan plan.json --workspace ./app
    python main.py build --plan plan.json --workspace ./app --prompt "a todo app" --verbose
    python main.py build --plan plan.json --workspace ./app --max-fix-attempts 3 --output ./export
    python main.py validate --workspace ./app src/App.tsx src/components/Header.tsx
"""

import argparse
import logging
import sys

from core.compiler import TscCompiler
from core.file_store import LocalFileStore
from core.guards import check_dependencies, normalize_path
from core.imports import validate
from core.orchestrator import Orchestrator
from core.plan import load_plan


def _print_status(update):
    if update.progress is not None:
        print(f"[{update.progress:3d}%] {update.message}")


def cmd_build(args):
    """Run the pipeline against a project directory."""
    tasks, plan_context = load_plan(args.plan)
    if not tasks:
        print("Plan contains no tasks.")
        return 1

    store = LocalFileStore(args.workspace)
    orchestrator = Orchestrator(
        store,
        TscCompiler(args.workspace),
        max_task_attempts=args.max_task_attempts,
        max_fix_attempts=args.max_fix_attempts,
        on_status=_print_status,
    )
    result = orchestrator.run(tasks, plan_context=plan_context, user_prompt=args.prompt or "")

    print(f"\nAccepted {len(result.accepted)}/{len(tasks)} file(s):")
    for r in result.task_results:
        marker = "OK  " if r.accepted else "FAIL"
        print(f"  [{marker}] {r.task.file}  (attempts: {r.attempts}, fixes: {r.fix_attempts})")
        if not r.accepted and args.verbose:
            for err in r.errors:
                print(f"         {err}")

    if args.output:
        written = orchestrator.write_files(result, args.output)
        print(f"\nWrote {len(written)} file(s) to {args.output}")

    return 1 if result.failed else 0


def cmd_validate(args):
    """Run the import and dependency guards over existing files. No oracle calls."""
    store = LocalFileStore(args.workspace)
    ctx = Orchestrator(store, compiler=None).create_context()

    problems = 0
    for file_path in args.files:
        path = normalize_path(file_path)
        if not store.exists(path):
            problems += 1
            print(f"{path}: not found")
            continue
        content = store.read(path)
        issues = validate(path, content, ctx)
        if ctx.declared_dependencies is not None:
            issues += [f"Undeclared package: {name}"
                       for name in check_dependencies(content, ctx.declared_dependencies)]
        if issues:
            problems += len(issues)
            print(f"{path}:")
            for issue in issues:
                print(f"  - {issue}")
        else:
            print(f"{path}: ok")
    return 1 if problems else 0


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="gencompile",
        description="Generate a project file by file and repair it until it compiles",
    )
    subparsers = parser.add_subparsers(dest="command")

    build_parser = subparsers.add_parser("build", help="Generate every task in a plan")
    build_parser.add_argument("--plan", required=True, help="Planner JSON file (task_flow)")
    build_parser.add_argument("--workspace", required=True, help="Project directory (with package.json)")
    build_parser.add_argument("--prompt", help="Original natural language request")
    build_parser.add_argument("--max-task-attempts", type=int,
                              help="Generation attempts per task (default: 5, max: 10)")
    build_parser.add_argument("--max-fix-attempts", type=int,
                              help="Repair attempts per generated draft (default: 5, max: 10)")
    build_parser.add_argument("--output", help="Also copy accepted files to this directory")
    build_parser.add_argument("--verbose", action="store_true", help="Debug logging and failure details")

    validate_parser = subparsers.add_parser("validate", help="Check imports of existing files")
    validate_parser.add_argument("--workspace", required=True, help="Project directory")
    validate_parser.add_argument("files", nargs="+", help="Project-relative file paths")
    validate_parser.add_argument("--verbose", action="store_true", help="Debug logging")

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "build":
        return cmd_build(args)
    return cmd_validate(args)


if __name__ == "__main__":
    sys.exit(main())
