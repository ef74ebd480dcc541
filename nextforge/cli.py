"""Command-line entry point for ``nextforge``.

Usage::

    nextforge my-app --storybook true --package-manager pnpm
    nextforge add-module products --node-type "id:string,name:string,price:number"
    nextforge add-node products Review --apis list,create --auth no
    nextforge cleanup
    nextforge taurify
    nextforge verify products
    nextforge workdir ~/code/my-app
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from pydantic import ValidationError
from rich.markup import escape

from nextforge import __version__
from nextforge.commands import (
    CreateAppOptions,
    add_module,
    add_node,
    cleanup_app,
    create_app,
    set_working_directory,
    taurify_app,
    verify_entity,
)
from nextforge.commands.create_app import INSTALL_COMMANDS, RUN_PREFIXES
from nextforge.config import Session, Settings, settings_path
from nextforge.errors import CommandError, ForgeError
from nextforge.scaffolder.generator import ScaffoldResult
from nextforge.utils import (
    console,
    print_error,
    print_next_steps,
    print_success,
    print_summary_table,
    print_warning,
)
from nextforge.verify import has_errors, render_results, scan_generated_files

COMMANDS = {"create", "add-module", "add-node", "cleanup", "taurify", "verify", "workdir"}
PACKAGE_MANAGERS = ["npm", "yarn", "pnpm"]

_TRUE_VALUES = {"true", "yes", "y", "1", "on"}
_FALSE_VALUES = {"false", "no", "n", "0", "off"}


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------


def bool_arg(value: str) -> bool:
    """argparse type for ``--storybook true`` style flags."""
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise argparse.ArgumentTypeError(f"expected true or false, got '{value}'")


def _add_entity_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--apis",
        default=None,
        help="Comma-separated operations (default: getAll,getById,create,update,delete)",
    )
    parser.add_argument(
        "--node-type",
        default=None,
        help="Comma-separated name:type fields, e.g. 'id:string,status:active|inactive'",
    )
    parser.add_argument(
        "--auth",
        default=None,
        help="Use the authenticated API client: yes|no (default: yes)",
    )
    parser.add_argument(
        "--api-base",
        default=None,
        help="Base path for generated service calls",
    )
    parser.add_argument(
        "--strict-types",
        action="store_true",
        help="Reject unrecognised field types instead of rendering them as 'any'",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nextforge",
        description="Scaffold Next.js applications, modules and nodes",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  nextforge my-app --storybook true --testinglibrary false\n"
            "  nextforge add-module products --path dashboard/products\n"
            "  nextforge add-node products Review --apis list,create\n"
        ),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--cwd",
        type=Path,
        default=None,
        help="Project directory for this invocation (overrides the saved working directory)",
    )
    sub = parser.add_subparsers(dest="command")

    create = sub.add_parser("create", help="Create a new Next.js application")
    create.add_argument("app_name", help="Directory and package name of the new app")
    create.add_argument("--storybook", type=bool_arg, nargs="?", const=True, default=False, metavar="BOOL")
    create.add_argument("--testinglibrary", type=bool_arg, nargs="?", const=True, default=False, metavar="BOOL")
    create.add_argument("--package-manager", choices=PACKAGE_MANAGERS, default=None)
    create.add_argument("--example", action="store_true", help="Include the tasks example module")
    create.add_argument("--skip-install", action="store_true", help="Do not install dependencies")

    module = sub.add_parser("add-module", help="Add a module with its default node")
    module.add_argument("module", help="Module directory name under modules/")
    module.add_argument("--node", default=None, help="Node name (default: the module name in PascalCase)")
    module.add_argument("--path", dest="route_path", default=None, help="Route under app/")
    _add_entity_options(module)

    node = sub.add_parser("add-node", help="Add a node to an existing module")
    node.add_argument("module", help="Existing module name")
    node.add_argument("node", help="Node name, e.g. Review")
    _add_entity_options(node)

    sub.add_parser("cleanup", help="Remove the tasks example from the current app")

    taurify = sub.add_parser("taurify", help="Convert the current Next.js app to a Tauri app")
    taurify.add_argument("--package-manager", choices=PACKAGE_MANAGERS, default=None)

    verify = sub.add_parser("verify", help="Check the files of a generated module or node")
    verify.add_argument("module")
    verify.add_argument("--node", default=None, help="Check a node added with add-node")
    verify.add_argument("--module-node", default=None, help="Node name passed to add-module --node")
    verify.add_argument("--path", dest="route_path", default=None, help="Route passed to add-module --path")

    workdir = sub.add_parser("workdir", help="Show or set the saved working directory")
    workdir.add_argument("path", nargs="?", type=Path, default=None)
    workdir.add_argument("--clear", action="store_true", help="Forget the saved directory")

    return parser


def normalize_argv(argv: list[str]) -> list[str]:
    """Treat ``nextforge <app_name> ...`` as ``nextforge create <app_name> ...``."""
    index = 0
    while index < len(argv):
        token = argv[index]
        if token == "--cwd":
            index += 2
            continue
        if token.startswith("--cwd="):
            index += 1
            continue
        if token.startswith("-"):
            return argv
        if token not in COMMANDS:
            return argv[:index] + ["create"] + argv[index:]
        return argv
    return argv


# ---------------------------------------------------------------------------
# Command dispatch
# ---------------------------------------------------------------------------


def load_session(args: argparse.Namespace) -> Session:
    settings = Settings.from_env(Settings.load())
    return Session(settings=settings, cwd=args.cwd)


def _report_scaffold(session: Session, result: ScaffoldResult, title: str) -> None:
    print_success(title)
    for path in result.files:
        console.print(f"  [dim]{escape(path)}[/dim]")
    if not result.store.reducer_registered:
        print_warning(f"Register '{result.reducer_name}' in store/index.ts by hand")
    root = session.working_dir
    render_results(
        scan_generated_files(root, result.files, root / "store" / "index.ts", result.reducer_name)
    )


async def _dispatch(args: argparse.Namespace, session: Session) -> int:
    command = args.command

    if command == "create":
        options = CreateAppOptions(
            app_name=args.app_name,
            storybook=args.storybook,
            testing=args.testinglibrary,
            package_manager=args.package_manager or session.settings.package_manager,
            example=args.example,
            skip_install=args.skip_install,
        )
        created = await create_app(session, options)
        run = RUN_PREFIXES[options.package_manager]
        print_summary_table(
            {
                "Path": str(created.path),
                "Files": str(len(created.files)),
                "Dependencies installed": "yes" if created.installed else "no",
                "Storybook": "yes" if options.storybook else "no",
                "Testing Library": "yes" if options.testing else "no",
            },
            title=f"{options.app_name} created",
        )
        steps = [f"cd {options.app_name}"]
        if not created.installed:
            steps.append(" ".join(INSTALL_COMMANDS[options.package_manager]))
        steps.append(f"{run} dev")
        if options.storybook:
            steps.append(f"{run} storybook")
        print_next_steps("Next steps", steps)
        return 0

    if command == "add-module":
        result = await add_module(
            session,
            args.module,
            node=args.node,
            route_path=args.route_path,
            apis=args.apis,
            node_type=args.node_type,
            auth=args.auth,
            api_base=args.api_base,
            strict_types=args.strict_types,
        )
        _report_scaffold(session, result, f"Module {args.module} created successfully!")
        print_next_steps(
            "Next steps",
            [
                "Review the generated node type under nodes/",
                "Add request validation with the generated Zod schema",
                "Implement error handling and loading states in the page",
            ],
        )
        return 0

    if command == "add-node":
        result = await add_node(
            session,
            args.module,
            args.node,
            apis=args.apis,
            node_type=args.node_type,
            auth=args.auth,
            api_base=args.api_base,
            strict_types=args.strict_types,
        )
        _report_scaffold(session, result, f"Node {args.node} added to module {args.module}")
        print_next_steps(
            "Next steps",
            [
                f"Use the hooks from modules/{args.module}/hooks in your pages",
                "Implement error handling and loading states",
            ],
        )
        return 0

    if command == "cleanup":
        cleaned = await cleanup_app(session)
        if cleaned.failed:
            print_warning(f"Could not remove: {', '.join(cleaned.failed)}")
        print_success("Cleanup complete")
        return 0

    if command == "taurify":
        config_path = await taurify_app(session, args.package_manager)
        print_summary_table({"Tauri config": str(config_path)}, title="Tauri")
        print_next_steps("Next steps", ["npm run tauri dev", "npm run tauri build"])
        return 0

    if command == "verify":
        results = verify_entity(
            session, args.module, node=args.node, module_node=args.module_node, route_path=args.route_path
        )
        render_results(results)
        return 1 if has_errors(results) else 0

    if command == "workdir":
        if args.clear or args.path is not None:
            updated = set_working_directory(session.settings, None if args.clear else args.path)
            shown = updated.working_directory or "(not set)"
            print_success(f"Working directory: {shown} (saved to {settings_path()})")
        else:
            console.print(f"Working directory: {escape(str(session.working_dir))}")
        return 0

    raise ForgeError(f"Unknown command: {command}")


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``nextforge`` and ``python -m nextforge``."""
    parser = build_parser()
    raw = list(sys.argv[1:] if argv is None else argv)
    args = parser.parse_args(normalize_argv(raw))

    if not args.command:
        parser.print_help()
        sys.exit(1)

    try:
        session = load_session(args)
        exit_code = asyncio.run(_dispatch(args, session))
    except ForgeError as exc:
        remediation = exc.remediation if isinstance(exc, CommandError) else ""
        print_error(str(exc), remediation=remediation)
        sys.exit(1)
    except ValidationError as exc:
        print_error(f"Invalid settings: {exc}")
        sys.exit(1)

    if exit_code:
        sys.exit(exit_code)


if __name__ == "__main__":
    main()
