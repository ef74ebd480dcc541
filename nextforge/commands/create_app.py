"""``nextforge create`` -- generate a new Next.js application.

Steps, in order:

1. Render the bundled ``app/`` template tree into ``<cwd>/<app_name>``,
   leaving out the Storybook and Jest files when they were not requested.
2. Rewrite ``package.json`` with the extra dev dependencies.
3. Optionally scaffold the ``tasks`` example module.
4. Install dependencies with the chosen package manager (hard stop on
   failure, with the command to run by hand).
5. Initialise Storybook (warn and continue on failure).
6. Write the README.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

from pydantic import BaseModel, Field

from nextforge.config import PackageManager, Session
from nextforge.errors import CommandError, PreconditionError
from nextforge.scaffolder.generator import EntityDescriptor, ModuleScaffolder
from nextforge.scaffolder.naming import validate_app_name
from nextforge.scaffolder.templates import TemplateRenderer
from nextforge.utils import load_json, print_success, print_warning, run_checked, save_json, write_text

STORYBOOK_VERSION = "^8.6.9"

STORYBOOK_DEV_DEPENDENCIES: dict[str, str] = {
    "storybook": STORYBOOK_VERSION,
    "@chromatic-com/storybook": "^3",
    "@storybook/addon-essentials": STORYBOOK_VERSION,
    "@storybook/addon-interactions": STORYBOOK_VERSION,
    "@storybook/addon-onboarding": STORYBOOK_VERSION,
    "@storybook/blocks": STORYBOOK_VERSION,
    "@storybook/nextjs": STORYBOOK_VERSION,
    "@storybook/react": STORYBOOK_VERSION,
    "@storybook/addon-actions": STORYBOOK_VERSION,
    "@storybook/test": STORYBOOK_VERSION,
}

TESTING_DEV_DEPENDENCIES: dict[str, str] = {
    "@testing-library/react": "^14.0.0",
    "@testing-library/jest-dom": "^6.0.0",
    "jest": "^29.0.0",
    "jest-environment-jsdom": "^29.0.0",
}

INSTALL_COMMANDS: dict[str, list[str]] = {
    "npm": ["npm", "install", "--legacy-peer-deps"],
    "yarn": ["yarn"],
    "pnpm": ["pnpm", "install"],
}

STORYBOOK_INIT_COMMANDS: dict[str, list[str]] = {
    "npm": ["npx", "storybook", "init", "--no-dev", "--skip-install"],
    "yarn": ["yarn", "storybook", "init", "--no-dev", "--skip-install"],
    "pnpm": ["pnpm", "storybook", "init", "--no-dev", "--skip-install"],
}

RUN_PREFIXES: dict[str, str] = {"npm": "npm run", "yarn": "yarn", "pnpm": "pnpm"}

STORYBOOK_PATHS = [".storybook/", "stories/"]
TESTING_PATHS = ["jest.config.mjs", "jest.setup.ts"]

# Template files whose output name differs from the template name.
RENAMED_OUTPUTS = {"gitignore": ".gitignore"}

EXAMPLE_MODULE = "tasks"
EXAMPLE_NODE = "Task"


class CreateAppOptions(BaseModel):
    """Options for ``nextforge create``."""

    app_name: str
    storybook: bool = Field(default=False, description="Include Storybook")
    testing: bool = Field(default=False, description="Include Jest and Testing Library")
    package_manager: PackageManager = "npm"
    example: bool = Field(default=False, description="Scaffold the tasks example module")
    skip_install: bool = Field(default=False, description="Do not run the package manager")
    api_url: str = Field(default="http://localhost:8000/api")


class CreateAppResult(BaseModel):
    path: Path
    files: list[str] = Field(default_factory=list)
    installed: bool = False
    storybook_initialized: bool = False


async def create_app(session: Session, options: CreateAppOptions) -> CreateAppResult:
    """Create a new application directory under the session's working directory.

    Raises:
        InvalidNameError: If the app name is not a valid package name.
        PreconditionError: If the template tree is missing or the target
            directory already exists and is not empty.
        CommandError: If dependency installation fails.
    """
    app_name = validate_app_name(options.app_name)
    target = session.working_dir / app_name
    if target.exists() and any(target.iterdir()):
        raise PreconditionError(f"Directory {target} already exists and is not empty")

    renderer = TemplateRenderer()
    if not renderer.has_tree("app"):
        raise PreconditionError(f"Template directory not found: {renderer.template_dir / 'app'}")

    skip = [] if options.storybook else list(STORYBOOK_PATHS)
    if not options.testing:
        skip += TESTING_PATHS
    context = {
        "app_name": app_name,
        "storybook": options.storybook,
        "testing": options.testing,
        "api_url": options.api_url,
    }
    rendered = renderer.render_tree("app", context, skip_prefixes=skip)

    written: list[str] = []
    for rel, content in rendered.items():
        out_name = RENAMED_OUTPUTS.get(rel, rel)
        await asyncio.to_thread(write_text, target / out_name, content)
        written.append(out_name)
    print_success(f"Created {app_name} from template ({len(written)} files)")

    await update_package_json(target / "package.json", storybook=options.storybook, testing=options.testing)

    if options.example:
        written += await _scaffold_example(target, app_name, renderer)

    result = CreateAppResult(path=target, files=written)
    pm = options.package_manager
    if not options.skip_install:
        install = INSTALL_COMMANDS[pm]
        await run_checked(
            install,
            cwd=target,
            label="install",
            remediation=f"cd {app_name} && {' '.join(install)}",
            on_line=session.sink,
        )
        result.installed = True
        print_success("Dependencies installed successfully!")

        if options.storybook:
            result.storybook_initialized = await _init_storybook(session, target, app_name, pm)

    readme = renderer.render(
        "extras/README.md.j2",
        {
            "app_name": app_name,
            "installed": result.installed,
            "package_manager": pm,
            "install_command": " ".join(INSTALL_COMMANDS[pm]),
            "run_prefix": RUN_PREFIXES[pm],
            "storybook": options.storybook,
            "testing": options.testing,
            "example": options.example,
        },
    )
    await asyncio.to_thread(write_text, target / "README.md", readme)
    result.files.append("README.md")
    return result


async def update_package_json(path: Path, *, storybook: bool, testing: bool) -> dict:
    """Merge the optional dev dependencies into ``package.json``.

    Storybook packages go first so that versions already pinned in the file
    win; testing packages are layered on top.
    """
    pkg = await asyncio.to_thread(load_json, path)
    dev_deps = dict(pkg.get("devDependencies") or {})
    if storybook:
        dev_deps = {**STORYBOOK_DEV_DEPENDENCIES, **dev_deps}
    if testing:
        dev_deps = {**dev_deps, **TESTING_DEV_DEPENDENCIES}
    pkg["devDependencies"] = dev_deps
    await save_json(pkg, path)
    return pkg


async def _scaffold_example(target: Path, app_name: str, renderer: TemplateRenderer) -> list[str]:
    descriptor = EntityDescriptor.for_module(EXAMPLE_MODULE, node=EXAMPLE_NODE)
    result = await ModuleScaffolder(target, renderer).scaffold_module(descriptor)
    home = renderer.render(
        "extras/example_home_page.tsx.j2",
        {"app_name": app_name, "route_path": descriptor.route_path},
    )
    await asyncio.to_thread(write_text, target / "app" / "page.tsx", home)
    return result.files


async def _init_storybook(session: Session, target: Path, app_name: str, pm: str) -> bool:
    command = STORYBOOK_INIT_COMMANDS[pm]
    try:
        await run_checked(
            command,
            cwd=target,
            label="storybook",
            remediation=f"cd {app_name} && {' '.join(command)}",
            on_line=session.sink,
        )
    except CommandError as exc:
        print_warning(f"Failed to initialize Storybook: {exc}")
        print_warning(f"You can initialize it manually: {exc.remediation}")
        return False
    print_success("Storybook initialized successfully!")
    return True
