"""``nextforge taurify`` -- turn a Next.js app into a Tauri desktop app.

Host prerequisites (Rust toolchain, system webview libraries) are not probed;
a missing toolchain surfaces as a failing ``tauri`` subprocess.
"""

from __future__ import annotations

import asyncio
import re
from pathlib import Path
from typing import Any

from nextforge.config import Session
from nextforge.errors import PreconditionError
from nextforge.scaffolder.templates import TemplateRenderer
from nextforge.utils import load_json, print_success, run_checked, save_json, write_text

DEV_PORT = 3000
WINDOW_SIZE = (1024, 768)

LOCK_FILES: list[tuple[str, str]] = [
    ("yarn.lock", "yarn"),
    ("pnpm-lock.yaml", "pnpm"),
]


def detect_package_manager(root: Path, default: str = "npm") -> str:
    """Pick the package manager from the lock file in *root*."""
    for lock_file, manager in LOCK_FILES:
        if (root / lock_file).exists():
            return manager
    return default


def cli_install_command(package_manager: str) -> list[str]:
    if package_manager == "npm":
        return ["npm", "install", "@tauri-apps/cli", "--save-dev", "--legacy-peer-deps"]
    return [package_manager, "add", "@tauri-apps/cli", "--dev"]


def tauri_config(package: dict[str, Any], package_manager: str) -> dict[str, Any]:
    """Build ``src-tauri/tauri.conf.json`` for a statically exported Next.js app."""
    name = package.get("name") or "Next App"
    slug = re.sub(r"[^a-z0-9]", "", name.lower()) or "app"
    width, height = WINDOW_SIZE
    return {
        "build": {
            "beforeDevCommand": f"{package_manager} run dev",
            "beforeBuildCommand": f"{package_manager} run build",
            "devUrl": f"http://localhost:{DEV_PORT}",
            "frontendDist": "../out",
        },
        "identifier": f"com.{slug}.app",
        "productName": name,
        "version": package.get("version") or "0.1.0",
        "app": {
            "windows": [
                {
                    "title": name,
                    "width": width,
                    "height": height,
                    "resizable": True,
                    "fullscreen": False,
                }
            ]
        },
    }


async def taurify_app(session: Session, package_manager: str | None = None) -> Path:
    """Convert the app in the working directory.

    Returns:
        Path of the written ``tauri.conf.json``.

    Raises:
        PreconditionError: If there is no ``package.json`` or it does not
            depend on ``next``.
        CommandError: If installing or initialising the Tauri CLI fails.
    """
    root = session.working_dir
    pkg_path = root / "package.json"
    if not pkg_path.exists():
        raise PreconditionError(f"No package.json found in {root}; run this inside a Next.js project")
    package = await asyncio.to_thread(load_json, pkg_path)
    if "next" not in (package.get("dependencies") or {}):
        raise PreconditionError("This does not appear to be a Next.js project (no 'next' dependency)")

    pm = package_manager or detect_package_manager(root, session.settings.package_manager)
    install = cli_install_command(pm)
    await run_checked(
        install,
        cwd=root,
        label="tauri",
        remediation=" ".join(install),
        on_line=session.sink,
    )
    print_success("Installed @tauri-apps/cli")

    next_config = TemplateRenderer().render("extras/next.config.tauri.mjs.j2", {"dev_port": DEV_PORT})
    await asyncio.to_thread(write_text, root / "next.config.mjs", next_config)
    print_success("Updated next.config.mjs")

    init = ["npx", "@tauri-apps/cli", "init", "--ci"]
    await run_checked(
        init,
        cwd=root,
        label="tauri",
        remediation=" ".join(init[:-1]),
        on_line=session.sink,
    )

    config_path = root / "src-tauri" / "tauri.conf.json"
    await save_json(tauri_config(package, pm), config_path)
    print_success("Updated tauri.conf.json")

    package["scripts"] = {**(package.get("scripts") or {}), "tauri": "tauri"}
    await save_json(package, pkg_path)
    print_success("Updated package.json scripts")
    return config_path
