"""Module and node scaffolding.

Rendering is split from writing.  ``render_module`` and ``render_node`` are
pure functions of an ``EntityDescriptor`` that return a ``GeneratedFileSet``
built entirely in memory; ``ModuleScaffolder`` then creates the fixed
directory layout, writes the set (overwriting without prompting) and
registers the new reducer in ``store/index.ts``.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

from pydantic import BaseModel, Field

from nextforge.errors import InvalidNameError, PreconditionError
from nextforge.utils import ensure_dir, write_text
from .fields import (
    FieldSpec,
    parse_node_type,
    render_type_definition,
    render_zod_schema,
)
from .naming import (
    to_pascal,
    validate_identifier,
    validate_path_segment,
    validate_route_path,
)
from .services import (
    api_client_name,
    canonical_operation,
    parse_operations,
    render_service_methods,
    validate_operations,
)
from .store import PatchResult, register_reducer
from .templates import TemplateRenderer

# Subdirectories every module gets, created with "ensure exists" semantics.
MODULE_SUBDIRS: tuple[str, ...] = ("actions", "hooks", "pages", "schemas", "services", "utils")

# Index files that receive an ``export *`` line when a node is added.
NODE_INDEX_FILES: dict[str, str] = {
    "actions": "actions",
    "hooks": "hooks",
    "services": "api",
    "schemas": "schema",
}


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------


class EntityDescriptor(BaseModel):
    """Everything needed to render one module or node."""

    module: str = Field(..., description="Module directory name under modules/")
    name: str = Field(..., description="Node identifier, e.g. 'Product'")
    fields: list[FieldSpec] = Field(default_factory=list)
    operations: list[str] = Field(default_factory=list)
    auth: bool = Field(default=True)
    api_base: str = Field(..., description="Base path the service methods call")
    route_path: str = Field(default="", description="Next.js route under app/ (modules only)")

    @property
    def state_key(self) -> str:
        """Lower-cased name used for the slice file, reducer and store key."""
        return self.name.lower()

    @property
    def module_dir(self) -> str:
        return f"modules/{self.module}"

    def check(self) -> None:
        """Validate every user-supplied name that ends up in generated code.

        Raises:
            InvalidNameError: On an unusable module, node, route or operation.
        """
        validate_path_segment(self.module)
        validate_identifier(self.name, "node name")
        validate_identifier(self.state_key, "node name (lower-cased)")
        if self.route_path:
            validate_route_path(self.route_path)
        validate_operations(self.operations)
        names = [f.name for f in self.fields]
        if len(names) != len(set(names)):
            raise InvalidNameError(f"Duplicate field names in {self.name}: {names}")

    @classmethod
    def for_module(
        cls,
        module: str,
        *,
        node: str | None = None,
        route_path: str | None = None,
        apis: str | None = None,
        node_type: str | None = None,
        auth: bool = True,
        api_base: str | None = None,
        strict_types: bool = False,
    ) -> "EntityDescriptor":
        """Build a descriptor from ``add-module`` options.

        The node name defaults to the PascalCased module name, the API base
        to ``/<node>s`` and the route to the lower-cased module name.
        """
        module = validate_path_segment(module)
        name = node.strip() if node and node.strip() else to_pascal(module)
        descriptor = cls(
            module=module,
            name=name,
            fields=parse_node_type(node_type, strict=strict_types),
            operations=parse_operations(apis),
            auth=auth,
            api_base=api_base or f"/{name.lower()}s",
            route_path=validate_route_path(route_path or module.lower()),
        )
        descriptor.check()
        return descriptor

    @classmethod
    def for_node(
        cls,
        module: str,
        node: str,
        *,
        apis: str | None = None,
        node_type: str | None = None,
        auth: bool = True,
        api_base: str | None = None,
        strict_types: bool = False,
    ) -> "EntityDescriptor":
        """Build a descriptor from ``add-node`` options.

        Node endpoints live under the module's base path:
        ``<api_base or /module>/<node>s``.
        """
        module = validate_path_segment(module)
        base = (api_base or f"/{module.lower()}").rstrip("/")
        descriptor = cls(
            module=module,
            name=node.strip(),
            fields=parse_node_type(node_type, strict=strict_types),
            operations=parse_operations(apis),
            auth=auth,
            api_base=f"{base}/{node.strip().lower()}s",
        )
        descriptor.check()
        return descriptor


class GeneratedFileSet:
    """Relative path -> content mapping, built in memory before any write.

    ``appends`` holds lines to add to files that may already exist (module
    index files); they are created when absent.
    """

    def __init__(self) -> None:
        self.files: dict[str, str] = {}
        self.appends: dict[str, str] = {}

    def add(self, path: str, content: str) -> None:
        self.files[path] = content

    def append(self, path: str, line: str) -> None:
        self.appends[path] = line

    def paths(self) -> list[str]:
        """Every path this set touches, files first, in insertion order."""
        return list(self.files) + [p for p in self.appends if p not in self.files]

    def __getitem__(self, path: str) -> str:
        return self.files[path]

    def __contains__(self, path: object) -> bool:
        return path in self.files

    def __len__(self) -> int:
        return len(self.files)

    async def write(self, root: Path) -> list[Path]:
        """Write every file under *root*, then apply appends.

        Existing files are overwritten unconditionally.  The writes are not
        transactional: a failure part-way leaves earlier files in place.
        """
        written: list[Path] = []
        for rel, content in self.files.items():
            target = root / rel
            await asyncio.to_thread(write_text, target, content)
            written.append(target)
        for rel, line in self.appends.items():
            target = root / rel
            await asyncio.to_thread(_append_line, target, line)
            written.append(target)
        return written


class ScaffoldResult(BaseModel):
    """What a scaffold run wrote and how the store patch went."""

    files: list[str] = Field(default_factory=list, description="Paths relative to the project root")
    reducer_name: str = Field(..., description="Store key the reducer was registered under")
    store: PatchResult


# ---------------------------------------------------------------------------
# Pure rendering
# ---------------------------------------------------------------------------


def build_context(descriptor: EntityDescriptor, *, node_mode: bool) -> dict[str, object]:
    """Build the Jinja2 template context for one entity."""
    name = descriptor.name
    lower = descriptor.state_key
    module = descriptor.module
    fields = descriptor.fields

    if node_mode:
        services_import = f"../services/{lower}-api"
        actions_import = f"../actions/{lower}-actions"
        slice_actions_import = f"@/modules/{module}/actions/{lower}-actions"
        slice_name = f"{module.lower()}/{lower}"
    else:
        services_import = "../services"
        actions_import = "../actions"
        slice_actions_import = f"@/modules/{module}/actions"
        slice_name = lower

    has_id = any(f.name == "id" for f in fields)
    return {
        "name": name,
        "module": module,
        "state_key": lower,
        "auth": descriptor.auth,
        "api_client": api_client_name(descriptor.auth),
        "node_import": f"@/nodes/{lower}-node",
        "services_import": services_import,
        "actions_import": actions_import,
        "slice_actions_import": slice_actions_import,
        "slice_name": slice_name,
        "has_list": any(canonical_operation(op) == "list" for op in descriptor.operations),
        "type_definition": render_type_definition(fields),
        "zod_schema": render_zod_schema(fields),
        "service_methods": render_service_methods(
            name, descriptor.api_base, descriptor.auth, descriptor.operations
        ),
        "date_fields": [f.name for f in fields if _is_date_like(f)],
        "display_fields": [f.name for f in fields if f.name != "id"][:3],
        "item_key": "item.id" if has_id else "index",
        "route_path": descriptor.route_path,
    }


def render_module(
    descriptor: EntityDescriptor, renderer: TemplateRenderer | None = None
) -> GeneratedFileSet:
    """Render the full file set for ``add-module``."""
    renderer = renderer or TemplateRenderer()
    ctx = build_context(descriptor, node_mode=False)
    mod = descriptor.module_dir
    lower = descriptor.state_key
    name = descriptor.name

    files = GeneratedFileSet()
    files.add(f"nodes/{lower}-node.ts", renderer.render("entity/node.ts.j2", ctx))
    files.add(f"{mod}/index.ts", renderer.render("entity/module_index.ts.j2", ctx))
    files.add(f"{mod}/actions/index.ts", renderer.render("entity/actions.ts.j2", ctx))
    files.add(f"{mod}/hooks/index.ts", renderer.render("entity/hooks.ts.j2", ctx))
    files.add(f"{mod}/services/index.ts", renderer.render("entity/service.ts.j2", ctx))
    files.add(f"{mod}/schemas/index.ts", renderer.render("entity/schema.ts.j2", ctx))
    files.add(f"{mod}/utils/index.ts", renderer.render("entity/utils.ts.j2", ctx))
    files.add(f"{mod}/pages/{name}Page.tsx", renderer.render("entity/page.tsx.j2", ctx))
    files.add(f"store/{lower}Slice.ts", renderer.render("entity/slice.ts.j2", ctx))
    route = descriptor.route_path
    files.add(f"app/{route}/page.tsx", renderer.render("entity/route_page.tsx.j2", ctx))
    files.add(f"app/{route}/layout.tsx", renderer.render("entity/route_layout.tsx.j2", ctx))
    return files


def render_node(
    descriptor: EntityDescriptor, renderer: TemplateRenderer | None = None
) -> GeneratedFileSet:
    """Render the per-node file set for ``add-node``."""
    renderer = renderer or TemplateRenderer()
    ctx = build_context(descriptor, node_mode=True)
    mod = descriptor.module_dir
    lower = descriptor.state_key

    files = GeneratedFileSet()
    files.add(f"nodes/{lower}-node.ts", renderer.render("entity/node.ts.j2", ctx))
    files.add(f"{mod}/services/{lower}-api.ts", renderer.render("entity/service.ts.j2", ctx))
    files.add(f"{mod}/actions/{lower}-actions.ts", renderer.render("entity/actions.ts.j2", ctx))
    files.add(f"{mod}/hooks/{lower}-hooks.ts", renderer.render("entity/hooks.ts.j2", ctx))
    files.add(f"{mod}/schemas/{lower}-schema.ts", renderer.render("entity/schema.ts.j2", ctx))
    files.add(f"store/{lower}Slice.ts", renderer.render("entity/slice.ts.j2", ctx))
    for subdir, suffix in NODE_INDEX_FILES.items():
        files.append(f"{mod}/{subdir}/index.ts", f"export * from './{lower}-{suffix}';")
    return files


# ---------------------------------------------------------------------------
# Writer
# ---------------------------------------------------------------------------


class ModuleScaffolder:
    """Writes rendered entities into a Next.js project rooted at *root*."""

    def __init__(self, root: Path, renderer: TemplateRenderer | None = None) -> None:
        self.root = Path(root)
        self.renderer = renderer or TemplateRenderer()

    @property
    def store_path(self) -> Path:
        return self.root / "store" / "index.ts"

    async def scaffold_module(self, descriptor: EntityDescriptor) -> ScaffoldResult:
        """Create the module layout, write its files and register its reducer."""
        files = render_module(descriptor, self.renderer)
        await self._ensure_layout(descriptor.module)
        await files.write(self.root)
        patch = await register_reducer(self.store_path, descriptor.state_key)
        return ScaffoldResult(files=files.paths(), reducer_name=descriptor.state_key, store=patch)

    async def scaffold_node(self, descriptor: EntityDescriptor) -> ScaffoldResult:
        """Add a node to an existing module.

        Raises:
            PreconditionError: If the module directory does not exist.
        """
        module_dir = self.root / descriptor.module_dir
        if not module_dir.is_dir():
            raise PreconditionError(f"Module {descriptor.module} does not exist")
        files = render_node(descriptor, self.renderer)
        await self._ensure_layout(descriptor.module)
        await files.write(self.root)
        patch = await register_reducer(self.store_path, descriptor.state_key)
        return ScaffoldResult(files=files.paths(), reducer_name=descriptor.state_key, store=patch)

    async def _ensure_layout(self, module: str) -> None:
        dirs = [self.root / "modules" / module / sub for sub in MODULE_SUBDIRS]
        dirs += [self.root / "nodes", self.root / "store"]
        for directory in dirs:
            await asyncio.to_thread(ensure_dir, directory)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _is_date_like(field: FieldSpec) -> bool:
    if field.is_union:
        return False
    return field.type_tag == "date" or (field.type_tag == "string" and field.name.endswith("_at"))


def _append_line(path: Path, line: str) -> None:
    existing = path.read_text(encoding="utf-8") if path.exists() else ""
    content = f"{existing.rstrip()}\n{line}\n" if existing.strip() else f"{line}\n"
    write_text(path, content)
