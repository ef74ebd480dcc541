"""``nextforge verify`` -- re-check the files a module or node should have."""

from __future__ import annotations

from nextforge.config import Session
from nextforge.errors import PreconditionError
from nextforge.scaffolder.generator import EntityDescriptor, render_module, render_node
from nextforge.verify import CheckResult, scan_generated_files


def verify_entity(
    session: Session,
    module: str,
    *,
    node: str | None = None,
    module_node: str | None = None,
    route_path: str | None = None,
) -> list[CheckResult]:
    """Scan the expected output of ``add-module`` (or ``add-node`` with *node*).

    The expected paths come from rendering the default descriptor, so only
    names matter here; field and operation options do not change the layout.
    *module_node* is the node name given to ``add-module --node``.
    """
    if node:
        descriptor = EntityDescriptor.for_node(module, node)
        paths = render_node(descriptor).paths()
    else:
        descriptor = EntityDescriptor.for_module(module, node=module_node, route_path=route_path)
        paths = render_module(descriptor).paths()
    root = session.working_dir
    if not (root / descriptor.module_dir).is_dir():
        raise PreconditionError(f"Module {descriptor.module} does not exist")
    return scan_generated_files(root, paths, root / "store" / "index.ts", descriptor.state_key)
