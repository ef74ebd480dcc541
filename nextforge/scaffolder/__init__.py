"""nextforge scaffolder -- renders modules and nodes for a Next.js project.

Rendering is pure: an ``EntityDescriptor`` goes in and a ``GeneratedFileSet``
comes out.  ``ModuleScaffolder`` is the thin writer that puts the set on disk
and patches ``store/index.ts``.

Quick usage::

    from nextforge.scaffolder import EntityDescriptor, ModuleScaffolder

    descriptor = EntityDescriptor.for_module(
        "billing",
        node_type="id:string,amount:number,tier:vip|standard",
        apis="list,create",
    )
    result = await ModuleScaffolder(project_root).scaffold_module(descriptor)
"""

from nextforge.scaffolder.fields import FieldSpec, parse_field, parse_node_type
from nextforge.scaffolder.generator import (
    EntityDescriptor,
    GeneratedFileSet,
    ModuleScaffolder,
    ScaffoldResult,
    render_module,
    render_node,
)
from nextforge.scaffolder.store import PatchResult, register_reducer
from nextforge.scaffolder.templates import TemplateRenderer

__all__ = [
    "EntityDescriptor",
    "FieldSpec",
    "GeneratedFileSet",
    "ModuleScaffolder",
    "PatchResult",
    "ScaffoldResult",
    "TemplateRenderer",
    "parse_field",
    "parse_node_type",
    "register_reducer",
    "render_module",
    "render_node",
]
