"""``nextforge add-module`` -- scaffold a module with its default node."""

from __future__ import annotations

from nextforge.config import Session
from nextforge.scaffolder.fields import unknown_type_fields
from nextforge.scaffolder.generator import EntityDescriptor, ModuleScaffolder, ScaffoldResult
from nextforge.utils import print_warning


def parse_auth(value: str | bool | None, default: bool = True) -> bool:
    """Interpret ``--auth``: only an explicit "no"/"false" disables auth."""
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    return value.strip().lower() not in {"no", "n", "false", "0", "off"}


def warn_unknown_types(descriptor: EntityDescriptor) -> None:
    unknown = unknown_type_fields(descriptor.fields)
    if unknown:
        listed = ", ".join(f"{f.name}:{f.type_tag}" for f in unknown)
        print_warning(f"Unrecognised field types rendered as 'any': {listed}")


async def add_module(
    session: Session,
    module: str,
    *,
    node: str | None = None,
    route_path: str | None = None,
    apis: str | None = None,
    node_type: str | None = None,
    auth: str | bool | None = None,
    api_base: str | None = None,
    strict_types: bool = False,
) -> ScaffoldResult:
    """Render and write a module, then register its reducer.

    ``auth`` and ``api_base`` fall back to the session settings when omitted.
    """
    descriptor = EntityDescriptor.for_module(
        module,
        node=node,
        route_path=route_path,
        apis=apis,
        node_type=node_type,
        auth=parse_auth(auth, session.settings.default_auth),
        api_base=api_base or session.settings.default_api_base,
        strict_types=strict_types,
    )
    warn_unknown_types(descriptor)
    return await ModuleScaffolder(session.working_dir).scaffold_module(descriptor)
