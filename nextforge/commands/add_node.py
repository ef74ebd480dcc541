"""``nextforge add-node`` -- add another node to an existing module."""

from __future__ import annotations

from nextforge.config import Session
from nextforge.scaffolder.generator import EntityDescriptor, ModuleScaffolder, ScaffoldResult
from .add_module import parse_auth, warn_unknown_types


async def add_node(
    session: Session,
    module: str,
    node: str,
    *,
    apis: str | None = None,
    node_type: str | None = None,
    auth: str | bool | None = None,
    api_base: str | None = None,
    strict_types: bool = False,
) -> ScaffoldResult:
    """Write the node's files into ``modules/<module>`` and register its reducer.

    Raises:
        PreconditionError: If ``modules/<module>`` does not exist.
    """
    descriptor = EntityDescriptor.for_node(
        module,
        node,
        apis=apis,
        node_type=node_type,
        auth=parse_auth(auth, session.settings.default_auth),
        api_base=api_base or session.settings.default_api_base,
        strict_types=strict_types,
    )
    warn_unknown_types(descriptor)
    return await ModuleScaffolder(session.working_dir).scaffold_node(descriptor)
