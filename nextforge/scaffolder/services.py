"""API service method stubs for a generated node.

Each requested operation becomes one method on the ``<Name>Api`` object.
Recognised operation names map to a fixed HTTP verb and path pattern; any
other name produces a POST-based stub named after the operation itself.
Duplicates are rendered as many times as they are requested.
"""

from __future__ import annotations

from .naming import validate_identifier

DEFAULT_OPERATIONS: list[str] = ["getAll", "getById", "create", "update", "delete"]

# Canonical operation for every recognised (lower-cased) alias.
OPERATION_ALIASES: dict[str, str] = {
    "getall": "list",
    "list": "list",
    "getbyid": "get",
    "get": "get",
    "create": "create",
    "update": "update",
    "delete": "delete",
}


def parse_operations(text: str | None) -> list[str]:
    """Split a comma-separated operation list; blank input yields the defaults."""
    if not text or not text.strip():
        return list(DEFAULT_OPERATIONS)
    return [op.strip() for op in text.split(",") if op.strip()]


def normalize_base_path(api_base: str) -> str:
    base = api_base.strip()
    return base if base.startswith("/") else f"/{base}"


def api_client_name(auth: bool) -> str:
    return "private_api" if auth else "public_api"


def canonical_operation(operation: str) -> str | None:
    """Return ``list``/``get``/``create``/``update``/``delete`` or ``None`` for custom names."""
    return OPERATION_ALIASES.get(operation.strip().lower())


def render_service_method(name: str, base_path: str, auth: bool, operation: str) -> str:
    """Render a single method block.

    Raises:
        InvalidNameError: If a custom operation is not a valid identifier.
    """
    client = api_client_name(auth)
    node = f"{name}Node"
    lower = name.lower()
    kind = canonical_operation(operation)

    if kind == "list":
        return (
            f"  // Get all {lower}s\n"
            f"  get{name}s: async (): Promise<{node}[]> => {{\n"
            f"    const response = await {client}.get<{node}[]>('{base_path}');\n"
            f"    return response.data;\n"
            f"  }}"
        )
    if kind == "get":
        return (
            f"  // Get a specific {lower}\n"
            f"  get{name}: async (id: string | number): Promise<{node}> => {{\n"
            f"    const response = await {client}.get<{node}>(`{base_path}/${{id}}`);\n"
            f"    return response.data;\n"
            f"  }}"
        )
    if kind == "create":
        return (
            f"  // Create a new {lower}\n"
            f"  create{name}: async (data: Omit<{node}, 'id'>): Promise<{node}> => {{\n"
            f"    const response = await {client}.post<{node}>('{base_path}', data);\n"
            f"    return response.data;\n"
            f"  }}"
        )
    if kind == "update":
        return (
            f"  // Update an existing {lower}\n"
            f"  update{name}: async (id: string | number, data: Partial<{node}>): Promise<{node}> => {{\n"
            f"    const response = await {client}.put<{node}>(`{base_path}/${{id}}`, data);\n"
            f"    return response.data;\n"
            f"  }}"
        )
    if kind == "delete":
        return (
            f"  // Delete a {lower}\n"
            f"  delete{name}: async (id: string | number): Promise<void> => {{\n"
            f"    await {client}.delete(`{base_path}/${{id}}`);\n"
            f"  }}"
        )

    custom = validate_identifier(operation, "API operation")
    return (
        f"  // Custom {custom} operation\n"
        f"  {custom}: async (data?: Partial<{node}>): Promise<{node}> => {{\n"
        f"    const response = await {client}.post<{node}>(`{base_path}/{custom}`, data);\n"
        f"    return response.data;\n"
        f"  }}"
    )


def render_service_methods(
    name: str,
    api_base: str,
    auth: bool,
    operations: list[str],
) -> str:
    """Render every requested operation, in order, joined by ``",\\n\\n"``."""
    base_path = normalize_base_path(api_base)
    return ",\n\n".join(
        render_service_method(name, base_path, auth, op) for op in operations
    )


def validate_operations(operations: list[str]) -> list[str]:
    """Raise early if a custom operation name cannot become a method name.

    Raises:
        InvalidNameError: For the first offending operation.
    """
    for op in operations:
        if canonical_operation(op) is None:
            validate_identifier(op, "API operation")
    return operations
