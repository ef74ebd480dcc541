"""Post-generation verification.

Re-opens every file a scaffold run claims to have written and reports, per
file, whether it exists and whether it parses as TypeScript.  The store file
is checked for the reducer import and registration.  The scan is read-only
and never raises: anything unexpected becomes an ``error`` entry.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field
from rich.markup import escape
from rich.table import Table

from nextforge.scaffolder.store import reducer_status
from nextforge.scaffolder.tsparse import find_syntax_error
from nextforge.utils import console


TSX_SUFFIXES = {".tsx", ".jsx"}


class CheckStatus(str, Enum):
    """Severity of a single check; only ``ERROR`` makes a scan fail."""

    OK = "ok"
    WARNING = "warning"
    ERROR = "error"


class CheckResult(BaseModel):
    """One line of the verification report."""

    label: str = Field(..., description="What was checked, e.g. a relative path")
    status: CheckStatus
    message: str = Field(default="")
    path: str = Field(default="", description="Absolute path of the inspected file")


_STATUS_STYLE = {
    CheckStatus.OK: "green",
    CheckStatus.WARNING: "yellow",
    CheckStatus.ERROR: "red",
}


# ---------------------------------------------------------------------------
# Scanning
# ---------------------------------------------------------------------------


def check_file(root: Path, rel_path: str) -> CheckResult:
    """Check that one generated file exists and parses without syntax errors.

    ``.tsx`` and ``.jsx`` files are parsed with the TSX grammar, everything
    else with the TypeScript grammar.
    """
    target = root / rel_path
    try:
        if not target.is_file():
            return CheckResult(
                label=rel_path, status=CheckStatus.ERROR, message="File not found", path=str(target)
            )
        text = target.read_text(encoding="utf-8")
        problem = find_syntax_error(text, tsx=target.suffix in TSX_SUFFIXES)
    except (OSError, UnicodeDecodeError) as exc:
        return CheckResult(
            label=rel_path, status=CheckStatus.ERROR, message=f"Unreadable: {exc}", path=str(target)
        )
    if problem:
        return CheckResult(
            label=rel_path, status=CheckStatus.WARNING, message=f"Possible syntax issue: {problem}", path=str(target)
        )
    return CheckResult(label=rel_path, status=CheckStatus.OK, message="Exists", path=str(target))


def check_store(store_path: Path, reducer_name: str) -> list[CheckResult]:
    """Check ``store/index.ts`` for the import and the ``reducer`` entry."""
    path = str(store_path)
    try:
        if not store_path.is_file():
            return [
                CheckResult(label="store", status=CheckStatus.ERROR, message="Store file not found", path=path)
            ]
        text = store_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        return [CheckResult(label="store", status=CheckStatus.ERROR, message=f"Unreadable: {exc}", path=path)]

    has_import, has_entry = reducer_status(text, reducer_name)

    return [
        CheckResult(
            label="store import",
            status=CheckStatus.OK if has_import else CheckStatus.WARNING,
            message="Reducer import present" if has_import else f"Missing import for {reducer_name}Reducer",
            path=path,
        ),
        CheckResult(
            label="store registration",
            status=CheckStatus.OK if has_entry else CheckStatus.WARNING,
            message="Reducer registered" if has_entry else f"'{reducer_name}' is not registered in reducer",
            path=path,
        ),
    ]


def scan_generated_files(
    root: Path,
    paths: list[str],
    store_path: Path,
    reducer_name: str,
) -> list[CheckResult]:
    """Run every check and return the results in path order, store last."""
    results: list[CheckResult] = []
    for rel_path in paths:
        try:
            results.append(check_file(root, rel_path))
        except Exception as exc:  # noqa: BLE001 - report, never propagate
            results.append(
                CheckResult(label=rel_path, status=CheckStatus.ERROR, message=f"Check failed: {exc}")
            )
    try:
        results.extend(check_store(store_path, reducer_name))
    except Exception as exc:  # noqa: BLE001
        results.append(CheckResult(label="store", status=CheckStatus.ERROR, message=f"Check failed: {exc}"))
    return results


def has_errors(results: list[CheckResult]) -> bool:
    return any(r.status == CheckStatus.ERROR for r in results)


# ---------------------------------------------------------------------------
# Reporting
# ---------------------------------------------------------------------------


def render_results(results: list[CheckResult], title: str = "Verification") -> None:
    """Print the results as a Rich table."""
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Check", no_wrap=True)
    table.add_column("Status")
    table.add_column("Details")

    for result in results:
        style = _STATUS_STYLE[result.status]
        table.add_row(escape(result.label), f"[{style}]{result.status.value}[/{style}]", escape(result.message))

    console.print(table)
