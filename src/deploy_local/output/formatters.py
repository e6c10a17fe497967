"""Human, quiet, JSON, and shell-script renderings of a ServiceResult.

Dry-run results carry the recorded ``commands``. Their human rendering is
a runnable shell script: the commands followed by the result summary as
``#`` comments, so ``deploy-local init > init.sh`` produces something
that can be reviewed and run under sudo.
"""

from __future__ import annotations

import json as _json
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from rich.text import Text

from deploy_local.output.console import create_console, get_output

if TYPE_CHECKING:
    from deploy_local.services.result import ServiceResult


@dataclass(frozen=True)
class OutputSettings:
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False


def _value(value: Any) -> str:
    if isinstance(value, (dict, list)):
        return _json.dumps(value, separators=(",", ":"))
    return str(value)


def _error_line(result: ServiceResult) -> str:
    msg = result.error.message if result.error else "Unknown error"
    return f"ERROR: {result.op} — {msg}"


def format_script(result: ServiceResult) -> str:
    """Render a dry-run result as a shell script."""
    lines = ["#!/bin/sh", "set -e", ""]
    lines.extend(result.data.get("commands", []))
    lines.append("")
    lines.append(f"# OK: {result.op}")
    for key, value in result.data.items():
        if key == "commands":
            continue
        lines.append(f"#   {key}: {_value(value)}")
    return "\n".join(lines)


def format_human(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a result with Rich styling (plain text when not a terminal)."""
    if not result.ok:
        console = create_console()
        console.print(Text.assemble(("ERROR", "deploy.error"), (f"  {result.op}", "deploy.op")))
        if result.error is not None:
            console.print(Text(f"  {result.error.code}: {result.error.message}"))
            if verbose:
                for key, value in result.error.detail.items():
                    console.print(Text(f"    {key}: {_value(value)}", style="deploy.key"))
        return get_output(console).rstrip("\n")

    console = create_console()
    console.print(Text.assemble(("OK", "deploy.ok"), (f"  {result.op}", "deploy.op")))
    for key, value in result.data.items():
        if key == "release_id":
            style = "deploy.release"
        elif key.endswith("_path") or key == "archive":
            style = "deploy.path"
        else:
            style = ""
        console.print(Text.assemble((f"  {key}: ", "deploy.key"), (_value(value), style)))
    if verbose and result.meta:
        for key, value in result.meta.items():
            console.print(Text(f"  meta.{key}: {_value(value)}", style="deploy.key"))
    return get_output(console).rstrip("\n")


def format_result(result: ServiceResult, *, settings: OutputSettings | None = None) -> str:
    """Format a ServiceResult for display according to *settings*."""
    settings = settings or OutputSettings()
    if settings.json_output:
        return result.model_dump_json(indent=2)
    if settings.quiet:
        if not result.ok:
            return _error_line(result)
        if "commands" in result.data:
            return "\n".join(result.data["commands"])
        return f"OK: {result.op}"
    if result.ok and "commands" in result.data:
        return format_script(result)
    return format_human(result, verbose=settings.verbose)
