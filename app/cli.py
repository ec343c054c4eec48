from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import orjson
import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from adapters.excalidraw.repository import FileSystemExcalidrawRepository, FileSystemLibraryRepository
from adapters.filesystem.notation_repository import FileSystemNotationRepository
from app.config import ConverterSettings, load_settings
from app.converter_wiring import build_converter
from domain.errors import FlowsceneError
from domain.services.lint_scene import LintFinding, SceneLinter
from domain.services.merge_library import STATUS_UNPUBLISHED, LibraryMerger

app = typer.Typer(no_args_is_help=True)
console = Console(soft_wrap=True)
err_console = Console(stderr=True, soft_wrap=True)


def _fail(message: str) -> typer.Exit:
    err_console.print(f"[red]Error:[/] {escape(message)}")
    return typer.Exit(code=1)


def _resolve_settings(config: Path | None, **overrides: object) -> ConverterSettings:
    try:
        settings = load_settings(config).converter
        explicit = {key: value for key, value in overrides.items() if value is not None}
        if explicit:
            settings = ConverterSettings.model_validate({**settings.model_dump(), **explicit})
    except (FileNotFoundError, ValidationError) as exc:
        raise _fail(str(exc)) from exc
    return settings


def _print_findings(target: Console, title: str, findings: tuple[LintFinding, ...]) -> None:
    target.print(title)
    for finding in findings:
        target.print(f"- {escape(finding.message)}")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug details to stderr."),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@app.command("convert")
def convert(
    input_source: str = typer.Argument(..., help="Flowchart notation file, or '-' for stdin."),
    output_path: Path = typer.Argument(..., help="Excalidraw scene file to write."),
    font_size: Optional[float] = typer.Option(None, help="Base label font size."),
    regenerate_ids: Optional[bool] = typer.Option(
        None, "--regenerate-ids/--keep-ids", help="Replace readable ids with stable UUIDs.",
    ),
    pretty: Optional[bool] = typer.Option(None, "--pretty/--compact", help="Indent JSON output."),
    config: Optional[Path] = typer.Option(None, help="YAML settings file."),
) -> None:
    settings = _resolve_settings(
        config, font_size=font_size, regenerate_ids=regenerate_ids, pretty=pretty
    )
    try:
        notation = FileSystemNotationRepository().load(input_source)
    except OSError as exc:
        raise _fail(f"Cannot read {input_source}: {exc}") from exc

    try:
        report = build_converter(settings).run(notation, settings.to_options())
    except FlowsceneError as exc:
        raise _fail(str(exc)) from exc

    FileSystemExcalidrawRepository().save(report.document, output_path, pretty=settings.pretty)
    console.print(
        f"[green]Wrote[/] {escape(str(output_path))} "
        f"({len(report.document.elements)} elements, {len(report.document.files)} files, "
        f"mode={report.conversion_mode}, normalize={report.normalization_mode})"
    )


@app.command("lint")
def lint(
    input_path: Path = typer.Argument(..., help="Excalidraw scene to validate."),
    strict: Optional[bool] = typer.Option(
        None, "--strict/--no-strict", help="Promote binding, containment and overflow warnings.",
    ),
    config: Optional[Path] = typer.Option(None, help="YAML settings file."),
) -> None:
    settings = _resolve_settings(config, strict=strict)
    if not input_path.exists():
        raise _fail(f"File not found: {input_path}")
    try:
        payload = FileSystemExcalidrawRepository().load_raw(input_path)
    except orjson.JSONDecodeError as exc:
        raise _fail(f"Invalid JSON: {exc}") from exc

    try:
        report = SceneLinter(strict=settings.strict).lint(payload)
    except FlowsceneError as exc:
        raise _fail(str(exc)) from exc

    console.print(f"[cyan]Scene:[/] {escape(str(input_path))}")
    console.print(f"[cyan]Elements:[/] {report.element_count}")
    console.print(f"[cyan]File objects:[/] {report.file_count}")
    if report.warnings:
        _print_findings(console, f"[yellow]{len(report.warnings)} warning(s):[/]", report.warnings)
    if report.errors:
        _print_findings(err_console, f"[red]{len(report.errors)} error(s):[/]", report.errors)
        raise typer.Exit(code=1)
    console.print("[green]Scene lint passed[/]")


@app.command("merge-library")
def merge_library(
    base_path: Path = typer.Argument(..., help="Base .excalidrawlib file."),
    other_path: Path = typer.Argument(..., help="Library merged on top of the base."),
    output_path: Path = typer.Argument(..., help="Merged .excalidrawlib file to write."),
    default_status: str = typer.Option(
        STATUS_UNPUBLISHED, help="Status for items that are not published (published|unpublished).",
    ),
) -> None:
    try:
        merger = LibraryMerger(default_status=default_status)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--default-status") from exc

    repo = FileSystemLibraryRepository()
    try:
        result = merger.merge(repo.load_raw(base_path), repo.load_raw(other_path))
    except FileNotFoundError as exc:
        raise _fail(f"File not found: {exc.filename}") from exc
    except orjson.JSONDecodeError as exc:
        raise _fail(f"Invalid JSON: {exc}") from exc
    except FlowsceneError as exc:
        raise _fail(str(exc)) from exc

    repo.save(result.library, output_path)
    console.print(
        f"[green]Wrote[/] {escape(str(output_path))} "
        f"({result.base_count} + {result.other_count} -> {result.merged_count} items)"
    )


if __name__ == "__main__":
    app()
