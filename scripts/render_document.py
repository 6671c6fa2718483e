#!/usr/bin/env python3
"""
Document Preview CLI

Renders a record fixture (YAML) through the full generation pipeline, for
checking templates and layouts without the surrounding application.

Commands:
    html   - Write the composed HTML (no browser needed)
    pdf    - Render the composed document to PDF with Playwright
    kinds  - List registered document kinds and their default sections

Examples:\n

    render_document.py html proposal fixtures/proposal.yaml            # HTML preview

    render_document.py pdf proposal fixtures/proposal.yaml -o outs/    # PDF into outs/

    render_document.py pdf case_study cs.yaml --layout my_layout.yaml  # Custom layout
"""

import os
from datetime import date
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv
from omegaconf import OmegaConf
from typing_extensions import Annotated

from folio.contexts.assets import AssetResolver
from folio.contexts.assets.logger import setup_assets_logger
from folio.contexts.composition import DocumentGenerator, DocumentRequest
from folio.contexts.composition.logger import setup_composition_logger
from folio.contexts.rendering import RenderEngineFailure
from folio.contexts.rendering.logger import setup_rendering_logger
from folio.contexts.templating import (
    DocumentKind,
    InvalidDocumentRequest,
    LayoutConfiguration,
    SectionCompositionAmbiguity,
    record_from_dict,
)
from folio.contexts.templating.kinds import default_registry
from folio.contexts.templating.logger import setup_templating_logger
from folio.utils.logger import session_log_dir
from folio.utils.text_processing import truncate_display
from folio.utils.timestamp import parse_date

load_dotenv()
OUTPUT_PATH = Path(os.getenv("FOLIO_OUTPUT_PATH", "outs"))


app = typer.Typer(
    help="Render record fixtures to HTML or PDF through the document pipeline",
    add_completion=False,
    invoke_without_command=True,
)


@app.callback()
def main(ctx: typer.Context):
    """Show help by default when no command is provided."""
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


def load_request(kind: str, record_file: Path, layout_file: Optional[Path], tenant_id: Optional[str]) -> DocumentRequest:
    """Build a DocumentRequest from YAML files, exiting with a message on bad input."""
    try:
        document_kind = DocumentKind(kind)
    except ValueError:
        valid = ", ".join(k.value for k in DocumentKind)
        typer.secho(f"Error: unknown kind '{kind}' (expected one of: {valid})\n", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    if not record_file.exists():
        typer.secho(f"Error: record file not found: {record_file}\n", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    data = OmegaConf.to_container(OmegaConf.load(record_file), resolve=True)
    record = record_from_dict(document_kind, data)

    layout = None
    if layout_file is not None:
        try:
            layout = LayoutConfiguration.load(layout_file)
        except SectionCompositionAmbiguity as e:
            typer.secho(f"Error: invalid layout: {e}\n", fg=typer.colors.RED, err=True)
            raise typer.Exit(code=1)

    return DocumentRequest(kind=document_kind, record=record, layout=layout, tenant_id=tenant_id)


def setup_logging(run_name: str) -> Path:
    """Create a session log directory with one log file per context."""
    log_dir = session_log_dir(run_name)
    setup_templating_logger(log_dir)
    setup_assets_logger(log_dir)
    setup_composition_logger(log_dir)
    setup_rendering_logger(log_dir)
    return log_dir


def report_diagnostics(diagnostics) -> None:
    if not diagnostics:
        return
    typer.secho(f"  {len(diagnostics)} diagnostic(s):", fg=typer.colors.YELLOW)
    for line in diagnostics:
        typer.echo(f"  - {truncate_display(line, 120)}")


@app.command("html")
def html_command(
    kind: Annotated[str, typer.Argument(help="Document kind (proposal, case_study, ...)")],
    record_file: Annotated[Path, typer.Argument(help="YAML file with the hydrated record")],
    layout_file: Annotated[
        Optional[Path], typer.Option("--layout", "-l", help="YAML layout replacing the default")
    ] = None,
    output_dir: Annotated[Path, typer.Option("--output", "-o", help="Output directory")] = OUTPUT_PATH,
    tenant_id: Annotated[Optional[str], typer.Option("--tenant", "-t", help="Tenant for branding lookups")] = None,
    as_of: Annotated[Optional[str], typer.Option("--date", help="Date for generated-on lines (YYYY-MM-DD)")] = None,
):
    """
    Write the composed HTML for a record.

    Examples:\n

        $ render_document.py html resume fixtures/resume.yaml
    """
    request = load_request(kind, record_file, layout_file, tenant_id)
    log_dir = setup_logging(f"html_{kind}")
    generator = DocumentGenerator(resolver=AssetResolver.default())

    try:
        prepared = generator.prepare(request, today=parse_date(as_of))
    except InvalidDocumentRequest as e:
        typer.secho(f"Error: {e}\n", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    output_dir.mkdir(parents=True, exist_ok=True)
    out_file = output_dir / Path(prepared.filename).with_suffix(".html").name
    out_file.write_text(prepared.document.to_html(), encoding="utf-8")

    typer.secho(f"✓ Wrote {out_file}", fg=typer.colors.GREEN, bold=True)
    typer.echo(f"  Sections: {', '.join(prepared.document.section_keys())}")
    if prepared.attached:
        typer.echo(f"  Embedded documents: {prepared.attached}")
    report_diagnostics(prepared.diagnostics)
    typer.echo(f"  Logs: {log_dir}")


@app.command("pdf")
def pdf_command(
    kind: Annotated[str, typer.Argument(help="Document kind (proposal, case_study, ...)")],
    record_file: Annotated[Path, typer.Argument(help="YAML file with the hydrated record")],
    layout_file: Annotated[
        Optional[Path], typer.Option("--layout", "-l", help="YAML layout replacing the default")
    ] = None,
    output_dir: Annotated[Path, typer.Option("--output", "-o", help="Output directory")] = OUTPUT_PATH,
    tenant_id: Annotated[Optional[str], typer.Option("--tenant", "-t", help="Tenant for branding lookups")] = None,
    as_of: Annotated[Optional[str], typer.Option("--date", help="Date for generated-on lines (YYYY-MM-DD)")] = None,
):
    """
    Render a record to PDF.

    Requires a Playwright Chromium install (playwright install chromium).

    Examples:\n

        $ render_document.py pdf proposal fixtures/proposal.yaml -o outs/
    """
    request = load_request(kind, record_file, layout_file, tenant_id)
    log_dir = setup_logging(f"pdf_{kind}")
    generator = DocumentGenerator(resolver=AssetResolver.default())

    typer.secho(f"\nRendering: {record_file}", fg=typer.colors.BLUE, bold=True)
    try:
        result = generator.generate(request, today=parse_date(as_of))
    except InvalidDocumentRequest as e:
        typer.secho(f"Error: {e}\n", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    except RenderEngineFailure as e:
        typer.secho("✗ Rendering failed", fg=typer.colors.RED, bold=True, err=True)
        typer.echo(f"  {e}", err=True)
        raise typer.Exit(code=1)

    output_dir.mkdir(parents=True, exist_ok=True)
    out_file = output_dir / result.filename
    out_file.write_bytes(result.content)

    typer.secho(f"✓ Wrote {out_file}", fg=typer.colors.GREEN, bold=True)
    typer.echo(f"  Pages: {result.page_count if result.page_count is not None else 'unknown'}")
    report_diagnostics(result.diagnostics)
    typer.echo(f"  Logs: {log_dir}")


@app.command("kinds")
def kinds_command():
    """List registered document kinds with their default section order."""
    registry = default_registry()
    for name in registry.kinds():
        kind_spec = registry.get(name)
        typer.secho(name, bold=True)
        for spec in kind_spec.default_layout.sections:
            column = f" [{spec.column}]" if spec.column else ""
            typer.echo(f"  {spec.order:>3}  {spec.key}{column}  ({spec.label})")


if __name__ == "__main__":
    app()
