"""CLI entry point for secmorph.

Usage:
    secmorph run                                # Run full pipeline
    secmorph run-step s01_contour_matching -i '{"sections_file": "data/raw/sections.json"}'
    secmorph info                               # Show pipeline steps
    secmorph morph data/raw/sections.json -n 3  # One-shot morph without the pipeline
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from secmorph.core.logging import setup_logging

app = typer.Typer(name="secmorph", help="Cross-section contour morphing and surface stitching")
console = Console()

DEFAULT_CONFIG = Path("configs/pipeline.yaml")


@app.command()
def run(
    config: Path = typer.Option(DEFAULT_CONFIG, help="Pipeline config path"),
    log_level: str = typer.Option("INFO", help="Logging level"),
) -> None:
    """Run the full pipeline."""
    setup_logging(log_level)
    from secmorph.core.pipeline_runner import run_pipeline

    results = run_pipeline(config)
    console.print(f"[green]Pipeline finished: {len(results)} steps[/green]")


@app.command()
def run_step(
    step_name: str = typer.Argument(..., help="Step name (e.g. s01_contour_matching)"),
    config: Path = typer.Option(DEFAULT_CONFIG, help="Pipeline config path"),
    input_json: str = typer.Option(None, "--input", "-i", help="Input as JSON string"),
) -> None:
    """Run a single pipeline step."""
    import json

    setup_logging()
    from secmorph.core.pipeline_runner import build_step, load_pipeline_config

    pipeline_cfg = load_pipeline_config(config)
    entry = next((s for s in pipeline_cfg.steps if s.name == step_name), None)
    if entry is None:
        console.print(f"[red]Step '{step_name}' not found in pipeline config[/red]")
        raise typer.Exit(1)

    step = build_step(entry, pipeline_cfg, config)

    if input_json:
        input_data = json.loads(input_json)
    else:
        required = step.get_input_schema().get("required", [])
        if required:
            console.print(f"[yellow]Step '{step_name}' requires input fields: {required}[/yellow]")
            console.print(f'  secmorph run-step {step_name} -i \'{{"field": "value"}}\'')
            raise typer.Exit(1)
        input_data = {}

    console.print(f"[green]Running step: {step_name}[/green]")
    output = step.execute(step.input_type(**input_data))
    console.print(f"[green]Done. Output:[/green] {output.model_dump_json(indent=2)}")


@app.command()
def info(config: Path = typer.Option(DEFAULT_CONFIG, help="Pipeline config path")) -> None:
    """Show pipeline steps and their dependencies."""
    from secmorph.core.pipeline_runner import load_pipeline_config

    pipeline_cfg = load_pipeline_config(config)
    table = Table(title=f"Pipeline: {pipeline_cfg.project_name}")
    table.add_column("#", style="dim")
    table.add_column("Step", style="cyan")
    table.add_column("Module", style="green")
    table.add_column("Enabled", style="yellow")
    table.add_column("Depends On", style="dim")

    for i, step in enumerate(pipeline_cfg.steps, 1):
        table.add_row(
            str(i),
            step.name,
            step.module,
            "Y" if step.enabled else "N",
            ", ".join(step.depends_on) if step.depends_on else "-",
        )
    console.print(table)


@app.command()
def morph(
    sections_file: Path = typer.Argument(..., help="Section stack JSON"),
    output_dir: Path = typer.Option(Path("./data/morph"), "--output", "-o", help="Output directory"),
    iterations: int = typer.Option(1, "--iterations", "-n", min=0, help="Intermediates per gap"),
    spline: bool = typer.Option(False, help="Cubic spline interpolation"),
    surface: bool = typer.Option(False, help="Stitch a surface mesh"),
    multi_contour: bool = typer.Option(False, help="Match every contour per section"),
    threshold: float = typer.Option(0.8, min=0.0, max=1.0, help="Vertex match weight threshold"),
    log_level: str = typer.Option("INFO", help="Logging level"),
) -> None:
    """Morph a section stack in one go and write sections.json (+ mesh.json)."""
    setup_logging(log_level)
    from secmorph.morph.config import MorphConfig
    from secmorph.morph.engine import MorphOrchestrator
    from secmorph.utils.io import load_section_stack, save_mesh_document, save_section_stack

    if not sections_file.exists():
        console.print(f"[red]Section stack not found: {sections_file}[/red]")
        raise typer.Exit(1)

    store = load_section_stack(sections_file)
    cfg = MorphConfig(
        iterations=iterations,
        apply_spline=spline,
        generate_surface=surface,
        allow_multi_contour=multi_contour,
        weight_threshold=threshold,
        shape_name=store.name,
    )
    result = MorphOrchestrator(cfg).run(store)

    table = Table(title=f"Morph: {cfg.shape_name}")
    table.add_column("Output", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Paths", str(len(result.paths)))

    if result.series is not None:
        out = save_section_stack(result.series.to_section_store(), output_dir / "sections.json")
        table.add_row("Contours", str(result.series.contour_count))
        table.add_row("Sections file", str(out))
    if result.mesh is not None:
        out = save_mesh_document(result.mesh.to_document(), output_dir / "mesh.json")
        table.add_row("Faces", str(result.mesh.num_faces))
        table.add_row("Mesh file", str(out))
    table.add_row("Warnings", str(len(result.warnings)))
    console.print(table)


if __name__ == "__main__":
    app()
