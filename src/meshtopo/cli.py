"""
Command-line interface for meshtopo.

Provides commands for mesh inspection, cleanup, splitting, flipping and
ray casting on mesh files.
"""

from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from meshtopo import __version__
from meshtopo.core.config import ConfigManager
from meshtopo.core.exceptions import MeshtopoError
from meshtopo.core.geometry import MeshLoader
from meshtopo.core.logging import configure_logging
from meshtopo.editing.split import split_by_angle
from meshtopo.geometry.normals import flip_normals
from meshtopo.geometry.ray import Ray, ray_mesh_intersect
from meshtopo.pipeline import CleanupPipeline

console = Console()


def _fail(action: str, error: Exception) -> None:
    console.print(f"[red]✗[/red] Failed to {action}: {escape(str(error))}")
    raise SystemExit(1)


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="YAML configuration file",
)
@click.option("--log-level", default="WARNING", help="Log level (DEBUG, INFO, ...)")
@click.option("--json-logs", is_flag=True, help="Emit JSON log lines")
@click.pass_context
def main(ctx: click.Context, config_path: Optional[Path], log_level: str, json_logs: bool) -> None:
    """meshtopo - Mesh topology analysis and repair."""
    configure_logging(level=log_level, json_output=json_logs)
    ctx.ensure_object(dict)
    try:
        ctx.obj["config"] = ConfigManager(config_path).config
    except MeshtopoError as e:
        _fail("load configuration", e)


@main.command("info")
@click.argument("path", type=click.Path(exists=True, path_type=Path))
def info(path: Path) -> None:
    """Show counts, edge classes and connectivity of a mesh."""
    try:
        mesh = MeshLoader.load(path)
        mesh.validate()
        topology = mesh.topology()

        table = Table(title=f"Mesh: {path.name}")
        table.add_column("Property", style="cyan")
        table.add_column("Value")

        table.add_row("Vertices", str(mesh.vertex_count))
        table.add_row("Faces", str(mesh.face_count))
        table.add_row("Edges", str(len(topology.edge_array)))
        table.add_row("Boundary edges", str(len(topology.boundary_edges())))
        table.add_row("Non-manifold edges", str(len(topology.non_manifold_edges())))
        table.add_row("Degenerate faces", str(len(mesh.degenerate_faces())))
        table.add_row("Shells", str(len(topology.shells())))
        table.add_row("Connected", "✓" if topology.is_connected() else "-")
        table.add_row("Closed", "✓" if topology.is_closed() else "-")
        table.add_row("Area", f"{mesh.area():.6g}")
        if mesh.vertex_count:
            low, high = mesh.bounding_box()
            table.add_row("Bounds min", ", ".join(f"{c:.6g}" for c in low))
            table.add_row("Bounds max", ", ".join(f"{c:.6g}" for c in high))

        console.print(table)

    except MeshtopoError as e:
        _fail("inspect mesh", e)


@main.command("clean")
@click.argument("path", type=click.Path(exists=True, path_type=Path))
@click.argument("output", type=click.Path(path_type=Path))
@click.option("--tolerance", "-t", type=float, default=None, help="Override weld tolerance")
@click.option("--simplify/--no-simplify", default=None, help="Override planar simplification")
@click.pass_context
def clean(
    ctx: click.Context,
    path: Path,
    output: Path,
    tolerance: Optional[float],
    simplify: Optional[bool],
) -> None:
    """Validate, weld, deduplicate and optionally simplify a mesh."""
    config = ctx.obj["config"].model_copy(deep=True)
    if tolerance is not None:
        config.tolerances.weld = tolerance
    if simplify is not None:
        config.cleanup.simplify = simplify

    try:
        mesh = MeshLoader.load(path)
    except MeshtopoError as e:
        _fail("load mesh", e)

    result = CleanupPipeline(config).execute(mesh)

    table = Table(title="Cleanup")
    table.add_column("Step", style="cyan")
    table.add_column("Status")
    table.add_column("Time (s)", justify="right")
    for step in result.steps:
        status = "[green]✓[/green]" if step.success else f"[red]✗[/red] {escape(step.error or '')}"
        table.add_row(step.name, status, f"{step.duration_s:.4f}")
    console.print(table)

    if not result.success:
        console.print(f"[red]✗[/red] Cleanup failed: {escape('; '.join(result.errors))}")
        raise SystemExit(1)

    try:
        MeshLoader.save(result.mesh, output)
    except MeshtopoError as e:
        _fail("save mesh", e)
    console.print(
        f"[green]✓[/green] {mesh.vertex_count}→{result.mesh.vertex_count} vertices, "
        f"{mesh.face_count}→{result.mesh.face_count} faces written to {output}"
    )


@main.command("split")
@click.argument("path", type=click.Path(exists=True, path_type=Path))
@click.argument("output_dir", type=click.Path(file_okay=False, path_type=Path))
@click.option("--angle", "-a", type=float, default=None, help="Hard edge angle in degrees")
@click.option("--format", "fmt", default="stl", help="Output file extension")
@click.pass_context
def split(ctx: click.Context, path: Path, output_dir: Path, angle: Optional[float], fmt: str) -> None:
    """Split a mesh into smooth shells along hard edges."""
    threshold = angle if angle is not None else ctx.obj["config"].tolerances.split_angle
    try:
        mesh = MeshLoader.load(path)
        mesh.validate()
        shells = split_by_angle(mesh, threshold)
        output_dir.mkdir(parents=True, exist_ok=True)
        for i, shell in enumerate(shells):
            MeshLoader.save(shell, output_dir / f"{path.stem}_{i:03d}.{fmt}")
    except MeshtopoError as e:
        _fail("split mesh", e)

    console.print(f"[green]✓[/green] {len(shells)} shell(s) written to {output_dir}")


@main.command("flip")
@click.argument("path", type=click.Path(exists=True, path_type=Path))
@click.argument("output", type=click.Path(path_type=Path))
def flip(path: Path, output: Path) -> None:
    """Reverse the winding of every face."""
    try:
        mesh = MeshLoader.load(path)
        MeshLoader.save(flip_normals(mesh), output)
    except MeshtopoError as e:
        _fail("flip mesh", e)

    console.print(f"[green]✓[/green] Flipped {mesh.face_count} face(s) into {output}")


@main.command("raycast")
@click.argument("path", type=click.Path(exists=True, path_type=Path))
@click.option("--origin", "-o", type=float, nargs=3, required=True, help="Ray origin x y z")
@click.option("--direction", "-d", type=float, nargs=3, required=True, help="Ray direction x y z")
@click.pass_context
def raycast(ctx: click.Context, path: Path, origin: tuple, direction: tuple) -> None:
    """Report the first face hit by a ray."""
    epsilon = ctx.obj["config"].tolerances.ray_epsilon
    try:
        mesh = MeshLoader.load(path)
        mesh.validate()
        hit = ray_mesh_intersect(Ray(origin, direction), mesh, epsilon)
    except MeshtopoError as e:
        _fail("cast ray", e)

    if hit is None:
        console.print("[yellow]No hit.[/yellow]")
        return

    table = Table(title="Intersection")
    table.add_column("Property", style="cyan")
    table.add_column("Value")
    table.add_row("Face", str(hit.face_index))
    table.add_row("Distance", f"{hit.distance:.6g}")
    table.add_row("Point", ", ".join(f"{c:.6g}" for c in hit.point))
    table.add_row("Barycentric", ", ".join(f"{c:.6g}" for c in hit.barycentric))
    console.print(table)


if __name__ == "__main__":
    main()
