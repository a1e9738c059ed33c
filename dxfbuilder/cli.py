"""Click CLI commands for dxfbuilder."""

import json
import logging
from typing import Optional

import click

from .constants import DEFAULT_GRID_SIZE
from .exporter import generate_dxf
from .models import GeoPoint, ExportOptions, parse_elements, parse_export_request
from .stats import calculate_stats
from .terrain import grid_lattice

logger = logging.getLogger(__name__)


def _load_json(path: str):
    with open(path, 'r', encoding='utf-8') as f:
        return json.load(f)


@click.group()
def cli():
    """dxfbuilder CLI for turning OpenStreetMap extracts into 2.5D DXF drawings."""
    pass


@cli.command()
@click.argument('input_path', type=click.Path(exists=True, dir_okay=False))
@click.option('--output', '-o', default='export.dxf', help='Output DXF file path')
@click.option('--simplify/--no-simplify', default=None,
              help='Simplify outlines (overrides the request options)')
@click.option('--tolerance', type=float, default=None,
              help='Simplification tolerance in metres')
def export(input_path: str, output: str, simplify: Optional[bool],
           tolerance: Optional[float]):
    """Export a DXF from a JSON request {elements, center, terrain, options}."""
    try:
        features, center, terrain, options = parse_export_request(_load_json(input_path))
        if simplify is not None or tolerance is not None:
            options = ExportOptions(
                simplify=options.simplify if simplify is None else simplify,
                tolerance=options.tolerance if tolerance is None else tolerance)

        text = generate_dxf(features, center, terrain, options)
        with open(output, 'w', encoding='ascii', newline='\n') as f:
            f.write(text)
        logger.info(f"Successfully generated DXF: {output}")
        click.echo(f"Wrote {output} ({len(text)} bytes)")
    except Exception as e:
        logger.error(f"Error generating DXF: {e}")
        raise click.ClickException(str(e))


@cli.command()
@click.argument('input_path', type=click.Path(exists=True, dir_okay=False))
def stats(input_path: str):
    """Print building/road/nature counts and heights for a feature file."""
    try:
        body = _load_json(input_path)
        elements = body.get('elements') if isinstance(body, dict) else body
        result = calculate_stats(parse_elements(elements))
    except Exception as e:
        logger.error(f"Error reading features: {e}")
        raise click.ClickException(str(e))

    click.echo(f"Buildings:  {result.total_buildings}")
    click.echo(f"Roads:      {result.total_roads}")
    click.echo(f"Nature:     {result.total_nature}")
    click.echo(f"Avg height: {result.avg_height:.1f} m")
    click.echo(f"Max height: {result.max_height:.1f} m")


@cli.command()
@click.argument('lat', type=float)
@click.argument('lng', type=float)
@click.option('--radius', '-r', default=500.0, help='Radius in metres')
@click.option('--grid-size', '-g', default=DEFAULT_GRID_SIZE,
              help='Samples per side')
def lattice(lat: float, lng: float, radius: float, grid_size: int):
    """Print the elevation sample lattice around LAT LNG as JSON."""
    try:
        lats, lngs = grid_lattice(GeoPoint(lat, lng), radius, grid_size)
    except ValueError as e:
        raise click.ClickException(str(e))
    click.echo(json.dumps({'grid_size': grid_size, 'latitude': lats,
                           'longitude': lngs}))
