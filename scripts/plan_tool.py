# scripts/plan_tool.py
"""CLI for checking and converting saved floor-plan documents."""
from __future__ import annotations

import logging
import sys
from pathlib import Path

import click

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from openhome.adjacency import build_wall_plan
from openhome.geometry import wall_length_cm
from openhome.state import EntityIndex
from openhome.storage import DocumentError, read_document, write_document


def _load(path: str):
    try:
        return read_document(path)
    except DocumentError as exc:
        raise click.ClickException(str(exc)) from exc


def _opening_problems(state) -> list[str]:
    index = EntityIndex.from_state(state)
    problems = []
    for opening in state.wall_openings:
        room = index.rooms.get(opening.room_id)
        if room is None:
            continue
        length = wall_length_cm(room, opening.wall)
        if opening.position_cm + opening.width_cm > length:
            problems.append(
                f"opening {opening.id} on {room.name or room.id} {opening.wall.value} "
                f"extends beyond wall ({length:g}cm)"
            )
    return problems


@click.group()
@click.option("--verbose", is_flag=True, help="Log debug output to stderr")
def cli(verbose):
    """Inspect floor-plan documents."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


@cli.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
def validate(path):
    """Check that a document loads and has no dangling references."""
    state = _load(path)
    problems = EntityIndex.from_state(state).dangling_references()
    problems += _opening_problems(state)
    for problem in problems:
        click.echo(problem, err=True)
    if problems:
        raise click.ClickException(f"{len(problems)} problem(s) found")
    click.echo(f"{path}: OK")


@cli.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
def summary(path):
    """Print the rooms, openings and objects in a document."""
    state = _load(path)
    index = EntityIndex.from_state(state)
    click.echo(f"Rooms: {len(state.rooms)}  Openings: {len(state.wall_openings)}  "
               f"Objects: {len(state.placed_objects)}  "
               f"Wall thickness: {state.global_wall_thickness_cm:g}cm")
    for room in state.rooms:
        area_m2 = room.width_cm * room.height_cm / 10000
        click.echo(f"- {room.name or room.id}: {room.width_cm:g}x{room.height_cm:g}cm "
                   f"at ({room.x_cm:g}, {room.y_cm:g}), {area_m2:.2f} m2")
        for opening in index.openings_by_room.get(room.id, []):
            click.echo(f"    {opening.type.value} on {opening.wall.value} "
                       f"at {opening.position_cm:g}cm, {opening.width_cm:g}cm wide")
        for placed in index.objects_by_room.get(room.id, []):
            obj_def = index.def_of(placed)
            name = obj_def.name if obj_def is not None else placed.def_id
            click.echo(f"    {name} at ({placed.x_cm:g}, {placed.y_cm:g}) "
                       f"rotated {placed.rotation_deg:g}deg")


@cli.command()
@click.argument("src", type=click.Path(exists=True, dir_okay=False))
@click.argument("dst", type=click.Path(dir_okay=False))
def migrate(src, dst):
    """Rewrite a document in the current format (e.g. legacy selection field)."""
    state = _load(src)
    write_document(dst, state)
    click.echo(f"Wrote {dst}")


@cli.command("shared-walls")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
def shared_walls(path):
    """List walls shared between rooms and which room draws each one."""
    state = _load(path)
    names = {r.id: r.name or r.id for r in state.rooms}
    count = 0
    for spec in build_wall_plan(state):
        if spec.adjacency is None:
            continue
        count += 1
        other = spec.adjacency.other_room
        click.echo(f"{names[spec.room_id]} {spec.side.value} / "
                   f"{names[other.id]} {spec.adjacency.other_wall.value}: "
                   f"drawn by {names[spec.room_id]}, {len(spec.openings)} opening(s)")
    if count == 0:
        click.echo("No shared walls")


if __name__ == "__main__":
    cli()
