############################################################
# FlatCAM: 2D Post-processing for Manufacturing            #
# http://flatcam.org                                       #
# Author: Juan Pablo Caram (c)                             #
# Date: 2/5/2014                                           #
# MIT Licence                                              #
############################################################

import logging
import sys

import click

from . import __version__
from .errors import GerberParseError
from .geometry import DARK
from .gerber import Gerber
from .utils import set_log_level


def _print_version(ctx, param, value):
    if value and not ctx.resilient_parsing:
        click.echo(f'Version {__version__}')
        ctx.exit()


def _parse(infile, steps_per_circle, stroke_arcs):
    gerber = Gerber(steps_per_circle=steps_per_circle, fill_arcs=not stroke_arcs)
    try:
        gerber.parse_file(infile)
    except GerberParseError as err:
        click.echo(f'Error: {err}', err=True)
        sys.exit(1)
    return gerber


def _format_bounds(bounds):
    xmin, ymin, xmax, ymax = bounds
    return f'({xmin:.4f}, {ymin:.4f}) - ({xmax:.4f}, {ymax:.4f})'


@click.group()
@click.option('--version', is_flag=True, callback=_print_version, expose_value=False, is_eager=True)
@click.option('-v', '--verbose', is_flag=True, help='Log every parsed command.')
def cli(verbose):
    """ Interpret Gerber RS-274X files into board geometry. """
    set_log_level(logging.DEBUG if verbose else logging.WARNING)


@cli.command()
@click.option('--steps-per-circle', type=int, default=None, help='Segments used to approximate a full circle.')
@click.option('--stroke-arcs', is_flag=True, help='Stroke circular interpolations instead of filling them.')
@click.argument('infile', type=click.Path(exists=True, dir_okay=False))
def info(infile, steps_per_circle, stroke_arcs):
    """ Parse a Gerber file and print a summary of its draw items. """
    gerber = _parse(infile, steps_per_circle, stroke_arcs)
    program = gerber.program

    dark = sum(1 for item in program if item.polarity == DARK)
    click.echo(f'Draw items: {len(program)} ({dark} dark, {len(program) - dark} clear)')
    click.echo(f'Bounds: {_format_bounds(program.bounds())} {program.units}')
    click.echo(f'Apertures: {len(gerber.library.apertures)}, macros: {len(gerber.library.macros)}')
    click.echo(f'Program stop: {"yes" if gerber.stopped else "no"}')

    if gerber.warnings:
        click.echo(f'Warnings: {len(gerber.warnings)}')
        for warning in gerber.warnings:
            click.echo(f'    {type(warning).__name__}: {warning}')


@cli.command()
@click.option('--steps-per-circle', type=int, default=None, help='Segments used to approximate a full circle.')
@click.option('--stroke-arcs', is_flag=True, help='Stroke circular interpolations instead of filling them.')
@click.argument('infile', type=click.Path(exists=True, dir_okay=False))
def area(infile, steps_per_circle, stroke_arcs):
    """ Combine all draw items of a Gerber file into the board area. """
    gerber = _parse(infile, steps_per_circle, stroke_arcs)

    with click.progressbar(length=100, label='Composing', file=sys.stderr) as bar:
        def on_progress(fraction):
            bar.update(int(round(fraction * 100)) - bar.pos)

        board = gerber.program.compose(on_progress=on_progress)

    click.echo(f'Area: {board.area:.6f} sq {gerber.program.units}')
    if board.is_empty:
        click.echo('Bounds: empty')
    else:
        click.echo(f'Bounds: {_format_bounds(board.bounds)} {gerber.program.units}')


if __name__ == '__main__':
    cli()
