"""
Catalog CLI - Browse the template catalog.

Commands:
  - list: List the templates in the catalog
  - show: Show a template's global style and layouts
  - cover-colors: Estimate the background gradient of each template cover
"""

import click
from pathlib import Path
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.tree import Tree
from rich import box

from . import config
from .modules.color_estimator import estimate_image_gradient
from .modules.errors import TemplateNotFoundError
from .modules.template_catalog import TemplateCatalog

console = Console()


@click.group()
@click.option('--templates', '-t', type=click.Path(exists=True, file_okay=False),
              default=str(config.TEMPLATES_DIR),
              help='Path to the template catalog directory')
@click.pass_context
def cli(ctx, templates):
    """slidemap Template Catalog CLI

    Browse the templates available for deck generation.
    """
    ctx.ensure_object(dict)
    ctx.obj['catalog'] = TemplateCatalog(Path(templates))


@cli.command(name='list')
@click.pass_context
def list_templates(ctx):
    """List the templates in the catalog."""
    catalog = ctx.obj['catalog']

    if not len(catalog):
        console.print(f"[yellow]No templates found in: {catalog.directory}[/yellow]")
        return

    table = Table(title="Templates", box=box.ROUNDED)
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Source", style="dim")
    table.add_column("Cover", style="dim")

    for entry in catalog.list():
        table.add_row(
            entry.id,
            entry.name,
            entry.file or "inline",
            entry.cover_url or "-",
        )

    console.print(table)


@cli.command()
@click.argument('template_id')
@click.pass_context
def show(ctx, template_id):
    """Show a template's global style and layouts.

    TEMPLATE_ID: Template id from the catalog index
    """
    catalog = ctx.obj['catalog']
    try:
        template = catalog.get(template_id)
    except TemplateNotFoundError as e:
        raise click.ClickException(str(e))

    style = template.style
    console.print(Panel.fit(
        f"[bold blue]{template.name or template_id}[/bold blue]\n"
        f"Background: {style.bg_color or '-'}   Text: {style.text_color or '-'}\n"
        f"Font: {style.font_family or '-'} {style.font_size or ''}",
        border_style="blue"
    ))

    tree = Tree("[cyan]Layouts[/cyan]")
    for layout_type, layout in template.layouts.items():
        branch = tree.add(f"[bold]{layout_type}[/bold]")
        for key in layout.keys:
            if key in layout.image_slots:
                branch.add(f"{key}: {len(layout.image_slots[key])} image slots")
            else:
                region = layout.region(key)
                branch.add(f"{key}: x={region.x} y={region.y} w={region.w} h={region.h}")
    console.print(tree)


@cli.command(name='cover-colors')
@click.pass_context
def cover_colors(ctx):
    """Estimate the background gradient of each template cover."""
    catalog = ctx.obj['catalog']

    table = Table(title="Cover Colors", box=box.ROUNDED)
    table.add_column("ID", style="cyan")
    table.add_column("Colors")
    table.add_column("CSS", style="dim")

    for entry in catalog.list():
        cover = entry.cover_path(catalog.directory)
        if cover is None or not cover.exists():
            table.add_row(entry.id, "[yellow]no local cover[/yellow]", "white")
            continue
        gradient = estimate_image_gradient(cover)
        swatches = " ".join(f"[on #{c}]   [/]" for c in gradient.hex_colors()) or "-"
        table.add_row(entry.id, swatches, gradient.css())

    console.print(table)


if __name__ == '__main__':
    cli()
