"""Mapping template commands."""

import click
from budgetit.domain.template_store import TemplateStore, default_template_store_path


@click.group()
def template_group():
    """Manage saved column mapping templates."""
    pass


@template_group.command("list")
@click.option(
    "--template-store",
    type=click.Path(dir_okay=False),
    help="Path to template store (overrides BUDGETIT_TEMPLATE_STORE environment variable)",
)
def list_templates(template_store: str | None):
    """List saved mapping templates."""
    store = TemplateStore(template_store or default_template_store_path())
    templates = store.list_templates()
    if not templates:
        click.echo("No mapping templates found.")
        return

    click.echo("\nMapping Templates:")
    click.echo("-" * 60)
    for tmpl in templates:
        click.echo(f"{tmpl.name} (updated {tmpl.updated_at})")
        click.echo(f"  Signature: {tmpl.header_signature}")
        for field, header in tmpl.mapping.items():
            click.echo(f"    {field} <- {header}")


def register_commands(cli):
    """Register template commands with main CLI."""
    cli.add_command(template_group, name="template")
