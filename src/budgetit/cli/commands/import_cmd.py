"""Expense line and actual transaction import commands."""

import click
from budgetit.cli.error_handling import handle_domain_error
from budgetit.domain.actuals_import import ActualsImportRequest, ActualsImportService
from budgetit.domain.entities import ColumnMapping, PreviewResult
from budgetit.domain.errors import ValidationError
from budgetit.domain.expense_import import ExpenseImportRequest, ExpenseImportService
from budgetit.domain.mapping import ACTUAL_FIELD_ALIASES, EXPENSE_FIELD_ALIASES
from budgetit.domain.template_store import default_template_store_path
from budgetit.utils.amount_parser import format_minor_units


def parse_mapping_options(values: tuple[str, ...], fields) -> ColumnMapping:
    """Parse repeated --map field=Header options into a column mapping."""
    mapping: ColumnMapping = {}
    for value in values:
        field, sep, header = value.partition("=")
        field = field.strip()
        if not sep or not field or not header.strip():
            raise ValidationError(f"Invalid --map value '{value}': expected field=Header")
        if field not in fields:
            raise ValidationError(
                f"Unknown field '{field}' in --map. Valid fields: {', '.join(fields)}"
            )
        mapping[field] = header.strip()
    return mapping


def _echo_preview(preview: PreviewResult) -> None:
    click.echo(f"\nRows: {preview.total_rows}")
    click.echo(f"  Accepted: {preview.accepted_count}")
    click.echo(f"  Rejected: {preview.rejected_count}")
    click.echo(f"  Duplicates: {preview.duplicate_count}")

    if preview.mapping:
        click.echo("Mapping:")
        for field, header in preview.mapping.items():
            click.echo(f"  {field} <- {header}")
    else:
        click.echo("Mapping: (none)")

    if preview.template_applied:
        click.echo(f"Template applied: {preview.template_applied}")
    if preview.template_saved:
        click.echo(f"Template saved: {preview.template_saved}")

    if preview.errors:
        click.echo(f"Errors: {len(preview.errors)}")
        for error in preview.errors:
            click.echo(
                f"  Row {error.row_number} [{error.code}] {error.field}: {error.message}", err=True
            )


@click.group()
def import_group():
    """Import expense lines or actual transactions from CSV/XLSX files."""
    pass


@import_group.command("expenses")
@click.argument("file_path", type=click.Path(dir_okay=False))
@click.option("--map", "map_values", multiple=True, help="Column mapping as field=Header (repeatable)")
@click.option("--template", "template_name", help="Saved template name to apply or save under")
@click.option(
    "--no-saved-template",
    is_flag=True,
    default=False,
    help="Do not apply saved mapping templates",
)
@click.option("--save-template", is_flag=True, default=False, help="Save the resolved mapping as a template")
@click.option(
    "--template-store",
    type=click.Path(dir_okay=False),
    help="Path to template store (overrides BUDGETIT_TEMPLATE_STORE environment variable)",
)
@click.option("--commit", is_flag=True, default=False, help="Write accepted rows (default is preview only)")
@click.pass_context
def import_expenses(
    ctx,
    file_path: str,
    map_values: tuple[str, ...],
    template_name: str | None,
    no_saved_template: bool,
    save_template: bool,
    template_store: str | None,
    commit: bool,
):
    """Preview or commit an expense line import."""
    db = ctx.obj["db"]
    service = ExpenseImportService(db)

    try:
        mapping = parse_mapping_options(map_values, EXPENSE_FIELD_ALIASES)
        request = ExpenseImportRequest(
            file_path=file_path,
            template_store_path=template_store or default_template_store_path(),
            mapping=mapping or None,
            template_name=template_name,
            use_saved_template=not no_saved_template,
            save_template=save_template,
        )
        if commit:
            result = service.commit(request)
            _echo_preview(result.preview)
            click.echo("\nImport complete:")
            click.echo(f"  Inserted: {result.inserted_count} expense lines")
            click.echo(f"  Skipped: {result.skipped_duplicate_count} duplicates")
        else:
            _echo_preview(service.preview(request))
            click.echo("\nPreview only. Re-run with --commit to import.")
    except (ValueError, FileNotFoundError) as e:
        handle_domain_error(ctx, e)


@import_group.command("actuals")
@click.argument("file_path", type=click.Path(dir_okay=False))
@click.option("--map", "map_values", multiple=True, help="Column mapping as field=Header (repeatable)")
@click.option("--commit", is_flag=True, default=False, help="Write accepted rows (default is preview only)")
@click.pass_context
def import_actuals(ctx, file_path: str, map_values: tuple[str, ...], commit: bool):
    """Preview or commit an actual transaction import."""
    db = ctx.obj["db"]
    service = ActualsImportService(db)

    try:
        mapping = parse_mapping_options(map_values, ACTUAL_FIELD_ALIASES)
        request = ActualsImportRequest(file_path=file_path, mapping=mapping or None)
        if not commit:
            _echo_preview(service.preview(request))
            click.echo("\nPreview only. Re-run with --commit to import.")
            return

        result = service.commit(request)
        _echo_preview(result.preview)
        click.echo("\nImport complete:")
        click.echo(f"  Inserted: {result.inserted_count} transactions")
        click.echo(f"  Skipped: {result.skipped_duplicate_count} duplicates")
        click.echo(f"  Matched: {result.matched_count}")
        click.echo(f"  Unmatched: {result.unmatched_count}")
        click.echo(f"  Match rate: {result.match_rate:.0%}")
        if result.unmatched_for_review:
            click.echo("\nUnmatched for review:")
            for txn in result.unmatched_for_review:
                click.echo(
                    f"  {txn.transaction_date.isoformat()}  {txn.service_id:<20} "
                    f"{format_minor_units(txn.amount_minor):>12}  {txn.description or ''}"
                )
    except (ValueError, FileNotFoundError) as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register import commands with main CLI."""
    cli.add_command(import_group, name="import")
