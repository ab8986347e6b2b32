"""Refresh overdue interest and status on every unsettled bill of a society.

Usage:
    python -m societybills.scripts.recalculate_interest <society_id>
    python -m societybills.scripts.recalculate_interest <society_id> --dry-run
"""

from __future__ import annotations

import sys

from rich.console import Console
from rich.table import Table

from societybills.constants import format_money, now
from societybills.db import initialize_db
from societybills.engine import config_resolver, interest
from societybills.exceptions import ConfigNotFoundError
from societybills.logging import configure_logging
from societybills.repositories.factory import (
    get_audit_log_repository,
    get_bill_repository,
    get_billing_config_repository,
)
from societybills.services.audit_service import AuditService
from societybills.services.bill_service import BillService
from societybills.services.billing_config_service import BillingConfigService

console = Console()


def main() -> None:
    args = [arg for arg in sys.argv[1:] if not arg.startswith("--")]
    dry_run = "--dry-run" in sys.argv
    if not args:
        console.print("[red]Usage: recalculate_interest <society_id> [--dry-run][/red]")
        sys.exit(2)
    society_id = args[0]

    initialize_db()
    configure_logging()

    bill_repo = get_bill_repository()
    audit_service = AuditService(get_audit_log_repository())
    config_service = BillingConfigService(get_billing_config_repository(), audit_service)

    bills = bill_repo.list_unsettled(society_id)
    if not bills:
        console.print("[yellow]No unsettled bills found.[/yellow]")
        return

    current = now()
    configs = config_service.list_configs(society_id)

    table = Table(title=f"Unsettled bills for {society_id}")
    table.add_column("Flat", style="bold")
    table.add_column("Period")
    table.add_column("Due")
    table.add_column("Interest now", justify="right")
    table.add_column("Interest after", justify="right")

    for bill in bills:
        projected = "-"
        if bill.breakdown:
            try:
                config = config_resolver.resolve(configs, bill.period)
            except ConfigNotFoundError:
                config = None
            if config is not None:
                accrued = interest.accrue(config.interest_rules, bill.due_date, current, bill.interest_principal)
                projected = format_money(accrued.amount)
        table.add_row(
            bill.flat_number,
            bill.period,
            bill.due_date.isoformat(),
            format_money(bill.interest_amount),
            projected,
        )

    console.print(table)
    console.print(f"\nUnsettled bills: [bold]{len(bills)}[/bold]")

    if dry_run:
        console.print("\n[yellow]--dry-run: no bills were changed.[/yellow]")
        return

    service = BillService(bill_repo, config_service, audit_service)
    changed = service.recalculate_interest(society_id, now=current)

    for bill in changed:
        console.print(
            f"  [green]✓[/green] {bill.flat_number} {bill.period}: "
            f"{format_money(bill.amount)} ({bill.status.value})"
        )
    console.print(f"\n[bold green]{len(changed)} bill(s) updated.[/bold green]")


if __name__ == "__main__":
    main()
