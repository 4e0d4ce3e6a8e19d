"""
Freelance Desk - terminal dashboard for freelancers.

Signs in to Supabase, mirrors the user's projects, clients and payments,
and renders the dashboard, the filtered lists, the payment tracker and the
earnings analytics. Optionally exports the lists as CSV or text files.
"""

import argparse
import asyncio
import logging
import os
import sys
from datetime import date
from decimal import Decimal
from typing import Optional

from app import FreelanceDesk, create_supabase_app
from core.display import (
    console,
    print_analytics,
    print_clients,
    print_overdue,
    print_payments,
    print_projects,
    print_stats,
)
from modules.auth import AuthError
from modules.dashboard import (
    AmountRange,
    DateRange,
    FilterCriteria,
    filter_clients,
    filter_projects,
    monthly_earnings,
    overdue_payments,
    overdue_projects,
    status_breakdown,
    summarize_payments,
)
from modules.export import ExportFormat, write_export
from modules.records import RecordKind
from shared.config import Settings, get_settings

READY_TIMEOUT_SECONDS = 30


async def prompt_for_code(url: str) -> Optional[str]:
    """Show the provider URL and read back the code from the redirect."""
    console.print(f"Open this URL to sign in:\n[link={url}]{url}[/link]")
    code = await asyncio.to_thread(input, "Paste the code from the redirect URL: ")
    return code.strip() or None


async def sign_in(desk: FreelanceDesk, args: argparse.Namespace) -> None:
    if args.provider:
        await desk.session.login_with_provider(prompt_for_code)
        return

    if not args.email:
        raise SystemExit("Not signed in: use --email or --provider")
    password = args.password or os.environ.get("FREELANCE_DESK_PASSWORD")
    if not password:
        raise SystemExit("A password is required: use --password or FREELANCE_DESK_PASSWORD")
    await desk.session.login(args.email, password)


def build_criteria(args: argparse.Namespace, settings: Settings) -> FilterCriteria:
    return FilterCriteria(
        search=args.search,
        status=args.status,
        date_range=DateRange(start=args.date_from, end=args.date_to),
        amount_range=AmountRange(
            min=args.min if args.min is not None else Decimal(0),
            max=args.max if args.max is not None else settings.default_amount_max,
        ),
    )


def render(desk: FreelanceDesk, criteria: FilterCriteria, settings: Settings) -> None:
    symbol = settings.currency_symbol
    projects = desk.mirror.projects.items
    payments = desk.mirror.payments.items

    identity = desk.session.current_identity
    if identity is not None:
        console.print(f"[bold]Welcome back, {identity.label}[/bold]\n")

    print_stats(desk.stats.current, symbol)
    print_overdue(overdue_projects(projects), overdue_payments(payments), projects, symbol)
    console.print()
    print_projects(filter_projects(projects, criteria), symbol)
    print_clients(filter_clients(desk.mirror.clients.items, criteria))
    console.print()
    print_payments(summarize_payments(projects, payments), payments, projects, symbol)
    print_analytics(
        monthly_earnings(projects, settings.earnings_months),
        status_breakdown(projects),
        symbol,
    )


def export(desk: FreelanceDesk, kinds: list[str], fmt: ExportFormat, settings: Settings) -> None:
    for name in kinds:
        kind = RecordKind(name)
        path = write_export(kind, desk.mirror.stream(kind).items, fmt, settings.export_dir)
        if path is None:
            console.print(f"[yellow]Nothing to export:[/yellow] no {kind.value}")
        else:
            console.print(f"[green]Exported[/green] {kind.value} to {path}")


async def run(args: argparse.Namespace, settings: Settings) -> int:
    desk = await create_supabase_app(settings)
    await desk.start()
    try:
        if desk.session.current_identity is None:
            await sign_in(desk, args)

        await desk.settle()
        if desk.last_bind_error is not None:
            console.print(f"[red]Error:[/red] {desk.last_bind_error.message}")
            return 1

        await asyncio.wait_for(desk.mirror.wait_until_ready(), READY_TIMEOUT_SECONDS)
        desk.stats.refresh()

        render(desk, build_criteria(args, settings), settings)
        if args.export:
            export(desk, args.export, ExportFormat(args.format), settings)
        return 0
    finally:
        await desk.close()


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Freelance project, client and payment dashboard backed by Supabase"
    )
    login = parser.add_mutually_exclusive_group()
    login.add_argument("--email", help="Account email for password sign-in")
    login.add_argument(
        "--provider",
        action="store_true",
        help="Sign in with the configured OAuth provider instead of a password",
    )
    parser.add_argument("--password", help="Account password (or set FREELANCE_DESK_PASSWORD)")
    parser.add_argument("--search", default="", help="Filter by title, client, name or email")
    parser.add_argument(
        "--status",
        default="",
        choices=["", "ongoing", "completed"],
        help="Show only projects with this status",
    )
    parser.add_argument("--from", dest="date_from", type=date.fromisoformat,
                        help="Earliest project deadline (YYYY-MM-DD)")
    parser.add_argument("--to", dest="date_to", type=date.fromisoformat,
                        help="Latest project deadline (YYYY-MM-DD)")
    parser.add_argument("--min", type=Decimal, help="Minimum project payment")
    parser.add_argument("--max", type=Decimal, help="Maximum project payment")
    parser.add_argument(
        "--export",
        action="append",
        choices=[kind.value for kind in RecordKind],
        help="Export a list after rendering (repeatable)",
    )
    parser.add_argument(
        "--format",
        default=ExportFormat.CSV.value,
        choices=[fmt.value for fmt in ExportFormat],
        help="Export file format (default: csv)",
    )
    args = parser.parse_args(argv)

    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        return asyncio.run(run(args, settings))
    except AuthError as e:
        console.print(f"[red]Sign-in failed:[/red] {e.reason}")
    except RuntimeError as e:
        console.print(f"[red]Error:[/red] {e}")
    except asyncio.TimeoutError:
        console.print("[red]Error:[/red] Timed out waiting for records")
    return 1


if __name__ == "__main__":
    sys.exit(main())
