"""Rich terminal views of the dashboard."""

from typing import Sequence

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from modules.dashboard import (
    DashboardStats,
    MonthlyEarnings,
    PaymentSummary,
    StatusBreakdown,
    format_currency,
    format_date,
)
from modules.records import Client, Payment, Project, ProjectStatus

console = Console()

STATUS_STYLES = {
    "ongoing": "yellow",
    "completed": "green",
    "pending": "yellow",
    "paid": "green",
    "partial": "cyan",
    "refunded": "magenta",
}


def format_status(status: str) -> str:
    """Colour a status value for display.

    Example: "ongoing" -> "[yellow]Ongoing[/yellow]"
    """
    style = STATUS_STYLES.get(status, "white")
    return f"[{style}]{status.title()}[/{style}]"


def print_stats(stats: DashboardStats, symbol: str = "$") -> None:
    """Print the headline numbers as a grid of panels."""
    grid = Table.grid(expand=True, padding=(0, 1))
    for _ in range(4):
        grid.add_column(ratio=1)

    def card(title: str, value: str, style: str = "blue") -> Panel:
        return Panel(f"[bold]{value}[/bold]", title=title, border_style=style)

    grid.add_row(
        card("Total Projects", str(stats.total_projects)),
        card("Ongoing", str(stats.ongoing_projects), "yellow"),
        card("Completed", str(stats.completed_projects), "green"),
        card("Clients", str(stats.total_clients)),
    )
    grid.add_row(
        card("Total Earnings", format_currency(stats.total_earnings, symbol), "green"),
        card("Pending Payments", format_currency(stats.pending_payments, symbol), "yellow"),
        card("Overdue Projects", str(stats.overdue_projects), "red"),
        card("Overdue Payments", str(stats.overdue_payments), "red"),
    )
    console.print(grid)


def print_projects(projects: Sequence[Project], symbol: str = "$") -> None:
    if not projects:
        console.print("[dim]No projects found.[/dim]")
        return

    table = Table(title=f"Projects ({len(projects)})")
    table.add_column("Title", style="cyan")
    table.add_column("Client")
    table.add_column("Deadline")
    table.add_column("Payment", justify="right")
    table.add_column("Status")

    for project in projects:
        table.add_row(
            project.title,
            project.client,
            format_date(project.deadline),
            format_currency(project.payment, symbol),
            format_status(project.status.value),
        )
    console.print(table)


def print_clients(clients: Sequence[Client]) -> None:
    if not clients:
        console.print("[dim]No clients found.[/dim]")
        return

    table = Table(title=f"Clients ({len(clients)})")
    table.add_column("Name", style="cyan")
    table.add_column("Email")
    table.add_column("Phone")
    table.add_column("Country")
    table.add_column("Added")

    for client in clients:
        table.add_row(
            client.name,
            client.email,
            client.phone,
            client.country or "",
            format_date(client.created_at),
        )
    console.print(table)


def print_payments(
    summary: PaymentSummary,
    payments: Sequence[Payment],
    projects: Sequence[Project],
    symbol: str = "$",
) -> None:
    """Print the payment tracker: totals followed by the payment records."""
    console.print(
        f"[bold]Earned:[/bold] {format_currency(summary.total_earnings, symbol)}  "
        f"[bold]Pending:[/bold] {format_currency(summary.pending_payments, symbol)}  "
        f"[bold]Potential:[/bold] {format_currency(summary.potential_earnings, symbol)}"
    )
    console.print(
        f"[dim]Paid records: {format_currency(summary.paid_amount, symbol)} | "
        f"Overdue records: {format_currency(summary.overdue_amount, symbol)}[/dim]"
    )

    if not payments:
        return

    titles = {project.id: project.title for project in projects}
    table = Table(title=f"Payments ({len(payments)})")
    table.add_column("Project", style="cyan")
    table.add_column("Amount", justify="right")
    table.add_column("Due")
    table.add_column("Status")
    table.add_column("Description")

    for payment in payments:
        table.add_row(
            titles.get(payment.project_id, payment.project_id),
            format_currency(payment.amount, symbol),
            format_date(payment.due_date),
            format_status(payment.status.value),
            payment.description or "",
        )
    console.print(table)


def print_analytics(
    earnings: Sequence[MonthlyEarnings],
    breakdown: StatusBreakdown,
    symbol: str = "$",
) -> None:
    """Print monthly earnings as a bar chart plus the status breakdown."""
    peak = max((month.earnings for month in earnings), default=0) or 1
    width = 40

    console.print("\n[bold]Monthly Earnings[/bold]")
    for month in earnings:
        bar = "█" * int(width * month.earnings / peak)
        console.print(f"{month.label:>4} {bar} {format_currency(month.earnings, symbol)}")

    console.print(
        f"\n[bold]Status:[/bold] "
        f"{format_status(ProjectStatus.COMPLETED.value)} {breakdown.completed}  "
        f"{format_status(ProjectStatus.ONGOING.value)} {breakdown.ongoing}"
    )


def print_overdue(
    projects: Sequence[Project],
    payments: Sequence[Payment],
    all_projects: Sequence[Project] = (),
    symbol: str = "$",
) -> None:
    """List overdue projects and payments under the stats grid. Prints nothing when both are empty."""
    if not projects and not payments:
        return

    if projects:
        console.print(f"[bold red]Overdue projects ({len(projects)})[/bold red]")
        for project in projects:
            console.print(f"  {project.title} [dim](due {format_date(project.deadline)})[/dim]")

    if payments:
        titles = {project.id: project.title for project in all_projects}
        console.print(f"[bold red]Overdue payments ({len(payments)})[/bold red]")
        for payment in payments:
            console.print(
                f"  {titles.get(payment.project_id, payment.project_id)}: "
                f"{format_currency(payment.amount, symbol)} "
                f"[dim](due {format_date(payment.due_date)})[/dim]"
            )
