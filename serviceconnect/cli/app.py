"""
Main CLI application using Typer.
"""

import json
import logging
from pathlib import Path
from typing import Optional, Annotated, Union

import pendulum
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from ..config import AppConfig
from ..domain.exceptions import ServiceConnectError
from ..domain.models import WEEKDAY_NAMES, Booking
from ..domain.slot_calculator import SlotCalculator
from ..adapters.api_client import ServiceConnectClient
from ..adapters.json_repository import JsonMarketplaceRepository
from ..services.availability import AvailabilityService
from ..services.bookings import BookingService
from ..services.catalog import search_services
from ..services.schedule import ScheduleService

app = typer.Typer(
    name="serviceconnect",
    help="Check technician availability and manage ServiceConnect bookings",
    add_completion=False
)

console = Console()
err_console = Console(stderr=True)

logger = logging.getLogger(__name__)

Repository = Union[JsonMarketplaceRepository, ServiceConnectClient]

ConfigOption = Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")]
DataOption = Annotated[Optional[Path], typer.Option("--data", help="JSON marketplace data file (overrides the config).")]
RemoteOption = Annotated[bool, typer.Option("--remote", help="Use the ServiceConnect API configured under 'api'.")]


def _configure_logging(level: str) -> None:
    """Route log records through Rich at the configured level."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _load_config(config_file: Optional[Path]) -> AppConfig:
    try:
        config = AppConfig.load(config_file)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)
    
    _configure_logging(config.logging.level)
    return config


def _build_repository(config: AppConfig, data_file: Optional[Path], remote: bool) -> Repository:
    """
    Pick the data source: remote API, explicit data file, configured data
    file, or the bundled sample marketplace.
    """
    if remote:
        logger.debug("Using remote API at %s", config.api.base_url)
        return ServiceConnectClient(
            base_url=config.api.base_url,
            token=config.api.token,
            timeout=config.api.timeout_seconds,
        )
    
    path = data_file or config.data_file
    if path is None:
        err_console.print("[yellow]⚠  No data file configured, using the sample marketplace[/yellow]")
        return JsonMarketplaceRepository.sample()
    
    return JsonMarketplaceRepository.from_file(path)


def _build_services(config: AppConfig, repository: Repository):
    availability = AvailabilityService(
        repository=repository,
        slot_calculator=SlotCalculator(config.scheduling.slot_interval_minutes),
        blocking_statuses=config.scheduling.blocking_set(),
    )
    return availability, BookingService(repository=repository, availability_service=availability)


def _persist(repository: Repository) -> None:
    """Write JSON-backed changes to disk; the API persists on its own."""
    if not isinstance(repository, JsonMarketplaceRepository):
        return
    if repository.path is None:
        err_console.print("[yellow]⚠  Sample data is read-only, changes were not saved[/yellow]")
        return
    repository.save()


def _fail(error: Exception) -> None:
    console.print(f"[bold red]Error:[/bold red] {escape(str(error))}")
    raise typer.Exit(1)


def _print_booking(booking: Booking) -> None:
    console.print(
        f"  [bold]{booking.id}[/bold]  {booking.date.isoformat()} "
        f"{booking.start_time}-{booking.end_time}  service {booking.service_id}  "
        f"[cyan]{booking.status.value}[/cyan]  {booking.amount:,.2f}"
    )


@app.command()
def slots(
    service_id: Annotated[str, typer.Argument(help="Service id")],
    date: Annotated[Optional[str], typer.Option("--date", "-d", help="Date (YYYY-MM-DD). Defaults to today.")] = None,
    as_json: Annotated[bool, typer.Option("--json", help="Print the result as JSON.")] = False,
    config_file: ConfigOption = None,
    data_file: DataOption = None,
    remote: RemoteOption = False,
):
    """
    Show the start times still bookable for a service on a date.
    
    Examples:
        
        serviceconnect slots 1 --date 2024-11-25
        
        serviceconnect slots 3 --json --remote
    """
    config = _load_config(config_file)
    
    try:
        repository = _build_repository(config, data_file, remote)
        availability, _ = _build_services(config, repository)
        requested = date or pendulum.today(config.timezone).to_date_string()
        result = availability.get_time_slots(service_id, requested)
    except (ServiceConnectError, FileNotFoundError, ValueError) as e:
        _fail(e)
    
    if as_json:
        typer.echo(json.dumps(result.to_dict()))
        return
    
    day = result.date.strftime("%A, %d.%m.%Y")
    if not result.technician_available:
        console.print(f"[yellow]⚠ The technician does not work on {day}.[/yellow]")
        return
    
    if not result.time_slots:
        console.print(f"[yellow]⚠ No availability for {day}.[/yellow]")
        return
    
    console.print(f"\n[bold green]✓ {len(result.time_slots)} slot(s) available on {day}:[/bold green]\n")
    console.print("  " + "  ".join(result.time_slots))
    console.print()


@app.command()
def services(
    query: Annotated[Optional[str], typer.Option("--query", "-q", help="Text to look for in service or technician names")] = None,
    category: Annotated[Optional[str], typer.Option("--category", help="Only this category ('all' for every category)")] = None,
    config_file: ConfigOption = None,
    data_file: DataOption = None,
    remote: RemoteOption = False,
):
    """
    List services with their technician and schedule.
    """
    config = _load_config(config_file)
    
    try:
        repository = _build_repository(config, data_file, remote)
        service_list = search_services(repository.list_services(), query=query, category=category)
    except (ServiceConnectError, FileNotFoundError, ValueError) as e:
        _fail(e)
    
    if not service_list:
        console.print("[yellow]No services found.[/yellow]")
        return
    
    table = Table(
        title="Services",
        show_header=True,
        header_style="bold cyan"
    )
    table.add_column("Id", style="bold yellow")
    table.add_column("Service")
    table.add_column("Technician")
    table.add_column("Duration", justify="right")
    table.add_column("Price", justify="right")
    table.add_column("Hours", style="dim")
    
    for service in service_list:
        table.add_row(
            service.id,
            service.name,
            service.technician.name,
            f"{service.duration_minutes} min",
            f"{service.price:,.2f}",
            str(service.technician.working_hours),
        )
    
    console.print()
    console.print(table)
    console.print()


@app.command()
def book(
    service_id: Annotated[str, typer.Argument(help="Service id")],
    date: Annotated[str, typer.Option("--date", "-d", help="Date (YYYY-MM-DD)")],
    start: Annotated[str, typer.Option("--start", "-s", help="Start time (HH:MM)")],
    customer: Annotated[str, typer.Option("--customer", help="Customer id")],
    config_file: ConfigOption = None,
    data_file: DataOption = None,
    remote: RemoteOption = False,
):
    """
    Book a service for a customer, if the start time is still free.
    """
    config = _load_config(config_file)
    
    try:
        repository = _build_repository(config, data_file, remote)
        _, booking_service = _build_services(config, repository)
        booking = booking_service.create_booking(
            service_id=service_id,
            customer_id=customer,
            raw_date=date,
            start_time=start,
        )
        _persist(repository)
    except (ServiceConnectError, FileNotFoundError, ValueError) as e:
        _fail(e)
    
    console.print("\n[bold green]✓ Booking requested:[/bold green]")
    _print_booking(booking)
    console.print()


@app.command("set-status")
def set_status(
    booking_id: Annotated[str, typer.Argument(help="Booking id")],
    status: Annotated[str, typer.Argument(help="New status: CONFIRMED, COMPLETED, CANCELLED or REJECTED")],
    technician: Annotated[str, typer.Option("--technician", "-t", help="Id of the technician making the change")],
    config_file: ConfigOption = None,
    data_file: DataOption = None,
    remote: RemoteOption = False,
):
    """
    Confirm, complete, cancel or reject a booking.
    """
    config = _load_config(config_file)
    
    try:
        repository = _build_repository(config, data_file, remote)
        _, booking_service = _build_services(config, repository)
        booking = booking_service.update_status(
            booking_id=booking_id,
            technician_id=technician,
            new_status=status,
        )
        _persist(repository)
    except (ServiceConnectError, FileNotFoundError, ValueError) as e:
        _fail(e)
    
    console.print("\n[bold green]✓ Booking updated:[/bold green]")
    _print_booking(booking)
    console.print()


@app.command()
def bookings(
    technician: Annotated[Optional[str], typer.Option("--technician", "-t", help="Only bookings of this technician")] = None,
    customer: Annotated[Optional[str], typer.Option("--customer", help="Only bookings of this customer")] = None,
    status: Annotated[Optional[str], typer.Option("--status", help="Only bookings in this status")] = None,
    config_file: ConfigOption = None,
    data_file: DataOption = None,
    remote: RemoteOption = False,
):
    """
    List bookings, newest first.
    """
    config = _load_config(config_file)
    
    try:
        repository = _build_repository(config, data_file, remote)
        _, booking_service = _build_services(config, repository)
        booking_list = booking_service.list_bookings(
            technician_id=technician,
            customer_id=customer,
            status=status,
        )
    except (ServiceConnectError, FileNotFoundError, ValueError) as e:
        _fail(e)
    
    if not booking_list:
        console.print("[yellow]No bookings found.[/yellow]")
        return
    
    console.print(f"\n[bold]{len(booking_list)} booking(s):[/bold]")
    for booking in booking_list:
        _print_booking(booking)
    console.print()


@app.command()
def schedule(
    technician: Annotated[str, typer.Argument(help="Technician id")],
    start: Annotated[Optional[str], typer.Option("--from", help="First date (YYYY-MM-DD)")] = None,
    end: Annotated[Optional[str], typer.Option("--to", help="Last date, inclusive (YYYY-MM-DD)")] = None,
    as_json: Annotated[bool, typer.Option("--json", help="Print the schedule as JSON.")] = False,
    config_file: ConfigOption = None,
    data_file: DataOption = None,
    remote: RemoteOption = False,
):
    """
    Show a technician's working days, hours and bookings, oldest first.
    
    Examples:
        
        serviceconnect schedule tech-1 --from 2024-11-25 --to 2024-12-01
    """
    config = _load_config(config_file)
    
    try:
        repository = _build_repository(config, data_file, remote)
        result = ScheduleService(repository).get_schedule(technician, start, end)
    except (ServiceConnectError, FileNotFoundError, ValueError) as e:
        _fail(e)
    
    if as_json:
        typer.echo(json.dumps(result.to_dict()))
        return
    
    profile = result.technician
    days = [name.capitalize() for name in WEEKDAY_NAMES if getattr(profile.availability, name)]
    console.print(f"\n[bold cyan]{escape(profile.name or profile.id)}[/bold cyan]")
    console.print(f"  Works: {', '.join(days) or 'no days'}")
    console.print(f"  Hours: {profile.working_hours}")
    
    if not result.bookings:
        console.print("[yellow]No bookings in this range.[/yellow]\n")
        return
    
    console.print(f"\n[bold]{len(result.bookings)} booking(s):[/bold]")
    for booking in result.bookings:
        _print_booking(booking)
    console.print()


@app.command("set-hours")
def set_hours(
    technician: Annotated[str, typer.Argument(help="Technician id")],
    start: Annotated[Optional[str], typer.Option("--start", "-s", help="Opening time (HH:MM)")] = None,
    end: Annotated[Optional[str], typer.Option("--end", "-e", help="Closing time (HH:MM)")] = None,
    days: Annotated[Optional[str], typer.Option("--days", help="Comma-separated working weekdays, e.g. monday,tuesday")] = None,
    config_file: ConfigOption = None,
    data_file: DataOption = None,
    remote: RemoteOption = False,
):
    """
    Change a technician's working hours and/or working weekdays.
    """
    config = _load_config(config_file)
    
    try:
        working_hours = None
        if start is not None or end is not None:
            if start is None or end is None:
                raise ValueError("Pass both --start and --end to change working hours")
            working_hours = {"start": start, "end": end}
        
        availability = None
        if days is not None:
            chosen = {day.strip().lower() for day in days.split(",") if day.strip()}
            unknown = sorted(chosen - set(WEEKDAY_NAMES))
            if unknown:
                raise ValueError(f"Unknown weekday(s): {', '.join(unknown)}")
            availability = {name: name in chosen for name in WEEKDAY_NAMES}
        
        repository = _build_repository(config, data_file, remote)
        updated = ScheduleService(repository).update_availability(
            technician,
            availability=availability,
            working_hours=working_hours,
        )
        _persist(repository)
    except (ServiceConnectError, FileNotFoundError, ValueError) as e:
        _fail(e)
    
    days_on = [name.capitalize() for name in WEEKDAY_NAMES if getattr(updated.availability, name)]
    console.print(f"\n[bold green]✓ Schedule updated for {escape(updated.name or updated.id)}:[/bold green]")
    console.print(f"  Works: {', '.join(days_on) or 'no days'}")
    console.print(f"  Hours: {updated.working_hours}\n")


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]serviceconnect[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
