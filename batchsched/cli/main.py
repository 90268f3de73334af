"""
batchsched CLI - run scheduling passes from the command line.

Usage:
    batchsched run           Schedule a workload and write the utilization report
    batchsched policies      List the available ordering policies
    batchsched status        Show the effective configuration
    batchsched validate      Validate configuration
"""

import json
from pathlib import Path
from typing import List, Optional

import typer
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..config import get_config
from ..errors import BatchSchedError
from ..report import render_utilization_table, write_utilization_csv
from ..scheduler import BatchScheduler
from ..scheduler.policies import POLICIES
from ..types import AllocationEvent
from ..workload import load_workload, sample_workload, submit_workload

console = Console()
cli = typer.Typer(
    name="batchsched",
    help="Cluster batch scheduler: ordering policies, first-fit placement, utilization reports.",
    no_args_is_help=True,
)


@cli.command()
def run(
    workload: Optional[Path] = typer.Option(
        None, "--workload", "-w", help="JSON workload file (default: built-in sample jobs)"
    ),
    nodes: Optional[int] = typer.Option(None, "--nodes", "-n", help="Number of worker nodes"),
    cores: Optional[int] = typer.Option(None, "--cores", help="CPU cores per node"),
    memory: Optional[int] = typer.Option(None, "--memory", "-m", help="Memory (GB) per node"),
    policy: Optional[List[str]] = typer.Option(
        None, "--policy", "-p", help="Policy pass to run; repeat to set the order"
    ),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="CSV report path"),
    all_nodes: bool = typer.Option(False, "--all-nodes", help="Show idle nodes in the table"),
    output_json: bool = typer.Option(False, "--json", help="Print pass results as JSON"),
):
    """Schedule a workload and write the per-node utilization report."""
    config = get_config()
    output = output or Path(config.report.output_path)

    try:
        jobs = load_workload(workload) if workload else sample_workload()
        scheduler = BatchScheduler(num_nodes=nodes, cores_per_node=cores,
                                   memory_per_node=memory, config=config)
        submit_workload(scheduler, jobs)
        results = scheduler.run_all(policy or None)
        rows = scheduler.utilization_report()
        report_path = write_utilization_csv(rows, output, precision=config.report.precision)
    except (BatchSchedError, OSError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)
    except ValueError as e:
        console.print(f"[red]Validation error:[/red] {e}")
        raise typer.Exit(code=1)

    if output_json:
        console.print(json.dumps({
            "passes": [r.to_dict() for r in results],
            "pending": [job.job_id for job in scheduler.pending_jobs],
            "summary": scheduler.summary(),
            "report": str(report_path),
        }, indent=2, default=str), markup=False, highlight=False, soft_wrap=True)
        return

    for result in results:
        console.print(f"\n[bold]Scheduling using {POLICIES[result.policy].description}:[/bold]")
        if result.is_empty:
            console.print("  [dim]queue empty[/dim]")
        for event in result.events:
            if isinstance(event, AllocationEvent):
                console.print(f"  Job {event.job_id} allocated to Node {event.node_id}")
            else:
                console.print(f"  [yellow]Job {event.job_id} could not be allocated[/yellow]")

    shown = rows if all_nodes else [row for row in rows if not row.is_idle]
    console.print()
    if shown:
        console.print(render_utilization_table(shown, precision=config.report.precision))
    else:
        console.print("[dim]All nodes idle.[/dim]")

    pending = scheduler.pending_jobs
    if pending:
        console.print(f"[yellow]{len(pending)} job(s) pending:[/yellow] "
                      + ", ".join(str(job.job_id) for job in pending))

    console.print(f"\nUtilization report generated in '{report_path}'.")


@cli.command()
def policies():
    """List the available ordering policies."""
    table = Table(title="Ordering Policies", box=box.ROUNDED)
    table.add_column("Name", style="bold")
    table.add_column("Description")

    for name, ordering in POLICIES.items():
        table.add_row(name, ordering.description)

    console.print(table)


@cli.command()
def status():
    """Show the effective configuration."""
    config = get_config()

    cluster_table = Table(show_header=False, box=box.SIMPLE)
    cluster_table.add_column("Setting", style="bold")
    cluster_table.add_column("Value")

    cluster_table.add_row("Worker nodes", str(config.cluster.num_nodes))
    cluster_table.add_row("Cores per node", str(config.cluster.cores_per_node))
    cluster_table.add_row("Memory per node (GB)", str(config.cluster.memory_per_node_gb))
    cluster_table.add_row("Placement", config.placement_strategy)
    cluster_table.add_row("Policy order", ", ".join(config.policy_order))

    console.print(Panel(cluster_table, title="Cluster Configuration", border_style="blue"))

    output_table = Table(show_header=False, box=box.SIMPLE)
    output_table.add_column("Setting", style="bold")
    output_table.add_column("Value")

    output_table.add_row("Report path", config.report.output_path)
    output_table.add_row("Precision", str(config.report.precision))
    output_table.add_row("Log level", config.logging.log_level)
    output_table.add_row("Log format", config.logging.log_format)

    console.print(Panel(output_table, title="Output Configuration", border_style="cyan"))


@cli.command()
def validate():
    """Validate configuration."""
    config = get_config()

    console.print("[bold]Running validation checks...[/bold]\n")
    errors = config.validate()

    for err in errors:
        console.print(f"  [red]FAIL[/red] {err}")
    if not errors:
        console.print("  [green]PASS[/green] Configuration is valid")

    console.print()
    if errors:
        console.print(f"[red]Validation failed with {len(errors)} error(s).[/red]")
        raise typer.Exit(code=1)
    else:
        console.print("[green]All validation checks passed.[/green]")


if __name__ == "__main__":
    cli()
