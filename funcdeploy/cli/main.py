# Copyright The Volcano Authors.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Main CLI entry point for funcdeploy.

This module defines the command-line interface using Typer, deploying the
functions of a serverless service to a Kubeless cluster.
"""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from funcdeploy.runtime.deploy_runtime import DeployRuntime

console = Console()

app = typer.Typer(
    name="funcdeploy",
    help="funcdeploy - Deploy the functions of a serverless service to a Kubeless cluster",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)


def version_callback(value: bool) -> None:
    """Show version information and exit."""
    if value:
        from funcdeploy import __version__
        console.print(f"funcdeploy version: [bold green]{__version__}[/bold green]")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """funcdeploy - serverless function deployment for Kubeless."""


def _event_kind(event) -> str:
    # functions without a handler keep their events as declared
    if isinstance(event, dict):
        return event.get("type") or next(iter(event), "?")
    return str(event)


def _print_functions(functions) -> None:
    table = Table(title="Functions")
    table.add_column("Function", style="cyan")
    table.add_column("Handler", style="green")
    table.add_column("Runtime")
    table.add_column("Dependencies")
    table.add_column("Events")

    for function in functions:
        table.add_row(
            function["id"],
            function.get("handler") or "-",
            function.get("runtime") or "-",
            "yes" if function.get("deps") else "no",
            ", ".join(_event_kind(event) for event in function.get("events") or []) or "-",
        )

    console.print(table)


@app.command()
def deploy(
    config: str = typer.Option(
        ".",
        "-c",
        "--config",
        help="Path to serverless.yml or the service directory",
        show_default=True,
    ),
    package: Optional[str] = typer.Option(
        None,
        "-p",
        "--package",
        help="Path to a packaged artifact, or the directory of per-function artifacts",
    ),
    force: bool = typer.Option(
        False,
        "--force",
        help="Update functions that already exist",
    ),
    stage: Optional[str] = typer.Option(
        None,
        "--stage",
        help="Stage (not supported by Kubeless)",
    ),
    region: Optional[str] = typer.Option(
        None,
        "--region",
        help="Region (not supported by Kubeless)",
    ),
    kubeconfig: Optional[str] = typer.Option(
        None,
        "--kubeconfig",
        help="Path to the kubeconfig file",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Populate the functions and print them without deploying",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        help="Enable detailed logging",
    ),
) -> None:
    """
    Deploy all functions of the service.

    Every function is populated with its artifact, dependency file and
    events, then the whole batch is submitted to the cluster.
    """
    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
        ) as progress:
            task = progress.add_task("Deploying functions...", total=None)

            runtime = DeployRuntime(verbose=verbose, kubeconfig=kubeconfig, log=console.print)
            service_path = Path(config).resolve()

            options = {
                "package": package,
                "force": force,
                "stage": stage,
                "region": region,
            }

            # Filter out None values
            options = {k: v for k, v in options.items() if v is not None}

            result = runtime.deploy(service_path, dry_run=dry_run, **options)

            progress.update(task, description="Deploy completed! ✅")

        if dry_run:
            _print_functions(result["functions"])
            return

        console.print(f"✅ Successfully deployed service: [bold green]{result['service']}[/bold green]")
        for function in result["functions"]:
            console.print(
                f"📦 {function['namespace']}/{function['name']}: [blue]{function['status']}[/blue]"
            )

    except Exception as e:
        console.print(f"❌ Error deploying service: [red]{str(e)}[/red]")
        if verbose:
            import traceback
            console.print(traceback.format_exc())
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
