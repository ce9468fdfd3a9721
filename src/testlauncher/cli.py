"""Command-line interface for TestLauncher."""

import sys
from pathlib import Path

import click
from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel

from testlauncher import __version__
from testlauncher.config import DEFAULT_REMOTE_PORT, create_example_config
from testlauncher.errors import LauncherError


console = Console(stderr=True)


def print_banner() -> None:
    """Print the TestLauncher banner."""
    console.print(
        Panel.fit(
            "[bold blue]TestLauncher[/bold blue] - test run launcher",
            subtitle=f"v{__version__}",
        )
    )


@click.group()
@click.version_option(version=__version__, prog_name="testlauncher")
def main() -> None:
    """TestLauncher - turn a command line into a completed test run.

    Runs the configured test command locally, or on a remote launcher
    server when --remote is given and one is listening.
    """


@main.command(
    context_settings={"ignore_unknown_options": True, "allow_interspersed_args": False},
    add_help_option=False,
)
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
def run(args: tuple[str, ...]) -> None:
    """Run the test suite. Pass --help after 'run' for launcher options."""
    from testlauncher.core.runner import default_runner

    try:
        status = default_runner.run(list(args))
    except click.exceptions.Exit as e:
        sys.exit(e.exit_code)
    except click.ClickException as e:
        console.print(f"[red]Error:[/red] {e.format_message()}")
        sys.exit(1)
    except (ValidationError, FileNotFoundError) as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        sys.exit(1)
    except LauncherError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)

    sys.exit(status)


@main.command()
@click.option("--host", default="127.0.0.1", show_default=True, help="Address to listen on")
@click.option(
    "--port",
    type=int,
    default=DEFAULT_REMOTE_PORT,
    show_default=True,
    envvar="TESTLAUNCHER_REMOTE_PORT",
    help="Port to listen on",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose server logging")
def serve(host: str, port: int, verbose: bool) -> None:
    """Serve test runs for remote launchers."""
    print_banner()
    from testlauncher.remote.server import serve as serve_forever

    console.print(f"[green]Listening on[/green] http://{host}:{port}")
    serve_forever(host=host, port=port, log_level="debug" if verbose else "warning")


@main.command()
@click.option(
    "--output",
    "-o",
    type=click.Path(),
    default="testlauncher.json",
    help="Output path for configuration file",
)
@click.option("--force", "-f", is_flag=True, help="Overwrite existing configuration")
def init(output: str, force: bool) -> None:
    """Initialize a new TestLauncher configuration file."""
    print_banner()

    output_path = Path(output)
    if output_path.exists() and not force:
        console.print(
            f"[yellow]Configuration file already exists:[/yellow] {output_path}"
        )
        console.print("Use --force to overwrite")
        sys.exit(1)

    try:
        create_example_config(output_path)
        console.print(f"[green]Created configuration file:[/green] {output_path}")
        console.print("\nNext steps:")
        console.print("  1. Edit the configuration file for your project")
        console.print("  2. Run [bold]testlauncher run[/bold] to execute tests")
    except OSError as e:
        console.print(f"[red]Error creating configuration:[/red] {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
