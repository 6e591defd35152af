"""machindex CLI: inspect the shared machine index."""

from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape

from machindex import __version__

from .config import get_config_path, load_config, write_config_template
from .constants import DATA_DIR_ENV, DEFAULT_DATA_DIR
from .core import MachineIndex
from .errors import CorruptRegistry, InvalidConfig, RecordLocked
from .logging import configure_logging
from .output import OutputContext, get_output_context, record_to_dict, set_output_context


def _version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"machindex {__version__}")
        raise typer.Exit()


app = typer.Typer(
    name="machindex",
    help="Shared machine index with cross-process locking",
    no_args_is_help=True,
)

# Set by the main callback
_data_dir: Path = Path(DEFAULT_DATA_DIR).expanduser()


def _open_index() -> MachineIndex:
    """Open the index of the selected data directory, exiting on failure."""
    ctx = get_output_context()

    if not _data_dir.is_dir():
        ctx.error(f"Data directory not found: {_data_dir}. Run: machindex init")
        raise typer.Exit(1) from None

    try:
        config = load_config(_data_dir)
    except InvalidConfig as e:
        ctx.error(str(e), {"path": str(e.path)})
        raise typer.Exit(1) from None

    try:
        return MachineIndex(_data_dir, config=config.index)
    except CorruptRegistry as e:
        ctx.error(str(e), {"path": str(e.path)})
        raise typer.Exit(1) from None


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase verbosity (-v, -vv)",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Suppress non-error output",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output in JSON format for automation",
    ),
    no_color: bool = typer.Option(
        False,
        "--no-color",
        help="Disable colored output",
    ),
    data_dir: Path = typer.Option(
        Path(DEFAULT_DATA_DIR),
        "--data-dir",
        "-d",
        envvar=DATA_DIR_ENV,
        help="Directory holding the machine index",
    ),
) -> None:
    """machindex - shared machine index with cross-process locking."""
    global _data_dir
    configure_logging(
        verbosity=verbose,
        quiet=quiet,
        no_color=no_color,
    )
    _data_dir = data_dir.expanduser()
    set_output_context(OutputContext(console=Console(no_color=no_color), json_mode=json_output))


@app.command()
def init() -> None:
    """Create the data directory and a config template."""
    ctx = get_output_context()

    config_path = get_config_path(_data_dir)
    if config_path.exists():
        ctx.error(f"Config already exists: {config_path}")
        raise typer.Exit(1) from None

    _data_dir.mkdir(parents=True, exist_ok=True)
    write_config_template(_data_dir)
    ctx.success(f"Initialized machine index in {_data_dir}", {"data_dir": str(_data_dir)})


@app.command("list")
def list_machines() -> None:
    """List every machine in the index without checking any out."""
    ctx = get_output_context()

    with _open_index() as index:
        try:
            records = index.records()
        except CorruptRegistry as e:
            ctx.error(str(e), {"path": str(e.path)})
            raise typer.Exit(1) from None

    ctx.records(records)


@app.command()
def show(
    machine_id: str = typer.Argument(..., help="Id of the machine"),
) -> None:
    """Show one machine. Fails if another process has it checked out."""
    ctx = get_output_context()

    with _open_index() as index:
        try:
            record = index.get(machine_id)
        except RecordLocked as e:
            ctx.error(str(e), {"name": e.name, "provider": e.provider})
            raise typer.Exit(1) from None
        except CorruptRegistry as e:
            ctx.error(str(e), {"path": str(e.path)})
            raise typer.Exit(1) from None

        if record is None:
            ctx.error(f"Machine not found: {machine_id}")
            raise typer.Exit(1) from None

        try:
            data = record_to_dict(record)
            if ctx.json_mode:
                ctx.print_json(data)
            else:
                for key, value in data.items():
                    shown = escape(str(value)) if value is not None else ""
                    ctx.print(f"[bold]{escape(key)}[/bold]: {shown}")
        finally:
            index.release(record)


if __name__ == "__main__":
    app()
