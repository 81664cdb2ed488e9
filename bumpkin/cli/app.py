from __future__ import annotations

import typer

from bumpkin import __version__
from bumpkin.cli.commands.analyze import analyze
from bumpkin.cli.commands.bump import bump
from bumpkin.cli.commands.current import current
from bumpkin.cli.commands.hooks_cmd import hooks
from bumpkin.cli.commands.init_cmd import init

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
    help="Semantic version tagging for git repositories.",
)

app.command()(bump)
app.command()(current)
app.command()(analyze)
app.command()(hooks)
app.command()(init)


def _show_version(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(code=0)


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    version: bool = typer.Option(
        False,
        "--version",
        callback=_show_version,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Semantic version tagging for git repositories."""


def main() -> None:
    app()


if __name__ == "__main__":
    main()
