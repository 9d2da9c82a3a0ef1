from __future__ import annotations

import typer

from .commands import jump as jump_cmd

app = typer.Typer(
    name=jump_cmd.PROG_NAME,
    help="zjump: jump around faster.",
    add_completion=False,
    no_args_is_help=False,
)

# A single registered command runs without a subcommand name: `zjump -l proj`.
app.command(name="jump")(jump_cmd.jump)


def cli() -> None:
    app(prog_name=jump_cmd.PROG_NAME)


if __name__ == "__main__":
    cli()
