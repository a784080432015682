"""CLI entrypoint: Typer app definition and command registration"""

import typer

from mdpost.cli.commands import (
    build_cmd, check_cmd, diff_cmd, history_cmd, init_cmd, list_cmd,
    main_callback, parse_cmd, revert_cmd,
)


app = typer.Typer(name="mdpost", no_args_is_help=True, help="Front-matter markdown article publisher")

app.callback()(main_callback)
app.command(name="parse")(parse_cmd)
app.command(name="check")(check_cmd)
app.command(name="build")(build_cmd)
app.command(name="list")(list_cmd)
app.command(name="init")(init_cmd)
app.command(name="history")(history_cmd)
app.command(name="diff")(diff_cmd)
app.command(name="revert")(revert_cmd)
