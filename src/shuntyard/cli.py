"""Command-line interface for shuntyard."""

from __future__ import annotations

import json
from pathlib import Path

import click

from shuntyard import __version__
from shuntyard.config import configure_logging, load_config
from shuntyard.context import Context
from shuntyard.errors import EvalError
from shuntyard.evaluator import eval_str_with_vars_and_ctx


@click.group()
@click.version_option(version=__version__, prog_name="shuntyard")
def main() -> None:
    """shuntyard -- evaluate arithmetic expressions with variables and macros."""


# ---------------------------------------------------------------------------
# helpers
# ---------------------------------------------------------------------------


def _parse_vars(items: tuple[str, ...]) -> dict[str, float]:
    variables: dict[str, float] = {}
    for item in items:
        if "=" not in item:
            raise click.ClickException(f"Invalid --var format: {item!r}. Use name=value.")
        name, raw = item.split("=", 1)
        try:
            variables[name.strip()] = float(raw)
        except ValueError:
            raise click.ClickException(f"Invalid value for {name!r}: {raw!r}") from None
    return variables


def _context(project: str, macros: bool) -> Context:
    project_dir = Path(project)
    config = load_config(project_dir)
    if macros:
        config["macros"] = True
    configure_logging(config, project_dir)
    return Context.from_config(config)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@main.command("eval")
@click.argument("expr")
@click.option("--var", "var_items", multiple=True, help="Set a variable as name=value.")
@click.option("--macros", is_flag=True, help="Enable assignment macros.")
@click.option("--project", default=".", type=click.Path(exists=True, file_okay=False), help="Directory holding shuntyard.yaml.")
@click.option("--json", "as_json", is_flag=True, help="Output result and variables as JSON.")
def eval_cmd(expr: str, var_items: tuple[str, ...], macros: bool, project: str, as_json: bool) -> None:
    """Evaluate EXPR and print the result."""
    variables = _parse_vars(var_items)
    ctx = _context(project, macros)
    try:
        result = eval_str_with_vars_and_ctx(expr, variables, ctx)
    except EvalError as exc:
        click.echo(exc.report(expr), err=True)
        raise SystemExit(1) from None
    if as_json:
        click.echo(json.dumps({"result": result, "variables": variables}, sort_keys=True))
    else:
        click.echo(f"{result:g}")


@main.command()
@click.option("--macros", is_flag=True, help="Enable assignment macros.")
@click.option("--project", default=".", type=click.Path(exists=True, file_okay=False), help="Directory holding shuntyard.yaml.")
def repl(macros: bool, project: str) -> None:
    """Read expressions line by line, sharing one variable store."""
    ctx = _context(project, macros)
    variables: dict[str, float] = {}
    stdin = click.get_text_stream("stdin")
    while True:
        click.echo(">> ", nl=False)
        line = stdin.readline()
        if not line:
            click.echo()
            break
        expr = line.strip()
        if not expr:
            continue
        try:
            click.echo(f"{eval_str_with_vars_and_ctx(expr, variables, ctx):g}")
        except EvalError as exc:
            click.echo(f"Error: {exc}", err=True)


if __name__ == "__main__":
    main()
