"""Main CLI entry point for nested-tree maintenance commands."""

import click

from nested_tree.cli.commands import tree
from nested_tree.infra.logging.config import setup_logging


@click.group()
@click.version_option(version="0.1.0", prog_name="nested-tree")
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Nested-tree CLI - maintenance commands for nested-set tables.

    \b
    Command Groups:
      tree       Verify, recover, reorder and display a tree

    \b
    Quick Start:
      nested-tree tree --model myapp.models:Category init
      nested-tree tree --model myapp.models:Category verify
      nested-tree tree --model myapp.models:Category show
    """
    setup_logging()
    ctx.ensure_object(dict)


cli.add_command(tree.tree)


def main() -> None:
    """Entry point for CLI."""
    cli(obj={})


if __name__ == "__main__":
    main()
