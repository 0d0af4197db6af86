"""Tree maintenance commands for a nested-set model.

The target model is given as ``module:Class`` with ``--model`` or the
``TREE_MODEL`` environment variable; the database comes from ``DB_DSN``.

Example:bash
    # Create the model's table
    nested-tree tree --model myapp.models:Category init

    # Check bounds, exit status 1 when broken
    nested-tree tree --model myapp.models:Category verify

    # Rebuild bounds from parent references
    nested-tree tree --model myapp.models:Category recover

    # Sort every sibling run by name, descending
    nested-tree tree --model myapp.models:Category reorder --field name --direction desc
"""

from __future__ import annotations

import importlib
import sys
from typing import Any

import click

from nested_tree.cli.utils import coro, diagnostics, error, header, info, node_line, success, warning
from nested_tree.core.database import InvalidSortError, NestedSetRepository, TreeConfigurationError, TreeIntegrityError
from nested_tree.core.settings import get_tree_settings
from nested_tree.infra.database import build_engine, create_tables, get_async_session


def load_model(path: str) -> type[Any]:
    """Import the model class named by a ``module:Class`` path.

    Raises:
        click.BadParameter: The module or attribute cannot be found
    """
    module_name, _, attr = path.partition(":")
    if not module_name or not attr:
        raise click.BadParameter(f"expected 'module:Class', got {path!r}", param_hint="--model")
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise click.BadParameter(f"cannot import {module_name!r}: {e}", param_hint="--model") from e
    model = getattr(module, attr, None)
    if model is None:
        raise click.BadParameter(f"{module_name!r} has no attribute {attr!r}", param_hint="--model")
    return model


def _repository(ctx: click.Context) -> NestedSetRepository[Any]:
    path = ctx.obj.get("model_path")
    if not path:
        raise click.UsageError("No model given; pass --model or set TREE_MODEL")
    model = load_model(path)
    try:
        return NestedSetRepository(model)
    except TreeConfigurationError as e:
        raise click.BadParameter(str(e), param_hint="--model") from e


@click.group(name="tree")
@click.option("--model", "model_path", default=None, help="Nested-set model as module:Class (default: TREE_MODEL)")
@click.pass_context
def tree(ctx: click.Context, model_path: str | None) -> None:
    """Nested-set tree maintenance commands."""
    ctx.ensure_object(dict)
    ctx.obj["model_path"] = model_path or get_tree_settings().model


@tree.command()
@click.pass_context
@coro
async def init(ctx: click.Context) -> None:
    """Create the model's table if it does not exist."""
    repo = _repository(ctx)
    table = repo.model.__table__
    engine = build_engine()
    try:
        await create_tables(engine, table.metadata, tables=[table])
    finally:
        await engine.dispose()
    success(f"Table '{table.name}' ready")


@tree.command()
@click.pass_context
@coro
async def verify(ctx: click.Context) -> None:
    """Check the tree; exit status 1 when it is invalid."""
    repo = _repository(ctx)
    async with get_async_session() as session:
        result = await repo.verify(session)

    if result is True:
        success(f"{repo.model.__name__} tree is valid")
        return

    header(f"{repo.model.__name__} tree has {len(result)} problem(s)")
    diagnostics(result)
    sys.exit(1)


@tree.command()
@click.pass_context
@coro
async def recover(ctx: click.Context) -> None:
    """Rebuild bounds from parent references if the tree is invalid."""
    repo = _repository(ctx)
    try:
        async with get_async_session() as session:
            rebuilt = await repo.recover(session)
    except TreeIntegrityError as e:
        error(f"Recovery failed, nothing was changed: {e}")
        sys.exit(1)

    if rebuilt:
        success(f"{repo.model.__name__} tree recovered")
    else:
        info(f"{repo.model.__name__} tree is already valid, nothing to do")


@tree.command()
@click.option("--field", "sort_field", default=None, help="Column to sort siblings by (default: current order)")
@click.option(
    "--direction",
    type=click.Choice(["asc", "desc"], case_sensitive=False),
    default="asc",
    show_default=True,
    help="Sort direction",
)
@click.option(
    "--verify/--no-verify",
    "verify_first",
    default=None,
    help="Verify the tree first (default: TREE_VERIFY_BEFORE_REORDER)",
)
@click.pass_context
@coro
async def reorder(ctx: click.Context, sort_field: str | None, direction: str, verify_first: bool | None) -> None:
    """Sort every sibling run in the tree."""
    repo = _repository(ctx)
    if verify_first is None:
        verify_first = get_tree_settings().verify_before_reorder

    try:
        async with get_async_session() as session:
            done = await repo.reorder(session, None, sort_field, direction, verify=verify_first)
    except InvalidSortError as e:
        error(str(e))
        sys.exit(1)

    if not done:
        warning("Tree failed verification; run 'tree recover' first")
        sys.exit(1)
    success(f"{repo.model.__name__} tree reordered by {sort_field or 'position'} {direction}")


@tree.command()
@click.option("--label", default="name", show_default=True, help="Attribute shown for each node")
@click.pass_context
@coro
async def show(ctx: click.Context, label: str) -> None:
    """Print the whole tree as an indented preorder listing."""
    repo = _repository(ctx)
    acc = repo.accessor
    async with get_async_session() as session:
        nodes = await repo.get_children(session)

    if not nodes:
        info("Tree is empty")
        return

    open_rights: list[int] = []
    for node in nodes:
        left, right = acc.bounds(node)
        while open_rights and left is not None and open_rights[-1] < left:
            open_rights.pop()
        text = getattr(node, label, None)
        node_line(len(open_rights), str(text if text is not None else acc.id_of(node)), left, right)
        if right is not None:
            open_rights.append(right)
