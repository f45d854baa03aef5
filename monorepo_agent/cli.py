"""Click-based CLI for Monorepo Agent - mirror monorepo submodules to sibling checkouts."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

import click

from monorepo_agent import __version__
from monorepo_agent.config.defaults import ROOT_ENV_VAR, RSYNC_ENV_VAR, default_rules
from monorepo_agent.config.schema import SyncRule
from monorepo_agent.config.store import ConfigStore
from monorepo_agent.errors import InvalidRule, MonorepoError
from monorepo_agent.git import GitError, is_git_repo, stage_files
from monorepo_agent.output.console import Console
from monorepo_agent.registry import SubmoduleRegistry
from monorepo_agent.sync.mirror import DEFAULT_RSYNC, run_mirror
from monorepo_agent.sync.orchestrator import SyncOrchestrator
from monorepo_agent.sync.rules import compile_rules


def _get_console(ctx: click.Context, verbose: bool = False) -> Console:
    return Console(verbose=verbose, colored=ctx.obj.get("colored", True))


def _get_store(ctx: click.Context) -> ConfigStore:
    return ConfigStore(ctx.obj["root"])


def _fail(console: Console, error: Exception) -> None:
    console.print_error(str(error))
    sys.exit(1)


def _parse_rule(value: str) -> SyncRule:
    """Parse ``+ pattern`` / ``- pattern`` (or ``include:``/``exclude:``) into a rule."""
    text = value.strip()
    if text[:1] in ("+", "-"):
        pattern = text[1:].strip()
        return SyncRule.include(pattern) if text[0] == "+" else SyncRule.exclude(pattern)
    kind, sep, pattern = text.partition(":")
    if sep and kind in ("include", "exclude"):
        return SyncRule.include(pattern) if kind == "include" else SyncRule.exclude(pattern)
    raise InvalidRule(f"cannot parse '{value}', expected '+ pattern' or '- pattern'")


def _collect_rules(includes: tuple[str, ...], excludes: tuple[str, ...], rules: tuple[str, ...]) -> list[SyncRule]:
    """
    Build the ordered rule list from command-line options.

    ``--rule`` keeps the given order; ``--include``/``--exclude`` put all
    includes before all excludes. The two styles can't be mixed.
    """
    if rules and (includes or excludes):
        raise click.UsageError("Use either --rule or --include/--exclude, not both.")
    if rules:
        return [_parse_rule(value) for value in rules]
    return [SyncRule.include(p) for p in includes] + [SyncRule.exclude(p) for p in excludes]


def _stage_config(console: Console, store: ConfigStore) -> None:
    """Stage the configuration file in the monorepo's git index."""
    if not is_git_repo(store.root):
        console.print_warning(f"{store.root} is not a git repository - not staging configuration")
        return
    try:
        stage_files([store.config_path], path=store.root)
    except GitError as e:
        console.print_warning(f"Could not stage {store.config_path}: {e}")
        return
    console.print_info(f"Staged {store.config_path}")


rule_options = [
    click.option("--include", "-i", "includes", multiple=True, help="Include pattern (repeatable)"),
    click.option("--exclude", "-e", "excludes", multiple=True, help="Exclude pattern (repeatable)"),
    click.option(
        "--rule",
        "-r",
        "rules",
        multiple=True,
        help="Ordered rule, '+ pattern' or '- pattern' (repeatable)",
    ),
]


def with_rule_options(func):
    for option in reversed(rule_options):
        func = option(func)
    return func


stage_option = click.option("--stage", is_flag=True, help="Stage the configuration file with git afterwards")


@click.group()
@click.version_option(version=__version__, prog_name="monorepo-agent")
@click.option(
    "--root",
    type=click.Path(file_okay=False, path_type=Path),
    default=".",
    envvar=ROOT_ENV_VAR,
    show_default=True,
    help=f"Monorepo root directory (env: {ROOT_ENV_VAR})",
)
@click.option("--no-color", is_flag=True, help="Disable colored output")
@click.pass_context
def cli(ctx: click.Context, root: Path, no_color: bool) -> None:
    """Monorepo Agent - mirror monorepo submodules to sibling checkouts.

    Each submodule is an immediate child directory of the monorepo. Its
    rule-selected files are mirrored with rsync to the directory of the
    same name next to the monorepo.

    \b
    Examples:
      monorepo-agent init --submodules user_app,admin_app
      monorepo-agent add shared -i 'lib/***' -i pubspec.yaml
      monorepo-agent sync
      monorepo-agent sync user_app --dry-run
    """
    ctx.ensure_object(dict)
    ctx.obj["root"] = root
    ctx.obj["colored"] = not no_color


@cli.command()
@click.option("--submodules", "-s", default=None, help="Comma-separated submodules to register with default rules")
@stage_option
@click.pass_context
def init(ctx: click.Context, submodules: Optional[str], stage: bool) -> None:
    """Initialize the monorepo configuration.

    Creates .monorepo/config.yaml. Running it again keeps the existing
    configuration and only registers submodules that are new.
    """
    console = _get_console(ctx)
    store = _get_store(ctx)

    names = None
    if submodules is not None:
        names = [name.strip() for name in submodules.split(",")]
        if any(not name for name in names):
            raise click.UsageError("Submodule list cannot be empty or contain empty names.")

    try:
        _, created = store.initialize()
        if created:
            console.print_success(f"Initialized monorepo configuration at {store.config_path}")
        else:
            console.print_info(f"Configuration already exists at {store.config_path}")

        if names is not None:
            added, existing = SubmoduleRegistry(store).add_missing(names, default_rules())
            for name in added:
                console.print_success(f"Added submodule: {name}")
            for name in existing:
                console.print_info(f"Submodule {name} already configured.")
    except MonorepoError as e:
        _fail(console, e)

    if stage:
        _stage_config(console, store)


@cli.command()
@click.argument("name")
@with_rule_options
@click.option("--description", "-d", default="", help="Description of the submodule")
@stage_option
@click.pass_context
def add(
    ctx: click.Context,
    name: str,
    includes: tuple[str, ...],
    excludes: tuple[str, ...],
    rules: tuple[str, ...],
    description: str,
    stage: bool,
) -> None:
    """Register a submodule.

    NAME must be an existing directory directly under the monorepo root.
    Without rules the submodule is registered but nothing is mirrored.
    """
    console = _get_console(ctx)
    store = _get_store(ctx)

    try:
        rule_list = _collect_rules(includes, excludes, rules)
        submodule = SubmoduleRegistry(store).add(name, rule_list, description=description)
    except MonorepoError as e:
        _fail(console, e)

    console.print_success(f"Added submodule: {submodule.name} ({len(submodule.rules)} rules)")
    if not submodule.rules:
        console.print_warning(f"{submodule.name} has no rules - nothing will be mirrored until rules are added")
    if stage:
        _stage_config(console, store)


@cli.command()
@click.argument("name")
@stage_option
@click.pass_context
def remove(ctx: click.Context, name: str, stage: bool) -> None:
    """Deregister a submodule.

    Files already mirrored to the sibling directory are left untouched.
    """
    console = _get_console(ctx)
    store = _get_store(ctx)

    try:
        submodule = SubmoduleRegistry(store).remove(name)
    except MonorepoError as e:
        _fail(console, e)

    console.print_success(f"Removed submodule: {submodule.name}")
    if submodule.sibling_path:
        console.print_info(f"Mirrored files in {submodule.sibling_path} were not touched")
    if stage:
        _stage_config(console, store)


@cli.command()
@click.argument("name")
@with_rule_options
@click.option("--clear-rules", is_flag=True, help="Remove all rules")
@click.option("--description", "-d", default=None, help="New description")
@stage_option
@click.pass_context
def update(
    ctx: click.Context,
    name: str,
    includes: tuple[str, ...],
    excludes: tuple[str, ...],
    rules: tuple[str, ...],
    clear_rules: bool,
    description: Optional[str],
    stage: bool,
) -> None:
    """Update a submodule's rules or description.

    Given rules replace the existing list entirely.
    """
    console = _get_console(ctx)
    store = _get_store(ctx)

    try:
        rule_list = _collect_rules(includes, excludes, rules)
        if clear_rules and rule_list:
            raise click.UsageError("--clear-rules can't be combined with new rules.")
        new_rules = [] if clear_rules else (rule_list or None)
        if new_rules is None and description is None:
            raise click.UsageError("Nothing to update: give rules, --clear-rules or --description.")
        submodule = SubmoduleRegistry(store).update(name, new_rules, description=description)
    except MonorepoError as e:
        _fail(console, e)

    console.print_success(f"Updated submodule: {submodule.name} ({len(submodule.rules)} rules)")
    if stage:
        _stage_config(console, store)


@cli.command("list")
@click.option("--verbose", "-v", is_flag=True, help="Show every rule")
@click.pass_context
def list_submodules(ctx: click.Context, verbose: bool) -> None:
    """List registered submodules in registration order."""
    console = _get_console(ctx, verbose)

    try:
        submodules = SubmoduleRegistry(_get_store(ctx)).list()
    except MonorepoError as e:
        _fail(console, e)

    console.print_submodule_list(submodules)


@cli.command()
@click.argument("name")
@click.pass_context
def show(ctx: click.Context, name: str) -> None:
    """Show a submodule with its compiled rule list."""
    console = _get_console(ctx)

    try:
        submodule = SubmoduleRegistry(_get_store(ctx)).get(name)
    except MonorepoError as e:
        _fail(console, e)

    try:
        compiled = compile_rules(submodule.rules, submodule=name).lines()
        console.print_submodule(submodule, compiled=compiled)
    except MonorepoError as e:
        console.print_submodule(submodule, problem=e.reason)


@cli.command()
@click.argument("names", nargs=-1)
@click.option("--dry-run", "-n", is_flag=True, help="Show what rsync would change without writing")
@click.option("--jobs", "-j", type=click.IntRange(min=1), default=1, show_default=True, help="Parallel submodules")
@click.option("--timeout", type=click.FloatRange(min=0, min_open=True), default=None, help="Seconds to wait for rsync")
@click.option(
    "--rsync",
    "rsync_path",
    default=DEFAULT_RSYNC,
    envvar=RSYNC_ENV_VAR,
    show_default=True,
    help=f"rsync executable (env: {RSYNC_ENV_VAR})",
)
@click.option("--verbose", "-v", is_flag=True, help="Show rules and rsync commands")
@click.pass_context
def sync(
    ctx: click.Context,
    names: tuple[str, ...],
    dry_run: bool,
    jobs: int,
    timeout: Optional[float],
    rsync_path: str,
    verbose: bool,
) -> None:
    """Mirror submodules to their sibling directories.

    NAMES are submodule names (comma-separated lists work too). Without
    names, or with 'all', every registered submodule is synced in
    registration order. Exits non-zero unless at least one submodule
    was synced.
    """
    console = _get_console(ctx, verbose)
    orchestrator = SyncOrchestrator(
        _get_store(ctx),
        mirror=run_mirror,
        rsync=rsync_path,
        max_workers=jobs,
        timeout=timeout,
    )

    try:
        result = orchestrator.sync(
            list(names) or None,
            dry_run=dry_run,
            on_result=lambda outcome: console.print_sync_outcome(outcome, dry_run=dry_run),
        )
    except MonorepoError as e:
        _fail(console, e)

    console.print_sync_result(result, show_outcomes=False)
    if not result.success:
        sys.exit(1)


if __name__ == "__main__":
    cli()
