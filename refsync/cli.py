"""refsync CLI — inspect reference changes and run feedback migrations."""

import logging
import sys

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from refsync import __version__
from refsync.exceptions import ConfigError, FeedbackRunError, RepositoryError

console = Console()


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def main(verbose: bool):
    """refsync — reference diffs and feedback actions for source migrations."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )


# ── Snapshot ─────────────────────────────────────────────────────────


@main.command()
@click.argument("repo_path")
@click.option("--kind", "-k", default=None, type=click.Choice(["branch", "tag", "remote", "other"]))
def snapshot(repo_path: str, kind: str | None):
    """List the references of a local git repository."""
    from refsync.git.repository import capture_snapshot

    try:
        snap = capture_snapshot(repo_path)
    except RepositoryError as e:
        console.print(f"[red]{e}[/]")
        sys.exit(1)

    refs = [ref for ref in snap.values() if kind is None or ref.kind == kind]
    if not refs:
        console.print("[yellow]No references found.[/]")
        return

    table = Table(title=f"References ({len(refs)})")
    table.add_column("Name", style="cyan")
    table.add_column("Kind", style="dim")
    table.add_column("Revision", style="green")
    for ref in refs:
        table.add_row(ref.name, ref.kind, ref.sha[:12])

    console.print(table)


# ── Diff ─────────────────────────────────────────────────────────────


@main.command()
@click.argument("repo_path")
@click.option("--remote", "-r", default="origin", help="Remote to fetch from")
@click.option("--refspec", "-s", multiple=True, help="Refspec to fetch (repeatable)")
@click.option("--prune", is_flag=True, help="Prune remote-tracking refs gone from the remote")
def diff(repo_path: str, remote: str, refspec: tuple, prune: bool):
    """Fetch from a remote and show which references changed."""
    from refsync.git.repository import fetch_and_diff

    console.print(f"\n[bold blue]refsync[/] — Fetching {remote} into {repo_path}\n")

    try:
        result = fetch_and_diff(repo_path, remote=remote, refspecs=refspec, prune=prune)
    except RepositoryError as e:
        console.print(f"[red]{e}[/]")
        sys.exit(1)

    if not result.has_changes:
        console.print("[green]No reference changes.[/]")
        return

    table = Table(title=f"Reference changes ({result.summary()})")
    table.add_column("Change", width=8)
    table.add_column("Name", style="cyan")
    table.add_column("Revision")

    for name, ref in result.inserted.items():
        table.add_row("[green]insert[/]", name, ref.sha[:12])
    for name, update in result.updated.items():
        table.add_row("[yellow]update[/]", name, f"{update.before.sha[:12]} -> {update.after.sha[:12]}")
    for name, ref in result.deleted.items():
        table.add_row("[red]delete[/]", name, ref.sha[:12])

    console.print(table)


# ── Feedback ─────────────────────────────────────────────────────────


@main.command()
@click.argument("config_path")
@click.option("--ref", default=None, help="The ref that triggered the event")
@click.option("--store-dir", "-d", default=".", help="Directory holding the effect audit trail")
@click.option("--no-record", is_flag=True, help="Do not write the effect audit trail")
def feedback(config_path: str, ref: str | None, store_dir: str, no_record: bool):
    """Run a feedback migration and record the effects of its actions."""
    from refsync.audit import EffectStore
    from refsync.config import load_feedback
    from refsync.console import RichConsole
    from refsync.feedback import RunStatus

    try:
        fb = load_feedback(config_path)
    except ConfigError as e:
        console.print(f"[red]Invalid config:[/] {e}")
        sys.exit(1)

    console.print(f"\n[bold blue]refsync[/] — Feedback: {fb.name} (ref: {ref or '-'})\n")

    store = None if no_record else EffectStore(store_dir)
    try:
        run = fb.run(ref, RichConsole(console))
    except FeedbackRunError as e:
        # Effects of the actions that finished are already applied.
        if store is not None:
            store.record_run(e.run)
        console.print(f"[red]Feedback failed:[/] {e}")
        sys.exit(1)

    if store is not None:
        store.record_run(run)

    console.print(Panel(run.summary(), title="Feedback Result"))
    for effect in run.effects:
        console.print(f"  [cyan]{effect.type.value}[/] {effect.summary} -> {effect.destination_ref.id}")
        for err in effect.errors:
            console.print(f"       [red]{err}[/]")

    if run.status == RunStatus.ERROR:
        sys.exit(1)


# ── History ──────────────────────────────────────────────────────────


@main.command()
@click.option("--store-dir", "-d", default=".", help="Directory holding the effect audit trail")
@click.option("--feedback", "feedback_name", "-f", default=None, help="Only this feedback migration")
def history(store_dir: str, feedback_name: str | None):
    """Show recorded feedback action outcomes."""
    from refsync.audit import EffectStore

    records = EffectStore(store_dir).get_history(feedback_name)
    if not records:
        console.print("[yellow]No recorded feedback outcomes.[/]")
        return

    table = Table(title=f"Feedback history ({len(records)} records)")
    table.add_column("Recorded", style="dim")
    table.add_column("Feedback", style="cyan")
    table.add_column("Action")
    table.add_column("Ref")
    table.add_column("Result")
    table.add_column("Effects", justify="right")

    colors = {"success": "green", "noop": "yellow", "error": "red"}
    for record in records:
        color = colors.get(record.result, "white")
        table.add_row(
            record.recorded_at[:19],
            record.feedback_name,
            record.action_name,
            record.ref or "-",
            f"[{color}]{record.result}[/]",
            str(len(record.effects)),
        )

    console.print(table)


if __name__ == "__main__":
    main()
