"""
Command-line interface for kvlet.

Each subcommand maps onto one ``Repository`` operation:

    kvlet init | add FILE | rm FILE | commit MESSAGE
    kvlet log | global-log | find MESSAGE | status
    kvlet checkout -- FILE | COMMIT -- FILE | BRANCH
    kvlet branch NAME | rm-branch NAME | reset COMMIT | merge BRANCH

User errors are printed as one line. Only ``init`` creates the
repository directory.
"""

import sys
import time
from functools import wraps

import click
from loguru import logger

from .errors import KvletError
from .objects import Commit
from .repository import Repository
from .store import open_repository

DATE_FORMAT = "%a %b %d %H:%M:%S %Y %z"


def configure_logging(verbose: bool) -> None:
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "WARNING")


def format_commit(commit: Commit) -> str:
    lines = ["===", f"commit {commit.id}"]
    if commit.is_merge:
        lines.append(f"Merge: {commit.parent1[:7]} {commit.parent2[:7]}")
    lines.append("Date: " + time.strftime(DATE_FORMAT, time.localtime(commit.timestamp)))
    lines.append(commit.message)
    return "\n".join(lines) + "\n"


def reports_errors(func):
    """Echo user errors as plain messages instead of tracebacks."""

    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except KvletError as e:
            click.echo(e.msg)

    return wrapper


def open_repo(ctx: click.Context, create: bool = False) -> Repository:
    options = ctx.obj
    repo = open_repository(options["work_dir"], options["storage"], create=create)
    ctx.call_on_close(repo.store.close)
    return repo


def pass_repo(func):
    """Open the repository for a subcommand and pass it first."""

    @wraps(func)
    def wrapper(*args, **kwargs):
        ctx = click.get_current_context()
        try:
            repo = open_repo(ctx)
        except KvletError as e:
            click.echo(e.msg)
            return None
        return func(repo, *args, **kwargs)

    return wrapper


class KeepsSeparator(click.Command):
    """Records the raw operands, since click drops a bare ``--``."""

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        ctx.meta["operands"] = tuple(args)
        return super().parse_args(ctx, args)


@click.group()
@click.option(
    "--work-dir",
    envvar="KVLET_WORK_DIR",
    default=".",
    type=click.Path(file_okay=False),
    help="Working directory of the repository",
)
@click.option(
    "--storage",
    envvar="KVLET_STORAGE",
    default="disk",
    type=click.Choice(["disk", "memory"]),
    help="Backend for objects and refs",
)
@click.option("--verbose", is_flag=True, help="Log repository operations to stderr")
@click.pass_context
def cli(ctx: click.Context, work_dir: str, storage: str, verbose: bool):
    """A small version-control system."""
    configure_logging(verbose)
    ctx.obj = {"work_dir": work_dir, "storage": storage}


@cli.command()
@click.pass_context
@reports_errors
def init(ctx: click.Context):
    """Create a repository with an initial commit on branch main."""
    open_repo(ctx, create=True).init()


@cli.command()
@click.argument("file")
@pass_repo
@reports_errors
def add(repo: Repository, file: str):
    """Stage FILE for the next commit."""
    repo.add(file)


@cli.command()
@click.argument("message", default="")
@pass_repo
@reports_errors
def commit(repo: Repository, message: str):
    """Record staged changes with MESSAGE."""
    repo.commit(message)


@cli.command()
@click.argument("file")
@pass_repo
@reports_errors
def rm(repo: Repository, file: str):
    """Unstage FILE, or stage its removal if it is tracked."""
    repo.remove(file)


@cli.command()
@pass_repo
@reports_errors
def log(repo: Repository):
    """Show the history of the current branch."""
    for c in repo.log():
        click.echo(format_commit(c))


@cli.command("global-log")
@pass_repo
@reports_errors
def global_log(repo: Repository):
    """Show every commit ever made."""
    for c in repo.global_log():
        click.echo(format_commit(c))


@cli.command()
@click.argument("message")
@pass_repo
@reports_errors
def find(repo: Repository, message: str):
    """Print the ids of all commits with MESSAGE."""
    for commit_id in repo.find(message):
        click.echo(commit_id)


@cli.command()
@pass_repo
@reports_errors
def status(repo: Repository):
    """Show branches, staged files and working-tree changes."""
    st = repo.status()
    click.echo("=== Branches ===")
    for b in st.branches:
        click.echo(("*" if b == st.current_branch else "") + b)
    click.echo("\n=== Staged Files ===")
    for name in st.staged:
        click.echo(name)
    click.echo("\n=== Removed Files ===")
    for name in st.removed:
        click.echo(name)
    click.echo("\n=== Modifications Not Staged For Commit ===")
    for name, kind in st.modified.items():
        click.echo(f"{name} ({kind})")
    click.echo("\n=== Untracked Files ===")
    for name in st.untracked:
        click.echo(name)
    click.echo("")


@cli.command(cls=KeepsSeparator)
@click.argument("operands", nargs=-1)
@pass_repo
@reports_errors
def checkout(repo: Repository, operands: tuple[str, ...]):
    """Restore a file, or switch branches.

    \b
    kvlet checkout -- FILE
    kvlet checkout COMMIT -- FILE
    kvlet checkout BRANCH
    """
    operands = click.get_current_context().meta["operands"]
    if len(operands) == 2 and operands[0] == "--":
        repo.checkout_file(operands[1])
    elif len(operands) == 3 and operands[1] == "--":
        repo.checkout_file_at(operands[0], operands[2])
    elif len(operands) == 1:
        repo.checkout_branch(operands[0])
    else:
        click.echo("Incorrect operands.")


@cli.command()
@click.argument("name")
@pass_repo
@reports_errors
def branch(repo: Repository, name: str):
    """Create branch NAME at the current commit."""
    repo.branch(name)


@cli.command("rm-branch")
@click.argument("name")
@pass_repo
@reports_errors
def rm_branch(repo: Repository, name: str):
    """Delete branch NAME."""
    repo.remove_branch(name)


@cli.command()
@click.argument("commit_id")
@pass_repo
@reports_errors
def reset(repo: Repository, commit_id: str):
    """Check out COMMIT_ID and move the current branch to it."""
    repo.reset(commit_id)


@cli.command()
@click.argument("name")
@pass_repo
@reports_errors
def merge(repo: Repository, name: str):
    """Merge branch NAME into the current branch."""
    result = repo.merge(name)
    if result.message:
        click.echo(result.message)


if __name__ == "__main__":
    cli()
