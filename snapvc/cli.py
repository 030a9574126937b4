"""Command-line interface.

Every user-facing failure prints one line and exits with status 0.
Only integrity errors abort with a traceback.
"""

import functools
import logging
from pathlib import Path
from typing import Callable

import click

from .commit import Commit
from .config import log_level
from .errors import SnapvcError
from .persistence import open_repository
from .repository import Repository, Status

OPERANDS = "snapvc.operands"
TIME_FORMAT = "%Y-%m-%d %H:%M:%S"

INCORRECT_OPERANDS = "Incorrect operands."
NO_COMMAND = "Please enter a command."
NO_SUCH_COMMAND = "No command with that name exists."


class Dispatcher(click.Group):
    """Group that reports unknown commands and options instead of failing."""

    def parse_args(self, ctx, args):
        try:
            return super().parse_args(ctx, args)
        except click.UsageError:
            click.echo(NO_SUCH_COMMAND)
            ctx.exit(0)

    def resolve_command(self, ctx, args):
        if args and args[0] not in self.commands:
            click.echo(NO_SUCH_COMMAND)
            ctx.exit(0)
        return super().resolve_command(ctx, args)


class OperandCommand(click.Command):
    """Command that receives its operands verbatim, ``--`` included."""

    def parse_args(self, ctx, args):
        ctx.meta[OPERANDS] = list(args)
        return super().parse_args(ctx, [])


@click.group(cls=Dispatcher, invoke_without_command=True)
@click.pass_context
def cli(ctx: click.Context) -> None:
    """A tiny version-control system."""
    if ctx.invoked_subcommand is None:
        click.echo(NO_COMMAND)


def command(name: str, *counts: int) -> Callable:
    """Register a command accepting any of the given operand counts."""

    def decorator(fn: Callable) -> click.Command:
        @functools.wraps(fn)
        def callback() -> None:
            operands = click.get_current_context().meta[OPERANDS]
            if len(operands) not in counts:
                click.echo(INCORRECT_OPERANDS)
                return
            try:
                fn(*operands)
            except SnapvcError as e:
                click.echo(str(e))

        return cli.command(name, cls=OperandCommand)(callback)

    return decorator


def run(action: Callable[[Repository], None], *, create: bool = False) -> None:
    """Load the repository in the current directory, act, save."""
    with open_repository(Path.cwd(), create=create) as repo:
        action(repo)


# -- Formatting --


def format_commit(commit: Commit) -> str:
    return "===\nCommit {}\n{}\n{}\n".format(
        commit.id, commit.timestamp.strftime(TIME_FORMAT), commit.message
    )


def format_status(status: Status) -> str:
    lines = ["=== Branches ==="]
    for name in status.branches:
        lines.append(("*" if name == status.current else "") + name)
    lines += ["", "=== Staged Files ===", *status.staged]
    lines += ["", "=== Removed Files ===", *status.removed]
    lines += ["", "=== Modifications Not Staged For Commit ==="]
    lines += [f"{name} ({kind})" for name, kind in status.modified]
    lines += ["", "=== Untracked Files ===", *status.untracked]
    return "\n".join(lines) + "\n"


# -- Commands --


@command("init", 0)
def init() -> None:
    """Create a repository in the current directory."""
    run(lambda repo: None, create=True)


@command("add", 1)
def add(filename: str) -> None:
    """Stage a file."""
    run(lambda repo: repo.add(filename))


@command("commit", 1)
def commit(message: str) -> None:
    """Commit the staged changes."""
    run(lambda repo: repo.commit(message))


@command("rm", 1)
def rm(filename: str) -> None:
    """Un-stage a file or stage its removal."""
    run(lambda repo: repo.rm(filename))


@command("log", 0)
def log() -> None:
    """Show the history of the current branch."""

    def action(repo: Repository) -> None:
        for c in repo.log():
            click.echo(format_commit(c))

    run(action)


@command("global-log", 0)
def global_log() -> None:
    """Show every commit ever made."""

    def action(repo: Repository) -> None:
        for c in repo.global_log():
            click.echo(format_commit(c))

    run(action)


@command("find", 1)
def find(message: str) -> None:
    """Print the ids of commits with the given message."""

    def action(repo: Repository) -> None:
        for commit_id in repo.find(message):
            click.echo(commit_id)

    run(action)


@command("status", 0)
def status() -> None:
    """Show branches, staged files and working-tree changes."""
    run(lambda repo: click.echo(format_status(repo.status()), nl=False))


@command("checkout", 1, 2, 3)
def checkout(*operands: str) -> None:
    """checkout BRANCH | checkout -- FILE | checkout COMMIT -- FILE"""
    if len(operands) == 1:
        run(lambda repo: repo.checkout_branch(operands[0]))
    elif len(operands) == 2 and operands[0] == "--":
        run(lambda repo: repo.checkout_file(operands[1]))
    elif len(operands) == 3 and operands[1] == "--":
        run(lambda repo: repo.checkout_file(operands[2], operands[0]))
    else:
        click.echo(INCORRECT_OPERANDS)


@command("branch", 1)
def branch(name: str) -> None:
    """Create a branch at the head commit."""
    run(lambda repo: repo.branch(name))


@command("rm-branch", 1)
def rm_branch(name: str) -> None:
    """Delete a branch pointer."""
    run(lambda repo: repo.rm_branch(name))


@command("reset", 1)
def reset(commit_id: str) -> None:
    """Check out a commit and move the current branch to it."""
    run(lambda repo: repo.reset(commit_id))


@command("merge", 1)
def merge(name: str) -> None:
    """Merge a branch into the current one."""

    def action(repo: Repository) -> None:
        result = repo.merge(name)
        if result.strategy == "no_op":
            click.echo("Given branch is an ancestor of the current branch.")
        elif result.strategy == "fast_forward":
            click.echo("Current branch fast-forwarded.")
        elif result.conflict:
            click.echo("Encountered a merge conflict.")

    run(action)


def main() -> None:
    logging.basicConfig(
        level=log_level(), format="%(levelname)s %(name)s: %(message)s"
    )
    cli()


if __name__ == "__main__":
    main()
