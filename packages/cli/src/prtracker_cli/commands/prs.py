"""all-prs and unmerged-prs commands: report merged pull requests."""

from __future__ import annotations

import click

from prtracker_cli.session import fatal_errors, open_session, settle
from prtracker_core.gh.branches import gather_release_repositories
from prtracker_core.gh.commits import filter_matching_commits_on_branch
from prtracker_core.gh.pulls import gather_merged_prs
from prtracker_core.gh.repos import gather_repositories
from prtracker_core.report import print_pr_list, validate_format


@click.command("all-prs")
@click.pass_context
def all_prs_cmd(ctx):
    """Gather all PRs merged into the default branch after the start date."""
    with fatal_errors():
        fmt = validate_format(ctx.obj["config"]["formatting"])
        gh, run_ctx = open_session(ctx)

        repos = settle(gather_repositories(gh, run_ctx))
        prs = settle(gather_merged_prs(run_ctx, repos))

        print_pr_list(prs, fmt)


@click.command("unmerged-prs")
@click.pass_context
def unmerged_prs_cmd(ctx):
    """Gather PRs merged into the default branch but not into the release branch.

    A PR counts as released when a commit on the release branch since the
    start date references it as "(#<number>)", the way GitHub squash merges
    name their commits.
    """
    with fatal_errors():
        fmt = validate_format(ctx.obj["config"]["formatting"])
        gh, run_ctx = open_session(ctx)

        repos = settle(gather_repositories(gh, run_ctx))
        release_repos = settle(gather_release_repositories(run_ctx, repos))
        prs = settle(gather_merged_prs(run_ctx, repos))
        final_prs = settle(filter_matching_commits_on_branch(run_ctx, prs, release_repos))

        print_pr_list(final_prs, fmt)
