"""add-protections and add-label commands: bulk repository administration."""

from __future__ import annotations

import logging

import click

from prtracker_cli.session import fatal_errors, open_session, settle
from prtracker_core.gh.labels import LabelData, create_label_on_repositories
from prtracker_core.gh.protections import ProtectionRule, add_branch_protections
from prtracker_core.gh.repos import gather_repositories

logger = logging.getLogger(__name__)


@click.command("add-protections")
@click.pass_context
def add_protections_cmd(ctx):
    """Add branch protection rules to every repo with an unprotected release branch.

    Archived and private repositories are skipped. The rule comes from the
    `protection` block of the config file.
    """
    with fatal_errors():
        gh, run_ctx = open_session(ctx, dated=False)
        rule = ProtectionRule.from_config(ctx.obj["config"])

        outcome = add_branch_protections(gh, run_ctx, rule)
        for repo in outcome.value:
            logger.info(
                "Added branch protection rule for %s to repo %s",
                run_ctx.release_branch,
                run_ctx.repo_key(repo.name),
            )
        if not outcome.ok:
            raise click.ClickException(outcome.error_message())


@click.command("add-label")
@click.option("--name", "-n", required=True, help="The name of the label to create.")
@click.option("--old-name", "-o", default="", help="The name of the old label to update, if applicable.")
@click.option("--color", "-c", default="", help="The color of the label, as a hex code.")
@click.option("--desc", "-d", default="", help="The description of the label.")
@click.option("--update-only", is_flag=True, help="Only rename existing labels, never create new ones.")
@click.pass_context
def add_label_cmd(ctx, name: str, old_name: str, color: str, desc: str, update_only: bool):
    """Create or edit a label on the selected repositories."""
    with fatal_errors():
        data = LabelData(
            name=name,
            old_name=old_name,
            color=color.lstrip("#"),
            desc=desc,
            update_only=update_only,
        ).validate()
        gh, run_ctx = open_session(ctx, dated=False)

        repos = settle(gather_repositories(gh, run_ctx))
        outcome = create_label_on_repositories(run_ctx, repos, data)
        if not outcome.ok:
            raise click.ClickException(outcome.error_message())
