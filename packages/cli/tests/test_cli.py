"""Tests for the CLI entry point."""

import logging
from datetime import datetime, timezone
from unittest.mock import MagicMock

from click.testing import CliRunner
from github import GithubException

from prtracker_cli.cli import _split_repos, main
from prtracker_core.outcome import Outcome

TOKEN = "ghp_" + "a" * 36


def _pr(number, title, merged_at):
    pr = MagicMock()
    pr.number = number
    pr.title = title
    pr.merged_at = merged_at
    pr.html_url = f"https://github.com/Acme/widgets/pull/{number}"
    return pr


def _widgets_repo(release_messages):
    """Acme/widgets with PR #42 merged 2024-01-02 and a release/1.x branch."""
    repo = MagicMock()
    repo.name = "widgets"
    repo.get_pulls.return_value = [
        _pr(42, "Fix bug", datetime(2024, 1, 2, tzinfo=timezone.utc)),
        _pr(40, "Old change", datetime(2023, 12, 1, tzinfo=timezone.utc)),
    ]
    branch = MagicMock()
    branch.name = "release/1.x"
    repo.get_branches.return_value = [branch]
    commits = []
    for message in release_messages:
        commit = MagicMock()
        commit.commit.message = message
        commits.append(commit)
    repo.get_commits.return_value = commits
    return repo


def _patch_session(mocker, gh=None, token=TOKEN):
    gh = gh or MagicMock()
    mocker.patch("prtracker_cli.session.resolve_github_token", return_value=token)
    get_client = mocker.patch("prtracker_cli.session.get_client", return_value=gh)
    return gh, get_client


def _invoke(args, tmp_path):
    base = ["--config", str(tmp_path / "none.yml"), "--org", "Acme", "--branch", "release/1.x", "-d", "2024-01-01"]
    return CliRunner().invoke(main, base + args)


class TestPRReports:
    def test_unmerged_prs_omits_pr_already_on_release_branch(self, mocker, tmp_path):
        gh, _ = _patch_session(mocker)
        gh.get_repo.return_value = _widgets_repo(["Fix bug (#42)"])

        result = _invoke(["-r", "widgets", "-f", "discord", "unmerged-prs"], tmp_path)

        assert result.exit_code == 0, result.output
        assert "#42" not in result.output
        assert "**Acme/widgets**" not in result.output

    def test_all_prs_includes_pr_on_release_branch(self, mocker, tmp_path):
        gh, _ = _patch_session(mocker)
        gh.get_repo.return_value = _widgets_repo(["Fix bug (#42)"])

        result = _invoke(["-r", "widgets", "-f", "discord", "all-prs"], tmp_path)

        assert result.exit_code == 0, result.output
        assert "**Acme/widgets**:" in result.output
        assert "- #42: [Fix bug](<https://github.com/Acme/widgets/pull/42>)" in result.output
        assert "#40" not in result.output
        gh.get_repo.return_value.get_commits.assert_not_called()

    def test_unmerged_prs_keeps_unreleased_pr(self, mocker, tmp_path):
        gh, _ = _patch_session(mocker)
        gh.get_repo.return_value = _widgets_repo(["Something else (#41)"])

        result = _invoke(["-r", "widgets", "-f", "discord", "unmerged-prs"], tmp_path)

        assert result.exit_code == 0, result.output
        assert "- #42: [Fix bug]" in result.output

    def test_discord_output_sorted_by_repo(self, mocker, tmp_path):
        _patch_session(mocker)
        prs = {
            "Acme/zeta": [_pr(2, "Z", datetime(2024, 2, 1, tzinfo=timezone.utc))],
            "Acme/alpha": [_pr(1, "A", datetime(2024, 2, 1, tzinfo=timezone.utc))],
        }
        mocker.patch("prtracker_cli.commands.prs.gather_repositories", return_value=Outcome([MagicMock()]))
        mocker.patch("prtracker_cli.commands.prs.gather_merged_prs", return_value=Outcome(prs))

        result = _invoke(["-f", "discord", "all-prs"], tmp_path)

        assert result.exit_code == 0, result.output
        assert result.output.index("**Acme/alpha**:") < result.output.index("**Acme/zeta**:")

    def test_terminal_output_is_logged(self, mocker, tmp_path, caplog):
        gh, _ = _patch_session(mocker)
        gh.get_repo.return_value = _widgets_repo([])

        result = _invoke(["-r", "widgets", "all-prs"], tmp_path)

        assert result.exit_code == 0, result.output
        messages = [r.getMessage() for r in caplog.records if r.name == "prtracker_core.report"]
        assert "Acme/widgets:" in messages
        assert "#42: Fix bug (https://github.com/Acme/widgets/pull/42)" in messages

    def test_long_terminal_line_is_not_wrapped(self, mocker, tmp_path):
        gh, _ = _patch_session(mocker)
        repo = _widgets_repo([])
        title = "A rather long pull request title that describes a lot of changes in detail"
        repo.get_pulls.return_value = [_pr(4242, title, datetime(2024, 1, 2, tzinfo=timezone.utc))]
        gh.get_repo.return_value = repo

        result = _invoke(["-r", "widgets", "all-prs"], tmp_path)

        assert result.exit_code == 0, result.output
        expected = f"#4242: {title} (https://github.com/Acme/widgets/pull/4242)"
        assert len(expected) > 80
        assert [line for line in result.output.splitlines() if "4242" in line] == [f"INFO     {expected}"]

    def test_partial_failure_logged_and_run_continues(self, mocker, tmp_path, caplog):
        _patch_session(mocker)
        partial = Outcome([MagicMock()], ["Acme/missing: 404"], "some repos could not be found, see logs above")
        mocker.patch("prtracker_cli.commands.prs.gather_repositories", return_value=partial)
        gather_prs = mocker.patch("prtracker_cli.commands.prs.gather_merged_prs", return_value=Outcome({}))

        result = _invoke(["all-prs"], tmp_path)

        assert result.exit_code == 0, result.output
        gather_prs.assert_called_once()
        assert any(
            r.levelno == logging.ERROR and "some repos could not be found" in r.getMessage() for r in caplog.records
        )

    def test_failure_with_nothing_gathered_aborts(self, mocker, tmp_path):
        _patch_session(mocker)
        failed = Outcome([], ["Acme/missing: 404"], "some repos could not be found, see logs above")
        mocker.patch("prtracker_cli.commands.prs.gather_repositories", return_value=failed)
        gather_prs = mocker.patch("prtracker_cli.commands.prs.gather_merged_prs")

        result = _invoke(["all-prs"], tmp_path)

        assert result.exit_code == 1
        assert "some repos could not be found" in result.output
        gather_prs.assert_not_called()

    def test_org_listing_failure_exits_1(self, mocker, tmp_path):
        gh, _ = _patch_session(mocker)
        gh.get_organization.side_effect = GithubException(404, {"message": "Not Found"}, None)

        result = _invoke(["all-prs"], tmp_path)

        assert result.exit_code == 1
        assert "Error:" in result.output


class TestCLIValidation:
    def test_malformed_start_date(self, mocker, tmp_path):
        _, get_client = _patch_session(mocker)

        result = CliRunner().invoke(main, ["--config", str(tmp_path / "none.yml"), "-d", "01/02/2024", "all-prs"])

        assert result.exit_code == 1
        assert "YYYY-MM-DD" in result.output
        get_client.assert_not_called()

    def test_unsupported_format(self, mocker, tmp_path):
        _, get_client = _patch_session(mocker)

        result = _invoke(["-f", "slack", "all-prs"], tmp_path)

        assert result.exit_code == 1
        assert "unsupported format" in result.output
        get_client.assert_not_called()

    def test_missing_token(self, mocker, tmp_path):
        _, get_client = _patch_session(mocker, token=None)

        result = _invoke(["unmerged-prs"], tmp_path)

        assert result.exit_code == 1
        assert "token" in result.output.lower()
        get_client.assert_not_called()

    def test_malformed_token(self, mocker, tmp_path):
        _, get_client = _patch_session(mocker, token="not-a-token")

        result = _invoke(["all-prs"], tmp_path)

        assert result.exit_code == 1
        assert "malformed" in result.output
        get_client.assert_not_called()

    def test_token_flag_passed_to_resolver(self, mocker, tmp_path):
        gh, _ = _patch_session(mocker)
        resolver = mocker.patch("prtracker_cli.session.resolve_github_token", return_value=TOKEN)
        gh.get_organization.return_value.get_repos.return_value = []

        _invoke(["--token", TOKEN, "all-prs"], tmp_path)

        resolver.assert_called_once_with(TOKEN)

    def test_flags_override_config_file(self, mocker, tmp_path):
        cfg = tmp_path / ".prtracker.yml"
        cfg.write_text("organization: FromFile\nrelease_branch: file-branch\n")
        _, get_client = _patch_session(mocker)
        mocker.patch("prtracker_cli.commands.prs.gather_repositories", return_value=Outcome([]))

        CliRunner().invoke(main, ["--config", str(cfg), "--org", "Acme", "all-prs"])

        run_ctx = get_client.call_args.args[1]
        assert run_ctx.organization == "Acme"
        assert run_ctx.release_branch == "file-branch"


class TestAdminCommands:
    def test_add_protections_logs_each_repo(self, mocker, tmp_path, caplog):
        _patch_session(mocker)
        repo = MagicMock()
        repo.name = "widgets"
        add = mocker.patch("prtracker_cli.commands.admin.add_branch_protections", return_value=Outcome([repo]))

        result = _invoke(["add-protections"], tmp_path)

        assert result.exit_code == 0, result.output
        assert add.call_args.args[1].cutoff is None
        assert any(
            r.getMessage() == "Added branch protection rule for release/1.x to repo Acme/widgets" for r in caplog.records
        )

    def test_add_protections_failure_exits_1(self, mocker, tmp_path):
        _patch_session(mocker)
        mocker.patch(
            "prtracker_cli.commands.admin.add_branch_protections",
            return_value=Outcome([], ["Acme/x: 403"], "some repos could not have branch protection added, see logs above"),
        )

        result = _invoke(["add-protections"], tmp_path)

        assert result.exit_code == 1

    def test_add_label_passes_label_data(self, mocker, tmp_path):
        _patch_session(mocker)
        repos = [MagicMock()]
        mocker.patch("prtracker_cli.commands.admin.gather_repositories", return_value=Outcome(repos))
        create = mocker.patch(
            "prtracker_cli.commands.admin.create_label_on_repositories", return_value=Outcome(["Acme/widgets"])
        )

        result = _invoke(
            ["add-label", "-n", "needs-backport", "-o", "backport", "-c", "#00ff00", "-d", "Port it"], tmp_path
        )

        assert result.exit_code == 0, result.output
        run_ctx, passed_repos, data = create.call_args.args
        assert run_ctx.cutoff is None
        assert passed_repos == repos
        assert data.name == "needs-backport"
        assert data.old_name == "backport"
        assert data.color == "00ff00"
        assert data.desc == "Port it"
        assert data.update_only is False

    def test_add_label_update_only_requires_old_name(self, mocker, tmp_path):
        _, get_client = _patch_session(mocker)

        result = _invoke(["add-label", "-n", "new", "--update-only"], tmp_path)

        assert result.exit_code == 1
        assert "no old name" in result.output
        get_client.assert_not_called()

    def test_add_label_failure_exits_1(self, mocker, tmp_path):
        _patch_session(mocker)
        mocker.patch("prtracker_cli.commands.admin.gather_repositories", return_value=Outcome([MagicMock()]))
        mocker.patch(
            "prtracker_cli.commands.admin.create_label_on_repositories",
            return_value=Outcome([], ["Acme/widgets: 422"], "some repos could not have the label added/updated"),
        )

        result = _invoke(["add-label", "-n", "new"], tmp_path)

        assert result.exit_code == 1


class TestSplitRepos:
    def test_repeated_and_comma_separated(self):
        assert _split_repos(("a,b", "c", " d ")) == ["a", "b", "c", "d"]

    def test_empty_is_none(self):
        assert _split_repos(()) is None
