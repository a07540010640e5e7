from datetime import datetime, timedelta
from unittest import mock

from django.test import SimpleTestCase, TestCase

from hackathons.exceptions import (
    AlreadyLockedError,
    IneligibleError,
    NotFullTeamError,
    NotRegisteredError,
    NotTeamMemberError,
    RepoInvalidError,
    RepoVerificationUnavailable,
    SubmissionClosedError,
)
from hackathons.github import GitHubAPIError, RepositoryNotFound, parse_repo_url
from hackathons.models import ParticipantRecord, PoolEntry, Submission, Team
from hackathons.periods import submission_cutoff
from hackathons.services import invitations
from hackathons.services.pool import join_pool
from hackathons.services.submissions import (
    check_commits_after_cutoff,
    disqualify,
    register_submission,
    submit,
)
from hackathons.services.teams import add_member, get_or_create_team_for, leave_team
from hackathons.state_machine import (
    SUBMISSION_DISQUALIFIED,
    SUBMISSION_REGISTERED,
    SUBMISSION_SUBMITTED,
)

from .utils import BOSTON, MID_JUNE, NEXT_PERIOD, PERIOD, freeze_now, github_returning, make_participant

REPO = "https://github.com/x/y"


class ParseRepoUrlTests(SimpleTestCase):
    def test_accepts_github_urls(self):
        self.assertEqual(parse_repo_url("https://github.com/x/y"), ("x", "y"))
        self.assertEqual(parse_repo_url("https://www.github.com/x/y.git"), ("x", "y"))
        self.assertEqual(parse_repo_url("https://github.com/x/y/tree/main"), ("x", "y"))

    def test_rejects_everything_else(self):
        for bad in ("", "https://gitlab.com/x/y", "https://github.com/x", "ftp://github.com/x/y", "not a url"):
            self.assertIsNone(parse_repo_url(bad), bad)


class FullTeamMixin:
    def make_full_team(self):
        self.alice = make_participant("alice")
        self.bob = make_participant("bob")
        self.carol = make_participant("carol")
        self.team, _ = get_or_create_team_for(self.bob, PERIOD)
        add_member(self.team, self.alice)
        add_member(self.team, self.carol)


class RegisterSubmissionTests(FullTeamMixin, TestCase):
    def setUp(self):
        self.make_full_team()

    def test_register_creates_registered_submission(self):
        with freeze_now(MID_JUNE), github_returning():
            submission = register_submission(self.bob, REPO, PERIOD)

        self.assertEqual(submission.state, SUBMISSION_REGISTERED)
        self.assertEqual(submission.team_id, self.team.id)
        self.assertEqual(submission.registered_by, self.bob)
        self.assertEqual(submission.cutoff_at, submission_cutoff(PERIOD))
        self.assertIsNone(submission.submitted_at)

    def test_reregister_overwrites_in_place(self):
        with freeze_now(MID_JUNE), github_returning():
            first = register_submission(self.bob, REPO, PERIOD)
            second = register_submission(self.alice, "https://github.com/x/z", PERIOD)

        self.assertEqual(first.pk, second.pk)
        self.assertEqual(second.repo_url, "https://github.com/x/z")
        self.assertEqual(second.registered_by, self.alice)
        self.assertEqual(Submission.objects.count(), 1)

    def test_two_member_team_cannot_register(self):
        leave_team(self.carol, self.team.id)
        with freeze_now(MID_JUNE), github_returning() as client_factory:
            with self.assertRaises(NotFullTeamError):
                register_submission(self.bob, REPO, PERIOD)
        client_factory.return_value.get_repository.assert_not_called()

    def test_non_member_cannot_register(self):
        with freeze_now(MID_JUNE), github_returning():
            with self.assertRaises(NotTeamMemberError):
                register_submission(make_participant("dave"), REPO, PERIOD)

    def test_after_cutoff_is_closed(self):
        with freeze_now(datetime(2025, 7, 1, 0, 1, tzinfo=BOSTON)), github_returning():
            with self.assertRaises(SubmissionClosedError):
                register_submission(self.bob, REPO, PERIOD)

    def test_repo_checks(self):
        with freeze_now(MID_JUNE):
            with github_returning(private=True):
                with self.assertRaisesMessage(RepoInvalidError, "public"):
                    register_submission(self.bob, REPO, PERIOD)
            with github_returning(created_at=datetime(2025, 5, 31, 23, 0, tzinfo=BOSTON)):
                with self.assertRaisesMessage(RepoInvalidError, "2025-06"):
                    register_submission(self.bob, REPO, PERIOD)
            with github_returning():
                with self.assertRaises(RepoInvalidError):
                    register_submission(self.bob, "https://gitlab.com/x/y", PERIOD)
        self.assertFalse(Submission.objects.exists())

    def test_github_answers_map_to_typed_errors(self):
        with freeze_now(MID_JUNE), github_returning() as client_factory:
            client = client_factory.return_value
            client.get_repository.side_effect = RepositoryNotFound("repos/x/y")
            with self.assertRaisesMessage(RepoInvalidError, "private"):
                register_submission(self.bob, REPO, PERIOD)

            client.get_repository.side_effect = GitHubAPIError("GitHub returned 503")
            with self.assertRaises(RepoVerificationUnavailable) as ctx:
                register_submission(self.bob, REPO, PERIOD)
        self.assertEqual(ctx.exception.status_code, 502)


class SubmitTests(FullTeamMixin, TestCase):
    def setUp(self):
        self.make_full_team()

    def register(self):
        with freeze_now(MID_JUNE), github_returning():
            return register_submission(self.bob, REPO, PERIOD)

    def test_submit_requires_registration(self):
        with freeze_now(MID_JUNE):
            with self.assertRaises(NotRegisteredError):
                submit(self.bob, PERIOD)

    def test_submit_twice_keeps_first_timestamp(self):
        self.register()
        with freeze_now(MID_JUNE):
            first = submit(self.bob, PERIOD)
        with freeze_now(MID_JUNE + timedelta(hours=1)):
            with self.assertRaises(AlreadyLockedError):
                submit(self.alice, PERIOD)

        first.refresh_from_db()
        self.assertEqual(first.submitted_at, MID_JUNE)
        self.assertEqual(first.state, SUBMISSION_SUBMITTED)

    def test_submit_after_cutoff_rejected(self):
        self.register()
        with freeze_now(datetime(2025, 7, 2, tzinfo=BOSTON)):
            with self.assertRaises(SubmissionClosedError):
                submit(self.bob, PERIOD)

    def test_disqualified_submission_is_frozen(self):
        submission = self.register()
        disqualify(submission, "Plagiarism")

        with freeze_now(MID_JUNE), github_returning():
            with self.assertRaises(AlreadyLockedError):
                register_submission(self.bob, REPO, PERIOD)
            with self.assertRaises(AlreadyLockedError):
                submit(self.bob, PERIOD)

        submission.refresh_from_db()
        self.assertEqual(submission.state, SUBMISSION_DISQUALIFIED)

    def test_disqualify_is_idempotent(self):
        submission = self.register()
        disqualify(submission, "First")
        disqualify(submission, "Second")
        submission.refresh_from_db()
        self.assertEqual(submission.disqualified_reason, "First")


class CommitAuditTests(FullTeamMixin, TestCase):
    def setUp(self):
        self.make_full_team()
        with freeze_now(MID_JUNE), github_returning():
            register_submission(self.bob, REPO, PERIOD)
            self.submission = submit(self.bob, PERIOD)

    def test_commit_after_cutoff_disqualifies(self):
        client = mock.Mock()
        client.has_commits_since.return_value = True

        with freeze_now(datetime(2025, 7, 1, 6, 0, tzinfo=BOSTON)):
            summary = check_commits_after_cutoff(PERIOD, client=client)

        client.has_commits_since.assert_called_once_with("x", "y", submission_cutoff(PERIOD))
        self.assertEqual(summary["disqualified_count"], 1)
        self.submission.refresh_from_db()
        self.assertTrue(self.submission.disqualified)
        self.assertEqual(self.submission.disqualified_reason, "Commit after cutoff")

    def test_audit_waits_for_cutoff_and_skips_github_errors(self):
        client = mock.Mock()
        with freeze_now(MID_JUNE):
            summary = check_commits_after_cutoff(PERIOD, client=client)
        client.has_commits_since.assert_not_called()
        self.assertEqual(summary["checked"], 0)

        client.has_commits_since.side_effect = GitHubAPIError("rate limited")
        with freeze_now(datetime(2025, 7, 2, tzinfo=BOSTON)):
            summary = check_commits_after_cutoff(PERIOD, client=client)
        self.assertEqual(summary["disqualified_count"], 0)
        self.submission.refresh_from_db()
        self.assertFalse(self.submission.disqualified)


class ExampleScenarioTests(TestCase):
    def setUp(self):
        self.a = make_participant("a")
        self.b = make_participant("b")
        self.c = make_participant("c")

    def test_pool_invite_request_register_submit(self):
        with freeze_now(MID_JUNE):
            join_pool(self.a, PERIOD)

            invite = invitations.send_invite(self.b, self.a, PERIOD)
            team = Team.objects.get(pk=invite.team_id)
            self.assertEqual(team.member_ids, [self.b.id])

            invitations.accept_invite(invite.id, self.a)
            team.refresh_from_db()
            self.assertEqual(team.member_ids, [self.b.id, self.a.id])
            self.assertFalse(PoolEntry.objects.filter(user=self.a, hackathon_id=PERIOD).exists())

            join_request = invitations.send_join_request(self.c, team.id)
            invitations.accept_join_request(join_request.id, self.b)
            team.refresh_from_db()
            self.assertEqual(team.member_ids, [self.b.id, self.a.id, self.c.id])
            self.assertEqual(team.state, Team.STATE_FULL)

            with github_returning():
                submission = register_submission(self.b, REPO, PERIOD)
            self.assertEqual(submission.state, SUBMISSION_REGISTERED)

            submission = submit(self.b, PERIOD)
            self.assertIsNotNone(submission.submitted_at)

            with github_returning():
                with self.assertRaises(AlreadyLockedError):
                    register_submission(self.b, REPO, PERIOD)
            with self.assertRaises(AlreadyLockedError):
                submit(self.c, PERIOD)

    def test_leaving_registered_team_disqualifies_and_locks_out(self):
        with freeze_now(MID_JUNE):
            team, _ = get_or_create_team_for(self.b, PERIOD)
            add_member(team, self.a)
            add_member(team, self.c)
            with github_returning():
                submission = register_submission(self.b, REPO, PERIOD)

            result = leave_team(self.a, team.id)

            self.assertTrue(result.lockout_until_next_period)
            submission.refresh_from_db()
            self.assertTrue(submission.disqualified)

            other, _ = get_or_create_team_for(make_participant("d"), PERIOD)
            with self.assertRaises(IneligibleError):
                join_pool(self.a, PERIOD)
            with self.assertRaises(IneligibleError):
                invitations.send_join_request(self.a, other.id)
            invite = invitations.send_invite(other.created_by, self.a, PERIOD)
            with self.assertRaises(IneligibleError):
                invitations.accept_invite(invite.id, self.a)

        self.assertEqual(ParticipantRecord.objects.get(user=self.a).locked_until_period_id, NEXT_PERIOD)
        # From the next period on, A may take part again
        join_pool(self.a, NEXT_PERIOD)
