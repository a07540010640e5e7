from django.db import IntegrityError, transaction
from django.test import TestCase
from rest_framework.exceptions import ValidationError

from core.models import DomainActivity
from hackathons import activity_verbs as verbs
from hackathons.exceptions import (
    AlreadyTeamedError,
    IneligibleError,
    NotTeamMemberError,
    TeamFullError,
    TeamProfileLockedError,
)
from hackathons.models import Invite, JoinRequest, ParticipantRecord, Submission, Team, TeamMember
from hackathons.periods import submission_cutoff
from hackathons.services.teams import (
    add_member,
    apply_lockout,
    get_or_create_team_for,
    leave_team,
    list_open_teams,
    list_teams,
    team_for,
    update_team_profile,
)
from hackathons.state_machine import TEAM_DISSOLVED, team_state

from .utils import NEXT_PERIOD, PERIOD, make_participant


def register_row(team, user):
    """Submission row as the registrar would leave it after registration."""
    return Submission.objects.create(
        hackathon_id=team.hackathon_id,
        team=team,
        repo_url="https://github.com/x/y",
        registered_by=user,
        cutoff_at=submission_cutoff(team.hackathon_id),
    )


class TeamCreationTests(TestCase):
    def setUp(self):
        self.alice = make_participant("alice")

    def test_creator_is_first_member(self):
        team, created = get_or_create_team_for(self.alice, PERIOD)

        self.assertTrue(created)
        self.assertEqual(team.member_ids, [self.alice.id])
        self.assertEqual(team.member_count, 1)
        self.assertEqual(team.state, Team.STATE_FORMING)
        self.assertEqual(team.created_by, self.alice)
        self.assertTrue(DomainActivity.objects.filter(verb=verbs.TEAM_CREATED, object_id=team.id).exists())

    def test_existing_team_is_reused(self):
        team, _ = get_or_create_team_for(self.alice, PERIOD)
        again, created = get_or_create_team_for(self.alice, PERIOD)
        self.assertFalse(created)
        self.assertEqual(team.pk, again.pk)
        self.assertEqual(Team.objects.count(), 1)

    def test_locked_out_user_cannot_create(self):
        ParticipantRecord.objects.create(user=self.alice, locked_until_period_id=NEXT_PERIOD)
        with self.assertRaises(IneligibleError):
            get_or_create_team_for(self.alice, PERIOD)
        self.assertFalse(Team.objects.exists())

    def test_team_state_by_size(self):
        self.assertEqual(team_state(0), TEAM_DISSOLVED)
        self.assertEqual(team_state(1), Team.STATE_FORMING)
        self.assertEqual(team_state(2), Team.STATE_PARTIAL)
        self.assertEqual(team_state(3), Team.STATE_FULL)


class AddMemberTests(TestCase):
    def setUp(self):
        self.alice = make_participant("alice")
        self.bob = make_participant("bob")
        self.carol = make_participant("carol")
        self.dave = make_participant("dave")
        self.team, _ = get_or_create_team_for(self.alice, PERIOD)

    def test_members_are_appended_in_order(self):
        add_member(self.team, self.bob)
        add_member(self.team, self.carol)

        self.team.refresh_from_db()
        self.assertEqual(self.team.member_ids, [self.alice.id, self.bob.id, self.carol.id])
        self.assertEqual(self.team.member_count, 3)
        self.assertTrue(self.team.is_full)

    def test_full_team_rejects_without_mutation(self):
        add_member(self.team, self.bob)
        add_member(self.team, self.carol)

        with self.assertRaises(TeamFullError):
            add_member(self.team, self.dave)

        self.team.refresh_from_db()
        self.assertEqual(self.team.member_count, 3)
        self.assertFalse(TeamMember.objects.filter(user=self.dave).exists())

    def test_stale_team_instance_cannot_overfill(self):
        """Two accepts racing for the last slot: the second sees the locked row."""
        add_member(self.team, self.bob)
        stale = Team.objects.get(pk=self.team.pk)  # member_count == 2
        other_stale = Team.objects.get(pk=self.team.pk)

        add_member(stale, self.carol)
        with self.assertRaises(TeamFullError):
            add_member(other_stale, self.dave)

        self.assertEqual(TeamMember.objects.filter(team=self.team).count(), 3)
        self.assertEqual(Team.objects.get(pk=self.team.pk).member_count, 3)

    def test_joiner_on_another_team_is_rejected(self):
        get_or_create_team_for(self.bob, PERIOD)
        with self.assertRaises(AlreadyTeamedError):
            add_member(self.team, self.bob)
        self.assertEqual(Team.objects.get(pk=self.team.pk).member_count, 1)

    def test_other_period_team_does_not_count(self):
        get_or_create_team_for(self.bob, NEXT_PERIOD)
        add_member(self.team, self.bob)
        self.assertEqual(team_for(self.bob, PERIOD).pk, self.team.pk)

    def test_adding_existing_member_is_noop(self):
        add_member(self.team, self.bob)
        add_member(self.team, self.bob)
        self.assertEqual(Team.objects.get(pk=self.team.pk).member_count, 2)

    def test_joining_closes_other_pending_proposals(self):
        other, _ = get_or_create_team_for(self.carol, PERIOD)
        JoinRequest.objects.create(from_user=self.bob, team=other, hackathon_id=PERIOD)
        Invite.objects.create(from_user=self.carol, to_user=self.bob, team=other, hackathon_id=PERIOD)

        add_member(self.team, self.bob)

        self.assertFalse(JoinRequest.objects.filter(from_user=self.bob, status=JoinRequest.STATUS_PENDING).exists())
        self.assertFalse(Invite.objects.filter(to_user=self.bob, status=Invite.STATUS_PENDING).exists())

    def test_database_rejects_more_than_three_members(self):
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                Team.objects.filter(pk=self.team.pk).update(member_count=4)


class LeaveTeamTests(TestCase):
    def setUp(self):
        self.alice = make_participant("alice")
        self.bob = make_participant("bob")
        self.carol = make_participant("carol")
        self.team, _ = get_or_create_team_for(self.alice, PERIOD)
        add_member(self.team, self.bob)
        add_member(self.team, self.carol)

    def test_leave_without_submission_has_no_penalty(self):
        result = leave_team(self.carol, self.team.id)

        self.assertTrue(result.left)
        self.assertFalse(result.disqualified)
        self.assertFalse(result.lockout_until_next_period)
        self.assertFalse(result.team_dissolved)
        self.team.refresh_from_db()
        self.assertEqual(self.team.member_count, 2)
        self.assertEqual(self.team.member_ids, [self.alice.id, self.bob.id])
        self.assertFalse(ParticipantRecord.objects.filter(user=self.carol).exists())

    def test_leave_after_registration_disqualifies_and_locks_out(self):
        submission = register_row(self.team, self.alice)

        result = leave_team(self.alice, self.team.id)

        self.assertTrue(result.disqualified)
        self.assertTrue(result.lockout_until_next_period)
        self.assertEqual(result.locked_until_period_id, NEXT_PERIOD)

        submission.refresh_from_db()
        self.assertTrue(submission.disqualified)
        self.assertEqual(submission.disqualified_reason, "Member left")

        record = ParticipantRecord.objects.get(user=self.alice)
        self.assertEqual(record.locked_until_period_id, NEXT_PERIOD)
        self.assertTrue(record.is_locked_for(PERIOD))
        self.assertFalse(record.is_locked_for(NEXT_PERIOD))

        # Remaining members keep the team
        self.team.refresh_from_db()
        self.assertEqual(self.team.member_ids, [self.bob.id, self.carol.id])

    def test_second_leaver_keeps_first_reason(self):
        submission = register_row(self.team, self.alice)
        leave_team(self.alice, self.team.id)
        submission.refresh_from_db()
        first_at = submission.disqualified_at

        result = leave_team(self.bob, self.team.id)

        self.assertTrue(result.disqualified)
        submission.refresh_from_db()
        self.assertEqual(submission.disqualified_at, first_at)
        self.assertEqual(DomainActivity.objects.filter(verb=verbs.SUBMISSION_DISQUALIFIED).count(), 1)
        self.assertEqual(ParticipantRecord.objects.get(user=self.bob).locked_until_period_id, NEXT_PERIOD)

    def test_last_member_leaving_deletes_team(self):
        Invite.objects.create(from_user=self.alice, to_user=make_participant("dave"), team=self.team, hackathon_id=PERIOD)
        leave_team(self.bob, self.team.id)
        leave_team(self.carol, self.team.id)

        result = leave_team(self.alice, self.team.id)

        self.assertTrue(result.team_dissolved)
        self.assertFalse(Team.objects.filter(pk=self.team.pk).exists())
        self.assertFalse(Invite.objects.filter(status=Invite.STATUS_PENDING).exists())
        self.assertTrue(DomainActivity.objects.filter(verb=verbs.TEAM_DISSOLVED).exists())

    def test_dissolved_team_keeps_disqualified_submission(self):
        submission = register_row(self.team, self.alice)
        for user in (self.alice, self.bob, self.carol):
            leave_team(user, self.team.id)

        submission.refresh_from_db()
        self.assertIsNone(submission.team_id)
        self.assertTrue(submission.disqualified)

    def test_non_member_cannot_leave(self):
        outsider = make_participant("outsider")
        with self.assertRaises(NotTeamMemberError):
            leave_team(outsider, self.team.id)
        self.assertEqual(Team.objects.get(pk=self.team.pk).member_count, 3)

    def test_leaver_is_locked_out_of_rejoining_this_period(self):
        register_row(self.team, self.alice)
        leave_team(self.alice, self.team.id)

        with self.assertRaises(IneligibleError):
            get_or_create_team_for(self.alice, PERIOD)

    def test_lockout_keeps_later_period(self):
        apply_lockout(self.alice, "virtual-2025-09")
        self.assertEqual(apply_lockout(self.alice, NEXT_PERIOD), "virtual-2025-09")
        self.assertEqual(ParticipantRecord.objects.get(user=self.alice).locked_until_period_id, "virtual-2025-09")


class TeamListingTests(TestCase):
    def setUp(self):
        self.users = [make_participant(f"u{i}") for i in range(6)]
        u = self.users
        self.full, _ = get_or_create_team_for(u[0], PERIOD)
        add_member(self.full, u[1])
        add_member(self.full, u[2])
        self.partial, _ = get_or_create_team_for(u[3], PERIOD)
        add_member(self.partial, u[4])
        self.solo, _ = get_or_create_team_for(u[5], PERIOD)

    def test_open_teams_exclude_full_and_own(self):
        outsider = make_participant("outsider")
        self.assertEqual({t.pk for t in list_open_teams(PERIOD, exclude_user=outsider)}, {self.partial.pk, self.solo.pk})
        self.assertEqual([t.pk for t in list_open_teams(PERIOD, exclude_user=self.users[5])], [self.partial.pk])

    def test_all_teams_list_open_first(self):
        self.assertEqual([t.pk for t in list_teams(PERIOD)][-1], self.full.pk)


class TeamProfileTests(TestCase):
    def setUp(self):
        self.alice = make_participant("alice")
        self.team, _ = get_or_create_team_for(self.alice, PERIOD)

    def test_locked_until_first_win(self):
        with self.assertRaises(TeamProfileLockedError):
            update_team_profile(self.team, self.alice, name="Winners")

    def test_member_can_edit_after_win(self):
        Team.objects.filter(pk=self.team.pk).update(wins=1)
        self.team.refresh_from_db()

        update_team_profile(self.team, self.alice, name="  Night\x00 Owls ", logo_url="https://example.com/logo.png")

        self.team.refresh_from_db()
        self.assertEqual(self.team.name, "Night Owls")
        self.assertEqual(self.team.display_name, "Night Owls")
        self.assertEqual(self.team.logo_url, "https://example.com/logo.png")

    def test_validation(self):
        Team.objects.filter(pk=self.team.pk).update(wins=2)
        self.team.refresh_from_db()
        with self.assertRaises(ValidationError):
            update_team_profile(self.team, self.alice, name="x" * 51)
        with self.assertRaises(ValidationError):
            update_team_profile(self.team, self.alice, logo_url="javascript:alert(1)")
        with self.assertRaises(NotTeamMemberError):
            update_team_profile(self.team, make_participant("bob"), name="Nope")
