import threading
from smtplib import SMTPException
from unittest import mock

from django.conf import settings
from django.contrib.auth import get_user_model
from django.core import mail
from django.db import IntegrityError, connection, transaction
from django.test import TestCase, TransactionTestCase
from rest_framework import status
from rest_framework.exceptions import NotAuthenticated, NotFound, PermissionDenied, ValidationError
from rest_framework.test import APITestCase

from accounts.authentication import issue_session_token
from teamup.exceptions import Conflict
from .models import Team, TeamMembership
from .services import TeamService

User = get_user_model()


def make_user(name):
    return User.objects.create_user(email=f'{name}@example.com', name=name, password='testpass123')


def links(prefix='user'):
    return {
        'linkedin': f'https://linkedin.com/in/{prefix}',
        'github': f'https://github.com/{prefix}',
        'resume': f'https://example.com/{prefix}/resume.pdf',
    }


class TeamModelTest(TestCase):
    def setUp(self):
        self.creator = make_user('creator')

    def test_team_default_values(self):
        team = Team.objects.create(name='Rocket', domain='ml', creator=self.creator)
        self.assertEqual(team.max_members, 2)
        self.assertTrue(team.is_open)
        self.assertEqual(team.description, '')
        self.assertEqual(team.members, [])
        self.assertEqual(team.applicants, [])
        self.assertEqual(team.rejected_applicants, [])

    def test_one_membership_row_per_user_and_team(self):
        # The store refuses a second relation for the same (team, user)
        team = Team.objects.create(name='Rocket', domain='ml', creator=self.creator)
        alice = make_user('alice')
        TeamMembership.objects.create(team=team, user=alice, **links('alice'))
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                TeamMembership.objects.create(
                    team=team, user=alice, status=TeamMembership.REJECTED, **links('alice')
                )


class TeamServiceTest(TestCase):
    def setUp(self):
        self.service = TeamService()
        self.creator = make_user('creator')
        self.alice = make_user('alice')
        self.bob = make_user('bob')
        self.carol = make_user('carol')
        self.team = self.service.create_team(
            self.creator, {'name': 'Rocket', 'domain': 'ml', 'maxMembers': 2}
        )

    def reload(self):
        return self.service.get_team(self.team.pk)

    def relations_of(self, team, user):
        relations = []
        if user in team.members:
            relations.append('member')
        if any(a.user == user for a in team.applicants):
            relations.append('applicant')
        if any(r.user == user for r in team.rejected_applicants):
            relations.append('rejected')
        return relations

    # create

    def test_create_team_requires_name_and_domain(self):
        with self.assertRaises(ValidationError):
            self.service.create_team(self.creator, {'name': 'No domain'})
        with self.assertRaises(ValidationError):
            self.service.create_team(self.creator, {'name': '', 'domain': 'ml'})

    def test_create_team_rejects_non_positive_capacity(self):
        with self.assertRaises(ValidationError):
            self.service.create_team(self.creator, {'name': 'Zero', 'domain': 'ml', 'maxMembers': 0})

    def test_create_team_requires_caller(self):
        with self.assertRaises(NotAuthenticated):
            self.service.create_team(None, {'name': 'Rocket', 'domain': 'ml'})

    # apply

    def test_apply_adds_pending_applicant(self):
        self.service.apply(self.team.pk, self.alice, links('alice'))
        team = self.reload()
        self.assertEqual([a.user for a in team.applicants], [self.alice])
        self.assertEqual(team.applicants[0].github, 'https://github.com/alice')
        self.assertIsNotNone(team.applicants[0].applied_at)

    def test_apply_trims_links(self):
        padded = {key: f'  {value}  ' for key, value in links('alice').items()}
        application = self.service.apply(self.team.pk, self.alice, padded)
        self.assertEqual(application.linkedin, 'https://linkedin.com/in/alice')

    def test_creator_cannot_apply(self):
        with self.assertRaises(Conflict) as ctx:
            self.service.apply(self.team.pk, self.creator, links('creator'))
        self.assertEqual(str(ctx.exception.detail), 'Cannot apply to your own team')

    def test_creator_cannot_apply_even_when_team_closed(self):
        self.service.toggle_recruiting(self.team.pk, self.creator, False)
        with self.assertRaises(Conflict) as ctx:
            self.service.apply(self.team.pk, self.creator, links('creator'))
        self.assertEqual(str(ctx.exception.detail), 'Cannot apply to your own team')

    def test_duplicate_application_conflicts(self):
        self.service.apply(self.team.pk, self.alice, links('alice'))
        with self.assertRaises(Conflict) as ctx:
            self.service.apply(self.team.pk, self.alice, links('alice'))
        self.assertEqual(str(ctx.exception.detail), 'Already applied')

    def test_member_cannot_apply_again(self):
        self.service.apply(self.team.pk, self.alice, links('alice'))
        self.service.accept_applicant(self.team.pk, self.creator, self.alice.pk)
        with self.assertRaises(Conflict) as ctx:
            self.service.apply(self.team.pk, self.alice, links('alice'))
        self.assertEqual(str(ctx.exception.detail), 'Already a member')

    def test_rejected_user_can_never_reapply(self):
        self.service.apply(self.team.pk, self.alice, links('alice'))
        self.service.reject_applicant(self.team.pk, self.creator, self.alice.pk)

        # Withdrawing is not possible once rejected
        with self.assertRaises(NotFound):
            self.service.withdraw_application(self.team.pk, self.alice, self.alice.pk)

        with self.assertRaises(Conflict) as ctx:
            self.service.apply(self.team.pk, self.alice, links('alice'))
        self.assertEqual(str(ctx.exception.detail), 'Application previously rejected')
        self.assertEqual(self.reload().applicants, [])

    def test_apply_requires_all_links(self):
        data = links('alice')
        data['resume'] = ''
        with self.assertRaises(ValidationError) as ctx:
            self.service.apply(self.team.pk, self.alice, data)
        self.assertIn('LinkedIn, GitHub, and Resume links are required', str(ctx.exception.detail))
        self.assertFalse(TeamMembership.objects.filter(team=self.team).exists())

    def test_apply_rejects_non_http_links(self):
        data = links('alice')
        data['github'] = 'ftp://github.com/alice'
        with self.assertRaises(ValidationError):
            self.service.apply(self.team.pk, self.alice, data)
        data['github'] = 'not a url'
        with self.assertRaises(ValidationError):
            self.service.apply(self.team.pk, self.alice, data)
        self.assertFalse(TeamMembership.objects.filter(team=self.team).exists())

    def test_apply_with_malformed_team_id(self):
        with self.assertRaises(ValidationError):
            self.service.apply('abc', self.alice, links('alice'))

    def test_apply_to_missing_team(self):
        with self.assertRaises(NotFound):
            self.service.apply(999999, self.alice, links('alice'))

    def test_apply_requires_caller(self):
        with self.assertRaises(NotAuthenticated):
            self.service.apply(self.team.pk, None, links('anon'))

    def test_apply_to_closed_team_that_is_not_full(self):
        self.service.toggle_recruiting(self.team.pk, self.creator, False)
        with self.assertRaises(Conflict) as ctx:
            self.service.apply(self.team.pk, self.alice, links('alice'))
        self.assertEqual(str(ctx.exception.detail), 'Team is not recruiting')

    def test_apply_to_full_team_conflicts_without_mutation(self):
        team = self.service.create_team(self.creator, {'name': 'Solo', 'domain': 'ml', 'maxMembers': 1})
        self.service.apply(team.pk, self.alice, links('alice'))
        self.service.accept_applicant(team.pk, self.creator, self.alice.pk)

        team = self.service.get_team(team.pk)
        self.assertEqual(team.members, [self.alice])
        self.assertFalse(team.is_open)

        # Checked even though the team is no longer listed as available
        with self.assertRaises(Conflict) as ctx:
            self.service.apply(team.pk, self.bob, links('bob'))
        self.assertEqual(str(ctx.exception.detail), 'Team is full')
        self.assertEqual(self.service.get_team(team.pk).applicants, [])

    def test_apply_to_team_filled_at_default_capacity(self):
        self.service.apply(self.team.pk, self.alice, links('alice'))
        self.service.apply(self.team.pk, self.bob, links('bob'))
        self.service.accept_applicant(self.team.pk, self.creator, self.alice.pk)
        self.service.accept_applicant(self.team.pk, self.creator, self.bob.pk)

        with self.assertRaises(Conflict) as ctx:
            self.service.apply(self.team.pk, self.carol, links('carol'))
        self.assertEqual(str(ctx.exception.detail), 'Team is full')

    def test_apply_notifies_creator(self):
        self.service.apply(self.team.pk, self.alice, links('alice'))
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, ['creator@example.com'])
        self.assertIn('Rocket', mail.outbox[0].subject)

    def test_notification_failure_does_not_fail_apply(self):
        with mock.patch('teamup.tasks.send_mail', side_effect=SMTPException('down')) as send:
            self.service.apply(self.team.pk, self.alice, links('alice'))
        self.assertEqual([a.user for a in self.reload().applicants], [self.alice])
        # A failed notification is dropped after a single attempt
        self.assertEqual(send.call_count, 1)

    def test_unreachable_queue_does_not_fail_apply(self):
        with mock.patch('teamup.notifications.send_notification_email') as task:
            task.delay.side_effect = ConnectionError('broker down')
            self.service.apply(self.team.pk, self.alice, links('alice'))
        task.delay.assert_called_once()
        self.assertEqual(len(self.reload().applicants), 1)

    # accept

    def test_accept_moves_applicant_to_members(self):
        self.service.apply(self.team.pk, self.alice, links('alice'))
        self.service.accept_applicant(self.team.pk, self.creator, self.alice.pk)
        team = self.reload()
        self.assertEqual(team.members, [self.alice])
        self.assertEqual(team.applicants, [])
        self.assertTrue(team.is_open)  # One slot still free

    def test_accept_filling_last_slot_closes_team(self):
        for user in (self.alice, self.bob, self.carol):
            self.service.apply(self.team.pk, user, links(user.name))
        self.service.accept_applicant(self.team.pk, self.creator, self.alice.pk)

        # members == max_members - 1
        self.service.accept_applicant(self.team.pk, self.creator, self.bob.pk)
        team = self.reload()
        self.assertEqual(team.members, [self.alice, self.bob])
        self.assertFalse(team.is_open)

        with self.assertRaises(Conflict) as ctx:
            self.service.accept_applicant(self.team.pk, self.creator, self.carol.pk)
        self.assertEqual(str(ctx.exception.detail), 'Team is already full')
        self.assertEqual([a.user for a in self.reload().applicants], [self.carol])

    def test_second_accept_for_last_slot_conflicts(self):
        team = self.service.create_team(self.creator, {'name': 'Solo', 'domain': 'ml', 'maxMembers': 1})
        self.service.apply(team.pk, self.alice, links('alice'))
        self.service.apply(team.pk, self.bob, links('bob'))

        outcomes = []
        for user in (self.alice, self.bob):
            try:
                self.service.accept_applicant(team.pk, self.creator, user.pk)
                outcomes.append('accepted')
            except Conflict as exc:
                outcomes.append(str(exc.detail))

        self.assertEqual(outcomes, ['accepted', 'Team is already full'])
        team = self.service.get_team(team.pk)
        self.assertEqual(len(team.members), team.max_members)

    def test_accept_requires_creator(self):
        self.service.apply(self.team.pk, self.alice, links('alice'))
        with self.assertRaises(PermissionDenied):
            self.service.accept_applicant(self.team.pk, self.bob, self.alice.pk)

    def test_accept_unknown_applicant(self):
        with self.assertRaises(NotFound) as ctx:
            self.service.accept_applicant(self.team.pk, self.creator, self.alice.pk)
        self.assertEqual(str(ctx.exception.detail), 'Applicant not found')

    def test_accept_with_malformed_ids(self):
        with self.assertRaises(ValidationError):
            self.service.accept_applicant(self.team.pk, self.creator, 'not-an-id')
        with self.assertRaises(ValidationError):
            self.service.accept_applicant('-1', self.creator, self.alice.pk)

    def test_accept_notifies_applicant(self):
        self.service.apply(self.team.pk, self.alice, links('alice'))
        mail.outbox = []
        self.service.accept_applicant(self.team.pk, self.creator, self.alice.pk)
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, ['alice@example.com'])
        self.assertIn('Accepted', mail.outbox[0].subject)

    # reject

    def test_reject_preserves_application_details(self):
        self.service.apply(self.team.pk, self.alice, links('alice'))
        original = TeamMembership.objects.get(team=self.team, user=self.alice)

        self.service.reject_applicant(self.team.pk, self.creator, self.alice.pk)
        team = self.reload()
        self.assertEqual(team.applicants, [])
        self.assertEqual(len(team.rejected_applicants), 1)

        rejected = team.rejected_applicants[0]
        self.assertEqual(rejected.user, self.alice)
        self.assertEqual(rejected.applied_at, original.applied_at)
        self.assertEqual(rejected.linkedin, original.linkedin)
        self.assertEqual(rejected.github, original.github)
        self.assertEqual(rejected.resume, original.resume)
        self.assertIsNotNone(rejected.rejected_at)

    def test_reject_requires_creator(self):
        self.service.apply(self.team.pk, self.alice, links('alice'))
        with self.assertRaises(PermissionDenied):
            self.service.reject_applicant(self.team.pk, self.alice, self.alice.pk)

    def test_reject_notification_failure_is_swallowed(self):
        self.service.apply(self.team.pk, self.alice, links('alice'))
        with mock.patch('teamup.tasks.send_mail', side_effect=SMTPException('down')):
            self.service.reject_applicant(self.team.pk, self.creator, self.alice.pk)
        self.assertEqual(len(self.reload().rejected_applicants), 1)

    # withdraw

    def test_withdraw_leaves_no_trace_and_allows_reapply(self):
        self.service.apply(self.team.pk, self.alice, links('alice'))
        self.service.withdraw_application(self.team.pk, self.alice, self.alice.pk)

        team = self.reload()
        self.assertEqual(team.applicants, [])
        self.assertEqual(team.rejected_applicants, [])
        self.assertFalse(TeamMembership.objects.filter(team=self.team, user=self.alice).exists())

        self.service.apply(self.team.pk, self.alice, links('alice'))
        self.assertEqual([a.user for a in self.reload().applicants], [self.alice])

    def test_withdraw_only_own_application(self):
        self.service.apply(self.team.pk, self.alice, links('alice'))
        # Even the creator may not withdraw on someone's behalf
        with self.assertRaises(PermissionDenied):
            self.service.withdraw_application(self.team.pk, self.creator, self.alice.pk)
        with self.assertRaises(PermissionDenied):
            self.service.withdraw_application(self.team.pk, self.bob, self.alice.pk)

    def test_withdraw_without_application(self):
        with self.assertRaises(NotFound) as ctx:
            self.service.withdraw_application(self.team.pk, self.alice, self.alice.pk)
        self.assertEqual(str(ctx.exception.detail), 'Application not found')

    def test_member_cannot_withdraw(self):
        self.service.apply(self.team.pk, self.alice, links('alice'))
        self.service.accept_applicant(self.team.pk, self.creator, self.alice.pk)
        with self.assertRaises(NotFound):
            self.service.withdraw_application(self.team.pk, self.alice, self.alice.pk)
        self.assertEqual(self.reload().members, [self.alice])

    # toggle recruiting

    def test_toggle_flips_when_no_state_given(self):
        team = self.service.toggle_recruiting(self.team.pk, self.creator)
        self.assertFalse(team.is_open)
        team = self.service.toggle_recruiting(self.team.pk, self.creator, 'yes')  # Not a bool
        self.assertTrue(team.is_open)
        self.assertTrue(Team.objects.get(pk=self.team.pk).is_open)

    def test_toggle_sets_explicit_state(self):
        self.service.toggle_recruiting(self.team.pk, self.creator, True)
        self.assertTrue(Team.objects.get(pk=self.team.pk).is_open)
        self.service.toggle_recruiting(self.team.pk, self.creator, False)
        self.assertFalse(Team.objects.get(pk=self.team.pk).is_open)

    def test_toggle_requires_creator(self):
        with self.assertRaises(PermissionDenied):
            self.service.toggle_recruiting(self.team.pk, self.alice)

    def test_reopened_full_team_still_enforces_capacity(self):
        team = self.service.create_team(self.creator, {'name': 'Solo', 'domain': 'ml', 'maxMembers': 1})
        self.service.apply(team.pk, self.alice, links('alice'))
        self.service.apply(team.pk, self.bob, links('bob'))
        self.service.accept_applicant(team.pk, self.creator, self.alice.pk)

        team = self.service.toggle_recruiting(team.pk, self.creator, True)
        self.assertTrue(team.is_open)
        with self.assertRaises(Conflict):
            self.service.accept_applicant(team.pk, self.creator, self.bob.pk)
        with self.assertRaises(Conflict):
            self.service.apply(team.pk, self.carol, links('carol'))

    # reads

    def test_get_team_errors(self):
        with self.assertRaises(ValidationError):
            self.service.get_team('12abc')
        with self.assertRaises(NotFound):
            self.service.get_team(999999)

    def test_list_created(self):
        other = self.service.create_team(self.alice, {'name': 'Other', 'domain': 'web'})
        created = list(self.service.list_created(self.creator))
        self.assertEqual(created, [self.team])
        self.assertNotIn(other, created)

    def test_list_available_excludes_every_relation(self):
        applied = self.service.create_team(self.creator, {'name': 'Applied', 'domain': 'ml'})
        joined = self.service.create_team(self.creator, {'name': 'Joined', 'domain': 'ml'})
        rejected = self.service.create_team(self.creator, {'name': 'Rejected', 'domain': 'ml'})
        own = self.service.create_team(self.alice, {'name': 'Own', 'domain': 'ml'})

        self.service.apply(applied.pk, self.alice, links('alice'))
        self.service.apply(joined.pk, self.alice, links('alice'))
        self.service.accept_applicant(joined.pk, self.creator, self.alice.pk)
        self.service.apply(rejected.pk, self.alice, links('alice'))
        self.service.reject_applicant(rejected.pk, self.creator, self.alice.pk)

        available = list(self.service.list_available(self.alice))
        self.assertEqual(available, [self.team])
        self.assertNotIn(own, available)

        # Anonymous callers see every open team
        self.assertEqual(
            set(self.service.list_available(None)),
            {self.team, applied, joined, rejected, own}
        )

    def test_list_available_filters_domain_and_open(self):
        web = self.service.create_team(self.creator, {'name': 'Web', 'domain': 'web'})
        closed = self.service.create_team(self.creator, {'name': 'Closed', 'domain': 'web'})
        self.service.toggle_recruiting(closed.pk, self.creator, False)

        self.assertEqual(list(self.service.list_available(self.bob, ' web ')), [web])
        self.assertEqual(list(self.service.list_available(None, 'ml')), [self.team])
        self.assertEqual(list(self.service.list_available(None, 'nothing')), [])

    def test_list_applied_covers_pending_member_and_rejected(self):
        joined = self.service.create_team(self.creator, {'name': 'Joined', 'domain': 'ml'})
        rejected = self.service.create_team(self.creator, {'name': 'Rejected', 'domain': 'ml'})
        self.service.create_team(self.creator, {'name': 'Untouched', 'domain': 'ml'})

        self.service.apply(self.team.pk, self.alice, links('alice'))
        self.service.apply(joined.pk, self.alice, links('alice'))
        self.service.accept_applicant(joined.pk, self.creator, self.alice.pk)
        self.service.apply(rejected.pk, self.alice, links('alice'))
        self.service.reject_applicant(rejected.pk, self.creator, self.alice.pk)

        self.assertEqual(set(self.service.list_applied(self.alice)), {self.team, joined, rejected})
        self.assertEqual(list(self.service.list_applied(self.bob)), [])

    def test_user_sits_in_at_most_one_relation(self):
        team = self.service.create_team(self.creator, {'name': 'Big', 'domain': 'ml', 'maxMembers': 5})
        for user in (self.alice, self.bob, self.carol):
            self.service.apply(team.pk, user, links(user.name))
        self.service.accept_applicant(team.pk, self.creator, self.alice.pk)
        self.service.reject_applicant(team.pk, self.creator, self.bob.pk)
        for attempt in (self.alice, self.bob, self.carol):
            with self.assertRaises(Conflict):
                self.service.apply(team.pk, attempt, links(attempt.name))

        team = self.service.get_team(team.pk)
        for user in (self.alice, self.bob, self.carol):
            self.assertEqual(len(self.relations_of(team, user)), 1)
        self.assertEqual(self.relations_of(team, self.creator), [])


class ConcurrentAcceptTest(TransactionTestCase):
    """Accepts running on separate connections at the same time."""

    def setUp(self):
        self.creator = make_user('creator')
        self.alice = make_user('alice')
        self.bob = make_user('bob')
        self.team = Team.objects.create(
            name='Solo', creator=self.creator, domain='ml', max_members=1, is_open=True
        )
        for user in (self.alice, self.bob):
            TeamMembership.objects.create(
                team=self.team, user=user, status=TeamMembership.APPLIED, **links(user.name)
            )

    def test_two_accepts_race_for_last_slot(self):
        barrier = threading.Barrier(2)
        outcomes = {}

        def accept(applicant):
            try:
                barrier.wait()
                TeamService().accept_applicant(self.team.pk, self.creator, applicant.pk)
                outcomes[applicant.name] = 'ok'
            except Conflict as exc:
                outcomes[applicant.name] = str(exc.detail)
            except Exception as exc:
                outcomes[applicant.name] = f'{type(exc).__name__}: {exc}'
            finally:
                connection.close()

        threads = [threading.Thread(target=accept, args=(user,)) for user in (self.alice, self.bob)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(sorted(outcomes.values()), ['Team is already full', 'ok'])
        self.assertEqual(
            TeamMembership.objects.filter(team=self.team, status=TeamMembership.MEMBER).count(), 1
        )
        self.assertFalse(Team.objects.get(pk=self.team.pk).is_open)


class TeamAPITest(APITestCase):
    def setUp(self):
        self.creator = make_user('creator')
        self.alice = make_user('alice')
        self.bob = make_user('bob')

    def login(self, user):
        self.client.cookies[settings.AUTH_COOKIE['NAME']] = issue_session_token(user)

    def logout(self):
        self.client.cookies.pop(settings.AUTH_COOKIE['NAME'], None)

    def create_team(self, **extra):
        self.login(self.creator)
        data = {'name': 'Rocket', 'domain': 'ml', 'description': 'Build it'}
        data.update(extra)
        response = self.client.post('/api/team', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        return response.data['team']

    def test_create_team(self):
        team = self.create_team(maxMembers=3)
        self.assertEqual(team['name'], 'Rocket')
        self.assertEqual(team['maxMembers'], 3)
        self.assertTrue(team['isOpen'])
        self.assertEqual(team['creator']['email'], 'creator@example.com')
        self.assertEqual(team['members'], [])
        self.assertEqual(team['applicants'], [])
        self.assertEqual(team['rejectedApplicants'], [])

    def test_create_team_missing_domain(self):
        self.login(self.creator)
        response = self.client.post('/api/team', {'name': 'Rocket'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data, {'success': False, 'message': 'Name and domain required'})

    def test_create_team_requires_login(self):
        response = self.client.post('/api/team', {'name': 'Rocket', 'domain': 'ml'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data, {'success': False, 'message': 'Unauthorized access'})

    def test_invalid_token_is_forbidden(self):
        self.client.cookies[settings.AUTH_COOKIE['NAME']] = 'not-a-token'
        response = self.client.get('/api/team/created')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertFalse(response.data['success'])

    def test_available_allows_anonymous_and_ignores_bad_token(self):
        self.create_team()
        self.logout()
        response = self.client.get('/api/team/available', {'domain': 'ml'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['teams']), 1)

        self.client.cookies[settings.AUTH_COOKIE['NAME']] = 'garbage'
        response = self.client.get('/api/team/available')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data['teams']), 1)

    def test_available_hides_own_teams(self):
        self.create_team()
        response = self.client.get('/api/team/available')
        self.assertEqual(response.data['teams'], [])

    def test_full_lifecycle(self):
        team = self.create_team(maxMembers=1)
        team_id = team['id']

        self.login(self.alice)
        response = self.client.post(f'/api/team/{team_id}/apply', links('alice'), format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {'success': True, 'message': 'Applied successfully'})

        response = self.client.get('/api/team/applied')
        self.assertEqual([t['id'] for t in response.data['teams']], [team_id])

        self.login(self.creator)
        response = self.client.post(f'/api/team/{team_id}/applicants/{self.alice.pk}/accept')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'Applicant accepted')

        response = self.client.get(f'/api/team/{team_id}')
        detail = response.data['team']
        self.assertEqual([m['id'] for m in detail['members']], [self.alice.pk])
        self.assertFalse(detail['isOpen'])

        self.login(self.bob)
        response = self.client.post(f'/api/team/{team_id}/apply', links('bob'), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data, {'success': False, 'message': 'Team is full'})

    def test_apply_with_blank_resume(self):
        team = self.create_team()
        self.login(self.alice)
        data = links('alice')
        data['resume'] = ''
        response = self.client.post(f"/api/team/{team['id']}/apply", data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'LinkedIn, GitHub, and Resume links are required')
        self.assertFalse(TeamMembership.objects.exists())

    def test_reject_and_withdraw_endpoints(self):
        team = self.create_team(maxMembers=3)
        team_id = team['id']
        for user in (self.alice, self.bob):
            self.login(user)
            self.client.post(f'/api/team/{team_id}/apply', links(user.name), format='json')

        # Bob withdraws his own application
        response = self.client.post(f'/api/team/{team_id}/applicants/{self.bob.pk}/withdraw')
        self.assertEqual(response.data, {'success': True, 'message': 'Application withdrawn'})

        # ...but not Alice's
        response = self.client.post(f'/api/team/{team_id}/applicants/{self.alice.pk}/withdraw')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['message'], 'Can only withdraw your own application')

        self.login(self.creator)
        response = self.client.post(f'/api/team/{team_id}/applicants/{self.alice.pk}/reject')
        self.assertEqual(response.data, {'success': True, 'message': 'Applicant rejected'})

        detail = self.client.get(f'/api/team/{team_id}').data['team']
        self.assertEqual(detail['applicants'], [])
        self.assertEqual(detail['rejectedApplicants'][0]['user']['id'], self.alice.pk)
        self.assertIsNotNone(detail['rejectedApplicants'][0]['rejectedAt'])
        self.assertIsNotNone(detail['rejectedApplicants'][0]['appliedAt'])

    def test_accept_by_non_creator_is_forbidden(self):
        team = self.create_team()
        self.login(self.alice)
        self.client.post(f"/api/team/{team['id']}/apply", links('alice'), format='json')
        response = self.client.post(f"/api/team/{team['id']}/applicants/{self.alice.pk}/accept")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data, {'success': False, 'message': 'Forbidden'})

    def test_team_detail_errors(self):
        self.login(self.alice)
        response = self.client.get('/api/team/not-an-id')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Invalid teamId')

        response = self.client.get('/api/team/424242')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['message'], 'Team not found')

    def test_toggle_recruiting(self):
        team = self.create_team()
        response = self.client.patch(f"/api/team/{team['id']}/recruiting", {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'Recruiting stopped')
        self.assertFalse(response.data['team']['isOpen'])

        response = self.client.patch(f"/api/team/{team['id']}/recruiting", {'isOpen': True}, format='json')
        self.assertEqual(response.data['message'], 'Recruiting opened')
        self.assertTrue(response.data['team']['isOpen'])

        self.login(self.alice)
        response = self.client.patch(f"/api/team/{team['id']}/recruiting", {'isOpen': False}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
