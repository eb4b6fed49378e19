import logging

from django.db import IntegrityError, transaction
from django.db.models import Prefetch
from django.utils import timezone
from rest_framework.exceptions import NotAuthenticated, NotFound, PermissionDenied, ValidationError

from teamup.exceptions import Conflict
from teamup.notifications import build_notifier
from .filters import AvailableTeamFilter
from .models import Team, TeamMembership
from .serializers import ApplicationLinksSerializer, TeamCreateSerializer

logger = logging.getLogger(__name__)

EXISTING_RELATION_ERRORS = {
    TeamMembership.MEMBER: 'Already a member',
    TeamMembership.APPLIED: 'Already applied',
    TeamMembership.REJECTED: 'Application previously rejected',
}


def parse_id(value, message):
    """Primary keys arrive as path strings; anything but a positive integer is malformed."""
    value = str(value).strip()
    if not value.isdecimal() or int(value) <= 0:
        raise ValidationError(message)
    return int(value)


def team_queryset():
    return (
        Team.objects.select_related('creator')
        .prefetch_related(
            Prefetch('memberships', queryset=TeamMembership.objects.select_related('user'))
        )
    )


class TeamService:
    """
    Applicant lifecycle for teams.

    Per (team, user) the states are NONE -> APPLIED -> MEMBER | REJECTED, plus
    APPLIED -> NONE on withdrawal. Every mutation runs in a transaction that
    first locks the team row, so competing requests on one team (two accepts
    for the last slot, an accept racing a withdrawal) are serialized and the
    capacity check always sees the latest member count. Each state change is a
    single UPDATE/INSERT/DELETE guarded on the expected current status.

    Notifications go out once the atomic block has exited and never fail
    the operation.
    """

    def __init__(self, notifier=None):
        self.notifier = notifier or build_notifier()

    # Helpers

    @staticmethod
    def _require_caller(user):
        if user is None or not user.is_authenticated:
            raise NotAuthenticated('Unauthorized')

    @staticmethod
    def _require_creator(team, user):
        if team.creator_id != user.pk:
            raise PermissionDenied('Forbidden')

    @staticmethod
    def _locked_team(team_id):
        try:
            return Team.objects.select_for_update().get(pk=team_id)
        except Team.DoesNotExist:
            raise NotFound('Team not found')

    @staticmethod
    def _parse_pair(team_id, applicant_id):
        return parse_id(team_id, 'Invalid id(s)'), parse_id(applicant_id, 'Invalid id(s)')

    @staticmethod
    def _pending_application(team, applicant_id, message):
        application = (
            team.memberships.select_related('user')
            .filter(user_id=applicant_id, status=TeamMembership.APPLIED)
            .first()
        )
        if application is None:
            raise NotFound(message)
        return application

    @staticmethod
    def _move_pending(application, **changes):
        # Guarded on status so a concurrent withdraw/accept/reject wins cleanly
        moved = TeamMembership.objects.filter(
            pk=application.pk, status=TeamMembership.APPLIED
        ).update(**changes)
        if not moved:
            raise NotFound('Applicant not found')
        for field, value in changes.items():
            setattr(application, field, value)

    # Mutations

    def create_team(self, user, data):
        self._require_caller(user)
        serializer = TeamCreateSerializer(data=data)
        serializer.is_valid(raise_exception=True)
        team = Team.objects.create(creator=user, is_open=True, **serializer.validated_data)
        logger.info('User %s created team %s', user.pk, team.pk)
        return team

    def apply(self, team_id, user, links):
        self._require_caller(user)
        team_id = parse_id(team_id, 'Invalid teamId')
        serializer = ApplicationLinksSerializer(data=links or {})
        serializer.is_valid(raise_exception=True)

        with transaction.atomic():
            team = self._locked_team(team_id)

            if team.creator_id == user.pk:
                raise Conflict('Cannot apply to your own team')

            existing = team.memberships.filter(user=user).values_list('status', flat=True).first()
            if existing is not None:
                raise Conflict(EXISTING_RELATION_ERRORS[existing])

            if team.member_count() >= team.max_members:
                raise Conflict('Team is full')
            if not team.is_open:
                raise Conflict('Team is not recruiting')

            try:
                with transaction.atomic():
                    application = TeamMembership.objects.create(
                        team=team,
                        user=user,
                        status=TeamMembership.APPLIED,
                        applied_at=timezone.now(),
                        **serializer.validated_data
                    )
            except IntegrityError:
                raise Conflict('Already applied')

        logger.info('User %s applied to team %s', user.pk, team.pk)
        self.notifier.application_received(team, user)
        return application

    def accept_applicant(self, team_id, user, applicant_id):
        self._require_caller(user)
        team_id, applicant_id = self._parse_pair(team_id, applicant_id)

        with transaction.atomic():
            team = self._locked_team(team_id)
            self._require_creator(team, user)
            application = self._pending_application(team, applicant_id, 'Applicant not found')

            if team.member_count() >= team.max_members:
                raise Conflict('Team is already full')

            self._move_pending(application, status=TeamMembership.MEMBER, joined_at=timezone.now())

            # Filling the last slot closes recruiting
            if team.member_count() >= team.max_members:
                Team.objects.filter(pk=team.pk).update(is_open=False, updated_at=timezone.now())
                team.is_open = False

        logger.info('Team %s accepted user %s', team.pk, applicant_id)
        self.notifier.applicant_accepted(team, application.user)
        return application

    def reject_applicant(self, team_id, user, applicant_id):
        self._require_caller(user)
        team_id, applicant_id = self._parse_pair(team_id, applicant_id)

        with transaction.atomic():
            team = self._locked_team(team_id)
            self._require_creator(team, user)
            application = self._pending_application(team, applicant_id, 'Applicant not found')
            self._move_pending(application, status=TeamMembership.REJECTED, rejected_at=timezone.now())

        logger.info('Team %s rejected user %s', team.pk, applicant_id)
        self.notifier.applicant_rejected(team, application.user)
        return application

    def withdraw_application(self, team_id, user, applicant_id):
        self._require_caller(user)
        team_id, applicant_id = self._parse_pair(team_id, applicant_id)

        if user.pk != applicant_id:
            raise PermissionDenied('Can only withdraw your own application')

        with transaction.atomic():
            team = self._locked_team(team_id)
            deleted, _ = TeamMembership.objects.filter(
                team=team, user_id=applicant_id, status=TeamMembership.APPLIED
            ).delete()
            if not deleted:
                raise NotFound('Application not found')

        logger.info('User %s withdrew from team %s', applicant_id, team.pk)

    def toggle_recruiting(self, team_id, user, desired=None):
        """Set ``is_open`` to ``desired`` when it is a bool, otherwise flip it."""
        self._require_caller(user)
        team_id = parse_id(team_id, 'Invalid teamId')

        with transaction.atomic():
            team = self._locked_team(team_id)
            self._require_creator(team, user)
            is_open = desired if isinstance(desired, bool) else not team.is_open
            Team.objects.filter(pk=team.pk).update(is_open=is_open, updated_at=timezone.now())
            team.is_open = is_open

        logger.info('Team %s recruiting set to %s', team.pk, is_open)
        return team

    # Reads

    def get_team(self, team_id):
        team = team_queryset().filter(pk=parse_id(team_id, 'Invalid teamId')).first()
        if team is None:
            raise NotFound('Team not found')
        return team

    def list_created(self, user):
        self._require_caller(user)
        return team_queryset().filter(creator=user)

    def list_available(self, user=None, domain=None):
        """Open teams, minus those the caller created, applied to, joined or was rejected from."""
        teams = team_queryset().filter(is_open=True)
        if domain is not None:
            teams = AvailableTeamFilter({'domain': str(domain)}, queryset=teams).qs
        if user is not None and user.is_authenticated:
            teams = teams.exclude(creator=user).exclude(memberships__user=user)
        return teams

    def list_applied(self, user):
        self._require_caller(user)
        return team_queryset().filter(memberships__user=user).distinct()
