# teamup/teams/models.py
from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone


class Team(models.Model):
    name = models.CharField(max_length=100)
    creator = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='created_teams'
    )
    domain = models.CharField(max_length=100)
    description = models.TextField(blank=True, default='')
    max_members = models.PositiveIntegerField(default=2, validators=[MinValueValidator(1)])
    is_open = models.BooleanField(default=True)  # Recruiting
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at', '-id']

    def __str__(self):
        return self.name

    def _with_status(self, status):
        # Filters in Python so prefetched memberships are reused
        return [m for m in self.memberships.all() if m.status == status]

    @property
    def members(self):
        joined = sorted(
            self._with_status(TeamMembership.MEMBER),
            key=lambda m: (m.joined_at or m.applied_at, m.pk)
        )
        return [m.user for m in joined]

    @property
    def applicants(self):
        return self._with_status(TeamMembership.APPLIED)

    @property
    def rejected_applicants(self):
        return self._with_status(TeamMembership.REJECTED)

    def member_count(self):
        return self.memberships.filter(status=TeamMembership.MEMBER).count()


class TeamMembership(models.Model):
    """
    A user's relation to a team: pending applicant, member or rejected applicant.

    One row per (team, user), so the database guarantees a user sits in at
    most one of those lists. Withdrawing deletes the pending row.
    """
    APPLIED = 'applied'
    MEMBER = 'member'
    REJECTED = 'rejected'
    STATUS_CHOICES = [
        (APPLIED, 'Applied'),
        (MEMBER, 'Member'),
        (REJECTED, 'Rejected'),
    ]

    team = models.ForeignKey(Team, on_delete=models.CASCADE, related_name='memberships')
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='team_memberships'
    )
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=APPLIED)
    linkedin = models.URLField(max_length=500)
    github = models.URLField(max_length=500)
    resume = models.URLField(max_length=500)
    applied_at = models.DateTimeField(default=timezone.now)
    joined_at = models.DateTimeField(null=True, blank=True)
    rejected_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        unique_together = ('team', 'user')
        ordering = ['applied_at', 'id']
        indexes = [
            models.Index(fields=['user', 'status'], name='membership_user_status_idx'),
        ]

    def __str__(self):
        return f"{self.user.email} {self.status} in {self.team}"
