# teamup/teams/urls.py
from django.urls import path
from .views import (
    AcceptApplicantView,
    AppliedTeamsView,
    ApplyToTeamView,
    AvailableTeamsView,
    CreatedTeamsView,
    RejectApplicantView,
    TeamCreateView,
    TeamDetailView,
    ToggleRecruitingView,
    WithdrawApplicationView,
)

# Ids are taken as strings so malformed ones reach the view and get a 400
urlpatterns = [
    # Team listings
    path('team', TeamCreateView.as_view(), name='team-create'),
    path('team/created', CreatedTeamsView.as_view(), name='team-created'),
    path('team/available', AvailableTeamsView.as_view(), name='team-available'),
    path('team/applied', AppliedTeamsView.as_view(), name='team-applied'),
    path('team/<str:team_id>', TeamDetailView.as_view(), name='team-detail'),

    # Applicant lifecycle
    path('team/<str:team_id>/apply', ApplyToTeamView.as_view(), name='team-apply'),
    path('team/<str:team_id>/applicants/<str:applicant_id>/accept', AcceptApplicantView.as_view(), name='applicant-accept'),
    path('team/<str:team_id>/applicants/<str:applicant_id>/reject', RejectApplicantView.as_view(), name='applicant-reject'),
    path('team/<str:team_id>/applicants/<str:applicant_id>/withdraw', WithdrawApplicationView.as_view(), name='applicant-withdraw'),
    path('team/<str:team_id>/recruiting', ToggleRecruitingView.as_view(), name='team-recruiting'),
]
