# teamup/teams/views.py
from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView
from drf_yasg.utils import swagger_auto_schema
from drf_yasg import openapi

from .serializers import (
    ApplicationLinksSerializer,
    RecruitingStatusSerializer,
    TeamCreateSerializer,
    TeamSerializer,
)
from .services import TeamService


team_list_response = openapi.Response(
    description="Teams, newest first",
    schema=openapi.Schema(
        type=openapi.TYPE_OBJECT,
        properties={
            "success": openapi.Schema(type=openapi.TYPE_BOOLEAN),
            "teams": openapi.Schema(type=openapi.TYPE_ARRAY, items=openapi.Schema(type=openapi.TYPE_OBJECT)),
        },
    ),
)


class TeamServiceMixin:
    """Gives each view a ``TeamService`` wired with the configured notifier."""
    service_class = TeamService

    def get_service(self):
        return self.service_class()

    def team_list(self, teams):
        return Response({"success": True, "teams": TeamSerializer(teams, many=True).data})


class TeamCreateView(TeamServiceMixin, APIView):
    @swagger_auto_schema(
        operation_summary="Create a team",
        request_body=TeamCreateSerializer,
        responses={201: TeamSerializer, 400: "Name and domain required", 401: "Unauthorized"},
    )
    def post(self, request):
        team = self.get_service().create_team(request.user, request.data)
        return Response(
            {"success": True, "team": TeamSerializer(team).data},
            status=status.HTTP_201_CREATED
        )


class CreatedTeamsView(TeamServiceMixin, APIView):
    @swagger_auto_schema(operation_summary="Teams created by the caller", responses={200: team_list_response})
    def get(self, request):
        return self.team_list(self.get_service().list_created(request.user))


class AvailableTeamsView(TeamServiceMixin, APIView):
    permission_classes = [permissions.AllowAny]

    @swagger_auto_schema(
        operation_summary="Open teams",
        operation_description=(
            "Open teams, optionally filtered by domain. Logged-in callers do not see "
            "teams they created, applied to, joined or were rejected from."
        ),
        manual_parameters=[
            openapi.Parameter('domain', openapi.IN_QUERY, description="Exact domain filter", type=openapi.TYPE_STRING),
        ],
        responses={200: team_list_response},
    )
    def get(self, request):
        teams = self.get_service().list_available(request.user, request.query_params.get('domain'))
        return self.team_list(teams)


class AppliedTeamsView(TeamServiceMixin, APIView):
    @swagger_auto_schema(
        operation_summary="Teams the caller applied to, joined or was rejected from",
        responses={200: team_list_response},
    )
    def get(self, request):
        return self.team_list(self.get_service().list_applied(request.user))


class TeamDetailView(TeamServiceMixin, APIView):
    @swagger_auto_schema(
        operation_summary="Team detail",
        responses={200: TeamSerializer, 400: "Invalid teamId", 404: "Team not found"},
    )
    def get(self, request, team_id):
        team = self.get_service().get_team(team_id)
        return Response({"success": True, "team": TeamSerializer(team).data})


class ApplyToTeamView(TeamServiceMixin, APIView):
    @swagger_auto_schema(
        operation_summary="Apply to a team",
        request_body=ApplicationLinksSerializer,
        responses={200: "Applied successfully", 400: "Invalid input or conflict", 404: "Team not found"},
    )
    def post(self, request, team_id):
        self.get_service().apply(team_id, request.user, request.data)
        return Response({"success": True, "message": "Applied successfully"})


class AcceptApplicantView(TeamServiceMixin, APIView):
    @swagger_auto_schema(
        operation_summary="Accept an applicant (creator only)",
        responses={200: "Applicant accepted", 400: "Team is already full", 403: "Forbidden", 404: "Applicant not found"},
    )
    def post(self, request, team_id, applicant_id):
        self.get_service().accept_applicant(team_id, request.user, applicant_id)
        return Response({"success": True, "message": "Applicant accepted"})


class RejectApplicantView(TeamServiceMixin, APIView):
    @swagger_auto_schema(
        operation_summary="Reject an applicant (creator only)",
        responses={200: "Applicant rejected", 403: "Forbidden", 404: "Applicant not found"},
    )
    def post(self, request, team_id, applicant_id):
        self.get_service().reject_applicant(team_id, request.user, applicant_id)
        return Response({"success": True, "message": "Applicant rejected"})


class WithdrawApplicationView(TeamServiceMixin, APIView):
    @swagger_auto_schema(
        operation_summary="Withdraw your own pending application",
        responses={200: "Application withdrawn", 403: "Forbidden", 404: "Application not found"},
    )
    def post(self, request, team_id, applicant_id):
        self.get_service().withdraw_application(team_id, request.user, applicant_id)
        return Response({"success": True, "message": "Application withdrawn"})


class ToggleRecruitingView(TeamServiceMixin, APIView):
    @swagger_auto_schema(
        operation_summary="Open or close recruiting (creator only)",
        operation_description="Sets `isOpen` when a boolean is given, otherwise flips the current value.",
        request_body=openapi.Schema(
            type=openapi.TYPE_OBJECT,
            properties={"isOpen": openapi.Schema(type=openapi.TYPE_BOOLEAN)},
        ),
        responses={200: RecruitingStatusSerializer, 403: "Forbidden", 404: "Team not found"},
    )
    def patch(self, request, team_id):
        desired = request.data.get('isOpen') if hasattr(request.data, 'get') else None
        team = self.get_service().toggle_recruiting(team_id, request.user, desired)
        return Response({
            "success": True,
            "message": "Recruiting opened" if team.is_open else "Recruiting stopped",
            "team": RecruitingStatusSerializer(team).data,
        })
