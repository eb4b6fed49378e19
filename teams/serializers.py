# teamup/teams/serializers.py
from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import URLValidator
from rest_framework import serializers
from .models import Team, TeamMembership

User = get_user_model()

LINK_FIELDS = ('linkedin', 'github', 'resume')
http_url = URLValidator(schemes=['http', 'https'])


class UserSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ['id', 'name', 'email']


class ApplicantSerializer(serializers.ModelSerializer):
    user = UserSummarySerializer(read_only=True)
    appliedAt = serializers.DateTimeField(source='applied_at', read_only=True)

    class Meta:
        model = TeamMembership
        fields = ['user', 'linkedin', 'github', 'resume', 'appliedAt']


class RejectedApplicantSerializer(ApplicantSerializer):
    rejectedAt = serializers.DateTimeField(source='rejected_at', read_only=True)

    class Meta(ApplicantSerializer.Meta):
        fields = ApplicantSerializer.Meta.fields + ['rejectedAt']


class TeamSerializer(serializers.ModelSerializer):
    creator = UserSummarySerializer(read_only=True)
    maxMembers = serializers.IntegerField(source='max_members', read_only=True)
    isOpen = serializers.BooleanField(source='is_open', read_only=True)
    members = serializers.SerializerMethodField()
    applicants = serializers.SerializerMethodField()
    rejectedApplicants = serializers.SerializerMethodField()
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = Team
        fields = [
            'id', 'name', 'creator', 'domain', 'description', 'maxMembers', 'isOpen',
            'members', 'applicants', 'rejectedApplicants', 'createdAt', 'updatedAt'
        ]

    def get_members(self, obj):
        return UserSummarySerializer(obj.members, many=True).data

    def get_applicants(self, obj):
        return ApplicantSerializer(obj.applicants, many=True).data

    def get_rejectedApplicants(self, obj):
        return RejectedApplicantSerializer(obj.rejected_applicants, many=True).data


class RecruitingStatusSerializer(serializers.ModelSerializer):
    isOpen = serializers.BooleanField(source='is_open', read_only=True)

    class Meta:
        model = Team
        fields = ['id', 'name', 'isOpen']


class TeamCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100, required=False, allow_blank=True)
    domain = serializers.CharField(max_length=100, required=False, allow_blank=True)
    description = serializers.CharField(required=False, allow_blank=True, default='')
    maxMembers = serializers.IntegerField(source='max_members', required=False, default=2, min_value=1)

    def validate(self, attrs):
        if not attrs.get('name') or not attrs.get('domain'):
            raise serializers.ValidationError('Name and domain required')
        return attrs


class ApplicationLinksSerializer(serializers.Serializer):
    """LinkedIn, GitHub and resume links; all required and must be http(s) URLs."""
    linkedin = serializers.CharField(max_length=500, required=False, allow_blank=True)
    github = serializers.CharField(max_length=500, required=False, allow_blank=True)
    resume = serializers.CharField(max_length=500, required=False, allow_blank=True)

    def validate(self, attrs):
        if not all(attrs.get(field) for field in LINK_FIELDS):
            raise serializers.ValidationError('LinkedIn, GitHub, and Resume links are required')

        errors = {}
        for field in LINK_FIELDS:
            try:
                http_url(attrs[field])
            except DjangoValidationError:
                errors[field] = 'Enter a valid http or https URL.'
        if errors:
            raise serializers.ValidationError(errors)
        return attrs
