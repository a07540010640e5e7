# hackathons/serializers.py
from rest_framework import serializers

from users.models import User

from .models import Invite, JoinRequest, PoolEntry, Submission, Team, TeamMember
from .periods import is_period_id
from .sanitizers import TEAM_NAME_MAX_LENGTH


class ParticipantSerializer(serializers.ModelSerializer):
    """Public card of a participant (pool lists, team rosters)."""
    discord_username = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ["id", "username", "profile_picture", "github_username", "discord_username"]

    def get_discord_username(self, obj):
        return obj.discord_username if obj.show_discord else None


class PoolEntrySerializer(serializers.ModelSerializer):
    user = ParticipantSerializer(read_only=True)

    class Meta:
        model = PoolEntry
        fields = ["id", "hackathon_id", "user", "joined_at"]


class TeamMemberSerializer(serializers.ModelSerializer):
    user = ParticipantSerializer(read_only=True)

    class Meta:
        model = TeamMember
        fields = ["user", "joined_at"]


class TeamSerializer(serializers.ModelSerializer):
    members = TeamMemberSerializer(many=True, read_only=True)
    member_ids = serializers.ListField(child=serializers.IntegerField(), read_only=True)
    display_name = serializers.CharField(read_only=True)
    state = serializers.CharField(read_only=True)
    open_slots = serializers.IntegerField(read_only=True)
    is_full = serializers.BooleanField(read_only=True)

    class Meta:
        model = Team
        fields = [
            "id", "hackathon_id", "name", "display_name", "logo_url", "wins",
            "member_ids", "members", "member_count", "open_slots", "is_full", "state",
            "created_by", "created_at",
        ]
        read_only_fields = fields


class TeamProfileSerializer(serializers.Serializer):
    name = serializers.CharField(
        max_length=TEAM_NAME_MAX_LENGTH, required=False, allow_blank=True, allow_null=True,
    )
    logo_url = serializers.URLField(
        max_length=1024, required=False, allow_blank=True, allow_null=True,
    )

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError("Provide name and/or logo_url.")
        return attrs


class InviteSerializer(serializers.ModelSerializer):
    from_user = ParticipantSerializer(read_only=True)
    to_user = ParticipantSerializer(read_only=True)

    class Meta:
        model = Invite
        fields = [
            "id", "hackathon_id", "team", "from_user", "to_user",
            "status", "created_at", "responded_at", "expires_at",
        ]
        read_only_fields = fields


class InviteCreateSerializer(serializers.Serializer):
    to_user_id = serializers.PrimaryKeyRelatedField(queryset=User.objects.filter(is_active=True))
    hackathon_id = serializers.CharField(required=False, allow_blank=True)

    def validate_hackathon_id(self, value):
        if value and not is_period_id(value):
            raise serializers.ValidationError("Invalid hackathon period.")
        return value


class JoinRequestSerializer(serializers.ModelSerializer):
    from_user = ParticipantSerializer(read_only=True)

    class Meta:
        model = JoinRequest
        fields = [
            "id", "hackathon_id", "team", "from_user",
            "status", "created_at", "responded_at", "responded_by",
        ]
        read_only_fields = fields


class JoinRequestCreateSerializer(serializers.Serializer):
    team_id = serializers.IntegerField(min_value=1)


class SubmissionSerializer(serializers.ModelSerializer):
    state = serializers.CharField(read_only=True)
    is_locked = serializers.BooleanField(read_only=True)

    class Meta:
        model = Submission
        fields = [
            "id", "hackathon_id", "team", "repo_url", "repo_created_at",
            "registered_by", "registered_at", "updated_at",
            "submitted_at", "cutoff_at",
            "disqualified", "disqualified_reason", "disqualified_at",
            "state", "is_locked",
        ]
        read_only_fields = fields


class RegisterSubmissionSerializer(serializers.Serializer):
    repo_url = serializers.URLField(max_length=500)
    hackathon_id = serializers.CharField(required=False, allow_blank=True)

    def validate_hackathon_id(self, value):
        if value and not is_period_id(value):
            raise serializers.ValidationError("Invalid hackathon period.")
        return value


class DisqualifySerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=255)
