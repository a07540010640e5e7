from django.contrib import admin

from .models import Invite, JoinRequest, ParticipantRecord, PoolEntry, Submission, Team, TeamMember


class TeamMemberInline(admin.TabularInline):
    model = TeamMember
    extra = 0
    readonly_fields = ('user', 'hackathon_id', 'joined_at')
    can_delete = False


@admin.register(Team)
class TeamAdmin(admin.ModelAdmin):
    list_display = ('id', 'hackathon_id', 'name', 'member_count', 'wins', 'created_by', 'created_at')
    list_filter = ('hackathon_id',)
    search_fields = ('name', 'created_by__username', 'members__user__username')
    # Membership changes go through the service layer (counter + lockout rules)
    readonly_fields = ('member_count', 'created_by', 'created_at', 'updated_at')
    inlines = [TeamMemberInline]


@admin.register(PoolEntry)
class PoolEntryAdmin(admin.ModelAdmin):
    list_display = ('user', 'hackathon_id', 'joined_at')
    list_filter = ('hackathon_id',)
    search_fields = ('user__username',)


@admin.register(Invite)
class InviteAdmin(admin.ModelAdmin):
    list_display = ('id', 'from_user', 'to_user', 'team', 'hackathon_id', 'status', 'created_at', 'expires_at')
    list_filter = ('status', 'hackathon_id')
    search_fields = ('from_user__username', 'to_user__username')


@admin.register(JoinRequest)
class JoinRequestAdmin(admin.ModelAdmin):
    list_display = ('id', 'from_user', 'team', 'hackathon_id', 'status', 'created_at', 'responded_by')
    list_filter = ('status', 'hackathon_id')
    search_fields = ('from_user__username',)


@admin.register(Submission)
class SubmissionAdmin(admin.ModelAdmin):
    list_display = ('id', 'team', 'hackathon_id', 'repo_url', 'submitted_at', 'disqualified', 'disqualified_reason')
    list_filter = ('hackathon_id', 'disqualified')
    search_fields = ('repo_url',)
    readonly_fields = ('registered_at', 'updated_at', 'submitted_at', 'cutoff_at', 'disqualified_at')


@admin.register(ParticipantRecord)
class ParticipantRecordAdmin(admin.ModelAdmin):
    list_display = ('user', 'locked_until_period_id', 'locked_at', 'lock_reason')
    search_fields = ('user__username',)
