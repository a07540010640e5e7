from django.contrib import admin
from .models import DomainActivity

@admin.register(DomainActivity)
class DomainActivityAdmin(admin.ModelAdmin):
    list_display = ('verb', 'actor', 'hackathon_id', 'content_type', 'object_id', 'timestamp')
    list_filter = ('verb', 'hackathon_id', 'timestamp')
    search_fields = ('verb', 'actor__username', 'hackathon_id')
    readonly_fields = ('actor', 'verb', 'content_type', 'object_id', 'hackathon_id', 'metadata', 'timestamp')
