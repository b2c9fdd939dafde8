from django.contrib import admin

from campus_events.models import Event, Notification, Registration


class RegistrationInline(admin.TabularInline):
    model = Registration
    extra = 0
    fields = ["user_id", "created_at"]
    readonly_fields = ["user_id", "created_at"]
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(Event)
class EventAdmin(admin.ModelAdmin):
    list_display = ["title", "category", "campus_type", "start_at", "end_at", "capacity"]
    list_filter = ["category", "campus_type"]
    search_fields = ["title", "description", "location", "organizer"]
    ordering = ["-start_at"]
    inlines = [RegistrationInline]


@admin.register(Registration)
class RegistrationAdmin(admin.ModelAdmin):
    list_display = ["event", "user_id", "created_at"]
    list_filter = ["event"]
    search_fields = ["user_id", "event__title"]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ["recipient_id", "kind", "title", "is_read", "created_at"]
    list_filter = ["kind", "is_read"]
    search_fields = ["recipient_id", "title"]
