from django.contrib import admin

from .models import Feedback


@admin.register(Feedback)
class FeedbackAdmin(admin.ModelAdmin):
    list_display = ('id', 'spa', 'customer', 'rating', 'created_at')
    list_filter = ('rating',)
    search_fields = ('spa__name', 'customer__email', 'comment')
