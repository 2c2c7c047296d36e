from django.contrib import admin

from .models import ContentItem


@admin.register(ContentItem)
class ContentItemAdmin(admin.ModelAdmin):
    list_display = ('path', 'title', 'updated_at')
    search_fields = ('path', 'title', 'body')
