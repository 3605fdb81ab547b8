from django.contrib import admin, messages
from django.urls import path, reverse
from django.shortcuts import get_object_or_404, redirect
from django.core.cache import cache

from .models import Villa
from .exceptions import FeedUrlError
from .services import feed_cache_key
from .utils.ical import validate_feed_url


@admin.register(Villa)
class VillaAdmin(admin.ModelAdmin):
    list_display = ("name", "slug", "owner", "price_min", "availability_ical_url", "updated_at")
    search_fields = ("name", "slug")
    prepopulated_fields = {"slug": ("name",)}
    readonly_fields = ("updated_at",)

    def get_urls(self):
        urls = super().get_urls()
        my = [
            path(
                "<int:pk>/refresh-ical/",
                self.admin_site.admin_view(self.refresh_ical_view),
                name="villas_villa_refresh_ical",
            ),
        ]
        return my + urls

    def refresh_ical_view(self, request, pk):
        """Invalida la caché del feed y lo vuelve a leer."""
        villa = get_object_or_404(Villa, pk=pk)
        change_url = reverse("admin:villas_villa_change", args=[pk])

        if not villa.availability_ical_url:
            messages.warning(request, "Esta villa no tiene calendario iCal configurado.")
            return redirect(change_url)

        try:
            cache.delete(feed_cache_key(validate_feed_url(villa.availability_ical_url)))
        except FeedUrlError as e:
            messages.error(request, f"URL iCal no válida: {e}")
            return redirect(change_url)

        ranges = villa.get_ical_ranges()
        messages.success(request, f"Calendario sincronizado: {len(ranges)} rangos ocupados.")
        return redirect(change_url)
