import logging

from django.conf import settings
from django.db import models

from villas.availability import ListingCalendarConfig, merge, is_stay_available
from villas.blocks import resolve_blocked_periods
from villas.pricing import nightly_price_for_date, quote_stay

logger = logging.getLogger(__name__)


class Villa(models.Model):
    name = models.CharField(verbose_name="Nombre", max_length=200)
    slug = models.SlugField(verbose_name="Slug", max_length=200, unique=True)
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="villas",
        verbose_name="Propietario",
    )
    price_min = models.PositiveIntegerField(verbose_name="Precio mínimo por noche", null=True, blank=True)
    # CharField y no URLField: los feeds webcal:// también se guardan
    availability_ical_url = models.CharField(verbose_name="Calendario iCal", max_length=500, blank=True, default="")
    manual_blocked_periods = models.JSONField(verbose_name="Bloqueos manuales", default=list, blank=True)
    pricing_calendars = models.JSONField(verbose_name="Calendarios de tarifas", default=list, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    def calendar_config(self):
        return ListingCalendarConfig.from_record({
            "availabilityIcalUrl": self.availability_ical_url,
            "manualBlockedPeriods": self.manual_blocked_periods,
            "pricingCalendars": self.pricing_calendars,
        })

    def get_ical_ranges(self):
        """
        Rangos ocupados según el calendario externo.
        Si el feed falla o la URL guardada no es válida se devuelve [].
        """
        from villas.exceptions import FeedUrlError
        from villas.services import get_cached_ical_ranges

        if not self.availability_ical_url:
            return []

        try:
            return get_cached_ical_ranges(self.availability_ical_url)
        except FeedUrlError as e:
            logger.warning(f"[get_ical_ranges] URL iCal inválida en '{self.slug}': {e}")
            return []

    def get_blocked_intervals(self, ical_ranges=None):
        if ical_ranges is None:
            ical_ranges = self.get_ical_ranges()
        manual = resolve_blocked_periods(self.calendar_config().manual_blocked_periods)
        return merge(ical_ranges, manual)

    def is_available(self, checkin, checkout):
        return is_stay_available(self.get_blocked_intervals(), checkin, checkout)

    def nightly_price_for(self, day):
        return nightly_price_for_date(day, self.calendar_config().pricing_years, self.price_min)

    def quote_stay(self, checkin, checkout):
        return quote_stay(checkin, checkout, self.calendar_config().pricing_years, self.price_min)

    class Meta():
        verbose_name = "Villa"
        verbose_name_plural = "Villas"
        ordering = ["name"]

    def __str__(self):
        return self.name
