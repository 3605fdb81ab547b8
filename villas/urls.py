from django.urls import path, re_path
from .views import (
    BlockedRangesPreviewView,
    ManualBlockCreateView,
    PricingYearView,
    VillaAvailabilityView,
    VillaCalendarFeedView,
    VillaQuoteView,
)

urlpatterns = [
    # slug vacío incluido para poder responder 400 en lugar de 404
    re_path(r"^villas/(?P<slug>[^/]*)/calendar\.ics$", VillaCalendarFeedView.as_view(), name="villa_calendar_ics"),
    path("villas/<slug:slug>/availability.json", VillaAvailabilityView.as_view(), name="villa_availability"),
    path("villas/<slug:slug>/quote", VillaQuoteView.as_view(), name="villa_quote"),
    path("villas/<slug:slug>/manual-blocks/", ManualBlockCreateView.as_view(), name="villa_manual_blocks"),
    path("villas/<slug:slug>/pricing/<int:year>/", PricingYearView.as_view(), name="villa_pricing_year"),
    path("ical/blocked-ranges", BlockedRangesPreviewView.as_view(), name="ical_blocked_ranges"),
]
