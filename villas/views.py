import json
import logging

from django.conf import settings
from django.contrib.auth.mixins import LoginRequiredMixin
from django.core.exceptions import PermissionDenied, ValidationError
from django.http import HttpResponse, HttpResponseBadRequest, JsonResponse
from django.shortcuts import get_object_or_404
from django.utils import timezone
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import ensure_csrf_cookie

from villas.exceptions import FeedUrlError
from villas.forms import (
    ManualBlockForm,
    PricingOverrideForm,
    PricingYearForm,
    QuoteForm,
    form_data,
    form_errors,
)
from villas.models import Villa
from villas.pricing import PricingOverride
from villas.services import add_manual_block, save_pricing_year
from villas.utils.ical import fetch_blocked_ranges, validate_feed_url
from villas.utils.ics import generate

logger = logging.getLogger(__name__)

FEED_CACHE_CONTROL = "public, s-maxage=300, stale-while-revalidate=600"


def _json_body(request):
    try:
        return json.loads(request.body or b"{}")
    except (ValueError, UnicodeDecodeError):
        return None


def _editable_villa(request, slug):
    """La villa solo la edita su propietario (o el staff)."""
    if not request.user.is_authenticated:
        raise PermissionDenied
    villa = get_object_or_404(Villa, slug=slug)
    if not (request.user.is_staff or villa.owner_id == request.user.id):
        raise PermissionDenied
    return villa


def _validation_errors(exc):
    if hasattr(exc, "error_dict"):
        return {
            field: [{"message": e.message % (e.params or {}), "code": e.code} for e in errors]
            for field, errors in exc.error_dict.items()
        }
    return {"__all__": [{"message": e.message % (e.params or {}), "code": e.code} for e in exc.error_list]}


class VillaCalendarFeedView(View):
    """Feed ICS de disponibilidad (suscripción o descarga con ?download=1)."""

    def get(self, request, slug=""):
        if not slug:
            return HttpResponseBadRequest("Missing slug")

        villa = get_object_or_404(Villa, slug=slug)
        ics = generate(villa.slug, villa.get_blocked_intervals(), timezone.now())

        response = HttpResponse(ics, content_type="text/calendar; charset=utf-8")
        response["Cache-Control"] = FEED_CACHE_CONTROL
        if request.GET.get("download") == "1":
            response["Content-Disposition"] = f'attachment; filename="{villa.slug}.ics"'
        return response


class BlockedRangesPreviewView(View):
    """Vista previa en vivo de un feed iCal mientras el propietario edita."""

    def get(self, request):
        try:
            url = validate_feed_url(request.GET.get("url", ""), settings.ICAL_ALLOWED_HOSTS)
        except FeedUrlError as e:
            response = JsonResponse({"error": e.code, "detail": str(e)}, status=e.status_code)
        else:
            ranges = fetch_blocked_ranges(url, settings.ICAL_ALLOWED_HOSTS)
            response = JsonResponse({"ranges": [r.to_dict() for r in ranges]})
        response["Cache-Control"] = "no-store"
        return response


class VillaAvailabilityView(View):
    """Línea temporal combinada para el calendario de reservas."""

    # el editor carga esta vista antes de enviar bloqueos: deja la cookie CSRF
    @method_decorator(ensure_csrf_cookie)
    def get(self, request, slug):
        villa = get_object_or_404(Villa, slug=slug)
        intervals = villa.get_blocked_intervals()
        return JsonResponse({"intervals": [i.to_dict() for i in intervals]})


class VillaQuoteView(View):

    def get(self, request, slug):
        villa = get_object_or_404(Villa, slug=slug)
        form = QuoteForm(request.GET)
        if not form.is_valid():
            return JsonResponse({"errors": form_errors(form)}, status=400)

        checkin = form.cleaned_data["checkin"]
        checkout = form.cleaned_data["checkout"]
        quote = villa.quote_stay(checkin, checkout)
        return JsonResponse({
            "available": villa.is_available(checkin, checkout),
            "quote": quote.to_dict() if quote else None,
        })


class ManualBlockCreateView(LoginRequiredMixin, View):
    raise_exception = True

    def post(self, request, slug):
        villa = _editable_villa(request, slug)
        payload = _json_body(request)
        if payload is None:
            return JsonResponse({"error": "invalid_json"}, status=400)

        form = ManualBlockForm(form_data(payload, ManualBlockForm))
        if not form.is_valid():
            return JsonResponse({"errors": form_errors(form)}, status=400)

        cd = form.cleaned_data
        try:
            periods = add_manual_block(villa, cd["start"], cd["end"], cd["comment"])
        except ValidationError as e:
            return JsonResponse({"errors": _validation_errors(e)}, status=400)

        return JsonResponse({"manualBlockedPeriods": [p.to_dict() for p in periods]}, status=201)


class PricingYearView(View):
    """Lectura pública de las tarifas de un año y edición por el propietario."""

    @method_decorator(ensure_csrf_cookie)
    def get(self, request, slug, year):
        villa = get_object_or_404(Villa, slug=slug)
        calendar = next((c for c in villa.calendar_config().pricing_years if c.year == year), None)
        if calendar is None:
            return JsonResponse({"error": "not_found"}, status=404)
        return JsonResponse({"pricing": calendar.to_dict(), "bounds": calendar.bounds().to_dict()})

    def put(self, request, slug, year):
        villa = _editable_villa(request, slug)
        payload = _json_body(request)
        if payload is None or not isinstance(payload, dict):
            return JsonResponse({"error": "invalid_json"}, status=400)

        year_form = PricingYearForm(dict(form_data(payload, PricingYearForm), year=year))
        errors = {} if year_form.is_valid() else form_errors(year_form)

        raw_overrides = payload.get("overrides") or []
        if not isinstance(raw_overrides, list):
            errors["overrides"] = [{"message": "Se esperaba una lista.", "code": "invalid"}]
            raw_overrides = []

        overrides = []
        for i, raw in enumerate(raw_overrides):
            form = PricingOverrideForm(form_data(raw, PricingOverrideForm), year=year)
            if not form.is_valid():
                errors.update(form_errors(form, prefix=f"overrides.{i}."))
                continue
            cd = form.cleaned_data
            overrides.append(PricingOverride(cd["start"], cd["end"], cd["nightly_price"], cd["label"]))

        if errors:
            return JsonResponse({"errors": errors}, status=400)

        pricing_year = save_pricing_year(
            villa, year, year_form.cleaned_data["default_nightly_price"], overrides
        )
        return JsonResponse({"pricing": pricing_year.to_dict(), "bounds": pricing_year.bounds().to_dict()})
