from django import forms
from django.core.exceptions import ValidationError

from villas.blocks import COMMENT_MAX_LENGTH
from villas.pricing import LABEL_MAX_LENGTH

DATE_FORMATS = ["%Y-%m-%d"]

# Las claves JSON del almacén ("from", "to", ...) frente a los nombres de campo
FIELD_ALIASES = {
    "start": "from",
    "end": "to",
    "nightly_price": "nightlyPrice",
    "default_nightly_price": "defaultNightlyPrice",
}


def form_data(payload, form_class):
    """Traduce un dict con claves del almacén a los nombres de campo del form."""
    payload = payload if isinstance(payload, dict) else {}
    data = {}
    for name in form_class.base_fields:
        value = payload.get(FIELD_ALIASES.get(name, name))
        if value is not None:
            data[name] = value
    return data


def form_errors(form, prefix=""):
    """Errores del form con las claves del almacén: {campo: [{message, code}]}."""
    out = {}
    for name, errors in form.errors.get_json_data().items():
        out[prefix + FIELD_ALIASES.get(name, name)] = errors
    return out


class DateRangeFormMixin:

    def clean_range(self, cleaned):
        start = cleaned.get("start")
        end = cleaned.get("end")
        if not start or not end:
            return None, None
        if start > end:
            raise ValidationError("La fecha de fin no puede ser anterior a la de inicio.", code="invalid_range")
        return start, end


class ManualBlockForm(DateRangeFormMixin, forms.Form):
    start = forms.DateField(label="Desde", input_formats=DATE_FORMATS)
    end = forms.DateField(label="Hasta", input_formats=DATE_FORMATS)
    comment = forms.CharField(label="Comentario", max_length=COMMENT_MAX_LENGTH, strip=True)

    def clean(self):
        cleaned = super().clean()
        start, end = self.clean_range(cleaned)
        if start and start.year != end.year:
            raise ValidationError("Un bloqueo no puede abarcar dos años.", code="spans_years")
        return cleaned


class PricingYearForm(forms.Form):
    year = forms.IntegerField(label="Año", min_value=2000, max_value=2100)
    default_nightly_price = forms.IntegerField(label="Precio por noche", min_value=0)


class PricingOverrideForm(DateRangeFormMixin, forms.Form):
    start = forms.DateField(label="Desde", input_formats=DATE_FORMATS)
    end = forms.DateField(label="Hasta", input_formats=DATE_FORMATS)
    nightly_price = forms.IntegerField(label="Precio por noche", min_value=0)
    label = forms.CharField(label="Etiqueta", max_length=LABEL_MAX_LENGTH, required=False, strip=True)

    def __init__(self, *args, year, **kwargs):
        super().__init__(*args, **kwargs)
        self.year = year

    def clean(self):
        cleaned = super().clean()
        start, end = self.clean_range(cleaned)
        if start and (start.year != self.year or end.year != self.year):
            raise ValidationError(
                f"Las fechas deben estar dentro de {self.year}.", code="outside_year"
            )
        return cleaned


class QuoteForm(forms.Form):
    checkin = forms.DateField(label="Llegada", input_formats=DATE_FORMATS)
    checkout = forms.DateField(label="Salida", input_formats=DATE_FORMATS)

    def clean(self):
        cleaned = super().clean()
        checkin = cleaned.get("checkin")
        checkout = cleaned.get("checkout")
        if checkin and checkout and checkout <= checkin:
            raise ValidationError("La fecha de salida debe ser posterior a la de llegada", code="invalid_range")
        return cleaned
