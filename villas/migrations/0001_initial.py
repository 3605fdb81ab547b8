import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Villa",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=200, verbose_name="Nombre")),
                ("slug", models.SlugField(max_length=200, unique=True, verbose_name="Slug")),
                ("price_min", models.PositiveIntegerField(blank=True, null=True, verbose_name="Precio mínimo por noche")),
                ("availability_ical_url", models.CharField(blank=True, default="", max_length=500, verbose_name="Calendario iCal")),
                ("manual_blocked_periods", models.JSONField(blank=True, default=list, verbose_name="Bloqueos manuales")),
                ("pricing_calendars", models.JSONField(blank=True, default=list, verbose_name="Calendarios de tarifas")),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "owner",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="villas",
                        to=settings.AUTH_USER_MODEL,
                        verbose_name="Propietario",
                    ),
                ),
            ],
            options={
                "verbose_name": "Villa",
                "verbose_name_plural": "Villas",
                "ordering": ["name"],
            },
        ),
    ]
