import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="FacilityType",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=100, unique=True, verbose_name="Name")),
                ("description", models.TextField(blank=True, verbose_name="Description")),
            ],
            options={
                "verbose_name": "Facility type",
                "verbose_name_plural": "Facility types",
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Facility",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=255, verbose_name="Name")),
                (
                    "facility_type",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="facilities",
                        to="facilities.facilitytype",
                        verbose_name="Type",
                    ),
                ),
                ("location", models.CharField(blank=True, max_length=255, verbose_name="Location")),
                (
                    "capacity",
                    models.PositiveIntegerField(
                        blank=True,
                        help_text="Maximum number of attendees. Empty means unknown or unbounded.",
                        null=True,
                        verbose_name="Capacity",
                    ),
                ),
                ("description", models.TextField(blank=True, verbose_name="Description")),
                ("is_active", models.BooleanField(default=True, verbose_name="Active")),
                ("maintenance_until", models.DateTimeField(blank=True, null=True, verbose_name="Under maintenance until")),
                ("maintenance_reason", models.TextField(blank=True, null=True, verbose_name="Maintenance reason")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Facility",
                "verbose_name_plural": "Facilities",
                "ordering": ["name", "id"],
                "indexes": [
                    models.Index(fields=["is_active"], name="facility_active_idx"),
                ],
            },
        ),
    ]
