import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("customers", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Visit",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("tenant_id", models.UUIDField(db_index=True)),
                (
                    "visit_type",
                    models.CharField(
                        choices=[("scheduled", "Scheduled"), ("ad_hoc", "Ad hoc"), ("phone_call", "Phone call")],
                        default="scheduled",
                        max_length=16,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("planned", "Planned"),
                            ("in_progress", "In Progress"),
                            ("completed", "Completed"),
                            ("cancelled", "Cancelled"),
                            ("missed", "Missed"),
                        ],
                        db_index=True,
                        default="planned",
                        max_length=16,
                    ),
                ),
                (
                    "outcome",
                    models.CharField(
                        blank=True,
                        choices=[
                            ("order_placed", "Order placed"),
                            ("no_order", "No order"),
                            ("follow_up", "Follow up"),
                            ("not_available", "Not available"),
                        ],
                        max_length=16,
                        null=True,
                    ),
                ),
                ("planned_date", models.DateField(db_index=True)),
                ("planned_time", models.TimeField(blank=True, null=True)),
                ("started_at", models.DateTimeField(blank=True, null=True)),
                ("completed_at", models.DateTimeField(blank=True, null=True)),
                ("start_latitude", models.DecimalField(blank=True, decimal_places=8, max_digits=10, null=True)),
                ("start_longitude", models.DecimalField(blank=True, decimal_places=8, max_digits=11, null=True)),
                ("end_latitude", models.DecimalField(blank=True, decimal_places=8, max_digits=10, null=True)),
                ("end_longitude", models.DecimalField(blank=True, decimal_places=8, max_digits=11, null=True)),
                ("notes", models.TextField(blank=True, null=True)),
                ("tags", models.JSONField(blank=True, default=list)),
                ("outcome_notes", models.TextField(blank=True, null=True)),
                ("photos", models.JSONField(blank=True, default=list)),
                ("no_order_reason", models.TextField(blank=True, null=True)),
                ("follow_up_reason", models.TextField(blank=True, null=True)),
                ("follow_up_date", models.DateField(blank=True, db_index=True, null=True)),
                ("follow_up_time", models.TimeField(blank=True, null=True)),
                ("cancel_reason", models.TextField(blank=True, null=True)),
                ("order_id", models.UUIDField(blank=True, null=True)),
                (
                    "customer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="visits",
                        to="customers.customer",
                    ),
                ),
                (
                    "sales_rep",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="sales_visits",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "visits_visit",
                "indexes": [
                    models.Index(fields=["tenant_id", "planned_date"], name="visit_tenant_date_idx"),
                    models.Index(fields=["tenant_id", "sales_rep", "planned_date"], name="visit_tenant_rep_date_idx"),
                    models.Index(fields=["tenant_id", "status", "planned_date"], name="visit_tenant_status_idx"),
                    models.Index(fields=["tenant_id", "outcome", "follow_up_date"], name="visit_tenant_followup_idx"),
                ],
            },
        ),
    ]
