import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("seals", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Application",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("application_no", models.CharField(editable=False, max_length=32)),
                (
                    "kind",
                    models.CharField(
                        choices=[("USAGE", "Seal usage"), ("CREATION", "Seal creation")],
                        db_index=True,
                        max_length=16,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("PENDING", "Pending"),
                            ("APPROVED", "Approved"),
                            ("REJECTED", "Rejected"),
                            ("WITHDRAWN", "Withdrawn"),
                        ],
                        db_index=True,
                        default="PENDING",
                        max_length=16,
                    ),
                ),
                ("version", models.PositiveIntegerField(default=1)),
                ("applicant_department", models.CharField(max_length=100)),
                ("purpose", models.TextField()),
                ("apply_time", models.DateTimeField(db_index=True, editable=False)),
                ("expected_time", models.DateTimeField(blank=True, null=True)),
                ("approve_time", models.DateTimeField(blank=True, null=True)),
                ("approve_remark", models.TextField(blank=True, null=True)),
                ("withdrawn_at", models.DateTimeField(blank=True, null=True)),
                ("file_name", models.CharField(blank=True, max_length=200)),
                ("addressee", models.CharField(blank=True, max_length=200)),
                ("copies", models.PositiveIntegerField(default=1)),
                ("seal_name", models.CharField(blank=True, max_length=100)),
                (
                    "seal_type",
                    models.CharField(
                        blank=True,
                        choices=[
                            ("OFFICIAL", "Official seal"),
                            ("FINANCE", "Finance seal"),
                            ("CONTRACT", "Contract seal"),
                            ("LEGAL", "Legal seal"),
                            ("HR", "HR seal"),
                            ("PERSONAL", "Personal seal"),
                        ],
                        max_length=20,
                    ),
                ),
                (
                    "seal_shape",
                    models.CharField(
                        blank=True,
                        choices=[("ROUND", "Round"), ("SQUARE", "Square"), ("OVAL", "Oval")],
                        max_length=20,
                    ),
                ),
                ("owner_department", models.CharField(blank=True, max_length=100)),
                ("keeper_department", models.CharField(blank=True, max_length=100)),
                ("keeper_phone", models.CharField(blank=True, max_length=20)),
                (
                    "applicant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="applications",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "approver",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="decided_applications",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "seal",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="applications",
                        to="seals.seal",
                    ),
                ),
                (
                    "proposed_keeper",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="proposed_seal_applications",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "seal_applications",
                "ordering": ["-apply_time"],
                "indexes": [
                    models.Index(fields=["kind", "status"], name="application_kind_status_idx"),
                    models.Index(fields=["applicant", "-apply_time"], name="application_applicant_idx"),
                    models.Index(fields=["seal", "status"], name="application_seal_status_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=("application_no",), name="application_no_unique"),
                    models.CheckConstraint(
                        check=models.Q(
                            models.Q(
                                ("approve_time__isnull", False),
                                ("approver__isnull", False),
                                ("status__in", ("APPROVED", "REJECTED")),
                            ),
                            models.Q(
                                ("approve_time__isnull", True),
                                ("approver__isnull", True),
                                ("status__in", ("PENDING", "WITHDRAWN")),
                            ),
                            _connector="OR",
                        ),
                        name="application_decision_fields_consistent",
                    ),
                    models.CheckConstraint(
                        check=models.Q(models.Q(("kind", "USAGE"), _negated=True), ("seal__isnull", False), _connector="OR"),
                        name="usage_application_requires_seal",
                    ),
                    models.CheckConstraint(check=models.Q(("copies__gte", 1)), name="application_copies_positive"),
                ],
            },
        ),
        migrations.CreateModel(
            name="ApplicationNumberCounter",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("prefix", models.CharField(max_length=4)),
                ("day", models.DateField()),
                ("last_value", models.PositiveIntegerField(default=0)),
            ],
            options={
                "db_table": "seal_application_counters",
                "constraints": [
                    models.UniqueConstraint(fields=("prefix", "day"), name="application_number_counter_unique"),
                ],
            },
        ),
    ]
