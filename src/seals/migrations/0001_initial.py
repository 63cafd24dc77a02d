import uuid

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
            name="Seal",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("name", models.CharField(db_index=True, max_length=100)),
                (
                    "type",
                    models.CharField(
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
                    "shape",
                    models.CharField(
                        choices=[("ROUND", "Round"), ("SQUARE", "Square"), ("OVAL", "Oval")],
                        default="ROUND",
                        max_length=20,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("IN_USE", "In use"),
                            ("DESTROYED", "Destroyed"),
                            ("LOST", "Lost"),
                            ("SUSPENDED", "Suspended"),
                        ],
                        db_index=True,
                        default="IN_USE",
                        max_length=20,
                    ),
                ),
                ("owner_department", models.CharField(blank=True, max_length=100)),
                ("keeper_department", models.CharField(blank=True, max_length=100)),
                ("keeper_phone", models.CharField(blank=True, max_length=20)),
                ("description", models.TextField(blank=True)),
                ("location", models.CharField(blank=True, max_length=200)),
                (
                    "keeper",
                    models.ForeignKey(
                        help_text="Custodian whose approval is required to use the seal",
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="kept_seals",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Seal",
                "verbose_name_plural": "Seals",
                "db_table": "seals",
                "indexes": [models.Index(fields=["type", "status"], name="seal_type_status_idx")],
            },
        ),
    ]
