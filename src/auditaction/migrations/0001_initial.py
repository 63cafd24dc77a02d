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
            name="AuditLog",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "category",
                    models.CharField(
                        choices=[
                            ("SEAL", "Seal"),
                            ("APPLICATION", "Application"),
                            ("USER", "User"),
                            ("AUTH", "Authentication"),
                            ("SYSTEM", "System"),
                        ],
                        default="SYSTEM",
                        max_length=32,
                    ),
                ),
                (
                    "action",
                    models.CharField(
                        choices=[
                            ("AUTH_LOGIN_FAILED", "Login Failed"),
                            ("USER_CREATED", "Création Utilisateur"),
                            ("USER_ROLE_CHANGED", "Rôle utilisateur modifié"),
                            ("USER_STATUS_CHANGED", "Statut utilisateur modifié"),
                            ("SEAL_CREATED", "Sceau créé"),
                            ("SEAL_UPDATED", "Sceau mis à jour"),
                            ("SEAL_STATUS_CHANGED", "Statut du sceau modifié"),
                            ("SEAL_DELETED", "Sceau supprimé"),
                            ("APPLICATION_SUBMITTED", "Demande soumise"),
                            ("APPLICATION_UPDATED", "Demande modifiée"),
                            ("APPLICATION_APPROVED", "Demande approuvée"),
                            ("APPLICATION_REJECTED", "Demande rejetée"),
                            ("APPLICATION_WITHDRAWN", "Demande retirée"),
                            ("EMAIL_QUEUED", "Email queued for delivery"),
                            ("EMAIL_SEND_FAILED", "Email delivery failed"),
                        ],
                        db_index=True,
                        max_length=50,
                    ),
                ),
                (
                    "target_type",
                    models.CharField(
                        blank=True,
                        help_text="Type de ressource: 'seal', 'application', 'user'",
                        max_length=50,
                        null=True,
                    ),
                ),
                (
                    "target_id",
                    models.CharField(blank=True, help_text="ID de la ressource affectée", max_length=255, null=True),
                ),
                ("details", models.JSONField(blank=True, default=dict)),
                (
                    "severity",
                    models.CharField(
                        choices=[("INFO", "Info"), ("WARNING", "Warning"), ("ERROR", "Error"), ("CRITICAL", "Critical")],
                        default="INFO",
                        max_length=16,
                    ),
                ),
                ("ip_address", models.GenericIPAddressField(blank=True, null=True)),
                ("user_agent", models.TextField(blank=True)),
                ("request_id", models.CharField(blank=True, max_length=64)),
                (
                    "user",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="audit_actions",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "db_table": "audit_logs",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["category", "-created_at"], name="audit_category_created_idx"),
                    models.Index(fields=["user"], name="audit_user_idx"),
                    models.Index(fields=["target_type", "target_id"], name="audit_target_idx"),
                ],
            },
        ),
    ]
