from django.db import models
from src.common.models import BaseModel


class AuditCategory(models.TextChoices):
    SEAL = "SEAL", "Seal"
    APPLICATION = "APPLICATION", "Application"
    USER = "USER", "User"
    AUTH = "AUTH", "Authentication"
    SYSTEM = "SYSTEM", "System"


class Severity(models.TextChoices):
    INFO = "INFO", "Info"
    WARNING = "WARNING", "Warning"
    ERROR = "ERROR", "Error"
    CRITICAL = "CRITICAL", "Critical"


class AuditAction(models.TextChoices):
    AUTH_LOGIN_FAILED = "AUTH_LOGIN_FAILED", "Login Failed"

    # Utilisateurs
    USER_CREATED = "USER_CREATED", "Création Utilisateur"
    USER_ROLE_CHANGED = "USER_ROLE_CHANGED", "Rôle utilisateur modifié"
    USER_STATUS_CHANGED = "USER_STATUS_CHANGED", "Statut utilisateur modifié"

    # Sceaux
    SEAL_CREATED = "SEAL_CREATED", "Sceau créé"
    SEAL_UPDATED = "SEAL_UPDATED", "Sceau mis à jour"
    SEAL_STATUS_CHANGED = "SEAL_STATUS_CHANGED", "Statut du sceau modifié"
    SEAL_DELETED = "SEAL_DELETED", "Sceau supprimé"

    # Demandes
    APPLICATION_SUBMITTED = "APPLICATION_SUBMITTED", "Demande soumise"
    APPLICATION_UPDATED = "APPLICATION_UPDATED", "Demande modifiée"
    APPLICATION_APPROVED = "APPLICATION_APPROVED", "Demande approuvée"
    APPLICATION_REJECTED = "APPLICATION_REJECTED", "Demande rejetée"
    APPLICATION_WITHDRAWN = "APPLICATION_WITHDRAWN", "Demande retirée"

    # Email services
    EMAIL_QUEUED = "EMAIL_QUEUED", "Email queued for delivery"
    EMAIL_SEND_FAILED = "EMAIL_SEND_FAILED", "Email delivery failed"


class AuditLog(BaseModel):
    """
    Journal d'audit pour tracer toutes les actions importantes
    """

    # Acteur
    user = models.ForeignKey(
        "users.User",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="audit_actions",
    )
    # Quoi
    category = models.CharField(
        max_length=32, choices=AuditCategory.choices, default=AuditCategory.SYSTEM
    )
    action = models.CharField(max_length=50, choices=AuditAction.choices, db_index=True)

    # Cible optionnelle
    target_type = models.CharField(
        max_length=50,
        blank=True,
        null=True,
        help_text="Type de ressource: 'seal', 'application', 'user'",
    )
    target_id = models.CharField(
        max_length=255, blank=True, null=True, help_text="ID de la ressource affectée"
    )

    details = models.JSONField(default=dict, blank=True)
    severity = models.CharField(
        max_length=16, choices=Severity.choices, default=Severity.INFO
    )

    # Métadonnées de la requête
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    user_agent = models.TextField(blank=True)
    request_id = models.CharField(max_length=64, blank=True)

    class Meta:
        db_table = "audit_logs"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["category", "-created_at"], name="audit_category_created_idx"),
            models.Index(fields=["user"], name="audit_user_idx"),
            models.Index(fields=["target_type", "target_id"], name="audit_target_idx"),
        ]

    def __str__(self) -> str:
        actor = self.user.username if self.user else "system"
        target = f"{self.target_type}:{self.target_id}" if self.target_type else ""
        return f"[{self.category}] {self.action} by {actor} {target}"
