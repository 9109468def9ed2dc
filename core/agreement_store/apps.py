"""
Escrow Agreement Store - App Configuration
==========================================
Durable agreement records and landlord/tenant indexes.
"""

from django.apps import AppConfig


class AgreementStoreConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "core.agreement_store"
    label = "agreement_store"
    verbose_name = "Escrow Agreement Store"
