from django.apps import AppConfig


class RetailConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'retail'
    verbose_name = 'Retail ledger'
