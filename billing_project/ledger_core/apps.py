from django.apps import AppConfig


class LedgerCoreConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "ledger_core"
    verbose_name = "Billing ledger"

    # ensure receivers are registered
    def ready(self):
        import ledger_core.signals  # noqa: F401
