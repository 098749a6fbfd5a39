from django.apps import AppConfig


class RecordsConfig(AppConfig):
    """App config owning the process-wide :class:`RecordStore` handle.

    The store is only constructed here; opening it (the connectivity
    check) happens in :func:`records.startup.open_store`, which the
    WSGI/ASGI entry points call once Django is set up.
    """
    name = 'records'
    verbose_name = 'Emergency medical records'
    default_auto_field = 'django.db.models.BigAutoField'

    def ready(self) -> None:
        from django.conf import settings
        from .services.store import RecordStore

        self.store = RecordStore(using=getattr(settings, 'RECORDS_DB_ALIAS', 'default'))
