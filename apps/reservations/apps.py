from django.apps import AppConfig


class ReservationsConfig(AppConfig):
    name = 'apps.reservations'
    label = 'reservations'
    default_auto_field = 'django.db.models.BigAutoField'

    def ready(self):
        from apps.reservations.application.event_handlers import register_event_handlers
        from shared.application.message_bus import message_bus

        register_event_handlers(message_bus)
