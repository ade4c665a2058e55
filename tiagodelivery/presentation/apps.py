from django.apps import AppConfig


class PresentationConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'tiagodelivery.presentation'
    label = 'presentation' # Camada HTTP (API REST e Admin)
    verbose_name = 'API e Administração'
