from django.apps import AppConfig


class InfrastructureConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'tiagodelivery.infrastructure'
    label = 'infrastructure' # Label curto, usado em AUTH_USER_MODEL
    verbose_name = 'Contas e Integrações'
