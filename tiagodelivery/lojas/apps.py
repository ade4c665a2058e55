from django.apps import AppConfig


class LojasConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'tiagodelivery.lojas'
    label = 'lojas'
    verbose_name = 'Lojas e Produtos'
