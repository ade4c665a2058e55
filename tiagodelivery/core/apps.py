# tiagodelivery/core/apps.py

from django.apps import AppConfig

class CoreConfig(AppConfig):
    # O nome completo do path da aplicação
    name = 'tiagodelivery.core'
    # Label curto usado em referências e migrações
    label = 'core'
    verbose_name = 'Regras de Negócio (Core)'

    # Camada sem modelos: a persistência fica na Infraestrutura e nos apps de domínio.
    default_auto_field = 'django.db.models.BigAutoField'
