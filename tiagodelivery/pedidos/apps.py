from django.apps import AppConfig

class PedidosConfig(AppConfig):
    # O caminho completo para o módulo
    name = 'tiagodelivery.pedidos'
    label = 'pedidos'
    verbose_name = 'Pedidos de Entrega'
    default_auto_field = 'django.db.models.BigAutoField'
