"""
Define as rotas da API REST do Tiago Delivery.
Todas as rotas respondem JSON; a autenticação é por JWT (ou sessão do Admin).
"""
from django.urls import path
from . import views


urlpatterns = [
    # ====================================================================
    # 1. ROTAS DE LOJAS E PRODUTOS
    # ====================================================================
    path('stores', views.LojasAPIView.as_view(), name='api_lojas'),
    path('stores/<str:loja_id>/toggle', views.AlternarLojaAPIView.as_view(), name='api_alternar_loja'),
    path('products', views.ProdutosAPIView.as_view(), name='api_produtos'),
    path('products/<str:produto_id>', views.ProdutoDetalheAPIView.as_view(), name='api_produto_detalhe'),

    # ====================================================================
    # 2. ROTAS DE COMPRA (CARRINHO E PEDIDOS)
    # ====================================================================
    path('cart', views.CarrinhoAPIView.as_view(), name='api_carrinho'),
    path('cart/<str:item_id>', views.ItemCarrinhoAPIView.as_view(), name='api_item_carrinho'),
    path('orders', views.PedidosAPIView.as_view(), name='api_pedidos'),
    path('orders/<str:pedido_id>', views.PedidoDetalheAPIView.as_view(), name='api_pedido_detalhe'),

    # ====================================================================
    # 3. ROTAS DE CONTA (PERFIL, ENDEREÇOS E CEP)
    # ====================================================================
    path('profile', views.PerfilAPIView.as_view(), name='api_perfil'),
    path('addresses', views.EnderecosAPIView.as_view(), name='api_enderecos'),
    path('cep/<str:cep>', views.CepAPIView.as_view(), name='api_cep'),

    # ====================================================================
    # 4. ROTAS ADMINISTRATIVAS
    # ====================================================================
    path('admin', views.PainelAdminAPIView.as_view(), name='api_painel_admin'),
]
