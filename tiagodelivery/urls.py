# tiagodelivery/urls.py
"""
Configuração principal de URL do projeto Tiago Delivery.

Este arquivo centraliza o roteamento, incluindo:
1. Rotas do Admin (Django Admin)
2. Rotas da API (tiagodelivery.presentation)
3. Rotas de Autenticação JWT
4. Rotas da Documentação da API (Swagger/Redoc)
"""
from django.contrib import admin
from django.urls import path, include
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView, SpectacularRedocView
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView


urlpatterns = [
    # URL para o painel de administração padrão do Django
    path('admin/', admin.site.urls),

    # ====================================================================
    # ROTAS DE AUTENTICAÇÃO (JWT)
    # ====================================================================
    path('api/token/', TokenObtainPairView.as_view(), name='token_obtain_pair'),
    path('api/token/refresh/', TokenRefreshView.as_view(), name='token_refresh'),

    # ====================================================================
    # ROTAS DE DOCUMENTAÇÃO DA API (DRF SPECTACULAR)
    # ====================================================================
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
    path('api/docs/swagger/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),
    path('api/docs/redoc/', SpectacularRedocView.as_view(url_name='schema'), name='redoc'),

    # Rotas da API do delivery (/api/stores, /api/cart, /api/orders, ...)
    path('api/', include('tiagodelivery.presentation.urls')),
]
