# Configuração da interface administrativa do Django para os modelos do Tiago Delivery.

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from tiagodelivery.infrastructure.models import Usuario, Endereco
from tiagodelivery.lojas.models import Loja, Produto
from tiagodelivery.carrinho.models import Carrinho, ItemCarrinho
from tiagodelivery.pedidos.models import Pedido, ItemPedido

# ====================================================================
# 1. ADMIN PERSONALIZADO PARA USUÁRIOS (login por e-mail)
# ====================================================================

class EnderecoInline(admin.TabularInline):
    model = Endereco
    extra = 0


@admin.register(Usuario)
class UsuarioAdmin(BaseUserAdmin):
    """Customização do modelo Usuario. Adiciona campos de perfil e usa email/senha."""

    list_display = ('email', 'nome_completo', 'cpf', 'whatsapp', 'is_staff', 'is_active')
    list_filter = ('is_staff', 'is_active', 'whatsapp_consentimento')
    inlines = [EnderecoInline]

    # O modelo não tem 'username': os fieldsets do UserAdmin são redefinidos.
    fieldsets = (
        (None, {'fields': ('email', 'password')}),
        ('Informações de Perfil', {'fields': (
            'nome_completo', 'data_nascimento', 'cpf',
            'whatsapp', 'whatsapp_ddi', 'whatsapp_consentimento',
        )}),
        ('Permissões', {'fields': ('is_active', 'is_staff', 'is_superuser', 'groups', 'user_permissions')}),
        ('Datas', {'fields': ('last_login', 'date_joined')}),
    )
    add_fieldsets = (
        (None, {
            'classes': ('wide',),
            'fields': ('email', 'password1', 'password2'),
        }),
    )

    search_fields = ('email', 'nome_completo', 'cpf')
    ordering = ('email',)


# ====================================================================
# 2. ADMIN PARA LOJAS E PRODUTOS
# ====================================================================

class ProdutoInline(admin.TabularInline):
    model = Produto
    extra = 0
    fields = ('nome', 'preco', 'disponivel')


@admin.register(Loja)
class LojaAdmin(admin.ModelAdmin):
    list_display = ('nome', 'slug', 'categoria', 'cidade', 'estado', 'aberta', 'usuario')
    list_filter = ('aberta', 'estado', 'categoria')
    search_fields = ('nome', 'slug', 'cnpj', 'cidade')
    list_editable = ('aberta',)
    inlines = [ProdutoInline]


@admin.register(Produto)
class ProdutoAdmin(admin.ModelAdmin):
    list_display = ('nome', 'loja', 'preco', 'disponivel')
    list_filter = ('disponivel', 'loja')
    search_fields = ('nome', 'descricao')
    list_editable = ('preco', 'disponivel')


# ====================================================================
# 3. ADMIN PARA CARRINHOS
# ====================================================================

class ItemCarrinhoInline(admin.TabularInline):
    model = ItemCarrinho
    extra = 0
    raw_id_fields = ('produto',)


@admin.register(Carrinho)
class CarrinhoAdmin(admin.ModelAdmin):
    list_display = ('id', 'usuario', 'loja', 'data_atualizacao')
    inlines = [ItemCarrinhoInline]


# ====================================================================
# 4. ADMIN PARA PEDIDOS
# ====================================================================

class ItemPedidoInline(admin.TabularInline):
    """Os itens são o snapshot do checkout e não podem ser editados."""
    model = ItemPedido
    extra = 0
    can_delete = False
    readonly_fields = ('produto', 'nome_produto', 'preco_unitario', 'quantidade', 'subtotal')


@admin.register(Pedido)
class PedidoAdmin(admin.ModelAdmin):
    """Somente consulta: o status só avança pela API, pelo dono da loja."""
    list_display = ('id', 'nome_loja', 'usuario', 'status', 'total', 'data_pedido')
    list_filter = ('status', 'data_pedido')
    search_fields = ('id', 'nome_loja', 'nome_cliente', 'usuario__email')
    readonly_fields = (
        'usuario', 'loja', 'status', 'data_pedido',
        'nome_loja', 'telefone_loja', 'nome_cliente', 'telefone_cliente',
        'forma_pagamento', 'precisa_troco', 'valor_troco',
        'subtotal', 'taxa_entrega', 'total',
    )
    inlines = [ItemPedidoInline]

    def has_add_permission(self, request):
        return False
