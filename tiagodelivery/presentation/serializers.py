from rest_framework import serializers


def texto(source=None, **kwargs):
    """Campo de texto opcional; a obrigatoriedade é decidida nos casos de uso."""
    return serializers.CharField(source=source, required=False, allow_blank=True, allow_null=True, **kwargs)


def valor(source=None):
    return ValorField(source=source, required=False, allow_null=True)


def dinheiro(source=None):
    return serializers.DecimalField(source=source, max_digits=10, decimal_places=2, read_only=True)


class ValorField(serializers.Field):
    """
    Aceita número ou texto sem converter.
    A conversão para Decimal (e as mensagens de erro) ficam com os casos de uso.
    """

    def to_internal_value(self, data):
        if isinstance(data, (dict, list)):
            raise serializers.ValidationError("Valor numérico inválido.")
        return data

    def to_representation(self, value):
        return value


# ====================================================================
# SERIALIZERS DE ENTRADA (camelCase -> nomes internos)
# ====================================================================

class EnderecoLojaEntradaSerializer(serializers.Serializer):
    zipCode = texto('cep', max_length=10)
    street = texto('rua', max_length=255)
    number = texto('numero', max_length=10)
    complement = texto('complemento', max_length=100)
    neighborhood = texto('bairro', max_length=100)
    city = texto('cidade', max_length=100)
    state = texto('estado', max_length=50)


class LojaEntradaSerializer(serializers.Serializer):
    id = texto()
    name = texto('nome', max_length=255)
    slug = texto(max_length=100)
    description = texto('descricao')
    image = texto('imagem', max_length=500)
    category = texto('categoria', max_length=100)
    cnpj = texto(max_length=18)
    phone = texto('telefone', max_length=20)
    email = serializers.EmailField(required=False, allow_blank=True, allow_null=True, max_length=254)
    minimumOrder = valor('pedido_minimo')
    deliveryFee = valor('taxa_entrega')
    freeShippingThreshold = valor('frete_gratis_acima')
    address = EnderecoLojaEntradaSerializer(source='endereco', required=False, allow_null=True)


class ProdutoEntradaSerializer(serializers.Serializer):
    storeId = texto('loja_id')
    name = texto('nome', max_length=255)
    description = texto('descricao')
    price = valor('preco')
    images = serializers.ListField(source='imagens', child=serializers.CharField(), required=False, allow_null=True)
    available = serializers.BooleanField(source='disponivel', required=False, allow_null=True)


class ItemCarrinhoEntradaSerializer(serializers.Serializer):
    productId = texto('produto_id')
    quantity = valor('quantidade')


class ItemPedidoEntradaSerializer(serializers.Serializer):
    productId = texto('produto_id')
    productName = texto('nome_produto', max_length=255)
    price = valor('preco_unitario')
    quantity = valor('quantidade')


class PedidoEntradaSerializer(serializers.Serializer):
    storeId = texto('loja_id')
    items = ItemPedidoEntradaSerializer(source='itens', many=True, required=False, allow_null=True)
    subtotal = valor()
    deliveryFee = valor('taxa_entrega')
    total = valor()
    customerName = texto('nome_cliente', max_length=255)
    customerPhone = texto('telefone_cliente', max_length=20)
    paymentMethod = texto('forma_pagamento', max_length=30)
    needsChange = serializers.BooleanField(source='precisa_troco', required=False, allow_null=True)
    changeAmount = valor('valor_troco')


class StatusPedidoEntradaSerializer(serializers.Serializer):
    status = texto(max_length=20)


class PerfilEntradaSerializer(serializers.Serializer):
    fullName = texto('nome_completo', max_length=255)
    birthDate = serializers.DateField(source='data_nascimento', required=False, allow_null=True)
    cpf = texto(max_length=20)
    whatsapp = texto(max_length=20)
    whatsappCountryCode = texto('whatsapp_ddi', max_length=4)
    whatsappConsent = serializers.BooleanField(source='whatsapp_consentimento', required=False, allow_null=True)


class EnderecoEntradaSerializer(EnderecoLojaEntradaSerializer):
    id = texto()
    isPrimary = serializers.BooleanField(source='is_principal', required=False, allow_null=True)


# ====================================================================
# SERIALIZERS DE SAÍDA (entidades do Core -> JSON)
# ====================================================================

class LojaSerializer(serializers.Serializer):
    id = serializers.CharField(read_only=True)
    userId = serializers.CharField(source='usuario_id', read_only=True)
    name = serializers.CharField(source='nome', read_only=True)
    slug = serializers.CharField(read_only=True)
    description = serializers.CharField(source='descricao', read_only=True)
    image = serializers.CharField(source='imagem', read_only=True)
    category = serializers.CharField(source='categoria', read_only=True)
    cnpj = serializers.CharField(read_only=True)
    phone = serializers.CharField(source='telefone', read_only=True)
    email = serializers.CharField(read_only=True)
    zipCode = serializers.CharField(source='cep', read_only=True)
    street = serializers.CharField(source='rua', read_only=True)
    number = serializers.CharField(source='numero', read_only=True)
    complement = serializers.CharField(source='complemento', read_only=True)
    neighborhood = serializers.CharField(source='bairro', read_only=True)
    city = serializers.CharField(source='cidade', read_only=True)
    state = serializers.CharField(source='estado', read_only=True)
    minimumOrder = dinheiro('pedido_minimo')
    deliveryFee = dinheiro('taxa_entrega')
    freeShippingThreshold = dinheiro('frete_gratis_acima')
    isOpen = serializers.BooleanField(source='aberta', read_only=True)
    isOwner = serializers.BooleanField(source='is_owner', read_only=True)
    createdAt = serializers.DateTimeField(source='data_criacao', read_only=True)


class ProdutoSerializer(serializers.Serializer):
    id = serializers.CharField(read_only=True)
    storeId = serializers.CharField(source='loja_id', read_only=True)
    name = serializers.CharField(source='nome', read_only=True)
    description = serializers.CharField(source='descricao', read_only=True)
    price = dinheiro('preco')
    images = serializers.ListField(source='imagens', child=serializers.CharField(), read_only=True)
    image = serializers.CharField(source='imagem_principal', read_only=True)
    available = serializers.BooleanField(source='disponivel', read_only=True)
    canOrder = serializers.BooleanField(source='pode_ser_pedido', read_only=True)
    createdAt = serializers.DateTimeField(source='data_criacao', read_only=True)


class ItemCarrinhoSerializer(serializers.Serializer):
    id = serializers.CharField(read_only=True)
    productId = serializers.CharField(source='produto_id', read_only=True)
    quantity = serializers.IntegerField(source='quantidade', read_only=True)
    subtotal = dinheiro()
    product = ProdutoSerializer(source='produto', read_only=True)


class CarrinhoSerializer(serializers.Serializer):
    """Carrinho com os totais calculados no servidor (frete grátis e pedido mínimo)."""
    id = serializers.CharField(read_only=True)
    storeId = serializers.CharField(source='loja_id', read_only=True)
    store = LojaSerializer(source='loja', read_only=True)
    items = ItemCarrinhoSerializer(source='itens', many=True, read_only=True)
    itemCount = serializers.IntegerField(source='quantidade_total', read_only=True)
    subtotal = dinheiro()
    deliveryFee = dinheiro('taxa_entrega')
    total = dinheiro()
    minimumOrder = dinheiro('loja.pedido_minimo')
    meetsMinimumOrder = serializers.BooleanField(source='atingiu_pedido_minimo', read_only=True)
    remainingForMinimumOrder = dinheiro('valor_faltante_minimo')


class ItemPedidoSerializer(serializers.Serializer):
    productId = serializers.CharField(source='produto_id', read_only=True)
    productName = serializers.CharField(source='nome_produto', read_only=True)
    price = dinheiro('preco_unitario')
    quantity = serializers.IntegerField(source='quantidade', read_only=True)
    subtotal = dinheiro()


class PedidoSerializer(serializers.Serializer):
    id = serializers.CharField(read_only=True)
    userId = serializers.CharField(source='usuario_id', read_only=True)
    storeId = serializers.CharField(source='loja_id', read_only=True)
    storeName = serializers.CharField(source='nome_loja', read_only=True)
    storePhone = serializers.CharField(source='telefone_loja', read_only=True)
    items = ItemPedidoSerializer(source='itens', many=True, read_only=True)
    subtotal = dinheiro()
    deliveryFee = dinheiro('taxa_entrega')
    total = dinheiro()
    status = serializers.CharField(read_only=True)
    paymentMethod = serializers.CharField(source='forma_pagamento', read_only=True)
    needsChange = serializers.BooleanField(source='precisa_troco', read_only=True)
    changeAmount = dinheiro('valor_troco')
    customerName = serializers.CharField(source='nome_cliente', read_only=True)
    customerPhone = serializers.CharField(source='telefone_cliente', read_only=True)
    createdAt = serializers.DateTimeField(source='data_criacao', read_only=True)
    nextAction = serializers.SerializerMethodField()

    def get_nextAction(self, pedido):
        """Única ação disponível para o lojista, ou None para pedidos concluídos/cancelados."""
        acao = pedido.proxima_acao
        if acao is None:
            return None
        status_destino, rotulo = acao
        return {'status': status_destino, 'label': rotulo}


class UsuarioSerializer(serializers.Serializer):
    id = serializers.CharField(read_only=True)
    email = serializers.CharField(read_only=True)
    name = serializers.CharField(source='nome', read_only=True)
    fullName = serializers.CharField(source='nome_completo', read_only=True)
    birthDate = serializers.DateField(source='data_nascimento', read_only=True)
    cpf = serializers.CharField(read_only=True)
    whatsapp = serializers.CharField(read_only=True)
    whatsappCountryCode = serializers.CharField(source='whatsapp_ddi', read_only=True)
    whatsappConsent = serializers.BooleanField(source='whatsapp_consentimento', read_only=True)
    isStaff = serializers.BooleanField(source='is_staff', read_only=True)
    createdAt = serializers.DateTimeField(source='data_cadastro', read_only=True)


class EnderecoSerializer(serializers.Serializer):
    id = serializers.CharField(read_only=True)
    zipCode = serializers.CharField(source='cep', read_only=True)
    street = serializers.CharField(source='rua', read_only=True)
    number = serializers.CharField(source='numero', read_only=True)
    complement = serializers.CharField(source='complemento', read_only=True)
    neighborhood = serializers.CharField(source='bairro', read_only=True)
    city = serializers.CharField(source='cidade', read_only=True)
    state = serializers.CharField(source='estado', read_only=True)
    isPrimary = serializers.BooleanField(source='is_principal', read_only=True)


class CepSerializer(serializers.Serializer):
    """Resultado da consulta de CEP (dicionário devolvido pelo gateway)."""
    zipCode = serializers.CharField(source='cep', read_only=True)
    street = serializers.CharField(source='rua', read_only=True)
    complement = serializers.CharField(source='complemento', read_only=True)
    neighborhood = serializers.CharField(source='bairro', read_only=True)
    city = serializers.CharField(source='cidade', read_only=True)
    state = serializers.CharField(source='estado', read_only=True)


# ====================================================================
# SERIALIZERS DO PAINEL ADMINISTRATIVO
# ====================================================================

class PedidosPorStatusSerializer(serializers.Serializer):
    pending = serializers.IntegerField(source='pendentes', read_only=True)
    completed = serializers.IntegerField(source='concluidos', read_only=True)
    cancelled = serializers.IntegerField(source='cancelados', read_only=True)
    other = serializers.IntegerField(source='outros', read_only=True)


class EstatisticasSerializer(serializers.Serializer):
    totalUsers = serializers.IntegerField(source='total_usuarios', read_only=True)
    totalStores = serializers.IntegerField(source='total_lojas', read_only=True)
    openStores = serializers.IntegerField(source='lojas_abertas', read_only=True)
    closedStores = serializers.IntegerField(source='lojas_fechadas', read_only=True)
    totalProducts = serializers.IntegerField(source='total_produtos', read_only=True)
    availableProducts = serializers.IntegerField(source='produtos_disponiveis', read_only=True)
    totalOrders = serializers.IntegerField(source='total_pedidos', read_only=True)
    ordersByStatus = PedidosPorStatusSerializer(source='pedidos_por_status', read_only=True)
    totalRevenue = serializers.DecimalField(source='faturamento_total', max_digits=14, decimal_places=2, read_only=True)


class PainelAdminSerializer(serializers.Serializer):
    stats = EstatisticasSerializer(source='estatisticas', read_only=True)
    recentOrders = PedidoSerializer(source='pedidos_recentes', many=True, read_only=True)
    recentStores = LojaSerializer(source='lojas_recentes', many=True, read_only=True)
    recentUsers = UsuarioSerializer(source='usuarios_recentes', many=True, read_only=True)
