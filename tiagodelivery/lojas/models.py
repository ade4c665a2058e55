from django.db import models
from django.conf import settings
from django.core.validators import RegexValidator, MinValueValidator
from decimal import Decimal

# ====================================================================
# 1. Loja
# ====================================================================

class Loja(models.Model):
    """Vitrine de um vendedor. A loja pertence ao usuário que a cadastrou."""

    usuario = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='lojas',
        verbose_name="Dono"
    )

    nome = models.CharField(max_length=255, verbose_name="Nome da Loja")
    slug = models.CharField(
        max_length=100,
        unique=True,
        validators=[RegexValidator(r'^[a-z0-9]+$', 'Use apenas letras minúsculas e números.')],
        verbose_name="Identificação Única"
    )
    descricao = models.TextField(blank=True, null=True, verbose_name="Descrição")
    imagem = models.URLField(max_length=500, blank=True, null=True, verbose_name="Imagem (URL)")
    categoria = models.CharField(max_length=100, verbose_name="Categoria")

    # Dados da empresa e contato
    cnpj = models.CharField(max_length=18, unique=True, verbose_name="CNPJ")
    telefone = models.CharField(max_length=20, verbose_name="Telefone")
    email = models.EmailField(verbose_name="E-mail para Pedidos")

    # Endereço
    cep = models.CharField(max_length=10, verbose_name="CEP")
    rua = models.CharField(max_length=255, verbose_name="Rua")
    numero = models.CharField(max_length=10, verbose_name="Número")
    complemento = models.CharField(max_length=100, blank=True, null=True, verbose_name="Complemento")
    bairro = models.CharField(max_length=100, verbose_name="Bairro")
    cidade = models.CharField(max_length=100, verbose_name="Cidade")
    estado = models.CharField(max_length=50, verbose_name="Estado")

    # Regras de entrega
    pedido_minimo = models.DecimalField(
        max_digits=10, decimal_places=2, blank=True, null=True,
        validators=[MinValueValidator(Decimal('0.00'))], verbose_name="Pedido Mínimo"
    )
    taxa_entrega = models.DecimalField(
        max_digits=10, decimal_places=2, blank=True, null=True,
        validators=[MinValueValidator(Decimal('0.00'))], verbose_name="Taxa de Entrega"
    )
    frete_gratis_acima = models.DecimalField(
        max_digits=10, decimal_places=2, blank=True, null=True,
        validators=[MinValueValidator(Decimal('0.00'))], verbose_name="Frete Grátis Acima de"
    )

    aberta = models.BooleanField(default=True, verbose_name="Aberta")

    # Datas
    data_criacao = models.DateTimeField(auto_now_add=True)
    data_atualizacao = models.DateTimeField(auto_now=True, null=True)

    class Meta:
        verbose_name = "Loja"
        verbose_name_plural = "Lojas"
        ordering = ['nome']
        db_table = 'loja'

    def __str__(self):
        return self.nome


# ====================================================================
# 2. Produto
# ====================================================================

class Produto(models.Model):
    """Produto vendido por uma loja."""

    loja = models.ForeignKey(Loja, on_delete=models.CASCADE, related_name='produtos')

    nome = models.CharField(max_length=255, verbose_name="Nome do Produto")
    descricao = models.TextField(blank=True, null=True, verbose_name="Descrição")
    preco = models.DecimalField(
        max_digits=10, decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))], verbose_name="Preço de Venda"
    )
    # Lista de URLs; a primeira é a imagem principal
    imagens = models.JSONField(default=list, blank=True, verbose_name="Imagens (URLs)")
    disponivel = models.BooleanField(default=True)

    # Datas
    data_criacao = models.DateTimeField(auto_now_add=True)
    data_atualizacao = models.DateTimeField(auto_now=True, null=True)

    class Meta:
        verbose_name = "Produto"
        verbose_name_plural = "Produtos"
        ordering = ['nome']
        db_table = 'loja_produto'

    def __str__(self):
        return self.nome
