from django.db import models
from django.conf import settings

from tiagodelivery.core.entities import StatusPedido


class Pedido(models.Model):
    """
    Pedido de entrega. Os itens e valores são uma cópia do checkout;
    depois de criado, apenas o status muda.
    """
    STATUS_CHOICES = StatusPedido.CHOICES

    usuario = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name='pedidos',
        verbose_name="Cliente"
    )
    loja = models.ForeignKey(
        'lojas.Loja',
        on_delete=models.SET_NULL,
        null=True,
        related_name='pedidos',
        verbose_name="Loja"
    )

    data_pedido = models.DateTimeField(auto_now_add=True, verbose_name="Data do Pedido")
    status = models.CharField(
        max_length=20, choices=STATUS_CHOICES, default=StatusPedido.PENDENTE,
        db_index=True, verbose_name="Status"
    )

    # Valores (snapshot)
    subtotal = models.DecimalField(max_digits=10, decimal_places=2, verbose_name="Subtotal")
    taxa_entrega = models.DecimalField(max_digits=10, decimal_places=2, default=0, verbose_name="Taxa de Entrega")
    total = models.DecimalField(max_digits=10, decimal_places=2, verbose_name="Total do Pedido")

    # Loja (snapshot, para o histórico sobreviver à exclusão da loja)
    nome_loja = models.CharField(max_length=255, verbose_name="Nome da Loja")
    telefone_loja = models.CharField(max_length=20, blank=True, null=True, verbose_name="Telefone da Loja")

    # Pagamento na entrega
    forma_pagamento = models.CharField(max_length=30, blank=True, null=True, verbose_name="Forma de Pagamento")
    precisa_troco = models.BooleanField(default=False, verbose_name="Precisa de Troco")
    valor_troco = models.DecimalField(max_digits=10, decimal_places=2, blank=True, null=True, verbose_name="Troco para")

    # Contato (snapshot)
    nome_cliente = models.CharField(max_length=255, blank=True, null=True, verbose_name="Nome do Cliente")
    telefone_cliente = models.CharField(max_length=20, blank=True, null=True, verbose_name="Telefone do Cliente")

    class Meta:
        verbose_name = 'Pedido'
        verbose_name_plural = 'Pedidos'
        ordering = ['-data_pedido']
        db_table = 'pedido'

    def __str__(self):
        return f"Pedido {self.id} - {self.nome_loja} - {self.get_status_display()}"


class ItemPedido(models.Model):
    """
    Item contido em um pedido, com nome e preço copiados no momento da compra.
    """
    pedido = models.ForeignKey(Pedido, on_delete=models.CASCADE, related_name='itens')

    # Referência fraca ao produto original
    produto = models.ForeignKey(
        'lojas.Produto',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='itens_pedido',
        verbose_name="Produto Original"
    )

    nome_produto = models.CharField(max_length=255, verbose_name="Nome do Produto")
    preco_unitario = models.DecimalField(max_digits=10, decimal_places=2, verbose_name="Preço Unitário na Compra")
    quantidade = models.PositiveIntegerField(verbose_name="Quantidade")
    subtotal = models.DecimalField(max_digits=10, decimal_places=2, verbose_name="Subtotal")

    class Meta:
        verbose_name = 'Item do Pedido'
        verbose_name_plural = 'Itens do Pedido'
        ordering = ['id']
        db_table = 'pedido_item'

    def __str__(self):
        return f"{self.quantidade}x {self.nome_produto}"
