# Define os modelos para o domínio de Carrinho.

from django.db import models


class Carrinho(models.Model):
    """Carrinho de Compras: um por (usuário, loja), apagado ao esvaziar ou finalizar."""
    usuario = models.ForeignKey(
        'infrastructure.Usuario',
        on_delete=models.CASCADE,
        related_name='carrinhos'
    )
    loja = models.ForeignKey(
        'lojas.Loja',
        on_delete=models.CASCADE,
        related_name='carrinhos'
    )
    data_criacao = models.DateTimeField(auto_now_add=True)
    data_atualizacao = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Carrinho"
        verbose_name_plural = "Carrinhos"
        db_table = 'carrinho_compras'
        unique_together = ('usuario', 'loja')

    def __str__(self):
        return f"Carrinho #{self.pk} ({self.usuario} em {self.loja})"


class ItemCarrinho(models.Model):
    """Modelo para os itens dentro do carrinho."""
    carrinho = models.ForeignKey(Carrinho, on_delete=models.CASCADE, related_name='itens')
    produto = models.ForeignKey('lojas.Produto', on_delete=models.CASCADE, related_name='itens_carrinho')
    quantidade = models.PositiveIntegerField(default=1)
    data_adicao = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "Item do Carrinho"
        verbose_name_plural = "Itens do Carrinho"
        unique_together = ('carrinho', 'produto')  # Evita duplicatas
        ordering = ['data_adicao']
        db_table = 'carrinho_item'

    def __str__(self):
        return f"{self.quantidade}x {self.produto.nome}"
