from dataclasses import dataclass, field
from decimal import Decimal
from datetime import date, datetime
from typing import List, Optional, Dict, Tuple

# ====================================================================
# ENTIDADES CORE
# Representam os objetos de negócio puros.
# ====================================================================

ZERO = Decimal('0.00')


@dataclass(frozen=True)
class IdentidadeChamador:
    """Identidade canônica de quem faz a requisição, resolvida uma única vez na borda."""
    usuario_id: str
    email: str = ''
    nome: str = ''
    is_staff: bool = False


@dataclass
class ResultadoEtapa:
    """Resultado de uma etapa de melhor esforço (e-mail, limpeza de carrinho)."""
    etapa: str
    sucesso: bool
    erro: Optional[str] = None

    @classmethod
    def ok(cls, etapa: str) -> 'ResultadoEtapa':
        return cls(etapa=etapa, sucesso=True)

    @classmethod
    def falha(cls, etapa: str, erro: Exception) -> 'ResultadoEtapa':
        return cls(etapa=etapa, sucesso=False, erro=str(erro))


@dataclass
class Usuario:
    """Entidade do Usuário (cliente e/ou dono de loja)."""
    email: str
    id: Optional[str] = None
    nome: str = ''
    nome_completo: Optional[str] = None
    data_nascimento: Optional[date] = None
    cpf: Optional[str] = None
    whatsapp: Optional[str] = None
    whatsapp_ddi: str = '55'
    whatsapp_consentimento: bool = False
    is_staff: bool = False
    data_cadastro: Optional[datetime] = None


@dataclass
class Endereco:
    """Entidade do Endereço do usuário."""
    usuario_id: str
    rua: str
    numero: str
    bairro: str
    cidade: str
    estado: str
    cep: str
    complemento: Optional[str] = None
    is_principal: bool = False
    id: Optional[str] = None


@dataclass
class Loja:
    """Entidade da Loja (vitrine de um vendedor)."""
    usuario_id: str
    nome: str
    slug: str
    categoria: str
    cnpj: str
    telefone: str
    email: str
    rua: str
    numero: str
    bairro: str
    cidade: str
    estado: str
    cep: str
    complemento: Optional[str] = None
    descricao: Optional[str] = None
    imagem: Optional[str] = None
    pedido_minimo: Optional[Decimal] = None
    taxa_entrega: Optional[Decimal] = None
    frete_gratis_acima: Optional[Decimal] = None
    aberta: bool = True
    id: Optional[str] = None
    data_criacao: Optional[datetime] = None
    # Calculado por requisição, nunca persistido
    is_owner: bool = False

    def pertence_a(self, identidade: Optional[IdentidadeChamador]) -> bool:
        """Indica se a identidade é a dona da loja."""
        return identidade is not None and str(self.usuario_id) == str(identidade.usuario_id)

    def calcular_taxa_entrega(self, subtotal: Decimal) -> Decimal:
        """Taxa de entrega para um subtotal, zerada ao atingir o frete grátis."""
        if self.frete_gratis_acima and subtotal >= self.frete_gratis_acima:
            return ZERO
        return self.taxa_entrega or ZERO


@dataclass
class Produto:
    """Entidade do Produto vendido por uma loja."""
    loja_id: str
    nome: str
    preco: Decimal
    descricao: Optional[str] = None
    imagens: List[str] = field(default_factory=list)
    disponivel: bool = True
    id: Optional[str] = None
    loja: Optional[Loja] = None
    data_criacao: Optional[datetime] = None

    @property
    def imagem_principal(self) -> Optional[str]:
        return self.imagens[0] if self.imagens else None

    @property
    def pode_ser_pedido(self) -> bool:
        """Produto fica oculto para pedidos se indisponível ou com a loja fechada."""
        loja_aberta = self.loja.aberta if self.loja else True
        return self.disponivel and loja_aberta


@dataclass
class ItemCarrinho:
    """Entidade que representa um item no carrinho."""
    produto_id: str
    quantidade: int
    id: Optional[str] = None
    carrinho_id: Optional[str] = None
    usuario_id: Optional[str] = None
    produto: Optional[Produto] = None

    @property
    def subtotal(self) -> Decimal:
        """Usa o preço atual do produto: o carrinho não congela preços."""
        if not self.produto:
            return ZERO
        return self.produto.preco * self.quantidade


@dataclass
class Carrinho:
    """Entidade do Carrinho de Compras, sempre associado a uma única loja."""
    usuario_id: str
    loja_id: str
    id: Optional[str] = None
    itens: List[ItemCarrinho] = field(default_factory=list)
    loja: Optional[Loja] = None
    data_criacao: Optional[datetime] = None

    @property
    def vazio(self) -> bool:
        return not self.itens

    @property
    def subtotal(self) -> Decimal:
        return sum((item.subtotal for item in self.itens), ZERO)

    @property
    def quantidade_total(self) -> int:
        return sum(item.quantidade for item in self.itens)

    @property
    def taxa_entrega(self) -> Decimal:
        if not self.loja:
            return ZERO
        return self.loja.calcular_taxa_entrega(self.subtotal)

    @property
    def total(self) -> Decimal:
        return self.subtotal + self.taxa_entrega

    @property
    def atingiu_pedido_minimo(self) -> bool:
        if not self.loja or not self.loja.pedido_minimo:
            return True
        return self.subtotal >= self.loja.pedido_minimo

    @property
    def valor_faltante_minimo(self) -> Decimal:
        if self.atingiu_pedido_minimo:
            return ZERO
        return self.loja.pedido_minimo - self.subtotal

    def buscar_item_por_produto(self, produto_id: str) -> Optional[ItemCarrinho]:
        return next((item for item in self.itens if str(item.produto_id) == str(produto_id)), None)


# ====================================================================
# PEDIDO E MÁQUINA DE ESTADOS
# ====================================================================

class StatusPedido:
    PENDENTE = 'pending'
    CONFIRMADO = 'confirmed'
    EM_PREPARACAO = 'preparing'
    EM_ENTREGA = 'delivering'
    CONCLUIDO = 'completed'
    CANCELADO = 'cancelled'

    CHOICES = [
        (PENDENTE, 'Aguardando Confirmação'),
        (CONFIRMADO, 'Confirmado'),
        (EM_PREPARACAO, 'Em Preparação'),
        (EM_ENTREGA, 'Saiu para Entrega'),
        (CONCLUIDO, 'Concluído'),
        (CANCELADO, 'Cancelado'),
    ]

    TERMINAIS = (CONCLUIDO, CANCELADO)


# Cada status não terminal tem exatamente uma saída: (status destino, rótulo da ação).
# CANCELADO não tem gatilho: é um status terminal previsto no modelo de dados.
# TODO: incluir a transição para CANCELADO quando for definido quem pode cancelar e em quais status.
TRANSICOES_PEDIDO: Dict[str, Tuple[str, str]] = {
    StatusPedido.PENDENTE: (StatusPedido.CONFIRMADO, 'Receber Pedido'),
    StatusPedido.CONFIRMADO: (StatusPedido.EM_PREPARACAO, 'Confirmar forma de pagamento'),
    StatusPedido.EM_PREPARACAO: (StatusPedido.EM_ENTREGA, 'Confirmar pedido em Rota de Entrega'),
    StatusPedido.EM_ENTREGA: (StatusPedido.CONCLUIDO, 'Finalizar Pedido'),
}


@dataclass
class ItemPedido:
    """Snapshot de um item no momento da compra (imutável)."""
    nome_produto: str
    preco_unitario: Decimal
    quantidade: int
    produto_id: Optional[str] = None

    @property
    def subtotal(self) -> Decimal:
        return self.preco_unitario * self.quantidade


@dataclass
class Pedido:
    """Entidade do Pedido: snapshot do checkout, depois só o status muda."""
    usuario_id: str
    loja_id: str
    itens: List[ItemPedido]
    subtotal: Decimal
    taxa_entrega: Decimal
    nome_loja: str = ''
    telefone_loja: Optional[str] = None
    status: str = StatusPedido.PENDENTE
    forma_pagamento: Optional[str] = None
    precisa_troco: bool = False
    valor_troco: Optional[Decimal] = None
    nome_cliente: Optional[str] = None
    telefone_cliente: Optional[str] = None
    id: Optional[str] = None
    data_criacao: Optional[datetime] = None

    @property
    def total(self) -> Decimal:
        return self.subtotal + self.taxa_entrega

    @property
    def proxima_acao(self) -> Optional[Tuple[str, str]]:
        """(status destino, rótulo) da única ação disponível, ou None se terminal."""
        return TRANSICOES_PEDIDO.get(self.status)

    def pode_transicionar_para(self, novo_status: str) -> bool:
        acao = self.proxima_acao
        return acao is not None and acao[0] == novo_status
