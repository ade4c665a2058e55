"""
Camada de Infraestrutura: Implementação dos Repositórios.

Esta camada traduz as operações abstratas definidas nas Portas da Core
em chamadas concretas ao Django ORM.
"""
import logging
from typing import List, Optional, Dict, Any
from decimal import Decimal

from django.db.models import Q, F, Sum, Count, Prefetch
from django.db import transaction
from django.db.utils import IntegrityError

# Importação Lenta (Lazy Loading) para Modelos Django
from django.apps import apps
from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError

# Importações da Camada CORE (ENTIDADES e PORTAS)
from tiagodelivery.core.entities import (
    Loja, Produto, Carrinho, ItemCarrinho, Pedido, Usuario, Endereco, StatusPedido, ZERO
)
from tiagodelivery.core.ports import (
    ILojaRepository,
    IProdutoRepository,
    ICarrinhoRepository,
    IPedidoRepository,
    IUsuarioRepository,
    IEnderecoRepository,
    IEstatisticasRepository,
)
from tiagodelivery.core.exceptions import (
    ConflitoError,
    LojaNaoEncontradaError,
    ProdutoNaoEncontradoError,
    EnderecoNaoEncontradoError,
    UsuarioNaoEncontradoError,
)

from .mappers import (
    LojaMapper, ProdutoMapper, CarrinhoMapper, ItemCarrinhoMapper, PedidoMapper,
    ItemPedidoMapper, UsuarioMapper, EnderecoMapper, mapear_lista
)

logger = logging.getLogger(__name__)


# ====================================================================
# REPOSITÓRIOS (Implementação Django ORM)
# ====================================================================

# Helper para Lazy Loading
def get_model(app_label, model_name):
    """Busca o modelo Django de forma segura (Lazy Loading)."""
    return apps.get_model(app_label, model_name)


def _buscar(queryset, pk):
    """get() tolerante: IDs inexistentes ou malformados viram None."""
    try:
        return queryset.get(pk=pk)
    except (queryset.model.DoesNotExist, ValueError, TypeError):
        return None


def _id_valido(model, pk) -> bool:
    """Indica se o valor serve como chave primária do modelo (IDs malformados não casam com nada)."""
    try:
        model._meta.pk.to_python(pk)
    except (ValidationError, TypeError):
        return False
    return True


class LojaRepositoryDjango(ILojaRepository):
    """Implementação do LojaRepository usando o Django ORM."""

    @property
    def LojaModel(self):
        return get_model('lojas', 'Loja')

    def buscar_por_id(self, loja_id: str) -> Optional[Loja]:
        return LojaMapper.to_entity(_buscar(self.LojaModel.objects.all(), loja_id))

    def buscar_por_slug(self, slug: str) -> Optional[Loja]:
        return LojaMapper.to_entity(self.LojaModel.objects.filter(slug=slug).first())

    def buscar_por_cnpj(self, cnpj: str) -> Optional[Loja]:
        return LojaMapper.to_entity(self.LojaModel.objects.filter(cnpj=cnpj).first())

    def listar(self, cidade: Optional[str] = None, estado: Optional[str] = None) -> List[Loja]:
        qs = self.LojaModel.objects.all()
        if cidade:
            qs = qs.filter(cidade__iexact=cidade)
        if estado:
            qs = qs.filter(estado=estado)
        return mapear_lista(LojaMapper, qs.order_by('-data_criacao'))

    @transaction.atomic
    def salvar(self, loja: Loja) -> Loja:
        """Salva ou atualiza uma Loja. Colisões de slug/CNPJ concorrentes viram ConflitoError."""
        model = None
        if loja.id:
            model = _buscar(self.LojaModel.objects.all(), loja.id)
            if model is None:
                raise LojaNaoEncontradaError(f"Loja ID {loja.id} não existe para atualização.")

        model = LojaMapper.to_model(loja, model)
        try:
            with transaction.atomic():
                model.save()
        except IntegrityError as e:
            logger.warning("Violação de unicidade ao salvar a loja %s: %s", loja.slug, e)
            raise ConflitoError("Identificação ou CNPJ já cadastrados por outra loja.")
        return LojaMapper.to_entity(model)

    def definir_aberta(self, loja_id: str, aberta: bool) -> Loja:
        self.LojaModel.objects.filter(pk=loja_id).update(aberta=aberta)
        loja = self.buscar_por_id(loja_id)
        if loja is None:
            raise LojaNaoEncontradaError()
        return loja

    def deletar(self, loja_id: str) -> None:
        """Remove a loja com seus produtos e carrinhos; pedidos mantêm o snapshot."""
        apagados, _ = self.LojaModel.objects.filter(pk=loja_id).delete()
        if not apagados:
            raise LojaNaoEncontradaError(f"Loja ID {loja_id} não pode ser deletada, pois não existe.")


class ProdutoRepositoryDjango(IProdutoRepository):
    """Implementação do ProdutoRepository usando o Django ORM."""

    @property
    def ProdutoModel(self):
        return get_model('lojas', 'Produto')

    def buscar_por_id(self, produto_id: str) -> Optional[Produto]:
        model = _buscar(self.ProdutoModel.objects.select_related('loja'), produto_id)
        return ProdutoMapper.to_entity(model)

    def listar_por_loja(self, loja_id: str) -> List[Produto]:
        qs = self.ProdutoModel.objects.filter(loja_id=loja_id)
        return [ProdutoMapper.to_entity(model, com_loja=False) for model in qs]

    @transaction.atomic
    def salvar(self, produto: Produto) -> Produto:
        model = None
        if produto.id:
            model = _buscar(self.ProdutoModel.objects.all(), produto.id)
            if model is None:
                raise ProdutoNaoEncontradoError(f"Produto ID {produto.id} não existe para atualização.")

        model = ProdutoMapper.to_model(produto, model)
        model.save()
        return ProdutoMapper.to_entity(model, com_loja=False)

    def deletar(self, produto_id: str) -> None:
        apagados, _ = self.ProdutoModel.objects.filter(pk=produto_id).delete()
        if not apagados:
            raise ProdutoNaoEncontradoError(f"Produto ID {produto_id} não pode ser deletado, pois não existe.")


class CarrinhoRepositoryDjango(ICarrinhoRepository):
    """Implementação do CarrinhoRepository usando o Django ORM."""

    @property
    def CarrinhoModel(self):
        return get_model('carrinho', 'Carrinho')

    @property
    def ItemCarrinhoModel(self):
        return get_model('carrinho', 'ItemCarrinho')

    def buscar_por_usuario(self, usuario_id: str) -> Optional[Carrinho]:
        """Carrinho mais recente do usuário, com itens e produtos pré-carregados."""
        model = self.CarrinhoModel.objects.select_related('loja').prefetch_related(
            Prefetch(
                'itens',
                queryset=self.ItemCarrinhoModel.objects.select_related('produto', 'carrinho'),
                to_attr='itens_list_for_mapper'
            )
        ).filter(usuario_id=usuario_id).order_by('-data_atualizacao').first()
        return CarrinhoMapper.to_entity(model)

    def criar(self, usuario_id: str, loja_id: str) -> Carrinho:
        model, _ = self.CarrinhoModel.objects.get_or_create(usuario_id=usuario_id, loja_id=loja_id)
        return CarrinhoMapper.to_entity(model)

    @transaction.atomic
    def adicionar_item(self, carrinho_id: str, produto_id: str, quantidade: int) -> None:
        """Cria o item ou incrementa a quantidade existente (atualização atômica com F)."""
        item_model, created = self.ItemCarrinhoModel.objects.get_or_create(
            carrinho_id=carrinho_id,
            produto_id=produto_id,
            defaults={'quantidade': quantidade}
        )
        if not created:
            self.ItemCarrinhoModel.objects.filter(pk=item_model.pk).update(
                quantidade=F('quantidade') + quantidade
            )
        self.CarrinhoModel.objects.get(pk=carrinho_id).save(update_fields=['data_atualizacao'])

    def buscar_item(self, item_id: str) -> Optional[ItemCarrinho]:
        model = _buscar(self.ItemCarrinhoModel.objects.select_related('produto', 'carrinho'), item_id)
        return ItemCarrinhoMapper.to_entity(model)

    def atualizar_quantidade(self, item_id: str, quantidade: int) -> None:
        self.ItemCarrinhoModel.objects.filter(pk=item_id).update(quantidade=quantidade)

    @transaction.atomic
    def remover_item(self, item_id: str) -> int:
        item = _buscar(self.ItemCarrinhoModel.objects.all(), item_id)
        if item is None:
            return 0
        carrinho_id = item.carrinho_id
        item.delete()
        return self.ItemCarrinhoModel.objects.filter(carrinho_id=carrinho_id).count()

    def deletar(self, carrinho_id: str) -> None:
        self.CarrinhoModel.objects.filter(pk=carrinho_id).delete()

    def limpar(self, usuario_id: str, loja_id: Optional[str] = None) -> int:
        """Apaga carrinho(s) e itens (CASCADE). Não é erro se não houver nada."""
        qs = self.CarrinhoModel.objects.filter(usuario_id=usuario_id)
        if loja_id:
            if not _id_valido(get_model('lojas', 'Loja'), loja_id):
                return 0
            qs = qs.filter(loja_id=loja_id)
        _, por_modelo = qs.delete()
        return por_modelo.get(self.CarrinhoModel._meta.label, 0)


class PedidoRepositoryDjango(IPedidoRepository):
    """Implementação do PedidoRepository usando o Django ORM."""

    @property
    def PedidoModel(self):
        return get_model('pedidos', 'Pedido')

    @property
    def ItemPedidoModel(self):
        return get_model('pedidos', 'ItemPedido')

    def _queryset(self):
        return self.PedidoModel.objects.prefetch_related(
            Prefetch('itens', queryset=self.ItemPedidoModel.objects.all(), to_attr='itens_list_for_mapper')
        )

    @transaction.atomic
    def criar(self, pedido: Pedido) -> Pedido:
        """Grava o pedido e o snapshot dos itens numa única transação."""
        model = PedidoMapper.to_model(pedido)
        model.save()

        produto_ids = {item.produto_id for item in pedido.itens if item.produto_id}
        existentes = set()
        if produto_ids:
            existentes = {
                str(pk) for pk in get_model('lojas', 'Produto').objects.filter(
                    pk__in=[pk for pk in produto_ids if str(pk).isdigit()]
                ).values_list('pk', flat=True)
            }
        item_models = []
        for item in pedido.itens:
            item_model = ItemPedidoMapper.to_model(item, pedido_id=model.pk)
            # A referência ao produto é fraca: se não existir mais, fica só o snapshot
            if str(item.produto_id) not in existentes:
                item_model.produto_id = None
            item_models.append(item_model)
        self.ItemPedidoModel.objects.bulk_create(item_models)

        return self.buscar_por_id(model.pk)

    def buscar_por_id(self, pedido_id: str) -> Optional[Pedido]:
        return PedidoMapper.to_entity(_buscar(self._queryset(), pedido_id))

    def listar_por_usuario(self, usuario_id: str, loja_id: Optional[str] = None) -> List[Pedido]:
        qs = self._queryset().filter(usuario_id=usuario_id)
        if loja_id:
            if not _id_valido(get_model('lojas', 'Loja'), loja_id):
                return []
            qs = qs.filter(loja_id=loja_id)
        return mapear_lista(PedidoMapper, qs.order_by('-data_pedido'))

    def listar_por_loja(self, loja_id: str) -> List[Pedido]:
        qs = self._queryset().filter(loja_id=loja_id).order_by('-data_pedido')
        return mapear_lista(PedidoMapper, qs)

    def atualizar_status(self, pedido_id: str, novo_status: str, status_atual: str) -> Optional[Pedido]:
        """Atualização condicional: só grava se o status no banco ainda for status_atual."""
        alterados = self.PedidoModel.objects.filter(pk=pedido_id, status=status_atual).update(status=novo_status)
        if not alterados:
            return None
        return self.buscar_por_id(pedido_id)


class UsuarioRepositoryDjango(IUsuarioRepository):
    """Implementação do UsuarioRepository sobre o modelo de usuário ativo (AUTH_USER_MODEL)."""

    @property
    def UsuarioModel(self):
        return get_user_model()

    def buscar_por_id(self, usuario_id: str) -> Optional[Usuario]:
        return UsuarioMapper.to_entity(_buscar(self.UsuarioModel.objects.all(), usuario_id))

    def buscar_por_cpf(self, cpf: str) -> Optional[Usuario]:
        return UsuarioMapper.to_entity(self.UsuarioModel.objects.filter(cpf=cpf).first())

    def atualizar_perfil(self, usuario: Usuario) -> Usuario:
        model = _buscar(self.UsuarioModel.objects.all(), usuario.id)
        if model is None:
            raise UsuarioNaoEncontradoError()
        model = UsuarioMapper.to_model(usuario, model)
        try:
            with transaction.atomic():
                model.save()
        except IntegrityError:
            raise ConflitoError("CPF já cadastrado em outra conta")
        return UsuarioMapper.to_entity(model)

    def deletar(self, usuario_id: str) -> None:
        self.UsuarioModel.objects.filter(pk=usuario_id).delete()


class EnderecoRepositoryDjango(IEnderecoRepository):
    """Implementação do EnderecoRepository usando o Django ORM."""

    @property
    def EnderecoModel(self):
        return get_model('infrastructure', 'Endereco')

    def listar_por_usuario(self, usuario_id: str) -> List[Endereco]:
        return mapear_lista(EnderecoMapper, self.EnderecoModel.objects.filter(usuario_id=usuario_id))

    def buscar_por_id(self, endereco_id: str) -> Optional[Endereco]:
        return EnderecoMapper.to_entity(_buscar(self.EnderecoModel.objects.all(), endereco_id))

    @transaction.atomic
    def salvar(self, endereco: Endereco) -> Endereco:
        model = None
        if endereco.id:
            model = _buscar(self.EnderecoModel.objects.all(), endereco.id)
            if model is None:
                raise EnderecoNaoEncontradoError()

        # Apenas um endereço principal por usuário
        if endereco.is_principal:
            outros = self.EnderecoModel.objects.filter(usuario_id=endereco.usuario_id, is_principal=True)
            if model is not None:
                outros = outros.exclude(pk=model.pk)
            outros.update(is_principal=False)

        model = EnderecoMapper.to_model(endereco, model)
        model.save()
        return EnderecoMapper.to_entity(model)

    def deletar(self, endereco_id: str) -> None:
        self.EnderecoModel.objects.filter(pk=endereco_id).delete()


class EstatisticasRepositoryDjango(IEstatisticasRepository):
    """Consultas agregadas para o painel administrativo."""

    def obter_estatisticas(self) -> Dict[str, Any]:
        LojaModel = get_model('lojas', 'Loja')
        ProdutoModel = get_model('lojas', 'Produto')
        PedidoModel = get_model('pedidos', 'Pedido')

        lojas = LojaModel.objects.aggregate(total=Count('id'), abertas=Count('id', filter=Q(aberta=True)))
        produtos = ProdutoModel.objects.aggregate(total=Count('id'), disponiveis=Count('id', filter=Q(disponivel=True)))

        por_status = dict(PedidoModel.objects.order_by().values_list('status').annotate(total=Count('id')))
        conhecidos = (StatusPedido.PENDENTE, StatusPedido.CONCLUIDO, StatusPedido.CANCELADO)
        faturamento = PedidoModel.objects.exclude(status=StatusPedido.CANCELADO).aggregate(
            total=Sum('total')
        )['total']

        return {
            'total_usuarios': get_user_model().objects.count(),
            'total_lojas': lojas['total'],
            'lojas_abertas': lojas['abertas'],
            'lojas_fechadas': lojas['total'] - lojas['abertas'],
            'total_produtos': produtos['total'],
            'produtos_disponiveis': produtos['disponiveis'],
            'total_pedidos': sum(por_status.values()),
            'pedidos_por_status': {
                'pendentes': por_status.get(StatusPedido.PENDENTE, 0),
                'concluidos': por_status.get(StatusPedido.CONCLUIDO, 0),
                'cancelados': por_status.get(StatusPedido.CANCELADO, 0),
                'outros': sum(total for status, total in por_status.items() if status not in conhecidos),
            },
            'faturamento_total': Decimal(faturamento or ZERO),
        }

    def pedidos_recentes(self, limite: int = 5) -> List[Pedido]:
        qs = get_model('pedidos', 'Pedido').objects.prefetch_related('itens').order_by('-data_pedido')[:limite]
        return mapear_lista(PedidoMapper, qs)

    def lojas_recentes(self, limite: int = 5) -> List[Loja]:
        qs = get_model('lojas', 'Loja').objects.order_by('-data_criacao')[:limite]
        return mapear_lista(LojaMapper, qs)

    def usuarios_recentes(self, limite: int = 5) -> List[Usuario]:
        qs = get_user_model().objects.order_by('-date_joined')[:limite]
        return mapear_lista(UsuarioMapper, qs)
