"""
Mapeadores (Mappers) para converter entre:
1. Modelos do Django ORM
2. Entidades de Domínio (tiagodelivery.core.entities)
"""
from typing import Any, Optional, List
from django.apps import apps

# Importa as entidades do Core
from tiagodelivery.core.entities import (
    Usuario as UsuarioEntity,
    Endereco as EnderecoEntity,
    Loja as LojaEntity,
    Produto as ProdutoEntity,
    Carrinho as CarrinhoEntity,
    ItemCarrinho as ItemCarrinhoEntity,
    Pedido as PedidoEntity,
    ItemPedido as ItemPedidoEntity,
)

# ====================================================================
# Uso de apps.get_model para evitar dependências circulares
# ====================================================================

def get_model(app_label: str, model_name: str):
    """Retorna um modelo do Django de forma segura (lazy loading)."""
    return apps.get_model(app_label, model_name)


def _id(valor) -> Optional[str]:
    """As entidades trabalham com IDs em texto, independente do tipo da chave no banco."""
    return str(valor) if valor is not None else None


# ====================================================================
# MAPPERS DE CONTA
# ====================================================================

class UsuarioMapper:

    @staticmethod
    def to_entity(model: Any) -> Optional[UsuarioEntity]:
        if not model: return None
        return UsuarioEntity(
            id=_id(model.pk),
            email=model.email,
            nome=model.nome_exibicao,
            nome_completo=model.nome_completo,
            data_nascimento=model.data_nascimento,
            cpf=model.cpf,
            whatsapp=model.whatsapp,
            whatsapp_ddi=model.whatsapp_ddi,
            whatsapp_consentimento=model.whatsapp_consentimento,
            is_staff=model.is_staff,
            data_cadastro=model.date_joined,
        )

    @staticmethod
    def to_model(entity: UsuarioEntity, model: Any) -> Any:
        """Copia apenas os campos de perfil; e-mail e senha não mudam por aqui."""
        model.nome_completo = entity.nome_completo
        model.data_nascimento = entity.data_nascimento
        model.cpf = entity.cpf
        model.whatsapp = entity.whatsapp
        model.whatsapp_ddi = entity.whatsapp_ddi
        model.whatsapp_consentimento = entity.whatsapp_consentimento
        return model


class EnderecoMapper:

    @staticmethod
    def to_entity(model: Any) -> Optional[EnderecoEntity]:
        if not model: return None
        return EnderecoEntity(
            id=_id(model.pk),
            usuario_id=_id(model.usuario_id),
            cep=model.cep,
            rua=model.rua,
            numero=model.numero,
            complemento=model.complemento,
            bairro=model.bairro,
            cidade=model.cidade,
            estado=model.estado,
            is_principal=model.is_principal,
        )

    @staticmethod
    def to_model(entity: EnderecoEntity, model: Optional[Any] = None) -> Any:
        if model is None:
            model = get_model('infrastructure', 'Endereco')(usuario_id=entity.usuario_id)
        model.cep = entity.cep
        model.rua = entity.rua
        model.numero = entity.numero
        model.complemento = entity.complemento
        model.bairro = entity.bairro
        model.cidade = entity.cidade
        model.estado = entity.estado
        model.is_principal = entity.is_principal
        return model


# ====================================================================
# MAPPERS DO CATÁLOGO
# ====================================================================

class LojaMapper:
    """Mapeador para Loja."""

    CAMPOS = (
        'nome', 'slug', 'descricao', 'imagem', 'categoria', 'cnpj', 'telefone', 'email',
        'cep', 'rua', 'numero', 'complemento', 'bairro', 'cidade', 'estado',
        'pedido_minimo', 'taxa_entrega', 'frete_gratis_acima', 'aberta',
    )

    @classmethod
    def to_entity(cls, model: Any) -> Optional[LojaEntity]:
        if not model: return None
        dados = {campo: getattr(model, campo) for campo in cls.CAMPOS}
        return LojaEntity(
            id=_id(model.pk),
            usuario_id=_id(model.usuario_id),
            data_criacao=model.data_criacao,
            **dados
        )

    @classmethod
    def to_model(cls, entity: LojaEntity, model: Optional[Any] = None) -> Any:
        if model is None:
            model = get_model('lojas', 'Loja')(usuario_id=entity.usuario_id)
        for campo in cls.CAMPOS:
            setattr(model, campo, getattr(entity, campo))
        return model


class ProdutoMapper:
    """Mapeador para Produto."""

    @staticmethod
    def to_entity(model: Any, com_loja: bool = True) -> Optional[ProdutoEntity]:
        """Com com_loja, carrega a loja (precisa de select_related para evitar consultas extras)."""
        if not model: return None
        return ProdutoEntity(
            id=_id(model.pk),
            loja_id=_id(model.loja_id),
            nome=model.nome,
            descricao=model.descricao,
            preco=model.preco,
            imagens=list(model.imagens or []),
            disponivel=model.disponivel,
            data_criacao=model.data_criacao,
            loja=LojaMapper.to_entity(model.loja) if com_loja else None,
        )

    @staticmethod
    def to_model(entity: ProdutoEntity, model: Optional[Any] = None) -> Any:
        if model is None:
            model = get_model('lojas', 'Produto')(loja_id=entity.loja_id)
        model.nome = entity.nome
        model.descricao = entity.descricao
        model.preco = entity.preco
        model.imagens = list(entity.imagens)
        model.disponivel = entity.disponivel
        return model


# ====================================================================
# MAPPERS DE CARRINHO E PEDIDO
# ====================================================================

class ItemCarrinhoMapper:

    @staticmethod
    def to_entity(model: Any) -> Optional[ItemCarrinhoEntity]:
        if not model: return None
        return ItemCarrinhoEntity(
            id=_id(model.pk),
            carrinho_id=_id(model.carrinho_id),
            usuario_id=_id(model.carrinho.usuario_id),
            produto_id=_id(model.produto_id),
            quantidade=model.quantidade,
            produto=ProdutoMapper.to_entity(model.produto, com_loja=False),
        )


class CarrinhoMapper:

    @staticmethod
    def to_entity(model: Any) -> Optional[CarrinhoEntity]:
        if not model: return None
        # Usa o Prefetch (to_attr) quando disponível
        itens = getattr(model, 'itens_list_for_mapper', None)
        if itens is None:
            itens = model.itens.select_related('produto', 'carrinho')

        loja = LojaMapper.to_entity(model.loja)
        itens_entidade = [ItemCarrinhoMapper.to_entity(item) for item in itens]
        for item in itens_entidade:
            item.produto.loja = loja

        return CarrinhoEntity(
            id=_id(model.pk),
            usuario_id=_id(model.usuario_id),
            loja_id=_id(model.loja_id),
            loja=loja,
            itens=itens_entidade,
            data_criacao=model.data_criacao,
        )


class ItemPedidoMapper:

    @staticmethod
    def to_entity(model: Any) -> Optional[ItemPedidoEntity]:
        if not model: return None
        return ItemPedidoEntity(
            produto_id=_id(model.produto_id),
            nome_produto=model.nome_produto,
            preco_unitario=model.preco_unitario,
            quantidade=model.quantidade,
        )

    @staticmethod
    def to_model(entity: ItemPedidoEntity, pedido_id: int) -> Any:
        ItemPedidoModel = get_model('pedidos', 'ItemPedido')
        return ItemPedidoModel(
            pedido_id=pedido_id,
            produto_id=entity.produto_id,
            nome_produto=entity.nome_produto,
            preco_unitario=entity.preco_unitario,
            quantidade=entity.quantidade,
            subtotal=entity.subtotal,
        )


class PedidoMapper:

    @staticmethod
    def to_entity(model: Any) -> Optional[PedidoEntity]:
        if not model: return None
        itens = getattr(model, 'itens_list_for_mapper', None)
        if itens is None:
            itens = model.itens.all()
        return PedidoEntity(
            id=_id(model.pk),
            usuario_id=_id(model.usuario_id),
            loja_id=_id(model.loja_id),
            nome_loja=model.nome_loja,
            telefone_loja=model.telefone_loja,
            itens=[ItemPedidoMapper.to_entity(item) for item in itens],
            subtotal=model.subtotal,
            taxa_entrega=model.taxa_entrega,
            status=model.status,
            forma_pagamento=model.forma_pagamento,
            precisa_troco=model.precisa_troco,
            valor_troco=model.valor_troco,
            nome_cliente=model.nome_cliente,
            telefone_cliente=model.telefone_cliente,
            data_criacao=model.data_pedido,
        )

    @staticmethod
    def to_model(entity: PedidoEntity) -> Any:
        """Cria o modelo de um pedido novo. Pedidos existentes só mudam de status."""
        PedidoModel = get_model('pedidos', 'Pedido')
        return PedidoModel(
            usuario_id=entity.usuario_id,
            loja_id=entity.loja_id,
            nome_loja=entity.nome_loja,
            telefone_loja=entity.telefone_loja,
            subtotal=entity.subtotal,
            taxa_entrega=entity.taxa_entrega,
            total=entity.total,
            status=entity.status,
            forma_pagamento=entity.forma_pagamento,
            precisa_troco=entity.precisa_troco,
            valor_troco=entity.valor_troco,
            nome_cliente=entity.nome_cliente,
            telefone_cliente=entity.telefone_cliente,
        )


def mapear_lista(mapper, models: List[Any]) -> list:
    return [mapper.to_entity(model) for model in models]
