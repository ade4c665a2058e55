# tiagodelivery/core/use_cases.py
"""
Implementação dos Casos de Uso (Lógica de Negócio) da aplicação.
Esta camada depende apenas das Entidades e Portas (Interfaces) do Core,
garantindo o isolamento da lógica de negócio.
"""
import logging
import re
from typing import List, Optional, Dict, Any
from decimal import Decimal, InvalidOperation

# Entidades e Exceções
from tiagodelivery.core.entities import (
    ZERO, IdentidadeChamador, ResultadoEtapa, Loja, Produto, Carrinho,
    Pedido, ItemPedido, Usuario, Endereco
)
from tiagodelivery.core.exceptions import (
    DadosInvalidosError,
    TransicaoInvalidaError,
    AcessoNegadoError,
    ConflitoError,
    CarrinhoDeOutraLojaError,
    LojaNaoEncontradaError,
    ProdutoNaoEncontradoError,
    PedidoNaoEncontradoError,
    ItemCarrinhoNaoEncontradoError,
    EnderecoNaoEncontradoError,
    UsuarioNaoEncontradoError,
    IntegracaoTransitoriaError,
)

# Portas (Interfaces) - Importadas do tiagodelivery/core/ports.py
from tiagodelivery.core.ports import (
    ILojaRepository,
    IProdutoRepository,
    ICarrinhoRepository,
    IPedidoRepository,
    IUsuarioRepository,
    IEnderecoRepository,
    IEstatisticasRepository,
    IEmailService,
    ICepGateway,
)

logger = logging.getLogger(__name__)

SLUG_REGEX = re.compile(r'^[a-z0-9]+$')

QUANTIDADE_MAXIMA = 999

CAMPOS_ENDERECO = (
    ('cep', "CEP é obrigatório"),
    ('rua', "Rua é obrigatória"),
    ('numero', "Número é obrigatório"),
    ('bairro', "Bairro é obrigatório"),
    ('cidade', "Cidade é obrigatória"),
    ('estado', "Estado é obrigatório"),
)


# ====================================================================
# FUNÇÕES AUXILIARES DE CONVERSÃO
# ====================================================================

def _texto(valor) -> str:
    """Devolve o texto sem espaços nas bordas, ou '' para valores não textuais."""
    return valor.strip() if isinstance(valor, str) else ''


def _texto_opcional(valor) -> Optional[str]:
    return _texto(valor) or None


def _somente_digitos(valor) -> str:
    return re.sub(r'\D', '', valor) if isinstance(valor, str) else ''


def _decimal(valor) -> Optional[Decimal]:
    """Converte para Decimal. None para ausente; ValueError para valor inválido."""
    if valor is None or valor == '':
        return None
    if isinstance(valor, bool):
        raise ValueError("Booleano não é um valor monetário.")
    try:
        convertido = valor if isinstance(valor, Decimal) else Decimal(str(valor))
    except InvalidOperation as e:
        raise ValueError(f"Valor inválido: {valor!r}") from e
    if not convertido.is_finite():
        raise ValueError(f"Valor inválido: {valor!r}")
    return convertido


def _valor_positivo(valor) -> Optional[Decimal]:
    """Decimal estritamente positivo, ou None se ausente/inválido."""
    try:
        convertido = _decimal(valor)
    except ValueError:
        return None
    if convertido is None or convertido <= 0:
        return None
    return convertido


def _inteiro(valor) -> int:
    """Converte para int sem truncar: 2, '2' e 2.0 passam; 1.9 e 'abc' levantam ValueError."""
    convertido = _decimal(valor)
    if convertido is None or convertido != convertido.to_integral_value():
        raise ValueError(f"Quantidade não inteira: {valor!r}")
    return int(convertido)


def _quantidade(valor, padrao: Optional[int] = None) -> int:
    if valor is None and padrao is not None:
        return padrao
    try:
        quantidade = _inteiro(valor)
    except ValueError:
        raise DadosInvalidosError("Quantidade inválida")
    if quantidade > QUANTIDADE_MAXIMA:
        raise DadosInvalidosError(f"A quantidade máxima por item é {QUANTIDADE_MAXIMA}.")
    return quantidade


def _validar_valor_opcional(dados: dict, chave: str, mensagem: str, erros: List[str]) -> Optional[Decimal]:
    """Valida campos monetários opcionais (não negativos) acumulando a mensagem de erro."""
    try:
        valor = _decimal(dados.get(chave))
    except ValueError:
        erros.append(mensagem)
        return None
    if valor is not None and valor < 0:
        erros.append(mensagem)
        return None
    return valor


# ====================================================================
# 1. CASOS DE USO DO CATÁLOGO (LOJAS)
# ====================================================================

class GerenciarLojasUseCase:
    """Diretório de lojas: busca por slug/filtro e cadastro pelo dono."""

    def __init__(self, loja_repo: ILojaRepository):
        self.loja_repo = loja_repo

    def _anotar(self, loja: Loja, identidade: Optional[IdentidadeChamador]) -> Loja:
        loja.is_owner = loja.pertence_a(identidade)
        return loja

    def buscar_por_slug(self, slug: str, identidade: Optional[IdentidadeChamador] = None) -> Loja:
        loja = self.loja_repo.buscar_por_slug(_texto(slug))
        if not loja:
            raise LojaNaoEncontradaError()
        return self._anotar(loja, identidade)

    def buscar_por_id(self, loja_id: str, identidade: Optional[IdentidadeChamador] = None) -> Loja:
        loja = self.loja_repo.buscar_por_id(loja_id)
        if not loja:
            raise LojaNaoEncontradaError()
        return self._anotar(loja, identidade)

    def listar(
        self,
        cidade: Optional[str] = None,
        estado: Optional[str] = None,
        identidade: Optional[IdentidadeChamador] = None
    ) -> List[Loja]:
        """Lista lojas filtrando por cidade (sem diferenciar maiúsculas) e estado (exato)."""
        lojas = self.loja_repo.listar(cidade=_texto_opcional(cidade), estado=_texto_opcional(estado))
        return [self._anotar(loja, identidade) for loja in lojas]

    # --- Cadastro ---

    def _validar(self, dados: dict) -> List[str]:
        erros = []
        if not _texto(dados.get('nome')):
            erros.append("Nome da loja é obrigatório")

        slug = _texto(dados.get('slug'))
        if not slug:
            erros.append("Identificação única é obrigatória")
        elif not SLUG_REGEX.match(slug):
            erros.append("Identificação deve conter apenas letras minúsculas e números")

        if not _texto(dados.get('categoria')):
            erros.append("Categoria é obrigatória")
        if not _texto(dados.get('cnpj')):
            erros.append("CNPJ é obrigatório")
        if not _texto(dados.get('telefone')):
            erros.append("Telefone é obrigatório")
        if not _texto(dados.get('email')):
            erros.append("Email é obrigatório")

        endereco = dados.get('endereco')
        if not isinstance(endereco, dict):
            erros.append("Endereço é obrigatório")
        else:
            for chave, mensagem in CAMPOS_ENDERECO:
                if not _texto(endereco.get(chave)):
                    erros.append(mensagem)

        _validar_valor_opcional(dados, 'pedido_minimo', "Pedido mínimo inválido", erros)
        _validar_valor_opcional(dados, 'taxa_entrega', "Taxa de entrega inválida", erros)
        _validar_valor_opcional(dados, 'frete_gratis_acima', "Valor para frete grátis inválido", erros)
        return erros

    def _verificar_unicidade(self, slug: str, cnpj: str, loja_atual: Optional[Loja] = None):
        conflitos = []
        existente = self.loja_repo.buscar_por_slug(slug)
        if existente and (loja_atual is None or str(existente.id) != str(loja_atual.id)):
            conflitos.append("Esta identificação já está em uso")

        existente = self.loja_repo.buscar_por_cnpj(cnpj)
        if existente and (loja_atual is None or str(existente.id) != str(loja_atual.id)):
            conflitos.append("CNPJ já cadastrado. Uma loja com este CNPJ já existe no sistema.")

        if conflitos:
            raise ConflitoError(conflitos)

    def _montar_loja(self, dados: dict, usuario_id: str, loja_atual: Optional[Loja] = None) -> Loja:
        endereco = dados['endereco']
        return Loja(
            id=loja_atual.id if loja_atual else None,
            usuario_id=usuario_id,
            nome=_texto(dados.get('nome')),
            slug=_texto(dados.get('slug')),
            descricao=_texto_opcional(dados.get('descricao')),
            imagem=_texto_opcional(dados.get('imagem')),
            categoria=_texto(dados.get('categoria')),
            cnpj=_texto(dados.get('cnpj')),
            telefone=_texto(dados.get('telefone')),
            email=_texto(dados.get('email')),
            pedido_minimo=_decimal(dados.get('pedido_minimo')) or None,
            taxa_entrega=_decimal(dados.get('taxa_entrega')) or None,
            frete_gratis_acima=_decimal(dados.get('frete_gratis_acima')) or None,
            rua=_texto(endereco.get('rua')),
            numero=_texto(endereco.get('numero')),
            complemento=_texto_opcional(endereco.get('complemento')),
            bairro=_texto(endereco.get('bairro')),
            cidade=_texto(endereco.get('cidade')),
            estado=_texto(endereco.get('estado')),
            cep=_texto(endereco.get('cep')),
            aberta=loja_atual.aberta if loja_atual else True,
            data_criacao=loja_atual.data_criacao if loja_atual else None,
        )

    def criar(self, identidade: IdentidadeChamador, dados: dict) -> Loja:
        erros = self._validar(dados)
        if erros:
            raise DadosInvalidosError(erros)

        self._verificar_unicidade(_texto(dados.get('slug')), _texto(dados.get('cnpj')))

        loja = self.loja_repo.salvar(self._montar_loja(dados, identidade.usuario_id))
        logger.info("Loja %s (%s) criada pelo usuário %s.", loja.id, loja.slug, identidade.usuario_id)
        return self._anotar(loja, identidade)

    def _loja_do_dono(self, identidade: IdentidadeChamador, loja_id: str) -> Loja:
        loja = self.loja_repo.buscar_por_id(loja_id) if loja_id else None
        if not loja:
            raise LojaNaoEncontradaError()
        if not loja.pertence_a(identidade):
            raise AcessoNegadoError("Você não tem permissão para alterar esta loja.")
        return loja

    def atualizar(self, identidade: IdentidadeChamador, loja_id: str, dados: dict) -> Loja:
        loja_atual = self._loja_do_dono(identidade, loja_id)

        erros = self._validar(dados)
        if erros:
            raise DadosInvalidosError(erros)

        self._verificar_unicidade(_texto(dados.get('slug')), _texto(dados.get('cnpj')), loja_atual)

        loja = self.loja_repo.salvar(self._montar_loja(dados, loja_atual.usuario_id, loja_atual))
        return self._anotar(loja, identidade)

    def deletar(self, identidade: IdentidadeChamador, loja_id: str) -> None:
        loja = self._loja_do_dono(identidade, loja_id)
        self.loja_repo.deletar(loja.id)
        logger.info("Loja %s removida pelo usuário %s.", loja.id, identidade.usuario_id)

    def alternar_aberta(self, identidade: IdentidadeChamador, loja_id: str) -> Loja:
        """Abre/fecha a loja. Apenas o dono pode alterar; nenhum efeito em cascata."""
        loja = self._loja_do_dono(identidade, loja_id)
        loja = self.loja_repo.definir_aberta(loja.id, not loja.aberta)
        return self._anotar(loja, identidade)


class GerenciarProdutosUseCase:
    """Caso de Uso para listagem pública e gestão (pelo dono da loja) de produtos."""

    def __init__(self, produto_repo: IProdutoRepository, loja_repo: ILojaRepository):
        self.produto_repo = produto_repo
        self.loja_repo = loja_repo

    def listar_por_loja(self, loja_id: str) -> List[Produto]:
        loja = self.loja_repo.buscar_por_id(loja_id)
        if not loja:
            raise LojaNaoEncontradaError()
        produtos = self.produto_repo.listar_por_loja(loja.id)
        for produto in produtos:
            produto.loja = loja
        return produtos

    def detalhar(self, produto_id: str) -> Produto:
        produto = self.produto_repo.buscar_por_id(produto_id)
        if not produto:
            raise ProdutoNaoEncontradoError()
        return produto

    def _validar(self, dados: dict) -> List[str]:
        erros = []
        if not _texto(dados.get('nome')):
            erros.append("Nome do produto é obrigatório")
        if _valor_positivo(dados.get('preco')) is None:
            erros.append("Preço deve ser maior que zero")
        imagens = dados.get('imagens')
        if imagens is not None and not all(isinstance(imagem, str) for imagem in imagens):
            erros.append("Imagens inválidas")
        return erros

    def _loja_do_dono(self, identidade: IdentidadeChamador, loja_id: str) -> Loja:
        loja = self.loja_repo.buscar_por_id(loja_id)
        if not loja:
            raise LojaNaoEncontradaError()
        if not loja.pertence_a(identidade):
            raise AcessoNegadoError("Você não tem permissão para gerenciar produtos desta loja.")
        return loja

    def _montar(self, dados: dict, loja_id: str, atual: Optional[Produto] = None) -> Produto:
        disponivel = dados.get('disponivel')
        return Produto(
            id=atual.id if atual else None,
            loja_id=loja_id,
            nome=_texto(dados.get('nome')),
            descricao=_texto_opcional(dados.get('descricao')),
            preco=_valor_positivo(dados.get('preco')),
            imagens=[_texto(imagem) for imagem in (dados.get('imagens') or []) if _texto(imagem)],
            disponivel=True if disponivel is None else bool(disponivel),
        )

    def criar(self, identidade: IdentidadeChamador, dados: dict) -> Produto:
        loja_id = dados.get('loja_id')
        if not loja_id:
            raise DadosInvalidosError("ID da loja é obrigatório")
        loja = self._loja_do_dono(identidade, loja_id)

        erros = self._validar(dados)
        if erros:
            raise DadosInvalidosError(erros)

        produto = self.produto_repo.salvar(self._montar(dados, loja.id))
        produto.loja = loja
        return produto

    def atualizar(self, identidade: IdentidadeChamador, produto_id: str, dados: dict) -> Produto:
        atual = self.detalhar(produto_id)
        loja = self._loja_do_dono(identidade, atual.loja_id)

        erros = self._validar(dados)
        if erros:
            raise DadosInvalidosError(erros)

        produto = self.produto_repo.salvar(self._montar(dados, loja.id, atual))
        produto.loja = loja
        return produto

    def deletar(self, identidade: IdentidadeChamador, produto_id: str) -> None:
        produto = self.detalhar(produto_id)
        self._loja_do_dono(identidade, produto.loja_id)
        self.produto_repo.deletar(produto.id)


# ====================================================================
# 2. CASOS DE USO DO CARRINHO
# ====================================================================

class GerenciarCarrinhoUseCase:
    """
    Caso de Uso que centraliza a lógica de gestão do carrinho (adicionar, atualizar,
    remover, limpar). Cada usuário tem no máximo um carrinho, sempre de uma única loja.
    """
    def __init__(self, carrinho_repo: ICarrinhoRepository, produto_repo: IProdutoRepository):
        self.carrinho_repo = carrinho_repo
        self.produto_repo = produto_repo

    def obter_carrinho(self, identidade: IdentidadeChamador) -> Optional[Carrinho]:
        """Devolve o carrinho atual do usuário, ou None quando não existe."""
        return self.carrinho_repo.buscar_por_usuario(identidade.usuario_id)

    def adicionar_item(self, identidade: IdentidadeChamador, produto_id: str, quantidade=None) -> Carrinho:
        """Adiciona ou incrementa um item. Rejeita produtos de outra loja se o carrinho tiver itens."""
        quantidade = _quantidade(quantidade, padrao=1)
        if quantidade < 1:
            raise DadosInvalidosError("A quantidade deve ser maior que zero.")

        produto = self.produto_repo.buscar_por_id(produto_id) if produto_id else None
        if not produto:
            raise ProdutoNaoEncontradoError()

        carrinho = self.carrinho_repo.buscar_por_usuario(identidade.usuario_id)
        if carrinho and str(carrinho.loja_id) != str(produto.loja_id):
            if not carrinho.vazio:
                raise CarrinhoDeOutraLojaError(carrinho.loja_id)
            self.carrinho_repo.deletar(carrinho.id)
            carrinho = None

        if not produto.pode_ser_pedido:
            raise DadosInvalidosError("Produto indisponível para pedidos no momento.")

        if carrinho is None:
            carrinho = self.carrinho_repo.criar(identidade.usuario_id, produto.loja_id)
        else:
            existente = carrinho.buscar_item_por_produto(produto.id)
            if existente and existente.quantidade + quantidade > QUANTIDADE_MAXIMA:
                raise DadosInvalidosError(f"A quantidade máxima por item é {QUANTIDADE_MAXIMA}.")

        self.carrinho_repo.adicionar_item(carrinho.id, produto.id, quantidade)
        return self.carrinho_repo.buscar_por_usuario(identidade.usuario_id)

    def _item_do_usuario(self, identidade: IdentidadeChamador, item_id: str):
        item = self.carrinho_repo.buscar_item(item_id)
        if not item:
            raise ItemCarrinhoNaoEncontradoError()
        if str(item.usuario_id) != str(identidade.usuario_id):
            raise AcessoNegadoError("Este item não pertence ao seu carrinho.")
        return item

    def atualizar_quantidade(self, identidade: IdentidadeChamador, item_id: str, quantidade) -> Optional[Carrinho]:
        """Sobrescreve a quantidade. Quantidades abaixo de 1 devem usar a remoção."""
        quantidade = _quantidade(quantidade)
        if quantidade < 1:
            raise DadosInvalidosError("A quantidade deve ser no mínimo 1. Para tirar o item, remova-o do carrinho.")

        item = self._item_do_usuario(identidade, item_id)
        self.carrinho_repo.atualizar_quantidade(item.id, quantidade)
        return self.carrinho_repo.buscar_por_usuario(identidade.usuario_id)

    def remover_item(self, identidade: IdentidadeChamador, item_id: str) -> Optional[Carrinho]:
        """Remove um item; se era o último, o carrinho também é apagado."""
        item = self._item_do_usuario(identidade, item_id)
        restantes = self.carrinho_repo.remover_item(item.id)
        if restantes == 0:
            self.carrinho_repo.deletar(item.carrinho_id)
            return None
        return self.carrinho_repo.buscar_por_usuario(identidade.usuario_id)

    def limpar(self, identidade: IdentidadeChamador, loja_id: Optional[str] = None) -> None:
        """Apaga o carrinho do usuário. Limpar um carrinho inexistente não é erro."""
        removidos = self.carrinho_repo.limpar(identidade.usuario_id, loja_id)
        logger.debug("Carrinho do usuário %s limpo (%s removido(s)).", identidade.usuario_id, removidos)


# ====================================================================
# 3. CASOS DE USO DE PEDIDO E CHECKOUT
# ====================================================================

class CriarPedidoUseCase:
    """
    Caso de Uso que coordena o checkout: validação, gravação do pedido (escrita
    autoritativa) e, depois, as etapas de melhor esforço (e-mail para a loja e
    limpeza do carrinho), que nunca desfazem o pedido.
    """
    def __init__(self,
                 pedido_repo: IPedidoRepository,
                 loja_repo: ILojaRepository,
                 carrinho_repo: ICarrinhoRepository,
                 email_service: IEmailService):

        self.pedido_repo = pedido_repo
        self.loja_repo = loja_repo
        self.carrinho_repo = carrinho_repo
        self.email_service = email_service

    def _montar_itens(self, itens: list, erros: List[str]) -> List[ItemPedido]:
        snapshot = []
        for posicao, item in enumerate(itens, start=1):
            try:
                if not isinstance(item, dict):
                    raise ValueError("Item não é um objeto.")
                nome = _texto(item.get('nome_produto'))
                preco = _decimal(item.get('preco_unitario'))
                quantidade = _inteiro(item.get('quantidade'))
                if not nome or preco is None or preco < 0 or not 1 <= quantidade <= QUANTIDADE_MAXIMA:
                    raise ValueError("Campos do item ausentes ou inválidos.")
            except (TypeError, ValueError):
                erros.append(f"Item {posicao} do pedido é inválido")
                continue
            produto_id = item.get('produto_id')
            snapshot.append(ItemPedido(
                produto_id=str(produto_id) if produto_id else None,
                nome_produto=nome,
                preco_unitario=preco,
                quantidade=quantidade,
            ))
        return snapshot

    def _validar(self, dados: dict):
        erros = []
        if not dados.get('loja_id'):
            erros.append("ID da loja é obrigatório")

        itens = dados.get('itens')
        snapshot = []
        if not isinstance(itens, list) or not itens:
            erros.append("Items do pedido são obrigatórios")
        else:
            snapshot = self._montar_itens(itens, erros)

        subtotal = _valor_positivo(dados.get('subtotal'))
        if subtotal is None:
            erros.append("Subtotal inválido")
        total = _valor_positivo(dados.get('total'))
        if total is None:
            erros.append("Total inválido")

        taxa_entrega = _validar_valor_opcional(dados, 'taxa_entrega', "Taxa de entrega inválida", erros)

        valor_troco = None
        if dados.get('precisa_troco'):
            valor_troco = _validar_valor_opcional(dados, 'valor_troco', "Valor do troco inválido", erros)

        if erros:
            raise DadosInvalidosError(erros)
        return snapshot, subtotal, total, taxa_entrega or ZERO, valor_troco

    def executar(self, identidade: IdentidadeChamador, dados: dict) -> Pedido:
        """Processa o checkout e devolve o pedido criado com status 'pending'."""
        itens, subtotal, total_informado, taxa_entrega, valor_troco = self._validar(dados)

        # 1. Loja
        loja = self.loja_repo.buscar_por_id(dados['loja_id'])
        if not loja:
            raise LojaNaoEncontradaError()

        nome_cliente = _texto(dados.get('nome_cliente')) or identidade.nome or None
        pedido = Pedido(
            usuario_id=identidade.usuario_id,
            loja_id=loja.id,
            nome_loja=loja.nome,
            telefone_loja=loja.telefone,
            itens=itens,
            subtotal=subtotal,
            taxa_entrega=taxa_entrega,
            forma_pagamento=_texto_opcional(dados.get('forma_pagamento')),
            precisa_troco=bool(dados.get('precisa_troco')),
            valor_troco=valor_troco,
            nome_cliente=nome_cliente,
            telefone_cliente=_texto_opcional(dados.get('telefone_cliente')),
        )
        if pedido.total != total_informado:
            logger.warning(
                "Total informado (%s) difere de subtotal + taxa (%s); prevalece o valor calculado.",
                total_informado, pedido.total
            )

        # 2. Escrita autoritativa: se falhar, o erro sobe para o cliente.
        pedido = self.pedido_repo.criar(pedido)
        logger.info("Pedido %s criado para a loja %s (total %s).", pedido.id, loja.id, pedido.total)

        # 3 e 4. Etapas de melhor esforço
        for resultado in (
            self._notificar_loja(pedido, loja, nome_cliente or "Cliente"),
            self._limpar_carrinho(identidade, loja.id),
        ):
            if not resultado.sucesso:
                logger.warning("Pedido %s: etapa '%s' falhou e foi ignorada: %s",
                               pedido.id, resultado.etapa, resultado.erro)

        return pedido

    def _notificar_loja(self, pedido: Pedido, loja: Loja, nome_cliente: str) -> ResultadoEtapa:
        etapa = 'notificacao_loja'
        if not loja.email:
            logger.info("Loja %s sem e-mail cadastrado; notificação não enviada.", loja.id)
            return ResultadoEtapa.ok(etapa)
        try:
            self.email_service.enviar_notificacao_pedido_loja(pedido, loja.email, nome_cliente)
        except Exception as e:
            return ResultadoEtapa.falha(etapa, e)
        return ResultadoEtapa.ok(etapa)

    def _limpar_carrinho(self, identidade: IdentidadeChamador, loja_id: str) -> ResultadoEtapa:
        etapa = 'limpeza_carrinho'
        try:
            self.carrinho_repo.limpar(identidade.usuario_id, loja_id)
        except Exception as e:
            return ResultadoEtapa.falha(etapa, e)
        return ResultadoEtapa.ok(etapa)


class ConsultarPedidosUseCase:
    """Leitura de pedidos: o cliente vê as suas compras, o dono da loja vê os pedidos da loja."""

    def __init__(self, pedido_repo: IPedidoRepository, loja_repo: ILojaRepository):
        self.pedido_repo = pedido_repo
        self.loja_repo = loja_repo

    def detalhar(self, identidade: IdentidadeChamador, pedido_id: str) -> Pedido:
        pedido = self.pedido_repo.buscar_por_id(pedido_id)
        if not pedido:
            raise PedidoNaoEncontradoError()

        if str(pedido.usuario_id) != str(identidade.usuario_id):
            loja = self.loja_repo.buscar_por_id(pedido.loja_id)
            if not loja or not loja.pertence_a(identidade):
                raise AcessoNegadoError("Você não tem permissão para ver este pedido")
        return pedido

    def listar(
        self,
        identidade: IdentidadeChamador,
        loja_id: Optional[str] = None,
        como_loja: bool = False
    ) -> List[Pedido]:
        """Com como_loja, a posse da loja é revalidada; a flag sozinha não autoriza nada."""
        if como_loja and loja_id:
            loja = self.loja_repo.buscar_por_id(loja_id)
            if not loja or not loja.pertence_a(identidade):
                raise AcessoNegadoError("Você não tem permissão para ver estes pedidos")
            return self.pedido_repo.listar_por_loja(loja.id)

        return self.pedido_repo.listar_por_usuario(identidade.usuario_id, loja_id=loja_id)


class AtualizarStatusPedidoUseCase:
    """Avança o pedido na sequência fixa de status. Apenas o dono da loja pode fazê-lo."""

    def __init__(self, pedido_repo: IPedidoRepository, loja_repo: ILojaRepository):
        self.pedido_repo = pedido_repo
        self.loja_repo = loja_repo

    def executar(self, identidade: IdentidadeChamador, pedido_id: str, novo_status: str) -> Pedido:
        pedido = self.pedido_repo.buscar_por_id(pedido_id)
        if not pedido:
            raise PedidoNaoEncontradoError()

        loja = self.loja_repo.buscar_por_id(pedido.loja_id)
        if not loja or not loja.pertence_a(identidade):
            raise AcessoNegadoError("Apenas o dono da loja pode alterar o status do pedido.")

        novo_status = _texto(novo_status)
        if not pedido.pode_transicionar_para(novo_status):
            raise TransicaoInvalidaError(pedido.status, novo_status)

        # A gravação é condicionada ao status lido, evitando avançar duas vezes.
        atualizado = self.pedido_repo.atualizar_status(pedido.id, novo_status, status_atual=pedido.status)
        if atualizado is None:
            raise TransicaoInvalidaError(pedido.status, novo_status)

        logger.info("Pedido %s: %s -> %s (usuário %s).",
                    pedido.id, pedido.status, novo_status, identidade.usuario_id)
        return atualizado


# ====================================================================
# 4. CASOS DE USO DE PERFIL E ENDEREÇOS
# ====================================================================

class GerenciarPerfilUseCase:
    """Consulta, edição e exclusão da própria conta."""

    def __init__(self, usuario_repo: IUsuarioRepository):
        self.usuario_repo = usuario_repo

    def obter(self, identidade: IdentidadeChamador) -> Usuario:
        usuario = self.usuario_repo.buscar_por_id(identidade.usuario_id)
        if not usuario:
            raise UsuarioNaoEncontradoError()
        return usuario

    def atualizar(self, identidade: IdentidadeChamador, dados: dict) -> Usuario:
        usuario = self.obter(identidade)
        erros = []

        cpf = _somente_digitos(dados.get('cpf'))
        if cpf and len(cpf) != 11:
            erros.append("CPF deve conter 11 dígitos")

        whatsapp = _somente_digitos(dados.get('whatsapp'))
        if whatsapp and not (10 <= len(whatsapp) <= 11):
            erros.append("WhatsApp deve conter DDD e número (10 ou 11 dígitos)")

        ddi = _somente_digitos(dados.get('whatsapp_ddi')) or usuario.whatsapp_ddi or '55'
        consentimento = bool(dados.get('whatsapp_consentimento'))
        if consentimento and not whatsapp:
            erros.append("Informe o WhatsApp para autorizar o contato")

        if erros:
            raise DadosInvalidosError(erros)

        if cpf:
            existente = self.usuario_repo.buscar_por_cpf(cpf)
            if existente and str(existente.id) != str(usuario.id):
                raise ConflitoError("CPF já cadastrado em outra conta")

        usuario.nome_completo = _texto_opcional(dados.get('nome_completo'))
        usuario.data_nascimento = dados.get('data_nascimento')
        usuario.cpf = cpf or None
        usuario.whatsapp = whatsapp or None
        usuario.whatsapp_ddi = ddi
        usuario.whatsapp_consentimento = consentimento
        return self.usuario_repo.atualizar_perfil(usuario)

    def excluir_conta(self, identidade: IdentidadeChamador, usuario_id: Optional[str] = None) -> None:
        """A conta só pode ser excluída pelo próprio usuário."""
        if usuario_id is not None and str(usuario_id) != str(identidade.usuario_id):
            raise AcessoNegadoError("Você só pode excluir a sua própria conta.")
        self.obter(identidade)
        self.usuario_repo.deletar(identidade.usuario_id)
        logger.info("Conta do usuário %s excluída.", identidade.usuario_id)


class GerenciarEnderecosUseCase:
    """Endereços do usuário, com no máximo um principal e preenchimento por CEP."""

    def __init__(self, endereco_repo: IEnderecoRepository, cep_gateway: ICepGateway):
        self.endereco_repo = endereco_repo
        self.cep_gateway = cep_gateway

    def listar(self, identidade: IdentidadeChamador) -> List[Endereco]:
        return self.endereco_repo.listar_por_usuario(identidade.usuario_id)

    def consultar_cep(self, cep: str) -> Optional[Dict[str, str]]:
        """Consulta de melhor esforço: devolve None se o CEP for inválido ou o serviço falhar."""
        digitos = _somente_digitos(cep)
        if len(digitos) != 8:
            return None
        try:
            return self.cep_gateway.consultar(digitos)
        except IntegracaoTransitoriaError as e:
            logger.warning("Consulta do CEP %s falhou: %s", digitos, e)
            return None

    def _completar_com_cep(self, dados: dict) -> dict:
        faltantes = [chave for chave in ('rua', 'bairro', 'cidade', 'estado') if not _texto(dados.get(chave))]
        if not faltantes:
            return dados
        encontrado = self.consultar_cep(dados.get('cep'))
        if not encontrado:
            return dados
        completos = dict(dados)
        for chave in faltantes:
            if encontrado.get(chave):
                completos[chave] = encontrado[chave]
        return completos

    def _validar(self, dados: dict):
        erros = [mensagem for chave, mensagem in CAMPOS_ENDERECO if not _texto(dados.get(chave))]
        if erros:
            raise DadosInvalidosError(erros)

    def _montar(self, dados: dict, usuario_id: str, endereco_id: Optional[str] = None) -> Endereco:
        return Endereco(
            id=endereco_id,
            usuario_id=usuario_id,
            rua=_texto(dados.get('rua')),
            numero=_texto(dados.get('numero')),
            complemento=_texto_opcional(dados.get('complemento')),
            bairro=_texto(dados.get('bairro')),
            cidade=_texto(dados.get('cidade')),
            estado=_texto(dados.get('estado')),
            cep=_texto(dados.get('cep')),
            is_principal=bool(dados.get('is_principal')),
        )

    def criar(self, identidade: IdentidadeChamador, dados: dict) -> Endereco:
        dados = self._completar_com_cep(dados)
        self._validar(dados)
        return self.endereco_repo.salvar(self._montar(dados, identidade.usuario_id))

    def _endereco_do_usuario(self, identidade: IdentidadeChamador, endereco_id: str) -> Endereco:
        endereco = self.endereco_repo.buscar_por_id(endereco_id) if endereco_id else None
        if not endereco:
            raise EnderecoNaoEncontradoError()
        if str(endereco.usuario_id) != str(identidade.usuario_id):
            raise AcessoNegadoError("Este endereço não pertence a você.")
        return endereco

    def atualizar(self, identidade: IdentidadeChamador, endereco_id: str, dados: dict) -> Endereco:
        endereco = self._endereco_do_usuario(identidade, endereco_id)
        self._validar(dados)
        return self.endereco_repo.salvar(self._montar(dados, identidade.usuario_id, endereco.id))

    def deletar(self, identidade: IdentidadeChamador, endereco_id: str) -> None:
        endereco = self._endereco_do_usuario(identidade, endereco_id)
        self.endereco_repo.deletar(endereco.id)


# ====================================================================
# 5. CASOS DE USO ADMINISTRATIVOS
# ====================================================================

class PainelAdminUseCase:
    """Estatísticas gerais da plataforma, restritas à equipe (is_staff)."""

    def __init__(self, estatisticas_repo: IEstatisticasRepository):
        self.estatisticas_repo = estatisticas_repo

    def executar(self, identidade: IdentidadeChamador, limite: int = 5) -> Dict[str, Any]:
        if not identidade.is_staff:
            raise AcessoNegadoError("Acesso restrito a administradores")
        return {
            'estatisticas': self.estatisticas_repo.obter_estatisticas(),
            'pedidos_recentes': self.estatisticas_repo.pedidos_recentes(limite),
            'lojas_recentes': self.estatisticas_repo.lojas_recentes(limite),
            'usuarios_recentes': self.estatisticas_repo.usuarios_recentes(limite),
        }
