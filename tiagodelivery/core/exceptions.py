from typing import List, Optional


class BaseErroCore(Exception):
    """Classe base para todas as exceções da Camada Core."""
    pass


# ===============================================
# ERROS DE VALIDAÇÃO
# ===============================================

class DadosInvalidosError(BaseErroCore):
    """Erro levantado quando dados inválidos são fornecidos. Carrega a lista de mensagens por campo."""
    def __init__(self, erros=None, message="Os dados fornecidos são inválidos."):
        if isinstance(erros, str):
            erros = [erros]
        self.erros: List[str] = list(erros or [message])
        self.message = self.erros[0]
        super().__init__(self.message)


class TransicaoInvalidaError(DadosInvalidosError):
    """Erro levantado ao pedir uma mudança de status fora da tabela de transições."""
    def __init__(self, status_atual: str, status_solicitado: str, message=None):
        self.status_atual = status_atual
        self.status_solicitado = status_solicitado
        if message is None:
            message = (f"Transição inválida: o pedido está '{status_atual}' "
                       f"e não pode ir para '{status_solicitado}'.")
        super().__init__([message])


# ===============================================
# ERROS DE IDENTIDADE E PERMISSÃO
# ===============================================

class NaoAutenticadoError(BaseErroCore):
    """Erro levantado quando não há sessão válida."""
    def __init__(self, message="Não autorizado"):
        self.message = message
        super().__init__(self.message)


class AcessoNegadoError(BaseErroCore):
    """Erro levantado quando a identidade não é dona do recurso."""
    def __init__(self, message="Você não tem permissão para realizar esta ação."):
        self.message = message
        super().__init__(self.message)


# ===============================================
# ERROS DE PERSISTÊNCIA E ENTIDADE
# ===============================================

class ItemNaoEncontradoError(BaseErroCore):
    """Erro levantado quando um item (genérico) não é encontrado."""
    def __init__(self, message="O item solicitado não foi encontrado."):
        self.message = message
        super().__init__(self.message)


class LojaNaoEncontradaError(ItemNaoEncontradoError):
    def __init__(self, message="Loja não encontrada"):
        super().__init__(message)


class ProdutoNaoEncontradoError(ItemNaoEncontradoError):
    def __init__(self, message="Produto não encontrado"):
        super().__init__(message)


class PedidoNaoEncontradoError(ItemNaoEncontradoError):
    def __init__(self, message="Pedido não encontrado"):
        super().__init__(message)


class ItemCarrinhoNaoEncontradoError(ItemNaoEncontradoError):
    def __init__(self, message="Item do carrinho não encontrado"):
        super().__init__(message)


class EnderecoNaoEncontradoError(ItemNaoEncontradoError):
    def __init__(self, message="Endereço não encontrado"):
        super().__init__(message)


class UsuarioNaoEncontradoError(ItemNaoEncontradoError):
    def __init__(self, message="Usuário não encontrado"):
        super().__init__(message)


# ===============================================
# ERROS DE CONFLITO
# ===============================================

class ConflitoError(BaseErroCore):
    """Violação de unicidade (slug, CNPJ, CPF) ou conflito de estado (carrinho de outra loja)."""
    def __init__(self, erros=None, message="Conflito com um registro existente."):
        if isinstance(erros, str):
            erros = [erros]
        self.erros: List[str] = list(erros or [message])
        self.message = self.erros[0]
        super().__init__(self.message)


class CarrinhoDeOutraLojaError(ConflitoError):
    """O usuário já tem itens de outra loja no carrinho."""
    def __init__(self, loja_id: Optional[str] = None, message=None):
        self.loja_id = loja_id
        if message is None:
            message = ("O carrinho pertence a outra loja. Finalize ou limpe o carrinho atual "
                       "antes de adicionar produtos desta loja.")
        super().__init__([message])


# ===============================================
# ERROS DE INTEGRAÇÃO (SEMPRE TRATADOS LOCALMENTE)
# ===============================================

class IntegracaoTransitoriaError(BaseErroCore):
    """Falha de serviço externo (e-mail, consulta de CEP). Nunca chega ao cliente."""
    def __init__(self, message="Falha ao comunicar com serviço externo."):
        self.message = message
        super().__init__(self.message)
