# tiagodelivery/core/ports.py
"""
Definição das Portas (Interfaces/Protocolos) da Arquitetura Limpa.

Estes protocolos definem o contrato que a camada de Infraestrutura (Repositórios, Gateways)
DEVE seguir para se conectar à camada Core (Casos de Uso).
"""

from typing import Protocol, List, Optional, Dict, Any
from abc import abstractmethod

from tiagodelivery.core.entities import (
    Loja, Produto, Carrinho, ItemCarrinho, Pedido, Usuario, Endereco
)


# ====================================================================
# 1. REPOSITÓRIOS (Portas de Persistência)
# ====================================================================

class ILojaRepository(Protocol):
    """Protocolo para a persistência e busca de Lojas."""

    @abstractmethod
    def buscar_por_id(self, loja_id: str) -> Optional[Loja]: ...

    @abstractmethod
    def buscar_por_slug(self, slug: str) -> Optional[Loja]: ...

    @abstractmethod
    def buscar_por_cnpj(self, cnpj: str) -> Optional[Loja]: ...

    @abstractmethod
    def listar(self, cidade: Optional[str] = None, estado: Optional[str] = None) -> List[Loja]: ...

    @abstractmethod
    def salvar(self, loja: Loja) -> Loja: ...

    @abstractmethod
    def definir_aberta(self, loja_id: str, aberta: bool) -> Loja: ...

    @abstractmethod
    def deletar(self, loja_id: str) -> None: ...


class IProdutoRepository(Protocol):
    """Protocolo para a persistência e busca de Produtos."""

    @abstractmethod
    def buscar_por_id(self, produto_id: str) -> Optional[Produto]: ...

    @abstractmethod
    def listar_por_loja(self, loja_id: str) -> List[Produto]: ...

    @abstractmethod
    def salvar(self, produto: Produto) -> Produto: ...

    @abstractmethod
    def deletar(self, produto_id: str) -> None: ...


class ICarrinhoRepository(Protocol):
    """Protocolo para a persistência de Carrinhos (um carrinho ativo por usuário)."""

    @abstractmethod
    def buscar_por_usuario(self, usuario_id: str) -> Optional[Carrinho]: ...

    @abstractmethod
    def criar(self, usuario_id: str, loja_id: str) -> Carrinho: ...

    @abstractmethod
    def adicionar_item(self, carrinho_id: str, produto_id: str, quantidade: int) -> None: ...

    @abstractmethod
    def buscar_item(self, item_id: str) -> Optional[ItemCarrinho]: ...

    @abstractmethod
    def atualizar_quantidade(self, item_id: str, quantidade: int) -> None: ...

    @abstractmethod
    def remover_item(self, item_id: str) -> int:
        """Remove o item e devolve quantos itens restaram no carrinho."""
        ...

    @abstractmethod
    def deletar(self, carrinho_id: str) -> None: ...

    @abstractmethod
    def limpar(self, usuario_id: str, loja_id: Optional[str] = None) -> int:
        """Apaga o(s) carrinho(s) do usuário e devolve quantos foram removidos."""
        ...


class IPedidoRepository(Protocol):
    """Protocolo para a persistência e gestão de Pedidos."""

    @abstractmethod
    def criar(self, pedido: Pedido) -> Pedido: ...

    @abstractmethod
    def buscar_por_id(self, pedido_id: str) -> Optional[Pedido]: ...

    @abstractmethod
    def listar_por_usuario(self, usuario_id: str, loja_id: Optional[str] = None) -> List[Pedido]: ...

    @abstractmethod
    def listar_por_loja(self, loja_id: str) -> List[Pedido]: ...

    @abstractmethod
    def atualizar_status(self, pedido_id: str, novo_status: str, status_atual: str) -> Optional[Pedido]:
        """Grava o novo status só se o pedido ainda estiver em status_atual; senão devolve None."""
        ...


class IUsuarioRepository(Protocol):
    """Protocolo para a persistência de Usuários."""

    @abstractmethod
    def buscar_por_id(self, usuario_id: str) -> Optional[Usuario]: ...

    @abstractmethod
    def buscar_por_cpf(self, cpf: str) -> Optional[Usuario]: ...

    @abstractmethod
    def atualizar_perfil(self, usuario: Usuario) -> Usuario: ...

    @abstractmethod
    def deletar(self, usuario_id: str) -> None: ...


class IEnderecoRepository(Protocol):
    """Protocolo para a persistência de Endereços do usuário."""

    @abstractmethod
    def listar_por_usuario(self, usuario_id: str) -> List[Endereco]: ...

    @abstractmethod
    def buscar_por_id(self, endereco_id: str) -> Optional[Endereco]: ...

    @abstractmethod
    def salvar(self, endereco: Endereco) -> Endereco:
        """Salva o endereço; se for principal, rebaixa os demais do mesmo usuário."""
        ...

    @abstractmethod
    def deletar(self, endereco_id: str) -> None: ...


class IEstatisticasRepository(Protocol):
    """Protocolo para as consultas agregadas do painel administrativo."""

    @abstractmethod
    def obter_estatisticas(self) -> Dict[str, Any]: ...

    @abstractmethod
    def pedidos_recentes(self, limite: int = 5) -> List[Pedido]: ...

    @abstractmethod
    def lojas_recentes(self, limite: int = 5) -> List[Loja]: ...

    @abstractmethod
    def usuarios_recentes(self, limite: int = 5) -> List[Usuario]: ...


# ====================================================================
# 2. GATEWAYS (Portas de Serviços Externos)
# ====================================================================

class IEmailService(Protocol):
    """Protocolo para o serviço de envio de e-mails."""

    @abstractmethod
    def enviar_notificacao_pedido_loja(self, pedido: Pedido, email_loja: str, nome_cliente: str) -> None: ...


class ICepGateway(Protocol):
    """Protocolo para a consulta de CEP (ViaCEP)."""

    @abstractmethod
    def consultar(self, cep: str) -> Dict[str, str]:
        """Devolve rua/bairro/cidade/estado ou levanta IntegracaoTransitoriaError."""
        ...
