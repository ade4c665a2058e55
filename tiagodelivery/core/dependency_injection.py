# tiagodelivery/core/dependency_injection.py
"""
Módulo de Injeção de Dependência (DI).
Responsável por instanciar os Use Cases com suas dependências de Repositórios/Gateways
concretos da camada de Infraestrutura.
"""
from tiagodelivery.infrastructure.repositories import (
    LojaRepositoryDjango,
    ProdutoRepositoryDjango,
    CarrinhoRepositoryDjango,
    PedidoRepositoryDjango,
    UsuarioRepositoryDjango,
    EnderecoRepositoryDjango,
    EstatisticasRepositoryDjango,
)
from tiagodelivery.infrastructure.gateways import EmailServiceGateway, ViaCepGateway
from .use_cases import (
    GerenciarLojasUseCase,
    GerenciarProdutosUseCase,
    GerenciarCarrinhoUseCase,
    CriarPedidoUseCase,
    ConsultarPedidosUseCase,
    AtualizarStatusPedidoUseCase,
    GerenciarPerfilUseCase,
    GerenciarEnderecosUseCase,
    PainelAdminUseCase,
)

# Repositórios e Gateways Concretos
loja_repo = LojaRepositoryDjango()
produto_repo = ProdutoRepositoryDjango()
carrinho_repo = CarrinhoRepositoryDjango()
pedido_repo = PedidoRepositoryDjango()
usuario_repo = UsuarioRepositoryDjango()
endereco_repo = EnderecoRepositoryDjango()
estatisticas_repo = EstatisticasRepositoryDjango()
email_service = EmailServiceGateway()
cep_gateway = ViaCepGateway()

# ====================================================================
# Use Cases de Catálogo (Lojas e Produtos)
# ====================================================================

def get_gerenciar_lojas_use_case() -> GerenciarLojasUseCase:
    return GerenciarLojasUseCase(loja_repo)

def get_gerenciar_produtos_use_case() -> GerenciarProdutosUseCase:
    return GerenciarProdutosUseCase(produto_repo, loja_repo)


# ====================================================================
# Use Cases de Carrinho e Pedidos
# ====================================================================

def get_gerenciar_carrinho_use_case() -> GerenciarCarrinhoUseCase:
    return GerenciarCarrinhoUseCase(carrinho_repo, produto_repo)

def get_criar_pedido_use_case() -> CriarPedidoUseCase:
    return CriarPedidoUseCase(
        pedido_repo=pedido_repo,
        loja_repo=loja_repo,
        carrinho_repo=carrinho_repo,
        email_service=email_service
    )

def get_consultar_pedidos_use_case() -> ConsultarPedidosUseCase:
    return ConsultarPedidosUseCase(pedido_repo, loja_repo)

def get_atualizar_status_pedido_use_case() -> AtualizarStatusPedidoUseCase:
    return AtualizarStatusPedidoUseCase(pedido_repo, loja_repo)


# ====================================================================
# Use Cases de Conta e Administração
# ====================================================================

def get_gerenciar_perfil_use_case() -> GerenciarPerfilUseCase:
    return GerenciarPerfilUseCase(usuario_repo)

def get_gerenciar_enderecos_use_case() -> GerenciarEnderecosUseCase:
    return GerenciarEnderecosUseCase(endereco_repo, cep_gateway)

def get_painel_admin_use_case() -> PainelAdminUseCase:
    return PainelAdminUseCase(estatisticas_repo)
