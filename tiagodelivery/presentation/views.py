"""
Endpoints JSON do Tiago Delivery.

As views só fazem a tradução HTTP: resolvem a identidade, validam o
formato do corpo e delegam aos casos de uso. Os erros do Core viram
respostas HTTP em exception_handler.tratar_excecao.
"""
from rest_framework import status
from rest_framework.permissions import IsAuthenticated, IsAuthenticatedOrReadOnly, AllowAny
from rest_framework.response import Response

from tiagodelivery.core.dependency_injection import (
    get_gerenciar_lojas_use_case,
    get_gerenciar_produtos_use_case,
    get_gerenciar_carrinho_use_case,
    get_criar_pedido_use_case,
    get_consultar_pedidos_use_case,
    get_atualizar_status_pedido_use_case,
    get_gerenciar_perfil_use_case,
    get_gerenciar_enderecos_use_case,
    get_painel_admin_use_case,
)
from tiagodelivery.core.exceptions import DadosInvalidosError
from .identidade import BaseAPIView
from .serializers import (
    LojaEntradaSerializer, ProdutoEntradaSerializer, ItemCarrinhoEntradaSerializer,
    PedidoEntradaSerializer, StatusPedidoEntradaSerializer, PerfilEntradaSerializer,
    EnderecoEntradaSerializer,
    LojaSerializer, ProdutoSerializer, CarrinhoSerializer, PedidoSerializer,
    UsuarioSerializer, EnderecoSerializer, CepSerializer, PainelAdminSerializer,
)


def _parametro(request, nome):
    """Lê um identificador da query string ou, na falta, do corpo."""
    valor = request.query_params.get(nome)
    if valor:
        return valor
    if isinstance(request.data, dict):
        return request.data.get(nome)
    return None


def _serializar_carrinho(carrinho):
    return CarrinhoSerializer(carrinho).data if carrinho else None


# ====================================================================
# 1. LOJAS
# ====================================================================

class LojasAPIView(BaseAPIView):
    """
    GET: busca por ?slug=, ?id= ou lista com filtros ?city= e ?state=.
    POST/PUT/DELETE: cadastro da loja pelo dono.
    """
    permission_classes = [IsAuthenticatedOrReadOnly]

    def get(self, request):
        uc = get_gerenciar_lojas_use_case()
        slug = request.query_params.get('slug')
        loja_id = request.query_params.get('id')

        if slug:
            lojas = [uc.buscar_por_slug(slug, self.identidade)]
        elif loja_id:
            lojas = [uc.buscar_por_id(loja_id, self.identidade)]
        else:
            lojas = uc.listar(
                cidade=request.query_params.get('city'),
                estado=request.query_params.get('state'),
                identidade=self.identidade,
            )
        return Response({'stores': LojaSerializer(lojas, many=True).data})

    def post(self, request):
        dados = self.validar_entrada(LojaEntradaSerializer)
        loja = get_gerenciar_lojas_use_case().criar(self.exigir_identidade(), dados)
        return Response({'store': LojaSerializer(loja).data}, status=status.HTTP_201_CREATED)

    def put(self, request):
        dados = self.validar_entrada(LojaEntradaSerializer)
        loja_id = dados.pop('id', None)
        loja = get_gerenciar_lojas_use_case().atualizar(self.exigir_identidade(), loja_id, dados)
        return Response({'store': LojaSerializer(loja).data})

    def delete(self, request):
        get_gerenciar_lojas_use_case().deletar(self.exigir_identidade(), _parametro(request, 'id'))
        return Response({'message': "Loja removida com sucesso"})


class AlternarLojaAPIView(BaseAPIView):
    """Abre ou fecha a loja (somente o dono)."""
    permission_classes = [IsAuthenticated]

    def post(self, request, loja_id):
        loja = get_gerenciar_lojas_use_case().alternar_aberta(self.exigir_identidade(), loja_id)
        return Response({'store': LojaSerializer(loja).data})


# ====================================================================
# 2. PRODUTOS
# ====================================================================

class ProdutosAPIView(BaseAPIView):
    permission_classes = [IsAuthenticatedOrReadOnly]

    def get(self, request):
        loja_id = request.query_params.get('storeId')
        if not loja_id:
            raise DadosInvalidosError("ID da loja é obrigatório")
        produtos = get_gerenciar_produtos_use_case().listar_por_loja(loja_id)
        return Response({'products': ProdutoSerializer(produtos, many=True).data})

    def post(self, request):
        dados = self.validar_entrada(ProdutoEntradaSerializer)
        produto = get_gerenciar_produtos_use_case().criar(self.exigir_identidade(), dados)
        return Response({'product': ProdutoSerializer(produto).data}, status=status.HTTP_201_CREATED)


class ProdutoDetalheAPIView(BaseAPIView):
    permission_classes = [IsAuthenticatedOrReadOnly]

    def get(self, request, produto_id):
        produto = get_gerenciar_produtos_use_case().detalhar(produto_id)
        return Response({'product': ProdutoSerializer(produto).data})

    def put(self, request, produto_id):
        dados = self.validar_entrada(ProdutoEntradaSerializer)
        produto = get_gerenciar_produtos_use_case().atualizar(self.exigir_identidade(), produto_id, dados)
        return Response({'product': ProdutoSerializer(produto).data})

    def delete(self, request, produto_id):
        get_gerenciar_produtos_use_case().deletar(self.exigir_identidade(), produto_id)
        return Response({'message': "Produto removido com sucesso"})


# ====================================================================
# 3. CARRINHO
# ====================================================================

class CarrinhoAPIView(BaseAPIView):
    """
    API View para gerenciar o carrinho do usuário logado.
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        carrinho = get_gerenciar_carrinho_use_case().obter_carrinho(self.exigir_identidade())
        return Response({'cart': _serializar_carrinho(carrinho)})

    def post(self, request):
        """
        Adiciona um item ao carrinho (ou incrementa a quantidade).
        """
        dados = self.validar_entrada(ItemCarrinhoEntradaSerializer)
        carrinho = get_gerenciar_carrinho_use_case().adicionar_item(
            self.exigir_identidade(),
            produto_id=dados.get('produto_id'),
            quantidade=dados.get('quantidade'),
        )
        return Response({'cart': _serializar_carrinho(carrinho)}, status=status.HTTP_201_CREATED)

    def delete(self, request):
        """Limpa o carrinho. Sem carrinho, a resposta é a mesma."""
        get_gerenciar_carrinho_use_case().limpar(self.exigir_identidade(), _parametro(request, 'storeId'))
        return Response({'cart': None, 'message': "Carrinho limpo com sucesso"})


class ItemCarrinhoAPIView(BaseAPIView):
    permission_classes = [IsAuthenticated]

    def put(self, request, item_id):
        dados = self.validar_entrada(ItemCarrinhoEntradaSerializer)
        carrinho = get_gerenciar_carrinho_use_case().atualizar_quantidade(
            self.exigir_identidade(), item_id, dados.get('quantidade')
        )
        return Response({'cart': _serializar_carrinho(carrinho)})

    def delete(self, request, item_id):
        carrinho = get_gerenciar_carrinho_use_case().remover_item(self.exigir_identidade(), item_id)
        return Response({'cart': _serializar_carrinho(carrinho)})


# ====================================================================
# 4. PEDIDOS
# ====================================================================

class PedidosAPIView(BaseAPIView):
    """
    GET: ?orderId= para um pedido; ?storeId= e ?asStore=true para os pedidos da loja.
    POST: checkout do carrinho.
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        identidade = self.exigir_identidade()
        uc = get_consultar_pedidos_use_case()

        pedido_id = request.query_params.get('orderId')
        if pedido_id:
            return Response({'order': PedidoSerializer(uc.detalhar(identidade, pedido_id)).data})

        pedidos = uc.listar(
            identidade,
            loja_id=request.query_params.get('storeId'),
            como_loja=request.query_params.get('asStore') == 'true',
        )
        return Response({'orders': PedidoSerializer(pedidos, many=True).data})

    def post(self, request):
        dados = self.validar_entrada(PedidoEntradaSerializer)
        pedido = get_criar_pedido_use_case().executar(self.exigir_identidade(), dados)
        return Response({'order': PedidoSerializer(pedido).data}, status=status.HTTP_201_CREATED)


class PedidoDetalheAPIView(BaseAPIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, pedido_id):
        pedido = get_consultar_pedidos_use_case().detalhar(self.exigir_identidade(), pedido_id)
        return Response({'order': PedidoSerializer(pedido).data})

    def patch(self, request, pedido_id):
        """Avança o status do pedido (somente o dono da loja)."""
        dados = self.validar_entrada(StatusPedidoEntradaSerializer)
        pedido = get_atualizar_status_pedido_use_case().executar(
            self.exigir_identidade(), pedido_id, dados.get('status')
        )
        return Response({'order': PedidoSerializer(pedido).data})


# ====================================================================
# 5. PERFIL, ENDEREÇOS E CEP
# ====================================================================

class PerfilAPIView(BaseAPIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        usuario = get_gerenciar_perfil_use_case().obter(self.exigir_identidade())
        return Response({'user': UsuarioSerializer(usuario).data})

    def put(self, request):
        dados = self.validar_entrada(PerfilEntradaSerializer)
        usuario = get_gerenciar_perfil_use_case().atualizar(self.exigir_identidade(), dados)
        return Response({'user': UsuarioSerializer(usuario).data})

    def delete(self, request):
        get_gerenciar_perfil_use_case().excluir_conta(self.exigir_identidade(), _parametro(request, 'userId'))
        return Response({'message': "Conta excluída com sucesso"})


class EnderecosAPIView(BaseAPIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        enderecos = get_gerenciar_enderecos_use_case().listar(self.exigir_identidade())
        return Response({'addresses': EnderecoSerializer(enderecos, many=True).data})

    def post(self, request):
        dados = self.validar_entrada(EnderecoEntradaSerializer)
        endereco = get_gerenciar_enderecos_use_case().criar(self.exigir_identidade(), dados)
        return Response({'address': EnderecoSerializer(endereco).data}, status=status.HTTP_201_CREATED)

    def put(self, request):
        dados = self.validar_entrada(EnderecoEntradaSerializer)
        endereco_id = dados.pop('id', None)
        endereco = get_gerenciar_enderecos_use_case().atualizar(self.exigir_identidade(), endereco_id, dados)
        return Response({'address': EnderecoSerializer(endereco).data})

    def delete(self, request):
        get_gerenciar_enderecos_use_case().deletar(self.exigir_identidade(), _parametro(request, 'id'))
        return Response({'message': "Endereço removido com sucesso"})


class CepAPIView(BaseAPIView):
    """Consulta pública de CEP. Falhas do serviço externo devolvem address nulo."""
    permission_classes = [AllowAny]

    def get(self, request, cep):
        endereco = get_gerenciar_enderecos_use_case().consultar_cep(cep)
        return Response({'address': CepSerializer(endereco).data if endereco else None})


# ====================================================================
# 6. PAINEL ADMINISTRATIVO
# ====================================================================

class PainelAdminAPIView(BaseAPIView):
    """Estatísticas da plataforma (somente equipe)."""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        painel = get_painel_admin_use_case().executar(self.exigir_identidade())
        return Response(PainelAdminSerializer(painel).data)
