# tiagodelivery/core/testes.py

import unittest
from unittest.mock import Mock
from decimal import Decimal

# Importamos as classes que queremos testar
from tiagodelivery.core.use_cases import (
    GerenciarLojasUseCase, GerenciarProdutosUseCase, GerenciarCarrinhoUseCase,
    CriarPedidoUseCase, ConsultarPedidosUseCase, AtualizarStatusPedidoUseCase,
    GerenciarPerfilUseCase, GerenciarEnderecosUseCase, PainelAdminUseCase,
    QUANTIDADE_MAXIMA
)
from tiagodelivery.core.entities import (
    IdentidadeChamador, Loja, Produto, Carrinho, ItemCarrinho, Pedido, ItemPedido,
    Usuario, Endereco, StatusPedido
)
from tiagodelivery.core.exceptions import (
    DadosInvalidosError, TransicaoInvalidaError, AcessoNegadoError, ConflitoError,
    CarrinhoDeOutraLojaError, LojaNaoEncontradaError, ProdutoNaoEncontradoError,
    PedidoNaoEncontradoError, ItemCarrinhoNaoEncontradoError, IntegracaoTransitoriaError
)


def nova_loja(**kwargs) -> Loja:
    dados = dict(
        id='loja-1', usuario_id='dono', nome='Mercado Bom Preço', slug='bompreco',
        categoria='Mercado', cnpj='12345678000199', telefone='11999990000',
        email='loja@example.com', rua='Rua A', numero='10', bairro='Centro',
        cidade='São Paulo', estado='SP', cep='01001000', taxa_entrega=Decimal('5.00'),
    )
    dados.update(kwargs)
    return Loja(**dados)


def dados_loja(**kwargs) -> dict:
    dados = {
        'nome': 'Mercado Bom Preço', 'slug': 'bompreco', 'categoria': 'Mercado',
        'cnpj': '12345678000199', 'telefone': '11999990000', 'email': 'loja@example.com',
        'taxa_entrega': '5.00',
        'endereco': {
            'cep': '01001000', 'rua': 'Rua A', 'numero': '10',
            'bairro': 'Centro', 'cidade': 'São Paulo', 'estado': 'SP',
        },
    }
    dados.update(kwargs)
    return dados


DONO = IdentidadeChamador(usuario_id='dono', email='dono@example.com', nome='Dono')
CLIENTE = IdentidadeChamador(usuario_id='cliente', email='cliente@example.com', nome='Cliente')


# ====================================================================
# LOJAS
# ====================================================================
class TestGerenciarLojas(unittest.TestCase):

    def setUp(self):
        """Prepara o caso de uso com um repositório simulado (Mock)."""
        self.loja_repo_mock = Mock()
        self.loja_repo_mock.buscar_por_slug.return_value = None
        self.loja_repo_mock.buscar_por_cnpj.return_value = None
        self.loja_repo_mock.salvar.side_effect = lambda loja: loja
        self.use_case = GerenciarLojasUseCase(self.loja_repo_mock)

    def test_criar_loja_com_sucesso(self):
        loja = self.use_case.criar(DONO, dados_loja())

        self.assertEqual(loja.usuario_id, 'dono')
        self.assertEqual(loja.cidade, 'São Paulo')
        self.assertEqual(loja.taxa_entrega, Decimal('5.00'))
        self.assertTrue(loja.aberta)
        self.assertTrue(loja.is_owner)
        self.loja_repo_mock.salvar.assert_called_once()

    def test_criar_loja_acumula_erros_de_validacao(self):
        """Cenário: campos ausentes geram uma mensagem por campo, sem gravar nada."""
        with self.assertRaises(DadosInvalidosError) as ctx:
            self.use_case.criar(DONO, {'slug': 'Loja Nova'})

        erros = ctx.exception.erros
        self.assertIn("Nome da loja é obrigatório", erros)
        self.assertIn("Identificação deve conter apenas letras minúsculas e números", erros)
        self.assertIn("CNPJ é obrigatório", erros)
        self.assertIn("Endereço é obrigatório", erros)
        self.loja_repo_mock.salvar.assert_not_called()

    def test_criar_loja_valida_campos_do_endereco(self):
        dados = dados_loja(endereco={'cep': '01001000'})

        with self.assertRaises(DadosInvalidosError) as ctx:
            self.use_case.criar(DONO, dados)

        self.assertEqual(ctx.exception.erros, [
            "Rua é obrigatória", "Número é obrigatório", "Bairro é obrigatório",
            "Cidade é obrigatória", "Estado é obrigatório",
        ])

    def test_criar_loja_com_slug_em_uso_gera_conflito(self):
        self.loja_repo_mock.buscar_por_slug.return_value = nova_loja(id='outra', usuario_id='x')

        with self.assertRaises(ConflitoError) as ctx:
            self.use_case.criar(DONO, dados_loja())

        self.assertIn("Esta identificação já está em uso", ctx.exception.erros)
        self.loja_repo_mock.salvar.assert_not_called()

    def test_criar_loja_com_cnpj_em_uso_gera_conflito(self):
        self.loja_repo_mock.buscar_por_cnpj.return_value = nova_loja(id='outra', usuario_id='x')

        with self.assertRaises(ConflitoError):
            self.use_case.criar(DONO, dados_loja())

    def test_buscar_por_slug_marca_is_owner_apenas_para_o_dono(self):
        self.loja_repo_mock.buscar_por_slug.return_value = nova_loja()
        self.assertTrue(self.use_case.buscar_por_slug('bompreco', DONO).is_owner)

        self.loja_repo_mock.buscar_por_slug.return_value = nova_loja()
        self.assertFalse(self.use_case.buscar_por_slug('bompreco', CLIENTE).is_owner)

        self.loja_repo_mock.buscar_por_slug.return_value = nova_loja()
        self.assertFalse(self.use_case.buscar_por_slug('bompreco', None).is_owner)

    def test_buscar_slug_inexistente(self):
        with self.assertRaises(LojaNaoEncontradaError):
            self.use_case.buscar_por_slug('naoexiste')

    def test_atualizar_loja_de_outro_usuario_e_negado(self):
        self.loja_repo_mock.buscar_por_id.return_value = nova_loja()

        with self.assertRaises(AcessoNegadoError):
            self.use_case.atualizar(CLIENTE, 'loja-1', dados_loja())
        self.loja_repo_mock.salvar.assert_not_called()

    def test_atualizar_mantendo_o_proprio_slug_nao_gera_conflito(self):
        loja = nova_loja()
        self.loja_repo_mock.buscar_por_id.return_value = loja
        self.loja_repo_mock.buscar_por_slug.return_value = loja
        self.loja_repo_mock.buscar_por_cnpj.return_value = loja

        atualizada = self.use_case.atualizar(DONO, 'loja-1', dados_loja(nome='Novo Nome'))

        self.assertEqual(atualizada.nome, 'Novo Nome')
        self.assertEqual(atualizada.id, 'loja-1')

    def test_alternar_aberta_inverte_o_estado(self):
        self.loja_repo_mock.buscar_por_id.return_value = nova_loja(aberta=True)
        self.loja_repo_mock.definir_aberta.return_value = nova_loja(aberta=False)

        loja = self.use_case.alternar_aberta(DONO, 'loja-1')

        self.loja_repo_mock.definir_aberta.assert_called_once_with('loja-1', False)
        self.assertFalse(loja.aberta)

    def test_deletar_loja_de_outro_usuario_e_negado(self):
        self.loja_repo_mock.buscar_por_id.return_value = nova_loja()

        with self.assertRaises(AcessoNegadoError):
            self.use_case.deletar(CLIENTE, 'loja-1')
        self.loja_repo_mock.deletar.assert_not_called()


class TestGerenciarProdutos(unittest.TestCase):

    def setUp(self):
        self.produto_repo_mock = Mock()
        self.loja_repo_mock = Mock()
        self.loja_repo_mock.buscar_por_id.return_value = nova_loja()
        self.produto_repo_mock.salvar.side_effect = lambda produto: produto
        self.use_case = GerenciarProdutosUseCase(self.produto_repo_mock, self.loja_repo_mock)

    def test_criar_produto_pelo_dono(self):
        produto = self.use_case.criar(DONO, {'loja_id': 'loja-1', 'nome': 'Pão', 'preco': '7.50'})

        self.assertEqual(produto.preco, Decimal('7.50'))
        self.assertTrue(produto.disponivel)

    def test_criar_produto_em_loja_alheia_e_negado(self):
        with self.assertRaises(AcessoNegadoError):
            self.use_case.criar(CLIENTE, {'loja_id': 'loja-1', 'nome': 'Pão', 'preco': '7.50'})

    def test_preco_deve_ser_positivo(self):
        with self.assertRaises(DadosInvalidosError) as ctx:
            self.use_case.criar(DONO, {'loja_id': 'loja-1', 'nome': 'Pão', 'preco': '0'})
        self.assertIn("Preço deve ser maior que zero", ctx.exception.erros)


# ====================================================================
# CARRINHO
# ====================================================================
class TestGerenciarCarrinho(unittest.TestCase):

    def setUp(self):
        self.carrinho_repo_mock = Mock()
        self.produto_repo_mock = Mock()
        self.use_case = GerenciarCarrinhoUseCase(self.carrinho_repo_mock, self.produto_repo_mock)

        self.loja = nova_loja()
        self.produto = Produto(id='p1', loja_id='loja-1', nome='Pão', preco=Decimal('10.00'), loja=self.loja)

    def test_adicionar_item_cria_carrinho_quando_nao_existe(self):
        self.produto_repo_mock.buscar_por_id.return_value = self.produto
        self.carrinho_repo_mock.buscar_por_usuario.side_effect = [None, Carrinho(id='c1', usuario_id='cliente', loja_id='loja-1')]
        self.carrinho_repo_mock.criar.return_value = Carrinho(id='c1', usuario_id='cliente', loja_id='loja-1')

        self.use_case.adicionar_item(CLIENTE, 'p1')

        self.carrinho_repo_mock.criar.assert_called_once_with('cliente', 'loja-1')
        self.carrinho_repo_mock.adicionar_item.assert_called_once_with('c1', 'p1', 1)

    def test_adicionar_item_de_outra_loja_com_carrinho_cheio_gera_conflito(self):
        """Cenário: o carrinho tem itens da loja X e o produto é da loja Y."""
        self.produto_repo_mock.buscar_por_id.return_value = self.produto
        self.carrinho_repo_mock.buscar_por_usuario.return_value = Carrinho(
            id='c1', usuario_id='cliente', loja_id='loja-x',
            itens=[ItemCarrinho(id='i1', produto_id='px', quantidade=1)]
        )

        with self.assertRaises(CarrinhoDeOutraLojaError):
            self.use_case.adicionar_item(CLIENTE, 'p1', 1)

        self.carrinho_repo_mock.adicionar_item.assert_not_called()
        self.carrinho_repo_mock.deletar.assert_not_called()

    def test_carrinho_vazio_de_outra_loja_e_substituido(self):
        self.produto_repo_mock.buscar_por_id.return_value = self.produto
        self.carrinho_repo_mock.buscar_por_usuario.return_value = Carrinho(id='c-velho', usuario_id='cliente', loja_id='loja-x')
        self.carrinho_repo_mock.criar.return_value = Carrinho(id='c-novo', usuario_id='cliente', loja_id='loja-1')

        self.use_case.adicionar_item(CLIENTE, 'p1', 2)

        self.carrinho_repo_mock.deletar.assert_called_once_with('c-velho')
        self.carrinho_repo_mock.adicionar_item.assert_called_once_with('c-novo', 'p1', 2)

    def test_produto_indisponivel_ou_loja_fechada(self):
        self.produto.loja = nova_loja(aberta=False)
        self.produto_repo_mock.buscar_por_id.return_value = self.produto
        self.carrinho_repo_mock.buscar_por_usuario.return_value = None

        with self.assertRaises(DadosInvalidosError):
            self.use_case.adicionar_item(CLIENTE, 'p1', 1)

    def test_produto_inexistente(self):
        self.produto_repo_mock.buscar_por_id.return_value = None

        with self.assertRaises(ProdutoNaoEncontradoError):
            self.use_case.adicionar_item(CLIENTE, 'p-x', 1)

    def test_quantidade_menor_que_um_e_rejeitada(self):
        with self.assertRaises(DadosInvalidosError):
            self.use_case.adicionar_item(CLIENTE, 'p1', 0)
        with self.assertRaises(DadosInvalidosError):
            self.use_case.atualizar_quantidade(CLIENTE, 'i1', 0)
        self.carrinho_repo_mock.atualizar_quantidade.assert_not_called()

    def test_quantidade_fracionaria_e_rejeitada_sem_truncar(self):
        for quantidade in (1.9, '2.5', 'abc', True):
            with self.assertRaises(DadosInvalidosError):
                self.use_case.adicionar_item(CLIENTE, 'p1', quantidade)
            with self.assertRaises(DadosInvalidosError):
                self.use_case.atualizar_quantidade(CLIENTE, 'i1', quantidade)
        self.carrinho_repo_mock.adicionar_item.assert_not_called()
        self.carrinho_repo_mock.atualizar_quantidade.assert_not_called()

    def test_quantidade_acima_do_limite_e_rejeitada(self):
        with self.assertRaises(DadosInvalidosError):
            self.use_case.adicionar_item(CLIENTE, 'p1', 10 ** 20)
        with self.assertRaises(DadosInvalidosError):
            self.use_case.atualizar_quantidade(CLIENTE, 'i1', QUANTIDADE_MAXIMA + 1)
        self.carrinho_repo_mock.atualizar_quantidade.assert_not_called()

    def test_incremento_nao_ultrapassa_o_limite(self):
        self.produto_repo_mock.buscar_por_id.return_value = self.produto
        self.carrinho_repo_mock.buscar_por_usuario.return_value = Carrinho(
            id='c1', usuario_id='cliente', loja_id='loja-1',
            itens=[ItemCarrinho(id='i1', produto_id='p1', quantidade=QUANTIDADE_MAXIMA)]
        )

        with self.assertRaises(DadosInvalidosError):
            self.use_case.adicionar_item(CLIENTE, 'p1', 1)
        self.carrinho_repo_mock.adicionar_item.assert_not_called()

    def test_atualizar_quantidade_sobrescreve_e_devolve_o_carrinho(self):
        self.carrinho_repo_mock.buscar_item.return_value = ItemCarrinho(
            id='i1', produto_id='p1', quantidade=1, carrinho_id='c1', usuario_id='cliente'
        )
        atualizado = Carrinho(id='c1', usuario_id='cliente', loja_id='loja-1', itens=[
            ItemCarrinho(id='i1', produto_id='p1', quantidade=4, produto=self.produto)
        ])
        self.carrinho_repo_mock.buscar_por_usuario.return_value = atualizado

        carrinho = self.use_case.atualizar_quantidade(CLIENTE, 'i1', '4')

        self.carrinho_repo_mock.atualizar_quantidade.assert_called_once_with('i1', 4)
        self.assertIs(carrinho, atualizado)
        self.assertEqual(carrinho.subtotal, Decimal('40.00'))

    def test_atualizar_item_de_outro_usuario_e_negado(self):
        self.carrinho_repo_mock.buscar_item.return_value = ItemCarrinho(
            id='i1', produto_id='p1', quantidade=1, carrinho_id='c9', usuario_id='outro'
        )

        with self.assertRaises(AcessoNegadoError):
            self.use_case.atualizar_quantidade(CLIENTE, 'i1', 3)
        self.carrinho_repo_mock.atualizar_quantidade.assert_not_called()

    def test_atualizar_item_inexistente(self):
        self.carrinho_repo_mock.buscar_item.return_value = None

        with self.assertRaises(ItemCarrinhoNaoEncontradoError):
            self.use_case.atualizar_quantidade(CLIENTE, 'i-x', 3)

    def test_remover_ultimo_item_apaga_o_carrinho(self):
        self.carrinho_repo_mock.buscar_item.return_value = ItemCarrinho(
            id='i1', produto_id='p1', quantidade=1, carrinho_id='c1', usuario_id='cliente'
        )
        self.carrinho_repo_mock.remover_item.return_value = 0

        resultado = self.use_case.remover_item(CLIENTE, 'i1')

        self.assertIsNone(resultado)
        self.carrinho_repo_mock.deletar.assert_called_once_with('c1')

    def test_limpar_sem_carrinho_nao_e_erro(self):
        self.carrinho_repo_mock.limpar.return_value = 0

        self.assertIsNone(self.use_case.limpar(CLIENTE))
        self.carrinho_repo_mock.limpar.assert_called_once_with('cliente', None)


class TestCarrinhoTotais(unittest.TestCase):

    def test_frete_gratis_e_pedido_minimo(self):
        loja = nova_loja(pedido_minimo=Decimal('30.00'), frete_gratis_acima=Decimal('50.00'))
        produto = Produto(id='p1', loja_id='loja-1', nome='Pão', preco=Decimal('10.00'))
        carrinho = Carrinho(usuario_id='cliente', loja_id='loja-1', loja=loja, itens=[
            ItemCarrinho(produto_id='p1', quantidade=2, produto=produto)
        ])

        self.assertEqual(carrinho.subtotal, Decimal('20.00'))
        self.assertEqual(carrinho.taxa_entrega, Decimal('5.00'))
        self.assertFalse(carrinho.atingiu_pedido_minimo)
        self.assertEqual(carrinho.valor_faltante_minimo, Decimal('10.00'))

        carrinho.itens[0].quantidade = 5
        self.assertEqual(carrinho.taxa_entrega, Decimal('0.00'))
        self.assertEqual(carrinho.total, Decimal('50.00'))


# ====================================================================
# CHECKOUT
# ====================================================================
class TestCriarPedido(unittest.TestCase):

    def setUp(self):
        self.pedido_repo_mock = Mock()
        self.loja_repo_mock = Mock()
        self.carrinho_repo_mock = Mock()
        self.email_service_mock = Mock()

        self.use_case = CriarPedidoUseCase(
            pedido_repo=self.pedido_repo_mock,
            loja_repo=self.loja_repo_mock,
            carrinho_repo=self.carrinho_repo_mock,
            email_service=self.email_service_mock
        )
        self.loja_repo_mock.buscar_por_id.return_value = nova_loja()

        def criar(pedido):
            pedido.id = 'pedido-1'
            return pedido
        self.pedido_repo_mock.criar.side_effect = criar

        self.dados = {
            'loja_id': 'loja-1',
            'itens': [{'produto_id': 'p1', 'nome_produto': 'Pão', 'preco_unitario': '10.00', 'quantidade': 2}],
            'subtotal': '20.00',
            'taxa_entrega': '5.00',
            'total': '25.00',
            'forma_pagamento': 'dinheiro',
        }

    def test_criar_pedido_com_sucesso(self):
        pedido = self.use_case.executar(CLIENTE, self.dados)

        self.assertEqual(pedido.status, StatusPedido.PENDENTE)
        self.assertEqual(pedido.total, Decimal('25.00'))
        self.assertEqual(pedido.nome_loja, 'Mercado Bom Preço')
        self.assertEqual(pedido.itens[0].subtotal, Decimal('20.00'))
        self.email_service_mock.enviar_notificacao_pedido_loja.assert_called_once()
        self.carrinho_repo_mock.limpar.assert_called_once_with('cliente', 'loja-1')

    def test_falha_no_email_nao_impede_o_pedido(self):
        """Cenário: o serviço de e-mail está fora do ar."""
        self.email_service_mock.enviar_notificacao_pedido_loja.side_effect = IntegracaoTransitoriaError("SMTP fora do ar")

        with self.assertLogs('tiagodelivery.core.use_cases', level='WARNING'):
            pedido = self.use_case.executar(CLIENTE, self.dados)

        self.assertEqual(pedido.id, 'pedido-1')
        self.carrinho_repo_mock.limpar.assert_called_once()

    def test_falha_ao_limpar_carrinho_nao_impede_o_pedido(self):
        self.carrinho_repo_mock.limpar.side_effect = RuntimeError("banco indisponível")

        pedido = self.use_case.executar(CLIENTE, self.dados)

        self.assertEqual(pedido.id, 'pedido-1')

    def test_falha_na_gravacao_do_pedido_propaga(self):
        self.pedido_repo_mock.criar.side_effect = RuntimeError("falha de escrita")

        with self.assertRaises(RuntimeError):
            self.use_case.executar(CLIENTE, self.dados)

        self.email_service_mock.enviar_notificacao_pedido_loja.assert_not_called()
        self.carrinho_repo_mock.limpar.assert_not_called()

    def test_validacao_acumula_erros(self):
        with self.assertRaises(DadosInvalidosError) as ctx:
            self.use_case.executar(CLIENTE, {'itens': [], 'subtotal': 0, 'total': 'abc'})

        self.assertEqual(ctx.exception.erros, [
            "ID da loja é obrigatório", "Items do pedido são obrigatórios",
            "Subtotal inválido", "Total inválido",
        ])
        self.pedido_repo_mock.criar.assert_not_called()

    def test_quantidade_do_item_deve_ser_inteira_e_dentro_do_limite(self):
        for quantidade in (2.5, '1.9', QUANTIDADE_MAXIMA + 1):
            self.dados['itens'][0]['quantidade'] = quantidade

            with self.assertRaises(DadosInvalidosError) as ctx:
                self.use_case.executar(CLIENTE, self.dados)

            self.assertEqual(ctx.exception.erros, ["Item 1 do pedido é inválido"])
        self.pedido_repo_mock.criar.assert_not_called()

    def test_loja_inexistente(self):
        self.loja_repo_mock.buscar_por_id.return_value = None

        with self.assertRaises(LojaNaoEncontradaError):
            self.use_case.executar(CLIENTE, self.dados)

    def test_total_e_recalculado_no_servidor(self):
        self.dados['total'] = '999.00'

        pedido = self.use_case.executar(CLIENTE, self.dados)

        self.assertEqual(pedido.total, Decimal('25.00'))

    def test_loja_sem_email_nao_chama_servico(self):
        self.loja_repo_mock.buscar_por_id.return_value = nova_loja(email='')

        self.use_case.executar(CLIENTE, self.dados)

        self.email_service_mock.enviar_notificacao_pedido_loja.assert_not_called()


# ====================================================================
# CONSULTA E STATUS DE PEDIDOS
# ====================================================================
def novo_pedido(status=StatusPedido.PENDENTE) -> Pedido:
    return Pedido(
        id='pedido-1', usuario_id='cliente', loja_id='loja-1', status=status,
        itens=[ItemPedido(nome_produto='Pão', preco_unitario=Decimal('10.00'), quantidade=2)],
        subtotal=Decimal('20.00'), taxa_entrega=Decimal('5.00'),
    )


class TestConsultarPedidos(unittest.TestCase):

    def setUp(self):
        self.pedido_repo_mock = Mock()
        self.loja_repo_mock = Mock()
        self.loja_repo_mock.buscar_por_id.return_value = nova_loja()
        self.use_case = ConsultarPedidosUseCase(self.pedido_repo_mock, self.loja_repo_mock)

    def test_listar_como_loja_exige_ser_dono(self):
        with self.assertRaises(AcessoNegadoError):
            self.use_case.listar(CLIENTE, loja_id='loja-1', como_loja=True)
        self.pedido_repo_mock.listar_por_loja.assert_not_called()

    def test_listar_como_loja_pelo_dono(self):
        self.use_case.listar(DONO, loja_id='loja-1', como_loja=True)
        self.pedido_repo_mock.listar_por_loja.assert_called_once_with('loja-1')

    def test_listar_como_cliente_filtra_pelo_usuario(self):
        self.use_case.listar(CLIENTE, loja_id='loja-1')
        self.pedido_repo_mock.listar_por_usuario.assert_called_once_with('cliente', loja_id='loja-1')

    def test_detalhar_pedido_de_terceiro_e_negado(self):
        self.pedido_repo_mock.buscar_por_id.return_value = novo_pedido()
        intruso = IdentidadeChamador(usuario_id='intruso')

        with self.assertRaises(AcessoNegadoError):
            self.use_case.detalhar(intruso, 'pedido-1')

    def test_dono_da_loja_ve_o_pedido(self):
        self.pedido_repo_mock.buscar_por_id.return_value = novo_pedido()
        self.assertEqual(self.use_case.detalhar(DONO, 'pedido-1').id, 'pedido-1')

    def test_pedido_inexistente(self):
        self.pedido_repo_mock.buscar_por_id.return_value = None
        with self.assertRaises(PedidoNaoEncontradoError):
            self.use_case.detalhar(CLIENTE, 'x')


class TestAtualizarStatusPedido(unittest.TestCase):

    def setUp(self):
        self.pedido_repo_mock = Mock()
        self.loja_repo_mock = Mock()
        self.loja_repo_mock.buscar_por_id.return_value = nova_loja()
        self.use_case = AtualizarStatusPedidoUseCase(self.pedido_repo_mock, self.loja_repo_mock)

    def test_sequencia_completa_de_status(self):
        sequencia = [
            StatusPedido.PENDENTE, StatusPedido.CONFIRMADO, StatusPedido.EM_PREPARACAO,
            StatusPedido.EM_ENTREGA, StatusPedido.CONCLUIDO,
        ]
        for atual, proximo in zip(sequencia, sequencia[1:]):
            self.pedido_repo_mock.buscar_por_id.return_value = novo_pedido(atual)
            self.pedido_repo_mock.atualizar_status.return_value = novo_pedido(proximo)

            pedido = self.use_case.executar(DONO, 'pedido-1', proximo)

            self.assertEqual(pedido.status, proximo)
            self.pedido_repo_mock.atualizar_status.assert_called_with('pedido-1', proximo, status_atual=atual)

    def test_pular_etapa_e_rejeitado(self):
        self.pedido_repo_mock.buscar_por_id.return_value = novo_pedido(StatusPedido.PENDENTE)

        with self.assertRaises(TransicaoInvalidaError):
            self.use_case.executar(DONO, 'pedido-1', StatusPedido.EM_ENTREGA)
        self.pedido_repo_mock.atualizar_status.assert_not_called()

    def test_status_terminal_nao_avanca(self):
        for terminal in StatusPedido.TERMINAIS:
            self.pedido_repo_mock.buscar_por_id.return_value = novo_pedido(terminal)
            with self.assertRaises(TransicaoInvalidaError):
                self.use_case.executar(DONO, 'pedido-1', StatusPedido.PENDENTE)

    def test_cliente_nao_pode_alterar_status(self):
        """Cenário: o próprio comprador tenta avançar o pedido, mesmo com uma transição válida."""
        self.pedido_repo_mock.buscar_por_id.return_value = novo_pedido()

        with self.assertRaises(AcessoNegadoError):
            self.use_case.executar(CLIENTE, 'pedido-1', StatusPedido.CONFIRMADO)
        self.pedido_repo_mock.atualizar_status.assert_not_called()

    def test_gravacao_concorrente_e_rejeitada(self):
        self.pedido_repo_mock.buscar_por_id.return_value = novo_pedido()
        self.pedido_repo_mock.atualizar_status.return_value = None

        with self.assertRaises(TransicaoInvalidaError):
            self.use_case.executar(DONO, 'pedido-1', StatusPedido.CONFIRMADO)


# ====================================================================
# PERFIL, ENDEREÇOS E ADMIN
# ====================================================================
class TestGerenciarPerfil(unittest.TestCase):

    def setUp(self):
        self.usuario_repo_mock = Mock()
        self.usuario_repo_mock.buscar_por_id.return_value = Usuario(id='cliente', email='cliente@example.com')
        self.usuario_repo_mock.buscar_por_cpf.return_value = None
        self.usuario_repo_mock.atualizar_perfil.side_effect = lambda usuario: usuario
        self.use_case = GerenciarPerfilUseCase(self.usuario_repo_mock)

    def test_atualizar_normaliza_cpf_e_whatsapp(self):
        usuario = self.use_case.atualizar(CLIENTE, {
            'nome_completo': 'Cliente Teste', 'cpf': '123.456.789-09',
            'whatsapp': '(11) 98888-7777', 'whatsapp_consentimento': True,
        })

        self.assertEqual(usuario.cpf, '12345678909')
        self.assertEqual(usuario.whatsapp, '11988887777')
        self.assertEqual(usuario.whatsapp_ddi, '55')

    def test_cpf_de_outra_conta_gera_conflito(self):
        self.usuario_repo_mock.buscar_por_cpf.return_value = Usuario(id='outro', email='o@example.com')

        with self.assertRaises(ConflitoError):
            self.use_case.atualizar(CLIENTE, {'cpf': '12345678909'})

    def test_excluir_conta_de_outro_usuario_e_negado(self):
        with self.assertRaises(AcessoNegadoError):
            self.use_case.excluir_conta(CLIENTE, usuario_id='outro')
        self.usuario_repo_mock.deletar.assert_not_called()


class TestGerenciarEnderecos(unittest.TestCase):

    def setUp(self):
        self.endereco_repo_mock = Mock()
        self.cep_gateway_mock = Mock()
        self.endereco_repo_mock.salvar.side_effect = lambda endereco: endereco
        self.use_case = GerenciarEnderecosUseCase(self.endereco_repo_mock, self.cep_gateway_mock)

    def test_criar_completa_campos_pelo_cep(self):
        self.cep_gateway_mock.consultar.return_value = {
            'rua': 'Praça da Sé', 'bairro': 'Sé', 'cidade': 'São Paulo', 'estado': 'SP'
        }

        endereco = self.use_case.criar(CLIENTE, {'cep': '01001-000', 'numero': '1'})

        self.cep_gateway_mock.consultar.assert_called_once_with('01001000')
        self.assertEqual(endereco.rua, 'Praça da Sé')
        self.assertEqual(endereco.usuario_id, 'cliente')

    def test_falha_do_cep_nao_quebra_e_valida_campos(self):
        self.cep_gateway_mock.consultar.side_effect = IntegracaoTransitoriaError()

        with self.assertRaises(DadosInvalidosError) as ctx:
            self.use_case.criar(CLIENTE, {'cep': '01001000', 'numero': '1'})
        self.assertIn("Rua é obrigatória", ctx.exception.erros)

    def test_consultar_cep_invalido_devolve_none(self):
        self.assertIsNone(self.use_case.consultar_cep('123'))
        self.cep_gateway_mock.consultar.assert_not_called()

    def test_deletar_endereco_alheio_e_negado(self):
        self.endereco_repo_mock.buscar_por_id.return_value = Endereco(
            id='e1', usuario_id='outro', rua='R', numero='1', bairro='B',
            cidade='C', estado='SP', cep='01001000'
        )

        with self.assertRaises(AcessoNegadoError):
            self.use_case.deletar(CLIENTE, 'e1')


class TestPainelAdmin(unittest.TestCase):

    def test_apenas_equipe_acessa(self):
        repo = Mock()
        use_case = PainelAdminUseCase(repo)

        with self.assertRaises(AcessoNegadoError):
            use_case.executar(CLIENTE)

        admin = IdentidadeChamador(usuario_id='adm', is_staff=True)
        repo.obter_estatisticas.return_value = {'total_usuarios': 3}
        painel = use_case.executar(admin)
        self.assertEqual(painel['estatisticas'], {'total_usuarios': 3})
        repo.pedidos_recentes.assert_called_once_with(5)


if __name__ == '__main__':
    unittest.main()
