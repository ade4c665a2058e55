# tiagodelivery/infrastructure/testes.py

from decimal import Decimal
from unittest.mock import patch, Mock

import requests
from django.core import mail
from django.test import TestCase, SimpleTestCase
from django.contrib.auth import get_user_model

from tiagodelivery.core.entities import Loja, Pedido, ItemPedido, Endereco, StatusPedido
from tiagodelivery.core.exceptions import ConflitoError, IntegracaoTransitoriaError
from tiagodelivery.infrastructure.repositories import (
    LojaRepositoryDjango, ProdutoRepositoryDjango, CarrinhoRepositoryDjango,
    PedidoRepositoryDjango, EnderecoRepositoryDjango, EstatisticasRepositoryDjango
)
from tiagodelivery.infrastructure.gateways import EmailServiceGateway, ViaCepGateway
from tiagodelivery.lojas.models import Loja as LojaModel, Produto as ProdutoModel

User = get_user_model()


def criar_loja_model(usuario, slug='bompreco', cnpj='12345678000199', **kwargs):
    dados = dict(
        usuario=usuario, nome='Mercado Bom Preço', slug=slug, categoria='Mercado',
        cnpj=cnpj, telefone='11999990000', email='loja@example.com', cep='01001000',
        rua='Rua A', numero='10', bairro='Centro', cidade='São Paulo', estado='SP',
    )
    dados.update(kwargs)
    return LojaModel.objects.create(**dados)


class LojaRepositoryTest(TestCase):

    def setUp(self):
        self.dono = User.objects.create_user(email='dono@example.com', password='senha123')
        self.repo = LojaRepositoryDjango()

    def test_listar_filtra_cidade_sem_diferenciar_maiusculas(self):
        criar_loja_model(self.dono)
        criar_loja_model(self.dono, slug='outra', cnpj='999', cidade='Campinas')

        lojas = self.repo.listar(cidade='são paulo', estado='SP')

        self.assertEqual([loja.slug for loja in lojas], ['bompreco'])

    def test_salvar_com_slug_duplicado_gera_conflito(self):
        criar_loja_model(self.dono)
        nova = Loja(
            usuario_id=str(self.dono.pk), nome='Cópia', slug='bompreco', categoria='Mercado',
            cnpj='000', telefone='1', email='x@example.com', rua='R', numero='1',
            bairro='B', cidade='C', estado='SP', cep='01001000',
        )

        with self.assertRaises(ConflitoError):
            self.repo.salvar(nova)

    def test_buscar_por_id_malformado_devolve_none(self):
        self.assertIsNone(self.repo.buscar_por_id('nao-e-um-id'))

    def test_filtro_de_estado_e_exato(self):
        criar_loja_model(self.dono)

        self.assertEqual(self.repo.listar(estado='sp'), [])
        self.assertEqual([loja.slug for loja in self.repo.listar(estado='SP')], ['bompreco'])

    def test_definir_aberta(self):
        model = criar_loja_model(self.dono)

        loja = self.repo.definir_aberta(str(model.pk), False)

        self.assertFalse(loja.aberta)
        model.refresh_from_db()
        self.assertFalse(model.aberta)


class CarrinhoRepositoryTest(TestCase):

    def setUp(self):
        self.cliente = User.objects.create_user(email='cliente@example.com', password='senha123')
        dono = User.objects.create_user(email='dono@example.com', password='senha123')
        self.loja = criar_loja_model(dono)
        self.produto = ProdutoModel.objects.create(loja=self.loja, nome='Pão', preco=Decimal('10.00'))
        self.repo = CarrinhoRepositoryDjango()

    def test_adicionar_mesmo_produto_incrementa_quantidade(self):
        carrinho = self.repo.criar(str(self.cliente.pk), str(self.loja.pk))

        self.repo.adicionar_item(carrinho.id, str(self.produto.pk), 2)
        self.repo.adicionar_item(carrinho.id, str(self.produto.pk), 3)

        carrinho = self.repo.buscar_por_usuario(str(self.cliente.pk))
        self.assertEqual(len(carrinho.itens), 1)
        self.assertEqual(carrinho.itens[0].quantidade, 5)
        self.assertEqual(carrinho.subtotal, Decimal('50.00'))
        self.assertEqual(carrinho.loja.slug, 'bompreco')

    def test_limpar_com_id_de_loja_malformado_nao_faz_nada(self):
        self.repo.criar(str(self.cliente.pk), str(self.loja.pk))

        self.assertEqual(self.repo.limpar(str(self.cliente.pk), 'abc'), 0)
        self.assertIsNotNone(self.repo.buscar_por_usuario(str(self.cliente.pk)))

    def test_remover_item_devolve_restantes(self):
        carrinho = self.repo.criar(str(self.cliente.pk), str(self.loja.pk))
        self.repo.adicionar_item(carrinho.id, str(self.produto.pk), 1)
        item = self.repo.buscar_por_usuario(str(self.cliente.pk)).itens[0]

        self.assertEqual(self.repo.remover_item(item.id), 0)

    def test_limpar_e_idempotente(self):
        self.repo.criar(str(self.cliente.pk), str(self.loja.pk))

        self.assertEqual(self.repo.limpar(str(self.cliente.pk), str(self.loja.pk)), 1)
        self.assertEqual(self.repo.limpar(str(self.cliente.pk), str(self.loja.pk)), 0)
        self.assertIsNone(self.repo.buscar_por_usuario(str(self.cliente.pk)))


class PedidoRepositoryTest(TestCase):

    def setUp(self):
        self.cliente = User.objects.create_user(email='cliente@example.com', password='senha123')
        dono = User.objects.create_user(email='dono@example.com', password='senha123')
        self.loja = criar_loja_model(dono)
        self.produto = ProdutoModel.objects.create(loja=self.loja, nome='Pão', preco=Decimal('10.00'))
        self.repo = PedidoRepositoryDjango()

    def _criar_pedido(self):
        return self.repo.criar(Pedido(
            usuario_id=str(self.cliente.pk),
            loja_id=str(self.loja.pk),
            nome_loja=self.loja.nome,
            itens=[
                ItemPedido(produto_id=str(self.produto.pk), nome_produto='Pão',
                           preco_unitario=Decimal('10.00'), quantidade=2),
                ItemPedido(produto_id='999999', nome_produto='Produto removido',
                           preco_unitario=Decimal('1.00'), quantidade=1),
            ],
            subtotal=Decimal('21.00'),
            taxa_entrega=Decimal('5.00'),
        ))

    def test_listar_por_usuario_com_loja_malformada_devolve_lista_vazia(self):
        self._criar_pedido()

        self.assertEqual(self.repo.listar_por_usuario(str(self.cliente.pk), loja_id='abc'), [])
        self.assertEqual(len(self.repo.listar_por_usuario(str(self.cliente.pk), loja_id=str(self.loja.pk))), 1)

    def test_criar_grava_snapshot_dos_itens(self):
        pedido = self._criar_pedido()

        self.assertIsNotNone(pedido.id)
        self.assertEqual(pedido.total, Decimal('26.00'))
        self.assertEqual([item.nome_produto for item in pedido.itens], ['Pão', 'Produto removido'])
        self.assertIsNone(pedido.itens[1].produto_id)

    def test_snapshot_nao_muda_com_o_preco_do_produto(self):
        pedido = self._criar_pedido()
        ProdutoModel.objects.filter(pk=self.produto.pk).update(preco=Decimal('99.00'))

        relido = self.repo.buscar_por_id(pedido.id)

        self.assertEqual(relido.itens[0].preco_unitario, Decimal('10.00'))

    def test_atualizar_status_condicional(self):
        pedido = self._criar_pedido()

        atualizado = self.repo.atualizar_status(pedido.id, StatusPedido.CONFIRMADO, status_atual=StatusPedido.PENDENTE)
        self.assertEqual(atualizado.status, StatusPedido.CONFIRMADO)

        # Segunda gravação com o status antigo não tem efeito
        self.assertIsNone(
            self.repo.atualizar_status(pedido.id, StatusPedido.CONFIRMADO, status_atual=StatusPedido.PENDENTE)
        )

    def test_estatisticas_excluem_cancelados_do_faturamento(self):
        pedido = self._criar_pedido()
        cancelado = self._criar_pedido()
        self.repo.atualizar_status(cancelado.id, StatusPedido.CANCELADO, status_atual=StatusPedido.PENDENTE)

        estatisticas = EstatisticasRepositoryDjango().obter_estatisticas()

        self.assertEqual(estatisticas['total_pedidos'], 2)
        self.assertEqual(estatisticas['pedidos_por_status']['pendentes'], 1)
        self.assertEqual(estatisticas['pedidos_por_status']['cancelados'], 1)
        self.assertEqual(estatisticas['faturamento_total'], pedido.total)
        self.assertEqual(estatisticas['total_usuarios'], 2)
        self.assertEqual(estatisticas['lojas_abertas'], 1)


class EnderecoRepositoryTest(TestCase):

    def test_apenas_um_endereco_principal(self):
        usuario = User.objects.create_user(email='cliente@example.com', password='senha123')
        repo = EnderecoRepositoryDjango()

        def novo(rua):
            return Endereco(
                usuario_id=str(usuario.pk), rua=rua, numero='1', bairro='Centro',
                cidade='São Paulo', estado='SP', cep='01001000', is_principal=True
            )

        primeiro = repo.salvar(novo('Rua A'))
        segundo = repo.salvar(novo('Rua B'))

        enderecos = {endereco.id: endereco for endereco in repo.listar_por_usuario(str(usuario.pk))}
        self.assertFalse(enderecos[primeiro.id].is_principal)
        self.assertTrue(enderecos[segundo.id].is_principal)


# ====================================================================
# GATEWAYS
# ====================================================================

class EmailServiceGatewayTest(TestCase):

    def test_envia_notificacao_para_a_loja(self):
        pedido = Pedido(
            id='7', usuario_id='1', loja_id='1', nome_loja='Mercado Bom Preço',
            itens=[ItemPedido(nome_produto='Pão', preco_unitario=Decimal('10.00'), quantidade=2)],
            subtotal=Decimal('20.00'), taxa_entrega=Decimal('5.00'),
        )

        EmailServiceGateway().enviar_notificacao_pedido_loja(pedido, 'loja@example.com', 'Maria')

        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, ['loja@example.com'])
        self.assertIn('Maria', mail.outbox[0].body)
        self.assertIn('R$ 25,00', mail.outbox[0].body)

    @patch('tiagodelivery.infrastructure.gateways.send_mail', side_effect=OSError('SMTP fora do ar'))
    def test_falha_de_envio_vira_erro_transitorio(self, _send_mail):
        pedido = Pedido(id='7', usuario_id='1', loja_id='1', itens=[], subtotal=Decimal('1'), taxa_entrega=Decimal('0'))

        with self.assertRaises(IntegracaoTransitoriaError):
            EmailServiceGateway().enviar_notificacao_pedido_loja(pedido, 'loja@example.com', 'Maria')


class ViaCepGatewayTest(SimpleTestCase):

    @patch('tiagodelivery.infrastructure.gateways.requests.get')
    def test_consulta_com_sucesso(self, mock_get):
        mock_get.return_value = Mock(status_code=200)
        mock_get.return_value.json.return_value = {
            'logradouro': 'Praça da Sé', 'bairro': 'Sé', 'localidade': 'São Paulo', 'uf': 'SP'
        }

        endereco = ViaCepGateway().consultar('01001000')

        self.assertEqual(endereco['rua'], 'Praça da Sé')
        self.assertEqual(endereco['estado'], 'SP')
        self.assertIn('01001000/json/', mock_get.call_args[0][0])

    @patch('tiagodelivery.infrastructure.gateways.requests.get')
    def test_cep_inexistente(self, mock_get):
        mock_get.return_value = Mock(status_code=200)
        mock_get.return_value.json.return_value = {'erro': True}

        with self.assertRaises(IntegracaoTransitoriaError):
            ViaCepGateway().consultar('99999999')

    @patch('tiagodelivery.infrastructure.gateways.requests.get', side_effect=requests.exceptions.Timeout)
    def test_timeout(self, _mock_get):
        with self.assertRaises(IntegracaoTransitoriaError):
            ViaCepGateway().consultar('01001000')

    @patch('tiagodelivery.infrastructure.gateways.requests.get')
    def test_resposta_que_nao_e_objeto_vira_erro_transitorio(self, mock_get):
        mock_get.return_value = Mock(status_code=200)
        mock_get.return_value.json.return_value = []

        with self.assertRaises(IntegracaoTransitoriaError):
            ViaCepGateway().consultar('01001000')
