# tiagodelivery/presentation/testes.py

from decimal import Decimal
from unittest.mock import patch

import requests
from django.contrib import admin
from django.contrib.auth import get_user_model
from django.core import mail
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APITestCase

from tiagodelivery.lojas.models import Loja, Produto
from tiagodelivery.carrinho.models import Carrinho
from tiagodelivery.pedidos.models import Pedido

User = get_user_model()


def payload_loja(slug='bompreco', cnpj='12345678000199', **extra):
    dados = {
        'name': 'Mercado Bom Preço',
        'slug': slug,
        'category': 'Mercado',
        'cnpj': cnpj,
        'phone': '11999990000',
        'email': 'loja@example.com',
        'deliveryFee': '5.00',
        'address': {
            'zipCode': '01001000', 'street': 'Praça da Sé', 'number': '10',
            'neighborhood': 'Sé', 'city': 'São Paulo', 'state': 'SP',
        },
    }
    dados.update(extra)
    return dados


class BaseApiTest(APITestCase):
    """Cenário comum: um dono com uma loja aberta e um produto de R$ 10,00, e um cliente."""

    def setUp(self):
        self.dono = User.objects.create_user(email='dono@example.com', password='senha123')
        self.cliente = User.objects.create_user(
            email='cliente@example.com', password='senha123', nome_completo='Maria Cliente'
        )
        self.loja = Loja.objects.create(
            usuario=self.dono, nome='Mercado Bom Preço', slug='bompreco', categoria='Mercado',
            cnpj='12345678000199', telefone='11999990000', email='loja@example.com',
            cep='01001000', rua='Praça da Sé', numero='10', bairro='Sé',
            cidade='São Paulo', estado='SP', taxa_entrega=Decimal('5.00'),
        )
        self.produto = Produto.objects.create(loja=self.loja, nome='Pão Francês', preco=Decimal('10.00'))

    def autenticar(self, usuario):
        self.client.force_authenticate(user=usuario)

    def adicionar_ao_carrinho(self, produto, quantidade=1):
        return self.client.post(
            '/api/cart', {'productId': str(produto.pk), 'quantity': quantidade}, format='json'
        )

    def payload_pedido(self, **extra):
        dados = {
            'storeId': str(self.loja.pk),
            'items': [{
                'productId': str(self.produto.pk), 'productName': 'Pão Francês',
                'price': '10.00', 'quantity': 2,
            }],
            'subtotal': '20.00',
            'deliveryFee': '5.00',
            'total': '25.00',
            'paymentMethod': 'dinheiro',
            'customerName': 'Maria Cliente',
            'customerPhone': '11988887777',
        }
        dados.update(extra)
        return dados

    def criar_pedido(self):
        self.autenticar(self.cliente)
        response = self.client.post('/api/orders', self.payload_pedido(), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        return response.data['order']


# ====================================================================
# LOJAS
# ====================================================================

class LojasApiTest(BaseApiTest):

    def test_listagem_publica_marca_o_dono(self):
        response = self.client.get('/api/stores', {'city': 'são paulo', 'state': 'SP'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data['stores'][0]['isOwner'])

        self.autenticar(self.dono)
        response = self.client.get('/api/stores', {'slug': 'bompreco'})
        self.assertTrue(response.data['stores'][0]['isOwner'])

    def test_slug_inexistente_devolve_404(self):
        response = self.client.get('/api/stores', {'slug': 'naoexiste'})

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data, {'error': "Loja não encontrada"})

    def test_criar_loja(self):
        outro = User.objects.create_user(email='outro@example.com', password='senha123')
        self.autenticar(outro)

        response = self.client.post('/api/stores', payload_loja(slug='padaria', cnpj='999'), format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['store']['slug'], 'padaria')
        self.assertTrue(response.data['store']['isOwner'])
        self.assertTrue(response.data['store']['isOpen'])
        self.assertEqual(response.data['store']['deliveryFee'], Decimal('5.00'))

    def test_slug_duplicado_gera_conflito_sem_criar_loja(self):
        self.autenticar(self.cliente)

        response = self.client.post('/api/stores', payload_loja(cnpj='999'), format='json')

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertIn("Esta identificação já está em uso", response.data['errors'])
        self.assertEqual(Loja.objects.count(), 1)

    def test_dados_invalidos_devolvem_lista_de_erros(self):
        self.autenticar(self.cliente)

        response = self.client.post('/api/stores', {'slug': 'Com Espaço'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("Nome da loja é obrigatório", response.data['errors'])
        self.assertIn("Identificação deve conter apenas letras minúsculas e números", response.data['errors'])

    def test_filtro_de_estado_diferencia_maiusculas(self):
        response = self.client.get('/api/stores', {'state': 'sp'})
        self.assertEqual(response.data['stores'], [])

        response = self.client.get('/api/stores', {'state': 'SP'})
        self.assertEqual([loja['slug'] for loja in response.data['stores']], ['bompreco'])

    def test_texto_maior_que_a_coluna_devolve_400(self):
        self.autenticar(self.cliente)

        response = self.client.post(
            '/api/stores', payload_loja(slug='padaria', cnpj='999', phone='1' * 25), format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertTrue(response.data['errors'])
        self.assertEqual(Loja.objects.count(), 1)

    def test_criar_sem_sessao_devolve_401(self):
        response = self.client.post('/api/stores', payload_loja(slug='nova'), format='json')

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data, {'error': "Não autorizado"})

    def test_atualizar_loja_de_outro_usuario_e_proibido(self):
        self.autenticar(self.cliente)

        response = self.client.put(
            '/api/stores', payload_loja(id=str(self.loja.pk), name='Tomada'), format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.loja.refresh_from_db()
        self.assertEqual(self.loja.nome, 'Mercado Bom Preço')

    def test_dono_atualiza_e_remove_a_loja(self):
        self.autenticar(self.dono)

        response = self.client.put(
            '/api/stores', payload_loja(id=str(self.loja.pk), name='Bom Preço Express'), format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['store']['name'], 'Bom Preço Express')

        response = self.client.delete(f'/api/stores?id={self.loja.pk}')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], "Loja removida com sucesso")
        self.assertFalse(Loja.objects.exists())

    def test_alternar_aberta(self):
        self.autenticar(self.dono)

        response = self.client.post(f'/api/stores/{self.loja.pk}/toggle')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data['store']['isOpen'])


# ====================================================================
# PRODUTOS
# ====================================================================

class ProdutosApiTest(BaseApiTest):

    def test_listar_exige_loja(self):
        response = self.client.get('/api/products')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['errors'], ["ID da loja é obrigatório"])

    def test_listar_produtos_da_loja(self):
        response = self.client.get('/api/products', {'storeId': str(self.loja.pk)})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['products'][0]['name'], 'Pão Francês')
        self.assertEqual(response.data['products'][0]['price'], Decimal('10.00'))

    def test_somente_o_dono_cadastra_produtos(self):
        payload = {'storeId': str(self.loja.pk), 'name': 'Leite', 'price': '6.50'}

        self.autenticar(self.cliente)
        self.assertEqual(self.client.post('/api/products', payload, format='json').status_code, 403)

        self.autenticar(self.dono)
        response = self.client.post('/api/products', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['product']['available'])

    def test_preco_invalido(self):
        self.autenticar(self.dono)

        response = self.client.post(
            '/api/products', {'storeId': str(self.loja.pk), 'name': 'Leite', 'price': '0'}, format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['errors'], ["Preço deve ser maior que zero"])


# ====================================================================
# CARRINHO
# ====================================================================

class CarrinhoApiTest(BaseApiTest):

    def test_carrinho_exige_sessao(self):
        response = self.client.get('/api/cart')

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data, {'error': "Não autorizado"})

    def test_adicionar_calcula_subtotal_e_taxa(self):
        self.autenticar(self.cliente)

        response = self.adicionar_ao_carrinho(self.produto, 2)

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        carrinho = response.data['cart']
        self.assertEqual(carrinho['subtotal'], Decimal('20.00'))
        self.assertEqual(carrinho['deliveryFee'], Decimal('5.00'))
        self.assertEqual(carrinho['total'], Decimal('25.00'))
        self.assertEqual(carrinho['items'][0]['quantity'], 2)
        self.assertTrue(carrinho['meetsMinimumOrder'])

    def test_produto_de_outra_loja_gera_conflito(self):
        outra = Loja.objects.create(
            usuario=self.dono, nome='Farmácia', slug='farmacia', categoria='Farmácia',
            cnpj='999', telefone='1', email='f@example.com', cep='01001000', rua='R',
            numero='1', bairro='B', cidade='São Paulo', estado='SP',
        )
        remedio = Produto.objects.create(loja=outra, nome='Dipirona', preco=Decimal('8.00'))
        self.autenticar(self.cliente)
        self.adicionar_ao_carrinho(self.produto, 1)

        response = self.adicionar_ao_carrinho(remedio, 1)

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        carrinho = Carrinho.objects.get(usuario=self.cliente)
        self.assertEqual(carrinho.loja_id, self.loja.pk)
        self.assertEqual(carrinho.itens.count(), 1)

    def test_loja_fechada_nao_aceita_itens(self):
        Loja.objects.filter(pk=self.loja.pk).update(aberta=False)
        self.autenticar(self.cliente)

        response = self.adicionar_ao_carrinho(self.produto)

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(Carrinho.objects.exists())

    def test_quantidade_zero_e_rejeitada(self):
        self.autenticar(self.cliente)
        self.adicionar_ao_carrinho(self.produto, 1)
        item_id = self.client.get('/api/cart').data['cart']['items'][0]['id']

        response = self.client.put(f'/api/cart/{item_id}', {'quantity': 0}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_atualizar_quantidade_devolve_o_carrinho_recalculado(self):
        self.autenticar(self.cliente)
        self.adicionar_ao_carrinho(self.produto, 1)
        item_id = self.client.get('/api/cart').data['cart']['items'][0]['id']

        response = self.client.put(f'/api/cart/{item_id}', {'quantity': 4}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        carrinho = response.data['cart']
        self.assertEqual(carrinho['items'][0]['quantity'], 4)
        self.assertEqual(carrinho['itemCount'], 4)
        self.assertEqual(carrinho['subtotal'], Decimal('40.00'))
        self.assertEqual(carrinho['total'], Decimal('45.00'))

    def test_quantidade_fracionaria_e_rejeitada(self):
        self.autenticar(self.cliente)

        response = self.adicionar_ao_carrinho(self.produto, 1.9)

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(Carrinho.objects.exists())

    def test_quantidade_acima_do_limite_e_rejeitada(self):
        self.autenticar(self.cliente)
        self.adicionar_ao_carrinho(self.produto, 1)
        item_id = self.client.get('/api/cart').data['cart']['items'][0]['id']

        response = self.client.put(f'/api/cart/{item_id}', {'quantity': 10 ** 20}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(self.client.get('/api/cart').data['cart']['items'][0]['quantity'], 1)

    def test_limpar_com_loja_malformada_nao_faz_nada(self):
        self.autenticar(self.cliente)
        self.adicionar_ao_carrinho(self.produto, 1)

        response = self.client.delete('/api/cart?storeId=abc')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(Carrinho.objects.filter(usuario=self.cliente).exists())

    def test_remover_ultimo_item_apaga_o_carrinho(self):
        self.autenticar(self.cliente)
        self.adicionar_ao_carrinho(self.produto, 1)
        item_id = self.client.get('/api/cart').data['cart']['items'][0]['id']

        response = self.client.delete(f'/api/cart/{item_id}')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNone(response.data['cart'])
        self.assertFalse(Carrinho.objects.exists())

    def test_item_de_outro_usuario_e_proibido(self):
        self.autenticar(self.cliente)
        self.adicionar_ao_carrinho(self.produto, 1)
        item_id = self.client.get('/api/cart').data['cart']['items'][0]['id']

        self.autenticar(self.dono)
        response = self.client.delete(f'/api/cart/{item_id}')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_limpar_duas_vezes_tem_o_mesmo_resultado(self):
        self.autenticar(self.cliente)
        self.adicionar_ao_carrinho(self.produto, 1)

        primeira = self.client.delete('/api/cart')
        segunda = self.client.delete('/api/cart')

        self.assertEqual(primeira.status_code, status.HTTP_200_OK)
        self.assertEqual(primeira.data, segunda.data)
        self.assertIsNone(self.client.get('/api/cart').data['cart'])


# ====================================================================
# PEDIDOS (CHECKOUT E STATUS)
# ====================================================================

class PedidosApiTest(BaseApiTest):

    def test_fluxo_completo_do_carrinho_ao_pedido(self):
        self.autenticar(self.cliente)
        carrinho = self.adicionar_ao_carrinho(self.produto, 2).data['cart']
        self.assertEqual(carrinho['subtotal'], Decimal('20.00'))

        response = self.client.post('/api/orders', self.payload_pedido(), format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        pedido = response.data['order']
        self.assertEqual(pedido['total'], Decimal('25.00'))
        self.assertEqual(pedido['status'], 'pending')
        self.assertEqual(pedido['nextAction'], {'status': 'confirmed', 'label': 'Receber Pedido'})
        self.assertEqual(pedido['storeName'], 'Mercado Bom Preço')
        # Etapas de melhor esforço: e-mail para a loja e carrinho limpo
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, ['loja@example.com'])
        self.assertIsNone(self.client.get('/api/cart').data['cart'])

    def test_total_e_calculado_no_servidor(self):
        self.autenticar(self.cliente)

        response = self.client.post('/api/orders', self.payload_pedido(total='99.00'), format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['order']['total'], Decimal('25.00'))

    def test_payload_invalido_nao_cria_pedido(self):
        self.autenticar(self.cliente)

        response = self.client.post(
            '/api/orders', self.payload_pedido(storeId='', items=[], subtotal='0'), format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("ID da loja é obrigatório", response.data['errors'])
        self.assertIn("Items do pedido são obrigatórios", response.data['errors'])
        self.assertIn("Subtotal inválido", response.data['errors'])
        self.assertFalse(Pedido.objects.exists())

    @patch('tiagodelivery.infrastructure.gateways.send_mail', side_effect=OSError('SMTP fora do ar'))
    def test_falha_no_email_nao_desfaz_o_pedido(self, _send_mail):
        self.autenticar(self.cliente)

        with self.assertLogs('tiagodelivery.core.use_cases', level='WARNING'):
            response = self.client.post('/api/orders', self.payload_pedido(), format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Pedido.objects.count(), 1)

    def test_dono_avanca_o_status_uma_vez(self):
        pedido = self.criar_pedido()
        self.autenticar(self.dono)

        response = self.client.patch(f"/api/orders/{pedido['id']}", {'status': 'confirmed'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['order']['status'], 'confirmed')

        # Repetir a mesma transição falha: o pedido já não está 'pending'
        response = self.client.patch(f"/api/orders/{pedido['id']}", {'status': 'confirmed'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_status_fora_da_sequencia_e_rejeitado(self):
        pedido = self.criar_pedido()
        self.autenticar(self.dono)

        response = self.client.patch(f"/api/orders/{pedido['id']}", {'status': 'completed'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(Pedido.objects.get(pk=pedido['id']).status, 'pending')

    def test_cliente_nao_altera_o_status(self):
        pedido = self.criar_pedido()

        for alvo in ('confirmed', 'completed', 'cancelled'):
            response = self.client.patch(f"/api/orders/{pedido['id']}", {'status': alvo}, format='json')
            self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.assertEqual(Pedido.objects.get(pk=pedido['id']).status, 'pending')

    def test_consultas_do_cliente_e_da_loja(self):
        pedido = self.criar_pedido()

        response = self.client.get('/api/orders')
        self.assertEqual([p['id'] for p in response.data['orders']], [pedido['id']])

        response = self.client.get('/api/orders', {'orderId': pedido['id']})
        self.assertEqual(response.data['order']['id'], pedido['id'])

        # A flag asStore não autoriza quem não é dono
        response = self.client.get('/api/orders', {'storeId': str(self.loja.pk), 'asStore': 'true'})
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.autenticar(self.dono)
        response = self.client.get('/api/orders', {'storeId': str(self.loja.pk), 'asStore': 'true'})
        self.assertEqual(len(response.data['orders']), 1)

    def test_quantidade_fracionaria_no_checkout_e_rejeitada(self):
        self.autenticar(self.cliente)
        itens = self.payload_pedido()['items']
        itens[0]['quantity'] = 2.5

        response = self.client.post('/api/orders', self.payload_pedido(items=itens), format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("Item 1 do pedido é inválido", response.data['errors'])
        self.assertFalse(Pedido.objects.exists())

    def test_listar_com_loja_malformada_devolve_lista_vazia(self):
        self.criar_pedido()

        response = self.client.get('/api/orders', {'storeId': 'abc'})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['orders'], [])

    def test_pedido_inexistente(self):
        self.autenticar(self.cliente)

        response = self.client.get('/api/orders', {'orderId': '999999'})

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


# ====================================================================
# CONTA, CEP E PAINEL
# ====================================================================

class ContaApiTest(BaseApiTest):

    def test_atualizar_perfil(self):
        self.autenticar(self.cliente)

        response = self.client.put(
            '/api/profile',
            {'fullName': 'Maria da Silva', 'cpf': '123.456.789-01', 'whatsapp': '(11) 98888-7777',
             'whatsappConsent': True},
            format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['user']['cpf'], '12345678901')
        self.assertEqual(response.data['user']['whatsapp'], '11988887777')

    def test_consentimento_exige_whatsapp(self):
        self.autenticar(self.cliente)

        response = self.client.put('/api/profile', {'whatsappConsent': True}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    @patch('tiagodelivery.infrastructure.gateways.requests.get', side_effect=requests.exceptions.Timeout)
    def test_cep_com_servico_fora_do_ar_devolve_nulo(self, _mock_get):
        response = self.client.get('/api/cep/01001000')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNone(response.data['address'])

    @patch('tiagodelivery.infrastructure.gateways.requests.get')
    def test_cep_com_resposta_inesperada_devolve_nulo(self, mock_get):
        mock_get.return_value.json.return_value = []

        response = self.client.get('/api/cep/01001000')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNone(response.data['address'])

    def test_cadastrar_endereco(self):
        self.autenticar(self.cliente)

        response = self.client.post('/api/addresses', {
            'zipCode': '01001000', 'street': 'Praça da Sé', 'number': '1',
            'neighborhood': 'Sé', 'city': 'São Paulo', 'state': 'SP', 'isPrimary': True,
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['address']['isPrimary'])
        self.assertEqual(len(self.client.get('/api/addresses').data['addresses']), 1)

    def test_painel_admin_restrito_a_equipe(self):
        self.autenticar(self.cliente)
        self.assertEqual(self.client.get('/api/admin').status_code, status.HTTP_403_FORBIDDEN)

        equipe = User.objects.create_superuser(email='admin@example.com', password='senha123')
        self.autenticar(equipe)
        response = self.client.get('/api/admin')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['stats']['totalStores'], 1)
        self.assertEqual(response.data['stats']['totalUsers'], 3)


class PedidoAdminTest(TestCase):

    def test_pedido_e_somente_leitura_no_admin(self):
        pedido_admin = admin.site._registry[Pedido]
        somente_leitura = set(pedido_admin.get_readonly_fields(None))
        editaveis = {
            campo.name for campo in Pedido._meta.concrete_fields
            if campo.editable and not campo.primary_key
        }

        self.assertEqual(editaveis - somente_leitura, set())
        self.assertFalse(pedido_admin.has_add_permission(None))
