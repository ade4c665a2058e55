import logging
import requests
from django.conf import settings
from django.core.mail import send_mail
from typing import Dict

# Importa os Protocols e Entidades da camada Core
from tiagodelivery.core.ports import IEmailService, ICepGateway
from tiagodelivery.core.entities import Pedido
from tiagodelivery.core.exceptions import IntegracaoTransitoriaError

logger = logging.getLogger(__name__)


def _formatar_moeda(valor) -> str:
    return f"R$ {valor:,.2f}".replace(",", "X").replace(".", ",").replace("X", ".")


# ====================================================================
# GATEWAYS: Implementações concretas que se comunicam com serviços externos.
# ====================================================================

class EmailServiceGateway(IEmailService):
    """
    Gateway para envio de e-mails usando o sistema de e-mail do Django.
    Implementa o Protocolo IEmailService.
    """

    def enviar_notificacao_pedido_loja(self, pedido: Pedido, email_loja: str, nome_cliente: str) -> None:
        """Avisa a loja de um pedido novo. Falhas viram IntegracaoTransitoriaError."""
        assunto = f"Novo pedido #{pedido.id} - {pedido.nome_loja}"

        linhas_itens = "\n".join(
            f"  {item.quantidade}x {item.nome_produto} - {_formatar_moeda(item.subtotal)}"
            for item in pedido.itens
        )
        pagamento = pedido.forma_pagamento or "não informado"
        if pedido.precisa_troco and pedido.valor_troco:
            pagamento += f" (troco para {_formatar_moeda(pedido.valor_troco)})"

        mensagem = (
            f"Olá, {pedido.nome_loja}!\n\n"
            f"Você recebeu um novo pedido de {nome_cliente}.\n\n"
            f"Itens:\n{linhas_itens}\n\n"
            f"Subtotal: {_formatar_moeda(pedido.subtotal)}\n"
            f"Taxa de entrega: {_formatar_moeda(pedido.taxa_entrega)}\n"
            f"Total: {_formatar_moeda(pedido.total)}\n"
            f"Pagamento: {pagamento}\n"
            f"Telefone do cliente: {pedido.telefone_cliente or 'não informado'}\n\n"
            f"Acesse o painel da loja para confirmar o pedido.\n\n"
            f"Equipe Tiago Delivery."
        )

        remetente = getattr(settings, 'DEFAULT_FROM_EMAIL', 'noreply@tiagodelivery.com.br')

        try:
            send_mail(
                assunto,
                mensagem,
                remetente,
                [email_loja],
                fail_silently=False,
            )
        except Exception as e:
            logger.error("Falha ao enviar e-mail do pedido %s para %s: %s", pedido.id, email_loja, e)
            raise IntegracaoTransitoriaError(f"Falha ao enviar e-mail para a loja: {e}") from e

        logger.info("Notificação do pedido %s enviada para %s.", pedido.id, email_loja)


class ViaCepGateway(ICepGateway):
    """
    Gateway para consulta de endereços pelo CEP na API pública do ViaCEP.
    """

    def __init__(self):
        self.api_base_url = getattr(settings, 'VIACEP_URL', 'https://viacep.com.br/ws')
        self.timeout = getattr(settings, 'VIACEP_TIMEOUT', 5)

    def consultar(self, cep: str) -> Dict[str, str]:
        url = f"{self.api_base_url}/{cep}/json/"

        try:
            response = requests.get(url, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except (requests.exceptions.RequestException, ValueError) as e:
            logger.warning("ViaCEP: falha ao consultar o CEP %s: %s", cep, e)
            raise IntegracaoTransitoriaError("Falha ao consultar o CEP.") from e

        if not isinstance(data, dict):
            logger.warning("ViaCEP: resposta inesperada para o CEP %s: %r", cep, data)
            raise IntegracaoTransitoriaError("Resposta inválida do serviço de CEP.")

        # O ViaCEP responde 200 com {"erro": true} para CEPs inexistentes
        if data.get("erro"):
            raise IntegracaoTransitoriaError(f"CEP {cep} não encontrado.")

        return {
            'cep': cep,
            'rua': data.get("logradouro", ""),
            'complemento': data.get("complemento", ""),
            'bairro': data.get("bairro", ""),
            'cidade': data.get("localidade", ""),
            'estado': data.get("uf", ""),
        }
