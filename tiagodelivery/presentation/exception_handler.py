"""
Tradução dos erros do Core (e do DRF) para respostas HTTP.

Configurado em REST_FRAMEWORK['EXCEPTION_HANDLER']. Os casos de uso só
levantam exceções; o status e o formato do corpo são decididos aqui.
"""
import logging

from rest_framework import status
from rest_framework.exceptions import (
    ValidationError, NotAuthenticated, AuthenticationFailed
)
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

from tiagodelivery.core.exceptions import (
    DadosInvalidosError,
    NaoAutenticadoError,
    AcessoNegadoError,
    ItemNaoEncontradoError,
    ConflitoError,
)

logger = logging.getLogger(__name__)

MENSAGEM_NAO_AUTORIZADO = "Não autorizado"
MENSAGEM_ERRO_INTERNO = "Erro interno do servidor"


def _achatar_erros(detalhe) -> list:
    """Transforma os erros aninhados do DRF em uma lista simples de mensagens."""
    if isinstance(detalhe, dict):
        mensagens = []
        for valor in detalhe.values():
            mensagens.extend(_achatar_erros(valor))
        return mensagens
    if isinstance(detalhe, (list, tuple)):
        mensagens = []
        for valor in detalhe:
            mensagens.extend(_achatar_erros(valor))
        return mensagens
    return [str(detalhe)]


def tratar_excecao(exc, context):
    # 1. Erros do Core
    if isinstance(exc, DadosInvalidosError):
        return Response({'errors': exc.erros}, status=status.HTTP_400_BAD_REQUEST)

    if isinstance(exc, NaoAutenticadoError):
        return Response({'error': MENSAGEM_NAO_AUTORIZADO}, status=status.HTTP_401_UNAUTHORIZED)

    if isinstance(exc, AcessoNegadoError):
        return Response({'error': exc.message}, status=status.HTTP_403_FORBIDDEN)

    if isinstance(exc, ItemNaoEncontradoError):
        return Response({'error': exc.message}, status=status.HTTP_404_NOT_FOUND)

    if isinstance(exc, ConflitoError):
        return Response({'error': exc.message, 'errors': exc.erros}, status=status.HTTP_409_CONFLICT)

    # 2. Erros do próprio DRF (autenticação, permissão, validação do serializer)
    response = drf_exception_handler(exc, context)
    if response is not None:
        if isinstance(exc, (NotAuthenticated, AuthenticationFailed)):
            response.data = {'error': MENSAGEM_NAO_AUTORIZADO}
        elif isinstance(exc, ValidationError):
            response.data = {'errors': _achatar_erros(exc.detail)}
        else:
            mensagens = _achatar_erros(response.data)
            response.data = {'error': mensagens[0] if mensagens else MENSAGEM_ERRO_INTERNO}
        return response

    # 3. Qualquer outra coisa é falha inesperada
    view = context.get('view')
    logger.exception("Erro inesperado em %s: %s", view.__class__.__name__ if view else '-', exc)
    return Response({'error': MENSAGEM_ERRO_INTERNO}, status=status.HTTP_500_INTERNAL_SERVER_ERROR)
