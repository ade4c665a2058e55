"""
Resolução da identidade do chamador na borda HTTP.

As views nunca repassam request.user aos casos de uso: a sessão (JWT ou
sessão do Django) é convertida uma única vez em IdentidadeChamador.
"""
from typing import Optional

from rest_framework.views import APIView

from tiagodelivery.core.entities import IdentidadeChamador
from tiagodelivery.core.exceptions import NaoAutenticadoError


def resolver_identidade(user) -> Optional[IdentidadeChamador]:
    if user is None or not user.is_authenticated:
        return None
    return IdentidadeChamador(
        usuario_id=str(user.pk),
        email=user.email,
        nome=user.nome_exibicao,
        is_staff=user.is_staff,
    )


class BaseAPIView(APIView):
    """
    APIView com a identidade já resolvida em self.identidade.
    """
    identidade: Optional[IdentidadeChamador] = None

    def initial(self, request, *args, **kwargs):
        super().initial(request, *args, **kwargs)
        self.identidade = resolver_identidade(request.user)

    def exigir_identidade(self) -> IdentidadeChamador:
        if self.identidade is None:
            raise NaoAutenticadoError()
        return self.identidade

    def validar_entrada(self, serializer_class, data=None) -> dict:
        """Valida o corpo com o serializer informado e devolve os dados já com os nomes internos."""
        serializer = serializer_class(data=self.request.data if data is None else data)
        serializer.is_valid(raise_exception=True)
        return dict(serializer.validated_data)
