# Define os modelos do banco de dados para a camada de infraestrutura (conta e endereços).

from django.db import models
from django.contrib.auth.models import AbstractUser, BaseUserManager
from django.conf import settings

# ====================================================================
# GERENCIADOR DE USUÁRIOS PERSONALIZADO (Para usar email como login)
# ====================================================================

class CustomUserManager(BaseUserManager):
    """
    Gerenciador de modelos de usuário onde o email é o identificador único
    para autenticação, em vez dos nomes de usuário.
    """
    def create_user(self, email, password=None, **extra_fields):
        if not email:
            raise ValueError('O e-mail deve ser definido')
        email = self.normalize_email(email)
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        """
        Cria e salva um Superusuário com o e-mail e senha fornecidos.
        """
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('is_active', True)

        if extra_fields.get('is_staff') is not True:
            raise ValueError('Superusuário precisa ter is_staff=True.')
        if extra_fields.get('is_superuser') is not True:
            raise ValueError('Superusuário precisa ter is_superuser=True.')

        return self.create_user(email, password, **extra_fields)


# ====================================================================
# MODELO DE USUÁRIO
# ====================================================================

class Usuario(AbstractUser):
    """
    Modelo de Usuário Personalizado que utiliza o campo 'email' como identificador
    principal para login. O mesmo usuário pode comprar e ser dono de lojas.
    """
    # Remove o campo username padrão
    username = None

    email = models.EmailField('Endereço de E-mail', unique=True)

    # Campos do perfil
    nome_completo = models.CharField('Nome Completo', max_length=255, blank=True, null=True)
    data_nascimento = models.DateField('Data de Nascimento', blank=True, null=True)
    cpf = models.CharField('CPF', max_length=11, unique=True, blank=True, null=True)
    whatsapp = models.CharField('WhatsApp', max_length=15, blank=True, null=True)
    whatsapp_ddi = models.CharField('DDI do WhatsApp', max_length=4, default='55')
    whatsapp_consentimento = models.BooleanField('Aceita contato por WhatsApp', default=False)

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = []

    objects = CustomUserManager()

    groups = models.ManyToManyField(
        'auth.Group',
        verbose_name='groups',
        blank=True,
        help_text='The groups this user belongs to. A user will get all permissions granted to each of their groups.',
        related_name="infra_user_set",
        related_query_name="infra_user",
    )
    user_permissions = models.ManyToManyField(
        'auth.Permission',
        verbose_name='user permissions',
        blank=True,
        help_text='Specific permissions for this user.',
        related_name="infra_user_set",
        related_query_name="infra_user",
    )

    class Meta:
        verbose_name = 'Usuário'
        verbose_name_plural = 'Usuários'
        db_table = 'infra_usuario'

    def __str__(self):
        return self.email

    @property
    def nome_exibicao(self) -> str:
        """Nome usado em e-mails e pedidos: nome completo, nome do Django ou e-mail."""
        return self.nome_completo or self.get_full_name() or self.email


class Endereco(models.Model):
    """
    Endereço de entrega do usuário. No máximo um endereço principal por usuário.
    """
    usuario = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='enderecos')
    cep = models.CharField(max_length=10, verbose_name="CEP")
    rua = models.CharField(max_length=255, verbose_name="Rua")
    numero = models.CharField(max_length=10, verbose_name="Número")
    complemento = models.CharField(max_length=100, blank=True, null=True, verbose_name="Complemento")
    bairro = models.CharField(max_length=100, verbose_name="Bairro")
    cidade = models.CharField(max_length=100, verbose_name="Cidade")
    estado = models.CharField(max_length=50, verbose_name="Estado")
    is_principal = models.BooleanField(default=False, verbose_name="Endereço Principal")
    data_criacao = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = 'Endereço do Usuário'
        verbose_name_plural = 'Endereços do Usuário'
        db_table = 'usuario_endereco'
        ordering = ['-is_principal', '-data_criacao']

    def __str__(self):
        return f"{self.usuario} - {self.formatar_endereco_texto()}"

    def formatar_endereco_texto(self):
        """Retorna o endereço completo como string."""
        complemento_str = f", {self.complemento}" if self.complemento else ""
        return f"{self.rua}, {self.numero}{complemento_str} - {self.bairro} - {self.cidade}/{self.estado} - CEP: {self.cep}"
