import string
from decimal import Decimal

from django.conf import settings
from django.contrib.auth.models import AbstractUser, UserManager
from django.core.files.storage import default_storage
from django.core.validators import (
    FileExtensionValidator,
    MaxValueValidator,
    MinValueValidator,
    RegexValidator,
)
from django.db import models
from django.db.models import Q
from django.utils import timezone
from django.utils.crypto import get_random_string


mes_referencia_validator = RegexValidator(
    regex=r"^\d{4}-(0[1-9]|1[0-2])$",
    message="Informe o mês no formato AAAA-MM.",
)

ANEXO_EXTENSOES = ["pdf", "jpg", "jpeg", "png"]


def todos_os_dias():
    return list(range(7))


class Plano(models.Model):
    codigo = models.CharField(max_length=30, unique=True)
    nome = models.CharField(max_length=100)
    descricao = models.TextField(blank=True)
    max_moradores = models.PositiveIntegerField(null=True, blank=True)
    valor = models.DecimalField(max_digits=12, decimal_places=2, default=0, validators=[MinValueValidator(0)])
    criado_em = models.DateTimeField(auto_now_add=True)
    atualizado_em = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["valor", "nome"]

    def __str__(self) -> str:
        return self.nome


class Condominio(models.Model):
    class FormaPagamento(models.TextChoices):
        PIX = "PIX", "PIX"
        BOLETO = "BOLETO", "Boleto"
        CARTAO = "CARTAO", "Cartão de crédito"

    CAMPOS_AUDITADOS = (
        "nome",
        "cnpj",
        "cep",
        "rua",
        "numero",
        "complemento",
        "bairro",
        "cidade",
        "estado",
        "nome_representante",
        "email_representante",
        "telefone_representante",
    )

    matricula = models.CharField(max_length=20, unique=True, blank=True)
    nome = models.CharField(max_length=150)
    cnpj = models.CharField(max_length=20, blank=True)
    cep = models.CharField(max_length=12, blank=True, default="")
    rua = models.CharField(max_length=150, blank=True, default="")
    numero = models.CharField(max_length=20, blank=True, default="")
    complemento = models.CharField(max_length=100, blank=True, default="")
    bairro = models.CharField(max_length=100, blank=True, default="")
    cidade = models.CharField(max_length=100, blank=True, default="")
    estado = models.CharField(max_length=2, blank=True, default="")
    nome_representante = models.CharField(max_length=150, blank=True)
    email_representante = models.EmailField(blank=True)
    telefone_representante = models.CharField(max_length=20, blank=True)
    plano = models.ForeignKey(
        Plano,
        on_delete=models.PROTECT,
        related_name="condominios",
        null=True,
        blank=True,
    )
    valor_plano = models.DecimalField(max_digits=12, decimal_places=2, default=0, validators=[MinValueValidator(0)])
    forma_pagamento = models.CharField(max_length=10, choices=FormaPagamento.choices, default=FormaPagamento.PIX)
    desconto = models.DecimalField(max_digits=12, decimal_places=2, default=0, validators=[MinValueValidator(0)])
    ativo = models.BooleanField(default=True)
    email_boas_vindas_enviado = models.BooleanField(default=False)
    criado_em = models.DateTimeField(auto_now_add=True)
    atualizado_em = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["nome"]

    def __str__(self) -> str:
        return f"{self.matricula} - {self.nome}"

    def save(self, *args, **kwargs):
        if not self.matricula:
            self.matricula = self._gerar_matricula()
        else:
            self.matricula = self.matricula.strip().upper()
        super().save(*args, **kwargs)

    @classmethod
    def _gerar_matricula(cls) -> str:
        alfabeto = string.ascii_uppercase + string.digits
        while True:
            codigo = get_random_string(8, allowed_chars=alfabeto)
            if not cls.objects.filter(matricula=codigo).exists():
                return codigo

    def limite_moradores(self):
        if self.plano_id and self.plano.max_moradores:
            return self.plano.max_moradores
        return None

    @property
    def valor_mensal(self) -> Decimal:
        valor = (self.valor_plano or Decimal("0")) - (self.desconto or Decimal("0"))
        return max(valor, Decimal("0.00"))

    def endereco_completo(self) -> str:
        partes = [self.rua, self.numero, self.complemento, self.bairro]
        linha = ", ".join(p for p in partes if p)
        cidade = " - ".join(p for p in [self.cidade, self.estado] if p)
        return " | ".join(p for p in [linha, cidade] if p)


class CondominioAlteracaoLog(models.Model):
    condominio = models.ForeignKey(Condominio, on_delete=models.CASCADE, related_name="alteracoes")
    campo = models.CharField(max_length=50)
    valor_anterior = models.TextField(blank=True)
    valor_novo = models.TextField(blank=True)
    usuario = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True)
    alterado_em = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-alterado_em", "-id"]

    def __str__(self) -> str:
        return f"{self.condominio.matricula}: {self.campo}"


class UsuarioManager(UserManager):
    def _create_user(self, username, email, password, **extra_fields):
        condominio = extra_fields.get("condominio")
        if not extra_fields.get("is_superuser") and not condominio:
            raise ValueError("Usuários comuns precisam estar vinculados a um condomínio.")
        return super()._create_user(username, email, password, **extra_fields)


class Usuario(AbstractUser):
    class Papel(models.TextChoices):
        GESTOR = "GESTOR", "Gestor"
        MORADOR = "MORADOR", "Morador"

    condominio = models.ForeignKey(
        Condominio,
        on_delete=models.PROTECT,
        related_name="usuarios",
        null=True,
        blank=True,
    )
    papel = models.CharField(max_length=10, choices=Papel.choices, default=Papel.MORADOR)
    REQUIRED_FIELDS = ["email"]

    objects = UsuarioManager()

    def __str__(self) -> str:
        condominio = self.condominio.nome if self.condominio else "Sem condomínio"
        return f"{self.username} - {condominio}"

    def is_gestor(self) -> bool:
        if self.is_superuser or self.papel == self.Papel.GESTOR:
            return True
        return self.groups.filter(name="Gestor").exists()


class Morador(models.Model):
    condominio = models.ForeignKey(Condominio, on_delete=models.CASCADE, related_name="moradores")
    usuario = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name="morador",
        null=True,
        blank=True,
    )
    nome_completo = models.CharField(max_length=150)
    cpf = models.CharField(max_length=11)
    telefone = models.CharField(max_length=20, blank=True)
    email = models.EmailField(blank=True)
    unidade = models.CharField(max_length=20)
    valor_condominio = models.DecimalField(
        max_digits=12, decimal_places=2, default=0, validators=[MinValueValidator(0)]
    )
    ativo = models.BooleanField(default=True)
    criado_em = models.DateTimeField(auto_now_add=True)
    atualizado_em = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["unidade"]
        constraints = [
            models.UniqueConstraint(fields=["condominio", "cpf"], name="morador_cpf_por_condominio"),
            models.UniqueConstraint(fields=["condominio", "unidade"], name="morador_unidade_por_condominio"),
            models.UniqueConstraint(
                fields=["condominio", "email"],
                condition=~Q(email=""),
                name="morador_email_por_condominio",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.unidade} - {self.nome_completo}"

    def save(self, *args, **kwargs):
        if self.nome_completo:
            self.nome_completo = self.nome_completo.strip().upper()
        if self.email:
            self.email = self.email.strip().lower()
        super().save(*args, **kwargs)

    @property
    def cpf_formatado(self) -> str:
        c = self.cpf or ""
        if len(c) != 11:
            return c
        return f"{c[:3]}.{c[3:6]}.{c[6:9]}-{c[9:]}"


class AreaComum(models.Model):
    class DiaSemana(models.IntegerChoices):
        SEGUNDA = 0, "Segunda"
        TERCA = 1, "Terça"
        QUARTA = 2, "Quarta"
        QUINTA = 3, "Quinta"
        SEXTA = 4, "Sexta"
        SABADO = 5, "Sábado"
        DOMINGO = 6, "Domingo"

    condominio = models.ForeignKey(Condominio, on_delete=models.CASCADE, related_name="areas_comuns")
    nome = models.CharField(max_length=100)
    descricao = models.TextField(blank=True)
    capacidade = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    regras = models.TextField(blank=True)
    horario_abertura = models.TimeField(null=True, blank=True)
    horario_fechamento = models.TimeField(null=True, blank=True)
    dias_semana = models.JSONField(default=todos_os_dias, blank=True)
    valor = models.DecimalField(
        max_digits=12, decimal_places=2, null=True, blank=True, validators=[MinValueValidator(0)]
    )
    ativa = models.BooleanField(default=True)
    criado_em = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["nome"]
        unique_together = ("condominio", "nome")

    def __str__(self) -> str:
        return self.nome

    def funciona_em(self, data) -> bool:
        dias = self.dias_semana if self.dias_semana else todos_os_dias()
        return data.weekday() in [int(d) for d in dias]

    def dias_semana_display(self) -> str:
        labels = dict(self.DiaSemana.choices)
        dias = sorted(int(d) for d in (self.dias_semana or []))
        if dias == todos_os_dias():
            return "Todos os dias"
        return ", ".join(labels[d] for d in dias if d in labels)


class Reserva(models.Model):
    class Status(models.TextChoices):
        PENDENTE = "PENDENTE", "Pendente"
        APROVADA = "APROVADA", "Aprovada"
        REJEITADA = "REJEITADA", "Rejeitada"
        CANCELADA = "CANCELADA", "Cancelada"

    condominio = models.ForeignKey(Condominio, on_delete=models.CASCADE, related_name="reservas")
    area = models.ForeignKey(AreaComum, on_delete=models.CASCADE, related_name="reservas")
    morador = models.ForeignKey(Morador, on_delete=models.CASCADE, related_name="reservas")
    data = models.DateField()
    hora_inicio = models.TimeField()
    hora_fim = models.TimeField()
    observacoes = models.TextField(blank=True)
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.PENDENTE)
    decidido_por = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name="reservas_decididas",
        null=True,
        blank=True,
    )
    decidido_em = models.DateTimeField(null=True, blank=True)
    criado_em = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-data", "-hora_inicio", "-id"]

    def __str__(self) -> str:
        return f"{self.area} {self.data:%d/%m/%Y} {self.hora_inicio:%H:%M}-{self.hora_fim:%H:%M}"

    @property
    def ativa(self) -> bool:
        return self.status in (self.Status.PENDENTE, self.Status.APROVADA)


class Receita(models.Model):
    class Categoria(models.TextChoices):
        TAXA_CONDOMINIO = "taxa_condominio", "Taxa de Condomínio"
        RESERVA_AREA_COMUM = "reserva_area_comum", "Reserva Área Comum"
        TAXA_EXTRA = "taxa_extra", "Taxa Extra"
        OUTROS = "outros", "Outros"

    condominio = models.ForeignKey(Condominio, on_delete=models.CASCADE, related_name="receitas")
    categoria = models.CharField(max_length=30, choices=Categoria.choices, default=Categoria.TAXA_CONDOMINIO)
    valor = models.DecimalField(max_digits=12, decimal_places=2, validators=[MinValueValidator(Decimal("0.01"))])
    mes_referencia = models.CharField(max_length=7, validators=[mes_referencia_validator])
    data_pagamento = models.DateField(default=timezone.now)
    unidade = models.CharField(max_length=20, blank=True)
    observacoes = models.TextField(blank=True)
    criado_em = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["-data_pagamento", "-id"]

    def __str__(self) -> str:
        return f"{self.get_categoria_display()} {self.mes_referencia} - {self.valor}"


class Despesa(models.Model):
    class Categoria(models.TextChoices):
        ENERGIA = "energia", "Energia"
        AGUA = "agua", "Água"
        MANUTENCAO = "manutencao", "Manutenção"
        GAS = "gas", "Gás"
        LIMPEZA = "limpeza", "Limpeza"
        PRODUTOS = "produtos", "Produtos"
        IMPOSTO = "imposto", "Imposto"
        SEGURANCA = "seguranca", "Segurança"
        SISTEMA_CONDOMINIO = "sistema_condominio", "Sistema Condomínio"
        OUTROS = "outros", "Outros"

    condominio = models.ForeignKey(Condominio, on_delete=models.CASCADE, related_name="despesas")
    categoria = models.CharField(max_length=30, choices=Categoria.choices)
    valor = models.DecimalField(max_digits=12, decimal_places=2, validators=[MinValueValidator(Decimal("0.01"))])
    mes_referencia = models.CharField(max_length=7, validators=[mes_referencia_validator])
    vencimento = models.DateField(null=True, blank=True)
    data_pagamento = models.DateField(null=True, blank=True)
    unidade = models.CharField(max_length=20, blank=True)
    observacoes = models.TextField(blank=True)
    anexo = models.FileField(
        upload_to="despesas/",
        null=True,
        blank=True,
        validators=[FileExtensionValidator(allowed_extensions=ANEXO_EXTENSOES)],
    )
    criado_em = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["-mes_referencia", "-id"]

    def __str__(self) -> str:
        return f"{self.get_categoria_display()} {self.mes_referencia} - {self.valor}"


class SaldoFinanceiro(models.Model):
    condominio = models.OneToOneField(Condominio, on_delete=models.CASCADE, related_name="saldo_financeiro")
    saldo = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    manual = models.BooleanField(default=False)
    base_manual = models.DecimalField(max_digits=14, decimal_places=2, null=True, blank=True)
    base_manual_em = models.DateTimeField(null=True, blank=True)
    atualizado_em = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"Saldo {self.condominio.matricula}: {self.saldo}"


class AjusteSaldo(models.Model):
    condominio = models.ForeignKey(Condominio, on_delete=models.CASCADE, related_name="ajustes_saldo")
    saldo_anterior = models.DecimalField(max_digits=14, decimal_places=2)
    saldo_novo = models.DecimalField(max_digits=14, decimal_places=2)
    observacoes = models.TextField(blank=True)
    usuario = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True)
    ajustado_em = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["-ajustado_em", "-id"]

    @property
    def diferenca(self) -> Decimal:
        return self.saldo_novo - self.saldo_anterior


class RelatorioEnvioLog(models.Model):
    class Via(models.TextChoices):
        EMAIL = "EMAIL", "E-mail"
        WHATSAPP = "WHATSAPP", "WhatsApp"

    condominio = models.ForeignKey(Condominio, on_delete=models.CASCADE, related_name="relatorios_enviados")
    mes_referencia = models.CharField(max_length=7, validators=[mes_referencia_validator])
    enviado_via = models.CharField(max_length=10, choices=Via.choices, default=Via.EMAIL)
    destinatarios = models.JSONField(default=list, blank=True)
    quantidade = models.PositiveIntegerField(default=0)
    usuario = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True)
    enviado_em = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-enviado_em", "-id"]


class Comunicado(models.Model):
    condominio = models.ForeignKey(Condominio, on_delete=models.CASCADE, related_name="comunicados")
    titulo = models.CharField(max_length=150)
    conteudo = models.TextField()
    enviado_email = models.BooleanField(default=False)
    enviado_whatsapp = models.BooleanField(default=False)
    criado_em = models.DateTimeField(auto_now_add=True)
    atualizado_em = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-criado_em", "-id"]

    def __str__(self) -> str:
        return self.titulo


class ChavePix(models.Model):
    class TipoChave(models.TextChoices):
        CPF = "CPF", "CPF"
        CNPJ = "CNPJ", "CNPJ"
        EMAIL = "EMAIL", "E-mail"
        TELEFONE = "TELEFONE", "Telefone"
        ALEATORIA = "ALEATORIA", "Chave aleatória"

    condominio = models.OneToOneField(Condominio, on_delete=models.CASCADE, related_name="chave_pix")
    tipo_chave = models.CharField(max_length=10, choices=TipoChave.choices, default=TipoChave.CNPJ)
    chave = models.CharField(max_length=77)
    dia_vencimento = models.PositiveSmallIntegerField(
        default=10, validators=[MinValueValidator(1), MaxValueValidator(28)]
    )
    juros_ao_dia = models.DecimalField(
        max_digits=6, decimal_places=3, default=Decimal("0.033"), validators=[MinValueValidator(0)]
    )
    atualizado_em = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"{self.get_tipo_chave_display()}: {self.chave}"


class Dedetizacao(models.Model):
    class Finalidade(models.TextChoices):
        INSETOS = "insetos", "Insetos"
        RATOS = "ratos", "Ratos"
        CUPIM = "cupim", "Cupim"

    condominio = models.ForeignKey(Condominio, on_delete=models.CASCADE, related_name="dedetizacoes")
    empresa = models.CharField(max_length=150)
    data = models.DateField()
    finalidades = models.JSONField(default=list, blank=True)
    observacoes = models.TextField(blank=True)
    anexo = models.FileField(
        upload_to="dedetizacoes/",
        null=True,
        blank=True,
        validators=[FileExtensionValidator(allowed_extensions=ANEXO_EXTENSOES)],
    )
    criado_em = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-data", "-id"]

    def __str__(self) -> str:
        return f"{self.empresa} - {self.data:%d/%m/%Y}"

    def finalidades_display(self) -> str:
        labels = dict(self.Finalidade.choices)
        return ", ".join(labels.get(f, f) for f in self.finalidades or [])


class ManutencaoPreventiva(models.Model):
    class Categoria(models.TextChoices):
        ELETRICOS = "eletricos", "Sistemas Elétricos"
        HIDRAULICOS = "hidraulicos", "Sistemas Hidráulicos"
        ELEVADORES = "elevadores", "Elevadores"
        TELHADOS = "telhados", "Telhados e Fachadas"
        SEGURANCA = "seguranca", "Sistema de Segurança"
        INCENDIO = "incendio", "Equipamentos de Incêndio"

    condominio = models.ForeignKey(Condominio, on_delete=models.CASCADE, related_name="manutencoes")
    titulo = models.CharField(max_length=150)
    categoria = models.CharField(max_length=20, choices=Categoria.choices, default=Categoria.ELETRICOS)
    descricao = models.TextField(blank=True)
    data_programada = models.DateField()
    concluida = models.BooleanField(default=False)
    concluida_em = models.DateTimeField(null=True, blank=True)
    criado_em = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["concluida", "data_programada", "id"]

    def __str__(self) -> str:
        return self.titulo

    @property
    def atrasada(self) -> bool:
        return not self.concluida and self.data_programada < timezone.now().date()


class DocumentoEmpresarial(models.Model):
    titulo = models.CharField(max_length=200)
    data = models.DateField(default=timezone.now)
    descricao = models.TextField(blank=True)
    criado_em = models.DateTimeField(auto_now_add=True)
    atualizado_em = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-data", "-id"]

    def __str__(self) -> str:
        return self.titulo

    def delete(self, *args, **kwargs):
        for anexo in self.anexos.all():
            anexo.remover_arquivo()
        return super().delete(*args, **kwargs)


class AnexoBase(models.Model):
    arquivo = models.FileField(upload_to="documentos/")
    nome_arquivo = models.CharField(max_length=255)
    tipo_arquivo = models.CharField(max_length=100, blank=True)
    criado_em = models.DateTimeField(auto_now_add=True)

    class Meta:
        abstract = True
        ordering = ["id"]

    def __str__(self) -> str:
        return self.nome_arquivo

    def remover_arquivo(self):
        if not self.arquivo:
            return
        storage = getattr(self.arquivo, "storage", None) or default_storage
        if storage.exists(self.arquivo.name):
            storage.delete(self.arquivo.name)


class AnexoDocumento(AnexoBase):
    documento = models.ForeignKey(DocumentoEmpresarial, on_delete=models.CASCADE, related_name="anexos")
    arquivo = models.FileField(upload_to="documentos_empresariais/")


class DocumentoCondominio(models.Model):
    class Tipo(models.TextChoices):
        APOLICE = "apolice", "Apólice de Seguro"
        ATA = "ata", "Ata de Assembleia"
        CONTRATO = "contrato", "Contrato"
        CONVENCAO = "convencao", "Convenção do Condomínio"
        PLANTA = "planta", "Planta do Edifício"
        REGULAMENTO = "regulamento", "Regulamento Interno"
        VISTORIA = "vistoria", "Auto de Vistoria do Corpo de Bombeiros"

    condominio = models.ForeignKey(Condominio, on_delete=models.CASCADE, related_name="documentos")
    tipo = models.CharField(max_length=20, choices=Tipo.choices)
    data_cadastro = models.DateField(default=timezone.now)
    observacoes = models.TextField()
    criado_em = models.DateTimeField(auto_now_add=True)
    atualizado_em = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-criado_em", "-id"]

    def __str__(self) -> str:
        return f"{self.get_tipo_display()} ({self.data_cadastro:%d/%m/%Y})"

    def delete(self, *args, **kwargs):
        for anexo in self.anexos.all():
            anexo.remover_arquivo()
        return super().delete(*args, **kwargs)


class AnexoDocumentoCondominio(AnexoBase):
    documento = models.ForeignKey(DocumentoCondominio, on_delete=models.CASCADE, related_name="anexos")
    arquivo = models.FileField(upload_to="documentos_condominio/")


class DespesaEmpresarial(models.Model):
    class Categoria(models.TextChoices):
        ALUGUEL = "Aluguel", "Aluguel"
        AGUA = "Água", "Água"
        LUZ = "Luz", "Luz"
        INTERNET = "Internet", "Internet"
        TELEFONE = "Telefone", "Telefone"
        MATERIAL = "Material de Escritório", "Material de Escritório"
        MANUTENCAO = "Manutenção", "Manutenção"
        IMPOSTOS = "Impostos", "Impostos"
        SALARIOS = "Salários", "Salários"
        MARKETING = "Marketing", "Marketing"
        OUTROS = "Outros", "Outros"

    descricao = models.CharField(max_length=200)
    categoria = models.CharField(max_length=30, choices=Categoria.choices)
    valor = models.DecimalField(max_digits=12, decimal_places=2, validators=[MinValueValidator(Decimal("0.01"))])
    data = models.DateField(default=timezone.now)
    criado_em = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-data", "-id"]

    def __str__(self) -> str:
        return self.descricao
