import json
import logging
import re

from django import forms
from django.contrib.auth import get_user_model
from django.contrib.auth.forms import AuthenticationForm, PasswordChangeForm
from django.contrib.auth.models import Group
from django.db import models, transaction
from django.utils import timezone
from django.utils.crypto import get_random_string

from .models import (
    ANEXO_EXTENSOES,
    AreaComum,
    ChavePix,
    Comunicado,
    Condominio,
    Dedetizacao,
    Despesa,
    DespesaEmpresarial,
    DocumentoCondominio,
    DocumentoEmpresarial,
    ManutencaoPreventiva,
    Morador,
    Receita,
    Reserva,
    mes_referencia_validator,
)
from .permissions import ROLE_GESTOR, ROLE_MORADOR
from .services.financeiro import brl_para_decimal, mes_atual
from .services.pix import normalizar_chave
from .services.reservas import validar_reserva


User = get_user_model()
logger = logging.getLogger(__name__)

DATE_FORMATS = ["%d/%m/%Y", "%Y-%m-%d"]
ANEXO_MAX_BYTES = 5 * 1024 * 1024


def _date_widget():
    return forms.DateInput(
        format="%d/%m/%Y",
        attrs={
            "class": "form-control",
            "placeholder": "dd/mm/aaaa",
            "inputmode": "numeric",
            "data-date-picker": "br",
            "autocomplete": "off",
        },
    )


def _money_widget():
    return forms.NumberInput(
        attrs={"min": "0", "step": "0.01", "data-format": "currency2", "placeholder": "0,00"}
    )


class ValorBRLField(forms.DecimalField):
    """Aceita valores digitados no formato brasileiro, como "R$ 1.234,56"."""

    def __init__(self, **kwargs):
        kwargs.setdefault("max_digits", 12)
        kwargs.setdefault("decimal_places", 2)
        kwargs.setdefault(
            "widget",
            forms.TextInput(
                attrs={
                    "placeholder": "0,00",
                    "inputmode": "decimal",
                    "data-format": "currency2",
                    "data-format-live": "true",
                    "autocomplete": "off",
                }
            ),
        )
        super().__init__(**kwargs)

    def to_python(self, value):
        if value in self.empty_values:
            return None
        if not re.search(r"\d", str(value)) or re.search(r"[^\d\s.,R$\-]", str(value)):
            raise forms.ValidationError(self.error_messages["invalid"], code="invalid")
        return brl_para_decimal(value)


def _digits_only(value):
    return re.sub(r"\D", "", value or "")


def _is_valid_cpf(digits):
    if len(digits) != 11 or digits == digits[0] * 11:
        return False
    total = sum(int(d) * weight for d, weight in zip(digits[:9], range(10, 1, -1)))
    first = (total * 10) % 11
    first = 0 if first == 10 else first
    if first != int(digits[9]):
        return False
    total = sum(int(d) * weight for d, weight in zip(digits[:10], range(11, 1, -1)))
    second = (total * 10) % 11
    second = 0 if second == 10 else second
    return second == int(digits[10])


def _is_valid_cnpj(digits):
    if len(digits) != 14 or digits == digits[0] * 14:
        return False
    weights_first = [5, 4, 3, 2, 9, 8, 7, 6, 5, 4, 3, 2]
    weights_second = [6, 5, 4, 3, 2, 9, 8, 7, 6, 5, 4, 3, 2]
    total = sum(int(d) * w for d, w in zip(digits[:12], weights_first))
    mod = total % 11
    first = 0 if mod < 2 else 11 - mod
    if first != int(digits[12]):
        return False
    total = sum(int(d) * w for d, w in zip(digits[:13], weights_second))
    mod = total % 11
    second = 0 if mod < 2 else 11 - mod
    return second == int(digits[13])


def _validate_cnpj(value):
    digits = _digits_only(value)
    if not digits:
        return ""
    if not _is_valid_cnpj(digits):
        raise forms.ValidationError("CNPJ inválido.")
    return digits


def _validate_telefone(value):
    digits = _digits_only(value)
    if not digits:
        return ""
    if len(digits) not in (10, 11):
        raise forms.ValidationError("Telefone deve ter 10 ou 11 dígitos.")
    return digits


def _clean_anexo(anexo):
    if anexo and getattr(anexo, "size", 0) > ANEXO_MAX_BYTES:
        raise forms.ValidationError("Arquivo maior que 5MB não é permitido.")
    return anexo


class LoginForm(AuthenticationForm):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        username = self.fields.get("username")
        if username:
            username.label = "Usuário ou e-mail"
            username.widget.attrs.setdefault("autofocus", "autofocus")
        password = self.fields.get("password")
        if password:
            password.widget.attrs.setdefault("autocomplete", "current-password")

    def clean(self):
        username = (self.data.get("username") or "").strip()
        if "@" in username:
            user = User.objects.filter(email__iexact=username).order_by("pk").first()
            if user:
                self.cleaned_data["username"] = user.username
        return super().clean()


class CondominioFormMixin(forms.ModelForm):
    def __init__(self, *args, user=None, **kwargs):
        self.user = user
        super().__init__(*args, **kwargs)
        self._filtrar_por_condominio()

    @property
    def condominio(self):
        return getattr(self.user, "condominio", None)

    def _filtrar_por_condominio(self):
        condominio = self.condominio
        if not condominio:
            return
        for name, field in self.fields.items():
            if hasattr(field, "queryset") and isinstance(field.queryset, models.QuerySet):
                model = field.queryset.model
                if hasattr(model, "condominio"):
                    self.fields[name].queryset = field.queryset.filter(condominio=condominio)


class MoradorForm(CondominioFormMixin):
    # aceita o CPF mascarado; clean_cpf guarda só os 11 dígitos
    cpf = forms.CharField(
        label="CPF",
        max_length=14,
        widget=forms.TextInput(
            attrs={"placeholder": "000.000.000-00", "data-mask": "cpf", "inputmode": "numeric"}
        ),
    )

    class Meta:
        model = Morador
        fields = ["nome_completo", "cpf", "telefone", "email", "unidade", "valor_condominio", "ativo"]
        widgets = {
            "nome_completo": forms.TextInput(attrs={"autofocus": "autofocus"}),
            "telefone": forms.TextInput(attrs={"placeholder": "(99)99999-9999", "data-mask": "phone"}),
            "email": forms.EmailInput(attrs={"placeholder": "email@exemplo.com"}),
            "unidade": forms.TextInput(attrs={"placeholder": "Ex.: 101-A"}),
            "valor_condominio": _money_widget(),
        }
        labels = {
            "nome_completo": "Nome completo",
            "cpf": "CPF",
            "unidade": "Unidade",
            "valor_condominio": "Valor do condomínio",
        }

    def clean_nome_completo(self):
        nome = (self.cleaned_data.get("nome_completo") or "").strip()
        if len(nome) < 3:
            raise forms.ValidationError("Informe o nome completo (mínimo de 3 caracteres).")
        return nome

    def clean_cpf(self):
        digits = _digits_only(self.cleaned_data.get("cpf"))
        if not _is_valid_cpf(digits):
            raise forms.ValidationError("CPF inválido.")
        return digits

    def clean_telefone(self):
        return _validate_telefone(self.cleaned_data.get("telefone"))

    def clean_email(self):
        return (self.cleaned_data.get("email") or "").strip().lower()

    def clean_unidade(self):
        return (self.cleaned_data.get("unidade") or "").strip().upper()

    def clean(self):
        cleaned = super().clean()
        condominio = self.condominio
        if not condominio:
            raise forms.ValidationError("Condomínio não encontrado.")

        outros = Morador.objects.filter(condominio=condominio)
        if self.instance.pk:
            outros = outros.exclude(pk=self.instance.pk)
        cpf = cleaned.get("cpf")
        if cpf and outros.filter(cpf=cpf).exists():
            self.add_error("cpf", "CPF já cadastrado para este condomínio.")
        unidade = cleaned.get("unidade")
        if unidade and outros.filter(unidade__iexact=unidade).exists():
            self.add_error("unidade", "Unidade já cadastrada para este condomínio.")
        email = cleaned.get("email")
        if email and outros.filter(email__iexact=email).exists():
            self.add_error("email", "E-mail já cadastrado para este condomínio.")

        ativando = cleaned.get("ativo") and (not self.instance.pk or not self.instance.ativo)
        limite = condominio.limite_moradores()
        if ativando and limite is not None:
            ativos = Morador.objects.filter(condominio=condominio, ativo=True).count()
            if ativos >= limite:
                raise forms.ValidationError("Limite de moradores do plano atingido.")
        return cleaned


class AreaComumForm(CondominioFormMixin):
    dias_semana = forms.TypedMultipleChoiceField(
        label="Dias de funcionamento",
        choices=AreaComum.DiaSemana.choices,
        coerce=int,
        required=False,
        widget=forms.CheckboxSelectMultiple,
    )

    class Meta:
        model = AreaComum
        fields = [
            "nome",
            "descricao",
            "capacidade",
            "regras",
            "horario_abertura",
            "horario_fechamento",
            "dias_semana",
            "valor",
            "ativa",
        ]
        widgets = {
            "descricao": forms.Textarea(attrs={"rows": 2}),
            "regras": forms.Textarea(attrs={"rows": 3}),
            "horario_abertura": forms.TimeInput(format="%H:%M", attrs={"type": "time"}),
            "horario_fechamento": forms.TimeInput(format="%H:%M", attrs={"type": "time"}),
            "valor": _money_widget(),
        }
        labels = {
            "descricao": "Descrição",
            "horario_abertura": "Abre às",
            "horario_fechamento": "Fecha às",
            "valor": "Valor da reserva",
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        if not self.instance.pk and not self.data:
            self.initial["dias_semana"] = [d for d, _ in AreaComum.DiaSemana.choices]

    def clean_nome(self):
        nome = (self.cleaned_data.get("nome") or "").strip()
        condominio = self.condominio
        if nome and condominio:
            qs = AreaComum.objects.filter(condominio=condominio, nome__iexact=nome)
            if self.instance.pk:
                qs = qs.exclude(pk=self.instance.pk)
            if qs.exists():
                raise forms.ValidationError("Já existe uma área com este nome.")
        return nome

    def clean_dias_semana(self):
        dias = sorted(set(self.cleaned_data.get("dias_semana") or []))
        if not dias:
            raise forms.ValidationError("Selecione ao menos um dia de funcionamento.")
        return dias

    def clean(self):
        cleaned = super().clean()
        abertura = cleaned.get("horario_abertura")
        fechamento = cleaned.get("horario_fechamento")
        if abertura and fechamento and fechamento <= abertura:
            self.add_error("horario_fechamento", "O fechamento deve ser posterior à abertura.")
        return cleaned


class ReservaForm(CondominioFormMixin):
    class Meta:
        model = Reserva
        fields = ["area", "data", "hora_inicio", "hora_fim", "observacoes"]
        labels = {
            "area": "Área comum",
            "hora_inicio": "Início",
            "hora_fim": "Término",
            "observacoes": "Observações",
        }
        widgets = {
            "area": forms.Select(attrs={"class": "form-select"}),
            "data": _date_widget(),
            "hora_inicio": forms.TimeInput(format="%H:%M", attrs={"type": "time", "class": "form-control"}),
            "hora_fim": forms.TimeInput(format="%H:%M", attrs={"type": "time", "class": "form-control"}),
            "observacoes": forms.Textarea(attrs={"rows": 2, "class": "form-control"}),
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        if "area" in self.fields:
            self.fields["area"].queryset = self.fields["area"].queryset.filter(ativa=True)
        if "data" in self.fields:
            self.fields["data"].input_formats = DATE_FORMATS

    def clean(self):
        cleaned = super().clean()
        area = cleaned.get("area")
        data = cleaned.get("data")
        inicio = cleaned.get("hora_inicio")
        fim = cleaned.get("hora_fim")
        if area and data and inicio and fim:
            validar_reserva(area, data, inicio, fim, excluir_pk=self.instance.pk)
        return cleaned


class ReceitaForm(CondominioFormMixin):
    class Meta:
        model = Receita
        fields = ["categoria", "valor", "mes_referencia", "data_pagamento", "unidade", "observacoes"]
        labels = {
            "mes_referencia": "Mês de referência",
            "data_pagamento": "Data do pagamento",
            "observacoes": "Observações",
        }
        widgets = {
            "valor": _money_widget(),
            "mes_referencia": forms.TextInput(attrs={"type": "month"}),
            "data_pagamento": _date_widget(),
            "observacoes": forms.Textarea(attrs={"rows": 2}),
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        if not self.instance.pk and not self.data:
            self.initial.setdefault("mes_referencia", mes_atual())
            self.initial.setdefault("data_pagamento", timezone.now().date())
        if "data_pagamento" in self.fields:
            self.fields["data_pagamento"].input_formats = DATE_FORMATS

    def clean_unidade(self):
        return (self.cleaned_data.get("unidade") or "").strip().upper()


class DespesaForm(CondominioFormMixin):
    class Meta:
        model = Despesa
        fields = [
            "categoria",
            "valor",
            "mes_referencia",
            "vencimento",
            "data_pagamento",
            "unidade",
            "observacoes",
            "anexo",
        ]
        labels = {
            "mes_referencia": "Mês de referência",
            "data_pagamento": "Data do pagamento",
            "observacoes": "Observações",
            "anexo": "Comprovante (PDF, JPG ou PNG)",
        }
        widgets = {
            "valor": _money_widget(),
            "mes_referencia": forms.TextInput(attrs={"type": "month"}),
            "vencimento": _date_widget(),
            "data_pagamento": _date_widget(),
            "observacoes": forms.Textarea(attrs={"rows": 2}),
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        if not self.instance.pk and not self.data:
            self.initial.setdefault("mes_referencia", mes_atual())
        for name in ("vencimento", "data_pagamento"):
            if name in self.fields:
                self.fields[name].input_formats = DATE_FORMATS

    def clean_unidade(self):
        return (self.cleaned_data.get("unidade") or "").strip().upper()

    def clean_anexo(self):
        return _clean_anexo(self.cleaned_data.get("anexo"))


class AjusteSaldoForm(forms.Form):
    novo_saldo = forms.DecimalField(
        label="Novo saldo",
        max_digits=14,
        decimal_places=2,
        widget=forms.NumberInput(attrs={"step": "0.01", "class": "form-control", "autofocus": "autofocus"}),
    )
    observacoes = forms.CharField(
        label="Observações",
        required=False,
        widget=forms.Textarea(attrs={"rows": 2, "class": "form-control"}),
    )


class ComunicadoForm(CondominioFormMixin):
    ASSINATURA = (
        "\n\nAgradecemos a compreensão e colaboração de todos.\n\n"
        "Atenciosamente,\nAdministração do Condomínio"
    )
    MODELOS = {
        "Aviso de Manutenção": (
            "Prezados Condôminos,\n\nInformamos que haverá manutenção na área comum.\n\n"
            "- Data: \n- Horário: \n- Serviços: \n\n"
            "Solicitamos que evitem o local durante o período de manutenção."
        ),
        "Comunicado de Segurança": (
            "Prezados Condôminos,\n\nReforçamos a importância de trancar portas e janelas ao sair.\n\n"
            "- Verifique se todas as entradas estão devidamente fechadas.\n"
            "- Em caso de emergência, contate a portaria."
        ),
        "Convocação de Assembleia": (
            "Prezados Condôminos,\n\nConvocamos todos para a assembleia geral ordinária.\n\n"
            "- Data: \n- Horário: \n- Local: \n\nPauta:\n- \n\n"
            "Sua presença é fundamental para a tomada de decisões importantes."
        ),
        "Dedetização": (
            "Prezados Condôminos,\n\nInformamos que haverá dedetização no condomínio.\n\n"
            "- Data: \n- Horário: \n\n"
            "Solicitamos que mantenham janelas fechadas durante o período."
        ),
        "Eventos e Atividades": (
            "Prezados Condôminos,\n\nConvidamos todos para o evento do condomínio.\n\n"
            "- Data: \n- Horário: \n- Local: \n\n"
            "Confirme sua presença na portaria."
        ),
        "Informações Administrativas": (
            "Prezados Condôminos,\n\nInformamos que o escritório administrativo estará fechado.\n\n"
            "- Data: \n- Motivo: \n\n"
            "Para assuntos urgentes, contate a portaria."
        ),
        "Informações Financeiras": (
            "Prezados Condôminos,\n\nInformamos que a taxa condominial vence em .\n\n"
            "- Valor: \n\n"
            "Evite multas e juros, efetue o pagamento até a data de vencimento."
        ),
        "Regras e Regulamentos": (
            "Prezados Condôminos,\n\nLembramos que o silêncio deve ser mantido após as 22h.\n\n"
            "- Colabore para um ambiente tranquilo e respeitoso."
        ),
    }

    modelo = forms.ChoiceField(label="Modelo", required=False)

    class Meta:
        model = Comunicado
        fields = ["modelo", "titulo", "conteudo"]
        labels = {"titulo": "Título", "conteudo": "Mensagem"}
        widgets = {
            "titulo": forms.TextInput(attrs={"autofocus": "autofocus"}),
            "conteudo": forms.Textarea(attrs={"rows": 12}),
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields["modelo"].choices = [("", "Em branco")] + [(nome, nome) for nome in self.MODELOS]
        self.fields["modelo"].widget.attrs["data-templates"] = json.dumps(
            {nome: texto + self.ASSINATURA for nome, texto in self.MODELOS.items()}
        )

    @classmethod
    def texto_modelo(cls, nome):
        texto = cls.MODELOS.get(nome)
        return texto + cls.ASSINATURA if texto else ""

    def clean(self):
        cleaned = super().clean()
        modelo = cleaned.get("modelo")
        if modelo and not (cleaned.get("conteudo") or "").strip():
            cleaned["conteudo"] = self.texto_modelo(modelo)
            self.errors.pop("conteudo", None)
        if modelo and not (cleaned.get("titulo") or "").strip():
            cleaned["titulo"] = modelo
            self.errors.pop("titulo", None)
        return cleaned


class ChavePixForm(CondominioFormMixin):
    class Meta:
        model = ChavePix
        fields = ["tipo_chave", "chave", "dia_vencimento", "juros_ao_dia"]
        labels = {
            "tipo_chave": "Tipo da chave",
            "chave": "Chave PIX",
            "dia_vencimento": "Dia de vencimento",
            "juros_ao_dia": "Juros ao dia (%)",
        }
        widgets = {
            "tipo_chave": forms.Select(attrs={"class": "form-select"}),
            "dia_vencimento": forms.NumberInput(attrs={"min": "1", "max": "28"}),
            "juros_ao_dia": forms.NumberInput(attrs={"min": "0", "step": "0.001"}),
        }
        help_texts = {"dia_vencimento": "Entre 1 e 28, para valer em todos os meses."}

    def clean(self):
        cleaned = super().clean()
        tipo = cleaned.get("tipo_chave")
        chave = (cleaned.get("chave") or "").strip()
        if not tipo or not chave:
            return cleaned
        normalizada = normalizar_chave(tipo, chave)
        if tipo == ChavePix.TipoChave.CPF and not _is_valid_cpf(normalizada):
            self.add_error("chave", "CPF inválido.")
        elif tipo == ChavePix.TipoChave.CNPJ and not _is_valid_cnpj(normalizada):
            self.add_error("chave", "CNPJ inválido.")
        elif tipo == ChavePix.TipoChave.EMAIL and "@" not in normalizada:
            self.add_error("chave", "Informe um e-mail válido.")
        elif tipo == ChavePix.TipoChave.TELEFONE and not re.fullmatch(r"\+55\d{10,11}", normalizada):
            self.add_error("chave", "Telefone deve ter 10 ou 11 dígitos.")
        elif tipo == ChavePix.TipoChave.ALEATORIA and len(normalizada) != 36:
            self.add_error("chave", "A chave aleatória deve ter 36 caracteres.")
        cleaned["chave"] = normalizada
        return cleaned


class DedetizacaoForm(CondominioFormMixin):
    finalidades = forms.MultipleChoiceField(
        label="Finalidades",
        choices=Dedetizacao.Finalidade.choices,
        widget=forms.CheckboxSelectMultiple,
    )

    class Meta:
        model = Dedetizacao
        fields = ["empresa", "data", "finalidades", "observacoes", "anexo"]
        labels = {"empresa": "Empresa responsável", "observacoes": "Observações", "anexo": "Certificado"}
        widgets = {
            "data": _date_widget(),
            "observacoes": forms.Textarea(attrs={"rows": 2}),
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        if "data" in self.fields:
            self.fields["data"].input_formats = DATE_FORMATS

    def clean_anexo(self):
        return _clean_anexo(self.cleaned_data.get("anexo"))


class ManutencaoPreventivaForm(CondominioFormMixin):
    class Meta:
        model = ManutencaoPreventiva
        fields = ["titulo", "categoria", "descricao", "data_programada", "concluida"]
        labels = {
            "titulo": "Título",
            "descricao": "Descrição",
            "data_programada": "Data programada",
            "concluida": "Concluída",
        }
        widgets = {
            "categoria": forms.Select(attrs={"class": "form-select"}),
            "descricao": forms.Textarea(attrs={"rows": 3}),
            "data_programada": _date_widget(),
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        if "data_programada" in self.fields:
            self.fields["data_programada"].input_formats = DATE_FORMATS

    def save(self, commit=True):
        manutencao = super().save(commit=False)
        if manutencao.concluida and not manutencao.concluida_em:
            manutencao.concluida_em = timezone.now()
        if not manutencao.concluida:
            manutencao.concluida_em = None
        if commit:
            manutencao.save()
        return manutencao


class MultipleFileInput(forms.ClearableFileInput):
    allow_multiple_selected = True


class MultipleFileField(forms.FileField):
    def __init__(self, *args, **kwargs):
        kwargs.setdefault("widget", MultipleFileInput())
        super().__init__(*args, **kwargs)

    def clean(self, data, initial=None):
        single_file_clean = super().clean
        if isinstance(data, (list, tuple)):
            return [single_file_clean(d, initial) for d in data]
        if not data:
            return []
        return [single_file_clean(data, initial)]


class DocumentoEmpresarialForm(forms.ModelForm):
    arquivos = MultipleFileField(label="Anexos", required=False)

    class Meta:
        model = DocumentoEmpresarial
        fields = ["titulo", "data", "descricao"]
        labels = {"titulo": "Título", "descricao": "Descrição"}
        widgets = {
            "data": _date_widget(),
            "descricao": forms.Textarea(attrs={"rows": 3}),
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        if "data" in self.fields:
            self.fields["data"].input_formats = DATE_FORMATS

    def clean_arquivos(self):
        arquivos = self.cleaned_data.get("arquivos") or []
        for arquivo in arquivos:
            _clean_anexo(arquivo)
        return arquivos


class DocumentoCondominioForm(CondominioFormMixin):
    arquivos = MultipleFileField(label="Anexos", required=False, help_text="PDF ou imagem, até 5MB cada.")

    class Meta:
        model = DocumentoCondominio
        fields = ["tipo", "data_cadastro", "observacoes"]
        labels = {"tipo": "Tipo do documento", "data_cadastro": "Data", "observacoes": "Observações"}
        widgets = {
            "tipo": forms.Select(attrs={"class": "form-select"}),
            "data_cadastro": _date_widget(),
            "observacoes": forms.Textarea(attrs={"rows": 3}),
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields["data_cadastro"].input_formats = DATE_FORMATS

    def clean_observacoes(self):
        observacoes = (self.cleaned_data.get("observacoes") or "").strip()
        if not observacoes:
            raise forms.ValidationError("Observações são obrigatórias.")
        return observacoes

    def clean_arquivos(self):
        arquivos = self.cleaned_data.get("arquivos") or []
        for arquivo in arquivos:
            _clean_anexo(arquivo)
            extensao = arquivo.name.rsplit(".", 1)[-1].lower() if "." in arquivo.name else ""
            if extensao not in ANEXO_EXTENSOES:
                raise forms.ValidationError("Envie arquivos PDF, JPG ou PNG.")
        existentes = self.instance.pk and self.instance.anexos.exists()
        if not arquivos and not existentes:
            raise forms.ValidationError("É necessário anexar pelo menos um arquivo.")
        return arquivos


class AlterarSenhaForm(PasswordChangeForm):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields["old_password"].label = "Senha atual"
        self.fields["new_password1"].label = "Nova senha"
        self.fields["new_password1"].help_text = ""
        self.fields["new_password2"].label = "Confirmar nova senha"
        for field in self.fields.values():
            field.widget.attrs.setdefault("class", "form-control")


class SugestaoReclamacaoForm(forms.Form):
    TIPOS = [("sugestao", "Sugestão"), ("reclamacao", "Reclamação")]

    tipo = forms.ChoiceField(
        label="Tipo",
        choices=TIPOS,
        initial="sugestao",
        widget=forms.RadioSelect,
    )
    assunto = forms.CharField(label="Assunto", max_length=150)
    mensagem = forms.CharField(label="Mensagem", widget=forms.Textarea(attrs={"rows": 6}))

    def clean_assunto(self):
        assunto = (self.cleaned_data.get("assunto") or "").strip()
        if not assunto:
            raise forms.ValidationError("Informe o assunto.")
        return assunto

    def clean_mensagem(self):
        mensagem = (self.cleaned_data.get("mensagem") or "").strip()
        if not mensagem:
            raise forms.ValidationError("Escreva a mensagem.")
        return mensagem

    @property
    def rotulo_tipo(self):
        return dict(self.TIPOS).get(self.cleaned_data.get("tipo"), "Sugestão")


class DespesaEmpresarialForm(forms.ModelForm):
    class Meta:
        model = DespesaEmpresarial
        fields = ["descricao", "categoria", "valor", "data"]
        labels = {"descricao": "Descrição"}
        widgets = {
            "categoria": forms.Select(attrs={"class": "form-select"}),
            "valor": _money_widget(),
            "data": _date_widget(),
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        if "data" in self.fields:
            self.fields["data"].input_formats = DATE_FORMATS


class CondominioUpdateForm(forms.ModelForm):
    class Meta:
        model = Condominio
        fields = list(Condominio.CAMPOS_AUDITADOS)
        widgets = {
            "nome": forms.TextInput(attrs={"class": "form-control", "autofocus": "autofocus"}),
            "cnpj": forms.TextInput(
                attrs={
                    "class": "form-control",
                    "placeholder": "00.000.000/0000-00",
                    "data-mask": "cnpj",
                    "inputmode": "numeric",
                }
            ),
            "cep": forms.TextInput(
                attrs={
                    "class": "form-control",
                    "placeholder": "00000-000",
                    "data-mask": "cep",
                    "inputmode": "numeric",
                    "data-lookup": "viacep",
                }
            ),
            "estado": forms.TextInput(attrs={"class": "form-control", "maxlength": "2"}),
            "telefone_representante": forms.TextInput(
                attrs={"class": "form-control", "placeholder": "(99)99999-9999", "data-mask": "phone"}
            ),
        }
        labels = {
            "cnpj": "CNPJ",
            "cep": "CEP",
            "rua": "Logradouro",
            "numero": "Número",
            "estado": "UF",
            "nome_representante": "Representante legal",
            "email_representante": "E-mail do representante",
            "telefone_representante": "Telefone do representante",
        }

    def clean_cnpj(self):
        return _validate_cnpj(self.cleaned_data.get("cnpj", ""))

    def clean_cep(self):
        digits = _digits_only(self.cleaned_data.get("cep"))
        if not digits:
            return ""
        if len(digits) != 8:
            raise forms.ValidationError("CEP deve ter 8 dígitos.")
        return f"{digits[:5]}-{digits[5:]}"

    def clean_estado(self):
        return (self.cleaned_data.get("estado") or "").strip().upper()

    def clean_telefone_representante(self):
        return _validate_telefone(self.cleaned_data.get("telefone_representante"))


class CondominioForm(CondominioUpdateForm):
    class Meta(CondominioUpdateForm.Meta):
        fields = list(Condominio.CAMPOS_AUDITADOS) + [
            "matricula",
            "plano",
            "valor_plano",
            "forma_pagamento",
            "desconto",
            "ativo",
        ]
        help_texts = {"matricula": "Deixe em branco para gerar automaticamente."}

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        if "matricula" in self.fields:
            self.fields["matricula"].required = False
            self.fields["matricula"].label = "Matrícula"

    def clean_matricula(self):
        matricula = (self.cleaned_data.get("matricula") or "").strip().upper()
        if matricula:
            qs = Condominio.objects.filter(matricula=matricula)
            if self.instance.pk:
                qs = qs.exclude(pk=self.instance.pk)
            if qs.exists():
                raise forms.ValidationError("Matrícula já utilizada por outro condomínio.")
        return matricula

    def clean(self):
        cleaned = super().clean()
        plano = cleaned.get("plano")
        if plano and not cleaned.get("valor_plano"):
            cleaned["valor_plano"] = plano.valor
        return cleaned


def _criar_gestor(condominio, username, email, nome=""):
    """Cria (ou promove) o usuário gestor e devolve ``(usuario, senha_temporaria)``."""
    senha = get_random_string(10)
    primeiro, _, resto = (nome or "").strip().partition(" ")
    usuario = User.objects.filter(username__iexact=username).first()
    if usuario:
        usuario.email = email
        usuario.condominio = condominio
        usuario.papel = User.Papel.GESTOR
        usuario.is_active = True
        usuario.set_password(senha)
        usuario.save()
    else:
        usuario = User.objects.create_user(
            username=username,
            email=email,
            password=senha,
            first_name=primeiro,
            last_name=resto,
            condominio=condominio,
            papel=User.Papel.GESTOR,
        )
    gestor_group, _ = Group.objects.get_or_create(name=ROLE_GESTOR)
    morador_group, _ = Group.objects.get_or_create(name=ROLE_MORADOR)
    usuario.groups.add(gestor_group)
    usuario.groups.remove(morador_group)
    return usuario, senha


class CondominioCadastroForm(CondominioForm):
    gestor_username = forms.CharField(label="Login do gestor", max_length=150)
    gestor_email = forms.EmailField(label="E-mail do gestor")

    def clean_gestor_username(self):
        username = (self.cleaned_data.get("gestor_username") or "").strip()
        if User.objects.filter(username__iexact=username).exists():
            raise forms.ValidationError("Login já está em uso.")
        return username

    def clean_gestor_email(self):
        return (self.cleaned_data.get("gestor_email") or "").strip().lower()

    def save(self, commit=True):
        with transaction.atomic():
            condominio = super().save(commit=True)
            usuario, senha = _criar_gestor(
                condominio,
                self.cleaned_data["gestor_username"],
                self.cleaned_data["gestor_email"],
                condominio.nome_representante,
            )
        self.gestor = usuario
        self.senha_temporaria = senha
        return condominio


class TrocaGestorForm(forms.Form):
    username = forms.CharField(label="Login do novo gestor", max_length=150)
    email = forms.EmailField(label="E-mail do novo gestor")
    nome = forms.CharField(label="Nome do novo gestor", max_length=150, required=False)

    def __init__(self, *args, condominio=None, **kwargs):
        self.condominio = condominio
        super().__init__(*args, **kwargs)

    def clean_username(self):
        username = (self.cleaned_data.get("username") or "").strip()
        existente = User.objects.filter(username__iexact=username).first()
        if existente and existente.condominio_id != getattr(self.condominio, "pk", None):
            raise forms.ValidationError("Login já está em uso em outro condomínio.")
        return username

    def save(self):
        condominio = self.condominio
        data = self.cleaned_data
        with transaction.atomic():
            anteriores = User.objects.filter(condominio=condominio, papel=User.Papel.GESTOR).exclude(
                username__iexact=data["username"]
            )
            gestor_group, _ = Group.objects.get_or_create(name=ROLE_GESTOR)
            for antigo in anteriores:
                antigo.papel = User.Papel.MORADOR
                antigo.is_active = hasattr(antigo, "morador")
                antigo.save(update_fields=["papel", "is_active"])
                antigo.groups.remove(gestor_group)
            usuario, senha = _criar_gestor(condominio, data["username"], data["email"], data.get("nome"))
            condominio.email_representante = data["email"]
            if data.get("nome"):
                condominio.nome_representante = data["nome"]
            condominio.save(update_fields=["email_representante", "nome_representante", "atualizado_em"])
        logger.info("Gestor do condominio %s alterado para %s", condominio.matricula, usuario.username)
        return usuario, senha


class PrestacaoEnvioForm(forms.Form):
    mes_referencia = forms.CharField(
        label="Mês de referência",
        validators=[mes_referencia_validator],
        widget=forms.TextInput(attrs={"type": "month", "class": "form-control"}),
    )
    unidades = forms.MultipleChoiceField(
        label="Unidades",
        required=False,
        widget=forms.CheckboxSelectMultiple,
        help_text="Sem seleção, o relatório é enviado a todos os moradores com e-mail.",
    )

    def __init__(self, *args, condominio=None, **kwargs):
        super().__init__(*args, **kwargs)
        moradores = Morador.objects.filter(condominio=condominio, ativo=True).exclude(email="")
        self.fields["unidades"].choices = [
            (m.unidade, f"{m.unidade} - {m.nome_completo}") for m in moradores.order_by("unidade")
        ]


class RegistrarPagamentoForm(forms.Form):
    morador = forms.ModelChoiceField(
        label="Morador",
        queryset=Morador.objects.none(),
        widget=forms.Select(attrs={"class": "form-select"}),
    )
    mes_referencia = forms.CharField(
        label="Mês de referência",
        validators=[mes_referencia_validator],
        widget=forms.TextInput(attrs={"type": "month", "class": "form-control"}),
    )
    valor = ValorBRLField(
        label="Valor pago",
        required=False,
        min_value=0,
        help_text="Em branco, usa o valor do condomínio do morador.",
    )
    data_pagamento = forms.DateField(label="Data do pagamento", required=False, widget=_date_widget())
    observacoes = forms.CharField(
        label="Observações", required=False, widget=forms.Textarea(attrs={"rows": 2, "class": "form-control"})
    )

    def __init__(self, *args, condominio=None, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields["morador"].queryset = Morador.objects.filter(condominio=condominio, ativo=True)
        self.fields["data_pagamento"].input_formats = DATE_FORMATS
        if not self.data:
            self.initial.setdefault("mes_referencia", mes_atual())
            self.initial.setdefault("data_pagamento", timezone.now().date())


class PasswordRecoveryForm(forms.Form):
    identificador = forms.CharField(
        label="E-mail ou matrícula",
        max_length=150,
        widget=forms.TextInput(
            attrs={
                "class": "form-control",
                "placeholder": "Digite seu e-mail ou a matrícula do condomínio",
                "autocomplete": "email",
            }
        ),
    )

    def clean_identificador(self):
        value = (self.cleaned_data.get("identificador") or "").strip()
        if not value:
            raise forms.ValidationError("Informe e-mail ou matrícula para recuperar a senha.")
        return value
