from django.contrib import admin
from django.contrib.auth.admin import UserAdmin

from .models import (
    AjusteSaldo,
    AnexoDocumento,
    AnexoDocumentoCondominio,
    AreaComum,
    ChavePix,
    Comunicado,
    Condominio,
    CondominioAlteracaoLog,
    Dedetizacao,
    Despesa,
    DespesaEmpresarial,
    DocumentoCondominio,
    DocumentoEmpresarial,
    ManutencaoPreventiva,
    Morador,
    Plano,
    Receita,
    RelatorioEnvioLog,
    Reserva,
    SaldoFinanceiro,
    Usuario,
)


class CondominioAdminMixin:
    def get_queryset(self, request):
        qs = super().get_queryset(request)
        if request.user.is_superuser:
            return qs
        condominio = getattr(request.user, "condominio", None)
        if hasattr(qs.model, "condominio") and condominio:
            return qs.filter(condominio=condominio)
        return qs.none()

    def save_model(self, request, obj, form, change):
        if hasattr(obj, "condominio") and not obj.condominio_id and not request.user.is_superuser:
            obj.condominio = request.user.condominio
        return super().save_model(request, obj, form, change)

    def has_delete_permission(self, request, obj=None):
        if request.user.is_superuser:
            return True
        perm = f"{self.model._meta.app_label}.delete_{self.model._meta.model_name}"
        return request.user.has_perm(perm)


@admin.register(Usuario)
class UsuarioAdmin(CondominioAdminMixin, UserAdmin):
    fieldsets = (
        ("Credenciais", {"fields": ("username", "password")}),
        ("Dados pessoais", {"fields": ("first_name", "last_name", "email")}),
        ("Condomínio", {"fields": ("condominio", "papel")}),
        ("Permissoes", {"fields": ("is_active", "is_staff", "is_superuser", "groups", "user_permissions")}),
        ("Datas importantes", {"fields": ("last_login", "date_joined")}),
    )
    add_fieldsets = (
        (
            None,
            {
                "classes": ("wide",),
                "fields": ("username", "email", "condominio", "papel", "password1", "password2"),
            },
        ),
    )
    list_display = ("username", "email", "condominio", "papel", "is_active")
    list_filter = ("papel", "is_staff", "is_superuser", "is_active", "condominio")
    search_fields = ("username", "email", "first_name", "last_name")


@admin.register(Plano)
class PlanoAdmin(admin.ModelAdmin):
    list_display = ("codigo", "nome", "max_moradores", "valor")
    search_fields = ("codigo", "nome")


class CondominioAlteracaoInline(admin.TabularInline):
    model = CondominioAlteracaoLog
    extra = 0
    can_delete = False
    readonly_fields = ("campo", "valor_anterior", "valor_novo", "usuario", "alterado_em")


@admin.register(Condominio)
class CondominioAdmin(admin.ModelAdmin):
    fieldsets = (
        ("Dados do condomínio", {"fields": ("matricula", "nome", "cnpj", "ativo")}),
        (
            "Endereço",
            {"fields": ("cep", "rua", "numero", "complemento", "bairro", "cidade", "estado")},
        ),
        (
            "Representante legal",
            {"fields": ("nome_representante", "email_representante", "telefone_representante")},
        ),
        ("Plano", {"fields": ("plano", "valor_plano", "desconto", "forma_pagamento")}),
        ("Controle", {"fields": ("email_boas_vindas_enviado", "criado_em", "atualizado_em")}),
    )
    list_display = ("matricula", "nome", "cidade", "plano", "valor_plano", "ativo")
    list_filter = ("ativo", "plano", "forma_pagamento", "estado")
    search_fields = ("matricula", "nome", "cnpj", "cidade")
    readonly_fields = ("criado_em", "atualizado_em")
    inlines = [CondominioAlteracaoInline]


@admin.register(Morador)
class MoradorAdmin(CondominioAdminMixin, admin.ModelAdmin):
    list_display = ("unidade", "nome_completo", "cpf", "email", "valor_condominio", "ativo", "condominio")
    list_filter = ("ativo", "condominio")
    search_fields = ("nome_completo", "cpf", "email", "unidade")
    readonly_fields = ("criado_em", "atualizado_em")


@admin.register(AreaComum)
class AreaComumAdmin(CondominioAdminMixin, admin.ModelAdmin):
    list_display = ("nome", "capacidade", "horario_abertura", "horario_fechamento", "ativa", "condominio")
    list_filter = ("ativa", "condominio")
    search_fields = ("nome",)


@admin.register(Reserva)
class ReservaAdmin(CondominioAdminMixin, admin.ModelAdmin):
    list_display = ("area", "morador", "data", "hora_inicio", "hora_fim", "status", "condominio")
    list_filter = ("status", "condominio", "area")
    search_fields = ("morador__nome_completo", "morador__unidade", "area__nome")
    date_hierarchy = "data"


@admin.register(Receita)
class ReceitaAdmin(CondominioAdminMixin, admin.ModelAdmin):
    list_display = ("categoria", "valor", "mes_referencia", "unidade", "data_pagamento", "condominio")
    list_filter = ("categoria", "condominio")
    search_fields = ("unidade", "observacoes", "mes_referencia")


@admin.register(Despesa)
class DespesaAdmin(CondominioAdminMixin, admin.ModelAdmin):
    list_display = ("categoria", "valor", "mes_referencia", "vencimento", "data_pagamento", "condominio")
    list_filter = ("categoria", "condominio")
    search_fields = ("observacoes", "mes_referencia")


@admin.register(SaldoFinanceiro)
class SaldoFinanceiroAdmin(CondominioAdminMixin, admin.ModelAdmin):
    list_display = ("condominio", "saldo", "manual", "atualizado_em")
    readonly_fields = ("atualizado_em",)


@admin.register(AjusteSaldo)
class AjusteSaldoAdmin(CondominioAdminMixin, admin.ModelAdmin):
    list_display = ("condominio", "saldo_anterior", "saldo_novo", "usuario", "ajustado_em")
    list_filter = ("condominio",)


@admin.register(RelatorioEnvioLog)
class RelatorioEnvioLogAdmin(CondominioAdminMixin, admin.ModelAdmin):
    list_display = ("condominio", "mes_referencia", "enviado_via", "quantidade", "enviado_em")
    list_filter = ("enviado_via", "condominio")


@admin.register(Comunicado)
class ComunicadoAdmin(CondominioAdminMixin, admin.ModelAdmin):
    list_display = ("titulo", "enviado_email", "enviado_whatsapp", "criado_em", "condominio")
    list_filter = ("enviado_email", "enviado_whatsapp", "condominio")
    search_fields = ("titulo", "conteudo")


@admin.register(ChavePix)
class ChavePixAdmin(CondominioAdminMixin, admin.ModelAdmin):
    list_display = ("condominio", "tipo_chave", "chave", "dia_vencimento", "juros_ao_dia")


@admin.register(Dedetizacao)
class DedetizacaoAdmin(CondominioAdminMixin, admin.ModelAdmin):
    list_display = ("empresa", "data", "condominio")
    list_filter = ("condominio",)
    search_fields = ("empresa",)


@admin.register(ManutencaoPreventiva)
class ManutencaoPreventivaAdmin(CondominioAdminMixin, admin.ModelAdmin):
    list_display = ("titulo", "categoria", "data_programada", "concluida", "condominio")
    list_filter = ("categoria", "concluida", "condominio")
    search_fields = ("titulo", "descricao")


class AnexoDocumentoCondominioInline(admin.TabularInline):
    model = AnexoDocumentoCondominio
    extra = 0


@admin.register(DocumentoCondominio)
class DocumentoCondominioAdmin(CondominioAdminMixin, admin.ModelAdmin):
    list_display = ("tipo", "data_cadastro", "condominio")
    list_filter = ("tipo", "condominio")
    search_fields = ("observacoes",)
    inlines = [AnexoDocumentoCondominioInline]


class AnexoDocumentoInline(admin.TabularInline):
    model = AnexoDocumento
    extra = 0


@admin.register(DocumentoEmpresarial)
class DocumentoEmpresarialAdmin(admin.ModelAdmin):
    list_display = ("titulo", "data", "criado_em")
    search_fields = ("titulo", "descricao")
    inlines = [AnexoDocumentoInline]


@admin.register(DespesaEmpresarial)
class DespesaEmpresarialAdmin(admin.ModelAdmin):
    list_display = ("descricao", "categoria", "valor", "data")
    list_filter = ("categoria",)
    search_fields = ("descricao",)
    date_hierarchy = "data"
