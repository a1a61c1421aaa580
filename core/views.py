from datetime import datetime
import json
import logging
import urllib.parse

from django.contrib import messages
from django.contrib.auth import logout
from django.contrib.auth.models import Group
from django.contrib.auth.tokens import default_token_generator
from django.contrib.auth.mixins import LoginRequiredMixin, UserPassesTestMixin
from django.contrib.auth.views import LoginView, PasswordChangeView
from django.core.exceptions import PermissionDenied, ValidationError
from django.db import transaction
from django.db.models import Q, Sum
from django.shortcuts import get_object_or_404, redirect
from django.http import Http404, HttpResponse, JsonResponse
from django.template.loader import render_to_string
from django.urls import reverse, reverse_lazy
from django.utils import timezone
from django.utils.crypto import get_random_string
from django.utils.dateparse import parse_date
from django.utils.decorators import method_decorator
from django.utils.encoding import force_bytes
from django.utils.http import url_has_allowed_host_and_scheme, urlsafe_base64_encode
from django.views import View
from django.views.decorators.csrf import ensure_csrf_cookie
from django.views.generic import CreateView, DetailView, FormView, ListView, TemplateView, UpdateView

from .forms import (
    AjusteSaldoForm,
    AlterarSenhaForm,
    AreaComumForm,
    ChavePixForm,
    ComunicadoForm,
    CondominioCadastroForm,
    CondominioForm,
    CondominioUpdateForm,
    DedetizacaoForm,
    DespesaEmpresarialForm,
    DespesaForm,
    DocumentoCondominioForm,
    DocumentoEmpresarialForm,
    LoginForm,
    ManutencaoPreventivaForm,
    MoradorForm,
    PasswordRecoveryForm,
    PrestacaoEnvioForm,
    ReceitaForm,
    RegistrarPagamentoForm,
    ReservaForm,
    SugestaoReclamacaoForm,
    TrocaGestorForm,
)
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
    Usuario,
)
from .permissions import ROLE_MORADOR
from .services import is_gestor_user, morador_do_usuario, registrar_alteracoes_condominio
from .services.cobrancas import Cobranca, ano_valido, buscar_cobranca, cobrancas_do_ano
from .services.dashboard_metrics import (
    MAX_MESES_DASHBOARD,
    build_business_expense_charts,
    build_dashboard_data,
    build_plan_distribution,
)
from .services.financeiro import (
    ajustar_saldo,
    formatar_brl,
    mes_atual,
    montar_prestacao,
    obter_saldo,
    prestacao_csv,
    recalcular_saldo,
    registrar_pagamento_taxa,
    transacoes_recentes,
    voltar_saldo_automatico,
)
from .services.notificacoes import (
    enviar_acesso_morador,
    enviar_boas_vindas_gestor,
    enviar_comunicado,
    enviar_contato,
    enviar_prestacao_contas,
    enviar_recuperacao_senha,
    enviar_sugestao_reclamacao,
    enviar_troca_gestor,
)
from .services.pix import gerar_qrcode_data_uri, payload_do_condominio
from .services.reservas import cancelar_reserva_do_morador, decidir_reserva, eventos_calendario
from .services.vps_monitor import VpsApiError, detalhe_vps, resumo_vps


logger = logging.getLogger(__name__)


def _parse_limit(value, fallback=10, maximo=None):
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return fallback
    if parsed <= 0:
        return fallback
    return min(parsed, maximo) if maximo else parsed


def _parse_data(value):
    if not value:
        return None
    try:
        return parse_date(value)
    except ValueError:
        return None


def _login_url(request):
    return request.build_absolute_uri(reverse("login"))


class GestorRequiredMixin(LoginRequiredMixin, UserPassesTestMixin):
    def test_func(self):
        return is_gestor_user(self.request.user)

    def handle_no_permission(self):
        if not self.request.user.is_authenticated:
            return super().handle_no_permission()
        raise PermissionDenied


class SuperuserRequiredMixin(LoginRequiredMixin, UserPassesTestMixin):
    def test_func(self):
        return bool(self.request.user.is_superuser)

    def handle_no_permission(self):
        if not self.request.user.is_authenticated:
            return super().handle_no_permission()
        raise PermissionDenied


class MoradorRequiredMixin(LoginRequiredMixin):
    """Disponibiliza ``self.morador``; usuários sem cadastro de morador recebem 403."""

    def dispatch(self, request, *args, **kwargs):
        if not request.user.is_authenticated:
            return self.handle_no_permission()
        self.morador = morador_do_usuario(request.user)
        if not self.morador:
            raise PermissionDenied
        return super().dispatch(request, *args, **kwargs)


class CondominioQuerysetMixin(LoginRequiredMixin):
    def get_queryset(self):
        qs = super().get_queryset()
        condominio = getattr(self.request.user, "condominio", None)
        if hasattr(qs.model, "condominio"):
            if condominio:
                qs = qs.filter(condominio=condominio)
            else:
                qs = qs.none()
        return qs

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        querydict = self.request.GET.copy()
        querydict.pop("page", None)
        context["querystring"] = querydict.urlencode()
        return context


class CondominioFormMixin:
    def get_form_kwargs(self):
        kwargs = super().get_form_kwargs()
        kwargs["user"] = self.request.user
        return kwargs

    def form_valid(self, form):
        if hasattr(form.instance, "condominio_id"):
            condominio = getattr(self.request.user, "condominio", None)
            if not condominio:
                form.add_error(None, "Condomínio não encontrado. Vincule o usuário a um condomínio para cadastrar.")
                return self.form_invalid(form)
            form.instance.condominio = condominio
        return super().form_valid(form)


class CondominioDeleteView(GestorRequiredMixin, View):
    """Exclusão via POST de um registro do condomínio do usuário."""

    http_method_names = ["post"]
    model = None
    success_url_name = ""
    success_message = "Registro excluído."

    def after_delete(self, condominio):
        pass

    def post(self, request, *args, **kwargs):
        condominio = getattr(request.user, "condominio", None)
        obj = get_object_or_404(self.model, pk=kwargs.get("pk"), condominio=condominio)
        obj.delete()
        self.after_delete(condominio)
        messages.success(request, self.success_message)
        return redirect(self.success_url_name)


class DashboardView(LoginRequiredMixin, TemplateView):
    template_name = "core/dashboard.html"

    def dispatch(self, request, *args, **kwargs):
        if request.user.is_authenticated:
            if request.user.is_superuser and not request.user.condominio_id:
                return redirect("admin_dashboard")
            if not is_gestor_user(request.user):
                return redirect("morador_painel")
        return super().dispatch(request, *args, **kwargs)

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        condominio = self.request.user.condominio
        hoje = timezone.now().date()
        context.update(
            {
                "dashboard_data": build_dashboard_data(
                    condominio,
                    meses=_parse_limit(self.request.GET.get("meses"), 6, maximo=MAX_MESES_DASHBOARD),
                ),
                "saldo": obter_saldo(condominio),
                "transacoes": transacoes_recentes(condominio),
                "comunicados": Comunicado.objects.filter(condominio=condominio)[:5],
                "reservas_pendentes": Reserva.objects.filter(
                    condominio=condominio, status=Reserva.Status.PENDENTE
                ).select_related("area", "morador")[:5],
                "manutencoes_proximas": ManutencaoPreventiva.objects.filter(
                    condominio=condominio, concluida=False
                )[:5],
                "mes_atual": mes_atual(hoje),
            }
        )
        return context


class DashboardDataView(GestorRequiredMixin, View):
    def get(self, request, *args, **kwargs):
        condominio = getattr(request.user, "condominio", None)
        if not condominio:
            return JsonResponse({"error": "Condomínio não encontrado."}, status=400)
        meses = _parse_limit(request.GET.get("meses"), 6, maximo=MAX_MESES_DASHBOARD)
        data = build_dashboard_data(condominio, meses=meses)
        return JsonResponse(data)


class MoradorPainelView(MoradorRequiredMixin, TemplateView):
    template_name = "core/morador_painel.html"

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        hoje = timezone.now().date()
        cobrancas = cobrancas_do_ano(self.morador, hoje=hoje)
        context.update(
            {
                "morador": self.morador,
                "cobrancas_em_aberto": [c for c in cobrancas if c.em_aberto],
                "comunicados": Comunicado.objects.filter(condominio=self.morador.condominio)[:5],
                "proximas_reservas": Reserva.objects.filter(
                    morador=self.morador,
                    data__gte=hoje,
                    status__in=[Reserva.Status.PENDENTE, Reserva.Status.APROVADA],
                ).select_related("area")[:5],
            }
        )
        return context


class AdminDashboardView(SuperuserRequiredMixin, TemplateView):
    template_name = "core/admin_dashboard.html"

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        ativos = Condominio.objects.filter(ativo=True)
        context.update(
            {
                "total_condominios": Condominio.objects.count(),
                "condominios_ativos": ativos.count(),
                "total_moradores": Morador.objects.filter(ativo=True, condominio__ativo=True).count(),
                "receita_mensal": formatar_brl(sum((c.valor_mensal for c in ativos), 0)),
                "distribuicao_planos": build_plan_distribution(),
                "ultimos_condominios": Condominio.objects.select_related("plano").order_by("-criado_em")[:5],
            }
        )
        return context


class MoradorListView(GestorRequiredMixin, CondominioQuerysetMixin, ListView):
    model = Morador
    paginate_by = 10
    template_name = "core/moradores_list.html"

    def get_queryset(self):
        qs = super().get_queryset()
        termo = self.request.GET.get("q")
        if termo:
            qs = qs.filter(
                Q(nome_completo__icontains=termo)
                | Q(unidade__icontains=termo)
                | Q(cpf__icontains=termo)
                | Q(email__icontains=termo)
            )
        return qs.order_by("unidade")

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        condominio = self.request.user.condominio
        if condominio:
            context["moradores_ativos"] = Morador.objects.filter(condominio=condominio, ativo=True).count()
            context["limite_moradores"] = condominio.limite_moradores()
        return context


class MoradorCreateView(GestorRequiredMixin, CondominioFormMixin, CondominioQuerysetMixin, CreateView):
    model = Morador
    form_class = MoradorForm
    template_name = "core/form.html"
    success_url = reverse_lazy("moradores_list")
    extra_context = {"title": "Novo Morador"}

    def form_valid(self, form):
        messages.success(self.request, "Morador cadastrado com sucesso.")
        return super().form_valid(form)


class MoradorUpdateView(GestorRequiredMixin, CondominioFormMixin, CondominioQuerysetMixin, UpdateView):
    model = Morador
    form_class = MoradorForm
    template_name = "core/form.html"
    success_url = reverse_lazy("moradores_list")
    extra_context = {"title": "Editar Morador"}

    def form_valid(self, form):
        response = super().form_valid(form)
        usuario = self.object.usuario
        if usuario and usuario.is_active != self.object.ativo:
            usuario.is_active = self.object.ativo
            usuario.save(update_fields=["is_active"])
        messages.success(self.request, "Morador atualizado.")
        return response


class MoradorDeleteView(CondominioDeleteView):
    model = Morador
    success_url_name = "moradores_list"
    success_message = "Morador excluído."

    def post(self, request, *args, **kwargs):
        morador = get_object_or_404(Morador, pk=kwargs.get("pk"), condominio=request.user.condominio)
        if morador.usuario_id and morador.usuario_id != request.user.pk:
            usuario = morador.usuario
            usuario.is_active = False
            usuario.save(update_fields=["is_active"])
        return super().post(request, *args, **kwargs)


def _pode_reusar_login(usuario, morador):
    # só logins de morador, livres ou já ligados a este mesmo morador
    if usuario.is_superuser or usuario.papel != Usuario.Papel.MORADOR or is_gestor_user(usuario):
        return False
    return not Morador.objects.filter(usuario=usuario).exclude(pk=morador.pk).exists()


class MoradorLiberarAcessoView(GestorRequiredMixin, View):
    http_method_names = ["post"]

    def post(self, request, *args, **kwargs):
        morador = get_object_or_404(Morador, pk=kwargs.get("pk"), condominio=request.user.condominio)
        if not morador.email:
            messages.error(request, "Cadastre o e-mail do morador antes de liberar o acesso.")
            return redirect("moradores_list")
        if not morador.ativo:
            messages.error(request, "Não é possível liberar acesso para morador inativo.")
            return redirect("moradores_list")

        senha = get_random_string(10)
        usuario = morador.usuario
        if usuario is None:
            existente = Usuario.objects.filter(username__iexact=morador.email).first()
            if existente and existente.condominio_id != morador.condominio_id:
                messages.error(request, "Este e-mail já é usado como login em outro condomínio.")
                return redirect("moradores_list")
            if existente and not _pode_reusar_login(existente, morador):
                messages.error(request, "Este e-mail já é usado por outro login do condomínio.")
                return redirect("moradores_list")
            usuario = existente

        with transaction.atomic():
            if usuario is None:
                usuario = Usuario.objects.create_user(
                    username=morador.email,
                    email=morador.email,
                    password=senha,
                    first_name=morador.nome_completo.split(" ")[0].title(),
                    condominio=morador.condominio,
                    papel=Usuario.Papel.MORADOR,
                )
            else:
                usuario.email = morador.email
                usuario.is_active = True
                usuario.set_password(senha)
                usuario.save()
            morador_group, _ = Group.objects.get_or_create(name=ROLE_MORADOR)
            usuario.groups.add(morador_group)
            if morador.usuario_id != usuario.pk:
                morador.usuario = usuario
                morador.save(update_fields=["usuario", "atualizado_em"])

        enviado, erro = enviar_acesso_morador(morador, usuario, senha, _login_url(request))
        if enviado:
            messages.success(request, f"Acesso liberado e enviado para {morador.email}.")
        else:
            messages.warning(request, f"Acesso liberado, mas o e-mail não foi enviado. {erro or ''}".strip())
        return redirect("moradores_list")


class AreaComumListView(CondominioQuerysetMixin, ListView):
    model = AreaComum
    paginate_by = 10
    template_name = "core/areas_list.html"

    def get_queryset(self):
        qs = super().get_queryset()
        if not is_gestor_user(self.request.user):
            qs = qs.filter(ativa=True)
        termo = self.request.GET.get("q")
        if termo:
            qs = qs.filter(nome__icontains=termo)
        return qs.order_by("nome")


class AreaComumCreateView(GestorRequiredMixin, CondominioFormMixin, CondominioQuerysetMixin, CreateView):
    model = AreaComum
    form_class = AreaComumForm
    template_name = "core/form.html"
    success_url = reverse_lazy("areas_list")
    extra_context = {"title": "Nova Área Comum"}

    def form_valid(self, form):
        messages.success(self.request, "Área comum salva com sucesso.")
        return super().form_valid(form)


class AreaComumUpdateView(GestorRequiredMixin, CondominioFormMixin, CondominioQuerysetMixin, UpdateView):
    model = AreaComum
    form_class = AreaComumForm
    template_name = "core/form.html"
    success_url = reverse_lazy("areas_list")
    extra_context = {"title": "Editar Área Comum"}

    def form_valid(self, form):
        messages.success(self.request, "Área comum atualizada.")
        return super().form_valid(form)


class AreaComumDeleteView(CondominioDeleteView):
    model = AreaComum
    success_url_name = "areas_list"
    success_message = "Área comum excluída."


class ReservaListView(GestorRequiredMixin, CondominioQuerysetMixin, ListView):
    model = Reserva
    paginate_by = 10
    template_name = "core/reservas_list.html"

    def get_queryset(self):
        qs = super().get_queryset().select_related("area", "morador")
        status = self.request.GET.get("status")
        if status in Reserva.Status.values:
            qs = qs.filter(status=status)
        area = self.request.GET.get("area")
        if area:
            qs = qs.filter(area_id=area)
        termo = self.request.GET.get("q")
        if termo:
            qs = qs.filter(Q(morador__nome_completo__icontains=termo) | Q(morador__unidade__icontains=termo))
        return qs

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context["status_choices"] = Reserva.Status.choices
        context["areas"] = AreaComum.objects.filter(condominio=self.request.user.condominio)
        return context


class ReservaDecisaoView(GestorRequiredMixin, View):
    http_method_names = ["post"]

    def post(self, request, *args, **kwargs):
        reserva = get_object_or_404(Reserva, pk=kwargs.get("pk"), condominio=request.user.condominio)
        novo_status = (request.POST.get("status") or "").upper()
        try:
            decidir_reserva(reserva, novo_status, request.user)
        except ValidationError as exc:
            messages.error(request, " ".join(exc.messages))
        else:
            messages.success(request, f"Reserva {reserva.get_status_display().lower()}.")
        destino = request.POST.get("next")
        if destino and url_has_allowed_host_and_scheme(
            destino, allowed_hosts={request.get_host()}, require_https=request.is_secure()
        ):
            return redirect(destino)
        return redirect("reservas_list")


class ReservaCreateView(MoradorRequiredMixin, CondominioFormMixin, CreateView):
    model = Reserva
    form_class = ReservaForm
    template_name = "core/form.html"
    success_url = reverse_lazy("minhas_reservas")
    extra_context = {"title": "Solicitar Reserva"}

    def get_initial(self):
        initial = super().get_initial()
        area = self.request.GET.get("area")
        if area:
            initial["area"] = area
        return initial

    def form_valid(self, form):
        form.instance.morador = self.morador
        form.instance.status = Reserva.Status.PENDENTE
        messages.success(self.request, "Reserva solicitada. Aguarde a aprovação do síndico.")
        return super().form_valid(form)


class MinhasReservasView(MoradorRequiredMixin, ListView):
    model = Reserva
    paginate_by = 10
    template_name = "core/minhas_reservas.html"

    def get_queryset(self):
        return Reserva.objects.filter(morador=self.morador).select_related("area")


class ReservaCancelarView(MoradorRequiredMixin, View):
    http_method_names = ["post"]

    def post(self, request, *args, **kwargs):
        reserva = get_object_or_404(Reserva, pk=kwargs.get("pk"), condominio=self.morador.condominio)
        try:
            cancelar_reserva_do_morador(reserva, self.morador)
        except ValidationError as exc:
            messages.error(request, " ".join(exc.messages))
        else:
            messages.success(request, "Reserva cancelada.")
        return redirect("minhas_reservas")


class ReservaCalendarioView(LoginRequiredMixin, TemplateView):
    template_name = "core/reservas_calendario.html"


class ReservaEventosView(LoginRequiredMixin, View):
    def get(self, request, *args, **kwargs):
        condominio = getattr(request.user, "condominio", None)
        if not condominio:
            return JsonResponse({"error": "Condomínio não encontrado."}, status=400)
        inicio = _parse_data((request.GET.get("start") or "")[:10]) or timezone.now().date()
        fim = _parse_data((request.GET.get("end") or "")[:10])
        return JsonResponse(eventos_calendario(condominio, inicio, fim), safe=False)


class ReceitaListView(GestorRequiredMixin, CondominioQuerysetMixin, ListView):
    model = Receita
    paginate_by = 10
    template_name = "core/receitas_list.html"

    def get_queryset(self):
        qs = super().get_queryset()
        mes = self.request.GET.get("mes")
        if mes:
            qs = qs.filter(mes_referencia=mes)
        categoria = self.request.GET.get("categoria")
        if categoria:
            qs = qs.filter(categoria=categoria)
        termo = self.request.GET.get("q")
        if termo:
            qs = qs.filter(Q(unidade__icontains=termo) | Q(observacoes__icontains=termo))
        return qs

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context["total_filtrado"] = self.get_queryset().aggregate(total=Sum("valor"))["total"] or 0
        context["categorias"] = Receita.Categoria.choices
        return context


class FinanceiroFormMixin(CondominioFormMixin):
    """Recalcula o saldo do condomínio depois de gravar um lançamento."""

    success_message = ""

    def form_valid(self, form):
        response = super().form_valid(form)
        recalcular_saldo(self.object.condominio)
        messages.success(self.request, self.success_message)
        return response


class ReceitaCreateView(GestorRequiredMixin, FinanceiroFormMixin, CondominioQuerysetMixin, CreateView):
    model = Receita
    form_class = ReceitaForm
    template_name = "core/form.html"
    success_url = reverse_lazy("receitas_list")
    extra_context = {"title": "Nova Receita"}
    success_message = "Receita registrada."


class ReceitaUpdateView(GestorRequiredMixin, FinanceiroFormMixin, CondominioQuerysetMixin, UpdateView):
    model = Receita
    form_class = ReceitaForm
    template_name = "core/form.html"
    success_url = reverse_lazy("receitas_list")
    extra_context = {"title": "Editar Receita"}
    success_message = "Receita atualizada."


class ReceitaDeleteView(CondominioDeleteView):
    model = Receita
    success_url_name = "receitas_list"
    success_message = "Receita excluída."

    def after_delete(self, condominio):
        recalcular_saldo(condominio)


class DespesaListView(GestorRequiredMixin, CondominioQuerysetMixin, ListView):
    model = Despesa
    paginate_by = 10
    template_name = "core/despesas_list.html"

    def get_queryset(self):
        qs = super().get_queryset()
        mes = self.request.GET.get("mes")
        if mes:
            qs = qs.filter(mes_referencia=mes)
        categoria = self.request.GET.get("categoria")
        if categoria:
            qs = qs.filter(categoria=categoria)
        termo = self.request.GET.get("q")
        if termo:
            qs = qs.filter(Q(unidade__icontains=termo) | Q(observacoes__icontains=termo))
        return qs

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context["total_filtrado"] = self.get_queryset().aggregate(total=Sum("valor"))["total"] or 0
        context["categorias"] = Despesa.Categoria.choices
        return context


class DespesaCreateView(GestorRequiredMixin, FinanceiroFormMixin, CondominioQuerysetMixin, CreateView):
    model = Despesa
    form_class = DespesaForm
    template_name = "core/form.html"
    success_url = reverse_lazy("despesas_list")
    extra_context = {"title": "Nova Despesa"}
    success_message = "Despesa registrada."


class DespesaUpdateView(GestorRequiredMixin, FinanceiroFormMixin, CondominioQuerysetMixin, UpdateView):
    model = Despesa
    form_class = DespesaForm
    template_name = "core/form.html"
    success_url = reverse_lazy("despesas_list")
    extra_context = {"title": "Editar Despesa"}
    success_message = "Despesa atualizada."


class DespesaDeleteView(CondominioDeleteView):
    model = Despesa
    success_url_name = "despesas_list"
    success_message = "Despesa excluída."

    def after_delete(self, condominio):
        recalcular_saldo(condominio)


class SaldoView(GestorRequiredMixin, FormView):
    template_name = "core/saldo.html"
    form_class = AjusteSaldoForm
    success_url = reverse_lazy("saldo")

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        condominio = self.request.user.condominio
        context["saldo"] = obter_saldo(condominio)
        context["ajustes"] = AjusteSaldo.objects.filter(condominio=condominio).select_related("usuario")[:20]
        return context

    def form_valid(self, form):
        condominio = self.request.user.condominio
        if not condominio:
            raise PermissionDenied
        ajuste = ajustar_saldo(
            condominio,
            form.cleaned_data["novo_saldo"],
            form.cleaned_data.get("observacoes", ""),
            usuario=self.request.user,
        )
        messages.success(self.request, f"Saldo ajustado para {formatar_brl(ajuste.saldo_novo)}.")
        return super().form_valid(form)


class SaldoAutomaticoView(GestorRequiredMixin, View):
    http_method_names = ["post"]

    def post(self, request, *args, **kwargs):
        saldo = voltar_saldo_automatico(request.user.condominio)
        messages.success(request, f"Saldo voltou ao cálculo automático: {formatar_brl(saldo)}.")
        return redirect("saldo")


class SaldoRecalcularView(GestorRequiredMixin, View):
    http_method_names = ["post"]

    def post(self, request, *args, **kwargs):
        saldo = recalcular_saldo(request.user.condominio)
        messages.success(request, f"Saldo recalculado: {formatar_brl(saldo)}.")
        return redirect("saldo")


def _mes_da_requisicao(request):
    mes = (request.GET.get("mes") or request.POST.get("mes_referencia") or "").strip()
    try:
        datetime.strptime(mes, "%Y-%m")
    except ValueError:
        return mes_atual()
    return mes


class PrestacaoContasView(GestorRequiredMixin, TemplateView):
    template_name = "core/prestacao_contas.html"

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        condominio = self.request.user.condominio
        mes = _mes_da_requisicao(self.request)
        context["relatorio"] = montar_prestacao(condominio, mes)
        context.setdefault(
            "envio_form", PrestacaoEnvioForm(condominio=condominio, initial={"mes_referencia": mes})
        )
        return context

    def post(self, request, *args, **kwargs):
        condominio = request.user.condominio
        form = PrestacaoEnvioForm(request.POST, condominio=condominio)
        if not form.is_valid():
            return self.render_to_response(self.get_context_data(envio_form=form))
        relatorio = montar_prestacao(condominio, form.cleaned_data["mes_referencia"])
        log, falhas = enviar_prestacao_contas(
            relatorio, unidades=form.cleaned_data.get("unidades") or None, usuario=request.user
        )
        total = log.quantidade + len(falhas)
        if not total:
            messages.warning(request, "Nenhum morador com e-mail cadastrado para receber o relatório.")
        elif falhas:
            messages.warning(request, f"{log.quantidade} de {total} e-mails enviados.")
        else:
            messages.success(request, f"{log.quantidade} de {total} e-mails enviados.")
        return redirect(f"{reverse('prestacao_contas')}?mes={relatorio['mes_referencia']}")


class PrestacaoCsvView(GestorRequiredMixin, View):
    def get(self, request, *args, **kwargs):
        relatorio = montar_prestacao(request.user.condominio, _mes_da_requisicao(request))
        response = HttpResponse(prestacao_csv(relatorio), content_type="text/csv; charset=utf-8")
        response["Content-Disposition"] = (
            f'attachment; filename="prestacao_contas_{relatorio["mes_referencia"]}.csv"'
        )
        return response


class PrestacaoPdfView(GestorRequiredMixin, View):
    def get(self, request, *args, **kwargs):
        try:
            from weasyprint import HTML
        except ImportError:
            messages.error(
                request,
                "Para gerar PDF, instale a dependência weasyprint.",
            )
            return redirect("prestacao_contas")

        relatorio = montar_prestacao(request.user.condominio, _mes_da_requisicao(request))
        context = {"relatorio": relatorio, "gerado_em": timezone.now()}
        html = render_to_string("core/prestacao_pdf.html", context)
        pdf_file = HTML(string=html, base_url=request.build_absolute_uri("/")).write_pdf()
        response = HttpResponse(pdf_file, content_type="application/pdf")
        response["Content-Disposition"] = (
            f'inline; filename="prestacao_contas_{relatorio["mes_referencia"]}.pdf"'
        )
        return response


class RelatorioEnvioListView(GestorRequiredMixin, CondominioQuerysetMixin, ListView):
    model = RelatorioEnvioLog
    paginate_by = 10
    template_name = "core/relatorios_enviados.html"

    def get_queryset(self):
        return super().get_queryset().select_related("usuario")


class ComunicadoListView(CondominioQuerysetMixin, ListView):
    model = Comunicado
    paginate_by = 10
    template_name = "core/comunicados_list.html"

    def get_queryset(self):
        qs = super().get_queryset()
        termo = self.request.GET.get("q")
        if termo:
            qs = qs.filter(Q(titulo__icontains=termo) | Q(conteudo__icontains=termo))
        return qs


class ComunicadoDetailView(CondominioQuerysetMixin, DetailView):
    model = Comunicado
    template_name = "core/comunicado_detail.html"

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        texto = f"*{self.object.titulo}*\n\n{self.object.conteudo}"
        context["whatsapp_link"] = f"https://wa.me/?text={urllib.parse.quote(texto)}"
        return context


class ComunicadoCreateView(GestorRequiredMixin, CondominioFormMixin, CondominioQuerysetMixin, CreateView):
    model = Comunicado
    form_class = ComunicadoForm
    template_name = "core/form.html"
    extra_context = {"title": "Novo Comunicado"}

    def get_success_url(self):
        return reverse("comunicado_detail", args=[self.object.pk])

    def form_valid(self, form):
        messages.success(self.request, "Comunicado salvo.")
        return super().form_valid(form)


class ComunicadoUpdateView(GestorRequiredMixin, CondominioFormMixin, CondominioQuerysetMixin, UpdateView):
    model = Comunicado
    form_class = ComunicadoForm
    template_name = "core/form.html"
    extra_context = {"title": "Editar Comunicado"}

    def get_success_url(self):
        return reverse("comunicado_detail", args=[self.object.pk])

    def form_valid(self, form):
        messages.success(self.request, "Comunicado atualizado.")
        return super().form_valid(form)


class ComunicadoDeleteView(CondominioDeleteView):
    model = Comunicado
    success_url_name = "comunicados_list"
    success_message = "Comunicado excluído."


class ComunicadoEnviarEmailView(GestorRequiredMixin, View):
    http_method_names = ["post"]

    def post(self, request, *args, **kwargs):
        comunicado = get_object_or_404(Comunicado, pk=kwargs.get("pk"), condominio=request.user.condominio)
        resultado = enviar_comunicado(comunicado)
        resumo = f"{resultado['enviados']} de {resultado['total']} e-mails enviados."
        if not resultado["total"]:
            messages.warning(request, "Nenhum morador com e-mail cadastrado.")
        elif resultado["falhas"]:
            messages.warning(request, resumo)
        else:
            messages.success(request, resumo)
        return redirect("comunicado_detail", pk=comunicado.pk)


class ComunicadoWhatsappView(GestorRequiredMixin, View):
    def get(self, request, *args, **kwargs):
        comunicado = get_object_or_404(Comunicado, pk=kwargs.get("pk"), condominio=request.user.condominio)
        if not comunicado.enviado_whatsapp:
            comunicado.enviado_whatsapp = True
            comunicado.save(update_fields=["enviado_whatsapp", "atualizado_em"])
        texto = f"*{comunicado.titulo}*\n\n{comunicado.conteudo}"
        return redirect(f"https://wa.me/?text={urllib.parse.quote(texto)}")


class DedetizacaoListView(GestorRequiredMixin, CondominioQuerysetMixin, ListView):
    model = Dedetizacao
    paginate_by = 10
    template_name = "core/dedetizacoes_list.html"

    def get_queryset(self):
        qs = super().get_queryset()
        termo = self.request.GET.get("q")
        if termo:
            qs = qs.filter(Q(empresa__icontains=termo) | Q(observacoes__icontains=termo))
        return qs


class DedetizacaoCreateView(GestorRequiredMixin, CondominioFormMixin, CondominioQuerysetMixin, CreateView):
    model = Dedetizacao
    form_class = DedetizacaoForm
    template_name = "core/form.html"
    success_url = reverse_lazy("dedetizacoes_list")
    extra_context = {"title": "Nova Dedetização"}

    def form_valid(self, form):
        messages.success(self.request, "Dedetização registrada.")
        return super().form_valid(form)


class DedetizacaoUpdateView(GestorRequiredMixin, CondominioFormMixin, CondominioQuerysetMixin, UpdateView):
    model = Dedetizacao
    form_class = DedetizacaoForm
    template_name = "core/form.html"
    success_url = reverse_lazy("dedetizacoes_list")
    extra_context = {"title": "Editar Dedetização"}

    def form_valid(self, form):
        messages.success(self.request, "Dedetização atualizada.")
        return super().form_valid(form)


class DedetizacaoDeleteView(CondominioDeleteView):
    model = Dedetizacao
    success_url_name = "dedetizacoes_list"
    success_message = "Dedetização excluída."


class ManutencaoListView(GestorRequiredMixin, CondominioQuerysetMixin, ListView):
    model = ManutencaoPreventiva
    paginate_by = 10
    template_name = "core/manutencoes_list.html"

    def get_queryset(self):
        qs = super().get_queryset()
        situacao = self.request.GET.get("situacao")
        if situacao == "pendentes":
            qs = qs.filter(concluida=False)
        elif situacao == "atrasadas":
            qs = qs.filter(concluida=False, data_programada__lt=timezone.now().date())
        elif situacao == "concluidas":
            qs = qs.filter(concluida=True)
        categoria = self.request.GET.get("categoria")
        if categoria:
            qs = qs.filter(categoria=categoria)
        return qs

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context["categorias"] = ManutencaoPreventiva.Categoria.choices
        return context


class ManutencaoCreateView(GestorRequiredMixin, CondominioFormMixin, CondominioQuerysetMixin, CreateView):
    model = ManutencaoPreventiva
    form_class = ManutencaoPreventivaForm
    template_name = "core/form.html"
    success_url = reverse_lazy("manutencoes_list")
    extra_context = {"title": "Nova Manutenção Preventiva"}

    def form_valid(self, form):
        messages.success(self.request, "Manutenção programada.")
        return super().form_valid(form)


class ManutencaoUpdateView(GestorRequiredMixin, CondominioFormMixin, CondominioQuerysetMixin, UpdateView):
    model = ManutencaoPreventiva
    form_class = ManutencaoPreventivaForm
    template_name = "core/form.html"
    success_url = reverse_lazy("manutencoes_list")
    extra_context = {"title": "Editar Manutenção Preventiva"}

    def form_valid(self, form):
        messages.success(self.request, "Manutenção atualizada.")
        return super().form_valid(form)


class ManutencaoDeleteView(CondominioDeleteView):
    model = ManutencaoPreventiva
    success_url_name = "manutencoes_list"
    success_message = "Manutenção excluída."


class ManutencaoToggleView(GestorRequiredMixin, View):
    http_method_names = ["post"]

    def post(self, request, *args, **kwargs):
        manutencao = get_object_or_404(
            ManutencaoPreventiva, pk=kwargs.get("pk"), condominio=request.user.condominio
        )
        manutencao.concluida = not manutencao.concluida
        manutencao.concluida_em = timezone.now() if manutencao.concluida else None
        manutencao.save(update_fields=["concluida", "concluida_em"])
        if manutencao.concluida:
            messages.success(request, f"{manutencao.titulo}: marcada como concluída.")
        else:
            messages.success(request, f"{manutencao.titulo}: reaberta.")
        return redirect("manutencoes_list")


class ChavePixView(GestorRequiredMixin, UpdateView):
    model = ChavePix
    form_class = ChavePixForm
    template_name = "core/chave_pix.html"
    success_url = reverse_lazy("chave_pix")

    def get_object(self, queryset=None):
        condominio = self.request.user.condominio
        if not condominio:
            raise PermissionDenied
        return ChavePix.objects.filter(condominio=condominio).first()

    def get_form_kwargs(self):
        kwargs = super().get_form_kwargs()
        kwargs["user"] = self.request.user
        return kwargs

    def form_valid(self, form):
        form.instance.condominio = self.request.user.condominio
        messages.success(self.request, "Chave PIX salva.")
        return super().form_valid(form)

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        if self.object:
            payload = payload_do_condominio(self.request.user.condominio, 0, "TESTE")
            context["payload_teste"] = payload
            context["qrcode_teste"] = gerar_qrcode_data_uri(payload)
        return context


class RegistrarPagamentoView(GestorRequiredMixin, FormView):
    template_name = "core/form.html"
    form_class = RegistrarPagamentoForm
    success_url = reverse_lazy("registrar_pagamento")
    extra_context = {"title": "Registrar Pagamento de Taxa"}

    def get_form_kwargs(self):
        kwargs = super().get_form_kwargs()
        kwargs["condominio"] = self.request.user.condominio
        return kwargs

    def get_initial(self):
        initial = super().get_initial()
        if self.request.GET.get("morador"):
            initial["morador"] = self.request.GET["morador"]
        if self.request.GET.get("mes"):
            initial["mes_referencia"] = self.request.GET["mes"]
        return initial

    def form_valid(self, form):
        data = form.cleaned_data
        morador = data["morador"]
        receita, criada = registrar_pagamento_taxa(
            morador,
            data["mes_referencia"],
            valor=data.get("valor"),
            data_pagamento=data.get("data_pagamento"),
            observacoes=data.get("observacoes", ""),
        )
        if criada:
            messages.success(
                self.request,
                f"Pagamento de {formatar_brl(receita.valor)} registrado para a unidade {morador.unidade}.",
            )
        else:
            messages.warning(self.request, "Este mês já está quitado para a unidade.")
        return super().form_valid(form)


class MinhasCobrancasView(MoradorRequiredMixin, TemplateView):
    template_name = "core/minhas_cobrancas.html"

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        hoje = timezone.now().date()
        ano = _parse_limit(self.request.GET.get("ano"), hoje.year)
        if not ano_valido(ano, hoje):
            ano = hoje.year
        cobrancas = cobrancas_do_ano(self.morador, ano=ano, hoje=hoje)
        context.update(
            {
                "morador": self.morador,
                "ano": ano,
                "anos": [hoje.year - 1, hoje.year],
                "cobrancas": cobrancas,
                "total_em_aberto": sum((c.total for c in cobrancas if c.em_aberto), 0),
                "tem_chave_pix": ChavePix.objects.filter(condominio=self.morador.condominio).exists(),
            }
        )
        return context


class CobrancaPixView(MoradorRequiredMixin, TemplateView):
    template_name = "core/cobranca_pix.html"

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        cobranca = buscar_cobranca(self.morador, kwargs.get("mes"))
        if cobranca is None:
            raise Http404("Cobrança não encontrada.")
        context["cobranca"] = cobranca
        context["morador"] = self.morador
        if cobranca.status == Cobranca.PAGA:
            return context
        referencia = f"{self.morador.unidade}{cobranca.mes_referencia}"
        payload = payload_do_condominio(self.morador.condominio, cobranca.total, referencia)
        context["payload"] = payload
        context["qrcode"] = gerar_qrcode_data_uri(payload)
        return context


class CondominioListView(SuperuserRequiredMixin, ListView):
    model = Condominio
    paginate_by = 10
    template_name = "core/condominios_list.html"

    def get_queryset(self):
        qs = Condominio.objects.select_related("plano")
        termo = self.request.GET.get("q")
        if termo:
            qs = qs.filter(
                Q(nome__icontains=termo) | Q(matricula__icontains=termo) | Q(cidade__icontains=termo)
            )
        situacao = self.request.GET.get("situacao")
        if situacao == "ativos":
            qs = qs.filter(ativo=True)
        elif situacao == "inativos":
            qs = qs.filter(ativo=False)
        return qs.order_by("nome")

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        querydict = self.request.GET.copy()
        querydict.pop("page", None)
        context["querystring"] = querydict.urlencode()
        context["planos"] = Plano.objects.all()
        return context


class CondominioCreateView(SuperuserRequiredMixin, CreateView):
    model = Condominio
    form_class = CondominioCadastroForm
    template_name = "core/form.html"
    success_url = reverse_lazy("condominios_list")
    extra_context = {"title": "Novo Condomínio"}

    def form_valid(self, form):
        response = super().form_valid(form)
        enviado, erro = enviar_boas_vindas_gestor(
            self.object, form.gestor, form.senha_temporaria, _login_url(self.request)
        )
        messages.success(self.request, f"Condomínio {self.object.matricula} cadastrado.")
        if not enviado:
            messages.warning(
                self.request,
                f"E-mail de boas-vindas não enviado. {erro or 'Verifique RESEND_API_KEY e EMAIL_FROM.'}",
            )
        return response


class CondominioAdminUpdateView(SuperuserRequiredMixin, UpdateView):
    model = Condominio
    form_class = CondominioForm
    template_name = "core/form.html"
    success_url = reverse_lazy("condominios_list")
    extra_context = {"title": "Editar Condomínio"}

    def form_valid(self, form):
        anteriores = {campo: form.initial.get(campo) for campo in Condominio.CAMPOS_AUDITADOS}
        response = super().form_valid(form)
        registrar_alteracoes_condominio(self.object, anteriores, usuario=self.request.user)
        messages.success(self.request, "Condomínio atualizado.")
        return response


class CondominioTrocaGestorView(SuperuserRequiredMixin, FormView):
    form_class = TrocaGestorForm
    template_name = "core/form.html"
    success_url = reverse_lazy("condominios_list")

    def dispatch(self, request, *args, **kwargs):
        self.condominio = get_object_or_404(Condominio, pk=kwargs.get("pk"))
        return super().dispatch(request, *args, **kwargs)

    def get_form_kwargs(self):
        kwargs = super().get_form_kwargs()
        kwargs["condominio"] = self.condominio
        return kwargs

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context["title"] = f"Trocar gestor - {self.condominio.nome}"
        return context

    def form_valid(self, form):
        usuario, senha = form.save()
        enviado, erro = enviar_troca_gestor(self.condominio, usuario, senha, _login_url(self.request))
        messages.success(self.request, f"{usuario.username} agora é o gestor de {self.condominio.nome}.")
        if not enviado:
            messages.warning(self.request, f"E-mail ao novo gestor não enviado. {erro or ''}".strip())
        return super().form_valid(form)


class CondominioBoasVindasView(SuperuserRequiredMixin, View):
    http_method_names = ["post"]

    def post(self, request, *args, **kwargs):
        condominio = get_object_or_404(Condominio, pk=kwargs.get("pk"))
        gestor = condominio.usuarios.filter(papel=Usuario.Papel.GESTOR, is_active=True).order_by("date_joined").first()
        if not gestor:
            messages.error(request, "Nenhum gestor ativo para este condomínio.")
            return redirect("condominios_list")
        senha = get_random_string(10)
        gestor.set_password(senha)
        gestor.save(update_fields=["password"])
        enviado, erro = enviar_boas_vindas_gestor(condominio, gestor, senha, _login_url(request))
        if enviado:
            messages.success(request, f"Boas-vindas reenviadas para {gestor.email}.")
        else:
            messages.error(request, f"E-mail não enviado. {erro or ''}".strip())
        return redirect("condominios_list")


class CondominioPerfilView(GestorRequiredMixin, UpdateView):
    model = Condominio
    form_class = CondominioUpdateForm
    template_name = "core/condominio_perfil.html"
    success_url = reverse_lazy("condominio_perfil")

    def get_object(self, queryset=None):
        return get_object_or_404(Condominio, pk=self.request.user.condominio_id)

    def form_valid(self, form):
        anteriores = {campo: form.initial.get(campo) for campo in Condominio.CAMPOS_AUDITADOS}
        response = super().form_valid(form)
        logs = registrar_alteracoes_condominio(self.object, anteriores, usuario=self.request.user)
        if logs:
            messages.success(self.request, "Dados do condomínio atualizados.")
        else:
            messages.info(self.request, "Nenhuma alteração encontrada.")
        return response

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context["alteracoes"] = self.object.alteracoes.select_related("usuario")[:20]
        return context


class DocumentoAnexosMixin:
    anexo_model = AnexoDocumento

    def _salvar_anexos(self, documento, arquivos):
        for arquivo in arquivos:
            self.anexo_model.objects.create(
                documento=documento,
                arquivo=arquivo,
                nome_arquivo=arquivo.name,
                tipo_arquivo=getattr(arquivo, "content_type", "") or "",
            )

    def form_valid(self, form):
        response = super().form_valid(form)
        self._salvar_anexos(self.object, form.cleaned_data.get("arquivos") or [])
        return response


class DocumentoCondominioListView(CondominioQuerysetMixin, ListView):
    """Documentos do condomínio; o gestor mantém, moradores apenas consultam."""

    model = DocumentoCondominio
    paginate_by = 10
    template_name = "core/documentos_condominio_list.html"

    def get_queryset(self):
        qs = super().get_queryset().prefetch_related("anexos")
        tipo = self.request.GET.get("tipo")
        if tipo:
            qs = qs.filter(tipo=tipo)
        return qs

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context["tipos"] = DocumentoCondominio.Tipo.choices
        context["pode_editar"] = is_gestor_user(self.request.user)
        return context


class DocumentoCondominioCreateView(
    GestorRequiredMixin, CondominioFormMixin, DocumentoAnexosMixin, CondominioQuerysetMixin, CreateView
):
    model = DocumentoCondominio
    form_class = DocumentoCondominioForm
    anexo_model = AnexoDocumentoCondominio
    template_name = "core/form.html"
    success_url = reverse_lazy("documentos_condominio_list")
    extra_context = {"title": "Novo Documento", "anexo_delete_url": "documentos_condominio_anexo_delete"}

    def form_valid(self, form):
        messages.success(self.request, "Documento salvo.")
        return super().form_valid(form)


class DocumentoCondominioUpdateView(
    GestorRequiredMixin, CondominioFormMixin, DocumentoAnexosMixin, CondominioQuerysetMixin, UpdateView
):
    model = DocumentoCondominio
    form_class = DocumentoCondominioForm
    anexo_model = AnexoDocumentoCondominio
    template_name = "core/form.html"
    success_url = reverse_lazy("documentos_condominio_list")
    extra_context = {"title": "Editar Documento", "anexo_delete_url": "documentos_condominio_anexo_delete"}

    def form_valid(self, form):
        messages.success(self.request, "Documento atualizado.")
        return super().form_valid(form)


class DocumentoCondominioDeleteView(CondominioDeleteView):
    model = DocumentoCondominio
    success_url_name = "documentos_condominio_list"
    success_message = "Documento excluído."


class AnexoDocumentoCondominioDeleteView(GestorRequiredMixin, View):
    http_method_names = ["post"]

    def post(self, request, *args, **kwargs):
        anexo = get_object_or_404(
            AnexoDocumentoCondominio, pk=kwargs.get("pk"), documento__condominio=request.user.condominio
        )
        documento_id = anexo.documento_id
        anexo.remover_arquivo()
        anexo.delete()
        messages.success(request, "Anexo removido.")
        return redirect("documentos_condominio_update", pk=documento_id)


class MinhaContaView(PasswordChangeView):
    template_name = "core/minha_conta.html"
    form_class = AlterarSenhaForm
    success_url = reverse_lazy("minha_conta")

    def form_valid(self, form):
        response = super().form_valid(form)
        usuario = self.request.user
        if usuario.condominio_id:
            CondominioAlteracaoLog.objects.create(
                condominio=usuario.condominio,
                campo="senha",
                valor_anterior="********",
                valor_novo="********",
                usuario=usuario,
            )
        logger.info("Senha alterada | usuario=%s", usuario.pk)
        messages.success(self.request, "Senha alterada com sucesso!")
        return response

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        usuario = self.request.user
        context["condominio"] = usuario.condominio
        context["morador"] = morador_do_usuario(usuario)
        return context


class SugestaoReclamacaoView(MoradorRequiredMixin, FormView):
    template_name = "core/sugestao_reclamacao.html"
    form_class = SugestaoReclamacaoForm
    success_url = reverse_lazy("sugestao_reclamacao")

    def form_valid(self, form):
        tipo = form.rotulo_tipo
        enviado, erro = enviar_sugestao_reclamacao(
            self.morador, tipo, form.cleaned_data["assunto"], form.cleaned_data["mensagem"]
        )
        if not enviado:
            form.add_error(None, f"Não foi possível enviar a mensagem. {erro or ''}".strip())
            return self.form_invalid(form)
        messages.success(self.request, f"{tipo} enviada com sucesso! O síndico responderá em breve.")
        return super().form_valid(form)


class DocumentoEmpresarialListView(SuperuserRequiredMixin, ListView):
    model = DocumentoEmpresarial
    paginate_by = 10
    template_name = "core/documentos_list.html"

    def get_queryset(self):
        qs = DocumentoEmpresarial.objects.prefetch_related("anexos")
        termo = self.request.GET.get("q")
        if termo:
            qs = qs.filter(Q(titulo__icontains=termo) | Q(descricao__icontains=termo))
        return qs


class DocumentoEmpresarialCreateView(SuperuserRequiredMixin, DocumentoAnexosMixin, CreateView):
    model = DocumentoEmpresarial
    form_class = DocumentoEmpresarialForm
    template_name = "core/form.html"
    success_url = reverse_lazy("documentos_list")
    extra_context = {"title": "Novo Documento"}

    def form_valid(self, form):
        messages.success(self.request, "Documento salvo.")
        return super().form_valid(form)


class DocumentoEmpresarialUpdateView(SuperuserRequiredMixin, DocumentoAnexosMixin, UpdateView):
    model = DocumentoEmpresarial
    form_class = DocumentoEmpresarialForm
    template_name = "core/form.html"
    success_url = reverse_lazy("documentos_list")
    extra_context = {"title": "Editar Documento"}

    def form_valid(self, form):
        messages.success(self.request, "Documento atualizado.")
        return super().form_valid(form)


class DocumentoEmpresarialDeleteView(SuperuserRequiredMixin, View):
    http_method_names = ["post"]

    def post(self, request, *args, **kwargs):
        documento = get_object_or_404(DocumentoEmpresarial, pk=kwargs.get("pk"))
        documento.delete()
        messages.success(request, "Documento excluído.")
        return redirect("documentos_list")


class AnexoDocumentoDeleteView(SuperuserRequiredMixin, View):
    http_method_names = ["post"]

    def post(self, request, *args, **kwargs):
        anexo = get_object_or_404(AnexoDocumento, pk=kwargs.get("pk"))
        documento_id = anexo.documento_id
        anexo.remover_arquivo()
        anexo.delete()
        messages.success(request, "Anexo removido.")
        return redirect("documento_update", pk=documento_id)


class DespesaEmpresarialListView(SuperuserRequiredMixin, ListView):
    model = DespesaEmpresarial
    paginate_by = 10
    template_name = "core/despesas_empresariais_list.html"

    def get_queryset(self):
        qs = DespesaEmpresarial.objects.all()
        categoria = self.request.GET.get("categoria")
        if categoria:
            qs = qs.filter(categoria=categoria)
        termo = self.request.GET.get("q")
        if termo:
            qs = qs.filter(descricao__icontains=termo)
        return qs

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context["categorias"] = DespesaEmpresarial.Categoria.choices
        context["total_filtrado"] = self.get_queryset().aggregate(total=Sum("valor"))["total"] or 0
        return context


class DespesaEmpresarialCreateView(SuperuserRequiredMixin, CreateView):
    model = DespesaEmpresarial
    form_class = DespesaEmpresarialForm
    template_name = "core/form.html"
    success_url = reverse_lazy("despesas_empresariais_list")
    extra_context = {"title": "Nova Despesa Empresarial"}

    def form_valid(self, form):
        messages.success(self.request, "Despesa salva.")
        return super().form_valid(form)


class DespesaEmpresarialUpdateView(SuperuserRequiredMixin, UpdateView):
    model = DespesaEmpresarial
    form_class = DespesaEmpresarialForm
    template_name = "core/form.html"
    success_url = reverse_lazy("despesas_empresariais_list")
    extra_context = {"title": "Editar Despesa Empresarial"}

    def form_valid(self, form):
        messages.success(self.request, "Despesa atualizada.")
        return super().form_valid(form)


class DespesaEmpresarialDeleteView(SuperuserRequiredMixin, View):
    http_method_names = ["post"]

    def post(self, request, *args, **kwargs):
        despesa = get_object_or_404(DespesaEmpresarial, pk=kwargs.get("pk"))
        despesa.delete()
        messages.success(request, "Despesa excluída.")
        return redirect("despesas_empresariais_list")


class DespesaEmpresarialGraficosView(SuperuserRequiredMixin, TemplateView):
    template_name = "core/despesas_empresariais_graficos.html"

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context["graficos"] = build_business_expense_charts(self.request.GET.get("range"))
        context["range_key"] = self.request.GET.get("range") or "12m"
        context["faixas"] = [("30d", "30 dias"), ("3m", "3 meses"), ("6m", "6 meses"), ("12m", "12 meses")]
        return context


class DespesaEmpresarialDataView(SuperuserRequiredMixin, View):
    def get(self, request, *args, **kwargs):
        start = _parse_data(request.GET.get("start"))
        end = _parse_data(request.GET.get("end"))
        return JsonResponse(build_business_expense_charts(request.GET.get("range"), start, end))


class VpsDashboardView(SuperuserRequiredMixin, TemplateView):
    template_name = "core/vps_dashboard.html"

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        forcar = self.request.GET.get("forcar") == "1"
        try:
            context["resumo"] = resumo_vps(forcar=forcar)
        except VpsApiError as exc:
            context["resumo"] = None
            messages.error(self.request, f"Não foi possível consultar as VPS: {exc}")
        return context


class VpsDataView(SuperuserRequiredMixin, View):
    def get(self, request, *args, **kwargs):
        try:
            vm_id = kwargs.get("vm_id")
            if vm_id:
                return JsonResponse(detalhe_vps(vm_id))
            return JsonResponse(resumo_vps(forcar=request.GET.get("forcar") == "1"))
        except VpsApiError as exc:
            status = 404 if exc.status == 404 else 502
            return JsonResponse({"error": str(exc)}, status=status)


class ContatoView(View):
    http_method_names = ["post"]

    def post(self, request, *args, **kwargs):
        try:
            payload = json.loads(request.body.decode("utf-8"))
        except (TypeError, ValueError):
            return JsonResponse({"error": "Dados inválidos."}, status=400)
        if not isinstance(payload, dict):
            return JsonResponse({"error": "Dados inválidos."}, status=400)

        nome = str(payload.get("nome") or "").strip()
        email = str(payload.get("email") or "").strip()
        telefone = str(payload.get("telefone") or "").strip()
        mensagem = str(payload.get("mensagem") or "").strip()

        if not nome or not email or not mensagem:
            return JsonResponse({"error": "Preencha nome, email e mensagem."}, status=400)

        enviado, detalhe = enviar_contato(nome, email, mensagem, telefone)
        if enviado:
            return JsonResponse({"ok": True})
        return JsonResponse({"error": detalhe or "Erro ao enviar email."}, status=500)


@method_decorator(ensure_csrf_cookie, name="dispatch")
class CustomLoginView(LoginView):
    template_name = "registration/login.html"
    authentication_form = LoginForm


class PasswordRecoveryView(FormView):
    template_name = "registration/password_recovery.html"
    form_class = PasswordRecoveryForm
    success_url = reverse_lazy("login")

    def _localizar_usuario(self, identificador):
        if "@" in identificador:
            usuario = Usuario.objects.filter(email__iexact=identificador, is_active=True).first()
            return usuario, (usuario.email if usuario else "")
        condominio = Condominio.objects.filter(matricula=identificador.upper()).first()
        if not condominio:
            return None, ""
        usuario = (
            condominio.usuarios.filter(papel=Usuario.Papel.GESTOR, is_active=True)
            .order_by("date_joined")
            .first()
        )
        if not usuario:
            return None, ""
        return usuario, usuario.email or condominio.email_representante

    def form_valid(self, form):
        identificador = form.cleaned_data["identificador"]
        usuario, destino = self._localizar_usuario(identificador)
        if not usuario:
            form.add_error("identificador", "Nenhuma conta encontrada com esse e-mail ou matrícula.")
            return self.form_invalid(form)
        if not destino:
            form.add_error("identificador", "Nenhum e-mail cadastrado para recuperar a senha.")
            return self.form_invalid(form)

        uid = urlsafe_base64_encode(force_bytes(usuario.pk))
        token = default_token_generator.make_token(usuario)
        reset_url = self.request.build_absolute_uri(reverse("password_reset_confirm", args=[uid, token]))
        enviado, erro = enviar_recuperacao_senha(usuario, destino, reset_url)
        if not enviado:
            messages.error(
                self.request,
                f"Não foi possível enviar o e-mail de recuperação. {erro or ''}".strip(),
            )
            return self.form_invalid(form)
        messages.success(self.request, "Enviamos um e-mail com as instruções para recuperar sua senha.")
        return super().form_valid(form)


def logout_view(request):
    """Permite logout via GET para evitar erro 405 em links simples."""
    logout(request)
    messages.success(request, "Sessão encerrada.")
    return redirect("login")
