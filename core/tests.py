import os
import shutil
import tempfile
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from unittest import mock

from django.contrib.auth import get_user_model
from django.contrib.auth.models import Group
from django.core.cache import cache
from django.core.exceptions import PermissionDenied, ValidationError
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase, override_settings
from django.urls import reverse
from django.utils import timezone

from .forms import ChavePixForm, ComunicadoForm, MoradorForm
from .models import (
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
)
from .permissions import ROLE_GESTOR, ROLE_MORADOR, setup_roles
from .services.cobrancas import Cobranca, buscar_cobranca, calcular_juros, cobrancas_do_ano, data_vencimento
from .services.dashboard_metrics import _resolve_period, build_business_expense_charts
from .services.financeiro import (
    ajustar_saldo,
    brl_para_decimal,
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
from .services.pix import crc16_ccitt, gerar_payload_pix, gerar_qrcode_data_uri, normalizar_chave
from .services.reservas import decidir_reserva, validar_reserva
from .services.resend_email import enviar_email, enviar_email_com_fallback
from .services.vps_monitor import VpsApiError, resumo_vps
from .templatetags.core_extras import whatsapp_number


User = get_user_model()

EMAIL_SETTINGS = {"RESEND_API_KEY": "re_test_123", "EMAIL_FROM": "no-reply@meuresidencial.com"}


def resposta_resend(status_code=200):
    response = mock.Mock()
    response.status_code = status_code
    response.json.return_value = {"id": "email-1"}
    response.text = ""
    return response


def proxima_data(dia_semana, semanas=1):
    hoje = timezone.now().date()
    return hoje + timedelta(days=(dia_semana - hoje.weekday()) % 7 + 7 * semanas)


def arquivo_pdf(nome="ata.pdf"):
    return SimpleUploadedFile(nome, b"%PDF-1.4 teste", content_type="application/pdf")


class MidiaTemporariaMixin:
    def setUp(self):
        super().setUp()
        media_root = tempfile.mkdtemp()
        override = override_settings(MEDIA_ROOT=media_root)
        override.enable()
        self.addCleanup(override.disable)
        self.addCleanup(shutil.rmtree, media_root, ignore_errors=True)


class CondominioBaseTestCase(TestCase):
    def setUp(self):
        setup_roles()
        self.condominio = Condominio.objects.create(nome="Residencial Aurora", cidade="São Paulo", estado="SP")
        self.gestor = User.objects.create_user(
            username="sindico",
            email="sindico@aurora.com",
            password="123",
            condominio=self.condominio,
            papel=User.Papel.GESTOR,
        )
        self.gestor.groups.add(Group.objects.get(name=ROLE_GESTOR))
        self.morador_user = User.objects.create_user(
            username="ana@aurora.com", email="ana@aurora.com", password="123", condominio=self.condominio
        )
        self.morador_user.groups.add(Group.objects.get(name=ROLE_MORADOR))
        self.morador = Morador.objects.create(
            condominio=self.condominio,
            usuario=self.morador_user,
            nome_completo="Ana Souza",
            cpf="52998224725",
            email="ana@aurora.com",
            unidade="101",
            valor_condominio=Decimal("300.00"),
        )


class CondominioIsolationTests(CondominioBaseTestCase):
    def setUp(self):
        super().setUp()
        self.outro = Condominio.objects.create(nome="Residencial Outro")
        self.morador_outro = Morador.objects.create(
            condominio=self.outro, nome_completo="Bruno Lima", cpf="11144477735", unidade="900"
        )

    def test_lista_moradores_filtra_por_condominio(self):
        self.client.force_login(self.gestor)
        response = self.client.get(reverse("moradores_list"))
        self.assertContains(response, "ANA SOUZA")
        self.assertNotContains(response, "BRUNO LIMA")

    def test_editar_morador_de_outro_condominio_retorna_404(self):
        self.client.force_login(self.gestor)
        response = self.client.get(reverse("moradores_update", args=[self.morador_outro.pk]))
        self.assertEqual(response.status_code, 404)

    def test_excluir_receita_de_outro_condominio_retorna_404(self):
        receita = Receita.objects.create(condominio=self.outro, valor=Decimal("10.00"), mes_referencia="2024-01")
        self.client.force_login(self.gestor)
        response = self.client.post(reverse("receitas_delete", args=[receita.pk]))
        self.assertEqual(response.status_code, 404)
        self.assertTrue(Receita.objects.filter(pk=receita.pk).exists())

    def test_mesmo_cpf_permitido_em_condominios_diferentes(self):
        form = MoradorForm(
            data={"nome_completo": "Ana Souza", "cpf": "11144477735", "unidade": "102", "valor_condominio": "0", "ativo": "on"},
            user=self.gestor,
        )
        self.assertTrue(form.is_valid(), form.errors)


class PermissaoTests(CondominioBaseTestCase):
    def test_setup_roles_cria_grupos(self):
        resumo = setup_roles()
        self.assertEqual(resumo["gestor_group"], ROLE_GESTOR)
        self.assertEqual(resumo["gestor_permissions"], 40)
        self.assertEqual(resumo["morador_permissions"], 11)

    def test_morador_apenas_visualiza_e_solicita_reserva(self):
        self.assertTrue(self.morador_user.has_perm("core.add_reserva"))
        self.assertTrue(self.morador_user.has_perm("core.view_comunicado"))
        self.assertFalse(self.morador_user.has_perm("core.delete_morador"))
        self.assertTrue(self.gestor.has_perm("core.delete_morador"))

    def test_morador_recebe_403_em_telas_de_gestao(self):
        self.client.force_login(self.morador_user)
        for name in ("moradores_list", "receitas_list", "saldo", "prestacao_contas", "chave_pix"):
            response = self.client.get(reverse(name))
            self.assertEqual(response.status_code, 403, name)

    def test_gestor_recebe_403_na_gestao_da_plataforma(self):
        self.client.force_login(self.gestor)
        response = self.client.get(reverse("condominios_list"))
        self.assertEqual(response.status_code, 403)

    def test_anonimo_redirecionado_para_login(self):
        response = self.client.get(reverse("moradores_list"))
        self.assertEqual(response.status_code, 302)
        self.assertIn(reverse("login"), response["Location"])

    def test_dashboard_redireciona_morador_para_painel(self):
        self.client.force_login(self.morador_user)
        response = self.client.get(reverse("dashboard"))
        self.assertRedirects(response, reverse("morador_painel"))

    def test_condominio_suspenso_encerra_sessao(self):
        self.condominio.ativo = False
        self.condominio.save()
        self.client.force_login(self.gestor)
        response = self.client.get(reverse("moradores_list"))
        self.assertRedirects(response, reverse("login"), fetch_redirect_response=False)
        self.assertNotIn("_auth_user_id", self.client.session)


class MoradorTests(CondominioBaseTestCase):
    def _payload(self, **overrides):
        payload = {
            "nome_completo": "Carlos Pereira",
            "cpf": "123.456.789-09",
            "telefone": "(11)98765-4321",
            "email": "carlos@aurora.com",
            "unidade": "202",
            "valor_condominio": "300.00",
            "ativo": "on",
        }
        payload.update(overrides)
        return payload

    def test_gestor_cadastra_morador(self):
        self.client.force_login(self.gestor)
        response = self.client.post(reverse("moradores_create"), self._payload())
        self.assertRedirects(response, reverse("moradores_list"), fetch_redirect_response=False)
        morador = Morador.objects.get(unidade="202")
        self.assertEqual(morador.condominio, self.condominio)
        self.assertEqual(morador.cpf, "12345678909")
        self.assertEqual(morador.nome_completo, "CARLOS PEREIRA")
        self.assertEqual(morador.telefone, "11987654321")

    def test_cpf_duplicado_no_condominio(self):
        form = MoradorForm(data=self._payload(cpf="529.982.247-25"), user=self.gestor)
        self.assertFalse(form.is_valid())
        self.assertIn("CPF já cadastrado para este condomínio.", form.errors["cpf"])

    def test_unidade_e_email_duplicados(self):
        form = MoradorForm(data=self._payload(unidade="101", email="ANA@aurora.com"), user=self.gestor)
        self.assertFalse(form.is_valid())
        self.assertIn("unidade", form.errors)
        self.assertIn("email", form.errors)

    def test_cpf_invalido(self):
        form = MoradorForm(data=self._payload(cpf="111.111.111-11"), user=self.gestor)
        self.assertFalse(form.is_valid())
        self.assertIn("CPF inválido.", form.errors["cpf"])

    def test_limite_de_moradores_do_plano(self):
        plano = Plano.objects.create(codigo="MINI", nome="Mini", max_moradores=1, valor=Decimal("49.90"))
        self.condominio.plano = plano
        self.condominio.save()
        self.client.force_login(self.gestor)
        response = self.client.post(reverse("moradores_create"), self._payload())
        self.assertEqual(response.status_code, 200)
        self.assertContains(response, "Limite de moradores do plano atingido.")
        self.assertFalse(Morador.objects.filter(unidade="202").exists())

    def test_morador_inativo_nao_conta_no_limite(self):
        plano = Plano.objects.create(codigo="MINI", nome="Mini", max_moradores=1, valor=Decimal("49.90"))
        self.condominio.plano = plano
        self.condominio.save()
        form = MoradorForm(data=self._payload(ativo=""), user=self.gestor)
        self.assertTrue(form.is_valid(), form.errors)

    @override_settings(**EMAIL_SETTINGS)
    @mock.patch("core.services.resend_email.requests.post")
    def test_liberar_acesso_cria_usuario_morador(self, post_mock):
        post_mock.return_value = resposta_resend()
        morador = Morador.objects.create(
            condominio=self.condominio,
            nome_completo="Carlos Pereira",
            cpf="12345678909",
            email="carlos@aurora.com",
            unidade="202",
        )
        self.client.force_login(self.gestor)
        response = self.client.post(reverse("moradores_liberar_acesso", args=[morador.pk]))
        self.assertRedirects(response, reverse("moradores_list"), fetch_redirect_response=False)
        morador.refresh_from_db()
        usuario = morador.usuario
        self.assertIsNotNone(usuario)
        self.assertEqual(usuario.username, "carlos@aurora.com")
        self.assertEqual(usuario.condominio, self.condominio)
        self.assertTrue(usuario.groups.filter(name=ROLE_MORADOR).exists())
        self.assertFalse(usuario.is_gestor())
        post_mock.assert_called_once()
        self.assertEqual(post_mock.call_args.kwargs["json"]["to"], ["carlos@aurora.com"])

    def test_liberar_acesso_nao_reaproveita_login_do_gestor(self):
        subsindico = User.objects.create_user(
            username="joao@aurora.com",
            email="joao@aurora.com",
            password="123",
            condominio=self.condominio,
            papel=User.Papel.GESTOR,
        )
        subsindico.groups.add(Group.objects.get(name=ROLE_GESTOR))
        morador = Morador.objects.create(
            condominio=self.condominio,
            nome_completo="João Dias",
            cpf="12345678909",
            email="joao@aurora.com",
            unidade="202",
        )
        self.client.force_login(self.gestor)
        response = self.client.post(reverse("moradores_liberar_acesso", args=[morador.pk]))
        self.assertRedirects(response, reverse("moradores_list"), fetch_redirect_response=False)
        morador.refresh_from_db()
        subsindico.refresh_from_db()
        self.assertIsNone(morador.usuario)
        self.assertTrue(subsindico.check_password("123"))
        self.assertFalse(subsindico.groups.filter(name=ROLE_MORADOR).exists())

    def test_liberar_acesso_nao_reaproveita_login_de_outro_morador(self):
        carla_user = User.objects.create_user(
            username="carla@aurora.com", email="carla@aurora.com", password="123", condominio=self.condominio
        )
        Morador.objects.create(
            condominio=self.condominio,
            usuario=carla_user,
            nome_completo="Carla Nunes",
            cpf="11144477735",
            email="carla.nova@aurora.com",
            unidade="301",
        )
        morador = Morador.objects.create(
            condominio=self.condominio,
            nome_completo="Carlos Pereira",
            cpf="12345678909",
            email="carla@aurora.com",
            unidade="202",
        )
        self.client.force_login(self.gestor)
        response = self.client.post(reverse("moradores_liberar_acesso", args=[morador.pk]), follow=True)
        self.assertContains(response, "Este e-mail já é usado por outro login do condomínio.")
        morador.refresh_from_db()
        carla_user.refresh_from_db()
        self.assertIsNone(morador.usuario)
        self.assertTrue(carla_user.check_password("123"))

    def test_cpf_com_mascara_cabe_no_campo(self):
        form = MoradorForm(data=self._payload(cpf="123.456.789-09"), user=self.gestor)
        self.assertTrue(form.is_valid(), form.errors)
        self.assertEqual(form.cleaned_data["cpf"], "12345678909")
        self.assertEqual(form.fields["cpf"].max_length, 14)

    def test_liberar_acesso_sem_email(self):
        morador = Morador.objects.create(
            condominio=self.condominio, nome_completo="Sem Email", cpf="12345678909", unidade="303"
        )
        self.client.force_login(self.gestor)
        self.client.post(reverse("moradores_liberar_acesso", args=[morador.pk]))
        morador.refresh_from_db()
        self.assertIsNone(morador.usuario)

    def test_excluir_morador_desativa_login(self):
        self.client.force_login(self.gestor)
        self.client.post(reverse("moradores_delete", args=[self.morador.pk]))
        self.assertFalse(Morador.objects.filter(pk=self.morador.pk).exists())
        self.morador_user.refresh_from_db()
        self.assertFalse(self.morador_user.is_active)


class ReservaTests(CondominioBaseTestCase):
    def setUp(self):
        super().setUp()
        self.area = AreaComum.objects.create(
            condominio=self.condominio,
            nome="Salão de Festas",
            capacidade=50,
            horario_abertura=time(8, 0),
            horario_fechamento=time(22, 0),
        )
        self.data = proxima_data(5)

    def _reserva(self, inicio, fim, status=Reserva.Status.PENDENTE, morador=None):
        return Reserva.objects.create(
            condominio=self.condominio,
            area=self.area,
            morador=morador or self.morador,
            data=self.data,
            hora_inicio=inicio,
            hora_fim=fim,
            status=status,
        )

    def test_horario_invertido_validado_antes_da_data(self):
        ontem = timezone.now().date() - timedelta(days=1)
        with self.assertRaisesMessage(ValidationError, "O horário de término deve ser posterior ao de início."):
            validar_reserva(self.area, ontem, time(12, 0), time(10, 0))

    def test_data_passada(self):
        ontem = timezone.now().date() - timedelta(days=1)
        with self.assertRaisesMessage(ValidationError, "Não é possível reservar datas passadas."):
            validar_reserva(self.area, ontem, time(10, 0), time(12, 0))

    def test_dia_sem_funcionamento(self):
        self.area.dias_semana = [0]
        self.area.save()
        with self.assertRaisesMessage(ValidationError, "A área não funciona neste dia da semana."):
            validar_reserva(self.area, proxima_data(1), time(10, 0), time(12, 0))

    def test_fora_do_horario_da_area(self):
        with self.assertRaisesMessage(ValidationError, "Horário fora do funcionamento da área."):
            validar_reserva(self.area, self.data, time(21, 0), time(23, 0))

    def test_conflito_de_horario(self):
        self._reserva(time(10, 0), time(12, 0))
        with self.assertRaisesMessage(ValidationError, "Já existe uma reserva para este horário."):
            validar_reserva(self.area, self.data, time(11, 0), time(13, 0))

    def test_intervalos_encostados_nao_conflitam(self):
        self._reserva(time(10, 0), time(12, 0))
        validar_reserva(self.area, self.data, time(12, 0), time(14, 0))
        validar_reserva(self.area, self.data, time(8, 0), time(10, 0))

    def test_reservas_canceladas_liberam_horario(self):
        self._reserva(time(10, 0), time(12, 0), status=Reserva.Status.CANCELADA)
        self._reserva(time(10, 0), time(12, 0), status=Reserva.Status.REJEITADA)
        validar_reserva(self.area, self.data, time(10, 0), time(12, 0))

    def test_morador_solicita_reserva_pendente(self):
        self.client.force_login(self.morador_user)
        response = self.client.post(
            reverse("reservas_create"),
            {"area": self.area.pk, "data": self.data.strftime("%d/%m/%Y"), "hora_inicio": "10:00", "hora_fim": "12:00"},
        )
        self.assertRedirects(response, reverse("minhas_reservas"), fetch_redirect_response=False)
        reserva = Reserva.objects.get()
        self.assertEqual(reserva.status, Reserva.Status.PENDENTE)
        self.assertEqual(reserva.morador, self.morador)
        self.assertEqual(reserva.condominio, self.condominio)

    def test_solicitacao_conflitante_exibe_erro(self):
        self._reserva(time(10, 0), time(12, 0))
        self.client.force_login(self.morador_user)
        response = self.client.post(
            reverse("reservas_create"),
            {"area": self.area.pk, "data": self.data.isoformat(), "hora_inicio": "11:00", "hora_fim": "13:00"},
        )
        self.assertEqual(response.status_code, 200)
        self.assertContains(response, "Já existe uma reserva para este horário.")
        self.assertEqual(Reserva.objects.count(), 1)

    def test_aprovacao_verifica_conflito_com_aprovadas(self):
        primeira = self._reserva(time(10, 0), time(12, 0))
        segunda = self._reserva(time(11, 0), time(13, 0))
        decidir_reserva(primeira, Reserva.Status.APROVADA, self.gestor)
        with self.assertRaisesMessage(ValidationError, "Já existe uma reserva aprovada para este horário."):
            decidir_reserva(segunda, Reserva.Status.APROVADA, self.gestor)
        segunda.refresh_from_db()
        self.assertEqual(segunda.status, Reserva.Status.PENDENTE)

    def test_gestor_aprova_pela_tela(self):
        reserva = self._reserva(time(10, 0), time(12, 0))
        self.client.force_login(self.gestor)
        self.client.post(reverse("reservas_decidir", args=[reserva.pk]), {"status": "APROVADA"})
        reserva.refresh_from_db()
        self.assertEqual(reserva.status, Reserva.Status.APROVADA)
        self.assertEqual(reserva.decidido_por, self.gestor)
        self.assertIsNotNone(reserva.decidido_em)

    def test_decisao_ignora_next_externo(self):
        reserva = self._reserva(time(10, 0), time(12, 0))
        self.client.force_login(self.gestor)
        response = self.client.post(
            reverse("reservas_decidir", args=[reserva.pk]),
            {"status": "APROVADA", "next": "https://evil.example.com/"},
        )
        self.assertRedirects(response, reverse("reservas_list"), fetch_redirect_response=False)

    def test_decisao_volta_para_next_interno(self):
        reserva = self._reserva(time(10, 0), time(12, 0))
        self.client.force_login(self.gestor)
        response = self.client.post(
            reverse("reservas_decidir", args=[reserva.pk]),
            {"status": "REJEITADA", "next": reverse("reservas_calendario")},
        )
        self.assertRedirects(response, reverse("reservas_calendario"), fetch_redirect_response=False)

    def test_eventos_com_datas_invalidas(self):
        self.client.force_login(self.gestor)
        response = self.client.get(reverse("reservas_eventos"), {"start": "2024-13-45", "end": "abc"})
        self.assertEqual(response.status_code, 200)

    def test_reserva_encerrada_nao_muda_de_status(self):
        reserva = self._reserva(time(10, 0), time(12, 0), status=Reserva.Status.REJEITADA)
        with self.assertRaises(ValidationError):
            decidir_reserva(reserva, Reserva.Status.APROVADA, self.gestor)

    def test_morador_cancela_a_propria_reserva(self):
        reserva = self._reserva(time(10, 0), time(12, 0))
        self.client.force_login(self.morador_user)
        self.client.post(reverse("reservas_cancelar", args=[reserva.pk]))
        reserva.refresh_from_db()
        self.assertEqual(reserva.status, Reserva.Status.CANCELADA)

    def test_morador_nao_cancela_reserva_de_outro(self):
        vizinho = Morador.objects.create(
            condominio=self.condominio, nome_completo="Vizinho", cpf="12345678909", unidade="102"
        )
        reserva = self._reserva(time(10, 0), time(12, 0), morador=vizinho)
        self.client.force_login(self.morador_user)
        response = self.client.post(reverse("reservas_cancelar", args=[reserva.pk]))
        self.assertEqual(response.status_code, 403)
        reserva.refresh_from_db()
        self.assertEqual(reserva.status, Reserva.Status.PENDENTE)

    def test_eventos_do_calendario(self):
        self._reserva(time(10, 0), time(12, 0), status=Reserva.Status.APROVADA)
        self._reserva(time(14, 0), time(16, 0), status=Reserva.Status.CANCELADA)
        self.client.force_login(self.morador_user)
        response = self.client.get(reverse("reservas_eventos"))
        eventos = response.json()
        self.assertEqual(len(eventos), 1)
        self.assertEqual(eventos[0]["start"], datetime.combine(self.data, time(10, 0)).isoformat())
        self.assertEqual(eventos[0]["extendedProps"]["status"], "APROVADA")

    def test_contador_de_reservas_pendentes_no_menu(self):
        self._reserva(time(10, 0), time(12, 0))
        self.client.force_login(self.gestor)
        response = self.client.get(reverse("reservas_list"))
        self.assertEqual(response.context["reservas_pendentes_count"], 1)


class FinanceiroTests(CondominioBaseTestCase):
    def _lancamentos(self):
        Receita.objects.create(condominio=self.condominio, valor=Decimal("200.00"), mes_referencia="2024-05", unidade="101")
        Receita.objects.create(condominio=self.condominio, valor=Decimal("100.00"), mes_referencia="2024-05", unidade="102")
        Despesa.objects.create(
            condominio=self.condominio,
            categoria=Despesa.Categoria.ENERGIA,
            valor=Decimal("120.50"),
            mes_referencia="2024-05",
        )

    def test_formatar_brl(self):
        self.assertEqual(formatar_brl(Decimal("1234567.8")), "R$ 1.234.567,80")
        self.assertEqual(formatar_brl(Decimal("-45.5")), "-R$ 45,50")
        self.assertEqual(formatar_brl(None), "R$ 0,00")

    def test_saldo_automatico(self):
        self._lancamentos()
        self.assertEqual(recalcular_saldo(self.condominio), Decimal("179.50"))

    def test_ajuste_manual_soma_lancamentos_posteriores(self):
        self._lancamentos()
        recalcular_saldo(self.condominio)
        ajuste = ajustar_saldo(self.condominio, Decimal("1000.00"), "Saldo do banco", usuario=self.gestor)
        self.assertEqual(ajuste.saldo_anterior, Decimal("179.50"))
        self.assertEqual(ajuste.diferenca, Decimal("820.50"))

        depois = timezone.now() + timedelta(seconds=1)
        Receita.objects.create(condominio=self.condominio, valor=Decimal("50.00"), mes_referencia="2024-06", criado_em=depois)
        Despesa.objects.create(
            condominio=self.condominio,
            categoria=Despesa.Categoria.AGUA,
            valor=Decimal("30.00"),
            mes_referencia="2024-06",
            criado_em=depois,
        )
        self.assertEqual(recalcular_saldo(self.condominio), Decimal("1020.00"))
        self.assertEqual(voltar_saldo_automatico(self.condominio), Decimal("199.50"))
        self.assertFalse(obter_saldo(self.condominio).manual)

    def test_tela_de_ajuste_de_saldo(self):
        self.client.force_login(self.gestor)
        response = self.client.post(reverse("saldo"), {"novo_saldo": "500.00", "observacoes": "Conferido"})
        self.assertRedirects(response, reverse("saldo"), fetch_redirect_response=False)
        saldo = obter_saldo(self.condominio)
        self.assertTrue(saldo.manual)
        self.assertEqual(saldo.saldo, Decimal("500.00"))

    def test_cadastrar_receita_recalcula_saldo(self):
        self.client.force_login(self.gestor)
        response = self.client.post(
            reverse("receitas_create"),
            {"categoria": "taxa_condominio", "valor": "350.00", "mes_referencia": "2024-07", "data_pagamento": "10/07/2024", "unidade": "101"},
        )
        self.assertRedirects(response, reverse("receitas_list"), fetch_redirect_response=False)
        self.assertEqual(obter_saldo(self.condominio).saldo, Decimal("350.00"))

    def test_excluir_despesa_recalcula_saldo(self):
        self._lancamentos()
        recalcular_saldo(self.condominio)
        despesa = Despesa.objects.get()
        self.client.force_login(self.gestor)
        self.client.post(reverse("despesas_delete", args=[despesa.pk]))
        self.assertEqual(obter_saldo(self.condominio).saldo, Decimal("300.00"))

    def test_receita_com_mes_invalido(self):
        self.client.force_login(self.gestor)
        response = self.client.post(
            reverse("receitas_create"),
            {"categoria": "outros", "valor": "10.00", "mes_referencia": "2024-13", "data_pagamento": "10/07/2024"},
        )
        self.assertEqual(response.status_code, 200)
        self.assertFalse(Receita.objects.exists())

    def test_prestacao_de_contas(self):
        self._lancamentos()
        recalcular_saldo(self.condominio)
        relatorio = montar_prestacao(self.condominio, "2024-05")
        self.assertEqual(relatorio["rotulo_mes"], "Mai/2024")
        self.assertEqual(relatorio["total_receitas"], Decimal("300.00"))
        self.assertEqual(relatorio["total_despesas"], Decimal("120.50"))
        self.assertEqual(relatorio["resultado"], Decimal("179.50"))
        self.assertEqual(relatorio["saldo_final"], Decimal("179.50"))
        self.assertEqual(relatorio["saldo_inicial"], Decimal("0.00"))
        csv_text = prestacao_csv(relatorio)
        self.assertIn("Total de receitas;R$ 300,00", csv_text)
        self.assertIn("Energia", csv_text)

    def test_exportar_csv(self):
        self._lancamentos()
        self.client.force_login(self.gestor)
        response = self.client.get(reverse("prestacao_csv"), {"mes": "2024-05"})
        self.assertEqual(response.status_code, 200)
        self.assertIn("prestacao_contas_2024-05.csv", response["Content-Disposition"])
        self.assertIn("Total de despesas;R$ 120,50", response.content.decode("utf-8"))

    @override_settings(**EMAIL_SETTINGS)
    @mock.patch("core.services.resend_email.requests.post")
    def test_envio_da_prestacao_registra_log(self, post_mock):
        post_mock.return_value = resposta_resend()
        Morador.objects.create(
            condominio=self.condominio,
            nome_completo="Bia Costa",
            cpf="12345678909",
            email="bia@aurora.com",
            unidade="102",
        )
        self._lancamentos()
        self.client.force_login(self.gestor)
        response = self.client.post(reverse("prestacao_contas"), {"mes_referencia": "2024-05", "unidades": ["102"]})
        self.assertEqual(response.status_code, 302)
        log = RelatorioEnvioLog.objects.get()
        self.assertEqual(log.quantidade, 1)
        self.assertEqual(log.destinatarios, ["102"])
        self.assertEqual(post_mock.call_count, 1)
        self.assertIn("Mai/2024", post_mock.call_args.kwargs["json"]["subject"])

    def test_registrar_pagamento_nao_duplica(self):
        receita, criada = registrar_pagamento_taxa(self.morador, "2024-03")
        self.assertTrue(criada)
        self.assertEqual(receita.valor, Decimal("300.00"))
        self.assertEqual(receita.categoria, Receita.Categoria.TAXA_CONDOMINIO)
        _, criada = registrar_pagamento_taxa(self.morador, "2024-03")
        self.assertFalse(criada)
        self.assertEqual(obter_saldo(self.condominio).saldo, Decimal("300.00"))

    def test_brl_para_decimal(self):
        self.assertEqual(brl_para_decimal("R$ 1.234,56"), Decimal("1234.56"))
        self.assertEqual(brl_para_decimal("R$ 1.234"), Decimal("1234.00"))
        self.assertEqual(brl_para_decimal("1.234.567"), Decimal("1234567.00"))
        self.assertEqual(brl_para_decimal("0,5"), Decimal("0.50"))
        self.assertEqual(brl_para_decimal("abc"), Decimal("0.00"))
        self.assertEqual(brl_para_decimal(None), Decimal("0.00"))
        self.assertEqual(brl_para_decimal(12.5), Decimal("12.50"))

    def test_registrar_pagamento_com_valor_em_reais(self):
        self.client.force_login(self.gestor)
        response = self.client.post(
            reverse("registrar_pagamento"),
            {
                "morador": self.morador.pk,
                "mes_referencia": "2024-06",
                "valor": "R$ 1.234,56",
                "data_pagamento": "10/06/2024",
            },
        )
        self.assertRedirects(response, reverse("registrar_pagamento"), fetch_redirect_response=False)
        receita = Receita.objects.get(mes_referencia="2024-06", unidade="101")
        self.assertEqual(receita.valor, Decimal("1234.56"))
        self.assertEqual(receita.data_pagamento, date(2024, 6, 10))

    def test_registrar_pagamento_rejeita_valor_sem_numero(self):
        self.client.force_login(self.gestor)
        response = self.client.post(
            reverse("registrar_pagamento"),
            {"morador": self.morador.pk, "mes_referencia": "2024-06", "valor": "abc"},
        )
        self.assertEqual(response.status_code, 200)
        self.assertIn("valor", response.context["form"].errors)
        self.assertFalse(Receita.objects.filter(mes_referencia="2024-06").exists())

    def test_transacoes_recentes_intercala_por_data_de_criacao(self):
        datas = [datetime(2024, 5, dia, 10, 0) for dia in (1, 2, 3, 4)]
        r1 = Receita.objects.create(condominio=self.condominio, valor=Decimal("10.00"), mes_referencia="2024-05")
        d1 = Despesa.objects.create(
            condominio=self.condominio, categoria=Despesa.Categoria.OUTROS, valor=Decimal("20.00"), mes_referencia="2024-05"
        )
        r2 = Receita.objects.create(condominio=self.condominio, valor=Decimal("30.00"), mes_referencia="2024-05")
        d2 = Despesa.objects.create(
            condominio=self.condominio, categoria=Despesa.Categoria.OUTROS, valor=Decimal("40.00"), mes_referencia="2024-05"
        )
        for (modelo, obj), criado_em in zip(((Receita, r1), (Despesa, d1), (Receita, r2), (Despesa, d2)), datas):
            modelo.objects.filter(pk=obj.pk).update(criado_em=criado_em)

        itens = transacoes_recentes(self.condominio, limite=3)
        self.assertEqual([item["tipo"] for item in itens], ["despesa", "receita", "despesa"])
        self.assertEqual([item["valor"] for item in itens], [Decimal("40.00"), Decimal("30.00"), Decimal("20.00")])

    def test_dashboard_limita_quantidade_de_meses(self):
        self.client.force_login(self.gestor)
        response = self.client.get(reverse("dashboard_data"), {"meses": "30000"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.json()["mensal"]["labels"]), 24)

    def test_dashboard_data_json(self):
        Receita.objects.create(condominio=self.condominio, valor=Decimal("250.00"), mes_referencia=mes_atual())
        outro = Condominio.objects.create(nome="Outro")
        Receita.objects.create(condominio=outro, valor=Decimal("999.00"), mes_referencia=mes_atual())
        self.client.force_login(self.gestor)
        response = self.client.get(reverse("dashboard_data"), {"meses": "3"})
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data["resumo"]["receitas_mes"], 250.0)
        self.assertEqual(data["resumo"]["moradores"], 1)
        self.assertEqual(len(data["mensal"]["labels"]), 3)
        self.assertEqual(data["mensal"]["receitas"][-1], 250.0)


@override_settings(**EMAIL_SETTINGS)
class ResendEmailTests(TestCase):
    @mock.patch("core.services.resend_email.requests.post")
    def test_envio_com_remetente_e_tag_do_condominio(self, post_mock):
        post_mock.return_value = resposta_resend()
        resultado = enviar_email("ana@aurora.com", "Assunto", "<p>oi</p>", matricula="AB12CD34")
        self.assertTrue(resultado.enviado)
        payload = post_mock.call_args.kwargs["json"]
        self.assertEqual(payload["from"], "MeuResidencial <no-reply@meuresidencial.com>")
        self.assertEqual(payload["tags"], [{"name": "condominio", "value": "AB12CD34"}])

    @mock.patch("core.services.resend_email.requests.post")
    def test_erro_da_api(self, post_mock):
        response = resposta_resend(422)
        response.json.return_value = {"name": "validation_error", "message": "Invalid to"}
        post_mock.return_value = response
        resultado = enviar_email("x", "Assunto", "<p>oi</p>")
        self.assertFalse(resultado.enviado)
        self.assertEqual(resultado.status, 422)
        self.assertEqual(resultado.detalhe, "validation_error: Invalid to")

    @override_settings(RESEND_ALLOW_TEST_FALLBACK=True, RESEND_TEST_FROM_EMAIL="onboarding@resend.dev")
    @mock.patch("core.services.resend_email.requests.post")
    def test_repete_com_remetente_de_teste_apos_403(self, post_mock):
        post_mock.side_effect = [resposta_resend(403), resposta_resend(200)]
        resultado = enviar_email_com_fallback("ana@aurora.com", "Assunto", "<p>oi</p>")
        self.assertTrue(resultado.enviado)
        self.assertEqual(post_mock.call_count, 2)
        self.assertEqual(post_mock.call_args.kwargs["json"]["from"], "MeuResidencial <onboarding@resend.dev>")


class PixTests(TestCase):
    def test_crc16(self):
        self.assertEqual(crc16_ccitt("123456789"), "29B1")

    def test_payload_com_valor(self):
        payload = gerar_payload_pix(
            "financeiro@aurora.com", Decimal("150.00"), "Residencial São José", "São Paulo", "101 2024-05"
        )
        self.assertTrue(payload.startswith("000201010211"))
        self.assertIn("0014br.gov.bcb.pix0121financeiro@aurora.com", payload)
        self.assertIn("5204000053039865406150.00", payload)
        self.assertIn("5802BR5920RESIDENCIAL SAO JOSE6009SAO PAULO", payload)
        self.assertIn("62130509101202405", payload)
        self.assertEqual(payload[-8:-4], "6304")
        self.assertEqual(payload[-4:], crc16_ccitt(payload[:-4]))

    def test_payload_sem_valor(self):
        payload = gerar_payload_pix("12345678909", 0, "", "")
        self.assertIn("53039865802BR", payload)
        self.assertIn("5910CONDOMINIO6006BRASIL", payload)
        self.assertIn("62070503***", payload)

    def test_payload_sem_chave(self):
        with self.assertRaises(ValueError):
            gerar_payload_pix("", 10, "Nome", "Cidade")

    def test_normalizar_chave(self):
        self.assertEqual(normalizar_chave("TELEFONE", "(11) 98765-4321"), "+5511987654321")
        self.assertEqual(normalizar_chave("CPF", "529.982.247-25"), "52998224725")
        self.assertEqual(normalizar_chave("EMAIL", " Fin@Aurora.com "), "fin@aurora.com")

    def test_telefone_com_ddd_55(self):
        self.assertEqual(normalizar_chave("TELEFONE", "(55) 99999-8888"), "+5555999998888")
        self.assertEqual(normalizar_chave("TELEFONE", "+55 55 99999-8888"), "+5555999998888")
        self.assertEqual(whatsapp_number("(55) 99999-8888"), "5555999998888")
        self.assertEqual(whatsapp_number("(11) 3333-4444"), "551133334444")

    def test_qrcode_data_uri(self):
        self.assertTrue(gerar_qrcode_data_uri("000201010211").startswith("data:image/png;base64,"))
        self.assertEqual(gerar_qrcode_data_uri(""), "")


class ChavePixFormTests(CondominioBaseTestCase):
    def test_chave_aleatoria_precisa_de_36_caracteres(self):
        form = ChavePixForm(
            data={"tipo_chave": "ALEATORIA", "chave": "abc", "dia_vencimento": 10, "juros_ao_dia": "0.033"},
            user=self.gestor,
        )
        self.assertFalse(form.is_valid())
        self.assertIn("chave", form.errors)

    def test_telefone_normalizado(self):
        form = ChavePixForm(
            data={"tipo_chave": "TELEFONE", "chave": "(11) 98765-4321", "dia_vencimento": 10, "juros_ao_dia": "0.033"},
            user=self.gestor,
        )
        self.assertTrue(form.is_valid(), form.errors)
        self.assertEqual(form.cleaned_data["chave"], "+5511987654321")

    def test_telefone_com_ddd_55(self):
        form = ChavePixForm(
            data={"tipo_chave": "TELEFONE", "chave": "(55) 99999-8888", "dia_vencimento": 10, "juros_ao_dia": "0.033"},
            user=self.gestor,
        )
        self.assertTrue(form.is_valid(), form.errors)
        self.assertEqual(form.cleaned_data["chave"], "+5555999998888")

    def test_dia_de_vencimento_limitado_a_28(self):
        form = ChavePixForm(
            data={"tipo_chave": "EMAIL", "chave": "fin@aurora.com", "dia_vencimento": 30, "juros_ao_dia": "0.033"},
            user=self.gestor,
        )
        self.assertFalse(form.is_valid())
        self.assertIn("dia_vencimento", form.errors)


class CobrancaTests(CondominioBaseTestCase):
    def setUp(self):
        super().setUp()
        Morador.objects.filter(pk=self.morador.pk).update(criado_em=datetime(2024, 1, 5, 9, 0))
        self.morador.refresh_from_db()

    def test_calcular_juros(self):
        self.assertEqual(
            calcular_juros(Decimal("100.00"), date(2024, 1, 10), Decimal("0.033"), hoje=date(2024, 1, 20)),
            (Decimal("0.33"), 10),
        )
        self.assertEqual(
            calcular_juros(Decimal("100.00"), date(2024, 1, 10), Decimal("0.033"), hoje=date(2024, 1, 10)),
            (Decimal("0.00"), 0),
        )

    def test_vencimento_respeita_fim_do_mes(self):
        self.assertEqual(data_vencimento(2023, 2, 30), date(2023, 2, 28))

    def test_cobrancas_do_ano(self):
        Receita.objects.create(condominio=self.condominio, valor=Decimal("300.00"), mes_referencia="2024-01", unidade="101")
        cobrancas = cobrancas_do_ano(self.morador, ano=2024, hoje=date(2024, 3, 20))
        self.assertEqual(len(cobrancas), 12)
        self.assertEqual(cobrancas[0].status, Cobranca.PAGA)
        fevereiro = cobrancas[1]
        self.assertEqual(fevereiro.status, Cobranca.VENCIDA)
        self.assertEqual(fevereiro.vencimento, date(2024, 2, 10))
        self.assertEqual(fevereiro.dias_atraso, 39)
        self.assertEqual(fevereiro.juros, Decimal("3.86"))
        self.assertEqual(fevereiro.total, Decimal("303.86"))
        self.assertEqual(cobrancas[3].status, Cobranca.PENDENTE)
        self.assertEqual(cobrancas[3].juros, Decimal("0.00"))

    def test_meses_anteriores_ao_cadastro_sao_ignorados(self):
        cobrancas = cobrancas_do_ano(self.morador, ano=2023, hoje=date(2024, 3, 20))
        self.assertEqual(cobrancas, [])

    def test_configuracao_da_chave_pix(self):
        ChavePix.objects.create(
            condominio=self.condominio,
            tipo_chave=ChavePix.TipoChave.EMAIL,
            chave="fin@aurora.com",
            dia_vencimento=5,
            juros_ao_dia=Decimal("0.100"),
        )
        cobrancas = cobrancas_do_ano(self.morador, ano=2024, hoje=date(2024, 1, 15))
        self.assertEqual(cobrancas[0].vencimento, date(2024, 1, 5))
        self.assertEqual(cobrancas[0].juros, Decimal("3.00"))

    def test_tela_de_pagamento_pix(self):
        ChavePix.objects.create(condominio=self.condominio, tipo_chave=ChavePix.TipoChave.EMAIL, chave="fin@aurora.com")
        self.client.force_login(self.morador_user)
        response = self.client.get(reverse("cobranca_pix", args=[mes_atual()]))
        self.assertEqual(response.status_code, 200)
        self.assertIn("br.gov.bcb.pix", response.context["payload"])
        self.assertTrue(response.context["qrcode"].startswith("data:image/png;base64,"))

    def test_cobranca_inexistente(self):
        self.client.force_login(self.morador_user)
        response = self.client.get(reverse("cobranca_pix", args=["2019-01"]))
        self.assertEqual(response.status_code, 404)

    def test_minhas_cobrancas(self):
        self.client.force_login(self.morador_user)
        response = self.client.get(reverse("minhas_cobrancas"), {"ano": 2024})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.context["cobrancas"]), 12)

    def test_ano_fora_da_faixa_usa_ano_corrente(self):
        self.client.force_login(self.morador_user)
        response = self.client.get(reverse("minhas_cobrancas"), {"ano": "10000"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.context["ano"], timezone.now().year)

    def test_cobranca_de_ano_fora_da_faixa(self):
        self.assertIsNone(buscar_cobranca(self.morador, "1999-01"))
        self.client.force_login(self.morador_user)
        response = self.client.get(reverse("cobranca_pix", args=["10000-01"]))
        self.assertEqual(response.status_code, 404)


class ComunicadoTests(CondominioBaseTestCase):
    def setUp(self):
        super().setUp()
        Morador.objects.create(
            condominio=self.condominio, nome_completo="Bia Costa", cpf="12345678909", email="bia@aurora.com", unidade="102"
        )
        Morador.objects.create(condominio=self.condominio, nome_completo="Sem Email", cpf="11144477735", unidade="103")
        self.comunicado = Comunicado.objects.create(
            condominio=self.condominio, titulo="Limpeza da caixa d'água", conteudo="Dia 10 <b>sem água</b>."
        )

    @override_settings(**EMAIL_SETTINGS)
    @mock.patch("core.services.resend_email.requests.post")
    def test_envio_por_email(self, post_mock):
        post_mock.return_value = resposta_resend()
        self.client.force_login(self.gestor)
        response = self.client.post(reverse("comunicados_enviar_email", args=[self.comunicado.pk]))
        self.assertRedirects(
            response, reverse("comunicado_detail", args=[self.comunicado.pk]), fetch_redirect_response=False
        )
        self.assertEqual(post_mock.call_count, 2)
        destinatarios = sorted(c.kwargs["json"]["to"][0] for c in post_mock.call_args_list)
        self.assertEqual(destinatarios, ["ana@aurora.com", "bia@aurora.com"])
        html = post_mock.call_args.kwargs["json"]["html"]
        self.assertIn("&lt;b&gt;sem água&lt;/b&gt;", html)
        self.comunicado.refresh_from_db()
        self.assertTrue(self.comunicado.enviado_email)

    @override_settings(RESEND_API_KEY="", EMAIL_FROM="")
    def test_envio_sem_configuracao_nao_marca_enviado(self):
        self.client.force_login(self.gestor)
        self.client.post(reverse("comunicados_enviar_email", args=[self.comunicado.pk]))
        self.comunicado.refresh_from_db()
        self.assertFalse(self.comunicado.enviado_email)

    def test_whatsapp_marca_envio(self):
        self.client.force_login(self.gestor)
        response = self.client.get(reverse("comunicados_whatsapp", args=[self.comunicado.pk]))
        self.assertEqual(response.status_code, 302)
        self.assertTrue(response["Location"].startswith("https://wa.me/?text="))
        self.comunicado.refresh_from_db()
        self.assertTrue(self.comunicado.enviado_whatsapp)

    def test_modelo_preenche_titulo_e_conteudo(self):
        form = ComunicadoForm(data={"modelo": "Dedetização", "titulo": "", "conteudo": ""}, user=self.gestor)
        self.assertTrue(form.is_valid(), form.errors)
        self.assertEqual(form.cleaned_data["titulo"], "Dedetização")
        self.assertIn("Atenciosamente", form.cleaned_data["conteudo"])

    def test_morador_le_comunicados(self):
        self.client.force_login(self.morador_user)
        response = self.client.get(reverse("comunicado_detail", args=[self.comunicado.pk]))
        self.assertEqual(response.status_code, 200)
        self.assertContains(response, "Limpeza da caixa")


class ManutencaoTests(CondominioBaseTestCase):
    def test_alternar_conclusao(self):
        manutencao = ManutencaoPreventiva.objects.create(
            condominio=self.condominio, titulo="Extintores", data_programada=timezone.now().date()
        )
        self.client.force_login(self.gestor)
        self.client.post(reverse("manutencoes_toggle", args=[manutencao.pk]))
        manutencao.refresh_from_db()
        self.assertTrue(manutencao.concluida)
        self.assertIsNotNone(manutencao.concluida_em)
        self.client.post(reverse("manutencoes_toggle", args=[manutencao.pk]))
        manutencao.refresh_from_db()
        self.assertFalse(manutencao.concluida)
        self.assertIsNone(manutencao.concluida_em)

    def test_contador_de_manutencoes_vencidas(self):
        hoje = timezone.now().date()
        ManutencaoPreventiva.objects.create(condominio=self.condominio, titulo="Atrasada", data_programada=hoje - timedelta(days=3))
        ManutencaoPreventiva.objects.create(condominio=self.condominio, titulo="Futura", data_programada=hoje + timedelta(days=30))
        self.client.force_login(self.gestor)
        response = self.client.get(reverse("manutencoes_list"))
        self.assertEqual(response.context["manutencoes_pendentes_count"], 1)


class CondominioAdminTests(CondominioBaseTestCase):
    def setUp(self):
        super().setUp()
        self.admin = User.objects.create_superuser(username="root", email="root@meuresidencial.com", password="123")

    @override_settings(**EMAIL_SETTINGS)
    @mock.patch("core.services.resend_email.requests.post")
    def test_cadastro_de_condominio_cria_gestor(self, post_mock):
        post_mock.return_value = resposta_resend()
        self.client.force_login(self.admin)
        response = self.client.post(
            reverse("condominios_create"),
            {
                "nome": "Residencial Novo",
                "cidade": "Campinas",
                "estado": "sp",
                "cep": "13010000",
                "forma_pagamento": "PIX",
                "valor_plano": "199.90",
                "desconto": "0",
                "ativo": "on",
                "gestor_username": "gestor.novo",
                "gestor_email": "Gestor@Novo.com",
            },
        )
        self.assertRedirects(response, reverse("condominios_list"), fetch_redirect_response=False)
        condominio = Condominio.objects.get(nome="Residencial Novo")
        self.assertEqual(len(condominio.matricula), 8)
        self.assertEqual(condominio.estado, "SP")
        self.assertEqual(condominio.cep, "13010-000")
        self.assertTrue(condominio.email_boas_vindas_enviado)
        gestor = User.objects.get(username="gestor.novo")
        self.assertEqual(gestor.condominio, condominio)
        self.assertEqual(gestor.email, "gestor@novo.com")
        self.assertTrue(gestor.is_gestor())
        post_mock.assert_called_once()

    def test_troca_de_gestor(self):
        self.client.force_login(self.admin)
        response = self.client.post(
            reverse("condominios_troca_gestor", args=[self.condominio.pk]),
            {"username": "novo.sindico", "email": "novo@aurora.com", "nome": "Novo Síndico"},
        )
        self.assertRedirects(response, reverse("condominios_list"), fetch_redirect_response=False)
        self.gestor.refresh_from_db()
        self.assertEqual(self.gestor.papel, User.Papel.MORADOR)
        self.assertFalse(self.gestor.is_active)
        self.assertFalse(self.gestor.groups.filter(name=ROLE_GESTOR).exists())
        novo = User.objects.get(username="novo.sindico")
        self.assertEqual(novo.papel, User.Papel.GESTOR)
        self.condominio.refresh_from_db()
        self.assertEqual(self.condominio.email_representante, "novo@aurora.com")

    def test_perfil_registra_alteracoes(self):
        self.client.force_login(self.gestor)
        response = self.client.post(
            reverse("condominio_perfil"),
            {"nome": "Residencial Aurora Boreal", "cidade": "São Paulo", "estado": "SP"},
        )
        self.assertRedirects(response, reverse("condominio_perfil"), fetch_redirect_response=False)
        log = CondominioAlteracaoLog.objects.get(condominio=self.condominio)
        self.assertEqual(log.campo, "nome")
        self.assertEqual(log.valor_anterior, "Residencial Aurora")
        self.assertEqual(log.valor_novo, "Residencial Aurora Boreal")
        self.assertEqual(log.usuario, self.gestor)

    def test_dashboard_da_plataforma(self):
        self.client.force_login(self.admin)
        response = self.client.get(reverse("dashboard"))
        self.assertRedirects(response, reverse("admin_dashboard"))
        response = self.client.get(reverse("admin_dashboard"))
        self.assertEqual(response.context["total_condominios"], 1)
        self.assertEqual(response.context["total_moradores"], 1)


@override_settings(HOSTINGER_API_TOKEN="token-teste", HOSTINGER_API_URL="https://api.teste/vps/v1")
class VpsMonitorTests(TestCase):
    def setUp(self):
        cache.clear()
        self.admin = User.objects.create_superuser(username="root", email="root@meuresidencial.com", password="123")

    def _resposta(self, status_code=200, data=None):
        response = mock.Mock()
        response.status_code = status_code
        response.text = ""
        response.json.return_value = data
        return response

    @mock.patch("core.services.vps_monitor.requests.get")
    def test_resumo_normaliza_e_usa_cache(self, get_mock):
        get_mock.return_value = self._resposta(
            data={
                "data": [
                    {
                        "id": 7,
                        "hostname": "srv1.meuresidencial.com",
                        "state": "running",
                        "cpus": 2,
                        "memory": 4096,
                        "disk": 51200,
                        "ipv4": [{"address": "10.0.0.1"}],
                        "template": {"name": "Ubuntu 22.04"},
                    },
                    {"id": 8, "hostname": "srv2", "state": "stopped", "cpus": 1, "memory": 1024, "disk": 20480},
                ]
            }
        )
        resumo = resumo_vps()
        self.assertEqual(resumo["total"], 2)
        self.assertEqual(resumo["em_execucao"], 1)
        self.assertEqual(resumo["cpus"], 3)
        self.assertEqual(resumo["maquinas"][0]["ipv4"], ["10.0.0.1"])
        self.assertEqual(resumo["maquinas"][0]["sistema"], "Ubuntu 22.04")
        self.assertEqual(resumo["maquinas"][1]["badge"], "danger")
        self.assertEqual(get_mock.call_args.args[0], "https://api.teste/vps/v1/virtual-machines")

        resumo_vps()
        self.assertEqual(get_mock.call_count, 1)
        resumo_vps(forcar=True)
        self.assertEqual(get_mock.call_count, 2)

    @override_settings(HOSTINGER_API_TOKEN="")
    def test_sem_token(self):
        with self.assertRaises(VpsApiError):
            resumo_vps(forcar=True)

    @mock.patch("core.services.vps_monitor.requests.get")
    def test_detalhe_inexistente_retorna_404(self, get_mock):
        get_mock.return_value = self._resposta(status_code=404, data={})
        self.client.force_login(self.admin)
        response = self.client.get(reverse("vps_detalhe", args=[99]))
        self.assertEqual(response.status_code, 404)
        self.assertIn("error", response.json())

    @mock.patch("core.services.vps_monitor.requests.get")
    def test_falha_da_api_retorna_502(self, get_mock):
        get_mock.return_value = self._resposta(status_code=500, data={})
        self.client.force_login(self.admin)
        response = self.client.get(reverse("vps_data"), {"forcar": "1"})
        self.assertEqual(response.status_code, 502)


class AutenticacaoTests(CondominioBaseTestCase):
    def test_login_por_email(self):
        response = self.client.post(reverse("login"), {"username": "SINDICO@aurora.com", "password": "123"})
        self.assertRedirects(response, reverse("dashboard"), fetch_redirect_response=False)

    def test_logout_via_get(self):
        self.client.force_login(self.gestor)
        response = self.client.get(reverse("logout"))
        self.assertRedirects(response, reverse("login"), fetch_redirect_response=False)
        self.assertNotIn("_auth_user_id", self.client.session)

    @override_settings(**EMAIL_SETTINGS)
    @mock.patch("core.services.resend_email.requests.post")
    def test_recuperacao_por_matricula_envia_para_gestor(self, post_mock):
        post_mock.return_value = resposta_resend()
        response = self.client.post(
            reverse("password_recovery"), {"identificador": self.condominio.matricula.lower()}
        )
        self.assertRedirects(response, reverse("login"), fetch_redirect_response=False)
        payload = post_mock.call_args.kwargs["json"]
        self.assertEqual(payload["to"], ["sindico@aurora.com"])
        self.assertIn("/accounts/reset/", payload["html"])

    def test_recuperacao_com_identificador_desconhecido(self):
        response = self.client.post(reverse("password_recovery"), {"identificador": "ninguem@aurora.com"})
        self.assertEqual(response.status_code, 200)
        self.assertContains(response, "Nenhuma conta encontrada")

    @mock.patch("core.services.resend_email.requests.post")
    def test_contato_valida_campos(self, post_mock):
        response = self.client.post(
            reverse("contato"), data='{"nome": "", "email": "x@y.com"}', content_type="application/json"
        )
        self.assertEqual(response.status_code, 400)
        post_mock.assert_not_called()

    @mock.patch("core.services.resend_email.requests.post")
    def test_contato_rejeita_json_que_nao_e_objeto(self, post_mock):
        for corpo in ("[1]", '"texto"', "null"):
            response = self.client.post(reverse("contato"), data=corpo, content_type="application/json")
            self.assertEqual(response.status_code, 400, corpo)
        post_mock.assert_not_called()


class DocumentoCondominioTests(MidiaTemporariaMixin, CondominioBaseTestCase):
    def _payload(self, **overrides):
        payload = {"tipo": "ata", "data_cadastro": "10/03/2024", "observacoes": "Assembleia ordinária"}
        payload.update(overrides)
        return payload

    def _criar(self, *arquivos):
        self.client.force_login(self.gestor)
        return self.client.post(
            reverse("documentos_condominio_create"), self._payload(arquivos=list(arquivos) or [arquivo_pdf()])
        )

    def test_gestor_cadastra_documento_com_varios_anexos(self):
        response = self._criar(arquivo_pdf("ata.pdf"), arquivo_pdf("lista.pdf"))
        self.assertRedirects(response, reverse("documentos_condominio_list"), fetch_redirect_response=False)
        documento = DocumentoCondominio.objects.get()
        self.assertEqual(documento.condominio, self.condominio)
        self.assertEqual(documento.data_cadastro, date(2024, 3, 10))
        self.assertEqual(sorted(documento.anexos.values_list("nome_arquivo", flat=True)), ["ata.pdf", "lista.pdf"])

    def test_documento_exige_anexo_e_observacoes(self):
        self.client.force_login(self.gestor)
        response = self.client.post(reverse("documentos_condominio_create"), self._payload(observacoes=" "))
        self.assertEqual(response.status_code, 200)
        self.assertContains(response, "É necessário anexar pelo menos um arquivo.")
        self.assertIn("observacoes", response.context["form"].errors)
        self.assertFalse(DocumentoCondominio.objects.exists())

    def test_extensao_nao_permitida(self):
        response = self._criar(SimpleUploadedFile("script.exe", b"MZ", content_type="application/octet-stream"))
        self.assertEqual(response.status_code, 200)
        self.assertContains(response, "Envie arquivos PDF, JPG ou PNG.")

    def test_edicao_mantem_anexos_existentes(self):
        self._criar()
        documento = DocumentoCondominio.objects.get()
        response = self.client.post(
            reverse("documentos_condominio_update", args=[documento.pk]), self._payload(tipo="contrato")
        )
        self.assertRedirects(response, reverse("documentos_condominio_list"), fetch_redirect_response=False)
        documento.refresh_from_db()
        self.assertEqual(documento.tipo, DocumentoCondominio.Tipo.CONTRATO)
        self.assertEqual(documento.anexos.count(), 1)

    def test_excluir_documento_remove_arquivos(self):
        self._criar(arquivo_pdf("ata.pdf"), arquivo_pdf("lista.pdf"))
        documento = DocumentoCondominio.objects.get()
        caminhos = [anexo.arquivo.path for anexo in documento.anexos.all()]
        self.assertTrue(all(os.path.exists(caminho) for caminho in caminhos))
        self.client.post(reverse("documentos_condominio_delete", args=[documento.pk]))
        self.assertFalse(DocumentoCondominio.objects.exists())
        self.assertFalse(AnexoDocumentoCondominio.objects.exists())
        self.assertFalse(any(os.path.exists(caminho) for caminho in caminhos))

    def test_remover_anexo(self):
        self._criar()
        anexo = AnexoDocumentoCondominio.objects.get()
        caminho = anexo.arquivo.path
        response = self.client.post(reverse("documentos_condominio_anexo_delete", args=[anexo.pk]))
        self.assertRedirects(
            response,
            reverse("documentos_condominio_update", args=[anexo.documento_id]),
            fetch_redirect_response=False,
        )
        self.assertFalse(AnexoDocumentoCondominio.objects.exists())
        self.assertFalse(os.path.exists(caminho))

    def test_anexo_de_outro_condominio_retorna_404(self):
        outro = Condominio.objects.create(nome="Residencial Outro")
        documento = DocumentoCondominio.objects.create(condominio=outro, tipo="ata", observacoes="Outro")
        anexo = AnexoDocumentoCondominio.objects.create(
            documento=documento, arquivo=arquivo_pdf(), nome_arquivo="ata.pdf"
        )
        self.client.force_login(self.gestor)
        response = self.client.post(reverse("documentos_condominio_anexo_delete", args=[anexo.pk]))
        self.assertEqual(response.status_code, 404)
        self.assertTrue(AnexoDocumentoCondominio.objects.filter(pk=anexo.pk).exists())

    def test_morador_consulta_mas_nao_cadastra(self):
        outro = Condominio.objects.create(nome="Residencial Outro")
        DocumentoCondominio.objects.create(condominio=self.condominio, tipo="regulamento", observacoes="Versão 2024")
        DocumentoCondominio.objects.create(condominio=outro, tipo="planta", observacoes="Outro prédio")
        self.client.force_login(self.morador_user)
        response = self.client.get(reverse("documentos_condominio_list"))
        self.assertEqual(response.status_code, 200)
        self.assertEqual([d.observacoes for d in response.context["object_list"]], ["Versão 2024"])
        self.assertNotContains(response, "Outro prédio")
        self.assertFalse(response.context["pode_editar"])
        response = self.client.get(reverse("documentos_condominio_create"))
        self.assertEqual(response.status_code, 403)


class DedetizacaoTests(MidiaTemporariaMixin, CondominioBaseTestCase):
    def _payload(self, **overrides):
        payload = {
            "empresa": "Dedetiza Já",
            "data": "15/04/2024",
            "finalidades": ["insetos", "cupim"],
            "observacoes": "Garagem e áreas comuns",
        }
        payload.update(overrides)
        return payload

    def test_cadastro_guarda_lista_de_finalidades(self):
        self.client.force_login(self.gestor)
        response = self.client.post(reverse("dedetizacoes_create"), self._payload())
        self.assertRedirects(response, reverse("dedetizacoes_list"), fetch_redirect_response=False)
        dedetizacao = Dedetizacao.objects.get()
        self.assertEqual(dedetizacao.condominio, self.condominio)
        self.assertEqual(dedetizacao.finalidades, ["insetos", "cupim"])
        self.assertEqual(dedetizacao.finalidades_display(), "Insetos, Cupim")

    def test_edicao_recarrega_e_substitui_finalidades(self):
        dedetizacao = Dedetizacao.objects.create(
            condominio=self.condominio, empresa="Dedetiza Já", data=date(2024, 4, 15), finalidades=["insetos", "cupim"]
        )
        self.client.force_login(self.gestor)
        response = self.client.get(reverse("dedetizacoes_update", args=[dedetizacao.pk]))
        self.assertEqual(response.context["form"].initial["finalidades"], ["insetos", "cupim"])
        self.client.post(reverse("dedetizacoes_update", args=[dedetizacao.pk]), self._payload(finalidades=["ratos"]))
        dedetizacao.refresh_from_db()
        self.assertEqual(dedetizacao.finalidades, ["ratos"])
        self.assertEqual(dedetizacao.finalidades_display(), "Ratos")

    def test_finalidade_obrigatoria(self):
        self.client.force_login(self.gestor)
        response = self.client.post(reverse("dedetizacoes_create"), self._payload(finalidades=[]))
        self.assertEqual(response.status_code, 200)
        self.assertIn("finalidades", response.context["form"].errors)

    def test_excluir(self):
        dedetizacao = Dedetizacao.objects.create(
            condominio=self.condominio, empresa="Dedetiza Já", data=date(2024, 4, 15), finalidades=["ratos"]
        )
        self.client.force_login(self.gestor)
        response = self.client.post(reverse("dedetizacoes_delete", args=[dedetizacao.pk]))
        self.assertRedirects(response, reverse("dedetizacoes_list"), fetch_redirect_response=False)
        self.assertFalse(Dedetizacao.objects.exists())

    def test_morador_sem_acesso(self):
        self.client.force_login(self.morador_user)
        response = self.client.get(reverse("dedetizacoes_create"))
        self.assertEqual(response.status_code, 403)


class MinhaContaTests(CondominioBaseTestCase):
    NOVA_SENHA = "Aurora#Portaria2024"

    def test_gestor_altera_senha_e_registra_log(self):
        self.client.force_login(self.gestor)
        response = self.client.post(
            reverse("minha_conta"),
            {"old_password": "123", "new_password1": self.NOVA_SENHA, "new_password2": self.NOVA_SENHA},
        )
        self.assertRedirects(response, reverse("minha_conta"), fetch_redirect_response=False)
        self.gestor.refresh_from_db()
        self.assertTrue(self.gestor.check_password(self.NOVA_SENHA))
        log = CondominioAlteracaoLog.objects.get(campo="senha")
        self.assertEqual(log.condominio, self.condominio)
        self.assertEqual(log.usuario, self.gestor)
        self.assertEqual(log.valor_novo, "********")
        self.assertEqual(self.client.get(reverse("minha_conta")).status_code, 200)

    def test_senha_atual_incorreta(self):
        self.client.force_login(self.morador_user)
        response = self.client.post(
            reverse("minha_conta"),
            {"old_password": "errada", "new_password1": self.NOVA_SENHA, "new_password2": self.NOVA_SENHA},
        )
        self.assertEqual(response.status_code, 200)
        self.assertIn("old_password", response.context["form"].errors)
        self.morador_user.refresh_from_db()
        self.assertTrue(self.morador_user.check_password("123"))
        self.assertFalse(CondominioAlteracaoLog.objects.filter(campo="senha").exists())

    def test_morador_ve_dados_da_unidade(self):
        self.client.force_login(self.morador_user)
        response = self.client.get(reverse("minha_conta"))
        self.assertEqual(response.context["morador"], self.morador)
        self.assertContains(response, "101")


class SugestaoReclamacaoTests(CondominioBaseTestCase):
    def _enviar(self, **overrides):
        payload = {"tipo": "reclamacao", "assunto": "Barulho", "mensagem": "Som alto depois das 22h."}
        payload.update(overrides)
        self.client.force_login(self.morador_user)
        return self.client.post(reverse("sugestao_reclamacao"), payload)

    @override_settings(**EMAIL_SETTINGS)
    @mock.patch("core.services.resend_email.requests.post")
    def test_reclamacao_vai_para_o_representante(self, post_mock):
        post_mock.return_value = resposta_resend()
        self.condominio.email_representante = "adm@aurora.com"
        self.condominio.save()
        response = self._enviar()
        self.assertRedirects(response, reverse("sugestao_reclamacao"), fetch_redirect_response=False)
        payload = post_mock.call_args.kwargs["json"]
        self.assertEqual(payload["to"], ["adm@aurora.com"])
        self.assertEqual(payload["subject"], "[Reclamação] Barulho")
        self.assertEqual(payload["reply_to"], "ana@aurora.com")
        self.assertIn("Som alto depois das 22h.", payload["html"])

    @override_settings(**EMAIL_SETTINGS)
    @mock.patch("core.services.resend_email.requests.post")
    def test_sem_representante_usa_email_do_gestor(self, post_mock):
        post_mock.return_value = resposta_resend()
        self._enviar(tipo="sugestao", assunto="Bicicletário")
        payload = post_mock.call_args.kwargs["json"]
        self.assertEqual(payload["to"], ["sindico@aurora.com"])
        self.assertEqual(payload["subject"], "[Sugestão] Bicicletário")

    @override_settings(RESEND_API_KEY="")
    def test_falha_no_envio_mantem_formulario(self):
        response = self._enviar()
        self.assertEqual(response.status_code, 200)
        self.assertContains(response, "Não foi possível enviar a mensagem.")

    def test_assunto_em_branco(self):
        response = self._enviar(assunto="  ")
        self.assertEqual(response.status_code, 200)
        self.assertIn("assunto", response.context["form"].errors)

    def test_gestor_sem_acesso(self):
        self.client.force_login(self.gestor)
        response = self.client.get(reverse("sugestao_reclamacao"))
        self.assertEqual(response.status_code, 403)


class DocumentoEmpresarialTests(MidiaTemporariaMixin, TestCase):
    def setUp(self):
        super().setUp()
        self.admin = User.objects.create_superuser(username="root", email="root@meuresidencial.com", password="123")
        self.client.force_login(self.admin)

    def _criar(self):
        self.client.post(
            reverse("documento_create"),
            {
                "titulo": "Contrato social",
                "data": "01/02/2024",
                "descricao": "Versão registrada",
                "arquivos": [arquivo_pdf("contrato.pdf"), arquivo_pdf("alteracao.pdf")],
            },
        )
        return DocumentoEmpresarial.objects.get()

    def test_cadastro_com_varios_anexos(self):
        documento = self._criar()
        self.assertEqual(documento.data, date(2024, 2, 1))
        self.assertEqual(
            sorted(documento.anexos.values_list("nome_arquivo", flat=True)), ["alteracao.pdf", "contrato.pdf"]
        )
        self.assertTrue(all(a.tipo_arquivo == "application/pdf" for a in documento.anexos.all()))

    def test_remover_anexo_apaga_arquivo(self):
        documento = self._criar()
        anexo = documento.anexos.first()
        caminho = anexo.arquivo.path
        response = self.client.post(reverse("anexo_delete", args=[anexo.pk]))
        self.assertRedirects(response, reverse("documento_update", args=[documento.pk]), fetch_redirect_response=False)
        self.assertFalse(AnexoDocumento.objects.filter(pk=anexo.pk).exists())
        self.assertFalse(os.path.exists(caminho))
        self.assertEqual(documento.anexos.count(), 1)

    def test_excluir_documento_apaga_arquivos(self):
        documento = self._criar()
        caminhos = [anexo.arquivo.path for anexo in documento.anexos.all()]
        response = self.client.post(reverse("documento_delete", args=[documento.pk]))
        self.assertRedirects(response, reverse("documentos_list"), fetch_redirect_response=False)
        self.assertFalse(AnexoDocumento.objects.exists())
        self.assertFalse(any(os.path.exists(caminho) for caminho in caminhos))


class DespesaEmpresarialGraficosTests(TestCase):
    def setUp(self):
        for descricao, categoria, valor, data in (
            ("Aluguel janeiro", "Aluguel", "1000.00", date(2024, 1, 10)),
            ("Conta de luz", "Luz", "200.00", date(2024, 1, 20)),
            ("Aluguel fevereiro", "Aluguel", "1000.00", date(2024, 2, 5)),
            ("Aluguel dezembro", "Aluguel", "900.00", date(2023, 12, 31)),
        ):
            DespesaEmpresarial.objects.create(descricao=descricao, categoria=categoria, valor=Decimal(valor), data=data)

    def test_agrupa_por_categoria_e_mes(self):
        charts = build_business_expense_charts(start=date(2024, 1, 1), end=date(2024, 2, 29))
        self.assertEqual(charts["total"], 2200.0)
        self.assertEqual(charts["por_categoria"]["labels"], ["Aluguel", "Luz"])
        self.assertEqual(charts["por_categoria"]["valores"], [2000.0, 200.0])
        self.assertEqual(charts["por_mes"]["labels"], ["Jan/2024", "Fev/2024"])
        self.assertEqual(charts["por_mes"]["valores"], [1200.0, 1000.0])

    def test_periodo_invertido_e_normalizado(self):
        charts = build_business_expense_charts(start=date(2024, 2, 29), end=date(2024, 1, 1))
        self.assertEqual(charts["inicio"], "2024-01-01")
        self.assertEqual(charts["fim"], "2024-02-29")

    def test_resolve_period(self):
        hoje = timezone.now().date()
        self.assertEqual(_resolve_period("30d"), (hoje - timedelta(days=29), hoje))
        self.assertEqual(_resolve_period("0d"), (hoje, hoje))
        inicio, fim = _resolve_period("3m")
        self.assertEqual(fim, hoje)
        self.assertEqual(inicio.day, 1)
        self.assertEqual((hoje.year * 12 + hoje.month) - (inicio.year * 12 + inicio.month), 2)
        inicio, _ = _resolve_period("99999d")
        self.assertGreaterEqual(inicio, hoje - timedelta(days=120 * 31))
        inicio, _ = _resolve_period("9999y")
        self.assertEqual((hoje.year * 12 + hoje.month) - (inicio.year * 12 + inicio.month), 119)

    def test_endpoint_com_parametros_invalidos(self):
        admin = User.objects.create_superuser(username="root", email="root@meuresidencial.com", password="123")
        self.client.force_login(admin)
        for params in ({"range": "99999d"}, {"range": "99999y"}, {"start": "2024-13-45", "end": "2024-02-30"}):
            response = self.client.get(reverse("despesas_empresariais_data"), params)
            self.assertEqual(response.status_code, 200, params)
        response = self.client.get(
            reverse("despesas_empresariais_data"), {"start": "2024-01-01", "end": "2024-01-31"}
        )
        self.assertEqual(response.json()["total"], 1200.0)


class TelasTests(CondominioBaseTestCase):
    """Renderiza as telas principais de cada perfil."""

    def setUp(self):
        super().setUp()
        self.area = AreaComum.objects.create(condominio=self.condominio, nome="Churrasqueira")
        Reserva.objects.create(
            condominio=self.condominio,
            area=self.area,
            morador=self.morador,
            data=proxima_data(2),
            hora_inicio=time(12, 0),
            hora_fim=time(16, 0),
        )
        Receita.objects.create(condominio=self.condominio, valor=Decimal("300.00"), mes_referencia=mes_atual(), unidade="101")
        Despesa.objects.create(
            condominio=self.condominio, categoria=Despesa.Categoria.LIMPEZA, valor=Decimal("80.00"), mes_referencia=mes_atual()
        )
        Comunicado.objects.create(condominio=self.condominio, titulo="Assembleia", conteudo="Dia 20.")
        ManutencaoPreventiva.objects.create(
            condominio=self.condominio, titulo="Bombas", data_programada=timezone.now().date()
        )
        recalcular_saldo(self.condominio)

    def test_telas_do_gestor(self):
        self.client.force_login(self.gestor)
        for name in (
            "dashboard",
            "moradores_list",
            "moradores_create",
            "areas_list",
            "areas_create",
            "reservas_list",
            "reservas_calendario",
            "receitas_list",
            "despesas_list",
            "saldo",
            "registrar_pagamento",
            "chave_pix",
            "prestacao_contas",
            "relatorios_enviados",
            "comunicados_list",
            "comunicados_create",
            "dedetizacoes_list",
            "manutencoes_list",
            "documentos_condominio_list",
            "documentos_condominio_create",
            "minha_conta",
            "condominio_perfil",
        ):
            response = self.client.get(reverse(name))
            self.assertEqual(response.status_code, 200, name)

    def test_telas_do_morador(self):
        self.client.force_login(self.morador_user)
        for name in (
            "morador_painel",
            "minhas_reservas",
            "reservas_create",
            "minhas_cobrancas",
            "areas_list",
            "comunicados_list",
            "documentos_condominio_list",
            "sugestao_reclamacao",
            "minha_conta",
        ):
            response = self.client.get(reverse(name))
            self.assertEqual(response.status_code, 200, name)

    def test_telas_da_plataforma(self):
        admin = User.objects.create_superuser(username="root", email="root@meuresidencial.com", password="123")
        self.client.force_login(admin)
        for name in (
            "admin_dashboard",
            "condominios_list",
            "condominios_create",
            "documentos_list",
            "documento_create",
            "despesas_empresariais_list",
            "despesas_empresariais_graficos",
        ):
            response = self.client.get(reverse(name))
            self.assertEqual(response.status_code, 200, name)
