import logging

from django.conf import settings
from django.template.loader import render_to_string
from django.utils.html import escape, linebreaks

from ..models import RelatorioEnvioLog
from . import moradores_com_email
from .financeiro import formatar_brl
from .resend_email import enviar_email_com_fallback


logger = logging.getLogger(__name__)

RODAPE_COMUNICADO = "Este é um comunicado oficial do seu condomínio."


def _enviar(destinatario, assunto, template_name, contexto, reply_to=None, condominio=None):
    contexto = dict(contexto, assunto=assunto)
    html = render_to_string(template_name, contexto)
    return enviar_email_com_fallback(
        destinatario,
        assunto,
        html,
        responder_para=reply_to,
        matricula=getattr(condominio, "matricula", None),
    )


def _enviar_em_massa(destinatarios, assunto, template_name, contexto_por_destinatario, condominio=None):
    enviados = []
    falhas = []
    for destinatario in destinatarios:
        ok, detalhe, _ = _enviar(
            destinatario, assunto, template_name, contexto_por_destinatario(destinatario), condominio=condominio
        )
        if ok:
            enviados.append(destinatario)
        else:
            falhas.append({"email": destinatario, "erro": detalhe})
    return enviados, falhas


def enviar_comunicado(comunicado):
    moradores = list(moradores_com_email(comunicado.condominio))
    emails = [m.email for m in moradores]
    conteudo_html = linebreaks(escape(comunicado.conteudo))
    enviados, falhas = _enviar_em_massa(
        emails,
        f"{comunicado.titulo} - {comunicado.condominio.nome}",
        "core/emails/comunicado.html",
        lambda _email: {
            "comunicado": comunicado,
            "conteudo_html": conteudo_html,
            "rodape": RODAPE_COMUNICADO,
        },
        condominio=comunicado.condominio,
    )
    if enviados and not comunicado.enviado_email:
        comunicado.enviado_email = True
        comunicado.save(update_fields=["enviado_email", "atualizado_em"])
    logger.info(
        "Comunicado %s enviado | condominio=%s enviados=%s total=%s",
        comunicado.pk,
        comunicado.condominio.matricula,
        len(enviados),
        len(emails),
    )
    return {"enviados": len(enviados), "total": len(emails), "falhas": falhas}


def enviar_prestacao_contas(relatorio, unidades=None, usuario=None):
    condominio = relatorio["condominio"]
    moradores = list(moradores_com_email(condominio, unidades))
    contexto = {
        "relatorio": relatorio,
        "saldo_inicial": formatar_brl(relatorio["saldo_inicial"]),
        "total_receitas": formatar_brl(relatorio["total_receitas"]),
        "total_despesas": formatar_brl(relatorio["total_despesas"]),
        "resultado": formatar_brl(relatorio["resultado"]),
        "saldo_final": formatar_brl(relatorio["saldo_final"]),
    }
    enviados, falhas = _enviar_em_massa(
        [m.email for m in moradores],
        f"Prestação de contas {relatorio['rotulo_mes']} - {condominio.nome}",
        "core/emails/prestacao_contas.html",
        lambda _email: contexto,
        condominio=condominio,
    )
    unidades_enviadas = [m.unidade for m in moradores if m.email in enviados]
    log = RelatorioEnvioLog.objects.create(
        condominio=condominio,
        mes_referencia=relatorio["mes_referencia"],
        enviado_via=RelatorioEnvioLog.Via.EMAIL,
        destinatarios=unidades_enviadas,
        quantidade=len(enviados),
        usuario=usuario,
    )
    logger.info(
        "Prestacao de contas %s enviada | condominio=%s enviados=%s falhas=%s",
        relatorio["mes_referencia"],
        condominio.matricula,
        len(enviados),
        len(falhas),
    )
    return log, falhas


def enviar_boas_vindas_gestor(condominio, usuario, senha, login_url=""):
    if not usuario.email:
        return False, "Gestor sem e-mail cadastrado."
    ok, detalhe, _ = _enviar(
        usuario.email,
        f"Bem-vindo ao MeuResidencial - {condominio.nome}",
        "core/emails/boas_vindas.html",
        {"condominio": condominio, "usuario": usuario, "senha": senha, "login_url": login_url},
        condominio=condominio,
    )
    if ok and not condominio.email_boas_vindas_enviado:
        condominio.email_boas_vindas_enviado = True
        condominio.save(update_fields=["email_boas_vindas_enviado"])
    return ok, detalhe


def enviar_troca_gestor(condominio, usuario, senha, login_url=""):
    if not usuario.email:
        return False, "Gestor sem e-mail cadastrado."
    ok, detalhe, _ = _enviar(
        usuario.email,
        f"Você agora é o gestor do condomínio {condominio.nome}",
        "core/emails/troca_gestor.html",
        {"condominio": condominio, "usuario": usuario, "senha": senha, "login_url": login_url},
        condominio=condominio,
    )
    return ok, detalhe


def enviar_acesso_morador(morador, usuario, senha, login_url=""):
    if not morador.email:
        return False, "Morador sem e-mail cadastrado."
    ok, detalhe, _ = _enviar(
        morador.email,
        f"Seu acesso ao MeuResidencial - {morador.condominio.nome}",
        "core/emails/acesso_morador.html",
        {"morador": morador, "usuario": usuario, "senha": senha, "login_url": login_url},
        condominio=morador.condominio,
    )
    return ok, detalhe


def enviar_contato(nome, email, mensagem, telefone=""):
    destino = getattr(settings, "CONTACT_EMAIL", "")
    if not destino:
        return False, "CONTACT_EMAIL não configurado."
    ok, detalhe, _ = _enviar(
        destino,
        f"Contato pelo site - {nome}",
        "core/emails/contato.html",
        {"nome": nome, "email": email, "telefone": telefone, "mensagem": mensagem},
        reply_to=email,
    )
    return ok, detalhe


def enviar_recuperacao_senha(usuario, destino, reset_url):
    ok, detalhe, _ = _enviar(
        destino,
        "Recuperação de senha - MeuResidencial",
        "core/emails/recuperacao_senha.html",
        {"usuario": usuario, "reset_url": reset_url},
        condominio=usuario.condominio,
    )
    return ok, detalhe


def email_do_sindico(condominio):
    if condominio.email_representante:
        return condominio.email_representante
    gestor = (
        condominio.usuarios.filter(papel="GESTOR", is_active=True)
        .exclude(email="")
        .order_by("date_joined")
        .first()
    )
    return gestor.email if gestor else ""


def enviar_sugestao_reclamacao(morador, tipo, assunto, mensagem):
    """Encaminha ao síndico a sugestão ou reclamação do morador, com resposta direta para ele."""
    destino = email_do_sindico(morador.condominio)
    if not destino:
        return False, "E-mail do síndico não cadastrado."
    ok, detalhe, _ = _enviar(
        destino,
        f"[{tipo}] {assunto}",
        "core/emails/sugestao_reclamacao.html",
        {"morador": morador, "tipo": tipo, "assunto_original": assunto, "mensagem": mensagem},
        reply_to=morador.email or None,
        condominio=morador.condominio,
    )
    return ok, detalhe
