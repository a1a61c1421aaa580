"""Envio de e-mails transacionais pela API HTTP da Resend."""
from __future__ import annotations

import logging
from typing import NamedTuple, Optional

import requests
from django.conf import settings

logger = logging.getLogger(__name__)

RESEND_ENDPOINT = "https://api.resend.com/emails"
REMETENTE_NOME = "MeuResidencial"


class ResultadoEnvio(NamedTuple):
    enviado: bool
    detalhe: Optional[str]
    status: Optional[int]


def _mascarar_chave(api_key: str) -> str:
    chave = (api_key or "").strip()
    return f"{chave[:6]}...({len(chave)})"


def _remetente(email_from: str) -> str:
    if "<" in email_from:
        return email_from
    return f"{REMETENTE_NOME} <{email_from}>"


def _detalhe_erro(response: requests.Response) -> Optional[str]:
    try:
        data = response.json()
    except ValueError:
        return (response.text or "").strip()[:200] or None
    if not isinstance(data, dict):
        return None
    mensagem = data.get("message") or data.get("error")
    if mensagem and data.get("name"):
        return f"{data['name']}: {mensagem}"
    return mensagem


def enviar_email(
    destinatario: str,
    assunto: str,
    html: str,
    *,
    responder_para: Optional[str] = None,
    remetente: Optional[str] = None,
    matricula: Optional[str] = None,
    timeout: int = 20,
) -> ResultadoEnvio:
    api_key = (getattr(settings, "RESEND_API_KEY", "") or "").strip()
    email_from = (remetente or getattr(settings, "EMAIL_FROM", "") or "").strip()
    if not api_key or not email_from:
        logger.error("Resend sem configuracao: RESEND_API_KEY ou EMAIL_FROM ausente.")
        return ResultadoEnvio(False, "RESEND_API_KEY ou EMAIL_FROM nao configurados.", None)

    payload = {
        "from": _remetente(email_from),
        "to": [destinatario],
        "subject": assunto,
        "html": html,
    }
    if responder_para:
        payload["reply_to"] = responder_para
    if matricula:
        payload["tags"] = [{"name": "condominio", "value": matricula}]

    logger.info(
        "Resend envio | para=%s assunto=%s remetente=%s chave=%s",
        destinatario,
        assunto,
        email_from,
        _mascarar_chave(api_key),
    )
    try:
        response = requests.post(
            RESEND_ENDPOINT,
            headers={"Authorization": f"Bearer {api_key}", "Content-Type": "application/json"},
            json=payload,
            timeout=timeout,
        )
    except requests.RequestException as exc:
        logger.exception("Resend sem resposta: %s", exc)
        return ResultadoEnvio(False, "Erro de comunicacao com o servico de email.", None)

    if response.status_code >= 400:
        detalhe = _detalhe_erro(response)
        logger.error(
            "Resend recusou | status=%s detalhe=%s para=%s remetente=%s",
            response.status_code,
            detalhe,
            destinatario,
            email_from,
        )
        return ResultadoEnvio(False, detalhe or f"HTTP {response.status_code}", response.status_code)

    logger.info("Resend ok | status=%s para=%s", response.status_code, destinatario)
    return ResultadoEnvio(True, None, response.status_code)


def enviar_email_com_fallback(destinatario: str, assunto: str, html: str, **kwargs) -> ResultadoEnvio:
    """Repete o envio com o remetente de teste quando o domínio ainda não foi verificado (HTTP 403)."""
    resultado = enviar_email(destinatario, assunto, html, **kwargs)
    if resultado.enviado or resultado.status != 403:
        return resultado
    if not (settings.DEBUG or getattr(settings, "RESEND_ALLOW_TEST_FALLBACK", False)):
        return resultado

    remetente_teste = getattr(settings, "RESEND_TEST_FROM_EMAIL", "")
    remetente_atual = kwargs.get("remetente") or getattr(settings, "EMAIL_FROM", "")
    if not remetente_teste or remetente_teste == remetente_atual:
        return resultado

    logger.warning("Resend 403 com %s; repetindo com %s", remetente_atual, remetente_teste)
    return enviar_email(destinatario, assunto, html, **dict(kwargs, remetente=remetente_teste))
