import re

from django import template

from ..services.financeiro import formatar_brl
from ..services.pix import telefone_com_ddi

register = template.Library()


@register.filter
def whatsapp_number(value):
    return telefone_com_ddi(value)


@register.filter
def brl(value):
    if value in (None, ""):
        return formatar_brl(0)
    return formatar_brl(value)


@register.filter
def telefone(value):
    digits = re.sub(r"\D", "", value or "")
    if len(digits) == 11:
        return f"({digits[:2]}) {digits[2:7]}-{digits[7:]}"
    if len(digits) == 10:
        return f"({digits[:2]}) {digits[2:6]}-{digits[6:]}"
    return value or ""


@register.filter
def status_badge(value):
    return {
        "PENDENTE": "warning",
        "APROVADA": "success",
        "REJEITADA": "danger",
        "CANCELADA": "secondary",
        "PAGA": "success",
        "VENCIDA": "danger",
    }.get(value, "secondary")
