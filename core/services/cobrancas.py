import calendar
from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from django.utils import timezone

from ..models import ChavePix, Receita
from .dashboard_metrics import MESES_PT


ANO_MINIMO = 2000
DIA_VENCIMENTO_PADRAO = 10
JUROS_AO_DIA_PADRAO = Decimal("0.033")
CENTAVOS = Decimal("0.01")


@dataclass
class Cobranca:
    mes_referencia: str
    rotulo: str
    vencimento: date
    valor: Decimal
    status: str
    dias_atraso: int = 0
    juros: Decimal = Decimal("0.00")

    PAGA = "PAGA"
    PENDENTE = "PENDENTE"
    VENCIDA = "VENCIDA"

    @property
    def total(self) -> Decimal:
        return (self.valor + self.juros).quantize(CENTAVOS, rounding=ROUND_HALF_UP)

    @property
    def em_aberto(self) -> bool:
        return self.status != self.PAGA


def _config_cobranca(condominio):
    chave = ChavePix.objects.filter(condominio=condominio).first()
    if not chave:
        return DIA_VENCIMENTO_PADRAO, JUROS_AO_DIA_PADRAO
    return chave.dia_vencimento, chave.juros_ao_dia


def data_vencimento(ano, mes, dia_vencimento):
    ultimo_dia = calendar.monthrange(ano, mes)[1]
    return date(ano, mes, min(dia_vencimento, ultimo_dia))


def calcular_juros(valor, vencimento, taxa_ao_dia, hoje=None):
    """Juros simples: valor x taxa% x dias de atraso. Retorna (juros, dias_atraso)."""
    hoje = hoje or timezone.now().date()
    dias = (hoje - vencimento).days
    if dias <= 0:
        return Decimal("0.00"), 0
    juros = Decimal(valor) * (Decimal(taxa_ao_dia) / Decimal("100")) * dias
    return juros.quantize(CENTAVOS, rounding=ROUND_HALF_UP), dias


def _meses_pagos(morador, ano):
    return set(
        Receita.objects.filter(
            condominio=morador.condominio,
            unidade=morador.unidade,
            mes_referencia__startswith=f"{ano}-",
        ).values_list("mes_referencia", flat=True)
    )


def cobrancas_do_ano(morador, ano=None, hoje=None):
    hoje = hoje or timezone.now().date()
    ano = ano or hoje.year
    dia_vencimento, taxa = _config_cobranca(morador.condominio)
    pagos = _meses_pagos(morador, ano)
    cadastro = morador.criado_em.date() if morador.criado_em else None
    inicio_cadastro = cadastro.replace(day=1) if cadastro else None

    cobrancas = []
    for mes in range(1, 13):
        if inicio_cadastro and date(ano, mes, 1) < inicio_cadastro:
            continue
        referencia = f"{ano}-{mes:02d}"
        vencimento = data_vencimento(ano, mes, dia_vencimento)
        valor = morador.valor_condominio or Decimal("0.00")
        cobranca = Cobranca(
            mes_referencia=referencia,
            rotulo=f"{MESES_PT[mes - 1]}/{ano}",
            vencimento=vencimento,
            valor=valor,
            status=Cobranca.PENDENTE,
        )
        if referencia in pagos:
            cobranca.status = Cobranca.PAGA
        elif vencimento < hoje:
            cobranca.status = Cobranca.VENCIDA
            cobranca.juros, cobranca.dias_atraso = calcular_juros(valor, vencimento, taxa, hoje)
        cobrancas.append(cobranca)
    return cobrancas


def contar_cobrancas_vencidas(morador, hoje=None) -> int:
    return sum(1 for c in cobrancas_do_ano(morador, hoje=hoje) if c.status == Cobranca.VENCIDA)


def ano_valido(ano, hoje=None) -> bool:
    hoje = hoje or timezone.now().date()
    return ANO_MINIMO <= ano <= hoje.year + 1


def buscar_cobranca(morador, mes_referencia, hoje=None):
    try:
        ano = int(mes_referencia.split("-")[0])
    except (AttributeError, ValueError):
        return None
    if not ano_valido(ano, hoje):
        return None
    for cobranca in cobrancas_do_ano(morador, ano=ano, hoje=hoje):
        if cobranca.mes_referencia == mes_referencia:
            return cobranca
    return None
