import csv
import io
import logging
import re
from decimal import Decimal, InvalidOperation

from django.db import transaction
from django.db.models import Sum
from django.utils import timezone

from ..models import AjusteSaldo, Despesa, Morador, Receita, SaldoFinanceiro
from .dashboard_metrics import MESES_PT


logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")


def formatar_brl(valor) -> str:
    valor = Decimal(valor or 0).quantize(Decimal("0.01"))
    sinal = "-" if valor < 0 else ""
    inteiro, _, centavos = f"{abs(valor):.2f}".partition(".")
    grupos = []
    while inteiro:
        grupos.insert(0, inteiro[-3:])
        inteiro = inteiro[:-3]
    return f"{sinal}R$ {'.'.join(grupos)},{centavos}"


def brl_para_decimal(texto) -> Decimal:
    if isinstance(texto, Decimal):
        return texto
    if texto is None:
        return ZERO
    if isinstance(texto, (int, float)):
        return Decimal(str(texto)).quantize(Decimal("0.01"))
    limpo = re.sub(r"\s", "", str(texto).replace("R$", ""))
    limpo = limpo.replace(".", "").replace(",", ".")
    try:
        return Decimal(limpo).quantize(Decimal("0.01"))
    except (InvalidOperation, ValueError):
        return ZERO


def mes_atual(hoje=None) -> str:
    hoje = hoje or timezone.now().date()
    return f"{hoje.year}-{hoje.month:02d}"


def rotulo_mes(mes_referencia) -> str:
    try:
        ano, mes = mes_referencia.split("-")
        return f"{MESES_PT[int(mes) - 1]}/{ano}"
    except (AttributeError, ValueError, IndexError):
        return mes_referencia or ""


def _soma(qs) -> Decimal:
    return qs.aggregate(total=Sum("valor"))["total"] or ZERO


def obter_saldo(condominio) -> SaldoFinanceiro:
    saldo, _ = SaldoFinanceiro.objects.get_or_create(condominio=condominio)
    return saldo


def calcular_saldo(condominio, registro=None) -> Decimal:
    registro = registro or obter_saldo(condominio)
    receitas = Receita.objects.filter(condominio=condominio)
    despesas = Despesa.objects.filter(condominio=condominio)
    if registro.manual and registro.base_manual_em is not None:
        receitas = receitas.filter(criado_em__gt=registro.base_manual_em)
        despesas = despesas.filter(criado_em__gt=registro.base_manual_em)
        base = registro.base_manual or ZERO
        return base + _soma(receitas) - _soma(despesas)
    return _soma(receitas) - _soma(despesas)


def recalcular_saldo(condominio) -> Decimal:
    registro = obter_saldo(condominio)
    registro.saldo = calcular_saldo(condominio, registro)
    registro.save(update_fields=["saldo", "atualizado_em"])
    logger.info(
        "Saldo recalculado | condominio=%s manual=%s saldo=%s",
        condominio.matricula,
        registro.manual,
        registro.saldo,
    )
    return registro.saldo


@transaction.atomic
def ajustar_saldo(condominio, novo_saldo, observacoes="", usuario=None) -> AjusteSaldo:
    registro = obter_saldo(condominio)
    anterior = calcular_saldo(condominio, registro)
    agora = timezone.now()
    novo_saldo = Decimal(novo_saldo).quantize(Decimal("0.01"))

    ajuste = AjusteSaldo.objects.create(
        condominio=condominio,
        saldo_anterior=anterior,
        saldo_novo=novo_saldo,
        observacoes=observacoes or "",
        usuario=usuario,
        ajustado_em=agora,
    )
    registro.manual = True
    registro.base_manual = novo_saldo
    registro.base_manual_em = agora
    registro.saldo = novo_saldo
    registro.save()
    logger.info(
        "Saldo ajustado manualmente | condominio=%s anterior=%s novo=%s",
        condominio.matricula,
        anterior,
        novo_saldo,
    )
    return ajuste


def voltar_saldo_automatico(condominio) -> Decimal:
    registro = obter_saldo(condominio)
    registro.manual = False
    registro.base_manual = None
    registro.base_manual_em = None
    registro.save(update_fields=["manual", "base_manual", "base_manual_em", "atualizado_em"])
    return recalcular_saldo(condominio)


def transacoes_recentes(condominio, limite=10):
    itens = []
    for receita in Receita.objects.filter(condominio=condominio).order_by("-criado_em")[:limite]:
        itens.append(
            {
                "tipo": "receita",
                "categoria": receita.get_categoria_display(),
                "valor": receita.valor,
                "mes_referencia": receita.mes_referencia,
                "data": receita.data_pagamento,
                "unidade": receita.unidade,
                "criado_em": receita.criado_em,
            }
        )
    for despesa in Despesa.objects.filter(condominio=condominio).order_by("-criado_em")[:limite]:
        itens.append(
            {
                "tipo": "despesa",
                "categoria": despesa.get_categoria_display(),
                "valor": despesa.valor,
                "mes_referencia": despesa.mes_referencia,
                "data": despesa.data_pagamento or despesa.vencimento,
                "unidade": despesa.unidade,
                "criado_em": despesa.criado_em,
            }
        )
    itens.sort(key=lambda item: item["criado_em"], reverse=True)
    return itens[:limite]


def montar_prestacao(condominio, mes_referencia):
    receitas = Receita.objects.filter(condominio=condominio, mes_referencia=mes_referencia).order_by(
        "data_pagamento", "id"
    )
    despesas = Despesa.objects.filter(condominio=condominio, mes_referencia=mes_referencia).order_by(
        "vencimento", "id"
    )
    total_receitas = _soma(receitas)
    total_despesas = _soma(despesas)
    saldo_final = obter_saldo(condominio).saldo
    return {
        "condominio": condominio,
        "mes_referencia": mes_referencia,
        "rotulo_mes": rotulo_mes(mes_referencia),
        "receitas": list(receitas),
        "despesas": list(despesas),
        "total_receitas": total_receitas,
        "total_despesas": total_despesas,
        "resultado": total_receitas - total_despesas,
        "saldo_final": saldo_final,
        "saldo_inicial": saldo_final - total_receitas + total_despesas,
    }


def prestacao_csv(relatorio) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, delimiter=";")
    writer.writerow(["PRESTACAO DE CONTAS", relatorio["condominio"].nome, relatorio["rotulo_mes"]])
    writer.writerow([])
    writer.writerow(["RESUMO"])
    writer.writerow(["Saldo inicial", formatar_brl(relatorio["saldo_inicial"])])
    writer.writerow(["Total de receitas", formatar_brl(relatorio["total_receitas"])])
    writer.writerow(["Total de despesas", formatar_brl(relatorio["total_despesas"])])
    writer.writerow(["Resultado do mes", formatar_brl(relatorio["resultado"])])
    writer.writerow(["Saldo final", formatar_brl(relatorio["saldo_final"])])
    writer.writerow([])
    writer.writerow(["RECEITAS"])
    writer.writerow(["Categoria", "Unidade", "Data de pagamento", "Valor", "Observacoes"])
    for receita in relatorio["receitas"]:
        writer.writerow(
            [
                receita.get_categoria_display(),
                receita.unidade,
                receita.data_pagamento.strftime("%d/%m/%Y") if receita.data_pagamento else "",
                formatar_brl(receita.valor),
                receita.observacoes,
            ]
        )
    writer.writerow([])
    writer.writerow(["DESPESAS"])
    writer.writerow(["Categoria", "Vencimento", "Data de pagamento", "Valor", "Observacoes"])
    for despesa in relatorio["despesas"]:
        writer.writerow(
            [
                despesa.get_categoria_display(),
                despesa.vencimento.strftime("%d/%m/%Y") if despesa.vencimento else "",
                despesa.data_pagamento.strftime("%d/%m/%Y") if despesa.data_pagamento else "",
                formatar_brl(despesa.valor),
                despesa.observacoes,
            ]
        )
    return buffer.getvalue()


def registrar_pagamento_taxa(morador: Morador, mes_referencia, valor=None, data_pagamento=None, observacoes=""):
    existente = Receita.objects.filter(
        condominio=morador.condominio,
        unidade=morador.unidade,
        mes_referencia=mes_referencia,
        categoria=Receita.Categoria.TAXA_CONDOMINIO,
    ).first()
    if existente:
        return existente, False
    receita = Receita.objects.create(
        condominio=morador.condominio,
        categoria=Receita.Categoria.TAXA_CONDOMINIO,
        valor=valor or morador.valor_condominio,
        mes_referencia=mes_referencia,
        data_pagamento=data_pagamento or timezone.now().date(),
        unidade=morador.unidade,
        observacoes=observacoes,
    )
    recalcular_saldo(morador.condominio)
    return receita, True
