import calendar
from datetime import timedelta

from django.db.models import Count, Sum
from django.db.models.functions import TruncMonth
from django.utils import timezone

from ..models import Comunicado, Condominio, Despesa, DespesaEmpresarial, Morador, Receita


MAX_MESES_DASHBOARD = 24
MAX_MESES_PERIODO = 120

MESES_PT = [
    "Jan",
    "Fev",
    "Mar",
    "Abr",
    "Mai",
    "Jun",
    "Jul",
    "Ago",
    "Set",
    "Out",
    "Nov",
    "Dez",
]


def _format_month(value):
    if not value:
        return ""
    return f"{MESES_PT[value.month - 1]}/{value.year}"


def _subtract_months(value, months):
    year = value.year - (months // 12)
    month = value.month - (months % 12)
    if month <= 0:
        month += 12
        year -= 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def _resolve_period(range_key=None, start=None, end=None, default_months=6):
    today = timezone.now().date()
    if start and end:
        if start > end:
            start, end = end, start
        return start, end
    if range_key:
        key = str(range_key).lower()
        if key.endswith("d") and key[:-1].isdigit():
            days = max(1, min(int(key[:-1]), MAX_MESES_PERIODO * 31))
            return today - timedelta(days=days - 1), today
        if key.endswith("m") and key[:-1].isdigit():
            months = min(int(key[:-1]), MAX_MESES_PERIODO)
            return _subtract_months(today.replace(day=1), max(months - 1, 0)), today
        if key.endswith("y") and key[:-1].isdigit():
            months = min(int(key[:-1]) * 12, MAX_MESES_PERIODO)
            return _subtract_months(today.replace(day=1), max(months - 1, 0)), today
    return _subtract_months(today.replace(day=1), max(default_months - 1, 0)), today


def _ultimos_meses(quantidade, hoje=None):
    hoje = hoje or timezone.now().date()
    inicio = hoje.replace(day=1)
    meses = [_subtract_months(inicio, n) for n in range(quantidade - 1, -1, -1)]
    return [f"{m.year}-{m.month:02d}" for m in meses]


def _merge_monthly(periodos, receitas, despesas):
    data = {p: {"period": p, "receitas": 0, "despesas": 0} for p in periodos}
    for row in receitas:
        if row["period"] in data:
            data[row["period"]]["receitas"] = row["total"] or 0
    for row in despesas:
        if row["period"] in data:
            data[row["period"]]["despesas"] = row["total"] or 0
    items = [data[p] for p in periodos]
    for item in items:
        item["saldo"] = (item["receitas"] or 0) - (item["despesas"] or 0)
    return items


def _rotulo_referencia(referencia):
    ano, mes = referencia.split("-")
    return f"{MESES_PT[int(mes) - 1]}/{ano}"


def _serialize_categorias(rows, labels_map):
    return {
        "labels": [labels_map.get(row["categoria"], row["categoria"]) for row in rows],
        "valores": [float(row["total"] or 0) for row in rows],
    }


def build_dashboard_data(condominio, meses=6, hoje=None):
    from .financeiro import mes_atual, obter_saldo

    if not condominio:
        return {}

    hoje = hoje or timezone.now().date()
    meses = max(1, min(int(meses or 1), MAX_MESES_DASHBOARD))
    periodos = _ultimos_meses(meses, hoje)
    receitas_qs = Receita.objects.filter(condominio=condominio)
    despesas_qs = Despesa.objects.filter(condominio=condominio)

    receitas = (
        receitas_qs.filter(mes_referencia__in=periodos)
        .values("mes_referencia")
        .annotate(total=Sum("valor"))
    )
    despesas = (
        despesas_qs.filter(mes_referencia__in=periodos)
        .values("mes_referencia")
        .annotate(total=Sum("valor"))
    )
    mensal = _merge_monthly(
        periodos,
        [{"period": r["mes_referencia"], "total": r["total"]} for r in receitas],
        [{"period": d["mes_referencia"], "total": d["total"]} for d in despesas],
    )

    referencia = mes_atual(hoje)
    receitas_mes = receitas_qs.filter(mes_referencia=referencia).aggregate(total=Sum("valor"))["total"] or 0
    despesas_mes = despesas_qs.filter(mes_referencia=referencia).aggregate(total=Sum("valor"))["total"] or 0

    despesas_categoria = (
        despesas_qs.filter(mes_referencia__in=periodos)
        .values("categoria")
        .annotate(total=Sum("valor"))
        .order_by("-total")
    )
    receitas_categoria = (
        receitas_qs.filter(mes_referencia__in=periodos)
        .values("categoria")
        .annotate(total=Sum("valor"))
        .order_by("-total")
    )

    return {
        "resumo": {
            "saldo": float(obter_saldo(condominio).saldo),
            "receitas_mes": float(receitas_mes),
            "despesas_mes": float(despesas_mes),
            "moradores": Morador.objects.filter(condominio=condominio, ativo=True).count(),
            "comunicados": Comunicado.objects.filter(condominio=condominio).count(),
        },
        "mensal": {
            "labels": [_rotulo_referencia(item["period"]) for item in mensal],
            "receitas": [float(item["receitas"]) for item in mensal],
            "despesas": [float(item["despesas"]) for item in mensal],
            "saldo": [float(item["saldo"]) for item in mensal],
        },
        "despesas_por_categoria": _serialize_categorias(despesas_categoria, dict(Despesa.Categoria.choices)),
        "receitas_por_categoria": _serialize_categorias(receitas_categoria, dict(Receita.Categoria.choices)),
    }


def build_plan_distribution():
    rows = (
        Condominio.objects.filter(ativo=True)
        .values("plano__nome")
        .annotate(total=Count("id"))
        .order_by("-total", "plano__nome")
    )
    return {
        "labels": [row["plano__nome"] or "Sem plano" for row in rows],
        "valores": [row["total"] for row in rows],
    }


def build_business_expense_charts(range_key=None, start=None, end=None):
    period_start, period_end = _resolve_period(range_key, start, end, default_months=12)
    qs = DespesaEmpresarial.objects.filter(data__gte=period_start, data__lte=period_end)
    por_categoria = qs.values("categoria").annotate(total=Sum("valor")).order_by("-total")
    por_mes = (
        qs.annotate(period=TruncMonth("data"))
        .values("period")
        .annotate(total=Sum("valor"))
        .order_by("period")
    )
    return {
        "inicio": period_start.isoformat(),
        "fim": period_end.isoformat(),
        "total": float(qs.aggregate(total=Sum("valor"))["total"] or 0),
        "por_categoria": {
            "labels": [row["categoria"] for row in por_categoria],
            "valores": [float(row["total"] or 0) for row in por_categoria],
        },
        "por_mes": {
            "labels": [_format_month(row["period"]) for row in por_mes],
            "valores": [float(row["total"] or 0) for row in por_mes],
        },
    }
