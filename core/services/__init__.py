import logging

from ..models import CondominioAlteracaoLog, Morador


logger = logging.getLogger(__name__)


def is_gestor_user(user) -> bool:
    checker = getattr(user, "is_gestor", None)
    if callable(checker):
        return checker()
    return bool(checker)


def morador_do_usuario(user):
    if not getattr(user, "is_authenticated", False):
        return None
    return Morador.objects.filter(usuario=user, ativo=True).select_related("condominio").first()


def moradores_com_email(condominio, unidades=None):
    qs = Morador.objects.filter(condominio=condominio, ativo=True).exclude(email="")
    if unidades:
        qs = qs.filter(unidade__in=unidades)
    return qs.order_by("unidade")


def registrar_alteracoes_condominio(condominio, anteriores, usuario=None):
    """Grava um log por campo alterado; ``anteriores`` é o dict capturado antes do save."""
    logs = []
    for campo in condominio.CAMPOS_AUDITADOS:
        antes = anteriores.get(campo)
        depois = getattr(condominio, campo)
        if (antes or "") == (depois or ""):
            continue
        logs.append(
            CondominioAlteracaoLog(
                condominio=condominio,
                campo=campo,
                valor_anterior=antes or "",
                valor_novo=depois or "",
                usuario=usuario,
            )
        )
    if logs:
        CondominioAlteracaoLog.objects.bulk_create(logs)
        logger.info("Condominio %s alterado | campos=%s", condominio.matricula, [log.campo for log in logs])
    return logs
