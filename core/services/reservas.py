import logging
from datetime import datetime

from django.core.exceptions import PermissionDenied, ValidationError
from django.utils import timezone

from ..models import Reserva


logger = logging.getLogger(__name__)

STATUS_BLOQUEANTES = (Reserva.Status.PENDENTE, Reserva.Status.APROVADA)


def reservas_conflitantes(area, data, hora_inicio, hora_fim, excluir_pk=None, status=STATUS_BLOQUEANTES):
    """Reservas da mesma área e dia cujo intervalo se sobrepõe; intervalos encostados não conflitam."""
    qs = Reserva.objects.filter(
        area=area,
        data=data,
        status__in=status,
        hora_inicio__lt=hora_fim,
        hora_fim__gt=hora_inicio,
    )
    if excluir_pk:
        qs = qs.exclude(pk=excluir_pk)
    return qs


def validar_reserva(area, data, hora_inicio, hora_fim, excluir_pk=None, hoje=None):
    if hora_inicio and hora_fim and hora_fim <= hora_inicio:
        raise ValidationError("O horário de término deve ser posterior ao de início.")
    hoje = hoje or timezone.now().date()
    if data < hoje:
        raise ValidationError("Não é possível reservar datas passadas.")
    if not area.funciona_em(data):
        raise ValidationError("A área não funciona neste dia da semana.")
    if area.horario_abertura and area.horario_fechamento:
        if hora_inicio < area.horario_abertura or hora_fim > area.horario_fechamento:
            raise ValidationError("Horário fora do funcionamento da área.")
    if reservas_conflitantes(area, data, hora_inicio, hora_fim, excluir_pk=excluir_pk).exists():
        raise ValidationError("Já existe uma reserva para este horário.")


def decidir_reserva(reserva, novo_status, usuario):
    if novo_status not in (Reserva.Status.APROVADA, Reserva.Status.REJEITADA, Reserva.Status.CANCELADA):
        raise ValidationError("Status inválido.")
    if reserva.status in (Reserva.Status.CANCELADA, Reserva.Status.REJEITADA):
        raise ValidationError("Esta reserva já foi encerrada.")
    if novo_status == Reserva.Status.APROVADA:
        conflito = reservas_conflitantes(
            reserva.area,
            reserva.data,
            reserva.hora_inicio,
            reserva.hora_fim,
            excluir_pk=reserva.pk,
            status=(Reserva.Status.APROVADA,),
        ).exists()
        if conflito:
            raise ValidationError("Já existe uma reserva aprovada para este horário.")
    reserva.status = novo_status
    reserva.decidido_por = usuario
    reserva.decidido_em = timezone.now()
    reserva.save(update_fields=["status", "decidido_por", "decidido_em"])
    logger.info(
        "Reserva %s -> %s | condominio=%s area=%s",
        reserva.pk,
        novo_status,
        reserva.condominio.matricula,
        reserva.area_id,
    )
    return reserva


def cancelar_reserva_do_morador(reserva, morador):
    if reserva.morador_id != getattr(morador, "pk", None):
        raise PermissionDenied
    if not reserva.ativa:
        raise ValidationError("Esta reserva já foi encerrada.")
    reserva.status = Reserva.Status.CANCELADA
    reserva.decidido_em = timezone.now()
    reserva.save(update_fields=["status", "decidido_em"])
    return reserva


def eventos_calendario(condominio, inicio=None, fim=None):
    qs = (
        Reserva.objects.filter(condominio=condominio, status__in=STATUS_BLOQUEANTES)
        .select_related("area", "morador")
        .order_by("data", "hora_inicio")
    )
    if inicio:
        qs = qs.filter(data__gte=inicio)
    if fim:
        qs = qs.filter(data__lte=fim)
    eventos = []
    for reserva in qs:
        eventos.append(
            {
                "id": reserva.pk,
                "title": f"{reserva.area.nome} - {reserva.morador.unidade}",
                "start": datetime.combine(reserva.data, reserva.hora_inicio).isoformat(),
                "end": datetime.combine(reserva.data, reserva.hora_fim).isoformat(),
                "extendedProps": {
                    "status": reserva.status,
                    "area": reserva.area.nome,
                    "morador": reserva.morador.nome_completo,
                    "unidade": reserva.morador.unidade,
                },
            }
        )
    return eventos
