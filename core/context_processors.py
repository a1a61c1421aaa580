from django.utils import timezone

from .models import ManutencaoPreventiva, Reserva
from .services import is_gestor_user, morador_do_usuario
from .services.cobrancas import contar_cobrancas_vencidas


def alertas_condominio(request):
    vazio = {
        "morador_logado": None,
        "cobrancas_vencidas_count": 0,
        "manutencoes_pendentes_count": 0,
        "reservas_pendentes_count": 0,
    }
    user = getattr(request, "user", None)
    if not user or not user.is_authenticated or user.is_superuser:
        return vazio

    condominio = getattr(user, "condominio", None)
    if not condominio:
        return vazio

    if is_gestor_user(user):
        hoje = timezone.now().date()
        return dict(
            vazio,
            manutencoes_pendentes_count=ManutencaoPreventiva.objects.filter(
                condominio=condominio, concluida=False, data_programada__lte=hoje
            ).count(),
            reservas_pendentes_count=Reserva.objects.filter(
                condominio=condominio, status=Reserva.Status.PENDENTE
            ).count(),
        )

    morador = morador_do_usuario(user)
    if not morador:
        return vazio
    return dict(
        vazio,
        morador_logado=morador,
        cobrancas_vencidas_count=contar_cobrancas_vencidas(morador),
    )
