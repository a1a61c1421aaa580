from django.apps import apps
from django.contrib.auth.models import Group, Permission
from django.contrib.contenttypes.models import ContentType


ROLE_GESTOR = "Gestor"
ROLE_MORADOR = "Morador"
ROLE_MODELS = [
    "core.Morador",
    "core.AreaComum",
    "core.Reserva",
    "core.Receita",
    "core.Despesa",
    "core.Comunicado",
    "core.ChavePix",
    "core.Dedetizacao",
    "core.ManutencaoPreventiva",
    "core.DocumentoCondominio",
]
# moradores também solicitam reservas
MORADOR_ADD_MODELS = {"core.Reserva"}


def setup_roles() -> dict:
    gestor_group, _ = Group.objects.get_or_create(name=ROLE_GESTOR)
    morador_group, _ = Group.objects.get_or_create(name=ROLE_MORADOR)

    gestor_permissions = []
    morador_permissions = []

    for model_path in ROLE_MODELS:
        model = apps.get_model(model_path)
        content_type = ContentType.objects.get_for_model(model)
        model_name = model._meta.model_name
        gestor_codenames = [
            f"view_{model_name}",
            f"add_{model_name}",
            f"change_{model_name}",
            f"delete_{model_name}",
        ]
        morador_codenames = [f"view_{model_name}"]
        if model_path in MORADOR_ADD_MODELS:
            morador_codenames.append(f"add_{model_name}")
        gestor_permissions += list(
            Permission.objects.filter(content_type=content_type, codename__in=gestor_codenames)
        )
        morador_permissions += list(
            Permission.objects.filter(content_type=content_type, codename__in=morador_codenames)
        )

    gestor_group.permissions.add(*gestor_permissions)
    morador_group.permissions.add(*morador_permissions)

    return {
        "gestor_group": gestor_group.name,
        "morador_group": morador_group.name,
        "gestor_permissions": len(gestor_permissions),
        "morador_permissions": len(morador_permissions),
    }
