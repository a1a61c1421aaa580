from django.contrib.auth.models import Group
from django.core.management.base import BaseCommand

from core.permissions import ROLE_GESTOR, ROLE_MORADOR, setup_roles


class Command(BaseCommand):
    help = "Cria/atualiza os grupos Gestor e Morador com as permissões do condomínio."

    def handle(self, *args, **options):
        resumo = setup_roles()
        self.stdout.write(self.style.SUCCESS("Grupos do condomínio configurados."))
        self.stdout.write(f"{resumo['gestor_group']}: {resumo['gestor_permissions']} permissões")
        self.stdout.write(f"{resumo['morador_group']}: {resumo['morador_permissions']} permissões")

        if options["verbosity"] > 1:
            for nome in (ROLE_GESTOR, ROLE_MORADOR):
                codenames = Group.objects.get(name=nome).permissions.order_by("codename").values_list(
                    "codename", flat=True
                )
                self.stdout.write(f"[{nome}] " + ", ".join(codenames))
