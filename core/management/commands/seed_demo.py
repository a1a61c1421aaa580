from datetime import time, timedelta
from decimal import Decimal

from django.contrib.auth.models import Group
from django.core.management.base import BaseCommand
from django.utils import timezone

from core.models import (
    AreaComum,
    ChavePix,
    Comunicado,
    Condominio,
    Despesa,
    ManutencaoPreventiva,
    Morador,
    Plano,
    Receita,
    Usuario,
)
from core.permissions import ROLE_GESTOR, ROLE_MORADOR, setup_roles
from core.services.financeiro import mes_atual, recalcular_saldo


class Command(BaseCommand):
    help = "Cria dados de demonstração (condomínio, gestor, moradores e lançamentos)."

    def handle(self, *args, **options):
        setup_roles()
        plano, _ = Plano.objects.get_or_create(
            codigo="BASICO",
            defaults={"nome": "Básico", "max_moradores": 50, "valor": Decimal("149.90")},
        )
        condominio, _ = Condominio.objects.get_or_create(
            matricula="DEMO0001",
            defaults={
                "nome": "Residencial Demo",
                "cidade": "São Paulo",
                "estado": "SP",
                "plano": plano,
                "valor_plano": plano.valor,
                "nome_representante": "Síndico Demo",
                "email_representante": "sindico@demo.com",
            },
        )

        admin, created = Usuario.objects.get_or_create(
            username="admin",
            defaults={"email": "admin@demo.com", "is_staff": True, "is_superuser": True},
        )
        if created:
            admin.set_password("admin123")
            admin.save()

        gestor, created = Usuario.objects.get_or_create(
            username="sindico",
            defaults={
                "email": "sindico@demo.com",
                "condominio": condominio,
                "papel": Usuario.Papel.GESTOR,
            },
        )
        if created:
            gestor.set_password("sindico123")
            gestor.save()
        gestor.groups.add(Group.objects.get(name=ROLE_GESTOR))

        morador_user, created = Usuario.objects.get_or_create(
            username="morador@demo.com",
            defaults={"email": "morador@demo.com", "condominio": condominio},
        )
        if created:
            morador_user.set_password("morador123")
            morador_user.save()
        morador_user.groups.add(Group.objects.get(name=ROLE_MORADOR))

        morador, _ = Morador.objects.get_or_create(
            condominio=condominio,
            unidade="101",
            defaults={
                "nome_completo": "Morador Demo",
                "cpf": "52998224725",
                "email": "morador@demo.com",
                "valor_condominio": Decimal("450.00"),
                "usuario": morador_user,
            },
        )
        AreaComum.objects.get_or_create(
            condominio=condominio,
            nome="Salão de Festas",
            defaults={
                "capacidade": 80,
                "horario_abertura": time(8, 0),
                "horario_fechamento": time(23, 0),
                "valor": Decimal("150.00"),
            },
        )
        ChavePix.objects.get_or_create(
            condominio=condominio,
            defaults={"tipo_chave": ChavePix.TipoChave.EMAIL, "chave": "financeiro@demo.com"},
        )

        mes = mes_atual()
        Receita.objects.get_or_create(
            condominio=condominio,
            unidade=morador.unidade,
            mes_referencia=mes,
            defaults={"valor": morador.valor_condominio},
        )
        Despesa.objects.get_or_create(
            condominio=condominio,
            categoria=Despesa.Categoria.ENERGIA,
            mes_referencia=mes,
            defaults={"valor": Decimal("320.45"), "vencimento": timezone.now().date()},
        )
        Comunicado.objects.get_or_create(
            condominio=condominio,
            titulo="Bem-vindos ao MeuResidencial",
            defaults={"conteudo": "Prezados condôminos,\n\nAgora os comunicados chegam por aqui."},
        )
        ManutencaoPreventiva.objects.get_or_create(
            condominio=condominio,
            titulo="Revisão dos extintores",
            defaults={
                "categoria": ManutencaoPreventiva.Categoria.INCENDIO,
                "data_programada": timezone.now().date() + timedelta(days=15),
            },
        )
        recalcular_saldo(condominio)

        self.stdout.write(self.style.SUCCESS("Dados de demonstração criados."))
        self.stdout.write(self.style.SUCCESS("Superusuário: admin / Senha: admin123"))
        self.stdout.write(self.style.SUCCESS("Gestor: sindico / Senha: sindico123"))
        self.stdout.write(self.style.SUCCESS("Morador: morador@demo.com / Senha: morador123"))
