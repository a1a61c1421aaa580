import decimal

import core.models
import django.contrib.auth.validators
import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('auth', '0012_alter_user_first_name_max_length'),
    ]

    operations = [
        migrations.CreateModel(
            name='Plano',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('codigo', models.CharField(max_length=30, unique=True)),
                ('nome', models.CharField(max_length=100)),
                ('descricao', models.TextField(blank=True)),
                ('max_moradores', models.PositiveIntegerField(blank=True, null=True)),
                ('valor', models.DecimalField(decimal_places=2, default=0, max_digits=12, validators=[django.core.validators.MinValueValidator(0)])),
                ('criado_em', models.DateTimeField(auto_now_add=True)),
                ('atualizado_em', models.DateTimeField(auto_now=True)),
            ],
            options={
                'ordering': ['valor', 'nome'],
            },
        ),
        migrations.CreateModel(
            name='Condominio',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('matricula', models.CharField(blank=True, max_length=20, unique=True)),
                ('nome', models.CharField(max_length=150)),
                ('cnpj', models.CharField(blank=True, max_length=20)),
                ('cep', models.CharField(blank=True, default='', max_length=12)),
                ('rua', models.CharField(blank=True, default='', max_length=150)),
                ('numero', models.CharField(blank=True, default='', max_length=20)),
                ('complemento', models.CharField(blank=True, default='', max_length=100)),
                ('bairro', models.CharField(blank=True, default='', max_length=100)),
                ('cidade', models.CharField(blank=True, default='', max_length=100)),
                ('estado', models.CharField(blank=True, default='', max_length=2)),
                ('nome_representante', models.CharField(blank=True, max_length=150)),
                ('email_representante', models.EmailField(blank=True, max_length=254)),
                ('telefone_representante', models.CharField(blank=True, max_length=20)),
                ('valor_plano', models.DecimalField(decimal_places=2, default=0, max_digits=12, validators=[django.core.validators.MinValueValidator(0)])),
                ('forma_pagamento', models.CharField(choices=[('PIX', 'PIX'), ('BOLETO', 'Boleto'), ('CARTAO', 'Cartão de crédito')], default='PIX', max_length=10)),
                ('desconto', models.DecimalField(decimal_places=2, default=0, max_digits=12, validators=[django.core.validators.MinValueValidator(0)])),
                ('ativo', models.BooleanField(default=True)),
                ('email_boas_vindas_enviado', models.BooleanField(default=False)),
                ('criado_em', models.DateTimeField(auto_now_add=True)),
                ('atualizado_em', models.DateTimeField(auto_now=True)),
                ('plano', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='condominios', to='core.plano')),
            ],
            options={
                'ordering': ['nome'],
            },
        ),
        migrations.CreateModel(
            name='Usuario',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('password', models.CharField(max_length=128, verbose_name='password')),
                ('last_login', models.DateTimeField(blank=True, null=True, verbose_name='last login')),
                ('is_superuser', models.BooleanField(default=False, help_text='Designates that this user has all permissions without explicitly assigning them.', verbose_name='superuser status')),
                ('username', models.CharField(
                    error_messages={'unique': 'A user with that username already exists.'},
                    help_text='Required. 150 characters or fewer. Letters, digits and @/./+/-/_ only.',
                    max_length=150,
                    unique=True,
                    validators=[django.contrib.auth.validators.UnicodeUsernameValidator()],
                    verbose_name='username')),
                ('first_name', models.CharField(blank=True, max_length=150, verbose_name='first name')),
                ('last_name', models.CharField(blank=True, max_length=150, verbose_name='last name')),
                ('email', models.EmailField(blank=True, max_length=254, verbose_name='email address')),
                ('is_staff', models.BooleanField(default=False, help_text='Designates whether the user can log into this admin site.', verbose_name='staff status')),
                ('is_active', models.BooleanField(default=True, help_text='Designates whether this user should be treated as active. Unselect this instead of deleting accounts.', verbose_name='active')),
                ('date_joined', models.DateTimeField(default=django.utils.timezone.now, verbose_name='date joined')),
                ('papel', models.CharField(choices=[('GESTOR', 'Gestor'), ('MORADOR', 'Morador')], default='MORADOR', max_length=10)),
                ('condominio', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='usuarios', to='core.condominio')),
                ('groups', models.ManyToManyField(blank=True, help_text='The groups this user belongs to. A user will get all permissions granted to each of their groups.', related_name='user_set', related_query_name='user', to='auth.group', verbose_name='groups')),
                ('user_permissions', models.ManyToManyField(blank=True, help_text='Specific permissions for this user.', related_name='user_set', related_query_name='user', to='auth.permission', verbose_name='user permissions')),
            ],
            options={
                'verbose_name': 'user',
                'verbose_name_plural': 'users',
                'abstract': False,
            },
            managers=[
                ('objects', core.models.UsuarioManager()),
            ],
        ),
        migrations.CreateModel(
            name='CondominioAlteracaoLog',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('campo', models.CharField(max_length=50)),
                ('valor_anterior', models.TextField(blank=True)),
                ('valor_novo', models.TextField(blank=True)),
                ('alterado_em', models.DateTimeField(auto_now_add=True)),
                ('condominio', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='alteracoes', to='core.condominio')),
                ('usuario', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-alterado_em', '-id'],
            },
        ),
        migrations.CreateModel(
            name='Morador',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('nome_completo', models.CharField(max_length=150)),
                ('cpf', models.CharField(max_length=11)),
                ('telefone', models.CharField(blank=True, max_length=20)),
                ('email', models.EmailField(blank=True, max_length=254)),
                ('unidade', models.CharField(max_length=20)),
                ('valor_condominio', models.DecimalField(decimal_places=2, default=0, max_digits=12, validators=[django.core.validators.MinValueValidator(0)])),
                ('ativo', models.BooleanField(default=True)),
                ('criado_em', models.DateTimeField(auto_now_add=True)),
                ('atualizado_em', models.DateTimeField(auto_now=True)),
                ('condominio', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='moradores', to='core.condominio')),
                ('usuario', models.OneToOneField(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='morador', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['unidade'],
            },
        ),
        migrations.AddConstraint(
            model_name='morador',
            constraint=models.UniqueConstraint(fields=('condominio', 'cpf'), name='morador_cpf_por_condominio'),
        ),
        migrations.AddConstraint(
            model_name='morador',
            constraint=models.UniqueConstraint(fields=('condominio', 'unidade'), name='morador_unidade_por_condominio'),
        ),
        migrations.AddConstraint(
            model_name='morador',
            constraint=models.UniqueConstraint(condition=models.Q(('email', ''), _negated=True), fields=('condominio', 'email'), name='morador_email_por_condominio'),
        ),
        migrations.CreateModel(
            name='AreaComum',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('nome', models.CharField(max_length=100)),
                ('descricao', models.TextField(blank=True)),
                ('capacidade', models.PositiveIntegerField(default=1, validators=[django.core.validators.MinValueValidator(1)])),
                ('regras', models.TextField(blank=True)),
                ('horario_abertura', models.TimeField(blank=True, null=True)),
                ('horario_fechamento', models.TimeField(blank=True, null=True)),
                ('dias_semana', models.JSONField(blank=True, default=core.models.todos_os_dias)),
                ('valor', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True, validators=[django.core.validators.MinValueValidator(0)])),
                ('ativa', models.BooleanField(default=True)),
                ('criado_em', models.DateTimeField(auto_now_add=True)),
                ('condominio', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='areas_comuns', to='core.condominio')),
            ],
            options={
                'ordering': ['nome'],
                'unique_together': {('condominio', 'nome')},
            },
        ),
        migrations.CreateModel(
            name='Reserva',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('data', models.DateField()),
                ('hora_inicio', models.TimeField()),
                ('hora_fim', models.TimeField()),
                ('observacoes', models.TextField(blank=True)),
                ('status', models.CharField(choices=[('PENDENTE', 'Pendente'), ('APROVADA', 'Aprovada'), ('REJEITADA', 'Rejeitada'), ('CANCELADA', 'Cancelada')], default='PENDENTE', max_length=10)),
                ('decidido_em', models.DateTimeField(blank=True, null=True)),
                ('criado_em', models.DateTimeField(auto_now_add=True)),
                ('area', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='reservas', to='core.areacomum')),
                ('condominio', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='reservas', to='core.condominio')),
                ('decidido_por', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='reservas_decididas', to=settings.AUTH_USER_MODEL)),
                ('morador', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='reservas', to='core.morador')),
            ],
            options={
                'ordering': ['-data', '-hora_inicio', '-id'],
            },
        ),
        migrations.CreateModel(
            name='Receita',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('categoria', models.CharField(choices=[('taxa_condominio', 'Taxa de Condomínio'), ('reserva_area_comum', 'Reserva Área Comum'), ('taxa_extra', 'Taxa Extra'), ('outros', 'Outros')], default='taxa_condominio', max_length=30)),
                ('valor', models.DecimalField(decimal_places=2, max_digits=12, validators=[django.core.validators.MinValueValidator(decimal.Decimal('0.01'))])),
                ('mes_referencia', models.CharField(max_length=7, validators=[core.models.mes_referencia_validator])),
                ('data_pagamento', models.DateField(default=django.utils.timezone.now)),
                ('unidade', models.CharField(blank=True, max_length=20)),
                ('observacoes', models.TextField(blank=True)),
                ('criado_em', models.DateTimeField(default=django.utils.timezone.now)),
                ('condominio', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='receitas', to='core.condominio')),
            ],
            options={
                'ordering': ['-data_pagamento', '-id'],
            },
        ),
        migrations.CreateModel(
            name='Despesa',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('categoria', models.CharField(choices=[('energia', 'Energia'), ('agua', 'Água'), ('manutencao', 'Manutenção'), ('gas', 'Gás'), ('limpeza', 'Limpeza'), ('produtos', 'Produtos'), ('imposto', 'Imposto'), ('seguranca', 'Segurança'), ('sistema_condominio', 'Sistema Condomínio'), ('outros', 'Outros')], max_length=30)),
                ('valor', models.DecimalField(decimal_places=2, max_digits=12, validators=[django.core.validators.MinValueValidator(decimal.Decimal('0.01'))])),
                ('mes_referencia', models.CharField(max_length=7, validators=[core.models.mes_referencia_validator])),
                ('vencimento', models.DateField(blank=True, null=True)),
                ('data_pagamento', models.DateField(blank=True, null=True)),
                ('unidade', models.CharField(blank=True, max_length=20)),
                ('observacoes', models.TextField(blank=True)),
                ('anexo', models.FileField(blank=True, null=True, upload_to='despesas/', validators=[django.core.validators.FileExtensionValidator(allowed_extensions=['pdf', 'jpg', 'jpeg', 'png'])])),
                ('criado_em', models.DateTimeField(default=django.utils.timezone.now)),
                ('condominio', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='despesas', to='core.condominio')),
            ],
            options={
                'ordering': ['-mes_referencia', '-id'],
            },
        ),
        migrations.CreateModel(
            name='SaldoFinanceiro',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('saldo', models.DecimalField(decimal_places=2, default=0, max_digits=14)),
                ('manual', models.BooleanField(default=False)),
                ('base_manual', models.DecimalField(blank=True, decimal_places=2, max_digits=14, null=True)),
                ('base_manual_em', models.DateTimeField(blank=True, null=True)),
                ('atualizado_em', models.DateTimeField(auto_now=True)),
                ('condominio', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='saldo_financeiro', to='core.condominio')),
            ],
        ),
        migrations.CreateModel(
            name='AjusteSaldo',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('saldo_anterior', models.DecimalField(decimal_places=2, max_digits=14)),
                ('saldo_novo', models.DecimalField(decimal_places=2, max_digits=14)),
                ('observacoes', models.TextField(blank=True)),
                ('ajustado_em', models.DateTimeField(default=django.utils.timezone.now)),
                ('condominio', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='ajustes_saldo', to='core.condominio')),
                ('usuario', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-ajustado_em', '-id'],
            },
        ),
        migrations.CreateModel(
            name='RelatorioEnvioLog',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('mes_referencia', models.CharField(max_length=7, validators=[core.models.mes_referencia_validator])),
                ('enviado_via', models.CharField(choices=[('EMAIL', 'E-mail'), ('WHATSAPP', 'WhatsApp')], default='EMAIL', max_length=10)),
                ('destinatarios', models.JSONField(blank=True, default=list)),
                ('quantidade', models.PositiveIntegerField(default=0)),
                ('enviado_em', models.DateTimeField(auto_now_add=True)),
                ('condominio', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='relatorios_enviados', to='core.condominio')),
                ('usuario', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-enviado_em', '-id'],
            },
        ),
        migrations.CreateModel(
            name='Comunicado',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('titulo', models.CharField(max_length=150)),
                ('conteudo', models.TextField()),
                ('enviado_email', models.BooleanField(default=False)),
                ('enviado_whatsapp', models.BooleanField(default=False)),
                ('criado_em', models.DateTimeField(auto_now_add=True)),
                ('atualizado_em', models.DateTimeField(auto_now=True)),
                ('condominio', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='comunicados', to='core.condominio')),
            ],
            options={
                'ordering': ['-criado_em', '-id'],
            },
        ),
        migrations.CreateModel(
            name='ChavePix',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('tipo_chave', models.CharField(choices=[('CPF', 'CPF'), ('CNPJ', 'CNPJ'), ('EMAIL', 'E-mail'), ('TELEFONE', 'Telefone'), ('ALEATORIA', 'Chave aleatória')], default='CNPJ', max_length=10)),
                ('chave', models.CharField(max_length=77)),
                ('dia_vencimento', models.PositiveSmallIntegerField(default=10, validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(28)])),
                ('juros_ao_dia', models.DecimalField(decimal_places=3, default=decimal.Decimal('0.033'), max_digits=6, validators=[django.core.validators.MinValueValidator(0)])),
                ('atualizado_em', models.DateTimeField(auto_now=True)),
                ('condominio', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='chave_pix', to='core.condominio')),
            ],
        ),
        migrations.CreateModel(
            name='Dedetizacao',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('empresa', models.CharField(max_length=150)),
                ('data', models.DateField()),
                ('finalidades', models.JSONField(blank=True, default=list)),
                ('observacoes', models.TextField(blank=True)),
                ('anexo', models.FileField(blank=True, null=True, upload_to='dedetizacoes/', validators=[django.core.validators.FileExtensionValidator(allowed_extensions=['pdf', 'jpg', 'jpeg', 'png'])])),
                ('criado_em', models.DateTimeField(auto_now_add=True)),
                ('condominio', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='dedetizacoes', to='core.condominio')),
            ],
            options={
                'ordering': ['-data', '-id'],
            },
        ),
        migrations.CreateModel(
            name='ManutencaoPreventiva',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('titulo', models.CharField(max_length=150)),
                ('categoria', models.CharField(choices=[('eletricos', 'Sistemas Elétricos'), ('hidraulicos', 'Sistemas Hidráulicos'), ('elevadores', 'Elevadores'), ('telhados', 'Telhados e Fachadas'), ('seguranca', 'Sistema de Segurança'), ('incendio', 'Equipamentos de Incêndio')], default='eletricos', max_length=20)),
                ('descricao', models.TextField(blank=True)),
                ('data_programada', models.DateField()),
                ('concluida', models.BooleanField(default=False)),
                ('concluida_em', models.DateTimeField(blank=True, null=True)),
                ('criado_em', models.DateTimeField(auto_now_add=True)),
                ('condominio', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='manutencoes', to='core.condominio')),
            ],
            options={
                'ordering': ['concluida', 'data_programada', 'id'],
            },
        ),
        migrations.CreateModel(
            name='DocumentoEmpresarial',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('titulo', models.CharField(max_length=200)),
                ('data', models.DateField(default=django.utils.timezone.now)),
                ('descricao', models.TextField(blank=True)),
                ('criado_em', models.DateTimeField(auto_now_add=True)),
                ('atualizado_em', models.DateTimeField(auto_now=True)),
            ],
            options={
                'ordering': ['-data', '-id'],
            },
        ),
        migrations.CreateModel(
            name='AnexoDocumento',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('arquivo', models.FileField(upload_to='documentos_empresariais/')),
                ('nome_arquivo', models.CharField(max_length=255)),
                ('tipo_arquivo', models.CharField(blank=True, max_length=100)),
                ('criado_em', models.DateTimeField(auto_now_add=True)),
                ('documento', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='anexos', to='core.documentoempresarial')),
            ],
            options={
                'ordering': ['id'],
            },
        ),
        migrations.CreateModel(
            name='DespesaEmpresarial',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('descricao', models.CharField(max_length=200)),
                ('categoria', models.CharField(choices=[('Aluguel', 'Aluguel'), ('Água', 'Água'), ('Luz', 'Luz'), ('Internet', 'Internet'), ('Telefone', 'Telefone'), ('Material de Escritório', 'Material de Escritório'), ('Manutenção', 'Manutenção'), ('Impostos', 'Impostos'), ('Salários', 'Salários'), ('Marketing', 'Marketing'), ('Outros', 'Outros')], max_length=30)),
                ('valor', models.DecimalField(decimal_places=2, max_digits=12, validators=[django.core.validators.MinValueValidator(decimal.Decimal('0.01'))])),
                ('data', models.DateField(default=django.utils.timezone.now)),
                ('criado_em', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'ordering': ['-data', '-id'],
            },
        ),
    ]
