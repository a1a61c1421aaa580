import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ('core', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='DocumentoCondominio',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('tipo', models.CharField(choices=[('apolice', 'Apólice de Seguro'), ('ata', 'Ata de Assembleia'), ('contrato', 'Contrato'), ('convencao', 'Convenção do Condomínio'), ('planta', 'Planta do Edifício'), ('regulamento', 'Regulamento Interno'), ('vistoria', 'Auto de Vistoria do Corpo de Bombeiros')], max_length=20)),
                ('data_cadastro', models.DateField(default=django.utils.timezone.now)),
                ('observacoes', models.TextField()),
                ('criado_em', models.DateTimeField(auto_now_add=True)),
                ('atualizado_em', models.DateTimeField(auto_now=True)),
                ('condominio', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='documentos', to='core.condominio')),
            ],
            options={
                'ordering': ['-criado_em', '-id'],
            },
        ),
        migrations.CreateModel(
            name='AnexoDocumentoCondominio',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('nome_arquivo', models.CharField(max_length=255)),
                ('tipo_arquivo', models.CharField(blank=True, max_length=100)),
                ('criado_em', models.DateTimeField(auto_now_add=True)),
                ('arquivo', models.FileField(upload_to='documentos_condominio/')),
                ('documento', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='anexos', to='core.documentocondominio')),
            ],
            options={
                'ordering': ['id'],
                'abstract': False,
            },
        ),
    ]
