from django.urls import path

from . import views

urlpatterns = [
    path('', views.DashboardView.as_view(), name='dashboard'),
    path('dashboard/dados/', views.DashboardDataView.as_view(), name='dashboard_data'),
    path('morador/', views.MoradorPainelView.as_view(), name='morador_painel'),
    path('contato/', views.ContatoView.as_view(), name='contato'),
    path('moradores/', views.MoradorListView.as_view(), name='moradores_list'),
    path('moradores/novo/', views.MoradorCreateView.as_view(), name='moradores_create'),
    path('moradores/<int:pk>/editar/', views.MoradorUpdateView.as_view(), name='moradores_update'),
    path('moradores/<int:pk>/excluir/', views.MoradorDeleteView.as_view(), name='moradores_delete'),
    path('moradores/<int:pk>/liberar-acesso/', views.MoradorLiberarAcessoView.as_view(), name='moradores_liberar_acesso'),
    path('areas/', views.AreaComumListView.as_view(), name='areas_list'),
    path('areas/nova/', views.AreaComumCreateView.as_view(), name='areas_create'),
    path('areas/<int:pk>/editar/', views.AreaComumUpdateView.as_view(), name='areas_update'),
    path('areas/<int:pk>/excluir/', views.AreaComumDeleteView.as_view(), name='areas_delete'),
    path('reservas/', views.ReservaListView.as_view(), name='reservas_list'),
    path('reservas/nova/', views.ReservaCreateView.as_view(), name='reservas_create'),
    path('reservas/minhas/', views.MinhasReservasView.as_view(), name='minhas_reservas'),
    path('reservas/calendario/', views.ReservaCalendarioView.as_view(), name='reservas_calendario'),
    path('reservas/eventos/', views.ReservaEventosView.as_view(), name='reservas_eventos'),
    path('reservas/<int:pk>/decidir/', views.ReservaDecisaoView.as_view(), name='reservas_decidir'),
    path('reservas/<int:pk>/cancelar/', views.ReservaCancelarView.as_view(), name='reservas_cancelar'),
    path('financeiro/receitas/', views.ReceitaListView.as_view(), name='receitas_list'),
    path('financeiro/receitas/nova/', views.ReceitaCreateView.as_view(), name='receitas_create'),
    path('financeiro/receitas/<int:pk>/editar/', views.ReceitaUpdateView.as_view(), name='receitas_update'),
    path('financeiro/receitas/<int:pk>/excluir/', views.ReceitaDeleteView.as_view(), name='receitas_delete'),
    path('financeiro/despesas/', views.DespesaListView.as_view(), name='despesas_list'),
    path('financeiro/despesas/nova/', views.DespesaCreateView.as_view(), name='despesas_create'),
    path('financeiro/despesas/<int:pk>/editar/', views.DespesaUpdateView.as_view(), name='despesas_update'),
    path('financeiro/despesas/<int:pk>/excluir/', views.DespesaDeleteView.as_view(), name='despesas_delete'),
    path('financeiro/saldo/', views.SaldoView.as_view(), name='saldo'),
    path('financeiro/saldo/automatico/', views.SaldoAutomaticoView.as_view(), name='saldo_automatico'),
    path('financeiro/saldo/recalcular/', views.SaldoRecalcularView.as_view(), name='saldo_recalcular'),
    path('financeiro/pagamentos/registrar/', views.RegistrarPagamentoView.as_view(), name='registrar_pagamento'),
    path('financeiro/pix/', views.ChavePixView.as_view(), name='chave_pix'),
    path('prestacao-contas/', views.PrestacaoContasView.as_view(), name='prestacao_contas'),
    path('prestacao-contas/csv/', views.PrestacaoCsvView.as_view(), name='prestacao_csv'),
    path('prestacao-contas/pdf/', views.PrestacaoPdfView.as_view(), name='prestacao_pdf'),
    path('prestacao-contas/envios/', views.RelatorioEnvioListView.as_view(), name='relatorios_enviados'),
    path('cobrancas/', views.MinhasCobrancasView.as_view(), name='minhas_cobrancas'),
    path('cobrancas/<str:mes>/pix/', views.CobrancaPixView.as_view(), name='cobranca_pix'),
    path('comunicados/', views.ComunicadoListView.as_view(), name='comunicados_list'),
    path('comunicados/novo/', views.ComunicadoCreateView.as_view(), name='comunicados_create'),
    path('comunicados/<int:pk>/', views.ComunicadoDetailView.as_view(), name='comunicado_detail'),
    path('comunicados/<int:pk>/editar/', views.ComunicadoUpdateView.as_view(), name='comunicados_update'),
    path('comunicados/<int:pk>/excluir/', views.ComunicadoDeleteView.as_view(), name='comunicados_delete'),
    path('comunicados/<int:pk>/enviar-email/', views.ComunicadoEnviarEmailView.as_view(), name='comunicados_enviar_email'),
    path('comunicados/<int:pk>/whatsapp/', views.ComunicadoWhatsappView.as_view(), name='comunicados_whatsapp'),
    path('dedetizacoes/', views.DedetizacaoListView.as_view(), name='dedetizacoes_list'),
    path('dedetizacoes/nova/', views.DedetizacaoCreateView.as_view(), name='dedetizacoes_create'),
    path('dedetizacoes/<int:pk>/editar/', views.DedetizacaoUpdateView.as_view(), name='dedetizacoes_update'),
    path('dedetizacoes/<int:pk>/excluir/', views.DedetizacaoDeleteView.as_view(), name='dedetizacoes_delete'),
    path('manutencoes/', views.ManutencaoListView.as_view(), name='manutencoes_list'),
    path('manutencoes/nova/', views.ManutencaoCreateView.as_view(), name='manutencoes_create'),
    path('manutencoes/<int:pk>/editar/', views.ManutencaoUpdateView.as_view(), name='manutencoes_update'),
    path('manutencoes/<int:pk>/excluir/', views.ManutencaoDeleteView.as_view(), name='manutencoes_delete'),
    path('manutencoes/<int:pk>/alternar/', views.ManutencaoToggleView.as_view(), name='manutencoes_toggle'),
    path('documentos/', views.DocumentoCondominioListView.as_view(), name='documentos_condominio_list'),
    path('documentos/novo/', views.DocumentoCondominioCreateView.as_view(), name='documentos_condominio_create'),
    path('documentos/<int:pk>/editar/', views.DocumentoCondominioUpdateView.as_view(), name='documentos_condominio_update'),
    path('documentos/<int:pk>/excluir/', views.DocumentoCondominioDeleteView.as_view(), name='documentos_condominio_delete'),
    path('documentos/anexos/<int:pk>/excluir/', views.AnexoDocumentoCondominioDeleteView.as_view(), name='documentos_condominio_anexo_delete'),
    path('minha-conta/', views.MinhaContaView.as_view(), name='minha_conta'),
    path('sugestoes/', views.SugestaoReclamacaoView.as_view(), name='sugestao_reclamacao'),
    path('condominio/perfil/', views.CondominioPerfilView.as_view(), name='condominio_perfil'),
    path('gestao/', views.AdminDashboardView.as_view(), name='admin_dashboard'),
    path('gestao/condominios/', views.CondominioListView.as_view(), name='condominios_list'),
    path('gestao/condominios/novo/', views.CondominioCreateView.as_view(), name='condominios_create'),
    path('gestao/condominios/<int:pk>/editar/', views.CondominioAdminUpdateView.as_view(), name='condominios_update'),
    path('gestao/condominios/<int:pk>/gestor/', views.CondominioTrocaGestorView.as_view(), name='condominios_troca_gestor'),
    path('gestao/condominios/<int:pk>/boas-vindas/', views.CondominioBoasVindasView.as_view(), name='condominios_boas_vindas'),
    path('gestao/documentos/', views.DocumentoEmpresarialListView.as_view(), name='documentos_list'),
    path('gestao/documentos/novo/', views.DocumentoEmpresarialCreateView.as_view(), name='documento_create'),
    path('gestao/documentos/<int:pk>/editar/', views.DocumentoEmpresarialUpdateView.as_view(), name='documento_update'),
    path('gestao/documentos/<int:pk>/excluir/', views.DocumentoEmpresarialDeleteView.as_view(), name='documento_delete'),
    path('gestao/anexos/<int:pk>/excluir/', views.AnexoDocumentoDeleteView.as_view(), name='anexo_delete'),
    path('gestao/despesas/', views.DespesaEmpresarialListView.as_view(), name='despesas_empresariais_list'),
    path('gestao/despesas/nova/', views.DespesaEmpresarialCreateView.as_view(), name='despesas_empresariais_create'),
    path('gestao/despesas/<int:pk>/editar/', views.DespesaEmpresarialUpdateView.as_view(), name='despesas_empresariais_update'),
    path('gestao/despesas/<int:pk>/excluir/', views.DespesaEmpresarialDeleteView.as_view(), name='despesas_empresariais_delete'),
    path('gestao/despesas/graficos/', views.DespesaEmpresarialGraficosView.as_view(), name='despesas_empresariais_graficos'),
    path('gestao/despesas/graficos/dados/', views.DespesaEmpresarialDataView.as_view(), name='despesas_empresariais_data'),
    path('gestao/vps/', views.VpsDashboardView.as_view(), name='vps_dashboard'),
    path('gestao/vps/dados/', views.VpsDataView.as_view(), name='vps_data'),
    path('gestao/vps/<int:vm_id>/dados/', views.VpsDataView.as_view(), name='vps_detalhe'),
]
