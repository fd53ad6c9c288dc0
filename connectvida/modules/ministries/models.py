# Supabase tables: ministerios, ministerio_funcoes, ministerio_voluntarios, escalas_servico, escala_voluntarios, demandas_ministerios
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

ministerios:
- id: uuid (primary key)
- id_igreja: uuid (foreign key to igrejas.id)
- nome: text (not null)
- descricao: text (nullable)
- lider_id: uuid (foreign key to membros.id, nullable)
- created_at: timestamp

ministerio_funcoes:
- id: uuid (primary key)
- ministerio_id: uuid (foreign key to ministerios.id)
- id_igreja: uuid
- nome: text (not null) - e.g. Fotógrafo, Projeção, Transmissão
- descricao: text (nullable)

ministerio_voluntarios:
- id: uuid (primary key)
- ministerio_id: uuid (foreign key to ministerios.id)
- membro_id: uuid (foreign key to membros.id)
- id_igreja: uuid
- papel: text - values: voluntario, lider
- unique constraint on (ministerio_id, membro_id)

escalas_servico:
- id: uuid (primary key)
- id_igreja: uuid
- ministerio_id: uuid (foreign key to ministerios.id)
- data_servico: timestamp
- observacoes: text (nullable)

escala_voluntarios:
- id: uuid (primary key)
- escala_id: uuid (foreign key to escalas_servico.id)
- membro_id: uuid (foreign key to membros.id)
- id_igreja: uuid
- status_confirmacao: text - values: Pendente, Confirmado, Recusado

demandas_ministerios:
- id: uuid (primary key)
- ministerio_id: uuid (foreign key to ministerios.id)
- id_igreja: uuid
- culto_id: uuid (nullable)
- responsavel_id: uuid (foreign key to membros.id, nullable)
- titulo: text
- descricao: text (nullable)
- prazo: date (nullable)
- status: text - values: pendente, em_andamento, concluido
- prioridade: text (nullable)
"""
