# Supabase tables: eventos, evento_participantes, programacoes_evento
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

eventos:
- id: uuid (primary key)
- id_igreja: uuid (foreign key to igrejas.id)
- nome: text (not null)
- data_hora: timestamp (not null)
- local / descricao: text (nullable)
- tipo: text (default: 'Outro')
- status: text (default: 'Planejado')
- capacidade_maxima: integer (nullable, null means unlimited)
- inscricoes_abertas: boolean
- valor_inscricao: numeric (nullable)
- link_externo / imagem_capa: text (nullable)
- compartilhar_com_filhas: boolean (default: false)

evento_participantes:
- id: uuid (primary key)
- evento_id: uuid (foreign key to eventos.id)
- membro_id: uuid (foreign key to membros.id)
- id_igreja: uuid - church of the participant
- presente: boolean (default: false)
- unique constraint on (evento_id, membro_id)

programacoes_evento:
- id: uuid (primary key)
- evento_id: uuid (foreign key to eventos.id)
- horario: text
- atividade: text
- responsavel: text (nullable)
- ordem: integer
"""
