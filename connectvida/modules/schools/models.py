# Supabase tables: escolas, escola_inscricoes, escola_aulas, escola_progresso_aulas
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

escolas:
- id: uuid (primary key)
- id_igreja: uuid (foreign key to igrejas.id, not null)
- nome: text (not null)
- descricao: text (nullable)
- professor_id: uuid (foreign key to membros.id, nullable)
- status: text - values: aberta, fechada, concluida
- compartilhar_com_filhas: boolean (default: false)
- data_inicio: date (nullable)
- data_fim: date (nullable)
- created_at / updated_at: timestamp

escola_inscricoes:
- id: uuid (primary key)
- escola_id: uuid (foreign key to escolas.id)
- membro_id: uuid (foreign key to membros.id)
- id_igreja: uuid - church of the member
- status: text (default: 'inscrito')
- data_inscricao: timestamp
- unique constraint on (escola_id, membro_id)

escola_aulas:
- id: uuid (primary key)
- escola_id: uuid (foreign key to escolas.id)
- titulo: text
- descricao: text (nullable)
- tipo_aula: text - values: texto, video, quiz, presencial
- conteudo_texto / youtube_url: text (nullable)
- ordem: integer

escola_progresso_aulas:
- id: uuid (primary key)
- aula_id: uuid (foreign key to escola_aulas.id)
- membro_id: uuid (foreign key to membros.id)
- id_igreja: uuid
- completed_at: timestamp
"""
