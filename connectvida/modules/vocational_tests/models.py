# Supabase table: testes_vocacionais
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

testes_vocacionais:
- id: uuid (primary key)
- membro_id: uuid (foreign key to membros.id)
- id_igreja: uuid (foreign key to igrejas.id)
- data_teste: date
- q1 .. q40: integer - answer per question, 0 (unanswered) to 5
- soma_midia, soma_louvor, soma_diaconato, soma_integra, soma_ensino,
  soma_kids, soma_organizacao, soma_acao_social: integer - 0 to 25
- ministerio_recomendado: text - display name of the top ministry
- is_ultimo: boolean - only the member's latest test is true
- created_at: timestamp
"""
