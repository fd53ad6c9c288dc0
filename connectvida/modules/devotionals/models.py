# Supabase tables: devocionais, devocional_curtidas, devocional_comentarios
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

devocionais:
- id: uuid (primary key)
- id_igreja: uuid (foreign key to igrejas.id)
- titulo / conteudo: text (not null)
- versiculo_referencia / versiculo_texto: text
- categoria: text - values: Diário, Semanal, Especial, Temático
- tags: text[]
- autor_id: uuid (foreign key to membros.id)
- data_publicacao: timestamp
- status: text - values: Rascunho, Publicado, Arquivado, Pendente
- imagem_capa: text (nullable)
- tempo_leitura: integer - minutes, one per 200 characters
- featured: boolean
- visualizacoes: integer
- compartilhar_com_filhas: boolean (default: false)

devocional_curtidas:
- id: uuid (primary key)
- devocional_id: uuid (foreign key to devocionais.id)
- membro_id: uuid (foreign key to membros.id)
- id_igreja: uuid

devocional_comentarios:
- id: uuid (primary key)
- devocional_id: uuid (foreign key to devocionais.id)
- autor_id: uuid (foreign key to membros.id)
- id_igreja: uuid
- conteudo: text
- aprovado: boolean
- created_at: timestamp
"""
