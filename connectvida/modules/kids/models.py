# Supabase tables: criancas, kids_checkin
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

criancas:
- id: uuid (primary key)
- id_igreja: uuid (foreign key to igrejas.id)
- nome_crianca: text (not null)
- data_nascimento: date (not null)
- responsavel_id: uuid (foreign key to membros.id)
- informacoes_especiais / alergias / medicamentos: text (nullable)
- autorizacao_fotos: boolean
- contato_emergencia: jsonb (nullable)
- status_checkin: text - values: Presente, Ausente
- ultimo_checkin: timestamp (nullable)
- codigo_seguranca: text (nullable) - code of the open check-in

kids_checkin:
- id: uuid (primary key)
- id_igreja: uuid
- crianca_id: uuid (foreign key to criancas.id)
- data_checkin: timestamp
- data_checkout: timestamp (nullable, null while the kid is present)
- responsavel_checkin_id / responsavel_checkout_id: uuid (foreign key to membros.id)
- codigo_seguranca: text (6 uppercase alphanumeric characters)
- observacoes: text (nullable)
"""
