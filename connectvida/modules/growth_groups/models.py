# Supabase tables: gc_groups, gc_group_leaders, gc_group_members
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

gc_groups:
- id: uuid (primary key)
- id_igreja: uuid (foreign key to igrejas.id, not null)
- nome: text (not null)
- descricao: text (nullable)
- meeting_day: text (nullable) - Domingo .. Sábado
- meeting_time: text (nullable)
- meeting_location: text (nullable)
- contact_phone: text (nullable)
- created_at / updated_at: timestamp

gc_group_leaders / gc_group_members:
- id: uuid (primary key)
- id_igreja: uuid
- group_id: uuid (foreign key to gc_groups.id)
- membro_id: uuid (foreign key to membros.id)
- unique constraint on (group_id, membro_id)
"""
