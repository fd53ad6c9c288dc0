# Supabase tables: notificacoes, notification_templates
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

notificacoes:
- id: uuid (primary key)
- id_igreja: uuid (foreign key to igrejas.id)
- user_id: uuid (nullable) - recipient; null means a broadcast to the whole church
- membro_id: uuid (nullable) - member the notification is about
- tipo: text - e.g. GERAL, BILLING, PAYMENT_UPDATE
- titulo: text
- descricao: text
- link: text (nullable)
- lida: boolean (default: false)
- created_at: timestamp

notification_templates:
- id: uuid (primary key)
- id_igreja: uuid (nullable) - null for system templates
- tipo: text
- titulo: text
- descricao: text
"""
