# Supabase tables: whatsapp_sessions, whatsapp_messages, whatsapp_templates
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

whatsapp_sessions:
- id: uuid (primary key)
- church_id: uuid (unique, foreign key to igrejas.id)
- status: text - values: awaiting_qr, connected, disconnected
- qr_code: text (nullable)
- last_heartbeat: timestamp

whatsapp_messages:
- id: uuid (primary key)
- church_id: uuid
- to_number: text - digits only
- body: text
- status: text - values: pending, sent, failed
- sent_at: timestamp (nullable)
- error: text (nullable)
- created_at: timestamp

whatsapp_templates:
- id: uuid (primary key)
- church_id: uuid
- nome: text
- conteudo: text
"""
