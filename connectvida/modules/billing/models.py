# Supabase tables: planos_assinatura, plan_change_requests, eventos_aplicacao
# Billing columns live on igrejas
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

planos_assinatura:
- id: uuid (primary key)
- nome: text (not null)
- preco_mensal: numeric
- limite_membros: integer
- limite_quizes_por_etapa: integer
- limite_armazenamento_mb: integer
- descricao: text (nullable)

plan_change_requests:
- id: uuid (primary key)
- church_id: uuid (foreign key to igrejas.id)
- current_plan_id / requested_plan_id: uuid (foreign key to planos_assinatura.id)
- requested_by: uuid (foreign key to auth.users.id)
- status: text - values: pending, approved, rejected
- notes: text (nullable)
- reviewed_by: uuid (nullable)
- reviewed_at: timestamp (nullable)
- created_at: timestamp

eventos_aplicacao (audit log):
- id: uuid (primary key)
- user_id: uuid (nullable)
- church_id: uuid (nullable)
- event_name: text
- event_details: jsonb

igrejas billing columns:
- plano_id, limite_membros, valor_mensal_assinatura
- status: text - values: pending, active, inactive, ...
- ultimo_pagamento_status: text - values: Pago, Pendente, Atrasado, Cancelado, Confirmado
- data_proximo_pagamento: date
- historico_pagamentos: jsonb array of {id, data, valor, status, metodo, referencia, registrado_por}
- link_pagamento_assinatura / subscription_id_ext / asaas_customer_id: text
"""
