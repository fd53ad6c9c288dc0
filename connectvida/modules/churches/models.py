# Supabase tables: igrejas
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

igrejas:
- id: uuid (primary key)
- nome: text (not null)
- cnpj: text (unique, digits only)
- endereco: text (nullable)
- telefone_contato: text (nullable, digits only)
- email: text (nullable)
- nome_responsavel: text (nullable)
- plano_id: uuid (foreign key to planos_assinatura.id, nullable)
- status: text - values: active, inactive, pending, trial
- valor_mensal_assinatura: numeric
- limite_membros: integer
- ultimo_pagamento_status: text - values: Pendente, Confirmado, Pago, Atrasado, Cancelado
- data_proximo_pagamento: date (nullable)
- historico_pagamentos: jsonb (list of payment records, newest first)
- link_pagamento_assinatura: text (nullable)
- subscription_id_ext: text (nullable) - provider subscription/checkout id
- asaas_customer_id: text (nullable)
- parent_church_id: uuid (foreign key to igrejas.id, nullable) - mother church
- panel_password: text (nullable) - initial password of the child church pastor
- compartilha_escolas_da_mae: boolean (nullable, null = receive shared content)
- compartilha_eventos_da_mae: boolean (nullable)
- compartilha_jornada_da_mae: boolean (nullable)
- compartilha_devocionais_da_mae: boolean (nullable)
- created_at: timestamp (default: now())

Hierarchy has two levels: a child church never has children of its own.
"""
