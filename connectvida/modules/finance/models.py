# Supabase tables: transacoes_financeiras, orcamentos, metas_financeiras
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

transacoes_financeiras:
- id: uuid (primary key)
- id_igreja: uuid (foreign key to igrejas.id)
- tipo: text - values: Entrada, Saída
- categoria / subcategoria: text
- valor: numeric (> 0)
- data_transacao: date
- descricao / metodo_pagamento / responsavel: text
- status: text - values: Pendente, Confirmado, Cancelado
- membro_id: uuid (nullable, foreign key to membros.id)
- membro_nome: text (nullable)
- recibo_emitido: boolean
- numero_documento / centro_custo: text (nullable)
- aprovado_por: uuid (nullable)
- data_aprovacao: timestamp (nullable)

orcamentos:
- id: uuid (primary key)
- id_igreja: uuid
- categoria: text
- valor_orcado / valor_gasto: numeric
- mes_ano: text (YYYY-MM)
- status: text - values: Ativo, Excedido, Finalizado

metas_financeiras:
- id: uuid (primary key)
- id_igreja: uuid
- nome: text
- valor_meta / valor_atual: numeric
- data_inicio / data_limite: date
- status: text
"""
