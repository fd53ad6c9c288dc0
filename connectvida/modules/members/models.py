# Supabase tables: membros, informacoes_pessoais, testes_vocacionais
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

membros:
- id: uuid (primary key, same id as auth.users.id)
- id_igreja: uuid (foreign key to igrejas.id)
- nome_completo: text
- email: text
- funcao: text - one of the roles in config/permissions_config.py
- status: text - values: ativo, pendente, inativo
- perfil_completo: boolean (default: false)
- extra_permissoes: text[] (permission ids granted on top of the role preset)
- ministerio_recomendado: text (nullable) - from the last vocational test
- ultimo_teste_data: timestamp (nullable)
- created_at: timestamp (default: now())

informacoes_pessoais:
- id: uuid (primary key)
- membro_id: uuid (foreign key to membros.id, unique)
- id_igreja: uuid
- telefone, endereco, estado_civil, profissao: text (nullable)
- data_nascimento, data_casamento, data_batismo, data_conversao: date (nullable)
- conjuge_id: uuid (foreign key to membros.id, nullable)
- batizado, pais_cristaos, participa_ministerio: boolean (nullable)
- tempo_igreja, ministerio_anterior, experiencia_anterior: text (nullable)
- dias_disponiveis, horarios_disponiveis: text[] (nullable)

testes_vocacionais:
- id: uuid (primary key)
- membro_id: uuid (foreign key to membros.id)
- id_igreja: uuid
- ministerio_recomendado: text
- data_teste: timestamp
- is_ultimo: boolean - only the latest test per member is true
"""
