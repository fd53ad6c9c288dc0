# Supabase tables: trilhas_crescimento, etapas_trilha, passos_etapa, quiz_perguntas, progresso_membros
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

trilhas_crescimento:
- id: uuid (primary key)
- id_igreja: uuid (foreign key to igrejas.id, not null)
- titulo: text (not null)
- descricao: text (nullable)
- is_ativa: boolean (default: true) - one active trilha per church
- compartilhar_com_filhas: boolean (default: false)
- created_at: timestamp

etapas_trilha:
- id: uuid (primary key)
- id_trilha: uuid (foreign key to trilhas_crescimento.id)
- id_igreja: uuid
- ordem: integer
- titulo: text
- descricao: text (nullable)
- cor: text (default: '#e5e7eb')

passos_etapa:
- id: uuid (primary key)
- id_etapa: uuid (foreign key to etapas_trilha.id)
- id_igreja: uuid
- ordem: integer
- titulo: text
- tipo_passo: text - values: video, quiz, leitura, acao, link_externo, conclusao_escola
- conteudo: text (nullable)
- nota_de_corte_quiz: integer (nullable, default cutoff 70)
- escola_pre_requisito_id: uuid (foreign key to escolas.id, nullable)

quiz_perguntas:
- id: uuid (primary key)
- passo_id: uuid (foreign key to passos_etapa.id)
- ordem: integer
- pergunta_texto: text
- opcoes: jsonb (list of strings)
- resposta_correta: integer (index into opcoes)
- pontuacao: numeric

progresso_membros:
- id: uuid (primary key)
- id_membro: uuid (foreign key to membros.id)
- id_passo: uuid (foreign key to passos_etapa.id)
- id_igreja: uuid
- status: text - values: pendente, concluido
- data_conclusao: timestamp (nullable)
- respostas_quiz: jsonb (nullable)
- pontuacao_quiz: numeric (nullable)
- tentativas_quiz: integer (default: 0)
- quiz_bloqueado: boolean (default: false)
- unique constraint on (id_membro, id_passo)
"""
