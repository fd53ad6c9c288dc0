# Supabase tables: cursos, cursos_modulos, cursos_aulas, cursos_inscricoes
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

cursos:
- id: uuid (primary key)
- id_igreja: uuid (foreign key to igrejas.id, not null)
- nome: text (not null)
- descricao: text (nullable)
- tipo: text - values: Presencial, Online, Híbrido
- categoria: text - values: Discipulado, Liderança, Teologia, Ministério, Evangelismo
- nivel: text - values: Básico, Intermediário, Avançado
- professor_id: uuid (foreign key to membros.id, nullable)
- duracao_horas: integer (default: 0)
- status: text - values: Rascunho, Ativo, Pausado, Finalizado
- data_inicio / data_fim: date (nullable)
- certificado_disponivel: boolean (default: true)
- nota_minima_aprovacao: integer (default: 70)
- valor: numeric (default: 0)

cursos_modulos:
- id: uuid (primary key)
- id_curso: uuid (foreign key to cursos.id)
- id_igreja: uuid
- titulo: text
- descricao: text (nullable)
- ordem: integer

cursos_aulas:
- id: uuid (primary key)
- id_modulo: uuid (foreign key to cursos_modulos.id)
- id_igreja: uuid
- titulo: text
- descricao: text (nullable)
- tipo: text - values: Video, Texto, PDF, Quiz
- conteudo: text (nullable) - video URL or text body
- duracao_minutos: integer (nullable)
- obrigatoria: boolean (default: true)
- ordem: integer

cursos_inscricoes:
- id: uuid (primary key)
- id_curso: uuid (foreign key to cursos.id)
- id_membro: uuid (foreign key to membros.id)
- id_igreja: uuid
- data_inscricao: timestamp
- status: text (default: 'Ativo')
- progresso: integer (0-100)
- unique constraint on (id_curso, id_membro)
"""
