from supabase import Client
from connectvida.core.dependencies import ChurchContext
from fastapi import HTTPException
from datetime import date
from typing import Any, Dict, List, Mapping, Optional
import logging

logger = logging.getLogger(__name__)

MAX_ANSWER = 5
QUESTIONS_PER_MINISTRY = 5
MAX_SCORE = MAX_ANSWER * QUESTIONS_PER_MINISTRY

# key -> (score column, display name, description); order breaks ties
MINISTRIES = {
    "midia": ("soma_midia", "Mídia e Tecnologia",
              "Perfil para trabalhar com equipamentos, tecnologia e produção de conteúdo."),
    "louvor": ("soma_louvor", "Louvor e Adoração",
               "Dom musical e capacidade de conduzir outros na adoração."),
    "diaconato": ("soma_diaconato", "Diaconato",
                  "Coração servo para identificar e suprir necessidades práticas."),
    "integracao": ("soma_integra", "Integração",
                   "Dom da hospitalidade para acolher novos membros."),
    "ensino": ("soma_ensino", "Ensino e Discipulado",
               "Dom do ensino para transmitir a Palavra com clareza."),
    "kids": ("soma_kids", "Kids",
             "Coração voltado para impactar a próxima geração."),
    "organizacao": ("soma_organizacao", "Organização e Administração",
                    "Dom administrativo para planejar e coordenar projetos."),
    "acao_social": ("soma_acao_social", "Ação Social",
                    "Sensibilidade para levar esperança a comunidades necessitadas."),
}

_STATEMENTS = {
    "midia": [
        "Tenho facilidade com equipamentos eletrônicos e tecnologia",
        "Gosto de trabalhar com câmeras, som e iluminação",
        "Me sinto confortável operando sistemas durante os cultos",
        "Tenho interesse em produzir conteúdo digital para a igreja",
        "Consigo solucionar problemas técnicos com facilidade",
    ],
    "louvor": [
        "Tenho dom musical (canto ou instrumento)",
        "Me sinto à vontade adorando publicamente",
        "Consigo conduzir outros em momentos de adoração",
        "Tenho facilidade para aprender música rapidamente",
        "A música é uma forma natural de expressar minha fé",
    ],
    "diaconato": [
        "Gosto de servir e ajudar pessoas em necessidade",
        "Tenho facilidade para identificar quem precisa de ajuda",
        "Me disponho a tarefas práticas de apoio na igreja",
        "Consigo organizar e coordenar ações de ajuda",
        "Sinto alegria em suprir necessidades dos outros",
    ],
    "integracao": [
        "Gosto de receber e conhecer pessoas novas",
        "Tenho facilidade para fazer novos membros se sentirem bem-vindos",
        "Consigo identificar visitantes e me aproximar deles",
        "Me sinto confortável apresentando a igreja para outros",
        "Tenho dom para criar ambiente acolhedor",
    ],
    "ensino": [
        "Gosto de estudar e ensinar a Palavra de Deus",
        "Tenho facilidade para explicar conceitos bíblicos",
        "Consigo adaptar o ensino para diferentes idades",
        "Me sinto chamado a discipular outras pessoas",
        "Tenho paciência para acompanhar o crescimento espiritual dos outros",
    ],
    "kids": [
        "Gosto de trabalhar com crianças",
        "Tenho paciência e criatividade para ensinar crianças",
        "Consigo manter a atenção das crianças durante as atividades",
        "Me sinto confortável cuidando de grupos de crianças",
        "Tenho facilidade para criar atividades lúdicas e educativas",
    ],
    "organizacao": [
        "Gosto de organizar eventos e atividades",
        "Tenho facilidade para planejar e coordenar projetos",
        "Consigo gerenciar recursos e logística",
        "Me sinto bem liderando equipes de trabalho",
        "Tenho atenção aos detalhes e gosto de ver tudo funcionando bem",
    ],
    "acao_social": [
        "Tenho coração para ajudar pessoas em situação de vulnerabilidade",
        "Gosto de participar de projetos sociais e comunitários",
        "Tenho facilidade para mobilizar recursos para causas sociais",
        "Me sinto chamado a levar esperança para comunidades carentes",
        "Consigo ver as necessidades sociais ao meu redor",
    ],
}

# Numbered 1..40, five consecutive statements per ministry
QUESTIONS: List[Dict[str, Any]] = [
    {"id": number, "texto": text, "ministerio": key}
    for number, (key, text) in enumerate(
        ((key, text) for key in MINISTRIES for text in _STATEMENTS[key]), start=1
    )
]


def score_answers(answers: Mapping[int, int]) -> Dict[str, int]:
    """Sum of the answers per ministry key. Unanswered questions count as 0."""
    unknown = [q for q in answers if not 1 <= q <= len(QUESTIONS)]
    if unknown:
        raise HTTPException(status_code=400, detail=f"Pergunta inválida: {unknown[0]}")
    invalid = [v for v in answers.values() if not 0 <= v <= MAX_ANSWER]
    if invalid:
        raise HTTPException(status_code=400, detail=f"Resposta deve estar entre 0 e {MAX_ANSWER}")
    scores = {key: 0 for key in MINISTRIES}
    for question in QUESTIONS:
        scores[question["ministerio"]] += answers.get(question["id"], 0)
    return scores


def rank_ministries(scores: Mapping[str, int]) -> List[Dict[str, Any]]:
    """Ministries by score, highest first; ties keep the declared ministry order."""
    results = [
        {
            "ministerio": key,
            "nome": name,
            "descricao": description,
            "pontuacao": scores.get(key, 0),
            "percentual": round(scores.get(key, 0) / MAX_SCORE * 100),
        }
        for key, (_, name, description) in MINISTRIES.items()
    ]
    return sorted(results, key=lambda r: r["pontuacao"], reverse=True)


def scores_from_row(row: Mapping[str, Any]) -> Dict[str, int]:
    return {key: row.get(column) or 0 for key, (column, _, _) in MINISTRIES.items()}


class VocationalTestService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _with_results(self, row: Dict[str, Any]) -> Dict[str, Any]:
        return {**row, "resultados": rank_ministries(scores_from_row(row))}

    def submit(self, context: ChurchContext, answers: Mapping[int, int]) -> Dict[str, Any]:
        """Store a new test as the member's latest and return it with the ranking."""
        scores = score_answers(answers)
        ranking = rank_ministries(scores)
        payload: Dict[str, Any] = {
            "membro_id": context.user_id,
            "id_igreja": context.church_id,
            "data_teste": date.today().isoformat(),
            "ministerio_recomendado": ranking[0]["nome"],
            "is_ultimo": True,
        }
        payload.update({column: scores[key] for key, (column, _, _) in MINISTRIES.items()})
        payload.update({f"q{q['id']}": answers.get(q["id"], 0) for q in QUESTIONS})
        try:
            self.supabase.table("testes_vocacionais")\
                .update({"is_ultimo": False})\
                .eq("membro_id", context.user_id)\
                .execute()
            result = self.supabase.table("testes_vocacionais").insert(payload).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to save vocational test")
            logger.info(f"Vocational test saved for member {context.user_id}: {ranking[0]['ministerio']}")
            return self._with_results(result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_latest(self, member_id: str) -> Optional[Dict[str, Any]]:
        try:
            rows = self.supabase.table("testes_vocacionais")\
                .select("*")\
                .eq("membro_id", member_id)\
                .eq("is_ultimo", True)\
                .order("created_at", desc=True)\
                .limit(1)\
                .execute()
            return self._with_results(rows.data[0]) if rows.data else None
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def history(self, member_id: str) -> List[Dict[str, Any]]:
        try:
            rows = self.supabase.table("testes_vocacionais")\
                .select("id, data_teste, ministerio_recomendado, is_ultimo, created_at")\
                .eq("membro_id", member_id)\
                .order("created_at", desc=True)\
                .execute()
            return rows.data or []
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_church_results(self, church_id: str) -> List[Dict[str, Any]]:
        """Latest test of every member of the church, with the member's name."""
        try:
            rows = self.supabase.table("testes_vocacionais")\
                .select("membro_id, data_teste, ministerio_recomendado")\
                .eq("id_igreja", church_id)\
                .eq("is_ultimo", True)\
                .execute().data or []
            member_ids = list({r["membro_id"] for r in rows})
            names: Dict[str, str] = {}
            if member_ids:
                members = self.supabase.table("membros").select("id, nome_completo").in_("id", member_ids).execute()
                names = {m["id"]: m["nome_completo"] for m in (members.data or [])}
            result = [{**r, "membro_nome": names.get(r["membro_id"])} for r in rows]
            return sorted(result, key=lambda r: r.get("membro_nome") or "")
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
