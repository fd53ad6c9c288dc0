from supabase import Client
from connectvida.modules.journeys.schemas import (
    TrilhaCreate, TrilhaUpdate, EtapaCreate, EtapaUpdate, PassoCreate, PassoUpdate,
    QuizQuestion, StepCompletion
)
from connectvida.modules.schools.service import completed_schools
from connectvida.core.sharing import visible_records, get_owned_record
from connectvida.database.supabase_client import maybe_row
from fastapi import HTTPException
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple
import logging

logger = logging.getLogger(__name__)

DEFAULT_QUIZ_CUTOFF = 70
MAX_QUIZ_ATTEMPTS = 3

STAGE_LOCK_REASON = "Conclua a etapa anterior para liberar esta."
SCHOOL_LOCK_REASON = "Você precisa concluir a escola associada para liberar este passo."


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def is_active(trilha: dict) -> bool:
    """Trilhas without an explicit is_ativa flag count as active."""
    return trilha.get("is_ativa") is not False


def get_active_trilha(supabase: Client, church_id: str) -> Optional[dict]:
    """The church's own active trilha, else the mother's shared active trilha."""
    rows = visible_records(supabase, "trilhas_crescimento", church_id, order_by="created_at")
    active = [r for r in rows if is_active(r)]
    # Own trilhas win over shared ones (stable sort keeps creation order)
    active.sort(key=lambda r: r.get("compartilhado_da_mae", False))
    return active[0] if active else None


def load_structure(supabase: Client, trilha_id: str) -> List[dict]:
    """Etapas of a trilha sorted by ordem, each with its passos sorted by ordem."""
    etapas = supabase.table("etapas_trilha").select("*").eq("id_trilha", trilha_id).execute().data or []
    etapa_ids = [e["id"] for e in etapas]
    passos: List[dict] = []
    if etapa_ids:
        passos = supabase.table("passos_etapa").select("*").in_("id_etapa", etapa_ids).execute().data or []
    by_etapa: Dict[str, List[dict]] = {}
    for passo in passos:
        by_etapa.setdefault(passo["id_etapa"], []).append(passo)
    ordered = sorted(etapas, key=lambda e: e.get("ordem") or 0)
    return [
        {**etapa, "passos": sorted(by_etapa.get(etapa["id"], []), key=lambda p: p.get("ordem") or 0)}
        for etapa in ordered
    ]


def journey_structure(supabase: Client, church_id: str) -> Tuple[Optional[dict], List[dict]]:
    trilha = get_active_trilha(supabase, church_id)
    if not trilha:
        return None, []
    return trilha, load_structure(supabase, trilha["id"])


def score_quiz(questions: List[dict], answers: List[Optional[int]]) -> float:
    """Percentage of the question points earned. Questions without points weigh 1."""
    total = 0.0
    earned = 0.0
    for index, question in enumerate(questions):
        points = question.get("pontuacao") or 1
        total += points
        if index < len(answers) and answers[index] is not None and answers[index] == question.get("resposta_correta"):
            earned += points
    if total == 0:
        return 0.0
    return round(earned / total * 100, 2)


class JourneyService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    # Member view

    def _progress_for(self, member_id: str, passo_ids: List[str]) -> Dict[str, dict]:
        if not passo_ids:
            return {}
        result = self.supabase.table("progresso_membros")\
            .select("*")\
            .eq("id_membro", member_id)\
            .in_("id_passo", passo_ids)\
            .execute()
        return {p["id_passo"]: p for p in (result.data or [])}

    def get_my_journey(self, church_id: str, member_id: str) -> Dict[str, Any]:
        """Journey with completion, locks and stats. Completed school prerequisites auto-complete their steps."""
        try:
            trilha, etapas = journey_structure(self.supabase, church_id)
            all_passos = [p for e in etapas for p in e["passos"]]
            if not trilha or not all_passos:
                return {
                    "trilha": None, "etapas": [],
                    "overallProgress": 0, "completedSteps": 0, "totalSteps": 0, "currentLevel": 0,
                }

            passo_ids = [p["id"] for p in all_passos]
            progress = self._progress_for(member_id, passo_ids)

            school_ids = [p["escola_pre_requisito_id"] for p in all_passos if p.get("escola_pre_requisito_id")]
            done_schools = completed_schools(self.supabase, member_id, school_ids)
            school_names: Dict[str, str] = {}
            if school_ids:
                schools = self.supabase.table("escolas").select("id, nome").in_("id", list(set(school_ids))).execute()
                school_names = {s["id"]: s["nome"] for s in (schools.data or [])}

            to_complete = [
                p for p in all_passos
                if p.get("tipo_passo") == "conclusao_escola"
                and p.get("escola_pre_requisito_id") in done_schools
                and (progress.get(p["id"]) or {}).get("status") != "concluido"
            ]
            if to_complete:
                self.supabase.table("progresso_membros").upsert([
                    {
                        "id_membro": member_id,
                        "id_passo": p["id"],
                        "id_igreja": church_id,
                        "status": "concluido",
                        "data_conclusao": _now(),
                    }
                    for p in to_complete
                ], on_conflict="id_membro,id_passo").execute()
                progress = self._progress_for(member_id, passo_ids)

            previous_completed = True
            display = []
            for etapa in etapas:
                passos = []
                for passo in etapa["passos"]:
                    row = progress.get(passo["id"])
                    school_id = passo.get("escola_pre_requisito_id")
                    school_locked = (
                        passo.get("tipo_passo") == "conclusao_escola"
                        and bool(school_id)
                        and school_id not in done_schools
                    )
                    passos.append({
                        **passo,
                        "escola_pre_requisito_nome": school_names.get(school_id) if school_id else None,
                        "completed": bool(row and row.get("status") == "concluido"),
                        "completedDate": row.get("data_conclusao") if row else None,
                        "progress": row,
                        "isLocked": school_locked,
                        "lockReason": SCHOOL_LOCK_REASON if school_locked else None,
                    })
                all_done = bool(passos) and all(p["completed"] for p in passos)
                display.append({
                    **etapa,
                    "passos": passos,
                    "allPassosCompleted": all_done,
                    "isLocked": not previous_completed,
                    "lockReason": None if previous_completed else STAGE_LOCK_REASON,
                })
                previous_completed = all_done

            flat = [p for e in display for p in e["passos"]]
            completed = sum(1 for p in flat if p["completed"])
            return {
                "trilha": trilha,
                "etapas": display,
                "overallProgress": completed / len(flat) * 100 if flat else 0,
                "completedSteps": completed,
                "totalSteps": len(flat),
                "currentLevel": sum(1 for e in display if e["allPassosCompleted"]),
            }
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error loading journey for member {member_id}: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def complete_step(self, church_id: str, member_id: str, passo_id: str,
                      completion: Optional[StepCompletion]) -> Dict[str, Any]:
        completion = completion or StepCompletion()
        journey = self.get_my_journey(church_id, member_id)
        located = None
        for etapa in journey["etapas"]:
            for passo in etapa["passos"]:
                if passo["id"] == passo_id:
                    located = (etapa, passo)
        if not located:
            raise HTTPException(status_code=404, detail="Passo não encontrado")
        etapa, passo = located
        if etapa["isLocked"] or passo["isLocked"]:
            raise HTTPException(status_code=423, detail=etapa["lockReason"] or passo["lockReason"])

        existing = passo["progress"]
        if existing and existing.get("status") == "concluido":
            return {
                "passed": True,
                "score": existing.get("pontuacao_quiz"),
                "attempts": existing.get("tentativas_quiz") or 0,
                "blocked": False,
            }
        if existing and existing.get("quiz_bloqueado"):
            raise HTTPException(
                status_code=423,
                detail="Quiz bloqueado após 3 tentativas. Peça a um líder para liberar seu acesso."
            )

        try:
            attempts = (existing or {}).get("tentativas_quiz") or 0
            blocked = False
            score: Optional[float] = None
            if passo.get("tipo_passo") == "quiz":
                questions = self.supabase.table("quiz_perguntas")\
                    .select("*")\
                    .eq("passo_id", passo_id)\
                    .order("ordem")\
                    .execute().data or []
                if questions:
                    if completion.answers is None:
                        raise HTTPException(status_code=400, detail="Respostas do quiz são obrigatórias")
                    score = score_quiz(questions, completion.answers)
                else:
                    score = completion.score or 0
                cutoff = passo.get("nota_de_corte_quiz") or DEFAULT_QUIZ_CUTOFF
                attempts += 1
                passed = score >= cutoff
                if not passed and attempts >= MAX_QUIZ_ATTEMPTS:
                    blocked = True
            else:
                passed = True

            progress_data = {
                "status": "concluido" if passed else "pendente",
                "data_conclusao": _now() if passed else None,
                "respostas_quiz": completion.answers if completion.answers is not None else None,
                "pontuacao_quiz": score,
                "tentativas_quiz": attempts,
                "quiz_bloqueado": blocked,
            }
            if existing:
                self.supabase.table("progresso_membros").update(progress_data).eq("id", existing["id"]).execute()
            else:
                self.supabase.table("progresso_membros").insert({
                    "id_membro": member_id,
                    "id_passo": passo_id,
                    "id_igreja": church_id,
                    **progress_data,
                }).execute()
            if blocked:
                logger.info(f"Quiz {passo_id} blocked for member {member_id} after {attempts} attempts")
            return {"passed": passed, "score": score, "attempts": attempts, "blocked": blocked}
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def unlock_quiz(self, church_id: str, member_id: str, passo_id: str) -> dict:
        """Clear a quiz block and reset attempts (leaders)."""
        progress = maybe_row(
            self.supabase.table("progresso_membros")
            .select("*")
            .eq("id_membro", member_id)
            .eq("id_passo", passo_id)
            .maybe_single()
            .execute()
        )
        if not progress or progress.get("id_igreja") != church_id:
            raise HTTPException(status_code=404, detail="Progress not found")
        try:
            result = self.supabase.table("progresso_membros")\
                .update({"quiz_bloqueado": False, "tentativas_quiz": 0})\
                .eq("id", progress["id"])\
                .execute()
            return result.data[0]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    # Administration

    def get_admin_journey(self, church_id: str) -> Optional[dict]:
        """The church's own active trilha with etapas, passos and quiz questions."""
        try:
            result = self.supabase.table("trilhas_crescimento")\
                .select("*")\
                .eq("id_igreja", church_id)\
                .order("created_at")\
                .execute()
            active = [r for r in result.data or [] if is_active(r)]
            if not active:
                return None
            trilha = active[0]
            etapas = load_structure(self.supabase, trilha["id"])
            passo_ids = [p["id"] for e in etapas for p in e["passos"]]
            questions: Dict[str, List[dict]] = {}
            if passo_ids:
                rows = self.supabase.table("quiz_perguntas").select("*").in_("passo_id", passo_ids).execute()
                for q in rows.data or []:
                    questions.setdefault(q["passo_id"], []).append(q)
            for etapa in etapas:
                etapa["passos"] = [
                    {**p, "quiz_perguntas": sorted(questions.get(p["id"], []), key=lambda q: q.get("ordem") or 0)}
                    for p in etapa["passos"]
                ]
            return {**trilha, "etapas": etapas}
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def create_trilha(self, church_id: str, data: TrilhaCreate) -> dict:
        """New trilhas become the active one."""
        try:
            self.supabase.table("trilhas_crescimento")\
                .update({"is_ativa": False})\
                .eq("id_igreja", church_id)\
                .execute()
            result = self.supabase.table("trilhas_crescimento").insert({
                "id_igreja": church_id,
                "titulo": data.titulo.strip(),
                "descricao": data.descricao.strip() if data.descricao else None,
                "compartilhar_com_filhas": data.compartilhar_com_filhas,
                "is_ativa": True,
            }).execute()
            return result.data[0]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_trilha(self, church_id: str, trilha_id: str, data: TrilhaUpdate) -> dict:
        get_owned_record(self.supabase, "trilhas_crescimento", trilha_id, church_id, "Trilha")
        update_data = data.model_dump(exclude_unset=True)
        if not update_data:
            raise HTTPException(status_code=400, detail="No fields to update")
        try:
            result = self.supabase.table("trilhas_crescimento").update(update_data).eq("id", trilha_id).execute()
            return result.data[0]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def _delete_passos(self, passo_ids: List[str]) -> None:
        if not passo_ids:
            return
        self.supabase.table("progresso_membros").delete().in_("id_passo", passo_ids).execute()
        self.supabase.table("quiz_perguntas").delete().in_("passo_id", passo_ids).execute()
        self.supabase.table("passos_etapa").delete().in_("id", passo_ids).execute()

    def delete_trilha(self, church_id: str, trilha_id: str) -> None:
        get_owned_record(self.supabase, "trilhas_crescimento", trilha_id, church_id, "Trilha")
        try:
            etapas = self.supabase.table("etapas_trilha").select("id").eq("id_trilha", trilha_id).execute()
            etapa_ids = [e["id"] for e in (etapas.data or [])]
            if etapa_ids:
                passos = self.supabase.table("passos_etapa").select("id").in_("id_etapa", etapa_ids).execute()
                self._delete_passos([p["id"] for p in (passos.data or [])])
                self.supabase.table("etapas_trilha").delete().in_("id", etapa_ids).execute()
            self.supabase.table("trilhas_crescimento").delete().eq("id", trilha_id).execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def create_etapa(self, church_id: str, trilha_id: str, data: EtapaCreate) -> dict:
        get_owned_record(self.supabase, "trilhas_crescimento", trilha_id, church_id, "Trilha")
        try:
            existing = self.supabase.table("etapas_trilha").select("id").eq("id_trilha", trilha_id).execute()
            result = self.supabase.table("etapas_trilha").insert({
                "id_trilha": trilha_id,
                "id_igreja": church_id,
                "ordem": len(existing.data or []) + 1,
                "titulo": data.titulo,
                "descricao": data.descricao,
                "cor": data.cor,
            }).execute()
            return result.data[0]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_etapa(self, church_id: str, etapa_id: str, data: EtapaUpdate) -> dict:
        get_owned_record(self.supabase, "etapas_trilha", etapa_id, church_id, "Etapa")
        update_data = data.model_dump(exclude_unset=True)
        if not update_data:
            raise HTTPException(status_code=400, detail="No fields to update")
        try:
            result = self.supabase.table("etapas_trilha").update(update_data).eq("id", etapa_id).execute()
            return result.data[0]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_etapa(self, church_id: str, etapa_id: str) -> None:
        get_owned_record(self.supabase, "etapas_trilha", etapa_id, church_id, "Etapa")
        try:
            passos = self.supabase.table("passos_etapa").select("id").eq("id_etapa", etapa_id).execute()
            self._delete_passos([p["id"] for p in (passos.data or [])])
            self.supabase.table("etapas_trilha").delete().eq("id", etapa_id).execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def _replace_questions(self, passo_id: str, questions: List[QuizQuestion]) -> None:
        self.supabase.table("quiz_perguntas").delete().eq("passo_id", passo_id).execute()
        if questions:
            self.supabase.table("quiz_perguntas").insert([
                {**q.model_dump(), "passo_id": passo_id, "ordem": index + 1}
                for index, q in enumerate(questions)
            ]).execute()

    def create_passo(self, church_id: str, etapa_id: str, data: PassoCreate) -> dict:
        get_owned_record(self.supabase, "etapas_trilha", etapa_id, church_id, "Etapa")
        if data.tipo_passo == "conclusao_escola" and not data.escola_pre_requisito_id:
            raise HTTPException(status_code=400, detail="Selecione a escola pré-requisito")
        try:
            existing = self.supabase.table("passos_etapa").select("id").eq("id_etapa", etapa_id).execute()
            result = self.supabase.table("passos_etapa").insert({
                **data.model_dump(exclude={"quiz_perguntas"}),
                "id_etapa": etapa_id,
                "id_igreja": church_id,
                "ordem": len(existing.data or []) + 1,
            }).execute()
            passo = result.data[0]
            if data.quiz_perguntas:
                self._replace_questions(passo["id"], data.quiz_perguntas)
            return passo
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_passo(self, church_id: str, passo_id: str, data: PassoUpdate) -> dict:
        passo = get_owned_record(self.supabase, "passos_etapa", passo_id, church_id, "Passo")
        update_data = data.model_dump(exclude_unset=True, exclude={"quiz_perguntas"})
        try:
            if update_data:
                passo = self.supabase.table("passos_etapa").update(update_data).eq("id", passo_id).execute().data[0]
            if data.quiz_perguntas is not None:
                self._replace_questions(passo_id, data.quiz_perguntas)
            return passo
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_passo(self, church_id: str, passo_id: str) -> None:
        get_owned_record(self.supabase, "passos_etapa", passo_id, church_id, "Passo")
        try:
            self._delete_passos([passo_id])
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def _reorder(self, table: str, parent_column: str, parent_id: str, ids: List[str]) -> List[dict]:
        rows = self.supabase.table(table).select("id").eq(parent_column, parent_id).execute().data or []
        known = {r["id"] for r in rows}
        if len(set(ids)) != len(ids) or set(ids) != known:
            raise HTTPException(status_code=400, detail="A nova ordem deve conter todos os itens exatamente uma vez")
        try:
            for position, item_id in enumerate(ids, start=1):
                self.supabase.table(table).update({"ordem": position}).eq("id", item_id).execute()
            return [{"id": item_id, "ordem": position} for position, item_id in enumerate(ids, start=1)]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def reorder_etapas(self, church_id: str, trilha_id: str, ids: List[str]) -> List[dict]:
        get_owned_record(self.supabase, "trilhas_crescimento", trilha_id, church_id, "Trilha")
        return self._reorder("etapas_trilha", "id_trilha", trilha_id, ids)

    def reorder_passos(self, church_id: str, etapa_id: str, ids: List[str]) -> List[dict]:
        get_owned_record(self.supabase, "etapas_trilha", etapa_id, church_id, "Etapa")
        return self._reorder("passos_etapa", "id_etapa", etapa_id, ids)
