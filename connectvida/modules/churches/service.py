from supabase import Client
from connectvida.modules.churches.schemas import (
    ChurchRegister, SharingSettings, ChildChurchCreate, ChurchUpdate
)
from connectvida.modules.auth.service import AuthAdminService, is_duplicate_user_error
from connectvida.database.supabase_client import maybe_row
from connectvida.config.permissions_config import LEADER_ROLES
from fastapi import HTTPException
from typing import Any, Dict, List, Optional, Tuple
import re
import logging

logger = logging.getLogger(__name__)

# Tenant-scoped tables in delete order (dependents first). (table, church column)
CHURCH_CASCADE: List[Tuple[str, str]] = [
    ("devocional_curtidas", "id_igreja"),
    ("devocional_comentarios", "id_igreja"),
    ("programacoes_evento", "id_igreja"),
    ("evento_participantes", "id_igreja"),
    ("escala_voluntarios", "id_igreja"),
    ("ministerio_voluntarios", "id_igreja"),
    ("ministerio_funcoes", "id_igreja"),
    ("demandas_ministerios", "id_igreja"),
    ("gc_group_members", "id_igreja"),
    ("gc_group_leaders", "id_igreja"),
    ("kids_checkin", "id_igreja"),
    ("notificacoes", "id_igreja"),
    ("notification_templates", "id_igreja"),
    ("passos_etapa", "id_igreja"),
    ("etapas_trilha", "id_igreja"),
    ("trilhas_crescimento", "id_igreja"),
    ("escola_inscricoes", "id_igreja"),
    ("escolas", "id_igreja"),
    ("cursos_inscricoes", "id_igreja"),
    ("cursos_aulas", "id_igreja"),
    ("cursos_modulos", "id_igreja"),
    ("cursos", "id_igreja"),
    ("devocionais", "id_igreja"),
    ("escalas_servico", "id_igreja"),
    ("eventos", "id_igreja"),
    ("ministerios", "id_igreja"),
    ("criancas", "id_igreja"),
    ("informacoes_pessoais", "id_igreja"),
    ("testes_vocacionais", "id_igreja"),
    ("progresso_membros", "id_igreja"),
    ("pastor_area_items", "id_igreja"),
    ("whatsapp_messages", "church_id"),
    ("whatsapp_sessions", "church_id"),
    ("whatsapp_templates", "church_id"),
    ("metas_financeiras", "id_igreja"),
    ("transacoes_financeiras", "id_igreja"),
    ("orcamentos", "id_igreja"),
    ("plan_change_requests", "church_id"),
    ("gc_groups", "id_igreja"),
    ("membros", "id_igreja"),
    ("igrejas", "id"),
]

SHARING_FLAGS = (
    "compartilha_escolas_da_mae",
    "compartilha_eventos_da_mae",
    "compartilha_jornada_da_mae",
    "compartilha_devocionais_da_mae",
)


class CascadeDeleteError(Exception):
    def __init__(self, message: str, counts: Dict[str, int]):
        super().__init__(message)
        self.counts = counts


def digits_only(value: Optional[str]) -> str:
    return re.sub(r"\D", "", value or "")


def delete_rows(supabase: Client, table: str, column: str, value: Any) -> int:
    """Delete matching rows and return how many were removed."""
    result = supabase.table(table).delete(count="exact").eq(column, value).execute()
    if getattr(result, "count", None) is not None:
        return result.count
    return len(result.data or [])


class ChurchService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.auth_admin = AuthAdminService(supabase)

    def _get_church(self, church_id: str, columns: str = "*") -> dict:
        church = maybe_row(
            self.supabase.table("igrejas").select(columns).eq("id", church_id).maybe_single().execute()
        )
        if not church:
            raise HTTPException(status_code=404, detail="Church not found")
        return church

    def register_church(self, data: ChurchRegister) -> Dict[str, str]:
        """Self-service signup: church row first, then the admin auth user. The church is removed if the user cannot be created."""
        plan = data.plan_details
        if not (data.admin_name and data.admin_email and data.admin_password
                and data.church_name and data.selected_plan and plan):
            raise HTTPException(status_code=400, detail="Dados incompletos fornecidos.")

        monthly_value = plan.monthly_value or 0
        try:
            result = self.supabase.table("igrejas").insert({
                "nome": data.church_name,
                "cnpj": digits_only(data.cnpj),
                "endereco": data.full_address,
                "telefone_contato": digits_only(data.telefone_contato),
                "email": data.admin_email,
                "nome_responsavel": data.admin_name,
                "plano_id": data.selected_plan,
                "status": "active",
                "valor_mensal_assinatura": monthly_value,
                "limite_membros": plan.member_limit,
                "ultimo_pagamento_status": "Confirmado" if monthly_value == 0 else "Pendente",
            }).execute()
        except Exception as e:
            message = str(e)
            if "duplicate key value" in message and "cnpj" in message:
                raise HTTPException(status_code=409, detail="O CNPJ informado já está em uso.")
            logger.error(f"Error creating church: {message}")
            raise HTTPException(status_code=500, detail=message)

        if not result.data:
            raise HTTPException(status_code=500, detail="Failed to create church")
        church = result.data[0]

        try:
            self.auth_admin.create_user(data.admin_email, data.admin_password, {
                "full_name": data.admin_name,
                "church_id": church["id"],
                "church_name": church["nome"],
                "initial_role": "admin",
            })
        except Exception as e:
            logger.warning(f"Admin user creation failed, removing church {church['id']}: {e}")
            self._rollback_church(church["id"])
            if is_duplicate_user_error(e):
                raise HTTPException(status_code=409, detail="Este e-mail já está cadastrado.")
            raise HTTPException(status_code=500, detail=str(e))

        logger.info(f"Church registered: {church['id']}")
        return {"churchId": church["id"]}

    def _rollback_church(self, church_id: str) -> None:
        try:
            self.supabase.table("igrejas").delete().eq("id", church_id).execute()
        except Exception as e:
            logger.error(f"Rollback of church {church_id} failed: {e}")

    def _rollback_user(self, user_id: str) -> None:
        try:
            self.auth_admin.delete_user(user_id)
        except Exception as e:
            logger.error(f"Rollback of auth user {user_id} failed: {e}")

    def get_public_church(self, church_id: str) -> dict:
        try:
            return self._get_church(church_id, "id, nome")
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_churches(self, status: Optional[str] = None) -> List[dict]:
        try:
            query = self.supabase.table("igrejas").select("*")
            if status:
                query = query.eq("status", status)
            result = query.order("created_at", desc=True).execute()
            return [self._without_password(row) for row in (result.data or [])]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    @staticmethod
    def _without_password(church: dict) -> dict:
        return {k: v for k, v in church.items() if k != "panel_password"}

    def get_current_church(self, church_id: str) -> dict:
        try:
            return self._without_password(self._get_church(church_id))
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_parent_info(self, church_id: str) -> Dict[str, Any]:
        church = self._get_church(church_id, "id, parent_church_id")
        mother_id = church.get("parent_church_id")
        return {"isChild": bool(mother_id), "motherId": mother_id}

    def update_sharing(self, church_id: str, data: SharingSettings) -> dict:
        """Only child churches carry sharing flags."""
        try:
            church = self._get_church(church_id, "id, parent_church_id")
            if not church.get("parent_church_id"):
                raise HTTPException(status_code=400, detail="Only child churches receive shared content")
            update_data = data.model_dump(exclude_unset=True)
            if not update_data:
                raise HTTPException(status_code=400, detail="No sharing flags provided")
            result = self.supabase.table("igrejas").update(update_data).eq("id", church_id).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to update sharing settings")
            return {flag: result.data[0].get(flag) for flag in SHARING_FLAGS}
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_children(self, mother_id: str) -> List[dict]:
        """Child churches with member, leader and ministry counts."""
        try:
            children = self.supabase.table("igrejas")\
                .select("id, nome, nome_responsavel, email, telefone_contato, status, created_at, "
                        + ", ".join(SHARING_FLAGS))\
                .eq("parent_church_id", mother_id)\
                .order("nome")\
                .execute()
            rows = children.data or []
            if not rows:
                return []
            child_ids = [c["id"] for c in rows]
            members = self.supabase.table("membros")\
                .select("id, id_igreja, funcao")\
                .in_("id_igreja", child_ids)\
                .execute()
            ministries = self.supabase.table("ministerios")\
                .select("id, id_igreja")\
                .in_("id_igreja", child_ids)\
                .execute()

            metrics = {cid: {"members": 0, "leaders": 0, "ministries": 0} for cid in child_ids}
            for m in members.data or []:
                entry = metrics.get(m["id_igreja"])
                if entry is None:
                    continue
                entry["members"] += 1
                if m.get("funcao") in LEADER_ROLES:
                    entry["leaders"] += 1
            for ministry in ministries.data or []:
                entry = metrics.get(ministry["id_igreja"])
                if entry is not None:
                    entry["ministries"] += 1
            return [{**child, "metrics": metrics[child["id"]]} for child in rows]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def register_child_church(self, mother_id: str, data: ChildChurchCreate) -> Dict[str, str]:
        """Create a child church with inherited plan, its pastor auth user and membros row, unwinding on failure."""
        mother = maybe_row(
            self.supabase.table("igrejas")
            .select("id, nome, plano_id, limite_membros, valor_mensal_assinatura, ultimo_pagamento_status")
            .eq("id", mother_id)
            .maybe_single()
            .execute()
        )
        if not mother:
            raise HTTPException(status_code=404, detail="Igreja mãe não encontrada.")
        if not (data.nome and data.nome_responsavel and data.email and data.panel_password):
            raise HTTPException(
                status_code=400,
                detail="Preencha nome, responsável, email e senha do painel."
            )

        try:
            result = self.supabase.table("igrejas").insert({
                "nome": data.nome,
                "nome_responsavel": data.nome_responsavel,
                "email": data.email,
                "telefone_contato": digits_only(data.telefone_contato) or None,
                "endereco": data.endereco,
                "cnpj": digits_only(data.cnpj) or None,
                "panel_password": data.panel_password,
                "parent_church_id": mother["id"],
                "plano_id": mother.get("plano_id"),
                "limite_membros": mother.get("limite_membros"),
                "valor_mensal_assinatura": mother.get("valor_mensal_assinatura"),
                "ultimo_pagamento_status": mother.get("ultimo_pagamento_status"),
                "status": "active",
            }).execute()
        except Exception as e:
            logger.error(f"Error creating child church: {e}")
            raise HTTPException(status_code=500, detail=str(e))
        if not result.data:
            raise HTTPException(status_code=500, detail="Failed to create child church")
        child = result.data[0]

        try:
            pastor_id = self.auth_admin.create_user(data.email, data.panel_password, {
                "full_name": data.nome_responsavel,
                "church_id": child["id"],
                "church_name": child["nome"],
                "initial_role": "pastor",
            })
        except Exception as e:
            logger.warning(f"Pastor user creation failed, removing child church {child['id']}: {e}")
            self._rollback_church(child["id"])
            if is_duplicate_user_error(e):
                raise HTTPException(status_code=409, detail="Este e-mail já está cadastrado.")
            raise HTTPException(status_code=400, detail=str(e))

        try:
            self.supabase.table("membros").upsert({
                "id": pastor_id,
                "id_igreja": child["id"],
                "nome_completo": data.nome_responsavel,
                "email": data.email,
                "funcao": "pastor",
                "status": "ativo",
                "perfil_completo": False,
            }, on_conflict="id").execute()
        except Exception as e:
            logger.error(f"Pastor member row failed, rolling back child church {child['id']}: {e}")
            self._rollback_user(pastor_id)
            self._rollback_church(child["id"])
            raise HTTPException(status_code=500, detail=str(e))

        logger.info(f"Child church {child['id']} created under {mother['id']}")
        return {"churchId": child["id"], "pastorId": pastor_id}

    def update_church(self, church_id: str, data: ChurchUpdate) -> dict:
        if not (data.nome and data.nome_responsavel and data.email):
            raise HTTPException(status_code=400, detail="Preencha nome, responsável e email.")
        try:
            update_data = {
                "nome": data.nome,
                "nome_responsavel": data.nome_responsavel,
                "email": data.email,
            }
            if data.telefone_contato is not None:
                update_data["telefone_contato"] = digits_only(data.telefone_contato) or None
            if data.cnpj is not None:
                update_data["cnpj"] = digits_only(data.cnpj) or None
            if data.endereco is not None:
                update_data["endereco"] = data.endereco
            if data.panel_password:
                update_data["panel_password"] = data.panel_password
            result = self.supabase.table("igrejas").update(update_data).eq("id", church_id).execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Church not found")
            return self._without_password(result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def reset_pastor_access(self, church: dict) -> Dict[str, Any]:
        """Give the church's pastor the panel password, creating or reusing the auth user when there is no pastor yet."""
        if not church.get("panel_password"):
            raise HTTPException(status_code=400, detail="panel_password is not set for this church")

        target_email = church.get("email")
        metadata = {
            "full_name": church.get("nome_responsavel"),
            "church_id": church["id"],
            "church_name": church.get("nome"),
            "initial_role": "pastor",
        }
        try:
            pastor = maybe_row(
                self.supabase.table("membros")
                .select("id, email")
                .eq("id_igreja", church["id"])
                .eq("funcao", "pastor")
                .limit(1)
                .maybe_single()
                .execute()
            )
            if pastor:
                if target_email and pastor.get("email") != target_email:
                    try:
                        self.auth_admin.update_user(pastor["id"], {
                            "email": target_email,
                            "email_confirm": True,
                            "user_metadata": metadata,
                        })
                    except Exception as e:
                        # Email taken by another user: only the password gets reset
                        if not is_duplicate_user_error(e):
                            raise
                        logger.warning(f"Pastor email {target_email} already in use, keeping current email")
                    self.supabase.table("membros").update({
                        "email": target_email,
                        "nome_completo": church.get("nome_responsavel"),
                        "funcao": "pastor",
                    }).eq("id", pastor["id"]).execute()
                self.auth_admin.update_user(pastor["id"], {
                    "password": church["panel_password"],
                    "email_confirm": True,
                })
                self.supabase.table("membros").update({"status": "ativo"}).eq("id", pastor["id"]).execute()
                return {"ok": True, "mode": "updated", "userId": pastor["id"]}

            user_id = self.auth_admin.create_or_reset_user(target_email, church["panel_password"], metadata)
            self.supabase.table("membros").upsert({
                "id": user_id,
                "id_igreja": church["id"],
                "nome_completo": church.get("nome_responsavel"),
                "email": target_email,
                "funcao": "pastor",
                "status": "ativo",
                "perfil_completo": False,
            }, on_conflict="id").execute()
            return {"ok": True, "mode": "created_or_reused", "userId": user_id}
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Reset pastor access failed for church {church['id']}: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def delete_church(self, church_id: str) -> Dict[str, int]:
        """Delete every tenant row in dependency order. Stops at the first failing table."""
        counts: Dict[str, int] = {}
        for table, column in CHURCH_CASCADE:
            try:
                counts[table] = delete_rows(self.supabase, table, column, church_id)
            except Exception as e:
                logger.error(f"Cascade delete of church {church_id} failed at {table}: {e}")
                raise CascadeDeleteError(f"{table}: {e}", counts)
        logger.info(f"Church {church_id} deleted: {counts}")
        return counts
