from supabase import Client
from connectvida.modules.devotionals.schemas import DevotionalFilters, DevotionalCreate, DevotionalUpdate
from connectvida.core.dependencies import ChurchContext
from connectvida.core.sharing import visible_records, get_visible_record, get_owned_record
from connectvida.database.supabase_client import maybe_row
from fastapi import HTTPException
from datetime import datetime, timezone
from math import ceil
from typing import Any, Dict, List
import logging

logger = logging.getLogger(__name__)

PUBLISHED = "Publicado"
PENDING = "Pendente"


def reading_time(content: str) -> int:
    """Minutes to read, one per 200 characters."""
    return ceil(len(content or "") / 200)


def _can_manage(context: ChurchContext) -> bool:
    return context.has_permission("devotionals-management") or context.has_permission("devotional-approver")


def can_read(context: ChurchContext, row: Dict[str, Any]) -> bool:
    """Drafts and pending rows are only readable by managers and their author."""
    return _can_manage(context) or row.get("status") == PUBLISHED or row.get("autor_id") == context.user_id


class DevotionalService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _author_names(self, author_ids: List[str]) -> Dict[str, str]:
        author_ids = list({a for a in author_ids if a})
        if not author_ids:
            return {}
        result = self.supabase.table("membros").select("id, nome_completo").in_("id", author_ids).execute()
        return {m["id"]: m["nome_completo"] for m in (result.data or [])}

    def list_devotionals(self, context: ChurchContext, filters: DevotionalFilters) -> List[dict]:
        """Visible devotionals, featured first then newest, with likes and comment counts.

        Members without devotional permissions only see published rows and their own.
        """
        try:
            rows = visible_records(self.supabase, "devocionais", context.church_id)
            manager = _can_manage(context)
            term = (filters.search or "").strip().lower()

            def keep(row: Dict[str, Any]) -> bool:
                if not can_read(context, row):
                    return False
                if filters.status and row.get("status") != filters.status:
                    return False
                if filters.author_id and row.get("autor_id") != filters.author_id:
                    return False
                if filters.category and filters.category != "all" and row.get("categoria") != filters.category:
                    return False
                if filters.tag and filters.tag != "all" and filters.tag not in (row.get("tags") or []):
                    return False
                if term and term not in (row.get("titulo") or "").lower() \
                        and term not in (row.get("conteudo") or "").lower():
                    return False
                return True

            rows = [r for r in rows if keep(r)]
            ids = [r["id"] for r in rows]
            likes: List[dict] = []
            comments: List[dict] = []
            if ids:
                likes = self.supabase.table("devocional_curtidas")\
                    .select("devocional_id, membro_id")\
                    .in_("devocional_id", ids)\
                    .execute().data or []
                comments = self.supabase.table("devocional_comentarios")\
                    .select("devocional_id, aprovado")\
                    .in_("devocional_id", ids)\
                    .execute().data or []
            authors = self._author_names([r.get("autor_id") for r in rows])

            result = []
            for row in rows:
                row_likes = [l for l in likes if l["devocional_id"] == row["id"]]
                result.append({
                    **row,
                    "autor_nome": authors.get(row.get("autor_id")),
                    "likes_count": len(row_likes),
                    "liked_by_me": any(l["membro_id"] == context.user_id for l in row_likes),
                    "comments_count": sum(
                        1 for c in comments
                        if c["devocional_id"] == row["id"] and (manager or c.get("aprovado"))
                    ),
                })
            # newest first, then featured first (stable sort)
            result.sort(key=lambda r: r.get("data_publicacao") or r.get("created_at") or "", reverse=True)
            result.sort(key=lambda r: not r.get("featured"))
            return result
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_details(self, context: ChurchContext, devotional_id: str) -> Dict[str, Any]:
        """Devotional with its comments; increments the view counter."""
        devotional = get_visible_record(self.supabase, "devocionais", devotional_id, context.church_id, "Devotional")
        if not can_read(context, devotional):
            raise HTTPException(status_code=404, detail="Devotional not found")
        try:
            views = (devotional.get("visualizacoes") or 0) + 1
            self.supabase.table("devocionais").update({"visualizacoes": views}).eq("id", devotional_id).execute()

            query = self.supabase.table("devocional_comentarios").select("*").eq("devocional_id", devotional_id)
            if not context.has_permission("devotional-approver"):
                query = query.eq("aprovado", True)
            comments = query.order("created_at").execute().data or []
            likes = self.supabase.table("devocional_curtidas")\
                .select("membro_id")\
                .eq("devocional_id", devotional_id)\
                .execute().data or []
            names = self._author_names([devotional.get("autor_id")] + [c["autor_id"] for c in comments])
            return {
                **devotional,
                "visualizacoes": views,
                "autor_nome": names.get(devotional.get("autor_id")),
                "likes_count": len(likes),
                "liked_by_me": any(l["membro_id"] == context.user_id for l in likes),
                "comments": [{**c, "autor_nome": names.get(c["autor_id"])} for c in comments],
            }
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def create_devotional(self, context: ChurchContext, data: DevotionalCreate) -> dict:
        payload = data.model_dump()
        if not context.has_permission("devotionals-management"):
            payload["status"] = PENDING
        if payload["status"] == PUBLISHED and not payload.get("data_publicacao"):
            payload["data_publicacao"] = datetime.now(timezone.utc).isoformat()
        payload.update({
            "id_igreja": context.church_id,
            "autor_id": context.user_id,
            "tempo_leitura": reading_time(data.conteudo),
            "visualizacoes": 0,
        })
        try:
            result = self.supabase.table("devocionais").insert(payload).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create devotional")
            return result.data[0]
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_devotional(self, church_id: str, devotional_id: str, data: DevotionalUpdate) -> dict:
        get_owned_record(self.supabase, "devocionais", devotional_id, church_id, "Devotional")
        update_data = data.model_dump(exclude_unset=True)
        if not update_data:
            raise HTTPException(status_code=400, detail="No fields to update")
        if "conteudo" in update_data:
            update_data["tempo_leitura"] = reading_time(update_data["conteudo"])
        try:
            result = self.supabase.table("devocionais").update(update_data).eq("id", devotional_id).execute()
            return result.data[0]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_devotional(self, church_id: str, devotional_id: str) -> None:
        get_owned_record(self.supabase, "devocionais", devotional_id, church_id, "Devotional")
        try:
            self.supabase.table("devocional_curtidas").delete().eq("devocional_id", devotional_id).execute()
            self.supabase.table("devocional_comentarios").delete().eq("devocional_id", devotional_id).execute()
            self.supabase.table("devocionais").delete().eq("id", devotional_id).execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def approve(self, church_id: str, devotional_id: str) -> dict:
        get_owned_record(self.supabase, "devocionais", devotional_id, church_id, "Devotional")
        try:
            result = self.supabase.table("devocionais").update({
                "status": PUBLISHED,
                "data_publicacao": datetime.now(timezone.utc).isoformat(),
            }).eq("id", devotional_id).execute()
            logger.info(f"Devotional {devotional_id} approved")
            return result.data[0]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def toggle_like(self, context: ChurchContext, devotional_id: str) -> Dict[str, Any]:
        get_visible_record(self.supabase, "devocionais", devotional_id, context.church_id, "Devotional")
        try:
            existing = self.supabase.table("devocional_curtidas")\
                .select("id")\
                .eq("devocional_id", devotional_id)\
                .eq("membro_id", context.user_id)\
                .execute()
            if existing.data:
                self.supabase.table("devocional_curtidas")\
                    .delete()\
                    .eq("devocional_id", devotional_id)\
                    .eq("membro_id", context.user_id)\
                    .execute()
                liked = False
            else:
                self.supabase.table("devocional_curtidas").insert({
                    "devocional_id": devotional_id,
                    "membro_id": context.user_id,
                    "id_igreja": context.church_id,
                }).execute()
                liked = True
            count = self.supabase.table("devocional_curtidas")\
                .select("id")\
                .eq("devocional_id", devotional_id)\
                .execute()
            return {"liked": liked, "likes_count": len(count.data or [])}
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def add_comment(self, context: ChurchContext, devotional_id: str, content: str) -> dict:
        """Comments from approvers are published immediately; others wait for moderation."""
        get_visible_record(self.supabase, "devocionais", devotional_id, context.church_id, "Devotional")
        try:
            result = self.supabase.table("devocional_comentarios").insert({
                "devocional_id": devotional_id,
                "autor_id": context.user_id,
                "id_igreja": context.church_id,
                "conteudo": content,
                "aprovado": context.has_permission("devotional-approver"),
            }).execute()
            return result.data[0]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def _own_comment(self, church_id: str, comment_id: str) -> dict:
        comment = maybe_row(
            self.supabase.table("devocional_comentarios").select("*").eq("id", comment_id).maybe_single().execute()
        )
        if not comment or comment.get("id_igreja") != church_id:
            raise HTTPException(status_code=404, detail="Comment not found")
        return comment

    def approve_comment(self, church_id: str, comment_id: str) -> dict:
        """Publish a pending comment written by a member of the church."""
        self._own_comment(church_id, comment_id)
        try:
            result = self.supabase.table("devocional_comentarios")\
                .update({"aprovado": True})\
                .eq("id", comment_id)\
                .execute()
            logger.info(f"Devotional comment {comment_id} approved")
            return result.data[0]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_comment(self, context: ChurchContext, comment_id: str) -> None:
        """Approvers reject any comment of the church; authors may remove their own."""
        comment = self._own_comment(context.church_id, comment_id)
        if comment.get("autor_id") != context.user_id and not context.has_permission("devotional-approver"):
            raise HTTPException(status_code=403, detail="Insufficient permissions. Required: devotional-approver")
        try:
            self.supabase.table("devocional_comentarios").delete().eq("id", comment_id).execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
