from pydantic import BaseModel, Field
from typing import Optional, List, Literal, Any


StepType = Literal["video", "quiz", "leitura", "acao", "link_externo", "conclusao_escola"]


class TrilhaCreate(BaseModel):
    titulo: str
    descricao: Optional[str] = None
    compartilhar_com_filhas: bool = False


class TrilhaUpdate(BaseModel):
    titulo: Optional[str] = None
    descricao: Optional[str] = None
    compartilhar_com_filhas: Optional[bool] = None


class EtapaCreate(BaseModel):
    titulo: str
    descricao: Optional[str] = None
    cor: str = "#e5e7eb"


class EtapaUpdate(BaseModel):
    titulo: Optional[str] = None
    descricao: Optional[str] = None
    cor: Optional[str] = None


class QuizQuestion(BaseModel):
    pergunta_texto: str
    opcoes: List[str]
    resposta_correta: int
    pontuacao: float = 1


class PassoCreate(BaseModel):
    titulo: str
    tipo_passo: StepType = "leitura"
    conteudo: Optional[str] = None
    nota_de_corte_quiz: Optional[int] = None
    escola_pre_requisito_id: Optional[str] = None
    quiz_perguntas: Optional[List[QuizQuestion]] = None


class PassoUpdate(BaseModel):
    titulo: Optional[str] = None
    tipo_passo: Optional[StepType] = None
    conteudo: Optional[str] = None
    nota_de_corte_quiz: Optional[int] = None
    escola_pre_requisito_id: Optional[str] = None
    quiz_perguntas: Optional[List[QuizQuestion]] = None


class ReorderRequest(BaseModel):
    ids: List[str] = Field(..., min_length=1)


class StepCompletion(BaseModel):
    # Selected option index per question, in question order
    answers: Optional[List[Optional[int]]] = None
    # Used only when the step has no registered questions
    score: Optional[float] = None


class StepCompletionResult(BaseModel):
    passed: bool
    score: Optional[float] = None
    attempts: int = 0
    blocked: bool = False


class JourneyStats(BaseModel):
    overallProgress: float = 0
    completedSteps: int = 0
    totalSteps: int = 0
    currentLevel: int = 0


class MyJourneyResponse(JourneyStats):
    trilha: Optional[dict] = None
    etapas: List[Any] = []
