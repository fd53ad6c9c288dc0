from pydantic import BaseModel, Field
from typing import Dict


class VocationalTestSubmit(BaseModel):
    # question number -> agreement from 1 (low) to 5 (high); missing questions score 0
    respostas: Dict[int, int] = Field(..., min_length=1)
