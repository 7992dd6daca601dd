from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field


# ---- Results -------------------------------------------------------------------

class Interaction(BaseModel):
    pair: List[str]
    severity: str = "Unknown"
    description: str


class GuidelineResult(BaseModel):
    pmid: str
    title: str
    journal: str
    pubDate: str
    link: str
    pmcid: Optional[str] = None


class MindMapNode(BaseModel):
    id: str
    data: Dict[str, Any]  # {"label": ...}
    position: Dict[str, float] = Field(default_factory=lambda: {"x": 0, "y": 0})
    type: Optional[str] = None


class MindMapEdge(BaseModel):
    id: str
    source: str
    target: str
    type: Optional[str] = "smoothstep"


class MindMap(BaseModel):
    nodes: List[MindMapNode]
    edges: List[MindMapEdge]


# ---- Request bodies (camelCase on the wire) ---------------------------------------

class _Body(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class ImageData(_Body):
    mime_type: Optional[str] = Field(None, alias="mimeType")
    data: Optional[str] = None

    def wire(self) -> Dict[str, Optional[str]]:
        return {"mimeType": self.mime_type, "data": self.data}


class MindMapRequest(_Body):
    topic: Optional[str] = None


class ExploreGeminiRequest(_Body):
    prompt: Optional[str] = None
    image_data: Optional[ImageData] = Field(None, alias="imageData")
    history: Optional[List[Dict[str, Any]]] = None
    model_name: Optional[str] = Field(None, alias="modelName")
    system_instruction_id: Optional[str] = Field(None, alias="systemInstructionId")
    custom_system_instruction: Optional[str] = Field(None, alias="customSystemInstruction")
    enable_thinking: bool = Field(False, alias="enableThinking")


class GeminiChatRequest(_Body):
    messages: Optional[List[Dict[str, Any]]] = None
    prompt: Optional[str] = None
    text_to_summarize: Optional[str] = Field(None, alias="textToSummarize")
    image_data: Optional[ImageData] = Field(None, alias="imageData")
    model_name: Optional[str] = Field(None, alias="modelName")
    system_instruction_id: Optional[str] = Field(None, alias="systemInstructionId")
    custom_system_instruction: Optional[str] = Field(None, alias="customSystemInstruction")


class DeepSeekChatRequest(_Body):
    messages: List[Any] = Field(default_factory=list)
    model: Optional[str] = "deepseek-chat"


class DiseaseSummaryRequest(_Body):
    query: Optional[str] = None


class DiseaseDetailsRequest(_Body):
    disease_name: Optional[str] = Field(None, alias="diseaseName")


class InteractionRequest(_Body):
    drugs: Any = None


class GuidelineRequest(_Body):
    keywords: Optional[str] = None
    date_filter: str = Field("none", alias="dateFilter")
    sort_by: str = Field("relevance", alias="sortBy")
    free_full_text_only: bool = Field(False, alias="freeFullTextOnly")
    page: Any = 1


class TransactionRequest(_Body):
    user_id: Optional[str] = Field(None, alias="userId")
    user_email: Optional[str] = Field(None, alias="userEmail")
    plan: Optional[str] = None


class TurnstileRequest(_Body):
    token: Optional[str] = Field(None, alias="turnstileToken")


class NucleusSubmissionRequest(_Body):
    form_data: Dict[str, Any] = Field(default_factory=dict, alias="formData")
    turnstile_token: Optional[str] = Field(None, alias="turnstileToken")
