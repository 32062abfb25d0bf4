"""
Unified LLM request/response shapes shared by every provider adapter.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from domain.enums import MessageRole, ProviderName

DEFAULT_TIMEOUT_SEC = 30.0
DEFAULT_RETRY_ATTEMPTS = 3


class Message(BaseModel):
    role: MessageRole
    content: str


class LLMRequest(BaseModel):
    """Vendor-neutral chat request. Unset optional fields are never sent upstream."""

    messages: List[Message]
    max_tokens: Optional[int] = None
    temperature: Optional[float] = None
    top_p: Optional[float] = None
    frequency_penalty: Optional[float] = None
    presence_penalty: Optional[float] = None
    stop: Optional[List[str]] = None
    model: Optional[str] = None
    stream: bool = False
    response_format: Optional[str] = None
    provider: Optional[ProviderName] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)


class Choice(BaseModel):
    index: int = 0
    message: Message
    finish_reason: Optional[str] = None


class Usage(BaseModel):
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class LLMResponse(BaseModel):
    id: str = ""
    object: str = "chat.completion"
    created: int = 0
    model: str = ""
    choices: List[Choice] = Field(default_factory=list)
    usage: Usage = Field(default_factory=Usage)
    metadata: Dict[str, Any] = Field(default_factory=dict)

    def first_content(self) -> str:
        """Text of the first choice, or an empty string when the vendor sent none"""
        if not self.choices:
            return ""
        return self.choices[0].message.content


class LLMConfig(BaseModel):
    provider: ProviderName
    api_key: str = ""
    base_url: str = ""
    model: str = ""
    max_tokens: int = 2000
    temperature: float = 0.7
    timeout: float = DEFAULT_TIMEOUT_SEC
    retry_attempts: int = DEFAULT_RETRY_ATTEMPTS
    retry_delay: float = 1.0
    default_headers: Dict[str, str] = Field(default_factory=dict)


class GenerationOptions(BaseModel):
    """Per-call overrides used by generate_text and create_chat_request"""

    max_tokens: Optional[int] = None
    temperature: Optional[float] = None
    top_p: Optional[float] = None
    response_format: Optional[str] = None
    provider: Optional[ProviderName] = None


# ============================================================================
# HTTP payloads
# ============================================================================


class ChatRequest(BaseModel):
    message: str = Field(..., min_length=1)
    provider: Optional[ProviderName] = None
    context: Optional[str] = None


class ChatResponse(BaseModel):
    response: str
    provider: str
    model: str
    usage: Usage


class ProviderInfo(BaseModel):
    name: str
    model: str
    provider: str
    timeout: float


class ProvidersResponse(BaseModel):
    available: List[str]
    current: Optional[str] = None
    info: Optional[ProviderInfo] = None


class SetProviderRequest(BaseModel):
    provider: ProviderName


class EstimateTokensRequest(BaseModel):
    text: str = Field(..., min_length=1)


class EstimateTokensResponse(BaseModel):
    text: str
    estimated_tokens: int
    characters: int
    words: int
