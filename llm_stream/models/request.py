from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Optional


class ConversationItem(BaseModel):
    """One prior turn sent along with the prompt."""
    role: str
    content: str
    timestamp: Optional[str] = None


class StreamRequest(BaseModel):
    """
    Body of a streaming LLM query.

    Unknown fields are kept and sent as-is so backend-specific options can
    pass through without a model change.
    """
    model_config = ConfigDict(extra="allow")

    prompt: str = Field(..., description="User prompt")
    provider: str = Field(default="openai", description="Backend provider name")
    model: Optional[str] = Field(None, description="Model identifier")
    conversation_history: List[ConversationItem] = Field(
        default_factory=list,
        description="Previous conversation turns"
    )
    disable_cache: bool = Field(False, description="Bypass backend response cache")
    enable_tools: Optional[bool] = Field(None, description="Allow the backend to call tools")
    tool_choice: Optional[str] = Field(
        None,
        description="Tool selection strategy ('auto', 'none', 'required' or a tool name)"
    )

    def to_body(self) -> Dict[str, Any]:
        """JSON body for the streaming endpoint, with ``stream`` forced on."""
        body = self.model_dump(mode="json", exclude_none=True)
        body["stream"] = True
        return body

    def query_params(self) -> Dict[str, str]:
        """Query string parameters the backend uses for routing."""
        params: Dict[str, str] = {}
        if self.provider:
            params["provider"] = self.provider
        if self.model:
            params["model"] = self.model
        if self.disable_cache:
            params["disable_cache"] = "true"
        return params
