from pydantic import BaseModel, Field, TypeAdapter, ValidationError
from typing import Optional, List, Literal, Union, Annotated, Any, Dict
from uuid import UUID
from datetime import datetime

from app.core.errors import ValidationFailed
from app.models.chat import AssistantMessageKind


# ══════════════════════════════════════════════════════════
# ASSISTANT FUNCTION REQUESTS (closed tagged variant)
# ══════════════════════════════════════════════════════════

class TeamDetails(BaseModel):
    team_name: Optional[str] = Field(None, alias="teamName", max_length=100)
    team_members: List[str] = Field(default_factory=list, alias="teamMembers", max_length=4)

    class Config:
        populate_by_name = True


class ListTournaments(BaseModel):
    action: Literal["list"] = "list"


class TournamentDetails(BaseModel):
    action: Literal["details"] = "details"
    tournament_id: UUID


class RegisterForTournament(BaseModel):
    action: Literal["register"] = "register"
    tournament_id: UUID
    team_details: TeamDetails = Field(default_factory=TeamDetails)


class Chat(BaseModel):
    action: Literal["chat"] = "chat"
    message: str = Field(..., min_length=1, max_length=2000)
    context: Optional[str] = Field(None, max_length=500)


AssistantRequest = Annotated[
    Union[ListTournaments, TournamentDetails, RegisterForTournament, Chat],
    Field(discriminator="action"),
]

_assistant_request_adapter = TypeAdapter(AssistantRequest)

# Action names accepted on the wire, including the older long forms
ACTION_ALIASES = {
    "list": "list",
    "get_tournaments": "list",
    "details": "details",
    "get_tournament_details": "details",
    "register": "register",
    "register_tournament": "register",
    "chat": "chat",
}


class AssistantFunctionPayload(BaseModel):
    """Loose JSON body of the assistant function"""
    message: Optional[str] = None
    context: Optional[str] = None
    user_id: Optional[UUID] = Field(None, alias="userId")
    action: Optional[str] = None
    tournament_id: Optional[UUID] = Field(None, alias="tournamentId")
    team_details: Optional[TeamDetails] = Field(None, alias="teamDetails")

    class Config:
        populate_by_name = True

    def to_request(self):
        """Narrow the body into one AssistantRequest variant"""
        action = ACTION_ALIASES.get(self.action or "chat")
        if action is None:
            raise ValidationFailed(f"Unknown action: {self.action}")

        raw: Dict[str, Any] = {"action": action}
        if action == "chat":
            raw.update(message=self.message, context=self.context)
        elif action in ("details", "register"):
            raw["tournament_id"] = self.tournament_id
            if action == "register" and self.team_details is not None:
                raw["team_details"] = self.team_details

        try:
            return _assistant_request_adapter.validate_python(raw)
        except ValidationError as e:
            fields = ", ".join(".".join(str(loc) for loc in err["loc"][1:]) for err in e.errors())
            raise ValidationFailed(f"Invalid {action} request: {fields}")


# ══════════════════════════════════════════════════════════
# PAYMENT CONFIRMATION FUNCTION
# ══════════════════════════════════════════════════════════

class ConfirmPaymentRequest(BaseModel):
    registration_id: Optional[UUID] = Field(None, alias="registrationId")
    tournament_id: Optional[UUID] = Field(None, alias="tournamentId")
    payment_proof: Optional[str] = Field(None, alias="paymentProof", max_length=500)

    class Config:
        populate_by_name = True


# ══════════════════════════════════════════════════════════
# ASSISTANT TRANSCRIPT
# ══════════════════════════════════════════════════════════

class SendMessageRequest(BaseModel):
    """User message, optionally carrying an explicit action"""
    message: str = Field(..., min_length=1, max_length=2000)
    action: Optional[str] = None
    tournament_id: Optional[UUID] = Field(None, alias="tournamentId")
    team_details: Optional[TeamDetails] = Field(None, alias="teamDetails")

    class Config:
        populate_by_name = True
        str_strip_whitespace = True  # blank messages fail min_length


class SelectTournamentRequest(BaseModel):
    tournament_id: UUID = Field(..., alias="tournamentId")

    class Config:
        populate_by_name = True


class SelectTournamentResponse(BaseModel):
    input: str


class AssistantMessageResponse(BaseModel):
    id: UUID
    is_user: bool
    kind: AssistantMessageKind
    content: str
    data: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TranscriptResponse(BaseModel):
    messages: List[AssistantMessageResponse]
    total: int
