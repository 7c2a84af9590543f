from pydantic import BaseModel, Field


class UnifiedPrincipal(BaseModel):
    user_id: str = Field(..., description="Canonical user UUID as string")
    email: str | None = Field(default=None, description="User email associated with the principal, when present in the token")
    role: str = Field(default="authenticated", description="Backend role claim carried by the access token")
