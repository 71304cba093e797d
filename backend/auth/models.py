from pydantic import BaseModel


class SessionUser(BaseModel):
    email: str
    name: str | None = None


class SessionResponse(BaseModel):
    user: SessionUser | None = None
    expires: str | None = None


class ProviderResponse(BaseModel):
    id: str
    name: str
    enabled: bool
    signin_url: str
