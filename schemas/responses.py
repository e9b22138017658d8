from pydantic import BaseModel
from typing import Optional, Any

class StandardSuccessResponse(BaseModel):
    success: bool = True
    message: str
    data: Optional[Any] = None

class HealthResponse(BaseModel):
    status: str = "ok"
    version: str
    connections: int = 0
    authenticated: int = 0
