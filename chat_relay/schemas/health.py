from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str = "OK"
    message: str = "Server is running"
