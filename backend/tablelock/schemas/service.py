from tablelock.schemas.base import CamelModel, Timestamp


class HealthResponse(CamelModel):
    status: str
    timestamp: Timestamp
    uptime: float


class ServiceInfo(CamelModel):
    message: str
    version: str
    endpoints: list[str]
