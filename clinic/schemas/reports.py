from pydantic import BaseModel, Field


class SourceBreakdown(BaseModel):
    source: str
    registrations: int
    converted: int


class FunnelSummary(BaseModel):
    registrations: int
    converted_patients: int
    conversion_rate: float
    total_revenue: int
    transactions: int
    by_source: list[SourceBreakdown] = Field(default_factory=list)


class DashboardStats(BaseModel):
    appointments_by_status: dict[str, int]
    patients: int
    therapists: int
    pending_testimonials: int
    contact_messages: int
    paid_revenue: int
