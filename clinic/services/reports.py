from collections import Counter

from sqlalchemy import func, select

from clinic.database import session_scope
from clinic.models.schema.appointment import AppointmentEntry
from clinic.models.schema.billing import PurchaseEntry
from clinic.models.schema.content import ContactMessageEntry, TestimonialEntry
from clinic.models.schema.patient import PatientEntry
from clinic.models.schema.therapist import TherapistEntry
from clinic.schemas.appointments import AppointmentStatus
from clinic.schemas.billing import PurchaseStatus
from clinic.schemas.reports import DashboardStats, FunnelSummary, SourceBreakdown


def registrations_for(user_id: int) -> list[PatientEntry]:
    with session_scope() as session:
        return list(
            session.execute(
                select(PatientEntry)
                .where(PatientEntry.registered_by == user_id)
                .order_by(PatientEntry.created_at.desc(), PatientEntry.id.desc())
            ).scalars().all()
        )


def transactions_for(user_id: int) -> list[PurchaseEntry]:
    """Purchases made by patients the given receptionist registered."""
    registered = select(PatientEntry.id).where(PatientEntry.registered_by == user_id)
    with session_scope() as session:
        return list(
            session.execute(
                select(PurchaseEntry)
                .where(PurchaseEntry.patient_id.in_(registered))
                .order_by(PurchaseEntry.created_at.desc(), PurchaseEntry.id.desc())
            ).scalars().all()
        )


def funnel_summary(user_id: int) -> FunnelSummary:
    patients = registrations_for(user_id)
    purchases = transactions_for(user_id)
    paid = [p for p in purchases if p.status == PurchaseStatus.PAID.value]
    converted_ids = {p.patient_id for p in paid}

    registrations_by_source = Counter(p.source or "unknown" for p in patients)
    converted_by_source = Counter(
        p.source or "unknown" for p in patients if p.id in converted_ids
    )
    by_source = [
        SourceBreakdown(
            source=source,
            registrations=total,
            converted=converted_by_source.get(source, 0),
        )
        for source, total in sorted(registrations_by_source.items())
    ]
    rate = len(converted_ids) / len(patients) if patients else 0.0
    return FunnelSummary(
        registrations=len(patients),
        converted_patients=len(converted_ids),
        conversion_rate=round(rate, 4),
        total_revenue=sum(p.amount for p in paid),
        transactions=len(purchases),
        by_source=by_source,
    )


def dashboard_stats() -> DashboardStats:
    with session_scope() as session:
        status_rows = session.execute(
            select(AppointmentEntry.status, func.count(AppointmentEntry.id)).group_by(
                AppointmentEntry.status
            )
        ).all()
        patients = session.execute(select(func.count(PatientEntry.id))).scalar_one()
        therapists = session.execute(select(func.count(TherapistEntry.id))).scalar_one()
        pending_testimonials = session.execute(
            select(func.count(TestimonialEntry.id)).where(
                TestimonialEntry.approved.is_(False)
            )
        ).scalar_one()
        contact_messages = session.execute(
            select(func.count(ContactMessageEntry.id))
        ).scalar_one()
        paid_revenue = session.execute(
            select(func.coalesce(func.sum(PurchaseEntry.amount), 0)).where(
                PurchaseEntry.status == PurchaseStatus.PAID.value
            )
        ).scalar_one()
    by_status = {status.value: 0 for status in AppointmentStatus}
    by_status.update({status: total for status, total in status_rows})
    return DashboardStats(
        appointments_by_status=by_status,
        patients=patients,
        therapists=therapists,
        pending_testimonials=pending_testimonials,
        contact_messages=contact_messages,
        paid_revenue=paid_revenue,
    )
