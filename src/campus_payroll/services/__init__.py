"""Payroll services."""

from campus_payroll.services.access import Requester
from campus_payroll.services.formal_generator import FormalGenerator
from campus_payroll.services.history_resolver import HistoryEntry, UnifiedHistoryResolver
from campus_payroll.services.payment_sources import PaymentEntry, PaymentSource
from campus_payroll.services.payslip_builder import PayslipBuilder, PayslipPayload
from campus_payroll.services.period_registry import PayPeriodRegistry
from campus_payroll.services.run_snapshotter import RunSnapshotter
from campus_payroll.services.state_machine import PeriodStateMachine, PeriodStatus

__all__ = [
    "Requester",
    "FormalGenerator",
    "HistoryEntry",
    "UnifiedHistoryResolver",
    "PaymentEntry",
    "PaymentSource",
    "PayslipBuilder",
    "PayslipPayload",
    "PayPeriodRegistry",
    "RunSnapshotter",
    "PeriodStateMachine",
    "PeriodStatus",
]
