"""Tests for the shared status rule table and date formatting."""

from datetime import date, datetime, timezone

import pytest

from app.schemas.job import JobStatus, PaymentStatus
from app.services import status_rules
from app.services.status_rules import (
    DEFAULT_NEXT_STEP,
    STATUS_RULES,
    derive_next_step_text,
    derive_status,
    dispatcher_badge,
    dispatcher_label,
    format_date_long,
    format_date_short,
)


@pytest.mark.parametrize(
    "fields, expected",
    [
        ({}, JobStatus.PENDING_APPROVAL),
        ({"contract_signed": True}, JobStatus.AWAITING_DEPOSIT),
        ({"contract_signed": True, "deposit_received": True}, JobStatus.DEPOSIT_RECEIVED),
        ({"deposit_received": True, "materials_ordered": True}, JobStatus.MATERIALS_ORDERED),
        ({"materials_ordered": True, "delivery_scheduled": True}, JobStatus.DELIVERY_SCHEDULED),
        ({"delivery_scheduled": True, "delivery_completed": True}, JobStatus.DELIVERY_COMPLETED),
        ({"delivery_completed": True, "install_scheduled": True}, JobStatus.INSTALL_SCHEDULED),
        ({"install_scheduled": True, "install_started": True}, JobStatus.INSTALL_STARTED),
        ({"install_started": True, "install_completed": True}, JobStatus.INSTALL_COMPLETED),
        ({"install_completed": True, "return_scheduled": True}, JobStatus.RETURN_SCHEDULED),
        ({"return_scheduled": True, "return_completed": True}, JobStatus.RETURN_COMPLETED),
        ({"return_completed": True, "final_status": PaymentStatus.PAID, "warranty_visible": True},
         JobStatus.WARRANTY_AVAILABLE),
    ],
)
def test_furthest_milestone_wins(make_job, fields, expected):
    assert derive_status(make_job(**fields)) == expected


def test_payment_without_warranty_keeps_install_status(make_job):
    job = make_job(install_completed=True, final_status=PaymentStatus.PAID)
    assert derive_status(job) == JobStatus.INSTALL_COMPLETED
    assert dispatcher_label(job) == "Paid - Warranty Pending"
    assert "Final payment received" in derive_next_step_text(job)


def test_return_flow_outranks_installation(make_job):
    job = make_job(install_completed=True, return_completed=True, final_status=PaymentStatus.PAID)
    assert derive_status(job) == JobStatus.RETURN_COMPLETED


def test_awaiting_deposit_uses_default_customer_text(make_job):
    job = make_job(contract_signed=True)
    assert derive_next_step_text(job) == DEFAULT_NEXT_STEP
    assert dispatcher_label(job) == "Awaiting Deposit"


def test_renderers_follow_the_same_priority(make_job):
    job = make_job(install_started=True, install_completed=True)
    assert derive_status(job) == JobStatus.INSTALL_COMPLETED
    assert dispatcher_label(job) == "Awaiting Payment"
    assert dispatcher_badge(job) == "yellow"
    assert derive_next_step_text(job).startswith("Installation complete")


def test_every_status_rule_is_reachable_in_order():
    keys = [rule.key for rule in STATUS_RULES]
    assert keys[0] == "cancelled"
    assert keys[-1] == "pending_approval"
    statuses = [rule.status for rule in STATUS_RULES if rule.status]
    assert JobStatus.APPROVED not in statuses
    assert len(statuses) == len(set(statuses))


def test_derivation_does_not_mutate(make_job):
    job = make_job(delivery_scheduled=True, delivery_date=date(2025, 1, 10))
    before = job.model_dump()
    assert derive_status(job) == derive_status(job)
    assert derive_next_step_text(job) == derive_next_step_text(job)
    assert job.model_dump() == before


@pytest.mark.parametrize(
    "value, expected",
    [
        (None, "TBD"),
        ("", "TBD"),
        (date(2025, 1, 10), "Friday, January 10, 2025"),
        ("2025-01-10", "Friday, January 10, 2025"),
        (datetime(2025, 3, 4, 9, 0, tzinfo=timezone.utc), "Tuesday, March 4, 2025"),
        ("next week", "next week"),
    ],
)
def test_format_date_long(value, expected):
    assert format_date_long(value) == expected


def test_format_date_short():
    assert format_date_short(date(2025, 1, 10)) == "Jan 10, 2025"
    assert format_date_short(None) == "TBD"


def test_unmatched_rules_fall_back_to_defaults(make_job, monkeypatch):
    monkeypatch.setattr(status_rules, "STATUS_RULES", [])
    job = make_job()
    assert derive_status(job) == JobStatus.PENDING_APPROVAL
    assert derive_next_step_text(job) == DEFAULT_NEXT_STEP


def test_timestamps_show_business_timezone_date(monkeypatch):
    monkeypatch.setattr(status_rules.settings, "TIMEZONE", "America/Toronto")
    evening_in_ottawa = datetime(2025, 1, 11, 2, 0, tzinfo=timezone.utc)

    assert format_date_short(evening_in_ottawa) == "Jan 10, 2025"
    assert format_date_long("2025-01-11T02:00:00Z") == "Friday, January 10, 2025"
    assert format_date_short(datetime(2025, 1, 11, 2, 0)) == "Jan 10, 2025"


def test_plain_dates_are_not_shifted(monkeypatch):
    monkeypatch.setattr(status_rules.settings, "TIMEZONE", "Asia/Tokyo")
    assert format_date_short(date(2025, 1, 10)) == "Jan 10, 2025"
    assert format_date_short("2025-01-10") == "Jan 10, 2025"
