"""Tests for pipeline toggles, cascading rollback and the payment-method gate."""

import random
from datetime import date, datetime, timezone

import pytest

from app.core.exceptions import PreconditionError
from app.schemas.job import JobStatus, PaymentMethod, PaymentStatus
from app.services import lifecycle
from app.services.lifecycle import PIPELINE, StepKey

NOW = datetime(2025, 1, 8, 14, 30, tzinfo=timezone.utc)


def _flags(job):
    return [step.is_set(job) for step in PIPELINE]


def test_new_job_with_signed_contract_awaits_deposit(make_job):
    job = make_job(contract_signed=True)
    assert job.status == JobStatus.AWAITING_DEPOSIT


def test_rolling_back_delivery_schedule_keeps_materials(make_job):
    job = make_job(materials_ordered=True, delivery_scheduled=True, delivery_date=date(2025, 1, 10))
    assert job.status == JobStatus.DELIVERY_SCHEDULED

    job = lifecycle.toggle(job, "delivery_scheduled")

    assert job.materials_ordered is True
    assert job.delivery_scheduled is False
    assert job.delivery_date is None
    assert job.status == JobStatus.MATERIALS_ORDERED


def test_paid_job_with_visible_warranty_is_complete(make_job):
    job = make_job(install_completed=True, final_status=PaymentStatus.PAID, warranty_visible=True)
    assert job.status == JobStatus.WARRANTY_AVAILABLE


def test_cancellation_overrides_every_flag(make_job):
    job = make_job(
        cancelled=True,
        contract_signed=True,
        deposit_received=True,
        materials_ordered=True,
        delivery_scheduled=True,
        delivery_completed=True,
        install_scheduled=True,
        install_started=True,
        install_completed=True,
        return_scheduled=True,
        return_completed=True,
        final_status=PaymentStatus.PAID,
        warranty_visible=True,
    )
    assert job.status == JobStatus.CANCELLED


def test_toggle_on_stamps_completion_time(make_job):
    job = lifecycle.toggle(make_job(), StepKey.MATERIALS_ORDERED, now=NOW)
    assert job.materials_ordered is True
    assert job.materials_ordered_date == NOW
    assert job.status == JobStatus.MATERIALS_ORDERED


def test_scheduled_step_stores_supplied_date(make_job):
    job = make_job(materials_ordered=True)
    job = lifecycle.toggle(job, StepKey.DELIVERY_SCHEDULED, scheduled_date=date(2025, 1, 10))
    assert job.delivery_date == date(2025, 1, 10)
    assert job.next_step_text == "Delivery scheduled for Friday, January 10, 2025."


def test_scheduled_step_without_date_renders_tbd(make_job):
    job = lifecycle.toggle(make_job(materials_ordered=True), StepKey.INSTALL_SCHEDULED)
    assert job.install_scheduled is True
    assert job.install_date is None
    assert job.next_step_text == "Your installation is scheduled for TBD."


def test_rollback_cascades_to_later_steps(make_job):
    job = make_job()
    for key in (
        StepKey.MATERIALS_ORDERED,
        StepKey.DELIVERY_SCHEDULED,
        StepKey.DELIVERY_COMPLETED,
        StepKey.INSTALL_SCHEDULED,
        StepKey.INSTALL_STARTED,
    ):
        job = lifecycle.toggle(job, key, scheduled_date=date(2025, 2, 3), now=NOW)

    job = lifecycle.toggle(job, StepKey.DELIVERY_COMPLETED)

    assert job.materials_ordered is True
    assert job.delivery_scheduled is True
    assert job.delivery_date == date(2025, 2, 3)
    assert not job.delivery_completed
    assert not job.install_scheduled
    assert not job.install_started
    assert job.delivery_completed_date is None
    assert job.install_date is None
    assert job.install_started_time is None
    assert job.status == JobStatus.DELIVERY_SCHEDULED


def test_final_payment_rollback_hides_warranty(make_job):
    job = make_job(
        install_completed=True,
        payment_method=PaymentMethod.CASH,
        final_status=PaymentStatus.PAID,
        final_payment_received=True,
        warranty_visible=True,
        warranty_link="http://localhost:8000/files/jobs/x/Warranty.pdf",
    )
    job = lifecycle.toggle(job, StepKey.FINAL_PAYMENT)

    assert job.final_status == PaymentStatus.PENDING
    assert job.final_payment_received is False
    assert job.warranty_visible is False
    assert job.status == JobStatus.INSTALL_COMPLETED


def test_install_completed_rollback_clears_payment_method(make_job):
    job = make_job(install_completed=True, payment_method=PaymentMethod.ETRANSFER)
    job = lifecycle.toggle(job, StepKey.INSTALL_COMPLETED)
    assert job.payment_method == PaymentMethod.UNSET


def test_in_order_toggles_keep_chain_consistent(make_job):
    rng = random.Random(20250110)
    job = make_job()
    for _ in range(300):
        on = [step for step in PIPELINE if step.is_set(job)]
        candidates = list(on)
        if len(on) < len(PIPELINE):
            candidates.append(PIPELINE[len(on)])
        step = rng.choice(candidates)
        job = lifecycle.toggle(job, step.key, scheduled_date=date(2025, 3, 1))
        assert lifecycle.is_chain_consistent(job)
        flags = _flags(job)
        assert flags == sorted(flags, reverse=True)


def test_warranty_never_visible_without_payment(make_job):
    rng = random.Random(7)
    job = make_job(warranty_visible=True)
    assert job.warranty_visible is False
    for _ in range(200):
        job = lifecycle.toggle(job, rng.choice(PIPELINE).key)
        if job.final_payment:
            job = lifecycle.apply_changes(job, {"warranty_visible": True})
        assert not (job.warranty_visible and job.final_status != PaymentStatus.PAID)


def test_out_of_order_toggle_is_permitted_and_logged(make_job, caplog):
    job = lifecycle.toggle(make_job(), StepKey.INSTALL_STARTED, now=NOW)

    assert job.install_started is True
    assert job.status == JobStatus.INSTALL_STARTED
    assert lifecycle.chain_gaps(job) == [
        StepKey.MATERIALS_ORDERED,
        StepKey.DELIVERY_SCHEDULED,
        StepKey.DELIVERY_COMPLETED,
        StepKey.INSTALL_SCHEDULED,
    ]
    assert "before materials_ordered" in caplog.text


def test_rollback_restores_chain_after_out_of_order_toggle(make_job):
    job = lifecycle.toggle(make_job(), StepKey.DELIVERY_COMPLETED)
    job = lifecycle.toggle(job, StepKey.DELIVERY_COMPLETED)
    assert lifecycle.is_chain_consistent(job)


def test_unknown_step_raises_value_error(make_job):
    with pytest.raises(ValueError, match="Unknown pipeline step"):
        lifecycle.toggle(make_job(), "roof_inspected")


def test_complete_installation_sets_method_and_flag_together(make_job):
    job = make_job(install_started=True)
    job = lifecycle.complete_installation(job, "online", now=NOW)

    assert job.install_completed is True
    assert job.install_completed_date == NOW
    assert job.payment_method == PaymentMethod.ONLINE
    assert job.status == JobStatus.INSTALL_COMPLETED


@pytest.mark.parametrize("method", ["", "cheque"])
def test_complete_installation_requires_valid_method(make_job, method):
    with pytest.raises(ValueError):
        lifecycle.complete_installation(make_job(install_started=True), method)


def test_complete_installation_twice_is_rejected(make_job):
    job = make_job(install_completed=True, payment_method=PaymentMethod.CASH)
    with pytest.raises(PreconditionError):
        lifecycle.complete_installation(job, PaymentMethod.ONLINE)


def test_apply_changes_syncs_deposit_flag(make_job):
    job = make_job(contract_signed=True)
    job = lifecycle.apply_changes(job, {"deposit_status": "paid"}, now=NOW)
    assert job.deposit_received is True
    assert job.deposit_date == NOW
    assert job.status == JobStatus.DEPOSIT_RECEIVED

    job = lifecycle.apply_changes(job, {"deposit_status": "pending"})
    assert job.deposit_received is False
    assert job.status == JobStatus.AWAITING_DEPOSIT


def test_apply_changes_stamps_return_completion(make_job):
    job = make_job(install_completed=True, return_scheduled=True)
    job = lifecycle.apply_changes(job, {"return_completed": True}, now=NOW)
    assert job.return_completed_date == NOW
    assert job.status == JobStatus.RETURN_COMPLETED


def test_apply_changes_rejects_identity_edits(make_job):
    with pytest.raises(ValueError, match="token cannot be changed"):
        lifecycle.apply_changes(make_job(), {"token": "guessable"})


def test_apply_changes_rejects_unknown_fields(make_job):
    with pytest.raises(ValueError, match="Unknown job fields"):
        lifecycle.apply_changes(make_job(), {"roof_pitch": 6})


def test_status_depends_only_on_flags(make_job):
    flags = {"materials_ordered": True, "deposit_received": True, "contract_signed": True}
    first = make_job()
    for name, value in flags.items():
        first = lifecycle.apply_changes(first, {name: value})
    second = make_job()
    for name, value in reversed(list(flags.items())):
        second = lifecycle.apply_changes(second, {name: value})

    assert first.status == second.status == JobStatus.MATERIALS_ORDERED
    assert first.next_step_text == second.next_step_text
