import itertools
from datetime import datetime

import pytest

from src.timetrack.timetrack.attendance.service import QuickStatus, compute_quick_status
from src.timetrack.timetrack.core.enums import NamazType


@pytest.mark.parametrize(
    "checked_in, checked_out, active_breaks, active_namaz",
    list(itertools.product([False, True], repeat=4)),
)
def test_can_check_out_matrix(checked_in, checked_out, active_breaks, active_namaz):
    status = QuickStatus.derive(
        has_checked_in=checked_in,
        has_checked_out=checked_out,
        has_active_breaks=active_breaks,
        has_active_namaz_breaks=active_namaz,
    )

    assert status.can_check_out == (checked_in and not checked_out and not active_breaks and not active_namaz)
    if checked_out:
        assert status.current_status == "Checked out"
    elif active_breaks or active_namaz:
        assert status.current_status == "On break"
    elif checked_in:
        assert status.current_status == "Working"
    else:
        assert status.current_status == "Not checked in"


def test_no_record_allows_check_in_only():
    assert compute_quick_status(None).to_dict() == {
        "canCheckIn": True,
        "canCheckOut": False,
        "hasActiveBreaks": False,
        "hasActiveNamazBreaks": False,
        "isCheckedIn": False,
        "currentStatus": "Not checked in",
    }


def test_quick_status_follows_the_lifecycle(service, identity):
    service.check_in(identity, now=datetime(2025, 1, 8, 8, 0))
    assert service.quick_status(identity.employee_id, now=datetime(2025, 1, 8, 9, 0)).current_status == "Working"

    _, break_id = service.start_break(identity.employee_id, namaz_type=NamazType.ASR, now=datetime(2025, 1, 8, 15, 0))
    status = service.quick_status(identity.employee_id, now=datetime(2025, 1, 8, 15, 5))
    assert status.current_status == "On break"
    assert status.has_active_namaz_breaks is True
    assert status.can_check_out is False

    service.end_break(identity.employee_id, break_id, now=datetime(2025, 1, 8, 15, 10))
    service.check_out(identity.employee_id, now=datetime(2025, 1, 8, 16, 0))
    status = service.quick_status(identity.employee_id, now=datetime(2025, 1, 8, 16, 1))
    assert status.current_status == "Checked out"
    assert status.can_check_in is True
    assert status.can_check_out is False
