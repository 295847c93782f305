"""Tests for appointment list filtering."""
import pytest

from filters import FilterSpec, StatusFilter, apply_filter, representative_options
from models import AppointmentStatus
from schemas import AppointmentView


@pytest.fixture
def appointments():
    return [
        AppointmentView(id=1, first_name="Jane", last_name="Doe", company="Acme", email="jane@acme.com",
                        status=AppointmentStatus.CONDUCTED, sdr_name="Ashar"),
        AppointmentView(id=2, first_name="John", last_name="Roe", company="Globex", email="john@globex.com",
                        status=AppointmentStatus.NO_SHOW, sdr_name="Muhammad Hassan"),
        AppointmentView(id=3, first_name="Ann", last_name="Lee", company="Initech", email="ann@initech.com",
                        status=AppointmentStatus.PENDING, sdr_name="Ashar"),
        AppointmentView(id=4, first_name="Bob", last_name="Doe", company="Acme", email="bob@acme.com",
                        status=AppointmentStatus.PENDING, sdr_name=""),
    ]


def ids(records):
    return [r.id for r in records]


def test_default_spec_keeps_everything_in_order(appointments):
    assert ids(apply_filter(appointments, FilterSpec())) == [1, 2, 3, 4]


def test_search_matches_full_name_case_insensitively(appointments):
    assert ids(apply_filter(appointments, FilterSpec(search_text="JANE DOE"))) == [1]
    assert ids(apply_filter(appointments, FilterSpec(search_text="doe"))) == [1, 4]


def test_search_matches_company_or_email(appointments):
    assert ids(apply_filter(appointments, FilterSpec(search_text="acme"))) == [1, 4]
    assert ids(apply_filter(appointments, FilterSpec(search_text="initech.com"))) == [3]


def test_pending_means_neither_conducted_nor_no_show(appointments):
    result = apply_filter(appointments, FilterSpec(status=StatusFilter.PENDING))

    assert ids(result) == [3, 4]
    assert all(not r.conducted and not r.no_show for r in result)


def test_conducted_filter(appointments):
    result = apply_filter(appointments, FilterSpec(status=StatusFilter.CONDUCTED))

    assert ids(result) == [1]
    assert all(r.conducted for r in result)


def test_no_show_filter(appointments):
    assert ids(apply_filter(appointments, FilterSpec(status=StatusFilter.NO_SHOW))) == [2]


def test_representative_filter_is_exact(appointments):
    assert ids(apply_filter(appointments, FilterSpec(representative="Ashar"))) == [1, 3]
    assert ids(apply_filter(appointments, FilterSpec(representative="ashar"))) == []


def test_predicates_combine(appointments):
    spec = FilterSpec(search_text="a", status=StatusFilter.PENDING, representative="Ashar")

    assert ids(apply_filter(appointments, spec)) == [3]


def test_filter_is_idempotent(appointments):
    spec = FilterSpec(search_text="acme", status=StatusFilter.PENDING)
    once = apply_filter(appointments, spec)

    assert apply_filter(once, spec) == once


def test_representative_options_skip_blank_names(appointments):
    assert representative_options(appointments) == ["Ashar", "Muhammad Hassan"]
