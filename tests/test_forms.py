from datetime import date

import pytest

from backoffice.src import exceptions
from backoffice.src.forms import Draft
from backoffice.api.station import StationForm
from backoffice.api.staff import StaffForm
from backoffice.api.promotion import PromotionForm


def stationDraft(**fields):
    draft = Draft(StationForm)
    draft.stage(
        name="Gare Test",
        city="Abidjan",
        address="Adjamé",
        capacity=50,
        latitude="5.3599",
        longitude="-4.0083",
    )
    draft.stage(**fields)
    return draft


def test_valid_station_draft():
    draft = stationDraft()
    assert draft.isCreate
    assert draft.isValid()
    candidate = draft.commit()
    assert candidate.model_dump()["latitude"] == pytest.approx(5.3599)


@pytest.mark.parametrize("field", ["name", "city", "address"])
def test_blank_required_field_is_rejected(field):
    draft = stationDraft(**{field: "   "})
    with pytest.raises(exceptions.InvalidForm) as error:
        draft.commit()
    assert field in error.value.errors


def test_out_of_range_values_are_reported_per_field():
    errors = stationDraft(capacity=-1, latitude="91", email_id="nope").errors()
    assert set(errors) == {"capacity", "latitude", "email_id"}


def test_numeric_coordinates_are_accepted():
    assert stationDraft(latitude=5.36, longitude=-4).isValid()


def test_blank_optional_field_means_absent():
    candidate = stationDraft(phone_number="", email_id=" ").commit()
    assert candidate.phone_number is None
    assert candidate.email_id is None


def test_edit_keeps_only_real_changes():
    original = {"name": "Gare Nord", "city": "Abidjan", "capacity": 10}
    draft = Draft(StationForm, original)
    assert not draft.isCreate
    draft.stage(name="Gare Nord", unknown="ignored")
    assert not draft.isDirty()
    draft.stage(capacity=20)
    assert draft.changes == {"capacity": 20}
    assert original["capacity"] == 10


def driverDraft(references=None, **fields):
    draft = Draft(StaffForm, references=references)
    draft.stage(
        first_name="Kouassi",
        last_name="Yao",
        phone_number="+33612345678",
        license_number="ci-2018-004512",
        license_expiry_date="2030-01-01",
    )
    draft.stage(**fields)
    return draft


def test_driver_needs_a_license():
    assert driverDraft().isValid()
    errors = driverDraft(license_number=None, license_expiry_date="").errors()
    assert set(errors) == {"license_number", "license_expiry_date"}


def test_license_number_is_upper_cased():
    assert driverDraft().commit().license_number == "CI-2018-004512"


def test_join_date_defaults_to_today():
    assert driverDraft().commit().join_date == date.today()


def test_only_agents_carry_rights():
    errors = driverDraft(can_process_payments=True).errors()
    assert set(errors) == {"can_process_payments"}
    errors = driverDraft(
        role=3,
        license_number=None,
        license_expiry_date=None,
        can_process_payments=True,
    ).errors()
    assert errors == {}


def test_only_drivers_carry_license_fields():
    errors = driverDraft(role=1).errors()
    assert set(errors) == {"license_number", "license_expiry_date"}


def test_assignments_are_checked_against_references():
    references = {"station_ids": {1}, "vehicle_ids": {7}}
    assert driverDraft(references, station_id=1, assigned_vehicle_id=7).isValid()
    errors = driverDraft(references, station_id=2, assigned_vehicle_id=8).errors()
    assert set(errors) == {"station_id", "assigned_vehicle_id"}


def promotionDraft(**fields):
    draft = Draft(PromotionForm, references={"station_ids": {1, 2}})
    draft.stage(
        title="Rentrée",
        discount_type=1,
        discount_value=15,
        start_date="2026-09-01",
        end_date="2026-09-30",
    )
    draft.stage(**fields)
    return draft


def test_promotion_rules():
    assert promotionDraft().isValid()
    assert "end_date" in promotionDraft(end_date="2026-08-01").errors()
    assert "discount_value" in promotionDraft(discount_value=150).errors()
    assert "discount_value" in promotionDraft(discount_value=0).errors()
    assert promotionDraft(discount_type=2, discount_value=1500).isValid()
    assert "station_ids" in promotionDraft(station_ids=[1, 3]).errors()
