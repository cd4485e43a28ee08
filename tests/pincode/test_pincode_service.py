import asyncio

import pandas as pd
import pytest

from models import Pincode_Mapping
from modules.pincode.pincode_service import PincodeService
from modules.pincode.pincode_upload_service import (
    read_pincode_master,
    upload_pincode_master,
)


def test_classify_known_pincode(seeded_db, session_factory):
    service = PincodeService(session_factory)
    address = asyncio.run(service.classify("400001"))

    assert address.pincode == 400001
    assert address.city == "mumbai"
    assert address.state == "maharashtra"
    assert address.district == "mumbai"
    assert address.is_metro is True


def test_missing_district_falls_back_to_city(seeded_db, session_factory):
    address = PincodeService(session_factory).classify_sync(841301)

    assert address.district == "chapra"
    assert address.is_metro is False


def test_unknown_or_malformed_pincode(seeded_db, session_factory):
    service = PincodeService(session_factory)

    assert asyncio.run(service.classify("999999")) is None
    assert asyncio.run(service.classify("40A001")) is None
    assert asyncio.run(service.classify(None)) is None
    assert asyncio.run(service.classify("²²²²²²")) is None
    assert PincodeService.parse_pincode("١١٠٠٠١") is None
    assert PincodeService.parse_pincode(" 110001 ") == 110001


def test_metro_list_is_injectable(seeded_db, session_factory):
    service = PincodeService(session_factory, metro=["Chapra"])

    assert service.classify_sync("841301").is_metro is True
    assert service.classify_sync("400001").is_metro is False


def test_pincode_details(seeded_db, session_factory):
    service = PincodeService(session_factory)

    found = asyncio.run(service.get_pincode_details(110001))
    assert found.status_code == 200
    assert found.data.city == "new delhi"
    assert found.data.country == "India"

    missing = asyncio.run(service.get_pincode_details(999999))
    assert missing.status_code == 404
    assert missing.message == "Pincode not found"


@pytest.fixture
def master_file(tmp_path):
    path = tmp_path / "pincode_master.csv"
    pd.DataFrame(
        {
            "PINCODE": ["400001", "110001", "560001", "560001", ""],
            "State": ["Maharashtra", "Delhi", "Karnataka", "KARNATAKA ", "Goa"],
            "City": ["Mumbai", "New Delhi", "Bangalore", "Bengaluru", "Panaji"],
            "District": ["Mumbai City", "", "Bangalore Urban", "Bengaluru Urban", ""],
        }
    ).to_csv(path, index=False)
    return str(path)


def test_read_pincode_master(master_file):
    df = read_pincode_master(master_file)

    assert df["Pincode"].tolist() == [110001, 400001, 560001]
    # later duplicate wins, text is lowercased and trimmed
    assert df.iloc[2]["City"] == "bengaluru"
    assert df.iloc[2]["State"] == "karnataka"


def test_read_pincode_master_rejects_missing_columns(tmp_path):
    path = tmp_path / "broken.csv"
    pd.DataFrame({"Pincode": ["400001"], "City": ["Mumbai"]}).to_csv(path, index=False)

    with pytest.raises(ValueError, match="Missing required columns"):
        read_pincode_master(str(path))


def test_upload_updates_existing_and_inserts_new(seeded_db, session_factory, master_file):
    summary = upload_pincode_master(master_file, session_factory)

    assert summary.total_rows_in_file == 3
    assert summary.inserted == 1
    assert summary.updated == 2
    assert summary.errors == 0

    db = session_factory()
    try:
        mumbai = db.query(Pincode_Mapping).filter(Pincode_Mapping.pincode == 400001).one()
        assert mumbai.district == "mumbai city"
        delhi = db.query(Pincode_Mapping).filter(Pincode_Mapping.pincode == 110001).one()
        assert delhi.district is None
    finally:
        db.close()


def test_upload_can_skip_existing(seeded_db, session_factory, master_file):
    summary = upload_pincode_master(master_file, session_factory, update_existing=False)

    assert summary.inserted == 1
    assert summary.skipped == 2
    assert summary.updated == 0
