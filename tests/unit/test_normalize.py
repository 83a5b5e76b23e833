from synthetic_api.pipeline.normalize import normalize_record, normalize_records

HOSPITAL_NORMALIZE = {"id_field": "facility_id", "sort_property": "facility_name"}
PORT_NORMALIZE = {
    "id_field": "globalId",
    "strip_id_braces": True,
    "lat_field": "ycoord",
    "lon_field": "xcoord",
}
AIRPORT_NORMALIZE = {
    "id_field": "id",
    "drop_id_field": True,
    "lat_field": "latitude_deg",
    "lon_field": "longitude_deg",
    "drop_coordinate_fields": True,
    "sort_property": "name",
    "exclude": {"type": ["closed"]},
}


def test_hospital_record_is_left_unresolved_and_drops_empty_properties():
    feature = normalize_record(
        {"facility_id": "010001", "facility_name": "Southeast Health", "address": "1108 Ross Clark Circle", "phone": "", "x": None},
        HOSPITAL_NORMALIZE,
    )

    assert feature.id == "010001"
    assert feature.geometry is None
    assert feature.properties == {
        "facility_id": "010001",
        "facility_name": "Southeast Health",
        "address": "1108 Ross Clark Circle",
    }


def test_port_record_strips_braces_and_rounds_coordinates():
    feature = normalize_record(
        {"globalId": "{ABC-123}", "portName": "Aberdeen", "ycoord": 57.1437123456, "xcoord": -2.0813456789},
        PORT_NORMALIZE,
    )

    assert feature.id == "ABC-123"
    assert feature.geometry == {"type": "Point", "coordinates": [-2.081346, 57.143712]}
    assert feature.properties["globalId"] == "{ABC-123}"
    assert feature.properties["ycoord"] == 57.1437123456


def test_airport_record_moves_id_and_coordinates_out_of_properties():
    feature = normalize_record(
        {"id": "6523", "ident": "00A", "name": "Total Rf Heliport", "latitude_deg": "40.070985", "longitude_deg": "-74.933689", "iata_code": ""},
        AIRPORT_NORMALIZE,
    )

    assert feature.id == "6523"
    assert feature.geometry == {"type": "Point", "coordinates": [-74.933689, 40.070985]}
    assert feature.properties == {"ident": "00A", "name": "Total Rf Heliport"}


def test_unparseable_coordinates_leave_geometry_null():
    feature = normalize_record({"id": "1", "latitude_deg": "n/a", "longitude_deg": "1"}, AIRPORT_NORMALIZE)
    assert feature.geometry is None


def test_normalize_is_side_effect_free():
    record = {"id": "1", "name": "A", "latitude_deg": "1", "longitude_deg": "2", "blank": ""}
    snapshot = dict(record)
    normalize_record(record, AIRPORT_NORMALIZE)
    assert record == snapshot


def test_normalize_records_filters_excluded_and_sorts_case_insensitively():
    records = [
        {"id": "1", "name": "bravo", "type": "small_airport", "latitude_deg": "1", "longitude_deg": "1"},
        {"id": "2", "name": "Alpha", "type": "closed", "latitude_deg": "1", "longitude_deg": "1"},
        {"id": "3", "name": "alpha", "type": "heliport", "latitude_deg": "1", "longitude_deg": "1"},
        {"id": "4", "type": "heliport", "latitude_deg": "1", "longitude_deg": "1"},
    ]

    features = normalize_records(records, AIRPORT_NORMALIZE)

    assert [feature.id for feature in features] == ["4", "3", "1"]
