import pytest

from trend_intel import schema


def test_loads_default_schema():
    loaded = schema.load_schema()
    assert loaded.get("title") == "TrendAnalysis"
    assert set(loaded["properties"]) == {"summary", "patterns", "strategies"}


def test_validate_accepts_complete_payload():
    payload = {
        "summary": "Three paragraphs.",
        "patterns": ["Metro-led demand"],
        "strategies": ["Reel series on commute times"],
    }
    assert schema.validate_analysis_payload(payload) == payload


def test_validate_accepts_missing_and_null_fields():
    assert schema.validate_analysis_payload({"summary": None}) == {"summary": None}
    assert schema.validate_analysis_payload({}) == {}


def test_validate_rejects_non_string_items():
    with pytest.raises(ValueError) as excinfo:
        schema.validate_analysis_payload({"strategies": ["ok", 3]})
    assert "$.strategies[1]" in str(excinfo.value)


def test_validate_rejects_non_object():
    with pytest.raises(ValueError) as excinfo:
        schema.validate_analysis_payload(["summary"])
    assert "$: " in str(excinfo.value)


def test_validate_reports_every_bad_field_in_path_order():
    with pytest.raises(ValueError) as excinfo:
        schema.validate_analysis_payload({"summary": 7, "patterns": "one"})
    message = str(excinfo.value)
    assert message.index("$.patterns") < message.index("$.summary")


def test_bundled_schema_is_itself_valid():
    assert schema.analysis_validator().schema["title"] == "TrendAnalysis"
