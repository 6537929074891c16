# ==============================================
# Tests for RecordAnalysisService
# ==============================================
#
# Register → submit → fetch analysis over the in-memory store.
# ==============================================

import logging
from decimal import Decimal

import pytest

from record_analysis.analysis import AnalysisRecord
from record_analysis.config import AnalysisConfig, AppConfig
from record_analysis.errors import InternalInconsistency, InvalidInput, SchemaError, UnknownSchema
from record_analysis.service import RecordAnalysisService
from record_analysis.storage import AnalysisStore, RecordStore, SchemaStore


def leaf(report, *path):
    nodes = report["statistics"]
    current = None
    for name in path:
        current = next(n for n in nodes if n["name"] == name)
        nodes = current.get("field_attributes", [])
    return current


class TestRegisterSchema:
    def test_register_creates_schema_and_zeroed_analysis(self, service, classroom_schema, fake_mongo):
        report = service.register_schema("classrooms", classroom_schema)

        assert report["id"] == "classrooms"
        assert report["number_of_records"] == 0
        assert leaf(report, "professor", "yearsAtRice") == {
            "name": "yearsAtRice", "type": "int", "count": 0, "mean": 0.0, "standard_deviation": 0.0,
        }
        assert fake_mongo.find_one("configurations", {"_id": "classrooms"})["field_attributes"] == classroom_schema
        assert fake_mongo.find_one("analysis", {"_id": "classrooms"}) is not None

    def test_get_schema(self, registered_service, classroom_schema):
        assert registered_service.get_schema("classrooms") == classroom_schema

    def test_register_twice_is_rejected(self, registered_service, classroom_schema):
        with pytest.raises(InvalidInput, match="already registered"):
            registered_service.register_schema("classrooms", classroom_schema)

    def test_bad_schema_writes_nothing(self, service, fake_mongo):
        with pytest.raises(SchemaError):
            service.register_schema("broken", [{"name": "a", "type": "nope"}])
        assert fake_mongo.find("configurations", {}) == []
        assert fake_mongo.find("analysis", {}) == []

    @pytest.mark.parametrize("schema_id", [None, "", "   ", 42])
    def test_schema_id_required(self, service, classroom_schema, schema_id):
        with pytest.raises(InvalidInput):
            service.register_schema(schema_id, classroom_schema)

    @pytest.mark.parametrize("schema_id", ["a$b", "a\0b", "system.users", "analysis", "configurations"])
    def test_schema_id_must_be_a_usable_collection_name(self, service, classroom_schema, fake_mongo, schema_id):
        with pytest.raises(InvalidInput):
            service.register_schema(schema_id, classroom_schema)
        assert fake_mongo.find("configurations", {}) == []

    def test_register_logs_through_package_logger(self, service, classroom_schema, caplog):
        with caplog.at_level(logging.INFO, logger="record_analysis"):
            service.register_schema("classrooms", classroom_schema)
        assert "Registered schema 'classrooms'" in caplog.text


class TestSubmitRecord:
    def test_clean_record_is_stored(self, registered_service, classroom_record, fake_mongo):
        result = registered_service.submit_record("classrooms", classroom_record)

        assert result.accepted
        assert result.outcome.is_clean
        stored = fake_mongo.find("classrooms", {})
        assert len(stored) == 1
        assert stored[0]["_id"] == result.record_id
        assert registered_service.fetch_analysis("classrooms")["number_of_records"] == 1

    def test_submit_does_not_mutate_caller_record(self, registered_service, classroom_record):
        registered_service.submit_record("classrooms", classroom_record)
        assert "_id" not in classroom_record

    def test_rejected_record_only_updates_tallies(self, registered_service, classroom_record, fake_mongo):
        classroom_record["classroomLimit"] = "65"
        classroom_record["building"] = "Duncan"
        classroom_record["professor"] = {"name": 1, "title": "Dr"}

        result = registered_service.submit_record("classrooms", classroom_record)

        assert not result.accepted
        assert result.outcome.bad_value_count == 2
        assert fake_mongo.find("classrooms", {}) == []

        report = registered_service.fetch_analysis("classrooms")
        assert report["number_of_records"] == 0
        assert report["bad_value_count"] == 1
        assert report["missing_field_count"] == 1
        assert report["extra_field_count"] == 1
        assert leaf(report, "classroomLimit")["count"] == 0

    def test_nested_statistics_scenario(self, registered_service, classroom_record):
        registered_service.submit_record("classrooms", classroom_record)
        second = dict(classroom_record, professor={"name": "Jones", "yearsAtRice": 20})
        registered_service.submit_record("classrooms", second)

        years = leaf(registered_service.fetch_analysis("classrooms"), "professor", "yearsAtRice")
        assert years["count"] == 2
        assert years["mean"] == pytest.approx(15.0)
        assert years["standard_deviation"] == pytest.approx(5.0)

    def test_report_preserves_schema_order(self, registered_service, classroom_record):
        registered_service.submit_record("classrooms", classroom_record)
        report = registered_service.fetch_analysis("classrooms")

        assert [n["name"] for n in report["statistics"]] == ["classroomName", "classroomLimit", "professor"]
        assert [n["name"] for n in leaf(report, "professor")["field_attributes"]] == ["name", "yearsAtRice"]

    def test_unknown_schema(self, service, classroom_record):
        with pytest.raises(UnknownSchema):
            service.submit_record("nope", classroom_record)

    def test_non_mapping_record(self, registered_service):
        with pytest.raises(InvalidInput):
            registered_service.submit_record("classrooms", "just a string")

    def test_internal_inconsistency_writes_nothing(self, service, fake_mongo, classroom_schema, classroom_record, monkeypatch):
        service.register_schema("classrooms", classroom_schema)
        before = fake_mongo.find_one("analysis", {"_id": "classrooms"})

        def broken_update(tree, record):
            raise InternalInconsistency("forced")

        monkeypatch.setattr(service._engine, "update", broken_update)

        with pytest.raises(InternalInconsistency):
            service.submit_record("classrooms", classroom_record)
        assert fake_mongo.find("classrooms", {}) == []
        assert fake_mongo.find_one("analysis", {"_id": "classrooms"}) == before

    def test_submit_connects_lazily(self, registered_service, classroom_record, fake_mongo):
        registered_service.submit_record("classrooms", classroom_record)
        assert fake_mongo.connected

    def test_decimal_record_is_stored_and_counted(self, service, fake_mongo):
        service.register_schema("prices", [{"name": "price", "type": "decimal"}])

        result = service.submit_record("prices", {"price": Decimal("1.5")})
        service.submit_record("prices", {"price": Decimal("2.5")})

        assert result.accepted
        report = service.fetch_analysis("prices", recompute=True)
        assert report["number_of_records"] == 2
        assert leaf(report, "price")["mean"] == pytest.approx(2.0)

    def test_decimal_too_precise_to_store_is_rejected(self, service, fake_mongo):
        service.register_schema("prices", [{"name": "price", "type": "decimal"}])

        result = service.submit_record("prices", {"price": Decimal("1." + "1" * 40)})

        assert not result.accepted
        assert result.outcome.bad_value_count == 1
        assert fake_mongo.find("prices", {}) == []

    def test_submit_batch(self, registered_service, classroom_record):
        results = registered_service.submit_batch("classrooms", [classroom_record, {"classroomName": "x"}])
        assert [r.accepted for r in results] == [True, False]
        assert results[1].to_dict()["missing_field_count"] == 2


class TestFetchAnalysis:
    def test_unknown_schema(self, service):
        with pytest.raises(UnknownSchema):
            service.fetch_analysis("nope")

    def test_recompute_matches_incremental(self, registered_service, classroom_record):
        for limit, years in [(65, 10), (12, 3), (300, 41)]:
            record = dict(classroom_record, classroomLimit=limit,
                          professor={"name": "P", "yearsAtRice": years})
            registered_service.submit_record("classrooms", record)

        incremental = registered_service.fetch_analysis("classrooms", recompute=False)
        batch = registered_service.fetch_analysis("classrooms", recompute=True)

        for path in [("classroomLimit",), ("professor", "yearsAtRice")]:
            assert leaf(batch, *path)["count"] == leaf(incremental, *path)["count"] == 3
            assert leaf(batch, *path)["mean"] == pytest.approx(leaf(incremental, *path)["mean"])
            assert leaf(batch, *path)["standard_deviation"] == pytest.approx(
                leaf(incremental, *path)["standard_deviation"])

    def test_recompute_picks_up_records_missed_by_statistics(self, fake_mongo, classroom_schema, classroom_record):
        """A record stored without its analysis write is counted by the batch path."""
        config = AppConfig(analysis=AnalysisConfig(recompute_on_fetch=True))
        service = RecordAnalysisService(
            config=config,
            schema_store=SchemaStore(fake_mongo),
            record_store=RecordStore(fake_mongo),
            analysis_store=AnalysisStore(fake_mongo),
            mongo_client=fake_mongo,
        )
        service.register_schema("classrooms", classroom_schema)
        fake_mongo.insert_one("classrooms", classroom_record)

        report = service.fetch_analysis("classrooms")

        assert report["number_of_records"] == 1
        assert leaf(report, "classroomLimit")["count"] == 1
        stored = AnalysisRecord.from_dict(fake_mongo.find_one("analysis", {"_id": "classrooms"}))
        assert stored.statistics[1].count == 1
        assert stored.number_of_records == 1


class TestLifecycle:
    def test_context_manager_disconnects(self, service, classroom_schema, fake_mongo):
        with service:
            service.register_schema("classrooms", classroom_schema)
            assert fake_mongo.connected
        assert not fake_mongo.connected
