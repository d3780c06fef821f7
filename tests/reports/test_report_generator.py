import csv
import io
from datetime import date, datetime, timezone

import pytest

from time_tracking.core.exceptions import NotFoundError, ValidationError
from time_tracking.reports.service import REPORT_CSV_FIELDS

UTC = timezone.utc


def _work(container, clock, user_id, start, end):
    clock.set(start)
    container.session_manager.start_session(user_id)
    clock.set(end)
    container.session_manager.end_session(user_id)


def test_report_is_rectangular(container, clock):
    _work(container, clock, "u1", datetime(2026, 2, 2, 9, 0, tzinfo=UTC), datetime(2026, 2, 2, 17, 0, tzinfo=UTC))

    report = container.report_generator.generate(["u1", "u2"], date(2026, 2, 1), date(2026, 2, 7))

    assert list(report) == ["u1", "u2"]
    for rows in report.values():
        assert [r.day for r in rows] == [date(2026, 2, d) for d in range(1, 8)]
    assert report["u1"][1].worked_seconds == 8 * 3600
    assert all(r.worked_seconds == 0 for r in report["u2"])


def test_report_rows_match_daily_summaries(container, clock):
    _work(container, clock, "u1", datetime(2026, 2, 2, 23, 0, tzinfo=UTC), datetime(2026, 2, 3, 2, 0, tzinfo=UTC))

    report = container.report_generator.generate(["u1"], date(2026, 2, 2), date(2026, 2, 3))

    assert report["u1"] == container.aggregator.summarize_range("u1", date(2026, 2, 2), date(2026, 2, 3))


def test_duplicate_ids_are_collapsed_in_order(container):
    report = container.report_generator.generate(["u2", "u1", "u2", " u1 "], date(2026, 2, 1), date(2026, 2, 1))

    assert list(report) == ["u2", "u1"]


def test_empty_user_list_is_rejected(container):
    with pytest.raises(ValidationError):
        container.report_generator.generate([], date(2026, 2, 1), date(2026, 2, 2))


def test_inverted_range_is_rejected(container):
    with pytest.raises(ValidationError):
        container.report_generator.generate(["u1"], date(2026, 2, 2), date(2026, 2, 1))


def test_range_is_capped_by_settings(container):
    container.settings_service.update({"max_report_days": 7})
    generator = container.report_generator

    assert len(generator.generate(["u1"], date(2026, 2, 1), date(2026, 2, 7))["u1"]) == 7
    with pytest.raises(ValidationError):
        generator.generate(["u1"], date(2026, 2, 1), date(2026, 2, 8))


def test_unknown_user_is_not_found(container):
    with pytest.raises(NotFoundError) as excinfo:
        container.report_generator.generate(["u1", "nobody"], date(2026, 2, 1), date(2026, 2, 2))

    assert "nobody" in str(excinfo.value)


def test_csv_export(container, clock):
    _work(container, clock, "u1", datetime(2026, 2, 2, 9, 0, tzinfo=UTC), datetime(2026, 2, 2, 10, 40, tzinfo=UTC))
    generator = container.report_generator
    report = generator.generate(["u1", "u3"], date(2026, 2, 2), date(2026, 2, 3))

    payload = generator.export_csv(report)

    assert payload.startswith(b"\xef\xbb\xbf")
    rows = list(csv.DictReader(io.StringIO(payload.decode("utf-8-sig"))))
    assert list(rows[0]) == REPORT_CSV_FIELDS
    assert len(rows) == 4
    assert rows[0]["full_name"] == "Alice Nowak"
    assert rows[0]["worked_hours"] == "01:40"
    assert rows[0]["worked_seconds"] == "6000"
    assert rows[2]["username"] == "carol"


def test_csv_export_applies_rounding(container, clock):
    container.settings_service.update({"rounding_minutes": 15})
    _work(container, clock, "u1", datetime(2026, 2, 2, 9, 0, tzinfo=UTC), datetime(2026, 2, 2, 10, 40, tzinfo=UTC))
    generator = container.report_generator

    payload = generator.export_csv(generator.generate(["u1"], date(2026, 2, 2), date(2026, 2, 2)))

    (row,) = csv.DictReader(io.StringIO(payload.decode("utf-8-sig")))
    assert row["worked_seconds"] == str(105 * 60)
    assert row["worked_hours"] == "01:45"
