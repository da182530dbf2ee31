"""Tests for CSV export and JSON backup/import."""

import json
import pytest
from datetime import date, datetime, timezone
from decimal import Decimal

from finance_tracker.export import (
    CSV_HEADERS,
    EmptyExportError,
    FormatError,
    backup_filename,
    csv_filename,
    dumps_backup,
    from_json_backup,
    to_csv,
    to_json_backup,
)


EXPORTED_AT = datetime(2024, 1, 5, 12, 30, tzinfo=timezone.utc)


class TestCsvExport:
    """Tests for to_csv()."""

    def test_header_and_row(self, make_transaction):
        content = to_csv([make_transaction()])
        assert content == (
            "Title,Amount,Type,Category,Date\n"
            '"Coffee","50.00","expense","Food","2024-01-05"\n'
        )

    def test_amounts_have_two_decimals(self, make_transaction):
        content = to_csv([make_transaction(amount="1234.5")])
        assert '"1234.50"' in content

    def test_embedded_quotes_are_doubled(self, make_transaction):
        content = to_csv([make_transaction(title='Say "cheese"')])
        assert '"Say ""cheese"""' in content

    def test_commas_stay_inside_fields(self, make_transaction):
        content = to_csv([make_transaction(title="Tea, biscuits")])
        assert content.splitlines()[1].startswith('"Tea, biscuits",')

    def test_one_row_per_transaction(self, make_transaction):
        content = to_csv([make_transaction(id=i) for i in range(1, 4)])
        assert len(content.splitlines()) == 4

    def test_payment_method_column(self, make_transaction):
        content = to_csv(
            [
                make_transaction(id=1, payment_method="UPI"),
                make_transaction(id=2),
            ],
            include_payment_method=True,
        )
        lines = content.splitlines()
        assert lines[0] == ",".join(CSV_HEADERS) + ",PaymentMethod"
        assert lines[1].endswith('"UPI"')
        assert lines[2].endswith('""')

    def test_byte_order_mark(self, make_transaction):
        content = to_csv([make_transaction()], byte_order_mark=True)
        assert content.startswith("\ufeffTitle,")

    def test_empty_list_is_rejected(self):
        with pytest.raises(EmptyExportError, match="No transactions to export!"):
            to_csv([])

    def test_filename(self):
        assert csv_filename(date(2024, 1, 5)) == "transactions_2024-01-05.csv"


class TestJsonBackup:
    """Tests for to_json_backup() and dumps_backup()."""

    def test_document_shape(self, make_transaction):
        document = to_json_backup([make_transaction()], now=EXPORTED_AT)
        assert document["exportDate"] == "2024-01-05T12:30:00+00:00"
        assert document["version"] == "1.0"
        assert document["transactions"] == [make_transaction().to_record()]

    def test_custom_version(self, make_transaction):
        document = to_json_backup([], version="2.0", now=EXPORTED_AT)
        assert document["version"] == "2.0"
        assert document["transactions"] == []

    def test_dumps_is_valid_json(self, make_transaction):
        text = dumps_backup([make_transaction(title="Chai ☕")], now=EXPORTED_AT)
        assert json.loads(text)["transactions"][0]["title"] == "Chai ☕"
        assert "☕" in text

    def test_filename(self):
        assert backup_filename(date(2024, 1, 5)) == "finance_backup_2024-01-05.json"


class TestJsonImport:
    """Tests for from_json_backup()."""

    def test_restores_exported_transactions(self, make_transaction):
        originals = [
            make_transaction(id=1, amount="12.75", payment_method="Card"),
            make_transaction(
                id=2, type="income", category="Salary", amount="6000",
            ),
        ]
        restored = from_json_backup(dumps_backup(originals, now=EXPORTED_AT))
        assert restored == originals
        assert restored[0].amount == Decimal("12.75")

    def test_restores_amounts_beyond_float_precision(self, make_transaction):
        originals = [make_transaction(amount="0.10000000000000000001")]
        restored = from_json_backup(dumps_backup(originals, now=EXPORTED_AT))
        assert restored == originals
        assert restored[0].amount == Decimal("0.10000000000000000001")

    def test_accepts_bytes(self, make_transaction):
        text = dumps_backup([make_transaction()], now=EXPORTED_AT)
        assert len(from_json_backup(text.encode("utf-8"))) == 1

    def test_empty_list_is_valid(self):
        assert from_json_backup({"transactions": []}) == []

    def test_missing_transactions_field(self):
        with pytest.raises(FormatError, match="missing 'transactions'"):
            from_json_backup({"exportDate": "2024-01-05", "version": "1.0"})

    def test_transactions_must_be_a_list(self):
        with pytest.raises(FormatError, match="must be a list"):
            from_json_backup({"transactions": {"id": 1}})

    def test_document_must_be_an_object(self):
        with pytest.raises(FormatError):
            from_json_backup("[1, 2, 3]")

    def test_invalid_json_text(self):
        with pytest.raises(FormatError, match="not valid JSON"):
            from_json_backup("{not json")

    def test_reports_indices_of_invalid_records(self, make_transaction):
        good = make_transaction().to_record()
        document = {
            "transactions": [
                good,
                {**good, "id": 2, "amount": -5},
                {**good, "id": 3, "type": "transfer"},
                "not a record",
            ],
        }
        with pytest.raises(FormatError) as exc_info:
            from_json_backup(document)
        assert exc_info.value.indices == [1, 2, 3]
        assert "1, 2, 3" in str(exc_info.value)

    def test_rejects_duplicate_ids(self, make_transaction):
        record = make_transaction().to_record()
        with pytest.raises(FormatError) as exc_info:
            from_json_backup({"transactions": [record, record]})
        assert exc_info.value.indices == [1]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
