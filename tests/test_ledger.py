from datetime import datetime, timedelta, timezone
from decimal import Decimal
from types import SimpleNamespace

from ledger import LedgerSummary, group_by_month, month_key, summarize


def entry(amount: str, when: datetime, ident: str = "") -> SimpleNamespace:
    return SimpleNamespace(id=ident, amount=Decimal(amount), date=when)


def test_total_is_exact_decimal_sum() -> None:
    items = [entry("0.10", datetime(2024, 1, 1)) for _ in range(10)]
    items.append(entry("0.20", datetime(2024, 2, 1)))

    summary = summarize(items)

    assert summary.total == Decimal("1.20")
    assert summary.total == sum((i.amount for i in items), Decimal("0"))


def test_every_transaction_lands_in_exactly_one_bucket() -> None:
    items = [
        entry("1.00", datetime(2024, 3, 31, 23, 59, 59), "a"),
        entry("2.00", datetime(2024, 4, 1, 0, 0), "b"),
        entry("3.00", datetime(2023, 12, 15), "c"),
        entry("4.00", datetime(2024, 3, 1), "d"),
    ]

    grouped = group_by_month(items)

    assert set(grouped) == {"2024-03", "2024-04", "2023-12"}
    flat = [txn.id for bucket in grouped.values() for txn in bucket]
    assert sorted(flat) == ["a", "b", "c", "d"]


def test_grouping_keeps_input_order_and_first_seen_keys() -> None:
    items = [
        entry("5.00", datetime(2024, 4, 1), "apr"),
        entry("25.00", datetime(2024, 3, 20), "mar-20"),
        entry("10.50", datetime(2024, 3, 5), "mar-05"),
    ]

    grouped = group_by_month(items)

    assert list(grouped) == ["2024-04", "2024-03"]
    assert [t.id for t in grouped["2024-03"]] == ["mar-20", "mar-05"]


def test_empty_ledger_is_not_an_error() -> None:
    summary = summarize([])

    assert summary.transactions == {}
    assert summary.total == 0
    assert summary.count == 0
    assert summary.current_month is None
    assert summary.sorted_months() == []


def test_month_key_uses_utc_for_aware_datetimes() -> None:
    berlin_summer = timezone(timedelta(hours=2))
    assert month_key(datetime(2024, 4, 1, 1, 0, tzinfo=berlin_summer)) == "2024-03"
    assert month_key(datetime(2024, 4, 1, 1, 0)) == "2024-04"
    assert month_key(datetime(987, 7, 4)) == "0987-07"


def test_month_totals_and_sorted_months() -> None:
    summary = summarize(
        [
            entry("5.00", datetime(2024, 4, 1)),
            entry("25.00", datetime(2024, 3, 20)),
            entry("10.50", datetime(2024, 3, 5)),
            entry("1.00", datetime(2023, 11, 2)),
        ],
        current_month="2024-03",
    )

    assert summary.sorted_months() == ["2024-04", "2024-03", "2023-11"]
    assert summary.month_totals == {
        "2024-04": Decimal("5.00"),
        "2024-03": Decimal("35.50"),
        "2023-11": Decimal("1.00"),
    }
    assert summary.month_total("2024-03") == Decimal("35.50")
    assert summary.month_total("1999-01") == 0
    assert summary.count == 4
    assert summary.current_month == "2024-03"



def test_summary_defaults() -> None:
    assert LedgerSummary().total == Decimal("0.00")
