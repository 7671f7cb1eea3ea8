import pytest

from shipping_distance.errors import InvalidArgumentError
from shipping_distance.services.rates.fields import default_rate_fields
from shipping_distance.services.rates.table import move_row, validate_table_rates


def test_clean_rows_get_defaults_and_are_sorted_by_rules():
    rows = [
        {"max_distance": "10", "rate_class_0": "3"},
        {"max_distance": "5", "min_order_quantity": "3", "rate_class_0": "2"},
        {"max_distance": " 5 ", "min_order_quantity": "1", "rate_class_0": "1", "title": "Near"},
    ]

    clean, issues = validate_table_rates(rows)

    assert issues == []
    assert [row["rate_class_0"] for row in clean] == ["1", "2", "3"]
    assert clean[0]["max_distance"] == "5"
    assert clean[0]["title"] == "Near"
    assert clean[2]["min_order_amount"] == "0"
    assert clean[2]["total_cost_type"] == "inherit"


def test_row_issues_carry_row_number():
    rows = [
        {"max_distance": "5", "rate_class_0": "1"},
        {"max_distance": "", "rate_class_0": "-1", "surcharge_type": "bonus", "discount": "lots"},
    ]

    _, issues = validate_table_rates(rows)
    messages = {issue.field: issue.message for issue in issues}

    assert {issue.row for issue in issues} == {2}
    assert messages["max_distance"] == "Table rates row 2: Maximum Distances field is required."
    assert messages["rate_class_0"] == "Table rates row 2: Distance Unit Rate cannot be less than 0."
    assert messages["surcharge_type"] == "Table rates row 2: Surcharge Type has an invalid value: bonus."
    assert messages["discount"] == "Table rates row 2: Discount must be a number."


def test_max_distance_must_be_at_least_one():
    _, issues = validate_table_rates([{"max_distance": "0.5"}])

    assert [issue.message for issue in issues] == ["Table rates row 1: Maximum Distances cannot be less than 1."]


def test_duplicate_rule_combinations_are_reported():
    rows = [
        {"max_distance": "5", "min_order_amount": "100", "rate_class_0": "1"},
        {"max_distance": "8", "rate_class_0": "2"},
        {"max_distance": "5", "min_order_amount": "100", "rate_class_0": "3"},
    ]

    _, issues = validate_table_rates(rows)

    assert len(issues) == 1
    assert issues[0].field == "table_rates"
    assert issues[0].row == 3
    assert "Row 3 duplicates row 1" in issues[0].message
    assert "Minimum Order Amount: 100" in issues[0].message


def test_empty_table_is_rejected():
    _, issues = validate_table_rates([])

    assert [issue.to_dict() for issue in issues] == [
        {"field": "table_rates", "message": "Shipping rates table is empty"}
    ]


def test_class_rate_columns_are_optional():
    fields = default_rate_fields([(4, "Bulky")])

    clean, issues = validate_table_rates([{"max_distance": "5", "rate_class_4": ""}], fields)

    assert issues == []
    assert clean[0]["rate_class_4"] == ""


def test_unknown_total_cost_type_is_rejected():
    _, issues = validate_table_rates([{"max_distance": "5", "total_cost_type": "flat__median"}])

    assert issues[0].field == "total_cost_type"


def test_move_row_swaps_rows_with_same_max_distance():
    rows = [{"max_distance": "5", "title": "a"}, {"max_distance": "5", "title": "b"}, {"max_distance": "9", "title": "c"}]

    moved = move_row(rows, 1, -1)

    assert [row["title"] for row in moved] == ["b", "a", "c"]
    assert [row["title"] for row in rows] == ["a", "b", "c"]


@pytest.mark.parametrize("index, offset", [(1, 1), (0, -1), (2, 1), (0, 2)])
def test_move_row_rejects_invalid_moves(index, offset):
    rows = [{"max_distance": "5"}, {"max_distance": "5"}, {"max_distance": "9"}]

    with pytest.raises(InvalidArgumentError):
        move_row(rows, index, offset)


def test_override_columns_accept_inherit():
    row = {"max_distance": "5", "surcharge": "inherit", "min_cost": "inherit", "title": "inherit"}

    clean, issues = validate_table_rates([row])

    assert issues == []
    assert clean[0]["surcharge"] == "inherit"


def test_inherit_is_not_a_valid_rate():
    _, issues = validate_table_rates([{"max_distance": "5", "rate_class_0": "inherit"}])

    assert [issue.field for issue in issues] == ["rate_class_0"]
