import pathlib

import pytest

import conftest
import order_label_converter.orders


CSV_HEADER = (
	"Order #,Fulfillment Type,Paid,Item,Unit Size,Quantity,Price,Customer,"
	"Pickup Address,Delivery Address\n"
)


#============================================
def _write_csv(tmp_path: pathlib.Path, rows: list[str]) -> pathlib.Path:
	"""
	Write an order export CSV with the standard header.

	Args:
		tmp_path: Temporary directory.
		rows: CSV data rows.

	Returns:
		CSV path.
	"""
	path = tmp_path / "orders.csv"
	path.write_text(CSV_HEADER + "".join(rows), encoding="utf-8")
	return path


#============================================
def test_group_line_items_keeps_first_seen_order() -> None:
	"""
	Orders keep the position of their first line and items keep source order.
	"""
	items = [
		conftest.make_item(order_id=7, item="A"),
		conftest.make_item(order_id=3, item="B"),
		conftest.make_item(order_id=7, item="C"),
	]
	batch = order_label_converter.orders.group_line_items(items)
	assert list(batch.keys()) == [7, 3]
	assert [item.item for item in batch[7]] == ["A", "C"]
	assert [item.item for item in batch[3]] == ["B"]


#============================================
def test_ensure_grouped_accepts_flat_items() -> None:
	items = [conftest.make_item(order_id=1), conftest.make_item(order_id=2)]
	batch = order_label_converter.orders.ensure_grouped(items)
	assert sorted(batch) == [1, 2]


#============================================
def test_ensure_grouped_rejects_misfiled_item() -> None:
	"""
	A line item stored under another order number is a grouping error.
	"""
	batch = {1: [conftest.make_item(order_id=2)]}
	with pytest.raises(order_label_converter.orders.GroupingInputError):
		order_label_converter.orders.ensure_grouped(batch)


#============================================
def test_read_orders_csv_parses_optional_fields(tmp_path: pathlib.Path) -> None:
	path = _write_csv(
		tmp_path,
		[
			"1001,Pickup,Yes,Pasture Eggs,Dozen,2,$12.00,Jane Doe,12 Farm Lane,\n",
			"1001,,Yes,Delivery Fee,,,$5.00,Jane Doe,,\n",
			"1002,Delivery,No,Honey,16 oz,1,$9.00,Sam Roe,,4 Main St\n",
		],
	)
	batch = order_label_converter.orders.read_orders_csv(path)
	assert list(batch.keys()) == [1001, 1002]
	eggs, fee = batch[1001]
	assert eggs.quantity == 2
	assert eggs.unit_size == "Dozen"
	assert eggs.pickup_address == "12 Farm Lane"
	assert eggs.delivery_address is None
	assert fee.fulfillment is None
	assert fee.quantity is None
	assert fee.unit_size is None
	assert batch[1002][0].delivery_address == "4 Main St"


#============================================
def test_read_orders_csv_rejects_bad_quantity(tmp_path: pathlib.Path) -> None:
	path = _write_csv(tmp_path, ["1001,Pickup,Yes,Eggs,Dozen,two,$6.00,Jane Doe,,\n"])
	with pytest.raises(order_label_converter.orders.GroupingInputError, match="Quantity"):
		order_label_converter.orders.read_orders_csv(path)


#============================================
def test_read_orders_csv_rejects_bad_order_number(tmp_path: pathlib.Path) -> None:
	path = _write_csv(tmp_path, ["A-1,Pickup,Yes,Eggs,Dozen,1,$6.00,Jane Doe,,\n"])
	with pytest.raises(order_label_converter.orders.GroupingInputError, match="Order #"):
		order_label_converter.orders.read_orders_csv(path)


#============================================
def test_read_orders_csv_rejects_missing_columns(tmp_path: pathlib.Path) -> None:
	path = tmp_path / "orders.csv"
	path.write_text("Order #,Item\n1,Eggs\n", encoding="utf-8")
	with pytest.raises(order_label_converter.orders.GroupingInputError, match="missing columns"):
		order_label_converter.orders.read_orders_csv(path)
