"""
Order records and grouping by order number.
"""

# Standard Library
import csv
import dataclasses
import pathlib
import typing


COLUMN_ORDER_ID = "Order #"
COLUMN_FULFILLMENT = "Fulfillment Type"
COLUMN_PAID = "Paid"
COLUMN_ITEM = "Item"
COLUMN_UNIT_SIZE = "Unit Size"
COLUMN_QUANTITY = "Quantity"
COLUMN_PRICE = "Price"
COLUMN_CUSTOMER = "Customer"
COLUMN_PICKUP_ADDRESS = "Pickup Address"
COLUMN_DELIVERY_ADDRESS = "Delivery Address"

REQUIRED_COLUMNS = (
	COLUMN_ORDER_ID,
	COLUMN_PAID,
	COLUMN_ITEM,
	COLUMN_CUSTOMER,
)


class GroupingInputError(ValueError):
	"""
	Raised when an order record is malformed at the source.
	"""


@dataclasses.dataclass(frozen=True)
class LineItem:
	order_id: int
	fulfillment: str | None
	paid: str
	item: str
	unit_size: str | None = None
	quantity: int | None = None
	price: str | None = None
	customer: str = ""
	pickup_address: str | None = None
	delivery_address: str | None = None


# line items of one order, in first-seen order
Order = list[LineItem]
OrderBatch = dict[int, Order]


#============================================
def group_line_items(items: typing.Iterable[LineItem]) -> OrderBatch:
	"""
	Group line items by order number.

	Args:
		items: Line items in source order.

	Returns:
		Mapping of order number to its line items. Orders keep the
		position of their first line; items keep their source order.
	"""
	batch: OrderBatch = {}
	for item in items:
		batch.setdefault(item.order_id, []).append(item)
	return batch


#============================================
def ensure_grouped(
	orders: typing.Mapping[int, typing.Sequence[LineItem]] | typing.Iterable[LineItem],
) -> OrderBatch:
	"""
	Accept grouped or flat input and return a checked OrderBatch.

	Args:
		orders: Either a mapping of order number to line items or a flat
			iterable of line items.

	Returns:
		OrderBatch.

	Raises:
		GroupingInputError: If a grouped item is filed under the wrong
			order number.
	"""
	if not isinstance(orders, typing.Mapping):
		return group_line_items(orders)
	batch: OrderBatch = {}
	for order_id, items in orders.items():
		for item in items:
			if item.order_id != order_id:
				raise GroupingInputError(
					f"Line item for order {item.order_id} filed under order {order_id}"
				)
		batch[order_id] = list(items)
	return batch


#============================================
def _optional_text(row: dict[str, str | None], column: str) -> str | None:
	value = row.get(column)
	if value is None:
		return None
	value = value.strip()
	if not value:
		return None
	return value


#============================================
def _parse_int(value: str | None, column: str, line_number: int, path: str) -> int | None:
	"""
	Parse an integer cell.

	Args:
		value: Cell text or None.
		column: Column name for error messages.
		line_number: CSV line number for error messages.
		path: CSV path for error messages.

	Returns:
		Parsed integer or None for a blank cell.
	"""
	if value is None:
		return None
	try:
		number = int(value)
	except ValueError as error:
		raise GroupingInputError(
			f"Line {line_number} of {path}: {column} is not a whole number: {value!r}"
		) from error
	if number < 0:
		raise GroupingInputError(
			f"Line {line_number} of {path}: {column} is negative: {number}"
		)
	return number


#============================================
def parse_line_item(row: dict[str, str | None], line_number: int, path: str) -> LineItem:
	"""
	Convert one CSV row into a LineItem.

	Args:
		row: Row from csv.DictReader.
		line_number: CSV line number.
		path: CSV path.

	Returns:
		LineItem.
	"""
	for column in REQUIRED_COLUMNS:
		if row.get(column) is None:
			raise GroupingInputError(f"Line {line_number} of {path}: missing {column}")
	order_id = _parse_int(_optional_text(row, COLUMN_ORDER_ID), COLUMN_ORDER_ID, line_number, path)
	if order_id is None:
		raise GroupingInputError(f"Line {line_number} of {path}: blank {COLUMN_ORDER_ID}")
	quantity = _parse_int(_optional_text(row, COLUMN_QUANTITY), COLUMN_QUANTITY, line_number, path)
	return LineItem(
		order_id=order_id,
		fulfillment=_optional_text(row, COLUMN_FULFILLMENT),
		paid=(row[COLUMN_PAID] or "").strip(),
		item=(row[COLUMN_ITEM] or "").strip(),
		unit_size=_optional_text(row, COLUMN_UNIT_SIZE),
		quantity=quantity,
		price=_optional_text(row, COLUMN_PRICE),
		customer=(row[COLUMN_CUSTOMER] or "").strip(),
		pickup_address=_optional_text(row, COLUMN_PICKUP_ADDRESS),
		delivery_address=_optional_text(row, COLUMN_DELIVERY_ADDRESS),
	)


#============================================
def read_line_items(path: pathlib.Path) -> list[LineItem]:
	"""
	Read line items from an order export CSV.

	Args:
		path: CSV path.

	Returns:
		Line items in file order.
	"""
	items: list[LineItem] = []
	with path.open("r", encoding="utf-8-sig", newline="") as handle:
		reader = csv.DictReader(handle)
		header = reader.fieldnames or []
		missing = [column for column in REQUIRED_COLUMNS if column not in header]
		if missing:
			raise GroupingInputError(f"{path}: missing columns {', '.join(missing)}")
		try:
			for row in reader:
				items.append(parse_line_item(row, reader.line_num, str(path)))
		except csv.Error as error:
			raise GroupingInputError(f"Line {reader.line_num} of {path}: {error}") from error
	return items


#============================================
def read_orders_csv(path: pathlib.Path) -> OrderBatch:
	"""
	Read and group an order export CSV.

	Args:
		path: CSV path.

	Returns:
		OrderBatch.
	"""
	return group_line_items(read_line_items(path))
