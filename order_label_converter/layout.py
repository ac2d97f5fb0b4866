"""
Label layout planning: row positions, item filtering, and split decisions.
"""

# Standard Library
import dataclasses
import enum

# PIP3 modules
import reportlab.pdfbase.pdfmetrics

# local repo modules
import order_label_converter as olc
import order_label_converter.config
import order_label_converter.orders


LayoutConfig = olc.config.LayoutConfig
LineItem = olc.orders.LineItem
Order = olc.orders.Order

DESCRIPTION_MAX_CHARS = olc.config.DESCRIPTION_MAX_CHARS
DESCRIPTION_KEEP_CHARS = olc.config.DESCRIPTION_KEEP_CHARS
DESCRIPTION_ELLIPSIS = olc.config.DESCRIPTION_ELLIPSIS
DELIVERY_MARKER = olc.config.DELIVERY_MARKER
PART_MARKER_FORMAT = olc.config.PART_MARKER_FORMAT


class MissingFulfillmentError(ValueError):
	"""
	Raised when no line item of an order carries a fulfillment type.
	"""

	def __init__(self, order_id: int):
		super().__init__(f"Order {order_id} has no fulfillment type on any line")
		self.order_id = order_id


class SplitPart(enum.IntEnum):
	NONE = 0
	FIRST = 1
	SECOND = 2


@dataclasses.dataclass
class ItemRow:
	description: str
	quantity: str | None
	unit: str | None
	y: float


@dataclasses.dataclass
class HeadingRow:
	text: str
	font_size: float
	y: float


@dataclasses.dataclass
class PagePlan:
	order_id: int
	part: SplitPart
	customer: HeadingRow
	fulfillment: HeadingRow
	order_label: HeadingRow
	column_heading_y: float
	items: list[ItemRow]
	bottom_rule_y: float
	bottom_limit: float

	@property
	def overflows(self) -> bool:
		return self.bottom_rule_y < self.bottom_limit


#============================================
def next_row_y(previous_y: float, font_size: float, row_spacing: float) -> float:
	"""
	Step one row down the label.

	Args:
		previous_y: Baseline of the row above.
		font_size: Font size of the new row.
		row_spacing: Gap between rows.

	Returns:
		Baseline y of the new row.
	"""
	return previous_y - font_size - row_spacing


#============================================
def compute_heading_positions(layout: LayoutConfig) -> tuple[float, float, float, float]:
	"""
	Compute heading baselines from the top margin down.

	Args:
		layout: Layout configuration.

	Returns:
		Tuple of (customer_y, fulfillment_y, order_id_y, column_heading_y).
	"""
	top_y = layout.label_height - layout.margin
	customer_y = next_row_y(top_y, layout.customer_size, layout.row_spacing)
	fulfillment_y = next_row_y(customer_y, layout.fulfillment_size, layout.row_spacing)
	order_id_y = next_row_y(fulfillment_y, layout.order_id_size, layout.row_spacing)
	heading_y = next_row_y(order_id_y, layout.heading_size, layout.row_spacing)
	return (customer_y, fulfillment_y, order_id_y, heading_y)


#============================================
def is_printable(item: LineItem) -> bool:
	"""
	Check whether a line item gets its own row on the label.

	Args:
		item: Line item.

	Returns:
		False for continuation rows and delivery charges.
	"""
	if item.fulfillment is None:
		return False
	if DELIVERY_MARKER in item.item:
		return False
	return True


#============================================
def filter_line_items(order: Order) -> list[LineItem]:
	"""
	Keep the line items that are printed as rows.

	Args:
		order: Line items of one order.

	Returns:
		Printable line items in order.
	"""
	return [item for item in order if is_printable(item)]


#============================================
def truncate_description(text: str) -> str:
	"""
	Shorten a long item description to fit the item column.

	Args:
		text: Item description.

	Returns:
		The text unchanged, or its first characters plus an ellipsis.
	"""
	if len(text) <= DESCRIPTION_MAX_CHARS:
		return text
	return text[:DESCRIPTION_KEEP_CHARS] + DESCRIPTION_ELLIPSIS


#============================================
def resolve_fulfillment(order_id: int, order: Order) -> str:
	"""
	Pick the fulfillment type shown in the label heading.

	The first line wins, then the last line, then the first other line
	that carries a value.

	Args:
		order_id: Order number for the error message.
		order: Line items of one order.

	Returns:
		Fulfillment type text.

	Raises:
		MissingFulfillmentError: If no line carries a fulfillment type.
	"""
	if order:
		candidates = [order[0], order[-1]] + list(order[1:-1])
		for item in candidates:
			if item.fulfillment is not None:
				return item.fulfillment
	raise MissingFulfillmentError(order_id)


#============================================
def usable_height(layout: LayoutConfig) -> float:
	"""
	Vertical span available to item rows.
	"""
	return layout.label_fit_height - layout.margin


#============================================
def fits_single_label(item_count: int, layout: LayoutConfig) -> bool:
	"""
	Check whether a number of item rows fits on one label.

	Args:
		item_count: Number of printable items.
		layout: Layout configuration.

	Returns:
		True if one label holds every row.
	"""
	row_height = layout.item_size + layout.row_spacing
	return item_count * row_height <= usable_height(layout)


#============================================
def split_items(items: list[LineItem]) -> tuple[list[LineItem], list[LineItem]]:
	"""
	Split items into two halves, the second taking any odd item.
	"""
	split_point = len(items) // 2
	return (items[:split_point], items[split_point:])


#============================================
def fit_text_size(text: str, font_name: str, font_size: float, max_width: float, layout: LayoutConfig) -> float:
	"""
	Shrink a heading font size so the text stays inside the margins.

	Args:
		text: Heading text.
		font_name: ReportLab font name.
		font_size: Nominal font size.
		max_width: Available width in points.
		layout: Layout configuration.

	Returns:
		Font size to draw with.
	"""
	if not layout.fit_heading_text or not text:
		return font_size
	width = reportlab.pdfbase.pdfmetrics.stringWidth(text, font_name, font_size)
	if width <= max_width:
		return font_size
	target_size = font_size * max_width / width
	return max(layout.min_heading_size, target_size)


#============================================
def format_customer(customer: str, part: SplitPart) -> str:
	"""
	Append the split marker to the customer name for split labels.
	"""
	if part == SplitPart.NONE:
		return customer
	marker = PART_MARKER_FORMAT.format(part=int(part), total=2)
	return f"{customer} - {marker}"


#============================================
def plan_page(
	order_id: int,
	customer: str,
	fulfillment: str,
	items: list[LineItem],
	part: SplitPart,
	layout: LayoutConfig,
) -> PagePlan:
	"""
	Lay out the headings and item rows of one label page.

	Args:
		order_id: Order number.
		customer: Customer name.
		fulfillment: Resolved fulfillment type.
		items: Printable items for this page.
		part: Which half of a split order this page is.
		layout: Layout configuration.

	Returns:
		PagePlan.
	"""
	customer_y, fulfillment_y, order_id_y, heading_y = compute_heading_positions(layout)
	max_width = layout.label_width - 2.0 * layout.margin

	customer_text = format_customer(customer, part)
	customer_size = fit_text_size(
		customer_text, layout.font_bold, layout.customer_size, max_width, layout,
	)
	fulfillment_size = fit_text_size(
		fulfillment, layout.font_bold, layout.fulfillment_size, max_width, layout,
	)

	rows: list[ItemRow] = []
	row_y = heading_y
	for item in items:
		row_y = next_row_y(row_y, layout.item_size, layout.row_spacing)
		quantity = None
		if item.quantity is not None:
			quantity = str(item.quantity)
		rows.append(
			ItemRow(
				description=truncate_description(item.item),
				quantity=quantity,
				unit=item.unit_size,
				y=row_y,
			)
		)
	bottom_rule_y = heading_y
	if rows:
		bottom_rule_y = rows[-1].y - layout.row_spacing

	return PagePlan(
		order_id=order_id,
		part=part,
		customer=HeadingRow(customer_text, customer_size, customer_y),
		fulfillment=HeadingRow(fulfillment, fulfillment_size, fulfillment_y),
		order_label=HeadingRow(f"Order #{order_id}", layout.order_id_size, order_id_y),
		column_heading_y=heading_y,
		items=rows,
		bottom_rule_y=bottom_rule_y,
		bottom_limit=layout.margin,
	)


#============================================
def plan_order(order_id: int, order: Order, layout: LayoutConfig) -> list[PagePlan]:
	"""
	Plan the label pages for one order.

	Args:
		order_id: Order number.
		order: Line items of the order.
		layout: Layout configuration.

	Returns:
		One PagePlan, or two when the items do not fit one label.

	Raises:
		MissingFulfillmentError: If no line carries a fulfillment type.
	"""
	fulfillment = resolve_fulfillment(order_id, order)
	customer = order[0].customer
	items = filter_line_items(order)
	if fits_single_label(len(items), layout):
		return [plan_page(order_id, customer, fulfillment, items, SplitPart.NONE, layout)]
	first_half, second_half = split_items(items)
	return [
		plan_page(order_id, customer, fulfillment, first_half, SplitPart.FIRST, layout),
		plan_page(order_id, customer, fulfillment, second_half, SplitPart.SECOND, layout),
	]
