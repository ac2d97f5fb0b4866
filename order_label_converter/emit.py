"""
Drawing primitives for one label page and their content-stream encoding.
"""

# Standard Library
import dataclasses

# PIP3 modules
import pypdf.generic

# local repo modules
import order_label_converter as olc
import order_label_converter.config
import order_label_converter.layout


LayoutConfig = olc.config.LayoutConfig
PagePlan = olc.layout.PagePlan
SplitPart = olc.layout.SplitPart

COLUMN_HEADINGS = olc.config.COLUMN_HEADINGS
TEXT_CODEC = olc.config.TEXT_CODEC

FONT_REGULAR = "regular"
FONT_BOLD = "bold"
FONT_RESOURCE_KEYS = {
	FONT_REGULAR: "/F1",
	FONT_BOLD: "/F2",
}


@dataclasses.dataclass
class TextBlock:
	font: str
	size: float
	x: float
	y: float
	text: str


@dataclasses.dataclass
class RuledLine:
	width: float
	x0: float
	x1: float
	y: float


Primitive = TextBlock | RuledLine


@dataclasses.dataclass
class LabelPage:
	order_id: int
	part: SplitPart
	primitives: list[Primitive] = dataclasses.field(default_factory=list)
	overflows: bool = False

	@property
	def text_blocks(self) -> list[TextBlock]:
		return [prim for prim in self.primitives if isinstance(prim, TextBlock)]

	@property
	def ruled_lines(self) -> list[RuledLine]:
		return [prim for prim in self.primitives if isinstance(prim, RuledLine)]


#============================================
def emit_rule(page: LabelPage, y: float, layout: LayoutConfig) -> None:
	"""
	Append a full-width ruled line between the margins.

	Args:
		page: LabelPage being built.
		y: Line y position.
		layout: Layout configuration.
	"""
	page.primitives.append(
		RuledLine(
			width=layout.separator_thickness,
			x0=layout.margin,
			x1=layout.label_width - layout.margin,
			y=y,
		)
	)


#============================================
def emit_label_page(plan: PagePlan, layout: LayoutConfig) -> LabelPage:
	"""
	Turn a page plan into drawing primitives.

	Headings come first, then the column headings, then one row per item
	with a rule above every row and one more below the last row.

	Args:
		plan: PagePlan from the layout planner.
		layout: Layout configuration.

	Returns:
		LabelPage.
	"""
	page = LabelPage(order_id=plan.order_id, part=plan.part, overflows=plan.overflows)
	left_x = layout.margin
	quantity_x = layout.margin + layout.quantity_offset
	unit_x = layout.margin + layout.unit_offset

	for heading in (plan.customer, plan.fulfillment):
		page.primitives.append(TextBlock(FONT_BOLD, heading.font_size, left_x, heading.y, heading.text))
	order_label = plan.order_label
	page.primitives.append(
		TextBlock(FONT_REGULAR, order_label.font_size, left_x, order_label.y, order_label.text)
	)

	item_heading, quantity_heading, unit_heading = COLUMN_HEADINGS
	for x, text in ((left_x, item_heading), (quantity_x, quantity_heading), (unit_x, unit_heading)):
		page.primitives.append(TextBlock(FONT_BOLD, layout.heading_size, x, plan.column_heading_y, text))

	# rule sits between the previous baseline and the cap height of the row
	rule_rise = layout.item_size - layout.row_spacing / 2.0
	for row in plan.items:
		emit_rule(page, row.y + rule_rise, layout)
		page.primitives.append(TextBlock(FONT_REGULAR, layout.item_size, left_x, row.y, row.description))
		if row.quantity is not None:
			page.primitives.append(TextBlock(FONT_REGULAR, layout.quantity_size, quantity_x, row.y, row.quantity))
		if row.unit is not None:
			page.primitives.append(TextBlock(FONT_REGULAR, layout.unit_size, unit_x, row.y, row.unit))
	if plan.items:
		emit_rule(page, plan.bottom_rule_y, layout)
	return page


#============================================
def encode_text(text: str) -> pypdf.generic.ByteStringObject:
	"""
	Encode text for a WinAnsi standard font.

	Characters outside the code page become question marks.
	"""
	return pypdf.generic.ByteStringObject(text.encode(TEXT_CODEC, errors="replace"))


#============================================
def primitive_operations(primitive: Primitive) -> list[tuple[list, bytes]]:
	"""
	Convert one primitive into content-stream operations.

	Args:
		primitive: TextBlock or RuledLine.

	Returns:
		List of (operands, operator) pairs.
	"""
	number = pypdf.generic.FloatObject
	if isinstance(primitive, TextBlock):
		font_key = pypdf.generic.NameObject(FONT_RESOURCE_KEYS[primitive.font])
		return [
			([], b"BT"),
			([font_key, number(primitive.size)], b"Tf"),
			([number(primitive.x), number(primitive.y)], b"Td"),
			([encode_text(primitive.text)], b"Tj"),
			([], b"ET"),
		]
	return [
		([number(primitive.width)], b"w"),
		([number(primitive.x0), number(primitive.y)], b"m"),
		([number(primitive.x1), number(primitive.y)], b"l"),
		([], b"S"),
	]


#============================================
def encode_primitives(primitives: list[Primitive]) -> bytes:
	"""
	Encode a primitive list as PDF content-stream bytes.

	Args:
		primitives: Primitives in paint order.

	Returns:
		Uncompressed content-stream data.
	"""
	content = pypdf.generic.ContentStream(None, None)
	operations: list[tuple[list, bytes]] = []
	for primitive in primitives:
		operations.extend(primitive_operations(primitive))
	content.operations = operations
	return content.get_data()
