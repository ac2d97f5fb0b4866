"""
Shared configuration and constants.
"""

import dataclasses


POINTS_PER_INCH = 72.0

# 4x6 inch shipping label
DEFAULT_LABEL_WIDTH = 4.0 * POINTS_PER_INCH
DEFAULT_LABEL_HEIGHT = 6.0 * POINTS_PER_INCH
DEFAULT_MARGIN = 18.0
DEFAULT_ROW_SPACING = 3.0

CUSTOMER_TEXT_SIZE = 22.0
FULFILLMENT_TEXT_SIZE = 18.0
ORDER_ID_TEXT_SIZE = 12.0
COLUMN_HEADING_TEXT_SIZE = 10.0
ITEM_TEXT_SIZE = 13.0
QUANTITY_TEXT_SIZE = 11.0
UNIT_TEXT_SIZE = 10.0
DEFAULT_TEXT_MIN_SIZE = 12.0

# column offsets from the left margin
DEFAULT_QUANTITY_OFFSET = 162.0
DEFAULT_UNIT_OFFSET = 194.0

# vertical span below the headings available to item rows
LABEL_FIT_HEIGHT = 308.0

DESCRIPTION_MAX_CHARS = 23
DESCRIPTION_KEEP_CHARS = 21
DESCRIPTION_ELLIPSIS = ".."
DELIVERY_MARKER = "Delivery"

SEPARATOR_THICKNESS = 0.75

DEFAULT_FONT_REGULAR = "Helvetica"
DEFAULT_FONT_BOLD = "Helvetica-Bold"
FONT_ENCODING = "WinAnsiEncoding"
TEXT_CODEC = "cp1252"

COLUMN_HEADINGS = ("Item", "Qty", "Unit")
PART_MARKER_FORMAT = "Part {part}/{total}"

PDF_VERSION = "1.5"
PROGRESS_BAR_WIDTH = 20
PROGRESS_UPDATE_EVERY = 10

MISSING_FULFILLMENT_ABORT = "abort"
MISSING_FULFILLMENT_SKIP = "skip"


@dataclasses.dataclass
class LayoutConfig:
	label_width: float
	label_height: float
	margin: float
	row_spacing: float
	customer_size: float
	fulfillment_size: float
	order_id_size: float
	heading_size: float
	item_size: float
	quantity_size: float
	unit_size: float
	quantity_offset: float
	unit_offset: float
	label_fit_height: float
	separator_thickness: float
	font_regular: str
	font_bold: str
	fit_heading_text: bool
	min_heading_size: float


@dataclasses.dataclass
class RunConfig:
	layout: LayoutConfig
	compress: bool
	missing_fulfillment_policy: str
	manifest_path: str | None


@dataclasses.dataclass
class RenderResult:
	order_count: int
	pages: int
	split_orders: list[int]
	skipped_orders: list[int]
	overflow_pages: int


#============================================
def build_default_layout() -> LayoutConfig:
	"""
	Build the canonical 4x6 inch label layout.

	Returns:
		LayoutConfig.
	"""
	return LayoutConfig(
		label_width=DEFAULT_LABEL_WIDTH,
		label_height=DEFAULT_LABEL_HEIGHT,
		margin=DEFAULT_MARGIN,
		row_spacing=DEFAULT_ROW_SPACING,
		customer_size=CUSTOMER_TEXT_SIZE,
		fulfillment_size=FULFILLMENT_TEXT_SIZE,
		order_id_size=ORDER_ID_TEXT_SIZE,
		heading_size=COLUMN_HEADING_TEXT_SIZE,
		item_size=ITEM_TEXT_SIZE,
		quantity_size=QUANTITY_TEXT_SIZE,
		unit_size=UNIT_TEXT_SIZE,
		quantity_offset=DEFAULT_QUANTITY_OFFSET,
		unit_offset=DEFAULT_UNIT_OFFSET,
		label_fit_height=LABEL_FIT_HEIGHT,
		separator_thickness=SEPARATOR_THICKNESS,
		font_regular=DEFAULT_FONT_REGULAR,
		font_bold=DEFAULT_FONT_BOLD,
		fit_heading_text=True,
		min_heading_size=DEFAULT_TEXT_MIN_SIZE,
	)


#============================================
def build_default_run_config() -> RunConfig:
	"""
	Build a run config with the default layout.

	Returns:
		RunConfig.
	"""
	return RunConfig(
		layout=build_default_layout(),
		compress=True,
		missing_fulfillment_policy=MISSING_FULFILLMENT_ABORT,
		manifest_path=None,
	)
