"""
Label rendering pipeline: orders in, one label PDF out.
"""

# Standard Library
import json
import pathlib
import typing

# local repo modules
import order_label_converter as olc
import order_label_converter.config
import order_label_converter.document
import order_label_converter.emit
import order_label_converter.layout
import order_label_converter.orders
import order_label_converter.report


RunConfig = olc.config.RunConfig
RenderResult = olc.config.RenderResult
LabelPage = olc.emit.LabelPage
LineItem = olc.orders.LineItem
OrderBatch = olc.orders.OrderBatch

PROGRESS_BAR_WIDTH = olc.config.PROGRESS_BAR_WIDTH
PROGRESS_UPDATE_EVERY = olc.config.PROGRESS_UPDATE_EVERY
MISSING_FULFILLMENT_ABORT = olc.config.MISSING_FULFILLMENT_ABORT
MISSING_FULFILLMENT_SKIP = olc.config.MISSING_FULFILLMENT_SKIP


#============================================
def print_progress(prefix: str, current: int, total: int) -> None:
	"""
	Print a simple progress bar.

	Args:
		prefix: Label text.
		current: Current count.
		total: Total count.
	"""
	if total <= 0:
		return
	percent = int(round((current / total) * 100.0))
	filled = int(round(PROGRESS_BAR_WIDTH * percent / 100.0))
	bar = "#" * filled + "-" * (PROGRESS_BAR_WIDTH - filled)
	print(f"{prefix} [{bar}] {current}/{total} ({percent}%)", end="\r")


#============================================
def build_label_pages(
	batch: OrderBatch,
	config: RunConfig,
	verbose: bool = False,
) -> tuple[list[LabelPage], RenderResult]:
	"""
	Plan and emit the label pages for every order in the batch.

	Args:
		batch: Orders keyed by order number.
		config: Run configuration.
		verbose: Print progress and warnings.

	Returns:
		Tuple of (pages in output order, RenderResult).

	Raises:
		MissingFulfillmentError: Under the abort policy, for the first
			order with no fulfillment type.
	"""
	if config.missing_fulfillment_policy not in (MISSING_FULFILLMENT_ABORT, MISSING_FULFILLMENT_SKIP):
		raise ValueError(f"Unknown missing fulfillment policy: {config.missing_fulfillment_policy}")
	layout = config.layout
	pages: list[LabelPage] = []
	split_orders: list[int] = []
	skipped_orders: list[int] = []
	messages: list[str] = []
	total = len(batch)
	if verbose and total > 0:
		print_progress("Orders", 0, total)
	for index, (order_id, order) in enumerate(batch.items(), start=1):
		try:
			plans = olc.layout.plan_order(order_id, order, layout)
		except olc.layout.MissingFulfillmentError as error:
			if config.missing_fulfillment_policy == MISSING_FULFILLMENT_ABORT:
				raise
			skipped_orders.append(order_id)
			messages.append(f"Skipped: {error}")
			continue
		if len(plans) > 1:
			split_orders.append(order_id)
		for plan in plans:
			page = olc.emit.emit_label_page(plan, layout)
			if page.overflows:
				messages.append(
					f"Order {order_id} part {int(page.part)}: rows run past the bottom margin"
				)
			pages.append(page)
		if verbose and (index % PROGRESS_UPDATE_EVERY == 0 or index == total):
			print_progress("Orders", index, total)
	if verbose:
		if total > 0:
			print()
		for message in messages:
			print(message)

	result = RenderResult(
		order_count=total,
		pages=len(pages),
		split_orders=split_orders,
		skipped_orders=skipped_orders,
		overflow_pages=sum(1 for page in pages if page.overflows),
	)
	return (pages, result)


#============================================
def render_orders_to_pdf(
	output_path: pathlib.Path | str,
	orders: typing.Mapping[int, typing.Sequence[LineItem]] | typing.Iterable[LineItem],
	config: RunConfig,
	verbose: bool = False,
) -> olc.report.Success | olc.report.Failure:
	"""
	Render a batch of orders into one label PDF.

	Args:
		output_path: Destination PDF path.
		orders: Grouped orders or a flat list of line items.
		config: Run configuration.
		verbose: Print progress and warnings.

	Returns:
		Success naming the destination, or a classified Failure.
	"""
	output_path = pathlib.Path(output_path)
	try:
		batch = olc.orders.ensure_grouped(orders)
	except olc.orders.GroupingInputError as error:
		return olc.report.report_grouping_error(str(output_path), error)

	try:
		pages, result = build_label_pages(batch, config, verbose=verbose)
	except olc.layout.MissingFulfillmentError as error:
		return olc.report.report_missing_fulfillment(str(output_path), error)
	if not pages:
		return olc.report.report_no_labels(str(output_path))

	assembler = olc.document.DocumentAssembler(config.layout, compress=config.compress)
	for page in pages:
		assembler.add_page(page)
	assembler.finalize()
	try:
		assembler.save(output_path)
	except OSError as error:
		return olc.report.report_save_error(str(output_path), error)
	return olc.report.report_success(str(output_path), assembler.page_count, result)


#============================================
def write_manifest(
	manifest_path: pathlib.Path,
	input_path: pathlib.Path,
	output_path: pathlib.Path,
	result: RenderResult,
	config: RunConfig,
) -> None:
	"""
	Write a manifest JSON file.

	Args:
		manifest_path: Output path.
		input_path: Order CSV path.
		output_path: Label PDF path.
		result: Render result.
		config: Run configuration.
	"""
	layout = config.layout
	data = {
		"input": str(input_path),
		"output": str(output_path),
		"orders": result.order_count,
		"pages": result.pages,
		"split_orders": result.split_orders,
		"skipped_orders": result.skipped_orders,
		"overflow_pages": result.overflow_pages,
		"compress": config.compress,
		"missing_fulfillment_policy": config.missing_fulfillment_policy,
		"layout": {
			"label_width": layout.label_width,
			"label_height": layout.label_height,
			"margin": layout.margin,
			"row_spacing": layout.row_spacing,
			"quantity_offset": layout.quantity_offset,
			"unit_offset": layout.unit_offset,
			"label_fit_height": layout.label_fit_height,
		},
		"fonts": {
			"regular": layout.font_regular,
			"bold": layout.font_bold,
		},
	}
	with manifest_path.open("w", encoding="utf-8") as handle:
		json.dump(data, handle, indent=2, sort_keys=True)
