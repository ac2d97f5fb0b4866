"""
CLI entry points for order CSV to label PDF conversion.
"""

# Standard Library
import argparse
import dataclasses
import pathlib
import time

# local repo modules
import order_label_converter as olc
import order_label_converter.config
import order_label_converter.orders
import order_label_converter.render


RunConfig = olc.config.RunConfig

DEFAULT_OUTPUT_NAME = "order-labels.pdf"
DEFAULT_QUANTITY_OFFSET = olc.config.DEFAULT_QUANTITY_OFFSET
LABEL_FIT_HEIGHT = olc.config.LABEL_FIT_HEIGHT
MISSING_FULFILLMENT_ABORT = olc.config.MISSING_FULFILLMENT_ABORT
MISSING_FULFILLMENT_SKIP = olc.config.MISSING_FULFILLMENT_SKIP


#============================================
def build_config(args: argparse.Namespace) -> RunConfig:
	"""
	Build run config from CLI args.

	Args:
		args: Parsed argparse namespace.

	Returns:
		RunConfig.
	"""
	layout = dataclasses.replace(
		olc.config.build_default_layout(),
		quantity_offset=args.quantity_offset,
		label_fit_height=args.fit_height,
		fit_heading_text=args.fit_text,
	)
	policy = MISSING_FULFILLMENT_ABORT
	if args.skip_missing:
		policy = MISSING_FULFILLMENT_SKIP
	return RunConfig(
		layout=layout,
		compress=args.compress,
		missing_fulfillment_policy=policy,
		manifest_path=args.manifest_path,
	)


#============================================
def parse_args() -> argparse.Namespace:
	"""
	Parse command line arguments.

	Returns:
		Parsed argparse namespace.
	"""
	parser = argparse.ArgumentParser(description="Convert an order export CSV into 4x6 label PDF pages.")
	parser.add_argument("input_path", help="Order export CSV file.")

	output_group = parser.add_argument_group("Output")
	output_group.add_argument("-o", "--output", dest="output_path", default=DEFAULT_OUTPUT_NAME, help="Output PDF path.")
	output_group.add_argument("-m", "--manifest", dest="manifest_path", default=None, help="Output manifest JSON path.")

	behavior_group = parser.add_argument_group("Behavior")
	behavior_group.add_argument("-z", "--compress", dest="compress", action="store_true", help="Compress page content streams.")
	behavior_group.add_argument("-Z", "--no-compress", dest="compress", action="store_false", help="Write uncompressed content streams.")
	behavior_group.add_argument("-s", "--skip-missing", dest="skip_missing", action="store_true", help="Skip orders with no fulfillment type.")
	behavior_group.add_argument("-S", "--no-skip-missing", dest="skip_missing", action="store_false", help="Stop on orders with no fulfillment type.")
	behavior_group.add_argument("-f", "--fit-text", dest="fit_text", action="store_true", help="Shrink long headings to fit the label.")
	behavior_group.add_argument("-F", "--no-fit-text", dest="fit_text", action="store_false", help="Keep heading sizes fixed.")

	layout_group = parser.add_argument_group("Layout")
	layout_group.add_argument("-q", "--quantity-offset", dest="quantity_offset", type=float, default=DEFAULT_QUANTITY_OFFSET, help="Quantity column offset from the left margin.")
	layout_group.add_argument("-t", "--fit-height", dest="fit_height", type=float, default=LABEL_FIT_HEIGHT, help="Vertical span available to item rows.")

	parser.set_defaults(
		compress=True,
		skip_missing=False,
		fit_text=True,
	)

	args = parser.parse_args()
	return args


#============================================
def run_pipeline(args: argparse.Namespace) -> bool:
	"""
	Run the full pipeline from order CSV to label PDF.

	Args:
		args: Parsed argparse namespace.

	Returns:
		True if the labels were saved.
	"""
	print("Order CSV to label PDF pipeline")
	print(f"Input CSV: {args.input_path}")
	print(f"Output PDF: {args.output_path}")
	if args.manifest_path:
		print(f"Manifest: {args.manifest_path}")
	print(f"Compress: {args.compress}")
	print(f"Skip missing fulfillment: {args.skip_missing}")
	print(f"Quantity offset: {args.quantity_offset}")

	config = build_config(args)
	input_path = pathlib.Path(args.input_path)
	output_path = pathlib.Path(args.output_path)

	start_time = time.perf_counter()
	try:
		batch = olc.orders.read_orders_csv(input_path)
	except olc.orders.GroupingInputError as error:
		print(f"The order file could not be read:\n{error}")
		return False
	except OSError as error:
		print(f"Error opening the file: {input_path}\n{error}")
		return False
	read_end = time.perf_counter()
	print(f"Orders found: {len(batch)}")

	outcome = olc.render.render_orders_to_pdf(output_path, batch, config, verbose=True)
	render_end = time.perf_counter()
	print(outcome.message)
	if not outcome.ok:
		return False

	print(f"Pages written: {outcome.page_count}")
	if config.manifest_path and outcome.result is not None:
		manifest_path = pathlib.Path(config.manifest_path)
		olc.render.write_manifest(manifest_path, input_path, output_path, outcome.result, config)
		print(f"Manifest written: {manifest_path}")
	print(
		"Timing: read={:.2f}s render={:.2f}s total={:.2f}s".format(
			read_end - start_time,
			render_end - read_end,
			render_end - start_time,
		)
	)
	return True


#============================================
def main() -> None:
	"""
	Main entry point.
	"""
	args = parse_args()
	if not run_pipeline(args):
		raise SystemExit(1)
