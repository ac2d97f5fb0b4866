import argparse
import json
import pathlib

import order_label_converter.cli
import order_label_converter.config


#============================================
def _args(tmp_path: pathlib.Path, **overrides) -> argparse.Namespace:
	"""
	Build CLI args as parse_args would with defaults.
	"""
	values = {
		"input_path": str(tmp_path / "orders.csv"),
		"output_path": str(tmp_path / "order-labels.pdf"),
		"manifest_path": None,
		"compress": True,
		"skip_missing": False,
		"fit_text": True,
		"quantity_offset": order_label_converter.config.DEFAULT_QUANTITY_OFFSET,
		"fit_height": order_label_converter.config.LABEL_FIT_HEIGHT,
	}
	values.update(overrides)
	return argparse.Namespace(**values)


#============================================
def test_build_config_applies_layout_overrides(tmp_path: pathlib.Path) -> None:
	args = _args(tmp_path, quantity_offset=180.0, fit_height=323.0, skip_missing=True, compress=False)
	config = order_label_converter.cli.build_config(args)
	assert config.layout.quantity_offset == 180.0
	assert config.layout.label_fit_height == 323.0
	assert config.layout.unit_offset == 194.0
	assert config.missing_fulfillment_policy == order_label_converter.config.MISSING_FULFILLMENT_SKIP
	assert config.compress is False


#============================================
def test_run_pipeline_from_csv(tmp_path: pathlib.Path) -> None:
	csv_path = tmp_path / "orders.csv"
	csv_path.write_text(
		"Order #,Fulfillment Type,Paid,Item,Unit Size,Quantity,Price,Customer,Pickup Address,Delivery Address\n"
		"1001,Pickup,Yes,Pasture Eggs,Dozen,2,$12.00,Jane Doe,12 Farm Lane,\n"
		"1001,,Yes,Delivery Fee,,,$5.00,Jane Doe,,\n"
		"1002,Delivery,Yes,Honey,16 oz,1,$9.00,Sam Roe,,4 Main St\n",
		encoding="utf-8",
	)
	manifest_path = tmp_path / "labels.json"
	args = _args(tmp_path, manifest_path=str(manifest_path))
	assert order_label_converter.cli.run_pipeline(args)
	assert (tmp_path / "order-labels.pdf").exists()
	data = json.loads(manifest_path.read_text(encoding="utf-8"))
	assert data["pages"] == 2


#============================================
def test_run_pipeline_reports_unreadable_csv(tmp_path: pathlib.Path) -> None:
	args = _args(tmp_path)
	assert not order_label_converter.cli.run_pipeline(args)
	assert not (tmp_path / "order-labels.pdf").exists()
