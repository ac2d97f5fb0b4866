"""
Pytest configuration for local imports and shared order fixtures.
"""

# Standard Library
import os
import sys

# PIP3 modules
import pytest

#============================================


def _ensure_repo_on_path() -> None:
	"""
	Ensure the repository root is on sys.path.
	"""
	repo_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
	if repo_root not in sys.path:
		sys.path.insert(0, repo_root)


_ensure_repo_on_path()

import order_label_converter.config
import order_label_converter.orders


#============================================
def make_item(
	order_id: int = 1001,
	item: str = "Pasture Eggs",
	fulfillment: str | None = "Pickup",
	quantity: int | None = 1,
	unit_size: str | None = "Dozen",
	customer: str = "Jane Doe",
) -> order_label_converter.orders.LineItem:
	"""
	Build a line item with sensible defaults.
	"""
	return order_label_converter.orders.LineItem(
		order_id=order_id,
		fulfillment=fulfillment,
		paid="Yes",
		item=item,
		unit_size=unit_size,
		quantity=quantity,
		price="$6.00",
		customer=customer,
		pickup_address="12 Farm Lane",
	)


#============================================
def make_order(count: int, order_id: int = 1001) -> list[order_label_converter.orders.LineItem]:
	"""
	Build an order with numbered printable items.
	"""
	return [make_item(order_id=order_id, item=f"Item {index:02d}") for index in range(count)]


@pytest.fixture
def layout() -> order_label_converter.config.LayoutConfig:
	return order_label_converter.config.build_default_layout()


@pytest.fixture
def run_config() -> order_label_converter.config.RunConfig:
	return order_label_converter.config.build_default_run_config()
