#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Convert an order export CSV into 4x6 inch Dymo label PDF pages.
"""

# local repo modules
import order_label_converter.cli


if __name__ == "__main__":
	order_label_converter.cli.main()
