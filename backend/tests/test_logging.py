import json
import logging

from storefront.logging import JsonFormatter


def test_json_formatter_merges_extra_fields():
    record = logging.LogRecord("storefront.cart", logging.INFO, __file__, 1, "cart.item_added", None, None)
    record.event = "cart.item_added"
    record.product_id = 7
    record.cart = object()

    payload = json.loads(JsonFormatter().format(record))

    assert payload["level"] == "INFO"
    assert payload["name"] == "storefront.cart"
    assert payload["message"] == "cart.item_added"
    assert payload["event"] == "cart.item_added"
    assert payload["product_id"] == 7
    assert isinstance(payload["cart"], str)
