from types import SimpleNamespace

from franchise_api.db.models.enums import StockStatus
from franchise_api.services.inventory import stock_status, validate_reductions


def _product(name, qty, minimum):
    return SimpleNamespace(name=name, stock_quantity=qty, min_stock_level=minimum)


def test_stock_status_levels():
    out = stock_status(0, 5)
    assert out.status == StockStatus.OUT_OF_STOCK
    assert out.message == "Out of Stock"

    low = stock_status(5, 5)
    assert low.status == StockStatus.LOW_STOCK
    assert low.message == "Low Stock (5 remaining)"

    ok = stock_status(6, 5)
    assert ok.status == StockStatus.IN_STOCK
    assert ok.message == "In Stock (6 available)"


def test_validate_reductions_passes_with_warning_at_minimum():
    products = {1: _product("Robot Kit", 10, 3)}
    result = validate_reductions(products, [(1, 7)])
    assert result.valid
    assert result.errors == []
    assert result.warnings == ["Robot Kit will be at or below minimum stock level after this operation"]


def test_validate_reductions_sums_repeated_products():
    products = {1: _product("Workbook", 4, 0)}
    result = validate_reductions(products, [(1, 3), (1, 2)])
    assert not result.valid
    assert result.errors == ["Insufficient stock for Workbook. Required: 5, Available: 4"]


def test_validate_reductions_reports_missing_products():
    products = {1: _product("Workbook", 50, 0)}
    result = validate_reductions(products, [(1, 1), (7, 1), (8, 2)])
    assert not result.valid
    assert result.errors == ["Products not found: 7, 8"]
    assert result.warnings == []
