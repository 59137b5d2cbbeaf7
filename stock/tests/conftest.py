"""
Shared fixtures for the stock ledger tests.
"""
from datetime import date
from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from django.core.cache import cache

from stock.models import Ingredient, IngredientCategory, Supplier


@pytest.fixture(autouse=True)
def clear_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def user(db):
    return get_user_model().objects.create_user(username="chef", password="secret-pass")


@pytest.fixture
def category(db):
    return IngredientCategory.objects.create(name="Dry goods")


@pytest.fixture
def supplier(db):
    return Supplier.objects.create(name="Mill & Co", phone="0123456789")


@pytest.fixture
def make_ingredient(db, category):
    counter = {"n": 0}

    def _make(name=None, unit="kg", stock="0", min_stock="0", max_stock=None, **kwargs):
        counter["n"] += 1
        return Ingredient.objects.create(
            name=name or f"Ingredient {counter['n']}",
            unit=unit,
            category=category,
            current_stock=Decimal(stock),
            min_stock=Decimal(min_stock),
            max_stock=Decimal(max_stock) if max_stock is not None else None,
            **kwargs,
        )

    return _make


@pytest.fixture
def flour(make_ingredient):
    return make_ingredient(name="Flour", unit="kg", min_stock="30", max_stock="100")


@pytest.fixture
def sugar(make_ingredient):
    return make_ingredient(name="Sugar", unit="kg")


@pytest.fixture
def stock_of():
    def _stock(ingredient):
        ingredient.refresh_from_db()
        return ingredient.current_stock

    return _stock


@pytest.fixture
def today():
    return date(2025, 1, 10)
