from mealplan.services.catalog import FoodCatalog


def test_resolves_known_food(db):
    catalog = FoodCatalog(db)
    catalog.preload([7, 9])
    assert catalog.resolve_food_name(7) == "Oatmeal"
    assert catalog.resolve_food_unit_price(9) == 5.0
    assert catalog.resolve_food_calories(9) == 500.0


def test_unknown_food_resolves_to_nothing(db):
    catalog = FoodCatalog(db)
    assert catalog.resolve_food_name(12345) is None
    assert catalog.resolve_food_unit_price(12345) == 0.0
    assert catalog.resolve_food_calories(12345) == 0.0


def test_lookup_is_cached(db, monkeypatch):
    catalog = FoodCatalog(db)
    catalog.preload([7, 8, 404])
    calls = []
    monkeypatch.setattr(db, "execute", lambda *args, **kwargs: calls.append(args))
    assert catalog.resolve_food_name(8) == "Chicken Salad"
    assert catalog.resolve_food_name(404) is None
    assert calls == []
