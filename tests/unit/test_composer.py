from __future__ import annotations

from relay.notifications.composer import FALLBACK_BODY, FALLBACK_TITLE, compose_message, normalize_order_id


def test_order_created_substitutes_order_id_in_arabic_body():
  title, body, data = compose_message(event_type="order_created", payload={"order_id": 42})

  assert title == "طلب جديد"
  assert body == "تم استلام طلب جديد. رقم: 42"
  assert data == {"order_id": "42", "event_type": "order_created"}


def test_order_assigned_uses_fixed_text():
  title, body, data = compose_message(event_type="order_assigned", payload={"order_id": "A-7"})

  assert title == "طلب جديد - تم تعيينك"
  assert body == "تم تعيينك لتوصيل طلب جديد."
  assert data["order_id"] == "A-7"


def test_driver_nearby_text():
  title, body, _ = compose_message(event_type="driver_nearby", payload={})

  assert title == "السائق قريب"
  assert body == "سائقك سيصل خلال دقائق."


def test_unknown_event_type_falls_back_to_generic_text():
  title, body, data = compose_message(event_type="promo_blast", payload={"order_id": 1})

  assert (title, body) == (FALLBACK_TITLE, FALLBACK_BODY)
  assert data == {"order_id": "1", "event_type": "promo_blast"}


def test_missing_order_id_renders_empty_string():
  _, body, data = compose_message(event_type="order_created", payload={})

  assert body == "تم استلام طلب جديد. رقم: "
  assert data["order_id"] == ""


def test_english_locale_selects_english_templates():
  title, body, _ = compose_message(event_type="order_created", payload={"order_id": 9}, locale="en")

  assert title == "New order"
  assert body.endswith("Number: 9")


def test_unknown_locale_falls_back_to_arabic():
  title, _, _ = compose_message(event_type="driver_nearby", payload={}, locale="fr")

  assert title == "السائق قريب"


def test_normalize_order_id_stringifies_values():
  assert normalize_order_id({"order_id": 0}) == "0"
  assert normalize_order_id({"order_id": None}) == ""
  assert normalize_order_id({}) == ""


def test_compose_message_is_pure():
  payload = {"order_id": 42, "restaurant_id": "r-1"}
  snapshot = dict(payload)

  first = compose_message(event_type="order_created", payload=payload, locale="en")
  second = compose_message(event_type="order_created", payload=payload, locale="en")

  assert first == second
  assert payload == snapshot
