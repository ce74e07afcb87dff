"""Daily motivation quotes without a model key fall back to the built-in library."""
from app.services.motivation_service import FALLBACK_QUOTES, MotivationService


async def test_daily_quote_is_stable_for_the_day(db, client_user):
    first = await MotivationService.get_daily_quote(db, client_user)
    second = await MotivationService.get_daily_quote(db, client_user)

    assert first.id == second.id
    assert first.quote in {quote["quote"] for quote in FALLBACK_QUOTES}
    assert "sessions booked this month" in first.personalization_reason


async def test_regenerate_replaces_todays_quote(db, trainer, client_user):
    user_id = client_user.id
    original = await MotivationService.get_daily_quote(db, client_user)
    original_id = original.id

    regenerated = await MotivationService.regenerate(db, trainer, user_id)

    assert regenerated.id == original_id
    history = await MotivationService.history(db, user_id)
    assert len(history) == 1


def test_parse_response_handles_fenced_json():
    parsed = MotivationService._parse_response(
        '```json\n{"quote": "Keep going.", "author": "Coach", "category": "grit"}\n```'
    )
    assert parsed["quote"] == "Keep going."
    assert parsed["author"] == "Coach"


def test_parse_response_rejects_garbage():
    assert MotivationService._parse_response("not json at all") is None
    assert MotivationService._parse_response('{"author": "No quote"}') is None
