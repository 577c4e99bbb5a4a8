import asyncio
import random
from datetime import timedelta

import pytest

from sahaayak.core.directives import CRISIS_SENTINEL
from sahaayak.core.models import MoodSource, Persona, ValidationError
from sahaayak.core.moderation import GUIDELINES_REASON
from sahaayak.core.session import (
    CHAT_COLLECTION, TurnInProgressError, generate_anonymous_name
)

from conftest import ScriptedOracle, run

def test_mood_log_replaced_per_day_and_source(make_session, monday):
    session = make_session()
    session.add_mood_log("😔", on_date=monday)
    session.add_mood_log("😃", on_date=monday)
    session.add_mood_log("🙂", on_date=monday, source=MoodSource.JOURNAL)

    logs = session.state.mood_logs
    assert len(logs) == 2
    assert {(l.source, l.mood) for l in logs} == {("check-in", "😃"), ("journal", "🙂")}
    assert len(session.store.get_all("mood_logs", session.user_id)) == 2

def test_mood_logs_drive_streak_and_badges(make_session, monday):
    session = make_session()
    for offset in range(3):
        session.add_mood_log("🙂", on_date=monday + timedelta(days=offset))

    assert session.state.streaks["mood_tracking"].count == 3
    assert [b.badge_id for b in session.pop_new_badges()] == ["first_mood", "mood_3_day"]
    assert session.pop_new_badges() == []

def test_journal_entry_logs_mood_and_both_streaks(make_session, monday):
    session = make_session()
    entry = session.add_journal_entry("Grateful for chai with friends", "😃", prompt="gratitude", on_date=monday)

    assert session.state.journal_entries[0] == entry
    assert session.state.mood_logs[0].source == "journal"
    assert session.state.mood_logs[0].date == monday.isoformat()
    assert set(session.state.streaks) == {"journaling", "mood_tracking"}

def test_invalid_mood_rejected(make_session):
    with pytest.raises(ValidationError):
        make_session().add_mood_log("🤖")

def test_chat_turn_stored(make_session):
    oracle = ScriptedOracle(reply="Glad you're here.\n[QUICK_REPLIES:Yes|No]")
    session = make_session(oracle)

    result = run(session.submit_message("  hello  "))

    messages = session.state.chat_messages
    assert [m.sender for m in messages] == ["user", "assistant"]
    assert messages[0].text == "hello"
    assert messages[1].quick_replies == ["Yes", "No"]
    assert result.text == "Glad you're here."
    assert len(session.store.get_all(CHAT_COLLECTION, session.user_id)) == 2

def test_quick_replies_cleared_on_next_turn(make_session):
    oracle = ScriptedOracle(reply="Hi!\n[QUICK_REPLIES:Yes|No]")
    session = make_session(oracle)
    run(session.submit_message("first"))
    run(session.submit_message("second"))

    assistant = [m for m in session.state.chat_messages if not m.is_user]
    assert assistant[0].quick_replies == []
    assert assistant[1].quick_replies == ["Yes", "No"]
    stored = session.store.get(CHAT_COLLECTION, assistant[0].message_id, session.user_id)
    assert stored['quick_replies'] == []

def test_history_excludes_new_message(make_session):
    oracle = ScriptedOracle()
    session = make_session(oracle)
    run(session.submit_message("first"))
    run(session.submit_message("second"))

    _, request = oracle.calls[-1]
    assert [text for text, _ in request.history] == ["first", "I'm here for you."]
    assert request.new_message == "second"

def test_crisis_sentinel_never_stored(make_session):
    session = make_session(ScriptedOracle(crisis="high"))

    result = run(session.submit_message("I can't do this anymore"))

    assert result.is_crisis
    texts = [m.text for m in session.state.chat_messages]
    assert texts == ["I can't do this anymore"]
    stored = session.store.get_all(CHAT_COLLECTION, session.user_id)
    assert CRISIS_SENTINEL not in [r['text'] for r in stored]

def test_empty_message_rejected(make_session):
    with pytest.raises(ValidationError):
        run(make_session(ScriptedOracle()).submit_message("   "))

def test_second_submission_while_in_flight_rejected(make_session):
    release = None

    async def scenario():
        nonlocal release
        release = asyncio.Event()

        class SlowOracle(ScriptedOracle):
            async def complete(self, request):
                if self.kind_of(request) == 'reply':
                    await release.wait()
                return await super().complete(request)

        session = make_session(SlowOracle())
        first = asyncio.create_task(session.submit_message("one"))
        await asyncio.sleep(0)
        await asyncio.sleep(0)
        with pytest.raises(TurnInProgressError):
            await session.submit_message("two")
        release.set()
        await first
        return session

    session = run(scenario())
    assert [m.text for m in session.state.chat_messages if m.is_user] == ["one"]

def test_persona_settings_used_and_persisted(make_session, store):
    oracle = ScriptedOracle(persona="energetic")
    session = make_session(oracle)
    session.set_persona(Persona.MINDFUL)
    session.set_dynamic_persona_enabled(False)

    result = run(session.submit_message("hi"))

    assert result.persona_used == Persona.MINDFUL
    assert 'persona' not in oracle.kinds()
    assert make_session(oracle).settings.selected_persona == "mindful"

def test_guest_mutations_are_noops(make_session, store):
    guest = make_session(ScriptedOracle(), user_id=None)

    assert guest.add_mood_log("🙂") is None
    assert guest.add_journal_entry("text", "🙂") is None
    assert guest.start_journey("anxiety_journey") is None
    assert guest.add_intention("Walk") is None
    assert guest.add_emergency_contact("Ma", "98765") is None
    assert guest.toggle_post_like("p1") is None
    assert guest.export_user_data() is None

    result = run(guest.submit_message("hello"))
    assert result.text
    assert guest.state.chat_messages == []
    assert store.user_ids() == []

def test_post_moderated_and_stored(make_session):
    session = make_session(ScriptedOracle())

    result = run(session.add_post("university_life", "Exam tips", "Share what works for you"))

    assert result.success
    assert result.message == "Post added successfully."
    posts = session.get_posts("university_life")
    assert posts[0].title == "Exam tips"
    assert posts[0].author_name == session.anonymous_name
    assert session.get_posts("creative_passions") == []

def test_post_moderates_title_and_content_together(make_session):
    oracle = ScriptedOracle()
    session = make_session(oracle)
    run(session.add_post("university_life", "Title", "Body"))

    _, request = oracle.calls[-1]
    assert request.new_message == "Title Body"

def test_rejected_post_not_stored(make_session):
    session = make_session(ScriptedOracle(moderation='{"is_safe": false, "reason": "Be kind."}'))

    result = run(session.add_post("university_life", "Hey", "rude words"))

    assert not result.success
    assert result.message == "Be kind."
    assert session.get_posts() == []

def test_comment_with_keyword_fallback(make_session):
    session = make_session()
    post = run(session.add_post("creative_passions", "My sketch", "Finished a new drawing")).record

    rejected = run(session.add_comment(post['post_id'], "what a stupid idea"))
    accepted = run(session.add_comment(post['post_id'], "Beautiful colours!"))

    assert rejected.message == GUIDELINES_REASON
    assert accepted.message == "Comment added successfully."
    assert [c.content for c in session.get_comments(post['post_id'])] == ["Beautiful colours!"]

def test_unknown_circle_rejected(make_session):
    with pytest.raises(ValidationError):
        run(make_session().add_post("nowhere", "t", "c"))

def test_like_toggle(make_session):
    author = make_session(user_id="author")
    post = run(author.add_post("university_life", "Hello", "First post")).record
    reader = make_session(user_id="reader")

    assert reader.toggle_post_like(post['post_id']).likes == ["reader"]
    assert reader.toggle_post_like(post['post_id']).likes == []
    assert reader.toggle_post_like("missing") is None

def test_anonymous_name_stable_per_session(make_session):
    session = make_session()
    name = session.anonymous_name
    run(session.add_post("university_life", "a", "b"))
    assert session.get_posts()[0].author_name == name
    assert len(generate_anonymous_name(random.Random(7)).split()) == 2

def test_emergency_contacts_and_helpline_log(make_session):
    session = make_session()
    contact = session.add_emergency_contact("Didi", "+91 98765 43210", "Sister")
    contact.phone = "+91 90000 00000"

    assert session.update_emergency_contact(contact)
    assert session.log_emergency_action().action == "helpline_tap"
    assert session.delete_emergency_contact(contact.contact_id)
    assert session.state.emergency_contacts == []
    assert len(session.state.emergency_logs) == 1

def test_journey_completion_badge_reported(make_session):
    session = make_session()
    session.start_journey("anxiety_journey")
    for _ in range(5):
        session.advance_journey_day("anxiety_journey")

    assert session.is_journey_completed("anxiety_journey")
    assert "anxiety_journey_complete" in [b.badge_id for b in session.pop_new_badges()]

def test_intentions_progress(make_session):
    session = make_session()
    intention = session.add_intention("Meditate", "weekly", 2)
    session.complete_intention(intention.intention_id)

    (row,) = session.intention_progress()
    assert row['progress'] == 1
    assert row['done'] is False

def test_state_reloaded_on_login(make_session, monday):
    session = make_session()
    session.add_journal_entry("Long day", "😐", on_date=monday)
    session.add_emergency_contact("Ma", "98765")

    again = make_session()
    assert [e.content for e in again.state.journal_entries] == ["Long day"]
    assert again.state.streaks["journaling"].count == 1
    assert len(again.state.emergency_contacts) == 1

def test_export_and_clear(make_session, store, monday):
    session = make_session()
    session.add_mood_log("🙂", on_date=monday)
    session.add_intention("Walk")

    exported = session.export_user_data()
    assert exported['user']['uid'] == "user-1"
    assert len(exported['mood_logs']) == 1
    assert exported['streaks'][0]['streak_type'] == "mood_tracking"
    assert exported['settings']['selected_persona'] == "empathetic"

    removed = session.clear_all_user_data()
    assert removed >= 3
    assert not session.is_authenticated
    assert store.user_ids() == []

def test_insights_offline(make_session):
    session = make_session()
    session.add_journal_entry("Everything feels hopeless", "😔")

    analysis = run(session.get_analysis())
    assert analysis.crisis_level.value == "high"
    assert run(session.get_proactive_suggestion()).action_link == "/exercises"
    assert len(run(session.get_goal_suggestions("be healthier"))) == 4

def test_generated_sentinel_not_stored(make_session):
    session = make_session(ScriptedOracle(reply=CRISIS_SENTINEL))

    result = run(session.submit_message("hello there"))

    assert result.is_crisis
    assert [m.text for m in session.state.chat_messages] == ["hello there"]
    stored = session.store.get_all(CHAT_COLLECTION, session.user_id)
    assert CRISIS_SENTINEL not in [r['text'] for r in stored]
