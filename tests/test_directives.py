from sahaayak.core.directives import CRISIS_SENTINEL, Playlist, parse_reply, split_quick_replies

def test_plain_text_untouched():
    parsed = parse_reply("Take a slow breath with me.")
    assert parsed.text == "Take a slow breath with me."
    assert parsed.quick_replies == []
    assert parsed.playlist is None
    assert parsed.affirmation is False
    assert parsed.primary_content == "text"

def test_quick_replies_extracted_and_stripped():
    parsed = parse_reply("That sounds hard.\n[QUICK_REPLIES:Tell me more| Breathing exercise |Thanks]")
    assert parsed.text == "That sounds hard."
    assert parsed.quick_replies == ["Tell me more", "Breathing exercise", "Thanks"]

def test_quick_replies_capped_and_empty_dropped():
    assert split_quick_replies("a||b| |c|d") == ["a", "b", "c"]

def test_only_first_quick_reply_tag_used():
    parsed = parse_reply("Hi [QUICK_REPLIES:One|Two] there [QUICK_REPLIES:Three]")
    assert parsed.quick_replies == ["One", "Two"]
    assert "QUICK_REPLIES" not in parsed.text

def test_playlist_extracted():
    parsed = parse_reply("[PLAYLIST:Calming Acoustic Music|https://www.youtube.com/watch?v=abc]")
    assert parsed.playlist == Playlist("Calming Acoustic Music", "https://www.youtube.com/watch?v=abc")
    assert parsed.text == ""
    assert parsed.primary_content == "playlist"

def test_affirmation_detected_at_start():
    parsed = parse_reply("[AFFIRMATION] You are stronger than you think.")
    assert parsed.affirmation is True
    assert parsed.text == "You are stronger than you think."
    assert parsed.primary_content == "affirmation"

def test_affirmation_marker_mid_text_is_removed_but_not_flagged():
    parsed = parse_reply("Well done. [AFFIRMATION] Keep going.")
    assert parsed.affirmation is False
    assert "[AFFIRMATION]" not in parsed.text

def test_playlist_outranks_affirmation():
    parsed = parse_reply("[AFFIRMATION] You matter. [PLAYLIST:Lo-fi|https://example.com/lofi]")
    assert parsed.affirmation is True
    assert parsed.primary_content == "playlist"

def test_playlist_and_quick_replies_both_kept():
    parsed = parse_reply("[PLAYLIST:Rain|https://example.com/rain]\n[QUICK_REPLIES:Thanks|More]")
    assert parsed.playlist.title == "Rain"
    assert parsed.quick_replies == ["Thanks", "More"]

def test_crisis_sentinel():
    parsed = parse_reply(f"  {CRISIS_SENTINEL} ")
    assert parsed.is_crisis is True
    assert parsed.primary_content == "crisis"

def test_none_reply():
    assert parse_reply(None).text == ""

def test_embedded_crisis_sentinel_replaces_reply():
    parsed = parse_reply(f"I hear you. {CRISIS_SENTINEL} [QUICK_REPLIES:Ok|Thanks]")
    assert parsed.is_crisis is True
    assert parsed.text == CRISIS_SENTINEL
    assert parsed.quick_replies == []
