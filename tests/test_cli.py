import json

from drinkjoy.cli import main


def test_recommend_prints_ranked_lines(capsys):
    code = main(["recommend", "--flavor", "crisp", "--seed", "4", "--at", "2026-01-05T16:00:00", "--max-results", "3"])
    out = capsys.readouterr().out

    assert code == 0
    assert "Happy hour is on (3 PM - 6 PM)" in out
    assert " 1. " in out
    assert "Match!" in out or "Worth a Try!" in out


def test_recommend_json_is_machine_readable(capsys):
    main(["recommend", "--category", "beer", "--seed", "4", "--at", "2026-01-05T12:00:00", "--json"])
    payload = json.loads(capsys.readouterr().out)

    assert payload["meta"]["mode"] == "primary"
    assert payload["meta"]["happy_hour"]["active"] is False
    assert all(r["drink"]["category"] == "beer" for r in payload["results"])


def test_more_all_categories(capsys):
    main(["more", "--category", "beer", "--exclude", "beer-ipa", "--all-categories", "--seed", "1", "--json"])
    payload = json.loads(capsys.readouterr().out)

    ids = [r["drink"]["id"] for r in payload["results"]]
    assert "beer-ipa" not in ids
    assert payload["meta"]["mode"] == "more_all_categories"


def test_chat_match_normalizes_words(capsys):
    main(["chat-match", "--category", "beers", "--allergy", "celiac", "--json"])
    payload = json.loads(capsys.readouterr().out)

    assert payload["preferences"]["category"] == "beer"
    assert payload["preferences"]["allergies"] == ["gluten"]
    assert all(m["drink"]["category"] != "beer" for m in payload["matches"])
