import pytest

from artist_conflicts import (
    ConsolePrompter,
    OperationDeclined,
    NameChoice,
    PairChoice,
    ScriptedPrompter,
    find_similar_artists,
    merge_artists,
    resolve_conflicts,
)
from library_model import Album, Artist


def _library():
    return [
        Artist("Prince", [Album("Purple Rain", [0, 1]), Album("", [2])]),
        Artist("Princess", [Album("Debut", [3])]),
        Artist("PRINCE", [Album("Purple Rain", [4]), Album("1999", [5])]),
    ]


def test_similar_artists_detected_once_per_pair():
    assert find_similar_artists(_library()) == [(0, 2)]


def test_exact_and_unrelated_names_are_not_similar():
    assert not Artist("Prince").is_similar(Artist("Princess"))
    assert not Artist("Prince").is_similar(Artist("Prince"))
    assert Artist("Prince").is_similar(Artist("PRINCE"))


def test_merge_using_first_combines_same_named_albums():
    artists = _library()
    prompter = ScriptedPrompter(choices=[PairChoice.MERGE_FIRST])

    summary = resolve_conflicts(artists, prompter)

    assert summary.merged == 1
    assert artists == [
        Artist("Prince", [Album("Purple Rain", [0, 1, 4]), Album("", [2]), Album("1999", [5])]),
        Artist("Princess", [Album("Debut", [3])]),
    ]


def test_merge_using_second_keeps_position_and_takes_second_name():
    artists = _library()

    resolve_conflicts(artists, ScriptedPrompter(choices=[PairChoice.MERGE_SECOND]))

    assert [a.name for a in artists] == ["PRINCE", "Princess"]
    assert [al.name for al in artists[0].albums] == ["Purple Rain", "", "1999"]


def test_do_nothing_leaves_both_artists():
    artists = _library()
    prompter = ScriptedPrompter(choices=[PairChoice.KEEP_BOTH])

    summary = resolve_conflicts(artists, prompter)

    assert summary.kept == 1
    assert artists == _library()
    assert len(prompter.messages) == 1
    assert "Prince\nPRINCE" in prompter.messages[0]


def test_new_name_with_reentry_then_accept():
    artists = _library()
    prompter = ScriptedPrompter(
        choices=[PairChoice.NEW_NAME, NameChoice.REENTER, NameChoice.ACCEPT],
        texts=["prince", "The Artist"],
    )

    summary = resolve_conflicts(artists, prompter)

    assert summary.merged == 1
    assert summary.renamed == 1
    assert [a.name for a in artists] == ["The Artist", "Princess"]
    assert "new name: 'The Artist'" in prompter.messages


def test_new_name_dismissed_changes_nothing():
    artists = _library()
    prompter = ScriptedPrompter(
        choices=[PairChoice.NEW_NAME, NameChoice.DISMISS],
        texts=["Whatever"],
    )

    summary = resolve_conflicts(artists, prompter)

    assert summary.merged == 0
    assert artists == _library()


def test_three_way_conflict_converges_pair_by_pair():
    artists = [
        Artist("abba", [Album("Gold", [0])]),
        Artist("ABBA", [Album("Gold", [1])]),
        Artist("Abba", [Album("Arrival", [2])]),
    ]
    prompter = ScriptedPrompter(choices=[PairChoice.MERGE_SECOND, PairChoice.MERGE_FIRST])

    summary = resolve_conflicts(artists, prompter)

    assert summary.merged == 2
    assert artists == [Artist("ABBA", [Album("Gold", [0, 1]), Album("Arrival", [2])])]


def test_new_name_matching_an_existing_artist_folds_it_in():
    artists = [
        Artist("Prince", [Album("A", [0])]),
        Artist("PRINCE", [Album("B", [1])]),
        Artist("Symbol", [Album("A", [2])]),
    ]
    prompter = ScriptedPrompter(
        choices=[PairChoice.NEW_NAME, NameChoice.ACCEPT], texts=["Symbol"]
    )

    resolve_conflicts(artists, prompter)

    assert artists == [Artist("Symbol", [Album("A", [0, 2]), Album("B", [1])])]


def test_merge_artists_directly():
    artists = [Artist("a", [Album("X", [0])]), Artist("A", [Album("X", [1])])]
    merged = merge_artists(artists, 0, 1, "A")
    assert merged is artists[0]
    assert artists == [Artist("A", [Album("X", [0, 1])])]


def _console(answers):
    feed = iter(answers)
    return ConsolePrompter(input_func=lambda _prompt: next(feed))


def test_console_choose_rejects_invalid_input(capsys):
    prompter = _console(["x", "9", "-1", " 2 "])

    assert prompter.choose("pick", ["a", "b", "c"]) == 2
    assert capsys.readouterr().out.count("invalid input") == 3


def test_console_ask_text_rejects_blank(capsys):
    prompter = _console(["   ", "New Name"])

    assert prompter.ask_text("enter new name:") == "New Name"
    assert "invalid input" in capsys.readouterr().out


@pytest.mark.parametrize(
    "answers, expected",
    [([""], True), (["Y"], True), (["n"], False), (["N"], False), (["maybe", "yes", "y"], True)],
)
def test_console_confirm(answers, expected):
    assert _console(answers).confirm("3 files will be moved. Continue") is expected


def test_console_prompter_drives_resolution(capsys):
    artists = _library()
    prompter = _console(["oops", "1"])

    resolve_conflicts(artists, prompter)

    out = capsys.readouterr().out
    assert "These two artists are named similarly:" in out
    assert "[3] enter new name" in out
    assert [a.name for a in artists] == ["Prince", "Princess"]


def test_closed_input_declines_instead_of_crashing():
    def closed(_prompt):
        raise EOFError

    prompter = ConsolePrompter(input_func=closed)

    with pytest.raises(OperationDeclined):
        prompter.confirm("3 files will be moved. Continue")
    with pytest.raises(OperationDeclined):
        resolve_conflicts(_library(), prompter)
