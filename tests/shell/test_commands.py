from __future__ import annotations

import logging
import random

import pytest

from fixtures import (
    ScriptedPrompt,
    output_of,
    recording_display,
    run_with_store,
)
from quiz_shell.shell import commands
from quiz_shell.shell.commands import SessionSignal, ShellContext, execute
from quiz_shell.shell.errors import StoreError


def _run(db_url, lines, replies=(), *, seed=True, rng_seed=0):
    """Execute ``lines`` in order and return signals, output and quizzes."""

    prompt = ScriptedPrompt(replies)
    display = recording_display()

    async def body(store):
        ctx = ShellContext(
            store=store,
            prompt=prompt,
            display=display,
            logger=logging.getLogger("quiz_shell.tests"),
            rng=random.Random(rng_seed),
        )
        signals = [await execute(ctx, line) for line in lines]
        return signals, await store.find_all()

    signals, quizzes = run_with_store(db_url, body, seed=seed)
    return signals, output_of(display), quizzes, prompt


def test_help_lists_every_command(db_url):
    signals, output, _, _ = _run(db_url, ["help"])

    assert signals == [SessionSignal.PROMPT]
    for name in (
        "list", "show", "add", "delete", "edit", "test", "play", "quit"
    ):
        assert name in output


def test_list_prints_ids_and_questions(db_url):
    _, output, quizzes, _ = _run(db_url, ["list"])

    for quiz in quizzes:
        assert f"[{quiz.id}]: {quiz.question}" in output
    assert "Rome" not in output


def test_list_reports_empty_store(db_url):
    _, output, _, _ = _run(db_url, ["ls"], seed=False)

    assert "There are no quizzes yet" in output


def test_show_renders_question_and_answer(db_url):
    signals, output, _, _ = _run(db_url, ["show 1"])

    assert signals == [SessionSignal.PROMPT]
    assert "[1]: Capital of Italy => Rome" in output


def test_show_unknown_id_reports_and_reprompts(db_url):
    signals, output, _, prompt = _run(db_url, ["show 99"])

    assert signals == [SessionSignal.PROMPT]
    assert "Error: There is no quiz with id=99." in output
    assert prompt.asked == []


@pytest.mark.parametrize(
    ("line", "message"),
    [
        ("show", "Missing parameter <id>."),
        ("show abc", "Parameter <id> is not a number: 'abc'."),
        ("edit", "Missing parameter <id>."),
        ("test x1", "Parameter <id> is not a number: 'x1'."),
        ("delete", "Missing parameter <id>."),
    ],
)
def test_id_validation_errors(db_url, line, message):
    signals, output, quizzes, _ = _run(db_url, [line])

    assert signals == [SessionSignal.PROMPT]
    assert f"Error: {message}" in output
    assert len(quizzes) == 4


def test_add_creates_quiz(db_url):
    signals, output, quizzes, prompt = _run(
        db_url, ["add"], replies=["What is 2+2", " 4 "]
    )

    assert signals == [SessionSignal.PROMPT]
    assert [text for text, _ in prompt.asked] == [
        "Enter a question: ",
        "Enter the answer: ",
    ]
    added = quizzes[-1]
    assert (added.question, added.answer) == ("What is 2+2", "4")
    assert f"Added [{added.id}]: What is 2+2 => 4" in output


def test_add_reports_each_invalid_field(db_url):
    signals, output, quizzes, _ = _run(db_url, ["add"], replies=["", ""])

    assert signals == [SessionSignal.PROMPT]
    assert "Error: The quiz is invalid:" in output
    assert "Error: Question must not be empty." in output
    assert "Error: Answer must not be empty." in output
    assert len(quizzes) == 4


def test_edit_offers_current_values_as_defaults(db_url):
    signals, output, quizzes, prompt = _run(
        db_url, ["edit 1"], replies=["", "Roma"]
    )

    assert signals == [SessionSignal.PROMPT]
    assert [default for _, default in prompt.asked] == [
        "Capital of Italy",
        "Rome",
    ]
    assert (quizzes[0].question, quizzes[0].answer) == (
        "Capital of Italy",
        "Roma",
    )
    assert "Quiz 1 changed to: Capital of Italy => Roma" in output


def test_edit_unknown_id_never_prompts(db_url):
    _, output, _, prompt = _run(db_url, ["edit 42"])

    assert prompt.asked == []
    assert "There is no quiz with id=42." in output


def test_edit_keeps_defaults_on_empty_replies(db_url):
    _, output, quizzes, _ = _run(db_url, ["edit 2"], replies=["", " "])

    assert (quizzes[1].question, quizzes[1].answer) == (
        "Capital of France",
        "Paris",
    )
    assert "Quiz 2 changed to: Capital of France => Paris" in output


def test_test_accepts_answer_ignoring_case_and_spaces(db_url):
    signals, output, _, prompt = _run(db_url, ["test 1"], replies=[" rome "])

    assert signals == [SessionSignal.PROMPT]
    assert prompt.asked[0][0] == "Capital of Italy? "
    assert "Your answer is correct." in output
    assert "CORRECT" in output


def test_test_reports_wrong_answer(db_url):
    _, output, _, _ = _run(db_url, ["test 2"], replies=["Lyon"])

    assert "Your answer is incorrect." in output
    assert "INCORRECT" in output


def test_delete_removes_quiz_and_ignores_unknown_ids(db_url):
    signals, output, quizzes, _ = _run(db_url, ["delete 1", "rm 99"])

    assert signals == [SessionSignal.PROMPT, SessionSignal.PROMPT]
    assert [q.id for q in quizzes] == [2, 3, 4]
    assert "Error" not in output


def test_play_reports_final_score(db_url):
    answers = {
        "Capital of Italy? ": "Rome",
        "Capital of France? ": "Paris",
        "Capital of Spain? ": "Madrid",
        "Capital of Portugal? ": "Lisbon",
    }

    class Oracle(ScriptedPrompt):
        async def ask(self, text, *, default=None):
            self.asked.append((text, default))
            return answers[text]

    display = recording_display()

    async def body(store):
        ctx = ShellContext(store, Oracle(), display, rng=random.Random(1))
        return await execute(ctx, "play")

    signal = run_with_store(db_url, body)
    output = output_of(display)

    assert signal is SessionSignal.PROMPT
    assert "No more questions. You answered them all!" in output
    assert "Final score: 4 of 4" in output


def test_play_wrong_answer_ends_game(db_url):
    signals, output, quizzes, prompt = _run(db_url, ["p"], replies=["wrong"])

    assert signals == [SessionSignal.PROMPT]
    assert len(prompt.asked) == 1
    assert "Incorrect answer. End of game." in output
    assert "Final score: 0 of 4" in output
    assert len(quizzes) == 4


def test_play_on_empty_store(db_url):
    _, output, _, prompt = _run(db_url, ["play"], seed=False)

    assert prompt.asked == []
    assert "There are no quizzes to play." in output
    assert "Final score: 0 of 0" in output


def test_credits_lists_authors(db_url):
    _, output, _, _ = _run(db_url, ["credits"])

    assert "Authors:" in output
    for author in commands.CREDITS:
        assert author in output


@pytest.mark.parametrize("line", ["quit", "q", "exit", "QUIT"])
def test_quit_closes_session(db_url, line):
    signals, _, _, _ = _run(db_url, [line])

    assert signals == [SessionSignal.CLOSE]


def test_unknown_command_shows_usage(db_url):
    signals, output, _, _ = _run(db_url, ["frobnicate 3"])

    assert signals == [SessionSignal.PROMPT]
    assert "Error: Unknown command: 'frobnicate'." in output
    assert "Use help to list commands." in output


def test_blank_line_is_ignored(db_url):
    signals, output, _, _ = _run(db_url, ["", "   "])

    assert signals == [SessionSignal.PROMPT, SessionSignal.PROMPT]
    assert output == ""


def test_commands_are_case_insensitive(db_url):
    _, output, _, _ = _run(db_url, ["SHOW 2", "Ls"])

    assert "[2]: Capital of France => Paris" in output
    assert "[4]: Capital of Portugal" in output


def test_input_closing_mid_command_closes_session(db_url):
    signals, _, quizzes, _ = _run(db_url, ["add"], replies=["Half a quiz"])

    assert signals == [SessionSignal.CLOSE]
    assert len(quizzes) == 4


def test_unexpected_failure_is_reported_once(db_url):
    class ExplodingStore:
        async def find_all(self):
            raise ValueError("kaboom")

    display = recording_display()

    async def body(store):
        ctx = ShellContext(ExplodingStore(), ScriptedPrompt(), display)
        return await execute(ctx, "list")

    signal = run_with_store(db_url, body)

    assert signal is SessionSignal.PROMPT
    assert output_of(display).count("Unexpected failure: kaboom") == 1


def test_command_table_aliases_resolve_to_specs():
    assert commands.lookup("h").name == "help"
    assert commands.lookup("ls").name == "list"
    assert commands.lookup("rm").name == "delete"
    assert commands.lookup("p").name == "play"
    assert commands.lookup("exit").name == "quit"
    assert commands.lookup("nope") is None


def test_parse_command_line_splits_words():
    assert commands.parse_command_line("  Show   3  extra ") == (
        "show",
        ["3", "extra"],
    )
    assert commands.parse_command_line("") == (None, [])
    assert commands.parse_command_line(None) == (None, [])


def test_test_trims_answer_for_new_quiz(db_url):
    _, output, quizzes, _ = _run(
        db_url,
        ["add", "test 1"],
        replies=["What is 2+2", "4", " 4 "],
        seed=False,
    )

    assert quizzes[0].id == 1
    assert "Your answer is correct." in output


def test_play_two_quizzes_scores_two(db_url):
    _, output, _, prompt = _run(
        db_url,
        ["add", "add", "play", "list"],
        replies=["Q one", "same", "Q two", "same", "same", "same"],
        seed=False,
    )

    assert len(prompt.asked) == 6
    assert "Final score: 2 of 2" in output
    assert "[2]: Q two" in output


def test_huge_ids_are_unknown_quizzes(db_url):
    huge = "99999999999999999999"

    signals, output, quizzes, _ = _run(
        db_url, [f"show {huge}", f"delete {huge}", f"edit {huge}"]
    )

    assert signals == [SessionSignal.PROMPT] * 3
    assert output.count(f"There is no quiz with id={huge}.") == 2
    assert "Unexpected failure" not in output
    assert len(quizzes) == 4


class FailingStore:
    async def find_all(self):
        raise StoreError("database is locked")

    async def find_by_id(self, quiz_id):
        raise StoreError("database is locked")


def _run_failing(db_url, line):
    display = recording_display()

    async def body(store):
        ctx = ShellContext(FailingStore(), ScriptedPrompt(), display)
        return await execute(ctx, line)

    return run_with_store(db_url, body), output_of(display)


def test_play_reports_store_failure_once(db_url):
    signal, output = _run_failing(db_url, "play")

    assert signal is SessionSignal.PROMPT
    assert output.count("Unable to start the game: database is locked") == 1
    assert output.count("Error:") == 1


def test_show_reports_store_failure_once(db_url):
    signal, output = _run_failing(db_url, "show 1")

    assert signal is SessionSignal.PROMPT
    assert output.count("database is locked") == 1
    assert output.count("Error:") == 1
    assert "Unexpected failure" not in output
