import pytest

from llm_router.domain.conversation import Message
from llm_router.interaction.console import DEFAULT_PROMPT, ConsoleInterjectionChannel, InputClosed


def test_non_empty_input_becomes_user_message():
    prompts = []

    def fake_input(prompt):
        prompts.append(prompt)
        return "  add a blog \n"

    channel = ConsoleInterjectionChannel(input_fn=fake_input)
    assert channel.read() == Message(role="user", content="add a blog")
    assert prompts == [DEFAULT_PROMPT]


@pytest.mark.parametrize("line", ["", "   ", "\t\n"])
def test_blank_input_returns_none(line):
    channel = ConsoleInterjectionChannel(input_fn=lambda prompt: line)
    assert channel.read() is None


def test_eof_raises_input_closed():
    def eof(prompt):
        raise EOFError

    with pytest.raises(InputClosed):
        ConsoleInterjectionChannel(input_fn=eof).read()
